from typing import Dict, Any

from sqlalchemy.orm import Session

from storefront.data.models.user import UserModel
from storefront.domain.schemas import ProfileUpdateIn
from storefront.repos.build_repo import BuildRepo
from storefront.repos.order_repo import OrderRepo
from storefront.repos.user_repo import UserRepo
from storefront.services.build_service import build_to_dict
from storefront.services.order_service import order_to_dict


def user_to_dict(user: UserModel) -> Dict[str, Any]:
    return {
        "id": user.id,
        "phone": user.phone,
        "name": user.name,
        "email": user.email,
        "is_verified": user.is_verified,
    }


class UserService:
    def __init__(self, db: Session):
        self.repo = UserRepo(db)
        self.orders = OrderRepo(db)
        self.builds = BuildRepo(db)

    def get_user(self, user_id: int) -> UserModel:
        user = self.repo.get_user(user_id)
        if not user:
            raise LookupError("User not found")
        return user

    def get_profile(self, user_id: int) -> Dict[str, Any]:
        user = self.get_user(user_id)
        return {
            "user": user_to_dict(user),
            "orders": [order_to_dict(o) for o in self.orders.list_orders(user_id)],
            "builds": [build_to_dict(b) for b in self.builds.list_private(user_id)],
        }

    def update_profile(self, user_id: int, payload: ProfileUpdateIn) -> Dict[str, Any]:
        user = self.get_user(user_id)

        if payload.name is not None:
            user.name = payload.name
        if payload.email is not None:
            user.email = payload.email

        return user_to_dict(self.repo.save(user))
