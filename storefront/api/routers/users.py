from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from storefront.api.deps import require_user
from storefront.data.database import get_db
from storefront.services.user_service import UserService
from storefront.domain.schemas import ProfileOut, ProfileUpdateIn, UserRead

router = APIRouter(prefix="/user", tags=["users"])

@router.get("/profile", response_model=ProfileOut)
def get_profile(user_id: int = Depends(require_user), db: Session = Depends(get_db)):
    service = UserService(db)
    try:
        return service.get_profile(user_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))

@router.put("/profile", response_model=UserRead)
def update_profile(
    payload: ProfileUpdateIn,
    user_id: int = Depends(require_user),
    db: Session = Depends(get_db),
):
    service = UserService(db)
    try:
        return service.update_profile(user_id, payload)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
