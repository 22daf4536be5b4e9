# storefront/services/auth_service.py
import hashlib
import hmac
import secrets
from typing import Dict, Any

from sqlalchemy.orm import Session

from storefront.data.models.user import UserModel
from storefront.repos.user_repo import UserRepo
from storefront.services.notification_service import NotificationService
from storefront.services.session_store import SessionStore
from storefront.services.user_service import user_to_dict
from storefront.utils import settings
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def generate_otp() -> str:
    return f"{100000 + secrets.randbelow(900000)}"


def admin_cookie_value(password: str) -> str:
    #w ciasteczku nie trzymamy samego hasla
    return hmac.new(settings.SECRET_KEY.encode(), password.encode(), hashlib.sha256).hexdigest()


def check_admin_password(password: str) -> bool:
    if not settings.ADMIN_PASSWORD:
        raise RuntimeError("ADMIN_PASSWORD is not configured")
    return hmac.compare_digest(password.encode(), settings.ADMIN_PASSWORD.encode())


def check_admin_cookie(value: str | None) -> bool:
    if not value or not settings.ADMIN_PASSWORD:
        return False
    return hmac.compare_digest(value, admin_cookie_value(settings.ADMIN_PASSWORD))


class AuthService:
    """
    Logowanie telefonem:
    1. request_otp - kod 6 cyfr do Redis z TTL, wysylka przez Celery
    2. verify_otp - jednorazowe sprawdzenie, get-or-create usera, token sesji
    """

    def __init__(
        self,
        db: Session,
        sessions: SessionStore,
        notification_service: NotificationService | None = None,
    ):
        self.users = UserRepo(db)
        self.sessions = sessions
        self.notification_service = notification_service or NotificationService()

    def request_otp(self, phone: str) -> None:
        otp = generate_otp()
        self.sessions.save_otp(phone, otp)
        self.notification_service.send_otp(phone, otp)
        logger.info(f"OTP issued for {phone[-4:].rjust(len(phone), '*')}")

    def verify_otp(self, phone: str, otp: str) -> Dict[str, Any]:
        expected = self.sessions.pop_otp(phone)

        if expected is None or not hmac.compare_digest(expected, otp):
            raise ValueError("Invalid or expired OTP")

        return self._login(phone)

    def dev_login(self, phone: str, name: str | None = None) -> Dict[str, Any]:
        if not settings.DEV_AUTH_ENABLED:
            raise LookupError("Not found")

        logger.warning(f"Development login used for {phone}")
        return self._login(phone, name)

    def logout(self, token: str) -> None:
        self.sessions.delete_session(token)

    def _login(self, phone: str, name: str | None = None) -> Dict[str, Any]:
        user = self.users.get_by_phone(phone)

        if not user:
            user = self.users.create_user(UserModel(phone=phone, name=name, is_verified=True))
            logger.info(f"Created user {user.id}")
        elif not user.is_verified:
            user.is_verified = True
            self.users.save(user)

        token = self.sessions.create_session(user.id)
        return {"token": token, "user": user_to_dict(user)}
