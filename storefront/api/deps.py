# storefront/api/deps.py
from functools import lru_cache

from fastapi import Cookie, Depends, Header, HTTPException

from storefront.services.auth_service import check_admin_cookie
from storefront.services.payment_gateway import PaymentGateway
from storefront.services.session_store import SessionStore

ADMIN_COOKIE = "admin-auth"


@lru_cache
def get_session_store() -> SessionStore:
    return SessionStore()


def get_payment_gateway() -> PaymentGateway:
    return PaymentGateway()


def get_bearer_token(authorization: str | None = Header(None)) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    return token.strip()


def get_current_user_id(
    token: str | None = Depends(get_bearer_token),
    sessions: SessionStore = Depends(get_session_store),
) -> int | None:
    if not token:
        return None
    return sessions.get_user_id(token)


def require_user(user_id: int | None = Depends(get_current_user_id)) -> int:
    if user_id is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user_id


def require_admin(admin_auth: str | None = Cookie(None, alias=ADMIN_COOKIE)) -> None:
    if not check_admin_cookie(admin_auth):
        raise HTTPException(status_code=401, detail="Unauthorized")
