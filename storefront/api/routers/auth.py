# storefront/api/routers/auth.py
from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from storefront.api.deps import ADMIN_COOKIE, get_bearer_token, get_session_store
from storefront.data.database import get_db
from storefront.domain.schemas import OtpRequestIn, OtpVerifyIn, DevLoginIn, SessionOut, AdminLoginIn
from storefront.services.auth_service import AuthService, admin_cookie_value, check_admin_password
from storefront.services.session_store import SessionStore
from storefront.utils import settings
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["auth"])


def get_service(db: Session, sessions: SessionStore):
    return AuthService(db, sessions)


@router.post("/auth/otp")
def request_otp(
    payload: OtpRequestIn,
    db: Session = Depends(get_db),
    sessions: SessionStore = Depends(get_session_store),
):
    get_service(db, sessions).request_otp(payload.phone)
    return {"success": True}


@router.put("/auth/otp", response_model=SessionOut)
def verify_otp(
    payload: OtpVerifyIn,
    db: Session = Depends(get_db),
    sessions: SessionStore = Depends(get_session_store),
):
    try:
        return get_service(db, sessions).verify_otp(payload.phone, payload.otp)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/auth/dev", response_model=SessionOut)
def dev_login(
    payload: DevLoginIn,
    db: Session = Depends(get_db),
    sessions: SessionStore = Depends(get_session_store),
):
    try:
        return get_service(db, sessions).dev_login(payload.phone, payload.name)
    except LookupError:
        raise HTTPException(status_code=404, detail="Not Found")


@router.delete("/auth/session")
def logout(
    token: str | None = Depends(get_bearer_token),
    db: Session = Depends(get_db),
    sessions: SessionStore = Depends(get_session_store),
):
    if token:
        get_service(db, sessions).logout(token)
    return {"success": True}


@router.post("/admin/auth")
def admin_login(payload: AdminLoginIn, response: Response):
    try:
        valid = check_admin_password(payload.password)
    except RuntimeError as e:
        logger.error(str(e))
        raise HTTPException(status_code=500, detail="Server configuration error")

    if not valid:
        raise HTTPException(status_code=401, detail="Invalid password")

    response.set_cookie(
        ADMIN_COOKIE,
        admin_cookie_value(payload.password),
        max_age=settings.ADMIN_COOKIE_MAX_AGE,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
        path="/",
    )
    return {"success": True}
