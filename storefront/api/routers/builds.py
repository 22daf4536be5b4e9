# storefront/api/routers/builds.py
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from storefront.api.deps import get_current_user_id, require_user
from storefront.data.database import get_db
from storefront.domain.schemas import BuildCreateIn, BuildCreatedOut, BuildOut
from storefront.services.build_service import BuildService

router = APIRouter(prefix="/builds", tags=["pc-builder"])


@router.post("", response_model=BuildCreatedOut, status_code=201)
def create_build(
    payload: BuildCreateIn,
    request: Request,
    user_id: int | None = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return BuildService(db).create_build(payload, user_id, str(request.base_url))


# /latest przed /{short_id}
@router.get("/latest", response_model=BuildOut)
def latest_build(user_id: int = Depends(require_user), db: Session = Depends(get_db)):
    try:
        return BuildService(db).latest_build(user_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/{short_id}", response_model=BuildOut)
def get_build(short_id: str, db: Session = Depends(get_db)):
    try:
        return BuildService(db).get_build(short_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("/{short_id}")
def delete_build(
    short_id: str,
    user_id: int = Depends(require_user),
    db: Session = Depends(get_db),
):
    try:
        BuildService(db).delete_build(short_id, user_id)
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"success": True}
