# storefront/api/routers/cart.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from storefront.api.deps import require_user
from storefront.data.database import get_db
from storefront.domain.schemas import AddToCartIn, UpdateCartItemIn, CartLineOut
from storefront.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["cart"])


def get_service(db: Session):
    return CartService(db)


@router.get("", response_model=List[CartLineOut])
def get_cart(user_id: int = Depends(require_user), db: Session = Depends(get_db)):
    return get_service(db).get_cart(user_id)


@router.post("", response_model=List[CartLineOut])
def add_to_cart(
    payload: AddToCartIn,
    user_id: int = Depends(require_user),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        return svc.add_items(user_id, payload.items)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.put("", response_model=CartLineOut)
def update_quantity(
    payload: UpdateCartItemIn,
    user_id: int = Depends(require_user),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        return svc.update_quantity(user_id, payload.cart_item_id, payload.quantity)
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("")
def remove_item(
    id: int = Query(..., gt=0),
    user_id: int = Depends(require_user),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        svc.remove_item(user_id, id)
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"success": True}
