# storefront/api/routers/admin.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from storefront.api.deps import require_admin
from storefront.data.database import get_db
from storefront.domain.schemas import ProductIn, ProductOut, TagIn, TagOut, OrderOut, OrderStatusIn
from storefront.services.order_service import OrderService
from storefront.services.product_service import ProductService

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


# =====================================================
# PRODUKTY
# =====================================================
@router.post("/products", response_model=ProductOut, status_code=201)
def create_product(payload: ProductIn, db: Session = Depends(get_db)):
    try:
        return ProductService(db).create_product(payload)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.put("/products/{product_id}", response_model=ProductOut)
def update_product(product_id: int, payload: ProductIn, db: Session = Depends(get_db)):
    try:
        return ProductService(db).update_product(product_id, payload)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("/products/{product_id}")
def delete_product(product_id: int, db: Session = Depends(get_db)):
    try:
        ProductService(db).delete_product(product_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"success": True}


# =====================================================
# TAGI
# =====================================================
@router.get("/tags", response_model=List[TagOut])
def list_tags(db: Session = Depends(get_db)):
    return ProductService(db).list_tags()


@router.post("/tags", response_model=TagOut, status_code=201)
def create_tag(payload: TagIn, db: Session = Depends(get_db)):
    try:
        return ProductService(db).create_tag(payload.name)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


# =====================================================
# ZAMOWIENIA
# =====================================================
@router.get("/orders", response_model=List[OrderOut])
def list_orders(db: Session = Depends(get_db)):
    return OrderService(db).list_all_orders()


@router.post("/orders/{order_id}/status", response_model=OrderOut)
def update_order_status(order_id: int, payload: OrderStatusIn, db: Session = Depends(get_db)):
    try:
        return OrderService(db).update_status(order_id, payload.status)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
