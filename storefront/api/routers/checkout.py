# storefront/api/routers/checkout.py
from fastapi import APIRouter, Depends, Header, HTTPException
from sqlalchemy.orm import Session

from storefront.api.deps import require_user, get_payment_gateway
from storefront.data.database import get_db
from storefront.domain.schemas import CheckoutIn, CheckoutOut, PaymentVerifyIn
from storefront.services.order_service import OrderService, CheckoutInProgress
from storefront.services.payment_gateway import PaymentGateway

router = APIRouter(prefix="/checkout", tags=["checkout"])


def get_service(db: Session, gateway: PaymentGateway):
    return OrderService(db, payment_gateway=gateway)


@router.post("", response_model=CheckoutOut)
def checkout(
    payload: CheckoutIn,
    idempotency_key: str | None = Header(None, alias="Idempotency-Key", max_length=64),
    user_id: int = Depends(require_user),
    db: Session = Depends(get_db),
    gateway: PaymentGateway = Depends(get_payment_gateway),
):
    """
    Tworzy zamówienie. COD - potwierdzone od razu, online - czeka na callback bramki.
    """
    svc = get_service(db, gateway)
    try:
        return svc.checkout(user_id, payload.items, payload.shipping_details, idempotency_key)
    except CheckoutInProgress as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except RuntimeError:
        raise HTTPException(status_code=502, detail="Payment gateway unavailable, please retry")


@router.put("")
def verify_payment(
    payload: PaymentVerifyIn,
    db: Session = Depends(get_db),
    gateway: PaymentGateway = Depends(get_payment_gateway),
):
    """
    Callback bramki płatności - podpis HMAC weryfikowany przed zmianą stanu.
    """
    svc = get_service(db, gateway)
    try:
        svc.verify_payment(
            payment_id=payload.razorpay_payment_id,
            external_order_id=payload.razorpay_order_id,
            signature=payload.razorpay_signature,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"success": True}
