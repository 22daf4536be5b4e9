# storefront/services/order_service.py
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, Any, List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel, OrderItemModel
from storefront.domain.pricing import clamp_quantity, effective_price, unit_discount, to_minor_units
from storefront.domain.schemas import CheckoutItemIn, ShippingDetailsIn
from storefront.domain.statuses import OrderStatus, PaymentStatus, PaymentMethod
from storefront.repos.cart_repo import CartRepo
from storefront.repos.order_repo import OrderRepo
from storefront.repos.product_repo import ProductRepo
from storefront.services.notification_service import NotificationService
from storefront.services.payment_gateway import PaymentGateway
from storefront.utils.settings import PAYMENT_CURRENCY
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class CheckoutInProgress(Exception):
    """Zamowienie z tym kluczem juz istnieje, ale bramka jeszcze go nie otworzyla."""


def order_to_dict(order: OrderModel, with_payment: bool = False) -> Dict[str, Any]:
    data = {
        "id": order.id,
        "user_id": order.user_id,
        "status": order.status,
        "payment_status": order.payment_status,
        "payment_method": order.payment_method,
        "total_amount": order.total_amount,
        "discount_amount": order.discount_amount,
        "final_amount": order.final_amount,
        "shipping_address": order.shipping_address,
        "items": [
            {
                "product_id": i.product_id,
                "product_name": i.product_name,
                "quantity": i.quantity,
                "price": i.price,
            }
            for i in order.items
        ],
        "external_payment_order_id": order.external_payment_order_id,
        "external_payment_id": order.external_payment_id,
        "paid_at": order.paid_at,
        "created_at": order.created_at,
    }
    if with_payment and order.external_payment_order_id:
        data["razorpay"] = {
            "order_id": order.external_payment_order_id,
            "amount": to_minor_units(order.final_amount),
            "currency": PAYMENT_CURRENCY,
        }
    return data


def checkout_payload(order: OrderModel) -> Dict[str, Any]:
    online = order.payment_method == PaymentMethod.ONLINE.value
    return {
        "success": True,
        "payment_method": order.payment_method,
        "order": order_to_dict(order, with_payment=online),
    }


class OrderService:
    """
    Serwis odpowiedzialny za domenę zamówień i płatności.

    Kroki checkoutu (create order -> bramka -> czyszczenie koszyka) to osobne
    commity; koszyk jest czyszczony dopiero po zapisaniu zamówienia.
    """

    def __init__(
        self,
        db: Session,
        payment_gateway: PaymentGateway | None = None,
        notification_service: NotificationService | None = None,
    ):
        self.db = db
        self.repo = OrderRepo(db)
        self.products = ProductRepo(db)
        self.carts = CartRepo(db)
        self.payment_gateway = payment_gateway or PaymentGateway()
        self.notification_service = notification_service or NotificationService()

    def checkout(
        self,
        user_id: int,
        items: List[CheckoutItemIn],
        shipping: ShippingDetailsIn,
        idempotency_key: str | None = None,
    ) -> Dict[str, Any]:
        """
        Use Case: Złożenie zamówienia.

        1. Walidacja (pusta lista, nieznane produkty) - przed jakimkolwiek zapisem
        2. Powtórzony Idempotency-Key zwraca istniejące zamówienie
        3. Ceny z katalogu, nigdy od klienta
        4. Zamówienie PENDING, potem gałąź online albo COD
        """
        if not items:
            raise ValueError("Cart is empty")

        if idempotency_key:
            existing = self.repo.get_by_idempotency_key(user_id, idempotency_key)
            if existing:
                logger.info(f"Checkout replay for user {user_id}, returning order {existing.id}")
                return self._replay(existing)

        # ten sam produkt kilka razy - jedna pozycja, ilosc w limicie koszyka
        quantities: Dict[int, int] = {}
        for entry in items:
            quantities[entry.id] = clamp_quantity(quantities.get(entry.id, 0) + entry.quantity)

        products = self.products.get_products(quantities)
        missing = [pid for pid in quantities if pid not in products]
        if missing:
            raise LookupError(f"Product {missing[0]} not found")

        # Oblicz kwoty
        order_items = []
        total = Decimal("0.00")
        discount = Decimal("0.00")
        for product_id, quantity in quantities.items():
            product = products[product_id]
            price = effective_price(product.regular_price, product.discounted_price, product.is_on_sale)
            total += price * quantity
            discount += unit_discount(product.regular_price, product.discounted_price, product.is_on_sale) * quantity
            order_items.append(
                OrderItemModel(
                    product_id=product.id,
                    product_name=product.name,
                    quantity=quantity,
                    price=price,
                )
            )

        order = OrderModel(
            user_id=user_id,
            status=OrderStatus.PENDING.value,
            payment_status=None,
            payment_method=shipping.payment_method,
            total_amount=total,
            discount_amount=discount,
            final_amount=total,
            shipping_address={
                "full_name": shipping.name,
                "email": shipping.email,
                "phone": shipping.phone,
                "address": shipping.address,
                "city": shipping.city,
                "state": shipping.state,
                "pincode": shipping.pincode,
            },
            idempotency_key=idempotency_key,
            items=order_items,
        )

        try:
            created = self.repo.create_order(order)
        except IntegrityError:
            # rownolegly request z tym samym kluczem zdazyl pierwszy
            self.db.rollback()
            if idempotency_key:
                existing = self.repo.get_by_idempotency_key(user_id, idempotency_key)
                if existing:
                    return self._replay(existing)
            raise

        logger.info(f"Order {created.id} created for user {user_id}, total {total} ({shipping.payment_method})")

        if shipping.payment_method == PaymentMethod.ONLINE.value:
            return self._open_online_payment(created)
        return self._confirm_cod(created)

    def _replay(self, order: OrderModel) -> Dict[str, Any]:
        # online bez transakcji w bramce - pierwszy request jeszcze trwa
        if order.payment_method == PaymentMethod.ONLINE.value and not order.external_payment_order_id:
            raise CheckoutInProgress(f"Checkout for order {order.id} is still in progress")
        return checkout_payload(order)

    def _open_online_payment(self, order: OrderModel) -> Dict[str, Any]:
        try:
            gateway_order = self.payment_gateway.create_order(
                amount=to_minor_units(order.final_amount),
                currency=PAYMENT_CURRENCY,
                receipt=str(order.id),
                notes={"orderId": str(order.id), "userId": str(order.user_id)},
            )
        except RuntimeError:
            # kompensacja - zamowienie bez transakcji nie moze wisiec jako PENDING
            order.status = OrderStatus.CANCELLED.value
            order.payment_status = PaymentStatus.FAILED.value
            order.idempotency_key = None
            self.repo.commit()
            logger.error(f"Order {order.id} cancelled, payment gateway failed")
            raise

        order.external_payment_order_id = gateway_order["id"]
        order.payment_status = PaymentStatus.PENDING.value
        self.carts.clear(order.user_id)
        self.repo.commit()
        self.repo.refresh(order)

        logger.info(f"Order {order.id} awaiting payment, gateway order {order.external_payment_order_id}")

        payload = checkout_payload(order)
        payload["order"]["razorpay"] = {
            "order_id": gateway_order["id"],
            "amount": gateway_order.get("amount", to_minor_units(order.final_amount)),
            "currency": gateway_order.get("currency", PAYMENT_CURRENCY),
        }
        return payload

    def _confirm_cod(self, order: OrderModel) -> Dict[str, Any]:
        order.payment_status = PaymentStatus.COD.value
        order.status = OrderStatus.CONFIRMED.value
        self.carts.clear(order.user_id)
        self.repo.commit()
        self.repo.refresh(order)

        logger.info(f"Order {order.id} confirmed (COD)")
        self.notification_service.send_order_confirmation(order.user_id, order.id, order.payment_status)

        return checkout_payload(order)

    def verify_payment(self, payment_id: str, external_order_id: str, signature: str) -> Dict[str, Any]:
        """
        Use Case: Callback z bramki.
        Zły podpis albo brak zamówienia - odrzucenie bez zmiany stanu.
        """
        if not self.payment_gateway.verify_signature(signature, payment_id, external_order_id):
            logger.warning(f"Invalid payment signature for gateway order {external_order_id}")
            raise ValueError("Invalid signature")

        order = self.repo.get_by_external_order_id(external_order_id)
        if not order:
            logger.warning(f"Payment callback for unknown gateway order {external_order_id}")
            raise LookupError("Order not found")

        if order.payment_status == PaymentStatus.PAID.value:
            return order_to_dict(order)

        if order.status == OrderStatus.CANCELLED.value:
            logger.warning(f"Order {order.id} was cancelled before payment arrived, confirming anyway")

        order.external_payment_id = payment_id
        order.payment_status = PaymentStatus.PAID.value
        order.status = OrderStatus.CONFIRMED.value
        order.paid_at = datetime.now(timezone.utc)
        self.repo.commit()
        self.repo.refresh(order)

        logger.info(f"Order {order.id} paid, payment {payment_id}")
        self.notification_service.send_order_confirmation(order.user_id, order.id, order.payment_status)

        return order_to_dict(order)

    def list_orders(self, user_id: int) -> List[Dict[str, Any]]:
        return [order_to_dict(o) for o in self.repo.list_orders(user_id)]

    def list_all_orders(self) -> List[Dict[str, Any]]:
        return [order_to_dict(o) for o in self.repo.list_orders()]

    def get_order(self, order_id: int, user_id: int) -> Dict[str, Any]:
        """
        Use Case: Pobranie zamówienia (Query).
        """
        order = self.repo.get_order(order_id)

        if not order:
            raise LookupError("Order not found")

        if order.user_id != user_id:
            raise PermissionError("Order belongs to another user")

        return order_to_dict(order)

    def update_status(self, order_id: int, status: OrderStatus) -> Dict[str, Any]:
        """Admin może ustawić dowolny status - bez wymuszania kolejności."""
        order = self.repo.update_order_status(order_id, status.value)
        if not order:
            raise LookupError("Order not found")

        logger.info(f"Order {order_id} status set to {status.value} by admin")
        return order_to_dict(order)
