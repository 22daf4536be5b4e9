# storefront/tasks/expire.py
from datetime import datetime, timezone, timedelta

from sqlalchemy.orm import Session

from storefront.celery_worker import celery_app
from storefront.data.database import SessionLocal
from storefront.domain.statuses import OrderStatus, PaymentStatus, PaymentMethod
from storefront.repos.order_repo import OrderRepo
from storefront.utils.settings import PAYMENT_TIMEOUT_SECONDS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def expire_abandoned_payments(db: Session, now: datetime | None = None, timeout: int = PAYMENT_TIMEOUT_SECONDS) -> list[int]:
    """Zamowienia online bez platnosci dluzej niz timeout -> CANCELLED / FAILED."""
    now = now or datetime.now(timezone.utc)
    repo = OrderRepo(db)

    orders = repo.list_stale_pending(
        method=PaymentMethod.ONLINE.value,
        status=OrderStatus.PENDING.value,
        payment_status=PaymentStatus.PENDING.value,
        older_than=now - timedelta(seconds=timeout),
    )

    logger.info(f"Found {len(orders)} abandoned online payments")

    for order in orders:
        order.status = OrderStatus.CANCELLED.value
        order.payment_status = PaymentStatus.FAILED.value
        # klucz wolny - klient moze ponowic checkout z tym samym kluczem
        order.idempotency_key = None

    repo.commit()
    return [o.id for o in orders]


@celery_app.task(name="storefront.tasks.expire.expire_abandoned_payments_task")
def expire_abandoned_payments_task():
    logger.info("Expire abandoned payments task started")

    db = SessionLocal()
    try:
        expired = expire_abandoned_payments(db)
        return {"expired": expired}
    finally:
        db.close()
