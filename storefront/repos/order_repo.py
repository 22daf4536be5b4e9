# storefront/repos/order_repo.py
from sqlalchemy import select, or_
from sqlalchemy.orm import Session, selectinload

from storefront.data.models.order import OrderModel


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def create_order(self, order: OrderModel) -> OrderModel:
        self.db.add(order)
        self.db.commit()
        self.db.refresh(order)
        return order

    def get_order(self, order_id: int) -> OrderModel | None:
        return self.db.get(OrderModel, order_id)

    def get_by_external_order_id(self, external_order_id: str) -> OrderModel | None:
        stmt = select(OrderModel).where(OrderModel.external_payment_order_id == external_order_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def get_by_idempotency_key(self, user_id: int, key: str) -> OrderModel | None:
        stmt = select(OrderModel).where(
            OrderModel.user_id == user_id,
            OrderModel.idempotency_key == key,
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def list_orders(self, user_id: int | None = None) -> list[OrderModel]:
        stmt = select(OrderModel).options(selectinload(OrderModel.items))
        if user_id is not None:
            stmt = stmt.where(OrderModel.user_id == user_id)
        stmt = stmt.order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
        return list(self.db.execute(stmt).scalars().all())

    def list_stale_pending(self, method: str, status: str, payment_status: str, older_than) -> list[OrderModel]:
        #payment_status NULL - zamowienie zapisane, bramka nigdy nie wywolana
        stmt = select(OrderModel).where(
            OrderModel.payment_method == method,
            OrderModel.status == status,
            or_(OrderModel.payment_status == payment_status, OrderModel.payment_status.is_(None)),
            OrderModel.created_at < older_than,
        )
        return list(self.db.execute(stmt).scalars().all())

    def update_order_status(self, order_id: int, status: str) -> OrderModel | None:
        order = self.get_order(order_id)
        if order:
            order.status = status
            self.db.commit()
            self.db.refresh(order)
        return order

    def commit(self):
        self.db.commit()

    def refresh(self, order: OrderModel) -> OrderModel:
        self.db.refresh(order)
        return order
