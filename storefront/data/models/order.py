from sqlalchemy import Column, Integer, ForeignKey, String, DateTime, Numeric, JSON, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime, timezone

from storefront.data.database import Base


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    status = Column(String, nullable=False, default="PENDING")  # PENDING, CONFIRMED, PROCESSING, SHIPPED, DELIVERED, CANCELLED
    payment_status = Column(String, nullable=True)  # PENDING, PAID, FAILED, COD
    payment_method = Column(String, nullable=False)  # cod, online

    total_amount = Column(Numeric(10, 2), nullable=False)
    discount_amount = Column(Numeric(10, 2), nullable=False, default=0)
    final_amount = Column(Numeric(10, 2), nullable=False)

    #snapshot adresu z chwili zamowienia
    shipping_address = Column(JSON, nullable=False)

    external_payment_order_id = Column(String, nullable=True, unique=True, index=True)
    external_payment_id = Column(String, nullable=True)
    paid_at = Column(DateTime(timezone=True), nullable=True)
    idempotency_key = Column(String(64), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    items = relationship(
        "OrderItemModel",
        back_populates="order",
        cascade="all, delete-orphan",
    )

    __table_args__ = (UniqueConstraint("user_id", "idempotency_key", name="u_user_idempotency_key"),)


class OrderItemModel(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False)

    #bez FK do products - pozycja zamowienia nie zalezy od katalogu
    product_id = Column(Integer, nullable=False)
    product_name = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)

    order = relationship("OrderModel", back_populates="items")
