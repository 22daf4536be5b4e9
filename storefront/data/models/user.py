from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Boolean, DateTime

from storefront.data.database import Base


class UserModel(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    phone = Column(String(10), nullable=False, unique=True, index=True)
    name = Column(String, nullable=True)
    email = Column(String, nullable=True)
    is_verified = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
