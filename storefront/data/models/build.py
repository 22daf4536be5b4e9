from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Numeric, ForeignKey, JSON

from storefront.data.database import Base


def _now():
    return datetime.now(timezone.utc)


class PCBuildModel(Base):
    __tablename__ = "pc_builds"

    id = Column(Integer, primary_key=True)
    short_id = Column(String(6), nullable=False, unique=True, index=True)
    name = Column(String, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    components = Column(JSON, nullable=False)
    total_price = Column(Numeric(10, 2), nullable=False)
    is_public = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_now, onupdate=_now)
