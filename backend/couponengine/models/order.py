"""Order model, read by the coupon engine to answer first-purchase checks."""

from enum import Enum

from sqlalchemy import Column, DateTime, Numeric, String, func

from couponengine.core.database import Base
from couponengine.models.shared import UUIDType, generate_uuid


class OrderStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Order(Base):
    """Order model (owned by the checkout flow)."""

    __tablename__ = "orders"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    user_id = Column(String(36), nullable=False, index=True)
    store_id = Column(String(36), nullable=True)
    status = Column(String(20), nullable=False, default=OrderStatus.PENDING.value)
    total = Column(Numeric(10, 2), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
