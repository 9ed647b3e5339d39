"""CouponUsage model: one append-only row per successful redemption."""

from sqlalchemy import Column, DateTime, ForeignKey, Numeric, String, func

from couponengine.core.database import Base
from couponengine.models.shared import UUIDType, generate_uuid


class CouponUsage(Base):
    """CouponUsage model for the redemption history of a coupon."""

    __tablename__ = "coupon_usages"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    coupon_id = Column(
        UUIDType, ForeignKey("coupons.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    user_id = Column(String(36), nullable=False, index=True)
    order_id = Column(String(36), nullable=True)
    store_id = Column(String(36), nullable=True, index=True)

    discount_amount = Column(Numeric(10, 2), nullable=False)
    order_total = Column(Numeric(10, 2), nullable=True)

    used_at = Column(DateTime(timezone=True), server_default=func.now())
