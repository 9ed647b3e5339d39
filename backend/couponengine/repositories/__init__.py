from couponengine.repositories.coupon_repository import CouponRepository, coupon_to_data
from couponengine.repositories.coupon_usage_repository import (
    CouponUsageRepository,
    UsageRecordResult,
)
from couponengine.repositories.order_repository import OrderRepository

__all__ = [
    "CouponRepository",
    "CouponUsageRepository",
    "OrderRepository",
    "UsageRecordResult",
    "coupon_to_data",
]
