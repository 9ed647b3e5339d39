from couponengine.schemas.coupon import (
    CartItem,
    CouponContext,
    CouponCreate,
    CouponData,
    CouponUsageRecord,
    CouponValidation,
    ValidationIssue,
)

__all__ = [
    "CartItem",
    "CouponContext",
    "CouponCreate",
    "CouponData",
    "CouponUsageRecord",
    "CouponValidation",
    "ValidationIssue",
]
