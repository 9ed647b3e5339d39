from couponengine.models.coupon import Coupon, CouponErrorCode, CouponType
from couponengine.models.coupon_usage import CouponUsage
from couponengine.models.order import Order, OrderStatus

__all__ = [
    "Coupon",
    "CouponErrorCode",
    "CouponType",
    "CouponUsage",
    "Order",
    "OrderStatus",
]
