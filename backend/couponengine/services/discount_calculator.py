"""Discount calculation for coupons that already passed validation.

All amounts are ``Decimal`` and rounded to cents with ``ROUND_HALF_UP``
(halves round away from zero, so 12.345 becomes 12.35).
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from couponengine.models.coupon import CouponType
from couponengine.schemas.coupon import CouponContext, CouponData

CENT = Decimal("0.01")
ZERO = Decimal("0")


@dataclass(frozen=True)
class DiscountResult:
    """Result of a coupon discount calculation."""

    discount_amount: Decimal
    final_total: Decimal


def round_currency(amount: Decimal) -> Decimal:
    return Decimal(str(amount)).quantize(CENT, rounding=ROUND_HALF_UP)


def calculate_discount(coupon: CouponData, context: CouponContext) -> DiscountResult:
    """Compute the discount a coupon grants on the context's order total.

    Does not decide validity; callers run the rule chain first.

    Args:
        coupon: The coupon to apply.
        context: The checkout snapshot holding the pre-discount total.

    Returns:
        DiscountResult with the rounded discount and the total after discount.
    """
    total = round_currency(context.total)
    value = Decimal(str(coupon.value))

    if coupon.coupon_type == CouponType.PERCENTAGE:
        raw = total * value / Decimal("100")
        if coupon.maximum_discount_amount is not None:
            cap = Decimal(str(coupon.maximum_discount_amount))
            if raw > cap:
                raw = cap
    elif coupon.coupon_type == CouponType.FIXED_AMOUNT:
        raw = min(value, total)
    else:
        raw = ZERO

    # Negative totals or values collapse to a zero discount
    discount = round_currency(max(ZERO, min(raw, total)))
    final_total = max(ZERO, round_currency(total - discount))

    return DiscountResult(discount_amount=discount, final_total=final_total)
