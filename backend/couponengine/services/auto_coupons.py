"""Selection of coupons that apply without the customer entering a code."""

from collections.abc import Iterable
from datetime import datetime
from decimal import Decimal

from couponengine.models.shared import utc_now
from couponengine.schemas.coupon import CouponContext, CouponData
from couponengine.services.discount_calculator import calculate_discount
from couponengine.services.usage_limits import quick_validate


def find_applicable_auto_coupons(
    coupons: Iterable[CouponData],
    context: CouponContext,
    now: datetime | None = None,
) -> list[CouponData]:
    """Keep the auto-apply coupons that pass quick validation and auto-apply targeting."""
    now = now or utc_now()
    applicable: list[CouponData] = []

    for coupon in coupons:
        if not coupon.is_auto_apply:
            continue
        if not quick_validate(coupon, context, now):
            continue
        if coupon.auto_apply_first_purchase and not context.is_first_purchase:
            continue
        if coupon.auto_apply_category and coupon.auto_apply_category not in context.categories:
            continue
        applicable.append(coupon)

    return applicable


def find_best_coupon(
    coupons: Iterable[CouponData],
    context: CouponContext,
    now: datetime | None = None,
) -> CouponData | None:
    """Return the coupon with the largest discount.

    Only a strictly larger discount replaces the current best, so ties go to the
    coupon seen first. Returns None when no coupon yields a positive discount.
    """
    now = now or utc_now()
    best: CouponData | None = None
    max_discount = Decimal("0")

    for coupon in coupons:
        if not quick_validate(coupon, context, now):
            continue
        discount = calculate_discount(coupon, context).discount_amount
        if discount > max_discount:
            max_discount = discount
            best = coupon

    return best


def find_best_auto_coupon(
    coupons: Iterable[CouponData],
    context: CouponContext,
    now: datetime | None = None,
) -> CouponData | None:
    now = now or utc_now()
    return find_best_coupon(find_applicable_auto_coupons(coupons, context, now), context, now)
