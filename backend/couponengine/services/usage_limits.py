"""Usage-limit checks that need a repository round-trip, plus quick validation."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from couponengine.models.coupon import CouponErrorCode
from couponengine.models.shared import utc_now
from couponengine.schemas.coupon import CouponContext, CouponData

logger = logging.getLogger(__name__)

UserUsageCounter = Callable[[UUID, str], int]
UsageCounter = Callable[[UUID], int]


@dataclass(frozen=True)
class UsageCheckResult:
    """Outcome of a usage-limit check."""

    is_valid: bool
    error: str | None = None
    code: CouponErrorCode | None = None


def validate_user_usage(
    coupon: CouponData,
    user_id: str,
    get_user_usage_count: UserUsageCounter,
) -> UsageCheckResult:
    """Check the per-customer usage cap of a coupon.

    A failing counter rejects the coupon: letting it pass on a backend error
    would bypass the cap.

    Args:
        coupon: The coupon being redeemed.
        user_id: The customer redeeming it.
        get_user_usage_count: Returns how many times the user redeemed the coupon.

    Returns:
        UsageCheckResult, invalid with a user-facing message when the cap is hit.
    """
    limit = coupon.usage_limit_per_customer
    if not limit or limit <= 0:
        return UsageCheckResult(is_valid=True)

    try:
        count = get_user_usage_count(coupon.id, user_id)
    except Exception:
        logger.exception("Failed to count usages of coupon %s by user %s", coupon.id, user_id)
        return UsageCheckResult(
            is_valid=False,
            error="Unable to verify coupon usage history",
            code=CouponErrorCode.VALIDATION_ERROR,
        )

    if count >= limit:
        return UsageCheckResult(
            is_valid=False,
            error=f"Coupon already used {limit} time(s); per-customer limit reached",
            code=CouponErrorCode.USER_LIMIT_EXCEEDED,
        )

    return UsageCheckResult(is_valid=True)


def validate_global_usage(coupon: CouponData, get_usage_count: UsageCounter) -> UsageCheckResult:
    """Check the global cap against the recorded redemptions rather than the cached counter."""
    limit = coupon.usage_limit
    if not limit or limit <= 0:
        return UsageCheckResult(is_valid=True)

    try:
        count = get_usage_count(coupon.id)
    except Exception:
        logger.exception("Failed to count usages of coupon %s", coupon.id)
        return UsageCheckResult(
            is_valid=False,
            error="Unable to verify coupon usage history",
            code=CouponErrorCode.VALIDATION_ERROR,
        )

    if count >= limit:
        return UsageCheckResult(
            is_valid=False,
            error="Coupon usage limit has been reached",
            code=CouponErrorCode.USAGE_LIMIT_EXCEEDED,
        )

    return UsageCheckResult(is_valid=True)


def quick_validate(
    coupon: CouponData,
    context: CouponContext,
    now: datetime | None = None,
) -> bool:
    """Cheap subset of the rule chain that needs no I/O."""
    now = now or utc_now()

    if not coupon.is_active:
        return False
    if coupon.end_date is not None and coupon.end_date < now:
        return False
    if coupon.start_date > now:
        return False
    if coupon.usage_limit and coupon.usage_limit > 0 and coupon.used_count >= coupon.usage_limit:
        return False
    if coupon.minimum_order_value and context.total < coupon.minimum_order_value:
        return False
    return True
