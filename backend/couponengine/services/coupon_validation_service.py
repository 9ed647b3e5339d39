"""Coupon validation service composing rules, discounts, usage limits and auto-apply."""

import logging
from collections.abc import Callable, Iterable
from datetime import datetime
from decimal import Decimal

from couponengine.models.coupon import CouponErrorCode
from couponengine.models.shared import utc_now
from couponengine.schemas.coupon import (
    CouponContext,
    CouponData,
    CouponValidation,
    ValidationIssue,
)
from couponengine.services import auto_coupons, usage_limits
from couponengine.services.coupon_rules import CouponRuleChain, ValidationRule
from couponengine.services.discount_calculator import DiscountResult
from couponengine.services.discount_calculator import calculate_discount as _calculate_discount
from couponengine.services.usage_limits import UsageCheckResult, UsageCounter, UserUsageCounter

logger = logging.getLogger(__name__)


class CouponValidationService:
    """Entry point for validating coupons against a checkout context.

    Holds no repository handle: usage checks receive their counters as
    arguments so the service can be exercised without a database.
    """

    def __init__(
        self,
        rule_chain: CouponRuleChain | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.rule_chain = rule_chain or CouponRuleChain()
        self.clock = clock

    def validate_coupon(
        self, coupon: CouponData | None, context: CouponContext
    ) -> CouponValidation:
        """Run the full rule chain; invalid coupons are reported, never raised."""
        validation = self.rule_chain.validate(coupon, context, self.clock())
        if not validation.is_valid:
            logger.debug(
                "Coupon %s rejected: %s",
                coupon.code if coupon else None,
                ", ".join(code.value for code in validation.error_codes),
            )
        return validation

    def calculate_discount(self, coupon: CouponData, context: CouponContext) -> DiscountResult:
        return _calculate_discount(coupon, context)

    def validate_user_usage(
        self,
        coupon: CouponData,
        user_id: str,
        get_user_usage_count: UserUsageCounter,
    ) -> UsageCheckResult:
        return usage_limits.validate_user_usage(coupon, user_id, get_user_usage_count)

    def validate_global_usage(
        self, coupon: CouponData, get_usage_count: UsageCounter
    ) -> UsageCheckResult:
        return usage_limits.validate_global_usage(coupon, get_usage_count)

    def quick_validate(self, coupon: CouponData, context: CouponContext) -> bool:
        return usage_limits.quick_validate(coupon, context, self.clock())

    def find_applicable_auto_coupons(
        self, coupons: Iterable[CouponData], context: CouponContext
    ) -> list[CouponData]:
        return auto_coupons.find_applicable_auto_coupons(coupons, context, self.clock())

    def find_best_coupon(
        self, coupons: Iterable[CouponData], context: CouponContext
    ) -> CouponData | None:
        return auto_coupons.find_best_coupon(coupons, context, self.clock())

    def find_best_auto_coupon(
        self, coupons: Iterable[CouponData], context: CouponContext
    ) -> CouponData | None:
        return auto_coupons.find_best_auto_coupon(coupons, context, self.clock())

    def apply_usage_checks(
        self,
        validation: CouponValidation,
        context: CouponContext,
        results: Iterable[UsageCheckResult],
    ) -> CouponValidation:
        """Fold failed usage checks into a validation result.

        Any failure makes the result invalid and resets the discount to zero.
        A failure whose code the rule chain already reported is not repeated.
        """
        seen = set(validation.error_codes)
        issues: list[ValidationIssue] = []
        for result in results:
            if result.is_valid:
                continue
            code = result.code or CouponErrorCode.VALIDATION_ERROR
            if code in seen:
                continue
            seen.add(code)
            issues.append(
                ValidationIssue(message=result.error or "Coupon usage check failed", code=code)
            )

        if not issues:
            return validation

        return validation.model_copy(
            update={
                "is_valid": False,
                "errors": [*validation.errors, *issues],
                "discount_amount": Decimal("0"),
                "final_total": context.total,
            }
        )

    def add_rule(self, rule: ValidationRule) -> None:
        self.rule_chain.add_rule(rule)

    def remove_rule(self, name: str) -> None:
        self.rule_chain.remove_rule(name)

    def get_rules(self) -> list[ValidationRule]:
        return self.rule_chain.rules


def validate_coupon(coupon: CouponData | None, context: CouponContext) -> CouponValidation:
    return CouponValidationService().validate_coupon(coupon, context)


def calculate_discount(coupon: CouponData, context: CouponContext) -> DiscountResult:
    return _calculate_discount(coupon, context)


def find_best_auto_coupon(
    coupons: Iterable[CouponData], context: CouponContext
) -> CouponData | None:
    return auto_coupons.find_best_auto_coupon(coupons, context)


def validate_user_usage(
    coupon: CouponData, user_id: str, get_user_usage_count: UserUsageCounter
) -> UsageCheckResult:
    return usage_limits.validate_user_usage(coupon, user_id, get_user_usage_count)
