"""Rule chain that decides whether a coupon may be used for a checkout.

Each rule is a ``ValidationRule`` descriptor: a stable name, a predicate over
``(coupon, context, now)``, and the error code reported when the predicate
fails. ``CouponRuleChain.validate`` runs every rule in order and reports every
failure, so callers can show all the reasons a coupon was rejected.
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from couponengine.models.coupon import CouponErrorCode
from couponengine.models.shared import utc_now
from couponengine.schemas.coupon import CouponContext, CouponData, CouponValidation, ValidationIssue
from couponengine.services.discount_calculator import calculate_discount

logger = logging.getLogger(__name__)

RulePredicate = Callable[[CouponData | None, CouponContext, datetime], bool]


@dataclass(frozen=True)
class ValidationRule:
    name: str
    predicate: RulePredicate
    error_code: CouponErrorCode
    message: str


def _coupon_exists(coupon: CouponData | None, context: CouponContext, now: datetime) -> bool:
    return coupon is not None


def _coupon_active(coupon: CouponData, context: CouponContext, now: datetime) -> bool:
    return coupon.is_active


def _not_expired(coupon: CouponData, context: CouponContext, now: datetime) -> bool:
    return coupon.end_date is None or coupon.end_date >= now


def _start_date_valid(coupon: CouponData, context: CouponContext, now: datetime) -> bool:
    return coupon.start_date <= now


def _usage_limit_not_exceeded(coupon: CouponData, context: CouponContext, now: datetime) -> bool:
    # A limit of zero or less means "no global cap"
    if not coupon.usage_limit or coupon.usage_limit <= 0:
        return True
    return coupon.used_count < coupon.usage_limit


def _minimum_order_value(coupon: CouponData, context: CouponContext, now: datetime) -> bool:
    if not coupon.minimum_order_value:
        return True
    return context.total >= coupon.minimum_order_value


def _store_restriction(coupon: CouponData, context: CouponContext, now: datetime) -> bool:
    if not coupon.store_id:
        return True
    return context.store_id == coupon.store_id


def _category_restriction(coupon: CouponData, context: CouponContext, now: datetime) -> bool:
    if not coupon.applicable_categories:
        return True
    allowed = set(coupon.applicable_categories)
    return any(category in allowed for category in context.categories)


def _product_restriction(coupon: CouponData, context: CouponContext, now: datetime) -> bool:
    if not coupon.applicable_products:
        return True
    allowed = set(coupon.applicable_products)
    return any(product_id in allowed for product_id in context.product_ids)


def _store_list_restriction(coupon: CouponData, context: CouponContext, now: datetime) -> bool:
    if not coupon.applicable_stores:
        return True
    if not context.store_id:
        return False
    return context.store_id in coupon.applicable_stores


def _first_purchase_restriction(
    coupon: CouponData, context: CouponContext, now: datetime
) -> bool:
    # Callers resolve is_first_purchase before validating
    if not coupon.auto_apply_first_purchase:
        return True
    if not context.user_id:
        return False
    return context.is_first_purchase is True


DEFAULT_RULES: tuple[ValidationRule, ...] = (
    ValidationRule(
        "coupon_exists", _coupon_exists, CouponErrorCode.COUPON_NOT_FOUND, "Coupon not found"
    ),
    ValidationRule(
        "coupon_active", _coupon_active, CouponErrorCode.COUPON_INACTIVE, "Coupon is not active"
    ),
    ValidationRule(
        "not_expired", _not_expired, CouponErrorCode.COUPON_EXPIRED, "Coupon has expired"
    ),
    ValidationRule(
        "start_date_valid",
        _start_date_valid,
        CouponErrorCode.COUPON_NOT_STARTED,
        "Coupon is not valid yet",
    ),
    ValidationRule(
        "usage_limit_not_exceeded",
        _usage_limit_not_exceeded,
        CouponErrorCode.USAGE_LIMIT_EXCEEDED,
        "Coupon usage limit has been reached",
    ),
    ValidationRule(
        "minimum_order_value",
        _minimum_order_value,
        CouponErrorCode.MINIMUM_ORDER_VALUE_NOT_MET,
        "Minimum order value not met",
    ),
    ValidationRule(
        "store_restriction",
        _store_restriction,
        CouponErrorCode.STORE_RESTRICTION,
        "Coupon is not valid for this store",
    ),
    ValidationRule(
        "category_restriction",
        _category_restriction,
        CouponErrorCode.CATEGORY_RESTRICTION,
        "Coupon is not valid for the categories in the cart",
    ),
    ValidationRule(
        "product_restriction",
        _product_restriction,
        CouponErrorCode.PRODUCT_RESTRICTION,
        "Coupon is not valid for the products in the cart",
    ),
    ValidationRule(
        "store_list_restriction",
        _store_list_restriction,
        CouponErrorCode.STORE_RESTRICTION,
        "Coupon is not valid for this store",
    ),
    ValidationRule(
        "first_purchase_restriction",
        _first_purchase_restriction,
        CouponErrorCode.FIRST_PURCHASE_ONLY,
        "Coupon is valid only for a first purchase",
    ),
)


class CouponRuleChain:
    """Ordered, editable list of validation rules."""

    def __init__(self, rules: Iterable[ValidationRule] | None = None):
        self._rules: list[ValidationRule] = list(DEFAULT_RULES if rules is None else rules)

    @property
    def rules(self) -> list[ValidationRule]:
        return list(self._rules)

    def add_rule(self, rule: ValidationRule) -> None:
        self._rules.append(rule)

    def remove_rule(self, name: str) -> None:
        self._rules = [rule for rule in self._rules if rule.name != name]

    def evaluate(
        self,
        coupon: CouponData | None,
        context: CouponContext,
        now: datetime | None = None,
    ) -> list[ValidationIssue]:
        """Run every rule and collect one issue per failing rule."""
        now = now or utc_now()
        issues: list[ValidationIssue] = []

        for rule in self._rules:
            try:
                passed = rule.predicate(coupon, context, now)
            except Exception:
                logger.exception("Coupon rule %s raised during validation", rule.name)
                issues.append(
                    ValidationIssue(
                        message="Internal error while validating coupon",
                        code=CouponErrorCode.VALIDATION_ERROR,
                    )
                )
                continue

            if not passed:
                issues.append(ValidationIssue(message=rule.message, code=rule.error_code))

        return issues

    def validate(
        self,
        coupon: CouponData | None,
        context: CouponContext,
        now: datetime | None = None,
    ) -> CouponValidation:
        """Validate a coupon and, when it passes, compute its discount.

        Args:
            coupon: The coupon to validate, or None when the lookup found nothing.
            context: The checkout snapshot.
            now: Evaluation instant; defaults to the current UTC time.

        Returns:
            CouponValidation listing every failing rule. Amounts are only
            computed for valid coupons; otherwise the discount is zero and the
            final total is the untouched order total.
        """
        issues = self.evaluate(coupon, context, now)
        is_valid = not issues

        discount_amount = Decimal("0")
        final_total = context.total
        if is_valid and coupon is not None:
            result = calculate_discount(coupon, context)
            discount_amount = result.discount_amount
            final_total = result.final_total

        return CouponValidation(
            is_valid=is_valid,
            errors=issues,
            discount_amount=discount_amount,
            final_total=final_total,
            applied_rules=[rule.name for rule in self._rules],
            coupon_id=coupon.id if coupon else None,
            coupon_code=coupon.code if coupon else None,
            coupon_type=coupon.coupon_type if coupon else None,
            coupon_value=coupon.value if coupon else None,
        )
