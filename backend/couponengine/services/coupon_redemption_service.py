"""Checkout-facing coupon flow: look up, validate, and redeem coupons."""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Literal

from sqlalchemy.orm import Session

from couponengine.models.coupon import CouponErrorCode
from couponengine.repositories.coupon_repository import CouponRepository
from couponengine.repositories.coupon_usage_repository import CouponUsageRepository
from couponengine.repositories.order_repository import OrderRepository
from couponengine.schemas.coupon import (
    CouponContext,
    CouponData,
    CouponUsageRecord,
    CouponValidation,
    ValidationIssue,
)
from couponengine.services.coupon_validation_service import CouponValidationService
from couponengine.services.usage_limits import UsageCheckResult

logger = logging.getLogger(__name__)

IdentifierKind = Literal["code", "id"]


@dataclass
class RedemptionResult:
    """Result of redeeming a coupon for an order."""

    validation: CouponValidation
    usage: CouponUsageRecord | None = None

    @property
    def success(self) -> bool:
        return self.usage is not None


class CouponRedemptionService:
    """Service wiring the coupon engine to its repositories for checkout."""

    def __init__(self, db: Session, validation_service: CouponValidationService | None = None):
        self.db = db
        self.validation_service = validation_service or CouponValidationService()
        self.coupon_repo = CouponRepository(db)
        self.usage_repo = CouponUsageRepository(db)
        self.order_repo = OrderRepository(db)

    def check_coupon(
        self,
        identifier: str,
        context: CouponContext,
        kind: IdentifierKind = "code",
        check_user_usage: bool = True,
    ) -> CouponValidation:
        """Look up a coupon and validate it for a checkout.

        Args:
            identifier: Coupon code (any case) or coupon id.
            context: The checkout snapshot.
            kind: Whether identifier is a "code" or an "id".
            check_user_usage: Also enforce usage caps against recorded redemptions.

        Returns:
            CouponValidation; a missing coupon yields COUPON_NOT_FOUND.
        """
        coupon = self.coupon_repo.find_by_identifier(identifier, kind)
        if coupon is None:
            return self._not_found(context)

        context = self._with_first_purchase(coupon, context)
        validation = self.validation_service.validate_coupon(coupon, context)

        if check_user_usage:
            validation = self.validation_service.apply_usage_checks(
                validation, context, self._usage_checks(coupon, context)
            )
        return validation

    def redeem(
        self,
        identifier: str,
        context: CouponContext,
        order_id: str | None,
        kind: IdentifierKind = "code",
    ) -> RedemptionResult:
        """Validate a coupon and, only if valid, record its usage for an order."""
        if not context.user_id:
            return RedemptionResult(
                validation=CouponValidation(
                    is_valid=False,
                    errors=[
                        ValidationIssue(
                            message="A user is required to redeem a coupon",
                            code=CouponErrorCode.VALIDATION_ERROR,
                        )
                    ],
                    final_total=context.total,
                )
            )

        validation = self.check_coupon(identifier, context, kind)
        if not validation.is_valid or validation.coupon_id is None:
            return RedemptionResult(validation=validation)

        outcome = self.usage_repo.record_usage(
            coupon_id=validation.coupon_id,
            user_id=context.user_id,
            order_id=order_id or context.order_id,
            discount_amount=validation.discount_amount,
            order_total=context.total,
            store_id=context.store_id,
        )
        if not outcome.recorded:
            code = outcome.error_code or CouponErrorCode.VALIDATION_ERROR
            lost = UsageCheckResult(
                is_valid=False, error="Coupon could not be redeemed", code=code
            )
            return RedemptionResult(
                validation=self.validation_service.apply_usage_checks(
                    validation, context, [lost]
                )
            )

        logger.info(
            "Redeemed coupon %s for user %s (discount %s)",
            validation.coupon_code,
            context.user_id,
            validation.discount_amount,
        )
        return RedemptionResult(
            validation=validation,
            usage=CouponUsageRecord.model_validate(outcome.usage),
        )

    def suggest_auto_coupon(self, context: CouponContext) -> CouponValidation | None:
        """Pick the best auto-apply coupon for a checkout, if any applies."""
        candidates = self.coupon_repo.get_auto_coupons(store_id=context.store_id)
        if not candidates:
            return None

        if context.user_id and context.is_first_purchase is None:
            context = context.model_copy(
                update={"is_first_purchase": self.order_repo.is_first_purchase(context.user_id)}
            )

        best: CouponValidation | None = None
        for coupon in self.validation_service.find_applicable_auto_coupons(candidates, context):
            validation = self.validation_service.validate_coupon(coupon, context)
            validation = self.validation_service.apply_usage_checks(
                validation, context, self._usage_checks(coupon, context)
            )
            if not validation.is_valid or validation.discount_amount <= Decimal("0"):
                continue
            if best is None or validation.discount_amount > best.discount_amount:
                best = validation

        return best

    def _with_first_purchase(self, coupon: CouponData, context: CouponContext) -> CouponContext:
        if not coupon.auto_apply_first_purchase or not context.user_id:
            return context
        if context.is_first_purchase is not None:
            return context
        return context.model_copy(
            update={"is_first_purchase": self.order_repo.is_first_purchase(context.user_id)}
        )

    def _usage_checks(self, coupon: CouponData, context: CouponContext) -> list[UsageCheckResult]:
        results = [
            self.validation_service.validate_global_usage(coupon, self.usage_repo.count_by_coupon)
        ]
        if context.user_id:
            results.append(
                self.validation_service.validate_user_usage(
                    coupon, context.user_id, self.usage_repo.count_by_coupon_and_user
                )
            )
        return results

    def _not_found(self, context: CouponContext) -> CouponValidation:
        return CouponValidation(
            is_valid=False,
            errors=[
                ValidationIssue(message="Coupon not found", code=CouponErrorCode.COUPON_NOT_FOUND)
            ],
            final_total=context.total,
        )
