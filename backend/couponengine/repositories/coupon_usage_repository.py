"""CouponUsage repository: usage counts and atomic redemption recording."""

import logging
from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, or_, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from couponengine.models.coupon import Coupon, CouponErrorCode
from couponengine.models.coupon_usage import CouponUsage

logger = logging.getLogger(__name__)


@dataclass
class UsageRecordResult:
    """Result of trying to record a coupon redemption."""

    usage: CouponUsage | None = None
    error_code: CouponErrorCode | None = None

    @property
    def recorded(self) -> bool:
        return self.usage is not None


class CouponUsageRepository:
    """Repository for CouponUsage model."""

    def __init__(self, db: Session):
        self.db = db

    def count_by_coupon(self, coupon_id: UUID) -> int:
        """Count all recorded redemptions of a coupon."""
        return (
            self.db.query(func.count(CouponUsage.id))
            .filter(CouponUsage.coupon_id == coupon_id)
            .scalar()
            or 0
        )

    def count_by_coupon_and_user(self, coupon_id: UUID, user_id: str) -> int:
        """Count redemptions of a coupon by one user."""
        return (
            self.db.query(func.count(CouponUsage.id))
            .filter(CouponUsage.coupon_id == coupon_id, CouponUsage.user_id == user_id)
            .scalar()
            or 0
        )

    def get_by_user(self, user_id: str) -> list[CouponUsage]:
        """Get a user's redemption history, newest first."""
        return (
            self.db.query(CouponUsage)
            .filter(CouponUsage.user_id == user_id)
            .order_by(CouponUsage.used_at.desc())
            .all()
        )

    def record_usage(
        self,
        coupon_id: UUID,
        user_id: str,
        order_id: str | None,
        discount_amount: Decimal,
        order_total: Decimal | None = None,
        store_id: str | None = None,
    ) -> UsageRecordResult:
        """Record one redemption and bump the coupon's used_count in one transaction.

        The increment is a conditional UPDATE guarded by the global limit, so two
        concurrent redemptions of the last use cannot both succeed. The UPDATE
        also locks the coupon row, which serialises the per-customer count and
        the insert that follow.

        Returns:
            UsageRecordResult holding the new CouponUsage, or the error code
            explaining why nothing was recorded.

        Raises:
            SQLAlchemyError: On database failure, after rolling back.
        """
        try:
            result = self.db.execute(
                update(Coupon)
                .where(
                    Coupon.id == coupon_id,
                    or_(
                        Coupon.usage_limit.is_(None),
                        Coupon.usage_limit <= 0,
                        Coupon.used_count < Coupon.usage_limit,
                    ),
                )
                .values(used_count=Coupon.used_count + 1, updated_at=func.now())
                .execution_options(synchronize_session=False)
            )

            if result.rowcount == 0:  # type: ignore[attr-defined]
                self.db.rollback()
                exists = self.db.query(Coupon.id).filter(Coupon.id == coupon_id).first()
                if exists is None:
                    return UsageRecordResult(error_code=CouponErrorCode.COUPON_NOT_FOUND)
                logger.warning("Usage limit reached for coupon %s", coupon_id)
                return UsageRecordResult(error_code=CouponErrorCode.USAGE_LIMIT_EXCEEDED)

            per_customer = (
                self.db.query(Coupon.usage_limit_per_customer)
                .filter(Coupon.id == coupon_id)
                .scalar()
            )
            if per_customer and per_customer > 0:
                if self.count_by_coupon_and_user(coupon_id, user_id) >= per_customer:
                    self.db.rollback()
                    logger.warning(
                        "Per-customer limit reached for coupon %s and user %s",
                        coupon_id,
                        user_id,
                    )
                    return UsageRecordResult(error_code=CouponErrorCode.USER_LIMIT_EXCEEDED)

            usage = CouponUsage(
                coupon_id=coupon_id,
                user_id=user_id,
                order_id=order_id,
                store_id=store_id,
                discount_amount=discount_amount,
                order_total=order_total,
            )
            self.db.add(usage)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

        self.db.refresh(usage)
        return UsageRecordResult(usage=usage)
