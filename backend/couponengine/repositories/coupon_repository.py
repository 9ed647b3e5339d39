"""Coupon repository for data access."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from sqlalchemy import or_
from sqlalchemy.orm import Session

from couponengine.models.coupon import Coupon
from couponengine.models.shared import utc_now
from couponengine.schemas.coupon import CouponCreate, CouponData


def coupon_to_data(coupon: Coupon) -> CouponData:
    """Map a storage row onto the engine's coupon record."""
    return CouponData.model_validate(coupon)


class CouponRepository:
    """Repository for Coupon model."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, coupon_id: UUID) -> Coupon | None:
        """Get a coupon by ID."""
        return self.db.query(Coupon).filter(Coupon.id == coupon_id).first()

    def get_by_code(self, code: str) -> Coupon | None:
        """Get a coupon by code, ignoring case."""
        return self.db.query(Coupon).filter(Coupon.code == code.strip().upper()).first()

    def find_by_identifier(
        self, identifier: str, kind: Literal["code", "id"] = "code"
    ) -> CouponData | None:
        """Resolve a coupon by code or by id; malformed ids resolve to None."""
        if kind == "code":
            coupon = self.get_by_code(identifier)
        else:
            try:
                coupon_id = UUID(str(identifier))
            except ValueError:
                return None
            coupon = self.get_by_id(coupon_id)

        return coupon_to_data(coupon) if coupon else None

    def get_auto_coupons(
        self, store_id: str | None = None, now: datetime | None = None
    ) -> list[CouponData]:
        """Get active, started, unexpired auto-apply coupons usable in a store.

        With a store, keeps coupons that are not store-scoped, scoped to that
        store, or list it in applicable_stores. Ordered by creation time.
        """
        now = now or utc_now()
        query = self.db.query(Coupon).filter(
            Coupon.is_active.is_(True),
            Coupon.is_auto_apply.is_(True),
            Coupon.start_date <= now,
            or_(Coupon.end_date.is_(None), Coupon.end_date >= now),
        )
        if store_id:
            query = query.filter(or_(Coupon.store_id.is_(None), Coupon.store_id == store_id))

        coupons = query.order_by(Coupon.created_at.asc(), Coupon.code.asc()).all()
        result = [coupon_to_data(coupon) for coupon in coupons]

        if store_id:
            # JSON membership is filtered here to stay portable across dialects
            result = [
                coupon
                for coupon in result
                if coupon.store_id == store_id
                or not coupon.applicable_stores
                or store_id in coupon.applicable_stores
            ]
        return result

    def create(self, data: CouponCreate) -> Coupon:
        """Create a new coupon."""
        coupon = Coupon(
            code=data.code,
            name=data.name,
            description=data.description,
            coupon_type=data.coupon_type.value,
            value=data.value,
            minimum_order_value=data.minimum_order_value,
            maximum_discount_amount=data.maximum_discount_amount,
            usage_limit=data.usage_limit,
            usage_limit_per_customer=data.usage_limit_per_customer,
            used_count=0,
            is_active=data.is_active,
            is_auto_apply=data.is_auto_apply,
            auto_apply_category=data.auto_apply_category,
            auto_apply_first_purchase=data.auto_apply_first_purchase,
            start_date=data.start_date or utc_now(),
            end_date=data.end_date,
            store_id=data.store_id,
            applicable_categories=data.applicable_categories,
            applicable_products=data.applicable_products,
            applicable_stores=data.applicable_stores,
            created_by=data.created_by,
        )
        self.db.add(coupon)
        self.db.commit()
        self.db.refresh(coupon)
        return coupon

    def set_active(self, coupon_id: UUID, is_active: bool) -> Coupon | None:
        """Enable or soft-disable a coupon; coupons with history are never deleted."""
        coupon = self.get_by_id(coupon_id)
        if not coupon:
            return None

        coupon.is_active = is_active  # type: ignore[assignment]
        self.db.commit()
        self.db.refresh(coupon)
        return coupon
