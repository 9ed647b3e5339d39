"""Coupon model for marketplace discounts."""

from enum import Enum

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Integer,
    Numeric,
    String,
    Text,
    func,
)

from couponengine.core.database import Base
from couponengine.models.shared import UUIDType, generate_uuid


class CouponType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED_AMOUNT = "fixed_amount"


class CouponErrorCode(str, Enum):
    """Closed set of reasons a coupon can be rejected."""

    COUPON_NOT_FOUND = "COUPON_NOT_FOUND"
    COUPON_INACTIVE = "COUPON_INACTIVE"
    COUPON_EXPIRED = "COUPON_EXPIRED"
    COUPON_NOT_STARTED = "COUPON_NOT_STARTED"
    USAGE_LIMIT_EXCEEDED = "USAGE_LIMIT_EXCEEDED"
    USER_LIMIT_EXCEEDED = "USER_LIMIT_EXCEEDED"
    MINIMUM_ORDER_VALUE_NOT_MET = "MINIMUM_ORDER_VALUE_NOT_MET"
    STORE_RESTRICTION = "STORE_RESTRICTION"
    CATEGORY_RESTRICTION = "CATEGORY_RESTRICTION"
    PRODUCT_RESTRICTION = "PRODUCT_RESTRICTION"
    FIRST_PURCHASE_ONLY = "FIRST_PURCHASE_ONLY"
    VALIDATION_ERROR = "VALIDATION_ERROR"


class Coupon(Base):
    """Coupon model for marketplace discounts."""

    __tablename__ = "coupons"
    __table_args__ = (
        CheckConstraint("value >= 0", name="ck_coupons_value_non_negative"),
        CheckConstraint(
            "usage_limit IS NULL OR usage_limit <= 0 OR used_count <= usage_limit",
            name="ck_coupons_used_count_within_limit",
        ),
    )

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    code = Column(String(50), unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)

    coupon_type = Column(String(20), nullable=False)
    value = Column(Numeric(10, 2), nullable=False)
    minimum_order_value = Column(Numeric(10, 2), nullable=True)
    maximum_discount_amount = Column(Numeric(10, 2), nullable=True)

    usage_limit = Column(Integer, nullable=True)
    usage_limit_per_customer = Column(Integer, nullable=True)
    used_count = Column(Integer, nullable=False, default=0)

    is_active = Column(Boolean, nullable=False, default=True, index=True)
    is_auto_apply = Column(Boolean, nullable=False, default=False)
    auto_apply_category = Column(String(100), nullable=True)
    auto_apply_first_purchase = Column(Boolean, nullable=False, default=False)

    start_date = Column(DateTime(timezone=True), nullable=False)
    end_date = Column(DateTime(timezone=True), nullable=True)

    store_id = Column(String(36), nullable=True, index=True)
    applicable_categories = Column(JSON, nullable=True)
    applicable_products = Column(JSON, nullable=True)
    applicable_stores = Column(JSON, nullable=True)

    created_by = Column(String(36), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
