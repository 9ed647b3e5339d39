"""Coupon, context and validation-result schemas."""

from collections.abc import Iterable
from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from couponengine.core.config import settings
from couponengine.models.coupon import CouponErrorCode, CouponType
from couponengine.models.shared import ensure_utc


class CouponCreate(BaseModel):
    code: str = Field(min_length=1, max_length=settings.COUPON_CODE_MAX_LENGTH)
    name: str = Field(max_length=255)
    description: str | None = None
    coupon_type: CouponType
    value: Decimal = Field(ge=0)
    minimum_order_value: Decimal | None = Field(default=None, ge=0)
    maximum_discount_amount: Decimal | None = Field(default=None, ge=0)
    usage_limit: int | None = Field(default=None, ge=1)
    usage_limit_per_customer: int | None = Field(default=None, ge=1)
    is_active: bool = True
    is_auto_apply: bool = False
    auto_apply_category: str | None = Field(default=None, max_length=100)
    auto_apply_first_purchase: bool = False
    start_date: datetime | None = None
    end_date: datetime | None = None
    store_id: str | None = None
    applicable_categories: list[str] = Field(default_factory=list)
    applicable_products: list[str] = Field(default_factory=list)
    applicable_stores: list[str] = Field(default_factory=list)
    created_by: str | None = None

    @field_validator("code")
    @classmethod
    def normalize_code(cls, value: str) -> str:
        code = value.strip().upper()
        if not code:
            raise ValueError("code must not be blank")
        return code

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_dates(cls, value: datetime | None) -> datetime | None:
        return ensure_utc(value)

    @model_validator(mode="after")
    def check_invariants(self) -> "CouponCreate":
        if self.coupon_type == CouponType.PERCENTAGE and self.value > 100:
            raise ValueError("percentage coupons cannot exceed 100")
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date")
        return self


class CouponData(BaseModel):
    """Typed coupon record the engine works with.

    Built from storage rows by ``coupon_to_data`` so engine code never touches
    ORM objects. Malformed amounts are tolerated here; the discount calculator
    clamps them.
    """

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: UUID
    code: str
    name: str = ""
    description: str | None = None
    coupon_type: CouponType
    value: Decimal
    minimum_order_value: Decimal | None = None
    maximum_discount_amount: Decimal | None = None
    usage_limit: int | None = None
    usage_limit_per_customer: int | None = None
    used_count: int = 0
    is_active: bool = True
    is_auto_apply: bool = False
    auto_apply_category: str | None = None
    auto_apply_first_purchase: bool = False
    start_date: datetime
    end_date: datetime | None = None
    store_id: str | None = None
    applicable_categories: list[str] = Field(default_factory=list)
    applicable_products: list[str] = Field(default_factory=list)
    applicable_stores: list[str] = Field(default_factory=list)
    created_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("start_date", "end_date", "created_at", "updated_at")
    @classmethod
    def normalize_dates(cls, value: datetime | None) -> datetime | None:
        return ensure_utc(value)

    @field_validator(
        "applicable_categories", "applicable_products", "applicable_stores", mode="before"
    )
    @classmethod
    def none_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("used_count", mode="before")
    @classmethod
    def none_as_zero(cls, value: Any) -> Any:
        return 0 if value is None else value


class CartItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    product_id: str
    quantity: int = Field(default=1, ge=0)
    price: Decimal = Field(ge=0)
    category: str | None = None
    store_id: str | None = None

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity


class CouponContext(BaseModel):
    """Snapshot of a checkout attempt that a coupon is validated against."""

    model_config = ConfigDict(frozen=True)

    order_total: Decimal | None = None
    cart_total: Decimal | None = None
    items: list[CartItem] = Field(default_factory=list)
    store_id: str | None = None
    categories: list[str] = Field(default_factory=list)
    product_ids: list[str] = Field(default_factory=list)
    user_id: str | None = None
    order_id: str | None = None
    is_first_purchase: bool | None = None
    applied_coupons: list[str] = Field(default_factory=list)

    @property
    def total(self) -> Decimal:
        """Pre-discount amount: order total, else cart total, else zero."""
        if self.order_total is not None:
            return self.order_total
        if self.cart_total is not None:
            return self.cart_total
        return Decimal("0")

    @classmethod
    def from_items(cls, items: Iterable[CartItem], **kwargs: Any) -> "CouponContext":
        """Build a context whose totals, categories and product ids come from cart items."""
        item_list = list(items)
        total = sum((item.line_total for item in item_list), Decimal("0"))
        kwargs.setdefault(
            "categories",
            list(dict.fromkeys(item.category for item in item_list if item.category)),
        )
        kwargs.setdefault("product_ids", list(dict.fromkeys(i.product_id for i in item_list)))
        return cls(order_total=total, cart_total=total, items=item_list, **kwargs)


class ValidationIssue(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str
    code: CouponErrorCode


class CouponValidation(BaseModel):
    """Outcome of validating one coupon against one context."""

    model_config = ConfigDict(frozen=True)

    is_valid: bool
    errors: list[ValidationIssue] = Field(default_factory=list)
    discount_amount: Decimal = Decimal("0")
    final_total: Decimal
    applied_rules: list[str] = Field(default_factory=list)
    coupon_id: UUID | None = None
    coupon_code: str | None = None
    coupon_type: CouponType | None = None
    coupon_value: Decimal | None = None

    @property
    def error_codes(self) -> list[CouponErrorCode]:
        return [issue.code for issue in self.errors]


class CouponUsageRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    coupon_id: UUID
    user_id: str
    order_id: str | None = None
    store_id: str | None = None
    discount_amount: Decimal
    order_total: Decimal | None = None
    used_at: datetime | None = None

    @field_validator("used_at")
    @classmethod
    def normalize_used_at(cls, value: datetime | None) -> datetime | None:
        return ensure_utc(value)
