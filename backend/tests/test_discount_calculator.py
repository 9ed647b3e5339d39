"""Tests for the coupon discount calculator."""

from decimal import Decimal

from couponengine.models.coupon import CouponType
from couponengine.schemas.coupon import CouponContext
from couponengine.services.discount_calculator import (
    DiscountResult,
    calculate_discount,
    round_currency,
)
from tests.conftest import make_coupon


def _ctx(total: str) -> CouponContext:
    return CouponContext(order_total=Decimal(total))


class TestPercentageDiscount:
    def test_simple_percentage(self):
        coupon = make_coupon(coupon_type=CouponType.PERCENTAGE, value=Decimal("10"))
        result = calculate_discount(coupon, _ctx("100.00"))
        assert result == DiscountResult(Decimal("10.00"), Decimal("90.00"))

    def test_capped_by_maximum_discount(self):
        coupon = make_coupon(
            coupon_type=CouponType.PERCENTAGE,
            value=Decimal("50"),
            maximum_discount_amount=Decimal("100"),
        )
        result = calculate_discount(coupon, _ctx("500.00"))
        assert result.discount_amount == Decimal("100.00")
        assert result.final_total == Decimal("400.00")

    def test_below_maximum_discount_is_untouched(self):
        coupon = make_coupon(
            coupon_type=CouponType.PERCENTAGE,
            value=Decimal("50"),
            maximum_discount_amount=Decimal("100"),
        )
        result = calculate_discount(coupon, _ctx("150.00"))
        assert result.discount_amount == Decimal("75.00")

    def test_zero_maximum_discount_disables_percentage(self):
        coupon = make_coupon(
            coupon_type=CouponType.PERCENTAGE,
            value=Decimal("25"),
            maximum_discount_amount=Decimal("0"),
        )
        result = calculate_discount(coupon, _ctx("80.00"))
        assert result.discount_amount == Decimal("0")
        assert result.final_total == Decimal("80.00")

    def test_zero_percent(self):
        coupon = make_coupon(coupon_type=CouponType.PERCENTAGE, value=Decimal("0"))
        assert calculate_discount(coupon, _ctx("80.00")).discount_amount == Decimal("0")

    def test_full_percentage_never_goes_negative(self):
        coupon = make_coupon(coupon_type=CouponType.PERCENTAGE, value=Decimal("100"))
        result = calculate_discount(coupon, _ctx("59.99"))
        assert result.discount_amount == Decimal("59.99")
        assert result.final_total == Decimal("0")

    def test_malformed_percentage_above_hundred_is_clamped(self):
        coupon = make_coupon(coupon_type=CouponType.PERCENTAGE, value=Decimal("150"))
        result = calculate_discount(coupon, _ctx("40.00"))
        assert result.discount_amount == Decimal("40.00")
        assert result.final_total == Decimal("0")


class TestFixedAmountDiscount:
    def test_fixed_below_total(self):
        coupon = make_coupon(coupon_type=CouponType.FIXED_AMOUNT, value=Decimal("20"))
        result = calculate_discount(coupon, _ctx("80"))
        assert result.discount_amount == Decimal("20.00")
        assert result.final_total == Decimal("60.00")

    def test_fixed_capped_at_order_total(self):
        coupon = make_coupon(coupon_type=CouponType.FIXED_AMOUNT, value=Decimal("50"))
        result = calculate_discount(coupon, _ctx("35.50"))
        assert result.discount_amount == Decimal("35.50")
        assert result.final_total == Decimal("0")

    def test_maximum_discount_does_not_apply_to_fixed(self):
        coupon = make_coupon(
            coupon_type=CouponType.FIXED_AMOUNT,
            value=Decimal("30"),
            maximum_discount_amount=Decimal("5"),
        )
        assert calculate_discount(coupon, _ctx("100")).discount_amount == Decimal("30.00")

    def test_negative_value_yields_no_discount(self):
        coupon = make_coupon(coupon_type=CouponType.FIXED_AMOUNT, value=Decimal("-5"))
        result = calculate_discount(coupon, _ctx("10"))
        assert result.discount_amount == Decimal("0")
        assert result.final_total == Decimal("10.00")


class TestEdgeCases:
    def test_zero_order_total(self):
        coupon = make_coupon(coupon_type=CouponType.FIXED_AMOUNT, value=Decimal("20"))
        result = calculate_discount(coupon, _ctx("0"))
        assert result.discount_amount == Decimal("0")
        assert result.final_total == Decimal("0")

    def test_negative_order_total_clamps_to_zero(self):
        coupon = make_coupon(coupon_type=CouponType.PERCENTAGE, value=Decimal("10"))
        result = calculate_discount(coupon, _ctx("-20"))
        assert result.discount_amount == Decimal("0")
        assert result.final_total == Decimal("0")

    def test_missing_order_total_uses_cart_total(self):
        coupon = make_coupon(coupon_type=CouponType.PERCENTAGE, value=Decimal("10"))
        result = calculate_discount(coupon, CouponContext(cart_total=Decimal("50")))
        assert result.discount_amount == Decimal("5.00")

    def test_no_totals_means_zero(self):
        coupon = make_coupon(coupon_type=CouponType.PERCENTAGE, value=Decimal("10"))
        result = calculate_discount(coupon, CouponContext())
        assert result == DiscountResult(Decimal("0"), Decimal("0"))

    def test_calculation_is_repeatable(self):
        coupon = make_coupon(coupon_type=CouponType.PERCENTAGE, value=Decimal("12.5"))
        context = _ctx("77.77")
        assert calculate_discount(coupon, context) == calculate_discount(coupon, context)

    def test_final_total_plus_discount_equals_order_total(self):
        coupon = make_coupon(coupon_type=CouponType.PERCENTAGE, value=Decimal("33"))
        for total in ("0.01", "1.99", "10.00", "33.33", "999.99"):
            result = calculate_discount(coupon, _ctx(total))
            assert result.discount_amount + result.final_total == Decimal(total)
            assert Decimal("0") <= result.final_total <= Decimal(total)


class TestRounding:
    def test_half_rounds_up(self):
        # 50% of 24.69 is 12.345; ROUND_HALF_UP gives 12.35, banker's would give 12.34
        coupon = make_coupon(coupon_type=CouponType.PERCENTAGE, value=Decimal("50"))
        result = calculate_discount(coupon, _ctx("24.69"))
        assert result.discount_amount == Decimal("12.35")
        assert result.final_total == Decimal("12.34")

    def test_below_half_rounds_down(self):
        coupon = make_coupon(coupon_type=CouponType.PERCENTAGE, value=Decimal("10"))
        result = calculate_discount(coupon, _ctx("33.33"))
        assert result.discount_amount == Decimal("3.33")
        assert result.final_total == Decimal("30.00")

    def test_sub_cent_order_total_is_rounded_first(self):
        coupon = make_coupon(coupon_type=CouponType.FIXED_AMOUNT, value=Decimal("20"))
        result = calculate_discount(coupon, _ctx("10.005"))
        assert result.discount_amount == Decimal("10.01")
        assert result.final_total == Decimal("0")

    def test_round_currency(self):
        assert round_currency(Decimal("2.675")) == Decimal("2.68")
        assert round_currency(Decimal("2.674")) == Decimal("2.67")
        assert round_currency(Decimal("5")) == Decimal("5.00")
