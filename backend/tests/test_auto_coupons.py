"""Tests for auto-apply coupon selection."""

from decimal import Decimal

from couponengine.models.coupon import CouponType
from couponengine.schemas.coupon import CouponContext
from couponengine.services.auto_coupons import (
    find_applicable_auto_coupons,
    find_best_auto_coupon,
    find_best_coupon,
)
from tests.conftest import make_coupon


def _fixed(code, amount, **overrides):
    return make_coupon(
        code=code,
        coupon_type=CouponType.FIXED_AMOUNT,
        value=Decimal(amount),
        is_auto_apply=True,
        **overrides,
    )


class TestFindApplicableAutoCoupons:
    def test_skips_coupons_without_auto_apply(self):
        manual = make_coupon(code="MANUAL")
        auto = _fixed("AUTO", "5")
        context = CouponContext(order_total=Decimal("50"))
        result = find_applicable_auto_coupons([manual, auto], context)
        assert [c.code for c in result] == ["AUTO"]

    def test_skips_coupons_failing_quick_validation(self):
        coupons = [
            _fixed("OFF", "5", is_active=False),
            _fixed("MIN", "5", minimum_order_value=Decimal("100")),
            _fixed("OK", "5"),
        ]
        result = find_applicable_auto_coupons(coupons, CouponContext(order_total=Decimal("50")))
        assert [c.code for c in result] == ["OK"]

    def test_first_purchase_coupons_need_first_purchase(self):
        coupon = _fixed("WELCOME", "5", auto_apply_first_purchase=True)
        returning = CouponContext(order_total=Decimal("50"), is_first_purchase=False)
        unknown = CouponContext(order_total=Decimal("50"))
        first = CouponContext(order_total=Decimal("50"), is_first_purchase=True)
        assert find_applicable_auto_coupons([coupon], returning) == []
        assert find_applicable_auto_coupons([coupon], unknown) == []
        assert find_applicable_auto_coupons([coupon], first) == [coupon]

    def test_auto_apply_category_targeting(self):
        coupon = _fixed("BOOKS", "5", auto_apply_category="books")
        with_books = CouponContext(order_total=Decimal("50"), categories=["books"])
        without = CouponContext(order_total=Decimal("50"), categories=["toys"])
        assert find_applicable_auto_coupons([coupon], with_books) == [coupon]
        assert find_applicable_auto_coupons([coupon], without) == []

    def test_preserves_input_order(self):
        coupons = [_fixed("B", "1"), _fixed("A", "2"), _fixed("C", "3")]
        result = find_applicable_auto_coupons(coupons, CouponContext(order_total=Decimal("10")))
        assert [c.code for c in result] == ["B", "A", "C"]


class TestFindBestCoupon:
    def test_picks_largest_discount(self):
        coupons = [
            _fixed("FIVE", "5"),
            make_coupon(code="PCT20", value=Decimal("20")),
            _fixed("TEN", "10"),
        ]
        best = find_best_coupon(coupons, CouponContext(order_total=Decimal("100")))
        assert best.code == "PCT20"

    def test_tie_keeps_first_seen(self):
        coupons = [_fixed("A", "10.00"), _fixed("B", "25.50"), _fixed("C", "25.50")]
        best = find_best_coupon(coupons, CouponContext(order_total=Decimal("100")))
        assert best.code == "B"

    def test_none_when_no_positive_discount(self):
        coupons = [make_coupon(code="ZERO", value=Decimal("0"))]
        assert find_best_coupon(coupons, CouponContext(order_total=Decimal("100"))) is None

    def test_none_for_empty_input(self):
        assert find_best_coupon([], CouponContext(order_total=Decimal("100"))) is None

    def test_skips_invalid_coupons(self):
        coupons = [_fixed("BIG", "90", is_active=False), _fixed("SMALL", "1")]
        best = find_best_coupon(coupons, CouponContext(order_total=Decimal("100")))
        assert best.code == "SMALL"

    def test_discount_is_capped_by_order_total(self):
        # Both coupons cover the full 30.00 order; the first one wins the tie
        coupons = [_fixed("FIFTY", "50"), _fixed("HUNDRED", "100")]
        best = find_best_coupon(coupons, CouponContext(order_total=Decimal("30")))
        assert best.code == "FIFTY"


class TestFindBestAutoCoupon:
    def test_only_auto_apply_coupons_compete(self):
        manual = make_coupon(code="MANUAL", value=Decimal("50"))
        auto = _fixed("AUTO", "5")
        best = find_best_auto_coupon([manual, auto], CouponContext(order_total=Decimal("100")))
        assert best.code == "AUTO"

    def test_none_when_nothing_applies(self):
        coupon = _fixed("BOOKS", "5", auto_apply_category="books")
        assert find_best_auto_coupon([coupon], CouponContext(order_total=Decimal("100"))) is None
