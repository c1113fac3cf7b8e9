"""Tests for lending formulas and per-property cashflow."""

import pytest
from property_sim.formulas import (
    calc_lmi,
    calc_lvr,
    exceeds,
    grow_value,
    max_loan_by_lvr,
    monthly_interest,
    property_cashflow,
)
from property_sim.model import Property, PropertyCategory


def _property(**overrides) -> Property:
    fields = dict(
        id="p1", name="IP 1", category=PropertyCategory.RESIDENTIAL_GROWTH,
        value=500_000, original_price=500_000, loan=440_000,
        interest_rate=6.0, growth_rate=20.0, yield_rate=5.0, bought_at=0,
    )
    fields.update(overrides)
    return Property(**fields)


class TestMonthlyInterest:
    def test_typical(self):
        """120k at 6% → 600/month"""
        assert monthly_interest(120_000, 6.0) == pytest.approx(600.0)

    def test_zero_loan(self):
        assert monthly_interest(0, 6.0) == 0

    def test_no_rounding(self):
        assert monthly_interest(1000, 5.5) == pytest.approx(4.583333, rel=1e-6)


class TestMaxLoanByLVR:
    def test_88_percent_cap(self):
        assert max_loan_by_lvr(1_000_000) == pytest.approx(880_000)

    def test_zero_value(self):
        assert max_loan_by_lvr(0) == 0


class TestCalcLMI:
    @pytest.mark.parametrize(
        "loan, value, expected",
        [
            (0, 1_000_000, 0.0),
            (500_000, 1_000_000, 0.0),
            (800_000, 1_000_000, 0.0),          # exactly 80% → free
            (800_001, 1_000_000, 800_001 * 0.015),
            (850_000, 1_000_000, 12_750.0),
            (950_000, 1_000_000, 14_250.0),     # exactly 95% → still insurable
        ],
    )
    def test_tiers(self, loan, value, expected):
        assert calc_lmi(loan, value) == pytest.approx(expected)

    def test_above_ceiling_rejected(self):
        assert calc_lmi(950_001, 1_000_000) is None

    def test_full_loan_rejected(self):
        assert calc_lmi(1_000_000, 1_000_000) is None

    def test_lvr_from_percent_boundaries(self):
        """Loans sized as price × LVR/100 at 80/95% stay in the lower tier."""
        for price in (333_333, 487_650, 1_234_567):
            assert calc_lmi(price * (80 / 100), price) == 0.0
            assert calc_lmi(price * (95 / 100), price) is not None

    def test_zero_value_with_loan(self):
        assert calc_lmi(100, 0) is None

    def test_zero_value_without_loan(self):
        assert calc_lmi(0, 0) == 0.0


class TestCalcLVR:
    def test_percent(self):
        assert calc_lvr(440_000, 500_000) == pytest.approx(88.0)

    def test_zero_value(self):
        assert calc_lvr(0, 0) == 0.0
        assert calc_lvr(1, 0) == float("inf")


class TestExceeds:
    def test_equal_is_not_exceeding(self):
        assert not exceeds(100.0, 100.0)

    def test_float_noise_ignored(self):
        assert not exceeds(0.1 + 0.2, 0.3)
        assert not exceeds(100.0000001, 100.0)

    def test_real_excess(self):
        assert exceeds(100.01, 100.0)

    def test_below(self):
        assert not exceeds(99.0, 100.0)


class TestPropertyCashflow:
    def test_residential_quarter(self):
        """500k @5% gross, 2% expenses, 440k @6% interest over 3 months"""
        cf = property_cashflow(_property(), 3)
        assert cf.rent == pytest.approx(6_250)
        assert cf.expenses == pytest.approx(2_500)
        assert cf.interest == pytest.approx(6_600)
        assert cf.net == pytest.approx(-2_850)

    def test_cashflow_category_uses_same_formula(self):
        growth = property_cashflow(_property(), 12)
        cashflow = property_cashflow(_property(category=PropertyCategory.RESIDENTIAL_CASHFLOW), 12)
        assert cashflow == growth

    def test_commercial_has_no_expenses(self):
        prop = _property(
            category=PropertyCategory.COMMERCIAL, value=1_000_000,
            original_price=1_000_000, loan=650_000,
        )
        cf = property_cashflow(prop, 12)
        assert cf.rent == pytest.approx(50_000)
        assert cf.expenses == 0
        assert cf.interest == pytest.approx(39_000)
        assert cf.net == pytest.approx(11_000)

    def test_unencumbered(self):
        cf = property_cashflow(_property(loan=0), 12)
        assert cf.interest == 0
        assert cf.net == pytest.approx(25_000 - 10_000)

    def test_annual_is_four_quarters(self):
        prop = _property()
        assert property_cashflow(prop, 12).net == pytest.approx(4 * property_cashflow(prop, 3).net)


class TestGrowValue:
    def test_quarter_linear(self):
        """20% p.a. over 3 months → +5%"""
        assert grow_value(500_000, 20.0, 3) == pytest.approx(525_000)

    def test_negative_growth(self):
        assert grow_value(400_000, -4.0, 3) == pytest.approx(396_000)

    def test_zero_growth(self):
        assert grow_value(400_000, 0.0, 3) == 400_000

    def test_floors_at_zero(self):
        """-500% p.a. over a quarter would be -125%"""
        assert grow_value(100, -500.0, 3) == 0.0
