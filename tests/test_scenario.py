"""Tests for scripted action plans."""

import pytest
from property_sim.model import PropertyCategory
from property_sim.scenario import (
    Action,
    apply_action,
    parse_actions,
    parse_category,
    run_plan,
)
from property_sim.simulation import start_simulation
from property_sim.transactions import Rejection


def _start():
    return start_simulation(150_000, 20.0, 200_000, 1_000_000)


def _plan(*entries):
    return parse_actions(list(entries))


OPEN = {"quarter": 0, "kind": "open_trust"}
BUY = {"quarter": 0, "kind": "buy", "trust": "Trust 1", "category": "growth"}


class TestParseCategory:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("growth", PropertyCategory.RESIDENTIAL_GROWTH),
            ("Cashflow", PropertyCategory.RESIDENTIAL_CASHFLOW),
            ("commercial", PropertyCategory.COMMERCIAL),
            ("residential_growth", PropertyCategory.RESIDENTIAL_GROWTH),
        ],
    )
    def test_valid(self, text, expected):
        assert parse_category(text) is expected

    def test_unknown(self):
        with pytest.raises(ValueError, match="unknown property category"):
            parse_category("castle")


class TestParseActions:
    def test_basic(self):
        actions = _plan(OPEN, BUY, {"quarter": 4, "kind": "sell", "trust": "Trust 1", "property": "IP 1"})
        assert [a.kind for a in actions] == ["open_trust", "buy", "sell"]
        assert actions[1].params["category"] is PropertyCategory.RESIDENTIAL_GROWTH
        assert actions[2].quarter == 4
        assert actions[2].property == "IP 1"
        assert actions[2].params == {}

    def test_quarter_defaults_to_zero(self):
        assert _plan({"kind": "open_trust"})[0].quarter == 0

    def test_unknown_kind(self):
        with pytest.raises(ValueError, match=r"action #1: unknown kind"):
            _plan({"kind": "mortgage"})

    def test_missing_keys(self):
        with pytest.raises(ValueError, match=r"action #2 \(buy\): missing category"):
            _plan(OPEN, {"kind": "buy", "trust": "Trust 1"})

    def test_negative_quarter(self):
        with pytest.raises(ValueError, match="quarter must not be negative"):
            _plan({"quarter": -1, "kind": "open_trust"})

    def test_refinance_needs_amount(self):
        with pytest.raises(ValueError, match="needs cash_out or target_lvr"):
            _plan({"kind": "refinance", "trust": "Trust 1", "property": "IP 1"})

    def test_input_not_mutated(self):
        raw = [dict(BUY)]
        parse_actions(raw)
        assert raw == [BUY]


class TestApplyAction:
    def test_unknown_trust(self):
        result = apply_action(_start(), Action(quarter=0, kind="buy", trust="Nope", params={
            "category": PropertyCategory.COMMERCIAL,
        }))
        assert result.reason is Rejection.NOT_FOUND

    def test_buy_overrides_preset(self):
        state = apply_action(_start(), _plan(OPEN)[0])
        action = _plan({**BUY, "price": 300_000, "lvr": 80, "other_costs": 0, "name": "Flat"})[0]
        state = apply_action(state, action)
        prop = state.trusts[0].properties[0]
        assert prop.name == "Flat"
        assert prop.value == 300_000
        assert prop.loan == pytest.approx(240_000)
        assert prop.growth_rate == 20.0  # from preset

    def test_unknown_property(self):
        state = apply_action(_start(), _plan(OPEN)[0])
        action = _plan({"kind": "sell", "trust": "Trust 1", "property": "IP 7"})[0]
        assert apply_action(state, action).reason is Rejection.NOT_FOUND


class TestRunPlan:
    def test_buy_refinance_sell(self):
        actions = _plan(
            OPEN,
            BUY,
            {"quarter": 4, "kind": "refinance", "trust": "Trust 1", "property": "IP 1", "target_lvr": 80},
            {"quarter": 8, "kind": "sell", "trust": "Trust 1", "property": "IP 1"},
        )
        result = run_plan(_start(), actions, quarters=8)
        assert result.rejections == []
        assert len(result.state.history) == 9
        assert (result.state.year, result.state.month) == (2, 0)
        # Sale at the final quarter happens after the last tick
        assert result.state.trusts[0].properties == ()
        assert result.state.history[-1].debt > 0

    def test_refinance_target(self):
        actions = _plan(
            OPEN, BUY,
            {"quarter": 4, "kind": "refinance", "trust": "Trust 1", "property": "IP 1", "target_lvr": 80},
        )
        result = run_plan(_start(), actions, quarters=4)
        prop = result.state.trusts[0].properties[0]
        assert prop.loan == pytest.approx(prop.value * 0.80, abs=1)

    def test_rejections_recorded(self):
        actions = _plan(
            OPEN,
            {"quarter": 1, "kind": "buy", "trust": "Trust 9", "category": "commercial"},
            {"quarter": 2, "kind": "buy", "trust": "Trust 1", "category": "growth", "lvr": 97},
        )
        result = run_plan(_start(), actions, quarters=4)
        reasons = [(q, r.reason) for q, _, r in result.rejections]
        assert reasons == [(1, Rejection.NOT_FOUND), (2, Rejection.EXCESSIVE_RISK)]
        # Plan continues from the unchanged state
        assert len(result.state.history) == 5
        assert result.state.trusts[0].properties == ()

    def test_refinance_below_current_lvr_rejected(self):
        actions = _plan(
            OPEN, BUY,
            {"quarter": 1, "kind": "refinance", "trust": "Trust 1", "property": "IP 1", "target_lvr": 50},
        )
        result = run_plan(_start(), actions, quarters=1)
        assert [r.reason for _, _, r in result.rejections] == [Rejection.INVALID_AMOUNT]

    def test_settings_and_renames(self):
        actions = _plan(
            OPEN, BUY,
            {"quarter": 1, "kind": "settings", "salary": 0},
            {"quarter": 1, "kind": "trust_settings", "trust": "Trust 1", "new_name": "Family"},
            {"quarter": 2, "kind": "property_settings", "trust": "Family", "property": "IP 1",
             "new_name": "Home", "growth_rate": 0},
            {"quarter": 2, "kind": "pay_down", "trust": "Family", "property": "Home", "amount": 10_000},
        )
        result = run_plan(_start(), actions, quarters=3)
        assert result.rejections == []
        assert result.state.salary == 0
        trust = result.state.trusts[0]
        assert trust.name == "Family"
        prop = trust.properties[0]
        assert prop.name == "Home"
        assert prop.growth_rate == 0
        assert prop.loan == pytest.approx(436_600)

    def test_no_actions(self):
        result = run_plan(_start(), [], quarters=4)
        assert result.state.cash == pytest.approx(230_000)
        assert result.rejections == []

    def test_late_action(self):
        actions = _plan({"quarter": 5, "kind": "open_trust"})
        with pytest.raises(ValueError, match="after the last quarter"):
            run_plan(_start(), actions, quarters=4)

    def test_negative_quarters(self):
        with pytest.raises(ValueError, match="quarters must not be negative"):
            run_plan(_start(), [], quarters=-1)
