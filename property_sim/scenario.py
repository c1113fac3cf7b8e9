"""Scripted action plans: apply scheduled transactions while time advances."""

from collections import defaultdict
from dataclasses import dataclass, field

from property_sim.model import PortfolioState, PropertyCategory
from property_sim.params import PurchaseParams, purchase_preset
from property_sim.simulation import advance_quarter
from property_sim.tax import DEFAULT_CGT_TAX_RATE
from property_sim.transactions import (
    Rejected,
    Rejection,
    TransactionResult,
    buy_property,
    open_trust,
    pay_down_loan,
    quote_refinance,
    refinance,
    release_for_target_lvr,
    sell_property,
    update_global_settings,
    update_property_settings,
    update_trust_settings,
)

# kind → keys that must be present
ACTION_KINDS: dict[str, tuple[str, ...]] = {
    "open_trust": (),
    "buy": ("trust", "category"),
    "sell": ("trust", "property"),
    "pay_down": ("trust", "property", "amount"),
    "refinance": ("trust", "property"),
    "settings": (),
    "trust_settings": ("trust",),
    "property_settings": ("trust", "property"),
}

CATEGORY_ALIASES = {
    "growth": PropertyCategory.RESIDENTIAL_GROWTH,
    "cashflow": PropertyCategory.RESIDENTIAL_CASHFLOW,
    "commercial": PropertyCategory.COMMERCIAL,
}


@dataclass
class Action:
    """One scheduled command. Trusts and properties are referenced by name."""

    quarter: int
    kind: str
    trust: str | None = None
    property: str | None = None
    params: dict = field(default_factory=dict)


@dataclass
class PlanResult:
    state: PortfolioState
    rejections: list[tuple[int, Action, Rejected]] = field(default_factory=list)


def parse_category(s: str) -> PropertyCategory:
    """Parse "growth" / "residential_growth" style names."""
    key = str(s).strip().lower()
    if key in CATEGORY_ALIASES:
        return CATEGORY_ALIASES[key]
    try:
        return PropertyCategory(key)
    except ValueError:
        valid = ", ".join(list(CATEGORY_ALIASES) + [c.value for c in PropertyCategory])
        raise ValueError(f"unknown property category {s!r} (expected one of: {valid})") from None


def parse_actions(raw: list[dict]) -> list[Action]:
    """Validate [[actions]] tables from config. Raises ValueError naming the bad entry."""
    actions = []
    for i, entry in enumerate(raw, start=1):
        entry = dict(entry)
        kind = entry.pop("kind", None)
        if kind not in ACTION_KINDS:
            raise ValueError(f"action #{i}: unknown kind {kind!r} (expected one of: {', '.join(ACTION_KINDS)})")
        missing = [k for k in ACTION_KINDS[kind] if k not in entry]
        if missing:
            raise ValueError(f"action #{i} ({kind}): missing {', '.join(missing)}")
        quarter = int(entry.pop("quarter", 0))
        if quarter < 0:
            raise ValueError(f"action #{i} ({kind}): quarter must not be negative (got {quarter})")
        if kind == "buy":
            entry["category"] = parse_category(entry["category"])
        if kind == "refinance" and "cash_out" not in entry and "target_lvr" not in entry:
            raise ValueError(f"action #{i} (refinance): needs cash_out or target_lvr")
        actions.append(Action(
            quarter=quarter,
            kind=kind,
            trust=entry.pop("trust", None),
            property=entry.pop("property", None),
            params=entry,
        ))
    return actions


def _not_found(what: str, name: str) -> Rejected:
    return Rejected(Rejection.NOT_FOUND, f"{what} {name!r} not found")


def apply_action(
    state: PortfolioState, action: Action, tax_rate: float = DEFAULT_CGT_TAX_RATE,
) -> TransactionResult:
    """Resolve names to ids and run the matching transaction."""
    p = action.params
    if action.kind == "open_trust":
        return open_trust(state, name=p.get("name"))
    if action.kind == "settings":
        return update_global_settings(
            state,
            salary=p.get("salary"),
            savings_rate=p.get("savings_rate"),
            max_borrowing_per_trust=p.get("max_borrowing"),
        )

    trust = state.find_trust_by_name(action.trust)
    if trust is None:
        return _not_found("trust", action.trust)

    if action.kind == "buy":
        category = p["category"]
        preset = purchase_preset(category)
        purchase = PurchaseParams(
            category=category,
            price=p.get("price", preset.price),
            interest_rate=p.get("interest_rate", preset.interest_rate),
            growth_rate=p.get("growth_rate", preset.growth_rate),
            yield_rate=p.get("yield_rate", preset.yield_rate),
            name=p.get("name", ""),
        )
        return buy_property(
            state, trust.id, purchase,
            lvr=p.get("lvr", preset.lvr),
            other_costs=p.get("other_costs", preset.other_costs),
        )
    if action.kind == "trust_settings":
        return update_trust_settings(
            state, trust.id, name=p.get("new_name"), max_borrowing=p.get("max_borrowing"),
        )

    prop = next((x for x in trust.properties if x.name == action.property), None)
    if prop is None:
        return _not_found("property", action.property)

    if action.kind == "sell":
        return sell_property(
            state, trust.id, prop.id,
            tax_rate=p.get("tax_rate", tax_rate),
            apply_cgt_discount=p.get("apply_cgt_discount"),
        )
    if action.kind == "pay_down":
        return pay_down_loan(state, trust.id, prop.id, p["amount"])
    if action.kind == "refinance":
        cash_out = p.get("cash_out")
        if cash_out is None:
            quote = quote_refinance(state, trust.id, prop.id)
            cash_out = release_for_target_lvr(prop, p["target_lvr"], quote.max_releasable)
        return refinance(state, trust.id, prop.id, cash_out)
    # property_settings
    return update_property_settings(
        state, trust.id, prop.id,
        name=p.get("new_name"),
        growth_rate=p.get("growth_rate"),
        yield_rate=p.get("yield_rate"),
        interest_rate=p.get("interest_rate"),
    )


def run_plan(
    state: PortfolioState,
    actions: list[Action],
    quarters: int,
    tax_rate: float = DEFAULT_CGT_TAX_RATE,
) -> PlanResult:
    """Run ``quarters`` ticks, applying each quarter's actions before its tick.

    Actions at quarter == quarters run after the final tick. Rejected actions
    are recorded and the plan carries on from the unchanged state.
    """
    if quarters < 0:
        raise ValueError(f"quarters must not be negative (got {quarters})")
    late = [a for a in actions if a.quarter > quarters]
    if late:
        raise ValueError(
            f"{len(late)} action(s) scheduled after the last quarter ({quarters}),"
            f" first: {late[0].kind} at quarter {late[0].quarter}"
        )

    by_quarter: dict[int, list[Action]] = defaultdict(list)
    for action in actions:
        by_quarter[action.quarter].append(action)

    result = PlanResult(state=state)
    for q in range(quarters + 1):
        for action in by_quarter.get(q, []):
            outcome = apply_action(result.state, action, tax_rate)
            if isinstance(outcome, Rejected):
                result.rejections.append((q, action, outcome))
            else:
                result.state = outcome
        if q < quarters:
            result.state = advance_quarter(result.state)
    return result
