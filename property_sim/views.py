"""Read-only projections of a portfolio. Recomputed on every call, never stored."""

from property_sim.formulas import calc_lvr, max_loan_by_lvr, property_cashflow
from property_sim.model import MONTHS_PER_YEAR, PortfolioState, Property, Trust


def total_value(state: PortfolioState) -> float:
    return sum(p.value for _, p in state.all_properties())


def total_debt(state: PortfolioState) -> float:
    return sum(p.loan for _, p in state.all_properties())


def total_equity(state: PortfolioState) -> float:
    return total_value(state) - total_debt(state)


def net_worth(state: PortfolioState) -> float:
    """Property equity plus cash."""
    return total_equity(state) + state.cash


def total_properties(state: PortfolioState) -> int:
    return sum(len(t.properties) for t in state.trusts)


def annual_cashflow(state: PortfolioState) -> float:
    """Yearly rent less interest and expenses across the portfolio.

    Uses the same per-category rule as the quarterly tick, so one quarter of
    this equals the property part of the next tick's cash movement.
    """
    return sum(property_cashflow(p, MONTHS_PER_YEAR).net for _, p in state.all_properties())


def trust_debt(trust: Trust) -> float:
    return sum(p.loan for p in trust.properties)


def trust_value(trust: Trust) -> float:
    return sum(p.value for p in trust.properties)


def capacity_used_percent(trust: Trust) -> float:
    debt = trust_debt(trust)
    if trust.max_borrowing <= 0:
        return float("inf") if debt > 0 else 0.0
    return debt / trust.max_borrowing * 100


def property_equity(prop: Property) -> float:
    return prop.value - prop.loan


def usable_equity(prop: Property) -> float:
    """Equity that could be released without breaching the LVR cap."""
    return max(0.0, max_loan_by_lvr(prop.value) - prop.loan)


def property_lvr(prop: Property) -> float:
    return calc_lvr(prop.loan, prop.value)


def property_profit(prop: Property) -> float:
    return prop.value - prop.original_price


def property_profit_percent(prop: Property) -> float:
    return property_profit(prop) / prop.original_price * 100


def months_held(state: PortfolioState, prop: Property) -> int:
    return state.absolute_month - prop.bought_at


def portfolio_summary(state: PortfolioState) -> dict:
    """Flatten every derived figure into plain dicts for printing/charting."""
    trusts = []
    for trust in state.trusts:
        properties = []
        for prop in trust.properties:
            annual = property_cashflow(prop, MONTHS_PER_YEAR)
            properties.append({
                "id": prop.id,
                "name": prop.name,
                "category": prop.category.value,
                "value": prop.value,
                "original_price": prop.original_price,
                "loan": prop.loan,
                "equity": property_equity(prop),
                "usable_equity": usable_equity(prop),
                "lvr": property_lvr(prop),
                "profit": property_profit(prop),
                "profit_percent": property_profit_percent(prop),
                "annual_cashflow": annual.net,
                "months_held": months_held(state, prop),
            })
        trusts.append({
            "id": trust.id,
            "name": trust.name,
            "max_borrowing": trust.max_borrowing,
            "value": trust_value(trust),
            "debt": trust_debt(trust),
            "capacity_used_percent": capacity_used_percent(trust),
            "properties": properties,
        })
    return {
        "year": state.year,
        "month": state.month,
        "cash": state.cash,
        "total_value": total_value(state),
        "total_debt": total_debt(state),
        "total_equity": total_equity(state),
        "net_worth": net_worth(state),
        "annual_cashflow": annual_cashflow(state),
        "total_properties": total_properties(state),
        "trusts": trusts,
    }
