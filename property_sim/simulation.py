"""Time advancement engine: setup and the fixed quarterly tick."""

import dataclasses

from property_sim.formulas import grow_value, property_cashflow
from property_sim.model import MONTHS_PER_YEAR, HistoryEntry, PortfolioState
from property_sim.views import net_worth, total_debt

MONTHS_PER_QUARTER = 3
START_LABEL = "Start"


def start_simulation(
    salary: float,
    savings_rate: float,
    initial_cash: float,
    max_borrowing_per_trust: float,
) -> PortfolioState:
    """Create the initial portfolio. Raises ValueError on negative inputs."""
    for label, v in [
        ("salary", salary),
        ("savings_rate", savings_rate),
        ("initial_cash", initial_cash),
        ("max_borrowing_per_trust", max_borrowing_per_trust),
    ]:
        if v < 0:
            raise ValueError(f"{label} must not be negative (got {v})")
    return PortfolioState(
        cash=initial_cash,
        salary=salary,
        savings_rate=savings_rate,
        max_borrowing_per_trust=max_borrowing_per_trust,
        history=(HistoryEntry(START_LABEL, net_worth=initial_cash, cash=initial_cash, debt=0.0),),
        setup_complete=True,
    )


def quarterly_savings(salary: float, savings_rate: float) -> float:
    """Share of annual salary saved each quarter (savings_rate in %)."""
    return salary * (savings_rate / 100) / 4


def advance_calendar(year: int, month: int, months: int = MONTHS_PER_QUARTER) -> tuple[int, int]:
    """Step the calendar forward. Handles at most one year rollover."""
    month += months
    if month >= MONTHS_PER_YEAR:
        year += 1
        month -= MONTHS_PER_YEAR
    return year, month


def history_label(year: int) -> str:
    return f"Y{year}"


def advance_quarter(state: PortfolioState) -> PortfolioState:
    """Advance three months: collect rent, pay interest and expenses, grow values.

    Cashflow is computed on pre-growth values. Loans are interest-only and are
    never changed here; interest is a cash outflow. Borrowing caps are not
    re-checked, so growth can leave a trust over its limit.
    """
    cash_delta = 0.0
    trusts = []
    for trust in state.trusts:
        properties = []
        for prop in trust.properties:
            cash_delta += property_cashflow(prop, MONTHS_PER_QUARTER).net
            new_value = grow_value(prop.value, prop.growth_rate, MONTHS_PER_QUARTER)
            properties.append(dataclasses.replace(prop, value=new_value))
        trusts.append(dataclasses.replace(trust, properties=tuple(properties)))

    cash_delta += quarterly_savings(state.salary, state.savings_rate)
    year, month = advance_calendar(state.year, state.month)

    next_state = dataclasses.replace(
        state,
        year=year,
        month=month,
        cash=state.cash + cash_delta,
        trusts=tuple(trusts),
    )
    entry = HistoryEntry(
        label=history_label(year),
        net_worth=net_worth(next_state),
        cash=next_state.cash,
        debt=total_debt(next_state),
    )
    return dataclasses.replace(next_state, history=state.history + (entry,))


def advance_quarters(state: PortfolioState, quarters: int) -> PortfolioState:
    if quarters < 0:
        raise ValueError(f"quarters must not be negative (got {quarters})")
    for _ in range(quarters):
        state = advance_quarter(state)
    return state
