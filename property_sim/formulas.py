"""Pure financial formulas: interest, LVR cap, LMI and per-property cashflow."""

from dataclasses import dataclass

from property_sim.model import MONTHS_PER_YEAR, Property, PropertyCategory

# Equity release cap (loan-to-value)
MAX_LVR = 0.88

# LMI tiers: free up to 80% LVR, 1.5% of the loan up to 95%, unavailable above
LMI_THRESHOLD_LVR = 0.80
LMI_CEILING_LVR = 0.95
LMI_RATE = 0.015

# Tolerances for float money / ratio comparisons
MONEY_EPSILON = 1e-6
RATIO_EPSILON = 1e-9


def monthly_interest(loan: float, annual_rate: float) -> float:
    """Interest for one month on an interest-only loan (annual_rate in %)."""
    return loan * (annual_rate / 100) / 12


def max_loan_by_lvr(value: float) -> float:
    """Hard ceiling on a property's loan when releasing equity."""
    return value * MAX_LVR


def calc_lmi(loan_amount: float, value: float) -> float | None:
    """Lenders Mortgage Insurance premium for a loan against value.

    Returns None when LVR exceeds the 95% ceiling: no insurer will cover the
    loan and the caller must block the transaction.
    """
    if value <= 0:
        return None if loan_amount > 0 else 0.0
    lvr = loan_amount / value
    if lvr > LMI_CEILING_LVR + RATIO_EPSILON:
        return None
    if lvr > LMI_THRESHOLD_LVR + RATIO_EPSILON:
        return loan_amount * LMI_RATE
    return 0.0


def calc_lvr(loan: float, value: float) -> float:
    """Loan-to-value ratio in percent."""
    if value <= 0:
        return float("inf") if loan > 0 else 0.0
    return loan / value * 100


def exceeds(amount: float, limit: float) -> bool:
    """True when amount is above limit by more than float noise."""
    return amount - limit > MONEY_EPSILON


# Residential operating expenses (rates, insurance, management): 2% of value/year
RESIDENTIAL_EXPENSE_RATE = 0.02


@dataclass(frozen=True)
class PeriodCashflow:
    rent: float
    expenses: float
    interest: float

    @property
    def net(self) -> float:
        return self.rent - self.interest - self.expenses


def property_cashflow(prop: Property, months: int) -> PeriodCashflow:
    """Rent, operating expenses and loan interest over ``months`` months.

    Residential yield is gross, so a flat 2%-of-value expense is charged.
    Commercial yield is already net of outgoings.
    """
    rent = prop.value * (prop.yield_rate / 100) / MONTHS_PER_YEAR * months
    match prop.category:
        case PropertyCategory.RESIDENTIAL_GROWTH | PropertyCategory.RESIDENTIAL_CASHFLOW:
            expenses = prop.value * RESIDENTIAL_EXPENSE_RATE / MONTHS_PER_YEAR * months
        case PropertyCategory.COMMERCIAL:
            expenses = 0.0
    interest = monthly_interest(prop.loan, prop.interest_rate) * months
    return PeriodCashflow(rent=rent, expenses=expenses, interest=interest)


def grow_value(value: float, growth_rate: float, months: int) -> float:
    """Linear (non-compounding) growth over a part-year period. Floors at zero."""
    return max(0.0, value * (1 + (growth_rate / 100) * (months / MONTHS_PER_YEAR)))
