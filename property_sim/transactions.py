"""Transaction engine: trust, purchase, sale, pay-down, refinance and settings.

Every operation takes the current PortfolioState and returns either a new
state or a Rejected value. Business refusals (not enough cash, borrowing cap,
LVR too high) are ordinary return values, never exceptions, and the input
state is left as it was.
"""

import dataclasses
import math
from dataclasses import dataclass
from enum import Enum

from property_sim.formulas import calc_lmi, calc_lvr, exceeds, max_loan_by_lvr
from property_sim.model import PortfolioState, Property, Trust, new_id
from property_sim.params import (
    TRUST_OPENING_FEE,
    PurchaseParams,
    default_property_name,
    default_trust_name,
)
from property_sim.tax import (
    DEFAULT_CGT_TAX_RATE,
    calc_capital_gain,
    calc_cgt_payable,
    calc_selling_costs,
    calc_taxable_gain,
    is_cgt_discount_eligible,
)
from property_sim.views import months_held, trust_debt


class Rejection(Enum):
    INSUFFICIENT_FUNDS = "insufficient_funds"
    BORROWING_CAPACITY_EXCEEDED = "borrowing_capacity_exceeded"
    CAPACITY_EXCEEDED = "capacity_exceeded"
    EXCESSIVE_RISK = "excessive_risk"
    INVALID_AMOUNT = "invalid_amount"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class Rejected:
    reason: Rejection
    message: str


TransactionResult = PortfolioState | Rejected


def _lookup(
    state: PortfolioState, trust_id: str, property_id: str | None = None,
) -> tuple[Trust, Property | None] | Rejected:
    trust = state.find_trust(trust_id)
    if trust is None:
        return Rejected(Rejection.NOT_FOUND, f"trust {trust_id} not found")
    if property_id is None:
        return trust, None
    prop = trust.find_property(property_id)
    if prop is None:
        return Rejected(Rejection.NOT_FOUND, f"property {property_id} not found in {trust.name}")
    return trust, prop


# --- Trusts ---

def open_trust(state: PortfolioState, name: str | None = None) -> TransactionResult:
    """Pay the opening fee and add an empty trust at the global borrowing default."""
    if exceeds(TRUST_OPENING_FEE, state.cash):
        return Rejected(
            Rejection.INSUFFICIENT_FUNDS,
            f"opening a trust costs ${TRUST_OPENING_FEE:,.0f} (cash ${state.cash:,.0f})",
        )
    trust = Trust(
        id=new_id(),
        name=name or default_trust_name(state),
        max_borrowing=state.max_borrowing_per_trust,
    )
    return dataclasses.replace(
        state,
        cash=state.cash - TRUST_OPENING_FEE,
        trusts=state.trusts + (trust,),
    )


# --- Purchase ---

@dataclass(frozen=True)
class PurchaseQuote:
    price: float
    lvr: float
    loan_amount: float
    lmi: float | None  # None: LVR above the insurable ceiling
    deposit: float
    other_costs: float

    @property
    def total_loan(self) -> float:
        return self.loan_amount + (self.lmi or 0.0)

    @property
    def total_cash_required(self) -> float:
        return self.deposit + self.other_costs

    @property
    def final_lvr(self) -> float:
        return calc_lvr(self.total_loan, self.price)


def quote_purchase(price: float, lvr: float, other_costs: float = 0.0) -> PurchaseQuote:
    """Loan, LMI and cash needed to buy at ``price`` with an ``lvr``% loan."""
    loan_amount = price * (lvr / 100)
    return PurchaseQuote(
        price=price,
        lvr=lvr,
        loan_amount=loan_amount,
        lmi=calc_lmi(loan_amount, price),
        deposit=price - loan_amount,
        other_costs=other_costs,
    )


def buy_property(
    state: PortfolioState,
    trust_id: str,
    purchase: PurchaseParams,
    lvr: float,
    other_costs: float = 0.0,
) -> TransactionResult:
    """Acquire a property inside a trust, funding the deposit and costs from cash.

    LMI (when LVR > 80%) is capitalised into the loan. Checks, in order:
    trust exists, inputs sane, LVR insurable, cash covers deposit + costs,
    trust debt stays within its cap.
    """
    found = _lookup(state, trust_id)
    if isinstance(found, Rejected):
        return found
    trust, _ = found

    if purchase.price <= 0:
        return Rejected(Rejection.INVALID_AMOUNT, f"price must be positive (got {purchase.price})")
    if not 0 <= lvr <= 100:
        return Rejected(Rejection.INVALID_AMOUNT, f"LVR must be within 0-100% (got {lvr})")
    if other_costs < 0:
        return Rejected(Rejection.INVALID_AMOUNT, f"other costs must not be negative (got {other_costs})")

    quote = quote_purchase(purchase.price, lvr, other_costs)
    if quote.lmi is None:
        return Rejected(
            Rejection.EXCESSIVE_RISK,
            f"LVR {lvr:.1f}% is above the insurable ceiling",
        )
    if exceeds(quote.total_cash_required, state.cash):
        return Rejected(
            Rejection.INSUFFICIENT_FUNDS,
            f"need ${quote.total_cash_required:,.0f} cash (have ${state.cash:,.0f})",
        )
    current_debt = trust_debt(trust)
    if exceeds(current_debt + quote.total_loan, trust.max_borrowing):
        return Rejected(
            Rejection.BORROWING_CAPACITY_EXCEEDED,
            f"{trust.name} debt would be ${current_debt + quote.total_loan:,.0f}"
            f" (cap ${trust.max_borrowing:,.0f})",
        )

    prop = Property(
        id=new_id(),
        name=purchase.name or default_property_name(state, purchase.category),
        category=purchase.category,
        value=purchase.price,
        original_price=purchase.price,
        loan=quote.total_loan,
        interest_rate=purchase.interest_rate,
        growth_rate=purchase.growth_rate,
        yield_rate=purchase.yield_rate,
        bought_at=state.absolute_month,
    )
    trust = dataclasses.replace(trust, properties=trust.properties + (prop,))
    return dataclasses.replace(
        state.with_trust(trust),
        cash=state.cash - quote.total_cash_required,
    )


# --- Sale ---

@dataclass(frozen=True)
class SaleQuote:
    sale_price: float
    original_price: float
    months_held: int
    discount_applied: bool
    selling_costs: float
    capital_gain: float
    taxable_amount: float
    tax_payable: float
    loan_payout: float

    @property
    def net_proceeds(self) -> float:
        return self.sale_price - self.loan_payout - self.selling_costs - self.tax_payable


def quote_sale(
    state: PortfolioState,
    trust_id: str,
    property_id: str,
    tax_rate: float = DEFAULT_CGT_TAX_RATE,
    apply_cgt_discount: bool | None = None,
) -> SaleQuote | Rejected:
    """Settlement figures for selling at current value.

    apply_cgt_discount=None grants the discount when held 12 months or more.
    """
    found = _lookup(state, trust_id, property_id)
    if isinstance(found, Rejected):
        return found
    _, prop = found

    held = months_held(state, prop)
    if apply_cgt_discount is None:
        apply_cgt_discount = is_cgt_discount_eligible(held)
    gain = calc_capital_gain(prop.value, prop.original_price)
    return SaleQuote(
        sale_price=prop.value,
        original_price=prop.original_price,
        months_held=held,
        discount_applied=apply_cgt_discount,
        selling_costs=calc_selling_costs(prop.value),
        capital_gain=gain,
        taxable_amount=calc_taxable_gain(gain, apply_cgt_discount),
        tax_payable=calc_cgt_payable(gain, tax_rate, apply_cgt_discount),
        loan_payout=prop.loan,
    )


def sell_property(
    state: PortfolioState,
    trust_id: str,
    property_id: str,
    tax_rate: float = DEFAULT_CGT_TAX_RATE,
    apply_cgt_discount: bool | None = None,
) -> TransactionResult:
    """Sell at current value: repay the loan, pay agent fees and CGT, bank the rest."""
    quote = quote_sale(state, trust_id, property_id, tax_rate, apply_cgt_discount)
    if isinstance(quote, Rejected):
        return quote
    trust = state.find_trust(trust_id)
    trust = dataclasses.replace(
        trust, properties=tuple(p for p in trust.properties if p.id != property_id),
    )
    return dataclasses.replace(
        state.with_trust(trust),
        cash=state.cash + quote.net_proceeds,
    )


# --- Loan pay-down ---

def pay_down_loan(
    state: PortfolioState, trust_id: str, property_id: str, amount: float,
) -> TransactionResult:
    """Repay principal from cash.

    A non-positive amount or one above the loan is INVALID_AMOUNT; an amount
    above available cash is INSUFFICIENT_FUNDS.
    """
    found = _lookup(state, trust_id, property_id)
    if isinstance(found, Rejected):
        return found
    trust, prop = found

    if amount <= 0:
        return Rejected(Rejection.INVALID_AMOUNT, f"pay-down amount must be positive (got {amount})")
    if exceeds(amount, prop.loan):
        return Rejected(
            Rejection.INVALID_AMOUNT,
            f"pay-down ${amount:,.0f} exceeds {prop.name} loan ${prop.loan:,.0f}",
        )
    if exceeds(amount, state.cash):
        return Rejected(
            Rejection.INSUFFICIENT_FUNDS,
            f"pay-down ${amount:,.0f} exceeds cash ${state.cash:,.0f}",
        )

    prop = dataclasses.replace(prop, loan=max(0.0, prop.loan - amount))
    return dataclasses.replace(
        state.with_trust(trust.with_property(prop)),
        cash=state.cash - amount,
    )


# --- Refinance / equity release ---

@dataclass(frozen=True)
class RefinanceQuote:
    value: float
    current_loan: float
    available_equity: float
    trust_remaining_capacity: float
    cash_out: float
    lmi: float | None

    @property
    def max_releasable(self) -> float:
        return min(self.available_equity, self.trust_remaining_capacity)

    @property
    def final_loan(self) -> float:
        return self.current_loan + self.cash_out + (self.lmi or 0.0)

    @property
    def final_lvr(self) -> float:
        return calc_lvr(self.final_loan, self.value)


def quote_refinance(
    state: PortfolioState, trust_id: str, property_id: str, cash_out: float = 0.0,
) -> RefinanceQuote | Rejected:
    """How much equity can be released, and the LMI on releasing ``cash_out``."""
    found = _lookup(state, trust_id, property_id)
    if isinstance(found, Rejected):
        return found
    trust, prop = found
    return RefinanceQuote(
        value=prop.value,
        current_loan=prop.loan,
        available_equity=max(0.0, max_loan_by_lvr(prop.value) - prop.loan),
        trust_remaining_capacity=max(0.0, trust.max_borrowing - trust_debt(trust)),
        cash_out=cash_out,
        lmi=calc_lmi(prop.loan + cash_out, prop.value),
    )


def release_for_target_lvr(prop: Property, target_lvr: float, max_releasable: float) -> float:
    """Whole-dollar cash-out that lifts the loan to ``target_lvr``% of value.

    Capped at ``max_releasable``; 0 when the loan is already at or above target.
    """
    needed = prop.value * (target_lvr / 100) - prop.loan
    if needed <= 0:
        return 0.0
    return float(math.floor(min(needed, max_releasable)))


def refinance(
    state: PortfolioState, trust_id: str, property_id: str, cash_out: float,
) -> TransactionResult:
    """Increase a property's loan to release cash.

    Limited by both the 88% LVR cap and the trust's remaining capacity. Any
    LMI is added to the loan; only ``cash_out`` reaches the cash balance.
    """
    quote = quote_refinance(state, trust_id, property_id, cash_out)
    if isinstance(quote, Rejected):
        return quote

    if cash_out <= 0:
        return Rejected(Rejection.INVALID_AMOUNT, f"cash-out must be positive (got {cash_out})")
    if exceeds(cash_out, quote.max_releasable):
        return Rejected(
            Rejection.CAPACITY_EXCEEDED,
            f"cash-out ${cash_out:,.0f} exceeds releasable ${quote.max_releasable:,.0f}",
        )
    if quote.lmi is None:
        return Rejected(
            Rejection.EXCESSIVE_RISK,
            f"resulting LVR {calc_lvr(quote.current_loan + cash_out, quote.value):.1f}%"
            " is above the insurable ceiling",
        )

    trust = state.find_trust(trust_id)
    prop = dataclasses.replace(trust.find_property(property_id), loan=quote.final_loan)
    return dataclasses.replace(
        state.with_trust(trust.with_property(prop)),
        cash=state.cash + cash_out,
    )


# --- Settings ---

def update_global_settings(
    state: PortfolioState,
    *,
    salary: float | None = None,
    savings_rate: float | None = None,
    max_borrowing_per_trust: float | None = None,
) -> PortfolioState:
    """Replace supplied policy knobs. Existing trusts keep their own caps."""
    changes = {}
    if salary is not None:
        changes["salary"] = salary
    if savings_rate is not None:
        changes["savings_rate"] = savings_rate
    if max_borrowing_per_trust is not None:
        changes["max_borrowing_per_trust"] = max_borrowing_per_trust
    return dataclasses.replace(state, **changes)


def update_trust_settings(
    state: PortfolioState,
    trust_id: str,
    *,
    name: str | None = None,
    max_borrowing: float | None = None,
) -> TransactionResult:
    found = _lookup(state, trust_id)
    if isinstance(found, Rejected):
        return found
    trust, _ = found
    changes = {}
    if name is not None:
        changes["name"] = name
    if max_borrowing is not None:
        changes["max_borrowing"] = max_borrowing
    return state.with_trust(dataclasses.replace(trust, **changes))


def update_property_settings(
    state: PortfolioState,
    trust_id: str,
    property_id: str,
    *,
    name: str | None = None,
    growth_rate: float | None = None,
    yield_rate: float | None = None,
    interest_rate: float | None = None,
) -> TransactionResult:
    found = _lookup(state, trust_id, property_id)
    if isinstance(found, Rejected):
        return found
    trust, prop = found
    changes = {
        k: v for k, v in [
            ("name", name),
            ("growth_rate", growth_rate),
            ("yield_rate", yield_rate),
            ("interest_rate", interest_rate),
        ]
        if v is not None
    }
    return state.with_trust(trust.with_property(dataclasses.replace(prop, **changes)))
