"""Property Portfolio Simulation Package."""

from property_sim.model import (
    PropertyCategory,
    Property,
    Trust,
    HistoryEntry,
    PortfolioState,
    INITIAL_STATE,
)
from property_sim.formulas import (
    monthly_interest,
    max_loan_by_lvr,
    calc_lmi,
    calc_lvr,
    property_cashflow,
    MAX_LVR,
)
from property_sim.params import (
    SetupParams,
    PurchaseParams,
    PurchasePreset,
    PURCHASE_PRESETS,
    TRUST_OPENING_FEE,
)
from property_sim.transactions import (
    Rejection,
    Rejected,
    open_trust,
    buy_property,
    sell_property,
    pay_down_loan,
    refinance,
    quote_purchase,
    quote_sale,
    quote_refinance,
    update_global_settings,
    update_trust_settings,
    update_property_settings,
)
from property_sim.simulation import (
    start_simulation,
    advance_quarter,
    advance_quarters,
)
from property_sim.views import (
    total_value,
    total_debt,
    total_equity,
    net_worth,
    annual_cashflow,
    portfolio_summary,
)

__all__ = [
    "PropertyCategory",
    "Property",
    "Trust",
    "HistoryEntry",
    "PortfolioState",
    "INITIAL_STATE",
    "monthly_interest",
    "max_loan_by_lvr",
    "calc_lmi",
    "calc_lvr",
    "property_cashflow",
    "MAX_LVR",
    "SetupParams",
    "PurchaseParams",
    "PurchasePreset",
    "PURCHASE_PRESETS",
    "TRUST_OPENING_FEE",
    "Rejection",
    "Rejected",
    "open_trust",
    "buy_property",
    "sell_property",
    "pay_down_loan",
    "refinance",
    "quote_purchase",
    "quote_sale",
    "quote_refinance",
    "update_global_settings",
    "update_trust_settings",
    "update_property_settings",
    "start_simulation",
    "advance_quarter",
    "advance_quarters",
    "total_value",
    "total_debt",
    "total_equity",
    "net_worth",
    "annual_cashflow",
    "portfolio_summary",
]
