"""Setup defaults, purchase presets and property auto-naming."""

from dataclasses import dataclass

from property_sim.model import PortfolioState, PropertyCategory
from property_sim.simulation import start_simulation

TRUST_OPENING_FEE = 3000.0  # legal/setup fee per trust


@dataclass
class SetupParams:
    """Starting position for a new simulation."""

    salary: float = 150_000
    savings_rate: float = 20.0  # % of salary saved annually
    initial_cash: float = 200_000
    max_borrowing_per_trust: float = 1_000_000

    def start(self) -> PortfolioState:
        return start_simulation(
            self.salary, self.savings_rate, self.initial_cash, self.max_borrowing_per_trust,
        )


@dataclass(frozen=True)
class PurchaseParams:
    """What the buyer chooses for a new property. Empty name → auto-named."""

    category: PropertyCategory
    price: float
    interest_rate: float
    growth_rate: float
    yield_rate: float
    name: str = ""


@dataclass(frozen=True)
class PurchasePreset:
    """Typical starting figures for a category (the buy form's defaults)."""

    price: float
    lvr: float
    interest_rate: float
    growth_rate: float
    yield_rate: float
    other_costs: float  # stamp duty, legal and buyer's agent fees

    def to_purchase(self, category: PropertyCategory, name: str = "") -> PurchaseParams:
        return PurchaseParams(
            category=category,
            price=self.price,
            interest_rate=self.interest_rate,
            growth_rate=self.growth_rate,
            yield_rate=self.yield_rate,
            name=name,
        )


PURCHASE_PRESETS: dict[PropertyCategory, PurchasePreset] = {
    PropertyCategory.RESIDENTIAL_GROWTH: PurchasePreset(
        price=500_000, lvr=88, interest_rate=6.0, growth_rate=20.0, yield_rate=5.0,
        other_costs=40_000,
    ),
    # Higher yield, lower growth
    PropertyCategory.RESIDENTIAL_CASHFLOW: PurchasePreset(
        price=400_000, lvr=88, interest_rate=6.0, growth_rate=4.0, yield_rate=7.0,
        other_costs=32_000,
    ),
    PropertyCategory.COMMERCIAL: PurchasePreset(
        price=1_000_000, lvr=65, interest_rate=6.0, growth_rate=4.0, yield_rate=5.0,
        other_costs=40_000,
    ),
}


def purchase_preset(category: PropertyCategory) -> PurchasePreset:
    return PURCHASE_PRESETS[category]


def default_property_name(state: PortfolioState, category: PropertyCategory) -> str:
    """Next free auto-name: "IP n" for residential, "Commercial n" otherwise."""
    held = [p for _, p in state.all_properties() if p.category.is_residential == category.is_residential]
    prefix = "IP" if category.is_residential else "Commercial"
    return f"{prefix} {len(held) + 1}"


def default_trust_name(state: PortfolioState) -> str:
    return f"Trust {len(state.trusts) + 1}"
