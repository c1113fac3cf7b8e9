"""Portfolio domain model: properties, trusts and the portfolio snapshot."""

import dataclasses
import uuid
from dataclasses import dataclass
from enum import Enum

MONTHS_PER_YEAR = 12


class PropertyCategory(Enum):
    """Closed set of property kinds. Each kind has its own rent/expense rule."""

    RESIDENTIAL_GROWTH = "residential_growth"
    RESIDENTIAL_CASHFLOW = "residential_cashflow"
    COMMERCIAL = "commercial"

    @property
    def is_residential(self) -> bool:
        return self is not PropertyCategory.COMMERCIAL


def new_id() -> str:
    """Generate an opaque identifier for a trust or property."""
    return uuid.uuid4().hex


@dataclass(frozen=True)
class Property:
    """Income-producing property held inside a trust.

    Rates are annual percentages. ``yield_rate`` is gross for residential
    categories and net of expenses for commercial.
    """

    id: str
    name: str
    category: PropertyCategory
    value: float
    original_price: float
    loan: float
    interest_rate: float
    growth_rate: float
    yield_rate: float
    bought_at: int  # absolute month index (year * 12 + month)

    def __post_init__(self):
        if self.value < 0:
            raise ValueError(f"{self.name}: value must not be negative ({self.value})")
        if self.loan < 0:
            raise ValueError(f"{self.name}: loan must not be negative ({self.loan})")
        if self.original_price <= 0:
            raise ValueError(
                f"{self.name}: original price must be positive ({self.original_price})"
            )


@dataclass(frozen=True)
class Trust:
    """Borrowing container with its own capacity cap."""

    id: str
    name: str
    max_borrowing: float
    properties: tuple[Property, ...] = ()

    def find_property(self, property_id: str) -> Property | None:
        for prop in self.properties:
            if prop.id == property_id:
                return prop
        return None

    def with_property(self, prop: Property) -> "Trust":
        """Return a copy with the property of the same id replaced."""
        return dataclasses.replace(
            self,
            properties=tuple(prop if p.id == prop.id else p for p in self.properties),
        )


@dataclass(frozen=True)
class HistoryEntry:
    label: str
    net_worth: float
    cash: float
    debt: float


@dataclass(frozen=True)
class PortfolioState:
    """Aggregate root. Every operation returns a new instance."""

    year: int = 0
    month: int = 0
    cash: float = 0.0
    salary: float = 0.0
    savings_rate: float = 0.0  # % of salary saved per year
    max_borrowing_per_trust: float = 0.0
    trusts: tuple[Trust, ...] = ()
    history: tuple[HistoryEntry, ...] = ()
    setup_complete: bool = False

    def __post_init__(self):
        if not 0 <= self.month < MONTHS_PER_YEAR:
            raise ValueError(f"month must be within 0-11 (got {self.month})")
        if self.year < 0:
            raise ValueError(f"year must not be negative (got {self.year})")

    @property
    def absolute_month(self) -> int:
        return self.year * MONTHS_PER_YEAR + self.month

    def find_trust(self, trust_id: str) -> Trust | None:
        for trust in self.trusts:
            if trust.id == trust_id:
                return trust
        return None

    def find_trust_by_name(self, name: str) -> Trust | None:
        for trust in self.trusts:
            if trust.name == name:
                return trust
        return None

    def with_trust(self, trust: Trust) -> "PortfolioState":
        """Return a copy with the trust of the same id replaced."""
        return dataclasses.replace(
            self,
            trusts=tuple(trust if t.id == trust.id else t for t in self.trusts),
        )

    def all_properties(self) -> list[tuple[Trust, Property]]:
        return [(t, p) for t in self.trusts for p in t.properties]


INITIAL_STATE = PortfolioState()
