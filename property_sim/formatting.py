"""Display helpers for money, numbers and percentages (whole-dollar, en-US style)."""

import math


def format_currency(amount: float) -> str:
    """Format as whole dollars, e.g. 1234.56 -> "$1,235", -50 -> "-$50".

    Halves round away from zero.
    """
    dollars = math.floor(abs(amount) + 0.5)
    if amount < 0 and dollars > 0:
        return f"-${dollars:,}"
    return f"${dollars:,}"


def format_number(amount: float) -> str:
    """Thousands separators, at most 3 decimals, trailing zeros dropped."""
    if float(amount).is_integer():
        return f"{int(amount):,}"
    return f"{amount:,.3f}".rstrip("0").rstrip(".")


def parse_formatted_number(value: str) -> float:
    """Parse user-entered money such as "1,250,000" or "$40,000".

    Empty input parses as 0. Raises ValueError for anything non-numeric.
    """
    cleaned = value.replace(",", "").replace("$", "").strip()
    if not cleaned:
        return 0.0
    try:
        return float(cleaned)
    except ValueError:
        raise ValueError(f"not a number: {value!r}") from None


def format_percentage(rate: float) -> str:
    return f"{rate:.2f}%"


def format_date(year: int, month: int) -> str:
    """Simulation calendar label, e.g. "Y3 M6"."""
    return f"Y{year} M{month}"
