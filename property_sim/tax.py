"""Capital gains tax and selling cost calculations on property disposal.

Simplified policy model, not real tax law:
  - Selling costs (agent fees) are 2% of the sale price
  - Capital gain = sale price - selling costs - original purchase price
  - 50% CGT discount on a positive gain when the asset was held 12+ months
  - Tax = taxable gain x marginal rate; losses produce no refund
"""

SELLING_COST_RATE = 0.02
CGT_DISCOUNT_RATE = 0.5
CGT_DISCOUNT_MIN_MONTHS = 12
DEFAULT_CGT_TAX_RATE = 30.0  # % marginal rate assumed when the caller gives none


def calc_selling_costs(value: float) -> float:
    return value * SELLING_COST_RATE


def calc_capital_gain(value: float, original_price: float) -> float:
    """Capital gain on sale (negative for a loss)."""
    return value - calc_selling_costs(value) - original_price


def calc_taxable_gain(capital_gain: float, apply_discount: bool) -> float:
    """Apply the CGT discount. Losses are never discounted."""
    if apply_discount and capital_gain > 0:
        return capital_gain * CGT_DISCOUNT_RATE
    return capital_gain


def calc_cgt_payable(capital_gain: float, tax_rate: float, apply_discount: bool) -> float:
    """Tax owed on a capital gain (tax_rate in %). Never negative."""
    taxable = calc_taxable_gain(capital_gain, apply_discount)
    return max(0.0, taxable) * (tax_rate / 100)


def is_cgt_discount_eligible(months_held: int) -> bool:
    return months_held >= CGT_DISCOUNT_MIN_MONTHS
