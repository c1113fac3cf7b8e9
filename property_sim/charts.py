"""Chart generation for portfolio history and trust composition."""

from pathlib import Path

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import matplotlib.ticker as ticker

from property_sim.model import HistoryEntry, PortfolioState
from property_sim.views import trust_debt, trust_value

SERIES_COLORS = {
    "net_worth": "#3b82f6",  # blue
    "cash": "#10b981",       # green
    "debt": "#ef4444",       # red
}


def _format_money_axis(ax: plt.Axes):
    """Dollar tick labels, abbreviated to k / M."""
    def fmt(x, _):
        if abs(x) >= 1_000_000:
            return f"${x / 1_000_000:.1f}M"
        if abs(x) >= 1_000:
            return f"${x / 1_000:.0f}k"
        return f"${x:,.0f}"
    ax.yaxis.set_major_formatter(ticker.FuncFormatter(fmt))


def plot_history(history: tuple[HistoryEntry, ...] | list[HistoryEntry], output_path: Path, name: str = "") -> Path:
    """Generate a line chart of net worth, cash and debt per quarter.

    Args:
        history: PortfolioState.history entries, oldest first.
        output_path: directory to save the PNG.
        name: optional suffix for the output filename (e.g. "a" → "history-a.png").

    Returns:
        Path to the generated PNG file.
    """
    if not history:
        raise ValueError("No history entries to plot")

    fig, ax = plt.subplots(figsize=(14, 8))
    x = range(len(history))
    for key, label in [("net_worth", "Net Worth"), ("cash", "Cash"), ("debt", "Debt")]:
        values = [getattr(entry, key) for entry in history]
        ax.plot(x, values, label=label, color=SERIES_COLORS[key], linewidth=2)

    # One tick per year: label only the first quarter carrying each label
    ticks, labels = [], []
    for i, entry in enumerate(history):
        if not labels or entry.label != labels[-1]:
            ticks.append(i)
            labels.append(entry.label)
    ax.set_xticks(ticks)
    ax.set_xticklabels(labels)

    ax.set_xlabel("Year")
    ax.set_ylabel("Amount")
    ax.set_title("Portfolio history")
    ax.legend(loc="upper left")
    ax.grid(True, alpha=0.3)
    _format_money_axis(ax)

    output_path.mkdir(parents=True, exist_ok=True)
    suffix = f"-{name}" if name else ""
    filepath = output_path / f"history{suffix}.png"
    fig.tight_layout()
    fig.savefig(filepath, dpi=150)
    plt.close(fig)
    return filepath


def plot_trust_equity(state: PortfolioState, output_path: Path, name: str = "") -> Path:
    """Bar chart of debt vs equity per trust, with each trust's borrowing cap."""
    if not state.trusts:
        raise ValueError("No trusts to plot")

    names = [t.name for t in state.trusts]
    debts = [trust_debt(t) for t in state.trusts]
    equities = [max(0.0, trust_value(t) - d) for t, d in zip(state.trusts, debts)]

    fig, ax = plt.subplots(figsize=(max(6, 2 * len(names)), 6))
    x = range(len(names))
    ax.bar(x, debts, color=SERIES_COLORS["debt"], label="Debt")
    ax.bar(x, equities, bottom=debts, color=SERIES_COLORS["net_worth"], label="Equity")
    for i, trust in enumerate(state.trusts):
        ax.hlines(trust.max_borrowing, i - 0.4, i + 0.4, colors="#888888", linestyles="--", linewidth=1)
    ax.set_xticks(list(x))
    ax.set_xticklabels(names)
    ax.set_ylabel("Amount")
    ax.set_title("Trust composition (dashed: borrowing cap)")
    ax.legend(loc="upper left")
    ax.grid(True, axis="y", alpha=0.3)
    _format_money_axis(ax)

    output_path.mkdir(parents=True, exist_ok=True)
    suffix = f"-{name}" if name else ""
    filepath = output_path / f"trusts{suffix}.png"
    fig.tight_layout()
    fig.savefig(filepath, dpi=150)
    plt.close(fig)
    return filepath
