"""CLI entry point: run a configured action plan and print the portfolio report."""

import sys
from pathlib import Path

from property_sim.config import build_setup, parse_args
from property_sim.formatting import format_currency, format_date, format_percentage
from property_sim.model import HistoryEntry
from property_sim.scenario import Action, parse_actions, run_plan
from property_sim.simulation import quarterly_savings
from property_sim.transactions import Rejected
from property_sim.views import portfolio_summary


def _add_cli_args(parser):
    parser.add_argument(
        "--chart", type=Path, default=None,
        help="write history/trust charts (PNG) into this directory",
    )
    parser.add_argument(
        "--name", type=str, default="",
        help="chart filename suffix (e.g. a → history-a.png)",
    )


def _print_header(r: dict, actions: list[Action]):
    print("=" * 80)
    print(f"Property portfolio simulation ({r['quarters']} quarters, {r['quarters'] / 4:.1f} years)")
    print(
        f"  Salary: {format_currency(r['salary'])} / saving {r['savings_rate']:.1f}%"
        f" ({format_currency(quarterly_savings(r['salary'], r['savings_rate']))} per quarter)"
    )
    print(f"  Starting cash: {format_currency(r['cash'])} / trust borrowing cap: {format_currency(r['max_borrowing'])}")
    print(f"  CGT marginal rate on sales: {r['tax_rate']:.1f}%")
    print(f"  Scheduled actions: {len(actions)}")
    print("=" * 80)
    print()


def _print_rejections(rejections: list[tuple[int, Action, Rejected]]):
    if not rejections:
        return
    print("[Rejected actions]")
    print("-" * 80)
    for quarter, action, rejected in rejections:
        target = " / ".join(x for x in (action.trust, action.property) if x)
        print(f"  Q{quarter:<4} {action.kind:<18} {target:<24} {rejected.reason.value}: {rejected.message}")
    print("-" * 80)
    print()


def _print_history(history: tuple[HistoryEntry, ...]):
    print("[Yearly history]")
    print("-" * 80)
    print(f"{'Label':<8} {'Net worth':>16} {'Cash':>16} {'Debt':>16}")
    print("-" * 80)
    for i, entry in enumerate(history):
        # Start, every fourth quarter, and the final entry
        if i % 4 == 0 or i == len(history) - 1:
            print(
                f"{entry.label:<8} "
                f"{format_currency(entry.net_worth):>16} "
                f"{format_currency(entry.cash):>16} "
                f"{format_currency(entry.debt):>16}"
            )
    print("-" * 80)
    print()


def _print_portfolio(summary: dict):
    print("[Trusts and properties]")
    for trust in summary["trusts"]:
        print("-" * 100)
        print(
            f"{trust['name']}: debt {format_currency(trust['debt'])}"
            f" of {format_currency(trust['max_borrowing'])}"
            f" ({format_percentage(trust['capacity_used_percent'])} used)"
        )
        if not trust["properties"]:
            print("  (no properties)")
            continue
        print(
            f"  {'Property':<16} {'Category':<22} {'Value':>13} {'Loan':>13}"
            f" {'LVR':>8} {'Profit':>9} {'Cashflow/yr':>12}"
        )
        for p in trust["properties"]:
            print(
                f"  {p['name']:<16} {p['category']:<22} "
                f"{format_currency(p['value']):>13} "
                f"{format_currency(p['loan']):>13} "
                f"{format_percentage(p['lvr']):>8} "
                f"{format_percentage(p['profit_percent']):>9} "
                f"{format_currency(p['annual_cashflow']):>12}"
            )
    print("-" * 100)
    print()


def _print_summary(summary: dict):
    print("=" * 80)
    print(f"[Summary at {format_date(summary['year'], summary['month'])}]")
    print("=" * 80)
    print(f"  Properties:       {summary['total_properties']}")
    print(f"  Total value:      {format_currency(summary['total_value']):>16}")
    print(f"  Total debt:       {format_currency(summary['total_debt']):>16}")
    print(f"  Equity:           {format_currency(summary['total_equity']):>16}")
    print(f"  Cash:             {format_currency(summary['cash']):>16}")
    print(f"  Net worth:        {format_currency(summary['net_worth']):>16}")
    print(f"  Annual cashflow:  {format_currency(summary['annual_cashflow']):>16}")


def main(argv: list[str] | None = None):
    """Execute the configured plan and print the report"""
    r, raw_actions, args = parse_args("Property portfolio simulation", _add_cli_args, argv)

    try:
        actions = parse_actions(raw_actions)
        state = build_setup(r).start()
        result = run_plan(state, actions, r["quarters"], tax_rate=r["tax_rate"])
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(1)

    summary = portfolio_summary(result.state)
    _print_header(r, actions)
    _print_rejections(result.rejections)
    _print_history(result.state.history)
    _print_portfolio(summary)
    _print_summary(summary)

    if args.chart is not None:
        from property_sim.charts import plot_history, plot_trust_equity

        print("Generating charts...", file=sys.stderr)
        path = plot_history(result.state.history, args.chart, name=args.name)
        print(f"  → {path}", file=sys.stderr)
        if result.state.trusts:
            path = plot_trust_equity(result.state, args.chart, name=args.name)
            print(f"  → {path}", file=sys.stderr)


if __name__ == "__main__":
    main()
