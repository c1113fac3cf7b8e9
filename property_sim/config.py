"""TOML config loader with CLI > config > default resolution."""

import argparse
import sys
import tomllib
from pathlib import Path
from typing import Callable

from property_sim.formatting import parse_formatted_number
from property_sim.params import SetupParams
from property_sim.tax import DEFAULT_CGT_TAX_RATE

DEFAULT_CONFIG_PATH = Path("config.toml")

_SETUP = SetupParams()

DEFAULTS = {
    "salary": _SETUP.salary,
    "savings_rate": _SETUP.savings_rate,
    "cash": _SETUP.initial_cash,
    "max_borrowing": _SETUP.max_borrowing_per_trust,
    "quarters": 40,
    "tax_rate": DEFAULT_CGT_TAX_RATE,
}

# Keys that may be written as "200,000" / "$40,000" in the config file
_MONEY_KEYS = ("salary", "cash", "max_borrowing")
_ACTION_MONEY_KEYS = ("price", "other_costs", "amount", "cash_out", "max_borrowing", "salary")


def _to_number(value):
    if isinstance(value, str):
        return parse_formatted_number(value)
    return value


def load_config(path: Path | None = None) -> dict:
    """Load TOML config file. Returns empty dict if file doesn't exist."""
    if path is None:
        path = DEFAULT_CONFIG_PATH
    if not path.exists():
        return {}
    try:
        with open(path, "rb") as f:
            raw = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        print(f"Failed to read config file: {path}: {e}", file=sys.stderr)
        raise SystemExit(1)
    try:
        return _normalize(raw)
    except ValueError as e:
        print(f"Invalid value in config file: {path}: {e}", file=sys.stderr)
        raise SystemExit(1)


def _normalize(raw: dict) -> dict:
    # Accept a [setup] table as well as top-level keys
    setup = raw.pop("setup", None)
    if isinstance(setup, dict):
        for key, value in setup.items():
            raw.setdefault(key, value)
    for key in _MONEY_KEYS:
        if key in raw:
            raw[key] = _to_number(raw[key])
    # Normalize actions: single table → list, money strings → numbers
    if "actions" in raw:
        actions = raw["actions"]
        if isinstance(actions, dict):
            actions = [actions]
        normalized = []
        for action in actions:
            action = dict(action)
            for key in _ACTION_MONEY_KEYS:
                if key in action:
                    action[key] = _to_number(action[key])
            normalized.append(action)
        raw["actions"] = normalized
    return raw


def create_parser(description: str) -> argparse.ArgumentParser:
    """Create argparse parser with shared simulation flags."""
    d = DEFAULTS
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument("--config", type=Path, default=None, help="config file path (default: config.toml)")
    parser.add_argument("--salary", type=parse_formatted_number, default=None, help=f"annual salary (default: {d['salary']:,.0f})")
    parser.add_argument("--savings-rate", type=float, default=None, help=f"%% of salary saved per year (default: {d['savings_rate']})")
    parser.add_argument("--cash", type=parse_formatted_number, default=None, help=f"starting cash (default: {d['cash']:,.0f})")
    parser.add_argument("--max-borrowing", type=parse_formatted_number, default=None, help=f"default borrowing cap per trust (default: {d['max_borrowing']:,.0f})")
    parser.add_argument("--quarters", type=int, default=None, help=f"quarters to simulate (default: {d['quarters']})")
    parser.add_argument("--tax-rate", type=float, default=None, help=f"marginal tax rate %% applied to capital gains on sale (default: {d['tax_rate']})")
    return parser


def resolve(args: argparse.Namespace, config: dict) -> dict:
    """Resolve values with priority: CLI flag > config.toml > hardcoded default."""
    resolved = {}
    for key, default in DEFAULTS.items():
        cli_val = getattr(args, key, None)
        resolved[key] = cli_val if cli_val is not None else config.get(key, default)
    return resolved


def build_setup(r: dict) -> SetupParams:
    """Build SetupParams from resolved config dict."""
    return SetupParams(
        salary=r["salary"],
        savings_rate=r["savings_rate"],
        initial_cash=r["cash"],
        max_borrowing_per_trust=r["max_borrowing"],
    )


def parse_args(
    description: str,
    add_args_fn: Callable[[argparse.ArgumentParser], None] | None = None,
    argv: list[str] | None = None,
) -> tuple[dict, list[dict], argparse.Namespace]:
    """Parse CLI args, load config, resolve values.

    Returns (resolved_dict, raw_actions, namespace).
    raw_actions: the config's [[actions]] tables, unvalidated.
    namespace: raw argparse.Namespace (for extra CLI args added via add_args_fn).
    """
    parser = create_parser(description)
    if add_args_fn:
        add_args_fn(parser)
    args = parser.parse_args(argv)
    config = load_config(args.config)
    r = resolve(args, config)
    return r, config.get("actions", []), args
