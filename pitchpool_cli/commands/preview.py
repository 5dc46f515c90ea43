"""
CLI Preview Command

Winnings calculator: what a stake would return if its side wins,
and how the pool split moves.

Usage:
    pitchpool preview --side yes --amount 100 --yes-pool 7000 --no-pool 3000 [--json]
"""

from __future__ import annotations

import json
import sys
from argparse import Namespace
from dataclasses import asdict, dataclass
from decimal import Decimal
from typing import Any

from core.schemas.errors import PitchpoolException
from core.schemas.numeric import quantize_currency, to_decimal
from core.schemas.poll import PoolAccount, Side
from engine.payouts import preview_stake


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_REJECTED = 2


@dataclass
class PreviewSummary:
    """Calculator output for CLI display."""
    side: str
    stake: str
    gross_winnings: str
    platform_fee: str
    net_profit: str
    net_payout: str
    roi_pct: str
    current_yes_pct: int
    current_no_pct: int
    after_yes_pct: int
    after_no_pct: int
    underdog: bool

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def build_summary(amount: Decimal, side: Side, yes_pool: Decimal, no_pool: Decimal,
                  fee_rate: Decimal) -> PreviewSummary:
    pool = PoolAccount(yes_pool=yes_pool, no_pool=no_pool)
    preview = preview_stake(amount, side, pool, fee_rate)
    w = preview.winnings
    return PreviewSummary(
        side=side.value,
        stake=str(quantize_currency(amount)),
        gross_winnings=str(quantize_currency(w.gross_winnings)),
        platform_fee=str(quantize_currency(w.platform_fee)),
        net_profit=str(quantize_currency(w.net_profit)),
        net_payout=str(quantize_currency(w.net_payout)),
        roi_pct=str(w.roi.quantize(Decimal("0.1"))),
        current_yes_pct=preview.current.yes,
        current_no_pct=preview.current.no,
        after_yes_pct=preview.after_stake.yes,
        after_no_pct=preview.after_stake.no,
        underdog=preview.is_underdog,
    )


def print_summary_human(summary: PreviewSummary) -> None:
    print(f"stake: {summary.stake} on {summary.side.upper()}")
    print(f"pool now: YES {summary.current_yes_pct}% / NO {summary.current_no_pct}%")
    print(f"pool after: YES {summary.after_yes_pct}% / NO {summary.after_no_pct}%")
    print(f"if {summary.side.upper()} wins:")
    print(f"  gross winnings: {summary.gross_winnings}")
    print(f"  platform fee:   {summary.platform_fee}")
    print(f"  net profit:     {summary.net_profit}")
    print(f"  net payout:     {summary.net_payout}")
    print(f"  roi:            {summary.roi_pct}%")
    if summary.underdog:
        print("underdog pick")


def preview_cmd(args: Namespace) -> int:
    """Execute the preview command."""
    config = args.runtime_config
    try:
        amount = to_decimal(args.amount)
        yes_pool = to_decimal(args.yes_pool)
        no_pool = to_decimal(args.no_pool)
        fee_rate = to_decimal(args.fee_rate) if args.fee_rate is not None else config.market.platform_fee_rate
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    if yes_pool < 0 or no_pool < 0:
        print("Error: pools cannot be negative", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    try:
        summary = build_summary(amount, Side(args.side), yes_pool, no_pool, fee_rate)
    except PitchpoolException as e:
        print(f"Rejected: {e.code}: {e.message}", file=sys.stderr)
        return EXIT_REJECTED

    if args.json:
        print(json.dumps(summary.to_dict(), indent=2))
    else:
        print_summary_human(summary)
    return EXIT_SUCCESS
