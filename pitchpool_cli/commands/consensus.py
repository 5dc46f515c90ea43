"""
CLI Consensus Command

Classify a vote count: percentages, consensus level and what the
resolution engine would do with it.

Usage:
    pitchpool consensus --yes 92 --no 5 --unclear 3 [--json]
"""

from __future__ import annotations

import json
import sys
from argparse import Namespace
from decimal import Decimal
from typing import Any

from engine.resolution import review_kind_for
from engine.tally import compute_tally


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1


def consensus_report(
    yes: int,
    no: int,
    unclear: int,
    strong_pct: Decimal,
    moderate_pct: Decimal,
) -> dict[str, Any]:
    tally = compute_tally("cli", yes, no, unclear, strong_pct, moderate_pct)
    auto = tally.auto_outcome
    return {
        "yes_votes": tally.yes_votes,
        "no_votes": tally.no_votes,
        "unclear_votes": tally.unclear_votes,
        "yes_pct": tally.yes_pct,
        "no_pct": tally.no_pct,
        "unclear_pct": tally.unclear_pct,
        "max_share": str(tally.max_share.quantize(Decimal("0.01"))),
        "leader": tally.leader.value if tally.leader else None,
        "consensus": tally.consensus.value,
        "auto_outcome": auto.value if auto else None,
        "review": None if auto else review_kind_for(tally).value,
    }


def consensus_cmd(args: Namespace) -> int:
    """Execute the consensus command."""
    if min(args.yes, args.no, args.unclear) < 0:
        print("Error: vote counts cannot be negative", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    market = args.runtime_config.market
    report = consensus_report(
        args.yes, args.no, args.unclear,
        market.strong_consensus_pct, market.moderate_consensus_pct,
    )

    if args.json:
        print(json.dumps(report, indent=2))
        return EXIT_SUCCESS

    print(f"votes: yes={report['yes_votes']} no={report['no_votes']} unclear={report['unclear_votes']}")
    print(f"split: {report['yes_pct']}% / {report['no_pct']}% / {report['unclear_pct']}%")
    print(f"consensus: {report['consensus']} ({report['max_share']}%)")
    if report["auto_outcome"]:
        print(f"resolution: automatic -> {report['auto_outcome'].upper()}")
    else:
        print(f"resolution: {report['review']} review required")
    return EXIT_SUCCESS
