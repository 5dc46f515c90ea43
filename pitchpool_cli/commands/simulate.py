"""
CLI Simulate Command

Replay a scripted market scenario against an in-memory engine with a
frozen clock and a seeded simulated wallet.

Scenario file (YAML or JSON):

    start: "2026-06-01T17:00:00Z"
    config:                       # optional RuntimeConfig overrides
      market: {early_resolution_min_votes: 1}
    balances: {alice: 500, bob: 500}
    polls:
      - key: haaland
        match_id: mci-ars
        question: "Will Haaland score a goal?"
        category: player_event
        kickoff_at: "2026-06-01T18:00:00Z"
        lock_policy: kickoff
    steps:
      - {action: stake, poll: haaland, staker: alice, side: yes, amount: 100}
      - {action: advance, minutes: 120}
      - {action: conclude, match_id: mci-ars}
      - {action: vote, poll: haaland, voter: carol, decision: yes}
      - {action: stake, poll: haaland, staker: bob, side: no, amount: 5, expect: POLL_LOCKED}
      - {action: payouts, poll: haaland}

A step that is rejected with the error code named in ``expect`` counts as
passing. Any other rejection makes the command exit with code 2.

Usage:
    pitchpool simulate scenario.yaml [--json]
"""

from __future__ import annotations

import json
import logging
import sys
from argparse import Namespace
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional

import yaml

from core.config.runtime import RuntimeConfig
from core.schemas.errors import PitchpoolException
from core.schemas.numeric import quantize_currency, to_decimal
from core.wallet.simulated import SimulatedWallet
from engine.context import EngineContext, FrozenClock
from orchestrator.market import MarketService

from pitchpool_cli.commands.lock_time import parse_timestamp


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_REJECTED = 2


class ScenarioError(ValueError):
    """Scenario file is malformed."""


def _choice(value: Any) -> str:
    """YAML 1.1 reads bare yes/no as booleans; map them back."""
    if value is True:
        return "yes"
    if value is False:
        return "no"
    return str(value)


@dataclass
class StepResult:
    """Outcome of one scenario step."""
    index: int
    action: str
    ok: bool
    detail: str = ""
    code: Optional[str] = None
    expected: bool = True


@dataclass
class SimulationSummary:
    """Summary of a scenario run for CLI output."""
    scenario: str = ""
    steps: list[StepResult] = field(default_factory=list)
    polls: list[dict[str, Any]] = field(default_factory=list)

    @property
    def all_expected(self) -> bool:
        return all(s.expected for s in self.steps)

    def to_dict(self) -> dict[str, Any]:
        return {
            "scenario": self.scenario,
            "all_expected": self.all_expected,
            "steps": [asdict(s) for s in self.steps],
            "polls": self.polls,
        }


def load_scenario(path: Path) -> dict[str, Any]:
    """Load a YAML or JSON scenario file."""
    with open(path) as f:
        if path.suffix in (".yaml", ".yml"):
            data = yaml.safe_load(f) or {}
        else:
            data = json.load(f)
    if not isinstance(data, dict):
        raise ScenarioError("Scenario must be a mapping")
    return data


class ScenarioRunner:
    """Drives a MarketService through scenario steps."""

    def __init__(self, scenario: dict[str, Any], base_config: RuntimeConfig) -> None:
        config = base_config
        if scenario.get("config"):
            config = RuntimeConfig.from_dict(scenario["config"])

        self.clock = FrozenClock(parse_timestamp(str(scenario.get("start", "2026-01-01T00:00:00Z"))))
        self.wallet = SimulatedWallet.from_config(config.wallet, now=self.clock.now)
        self.service = MarketService(EngineContext(config=config, wallet=self.wallet, clock=self.clock))
        self.poll_ids: dict[str, str] = {}

        for owner, amount in (scenario.get("balances") or {}).items():
            self.wallet.fund(owner, to_decimal(amount))

        for entry in scenario.get("polls") or []:
            key = entry.get("key") or entry.get("match_id")
            poll = self.service.create_poll(
                match_id=entry["match_id"],
                question=entry["question"],
                category=entry.get("category", "other"),
                kickoff_at=parse_timestamp(str(entry["kickoff_at"])),
                lock_policy=entry.get("lock_policy", "kickoff"),
                custom_lock_at=parse_timestamp(str(entry["lock_at"])) if entry.get("lock_at") else None,
                created_by=entry.get("created_by"),
            )
            self.poll_ids[key] = poll.poll_id

        self.actions: dict[str, Callable[[dict[str, Any]], str]] = {
            "advance": self._advance,
            "stake": self._stake,
            "preview": self._preview,
            "lock": self._lock,
            "tick": self._tick,
            "conclude": self._conclude,
            "vote": self._vote,
            "resolve": self._resolve,
            "manual_outcome": self._manual_outcome,
            "payouts": self._payouts,
        }

    def _poll_id(self, step: dict[str, Any]) -> str:
        key = step.get("poll")
        if key not in self.poll_ids:
            raise ScenarioError(f"Unknown poll key: {key}")
        return self.poll_ids[key]

    def _advance(self, step: dict[str, Any]) -> str:
        delta = {k: step[k] for k in ("days", "hours", "minutes", "seconds") if k in step}
        now = self.clock.advance(**delta)
        return f"clock -> {now.isoformat()}"

    def _stake(self, step: dict[str, Any]) -> str:
        placement = self.service.place_stake(
            self._poll_id(step), step["staker"], _choice(step["side"]), step["amount"]
        )
        pct = placement.percentages
        return (
            f"{step['staker']} staked {placement.stake.amount} on {placement.stake.side.value.upper()} "
            f"(YES {pct.yes}% / NO {pct.no}%, tx {placement.receipt.tx_hash[:12]})"
        )

    def _preview(self, step: dict[str, Any]) -> str:
        preview = self.service.preview_stake(self._poll_id(step), _choice(step["side"]), step["amount"])
        w = preview.winnings
        return (
            f"{step['amount']} on {w.side.value.upper()} -> payout {quantize_currency(w.net_payout)} "
            f"(fee {quantize_currency(w.platform_fee)}, roi {w.roi.quantize(to_decimal('0.1'))}%)"
        )

    def _lock(self, step: dict[str, Any]) -> str:
        poll = self.service.lock_poll(self._poll_id(step))
        return f"{poll.poll_id} locked"

    def _tick(self, step: dict[str, Any]) -> str:
        tick = self.service.scheduler_tick()
        return f"locked {len(tick.locked)}, decided {len(tick.decisions)}"

    def _conclude(self, step: dict[str, Any]) -> str:
        polls = self.service.conclude_match(step["match_id"])
        return f"{len(polls)} poll(s) open for voting"

    def _vote(self, step: dict[str, Any]) -> str:
        result = self.service.cast_vote(self._poll_id(step), step["voter"], _choice(step["decision"]))
        tally = result.tally
        return (
            f"{step['voter']} voted {result.record.decision.value} "
            f"(yes {tally.yes_pct}% / no {tally.no_pct}% / unclear {tally.unclear_pct}%, "
            f"{result.resolution.state.value})"
        )

    def _resolve(self, step: dict[str, Any]) -> str:
        decision = self.service.resolve(self._poll_id(step))
        if decision.outcome:
            return f"{decision.state.value}: {decision.outcome.outcome.value.upper()}"
        if decision.review:
            return f"{decision.state.value}: {decision.review.value} review"
        return decision.state.value

    def _manual_outcome(self, step: dict[str, Any]) -> str:
        outcome = self.service.commit_manual_outcome(
            self._poll_id(step), _choice(step["outcome"]), step.get("decided_by")
        )
        return f"manual outcome {outcome.outcome.value.upper()}"

    def _payouts(self, step: dict[str, Any]) -> str:
        payouts = self.service.payouts(self._poll_id(step))
        return ", ".join(f"{p.staker}={quantize_currency(p.payout)}" for p in payouts) or "no stakes"

    def run_step(self, index: int, step: dict[str, Any]) -> StepResult:
        action = step.get("action", "")
        handler = self.actions.get(action)
        if handler is None:
            raise ScenarioError(f"Unknown action at step {index}: {action!r}")
        expect = step.get("expect")

        try:
            detail = handler(step)
        except PitchpoolException as e:
            return StepResult(
                index=index,
                action=action,
                ok=False,
                detail=e.message,
                code=e.code,
                expected=(expect == e.code),
            )
        return StepResult(index=index, action=action, ok=True, detail=detail, expected=expect is None)

    def poll_summaries(self) -> list[dict[str, Any]]:
        summaries = []
        for key, poll_id in self.poll_ids.items():
            poll = self.service.get_poll(poll_id)
            pct = poll.pool.percentages()
            summaries.append({
                "key": key,
                "poll_id": poll_id,
                "status": poll.status.value,
                "yes_pool": str(poll.pool.yes_pool),
                "no_pool": str(poll.pool.no_pool),
                "participants": poll.pool.participants,
                "yes_pct": pct.yes,
                "no_pct": pct.no,
                "outcome": poll.outcome.value if poll.outcome else None,
                "review_required": poll.review_required.value if poll.review_required else None,
            })
        return summaries


def run_scenario(path: Path, base_config: RuntimeConfig) -> SimulationSummary:
    """Load and execute a scenario file."""
    scenario = load_scenario(path)
    runner = ScenarioRunner(scenario, base_config)
    summary = SimulationSummary(scenario=str(path))
    for index, step in enumerate(scenario.get("steps") or [], start=1):
        result = runner.run_step(index, step)
        if not result.expected:
            logger.warning(f"Step {index} ({result.action}) did not go as expected: {result.detail}")
        summary.steps.append(result)
    summary.polls = runner.poll_summaries()
    return summary


def print_summary_human(summary: SimulationSummary) -> None:
    print(f"scenario: {summary.scenario}")
    for step in summary.steps:
        mark = "✓" if step.expected else "✗"
        code = f" [{step.code}]" if step.code else ""
        print(f"  {mark} {step.index:>3} {step.action}{code}: {step.detail}")
    print("\npolls:")
    for poll in summary.polls:
        outcome = poll["outcome"].upper() if poll["outcome"] else "-"
        print(
            f"  {poll['key']}: {poll['status']} YES {poll['yes_pool']} ({poll['yes_pct']}%) "
            f"/ NO {poll['no_pool']} ({poll['no_pct']}%) outcome={outcome}"
        )


def simulate_cmd(args: Namespace) -> int:
    """Execute the simulate command."""
    path = Path(args.scenario)
    if not path.exists():
        print(f"Error: Scenario not found: {path}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    try:
        summary = run_scenario(path, args.runtime_config)
    except (ScenarioError, KeyError, ValueError, yaml.YAMLError) as e:
        print(f"Error: invalid scenario: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except PitchpoolException as e:
        print(f"Error: scenario setup rejected: {e.code}: {e.message}", file=sys.stderr)
        return EXIT_REJECTED

    if args.json:
        print(json.dumps(summary.to_dict(), indent=2, default=str))
    else:
        print_summary_human(summary)

    return EXIT_SUCCESS if summary.all_expected else EXIT_REJECTED
