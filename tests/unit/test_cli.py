"""
CLI Unit Tests
Tests for pitchpool_cli/main.py and its commands.
"""
import json

import pytest

from pitchpool_cli.commands.consensus import consensus_report
from pitchpool_cli.commands.lock_time import parse_timestamp
from pitchpool_cli.main import main


SCENARIO = """
start: "2026-06-01T17:00:00Z"
balances: {alice: 500, bob: 500}
polls:
  - key: haaland
    match_id: mci-ars
    question: "Will Haaland score a goal?"
    category: player_event
    kickoff_at: "2026-06-01T18:00:00Z"
steps:
  - {action: stake, poll: haaland, staker: alice, side: yes, amount: 100}
  - {action: stake, poll: haaland, staker: bob, side: no, amount: 50}
  - {action: advance, minutes: 120}
  - {action: stake, poll: haaland, staker: bob, side: no, amount: 5, expect: POLL_LOCKED}
  - {action: conclude, match_id: mci-ars}
  - {action: vote, poll: haaland, voter: alice, decision: yes, expect: INELIGIBLE_VOTER}
  - {action: vote, poll: haaland, voter: carol, decision: yes}
  - {action: vote, poll: haaland, voter: dave, decision: yes}
  - {action: vote, poll: haaland, voter: erin, decision: yes}
  - {action: vote, poll: haaland, voter: frank, decision: yes}
  - {action: vote, poll: haaland, voter: grace, decision: yes}
  - {action: payouts, poll: haaland}
"""


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.delenv("PITCHPOOL_PLATFORM_FEE_RATE", raising=False)
    return tmp_path


def _json_out(capsys):
    return json.loads(capsys.readouterr().out)


class TestPreview:

    def test_seventy_thirty_pool(self, capsys):
        code = main(["preview", "--side", "yes", "--amount", "100",
                     "--yes-pool", "7000", "--no-pool", "3000", "--json"])
        assert code == 0
        out = _json_out(capsys)
        assert out["net_payout"] == "140.14"
        assert out["platform_fee"] == "2.11"
        assert out["roi_pct"] == "42.3"
        assert out["after_yes_pct"] == 70

    def test_human_output(self, capsys):
        assert main(["preview", "--side", "no", "--amount", "10", "--yes-pool", "90"]) == 0
        out = capsys.readouterr().out
        assert "underdog pick" in out

    def test_negative_amount_rejected(self, capsys):
        assert main(["preview", "--side", "yes", "--amount", "-5"]) == 2

    def test_non_numeric_amount(self, capsys):
        assert main(["preview", "--side", "yes", "--amount", "lots"]) == 1


class TestConsensus:

    def test_report(self):
        report = consensus_report(92, 5, 3, strong_pct=85, moderate_pct=60)
        assert report["consensus"] == "strong"
        assert report["auto_outcome"] == "yes"
        assert report["review"] is None

    def test_split_routes_to_multisig(self, capsys):
        assert main(["consensus", "--yes", "5", "--no", "4", "--unclear", "1", "--json"]) == 0
        out = _json_out(capsys)
        assert out["consensus"] == "split"
        assert out["review"] == "multisig"

    def test_negative_counts(self):
        assert main(["consensus", "--yes", "-1"]) == 1


class TestLockTime:

    def test_parse_z_suffix(self):
        assert parse_timestamp("2026-06-01T18:00:00Z").utcoffset().total_seconds() == 0

    def test_halftime(self, capsys):
        code = main(["lock-time", "--kickoff", "2026-06-01T18:00:00Z", "--policy", "halftime", "--json"])
        assert code == 0
        assert _json_out(capsys)["lock_at"] == "2026-06-01T18:45:00+00:00"

    def test_custom_without_time(self):
        assert main(["lock-time", "--kickoff", "2026-06-01T18:00:00Z", "--policy", "custom"]) == 2

    def test_bad_timestamp(self):
        assert main(["lock-time", "--kickoff", "tomorrow"]) == 1


class TestSimulate:

    def test_scenario_runs_as_scripted(self, isolated_cwd, capsys):
        path = isolated_cwd / "scenario.yaml"
        path.write_text(SCENARIO)

        assert main(["simulate", str(path), "--json"]) == 0
        out = _json_out(capsys)
        assert out["all_expected"] is True

        poll = out["polls"][0]
        assert poll["status"] == "resolved"
        assert poll["outcome"] == "yes"
        assert poll["participants"] == 2
        assert out["steps"][-1]["detail"] == "alice=147.50, bob=0.00"

    def test_unexpected_rejection_exits_2(self, isolated_cwd, capsys):
        path = isolated_cwd / "scenario.yaml"
        path.write_text(SCENARIO.replace("amount: 50}", "amount: 5000}"))

        assert main(["simulate", str(path), "--json"]) == 2
        steps = _json_out(capsys)["steps"]
        assert steps[1]["code"] == "INSUFFICIENT_FUNDS"
        assert steps[1]["expected"] is False

    def test_missing_file(self, isolated_cwd):
        assert main(["simulate", str(isolated_cwd / "nope.yaml")]) == 1

    def test_unknown_action(self, isolated_cwd):
        path = isolated_cwd / "bad.json"
        path.write_text(json.dumps({"steps": [{"action": "teleport"}]}))
        assert main(["simulate", str(path)]) == 1


class TestConfigCommand:

    def test_init_then_show(self, isolated_cwd, capsys):
        assert main(["config", "--init"]) == 0
        assert (isolated_cwd / "pitchpool.json").exists()
        assert main(["config", "--init"]) == 1

        capsys.readouterr()
        assert main(["config", "--show"]) == 0
        assert _json_out(capsys)["market"]["min_stake"] == "1.00"

    def test_custom_config_file(self, isolated_cwd, capsys):
        path = isolated_cwd / "custom.json"
        path.write_text(json.dumps({"market": {"platform_fee_rate": "0"}}))
        code = main(["--config", str(path), "preview", "--side", "yes", "--amount", "100",
                     "--yes-pool", "7000", "--no-pool", "3000", "--json"])
        assert code == 0
        assert _json_out(capsys)["platform_fee"] == "0.00"

    def test_missing_config_file(self, isolated_cwd):
        assert main(["--config", str(isolated_cwd / "absent.json"), "config", "--show"]) == 1
