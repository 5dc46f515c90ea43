"""
Tests for the Market Service

Drives polls through the whole lifecycle with a frozen clock:
create -> stake -> lock -> conclude -> vote -> resolve -> payouts.
"""

import threading
from datetime import timedelta
from decimal import Decimal

import pytest

from core.schemas.errors import (
    IneligibleVoterException,
    InvalidPollException,
    InvalidStateException,
    NotInVotingWindowException,
    PollLockedException,
    PollNotFoundException,
    SettlementFailedException,
)
from core.schemas.numeric import quantize_currency
from core.schemas.poll import LockPolicy, PollCategory, PollStatus, ReviewKind, Side
from core.schemas.resolution import DecisionState, ResolutionMethod
from fixtures.common import (
    DEFAULT_QUESTION,
    KICKOFF,
    create_voting_poll,
    make_config,
    make_service,
    wallet_of,
)


def _new_poll(service, match_id="match_001", **kwargs):
    return service.create_poll(
        match_id=match_id,
        question=kwargs.pop("question", DEFAULT_QUESTION),
        category=kwargs.pop("category", PollCategory.PLAYER_EVENT),
        kickoff_at=kwargs.pop("kickoff_at", KICKOFF),
        **kwargs,
    )


class TestCreatePoll:

    def test_new_poll_is_open_and_empty(self, service):
        poll = _new_poll(service, lock_policy="halftime", created_by="admin")

        assert poll.poll_id.startswith("poll_")
        assert poll.status is PollStatus.OPEN
        assert poll.pool.total == 0
        assert poll.lock_at == KICKOFF + timedelta(minutes=45)
        assert service.get_poll(poll.poll_id) is poll

    @pytest.mark.parametrize("question", ["Goal?", "x" * 121, "   "])
    def test_question_length(self, service, question):
        with pytest.raises(InvalidPollException) as exc_info:
            _new_poll(service, question=question)
        assert exc_info.value.details["field_path"] == "question"

    def test_unknown_category(self, service):
        with pytest.raises(InvalidPollException):
            _new_poll(service, category="weather")

    def test_custom_lock_must_be_future(self, service, clock):
        with pytest.raises(InvalidPollException) as exc_info:
            _new_poll(service, lock_policy=LockPolicy.CUSTOM, custom_lock_at=clock.now())
        assert exc_info.value.details["field_path"] == "lock_at"

    def test_custom_lock(self, service, clock):
        lock_at = clock.now() + timedelta(minutes=30)
        poll = _new_poll(service, lock_policy=LockPolicy.CUSTOM, custom_lock_at=lock_at)
        assert poll.lock_at == lock_at

    def test_unknown_poll(self, service):
        with pytest.raises(PollNotFoundException):
            service.get_poll("poll_missing")

    def test_list_filters(self, service):
        a = _new_poll(service, match_id="m1")
        _new_poll(service, match_id="m2")
        service.lock_poll(a.poll_id)

        assert [p.poll_id for p in service.list_polls(status="locked")] == [a.poll_id]
        assert len(service.list_polls(match_id="m2")) == 1
        assert len(service.list_polls()) == 2


class TestScheduler:

    def test_lock_due_polls_only_locks_due(self, service, clock):
        kickoff_poll = _new_poll(service)
        halftime_poll = _new_poll(service, lock_policy=LockPolicy.HALFTIME)

        clock.set_time(KICKOFF)
        locked = service.lock_due_polls()

        assert [p.poll_id for p in locked] == [kickoff_poll.poll_id]
        assert halftime_poll.status is PollStatus.OPEN

        clock.advance(minutes=45)
        tick = service.scheduler_tick()
        assert [p.poll_id for p in tick.locked] == [halftime_poll.poll_id]
        assert tick.decisions == []

    def test_stake_rejected_once_due_even_before_sweep(self, service, clock):
        poll = _new_poll(service)
        clock.set_time(KICKOFF)
        with pytest.raises(PollLockedException):
            service.place_stake(poll.poll_id, "alice", Side.YES, "10")
        assert poll.status is PollStatus.OPEN
        assert poll.pool.total == 0

    def test_conclude_locks_and_opens_voting(self, service, clock):
        open_poll = _new_poll(service)
        locked_poll = _new_poll(service)
        service.lock_poll(locked_poll.poll_id)
        _new_poll(service, match_id="other")

        clock.set_time(KICKOFF + timedelta(minutes=100))
        opened = service.conclude_match("match_001")

        assert {p.poll_id for p in opened} == {open_poll.poll_id, locked_poll.poll_id}
        for poll in opened:
            assert poll.status is PollStatus.VOTING
            assert poll.voting_ends_at == clock.now() + timedelta(hours=2)

        assert service.conclude_match("match_001") == []

    def test_conclude_unknown_match_opens_nothing(self, service):
        assert service.conclude_match("no_such_match") == []


class TestStrongConsensusFlow:
    """Pool 7000 YES / 3000 NO, strong YES consensus."""

    @pytest.fixture
    def rich_service(self):
        return make_service(balances={"whale": 10000, "shark": 10000, "minnow": 500})

    def test_end_to_end(self, rich_service):
        service = rich_service
        poll = create_voting_poll(service, stakes=[
            ("whale", Side.YES, "7000"),
            ("shark", Side.NO, "3000"),
        ])
        pct = poll.pool.percentages()
        assert (pct.yes, pct.no) == (70, 30)

        for i in range(9):
            result = service.cast_vote(poll.poll_id, f"oracle{i}", "yes")
            if result.resolution.is_resolved:
                break

        assert poll.status is PollStatus.RESOLVED
        assert poll.outcome is Side.YES
        outcome = service.outcome_for(poll.poll_id)
        assert outcome.method is ResolutionMethod.AUTOMATIC_CONSENSUS

        whale, shark = service.payouts(poll.poll_id)
        assert whale.won
        assert whale.net_profit > 0
        assert quantize_currency(whale.payout) == Decimal("9850.00")
        assert shark.payout == 0
        assert sum(p.payout + p.platform_fee for p in (whale, shark)) == poll.pool.total

    def test_first_vote_reward(self, rich_service):
        poll = create_voting_poll(rich_service, stakes=[
            ("whale", Side.YES, "7000"),
            ("shark", Side.NO, "3000"),
        ])
        result = rich_service.cast_vote(poll.poll_id, "oracle1", "no")
        assert result.reward == Decimal("50")
        assert rich_service.votes.earnings("oracle1") == Decimal("50")


class TestVoting:

    def test_stakers_cannot_vote(self, service):
        poll = create_voting_poll(service, stakes=[("alice", Side.YES, "10")])
        with pytest.raises(IneligibleVoterException):
            service.cast_vote(poll.poll_id, "alice", "yes")

    def test_single_vote_does_not_settle(self, service):
        poll = create_voting_poll(service, stakes=[
            ("alice", Side.YES, "1000"),
            ("bob", Side.NO, "1000"),
        ])
        result = service.cast_vote(poll.poll_id, "oracle1", "no")

        assert result.resolution.state is DecisionState.PENDING
        assert poll.status is PollStatus.VOTING
        assert service.outcome_for(poll.poll_id) is None

        for i in range(2, 6):
            result = service.cast_vote(poll.poll_id, f"oracle{i}", "no")
        assert result.resolution.is_resolved
        assert poll.outcome is Side.NO

    def test_vote_before_conclusion(self, service):
        poll = _new_poll(service)
        with pytest.raises(NotInVotingWindowException):
            service.cast_vote(poll.poll_id, "oracle1", "yes")

    def test_vote_after_window(self, service, clock):
        poll = create_voting_poll(service)
        clock.set_time(poll.voting_ends_at)
        with pytest.raises(NotInVotingWindowException):
            service.cast_vote(poll.poll_id, "oracle1", "yes")

    def test_available_polls_excludes_stakers_and_voters(self, service):
        poll = create_voting_poll(service, stakes=[("alice", Side.YES, "10")])
        service.cast_vote(poll.poll_id, "bob", "unclear")

        assert service.available_polls("alice") == []
        assert service.available_polls("bob") == []
        assert [p.poll_id for p in service.available_polls("carol")] == [poll.poll_id]

    def test_voter_stats_accuracy(self, service):
        poll = create_voting_poll(service, stakes=[("alice", Side.YES, "10")])
        service.cast_vote(poll.poll_id, "dave", "unclear")
        service.cast_vote(poll.poll_id, "bob", "no")
        service.cast_vote(poll.poll_id, "carol", "yes")
        assert poll.status is PollStatus.VOTING

        assert service.voter_stats("bob").accuracy is None

        service.ctx.clock.advance(hours=3)
        decision = service.resolve(poll.poll_id)
        assert decision.review is ReviewKind.ESCALATED
        service.commit_manual_outcome(poll.poll_id, "yes", decided_by="admin")

        bob = service.voter_stats("bob")
        carol = service.voter_stats("carol")
        assert (bob.resolved_votes, bob.correct_votes, bob.accuracy) == (1, 0, Decimal("0"))
        assert carol.accuracy == Decimal("100")


class TestReviewPaths:
    """Consensus too weak to resolve automatically."""

    @pytest.fixture
    def service(self):
        return make_service(make_config(early_resolution_min_votes=10))

    @pytest.fixture
    def clock(self, service):
        return service.ctx.clock

    def _vote(self, service, poll, yes=0, no=0, unclear=0):
        n = 0
        for decision, count in (("yes", yes), ("no", no), ("unclear", unclear)):
            for _ in range(count):
                service.cast_vote(poll.poll_id, f"oracle{n}", decision)
                n += 1

    def test_moderate_goes_to_admin(self, service, clock):
        poll = create_voting_poll(service)
        self._vote(service, poll, yes=7, no=3)
        assert poll.status is PollStatus.VOTING

        assert service.resolve(poll.poll_id).state is DecisionState.PENDING

        clock.set_time(poll.voting_ends_at)
        tick = service.scheduler_tick()
        (decision,) = tick.decisions
        assert decision.state is DecisionState.MANUAL_REVIEW_REQUIRED
        assert decision.review is ReviewKind.ADMIN

        outcome = service.commit_manual_outcome(poll.poll_id, Side.YES, decided_by="admin")
        assert outcome.method is ResolutionMethod.MANUAL_REVIEW
        assert poll.status is PollStatus.RESOLVED

        # already resolved: the sweep leaves it alone
        assert service.scheduler_tick().decisions == []

    def test_split_goes_to_multisig(self, service, clock):
        poll = create_voting_poll(service)
        self._vote(service, poll, yes=5, no=4, unclear=1)
        clock.set_time(poll.voting_ends_at)

        decision = service.resolve(poll.poll_id)
        assert decision.review is ReviewKind.MULTISIG
        assert poll.review_required is ReviewKind.MULTISIG

    def test_manual_outcome_rejected_before_review(self, service):
        poll = create_voting_poll(service)
        with pytest.raises(InvalidStateException):
            service.commit_manual_outcome(poll.poll_id, Side.NO)


class TestPayouts:

    def test_refund_when_winning_side_empty(self, service, clock):
        poll = create_voting_poll(service, stakes=[
            ("alice", Side.NO, "40"),
            ("bob", Side.NO, "60"),
        ])
        for i in range(5):
            service.cast_vote(poll.poll_id, f"oracle{i}", "yes")
        assert poll.outcome is Side.YES

        payouts = service.payouts(poll.poll_id)
        assert all(p.refunded for p in payouts)
        assert [p.payout for p in payouts] == [Decimal("40"), Decimal("60")]
        assert all(p.platform_fee == 0 for p in payouts)

    def test_payouts_require_resolution(self, service):
        poll = create_voting_poll(service, stakes=[("alice", Side.YES, "10")])
        with pytest.raises(InvalidStateException):
            service.payouts(poll.poll_id)

    def test_wallet_debited_for_stakes(self, service):
        create_voting_poll(service, stakes=[("alice", Side.YES, "250")])
        assert wallet_of(service).balance_of("alice") == Decimal("750")


class TestSettlementFailures:

    def test_seeded_failures_are_reproducible(self):
        def run():
            service = make_service(make_config(starting_balance="1000", failure_rate=0.5, seed=99))
            poll = _new_poll(service)
            results = []
            for i in range(20):
                try:
                    service.place_stake(poll.poll_id, f"user{i}", Side.YES, "5")
                    results.append(True)
                except SettlementFailedException:
                    results.append(False)
            return results, poll.pool.participants

        first, participants = run()
        second, _ = run()
        assert first == second
        assert participants == sum(first)


class TestConcurrentStakes:

    def test_no_lost_updates_through_service(self):
        service = make_service(make_config(starting_balance="100"))
        poll = _new_poll(service)
        workers = 32
        barrier = threading.Barrier(workers)

        def stake(i):
            barrier.wait()
            service.place_stake(poll.poll_id, f"user{i}", Side.NO, "3")

        threads = [threading.Thread(target=stake, args=(i,)) for i in range(workers)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert poll.pool.no_pool == Decimal("96")
        assert poll.pool.participants == workers
        assert service.ledger.total_staked(poll.poll_id) == poll.pool.total
