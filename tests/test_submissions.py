"""Tests for the submission orchestrator."""

import pytest
from sqlalchemy.exc import OperationalError

from gauntlet.db import ProgressStatus
from gauntlet.engine import (
    SubmissionOrchestrator, HintOrchestrator, ProgressLedger, EventStore, GateState,
    SubmissionsDisabled, AccessDenied, InvalidInput, UnknownChallenge, PersistenceFailure,
)
from gauntlet.engine.gate import challenge_states, index_records


@pytest.fixture
def orchestrator(db, clock):
    return SubmissionOrchestrator(db, clock)


def states(db, challenges, participant_id):
    records = index_records(ProgressLedger(db).list_records(participant_id))
    return [v.state for v in challenge_states(challenges, records)]


class TestEndToEnd:
    
    def test_two_challenge_run(self, db, clock, orchestrator, two_challenges):
        first, second = two_challenges
        ledger = ProgressLedger(db)
        
        assert states(db, two_challenges, "alice") == [
            GateState.UNLOCKED_NOT_STARTED, GateState.LOCKED,
        ]
        
        outcome = orchestrator.submit("alice", first.id, "wrong")
        assert outcome.accepted and not outcome.correct
        assert outcome.awarded_points is None
        record = ledger.get_record("alice", first.id)
        assert record.incorrect_attempts == 1
        assert record.status == ProgressStatus.IN_PROGRESS
        assert states(db, two_challenges, "alice")[1] == GateState.LOCKED
        
        clock.advance(130)
        outcome = orchestrator.submit("alice", first.id, "cipher1")
        
        assert outcome.accepted and outcome.correct
        assert outcome.awarded_points == 100
        assert outcome.next_challenge_id == second.id
        record = ledger.get_record("alice", first.id)
        assert record.duration_seconds == 130
        assert record.attempts == 2
        
        following = ledger.get_record("alice", second.id)
        assert following.started_at == clock.now()
        assert following.status == ProgressStatus.IN_PROGRESS
        assert states(db, two_challenges, "alice") == [
            GateState.SOLVED, GateState.UNLOCKED_IN_PROGRESS,
        ]
    
    def test_last_challenge_completes_run(self, db, clock, orchestrator, two_challenges):
        first, second = two_challenges
        orchestrator.submit("alice", first.id, "cipher1")
        clock.advance(200)
        outcome = orchestrator.submit("alice", second.id, "CIPHER2 ")
        
        assert outcome.correct
        assert outcome.next_challenge_id is None
        # Timer started when challenge 1 was solved: 200s -> 5 point time penalty
        assert outcome.awarded_points == 95
        assert outcome.breakdown["time_penalty"] == 5
    
    def test_penalties_flow_into_score(self, db, clock, orchestrator, make_challenge):
        challenge = make_challenge(1, "answer", points=200)
        for _ in range(4):
            orchestrator.submit("alice", challenge.id, "nope")
        clock.advance(300)
        outcome = orchestrator.submit("alice", challenge.id, "answer")
        # 2 for four wrong answers, 12 for 180s past grace
        assert outcome.awarded_points == 186


class TestPreconditions:
    
    def test_submissions_disabled_when_event_not_live(self, db, orchestrator, two_challenges):
        EventStore(db).set("event_status", "ended")
        db.commit()
        with pytest.raises(SubmissionsDisabled):
            orchestrator.submit("alice", two_challenges[0].id, "cipher1")
    
    def test_submissions_disabled_when_entries_closed(self, db, orchestrator, two_challenges):
        EventStore(db).set("allow_new_entries", "false")
        db.commit()
        with pytest.raises(SubmissionsDisabled):
            orchestrator.submit("alice", two_challenges[0].id, "cipher1")
    
    def test_locked_challenge_denied(self, db, orchestrator, two_challenges):
        with pytest.raises(AccessDenied):
            orchestrator.submit("alice", two_challenges[1].id, "cipher2")
        assert ProgressLedger(db).get_record("alice", two_challenges[1].id) is None
    
    def test_empty_answer_rejected_without_counting(self, db, orchestrator, two_challenges):
        with pytest.raises(InvalidInput):
            orchestrator.submit("alice", two_challenges[0].id, "   ")
        assert ProgressLedger(db).get_record("alice", two_challenges[0].id) is None
    
    def test_admission_checked_before_gate(self, db, orchestrator, two_challenges):
        EventStore(db).set("event_status", "paused")
        db.commit()
        with pytest.raises(SubmissionsDisabled):
            orchestrator.submit("alice", two_challenges[1].id, "")
    
    def test_gate_checked_before_input(self, orchestrator, two_challenges):
        with pytest.raises(AccessDenied):
            orchestrator.submit("alice", two_challenges[1].id, "")
    
    def test_unknown_challenge(self, orchestrator, two_challenges):
        with pytest.raises(UnknownChallenge):
            orchestrator.submit("alice", 9999, "x")
    
    def test_inactive_challenge_is_unknown(self, orchestrator, make_challenge):
        make_challenge(1, "a")
        hidden = make_challenge(2, "b", is_active=False)
        with pytest.raises(UnknownChallenge):
            orchestrator.submit("alice", hidden.id, "b")


class TestIdempotentSolve:
    
    def test_second_correct_submission_changes_nothing(self, db, clock, orchestrator, two_challenges):
        first = two_challenges[0]
        clock.advance(40)
        orchestrator.submit("alice", first.id, "cipher1")
        clock.advance(90)
        
        outcome = orchestrator.submit("alice", first.id, "cipher1")
        
        assert not outcome.accepted
        assert outcome.correct
        assert outcome.duplicate
        record = ProgressLedger(db).get_record("alice", first.id)
        assert record.attempts == 1
        assert record.duration_seconds == 0
        assert outcome.awarded_points == 100
    
    def test_wrong_answer_after_solve_is_not_recorded(self, db, orchestrator, two_challenges):
        first = two_challenges[0]
        orchestrator.submit("alice", first.id, "cipher1")
        
        outcome = orchestrator.submit("alice", first.id, "garbage")
        
        assert not outcome.accepted and not outcome.correct
        record = ProgressLedger(db).get_record("alice", first.id)
        assert record.status == ProgressStatus.SOLVED
        assert record.incorrect_attempts == 0
    
    def test_next_challenge_start_not_reset(self, db, clock, orchestrator, two_challenges):
        first, second = two_challenges
        orchestrator.submit("alice", first.id, "cipher1")
        started = ProgressLedger(db).get_record("alice", second.id).started_at
        clock.advance(30)
        orchestrator.submit("alice", first.id, "cipher1")
        assert ProgressLedger(db).get_record("alice", second.id).started_at == started


class TestPersistence:
    
    def test_commit_failure_reports_no_outcome(self, db, orchestrator, two_challenges, monkeypatch):
        first, second = two_challenges
        
        def failing_commit():
            raise OperationalError("COMMIT", {}, Exception("server closed the connection"))
        
        monkeypatch.setattr(db, "commit", failing_commit)
        with pytest.raises(PersistenceFailure) as exc_info:
            orchestrator.submit("alice", first.id, "cipher1")
        assert exc_info.value.retryable
        monkeypatch.undo()
        
        ledger = ProgressLedger(db)
        assert ledger.get_record("alice", first.id) is None
        assert ledger.get_record("alice", second.id) is None
    
    def test_retry_after_failure_succeeds(self, db, orchestrator, two_challenges, monkeypatch):
        first = two_challenges[0]
        def failing_commit():
            raise OperationalError("COMMIT", {}, Exception("timeout"))
        
        monkeypatch.setattr(db, "commit", failing_commit)
        with pytest.raises(PersistenceFailure):
            orchestrator.submit("alice", first.id, "cipher1")
        monkeypatch.undo()
        
        outcome = orchestrator.submit("alice", first.id, "cipher1")
        assert outcome.accepted and outcome.correct
        assert ProgressLedger(db).get_record("alice", first.id).attempts == 1
    
    def test_outcome_built_without_reloading_after_commit(self, db, clock, orchestrator, two_challenges, monkeypatch):
        first, second = two_challenges
        orchestrator.submit("alice", first.id, "nope")
        orchestrator.submit("alice", first.id, "nope")
        HintOrchestrator(db, clock).reveal_hint("alice", first.id)
        clock.advance(300)
        real_commit = ProgressLedger.commit
        
        def unavailable(*args, **kwargs):
            raise OperationalError("SELECT", {}, Exception("server closed the connection"))
        
        def commit_then_disconnect(ledger):
            real_commit(ledger)
            monkeypatch.setattr(db, "execute", unavailable)
            monkeypatch.setattr(db, "connection", unavailable)
        
        monkeypatch.setattr(ProgressLedger, "commit", commit_then_disconnect)
        outcome = orchestrator.submit("alice", first.id, "cipher1")
        monkeypatch.undo()
        
        assert outcome.accepted and outcome.correct
        # 1 for two wrong answers, 5 for one hint, 12 for 180s past grace
        assert outcome.awarded_points == 82
        assert outcome.breakdown["hint_penalty"] == 5
        assert outcome.next_challenge_id == second.id
    
    def test_duplicate_outcome_built_before_commit(self, db, orchestrator, two_challenges, monkeypatch):
        first = two_challenges[0]
        orchestrator.submit("alice", first.id, "cipher1")
        view = orchestrator.unlocked_view("alice", first.id)[1]
        # Stale view: the gate still sees the challenge as open
        monkeypatch.setattr(view, "state", GateState.UNLOCKED_IN_PROGRESS)
        monkeypatch.setattr(orchestrator, "unlocked_view", lambda p, c: ([first], view))
        real_commit = ProgressLedger.commit
        
        def unavailable(*args, **kwargs):
            raise OperationalError("SELECT", {}, Exception("server closed the connection"))
        
        def commit_then_disconnect(ledger):
            real_commit(ledger)
            monkeypatch.setattr(db, "execute", unavailable)
            monkeypatch.setattr(db, "connection", unavailable)
        
        monkeypatch.setattr(ProgressLedger, "commit", commit_then_disconnect)
        outcome = orchestrator.submit("alice", first.id, "cipher1")
        monkeypatch.undo()
        
        assert not outcome.accepted and outcome.duplicate
        assert outcome.awarded_points == 100
