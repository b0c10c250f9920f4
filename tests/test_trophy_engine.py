"""Tests for trophy reconciliation: gating, unlocks, grace-period revocation."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
from sqlalchemy import event
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from jobtracker.models import UnlockedTrophy
from jobtracker.trophies.catalog import TROPHIES, get_trophy
from jobtracker.trophies.engine import (
    EnginePhase,
    JobStats,
    ReconciliationState,
    TrophyEngine,
    summarize,
    trophy_progress,
)
from jobtracker.trophies.store import TrophyStore

NOW = datetime(2025, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


def jobs_with(*statuses: str) -> list[dict]:
    return [{"company": f"Co {i}", "position": "Engineer", "status": s} for i, s in enumerate(statuses)]


@pytest.fixture
def store(db) -> TrophyStore:
    return TrophyStore(db)


@pytest.fixture
def engine() -> TrophyEngine:
    return TrophyEngine()


@pytest.fixture
def loaded(engine, store) -> ReconciliationState:
    state = ReconciliationState()
    assert engine.load(state, store) is True
    return state


class BrokenStore:
    """Stands in for a database that cannot be reached."""

    def __init__(self, records=()):
        self.records = list(records)
        self.fail_listing = False

    def list_unlocked(self):
        if self.fail_listing:
            raise SQLAlchemyError("database unreachable")
        return self.records

    def unlock(self, *args, **kwargs):
        raise SQLAlchemyError("database unreachable")

    def revoke(self, trophy_id):
        raise SQLAlchemyError("database unreachable")


# ---------- statistics and progress ----------


def test_job_stats_counts_by_status():
    stats = JobStats.from_jobs(
        jobs_with("Applied", "In Interview", "Technical Round", "Technical Round", "Final Round", "Offer", "Rejected")
    )
    assert stats == JobStats(applications=7, interviews=5, technical_rounds=2, offers=1)
    assert stats.as_dict() == {"applications": 7, "interviews": 5, "technicalRounds": 2, "offers": 1}


@pytest.mark.parametrize("count", [0, 1, 7, 10, 60])
def test_application_progress_is_job_count_clamped(count):
    stats = JobStats.from_jobs(jobs_with(*["Applied"] * count))
    for trophy in TROPHIES:
        if trophy.category.value == "applications":
            assert trophy_progress(trophy, stats) == min(count, trophy.requirement)


def test_technical_trophy_reads_technical_rounds_only():
    stats = JobStats.from_jobs(jobs_with("Final Round", "Final Round", "Technical Round"))
    assert trophy_progress(get_trophy("technical_ace"), stats) == 1
    assert trophy_progress(get_trophy("interview_expert"), stats) == 3


def test_special_trophy_needs_any_offer():
    assert trophy_progress(get_trophy("career_master"), JobStats.from_jobs(jobs_with("Final Round"))) == 0
    assert trophy_progress(get_trophy("career_master"), JobStats.from_jobs(jobs_with("Offer", "Offer"))) == 1


# ---------- loading gate ----------


def test_reconcile_before_load_returns_locked_catalog_without_writes(engine):
    spy = MagicMock(spec=TrophyStore)
    state = ReconciliationState()

    result = engine.reconcile(state, jobs_with("Offer"), spy, now=NOW)

    assert result.loaded is False
    assert [t.trophy.id for t in result.trophies] == [t.id for t in TROPHIES]
    assert all(t.progress == 0 and not t.unlocked for t in result.trophies)
    assert result.newly_unlocked == [] and result.revoked == []
    assert spy.method_calls == []
    assert engine.notifications.active(NOW) == []


def test_load_seeds_unlocked_and_shown_sets(engine, store):
    store.unlock("first_steps", "First Steps", "bronze", now=NOW - timedelta(days=3))
    state = ReconciliationState()

    engine.load(state, store)

    assert state.phase is EnginePhase.loaded
    assert set(state.unlocked) == {"first_steps"}
    assert state.shown == {"first_steps"}


def test_failed_load_keeps_state_uninitialized(engine):
    broken = BrokenStore()
    broken.fail_listing = True
    state = ReconciliationState()

    assert engine.load(state, broken) is False
    assert state.phase is EnginePhase.uninitialized


def test_historical_unlocks_do_not_notify_again(engine, store):
    store.unlock("first_steps", "First Steps", "bronze", now=NOW - timedelta(days=3))
    state = ReconciliationState()
    engine.load(state, store)

    result = engine.reconcile(state, jobs_with("Applied"), store, now=NOW)

    assert result.newly_unlocked == []
    assert result.notifications == []


# ---------- unlock pass ----------


def test_first_job_unlocks_first_steps_only(engine, store, loaded):
    result = engine.reconcile(loaded, jobs_with("Applied"), store, now=NOW)

    assert [t.id for t in result.newly_unlocked] == ["first_steps"]
    assert [r.trophy_id for r in store.list_unlocked()] == ["first_steps"]
    assert [n.trophy.id for n in result.notifications] == ["first_steps"]
    first = next(t for t in result.trophies if t.trophy.id == "first_steps")
    assert first.unlocked and first.progress == 1
    assert first.unlocked_date == NOW.date()


def test_offer_unlocks_several_with_staggered_notifications(engine, store, loaded):
    result = engine.reconcile(loaded, jobs_with("Offer"), store, now=NOW)

    ids = [t.id for t in result.newly_unlocked]
    assert ids == ["first_steps", "interview_ready", "offer_magnet", "career_master"]
    assert [n.show_at - NOW for n in result.notifications] == [timedelta(seconds=i) for i in range(4)]


def test_repeated_reconcile_does_not_duplicate_or_renotify(engine, store, loaded):
    engine.reconcile(loaded, jobs_with("Applied"), store, now=NOW)
    again = engine.reconcile(loaded, jobs_with("Applied"), store, now=NOW + timedelta(seconds=10))

    assert again.newly_unlocked == []
    assert again.notifications == []
    assert len(store.list_unlocked()) == 1


def test_concurrent_duplicate_unlock_is_a_no_op(engine, store, loaded, db):
    # another reconciliation persisted it after this state was loaded
    store.unlock("first_steps", "First Steps", "bronze", now=NOW)

    result = engine.reconcile(loaded, jobs_with("Applied"), store, now=NOW)

    assert [t.id for t in result.newly_unlocked] == ["first_steps"]
    assert db.query(UnlockedTrophy).count() == 1


def test_one_failed_insert_does_not_block_the_rest(engine, store, loaded, db):
    bind = db.get_bind()
    failures = []

    def fail_first_insert(conn, cursor, statement, parameters, context, executemany):
        if statement.startswith("INSERT INTO unlocked_trophies") and not failures:
            failures.append(statement)
            raise OperationalError(statement, parameters, Exception("connection reset"))

    event.listen(bind, "before_cursor_execute", fail_first_insert)
    try:
        result = engine.reconcile(loaded, jobs_with("Offer"), store, now=NOW)
    finally:
        event.remove(bind, "before_cursor_execute", fail_first_insert)

    assert len(failures) == 1
    assert [t.id for t in result.newly_unlocked] == ["interview_ready", "offer_magnet", "career_master"]
    assert "first_steps" not in loaded.unlocked
    assert sorted(r.trophy_id for r in store.list_unlocked()) == ["career_master", "interview_ready", "offer_magnet"]


def test_store_rolls_back_failed_unlock(store, db):
    bind = db.get_bind()

    def fail_insert(conn, cursor, statement, parameters, context, executemany):
        if statement.startswith("INSERT INTO unlocked_trophies"):
            raise OperationalError(statement, parameters, Exception("connection reset"))

    event.listen(bind, "before_cursor_execute", fail_insert)
    try:
        with pytest.raises(OperationalError):
            store.unlock("first_steps", "First Steps", "bronze", now=NOW)
    finally:
        event.remove(bind, "before_cursor_execute", fail_insert)

    # the session is usable again
    assert store.list_unlocked() == []


def test_unlock_failure_leaves_state_unchanged(engine):
    state = ReconciliationState(phase=EnginePhase.loaded)

    result = engine.reconcile(state, jobs_with("Applied"), BrokenStore(), now=NOW)

    assert result.newly_unlocked == []
    assert state.unlocked == {}
    assert state.shown == set()
    assert engine.notifications.active(NOW) == []


# ---------- revocation pass ----------


def test_unlock_within_grace_period_is_revoked_when_progress_drops(engine, store, loaded):
    engine.reconcile(loaded, jobs_with("Applied"), store, now=NOW)

    result = engine.reconcile(loaded, [], store, now=NOW + timedelta(minutes=2))

    assert result.revoked == ["first_steps"]
    assert store.list_unlocked() == []
    assert "first_steps" not in loaded.unlocked
    assert "first_steps" not in loaded.shown


def test_unlock_past_grace_period_is_permanent(engine, store, loaded):
    engine.reconcile(loaded, jobs_with("Applied"), store, now=NOW)

    result = engine.reconcile(loaded, [], store, now=NOW + timedelta(minutes=6))

    assert result.revoked == []
    assert [r.trophy_id for r in store.list_unlocked()] == ["first_steps"]
    first = next(t for t in result.trophies if t.trophy.id == "first_steps")
    assert first.unlocked is True
    assert first.progress == 0


def test_grace_period_boundary_is_exclusive(engine, store, loaded):
    engine.reconcile(loaded, jobs_with("Applied"), store, now=NOW)
    result = engine.reconcile(loaded, [], store, now=NOW + timedelta(minutes=5))
    assert result.revoked == []


def test_revoked_trophy_notifies_again_when_re_earned(engine, store, loaded):
    engine.reconcile(loaded, jobs_with("Applied"), store, now=NOW)
    engine.reconcile(loaded, [], store, now=NOW + timedelta(minutes=1))

    result = engine.reconcile(loaded, jobs_with("Applied"), store, now=NOW + timedelta(minutes=2))

    assert [n.trophy.id for n in result.notifications] == ["first_steps"]


def test_revocation_only_touches_regressed_trophies(engine, store, loaded):
    engine.reconcile(loaded, jobs_with("Offer"), store, now=NOW)

    # the offer became a rejection, but the application still counts
    result = engine.reconcile(loaded, jobs_with("Rejected"), store, now=NOW + timedelta(minutes=1))

    assert sorted(result.revoked) == ["career_master", "interview_ready", "offer_magnet"]
    assert [r.trophy_id for r in store.list_unlocked()] == ["first_steps"]


def test_revoke_failure_keeps_trophy_unlocked(engine):
    record = UnlockedTrophy(
        trophy_id="first_steps",
        trophy_name="First Steps",
        trophy_type="bronze",
        unlocked_date=NOW.date(),
        unlocked_at=NOW,
    )
    state = ReconciliationState(phase=EnginePhase.loaded, unlocked={"first_steps": NOW.date()}, shown={"first_steps"})

    result = engine.reconcile(state, [], BrokenStore([record]), now=NOW + timedelta(minutes=1))

    assert result.revoked == []
    assert "first_steps" in state.unlocked
    assert "first_steps" in state.shown


def test_naive_timestamps_are_read_as_utc(engine):
    record = UnlockedTrophy(trophy_id="first_steps", unlocked_at=NOW.replace(tzinfo=None))
    assert engine.within_grace(record, NOW + timedelta(minutes=4)) is True
    assert engine.within_grace(record, NOW + timedelta(minutes=6)) is False


def test_custom_grace_period(store):
    engine = TrophyEngine(grace_period=timedelta(seconds=30))
    state = ReconciliationState()
    engine.load(state, store)
    engine.reconcile(state, jobs_with("Applied"), store, now=NOW)

    result = engine.reconcile(state, [], store, now=NOW + timedelta(minutes=1))

    assert result.revoked == []


# ---------- manual operations ----------


def test_manual_revoke_reports_whether_record_existed(engine, store, loaded):
    engine.reconcile(loaded, jobs_with("Applied"), store, now=NOW)

    assert engine.revoke(loaded, store, "first_steps") is not None
    assert engine.revoke(loaded, store, "first_steps") is None
    assert "first_steps" not in loaded.unlocked
    assert "first_steps" not in loaded.shown


def test_reset_clears_everything(engine, store, loaded):
    engine.reconcile(loaded, jobs_with("Offer"), store, now=NOW)

    assert engine.reset(loaded, store) == 4
    assert store.list_unlocked() == []
    assert loaded.unlocked == {} and loaded.shown == set()
    assert engine.notifications.active(NOW) == []


def test_manual_unlock_is_not_announced_later(engine, store, loaded):
    engine.unlock(loaded, store, "first_steps", "First Steps", "bronze", now=NOW)

    result = engine.reconcile(loaded, jobs_with("Applied"), store, now=NOW)

    assert result.newly_unlocked == []


def test_summarize_counts_unlocked_per_tier(engine, store, loaded):
    result = engine.reconcile(loaded, jobs_with("Offer"), store, now=NOW)

    assert summarize(result.trophies) == {
        "total": 14,
        "unlocked": 4,
        "bronze": 1,
        "silver": 1,
        "gold": 1,
        "platinum": 1,
    }
