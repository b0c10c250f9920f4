"""Trophy reconciliation.

Compares live job statistics against the persisted unlock set: trophies whose
requirement is now met get unlocked (and announced once per session), and
trophies unlocked less than a grace period ago get revoked again when the
numbers regress, e.g. the job that earned them was deleted. Past the grace
period an unlock is permanent.

The caches the reconciliation works from (unlocked ids, ids already announced,
whether the persisted set has been read yet) live in a `ReconciliationState`
that the caller owns and hands to every call.
"""
import enum
import logging
import threading
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Any, Callable, Iterable, Optional

from sqlalchemy.exc import SQLAlchemyError

from jobtracker.models import JobStatus, UnlockedTrophy
from jobtracker.trophies.catalog import (
    TECHNICAL_TROPHY_ID,
    TROPHIES,
    TrophyCategory,
    TrophyDefinition,
    TrophyTier,
)
from jobtracker.trophies.notifications import NotificationCenter, TrophyNotification
from jobtracker.trophies.store import TrophyStore

logger = logging.getLogger(__name__)

DEFAULT_GRACE_PERIOD = timedelta(minutes=5)

INTERVIEW_STATUSES = frozenset({
    JobStatus.in_interview.value,
    JobStatus.technical_round.value,
    JobStatus.final_round.value,
    JobStatus.offer.value,
})


def _status_of(job: Any) -> Optional[str]:
    status = job.get("status") if isinstance(job, dict) else getattr(job, "status", None)
    # enum members and their display strings count the same
    return getattr(status, "value", status)


def _as_utc(value: datetime) -> datetime:
    # sqlite hands back naive datetimes; they were written as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


@dataclass(frozen=True)
class JobStats:
    applications: int = 0
    interviews: int = 0
    technical_rounds: int = 0
    offers: int = 0

    @classmethod
    def from_jobs(cls, jobs: Iterable[Any]) -> "JobStats":
        statuses = [_status_of(job) for job in jobs]
        return cls(
            applications=len(statuses),
            interviews=sum(1 for s in statuses if s in INTERVIEW_STATUSES),
            technical_rounds=sum(1 for s in statuses if s == JobStatus.technical_round.value),
            offers=sum(1 for s in statuses if s == JobStatus.offer.value),
        )

    def as_dict(self) -> dict[str, int]:
        return {
            "applications": self.applications,
            "interviews": self.interviews,
            "technicalRounds": self.technical_rounds,
            "offers": self.offers,
        }


def _interview_progress(stats: JobStats, trophy: TrophyDefinition) -> int:
    if trophy.id == TECHNICAL_TROPHY_ID:
        return stats.technical_rounds
    return stats.interviews


PROGRESS_SELECTORS: dict[TrophyCategory, Callable[[JobStats, TrophyDefinition], int]] = {
    TrophyCategory.applications: lambda stats, trophy: stats.applications,
    TrophyCategory.interviews: _interview_progress,
    TrophyCategory.offers: lambda stats, trophy: stats.offers,
    TrophyCategory.special: lambda stats, trophy: 1 if stats.offers > 0 else 0,
}


def trophy_progress(trophy: TrophyDefinition, stats: JobStats) -> int:
    """Progress towards `trophy`, clamped to [0, requirement]."""
    raw = PROGRESS_SELECTORS[trophy.category](stats, trophy)
    return max(0, min(raw, trophy.requirement))


def meets_requirement(trophy: TrophyDefinition, stats: JobStats) -> bool:
    return trophy_progress(trophy, stats) >= trophy.requirement


class EnginePhase(str, enum.Enum):
    uninitialized = "uninitialized"
    loaded = "loaded"


@dataclass
class ReconciliationState:
    phase: EnginePhase = EnginePhase.uninitialized
    unlocked: dict[str, date] = field(default_factory=dict)  # trophy_id -> unlocked_date
    shown: set[str] = field(default_factory=set)

    @property
    def is_loaded(self) -> bool:
        return self.phase is EnginePhase.loaded


@dataclass
class TrophyProgress:
    trophy: TrophyDefinition
    progress: int = 0
    unlocked: bool = False
    unlocked_date: Optional[date] = None


@dataclass
class ReconciliationResult:
    trophies: list[TrophyProgress]
    stats: JobStats = field(default_factory=JobStats)
    newly_unlocked: list[TrophyDefinition] = field(default_factory=list)
    revoked: list[str] = field(default_factory=list)
    notifications: list[TrophyNotification] = field(default_factory=list)
    loaded: bool = True


class TrophyEngine:
    def __init__(
        self,
        catalog: Iterable[TrophyDefinition] = TROPHIES,
        grace_period: timedelta = DEFAULT_GRACE_PERIOD,
        notifications: Optional[NotificationCenter] = None,
    ):
        self.catalog = tuple(catalog)
        self._by_id = {t.id: t for t in self.catalog}
        self.grace_period = grace_period
        self.notifications = notifications if notifications is not None else NotificationCenter()
        # the process-wide engine is shared by handlers running in the threadpool
        self._lock = threading.RLock()

    # ---------- loading ----------
    def load(self, state: ReconciliationState, store: TrophyStore) -> bool:
        """Read the persisted unlock set into `state`.

        Everything already unlocked counts as announced, so old unlocks never
        toast again. On failure the state stays uninitialized and the next
        reconcile call tries again.
        """
        with self._lock:
            try:
                records = store.list_unlocked()
            except SQLAlchemyError:
                logger.exception("Error loading unlocked trophies")
                return False
            state.unlocked = {rec.trophy_id: rec.unlocked_date for rec in records}
            state.shown = set(state.unlocked)
            state.phase = EnginePhase.loaded
        logger.info(f"Loaded {len(records)} unlocked trophies")
        return True

    # ---------- reconciliation ----------
    def reconcile(
        self,
        state: ReconciliationState,
        jobs: Iterable[Any],
        store: TrophyStore,
        now: Optional[datetime] = None,
    ) -> ReconciliationResult:
        if not state.is_loaded:
            # never decide against a set we have not read yet
            return ReconciliationResult(
                trophies=[TrophyProgress(trophy=t) for t in self.catalog],
                loaded=False,
            )

        now = _as_utc(now or datetime.now(timezone.utc))
        stats = JobStats.from_jobs(jobs)

        with self._lock:
            revoked = self._revocation_pass(state, stats, store, now)
            newly_unlocked = self._unlock_pass(state, stats, store, now)
            notifications = self._announce(state, newly_unlocked, now)
            trophies = self.progress(state, stats)

        if newly_unlocked:
            logger.info(f"Newly unlocked trophies: {[t.id for t in newly_unlocked]}")

        return ReconciliationResult(
            trophies=trophies,
            stats=stats,
            newly_unlocked=newly_unlocked,
            revoked=revoked,
            notifications=notifications,
        )

    def progress(self, state: ReconciliationState, stats: JobStats) -> list[TrophyProgress]:
        return [
            TrophyProgress(
                trophy=trophy,
                progress=trophy_progress(trophy, stats),
                unlocked=trophy.id in state.unlocked,
                unlocked_date=state.unlocked.get(trophy.id),
            )
            for trophy in self.catalog
        ]

    def within_grace(self, record: UnlockedTrophy, now: datetime) -> bool:
        return now - _as_utc(record.unlocked_at) < self.grace_period

    def _revocation_pass(self, state, stats, store, now) -> list[str]:
        try:
            records = store.list_unlocked()
        except SQLAlchemyError:
            logger.exception("Error reading unlocked trophies for revocation check")
            return []

        revoked = []
        for record in records:
            trophy = self._by_id.get(record.trophy_id)
            if trophy is None or not self.within_grace(record, now):
                continue
            if meets_requirement(trophy, stats):
                continue
            try:
                store.revoke(trophy.id)
            except SQLAlchemyError:
                logger.exception(f"Error revoking trophy {trophy.id}")
                continue
            state.unlocked.pop(trophy.id, None)
            state.shown.discard(trophy.id)
            revoked.append(trophy.id)
            logger.info(f"Revoked trophy within grace period: {trophy.id}")
        return revoked

    def _unlock_pass(self, state, stats, store, now) -> list[TrophyDefinition]:
        newly_unlocked = []
        for trophy in self.catalog:
            if trophy.id in state.unlocked or not meets_requirement(trophy, stats):
                continue
            try:
                record, _created = store.unlock(trophy.id, trophy.name, trophy.tier.value, now=now)
            except SQLAlchemyError:
                logger.exception(f"Error saving unlocked trophy {trophy.id}")
                continue
            state.unlocked[trophy.id] = record.unlocked_date
            newly_unlocked.append(trophy)
        return newly_unlocked

    def _announce(self, state, trophies, now) -> list[TrophyNotification]:
        fresh = [t for t in trophies if t.id not in state.shown]
        state.shown.update(t.id for t in fresh)
        if not fresh:
            return []
        return self.notifications.queue(fresh, now=now)

    # ---------- manual operations ----------
    def unlock(
        self,
        state: ReconciliationState,
        store: TrophyStore,
        trophy_id: str,
        trophy_name: str,
        trophy_type: str,
        now: Optional[datetime] = None,
    ) -> tuple[UnlockedTrophy, bool]:
        with self._lock:
            record, created = store.unlock(trophy_id, trophy_name, trophy_type, now=now)
            if state.is_loaded:
                state.unlocked[record.trophy_id] = record.unlocked_date
        return record, created

    def revoke(self, state: ReconciliationState, store: TrophyStore, trophy_id: str) -> Optional[UnlockedTrophy]:
        """Delete one unlock. Returns the deleted record, None if it was not unlocked."""
        with self._lock:
            record = store.revoke(trophy_id)
            state.unlocked.pop(trophy_id, None)
            state.shown.discard(trophy_id)
        return record

    def reset(self, state: ReconciliationState, store: TrophyStore) -> int:
        with self._lock:
            count = store.reset()
            state.unlocked.clear()
            state.shown.clear()
            self.notifications.clear()
        logger.info(f"All trophies reset ({count} removed)")
        return count


def summarize(trophies: Iterable[TrophyProgress]) -> dict[str, int]:
    """Totals for the trophy room header: overall, unlocked, unlocked per tier."""
    trophies = list(trophies)
    summary = {
        "total": len(trophies),
        "unlocked": sum(1 for t in trophies if t.unlocked),
    }
    for tier in TrophyTier:
        summary[tier.value] = sum(1 for t in trophies if t.unlocked and t.trophy.tier is tier)
    return summary
