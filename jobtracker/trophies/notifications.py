# trophies/notifications.py
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from jobtracker.trophies.catalog import TrophyDefinition

DEFAULT_STAGGER = timedelta(seconds=1)
DEFAULT_DURATION = timedelta(seconds=5)


@dataclass
class TrophyNotification:
    id: str
    trophy: TrophyDefinition
    queued_at: datetime
    show_at: datetime
    expires_at: datetime
    dismissed: bool = False

    def is_visible(self, now: datetime) -> bool:
        return not self.dismissed and self.show_at <= now < self.expires_at


class NotificationCenter:
    """Toast queue for freshly unlocked trophies.

    Each queued batch is staggered (the n-th trophy appears n * stagger after
    queueing) and every toast dismisses itself `duration` after it appears.
    Time is always passed in, so a countdown is just a pair of timestamps and
    cancelling it is marking it dismissed.
    """

    def __init__(self, stagger: timedelta = DEFAULT_STAGGER, duration: timedelta = DEFAULT_DURATION):
        self.stagger = stagger
        self.duration = duration
        self._items: list[TrophyNotification] = []
        # request handlers queue and poll from different worker threads
        self._lock = threading.Lock()

    def queue(self, trophies: list[TrophyDefinition], now: Optional[datetime] = None) -> list[TrophyNotification]:
        now = now or datetime.now(timezone.utc)
        stamp = int(now.timestamp() * 1000)
        queued = []
        for index, trophy in enumerate(trophies):
            show_at = now + self.stagger * index
            queued.append(TrophyNotification(
                id=f"{trophy.id}-{stamp}",
                trophy=trophy,
                queued_at=now,
                show_at=show_at,
                expires_at=show_at + self.duration,
            ))
        with self._lock:
            self._items.extend(queued)
        return queued

    def active(self, now: Optional[datetime] = None) -> list[TrophyNotification]:
        now = now or datetime.now(timezone.utc)
        with self._lock:
            self._prune(now)
            return [n for n in self._items if n.is_visible(now)]

    def dismiss(self, notification_id: str) -> bool:
        """Dismiss a toast early. Repeating it, or dismissing an expired one, is a no-op."""
        with self._lock:
            for note in self._items:
                if note.id == notification_id and not note.dismissed:
                    note.dismissed = True
                    return True
        return False

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    def _prune(self, now: datetime) -> None:
        # caller holds the lock
        self._items[:] = [n for n in self._items if not n.dismissed and now < n.expires_at]
