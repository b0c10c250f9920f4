# trophies/store.py
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from jobtracker.models import UnlockedTrophy


class TrophyStore:
    """Persisted unlock set, one row per trophy_id."""

    def __init__(self, db: Session):
        self.db = db

    def list_unlocked(self) -> list[UnlockedTrophy]:
        return (
            self.db.query(UnlockedTrophy)
            .order_by(UnlockedTrophy.unlocked_at.desc(), UnlockedTrophy.id.desc())
            .all()
        )

    def get(self, trophy_id: str) -> Optional[UnlockedTrophy]:
        return self.db.query(UnlockedTrophy).filter_by(trophy_id=trophy_id).one_or_none()

    def unlock(
        self,
        trophy_id: str,
        trophy_name: str,
        trophy_type: str,
        now: Optional[datetime] = None,
    ) -> tuple[UnlockedTrophy, bool]:
        """Insert the unlock record. Returns (record, created).

        A second unlock of the same id hits the unique constraint and
        comes back as the existing row with created=False.
        """
        now = now or datetime.now(timezone.utc)
        rec = UnlockedTrophy(
            trophy_id=trophy_id,
            trophy_name=trophy_name,
            trophy_type=trophy_type,
            unlocked_date=now.date(),
            unlocked_at=now,
        )
        self.db.add(rec)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            already = self.get(trophy_id)
            if already is None:
                raise
            return already, False
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(rec)
        return rec, True

    def revoke(self, trophy_id: str) -> Optional[UnlockedTrophy]:
        """Delete the unlock record; returns what was deleted, or None."""
        rec = self.get(trophy_id)
        if rec is None:
            return None
        self.db.delete(rec)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return rec

    def reset(self) -> int:
        try:
            count = self.db.query(UnlockedTrophy).delete(synchronize_session=False)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return count

