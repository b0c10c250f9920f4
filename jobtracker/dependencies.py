from datetime import timedelta
import os

from dotenv import load_dotenv #for .env files
from fastapi import Depends
from sqlalchemy.orm import Session

from jobtracker.db import get_db
from jobtracker.trophies.engine import ReconciliationState, TrophyEngine
from jobtracker.trophies.notifications import NotificationCenter
from jobtracker.trophies.store import TrophyStore

load_dotenv()

TROPHY_GRACE_PERIOD_SECONDS = int(os.getenv("TROPHY_GRACE_PERIOD_SECONDS", 300))
TROPHY_NOTIFICATION_STAGGER_SECONDS = float(os.getenv("TROPHY_NOTIFICATION_STAGGER_SECONDS", 1))
TROPHY_NOTIFICATION_DURATION_SECONDS = float(os.getenv("TROPHY_NOTIFICATION_DURATION_SECONDS", 5))


def build_engine() -> TrophyEngine:
    notifications = NotificationCenter(
        stagger=timedelta(seconds=TROPHY_NOTIFICATION_STAGGER_SECONDS),
        duration=timedelta(seconds=TROPHY_NOTIFICATION_DURATION_SECONDS),
    )
    return TrophyEngine(
        grace_period=timedelta(seconds=TROPHY_GRACE_PERIOD_SECONDS),
        notifications=notifications,
    )


# single user, so one engine and one session state for the whole process
trophy_engine = build_engine()
trophy_state = ReconciliationState()


def get_trophy_engine() -> TrophyEngine:
    return trophy_engine


def get_trophy_state() -> ReconciliationState:
    return trophy_state


def get_trophy_store(db: Session = Depends(get_db)) -> TrophyStore:
    return TrophyStore(db)


def reset_trophy_session() -> None:
    """Forget everything cached in memory; the next check reloads from the database."""
    global trophy_engine, trophy_state
    trophy_engine = build_engine()
    trophy_state = ReconciliationState()
