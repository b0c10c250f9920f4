# api/trophies.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from jobtracker.db import get_db
from jobtracker.dependencies import get_trophy_engine, get_trophy_state, get_trophy_store
from jobtracker.models import Job
from jobtracker.schemas.trophies import (
    NotificationOut,
    ReconciliationOut,
    TrophyDefinitionOut,
    TrophySummaryOut,
    TrophyUnlockIn,
    UnlockedTrophyOut,
)
from jobtracker.trophies.catalog import TrophyCategory, TrophyTier, iter_trophies
from jobtracker.trophies.engine import (
    JobStats,
    ReconciliationState,
    TrophyEngine,
    TrophyProgress,
    summarize,
    trophy_progress,
)
from jobtracker.trophies.store import TrophyStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/trophies", tags=["trophies"])


@router.get("", response_model=list[UnlockedTrophyOut])
def list_unlocked(store: TrophyStore = Depends(get_trophy_store)):
    return store.list_unlocked()


@router.post("", responses={200: {"description": "Trophy already unlocked"}})
def unlock_trophy(
    payload: TrophyUnlockIn,
    store: TrophyStore = Depends(get_trophy_store),
    engine: TrophyEngine = Depends(get_trophy_engine),
    state: ReconciliationState = Depends(get_trophy_state),
):
    if not payload.trophy_id or not payload.trophy_name or not payload.trophy_type:
        raise HTTPException(status_code=400, detail="Trophy ID, name, and type are required")

    rec, created = engine.unlock(state, store, payload.trophy_id, payload.trophy_name, payload.trophy_type)
    if not created:
        return JSONResponse(status_code=status.HTTP_200_OK, content={"message": "Trophy already unlocked"})
    body = UnlockedTrophyOut.model_validate(rec).model_dump(mode="json")
    return JSONResponse(status_code=status.HTTP_201_CREATED, content=body)


# DELETE all, for testing/admin purposes
@router.delete("")
def reset_trophies(
    store: TrophyStore = Depends(get_trophy_store),
    engine: TrophyEngine = Depends(get_trophy_engine),
    state: ReconciliationState = Depends(get_trophy_state),
):
    removed = engine.reset(state, store)
    return {"message": "All trophies reset successfully", "removed": removed}


@router.get("/catalog", response_model=list[TrophyDefinitionOut])
def trophy_catalog(
    category: Optional[TrophyCategory] = Query(default=None),
    tier: Optional[TrophyTier] = Query(default=None),
):
    return [TrophyDefinitionOut.from_definition(t) for t in iter_trophies(category=category, tier=tier)]


@router.post("/check", response_model=ReconciliationOut)
def check_trophies(
    db: Session = Depends(get_db),
    store: TrophyStore = Depends(get_trophy_store),
    engine: TrophyEngine = Depends(get_trophy_engine),
    state: ReconciliationState = Depends(get_trophy_state),
):
    """Run a reconciliation against the current job list, loading the unlock set first if needed."""
    if not state.is_loaded:
        engine.load(state, store)
    jobs = db.query(Job).all()
    result = engine.reconcile(state, jobs, store)
    return ReconciliationOut.from_result(result)


@router.get("/summary", response_model=TrophySummaryOut)
def trophy_summary(db: Session = Depends(get_db), store: TrophyStore = Depends(get_trophy_store)):
    unlocked = {rec.trophy_id for rec in store.list_unlocked()}
    stats = JobStats.from_jobs(db.query(Job.status).all())
    progress = [
        TrophyProgress(trophy=t, progress=trophy_progress(t, stats), unlocked=t.id in unlocked)
        for t in iter_trophies()
    ]
    return summarize(progress)


@router.get("/notifications", response_model=list[NotificationOut])
def active_notifications(engine: TrophyEngine = Depends(get_trophy_engine)):
    return [NotificationOut.from_notification(n) for n in engine.notifications.active()]


@router.delete("/notifications/{notification_id}")
def dismiss_notification(notification_id: str, engine: TrophyEngine = Depends(get_trophy_engine)):
    return {"dismissed": engine.notifications.dismiss(notification_id)}


@router.delete("/{trophy_id}")
def revoke_trophy(
    trophy_id: str,
    store: TrophyStore = Depends(get_trophy_store),
    engine: TrophyEngine = Depends(get_trophy_engine),
    state: ReconciliationState = Depends(get_trophy_state),
):
    rec = engine.revoke(state, store, trophy_id)
    if rec is None:
        raise HTTPException(status_code=404, detail="Trophy not found or not unlocked")
    logger.info(f"Trophy revoked: {trophy_id}")
    return {
        "message": "Trophy revoked successfully",
        "trophy": UnlockedTrophyOut.model_validate(rec).model_dump(mode="json"),
    }
