# api/metrics.py
from typing import List, Tuple
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import func
from jobtracker.db import get_db
from jobtracker.models import Job, JobStatus
from jobtracker.schemas.jobs import JobSummary
from jobtracker.trophies.engine import JobStats

router = APIRouter(prefix="/api/jobs", tags=["jobs-metrics"])


@router.get("/summary", response_model=JobSummary)
def jobs_summary(db: Session = Depends(get_db)):
    # Totals by status
    rows: List[Tuple[JobStatus, int]] = (
        db.query(Job.status, func.count())
        .group_by(Job.status)
        .all()
    )
    counted = {s.value: c for s, c in rows}
    by_status = {s.value: counted.get(s.value, 0) for s in JobStatus}

    # the same numbers the trophy checks run on
    stats = JobStats.from_jobs(db.query(Job.status).all())

    return {
        "total": sum(by_status.values()),
        "by_status": by_status,
        "stats": stats.as_dict(),
    }
