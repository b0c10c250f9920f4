# api/jobs.py
from datetime import date
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from jobtracker.db import get_db
from jobtracker.models import Job, JobStatus
from jobtracker.schemas.jobs import JobIn, JobOut, JobUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/jobs", tags=["jobs"])


def job_to_dict(job: Job) -> dict:
    return JobOut.model_validate(job).model_dump(mode="json")


def _commit(db: Session, failure: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception(failure)
        raise


def _require_company_and_position(app_in: JobIn) -> None:
    if not app_in.company or not app_in.position:
        raise HTTPException(status_code=400, detail="Company and position are required")


# ---------- LIST (supports /api/jobs and /api/jobs/) ----------
@router.get("", response_model=list[JobOut])
@router.get("/", response_model=list[JobOut])
def list_jobs(db: Session = Depends(get_db)):
    return (
        db.query(Job)
        .order_by(Job.date_added.desc(), Job.id.desc())
        .all()
    )


# ---------- CREATE (supports /api/jobs and /api/jobs/) ----------
@router.post("", response_model=JobOut, status_code=status.HTTP_201_CREATED)
@router.post("/", response_model=JobOut, status_code=status.HTTP_201_CREATED)
def create_job(app_in: JobIn, db: Session = Depends(get_db)):
    _require_company_and_position(app_in)

    rec = Job(
        company=app_in.company,
        position=app_in.position,
        link=app_in.link or "",
        status=app_in.status or JobStatus.applied,
        notes=app_in.notes or "",
        date_added=date.today(),
    )
    db.add(rec)
    _commit(db, "Failed to create job")
    db.refresh(rec)
    return rec


# ---------- UPDATE ----------
@router.put("/{job_id}", response_model=JobOut)
@router.patch("/{job_id}", response_model=JobOut)
def update_job(job_id: int, app_in: JobUpdate, db: Session = Depends(get_db)):
    """
    A body of just {"status": ...} moves the job to that status and leaves
    everything else alone. Any other body is a full edit and must carry
    company and position again.
    """
    status_only = app_in.is_status_only()
    if not status_only:
        _require_company_and_position(app_in)

    rec = db.query(Job).filter_by(id=job_id).first()
    if not rec:
        raise HTTPException(status_code=404, detail="Job not found")

    if status_only:
        rec.status = app_in.status
    else:
        rec.company = app_in.company
        rec.position = app_in.position
        rec.link = app_in.link or ""
        rec.notes = app_in.notes or ""
        if app_in.status is not None:
            rec.status = app_in.status

    _commit(db, "Failed to update job")
    db.refresh(rec)
    return rec


# ---------- DELETE ----------
@router.delete("/{job_id}")
def delete_job(job_id: int, db: Session = Depends(get_db)):
    rec = db.query(Job).filter_by(id=job_id).first()
    if not rec:
        raise HTTPException(status_code=404, detail="Job not found")
    deleted = job_to_dict(rec)
    db.delete(rec)
    _commit(db, "Failed to delete job")
    return {"message": "Job deleted successfully", "job": deleted}
