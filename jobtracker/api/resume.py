# resume.py (router)
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import HTMLResponse, PlainTextResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from jobtracker.db import get_db
from jobtracker.documents import generate_html_preview, generate_latex
from jobtracker.models import Resume, ResumeTemplate
from jobtracker.schemas.resume import PersonalInfo, ResumeIn, ResumeOut, ResumeTemplateOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/resume", tags=["resume"])


def empty_resume() -> dict:
    """What GET returns before anything was saved."""
    return {
        "id": None,
        "personal_info": PersonalInfo().model_dump(),
        "summary": "",
        "experience": [],
        "education": [],
        "skills": [],
    }


def resume_to_dict(r: Resume) -> dict:
    return {
        "id": r.id,
        "template_id": r.template_id,
        "template_name": r.template.name if r.template else None,
        "job_id": r.job_id,
        "personal_info": r.personal_info,
        "summary": r.summary,
        "experience": r.experience or [],
        "education": r.education or [],
        "skills": r.skills or [],
        "updated_at": r.updated_at,
    }


def _validate(payload: ResumeIn) -> None:
    if not payload.has_required_contact():
        raise HTTPException(status_code=400, detail="Full name and email are required")


def _apply(r: Resume, payload: ResumeIn) -> None:
    r.job_id = payload.job_id
    r.personal_info = payload.personal_info.model_dump()
    r.summary = payload.summary or ""
    r.experience = [item.model_dump() for item in payload.experience]
    r.education = [item.model_dump() for item in payload.education]
    r.skills = [item.model_dump() for item in payload.skills]
    r.updated_at = datetime.now(timezone.utc)


def _commit(db: Session, failure: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception(failure)
        raise


@router.get("", response_model=ResumeOut)
def get_resume(db: Session = Depends(get_db)):
    r = db.query(Resume).order_by(Resume.updated_at.desc(), Resume.id.desc()).first()
    if not r:
        return empty_resume()
    return resume_to_dict(r)


@router.get("/templates", response_model=list[ResumeTemplateOut])
def list_templates(db: Session = Depends(get_db)):
    return db.query(ResumeTemplate).order_by(ResumeTemplate.id).all()


@router.post("", response_model=ResumeOut, status_code=status.HTTP_201_CREATED)
def create_resume(payload: ResumeIn, db: Session = Depends(get_db)):
    _validate(payload)

    # no default template is fine, the resume is saved without one
    default_template = (
        db.query(ResumeTemplate)
        .filter(ResumeTemplate.is_default.is_(True))
        .order_by(ResumeTemplate.id)
        .first()
    )

    r = Resume(template_id=default_template.id if default_template else None)
    _apply(r, payload)
    db.add(r)
    _commit(db, "Failed to create resume")
    db.refresh(r)
    return resume_to_dict(r)


def _update(resume_id: int, payload: ResumeIn, db: Session) -> dict:
    _validate(payload)
    r = db.query(Resume).filter_by(id=resume_id).first()
    if not r:
        raise HTTPException(status_code=404, detail="Resume not found")
    _apply(r, payload)
    _commit(db, "Failed to update resume")
    db.refresh(r)
    return resume_to_dict(r)


@router.put("", response_model=ResumeOut)
def update_resume(payload: ResumeIn, db: Session = Depends(get_db)):
    if payload.id is None:
        raise HTTPException(status_code=400, detail="Resume ID is required for updates")
    return _update(payload.id, payload, db)


@router.put("/{resume_id}", response_model=ResumeOut)
def update_resume_by_id(resume_id: int, payload: ResumeIn, db: Session = Depends(get_db)):
    return _update(resume_id, payload, db)


# ---------- export ----------
@router.post("/pdf", response_class=HTMLResponse)
def preview_resume(payload: ResumeIn):
    """HTML laid out like the LaTeX version; the browser's print dialog turns it into a PDF."""
    return HTMLResponse(content=generate_html_preview(payload))


@router.post("/latex", response_class=PlainTextResponse)
def download_latex(payload: ResumeIn):
    return PlainTextResponse(
        content=generate_latex(payload),
        headers={"Content-Disposition": 'attachment; filename="resume.tex"'},
    )
