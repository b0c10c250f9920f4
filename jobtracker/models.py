# models.py
import enum
from datetime import date, datetime, timezone

from sqlalchemy import (
    Column, Integer, String, DateTime, Boolean, ForeignKey, Date, Text, JSON, Enum as SAEnum
)
from sqlalchemy.orm import relationship

from jobtracker.db import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JobStatus(str, enum.Enum):
    applied = "Applied"
    in_review = "In Review"
    in_interview = "In Interview"
    technical_round = "Technical Round"
    final_round = "Final Round"
    offer = "Offer"
    rejected = "Rejected"
    withdrawn = "Withdrawn"


class Job(Base):
    __tablename__ = "jobs"

    id = Column(Integer, primary_key=True, index=True)
    company = Column(String(255), nullable=False)
    position = Column(String(255), nullable=False)
    link = Column(String(1024), nullable=False, default="")
    # stored as the display string ("In Review"), not the member name
    status = Column(
        SAEnum(
            JobStatus,
            name="job_status",
            native_enum=False,
            length=32,
            values_callable=lambda members: [m.value for m in members],
        ),
        nullable=False,
        default=JobStatus.applied,
    )
    notes = Column(Text, nullable=False, default="")
    date_added = Column(Date, nullable=False, default=date.today, index=True)


class ResumeTemplate(Base):
    __tablename__ = "resume_templates"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    is_default = Column(Boolean, nullable=False, default=False)


class Resume(Base):
    __tablename__ = "resumes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    template_id = Column(Integer, ForeignKey("resume_templates.id", ondelete="SET NULL"), nullable=True)
    job_id = Column(Integer, ForeignKey("jobs.id", ondelete="SET NULL"), nullable=True)

    # nested documents, serialized on write and decoded on read
    personal_info = Column(JSON, nullable=False)
    summary = Column(Text, nullable=False, default="")
    experience = Column(JSON, nullable=False, default=list)
    education = Column(JSON, nullable=False, default=list)
    skills = Column(JSON, nullable=False, default=list)

    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow, index=True)

    template = relationship("ResumeTemplate", lazy="joined")


class UnlockedTrophy(Base):
    __tablename__ = "unlocked_trophies"

    id = Column(Integer, primary_key=True, autoincrement=True)
    trophy_id = Column(String(64), unique=True, nullable=False, index=True)
    trophy_name = Column(String(255), nullable=False)
    trophy_type = Column(String(32), nullable=False)
    unlocked_date = Column(Date, nullable=False, default=date.today)
    # the grace-period clock starts here
    unlocked_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
