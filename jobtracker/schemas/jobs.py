from pydantic import BaseModel, ConfigDict, field_validator
from typing import Optional
from datetime import date

from jobtracker.models import JobStatus


class JobIn(BaseModel):   # for POST
    company: Optional[str] = None
    position: Optional[str] = None
    link: Optional[str] = None
    status: Optional[JobStatus] = None
    notes: Optional[str] = None
    model_config = ConfigDict(extra="ignore")

    @field_validator("company", "position", "link", "notes")
    @classmethod
    def strip_text(cls, v):
        if v is None: return v
        return str(v).strip()


class JobUpdate(JobIn):  # for PUT / PATCH
    def is_status_only(self) -> bool:
        """A payload carrying nothing but a status is a status change, not an edit."""
        return self.model_fields_set == {"status"} and self.status is not None


class JobOut(BaseModel):
    id: int
    company: str
    position: str
    link: str = ""
    status: JobStatus
    notes: str = ""
    date_added: date
    model_config = ConfigDict(from_attributes=True)


class JobStats(BaseModel):
    applications: int
    interviews: int
    technicalRounds: int
    offers: int


class JobSummary(BaseModel):
    total: int
    by_status: dict[str, int]
    stats: JobStats
