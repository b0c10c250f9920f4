# resume.py (schemas)
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from datetime import datetime
from typing import Optional, List


class PersonalInfo(BaseModel):
    fullName: str = ""
    email: str = ""
    phone: str = ""
    location: str = ""
    linkedin: str = ""
    website: str = ""
    model_config = ConfigDict(extra="ignore")


class ExperienceItem(BaseModel):
    company: str = ""
    position: str = ""
    location: str = ""
    startDate: str = ""
    endDate: str = ""
    current: bool = False
    description: str = ""
    model_config = ConfigDict(extra="ignore")


class EducationItem(BaseModel):
    institution: str = ""
    degree: str = ""
    field: str = ""
    startDate: str = ""
    endDate: str = ""
    gpa: Optional[str] = None
    model_config = ConfigDict(extra="ignore")

    @field_validator("gpa", mode="before")
    @classmethod
    def gpa_as_text(cls, v):
        if v is None or v == "": return None
        return str(v)


class SkillGroup(BaseModel):
    category: str = ""
    items: List[str] = []
    model_config = ConfigDict(extra="ignore")


class ResumeIn(BaseModel):
    id: Optional[int] = None   # only read by PUT /api/resume
    job_id: Optional[int] = None
    personal_info: Optional[PersonalInfo] = Field(
        default=None, validation_alias=AliasChoices("personal_info", "personalInfo")
    )
    summary: Optional[str] = None
    experience: List[ExperienceItem] = []
    education: List[EducationItem] = []
    skills: List[SkillGroup] = []
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    def has_required_contact(self) -> bool:
        info = self.personal_info
        return bool(info and info.fullName.strip() and info.email.strip())


class ResumeOut(BaseModel):
    id: Optional[int] = None
    template_id: Optional[int] = None
    template_name: Optional[str] = None
    job_id: Optional[int] = None
    personal_info: PersonalInfo
    summary: str = ""
    experience: List[ExperienceItem] = []
    education: List[EducationItem] = []
    skills: List[SkillGroup] = []
    updated_at: Optional[datetime] = None


class ResumeTemplateOut(BaseModel):
    id: int
    name: str
    is_default: bool
    model_config = ConfigDict(from_attributes=True)
