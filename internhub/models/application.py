from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel


class ApplicationStatus(str, Enum):
    applied = "applied"
    shortlisted = "shortlisted"
    interviewed = "interviewed"
    selected = "selected"
    rejected = "rejected"


class Application(BaseModel):
    id: str
    internship_id: str
    student_id: str
    recruiter_id: Optional[str] = None
    resume_url: Optional[str] = None
    cover_letter: Optional[str] = None
    status: ApplicationStatus = ApplicationStatus.applied
    application_date: datetime
