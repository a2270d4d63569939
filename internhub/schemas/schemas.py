"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
"""

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator
from typing import Optional, List, Union
from datetime import date

from internhub.models import (
    Role, ApplicationStatus, Internship, StudentProfile, RecruiterProfile,
    Application, Notification
)


# ============================================================
# AUTH SCHEMAS
# ============================================================

class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    role: Role
    full_name: str = Field(..., min_length=2, max_length=100)
    phone: Optional[str] = None
    # Recruiters only
    company: Optional[str] = Field(None, min_length=2, max_length=200)
    position: Optional[str] = Field(None, min_length=2, max_length=100)

    @model_validator(mode="after")
    def recruiter_needs_company(self):
        if self.role == Role.recruiter and not (self.company and self.position):
            raise ValueError("Recruiters must provide company and position")
        return self

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str
    role: Optional[Role] = None

class SessionResponse(BaseModel):
    user_id: str
    email: str
    role: Optional[Role] = None
    profile: Optional[Union[StudentProfile, RecruiterProfile]] = None
    notifications: List[Notification] = []


# ============================================================
# STUDENT SCHEMAS
# ============================================================

class StudentUpdate(BaseModel):
    full_name: Optional[str] = Field(None, min_length=2, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    college: Optional[str] = None
    degree: Optional[str] = None
    graduation_year: Optional[int] = Field(None, ge=2000, le=2100)
    skills: Optional[List[str]] = None


# ============================================================
# INTERNSHIP SCHEMAS
# ============================================================

class InternshipCreate(BaseModel):
    title: str = Field(..., min_length=5, max_length=200)
    company: str = Field(..., min_length=2, max_length=200)
    company_logo: Optional[str] = None
    category: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=20)
    responsibilities: List[str] = []
    requirements: List[str] = []
    city: str = Field(..., min_length=2)
    state: str = Field(..., min_length=2)
    stipend: int = Field(0, ge=0)
    duration_months: int = Field(..., gt=0)
    deadline: date
    is_remote: bool = False
    skills: List[str] = []
    slots: int = Field(1, gt=0)

    @field_validator("responsibilities", "requirements")
    @classmethod
    def drop_blank_and_check_length(cls, items: List[str]) -> List[str]:
        items = [item.strip() for item in items if item.strip()]
        for item in items:
            if len(item) < 5:
                raise ValueError("Each entry must be at least 5 characters")
        return items

    @field_validator("skills")
    @classmethod
    def drop_blank_skills(cls, items: List[str]) -> List[str]:
        return [item.strip() for item in items if item.strip()]

class InternshipResponse(Internship):
    days_left: int
    is_open: bool

    @classmethod
    def from_internship(cls, internship: Internship, today: Optional[date] = None) -> "InternshipResponse":
        return cls(
            **internship.model_dump(),
            days_left=internship.days_left(today),
            is_open=internship.is_open(today)
        )

class InternshipListResponse(BaseModel):
    internships: List[InternshipResponse]
    total: int

class InternshipDetailResponse(BaseModel):
    internship: InternshipResponse
    similar: List[InternshipResponse] = []

class FilterOptionsResponse(BaseModel):
    categories: List[str]
    cities: List[str]

class IngestRequest(BaseModel):
    category: str = ""

class IngestResponse(BaseModel):
    count: int
    notification: Notification


# ============================================================
# APPLICATION SCHEMAS
# ============================================================

class ApplicationSubmitResponse(BaseModel):
    application: Application
    notification: Notification

class StudentApplicationResponse(Application):
    internship_title: str
    company: str

class ReceivedApplicationResponse(Application):
    internship_title: str
    student_name: str
    student_email: str

class ApplicationStatusUpdate(BaseModel):
    status: ApplicationStatus


# ============================================================
# RECRUITER SCHEMAS
# ============================================================

class RecruiterStatsResponse(BaseModel):
    total_internships: int
    open_internships: int
    total_applications: int
    new_applications: int


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class MessageResponse(BaseModel):
    message: str
    success: bool = True

class ErrorResponse(BaseModel):
    title: str
    detail: str
    redirect_to: Optional[str] = None
