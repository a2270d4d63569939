"""
Role-specific profiles and the resolved identity of a principal.

A principal owns at most one profile, of exactly one role. The role is never
stored; it is whichever profile table holds a row for the principal.
"""

from enum import Enum
from typing import Optional, List, Literal, Union, Annotated
from pydantic import BaseModel, Field


class Role(str, Enum):
    student = "student"
    recruiter = "recruiter"


class StudentProfile(BaseModel):
    id: str
    user_id: str
    full_name: str
    email: str
    phone: Optional[str] = None
    college: Optional[str] = None
    degree: Optional[str] = None
    graduation_year: Optional[int] = None
    skills: List[str] = []
    resume_url: Optional[str] = None


class RecruiterProfile(BaseModel):
    id: str
    user_id: str
    full_name: str
    email: str
    phone: Optional[str] = None
    company: str
    position: str
    company_logo: Optional[str] = None


class StudentIdentity(BaseModel):
    role: Literal["student"] = "student"
    profile: StudentProfile


class RecruiterIdentity(BaseModel):
    role: Literal["recruiter"] = "recruiter"
    profile: RecruiterProfile


Identity = Annotated[Union[StudentIdentity, RecruiterIdentity], Field(discriminator="role")]
