"""
Student Routes

GET /students/profile - Get own profile
PUT /students/profile - Update profile
GET /students/resume/formats - Get supported resume formats
GET /students/applications - Get my applications
"""

from typing import List

from fastapi import APIRouter, Depends

from internhub.core.auth import require_student
from internhub.core.errors import ValidationFailed
from internhub.core.session import AuthSession
from internhub.models import StudentProfile
from internhub.services.entity_store import EntityStore, get_entity_store
from internhub.utils.file_upload import get_supported_formats
from internhub.schemas.schemas import StudentUpdate, StudentApplicationResponse

router = APIRouter(prefix="/students", tags=["Students"])


@router.get("/profile", response_model=StudentProfile)
async def get_profile(session: AuthSession = Depends(require_student)):
    """Get current student's profile."""
    return session.profile


@router.put("/profile", response_model=StudentProfile)
async def update_profile(
    data: StudentUpdate,
    session: AuthSession = Depends(require_student),
    store: EntityStore = Depends(get_entity_store)
):
    """Update student profile. Only the given fields change."""
    fields = data.model_dump(exclude_unset=True, exclude_none=True)
    if not fields:
        raise ValidationFailed("No fields to update")

    if "email" in fields:
        fields["email"] = str(fields["email"])

    profile = store.update_student(session.profile.id, fields)
    session.update_profile(profile)
    return profile


@router.get("/applications", response_model=List[StudentApplicationResponse])
async def get_my_applications(
    session: AuthSession = Depends(require_student),
    store: EntityStore = Depends(get_entity_store)
):
    """Get all applications made by current student, newest first."""
    rows = store.list_applications_by_student(session.profile.id)
    return [StudentApplicationResponse(**row) for row in rows]


@router.get("/resume/formats")
async def get_resume_formats():
    """Get supported resume file formats."""
    return get_supported_formats()
