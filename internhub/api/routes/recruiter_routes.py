"""
Recruiter Routes

GET /recruiters/profile - Get own profile
GET /recruiters/internships - Get recruiter's postings
GET /recruiters/applications - Get applications received
PUT /recruiters/applications/{id}/status - Update application status
GET /recruiters/stats - Dashboard counts
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from internhub.core import clock
from internhub.core.auth import require_recruiter
from internhub.core.errors import NotFound
from internhub.core.session import AuthSession
from internhub.models import ApplicationStatus, RecruiterProfile
from internhub.services.entity_store import EntityStore, get_entity_store
from internhub.schemas.schemas import (
    InternshipResponse, ReceivedApplicationResponse, ApplicationStatusUpdate,
    RecruiterStatsResponse, MessageResponse
)

router = APIRouter(prefix="/recruiters", tags=["Recruiters"])


@router.get("/profile", response_model=RecruiterProfile)
async def get_profile(session: AuthSession = Depends(require_recruiter)):
    return session.profile


@router.get("/internships", response_model=List[InternshipResponse])
async def get_my_internships(
    session: AuthSession = Depends(require_recruiter),
    store: EntityStore = Depends(get_entity_store)
):
    """Get all internships posted by this recruiter, newest first."""
    today = clock.today()
    return [
        InternshipResponse.from_internship(i, today)
        for i in store.list_internships_by_recruiter(session.profile.id)
    ]


@router.get("/applications", response_model=List[ReceivedApplicationResponse])
async def get_received_applications(
    internship_id: Optional[str] = Query(None),
    status: Optional[ApplicationStatus] = Query(None),
    session: AuthSession = Depends(require_recruiter),
    store: EntityStore = Depends(get_entity_store)
):
    """Get applications received for this recruiter's internships."""
    rows = store.list_applications_by_recruiter(session.profile.id, internship_id, status)
    return [ReceivedApplicationResponse(**row) for row in rows]


@router.put("/applications/{application_id}/status", response_model=MessageResponse)
async def update_application_status(
    application_id: str,
    data: ApplicationStatusUpdate,
    session: AuthSession = Depends(require_recruiter),
    store: EntityStore = Depends(get_entity_store)
):
    """Update application status. Only applications to this recruiter's internships can change."""
    if not store.update_application_status(application_id, session.profile.id, data.status):
        raise NotFound("Application not found")

    return MessageResponse(message=f"Application status updated to {data.status.value}")


@router.get("/stats", response_model=RecruiterStatsResponse)
async def get_stats(
    session: AuthSession = Depends(require_recruiter),
    store: EntityStore = Depends(get_entity_store)
):
    """Counts for the recruiter dashboard."""
    return RecruiterStatsResponse(**store.recruiter_stats(session.profile.id, clock.today()))
