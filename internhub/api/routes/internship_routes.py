"""
Internship Routes

GET /internships - Browse the catalog with filters
GET /internships/options - Suggested categories and cities for the filter pickers
GET /internships/{internship_id} - Internship details with similar internships
POST /internships - Post an internship (recruiter only)
POST /internships/ingest - Pull new listings from the job provider
POST /internships/{internship_id}/apply - Apply with an optional resume (student only)
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile

from internhub.core import clock
from internhub.core.auth import get_auth_session, require_session
from internhub.core.config import get_settings
from internhub.core.errors import AuthorizationDenied, NotFound
from internhub.core.session import AuthSession
from internhub.models import INDIA, InternshipFilter, Notification, Role
from internhub.models.internship import ALL, SUGGESTED_CATEGORIES, SUGGESTED_CITIES
from internhub.services.application_service import ApplicationService
from internhub.services.blob_store import BlobStore, get_blob_store
from internhub.services.entity_store import EntityStore, get_entity_store
from internhub.services.filter_service import filter_internships, similar_internships
from internhub.services.ingestion_service import ListingIngestionService, get_ingestion_service
from internhub.utils.file_upload import read_upload
from internhub.schemas.schemas import (
    InternshipCreate, InternshipResponse, InternshipListResponse, InternshipDetailResponse,
    FilterOptionsResponse, IngestRequest, IngestResponse, ApplicationSubmitResponse, ErrorResponse
)

router = APIRouter(prefix="/internships", tags=["Internships"])

APPLY_ERRORS = {
    status: {"model": ErrorResponse} for status in (400, 401, 403, 404, 409, 503)
}


@router.get("", response_model=InternshipListResponse)
async def list_internships(
    query: Optional[str] = Query(None, description="Search in title, company and description"),
    category: Optional[str] = Query(None),
    city: Optional[str] = Query(None),
    duration: Optional[int] = Query(None, gt=0, description="Maximum duration in months"),
    stipend_min: Optional[int] = Query(None, ge=0),
    stipend_max: Optional[int] = Query(None, ge=0),
    is_remote: Optional[bool] = Query(None),
    store: EntityStore = Depends(get_entity_store)
):
    """List internships in India matching every given filter, in catalog order."""
    criteria = InternshipFilter(
        query=query, category=category, city=city, duration=duration,
        stipend_min=stipend_min, stipend_max=stipend_max, is_remote=is_remote
    )
    results = filter_internships(
        store.list_internships(), criteria, get_settings().search_query_overrides_filters
    )

    today = clock.today()
    return InternshipListResponse(
        internships=[InternshipResponse.from_internship(i, today) for i in results],
        total=len(results)
    )


@router.get("/options", response_model=FilterOptionsResponse)
async def get_filter_options():
    """Picker values. Free-text values outside these lists are still accepted."""
    return FilterOptionsResponse(
        categories=[ALL] + SUGGESTED_CATEGORIES,
        cities=[ALL] + SUGGESTED_CITIES
    )


@router.get("/{internship_id}", response_model=InternshipDetailResponse)
async def get_internship(internship_id: str, store: EntityStore = Depends(get_entity_store)):
    """Get an internship with up to three others from the same category."""
    internship = store.get_internship(internship_id)
    if internship is None:
        raise NotFound("Internship not found")

    today = clock.today()
    similar = similar_internships(store.list_internships(), internship)
    return InternshipDetailResponse(
        internship=InternshipResponse.from_internship(internship, today),
        similar=[InternshipResponse.from_internship(i, today) for i in similar]
    )


@router.post("", response_model=InternshipResponse, status_code=201)
async def create_internship(
    internship: InternshipCreate,
    session: AuthSession = Depends(require_session),
    store: EntityStore = Depends(get_entity_store)
):
    """Post a new internship. Only recruiters can post; the country is always India."""
    if session.role != Role.recruiter:
        raise AuthorizationDenied("Only recruiters can post internships")

    fields = internship.model_dump(exclude={"city", "state"})
    fields["location"] = {"city": internship.city, "state": internship.state, "country": INDIA}
    fields["recruiter_id"] = session.profile.id

    created = store.create_internship(fields)
    return InternshipResponse.from_internship(created, clock.today())


@router.post("/ingest", response_model=IngestResponse)
async def ingest_internships(
    request: IngestRequest,
    session: AuthSession = Depends(require_session),
    service: ListingIngestionService = Depends(get_ingestion_service)
):
    """Fetch internship listings for a category from the job provider and add the new ones."""
    category = "" if request.category == ALL else request.category
    count = await service.ingest(category)
    return IngestResponse(
        count=count,
        notification=Notification(
            title="New internships loaded!",
            description=f"Found {count} new internships."
        )
    )


@router.post(
    "/{internship_id}/apply", response_model=ApplicationSubmitResponse, status_code=201, responses=APPLY_ERRORS
)
async def apply_to_internship(
    internship_id: str,
    full_name: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    degree: Optional[str] = Form(None),
    graduation_year: Optional[str] = Form(None),
    college: Optional[str] = Form(None),
    cover_letter: Optional[str] = Form(None),
    resume: Optional[UploadFile] = File(None),
    session: AuthSession = Depends(get_auth_session),
    store: EntityStore = Depends(get_entity_store),
    blob_store: BlobStore = Depends(get_blob_store)
):
    """
    Apply to an internship (multipart form).

    Sign-in and role are checked before the form is validated, so anonymous
    callers always get a 401 pointing at the sign-in page.
    """
    form = {
        "full_name": full_name, "email": email, "degree": degree,
        "graduation_year": graduation_year, "college": college, "cover_letter": cover_letter
    }
    resume_file = await read_upload(resume)

    result = ApplicationService(store, blob_store).submit(session, internship_id, form, resume_file)
    return ApplicationSubmitResponse(application=result.application, notification=result.notification)
