"""
Application Submission Workflow

Steps, in order:
1. Caller must be signed in              -> AuthenticationRequired
2. Caller must be a student              -> AuthorizationDenied
3. Validate the form, then upsert the student profile (form wins over stored values)
4. Validate and upload the resume, if one is attached
5. Look up the internship                -> NotFound / ValidationFailed / AlreadyApplied
6. Insert the application (status 'applied')
7. Increment the internship's applications_count (best effort, logged on failure)

Before step 3, an internship that is already known to be closed, or that the
signed-in student has already applied to, is refused without touching the
profile or the blob store. Step 5 repeats those checks for the submission
itself.

The resume is uploaded before the application row is written. If a later
step fails, the uploaded file stays in the blob store unreferenced.
"""

import logging
from datetime import datetime
from typing import Callable, Optional, Union

from pydantic import BaseModel, EmailStr, Field, ValidationError

from internhub.core import clock as marketplace_clock
from internhub.core.errors import (
    AuthenticationRequired, AuthorizationDenied, NotFound, ValidationFailed,
    AlreadyApplied, StoreError
)
from internhub.core.session import AuthSession
from internhub.models import Application, Internship, Notification, Role, StudentProfile
from internhub.services.blob_store import BlobStore
from internhub.services.entity_store import EntityStore
from internhub.utils.file_upload import ResumeFile, validate_resume

logger = logging.getLogger(__name__)


class ApplicationForm(BaseModel):
    """Fields the student submits with an application."""
    full_name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    degree: str = Field(..., min_length=1, max_length=100)
    graduation_year: int = Field(..., ge=2000, le=2100)
    college: Optional[str] = None
    cover_letter: Optional[str] = None

    @classmethod
    def from_submission(cls, data: dict) -> "ApplicationForm":
        try:
            return cls(**data)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            raise ValidationFailed(problems) from e

    def profile_fields(self) -> dict:
        fields = {
            "full_name": self.full_name,
            "email": str(self.email),
            "degree": self.degree,
            "graduation_year": self.graduation_year,
        }
        if self.college:
            fields["college"] = self.college
        return fields


class SubmissionResult(BaseModel):
    application: Application
    notification: Notification


class ApplicationService:

    def __init__(self, store: EntityStore, blob_store: BlobStore, clock: Optional[Callable[[], datetime]] = None):
        self.store = store
        self.blob_store = blob_store
        self.clock = clock or marketplace_clock.now

    def submit(
        self,
        session: AuthSession,
        internship_id: str,
        form: Union[ApplicationForm, dict],
        resume: Optional[ResumeFile] = None
    ) -> SubmissionResult:
        if not session.is_authenticated:
            raise AuthenticationRequired("Please sign in to apply for internships.")

        if session.role != Role.student:
            raise AuthorizationDenied(
                "Only student accounts can apply for internships.",
                title="Student account required"
            )

        if not isinstance(form, ApplicationForm):
            form = ApplicationForm.from_submission(form)

        now = self.clock()
        known = self.store.get_internship(internship_id)
        if known is not None:
            self._ensure_can_apply(session.profile.id, known, now)

        student = self._upsert_profile(session, form)
        session.update_profile(student)

        resume_url = None
        if resume is not None:
            validate_resume(resume)
            resume_url = self.blob_store.upload_resume(student.id, resume, now)

        internship = self.store.get_internship(internship_id)
        if internship is None:
            raise NotFound("This internship no longer exists.")
        self._ensure_can_apply(student.id, internship, now)

        application = self.store.create_application(
            internship_id=internship.id,
            student_id=student.id,
            recruiter_id=internship.recruiter_id,
            resume_url=resume_url,
            cover_letter=form.cover_letter or None,
            application_date=now
        )

        try:
            self.store.increment_applications_count(internship.id)
        except StoreError as e:
            logger.warning(
                "Could not increment applications_count for internship %s: %s", internship.id, e.detail
            )

        logger.info("Student %s applied to internship %s", student.id, internship.id)
        return SubmissionResult(
            application=application,
            notification=Notification(
                title="Application submitted!",
                description="Your application has been successfully submitted."
            )
        )

    def _ensure_can_apply(self, student_id: str, internship: Internship, now: datetime) -> None:
        if not internship.is_open(now.date()):
            raise ValidationFailed("The application deadline has passed.", title="Applications closed")
        if self.store.find_application(student_id, internship.id):
            raise AlreadyApplied("You have already applied to this internship.")

    def _upsert_profile(self, session: AuthSession, form: ApplicationForm) -> StudentProfile:
        """Create the student profile if missing, else overwrite it with the form fields."""
        fields = form.profile_fields()
        existing = self.store.get_student_by_user(session.principal_id)
        if existing is None:
            return self.store.create_student(session.principal_id, fields)
        return self.store.update_student(existing.id, fields)
