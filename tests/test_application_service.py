"""
Application submission workflow.
"""

from datetime import timedelta

import pytest

from internhub.core.errors import (
    AuthenticationRequired, AuthorizationDenied, NotFound, ValidationFailed,
    AlreadyApplied, StoreError
)
from internhub.core.session import AuthSession
from internhub.models import ApplicationStatus
from internhub.services.application_service import ApplicationService, ApplicationForm
from internhub.services.identity_service import IdentityResolver
from internhub.utils.file_upload import ResumeFile

from conftest import NOW, TODAY, add_principal, add_student, add_recruiter, make_internship

FORM = {
    "full_name": "Asha Rao",
    "email": "asha@example.com",
    "degree": "B.Tech",
    "graduation_year": 2027,
    "college": "IIT Madras",
    "cover_letter": "I build things.",
}


@pytest.fixture
def service(store, blob_store):
    return ApplicationService(store, blob_store, clock=lambda: NOW)


@pytest.fixture
def internship(store):
    recruiter = add_recruiter(store)
    internship = make_internship(recruiter_id=recruiter.id)
    store.internships[internship.id] = internship
    return internship


@pytest.fixture
def student_session(store):
    student = add_student(store)
    session = AuthSession(IdentityResolver(store))
    session.restore(student.user_id)
    return session


@pytest.fixture
def resume():
    return ResumeFile(filename="Asha CV.pdf", content=b"%PDF-1.4 resume", content_type="application/pdf")


def test_anonymous_submission_writes_nothing(store, blob_store, service, internship, resume):
    store.writes.clear()
    session = AuthSession(IdentityResolver(store))

    with pytest.raises(AuthenticationRequired) as exc_info:
        service.submit(session, internship.id, FORM, resume)

    assert exc_info.value.to_content()["redirect_to"] == "/auth"
    assert store.writes == []
    assert blob_store.files == {}


def test_recruiter_cannot_apply(store, blob_store, service, internship):
    recruiter = next(iter(store.recruiters.values()))
    session = AuthSession(IdentityResolver(store))
    session.restore(recruiter.user_id)
    store.writes.clear()

    with pytest.raises(AuthorizationDenied):
        service.submit(session, internship.id, FORM)

    assert store.writes == []


def test_signed_in_without_profile_is_denied(store, service, internship):
    user_id = add_principal(store, "nobody@example.com")
    session = AuthSession(IdentityResolver(store))
    session.restore(user_id)

    with pytest.raises(AuthorizationDenied):
        service.submit(session, internship.id, FORM)


def test_successful_submission_with_resume(store, blob_store, service, internship, student_session, resume):
    student_id = student_session.profile.id

    result = service.submit(student_session, internship.id, FORM, resume)

    expected_key = f"{student_id}/{int(NOW.timestamp() * 1000)}.pdf"
    assert list(blob_store.files) == [expected_key]

    application = result.application
    assert list(store.applications) == [application.id]
    assert application.resume_url == expected_key
    assert application.status == ApplicationStatus.applied
    assert application.recruiter_id == internship.recruiter_id
    assert application.cover_letter == "I build things."
    assert application.application_date == NOW

    assert store.writes.count("increment_applications_count") == 1
    assert store.internships[internship.id].applications_count == 1
    assert result.notification.title == "Application submitted!"


def test_submission_without_resume(store, blob_store, service, internship, student_session):
    result = service.submit(student_session, internship.id, FORM)

    assert result.application.resume_url is None
    assert blob_store.files == {}


def test_form_overwrites_stored_profile(store, service, internship, student_session):
    service.submit(student_session, internship.id, FORM)

    profile = store.students[student_session.profile.id]
    assert profile.degree == "B.Tech"
    assert profile.graduation_year == 2027
    assert profile.college == "IIT Madras"
    assert student_session.profile.degree == "B.Tech"
    assert len(store.students) == 1


def test_missing_profile_row_is_created(store, service, internship, student_session):
    store.students.clear()

    result = service.submit(student_session, internship.id, FORM)

    assert len(store.students) == 1
    created = next(iter(store.students.values()))
    assert created.user_id == student_session.principal_id
    assert result.application.student_id == created.id


def test_blank_college_keeps_stored_value(store, service, internship, student_session):
    store.update_student(student_session.profile.id, {"college": "NIT Trichy"})

    service.submit(student_session, internship.id, dict(FORM, college=""))

    assert store.students[student_session.profile.id].college == "NIT Trichy"


def test_invalid_form_is_rejected_before_any_write(store, service, internship, student_session):
    store.writes.clear()

    with pytest.raises(ValidationFailed) as exc_info:
        service.submit(student_session, internship.id, dict(FORM, email="not-an-email", graduation_year=1990))

    assert "email" in exc_info.value.detail
    assert "graduation_year" in exc_info.value.detail
    assert store.writes == []


def test_unsupported_resume_type_is_rejected(store, blob_store, service, internship, student_session):
    exe = ResumeFile(filename="cv.exe", content=b"MZ", content_type="application/octet-stream")

    with pytest.raises(ValidationFailed):
        service.submit(student_session, internship.id, FORM, exe)

    assert blob_store.files == {}
    assert store.applications == {}


def test_upload_failure_aborts_before_application(store, blob_store, service, internship, student_session, resume):
    blob_store.fail = True

    with pytest.raises(StoreError):
        service.submit(student_session, internship.id, FORM, resume)

    assert store.applications == {}


def test_profile_update_failure_aborts_before_upload(store, blob_store, service, internship, student_session, resume):
    store.failing.add("update_student")

    with pytest.raises(StoreError):
        service.submit(student_session, internship.id, FORM, resume)

    assert blob_store.files == {}
    assert store.applications == {}


def test_profile_create_failure_aborts_before_upload(store, blob_store, service, internship, student_session, resume):
    store.students.clear()
    store.failing.add("create_student")

    with pytest.raises(StoreError):
        service.submit(student_session, internship.id, FORM, resume)

    assert blob_store.files == {}
    assert store.applications == {}


def test_missing_internship_leaves_orphaned_resume(store, blob_store, service, student_session, resume):
    with pytest.raises(NotFound):
        service.submit(student_session, "does-not-exist", FORM, resume)

    assert len(blob_store.files) == 1
    assert store.applications == {}


def test_closed_internship_rejected(store, service, student_session):
    closed = make_internship(deadline=TODAY)
    store.internships[closed.id] = closed

    with pytest.raises(ValidationFailed) as exc_info:
        service.submit(student_session, closed.id, FORM)

    assert exc_info.value.title == "Applications closed"
    assert store.applications == {}


def test_closed_internship_keeps_profile_and_uploads_nothing(store, blob_store, service, student_session, resume):
    closed = make_internship(deadline=TODAY - timedelta(days=1))
    store.internships[closed.id] = closed
    store.writes.clear()

    with pytest.raises(ValidationFailed):
        service.submit(student_session, closed.id, dict(FORM, degree="M.Sc"), resume)

    assert store.writes == []
    assert blob_store.files == {}
    assert store.students[student_session.profile.id].degree is None


def test_second_application_to_same_internship_rejected(store, service, internship, student_session):
    service.submit(student_session, internship.id, FORM)

    with pytest.raises(AlreadyApplied) as exc_info:
        service.submit(student_session, internship.id, FORM)

    assert exc_info.value.status_code == 409
    assert len(store.applications) == 1
    assert store.internships[internship.id].applications_count == 1


def test_second_application_uploads_nothing(store, blob_store, service, internship, student_session, resume):
    first = service.submit(student_session, internship.id, FORM, resume)
    store.writes.clear()
    a_minute_later = ApplicationService(store, blob_store, clock=lambda: NOW + timedelta(minutes=1))

    with pytest.raises(AlreadyApplied):
        a_minute_later.submit(student_session, internship.id, dict(FORM, degree="M.Sc"), resume)

    assert list(blob_store.files) == [first.application.resume_url]
    assert store.writes == []
    assert store.students[student_session.profile.id].degree == "B.Tech"


def test_counter_failure_keeps_application(store, service, internship, student_session):
    store.failing.add("increment_applications_count")

    result = service.submit(student_session, internship.id, FORM)

    assert result.application.id in store.applications
    assert store.internships[internship.id].applications_count == 0


def test_internship_without_recruiter(store, service, student_session):
    ingested = make_internship(recruiter_id=None, external_id="li-1", deadline=TODAY + timedelta(days=30))
    store.internships[ingested.id] = ingested

    result = service.submit(student_session, ingested.id, FORM)

    assert result.application.recruiter_id is None


def test_application_form_profile_fields_skip_empty_college():
    form = ApplicationForm(**dict(FORM, college=None))
    assert "college" not in form.profile_fields()
