"""
Shared fixtures: in-memory stores that stand in for PostgreSQL and GridFS,
and a TestClient wired to them through dependency overrides.
"""

import uuid
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from internhub.core.auth import create_access_token
from internhub.core.clock import now
from internhub.core.errors import AlreadyApplied, StoreError, ValidationFailed
from internhub.models import (
    Application, ApplicationStatus, Internship, RecruiterProfile, Role, StudentProfile
)
from internhub.services.blob_store import get_blob_store, resume_key
from internhub.services.entity_store import STUDENT_FIELDS, get_entity_store

NOW = now()
TODAY = NOW.date()


def _new_id() -> str:
    return str(uuid.uuid4())


class FakeEntityStore:
    """Same methods as EntityStore, backed by dicts."""

    def __init__(self):
        self.users: Dict[str, Dict[str, Any]] = {}
        self.revoked: Dict[str, datetime] = {}
        self.students: Dict[str, StudentProfile] = {}
        self.recruiters: Dict[str, RecruiterProfile] = {}
        self.internships: Dict[str, Internship] = {}
        self.applications: Dict[str, Application] = {}
        self.failing = set()
        self.writes: List[str] = []

    def _check(self, name: str) -> None:
        if name in self.failing:
            raise StoreError("The database is unavailable. Please try again.")

    def _write(self, name: str) -> None:
        self._check(name)
        self.writes.append(name)

    # users / tokens

    def register_user(self, email: str, password_hash: str, role: Role, fields: Dict[str, Any]) -> str:
        """All or nothing: a failing profile insert leaves no user behind."""
        profile_write = "create_student" if role == Role.student else "create_recruiter"
        self._check("register_user")
        self._check(profile_write)
        if any(u["email"] == email for u in self.users.values()):
            raise ValidationFailed("Email already registered")

        user_id = self._add_user(email, password_hash)
        if role == Role.student:
            self._add_student(user_id, fields)
        else:
            recruiter = RecruiterProfile(
                id=_new_id(), user_id=user_id, full_name=fields["full_name"], email=fields["email"],
                phone=fields.get("phone"), company=fields["company"], position=fields["position"],
                company_logo=fields.get("company_logo")
            )
            self.recruiters[recruiter.id] = recruiter
        self.writes.append("register_user")
        return user_id

    def _add_user(self, email: str, password_hash: str) -> str:
        user_id = _new_id()
        self.users[user_id] = {
            "user_id": user_id, "email": email, "password_hash": password_hash,
            "is_active": True, "created_at": NOW
        }
        return user_id

    def get_user_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        self._check("get_user_by_email")
        for user in self.users.values():
            if user["email"] == email:
                return dict(user)
        return None

    def get_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        self._check("get_user")
        user = self.users.get(user_id)
        if user is None:
            return None
        return {k: v for k, v in user.items() if k != "password_hash"}

    def revoke_token(self, jti: str, expires_at: datetime) -> None:
        self._write("revoke_token")
        current = now()
        self.revoked = {k: v for k, v in self.revoked.items() if v >= current}
        self.revoked[jti] = expires_at

    def is_token_revoked(self, jti: str) -> bool:
        self._check("is_token_revoked")
        return jti in self.revoked

    # students

    def get_student_by_user(self, user_id: str) -> Optional[StudentProfile]:
        self._check("get_student_by_user")
        for student in self.students.values():
            if student.user_id == user_id:
                return student
        return None

    def create_student(self, user_id: str, fields: Dict[str, Any]) -> StudentProfile:
        self._write("create_student")
        return self._add_student(user_id, fields)

    def _add_student(self, user_id: str, fields: Dict[str, Any]) -> StudentProfile:
        data = {field: fields.get(field) for field in STUDENT_FIELDS}
        data["skills"] = data["skills"] or []
        student = StudentProfile(id=_new_id(), user_id=user_id, **data)
        self.students[student.id] = student
        return student

    def update_student(self, student_id: str, fields: Dict[str, Any]) -> StudentProfile:
        self._write("update_student")
        updates = {k: v for k, v in fields.items() if k in STUDENT_FIELDS}
        student = self.students[student_id].model_copy(update=updates)
        self.students[student_id] = student
        return student

    # recruiters

    def get_recruiter_by_user(self, user_id: str) -> Optional[RecruiterProfile]:
        self._check("get_recruiter_by_user")
        for recruiter in self.recruiters.values():
            if recruiter.user_id == user_id:
                return recruiter
        return None

    # internships

    def list_internships(self) -> List[Internship]:
        self._check("list_internships")
        return list(self.internships.values())

    def list_internships_by_recruiter(self, recruiter_id: str) -> List[Internship]:
        self._check("list_internships_by_recruiter")
        return [i for i in self.internships.values() if i.recruiter_id == recruiter_id]

    def get_internship(self, internship_id: str) -> Optional[Internship]:
        self._check("get_internship")
        return self.internships.get(internship_id)

    def create_internship(self, fields: Dict[str, Any]) -> Internship:
        self._write("create_internship")
        internship = Internship(id=_new_id(), posted_date=TODAY, **fields)
        self.internships[internship.id] = internship
        return internship

    def insert_external_internships(self, rows: List[Dict[str, Any]]) -> int:
        self._write("insert_external_internships")
        known = {i.external_id for i in self.internships.values() if i.external_id}
        inserted = 0
        for row in rows:
            if row["external_id"] in known:
                continue
            internship = Internship(id=_new_id(), posted_date=TODAY, **row)
            self.internships[internship.id] = internship
            known.add(internship.external_id)
            inserted += 1
        return inserted

    def increment_applications_count(self, internship_id: str) -> None:
        self._write("increment_applications_count")
        internship = self.internships[internship_id]
        self.internships[internship_id] = internship.model_copy(
            update={"applications_count": internship.applications_count + 1}
        )

    # applications

    def find_application(self, student_id: str, internship_id: str) -> Optional[Application]:
        self._check("find_application")
        for application in self.applications.values():
            if application.student_id == student_id and application.internship_id == internship_id:
                return application
        return None

    def create_application(
        self,
        internship_id: str,
        student_id: str,
        recruiter_id: Optional[str],
        resume_url: Optional[str],
        cover_letter: Optional[str],
        application_date: datetime
    ) -> Application:
        self._write("create_application")
        if self.find_application(student_id, internship_id):
            raise AlreadyApplied("You have already applied to this internship.")
        application = Application(
            id=_new_id(), internship_id=internship_id, student_id=student_id,
            recruiter_id=recruiter_id, resume_url=resume_url, cover_letter=cover_letter,
            application_date=application_date
        )
        self.applications[application.id] = application
        return application

    def list_applications_by_student(self, student_id: str) -> List[Dict[str, Any]]:
        self._check("list_applications_by_student")
        rows = []
        for application in self.applications.values():
            if application.student_id != student_id:
                continue
            internship = self.internships[application.internship_id]
            rows.append({
                **application.model_dump(),
                "internship_title": internship.title,
                "company": internship.company
            })
        return sorted(rows, key=lambda r: r["application_date"], reverse=True)

    def list_applications_by_recruiter(
        self,
        recruiter_id: str,
        internship_id: Optional[str] = None,
        status: Optional[ApplicationStatus] = None
    ) -> List[Dict[str, Any]]:
        self._check("list_applications_by_recruiter")
        rows = []
        for application in self.applications.values():
            if application.recruiter_id != recruiter_id:
                continue
            if internship_id and application.internship_id != internship_id:
                continue
            if status and application.status != status:
                continue
            student = self.students[application.student_id]
            rows.append({
                **application.model_dump(),
                "internship_title": self.internships[application.internship_id].title,
                "student_name": student.full_name,
                "student_email": student.email
            })
        return sorted(rows, key=lambda r: r["application_date"], reverse=True)

    def update_application_status(
        self, application_id: str, recruiter_id: str, status: ApplicationStatus
    ) -> bool:
        self._write("update_application_status")
        application = self.applications.get(application_id)
        if application is None or application.recruiter_id != recruiter_id:
            return False
        self.applications[application_id] = application.model_copy(update={"status": status})
        return True

    def recruiter_stats(self, recruiter_id: str, today: date) -> Dict[str, int]:
        self._check("recruiter_stats")
        own = [i for i in self.internships.values() if i.recruiter_id == recruiter_id]
        received = [a for a in self.applications.values() if a.recruiter_id == recruiter_id]
        return {
            "total_internships": len(own),
            "open_internships": sum(1 for i in own if i.is_open(today)),
            "total_applications": len(received),
            "new_applications": sum(1 for a in received if a.status == ApplicationStatus.applied),
        }


class FakeBlobStore:
    """Keeps uploaded resumes in a dict keyed by storage key."""

    def __init__(self):
        self.files = {}
        self.fail = False

    def upload_resume(self, student_id, resume, uploaded_at) -> str:
        if self.fail:
            raise StoreError("Could not upload your resume. Please try again.")
        key = resume_key(student_id, resume, uploaded_at)
        self.files[key] = resume
        return key


# ============================================================
# BUILDERS
# ============================================================

def make_internship(**overrides) -> Internship:
    data = {
        "id": _new_id(),
        "title": "Backend Developer Intern",
        "company": "Acme Labs",
        "category": "Software Development",
        "description": "Build REST services and write tests for them.",
        "location": {"city": "Bangalore", "state": "Karnataka", "country": "India"},
        "stipend": 15000,
        "duration_months": 3,
        "posted_date": TODAY - timedelta(days=5),
        "deadline": TODAY + timedelta(days=20),
        "is_remote": False,
    }
    data.update(overrides)
    return Internship(**data)


def add_principal(store: FakeEntityStore, email: str) -> str:
    """A signed-up principal with no profile row."""
    return store._add_user(email, "not-a-real-hash")


def add_student(store: FakeEntityStore, email: str = "asha@example.com") -> StudentProfile:
    user_id = store.register_user(
        email, "not-a-real-hash", Role.student, {"full_name": "Asha Rao", "email": email}
    )
    return store.get_student_by_user(user_id)


def add_recruiter(store: FakeEntityStore, email: str = "hr@acme.example.com") -> RecruiterProfile:
    user_id = store.register_user(
        email, "not-a-real-hash", Role.recruiter,
        {"full_name": "Vikram Shah", "email": email, "company": "Acme Labs", "position": "HR Lead"}
    )
    return store.get_recruiter_by_user(user_id)


def auth_headers(user_id: str) -> dict:
    return {"Authorization": f"Bearer {create_access_token({'sub': user_id})}"}


# ============================================================
# FIXTURES
# ============================================================

@pytest.fixture
def store():
    return FakeEntityStore()


@pytest.fixture
def blob_store():
    return FakeBlobStore()


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def client(store, blob_store):
    # Imported here so collecting pure unit tests does not build the app
    from internhub.main import app

    app.dependency_overrides[get_entity_store] = lambda: store
    app.dependency_overrides[get_blob_store] = lambda: blob_store
    yield TestClient(app)
    app.dependency_overrides.clear()
