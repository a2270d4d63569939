"""
Entity Store - PostgreSQL CRUD for the marketplace tables.

Tables:
1. users           - credentials (the principal)
2. revoked_tokens  - JWT ids invalidated by sign-out
3. students        - student profiles (one per principal)
4. recruiters      - recruiter profiles (one per principal)
5. internships     - the catalog
6. applications    - student applications to internships

All queries are plain SQL through SQLAlchemy text(). Database failures are
raised as StoreError by get_db_session().
"""

import json
import uuid
from datetime import date, datetime
from typing import Optional, List, Dict, Any

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from internhub.core.errors import AlreadyApplied, ValidationFailed
from internhub.db.postgres import get_db_session
from internhub.models import (
    Internship, StudentProfile, RecruiterProfile, Application, ApplicationStatus, Role
)


INTERNSHIP_COLUMNS = """
    id::text AS id, title, company, company_logo, category, description,
    responsibilities, requirements, location, stipend, duration_months,
    posted_date, deadline, is_remote, skills, slots, applications_count,
    recruiter_id::text AS recruiter_id, external_id, external_url
"""

STUDENT_COLUMNS = """
    id::text AS id, user_id::text AS user_id, full_name, email, phone, college,
    degree, graduation_year, skills, resume_url
"""

RECRUITER_COLUMNS = """
    id::text AS id, user_id::text AS user_id, full_name, email, phone, company,
    position, company_logo
"""

APPLICATION_COLUMNS = """
    a.id::text AS id, a.internship_id::text AS internship_id,
    a.student_id::text AS student_id, a.recruiter_id::text AS recruiter_id,
    a.resume_url, a.cover_letter, a.status, a.application_date
"""

STUDENT_FIELDS = ["full_name", "email", "phone", "college", "degree", "graduation_year", "skills"]


def _is_uuid(value: str) -> bool:
    """Path ids come from clients; anything that is not a UUID cannot match a row."""
    try:
        uuid.UUID(str(value))
        return True
    except ValueError:
        return False


def _internship(row) -> Internship:
    data = dict(row)
    if isinstance(data.get("location"), str):
        data["location"] = json.loads(data["location"])
    for field in ("responsibilities", "requirements", "skills"):
        data[field] = data.get(field) or []
    return Internship(**data)


def _student(row) -> StudentProfile:
    data = dict(row)
    data["skills"] = data.get("skills") or []
    return StudentProfile(**data)


def _insert_student(db, user_id: str, fields: Dict[str, Any]):
    params = {field: fields.get(field) for field in STUDENT_FIELDS}
    params["skills"] = params["skills"] or []
    params["user_id"] = user_id
    return db.execute(
        text(f"""
            INSERT INTO students (user_id, full_name, email, phone, college, degree, graduation_year, skills)
            VALUES (:user_id, :full_name, :email, :phone, :college, :degree, :graduation_year, :skills)
            RETURNING {STUDENT_COLUMNS}
        """),
        params
    ).mappings().fetchone()


def _insert_recruiter(db, user_id: str, fields: Dict[str, Any]):
    return db.execute(
        text(f"""
            INSERT INTO recruiters (user_id, full_name, email, phone, company, position, company_logo)
            VALUES (:user_id, :full_name, :email, :phone, :company, :position, :company_logo)
            RETURNING {RECRUITER_COLUMNS}
        """),
        {
            "user_id": user_id,
            "full_name": fields["full_name"],
            "email": fields["email"],
            "phone": fields.get("phone"),
            "company": fields["company"],
            "position": fields["position"],
            "company_logo": fields.get("company_logo"),
        }
    ).mappings().fetchone()


class EntityStore:
    """
    Access to every relational collection the marketplace uses.
    One instance is shared by the whole app (see get_entity_store()).
    """

    # ------------------------------------------------------------
    # USERS / TOKENS
    # ------------------------------------------------------------

    def register_user(self, email: str, password_hash: str, role: Role, fields: Dict[str, Any]) -> str:
        """
        Insert a principal together with its profile for the chosen role.

        Both rows are written in one transaction: if the profile insert
        fails, the principal is rolled back too. Returns the new user id.
        """
        with get_db_session() as db:
            try:
                user_id = db.execute(
                    text("""
                        INSERT INTO users (email, password_hash)
                        VALUES (:email, :password_hash)
                        RETURNING user_id::text
                    """),
                    {"email": email, "password_hash": password_hash}
                ).scalar_one()
            except IntegrityError:
                raise ValidationFailed("Email already registered")

            if role == Role.student:
                _insert_student(db, user_id, fields)
            else:
                _insert_recruiter(db, user_id, fields)
        return user_id

    def get_user_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        with get_db_session() as db:
            row = db.execute(
                text("SELECT user_id::text AS user_id, email, password_hash, is_active FROM users WHERE email = :email"),
                {"email": email}
            ).mappings().fetchone()
        return dict(row) if row else None

    def get_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        if not _is_uuid(user_id):
            return None
        with get_db_session() as db:
            row = db.execute(
                text("SELECT user_id::text AS user_id, email, is_active, created_at FROM users WHERE user_id = :id"),
                {"id": user_id}
            ).mappings().fetchone()
        return dict(row) if row else None

    def revoke_token(self, jti: str, expires_at: datetime) -> None:
        """Remember a signed-out token until it expires. Expired entries are pruned here."""
        with get_db_session() as db:
            db.execute(text("DELETE FROM revoked_tokens WHERE expires_at < CURRENT_TIMESTAMP"))
            db.execute(
                text("""
                    INSERT INTO revoked_tokens (jti, expires_at) VALUES (:jti, :expires_at)
                    ON CONFLICT (jti) DO NOTHING
                """),
                {"jti": jti, "expires_at": expires_at}
            )

    def is_token_revoked(self, jti: str) -> bool:
        with get_db_session() as db:
            row = db.execute(
                text("SELECT 1 FROM revoked_tokens WHERE jti = :jti"),
                {"jti": jti}
            ).fetchone()
        return row is not None

    # ------------------------------------------------------------
    # STUDENTS
    # ------------------------------------------------------------

    def get_student_by_user(self, user_id: str) -> Optional[StudentProfile]:
        with get_db_session() as db:
            row = db.execute(
                text(f"SELECT {STUDENT_COLUMNS} FROM students WHERE user_id = :id"),
                {"id": user_id}
            ).mappings().fetchone()
        return _student(row) if row else None

    def create_student(self, user_id: str, fields: Dict[str, Any]) -> StudentProfile:
        with get_db_session() as db:
            row = _insert_student(db, user_id, fields)
        return _student(row)

    def update_student(self, student_id: str, fields: Dict[str, Any]) -> StudentProfile:
        """Update only the given fields. Returns the stored profile."""
        updates = []
        params = {"id": student_id}
        for field in STUDENT_FIELDS:
            if field in fields:
                updates.append(f"{field} = :{field}")
                params[field] = fields[field]

        with get_db_session() as db:
            row = db.execute(
                text(f"""
                    UPDATE students SET {', '.join(updates + ['updated_at = CURRENT_TIMESTAMP'])}
                    WHERE id = :id
                    RETURNING {STUDENT_COLUMNS}
                """),
                params
            ).mappings().fetchone()
        return _student(row)

    # ------------------------------------------------------------
    # RECRUITERS
    # ------------------------------------------------------------

    def get_recruiter_by_user(self, user_id: str) -> Optional[RecruiterProfile]:
        with get_db_session() as db:
            row = db.execute(
                text(f"SELECT {RECRUITER_COLUMNS} FROM recruiters WHERE user_id = :id"),
                {"id": user_id}
            ).mappings().fetchone()
        return RecruiterProfile(**row) if row else None

    # ------------------------------------------------------------
    # INTERNSHIPS
    # ------------------------------------------------------------

    def list_internships(self) -> List[Internship]:
        """The whole catalog, newest postings first."""
        with get_db_session() as db:
            rows = db.execute(
                text(f"SELECT {INTERNSHIP_COLUMNS} FROM internships ORDER BY posted_date DESC, created_at DESC")
            ).mappings().all()
        return [_internship(r) for r in rows]

    def list_internships_by_recruiter(self, recruiter_id: str) -> List[Internship]:
        with get_db_session() as db:
            rows = db.execute(
                text(f"""
                    SELECT {INTERNSHIP_COLUMNS} FROM internships
                    WHERE recruiter_id = :rid ORDER BY posted_date DESC, created_at DESC
                """),
                {"rid": recruiter_id}
            ).mappings().all()
        return [_internship(r) for r in rows]

    def get_internship(self, internship_id: str) -> Optional[Internship]:
        if not _is_uuid(internship_id):
            return None
        with get_db_session() as db:
            row = db.execute(
                text(f"SELECT {INTERNSHIP_COLUMNS} FROM internships WHERE id = :id"),
                {"id": internship_id}
            ).mappings().fetchone()
        return _internship(row) if row else None

    def create_internship(self, fields: Dict[str, Any]) -> Internship:
        params = dict(fields)
        params["location"] = json.dumps(params["location"])
        with get_db_session() as db:
            row = db.execute(
                text(f"""
                    INSERT INTO internships (title, company, company_logo, category, description,
                        responsibilities, requirements, location, stipend, duration_months,
                        deadline, is_remote, skills, slots, recruiter_id)
                    VALUES (:title, :company, :company_logo, :category, :description,
                        :responsibilities, :requirements, CAST(:location AS JSONB), :stipend,
                        :duration_months, :deadline, :is_remote, :skills, :slots, :recruiter_id)
                    RETURNING {INTERNSHIP_COLUMNS}
                """),
                params
            ).mappings().fetchone()
        return _internship(row)

    def insert_external_internships(self, rows: List[Dict[str, Any]]) -> int:
        """
        Insert ingested listings keyed by external_id.
        Duplicates are skipped. Returns how many rows were new.
        """
        inserted = 0
        with get_db_session() as db:
            for fields in rows:
                params = dict(fields)
                params["location"] = json.dumps(params["location"])
                result = db.execute(
                    text("""
                        INSERT INTO internships (title, company, company_logo, category, description,
                            responsibilities, requirements, location, stipend, duration_months,
                            deadline, is_remote, skills, external_id, external_url)
                        VALUES (:title, :company, :company_logo, :category, :description,
                            :responsibilities, :requirements, CAST(:location AS JSONB), :stipend,
                            :duration_months, :deadline, :is_remote, :skills, :external_id, :external_url)
                        ON CONFLICT (external_id) DO NOTHING
                    """),
                    params
                )
                inserted += result.rowcount
        return inserted

    def increment_applications_count(self, internship_id: str) -> None:
        """Atomic server-side increment of the denormalized counter."""
        with get_db_session() as db:
            db.execute(
                text("UPDATE internships SET applications_count = applications_count + 1 WHERE id = :id"),
                {"id": internship_id}
            )

    # ------------------------------------------------------------
    # APPLICATIONS
    # ------------------------------------------------------------

    def find_application(self, student_id: str, internship_id: str) -> Optional[Application]:
        with get_db_session() as db:
            row = db.execute(
                text(f"""
                    SELECT {APPLICATION_COLUMNS} FROM applications a
                    WHERE a.student_id = :sid AND a.internship_id = :iid
                """),
                {"sid": student_id, "iid": internship_id}
            ).mappings().fetchone()
        return Application(**row) if row else None

    def create_application(
        self,
        internship_id: str,
        student_id: str,
        recruiter_id: Optional[str],
        resume_url: Optional[str],
        cover_letter: Optional[str],
        application_date: datetime
    ) -> Application:
        with get_db_session() as db:
            try:
                row = db.execute(
                    text("""
                        INSERT INTO applications (internship_id, student_id, recruiter_id, resume_url,
                            cover_letter, status, application_date)
                        VALUES (:iid, :sid, :rid, :resume_url, :cover_letter, 'applied', :applied_at)
                        RETURNING id::text AS id, internship_id::text AS internship_id,
                            student_id::text AS student_id, recruiter_id::text AS recruiter_id,
                            resume_url, cover_letter, status, application_date
                    """),
                    {
                        "iid": internship_id, "sid": student_id, "rid": recruiter_id,
                        "resume_url": resume_url, "cover_letter": cover_letter,
                        "applied_at": application_date
                    }
                ).mappings().fetchone()
            except IntegrityError:
                raise AlreadyApplied("You have already applied to this internship.")
        return Application(**row)

    def list_applications_by_student(self, student_id: str) -> List[Dict[str, Any]]:
        """Student's applications joined with the internship title and company."""
        with get_db_session() as db:
            rows = db.execute(
                text(f"""
                    SELECT {APPLICATION_COLUMNS}, i.title AS internship_title, i.company AS company
                    FROM applications a JOIN internships i ON a.internship_id = i.id
                    WHERE a.student_id = :sid ORDER BY a.application_date DESC
                """),
                {"sid": student_id}
            ).mappings().all()
        return [dict(r) for r in rows]

    def list_applications_by_recruiter(
        self,
        recruiter_id: str,
        internship_id: Optional[str] = None,
        status: Optional[ApplicationStatus] = None
    ) -> List[Dict[str, Any]]:
        """Applications received by a recruiter, joined with student and internship."""
        sql = f"""
            SELECT {APPLICATION_COLUMNS}, i.title AS internship_title,
                   s.full_name AS student_name, s.email AS student_email
            FROM applications a
            JOIN internships i ON a.internship_id = i.id
            JOIN students s ON a.student_id = s.id
            WHERE a.recruiter_id = :rid
        """
        params = {"rid": recruiter_id}

        if internship_id:
            if not _is_uuid(internship_id):
                return []
            sql += " AND a.internship_id = :iid"
            params["iid"] = internship_id
        if status:
            sql += " AND a.status = :status"
            params["status"] = status.value

        sql += " ORDER BY a.application_date DESC"
        with get_db_session() as db:
            rows = db.execute(text(sql), params).mappings().all()
        return [dict(r) for r in rows]

    def update_application_status(
        self, application_id: str, recruiter_id: str, status: ApplicationStatus
    ) -> bool:
        """Change status of an application the recruiter owns. False if none matched."""
        if not _is_uuid(application_id):
            return False
        with get_db_session() as db:
            result = db.execute(
                text("""
                    UPDATE applications SET status = :status, updated_at = CURRENT_TIMESTAMP
                    WHERE id = :aid AND recruiter_id = :rid
                """),
                {"aid": application_id, "rid": recruiter_id, "status": status.value}
            )
            return result.rowcount > 0

    def recruiter_stats(self, recruiter_id: str, today: date) -> Dict[str, int]:
        """Live aggregates for the recruiter dashboard. Open means the deadline is after today."""
        with get_db_session() as db:
            row = db.execute(
                text("""
                    SELECT
                        (SELECT COUNT(*) FROM internships WHERE recruiter_id = :rid) AS total_internships,
                        (SELECT COUNT(*) FROM internships
                            WHERE recruiter_id = :rid AND deadline > :today) AS open_internships,
                        (SELECT COUNT(*) FROM applications WHERE recruiter_id = :rid) AS total_applications,
                        (SELECT COUNT(*) FROM applications
                            WHERE recruiter_id = :rid AND status = 'applied') AS new_applications
                """),
                {"rid": recruiter_id, "today": today}
            ).mappings().fetchone()
        return {key: int(value) for key, value in row.items()}


# Singleton instance
_entity_store: EntityStore = None


def get_entity_store() -> EntityStore:
    """Get or create the entity store (singleton pattern). Also a FastAPI dependency."""
    global _entity_store
    if _entity_store is None:
        _entity_store = EntityStore()
    return _entity_store
