"""
Models module - internal domain records.

Difference from schemas:
- Models: what the services pass around (rows from the entity store)
- Schemas: API contract (what client sends/receives)
"""

from internhub.models.internship import Location, Internship, InternshipFilter, INDIA
from internhub.models.profiles import (
    Role, StudentProfile, RecruiterProfile, StudentIdentity, RecruiterIdentity, Identity
)
from internhub.models.application import Application, ApplicationStatus
from internhub.models.notification import Notification

__all__ = [
    "INDIA",
    "Location",
    "Internship",
    "InternshipFilter",
    "Role",
    "StudentProfile",
    "RecruiterProfile",
    "StudentIdentity",
    "RecruiterIdentity",
    "Identity",
    "Application",
    "ApplicationStatus",
    "Notification",
]
