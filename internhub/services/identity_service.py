"""
Identity Resolver - map an authenticated principal to a role and profile.

The role is not stored anywhere; it is inferred from which profile table has
a row for the principal. Student lookup always wins: if a principal somehow
has both profiles, it resolves as a student.
"""

from typing import Optional

from internhub.models import Identity, StudentIdentity, RecruiterIdentity
from internhub.services.entity_store import EntityStore


class IdentityResolver:

    def __init__(self, store: EntityStore):
        self.store = store

    def resolve_profile(self, principal_id: str) -> Optional[Identity]:
        """
        Look up the principal's profile.

        Returns:
            StudentIdentity, RecruiterIdentity, or None when the principal
            has no profile yet

        Raises:
            StoreError when the entity store cannot be reached
        """
        student = self.store.get_student_by_user(principal_id)
        if student:
            return StudentIdentity(profile=student)

        recruiter = self.store.get_recruiter_by_user(principal_id)
        if recruiter:
            return RecruiterIdentity(profile=recruiter)

        return None
