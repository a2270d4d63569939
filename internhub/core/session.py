"""
Auth Session - who is calling, and as what.

One AuthSession is built per request from the bearer token. It holds the
principal id, the resolved identity (role + profile) and any notifications
produced while resolving. Interested parties subscribe to be told whenever
the principal or identity changes.
"""

import logging
from typing import Callable, List, Optional, Union

from internhub.core.errors import StoreError
from internhub.models import (
    Identity, Notification, Role, StudentIdentity, RecruiterIdentity, StudentProfile, RecruiterProfile
)
from internhub.services.identity_service import IdentityResolver

logger = logging.getLogger(__name__)

SessionListener = Callable[["AuthSession"], None]


class AuthSession:

    def __init__(self, resolver: IdentityResolver):
        self.resolver = resolver
        self.principal_id: Optional[str] = None
        self.identity: Optional[Identity] = None
        self.notifications: List[Notification] = []
        self._listeners: List[SessionListener] = []

    # ------------------------------------------------------------
    # State
    # ------------------------------------------------------------

    @property
    def is_authenticated(self) -> bool:
        return self.principal_id is not None

    @property
    def role(self) -> Optional[Role]:
        return Role(self.identity.role) if self.identity else None

    @property
    def profile(self) -> Optional[Union[StudentProfile, RecruiterProfile]]:
        return self.identity.profile if self.identity else None

    # ------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register a change listener. Returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    # ------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------

    def restore(self, principal_id: str) -> None:
        """Resolve an existing session once, at the start of a request."""
        self.set_principal(principal_id)

    def set_principal(self, principal_id: Optional[str]) -> None:
        """Switch to another principal (login, logout, token refresh). No-op if unchanged."""
        if principal_id == self.principal_id:
            return
        self.principal_id = principal_id
        if principal_id is None:
            self.identity = None
            self._notify()
        else:
            self.refresh()

    def refresh(self) -> None:
        """
        Re-run profile resolution for the current principal.

        A store failure leaves the identity unset and queues a notification;
        the session itself stays usable.
        """
        self.identity = None
        if self.principal_id is not None:
            try:
                self.identity = self.resolver.resolve_profile(self.principal_id)
            except StoreError as e:
                logger.error("Error fetching profile for %s: %s", self.principal_id, e.detail)
                self.notifications.append(
                    Notification(title="Error", description="Failed to load user profile", variant="destructive")
                )
        self._notify()

    def update_profile(self, profile: Union[StudentProfile, RecruiterProfile]) -> None:
        """Replace the cached profile after a write, keeping the role."""
        if isinstance(profile, StudentProfile):
            self.identity = StudentIdentity(profile=profile)
        else:
            self.identity = RecruiterIdentity(profile=profile)
        self._notify()

    def sign_out(self) -> None:
        """Clear principal and identity. Safe to call in any state."""
        self.principal_id = None
        self.identity = None
        self._notify()
