"""
auth/sessions.py -- Token issuer/validator and session revocation.

A SessionService is bound at construction to exactly one credential store
(AdminStore or UserStore). The principal kind is therefore decided by which
instance validates a token, never by anything inside the token: an
administrator token presented to the user service fails the session-table
lookup even if the embedded id happens to name an existing user.

A token is valid only when all three hold:
  1. the HS256 signature verifies,
  2. it has not expired,
  3. it is still present in the principal's session table.
Condition 3 is what makes logout, logout-all, password change and account
deletion effective before the token expires.

Every validation failure raises the same Unauthorized with the same message.
"""

from __future__ import annotations

import logging

from auth.store import PrincipalStore
from auth.tokens import create_access_token, decode_access_token
from core.errors import Unauthorized

logger = logging.getLogger("billboard.auth")

UNAUTHORIZED_MESSAGE = "Please authenticate"


class SessionService:
    """Issue, validate and revoke bearer tokens for one principal kind.

    Usage:
        sessions = SessionService(admin_store, secret_key=settings.secret_key, expire_seconds=3600)
        token = sessions.issue(admin)
        admin = sessions.validate(token)
        sessions.revoke_one(admin.id, token)
    """

    def __init__(self, store: PrincipalStore, secret_key: str, expire_seconds: int) -> None:
        self.store = store
        self._secret_key = secret_key
        self.expire_seconds = expire_seconds

    @property
    def kind(self) -> str:
        return self.store.kind

    def issue(self, principal) -> str:
        """Sign a token for principal and record it in the principal's session table."""
        identity = getattr(principal, self.store.identity_field)
        token = create_access_token(principal.id, identity, self._secret_key, self.expire_seconds)
        self.store.add_token(principal.id, token, max_age_seconds=self.expire_seconds)
        logger.info("%s %d logged in", self.store.label, principal.id)
        return token

    def validate(self, token: str):
        """Return the principal (password cleared) owning a live token, else raise Unauthorized.

        The signature and expiry check runs first and needs no storage access.
        """
        payload = decode_access_token(token, self._secret_key)
        if payload is None:
            raise Unauthorized(UNAUTHORIZED_MESSAGE)
        principal = self.store.get_by_token(payload["pid"], payload["sub"], token)
        if principal is None:
            raise Unauthorized(UNAUTHORIZED_MESSAGE)
        return principal

    def revoke_one(self, principal_id: int, token: str) -> None:
        """Log out one device. Revoking an already-revoked token succeeds silently."""
        self.store.remove_token(principal_id, token)
        logger.info("%s %d logged out", self.store.label, principal_id)

    def revoke_all(self, principal_id: int) -> None:
        """Log out every device."""
        self.store.clear_tokens(principal_id)
        logger.info("%s %d logged out from all devices", self.store.label, principal_id)
