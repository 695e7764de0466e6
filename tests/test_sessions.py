"""Unit tests for auth/sessions.py -- token issue, validation and revocation.

Covers:
- issue() + validate() round trip returns the principal without its password
- revoke_one() makes exactly that token fail while its signature still verifies
- revoke_all(), password change and deletion invalidate every issued token
- revoking an already-revoked token changes nothing
- an administrator token never validates against the user service
- expired, forged and garbage tokens all fail with the same Unauthorized
"""

import pytest

from auth.sessions import UNAUTHORIZED_MESSAGE, SessionService
from auth.tokens import create_access_token, decode_access_token
from core.config import get_settings
from core.errors import Unauthorized


def _assert_rejected(sessions: SessionService, token: str) -> None:
    with pytest.raises(Unauthorized) as exc_info:
        sessions.validate(token)
    assert exc_info.value.message == UNAUTHORIZED_MESSAGE


class TestIssueAndValidate:
    def test_issued_token_validates_to_principal(self, admin_sessions, admin):
        token = admin_sessions.issue(admin)
        principal = admin_sessions.validate(token)
        assert principal.id == admin.id
        assert principal.username == "ada"
        assert principal.hashed_password is None

    def test_issue_records_token(self, user_sessions, user_store, user):
        token = user_sessions.issue(user)
        assert user_store.get_tokens(user.id) == [token]

    def test_two_logins_produce_distinct_tokens(self, user_sessions, user):
        assert user_sessions.issue(user) != user_sessions.issue(user)

    def test_token_claims(self, admin_sessions, admin):
        payload = decode_access_token(admin_sessions.issue(admin), get_settings().secret_key)
        assert payload["pid"] == admin.id
        assert payload["sub"] == "ada"
        assert "exp" in payload


class TestRevocation:
    def test_revoke_one_invalidates_only_that_token(self, admin_sessions, admin):
        phone = admin_sessions.issue(admin)
        laptop = admin_sessions.issue(admin)
        admin_sessions.revoke_one(admin.id, phone)
        # Signature is still good; only session membership is gone.
        assert decode_access_token(phone, get_settings().secret_key) is not None
        _assert_rejected(admin_sessions, phone)
        assert admin_sessions.validate(laptop).id == admin.id

    def test_revoke_one_twice_is_a_no_op(self, user_sessions, user_store, user):
        kept = user_sessions.issue(user)
        gone = user_sessions.issue(user)
        user_sessions.revoke_one(user.id, gone)
        first = user_store.get_tokens(user.id)
        user_sessions.revoke_one(user.id, gone)
        assert user_store.get_tokens(user.id) == first == [kept]

    def test_revoke_all_invalidates_every_token(self, user_sessions, user):
        tokens = [user_sessions.issue(user) for _ in range(3)]
        user_sessions.revoke_all(user.id)
        for token in tokens:
            _assert_rejected(user_sessions, token)

    def test_password_change_invalidates_every_token(self, admin_sessions, admin_store, admin):
        tokens = [admin_sessions.issue(admin) for _ in range(2)]
        admin_store.update_password(admin.id, "another-pass")
        for token in tokens:
            _assert_rejected(admin_sessions, token)

    def test_deletion_invalidates_every_token(self, user_sessions, user_store, user):
        token = user_sessions.issue(user)
        user_store.delete(user.id)
        _assert_rejected(user_sessions, token)

    def test_username_change_invalidates_existing_tokens(self, admin_sessions, admin_store, admin):
        token = admin_sessions.issue(admin)
        admin_store.update_profile(admin.id, username="ada2")
        _assert_rejected(admin_sessions, token)


class TestRejection:
    def test_admin_token_rejected_by_user_service(self, admin_sessions, user_sessions, admin, user):
        # Both principals are the first row of their table, so the ids collide.
        assert admin.id == user.id
        token = admin_sessions.issue(admin)
        _assert_rejected(user_sessions, token)

    def test_user_token_rejected_by_admin_service(self, admin_sessions, user_sessions, admin, user):
        token = user_sessions.issue(user)
        _assert_rejected(admin_sessions, token)

    def test_expired_token_rejected(self, admin_sessions, admin_store, admin):
        token = create_access_token(admin.id, "ada", get_settings().secret_key, expire_seconds=-10)
        admin_store.add_token(admin.id, token)
        _assert_rejected(admin_sessions, token)

    def test_token_signed_with_other_secret_rejected(self, admin_sessions, admin_store, admin):
        token = create_access_token(admin.id, "ada", "x" * 40, expire_seconds=3600)
        admin_store.add_token(admin.id, token)
        _assert_rejected(admin_sessions, token)

    def test_garbage_token_rejected(self, user_sessions):
        _assert_rejected(user_sessions, "not.a.jwt")
