"""Unit tests for auth/store.py -- credential stores for administrators and users.

Covers:
- create() hashes the password before storage and enforces unique email/username
- find_by_credentials() gives the same NotFound for unknown email and wrong password
- update_profile() allow-list, empty update and username conflicts
- update_password() and delete() revoke every session
- users are soft-deleted and stop resolving; administrators are hard-deleted
- session token add/remove/clear bookkeeping
"""

import pytest

from auth.models import Admin, User
from auth.store import WRONG_CREDENTIALS
from auth.tokens import verify_password
from core.errors import BadRequest, Conflict, NotFound


def _second_admin(**overrides) -> Admin:
    fields = {"first_name": "Bisi", "last_name": "Ade", "username": "bisi", "email": "bisi@example.com"}
    fields.update(overrides)
    return Admin(**fields)


class TestCreate:
    def test_admin_password_is_hashed(self, admin_store, admin):
        stored = admin_store.get_by_id(admin.id)
        assert stored.hashed_password != "adminpass1"
        assert verify_password("adminpass1", stored.hashed_password)

    def test_admin_gets_id_and_timestamps(self, admin):
        assert admin.id is not None
        assert admin.created_at
        assert admin.updated_at

    def test_email_is_normalized(self, admin_store):
        created = admin_store.create(_second_admin(email="  Bisi@Example.COM "), "secret123")
        assert created.email == "bisi@example.com"

    def test_duplicate_admin_email_conflicts(self, admin_store, admin):
        with pytest.raises(Conflict, match="email"):
            admin_store.create(_second_admin(email="ADA@example.com"), "secret123")

    def test_duplicate_admin_username_conflicts(self, admin_store, admin):
        with pytest.raises(Conflict, match="username"):
            admin_store.create(_second_admin(username="ada"), "secret123")

    def test_duplicate_user_email_conflicts(self, user_store, user):
        with pytest.raises(Conflict):
            user_store.create(
                User(full_name="Other", email="tunde@example.com", phone_no="08000000000", company_name="X"),
                "secret123",
            )

    def test_password_over_72_bytes_is_bad_request(self, admin_store):
        with pytest.raises(BadRequest, match="72 bytes"):
            admin_store.create(_second_admin(), "\u00e9" * 40)
        with pytest.raises(NotFound):
            admin_store.find_by_credentials("bisi@example.com", "\u00e9" * 40)

    def test_lost_signup_race_names_the_username(self, admin_store, admin, monkeypatch):
        # The pre-insert lookup misses the clash; the UNIQUE index catches it.
        real_check = admin_store._check_unique
        calls = []

        def miss_first_lookup(conn, values, exclude_id=None):
            calls.append(values)
            if len(calls) > 1:
                real_check(conn, values, exclude_id=exclude_id)

        monkeypatch.setattr(admin_store, "_check_unique", miss_first_lookup)
        with pytest.raises(Conflict, match="username"):
            admin_store.create(_second_admin(username="ada"), "secret123")

    def test_same_email_allowed_across_kinds(self, user_store, admin):
        created = user_store.create(
            User(full_name="Ada Obi", email="ada@example.com", phone_no="08000000000", company_name="Obi Ltd"),
            "secret123",
        )
        assert created.id is not None


class TestFindByCredentials:
    def test_correct_credentials_return_principal(self, admin_store, admin):
        found = admin_store.find_by_credentials("ada@example.com", "adminpass1")
        assert found.id == admin.id

    def test_email_lookup_is_case_insensitive(self, user_store, user):
        found = user_store.find_by_credentials("TUNDE@example.com", "userpass1")
        assert found.id == user.id

    def test_wrong_password_and_unknown_email_are_indistinguishable(self, admin_store, admin):
        with pytest.raises(NotFound) as wrong_password:
            admin_store.find_by_credentials("ada@example.com", "not-the-password")
        with pytest.raises(NotFound) as unknown_email:
            admin_store.find_by_credentials("nobody@example.com", "adminpass1")
        assert wrong_password.value.message == unknown_email.value.message == WRONG_CREDENTIALS


class TestUpdateProfile:
    def test_allowed_fields_are_updated(self, admin_store, admin):
        updated = admin_store.update_profile(admin.id, first_name="Adaeze")
        assert updated.first_name == "Adaeze"
        assert updated.last_name == "Obi"

    def test_empty_update_is_bad_request(self, admin_store, admin):
        with pytest.raises(BadRequest):
            admin_store.update_profile(admin.id)

    def test_password_and_email_are_not_updatable(self, admin_store, admin):
        with pytest.raises(BadRequest):
            admin_store.update_profile(admin.id, hashed_password="x")
        with pytest.raises(BadRequest):
            admin_store.update_profile(admin.id, email="new@example.com")

    def test_username_taken_by_another_admin_conflicts(self, admin_store, admin):
        admin_store.create(_second_admin(), "secret123")
        with pytest.raises(Conflict):
            admin_store.update_profile(admin.id, username="bisi")

    def test_keeping_own_username_is_not_a_conflict(self, admin_store, admin):
        updated = admin_store.update_profile(admin.id, username="ada", last_name="O.")
        assert updated.username == "ada"

    def test_unknown_id_is_not_found(self, admin_store):
        with pytest.raises(NotFound):
            admin_store.update_profile(9999, first_name="Ghost")


class TestPasswordAndDeletion:
    def test_update_password_replaces_hash_and_clears_tokens(self, admin_store, admin):
        admin_store.add_token(admin.id, "t1")
        admin_store.add_token(admin.id, "t2")
        admin_store.update_password(admin.id, "brandnew99")
        assert admin_store.get_tokens(admin.id) == []
        assert admin_store.find_by_credentials("ada@example.com", "brandnew99").id == admin.id
        with pytest.raises(NotFound):
            admin_store.find_by_credentials("ada@example.com", "adminpass1")

    def test_update_password_unknown_id_is_not_found(self, user_store):
        with pytest.raises(NotFound):
            user_store.update_password(9999, "brandnew99")

    def test_admin_delete_is_hard(self, admin_store, admin):
        admin_store.add_token(admin.id, "t1")
        admin_store.delete(admin.id)
        assert admin_store.get_by_id(admin.id) is None
        assert admin_store.get_tokens(admin.id) == []

    def test_user_delete_is_soft_and_hides_the_user(self, user_store, user):
        user_store.add_token(user.id, "t1")
        user_store.delete(user.id)
        assert user_store.get_by_id(user.id) is None
        assert user_store.get_tokens(user.id) == []
        assert user_store.get_by_token(user.id, user.email, "t1") is None
        with pytest.raises(NotFound):
            user_store.find_by_credentials("tunde@example.com", "userpass1")

    def test_deleting_twice_is_not_found(self, user_store, user):
        user_store.delete(user.id)
        with pytest.raises(NotFound):
            user_store.delete(user.id)


class TestSessionTokens:
    def test_tokens_are_kept_in_issue_order(self, user_store, user):
        user_store.add_token(user.id, "first")
        user_store.add_token(user.id, "second")
        assert user_store.get_tokens(user.id) == ["first", "second"]

    def test_remove_token_is_idempotent(self, user_store, user):
        user_store.add_token(user.id, "first")
        user_store.add_token(user.id, "second")
        user_store.remove_token(user.id, "first")
        after_first = user_store.get_tokens(user.id)
        user_store.remove_token(user.id, "first")
        assert user_store.get_tokens(user.id) == after_first == ["second"]

    def test_get_by_token_requires_identity_and_membership(self, admin_store, admin):
        admin_store.add_token(admin.id, "live")
        found = admin_store.get_by_token(admin.id, "ada", "live")
        assert found.id == admin.id
        assert found.hashed_password is None
        assert admin_store.get_by_token(admin.id, "someone-else", "live") is None
        assert admin_store.get_by_token(admin.id, "ada", "revoked") is None

    def test_add_token_prunes_expired_rows(self, admin_store, admin):
        admin_store.add_token(admin.id, "stale")
        with admin_store.engine.connect() as conn:
            conn.execute(
                admin_store._sessions.update()
                .where(admin_store._sessions.c.token == "stale")
                .values(created_at="2000-01-01T00:00:00+00:00")
            )
            conn.commit()
        admin_store.add_token(admin.id, "fresh", max_age_seconds=3600)
        assert admin_store.get_tokens(admin.id) == ["fresh"]

    def test_username_change_clears_session_rows(self, admin_store, admin):
        admin_store.add_token(admin.id, "live")
        admin_store.update_profile(admin.id, username="ada2")
        assert admin_store.get_tokens(admin.id) == []

    def test_unchanged_username_keeps_session_rows(self, admin_store, admin):
        admin_store.add_token(admin.id, "live")
        admin_store.update_profile(admin.id, username="ada", first_name="Adaeze")
        assert admin_store.get_tokens(admin.id) == ["live"]
