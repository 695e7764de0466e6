"""
auth/store.py -- SQLAlchemy Core credential store for administrators and users.

Pattern: Repository + Data Mapper. PrincipalStore holds the behaviour shared by
both principal kinds; AdminStore and UserStore bind it to their own tables,
identity column, uniqueness rules and update allow-list. _row_to_admin and
_row_to_user are the mappers. Route and dependency code never touches SQL.

Session tokens:
  Each kind has its own sessions table (admin_sessions, user_sessions) holding
  one row per live token. Appending a token is a single INSERT and revoking one
  is a single DELETE, so concurrent logins/logouts on the same principal never
  lose each other's writes. A token that is not in the table is revoked, no
  matter what its signature says.

Passwords:
  create() and update_password() take plaintext and hash it themselves
  (_before_insert is the pre-persistence hook). Callers never hash, and
  nothing outside update_password() can write hashed_password.

Security:
  All queries use bound parameters. Uniqueness of email (and administrator
  username) is checked by lookup before insert; the UNIQUE index catches the
  race where two signups pass the lookup together.

Layer rule: no imports from api/, locations/, products/, or orders/.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from auth.models import ADMIN, USER, Admin, User
from auth.tokens import hash_password, verify_dummy, verify_password
from core.db import now_iso, storage_errors
from core.errors import BadRequest, Conflict, NotFound

logger = logging.getLogger("billboard.auth")

WRONG_CREDENTIALS = "Wrong email/password combination"

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_admins = Table(
    "admins",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("first_name", String(100), nullable=False),
    Column("last_name", String(100), nullable=False),
    Column("username", String(100), nullable=False, unique=True),
    Column("email", String(255), nullable=False, unique=True),
    Column("hashed_password", Text, nullable=False),
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
)

_admin_sessions = Table(
    "admin_sessions",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("principal_id", Integer, nullable=False, index=True),
    Column("token", Text, nullable=False, unique=True),
    Column("created_at", String(32), nullable=False),
)

_users = Table(
    "users",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("full_name", String(200), nullable=False),
    Column("email", String(255), nullable=False, unique=True),
    Column("phone_no", String(32), nullable=False),
    Column("company_name", String(200), nullable=False),
    Column("position", String(200)),
    Column("hashed_password", Text, nullable=False),
    Column("soft_deleted", Integer, nullable=False, server_default="0"),
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
)

_user_sessions = Table(
    "user_sessions",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("principal_id", Integer, nullable=False, index=True),
    Column("token", Text, nullable=False, unique=True),
    Column("created_at", String(32), nullable=False),
)


def normalize_email(email: str) -> str:
    return email.strip().lower()


# ---------------------------------------------------------------------------
# Shared repository behaviour
# ---------------------------------------------------------------------------


class PrincipalStore:
    """Credential store for one principal kind.

    Subclasses set the class attributes below and implement the two mappers.
    """

    kind: str = ""
    label: str = ""
    _table: Table
    _sessions: Table
    identity_field: str = ""
    # (column, conflict message) pairs checked before insert/update
    _unique_columns: tuple[tuple[str, str], ...] = ()
    _updatable: frozenset[str] = frozenset()

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        _metadata.create_all(self.engine)

    # -- hooks ---------------------------------------------------------

    def _to_values(self, principal) -> dict:
        raise NotImplementedError

    def _row_to_principal(self, row):
        raise NotImplementedError

    def _live(self, stmt):
        """Restrict a select/update to principals that can still authenticate."""
        return stmt

    def _delete_statement(self, principal_id: int):
        return self._table.delete().where(self._table.c.id == principal_id)

    def _before_insert(self, values: dict, password: str) -> dict:
        """Pre-persistence hook: replace the plaintext password with its hash."""
        values["hashed_password"] = hash_password(password)
        now = now_iso()
        values["created_at"] = now
        values["updated_at"] = now
        return values

    # -- principals ----------------------------------------------------

    def create(self, principal, password: str):
        """Insert a new principal and return it with id and timestamps filled in.

        Raises Conflict if the email (or administrator username) is taken.
        """
        values = self._to_values(principal)
        values["email"] = normalize_email(values["email"])
        with storage_errors(f"creating {self.kind}"):
            with self.engine.connect() as conn:
                self._check_unique(conn, values)
            values = self._before_insert(values, password)
            try:
                with self.engine.connect() as conn:
                    result = conn.execute(self._table.insert().values(**values))
                    conn.commit()
            except IntegrityError as exc:
                self._raise_conflict(exc, values)
        principal_id = result.inserted_primary_key[0]
        logger.info("%s %d created", self.label, principal_id)
        return self.get_by_id(principal_id)

    def _check_unique(self, conn, values: dict, exclude_id: int | None = None) -> None:
        for column, message in self._unique_columns:
            if column not in values:
                continue
            stmt = select(self._table.c.id).where(self._table.c[column] == values[column])
            if exclude_id is not None:
                stmt = stmt.where(self._table.c.id != exclude_id)
            if conn.execute(stmt).first() is not None:
                raise Conflict(message)

    def _raise_conflict(self, exc: IntegrityError, values: dict, exclude_id: int | None = None) -> None:
        """Name the clashing column after a UNIQUE violation lost a race with another write."""
        with self.engine.connect() as conn:
            self._check_unique(conn, values, exclude_id=exclude_id)
        raise Conflict(self._unique_columns[0][1]) from exc

    def find_by_credentials(self, email: str, password: str):
        """Return the principal whose email and password match.

        Unknown email and wrong password raise the same NotFound with the same
        message, and both run exactly one bcrypt verification.
        """
        with storage_errors("checking credentials"):
            with self.engine.connect() as conn:
                row = conn.execute(
                    self._live(self._table.select().where(self._table.c.email == normalize_email(email)))
                ).fetchone()
        if row is None:
            verify_dummy(password)
            raise NotFound(WRONG_CREDENTIALS)
        if not verify_password(password, row.hashed_password):
            raise NotFound(WRONG_CREDENTIALS)
        return self._row_to_principal(row)

    def get_by_id(self, principal_id: int):
        """Look up a live principal by primary key. Returns None if not found."""
        with storage_errors(f"fetching {self.kind}"):
            with self.engine.connect() as conn:
                row = conn.execute(self._live(self._table.select().where(self._table.c.id == principal_id))).fetchone()
        return self._row_to_principal(row) if row is not None else None

    def get_by_token(self, principal_id: int, identity: str, token: str):
        """Resolve a decoded token to its principal.

        All three must match in one query: the id, the identity field, and the
        presence of this exact token in the principal's session table. The
        returned view has hashed_password cleared.
        """
        holds_token = (
            select(self._sessions.c.id)
            .where((self._sessions.c.principal_id == self._table.c.id) & (self._sessions.c.token == token))
            .exists()
        )
        stmt = self._live(
            self._table.select().where(
                (self._table.c.id == principal_id)
                & (self._table.c[self.identity_field] == identity)
                & holds_token
            )
        )
        with storage_errors("validating session"):
            with self.engine.connect() as conn:
                row = conn.execute(stmt).fetchone()
        if row is None:
            return None
        principal = self._row_to_principal(row)
        principal.hashed_password = None
        return principal

    def update_profile(self, principal_id: int, **fields):
        """Update allow-listed profile fields and return the fresh record.

        Raises BadRequest for an empty update or a field outside the
        allow-list, Conflict when a unique field clashes with another record,
        NotFound when principal_id does not resolve.
        """
        if not fields:
            raise BadRequest("No fields to update")
        unknown = set(fields) - self._updatable
        if unknown:
            raise BadRequest(f"Fields cannot be updated: {', '.join(sorted(unknown))}")
        with storage_errors(f"updating {self.kind}"):
            try:
                with self.engine.connect() as conn:
                    self._check_unique(conn, fields, exclude_id=principal_id)
                    previous = conn.execute(
                        select(self._table.c[self.identity_field]).where(self._table.c.id == principal_id)
                    ).scalar_one_or_none()
                    result = conn.execute(
                        self._live(self._table.update().where(self._table.c.id == principal_id)).values(
                            **fields, updated_at=now_iso()
                        )
                    )
                    if result.rowcount and fields.get(self.identity_field, previous) != previous:
                        # Tokens are signed over the old identity and can never validate again.
                        conn.execute(self._sessions.delete().where(self._sessions.c.principal_id == principal_id))
                    conn.commit()
            except IntegrityError as exc:
                self._raise_conflict(exc, fields, exclude_id=principal_id)
        if result.rowcount == 0:
            raise NotFound(f"{self.label} doesn't exist")
        logger.info("%s %d profile updated", self.label, principal_id)
        return self.get_by_id(principal_id)

    def update_password(self, principal_id: int, new_password: str):
        """Store a new password hash and revoke every session in the same transaction."""
        hashed = hash_password(new_password)
        with storage_errors(f"updating {self.kind} password"):
            with self.engine.connect() as conn:
                result = conn.execute(
                    self._live(self._table.update().where(self._table.c.id == principal_id)).values(
                        hashed_password=hashed, updated_at=now_iso()
                    )
                )
                if result.rowcount == 0:
                    conn.rollback()
                    raise NotFound(f"{self.label} doesn't exist")
                conn.execute(self._sessions.delete().where(self._sessions.c.principal_id == principal_id))
                conn.commit()
        logger.info("%s %d password changed; all sessions revoked", self.label, principal_id)
        return self.get_by_id(principal_id)

    def delete(self, principal_id: int) -> None:
        """Delete (administrators) or soft-delete (users) and revoke every session."""
        with storage_errors(f"deleting {self.kind}"):
            with self.engine.connect() as conn:
                result = conn.execute(self._delete_statement(principal_id))
                if result.rowcount == 0:
                    conn.rollback()
                    raise NotFound(f"{self.label} doesn't exist")
                conn.execute(self._sessions.delete().where(self._sessions.c.principal_id == principal_id))
                conn.commit()
        logger.info("%s %d deleted", self.label, principal_id)

    # -- session tokens ------------------------------------------------

    def add_token(self, principal_id: int, token: str, max_age_seconds: int | None = None) -> None:
        """Record a new token. With max_age_seconds, the principal's expired rows are pruned too."""
        with storage_errors("saving session"):
            with self.engine.connect() as conn:
                if max_age_seconds is not None:
                    cutoff = (datetime.now(timezone.utc) - timedelta(seconds=max_age_seconds)).isoformat()
                    conn.execute(
                        self._sessions.delete().where(
                            (self._sessions.c.principal_id == principal_id) & (self._sessions.c.created_at < cutoff)
                        )
                    )
                conn.execute(
                    self._sessions.insert().values(principal_id=principal_id, token=token, created_at=now_iso())
                )
                conn.commit()

    def remove_token(self, principal_id: int, token: str) -> None:
        """Delete one token. Removing a token that is already gone is a no-op."""
        with storage_errors("revoking session"):
            with self.engine.connect() as conn:
                conn.execute(
                    self._sessions.delete().where(
                        (self._sessions.c.principal_id == principal_id) & (self._sessions.c.token == token)
                    )
                )
                conn.commit()

    def clear_tokens(self, principal_id: int) -> None:
        with storage_errors("revoking sessions"):
            with self.engine.connect() as conn:
                conn.execute(self._sessions.delete().where(self._sessions.c.principal_id == principal_id))
                conn.commit()

    def get_tokens(self, principal_id: int) -> list[str]:
        """Return the principal's live tokens, oldest first."""
        with storage_errors("fetching sessions"):
            with self.engine.connect() as conn:
                rows = conn.execute(
                    select(self._sessions.c.token)
                    .where(self._sessions.c.principal_id == principal_id)
                    .order_by(self._sessions.c.id)
                ).fetchall()
        return [r.token for r in rows]


# ---------------------------------------------------------------------------
# Concrete stores
# ---------------------------------------------------------------------------


class AdminStore(PrincipalStore):
    """Administrators: unique email and username, hard delete, username in tokens.

    Usage:
        store = AdminStore(engine)
        admin = store.create(Admin(first_name="A", last_name="B", username="a1", email="a@x.com"), "pw123456")
        store.find_by_credentials("a@x.com", "pw123456")
    """

    kind = ADMIN
    label = "Admin"
    _table = _admins
    _sessions = _admin_sessions
    identity_field = "username"
    _unique_columns = (
        ("email", "An administrator with this email already exists"),
        ("username", "An administrator with this username already exists"),
    )
    _updatable = frozenset({"first_name", "last_name", "username"})

    def _to_values(self, principal: Admin) -> dict:
        return {
            "first_name": principal.first_name,
            "last_name": principal.last_name,
            "username": principal.username,
            "email": principal.email,
        }

    def _row_to_principal(self, row) -> Admin:
        return _row_to_admin(row)


class UserStore(PrincipalStore):
    """Users: unique email, soft delete, email in tokens."""

    kind = USER
    label = "User"
    _table = _users
    _sessions = _user_sessions
    identity_field = "email"
    _unique_columns = (("email", "A user with this email already exists"),)
    _updatable = frozenset({"full_name", "phone_no", "company_name", "position"})

    def _to_values(self, principal: User) -> dict:
        return {
            "full_name": principal.full_name,
            "email": principal.email,
            "phone_no": principal.phone_no,
            "company_name": principal.company_name,
            "position": principal.position,
        }

    def _row_to_principal(self, row) -> User:
        return _row_to_user(row)

    def _live(self, stmt):
        return stmt.where(_users.c.soft_deleted == 0)

    def _delete_statement(self, principal_id: int):
        return (
            _users.update()
            .where((_users.c.id == principal_id) & (_users.c.soft_deleted == 0))
            .values(soft_deleted=1, updated_at=now_iso())
        )


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_admin(row) -> Admin:
    return Admin(
        id=row.id,
        first_name=row.first_name,
        last_name=row.last_name,
        username=row.username,
        email=row.email,
        hashed_password=row.hashed_password,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        full_name=row.full_name,
        email=row.email,
        phone_no=row.phone_no,
        company_name=row.company_name,
        position=row.position,
        hashed_password=row.hashed_password,
        soft_deleted=bool(row.soft_deleted),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
