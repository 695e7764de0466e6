"""
auth/models.py -- Domain dataclasses for the two principal kinds.

Pattern: Data class (pure data container, zero logic). Stores and routes do
the work. Administrators and users live in separate tables with separate
session tables, so an id collision between the two kinds is harmless.

hashed_password is populated only on records read for credential checks. The
views handed to route handlers by the authorization gate have it cleared, and
the API response models never declare it.

Layer rule: no imports from api/, locations/, products/, or orders/.
"""

from __future__ import annotations

from dataclasses import dataclass

ADMIN = "admin"
USER = "user"


@dataclass
class Admin:
    """An administrator: lists products, manages locations, answers orders with quotes.

    username is the stable identity embedded in administrator tokens.
    """

    first_name: str
    last_name: str
    username: str
    email: str
    id: int | None = None
    hashed_password: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


@dataclass
class User:
    """A marketplace customer who browses the catalog and places orders.

    email is the stable identity embedded in user tokens. soft_deleted
    users keep their row (orders still reference them) but can no longer
    log in or present tokens.
    """

    full_name: str
    email: str
    phone_no: str
    company_name: str
    position: str | None = None
    id: int | None = None
    hashed_password: str | None = None
    soft_deleted: bool = False
    created_at: str | None = None
    updated_at: str | None = None
