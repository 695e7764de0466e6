"""
locations/store.py -- SQLAlchemy Core persistence for the State -> Area directory.

Pattern: Repository + Data Mapper, same as auth/store.py. LocationStore is the
repository; _row_to_state / _row_to_area are the mappers.

Semantics:
  Creation is strict. createState("Lagos") after createState("lagos") raises
  Conflict instead of returning the existing record, so two callers can never
  believe they both created the same state.

  Names are compared after normalize_name(): trimmed, inner whitespace
  collapsed, casefolded. The UNIQUE indexes on states.name and
  areas(state_id, name) back up the lookup-before-insert check when two
  requests race.

  An area is always resolved through its parent state. get_area("Ikeja",
  "Oyo") is NotFound even when an "ikeja" exists under Lagos.

  Listings never raise NotFound for an empty page; only an unknown parent
  state does.

Usage:
    store = LocationStore(engine)
    store.create_state("Lagos")
    store.create_area("Lagos", "Ikeja")
    page = store.list_areas_in_state("lagos", page=1, limit=10)
"""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import Column, ForeignKey, Integer, MetaData, String, Table, UniqueConstraint, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from core.db import now_iso, storage_errors
from core.errors import BadRequest, Conflict, NotFound
from core.pagination import Page, page_window
from locations.models import Area, State

logger = logging.getLogger("billboard.locations")

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

states = Table(
    "states",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(100), nullable=False, unique=True),
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
)

areas = Table(
    "areas",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(100), nullable=False),
    Column("state_id", Integer, ForeignKey("states.id"), nullable=False, index=True),
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
    UniqueConstraint("state_id", "name", name="uq_area_state_name"),
)


def normalize_name(name: str) -> str:
    """Canonical form used for storage and comparison. Empty names are rejected."""
    normalized = " ".join(name.split()).casefold()
    if not normalized:
        raise BadRequest("Location name cannot be empty")
    return normalized


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class LocationStore:
    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        metadata.create_all(self.engine)

    # ------------------------------------------------------------------
    # States
    # ------------------------------------------------------------------

    def create_state(self, name: str) -> State:
        """Insert a new state. Raises Conflict if the normalized name exists."""
        normalized = normalize_name(name)
        with storage_errors("creating state"):
            with self.engine.connect() as conn:
                existing = conn.execute(select(states.c.id).where(states.c.name == normalized)).first()
                if existing is not None:
                    raise Conflict("State already exists")
                now = now_iso()
                try:
                    result = conn.execute(states.insert().values(name=normalized, created_at=now, updated_at=now))
                    conn.commit()
                except IntegrityError as exc:
                    raise Conflict("State already exists") from exc
        state_id = result.inserted_primary_key[0]
        logger.info("State %r created (id=%d)", normalized, state_id)
        return State(id=state_id, name=normalized, created_at=now, updated_at=now)

    def get_state(self, name: str) -> State:
        """Case-insensitive exact lookup. Raises NotFound if absent."""
        normalized = normalize_name(name)
        with storage_errors("fetching state"):
            with self.engine.connect() as conn:
                row = conn.execute(states.select().where(states.c.name == normalized)).fetchone()
        if row is None:
            raise NotFound("State doesn't exist")
        return _row_to_state(row)

    def get_state_by_id(self, state_id: int) -> Optional[State]:
        with storage_errors("fetching state"):
            with self.engine.connect() as conn:
                row = conn.execute(states.select().where(states.c.id == state_id)).fetchone()
        return _row_to_state(row) if row is not None else None

    def list_states(self, page: Optional[int] = None, limit: Optional[int] = None) -> Page[State]:
        """Return one page of states, newest first."""
        window = page_window(page, limit)
        with storage_errors("fetching states"):
            with self.engine.connect() as conn:
                total = conn.execute(select(func.count()).select_from(states)).scalar() or 0
                rows = conn.execute(
                    states.select()
                    .order_by(states.c.created_at.desc(), states.c.id.desc())
                    .offset(window.skip)
                    .limit(window.limit)
                ).fetchall()
        return window.build([_row_to_state(r) for r in rows], total)

    # ------------------------------------------------------------------
    # Areas
    # ------------------------------------------------------------------

    def create_area(self, state_name: str, area_name: str) -> Area:
        """Insert an area under an existing state.

        NotFound from the state lookup propagates unchanged. Raises Conflict
        if the area already exists under this state.
        """
        state = self.get_state(state_name)
        normalized = normalize_name(area_name)
        with storage_errors("creating area"):
            with self.engine.connect() as conn:
                existing = conn.execute(
                    select(areas.c.id).where((areas.c.state_id == state.id) & (areas.c.name == normalized))
                ).first()
                if existing is not None:
                    raise Conflict("Area already exists in this state")
                now = now_iso()
                try:
                    result = conn.execute(
                        areas.insert().values(name=normalized, state_id=state.id, created_at=now, updated_at=now)
                    )
                    conn.commit()
                except IntegrityError as exc:
                    raise Conflict("Area already exists in this state") from exc
        area_id = result.inserted_primary_key[0]
        logger.info("Area %r created in state %r (id=%d)", normalized, state.name, area_id)
        return Area(id=area_id, name=normalized, state_id=state.id, created_at=now, updated_at=now)

    def get_area(self, name: str, state_name: str) -> Area:
        """Look up an area scoped to its parent state. Raises NotFound for either miss."""
        state = self.get_state(state_name)
        return self._get_area_in(state, name)

    def _get_area_in(self, state: State, name: str) -> Area:
        normalized = normalize_name(name)
        with storage_errors("fetching area"):
            with self.engine.connect() as conn:
                row = conn.execute(
                    areas.select().where((areas.c.state_id == state.id) & (areas.c.name == normalized))
                ).fetchone()
        if row is None:
            raise NotFound("Area doesn't exist")
        return _row_to_area(row)

    def resolve(self, state_name: str, area_name: str) -> tuple[State, Area]:
        """Resolve a (state, area) pair for callers that anchor records to both.

        The returned area always belongs to the returned state.
        """
        state = self.get_state(state_name)
        return state, self._get_area_in(state, area_name)

    def get_area_by_id(self, area_id: int) -> Optional[Area]:
        with storage_errors("fetching area"):
            with self.engine.connect() as conn:
                row = conn.execute(areas.select().where(areas.c.id == area_id)).fetchone()
        return _row_to_area(row) if row is not None else None

    def list_areas_in_state(
        self, state_name: str, page: Optional[int] = None, limit: Optional[int] = None
    ) -> Page[Area]:
        """Return one page of a state's areas, newest first. NotFound only for an unknown state."""
        window = page_window(page, limit)
        state = self.get_state(state_name)
        with storage_errors("fetching areas"):
            with self.engine.connect() as conn:
                total = (
                    conn.execute(select(func.count()).select_from(areas).where(areas.c.state_id == state.id)).scalar()
                    or 0
                )
                rows = conn.execute(
                    areas.select()
                    .where(areas.c.state_id == state.id)
                    .order_by(areas.c.created_at.desc(), areas.c.id.desc())
                    .offset(window.skip)
                    .limit(window.limit)
                ).fetchall()
        return window.build([_row_to_area(r) for r in rows], total)


# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_state(row) -> State:
    return State(id=row.id, name=row.name, created_at=row.created_at, updated_at=row.updated_at)


def _row_to_area(row) -> Area:
    return Area(
        id=row.id,
        name=row.name,
        state_id=row.state_id,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
