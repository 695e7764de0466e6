"""
products/store.py -- SQLAlchemy Core persistence for the product catalog.

Pattern: Repository + Data Mapper. Location references are resolved through
LocationStore (two sequential lookups, state then area scoped to that state)
before any write, so a stored product's state_id always equals its area's
parent state. A missing state or area surfaces as NotFound from the location
directory, untouched.

Listings follow the shared pagination contract: newest first, empty page is
success, NotFound only when the filtering location itself does not resolve.

Usage:
    products = ProductStore(engine, locations)
    p = products.create_product(admin.id, {"title": "Ikeja Gantry", ...}, "Lagos", "Ikeja")
    products.list_by_area("ikeja", "lagos", page=1, limit=10)
"""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, func, select
from sqlalchemy.engine import Engine

from core.db import now_iso, storage_errors
from core.errors import BadRequest, NotFound
from core.pagination import Page, page_window
from locations.store import LocationStore
from products.models import PRODUCT_CATEGORIES, Product

logger = logging.getLogger("billboard.products")

_metadata = MetaData()

_products = Table(
    "products",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("title", String(255), nullable=False),
    Column("category", String(100), nullable=False),
    Column("availability", Integer, nullable=False, server_default="1"),
    Column("description", Text, nullable=False),
    Column("size", String(100), nullable=False),
    Column("state_id", Integer, nullable=False, index=True),
    Column("area_id", Integer, nullable=False, index=True),
    Column("address", String(500)),
    Column("featured", Integer, nullable=False, server_default="0"),
    Column("quantity", String(100)),
    Column("owner_id", Integer, nullable=False),
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
)

# Fields a caller may set directly. Location and owner are never written from
# caller input; location goes through LocationStore.resolve().
_WRITABLE = frozenset({"title", "category", "availability", "description", "size", "address", "featured", "quantity"})
_REQUIRED = ("title", "category", "description", "size")
_BOOLEAN = ("availability", "featured")


def _check_fields(fields: dict) -> dict:
    unknown = set(fields) - _WRITABLE
    if unknown:
        raise BadRequest(f"Unknown product fields: {', '.join(sorted(unknown))}")
    if "category" in fields and fields["category"] not in PRODUCT_CATEGORIES:
        raise BadRequest(f"Unknown product category: {fields['category']}")
    values = dict(fields)
    for key in _BOOLEAN:
        if key in values:
            values[key] = 1 if values[key] else 0
    return values


class ProductStore:
    def __init__(self, engine: Engine, locations: LocationStore) -> None:
        self.engine = engine
        self.locations = locations
        _metadata.create_all(self.engine)

    def create_product(self, owner_id: int, fields: dict, state_name: str, area_name: str) -> Product:
        """Insert a product anchored to (state_name, area_name)."""
        missing = [key for key in _REQUIRED if not fields.get(key)]
        if missing:
            raise BadRequest(f"Fields ({', '.join(missing)}) cannot be empty")
        values = _check_fields(fields)
        state, area = self.locations.resolve(state_name, area_name)
        now = now_iso()
        with storage_errors("creating product"):
            with self.engine.connect() as conn:
                result = conn.execute(
                    _products.insert().values(
                        **values,
                        state_id=state.id,
                        area_id=area.id,
                        owner_id=owner_id,
                        created_at=now,
                        updated_at=now,
                    )
                )
                conn.commit()
        product_id = result.inserted_primary_key[0]
        logger.info("Product %d created by admin %d in %s/%s", product_id, owner_id, state.name, area.name)
        return self.get_product(product_id)

    def get_product(self, product_id: int) -> Product:
        with storage_errors("fetching product"):
            with self.engine.connect() as conn:
                row = conn.execute(_products.select().where(_products.c.id == product_id)).fetchone()
        if row is None:
            raise NotFound("Product not found")
        return _row_to_product(row)

    def list_products(self, page: Optional[int] = None, limit: Optional[int] = None) -> Page[Product]:
        return self._list(None, page, limit)

    def list_by_state(self, state_name: str, page: Optional[int] = None, limit: Optional[int] = None) -> Page[Product]:
        state = self.locations.get_state(state_name)
        return self._list(_products.c.state_id == state.id, page, limit)

    def list_by_area(
        self, area_name: str, state_name: str, page: Optional[int] = None, limit: Optional[int] = None
    ) -> Page[Product]:
        state, area = self.locations.resolve(state_name, area_name)
        return self._list((_products.c.state_id == state.id) & (_products.c.area_id == area.id), page, limit)

    def _list(self, condition, page: Optional[int], limit: Optional[int]) -> Page[Product]:
        window = page_window(page, limit)
        count_stmt = select(func.count()).select_from(_products)
        rows_stmt = _products.select()
        if condition is not None:
            count_stmt = count_stmt.where(condition)
            rows_stmt = rows_stmt.where(condition)
        rows_stmt = (
            rows_stmt.order_by(_products.c.created_at.desc(), _products.c.id.desc())
            .offset(window.skip)
            .limit(window.limit)
        )
        with storage_errors("fetching products"):
            with self.engine.connect() as conn:
                total = conn.execute(count_stmt).scalar() or 0
                rows = conn.execute(rows_stmt).fetchall()
        return window.build([_row_to_product(r) for r in rows], total)

    def update_product(
        self,
        product_id: int,
        state_name: Optional[str] = None,
        area_name: Optional[str] = None,
        **fields,
    ) -> Product:
        """Update allow-listed fields and optionally re-anchor the product.

        Re-anchoring needs both state_name and area_name so the pair is
        resolved together; one without the other is a BadRequest.
        """
        if (state_name is None) != (area_name is None):
            raise BadRequest("state and area must be updated together")
        if not fields and state_name is None:
            raise BadRequest("No fields to update")
        values = _check_fields(fields)
        if state_name is not None:
            state, area = self.locations.resolve(state_name, area_name)
            values["state_id"] = state.id
            values["area_id"] = area.id
        with storage_errors("updating product"):
            with self.engine.connect() as conn:
                result = conn.execute(
                    _products.update().where(_products.c.id == product_id).values(**values, updated_at=now_iso())
                )
                conn.commit()
        if result.rowcount == 0:
            raise NotFound("Product doesn't exist")
        logger.info("Product %d updated", product_id)
        return self.get_product(product_id)

    def delete_product(self, product_id: int) -> None:
        with storage_errors("deleting product"):
            with self.engine.connect() as conn:
                result = conn.execute(_products.delete().where(_products.c.id == product_id))
                conn.commit()
        if result.rowcount == 0:
            raise NotFound("Product doesn't exist")
        logger.info("Product %d deleted", product_id)


def _row_to_product(row) -> Product:
    return Product(
        id=row.id,
        title=row.title,
        category=row.category,
        availability=bool(row.availability),
        description=row.description,
        size=row.size,
        state_id=row.state_id,
        area_id=row.area_id,
        address=row.address,
        featured=bool(row.featured),
        quantity=row.quantity,
        owner_id=row.owner_id,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
