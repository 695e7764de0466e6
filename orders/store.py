"""
orders/store.py -- SQLAlchemy Core persistence for orders and quotes.

Pattern: Repository + Data Mapper. Users create and read their own orders;
administrators read every order, move it between statuses and respond with
quotes. The user-scoped reads return NotFound for another user's order rather
than a distinct "forbidden", so order ids cannot be probed.

Invoices are 16 random hex characters generated once per order; every quote on
the order carries the same invoice string.
"""

from __future__ import annotations

import logging
import secrets
from datetime import date
from typing import Optional

from sqlalchemy import Column, Float, Integer, MetaData, String, Table, Text, func, select
from sqlalchemy.engine import Engine

from auth.models import User
from core.db import now_iso, storage_errors
from core.errors import BadRequest, NotFound
from core.pagination import Page, page_window
from orders.models import ORDER_PENDING, ORDER_STATUSES, Order, Quote
from products.store import ProductStore

logger = logging.getLogger("billboard.orders")

_metadata = MetaData()

_orders = Table(
    "orders",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, nullable=False, index=True),
    Column("user_name", String(200), nullable=False),
    Column("user_details", String(500), nullable=False),
    Column("product_id", Integer, nullable=False),
    Column("product_title", String(255), nullable=False),
    Column("invoice", String(16), nullable=False, unique=True),
    Column("date_requested", String(10), nullable=False),
    Column("status", String(20), nullable=False, server_default=ORDER_PENDING),
    Column("created_at", String(32), nullable=False),
)

_quotes = Table(
    "quotes",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("order_id", Integer, nullable=False, index=True),
    Column("title", String(255), nullable=False),
    Column("price", Float, nullable=False),
    Column("available_from", String(10), nullable=False),
    Column("available_to", String(10), nullable=False),
    Column("description", Text),
    Column("invoice", String(16), nullable=False),
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
)

_QUOTE_WRITABLE = frozenset({"title", "price", "available_from", "available_to", "description"})


def _new_invoice() -> str:
    return secrets.token_hex(8)


def _check_window(available_from: str, available_to: str) -> None:
    if available_from > available_to:
        raise BadRequest("availableFrom must not be after availableTo")


def _check_price(price: float) -> None:
    if price <= 0:
        raise BadRequest("price must be greater than zero")


class OrderStore:
    def __init__(self, engine: Engine, products: ProductStore) -> None:
        self.engine = engine
        self.products = products
        _metadata.create_all(self.engine)

    # ------------------------------------------------------------------
    # Orders
    # ------------------------------------------------------------------

    def create_order(self, user: User, product_id: int, date_requested: date) -> Order:
        """Place an order for an available product. NotFound if the product is gone."""
        product = self.products.get_product(product_id)
        if not product.availability:
            raise BadRequest("Product is not available")
        order = Order(
            user_id=user.id,
            user_name=user.full_name,
            user_details=f"{user.email} {user.phone_no}",
            product_id=product.id,
            product_title=product.title,
            invoice=_new_invoice(),
            date_requested=date_requested.isoformat(),
            created_at=now_iso(),
        )
        with storage_errors("creating order"):
            with self.engine.connect() as conn:
                result = conn.execute(
                    _orders.insert().values(
                        user_id=order.user_id,
                        user_name=order.user_name,
                        user_details=order.user_details,
                        product_id=order.product_id,
                        product_title=order.product_title,
                        invoice=order.invoice,
                        date_requested=order.date_requested,
                        status=order.status,
                        created_at=order.created_at,
                    )
                )
                conn.commit()
        order.id = result.inserted_primary_key[0]
        logger.info("Order %d placed by user %d for product %d", order.id, user.id, product.id)
        return order

    def get_order(self, order_id: int, user_id: Optional[int] = None) -> Order:
        """Fetch one order. With user_id, orders owned by anyone else are NotFound."""
        stmt = _orders.select().where(_orders.c.id == order_id)
        if user_id is not None:
            stmt = stmt.where(_orders.c.user_id == user_id)
        with storage_errors("fetching order"):
            with self.engine.connect() as conn:
                row = conn.execute(stmt).fetchone()
        if row is None:
            raise NotFound("Order doesn't exist")
        return _row_to_order(row)

    def list_orders(
        self, page: Optional[int] = None, limit: Optional[int] = None, user_id: Optional[int] = None
    ) -> Page[Order]:
        """Newest-first page of orders; all orders, or one user's when user_id is given."""
        window = page_window(page, limit)
        count_stmt = select(func.count()).select_from(_orders)
        rows_stmt = _orders.select()
        if user_id is not None:
            count_stmt = count_stmt.where(_orders.c.user_id == user_id)
            rows_stmt = rows_stmt.where(_orders.c.user_id == user_id)
        rows_stmt = (
            rows_stmt.order_by(_orders.c.created_at.desc(), _orders.c.id.desc()).offset(window.skip).limit(window.limit)
        )
        with storage_errors("fetching orders"):
            with self.engine.connect() as conn:
                total = conn.execute(count_stmt).scalar() or 0
                rows = conn.execute(rows_stmt).fetchall()
        return window.build([_row_to_order(r) for r in rows], total)

    def update_order_status(self, order_id: int, status: str) -> Order:
        if status not in ORDER_STATUSES:
            raise BadRequest(f"status must be one of: {', '.join(ORDER_STATUSES)}")
        with storage_errors("updating order"):
            with self.engine.connect() as conn:
                result = conn.execute(_orders.update().where(_orders.c.id == order_id).values(status=status))
                conn.commit()
        if result.rowcount == 0:
            raise NotFound("Order doesn't exist")
        logger.info("Order %d marked %s", order_id, status)
        return self.get_order(order_id)

    # ------------------------------------------------------------------
    # Quotes
    # ------------------------------------------------------------------

    def create_quote(
        self,
        order_id: int,
        title: str,
        price: float,
        available_from: date,
        available_to: date,
        description: Optional[str] = None,
    ) -> Quote:
        """Attach a quote to an existing order. NotFound if the order does not exist."""
        order = self.get_order(order_id)
        _check_price(price)
        _check_window(available_from.isoformat(), available_to.isoformat())
        now = now_iso()
        quote = Quote(
            order_id=order.id,
            title=title,
            price=price,
            available_from=available_from.isoformat(),
            available_to=available_to.isoformat(),
            description=description,
            invoice=order.invoice,
            created_at=now,
            updated_at=now,
        )
        with storage_errors("creating quote"):
            with self.engine.connect() as conn:
                result = conn.execute(
                    _quotes.insert().values(
                        order_id=quote.order_id,
                        title=quote.title,
                        price=quote.price,
                        available_from=quote.available_from,
                        available_to=quote.available_to,
                        description=quote.description,
                        invoice=quote.invoice,
                        created_at=now,
                        updated_at=now,
                    )
                )
                conn.commit()
        quote.id = result.inserted_primary_key[0]
        logger.info("Quote %d created for order %d", quote.id, order.id)
        return quote

    def get_quote(self, quote_id: int) -> Quote:
        with storage_errors("fetching quote"):
            with self.engine.connect() as conn:
                row = conn.execute(_quotes.select().where(_quotes.c.id == quote_id)).fetchone()
        if row is None:
            raise NotFound("Quote doesn't exist")
        return _row_to_quote(row)

    def update_quote(self, quote_id: int, **fields) -> Quote:
        """Update allow-listed quote fields. Date window is re-checked against stored values."""
        if not fields:
            raise BadRequest("No fields to update")
        unknown = set(fields) - _QUOTE_WRITABLE
        if unknown:
            raise BadRequest(f"Unknown quote fields: {', '.join(sorted(unknown))}")
        current = self.get_quote(quote_id)
        values = dict(fields)
        for key in ("available_from", "available_to"):
            if isinstance(values.get(key), date):
                values[key] = values[key].isoformat()
        if "price" in values:
            _check_price(values["price"])
        _check_window(
            values.get("available_from", current.available_from),
            values.get("available_to", current.available_to),
        )
        with storage_errors("updating quote"):
            with self.engine.connect() as conn:
                conn.execute(_quotes.update().where(_quotes.c.id == quote_id).values(**values, updated_at=now_iso()))
                conn.commit()
        logger.info("Quote %d updated", quote_id)
        return self.get_quote(quote_id)

    def list_quotes(self, order_id: int) -> list[Quote]:
        """All quotes for an order, newest first."""
        with storage_errors("fetching quotes"):
            with self.engine.connect() as conn:
                rows = conn.execute(
                    _quotes.select()
                    .where(_quotes.c.order_id == order_id)
                    .order_by(_quotes.c.created_at.desc(), _quotes.c.id.desc())
                ).fetchall()
        return [_row_to_quote(r) for r in rows]


# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_order(row) -> Order:
    return Order(
        id=row.id,
        user_id=row.user_id,
        user_name=row.user_name,
        user_details=row.user_details,
        product_id=row.product_id,
        product_title=row.product_title,
        invoice=row.invoice,
        date_requested=row.date_requested,
        status=row.status,
        created_at=row.created_at,
    )


def _row_to_quote(row) -> Quote:
    return Quote(
        id=row.id,
        order_id=row.order_id,
        title=row.title,
        price=row.price,
        available_from=row.available_from,
        available_to=row.available_to,
        description=row.description,
        invoice=row.invoice,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
