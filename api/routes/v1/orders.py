"""
api/routes/v1/orders.py -- Orders (users) and quotes (administrators).

Routes (user):
  POST  /api/v1/order/create/{product_id}   -- order a product for dateRequested; 201
  GET   /api/v1/order/{id}                  -- one of the caller's own orders
  GET   /api/v1/orders                      -- ?page=&limit=  the caller's orders
  GET   /api/v1/order/{id}/quotes           -- quotes the administrators sent for it

Routes (administrator):
  GET   /api/v1/admin/orders                -- ?page=&limit=  every order
  PATCH /api/v1/admin/order/{id}/status     -- Pending | Fulfilled
  POST  /api/v1/quote/{order_id}            -- respond to an order with a quote; 201
  GET   /api/v1/quote/{id}
  PATCH /api/v1/quote/{id}

IDOR guard: user routes pass user_id to the store, which answers 404 for an
order that belongs to someone else.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Request

from api.models import (
    OrderCreate,
    OrderResponse,
    OrderStatusUpdate,
    PageResponse,
    QuoteCreate,
    QuoteResponse,
    QuoteUpdate,
    RecordId,
)
from auth.dependencies import AuthContext, require_admin, require_user
from orders.store import OrderStore

router = APIRouter()


def _orders(request: Request) -> OrderStore:
    return request.app.state.orders


# ---------------------------------------------------------------------------
# User endpoints
# ---------------------------------------------------------------------------


@router.post("/order/create/{product_id}", response_model=OrderResponse, status_code=201)
def create_order(
    request: Request, product_id: RecordId, body: OrderCreate, ctx: AuthContext = Depends(require_user)
) -> OrderResponse:
    order = _orders(request).create_order(ctx.principal, product_id, body.date_requested)
    return OrderResponse.from_order(order)


@router.get("/order/{order_id}", response_model=OrderResponse)
def get_own_order(request: Request, order_id: RecordId, ctx: AuthContext = Depends(require_user)) -> OrderResponse:
    return OrderResponse.from_order(_orders(request).get_order(order_id, user_id=ctx.principal.id))


@router.get("/orders", response_model=PageResponse[OrderResponse])
def list_own_orders(
    request: Request,
    page: Optional[int] = None,
    limit: Optional[int] = None,
    ctx: AuthContext = Depends(require_user),
) -> PageResponse[OrderResponse]:
    result = _orders(request).list_orders(page, limit, user_id=ctx.principal.id)
    return PageResponse[OrderResponse].from_page(result, OrderResponse.from_order)


@router.get("/order/{order_id}/quotes", response_model=list[QuoteResponse])
def list_quotes_for_own_order(
    request: Request, order_id: RecordId, ctx: AuthContext = Depends(require_user)
) -> list[QuoteResponse]:
    store = _orders(request)
    order = store.get_order(order_id, user_id=ctx.principal.id)
    return [QuoteResponse.from_quote(q) for q in store.list_quotes(order.id)]


# ---------------------------------------------------------------------------
# Administrator endpoints
# ---------------------------------------------------------------------------


@router.get("/admin/orders", response_model=PageResponse[OrderResponse])
def list_all_orders(
    request: Request,
    page: Optional[int] = None,
    limit: Optional[int] = None,
    ctx: AuthContext = Depends(require_admin),
) -> PageResponse[OrderResponse]:
    result = _orders(request).list_orders(page, limit)
    return PageResponse[OrderResponse].from_page(result, OrderResponse.from_order)


@router.patch("/admin/order/{order_id}/status", response_model=OrderResponse)
def update_order_status(
    request: Request, order_id: RecordId, body: OrderStatusUpdate, ctx: AuthContext = Depends(require_admin)
) -> OrderResponse:
    return OrderResponse.from_order(_orders(request).update_order_status(order_id, body.status.value))


@router.post("/quote/{order_id}", response_model=QuoteResponse, status_code=201)
def create_quote(
    request: Request, order_id: RecordId, body: QuoteCreate, ctx: AuthContext = Depends(require_admin)
) -> QuoteResponse:
    quote = _orders(request).create_quote(
        order_id,
        title=body.title,
        price=body.price,
        available_from=body.available_from,
        available_to=body.available_to,
        description=body.description,
    )
    return QuoteResponse.from_quote(quote)


@router.get("/quote/{quote_id}", response_model=QuoteResponse)
def get_quote(request: Request, quote_id: RecordId, ctx: AuthContext = Depends(require_admin)) -> QuoteResponse:
    return QuoteResponse.from_quote(_orders(request).get_quote(quote_id))


@router.patch("/quote/{quote_id}", response_model=QuoteResponse)
def update_quote(
    request: Request, quote_id: RecordId, body: QuoteUpdate, ctx: AuthContext = Depends(require_admin)
) -> QuoteResponse:
    quote = _orders(request).update_quote(quote_id, **body.model_dump(exclude_none=True))
    return QuoteResponse.from_quote(quote)
