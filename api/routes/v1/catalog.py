"""
api/routes/v1/catalog.py -- Read-only product browsing for signed-in users.

Routes:
  GET /api/v1/catalog/products          -- ?page=&limit=
  GET /api/v1/catalog/product/{id}
  GET /api/v1/catalog/productsByState   -- ?stateName=&page=&limit=
  GET /api/v1/catalog/productsByArea    -- ?stateName=&areaName=&page=&limit=

Same ProductStore queries as the administrator routes, behind the user gate.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from api.models import PageResponse, ProductResponse, RecordId
from auth.dependencies import AuthContext, require_user

router = APIRouter(prefix="/catalog")


@router.get("/products", response_model=PageResponse[ProductResponse])
def browse_products(
    request: Request,
    page: Optional[int] = None,
    limit: Optional[int] = None,
    ctx: AuthContext = Depends(require_user),
) -> PageResponse[ProductResponse]:
    result = request.app.state.products.list_products(page, limit)
    return PageResponse[ProductResponse].from_page(result, ProductResponse.from_product)


@router.get("/product/{product_id}", response_model=ProductResponse)
def view_product(request: Request, product_id: RecordId, ctx: AuthContext = Depends(require_user)) -> ProductResponse:
    return ProductResponse.from_product(request.app.state.products.get_product(product_id))


@router.get("/productsByState", response_model=PageResponse[ProductResponse])
def browse_products_by_state(
    request: Request,
    state_name: str = Query(alias="stateName", min_length=1),
    page: Optional[int] = None,
    limit: Optional[int] = None,
    ctx: AuthContext = Depends(require_user),
) -> PageResponse[ProductResponse]:
    result = request.app.state.products.list_by_state(state_name, page, limit)
    return PageResponse[ProductResponse].from_page(result, ProductResponse.from_product)


@router.get("/productsByArea", response_model=PageResponse[ProductResponse])
def browse_products_by_area(
    request: Request,
    state_name: str = Query(alias="stateName", min_length=1),
    area_name: str = Query(alias="areaName", min_length=1),
    page: Optional[int] = None,
    limit: Optional[int] = None,
    ctx: AuthContext = Depends(require_user),
) -> PageResponse[ProductResponse]:
    result = request.app.state.products.list_by_area(area_name, state_name, page, limit)
    return PageResponse[ProductResponse].from_page(result, ProductResponse.from_product)
