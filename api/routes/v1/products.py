"""
api/routes/v1/products.py -- Product catalog management (administrators only).

Routes:
  POST   /api/v1/product/create        -- list a product in (stateName, areaName); 201
  GET    /api/v1/product/{id}          -- one product
  GET    /api/v1/products              -- ?page=&limit=
  GET    /api/v1/productsByState       -- ?stateName=&page=&limit=
  GET    /api/v1/productsByArea        -- ?stateName=&areaName=&page=&limit=
  PATCH  /api/v1/product/update/{id}   -- partial update; stateName and areaName move it together
  DELETE /api/v1/product/delete/{id}

Location names are resolved through the location directory before any write,
so an unknown state or area is a 404 and nothing is stored.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from api.models import MessageResponse, PageResponse, ProductCreate, ProductResponse, ProductUpdate, RecordId
from auth.dependencies import AuthContext, require_admin
from products.store import ProductStore

router = APIRouter()


def _products(request: Request) -> ProductStore:
    return request.app.state.products


@router.post("/product/create", response_model=ProductResponse, status_code=201)
def create_product(request: Request, body: ProductCreate, ctx: AuthContext = Depends(require_admin)) -> ProductResponse:
    fields = body.model_dump(exclude={"state_name", "area_name"}, exclude_none=True)
    product = _products(request).create_product(ctx.principal.id, fields, body.state_name, body.area_name)
    return ProductResponse.from_product(product)


@router.get("/product/{product_id}", response_model=ProductResponse)
def get_product(request: Request, product_id: RecordId, ctx: AuthContext = Depends(require_admin)) -> ProductResponse:
    return ProductResponse.from_product(_products(request).get_product(product_id))


@router.get("/products", response_model=PageResponse[ProductResponse])
def list_products(
    request: Request,
    page: Optional[int] = None,
    limit: Optional[int] = None,
    ctx: AuthContext = Depends(require_admin),
) -> PageResponse[ProductResponse]:
    result = _products(request).list_products(page, limit)
    return PageResponse[ProductResponse].from_page(result, ProductResponse.from_product)


@router.get("/productsByState", response_model=PageResponse[ProductResponse])
def list_products_by_state(
    request: Request,
    state_name: str = Query(alias="stateName", min_length=1),
    page: Optional[int] = None,
    limit: Optional[int] = None,
    ctx: AuthContext = Depends(require_admin),
) -> PageResponse[ProductResponse]:
    result = _products(request).list_by_state(state_name, page, limit)
    return PageResponse[ProductResponse].from_page(result, ProductResponse.from_product)


@router.get("/productsByArea", response_model=PageResponse[ProductResponse])
def list_products_by_area(
    request: Request,
    state_name: str = Query(alias="stateName", min_length=1),
    area_name: str = Query(alias="areaName", min_length=1),
    page: Optional[int] = None,
    limit: Optional[int] = None,
    ctx: AuthContext = Depends(require_admin),
) -> PageResponse[ProductResponse]:
    result = _products(request).list_by_area(area_name, state_name, page, limit)
    return PageResponse[ProductResponse].from_page(result, ProductResponse.from_product)


@router.patch("/product/update/{product_id}", response_model=ProductResponse)
def update_product(
    request: Request, product_id: RecordId, body: ProductUpdate, ctx: AuthContext = Depends(require_admin)
) -> ProductResponse:
    fields = body.model_dump(exclude={"state_name", "area_name"}, exclude_none=True)
    product = _products(request).update_product(
        product_id, state_name=body.state_name, area_name=body.area_name, **fields
    )
    return ProductResponse.from_product(product)


@router.delete("/product/delete/{product_id}", response_model=MessageResponse)
def delete_product(request: Request, product_id: RecordId, ctx: AuthContext = Depends(require_admin)) -> MessageResponse:
    _products(request).delete_product(product_id)
    return MessageResponse(status=200, message="Product deleted")
