"""
api/routes/v1/locations.py -- Location directory REST endpoints (administrators only).

Routes:
  POST /api/v1/location/state/create   -- create a state; 201, 409 on duplicate
  POST /api/v1/location/area/create    -- create an area inside a state; 201, 404/409
  GET  /api/v1/location/state          -- ?stateName=  case-insensitive lookup
  GET  /api/v1/location/area           -- ?stateName=&areaName=  lookup scoped to the state
  GET  /api/v1/location/state/all      -- ?page=&limit=  newest first
  GET  /api/v1/location/areasInAState  -- ?stateName=&page=&limit=  newest first

An empty page is a 200 with an empty items list; 404 is reserved for a
state or area that does not resolve.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from api.models import AreaCreate, AreaResponse, PageResponse, StateCreate, StateResponse
from auth.dependencies import AuthContext, require_admin
from locations.store import LocationStore

router = APIRouter(prefix="/location")


def _locations(request: Request) -> LocationStore:
    return request.app.state.locations


@router.post("/state/create", response_model=StateResponse, status_code=201)
def create_state(request: Request, body: StateCreate, ctx: AuthContext = Depends(require_admin)) -> StateResponse:
    return StateResponse.from_state(_locations(request).create_state(body.state_name))


@router.post("/area/create", response_model=AreaResponse, status_code=201)
def create_area(request: Request, body: AreaCreate, ctx: AuthContext = Depends(require_admin)) -> AreaResponse:
    return AreaResponse.from_area(_locations(request).create_area(body.state_name, body.area_name))


@router.get("/state", response_model=StateResponse)
def get_state(
    request: Request,
    state_name: str = Query(alias="stateName", min_length=1),
    ctx: AuthContext = Depends(require_admin),
) -> StateResponse:
    return StateResponse.from_state(_locations(request).get_state(state_name))


@router.get("/area", response_model=AreaResponse)
def get_area(
    request: Request,
    state_name: str = Query(alias="stateName", min_length=1),
    area_name: str = Query(alias="areaName", min_length=1),
    ctx: AuthContext = Depends(require_admin),
) -> AreaResponse:
    return AreaResponse.from_area(_locations(request).get_area(area_name, state_name))


@router.get("/state/all", response_model=PageResponse[StateResponse])
def list_states(
    request: Request,
    page: Optional[int] = None,
    limit: Optional[int] = None,
    ctx: AuthContext = Depends(require_admin),
) -> PageResponse[StateResponse]:
    result = _locations(request).list_states(page, limit)
    return PageResponse[StateResponse].from_page(result, StateResponse.from_state)


@router.get("/areasInAState", response_model=PageResponse[AreaResponse])
def list_areas_in_state(
    request: Request,
    state_name: str = Query(alias="stateName", min_length=1),
    page: Optional[int] = None,
    limit: Optional[int] = None,
    ctx: AuthContext = Depends(require_admin),
) -> PageResponse[AreaResponse]:
    result = _locations(request).list_areas_in_state(state_name, page, limit)
    return PageResponse[AreaResponse].from_page(result, AreaResponse.from_area)
