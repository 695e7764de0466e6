"""
API request and response models for the billboard marketplace REST endpoints.

These Pydantic v2 models define the HTTP transport contract. They are kept
separate from the domain dataclasses in auth/, locations/, products/ and
orders/; route handlers map between the two with the from_* factories below.

JSON field names are camelCase on the wire (firstName, stateName, totalPages)
and snake_case in Python. Principal responses never declare hashed_password
or tokens, so neither can leak through serialization.
"""

from datetime import date
from enum import Enum
from typing import Annotated, Generic, Optional, TypeVar

from fastapi import Path
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from auth.models import Admin, User
from auth.tokens import MAX_PASSWORD_BYTES
from core.pagination import Page
from locations.models import Area, State
from orders.models import Order, Quote
from products.models import PRODUCT_CATEGORIES, Product

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
PHONE_PATTERN = r"^\+?[0-9][0-9 \-]{5,19}$"

# SQLite INTEGER PRIMARY KEY is a signed 64-bit value.
MAX_ROW_ID = 2**63 - 1

RecordId = Annotated[int, Path(ge=1, le=MAX_ROW_ID)]

T = TypeVar("T")


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)


class _CamelResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


def _check_password_bytes(value: str) -> str:
    if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
    return value


def _check_category(value: Optional[str]) -> Optional[str]:
    if value is not None and value not in PRODUCT_CATEGORIES:
        raise ValueError(f"category must be one of: {', '.join(PRODUCT_CATEGORIES)}")
    return value


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class OrderStatusEnum(str, Enum):
    pending = "Pending"
    fulfilled = "Fulfilled"


# ---------------------------------------------------------------------------
# Auth -- requests
# ---------------------------------------------------------------------------


class LoginRequest(_CamelModel):
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=1, max_length=72)


class AdminSignup(_CamelModel):
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    username: str = Field(min_length=1, max_length=100)
    email: str = Field(pattern=EMAIL_PATTERN, max_length=255)
    password: str = Field(min_length=8, max_length=72)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        return _check_password_bytes(value)


class AdminUpdate(_CamelModel):
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    username: Optional[str] = Field(default=None, min_length=1, max_length=100)


class UserSignup(_CamelModel):
    full_name: str = Field(min_length=1, max_length=200)
    email: str = Field(pattern=EMAIL_PATTERN, max_length=255)
    phone_no: str = Field(pattern=PHONE_PATTERN)
    company_name: str = Field(min_length=1, max_length=200)
    position: Optional[str] = Field(default=None, max_length=200)
    password: str = Field(min_length=8, max_length=72)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        return _check_password_bytes(value)


class UserUpdate(_CamelModel):
    full_name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    phone_no: Optional[str] = Field(default=None, pattern=PHONE_PATTERN)
    company_name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    position: Optional[str] = Field(default=None, max_length=200)


class PasswordUpdate(_CamelModel):
    password: str = Field(min_length=8, max_length=72)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        return _check_password_bytes(value)


# ---------------------------------------------------------------------------
# Auth -- responses
# ---------------------------------------------------------------------------


class AdminResponse(_CamelResponse):
    id: int
    first_name: str
    last_name: str
    username: str
    email: str
    created_at: str
    updated_at: str

    @classmethod
    def from_admin(cls, admin: Admin) -> "AdminResponse":
        return cls(
            id=admin.id,
            first_name=admin.first_name,
            last_name=admin.last_name,
            username=admin.username,
            email=admin.email,
            created_at=admin.created_at or "",
            updated_at=admin.updated_at or "",
        )


class UserResponse(_CamelResponse):
    id: int
    full_name: str
    email: str
    phone_no: str
    company_name: str
    position: Optional[str]
    created_at: str
    updated_at: str

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            full_name=user.full_name,
            email=user.email,
            phone_no=user.phone_no,
            company_name=user.company_name,
            position=user.position,
            created_at=user.created_at or "",
            updated_at=user.updated_at or "",
        )


class AdminLoginResponse(_CamelResponse):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    admin: AdminResponse


class UserLoginResponse(_CamelResponse):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse


class MessageResponse(BaseModel):
    """Body for operations that return no resource (logout, delete)."""

    model_config = ConfigDict(frozen=True)

    status: int
    message: str


# ---------------------------------------------------------------------------
# Locations
# ---------------------------------------------------------------------------


class StateCreate(_CamelModel):
    state_name: str = Field(min_length=1, max_length=100)


class AreaCreate(_CamelModel):
    state_name: str = Field(min_length=1, max_length=100)
    area_name: str = Field(min_length=1, max_length=100)


class StateResponse(_CamelResponse):
    id: int
    name: str
    created_at: str

    @classmethod
    def from_state(cls, state: State) -> "StateResponse":
        return cls(id=state.id, name=state.name, created_at=state.created_at)


class AreaResponse(_CamelResponse):
    id: int
    name: str
    state_id: int
    created_at: str

    @classmethod
    def from_area(cls, area: Area) -> "AreaResponse":
        return cls(id=area.id, name=area.name, state_id=area.state_id, created_at=area.created_at)


class PageResponse(_CamelResponse, Generic[T]):
    """Paginated listing envelope: items plus page and totalPages."""

    items: list[T]
    total_pages: int
    page: int

    @classmethod
    def from_page(cls, page: Page, convert) -> "PageResponse[T]":
        return cls(items=[convert(item) for item in page.items], total_pages=page.total_pages, page=page.page)


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------


class ProductCreate(_CamelModel):
    title: str = Field(min_length=1, max_length=255)
    category: str
    description: str = Field(min_length=1, max_length=5000)
    size: str = Field(min_length=1, max_length=100)
    availability: bool = True
    address: Optional[str] = Field(default=None, max_length=500)
    featured: bool = False
    quantity: Optional[str] = Field(default=None, max_length=100)
    state_name: str = Field(min_length=1, max_length=100)
    area_name: str = Field(min_length=1, max_length=100)

    @field_validator("category")
    @classmethod
    def known_category(cls, value: str) -> str:
        return _check_category(value)


class ProductUpdate(_CamelModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    category: Optional[str] = None
    description: Optional[str] = Field(default=None, min_length=1, max_length=5000)
    size: Optional[str] = Field(default=None, min_length=1, max_length=100)
    availability: Optional[bool] = None
    address: Optional[str] = Field(default=None, max_length=500)
    featured: Optional[bool] = None
    quantity: Optional[str] = Field(default=None, max_length=100)
    state_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    area_name: Optional[str] = Field(default=None, min_length=1, max_length=100)

    @field_validator("category")
    @classmethod
    def known_category(cls, value: Optional[str]) -> Optional[str]:
        return _check_category(value)


class ProductResponse(_CamelResponse):
    id: int
    title: str
    category: str
    availability: bool
    description: str
    size: str
    state_id: int
    area_id: int
    address: Optional[str]
    featured: bool
    quantity: Optional[str]
    owner_id: int
    created_at: str
    updated_at: str

    @classmethod
    def from_product(cls, product: Product) -> "ProductResponse":
        return cls(
            id=product.id,
            title=product.title,
            category=product.category,
            availability=product.availability,
            description=product.description,
            size=product.size,
            state_id=product.state_id,
            area_id=product.area_id,
            address=product.address,
            featured=product.featured,
            quantity=product.quantity,
            owner_id=product.owner_id,
            created_at=product.created_at,
            updated_at=product.updated_at,
        )


# ---------------------------------------------------------------------------
# Orders and quotes
# ---------------------------------------------------------------------------


class OrderCreate(_CamelModel):
    date_requested: date


class OrderStatusUpdate(_CamelModel):
    status: OrderStatusEnum


class OrderResponse(_CamelResponse):
    id: int
    user_id: int
    user_name: str
    user_details: str
    product_id: int
    product_title: str
    invoice: str
    date_requested: str
    status: str
    created_at: str

    @classmethod
    def from_order(cls, order: Order) -> "OrderResponse":
        return cls(
            id=order.id,
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


class QuoteCreate(_CamelModel):
    title: str = Field(min_length=1, max_length=255)
    price: float = Field(gt=0)
    available_from: date
    available_to: date
    description: Optional[str] = Field(default=None, max_length=5000)


class QuoteUpdate(_CamelModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    price: Optional[float] = Field(default=None, gt=0)
    available_from: Optional[date] = None
    available_to: Optional[date] = None
    description: Optional[str] = Field(default=None, max_length=5000)


class QuoteResponse(_CamelResponse):
    id: int
    order_id: int
    title: str
    price: float
    available_from: str
    available_to: str
    description: Optional[str]
    invoice: str
    created_at: str
    updated_at: str

    @classmethod
    def from_quote(cls, quote: Quote) -> "QuoteResponse":
        return cls(
            id=quote.id,
            order_id=quote.order_id,
            title=quote.title,
            price=quote.price,
            available_from=quote.available_from,
            available_to=quote.available_to,
            description=quote.description,
            invoice=quote.invoice,
            created_at=quote.created_at,
            updated_at=quote.updated_at,
        )


# ---------------------------------------------------------------------------
# Errors and health
# ---------------------------------------------------------------------------


class ErrorResponse(BaseModel):
    """Uniform error envelope returned on every 4xx/5xx response."""

    model_config = ConfigDict(frozen=True)

    status: int
    message: str


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str]
