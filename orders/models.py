"""
orders/models.py -- Domain dataclasses for orders and quotes.

An Order is a user's request for a product on a given date. Administrators
answer an order with one or more Quotes. Orders snapshot the user's name and
contact details and the product title at creation, so later profile or
catalog edits do not rewrite order history.

Dates are ISO 8601 strings (YYYY-MM-DD); timestamps are full ISO 8601 UTC.
"""

from dataclasses import dataclass
from typing import Optional

ORDER_PENDING = "Pending"
ORDER_FULFILLED = "Fulfilled"
ORDER_STATUSES: tuple[str, ...] = (ORDER_PENDING, ORDER_FULFILLED)


@dataclass
class Order:
    user_id: int
    user_name: str
    user_details: str  # "email phone"
    product_id: int
    product_title: str
    invoice: str
    date_requested: str
    status: str = ORDER_PENDING
    id: Optional[int] = None
    created_at: str = ""


@dataclass
class Quote:
    order_id: int
    title: str
    price: float
    available_from: str
    available_to: str
    invoice: str  # copied from the order
    description: Optional[str] = None
    id: Optional[int] = None
    created_at: str = ""
    updated_at: str = ""
