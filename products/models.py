"""
products/models.py -- Domain dataclass for advertising products (billboards).

A product is anchored to exactly one state and one area, and the area always
belongs to that state: products/store.py only ever writes the pair returned
by LocationStore.resolve().
"""

from dataclasses import dataclass
from typing import Optional

# Product categories offered on the marketplace.
PRODUCT_CATEGORIES: tuple[str, ...] = (
    "All",
    "Unipole",
    "Gantry",
    "LED Billboard",
    "Wall Drape",
    "Lamp Post",
    "Roof Top",
    "Trivision/Ultrawave",
    "Portrait",
    "Backlit/Landscape",
    "Bridge Panel",
    "Mega Billboard",
    "Long Banner",
    "Sign Board",
    "Mobile Bill Board",
    "Large Format",
    "Glass Panel",
    "48 Sheet",
    "BRT",
    "Bulletin Board",
    "Arc Flag",
    "Ultra wave billboard",
    "Frontlit Billboard",
    "Building Wrap",
    "Car park roof Gantry",
    "Car Display",
    "Airport digital signage",
    "Tower Branding",
    "Led Lamp post billboard",
    "Portrait Led billboard",
    "Revolving Portrait Billboard",
    "Unipole LED Billboard",
    "96 Sheet Billboard",
    "Static Light Box Lamp Post Billboard",
)


@dataclass
class Product:
    title: str
    category: str
    description: str
    size: str
    state_id: int
    area_id: int
    owner_id: int  # administrator who listed it
    availability: bool = True
    address: Optional[str] = None
    featured: bool = False
    quantity: Optional[str] = None
    id: Optional[int] = None
    created_at: str = ""
    updated_at: str = ""
