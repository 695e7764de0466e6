"""
locations/models.py -- Domain dataclasses for the two-level location directory.

Pure data containers. Names are stored already normalized (see
locations/store.normalize_name), so equality on name is the uniqueness rule.

id is None before the record is written to the database.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class State:
    """Top-level location node. Name is unique across all states."""

    name: str
    id: Optional[int] = None
    created_at: str = ""
    updated_at: str = ""


@dataclass
class Area:
    """Child location node. (name, state_id) is unique; a name may repeat across states."""

    name: str
    state_id: int
    id: Optional[int] = None
    created_at: str = ""
    updated_at: str = ""
