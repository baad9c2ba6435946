"""Pydantic view models exposed to templates."""
from .listing import ListingRow, ListingView

__all__ = [
    "ListingRow",
    "ListingView",
]
