"""View models handed to the listing template."""
from typing import List

from pydantic import BaseModel


class ListingRow(BaseModel):
    """Single rendered file/folder row."""

    name: str
    url: str
    is_directory: bool
    size: str
    modified: str
    icon_src: str
    icon_alt: str


class ListingView(BaseModel):
    """Directory listing page."""

    path: str
    rows: List[ListingRow]
    file_count: int
    directory_count: int
