"""Domain models for synthesized directory listings."""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from bucket_index.core.object_store import ObjectMeta
from bucket_index.services.utils.listing_helpers import base_name, format_size

PARENT_NAME = ".."


class EntryIcon(str, Enum):
    """Icon selector for a listing row."""

    DIRECTORY = "dir"
    FILE = "file"


class DirectoryEntry(BaseModel):
    """One row of a directory listing, built fresh for every request."""

    name: str = Field(..., description="Basename of the key")
    url: str = Field(..., description="Absolute path of the target, '/' + key")
    is_directory: bool
    size: str = Field("-", description="Human readable size, '-' for directories")
    modified: Optional[datetime] = Field(default=None, description="Unset for directories")
    icon: EntryIcon

    @classmethod
    def for_parent(cls, parent_prefix: str) -> "DirectoryEntry":
        return cls(
            name=PARENT_NAME,
            url=f"/{parent_prefix}",
            is_directory=True,
            icon=EntryIcon.DIRECTORY,
        )

    @classmethod
    def for_directory(cls, key: str) -> "DirectoryEntry":
        return cls(
            name=base_name(key),
            url=f"/{key}",
            is_directory=True,
            icon=EntryIcon.DIRECTORY,
        )

    @classmethod
    def for_file(cls, meta: ObjectMeta) -> "DirectoryEntry":
        return cls(
            name=base_name(meta.key),
            url=f"/{meta.key}",
            is_directory=False,
            size=format_size(meta.size),
            modified=meta.last_modified,
            icon=EntryIcon.FILE,
        )
