"""Turns directory entries into the view model rendered by the listing template."""
from typing import Sequence
from urllib.parse import quote

from bucket_index.models.listing import PARENT_NAME, DirectoryEntry, EntryIcon
from bucket_index.schemas import ListingRow, ListingView
from bucket_index.services.utils.listing_helpers import format_modified

ICON_SOURCES = {
    EntryIcon.DIRECTORY: (
        "data:image/png;base64,iVBORw0KGgoAAAANSUhEUgAAABcAAAAWCAYAAAArdgcFAAAAAXNSR0IArs4c6QAAAARnQU1BAACxjwv8YQUAAAAJcEhZcwAADsMAAA7DAcdvqGQAAAH/SURBVEhLxdPfS1phHAZw7/XCP0JBlsIkNhgULAYjUjkzByuDEAx2ZlQWZm4VhZbWoagoibGti7WwGGUUjo3KflLjELHdrLGiHxeDXQi7iA0p4qn37WRl54BIhx54vHrfj3zf9z0KyJgUHggE4HA4JMuyLJLJpLA6s1A8FAohVFsGrsYm2Y7qp2jwepBIJOjGTKLgOA4+J4O96SCw/lqyydUwmpxF6Gj3g+xJbzQaFciLKE6DmR4n/i/3iqLnPeYH8Svigbu0AA7zg2utZ+2IxWICexaKD9U9xs+ROuxPNEp2d/wVPrcX499Sj+ifz4WrYH54D/F4XKAFfHuyDQvddkw0Fkp2qsWMo69hUZhM/e2dCy+td6DVasHz/FVcbFOmJcf1viYPfnsu9Ho9QW8OJ/exPeaVB9/8UIu3L+7Lgx+uDeDHsFsefOejDxFPgTz4wUI3+MEKefDfUy2YbrXIgye+BDHfVXqLOBnv72wnXfwn5qdnuR9toq9ha7SevmdyeeSLvLx24w0rfiwmkwkjwefYjPgw2VyElb5yzHHP8CnwhF7SmPdR6h0TeNidj+9DldfWLvZXoJJJw8mP1WqFy5SD1pK7aCvLzaquU9hoNEKj0UCpVF7gJDabDTqdDgaDIesSWK1Ww2KxUDOFk5AJyEjZVqVSgWEYQUvDbzbACZHvxmyDCBW5AAAAAElFTkSuQmCC"
    ),
    EntryIcon.FILE: (
        "data:image/png;base64,iVBORw0KGgoAAAANSUhEUgAAABYAAAAbCAYAAAB4Kn/lAAAAAXNSR0IArs4c6QAAAARnQU1BAACxjwv8YQUAAAAJcEhZcwAADsMAAA7DAcdvqGQAAAIVSURBVEhLtZW/y3FhGMctJilFKZKB8gdYMCmbxUBRJpOYlSxYjQx+LMrERIQQFkQiGaRYlB+hZLKQrqfrzvHynuc8jsf7fusznHPd96f7nHNf9+HAfwoRq9XqX9FsNonku9zFrVYLZrMZK4xGIxSLRQgGg1Cr1Yjo79zFy+WS3GATk8kE4/EYJpMJhMNhqFQqt8qffCTGDAYDSCQSUK1WyTWVj8WYXq8H8Xj86Z3TxO12GzKZDA18p1T0ej3EYjHIZrNQKBQgn8+Dz+cDm80G9XqdjKGJvV4vaDQaGmazmdQxCoUC5HI58Pl8EIvFIBKJQCAQgFQqBZ1OR8bQxIfDAdbrNY3dbkfqGK1WCxKJBIRCIRFS8Hg8ZrHFYgEul0tDpVKROuZyucD5fIZSqQTRaPSO0+lkFm82G5jP5zQWiwWpP+Z0OkGj0SC7AnG5XMziQCAABoOBFdhUx+MRVqsVdDqdn8W4gmQyyYrHp8Bm+VGcTqfJqtkwnU7JHMxLcSQSAYfDwYrhcEjmYF6KsaNwk7Nhv9+TOZiXYrfbDUqlkhWP58NL8WOu1yvZr0xgncpb4lQqRTqMiXK5fBv5pni73UK322UE25/KW2L8O1itVkb6/f5t5Jvi0WgEoVCIEfxNUXlL/E4YxblcjqwA2/Q34IfEM/tJjCc/4vF4wO/3/wq73Q4ymexZTAVvcjicj/hW/O8C8AXGNRjtT4rvuAAAAABJRU5ErkJggg=="
    ),
}
ICON_ALTS = {
    EntryIcon.DIRECTORY: "[DIR]",
    EntryIcon.FILE: "[FILE]",
}


def build_row(entry: DirectoryEntry) -> ListingRow:
    return ListingRow(
        name=entry.name,
        url=quote(entry.url, safe="/"),
        is_directory=entry.is_directory,
        size=entry.size,
        modified=format_modified(entry.modified),
        icon_src=ICON_SOURCES[entry.icon],
        icon_alt=ICON_ALTS[entry.icon],
    )


def build_listing_view(path: str, entries: Sequence[DirectoryEntry]) -> ListingView:
    """Format ``entries`` for display, keeping their order."""

    rows = [build_row(entry) for entry in entries]
    return ListingView(
        path=path,
        rows=rows,
        file_count=sum(1 for entry in entries if not entry.is_directory),
        directory_count=sum(
            1 for entry in entries if entry.is_directory and entry.name != PARENT_NAME
        ),
    )
