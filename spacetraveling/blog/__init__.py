"""Blog page logic: pagination, reading time, slug resolution, formatting."""

from .formatting import format_publication_date, format_reading_time
from .pagination import ListingController, append_page
from .reading_time import count_words, reading_time
from .resolution import Found, NotFound, PostResolution, resolve_post

__all__ = [
    "ListingController",
    "append_page",
    "reading_time",
    "count_words",
    "resolve_post",
    "Found",
    "NotFound",
    "PostResolution",
    "format_publication_date",
    "format_reading_time",
]
