"""Page rendering, caching and static export."""

from .build import BuildReport, export_site
from .cache import CachedPage, Page, PageCache, Redirect
from .generator import HOME_ROUTE, BlogSite, post_route

__all__ = [
    "BlogSite",
    "PageCache",
    "CachedPage",
    "Page",
    "Redirect",
    "HOME_ROUTE",
    "post_route",
    "export_site",
    "BuildReport",
]
