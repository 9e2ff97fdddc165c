"""Page generation: CMS data in, rendered pages out.

BlogSite is shared by the web app (on-demand generation) and the static
export, so both produce identical markup.
"""

from typing import Optional

import structlog

from ..blog.reading_time import reading_time
from ..blog.resolution import Found, resolve_post
from ..prismic.models import PostPagination
from ..prismic.protocol import ContentGateway
from ..utils.config import Settings
from .cache import Page, PageResult, Redirect
from .pages import render_home, render_post

logger = structlog.get_logger()

HOME_ROUTE = "/"


def post_route(slug: str) -> str:
    return f"/post/{slug}"


class BlogSite:
    """Generates the listing and post pages from a content gateway."""

    def __init__(self, gateway: ContentGateway, settings: Settings):
        self.gateway = gateway
        self.settings = settings

    @property
    def document_type(self) -> str:
        return self.settings.prismic_document_type

    async def first_page(self) -> PostPagination:
        return await self.gateway.query_by_type(
            self.document_type, page_size=self.settings.posts_page_size
        )

    async def next_page(self, cursor: str) -> PostPagination:
        return await self.gateway.fetch_page(cursor)

    async def static_paths(self) -> list[str]:
        """Slugs to pre-render; others are generated on first request."""
        return await self.gateway.list_uids(self.document_type)

    async def home_page(self, load_more_api: Optional[str] = "/api/posts/next") -> PageResult:
        pagination = await self.first_page()
        return Page(
            render_home(
                pagination,
                locale=self.settings.date_locale,
                missing_date=self.settings.missing_date_label,
                load_more_api=load_more_api,
            )
        )

    async def post_page(self, slug: str) -> PageResult:
        """Render a post, or redirect to the listing when the slug is unknown."""
        resolution = await resolve_post(self.gateway, slug, self.document_type)
        if not isinstance(resolution, Found):
            return Redirect(HOME_ROUTE)

        post = resolution.post
        minutes = reading_time(post, words_per_minute=self.settings.words_per_minute)
        logger.debug("post_rendered", slug=slug, reading_minutes=minutes)
        return Page(
            render_post(
                post,
                minutes,
                locale=self.settings.date_locale,
                missing_date=self.settings.missing_date_label,
            )
        )
