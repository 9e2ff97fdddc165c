"""spacetraveling web app.

Routes:
- /                  listing, regenerated after REVALIDATE_SECONDS
- /post/{slug}       post page; unseen slugs show a loading placeholder
                     while generated, unknown slugs redirect to /
- /api/posts/next    load-more endpoint used by the listing script
- /healthz

Design notes:
- Pages are rendered by BlogSite and kept in an in-process PageCache.
- Lightweight HTML via FastAPI responses; no template engine dependency.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import HTMLResponse, RedirectResponse, Response

from .prismic import ContentGateway, InvalidCursorError, PrismicAPIError, create_gateway
from .site.cache import CachedPage, PageCache, Redirect
from .site.generator import HOME_ROUTE, BlogSite, post_route
from .site.pages import post_summary, render_loading
from .utils.config import Settings, get_settings

logger = structlog.get_logger()


def _to_response(page: CachedPage) -> Response:
    result = page.result
    if isinstance(result, Redirect):
        return RedirectResponse(result.location, status_code=308 if result.permanent else 307)
    return HTMLResponse(result.html)


async def prerender(site: BlogSite, cache: PageCache) -> int:
    """Render the listing and every known post into the cache.

    Returns the number of cached pages. Failures are logged, not raised:
    anything missing is generated on first request instead.
    """
    settings = site.settings
    try:
        await cache.render(HOME_ROUTE, site.home_page, revalidate=settings.revalidate_seconds)
        slugs = await site.static_paths()
    except PrismicAPIError as e:
        logger.warning("prerender_failed", error=str(e))
        return len(cache)

    semaphore = asyncio.Semaphore(settings.build_concurrency)

    async def render_post(slug: str) -> None:
        async with semaphore:
            await cache.render(
                post_route(slug),
                lambda: site.post_page(slug),
                revalidate=settings.revalidate_seconds,
            )

    results = await asyncio.gather(*(render_post(slug) for slug in slugs), return_exceptions=True)
    failed = [slug for slug, result in zip(slugs, results) if isinstance(result, Exception)]
    if failed:
        logger.warning("prerender_posts_failed", slugs=failed)

    logger.info("prerender_complete", pages=len(cache), failed=len(failed))
    return len(cache)


def create_app(
    settings: Optional[Settings] = None,
    gateway: Optional[ContentGateway] = None,
) -> FastAPI:
    """Build the FastAPI app around a gateway (configured one by default)."""
    settings = settings or get_settings()
    gateway = gateway or create_gateway(settings)
    site = BlogSite(gateway, settings)
    cache = PageCache(max_pages=settings.page_cache_size)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await gateway.open()
        if settings.prerender_on_startup:
            await prerender(site, cache)
        try:
            yield
        finally:
            await gateway.close()

    app = FastAPI(title="spacetraveling", lifespan=lifespan)
    app.state.site = site
    app.state.cache = cache

    @app.get("/healthz")
    async def healthz():
        return {"status": "ok", "cached_pages": len(cache)}

    @app.get("/", response_class=HTMLResponse)
    async def home():
        """Listing page (stale-while-revalidate)."""
        try:
            page = await cache.serve(
                HOME_ROUTE, site.home_page, revalidate=settings.revalidate_seconds
            )
        except PrismicAPIError as e:
            logger.error("home_render_failed", error=str(e))
            raise HTTPException(status_code=502, detail="Content service unavailable")
        return _to_response(page)

    @app.get("/post/{slug}", response_class=HTMLResponse)
    async def post(slug: str):
        """Post page, generated on first request when not pre-rendered."""
        try:
            page = await cache.serve(
                post_route(slug),
                lambda: site.post_page(slug),
                revalidate=settings.revalidate_seconds,
                blocking=False,
            )
        except PrismicAPIError as e:
            logger.error("post_render_failed", slug=slug, error=str(e))
            raise HTTPException(status_code=502, detail="Content service unavailable")

        if page is None:
            return HTMLResponse(render_loading(), headers={"Cache-Control": "no-store"})
        return _to_response(page)

    @app.get("/api/posts/next")
    async def next_posts(cursor: str = Query(..., min_length=1)):
        """Fetch the page behind a listing cursor."""
        try:
            pagination = await site.next_page(cursor)
        except InvalidCursorError as e:
            logger.warning("invalid_cursor", cursor=cursor)
            raise HTTPException(status_code=400, detail=e.message)
        except PrismicAPIError as e:
            logger.error("load_more_fetch_failed", cursor=cursor, error=str(e))
            raise HTTPException(status_code=502, detail="Content service unavailable")

        return {
            "next_page": pagination.next_page,
            "results": [
                post_summary(
                    item,
                    locale=settings.date_locale,
                    missing_date=settings.missing_date_label,
                )
                for item in pagination.results
            ],
        }

    return app
