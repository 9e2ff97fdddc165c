"""In-process page cache with on-demand generation and revalidation.

A route is generated at most once at a time. Stale pages keep being served
while a background task regenerates them; routes that were never generated
can either be awaited or scheduled in the background so the caller can show
a placeholder meanwhile.
"""

from __future__ import annotations

import asyncio
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional, Union

import structlog

logger = structlog.get_logger()


@dataclass(frozen=True)
class Page:
    html: str


@dataclass(frozen=True)
class Redirect:
    location: str
    permanent: bool = False


PageResult = Union[Page, Redirect]
PageGenerator = Callable[[], Awaitable[PageResult]]


@dataclass
class CachedPage:
    result: PageResult
    generated_at: float = field(default_factory=time.monotonic)
    revalidate: Optional[float] = None

    def is_stale(self, now: Optional[float] = None) -> bool:
        """A page without a revalidation window never goes stale."""
        if self.revalidate is None:
            return False
        now = time.monotonic() if now is None else now
        return now - self.generated_at >= self.revalidate


class PageCache:
    """Rendered pages keyed by route.

    With `max_pages` set, the least recently served routes are evicted once
    the cache is full; evicted routes are generated again on next request.

    Usage:
        cache = PageCache()
        page = await cache.serve("/", render_home, revalidate=60)
        page = await cache.serve("/post/x", render_x, blocking=False)
        if page is None:
            ...  # still generating, show a placeholder
    """

    def __init__(self, max_pages: Optional[int] = None) -> None:
        if max_pages is not None and max_pages < 1:
            raise ValueError("max_pages must be positive")
        self.max_pages = max_pages
        self._pages: OrderedDict[str, CachedPage] = OrderedDict()
        self._tasks: dict[str, asyncio.Task] = {}
        self._errors: dict[str, BaseException] = {}

    def __contains__(self, route: str) -> bool:
        return route in self._pages

    def __len__(self) -> int:
        return len(self._pages)

    def get(self, route: str) -> Optional[CachedPage]:
        page = self._pages.get(route)
        if page is not None:
            self._pages.move_to_end(route)
        return page

    def put(
        self,
        route: str,
        result: PageResult,
        revalidate: Optional[float] = None,
    ) -> CachedPage:
        page = CachedPage(result=result, revalidate=revalidate)
        self._pages[route] = page
        self._pages.move_to_end(route)
        if self.max_pages is not None:
            while len(self._pages) > self.max_pages:
                evicted, _ = self._pages.popitem(last=False)
                logger.debug("page_evicted", route=evicted)
        return page

    def invalidate(self, route: str) -> None:
        self._pages.pop(route, None)

    def is_generating(self, route: str) -> bool:
        return route in self._tasks

    async def _generate(
        self,
        route: str,
        generate: PageGenerator,
        revalidate: Optional[float],
    ) -> CachedPage:
        started = time.monotonic()
        try:
            result = await generate()
        except Exception as e:
            self._errors[route] = e
            if self.max_pages is not None and len(self._errors) > self.max_pages:
                self._errors.pop(next(iter(self._errors)))
            logger.warning("page_generation_failed", route=route, error=str(e))
            raise
        finally:
            self._tasks.pop(route, None)

        self._errors.pop(route, None)
        logger.info(
            "page_generated",
            route=route,
            kind=type(result).__name__.lower(),
            duration_ms=round((time.monotonic() - started) * 1000, 1),
        )
        return self.put(route, result, revalidate)

    def schedule(
        self,
        route: str,
        generate: PageGenerator,
        revalidate: Optional[float] = None,
    ) -> asyncio.Task:
        """Start generating a route unless a generation is already running."""
        task = self._tasks.get(route)
        if task is None:
            task = asyncio.create_task(self._generate(route, generate, revalidate))
            # Failures are recorded in _errors; mark them retrieved here
            task.add_done_callback(lambda t: t.cancelled() or t.exception())
            self._tasks[route] = task
        return task

    async def render(
        self,
        route: str,
        generate: PageGenerator,
        revalidate: Optional[float] = None,
    ) -> CachedPage:
        """Generate a route now (joining a running generation if any)."""
        try:
            return await self.schedule(route, generate, revalidate)
        except Exception:
            # Reported to this caller; the next serve() retries
            self._errors.pop(route, None)
            raise

    async def wait(self, route: str) -> Optional[CachedPage]:
        """Wait for a pending generation of `route`, if any."""
        task = self._tasks.get(route)
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)
        return self._pages.get(route)

    async def serve(
        self,
        route: str,
        generate: PageGenerator,
        revalidate: Optional[float] = None,
        blocking: bool = True,
    ) -> Optional[CachedPage]:
        """Return the cached page, generating or regenerating as needed.

        Args:
            route: Cache key.
            generate: Coroutine factory producing the page.
            revalidate: Seconds before the page is regenerated.
            blocking: For routes never generated, wait for the page (True)
                or start generating in the background and return None.

        Raises:
            Whatever the last background generation of `route` raised, once;
            the next call retries.
        """
        page = self.get(route)
        if page is not None:
            if page.is_stale() and not self.is_generating(route):
                logger.info("page_revalidating", route=route)
                self.schedule(route, generate, revalidate)
            return page

        error = self._errors.pop(route, None)
        if error is not None and not self.is_generating(route):
            raise error

        if blocking:
            return await self.render(route, generate, revalidate)

        self.schedule(route, generate, revalidate)
        return None
