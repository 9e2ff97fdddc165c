"""Listing pagination: the "load more" state machine.

The controller owns one PostPagination for the lifetime of a page and is
its only mutator. Each successful load replaces the state with a new
instance (previous results, then the fetched ones, and the fetched cursor).
"""

from typing import Awaitable, Callable, Optional

import structlog

from ..prismic.models import PostPagination

logger = structlog.get_logger()

PageFetcher = Callable[[str], Awaitable[PostPagination]]


def append_page(current: PostPagination, page: PostPagination) -> PostPagination:
    """Return a new pagination with `page` appended after `current`.

    Results keep their order and are not deduplicated; the cursor is taken
    from `page` as-is.
    """
    return PostPagination(
        next_page=page.next_page,
        results=[*current.results, *page.results],
    )


class ListingController:
    """Owns the listing state and serializes load-more requests.

    Usage:
        controller = ListingController(first_page, client.fetch_page)
        while controller.can_load_more:
            await controller.load_more()
    """

    def __init__(self, pagination: PostPagination, fetch_page: PageFetcher):
        self._state = pagination
        self._fetch_page = fetch_page
        self._loading = False
        self.error: Optional[str] = None

    @property
    def state(self) -> PostPagination:
        return self._state

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def has_more(self) -> bool:
        """Whether the load-more control should be offered at all."""
        return self._state.next_page is not None

    @property
    def can_load_more(self) -> bool:
        """Whether activating the control right now would issue a request."""
        return self.has_more and not self._loading

    async def load_more(self) -> bool:
        """Fetch the next page and append it.

        Returns:
            True if the state changed. False if the request was refused
            (nothing left, or another load in flight) or failed; on failure
            `error` holds a message and the state is untouched.
        """
        cursor = self._state.next_page
        if cursor is None:
            logger.debug("load_more_exhausted")
            return False
        if self._loading:
            logger.info("load_more_ignored", reason="in_flight")
            return False

        self._loading = True
        self.error = None
        try:
            page = await self._fetch_page(cursor)
        except Exception as e:  # noqa: BLE001 - surfaced through self.error
            self.error = str(e) or e.__class__.__name__
            logger.warning("load_more_failed", cursor=cursor, error=self.error)
            return False
        finally:
            self._loading = False

        self._state = append_page(self._state, page)
        logger.info(
            "load_more_succeeded",
            fetched=len(page.results),
            total=len(self._state.results),
            has_more=self.has_more,
        )
        return True
