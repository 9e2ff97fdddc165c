"""Tests for listing pagination (load more)."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from spacetraveling.blog.pagination import ListingController, append_page
from spacetraveling.prismic.client import PrismicAPIError
from spacetraveling.prismic.models import Post, PostPagination

P1_CURSOR = "https://blog.cdn.prismic.io/api/v2/documents/search?page=2"
P2_CURSOR = "https://blog.cdn.prismic.io/api/v2/documents/search?page=3"


def make_post(uid: str) -> Post:
    return Post(uid=uid, data={"title": uid.title(), "author": "Ana"})


def uids(pagination: PostPagination) -> list:
    return [post.uid for post in pagination.results]


@pytest.fixture
def initial():
    return PostPagination(next_page=P1_CURSOR, results=[make_post("first")])


@pytest.fixture
def pages():
    """Two server pages: P1 points at P2, P2 is the last one."""
    return {
        P1_CURSOR: PostPagination(next_page=P2_CURSOR, results=[make_post("second"), make_post("third")]),
        P2_CURSOR: PostPagination(next_page=None, results=[make_post("fourth")]),
    }


class TestAppendPage:
    """Tests for the pure merge step."""

    def test_appends_in_order_and_replaces_cursor(self, initial, pages):
        merged = append_page(initial, pages[P1_CURSOR])

        assert uids(merged) == ["first", "second", "third"]
        assert merged.next_page == P2_CURSOR

    def test_returns_new_instance(self, initial, pages):
        merged = append_page(initial, pages[P1_CURSOR])

        assert merged is not initial
        assert uids(initial) == ["first"]
        assert initial.next_page == P1_CURSOR

    def test_does_not_deduplicate(self, initial):
        merged = append_page(initial, PostPagination(results=[make_post("first")]))

        assert uids(merged) == ["first", "first"]
        assert merged.next_page is None


class TestListingController:
    """Tests for ListingController."""

    @pytest.mark.asyncio
    async def test_two_loads_reach_the_end(self, initial, pages):
        fetch = AsyncMock(side_effect=lambda cursor: pages[cursor])
        controller = ListingController(initial, fetch)

        assert await controller.load_more() is True
        assert uids(controller.state) == ["first", "second", "third"]
        assert controller.state.next_page == P2_CURSOR

        assert await controller.load_more() is True
        assert uids(controller.state) == ["first", "second", "third", "fourth"]
        assert controller.state.next_page is None
        assert controller.has_more is False

        assert [call.args[0] for call in fetch.await_args_list] == [P1_CURSOR, P2_CURSOR]

    @pytest.mark.asyncio
    async def test_exhausted_pagination_offers_nothing(self):
        fetch = AsyncMock()
        controller = ListingController(PostPagination(results=[make_post("only")]), fetch)

        assert controller.has_more is False
        assert controller.can_load_more is False
        assert await controller.load_more() is False
        fetch.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_second_activation_while_in_flight_is_refused(self, initial, pages):
        release = asyncio.Event()

        async def slow_fetch(cursor):
            await release.wait()
            return pages[cursor]

        fetch = AsyncMock(side_effect=slow_fetch)
        controller = ListingController(initial, fetch)

        first = asyncio.create_task(controller.load_more())
        for _ in range(3):
            await asyncio.sleep(0)
        assert controller.loading is True
        assert controller.can_load_more is False

        assert await controller.load_more() is False

        release.set()
        assert await first is True
        assert fetch.await_count == 1
        assert uids(controller.state) == ["first", "second", "third"]
        assert controller.loading is False

    @pytest.mark.asyncio
    async def test_failure_keeps_state_and_allows_retry(self, initial, pages):
        fetch = AsyncMock(side_effect=[PrismicAPIError("Request to Prismic failed"), pages[P1_CURSOR]])
        controller = ListingController(initial, fetch)

        assert await controller.load_more() is False
        assert controller.error == "Request to Prismic failed"
        assert uids(controller.state) == ["first"]
        assert controller.state.next_page == P1_CURSOR
        assert controller.can_load_more is True

        assert await controller.load_more() is True
        assert controller.error is None
        assert uids(controller.state) == ["first", "second", "third"]
