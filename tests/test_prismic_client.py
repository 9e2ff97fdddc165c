"""Tests for the Prismic API client."""

from datetime import datetime, timezone

import httpx
import pytest
import respx

from spacetraveling.prismic.client import (
    InvalidCursorError,
    PrismicAPIError,
    PrismicClient,
    at,
)
from spacetraveling.prismic.models import Post, PostPagination, SearchResponse

ENDPOINT = "https://blog.cdn.prismic.io/api/v2"
SEARCH_URL = f"{ENDPOINT}/documents/search"
API_ROOT = {
    "refs": [
        {"id": "preview", "ref": "preview-ref", "isMasterRef": False},
        {"id": "master", "ref": "master-ref", "label": "Master", "isMasterRef": True},
    ]
}


def document(uid, title="Title", date="2021-03-25T19:25:28+0000", **extra):
    doc = {
        "id": f"id-{uid}",
        "uid": uid,
        "type": "posts",
        "tags": [],
        "first_publication_date": date,
        "last_publication_date": date,
        "data": {"title": title, "subtitle": "Sub", "author": "Ana"},
    }
    doc.update(extra)
    return doc


def search_payload(results, next_page=None, page=1):
    return {
        "page": page,
        "results_per_page": len(results),
        "results_size": len(results),
        "total_results_size": 3,
        "total_pages": 3,
        "next_page": next_page,
        "prev_page": None,
        "results": results,
    }


class TestPrismicModels:
    """Tests for wire-to-domain mapping."""

    def test_from_document_keeps_only_post_fields(self):
        """Everything but uid, first_publication_date and data is dropped."""
        post = Post.from_document(document("hooks"))

        assert set(post.model_dump(exclude_none=True)) == {"uid", "first_publication_date", "data"}
        assert post.uid == "hooks"
        assert post.data.title == "Title"

    def test_compact_offset_is_parsed(self):
        post = Post.from_document(document("hooks", date="2021-03-25T19:25:28+0000"))

        assert post.first_publication_date == datetime(2021, 3, 25, 19, 25, 28, tzinfo=timezone.utc)

    def test_null_publication_date(self):
        post = Post.from_document(document("draft", date=None))

        assert post.first_publication_date is None

    def test_malformed_publication_date(self):
        """An unparseable date maps to None instead of failing the record."""
        post = Post.from_document(document("broken", date="not-a-date"))

        assert post.uid == "broken"
        assert post.first_publication_date is None

    def test_absent_fields_stay_absent(self):
        """Partial records map permissively instead of failing."""
        post = Post.from_document({"data": {"title": "Only a title"}})

        assert post.uid is None
        assert post.first_publication_date is None
        assert post.data.subtitle is None
        assert post.data.content is None

    def test_missing_data(self):
        post = Post.from_document({"uid": "x"})

        assert post.data is None

    def test_search_response_to_pagination(self):
        response = SearchResponse.model_validate(
            search_payload([document("a"), document("b")], next_page=f"{SEARCH_URL}?page=2")
        )

        pagination = response.to_pagination()

        assert isinstance(pagination, PostPagination)
        assert [p.uid for p in pagination.results] == ["a", "b"]
        assert pagination.next_page == f"{SEARCH_URL}?page=2"

    def test_at_predicate(self):
        assert at("document.type", "posts") == '[[at(document.type, "posts")]]'


class TestPrismicClient:
    """Tests for PrismicClient."""

    @pytest.fixture
    def client(self):
        """Create a test client."""
        return PrismicClient(api_endpoint=ENDPOINT + "/", access_token="test_token")

    def test_client_initialization(self, client):
        """Test client initialization."""
        assert client.api_endpoint == ENDPOINT
        assert client.access_token == "test_token"
        assert client._client is None  # Not initialized until context manager

    @pytest.mark.asyncio
    async def test_client_context_manager(self, client):
        async with client:
            assert client._client is not None

        assert client._client is None

    @pytest.mark.asyncio
    async def test_client_not_initialized_error(self, client):
        """Test error when accessing client outside context."""
        with pytest.raises(RuntimeError, match="not initialized"):
            _ = client.client

    @pytest.mark.asyncio
    async def test_query_by_type(self, client):
        with respx.mock(assert_all_called=False) as mock:
            mock.get(ENDPOINT).respond(json=API_ROOT)
            search = mock.get(SEARCH_URL).respond(
                json=search_payload([document("hooks")], next_page=f"{SEARCH_URL}?page=2")
            )

            async with client:
                page = await client.query_by_type("posts", page_size=1)

        params = search.calls.last.request.url.params
        assert params["ref"] == "master-ref"
        assert params["q"] == '[[at(document.type, "posts")]]'
        assert params["pageSize"] == "1"
        assert params["access_token"] == "test_token"
        assert [p.uid for p in page.results] == ["hooks"]
        assert page.next_page == f"{SEARCH_URL}?page=2"

    @pytest.mark.asyncio
    async def test_master_ref_is_reused(self, client):
        with respx.mock(assert_all_called=False) as mock:
            root = mock.get(ENDPOINT).respond(json=API_ROOT)
            mock.get(SEARCH_URL).respond(json=search_payload([]))

            async with client:
                await client.query_by_type("posts")
                await client.query_by_type("posts")

        assert root.call_count == 1

    @pytest.mark.asyncio
    async def test_get_by_uid(self, client):
        with respx.mock(assert_all_called=False) as mock:
            mock.get(ENDPOINT).respond(json=API_ROOT)
            search = mock.get(SEARCH_URL).respond(json=search_payload([document("hooks")]))

            async with client:
                post = await client.get_by_uid("posts", "hooks")

        assert search.calls.last.request.url.params["q"] == '[[at(my.posts.uid, "hooks")]]'
        assert post.uid == "hooks"

    @pytest.mark.asyncio
    async def test_get_by_uid_not_found(self, client):
        with respx.mock(assert_all_called=False) as mock:
            mock.get(ENDPOINT).respond(json=API_ROOT)
            mock.get(SEARCH_URL).respond(json=search_payload([]))

            async with client:
                post = await client.get_by_uid("posts", "missing")

        assert post is None

    @pytest.mark.asyncio
    async def test_fetch_page_follows_cursor(self, client):
        cursor = f"{SEARCH_URL}?ref=master-ref&page=2&pageSize=1"
        with respx.mock(assert_all_called=False) as mock:
            route = mock.get(cursor).respond(
                json=search_payload([document("second")], next_page=None, page=2)
            )

            async with client:
                page = await client.fetch_page(cursor)

        assert route.called
        assert [p.uid for p in page.results] == ["second"]
        assert page.next_page is None

    @pytest.mark.asyncio
    async def test_foreign_cursor_rejected_without_request(self, client):
        with respx.mock(assert_all_called=False) as mock:
            foreign = mock.get("https://evil.example.com/steal").respond(json={})

            async with client:
                with pytest.raises(InvalidCursorError):
                    await client.fetch_page("https://evil.example.com/steal")

        assert not foreign.called

    @pytest.mark.parametrize(
        "cursor",
        [
            "not a url",
            "http://blog.cdn.prismic.io/api/v2",
            "https://blog.cdn.prismic.io:8443/api/v2/documents/search?page=2",
        ],
    )
    def test_check_cursor_rejects(self, client, cursor):
        with pytest.raises(InvalidCursorError):
            client.check_cursor(cursor)

    @pytest.mark.asyncio
    async def test_http_error_is_wrapped(self, client):
        with respx.mock(assert_all_called=False) as mock:
            mock.get(ENDPOINT).respond(status_code=401, json={"message": "Invalid access token"})

            async with client:
                with pytest.raises(PrismicAPIError) as exc_info:
                    await client.query_by_type("posts")

        assert exc_info.value.status_code == 401
        assert exc_info.value.message == "Invalid access token"

    @pytest.mark.asyncio
    async def test_transport_error_is_wrapped(self, client):
        with respx.mock(assert_all_called=False) as mock:
            mock.get(ENDPOINT).mock(side_effect=httpx.ConnectError("boom"))

            async with client:
                with pytest.raises(PrismicAPIError) as exc_info:
                    await client.query_by_type("posts")

        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_missing_master_ref(self, client):
        with respx.mock(assert_all_called=False) as mock:
            mock.get(ENDPOINT).respond(json={"refs": []})

            async with client:
                with pytest.raises(PrismicAPIError, match="master ref"):
                    await client.get_by_uid("posts", "x")

    @pytest.mark.asyncio
    async def test_list_uids_pages_through_results(self, client):
        second = f"{SEARCH_URL}?ref=master-ref&page=2"
        with respx.mock(assert_all_called=False) as mock:
            mock.get(ENDPOINT).respond(json=API_ROOT)
            mock.get(second).respond(json=search_payload([document("c")], page=2))
            mock.get(SEARCH_URL).respond(
                json=search_payload([document("a"), document("b")], next_page=second)
            )

            async with client:
                uids = await client.list_uids("posts")

        assert uids == ["a", "b", "c"]


class TestPrismicAPIErrors:
    """Tests for API error types."""

    def test_prismic_api_error(self):
        error = PrismicAPIError(message="Something went wrong", status_code=500)

        assert str(error) == "Something went wrong"
        assert error.status_code == 500

    def test_invalid_cursor_error(self):
        error = InvalidCursorError("bad cursor")

        assert isinstance(error, PrismicAPIError)
        assert error.status_code is None
