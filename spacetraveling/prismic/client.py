"""Prismic REST API (v2) client implementation.

Official documentation:
https://prismic.io/docs/rest-api

Only the queries the blog needs are implemented:
- documents of a custom type, paginated
- a single document by its UID
- continuation of a previous query through its `next_page` URL
"""

import json
import time
from typing import Optional

import httpx
import structlog

from .models import ApiInfo, Post, PostPagination, SearchResponse

logger = structlog.get_logger()


class PrismicAPIError(Exception):
    """Base exception for Prismic API errors."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class InvalidCursorError(PrismicAPIError):
    """Pagination cursor does not belong to the configured repository."""

    pass


def at(path: str, value: str) -> str:
    """Build an `at` predicate, e.g. [[at(document.type, "posts")]]."""
    return f"[[at({path}, {json.dumps(value)})]]"


class PrismicClient:
    """Async client for a Prismic repository.

    Usage:
        async with PrismicClient(endpoint, access_token) as client:
            page = await client.query_by_type("posts", page_size=10)
            if page.next_page:
                more = await client.fetch_page(page.next_page)
    """

    # Seconds a master ref is reused before the repository root is asked again
    REF_TTL = 5.0

    def __init__(
        self,
        api_endpoint: str,
        access_token: str = "",
        timeout: float = 10.0,
    ):
        self.api_endpoint = api_endpoint.rstrip("/")
        self.access_token = access_token
        self.timeout = timeout
        self._client: Optional[httpx.AsyncClient] = None
        self._ref: Optional[str] = None
        self._ref_fetched_at = 0.0

    async def open(self) -> None:
        """Initialize the underlying HTTP client if not already open."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "PrismicClient":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError("Client not initialized. Use 'async with' context manager.")
        return self._client

    async def _get(self, url: str, params: Optional[dict] = None) -> dict:
        """Make a GET request with error handling."""
        if params is not None and self.access_token:
            params["access_token"] = self.access_token

        logger.debug("prismic_api_request", url=url)

        try:
            response = await self.client.get(url, params=params)
            response.raise_for_status()
            return response.json()

        except httpx.HTTPStatusError as e:
            error_data = {}
            try:
                error_data = e.response.json() if e.response.content else {}
            except ValueError:
                error_data = {"raw": e.response.text}

            error_msg = error_data.get("message") or error_data.get("error") or str(e)

            logger.warning(
                "api_error_details",
                status_code=e.response.status_code,
                error_msg=error_msg,
                url=url,
            )

            raise PrismicAPIError(
                message=str(error_msg),
                status_code=e.response.status_code,
            ) from e

        except httpx.HTTPError as e:
            logger.warning("api_transport_error", url=url, error=str(e))
            raise PrismicAPIError(message=f"Request to Prismic failed: {e}") from e

        except ValueError as e:
            raise PrismicAPIError(message="Prismic returned invalid JSON") from e

    # =========================================================================
    # Repository
    # =========================================================================

    async def get_master_ref(self) -> str:
        """Return the master ref, refreshing it after REF_TTL seconds."""
        now = time.monotonic()
        if self._ref and now - self._ref_fetched_at < self.REF_TTL:
            return self._ref

        info = ApiInfo.model_validate(await self._get(self.api_endpoint, params={}))
        ref = info.master_ref
        if not ref:
            raise PrismicAPIError("Repository has no master ref")

        self._ref = ref
        self._ref_fetched_at = now
        return ref

    async def _search(
        self,
        query: str,
        page_size: Optional[int] = None,
        page: Optional[int] = None,
    ) -> SearchResponse:
        params = {
            "ref": await self.get_master_ref(),
            "q": query,
        }
        if page_size is not None:
            params["pageSize"] = page_size
        if page is not None:
            params["page"] = page

        data = await self._get(f"{self.api_endpoint}/documents/search", params=params)
        return SearchResponse.model_validate(data)

    # =========================================================================
    # Queries
    # =========================================================================

    async def query_by_type(
        self,
        document_type: str,
        page_size: int = 20,
        page: int = 1,
    ) -> PostPagination:
        """Get one page of documents of a custom type.

        Returns:
            PostPagination whose next_page is None on the last page.
        """
        response = await self._search(
            at("document.type", document_type),
            page_size=page_size,
            page=page,
        )
        logger.info(
            "documents_queried",
            document_type=document_type,
            page=response.page,
            count=len(response.results),
            total=response.total_results_size,
        )
        return response.to_pagination()

    async def get_by_uid(self, document_type: str, uid: str) -> Optional[Post]:
        """Get a single document by UID, or None if there is no such document."""
        response = await self._search(at(f"my.{document_type}.uid", uid), page_size=1)
        if not response.results:
            logger.info("document_not_found", document_type=document_type, uid=uid)
            return None
        return Post.from_document(response.results[0])

    def check_cursor(self, cursor: str) -> None:
        """Reject cursors that do not point at this repository's API.

        Raises:
            InvalidCursorError: scheme, host or port differ from the endpoint.
        """
        try:
            url = httpx.URL(cursor)
        except (httpx.InvalidURL, TypeError) as e:
            raise InvalidCursorError(f"Malformed cursor: {cursor!r}") from e

        endpoint = httpx.URL(self.api_endpoint)
        if (url.scheme, url.host, url.port) != (endpoint.scheme, endpoint.host, endpoint.port):
            raise InvalidCursorError(f"Cursor is not on {endpoint.netloc.decode()}: {cursor!r}")

    async def fetch_page(self, cursor: str) -> PostPagination:
        """Follow a `next_page` URL returned by a previous query."""
        self.check_cursor(cursor)
        data = await self._get(cursor)
        response = SearchResponse.model_validate(data)
        logger.info("page_fetched", page=response.page, count=len(response.results))
        return response.to_pagination()

    async def list_uids(
        self,
        document_type: str,
        page_size: int = 100,
        max_pages: int = 50,
    ) -> list[str]:
        """Collect the UIDs of every document of a type by paginating.

        Args:
            document_type: Custom type to enumerate.
            page_size: Documents per request (Prismic caps this at 100).
            max_pages: Safety limit on the number of requests.
        """
        uids: list[str] = []
        page = await self.query_by_type(document_type, page_size=page_size)
        pages = 1

        while True:
            uids.extend(post.uid for post in page.results if post.uid)
            if not page.next_page or pages >= max_pages:
                break
            page = await self.fetch_page(page.next_page)
            pages += 1

        logger.info("uids_listed", document_type=document_type, count=len(uids), pages=pages)
        return uids
