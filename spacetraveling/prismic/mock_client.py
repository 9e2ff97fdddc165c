"""Mock Prismic client for running the blog without a CMS repository.

Serves a fixed set of sample posts with the same pagination behaviour as the
real API: `next_page` URLs that can be followed with fetch_page().

No access token is needed.
"""

import asyncio
from typing import Optional

import httpx
import structlog

from .client import InvalidCursorError
from .models import Post, PostPagination

logger = structlog.get_logger()

MOCK_ENDPOINT = "https://mock.prismic.local/api/v2"


def _paragraphs(*texts: str) -> list[dict]:
    return [{"type": "paragraph", "text": text, "spans": []} for text in texts]


# Sample documents, newest first
MOCK_DOCUMENTS = [
    {
        "id": "YFyCfhEAACMAsDsX",
        "uid": "como-utilizar-hooks",
        "type": "posts",
        "first_publication_date": "2021-03-25T19:25:28+0000",
        "last_publication_date": "2021-03-25T19:27:35+0000",
        "data": {
            "title": "Como utilizar Hooks",
            "subtitle": "Pensando em sincronização em vez de ciclos de vida.",
            "author": "Joseph Oliveira",
            "banner": {"url": "https://images.prismic.io/spacetraveling/hooks.png"},
            "content": [
                {
                    "heading": "Proin et varius",
                    "body": _paragraphs(
                        "Lorem ipsum dolor sit amet, consectetur adipiscing elit. "
                        "Nullam dolor sapien, vulputate eu diam at, condimentum "
                        "hendrerit tellus.",
                        "Nam facilisis sodales felis, pharetra pharetra lectus "
                        "auctor sed.",
                    ),
                },
                {
                    "heading": "Cras laoreet mi",
                    "body": [
                        {
                            "type": "paragraph",
                            "text": "Nulla auctor sit amet quam vitae commodo.",
                            "spans": [{"start": 0, "end": 12, "type": "strong"}],
                        },
                        {"type": "list-item", "text": "Sed sollicitudin", "spans": []},
                        {"type": "list-item", "text": "Praesent ut ex", "spans": []},
                    ],
                },
            ],
        },
    },
    {
        "id": "YFyDHBEAACMAsDy2",
        "uid": "criando-um-app-cra-do-zero",
        "type": "posts",
        "first_publication_date": "2021-03-15T19:25:28+0000",
        "last_publication_date": "2021-03-15T19:25:28+0000",
        "data": {
            "title": "Criando um app CRA do zero",
            "subtitle": "Tudo sobre como criar a sua primeira aplicação utilizando Create React App",
            "author": "Danilo Vieira",
            "banner": {"url": "https://images.prismic.io/spacetraveling/cra.png"},
            "content": [
                {
                    "heading": "Lorem ipsum",
                    "body": _paragraphs(
                        "Donec vel lectus sed ipsum fringilla tincidunt.",
                        "Aliquam erat volutpat. Vivamus ullamcorper, mi eget "
                        "mollis luctus, risus lectus venenatis arcu.",
                    ),
                },
            ],
        },
    },
    {
        "id": "YFyDuBEAACMAsD9f",
        "uid": "rascunho-sem-data",
        "type": "posts",
        "first_publication_date": None,
        "last_publication_date": None,
        "data": {
            "title": "Rascunho sem data",
            "subtitle": "Um post ainda não publicado.",
            "author": "Equipe spacetraveling",
            "banner": {"url": "https://images.prismic.io/spacetraveling/draft.png"},
            "content": [
                {"heading": "Em breve", "body": _paragraphs("Conteúdo em preparação.")},
            ],
        },
    },
]


class MockPrismicClient:
    """Mock client that simulates the Prismic API in memory.

    Usage is identical to PrismicClient:
        async with MockPrismicClient() as client:
            page = await client.query_by_type("posts", page_size=1)
    """

    def __init__(
        self,
        documents: Optional[list[dict]] = None,
        latency: float = 0.0,
    ):
        """Initialize mock client.

        Args:
            documents: Documents to serve (defaults to MOCK_DOCUMENTS).
            latency: Seconds to sleep per request, to make on-demand
                generation visible.
        """
        self.api_endpoint = MOCK_ENDPOINT
        self.documents = list(MOCK_DOCUMENTS if documents is None else documents)
        self.latency = latency
        self.requests: list[str] = []

    async def open(self) -> None:
        """Mock open - no-op."""
        logger.info("mock_client_opened", documents=len(self.documents))

    async def close(self) -> None:
        """Mock close - no-op."""
        logger.info("mock_client_closed")

    async def __aenter__(self) -> "MockPrismicClient":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _simulate(self, request: str) -> None:
        self.requests.append(request)
        if self.latency:
            await asyncio.sleep(self.latency)

    def _of_type(self, document_type: str) -> list[dict]:
        return [doc for doc in self.documents if doc.get("type") == document_type]

    def _page(self, document_type: str, page_size: int, page: int) -> PostPagination:
        docs = self._of_type(document_type)
        start = (page - 1) * page_size
        chunk = docs[start:start + page_size]

        next_page = None
        if start + page_size < len(docs):
            next_page = str(
                httpx.URL(
                    f"{self.api_endpoint}/documents/search",
                    params={"type": document_type, "pageSize": page_size, "page": page + 1},
                )
            )

        return PostPagination(
            next_page=next_page,
            results=[Post.from_document(doc) for doc in chunk],
        )

    async def query_by_type(
        self,
        document_type: str,
        page_size: int = 20,
        page: int = 1,
    ) -> PostPagination:
        await self._simulate(f"query:{document_type}:{page}")
        return self._page(document_type, page_size, page)

    async def get_by_uid(self, document_type: str, uid: str) -> Optional[Post]:
        await self._simulate(f"uid:{uid}")
        for doc in self._of_type(document_type):
            if doc.get("uid") == uid:
                return Post.from_document(doc)
        return None

    async def fetch_page(self, cursor: str) -> PostPagination:
        url = httpx.URL(cursor)
        endpoint = httpx.URL(self.api_endpoint)
        if (url.scheme, url.host, url.port) != (endpoint.scheme, endpoint.host, endpoint.port):
            raise InvalidCursorError(f"Cursor is not on {url.host or 'this repository'}: {cursor!r}")

        await self._simulate(f"cursor:{cursor}")
        try:
            page_size = int(url.params.get("pageSize", "20"))
            page = int(url.params.get("page", "1"))
        except ValueError as e:
            raise InvalidCursorError(f"Malformed cursor: {cursor!r}") from e

        return self._page(url.params.get("type", "posts"), page_size, page)

    async def list_uids(self, document_type: str) -> list[str]:
        await self._simulate(f"uids:{document_type}")
        return [doc["uid"] for doc in self._of_type(document_type) if doc.get("uid")]
