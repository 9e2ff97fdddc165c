"""Content gateway protocol definitions.

Pages and controllers depend on this interface rather than on PrismicClient,
so the in-memory MockPrismicClient (or a test double) can stand in for it.
"""

from typing import Optional, Protocol, runtime_checkable

from .models import Post, PostPagination


@runtime_checkable
class ContentGateway(Protocol):
    """Protocol for headless CMS access.

    See PrismicClient for the reference implementation.
    """

    # Lifecycle methods
    async def open(self) -> None:
        """Initialize the gateway (e.g., open HTTP connections)."""
        ...

    async def close(self) -> None:
        """Clean up resources (e.g., close HTTP connections)."""
        ...

    # Queries
    async def query_by_type(
        self,
        document_type: str,
        page_size: int = 20,
        page: int = 1,
    ) -> PostPagination:
        """Get the first (or given) page of documents of a type."""
        ...

    async def get_by_uid(self, document_type: str, uid: str) -> Optional[Post]:
        """Get a document by UID, None when it does not exist."""
        ...

    async def fetch_page(self, cursor: str) -> PostPagination:
        """Follow a pagination cursor returned by a previous query."""
        ...

    async def list_uids(self, document_type: str) -> list[str]:
        """Enumerate the UIDs of every document of a type."""
        ...
