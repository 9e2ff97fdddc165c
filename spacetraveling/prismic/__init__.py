"""Prismic CMS integration module."""

from .client import InvalidCursorError, PrismicAPIError, PrismicClient
from .mock_client import MockPrismicClient
from .models import ContentSection, Post, PostData, PostPagination, RichTextBlock
from .protocol import ContentGateway

__all__ = [
    "PrismicClient",
    "MockPrismicClient",
    "ContentGateway",
    "PrismicAPIError",
    "InvalidCursorError",
    "Post",
    "PostData",
    "PostPagination",
    "ContentSection",
    "RichTextBlock",
    "create_gateway",
]


def create_gateway(settings, use_mock: bool = False) -> ContentGateway:
    """Build the configured gateway: Prismic, or sample data in mock mode."""
    if use_mock or settings.use_mock_prismic:
        return MockPrismicClient()
    return PrismicClient(
        api_endpoint=settings.prismic_api_endpoint,
        access_token=settings.prismic_access_token,
        timeout=settings.prismic_timeout,
    )
