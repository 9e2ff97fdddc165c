"""Slug resolution as a result type.

Routing decides what NotFound means (a redirect to the listing); this
module only asks the gateway.
"""

from dataclasses import dataclass
from typing import Union

import structlog

from ..prismic.models import Post
from ..prismic.protocol import ContentGateway

logger = structlog.get_logger()


@dataclass(frozen=True)
class Found:
    post: Post


@dataclass(frozen=True)
class NotFound:
    slug: str


PostResolution = Union[Found, NotFound]


async def resolve_post(
    gateway: ContentGateway,
    slug: str,
    document_type: str = "posts",
) -> PostResolution:
    """Look a post up by slug.

    A missing document and a document without data both resolve to NotFound.
    Gateway errors propagate.
    """
    post = await gateway.get_by_uid(document_type, slug)
    if post is None or post.data is None:
        logger.info("post_not_found", slug=slug)
        return NotFound(slug=slug)
    return Found(post=post)
