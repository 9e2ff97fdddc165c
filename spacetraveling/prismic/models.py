"""Data models for the Prismic API and the blog posts built from it."""

import re
from datetime import datetime
from typing import Any, Optional

import structlog
from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = structlog.get_logger()

# Prismic emits offsets as "+0000"; fromisoformat wants "+00:00"
_COMPACT_OFFSET = re.compile(r"([+-]\d{2})(\d{2})$")


def parse_timestamp(value: Any) -> Any:
    """Normalize a Prismic timestamp string into a datetime.

    Non-string values (None, datetime) are returned unchanged. Strings that
    are not ISO 8601 map to None, so the post renders as undated.
    """
    if not isinstance(value, str):
        return value
    if not value:
        return None
    normalized = _COMPACT_OFFSET.sub(r"\1:\2", value.replace("Z", "+00:00"))
    try:
        return datetime.fromisoformat(normalized)
    except ValueError:
        logger.warning("invalid_timestamp", value=value)
        return None


class ApiRef(BaseModel):
    """A content release reference from the repository root."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    ref: str
    label: Optional[str] = None
    is_master_ref: bool = Field(default=False, alias="isMasterRef")


class ApiInfo(BaseModel):
    """Repository root document (GET {endpoint})."""

    model_config = ConfigDict(extra="ignore")

    refs: list[ApiRef] = Field(default_factory=list)

    @property
    def master_ref(self) -> Optional[str]:
        for ref in self.refs:
            if ref.is_master_ref:
                return ref.ref
        return None


class Span(BaseModel):
    """Inline formatting over a text range of a rich text block."""

    start: int
    end: int
    type: str
    data: Optional[dict] = None


class RichTextBlock(BaseModel):
    """One structured text block (paragraph, heading, list item, image...)."""

    model_config = ConfigDict(extra="ignore")

    type: str = "paragraph"
    text: str = ""
    spans: list[Span] = Field(default_factory=list)

    # Image blocks
    url: Optional[str] = None
    alt: Optional[str] = None


class ContentSection(BaseModel):
    """A post section: a heading followed by a rich text body."""

    model_config = ConfigDict(extra="ignore")

    heading: Optional[str] = None
    body: list[RichTextBlock] = Field(default_factory=list)


class Banner(BaseModel):
    model_config = ConfigDict(extra="ignore")

    url: Optional[str] = None
    alt: Optional[str] = None


class PostData(BaseModel):
    """The `data` part of a post document.

    Every field is optional: listing pages only carry title, subtitle and
    author, and partial CMS records are accepted as they come.
    """

    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = None
    subtitle: Optional[str] = None
    author: Optional[str] = None
    banner: Optional[Banner] = None
    content: Optional[list[ContentSection]] = None


class Post(BaseModel):
    """Blog post as the pages see it."""

    uid: Optional[str] = None
    first_publication_date: Optional[datetime] = None
    data: Optional[PostData] = None

    @field_validator("first_publication_date", mode="before")
    @classmethod
    def _parse_publication_date(cls, value: Any) -> Any:
        return parse_timestamp(value)

    @classmethod
    def from_document(cls, document: dict) -> "Post":
        """Project a raw Prismic document onto the Post shape.

        Only `uid`, `first_publication_date` and `data` are kept; absent
        fields stay absent.
        """
        return cls(
            uid=document.get("uid"),
            first_publication_date=document.get("first_publication_date"),
            data=document.get("data"),
        )


class PostPagination(BaseModel):
    """A page of posts plus the cursor for the next one.

    `next_page` is None once pagination is exhausted.
    """

    next_page: Optional[str] = None
    results: list[Post] = Field(default_factory=list)


class SearchResponse(BaseModel):
    """Response of GET {endpoint}/documents/search."""

    model_config = ConfigDict(extra="ignore")

    page: int = 1
    results_per_page: int = 0
    total_results_size: int = 0
    total_pages: int = 0
    next_page: Optional[str] = None
    prev_page: Optional[str] = None
    results: list[dict] = Field(default_factory=list)

    def to_pagination(self) -> PostPagination:
        return PostPagination(
            next_page=self.next_page,
            results=[Post.from_document(doc) for doc in self.results],
        )
