"""Reading-time estimate for a post."""

import math
from typing import Iterable, Optional

from ..prismic.models import ContentSection, Post
from ..prismic.richtext import as_text

DEFAULT_WORDS_PER_MINUTE = 150


def iter_fragments(sections: Iterable[ContentSection]) -> Iterable[str]:
    """Yield the text of each section in document order: heading, then body."""
    for section in sections:
        yield section.heading or ""
        yield as_text(section.body)


def count_words(sections: Optional[Iterable[ContentSection]]) -> int:
    """Count whitespace-delimited words over all headings and bodies.

    Fragments are counted separately, so a heading never fuses with the
    first word of its body.
    """
    if not sections:
        return 0
    return sum(len(fragment.split()) for fragment in iter_fragments(sections))


def reading_time(
    post: Post,
    words_per_minute: int = DEFAULT_WORDS_PER_MINUTE,
) -> int:
    """Estimated reading time in whole minutes (half rounds up)."""
    if words_per_minute <= 0:
        raise ValueError("words_per_minute must be positive")

    content = post.data.content if post.data else None
    words = count_words(content)
    return math.floor(words / words_per_minute + 0.5)
