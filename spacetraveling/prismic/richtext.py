"""Rich text helpers: flatten Prismic structured text to plain text or HTML."""

from html import escape
from typing import Iterable

from .models import RichTextBlock, Span

HEADING_TYPES = {f"heading{level}": f"h{level}" for level in range(1, 7)}
LIST_TYPES = {"list-item": "ul", "o-list-item": "ol"}


def as_text(blocks: Iterable[RichTextBlock], separator: str = " ") -> str:
    """Concatenate the text of every block, in block order."""
    return separator.join(block.text for block in blocks)


def _open_tag(span: Span) -> str:
    if span.type == "strong":
        return "<strong>"
    if span.type == "em":
        return "<em>"
    if span.type == "hyperlink":
        url = (span.data or {}).get("url", "")
        return f'<a href="{escape(url, quote=True)}">'
    return ""


def _close_tag(span: Span) -> str:
    return {"strong": "</strong>", "em": "</em>", "hyperlink": "</a>"}.get(span.type, "")


def render_spans(text: str, spans: list[Span]) -> str:
    """Escape text and wrap the ranges covered by spans in inline tags.

    Each segment between span boundaries is wrapped on its own, so
    overlapping spans still yield well-formed markup.
    """
    if not spans:
        return escape(text)

    length = len(text)
    boundaries = {0, length}
    for span in spans:
        boundaries.add(max(0, min(span.start, length)))
        boundaries.add(max(0, min(span.end, length)))
    points = sorted(boundaries)

    parts = []
    for start, end in zip(points, points[1:]):
        segment = escape(text[start:end])
        for span in reversed([s for s in spans if s.start <= start and s.end >= end]):
            segment = f"{_open_tag(span)}{segment}{_close_tag(span)}"
        parts.append(segment)
    return "".join(parts)


def _render_block(block: RichTextBlock) -> str:
    if block.type == "image":
        if not block.url:
            return ""
        alt = escape(block.alt or "", quote=True)
        return f'<img src="{escape(block.url, quote=True)}" alt="{alt}">'

    inner = render_spans(block.text, block.spans)
    if block.type in HEADING_TYPES:
        tag = HEADING_TYPES[block.type]
        return f"<{tag}>{inner}</{tag}>"
    if block.type == "preformatted":
        return f"<pre>{inner}</pre>"
    if block.type == "paragraph" or block.text:
        return f"<p>{inner}</p>"
    # Unknown block without text (embeds and the like)
    return ""


def as_html(blocks: Iterable[RichTextBlock]) -> str:
    """Render blocks to HTML, grouping consecutive list items."""
    parts: list[str] = []
    open_list = None

    for block in blocks:
        list_tag = LIST_TYPES.get(block.type)
        if list_tag != open_list:
            if open_list:
                parts.append(f"</{open_list}>")
            if list_tag:
                parts.append(f"<{list_tag}>")
            open_list = list_tag

        if list_tag:
            parts.append(f"<li>{render_spans(block.text, block.spans)}</li>")
        else:
            parts.append(_render_block(block))

    if open_list:
        parts.append(f"</{open_list}>")

    return "".join(parts)
