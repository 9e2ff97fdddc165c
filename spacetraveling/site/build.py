"""Static export: write the listing and every known post to a directory.

Output layout:
    {output}/index.html
    {output}/post/{slug}/index.html
"""

import asyncio
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from .cache import Page
from .generator import BlogSite

logger = structlog.get_logger()


@dataclass
class BuildReport:
    output_dir: Path
    written: list[Path] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


def _write(path: Path, html: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(html, encoding="utf-8")
    return path


async def export_site(
    site: BlogSite,
    output_dir: Path,
    concurrency: int = 4,
) -> BuildReport:
    """Render all pages into `output_dir`.

    Post pages are fetched concurrently (at most `concurrency` at a time).
    Slugs that no longer resolve are skipped. Gateway errors abort the build.
    """
    report = BuildReport(output_dir=output_dir)

    # Static hosting has no proxy endpoint; the browser follows cursors itself
    home = await site.home_page(load_more_api=None)
    if isinstance(home, Page):
        report.written.append(_write(output_dir / "index.html", home.html))

    slugs = await site.static_paths()
    semaphore = asyncio.Semaphore(concurrency)

    async def build_post(slug: str) -> None:
        if "/" in slug or "\\" in slug or slug in (".", ".."):
            logger.warning("post_skipped", slug=slug, reason="unsafe_slug")
            report.skipped.append(slug)
            return
        async with semaphore:
            result = await site.post_page(slug)
        if not isinstance(result, Page):
            logger.warning("post_skipped", slug=slug, reason="not_found")
            report.skipped.append(slug)
            return
        report.written.append(_write(output_dir / "post" / slug / "index.html", result.html))

    await asyncio.gather(*(build_post(slug) for slug in slugs))

    logger.info(
        "site_exported",
        output_dir=str(output_dir),
        pages=len(report.written),
        skipped=len(report.skipped),
    )
    return report
