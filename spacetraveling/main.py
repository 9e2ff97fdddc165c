"""Main entry point for spacetraveling."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

import structlog

from .blog import (
    Found,
    ListingController,
    format_publication_date,
    format_reading_time,
    reading_time,
    resolve_post,
)
from .prismic import ContentGateway, PrismicAPIError, PostData, create_gateway
from .prismic.models import Post
from .prismic.richtext import as_text
from .site import BlogSite, export_site
from .utils import Settings, get_settings

logger = structlog.get_logger()


def configure_logging(level: str = "INFO") -> None:
    """Configure stdlib logging and structlog for console output."""
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level, logging.INFO),
    )

    # Suppress noisy HTTP request logs
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def _print_item(post: Post, settings: Settings) -> None:
    data = post.data or PostData()
    date_label = format_publication_date(
        post.first_publication_date,
        locale=settings.date_locale,
        missing=settings.missing_date_label,
    )
    print(f"\n{data.title or '(sem título)'}")
    if data.subtitle:
        print(f"  {data.subtitle}")
    print(f"  {date_label} · {data.author or ''} · /post/{post.uid or ''}")


async def run_browse(gateway: ContentGateway, settings: Settings) -> int:
    """Print the listing and load more pages on demand."""
    first = await gateway.query_by_type(
        settings.prismic_document_type, page_size=settings.posts_page_size
    )
    controller = ListingController(first, gateway.fetch_page)
    for post in controller.state.results:
        _print_item(post, settings)

    while controller.has_more:
        answer = await asyncio.to_thread(input, "\nCarregar mais posts? [Enter / q] ")
        if answer.strip().lower() == "q":
            break

        shown = len(controller.state.results)
        if not await controller.load_more():
            print(f"Erro ao carregar posts: {controller.error}. Tente novamente.")
            continue
        for post in controller.state.results[shown:]:
            _print_item(post, settings)

    print(f"\n{len(controller.state.results)} post(s).")
    return 0


async def run_read(gateway: ContentGateway, settings: Settings, slug: str) -> int:
    """Print one post with its reading time."""
    resolution = await resolve_post(gateway, slug, settings.prismic_document_type)
    if not isinstance(resolution, Found):
        print(f"Post não encontrado: {slug}")
        return 1

    post = resolution.post
    data = post.data or PostData()
    minutes = reading_time(post, words_per_minute=settings.words_per_minute)
    date_label = format_publication_date(
        post.first_publication_date,
        locale=settings.date_locale,
        missing=settings.missing_date_label,
    )

    print(data.title or "")
    print(f"{date_label} · {data.author or ''} · {format_reading_time(minutes)}")
    for section in data.content or []:
        print(f"\n## {section.heading or ''}\n")
        print(as_text(section.body, separator="\n\n"))
    return 0


async def run_build(gateway: ContentGateway, settings: Settings, output: Path) -> int:
    site = BlogSite(gateway, settings)
    report = await export_site(site, output, concurrency=settings.build_concurrency)
    print(f"{len(report.written)} page(s) written to {report.output_dir}")
    if report.skipped:
        print(f"Skipped: {', '.join(report.skipped)}")
    return 0


def run_serve(settings: Settings, use_mock: bool, host: str, port: int) -> int:
    """Serve the site with uvicorn (blocking)."""
    import uvicorn

    from .webapp import create_app

    app = create_app(settings, create_gateway(settings, use_mock=use_mock))
    logger.info("server_starting", host=host, port=port, mock=use_mock or settings.use_mock_prismic)
    uvicorn.run(app, host=host, port=port, log_level=settings.log_level.lower())
    return 0


async def async_main(args: argparse.Namespace, settings: Settings) -> int:
    """Async main function."""
    try:
        async with create_gateway(settings, use_mock=args.mock) as gateway:
            if args.mode == "browse":
                return await run_browse(gateway, settings)
            if args.mode == "read":
                return await run_read(gateway, settings, args.slug)
            return await run_build(
                gateway, settings, Path(args.output or settings.build_output_dir)
            )

    except PrismicAPIError as e:
        logger.error("content_service_error", error=e.message, status_code=e.status_code)
        return 1
    except OSError as e:
        logger.error("filesystem_error", error=str(e))
        return 1


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="spacetraveling - blog front-end for a Prismic repository",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  spacetraveling serve                  # Serve the site on http://127.0.0.1:3000
  spacetraveling serve --mock           # Serve sample posts (no Prismic needed)
  spacetraveling build --output out     # Export static pages
  spacetraveling browse                 # List posts in the terminal
  spacetraveling read como-utilizar-hooks
        """,
    )

    parser.add_argument(
        "mode",
        choices=["serve", "build", "browse", "read"],
        default="serve",
        nargs="?",
        help="Operation mode (default: serve)",
    )

    parser.add_argument(
        "slug",
        nargs="?",
        help="Post slug (only used with 'read' mode)",
    )

    parser.add_argument(
        "--mock",
        action="store_true",
        help="Use sample posts instead of the Prismic API",
    )

    parser.add_argument(
        "--output",
        type=str,
        help="Output directory for 'build' (default: BUILD_OUTPUT_DIR)",
    )

    parser.add_argument("--host", type=str, help="Bind host for 'serve'")
    parser.add_argument("--port", type=int, help="Bind port for 'serve'")

    args = parser.parse_args()

    settings = get_settings()
    configure_logging(settings.log_level)

    if args.mode == "read" and not args.slug:
        parser.error("'read' requires a slug")

    if args.mode == "serve":
        return run_serve(
            settings,
            use_mock=args.mock,
            host=args.host or settings.host,
            port=args.port or settings.port,
        )

    return asyncio.run(async_main(args, settings))


if __name__ == "__main__":
    sys.exit(main())
