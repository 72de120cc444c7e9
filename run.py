import argparse
import logging
import sys
from typing import Optional

import uvicorn

from autocrawler.api.server import create_app
from autocrawler.container import Container
from autocrawler.domain.crawl_config import CrawlConfig, TraversalMode
from autocrawler.domain.run_status import RunStatus
from autocrawler.exceptions import ConfigurationError
from autocrawler.services.crawl_config_loader import load_crawl_config
from autocrawler.services.report_exporter import DEFAULT_FILENAME, format_bytes, write_report

logger = logging.getLogger("autocrawler")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="AutoCrawler - best-effort web text extractor")
    parser.add_argument("--log-level", default="INFO", help="Python logging level (default: INFO)")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP control API")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=8000)

    crawl = sub.add_parser("crawl", help="Run one crawl in the foreground and write a report")
    crawl.add_argument("url", nargs="?", help="Seed URL (or use --config)")
    crawl.add_argument("--config", help="YAML crawl config file")
    crawl.add_argument(
        "--mode",
        default=TraversalMode.SINGLE.value,
        choices=[m.value for m in TraversalMode],
    )
    crawl.add_argument("--page-limit", type=int, default=5, help="Max pages in follow-links mode")
    crawl.add_argument("--start", type=int, default=1, help="First ID in paginate mode")
    crawl.add_argument("--end", type=int, default=3, help="Last ID in paginate mode")
    crawl.add_argument("--summarize", action="store_true", help="Add an AI summary to each page")
    crawl.add_argument("--record-failures", action="store_true", help="Record unreachable URLs as failed pages")
    crawl.add_argument("--output", default=DEFAULT_FILENAME, help=f"Report path (default: {DEFAULT_FILENAME})")
    return parser


def _crawl_config_from_args(args) -> CrawlConfig:
    if args.config:
        return load_crawl_config(args.config)
    return CrawlConfig(
        seed_url=args.url or "",
        mode=TraversalMode(args.mode),
        page_limit=args.page_limit,
        start_id=args.start,
        end_id=args.end,
        summarize=args.summarize,
        record_failures=args.record_failures,
    )


def run_crawl(args, container: Container) -> int:
    try:
        cfg = _crawl_config_from_args(args)
    except ConfigurationError as e:
        logger.error("%s", e)
        return 1

    engine = container.traversal_engine()
    try:
        state = engine.start(cfg)
        engine.join()
    except KeyboardInterrupt:
        engine.stop()
        engine.join()
        state = engine.state

    if state.status is RunStatus.ERROR:
        return 1

    pages = state.pages
    if pages:
        path = write_report(pages, args.output)
        stats = state.stats()
        logger.info(
            "Wrote %d pages (%s, %d links) to %s",
            stats.total_pages,
            format_bytes(stats.total_size),
            stats.total_links,
            path,
        )
    else:
        logger.warning("No data to download.")
    return 0


def main(argv=None, container: Optional[Container] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    container = container or Container()

    if args.command == "serve":
        app = create_app(container)
        uvicorn.run(app, host=args.host, port=args.port)
        return 0
    return run_crawl(args, container)


if __name__ == '__main__':
    sys.exit(main())
