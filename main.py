#!/usr/bin/env python3
"""
Main entry point for the crawler.
"""

import argparse
import asyncio
import logging
import signal
import sys
from pathlib import Path
from typing import List, Optional

from tldr_crawler import __version__
from tldr_crawler.crawler import CrawlerScheduler, CrawlError
from tldr_crawler.utils.config import (
    Config,
    DEFAULT_DESCRIPTION_SELECTOR,
    DEFAULT_TITLE_SELECTOR,
    DEFAULT_URL,
    load_config,
)
from tldr_crawler.utils.logger import setup_logging


DEFAULT_CONFIG_PATH = 'config.yaml'


class CrawlerApp:
    """Main application class for the crawler."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self._shutdown_event: Optional[asyncio.Event] = None
        self._previous_handlers = {}

    def setup_signal_handlers(self):
        """Turn SIGINT/SIGTERM into a shutdown request for the running crawl."""
        loop = asyncio.get_running_loop()

        def signal_handler(signum, frame):
            self.logger.info(f"Received signal {signum}, initiating shutdown...")
            loop.call_soon_threadsafe(self._shutdown_event.set)

        for signum in (signal.SIGINT, signal.SIGTERM):
            self._previous_handlers[signum] = signal.signal(signum, signal_handler)

    def restore_signal_handlers(self):
        for signum, handler in self._previous_handlers.items():
            signal.signal(signum, handler)
        self._previous_handlers.clear()

    async def run(self, config: Config) -> int:
        """Run one crawl. Returns the process exit code."""
        self._shutdown_event = asyncio.Event()
        self.setup_signal_handlers()

        crawler = config.crawler
        self.logger.info("=== CRAWLER STARTING ===")
        self.logger.info(f"Seed URL: {crawler.url}")
        self.logger.info(f"Title selector: {crawler.title_selector}")
        self.logger.info(f"Description selector: {crawler.description_selector}")
        self.logger.info(f"Concurrency: {crawler.concurrency}")
        self.logger.info(f"Fail fast: {crawler.fail_fast}")

        try:
            async with CrawlerScheduler(crawler) as scheduler:
                crawl_task = asyncio.create_task(scheduler.run())
                shutdown_task = asyncio.create_task(self._shutdown_event.wait())

                done, pending = await asyncio.wait(
                    [crawl_task, shutdown_task],
                    return_when=asyncio.FIRST_COMPLETED
                )

                for task in pending:
                    task.cancel()
                    try:
                        await task
                    except asyncio.CancelledError:
                        pass

                if crawl_task not in done:
                    self.logger.info("Shutdown requested, crawl cancelled")
                    return 1

                crawl_task.result()

        except CrawlError as e:
            self.logger.error(f"Fatal error: {e}")
            return 1

        finally:
            self.restore_signal_handlers()
            self.logger.info("=== CRAWLER FINISHED ===")

        return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='tldr-crawler',
        description="Fetch a seed page, follow every link matching a selector "
                    "and print a description snippet from each linked page.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Defaults (used when neither the config file nor a flag sets a value):
  --url          {DEFAULT_URL}
  --title        {DEFAULT_TITLE_SELECTOR}
  --description  {DEFAULT_DESCRIPTION_SELECTOR}
  --concurrency  3

Examples:
  tldr-crawler
  tldr-crawler --url https://example.com/blog/ --title "h2 a" --description "p.summary"
  tldr-crawler --config my_config.yaml --concurrency 8 --keep-going
        """
    )

    parser.add_argument('--url', help='Seed page URL')
    parser.add_argument('--title', dest='title_selector', help='CSS selector for links on the seed page')
    parser.add_argument('--description', dest='description_selector',
                        help='CSS selector for the description on each linked page')
    parser.add_argument('--concurrency', type=int, help='Number of workers fetching linked pages')
    parser.add_argument(
        '--config',
        help=f'Path to a YAML configuration file (default: {DEFAULT_CONFIG_PATH} when present)'
    )
    parser.add_argument(
        '--keep-going',
        action='store_true',
        help='Report failed linked pages and continue instead of aborting the crawl'
    )
    parser.add_argument('--log-level', dest='level', help='Logging level (default: INFO)')
    parser.add_argument('--json-logs', action='store_true', help='Emit logs as JSON lines')
    parser.add_argument('--version', action='version', version=f'tldr-crawler {__version__}')

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    config_path = args.config
    if config_path is None and Path(DEFAULT_CONFIG_PATH).exists():
        config_path = DEFAULT_CONFIG_PATH

    overrides = {
        'url': args.url,
        'title_selector': args.title_selector,
        'description_selector': args.description_selector,
        'concurrency': args.concurrency,
        'level': args.level,
        'fail_fast': False if args.keep_going else None,
        'json': True if args.json_logs else None,
    }

    try:
        config = load_config(config_path, overrides)
    except (FileNotFoundError, ValueError, TypeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    setup_logging(config.logging)

    app = CrawlerApp()
    try:
        return asyncio.run(app.run(config))
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
