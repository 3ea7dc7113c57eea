"""
Crawl scheduler: seed page -> task channel -> worker pool -> result channel -> consumer.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable, List, Optional

from .channel import Channel
from .errors import CrawlAbortedError, ParseError
from .fetcher import WebFetcher
from .parser import ContentParser
from ..utils.config import CrawlerConfig
from ..utils.logger import get_crawler_logger


@dataclass(frozen=True)
class Task:
    """A link found on the seed page, waiting to be fetched."""
    url: str
    title: str


@dataclass(frozen=True)
class Result:
    """A fetched task. ``error`` is only set when fail-fast is disabled."""
    url: str
    title: str
    description: str
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class CrawlStats:
    """Statistics for a crawl run."""
    start_time: float
    tasks_emitted: int = 0
    results_received: int = 0
    failed_tasks: int = 0

    @property
    def elapsed_time(self) -> float:
        return time.time() - self.start_time


def log_result(result: Result):
    """Default consumer: one multi-line report per result."""
    logger = logging.getLogger(__name__)
    if result.ok:
        logger.info(f"Url: {result.url}\nTitle: {result.title}\nDescription: {result.description}\n\n")
    else:
        logger.warning(f"Url: {result.url}\nTitle: {result.title}\nError: {result.error}\n\n")


class CrawlerScheduler:
    """
    Runs one crawl of the configured seed page.

    The generator, every worker, the completion sentinel and the consumer are
    separate asyncio tasks that only share the two channels. In fail-fast
    mode the first fetch or parse error cancels all of them and is raised
    from ``run()`` as ``CrawlAbortedError``.
    """

    def __init__(self, config: CrawlerConfig,
                 fetcher: Optional[WebFetcher] = None,
                 parser: Optional[ContentParser] = None,
                 on_result: Callable[[Result], None] = log_result):
        self.config = config
        self.logger = logging.getLogger(__name__)

        self.fetcher = fetcher
        self.parser = parser or ContentParser()
        self.on_result = on_result
        self._owns_fetcher = fetcher is None

        self.stats = CrawlStats(start_time=time.time())
        self.results: List[Result] = []
        self.workers: List[asyncio.Task] = []

    async def initialize(self):
        """Create the HTTP fetcher unless one was supplied."""
        if self.fetcher is None:
            self.fetcher = WebFetcher(
                user_agent=self.config.user_agent,
                request_timeout=self.config.request_timeout,
                max_concurrent_requests=self.config.concurrency
            )
        await self.fetcher.start()

    async def close(self):
        """Close the fetcher if this scheduler created it."""
        if self.fetcher and self._owns_fetcher:
            await self.fetcher.close()
            self.fetcher = None

    async def __aenter__(self):
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def run(self) -> List[Result]:
        """
        Crawl the seed page and every page it links to.

        Returns:
            Results in the order the consumer received them

        Raises:
            CrawlAbortedError: a page failed and fail-fast is enabled
        """
        if self.fetcher is None:
            raise RuntimeError("CrawlerScheduler.initialize() must be called before run()")

        self.stats = CrawlStats(start_time=time.time())
        self.results = []

        tasks = Channel("tasks")
        results = Channel("results")

        generator = asyncio.create_task(self._generate_tasks(tasks), name="generator")
        self.workers = [
            asyncio.create_task(self._worker(f"worker-{i}", tasks, results), name=f"worker-{i}")
            for i in range(self.config.concurrency)
        ]
        sentinel = asyncio.create_task(self._close_results(self.workers, results), name="sentinel")
        consumer = asyncio.create_task(self._consume(results), name="consumer")
        pipeline = [generator, *self.workers, sentinel, consumer]

        self.logger.info(f"Started crawling {self.config.url} with {self.config.concurrency} workers")

        try:
            done, _ = await asyncio.wait(pipeline, return_when=asyncio.FIRST_EXCEPTION)
            for task in pipeline:
                if task in done and not task.cancelled() and task.exception() is not None:
                    raise task.exception()
        finally:
            await self._cancel(pipeline)

        self._log_final_stats()
        return list(self.results)

    async def _generate_tasks(self, tasks: Channel):
        """Fetch the seed page and emit one task per matching link."""
        url = self.config.url
        try:
            fetch_result = await self.fetcher.fetch(url)
            if not fetch_result.ok:
                raise CrawlAbortedError(url, fetch_result.error)

            try:
                links = self.parser.extract_links(fetch_result.content, self.config.title_selector, url)
            except ParseError as e:
                raise CrawlAbortedError(url, str(e)) from e

            self.logger.info(f"Found {len(links)} links on {url}")
            for link, title in links:
                await tasks.send(Task(url=link, title=title))
                self.stats.tasks_emitted += 1
        finally:
            await tasks.close()

    async def _worker(self, worker_id: str, tasks: Channel, results: Channel):
        """Fetch each task's page and emit its description until tasks run out."""
        logger = get_crawler_logger(__name__, worker=worker_id)
        logger.debug(f"Worker {worker_id} started")

        async for task in tasks:
            try:
                description = await self._describe(task)
            except CrawlAbortedError as e:
                if self.config.fail_fast:
                    raise
                logger.log_url_event(logging.WARNING, task.url, f"Task failed: {e.reason}")
                self.stats.failed_tasks += 1
                result = Result(url=task.url, title=task.title, description="", error=e.reason)
            else:
                result = Result(url=task.url, title=task.title, description=description)

            await results.send(result)

        logger.debug(f"Worker {worker_id} finished")

    async def _describe(self, task: Task) -> str:
        fetch_result = await self.fetcher.fetch(task.url)
        if not fetch_result.ok:
            raise CrawlAbortedError(task.url, fetch_result.error)
        try:
            return self.parser.extract_text(fetch_result.content, self.config.description_selector)
        except ParseError as e:
            raise CrawlAbortedError(task.url, str(e)) from e

    async def _close_results(self, workers: List[asyncio.Task], results: Channel):
        """Close the result channel once every worker has exited."""
        await asyncio.wait(workers)
        await results.close()

    async def _consume(self, results: Channel):
        async for result in results:
            self.results.append(result)
            self.stats.results_received += 1
            self.on_result(result)

    async def _cancel(self, pipeline: List[asyncio.Task]):
        """Cancel whatever is still running and wait for it to unwind."""
        for task in pipeline:
            if not task.done():
                task.cancel()
        await asyncio.gather(*pipeline, return_exceptions=True)
        self.workers.clear()

    def _log_final_stats(self):
        self.logger.info("=== CRAWL COMPLETED ===")
        self.logger.info(f"Tasks emitted: {self.stats.tasks_emitted}")
        self.logger.info(f"Results received: {self.stats.results_received}")
        self.logger.info(f"Failed tasks: {self.stats.failed_tasks}")
        self.logger.info(f"Total time: {self.stats.elapsed_time:.2f} seconds")
        self.logger.info(f"Fetcher stats: {self.fetcher.get_stats()}")
