"""Concurrent, best-effort scraping of a list of URLs."""

import asyncio
import time
from concurrent.futures import Executor, ThreadPoolExecutor

from utils.logger import get_logger

from .context_pack import aggregate_context
from .contracts import ScrapeClient, ScrapeResult

logger = get_logger(__name__)


class ScrapeService:
    """
    Fan out one scrape per URL and wait for all of them.

    A URL that fails (exception or timeout) contributes an empty result;
    it never aborts the group. Results come back in input order.

    Every call to scrape_all gets its own thread pool with one worker per
    URL, so no scrape queues behind another and the timeout clock starts
    when the scrape does. Scrapes still running after a timeout are
    abandoned with their pool and never hold up later work on the loop's
    default executor.
    """

    def __init__(self, client: ScrapeClient, timeout_s: float | None = None):
        """
        Args:
            client: Scrape provider client
            timeout_s: Optional per-URL timeout; None waits indefinitely
        """
        self.client = client
        self.timeout_s = timeout_s

    async def _safe_scrape(self, url: str, executor: Executor) -> ScrapeResult:
        """Scrape one URL on the stage's pool, mapping any failure to an empty result."""
        start_time = time.time()
        loop = asyncio.get_running_loop()
        try:
            call = loop.run_in_executor(executor, self.client.scrape, url)
            if self.timeout_s is not None:
                markdown = await asyncio.wait_for(call, timeout=self.timeout_s)
            else:
                markdown = await call
            return ScrapeResult(url=url, markdown=markdown or "")

        except asyncio.TimeoutError:
            logger.warning(
                f"Scrape timed out for {url}",
                extra={"extra_fields": {"url": url, "timeout_s": self.timeout_s}},
            )
            return ScrapeResult(url=url, error=f"timeout after {self.timeout_s}s")

        except Exception as e:
            logger.warning(
                f"Scrape failed for {url}: {e}",
                extra={
                    "extra_fields": {
                        "url": url,
                        "error_type": type(e).__name__,
                        "elapsed_ms": int((time.time() - start_time) * 1000),
                    }
                },
            )
            return ScrapeResult(url=url, error=str(e) or type(e).__name__)

    async def scrape_all(self, urls: list[str]) -> list[ScrapeResult]:
        """
        Scrape every URL concurrently (join-all).

        Args:
            urls: URLs in prompt order

        Returns:
            One ScrapeResult per input URL, in the same order
        """
        if not urls:
            return []

        logger.info(f"Scraping {len(urls)} URLs", extra={"extra_fields": {"url_count": len(urls)}})

        executor = ThreadPoolExecutor(max_workers=len(urls), thread_name_prefix="scrape")
        try:
            # _safe_scrape never raises, so gather needs no return_exceptions
            results = await asyncio.gather(*(self._safe_scrape(url, executor) for url in urls))
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        succeeded = sum(1 for r in results if r.ok)
        logger.info(
            f"Scrape complete: {succeeded}/{len(results)} with content",
            extra={
                "extra_fields": {
                    "url_count": len(results),
                    "succeeded": succeeded,
                    "failed_urls": [r.url for r in results if r.error],
                }
            },
        )
        return list(results)

    async def build_context(self, urls: list[str]) -> str:
        """Scrape the URLs and return the aggregated markdown context."""
        return aggregate_context(await self.scrape_all(urls))
