"""Concurrent reachability checks for source URLs.

Every source ends up with ``url_valid`` set to True or False. Unverified
means invalid: malformed URLs, network errors, timeouts and probes cut off
by the global budget all resolve to False, and none of them raise.
"""

from __future__ import annotations
import asyncio
import logging
from typing import Collection, List, Optional, Sequence

import httpx

from ..config import get_settings
from ..models import Source
from ..monitoring_metrics import URL_PROBES
from ..time_budget import Budget
from ..tools.url_norm import is_well_formed_url

logger = logging.getLogger(__name__)


def is_reachable_status(status_code: int, accepted_statuses: Collection[int]) -> bool:
    return 200 <= status_code < 400 or status_code in accepted_statuses


async def probe_url(client: httpx.AsyncClient, url: str, timeout: float,
                    accepted_statuses: Collection[int]) -> bool:
    """
    Issue one HEAD request and classify the answer.

    Args:
        client: Shared async client
        url: Well-formed URL to probe
        timeout: Hard cap for this request, connect through response
        accepted_statuses: Extra status codes counted as reachable

    Returns:
        True if the URL answered with an accepted status
    """
    try:
        r = await asyncio.wait_for(client.head(url, timeout=timeout), timeout=timeout)
    except (asyncio.TimeoutError, httpx.TimeoutException):
        logger.debug(f"Probe timed out after {timeout}s: {url}")
        URL_PROBES.labels(outcome="timeout").inc()
        return False
    except (httpx.HTTPError, httpx.InvalidURL, OSError, ValueError) as e:
        logger.debug(f"Probe failed for {url}: {e}")
        URL_PROBES.labels(outcome="error").inc()
        return False

    valid = is_reachable_status(r.status_code, accepted_statuses)
    URL_PROBES.labels(outcome="valid" if valid else "invalid").inc()
    if not valid:
        logger.debug(f"Probe rejected {url}: HTTP {r.status_code}")
    return valid


async def verify_all(sources: Sequence[Source], budget_seconds: Optional[float] = None, *,
                     concurrency: Optional[int] = None, timeout: Optional[float] = None,
                     accepted_statuses: Optional[Collection[int]] = None,
                     client: Optional[httpx.AsyncClient] = None) -> List[Source]:
    """
    Probe every source URL with a bounded worker pool.

    Args:
        sources: Canonical sources
        budget_seconds: Wall-clock cap for the whole batch
        concurrency: Maximum probes in flight
        timeout: Per-request timeout
        accepted_statuses: Non-2xx/3xx codes treated as reachable (403 by default)
        client: Optional pre-built client (tests inject a mock transport)

    Returns:
        Copies of ``sources`` in the same order with ``url_valid`` set
    """
    settings = get_settings()
    budget = Budget(budget_seconds if budget_seconds is not None else settings.URL_VERIFY_BUDGET_SECONDS)
    concurrency = concurrency or settings.URL_PROBE_CONCURRENCY
    timeout = timeout or settings.URL_PROBE_TIMEOUT_SECONDS
    if accepted_statuses is None:
        accepted_statuses = settings.accepted_block_statuses()

    # One slot per source; each worker writes only its own slot.
    results: List[Optional[bool]] = [None] * len(sources)
    sem = asyncio.Semaphore(concurrency)

    owns_client = client is None
    http = client or httpx.AsyncClient(
        headers={"User-Agent": settings.PROBE_USER_AGENT},
        follow_redirects=True,
        limits=httpx.Limits(max_connections=concurrency),
    )

    async def worker(i: int, src: Source) -> None:
        if not is_well_formed_url(src.url):
            URL_PROBES.labels(outcome="malformed").inc()
            results[i] = False
            return
        async with sem:
            if budget.is_expired():
                results[i] = False
                return
            # never wait past the batch deadline
            results[i] = await probe_url(http, src.url.strip(), budget.get_timeout(timeout), accepted_statuses)

    try:
        tasks = [asyncio.create_task(worker(i, s)) for i, s in enumerate(sources)]
        if tasks:
            _, pending = await asyncio.wait(tasks, timeout=budget.remaining())
            if pending:
                for t in pending:
                    t.cancel()
                await asyncio.gather(*pending, return_exceptions=True)
                URL_PROBES.labels(outcome="cancelled").inc(len(pending))
                logger.warning(f"URL budget of {budget.total_seconds}s expired; "
                               f"{len(pending)} of {len(tasks)} probes marked invalid")
    finally:
        if owns_client:
            await http.aclose()

    verified = [src.model_copy(update={"url_valid": results[i] is True}) for i, src in enumerate(sources)]
    logger.info(f"Verified {len(verified)} source URLs in {budget.elapsed():.2f}s: "
                f"{sum(1 for s in verified if s.url_valid)} reachable")
    return verified
