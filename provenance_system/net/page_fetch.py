"""
Best-effort headline/body extraction for URL queries.
Time-bounded, HTML only; any failure returns None and the analysis
continues from the URL alone.
"""

from __future__ import annotations
import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

import httpx
from bs4 import BeautifulSoup

from ..config import DEFAULT_PROBE_USER_AGENT, get_settings

logger = logging.getLogger(__name__)

HEADERS = {
    "User-Agent": DEFAULT_PROBE_USER_AGENT,
    "Accept": "text/html,application/xhtml+xml;q=0.9,*/*;q=0.5",
}


@dataclass
class PageContent:
    headline: str
    body: str


def extract_page_content(html: str, max_chars: int = 8000) -> Optional[PageContent]:
    """Pull a headline and paragraph text out of an HTML document."""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style", "noscript", "nav", "header", "footer", "aside"]):
        tag.decompose()

    headline = ""
    og = soup.find("meta", attrs={"property": "og:title"})
    if og and og.get("content"):
        headline = og["content"].strip()
    elif soup.find("h1"):
        headline = soup.find("h1").get_text(" ", strip=True)
    elif soup.title and soup.title.string:
        headline = soup.title.string.strip()

    # Prefer article content, fallback to body paragraphs
    container = soup.find("article") or soup.find("main") or soup
    paras = [p.get_text(" ", strip=True) for p in container.find_all("p")]
    body = "\n".join(p for p in paras if len(p) > 30)[:max_chars]

    if not headline and not body:
        return None
    return PageContent(headline=headline, body=body)


async def fetch_page_content(url: str, timeout: Optional[float] = None,
                             client: Optional[httpx.AsyncClient] = None) -> Optional[PageContent]:
    """
    Fetch ``url`` and extract its headline and body text.

    Args:
        url: Page to read
        timeout: Overall cap in seconds (PAGE_FETCH_TIMEOUT_SECONDS by default)
        client: Optional pre-built client

    Returns:
        PageContent, or None if the page could not be fetched or had no text
    """
    settings = get_settings()
    timeout = timeout or settings.PAGE_FETCH_TIMEOUT_SECONDS
    owns_client = client is None
    http = client or httpx.AsyncClient(headers=HEADERS, follow_redirects=True)
    try:
        r = await asyncio.wait_for(http.get(url, timeout=timeout), timeout=timeout)
        if not r.is_success:
            logger.warning(f"Page fetch for {url} returned HTTP {r.status_code}")
            return None
        if "html" not in r.headers.get("content-type", "").lower():
            logger.info(f"Skipping non-HTML content at {url}")
            return None
        content = extract_page_content(r.text, settings.PAGE_BODY_MAX_CHARS)
        if content is None:
            logger.info(f"No readable text at {url}")
        return content
    except (asyncio.TimeoutError, httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
        logger.warning(f"Page fetch failed for {url}: {e}")
        return None
    finally:
        if owns_client:
            await http.aclose()
