"""
Analyze Client - research provider interface

Sends the prompts to an OpenAI-compatible chat completions endpoint
(Perplexity by default) and returns the decoded analysis payload. Anything
other than a parseable JSON object is an UpstreamError.
"""

import json
import logging
from typing import Any, Dict, Optional

import httpx
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from ..config import Settings, get_settings
from ..exceptions import ConfigurationError, UpstreamFormatError, UpstreamUnavailableError
from ..monitoring_metrics import UPSTREAM_REQUESTS
from ..validation.schema import extract_json_text

logger = logging.getLogger(__name__)

RETRYABLE_STATUSES = {429, 502, 503, 504}


class _RetryableStatus(Exception):
    def __init__(self, response: httpx.Response):
        super().__init__(f"HTTP {response.status_code}")
        self.response = response


class AnalyzeClient:
    """Chat-completions client for the research provider"""

    def __init__(self, settings: Optional[Settings] = None, client: Optional[httpx.AsyncClient] = None):
        self.settings = settings or get_settings()
        self._client = client

    def _request_body(self, system_prompt: str, user_prompt: str) -> Dict[str, Any]:
        return {
            "model": self.settings.PERPLEXITY_MODEL,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": 0.2,
            "top_p": 0.9,
            "return_images": False,
            "return_related_questions": False,
            "search_recency_filter": "month",
            "frequency_penalty": 1,
            "presence_penalty": 0,
        }

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=8),
        retry=retry_if_exception_type((httpx.TransportError, _RetryableStatus)),
        reraise=True,
    )
    async def _post(self, client: httpx.AsyncClient, body: Dict[str, Any]) -> httpx.Response:
        response = await client.post(
            self.settings.PERPLEXITY_API_URL,
            json=body,
            headers={
                "Authorization": f"Bearer {self.settings.PERPLEXITY_API_KEY}",
                "Content-Type": "application/json",
            },
            timeout=self.settings.UPSTREAM_TIMEOUT_SECONDS,
        )
        if response.status_code in RETRYABLE_STATUSES:
            logger.info(f"Provider returned HTTP {response.status_code}, will retry with backoff")
            raise _RetryableStatus(response)
        return response

    async def analyze(self, system_prompt: str, user_prompt: str) -> Dict[str, Any]:
        """
        Run one analysis request.

        Returns:
            The decoded payload dict (not yet schema-validated)

        Raises:
            ConfigurationError: no API key configured
            UpstreamUnavailableError: transport failure or non-2xx status
            UpstreamFormatError: response body is not a JSON payload
        """
        if not self.settings.PERPLEXITY_API_KEY:
            logger.error("PERPLEXITY_API_KEY not configured")
            raise ConfigurationError("API key not configured")

        client = self._client or httpx.AsyncClient()
        try:
            response = await self._post(client, self._request_body(system_prompt, user_prompt))
        except _RetryableStatus as e:
            response = e.response
        except httpx.HTTPError as e:
            UPSTREAM_REQUESTS.labels(status="transport_error").inc()
            logger.error(f"Provider request failed: {e}")
            raise UpstreamUnavailableError("Failed to analyze query", details=str(e)) from e
        finally:
            if self._client is None:
                await client.aclose()

        UPSTREAM_REQUESTS.labels(status=str(response.status_code)).inc()
        if not response.is_success:
            logger.error(f"Provider API error: {response.status_code} {response.text[:500]}")
            raise UpstreamUnavailableError("Failed to analyze query",
                                           status_code=response.status_code,
                                           details=response.text[:2000])

        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError, RecursionError) as e:
            logger.error(f"Unexpected provider envelope: {e}")
            raise UpstreamFormatError("Invalid response format from AI", details=str(e)) from e

        try:
            payload = json.loads(extract_json_text(content))
        except (json.JSONDecodeError, TypeError, RecursionError) as e:
            logger.error(f"Failed to parse provider JSON: {e}")
            raise UpstreamFormatError("Invalid response format from AI", details=str(e)) from e

        if not isinstance(payload, dict):
            raise UpstreamFormatError("Invalid response format from AI",
                                      details=f"expected a JSON object, got {type(payload).__name__}")
        logger.info("Provider response received")
        return payload
