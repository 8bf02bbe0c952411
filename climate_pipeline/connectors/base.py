"""
climate_pipeline/connectors/base.py

HTTP fetch client shared by every provider feed and map download.
"""

from __future__ import annotations

import json
import logging
import time
from enum import Enum
from typing import Any, Callable

import requests

from climate_pipeline.config import HTTPSettings
from climate_pipeline.connectors.retry import RetryPolicy
from climate_pipeline.errors import FetchError, PayloadDecodeError

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 64 * 1024


class PayloadKind(str, Enum):
    JSON = "json"
    TEXT = "text"
    BINARY = "binary"


class _AttemptFailure(Exception):
    """
    One failed attempt that is eligible for retry.
    """


class FetchClient:
    """
    GET client with a per-attempt deadline and a bounded retry policy.

    No response caching happens at this layer and requests ask upstream caches
    not to serve stored copies.
    """

    def __init__(
        self,
        *,
        http_settings: HTTPSettings,
        retry_policy: RetryPolicy | None = None,
        session: requests.Session | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._session = session or requests.Session()
        self._timeout_seconds = http_settings.timeout_seconds
        self._retry_policy = retry_policy or RetryPolicy.from_settings(http_settings)
        self._sleep = sleep
        self._clock = clock
        self._headers = {
            "User-Agent": http_settings.user_agent,
            "Accept": http_settings.accept,
            "Cache-Control": "no-store",
        }

    @property
    def retry_policy(self) -> RetryPolicy:
        return self._retry_policy

    def fetch(self, url: str, kind: PayloadKind) -> Any:
        """
        Fetch `url` and decode the body according to `kind`.
        """

        body, encoding = self._request(url)
        if kind is PayloadKind.BINARY:
            return body
        text = body.decode(encoding or "utf-8", errors="replace")
        if kind is PayloadKind.TEXT:
            return text
        try:
            return json.loads(text)
        except ValueError as exc:
            logger.error("Provider response was not valid JSON url=%s error=%s", url, exc)
            raise PayloadDecodeError(url, f"response was not valid JSON ({exc})") from exc

    def fetch_json(self, url: str) -> Any:
        return self.fetch(url, PayloadKind.JSON)

    def fetch_text(self, url: str) -> str:
        return self.fetch(url, PayloadKind.TEXT)

    def fetch_binary(self, url: str) -> bytes:
        return self.fetch(url, PayloadKind.BINARY)

    def _request(self, url: str) -> tuple[bytes, str | None]:
        """
        Run attempts until one succeeds or the retry policy is exhausted.
        """

        policy = self._retry_policy
        last_reason = "no attempt made"
        for attempt in range(1, policy.max_attempts + 1):
            try:
                return self._attempt(url)
            except _AttemptFailure as exc:
                last_reason = str(exc)
            except requests.RequestException as exc:
                last_reason = f"{type(exc).__name__}: {exc}"

            if not policy.should_retry(attempt):
                break

            wait_seconds = policy.delay_for(attempt)
            logger.warning(
                "Fetch retry attempt=%s/%s wait_seconds=%.2f url=%s reason=%s",
                attempt,
                policy.max_attempts,
                wait_seconds,
                url,
                last_reason,
            )
            self._sleep(wait_seconds)

        logger.error(
            "Fetch exhausted retries attempts=%s url=%s reason=%s",
            policy.max_attempts,
            url,
            last_reason,
        )
        raise FetchError(url, last_reason, attempts=policy.max_attempts)

    def _attempt(self, url: str) -> tuple[bytes, str | None]:
        deadline = self._clock() + self._timeout_seconds
        response = self._session.get(
            url,
            headers=self._headers,
            timeout=self._timeout_seconds,
            stream=True,
        )
        try:
            if not 200 <= response.status_code < 300:
                raise _AttemptFailure(f"HTTP {response.status_code} for {url}")

            chunks: list[bytes] = []
            for chunk in response.iter_content(chunk_size=_CHUNK_SIZE):
                if self._clock() > deadline:
                    raise requests.Timeout(
                        f"Read exceeded {self._timeout_seconds:.0f}s deadline for {url}"
                    )
                if chunk:
                    chunks.append(chunk)
            return b"".join(chunks), response.encoding
        finally:
            response.close()
