"""Async HTTP fetching of remote tracker list sources."""

from __future__ import annotations

import httpx
import structlog

from ..exceptions import FetchError, FetchErrorKind
from .parser import TrackerParser

DEFAULT_TIMEOUT = 10.0


class SourceFetcher:
    """Retrieve one tracker source and parse it into announce URLs."""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        parser: TrackerParser | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.parser = parser or TrackerParser()
        self.timeout = timeout
        self.logger = logger or structlog.get_logger("tracker_sync.fetcher")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(follow_redirects=True)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def fetch(self, source: str) -> list[str]:
        self.logger.info("fetch_started", source=source)
        try:
            response = await self._client.get(
                source,
                headers={"Accept": "text/plain"},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise self._failed(source, FetchErrorKind.TIMEOUT, exc) from exc
        except httpx.HTTPError as exc:
            raise self._failed(source, FetchErrorKind.TRANSPORT, exc) from exc

        if not response.text:
            raise self._failed(source, FetchErrorKind.EMPTY_RESPONSE)

        trackers = self.parser.parse(response.text)
        self.logger.info("fetch_succeeded", source=source, count=len(trackers))
        return trackers

    def _failed(
        self, source: str, reason: FetchErrorKind, exc: Exception | None = None
    ) -> FetchError:
        detail = str(exc) if exc is not None else None
        self.logger.warning("fetch_failed", source=source, kind=reason.value, error=detail)
        return FetchError(source, reason, detail)


__all__ = ["DEFAULT_TIMEOUT", "SourceFetcher"]
