"""Event source adapters supplying the events of the current window.

Every adapter exposes ``async fetch_events() -> list[Event]`` and
converts any failure into ``SourceFetchError`` so the orchestrator can
abort the run before clustering starts.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Protocol

import httpx
import structlog
from pydantic import ValidationError

from quake_clusters.clustering.types import Event
from quake_clusters.errors import SourceFetchError
from quake_clusters.ingestion.feed_loader import load_feed_file, parse_feature_collection

logger = structlog.get_logger()

USER_AGENT = "quake-clusters/0.1 (+scheduled cluster sync)"


class EventSource(Protocol):
    async def fetch_events(self) -> list[Event]: ...


class HttpEventSource:
    """Fetch a GeoJSON feature collection over HTTP.

    Args:
        url: Feed URL (USGS summary feed or a compatible proxy).
        timeout: Request timeout in seconds.
        transport: Optional httpx transport, used by tests to stub the feed.
    """

    def __init__(
        self,
        url: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self._transport = transport

    async def fetch_events(self) -> list[Event]:
        log = logger.bind(url=self.url)
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                transport=self._transport,
                headers={"User-Agent": USER_AGENT},
            ) as client:
                response = await client.get(self.url)
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPStatusError as e:
            raise SourceFetchError(
                f"Feed returned HTTP {e.response.status_code} for {self.url}"
            ) from e
        except httpx.HTTPError as e:
            raise SourceFetchError(f"Failed to fetch feed {self.url}: {e}") from e
        except json.JSONDecodeError as e:
            raise SourceFetchError(f"Feed {self.url} is not valid JSON: {e}") from e

        try:
            events = parse_feature_collection(payload)
        except ValidationError as e:
            raise SourceFetchError(f"Feed {self.url} is not a feature collection: {e}") from e

        log.info("feed_fetched", event_count=len(events))
        return events


class FileEventSource:
    """Read a GeoJSON feature collection from a local file."""

    def __init__(self, file_path: Path) -> None:
        self.file_path = file_path

    async def fetch_events(self) -> list[Event]:
        try:
            events = load_feed_file(self.file_path)
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            raise SourceFetchError(f"Failed to load feed file {self.file_path}: {e}") from e

        logger.info("feed_file_loaded", path=str(self.file_path), event_count=len(events))
        return events
