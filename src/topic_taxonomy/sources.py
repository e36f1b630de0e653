"""External collaborators feeding the resolver.

Two ports describe the read-only data the resolver needs:
- TemplateRegistry: the registered topic templates, one per known feed
- SubscriptionSource: the subscription patterns bound to a broker queue

Adapters fetch them from the local feeds server, the broker's SEMP v2
management API, or a local feeds directory.
"""

from __future__ import annotations

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import TypeAdapter, ValidationError

from topic_taxonomy.errors import RegistryFetchError, SubscriptionFetchError
from topic_taxonomy.models import FeedRecord, QueueSubscriptionList
from topic_taxonomy.resolver_config import default_feeds_path

logger = logging.getLogger(__name__)

FEED_INFO_FILE = "feedinfo.json"

_subscription_topics = TypeAdapter(list[str])


class TemplateRegistry(ABC):
    """Port for the registry of known topic templates."""

    @abstractmethod
    async def fetch_templates(self) -> list[str]:
        """Fetch all registered templates, in registry order.

        Raises:
            RegistryFetchError: If the registry could not be read
        """


class SubscriptionSource(ABC):
    """Port for the live subscriptions of broker queues."""

    @abstractmethod
    async def fetch_subscriptions(self, queue_name: str) -> list[str]:
        """Fetch the subscription patterns bound to a queue.

        Raises:
            SubscriptionFetchError: If the subscription list could not be read
        """


def templates_from_records(records: list[FeedRecord]) -> list[str]:
    """Keep the usable templates of registry records, dropping records without one."""
    return [record.template for record in records if record.template is not None]


async def _get_json(client: httpx.AsyncClient, url: str) -> Any:
    response = await client.get(url)
    response.raise_for_status()
    return response.json()


class HttpTemplateRegistry(TemplateRegistry):
    """Fetches feed records from the feeds server using httpx."""

    def __init__(self, client: httpx.AsyncClient, base_url: str) -> None:
        self._client = client
        self._url = f"{base_url.rstrip('/')}/feeds"

    async def fetch_templates(self) -> list[str]:
        try:
            payload = await _get_json(self._client, self._url)
        except (httpx.HTTPError, ValueError) as err:
            raise RegistryFetchError(f"Failed to fetch topic templates from {self._url}: {err}") from err

        if not isinstance(payload, list):
            raise RegistryFetchError(f"Expected a list of feed records from {self._url}, got {type(payload).__name__}")

        records = []
        for item in payload:
            try:
                records.append(FeedRecord.model_validate(item))
            except ValidationError as err:
                logger.debug("Ignoring malformed feed record: %s", err)

        templates = templates_from_records(records)
        logger.debug("Fetched %d templates from %d feed records", len(templates), len(records))
        return templates


class HttpSubscriptionSource(SubscriptionSource):
    """Fetches queue subscriptions through the feeds server."""

    def __init__(self, client: httpx.AsyncClient, base_url: str) -> None:
        self._client = client
        self._base_url = base_url.rstrip("/")

    async def fetch_subscriptions(self, queue_name: str) -> list[str]:
        url = f"{self._base_url}/subscriptions/{quote(queue_name, safe='')}"
        try:
            payload = await _get_json(self._client, url)
            return _subscription_topics.validate_python(payload)
        except (httpx.HTTPError, ValueError) as err:
            raise SubscriptionFetchError(
                f"Failed to fetch subscriptions for queue '{queue_name}': {err}", queue_name=queue_name
            ) from err


# AIDEV-NOTE: Talks to the broker directly, bypassing the feeds server proxy
class SempSubscriptionSource(SubscriptionSource):
    """Fetches queue subscriptions from the broker's SEMP v2 config API.

    The client is expected to carry the SEMP basic auth credentials,
    see SempConfig.build_client().
    """

    def __init__(self, client: httpx.AsyncClient, base_url: str, vpn: str) -> None:
        self._client = client
        self._base_url = base_url.rstrip("/")
        self._vpn = vpn

    def subscriptions_url(self, queue_name: str) -> str:
        vpn = quote(self._vpn, safe="")
        queue = quote(queue_name, safe="")
        return f"{self._base_url}/SEMP/v2/config/msgVpns/{vpn}/queues/{queue}/subscriptions"

    async def fetch_subscriptions(self, queue_name: str) -> list[str]:
        url = self.subscriptions_url(queue_name)
        try:
            payload = await _get_json(self._client, url)
            return QueueSubscriptionList.model_validate(payload or {}).topics
        except (httpx.HTTPError, ValueError) as err:
            raise SubscriptionFetchError(
                f"SEMP request for queue '{queue_name}' failed: {err}", queue_name=queue_name
            ) from err


class FeedDirectoryRegistry(TemplateRegistry):
    """Reads templates from a local feeds directory.

    Every immediate subdirectory is a feed; its feedinfo.json holds the
    template in the 'topic' field. Feeds are visited in name order.
    Defaults to $STM_HOME, or ~/.stm/feeds when STM_HOME is unset.
    """

    def __init__(self, feeds_path: Path | None = None) -> None:
        self.feeds_path = Path(feeds_path) if feeds_path is not None else default_feeds_path()

    async def fetch_templates(self) -> list[str]:
        return await asyncio.to_thread(self._read_templates)

    def _read_templates(self) -> list[str]:
        if not self.feeds_path.is_dir():
            raise RegistryFetchError(f"Feeds directory not found: {self.feeds_path}")

        records = []
        for feed_dir in sorted(path for path in self.feeds_path.iterdir() if path.is_dir()):
            record = self._read_feed(feed_dir)
            if record is not None:
                records.append(record)

        return templates_from_records(records)

    def _read_feed(self, feed_dir: Path) -> FeedRecord | None:
        feed_info_path = feed_dir / FEED_INFO_FILE
        try:
            feed_info = json.loads(feed_info_path.read_text(encoding="utf-8"))
            return FeedRecord.model_validate({"directory": feed_dir.name, "feedinfo": feed_info})
        except FileNotFoundError:
            return None
        except (OSError, ValueError, ValidationError) as err:
            logger.debug("Skipping unreadable feed %s: %s", feed_dir.name, err)
            return None
