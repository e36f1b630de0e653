from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import logging
    from pathlib import Path

    import httpx

from topic_taxonomy import resolver_config, taxonomy_logger, topic_tools
from topic_taxonomy.errors import RegistryFetchError
from topic_taxonomy.metrics import MetricsCollector, ResolutionOutcome
from topic_taxonomy.sources import (
    FeedDirectoryRegistry,
    HttpSubscriptionSource,
    HttpTemplateRegistry,
    SubscriptionSource,
    TemplateRegistry,
)


# AIDEV-NOTE: Orchestrates the pure topic_tools functions over freshly fetched registry data
class TopicResolver:
    """Resolves broker subscriptions into human-readable topic taxonomies.

    Architecture:
    - Registry: fetched fresh for every resolution, never cached
    - Matching and merging: pure functions from topic_tools
    - Queue lookups: one subscription fetch, then one concurrent resolution per pattern
    """

    def __init__(
        self,
        registry: TemplateRegistry,
        subscription_source: SubscriptionSource,
        max_concurrency: int | None = None,
        logger: logging.Logger | None = None,
        name: str = "topic_resolver",
    ) -> None:
        """Initialize the resolver.

        Args:
            registry: Source of registered topic templates
            subscription_source: Source of the subscriptions bound to queues
            max_concurrency: Maximum number of patterns resolved at once, unbounded if None
            logger: Optional custom logger, defaults to a rich resolver logger
            name: Name used to identify this resolver's metrics
        """
        if max_concurrency is not None and max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1.")

        self.registry = registry
        self.subscription_source = subscription_source
        self.max_concurrency = max_concurrency
        self.logger = logger or taxonomy_logger.TaxonomyLogger.get_logger(__name__)
        self.metrics = MetricsCollector(resolver_name=name)

    @classmethod
    def from_config(
        cls,
        config: resolver_config.ResolverConfig,
        client: httpx.AsyncClient,
        subscription_source: SubscriptionSource | None = None,
        logger: logging.Logger | None = None,
    ) -> TopicResolver:
        """Build a resolver wired to the feeds server described by config.

        A configured feeds_path switches the registry to the local feeds
        directory. Subscriptions come from the feeds server unless another
        source (e.g. SempSubscriptionSource) is given.
        """
        registry: TemplateRegistry
        if config.feeds_path is not None:
            registry = FeedDirectoryRegistry(config.feeds_path)
        else:
            registry = HttpTemplateRegistry(client, config.feeds_server_url)

        return cls(
            registry=registry,
            subscription_source=subscription_source or HttpSubscriptionSource(client, config.feeds_server_url),
            max_concurrency=config.max_concurrency,
            logger=logger,
        )

    @classmethod
    def from_config_path(
        cls,
        config_path: str | Path,
        client: httpx.AsyncClient,
        subscription_source: SubscriptionSource | None = None,
        logger: logging.Logger | None = None,
    ) -> TopicResolver:
        """Build a resolver from a YAML file or a directory of YAML files."""
        config = resolver_config.load_config(config_path, resolver_config.ResolverConfig)
        return cls.from_config(config, client, subscription_source=subscription_source, logger=logger)

    async def format_topic(self, pattern: str) -> list[str]:
        """Resolve one subscription pattern against the current registry.

        Args:
            pattern: Subscription pattern, e.g. 'demographics/>'

        Returns:
            One merged taxonomy per matched template (registry order), a single
            synthesized taxonomy when nothing matched, or an empty list when
            the registry could not be fetched.
        """
        timer_id = self.metrics.start_timer("registry_fetch")
        try:
            templates = await self.registry.fetch_templates()
        except RegistryFetchError as e:
            self.logger.error("Error formatting subscription topic %s: %s", pattern, e)
            self.metrics.record_resolution(ResolutionOutcome.FAILED)
            return []
        except Exception as e:
            self.logger.error("Unexpected error formatting subscription topic %s: %s", pattern, e, exc_info=True)
            self.metrics.record_resolution(ResolutionOutcome.FAILED)
            return []
        finally:
            self.metrics.end_timer(timer_id)

        matched_templates = topic_tools.match_template(pattern, templates)

        if not matched_templates:
            self.logger.debug("No template matches %s, synthesizing one", pattern)
            self.metrics.record_resolution(ResolutionOutcome.SYNTHETIC)
            return [topic_tools.merge_empty_template(pattern)]

        if len(matched_templates) > 1:
            self.logger.info("Subscription %s matches %d templates", pattern, len(matched_templates))

        self.metrics.record_resolution(ResolutionOutcome.MERGED, matched_templates=len(matched_templates))
        return [topic_tools.merge_topic_template(pattern, template) for template in matched_templates]

    async def get_subscribed_topics(self, queue_name: str) -> set[str]:
        """Resolve every subscription bound to a queue into distinct taxonomies.

        Args:
            queue_name: Broker queue whose subscriptions are resolved

        Returns:
            Distinct taxonomy strings of all subscriptions

        Raises:
            ValueError: If queue_name is empty
            SubscriptionFetchError: If the subscription list could not be fetched
        """
        if not queue_name or not queue_name.strip():
            raise ValueError("Queue name is required.")

        timer_id = self.metrics.start_timer("subscription_fetch")
        try:
            subscriptions = await self.subscription_source.fetch_subscriptions(queue_name)
        except Exception:
            self.logger.error("Error resolving subscriptions for queue %s", queue_name, exc_info=True)
            self.metrics.record_queue_lookup(success=False)
            raise
        finally:
            self.metrics.end_timer(timer_id)

        self.logger.debug("Queue %s has %d subscriptions", queue_name, len(subscriptions))

        semaphore = asyncio.Semaphore(self.max_concurrency) if self.max_concurrency else None

        async def resolve(pattern: str) -> list[str]:
            if semaphore is None:
                return await self.format_topic(pattern)
            async with semaphore:
                return await self.format_topic(pattern)

        async with asyncio.TaskGroup() as tg:
            tasks = [
                tg.create_task(resolve(pattern), name=f"format_topic_{i}") for i, pattern in enumerate(subscriptions)
            ]

        taxonomies: set[str] = set()
        for task in tasks:
            taxonomies.update(task.result())

        self.metrics.record_queue_lookup(success=True)
        self.logger.info(
            "Resolved %d subscriptions of queue %s into %d topics", len(subscriptions), queue_name, len(taxonomies)
        )
        return taxonomies
