"""Resolution of broker subscription patterns into registered topic taxonomies."""

from .errors import RegistryFetchError, SourceFetchError, SubscriptionFetchError, TaxonomyError
from .models import FeedInfo, FeedRecord, QueueSubscription, QueueSubscriptionList
from .resolver import TopicResolver
from .resolver_config import ResolverConfig, SempConfig, load_config
from .sources import (
    FeedDirectoryRegistry,
    HttpSubscriptionSource,
    HttpTemplateRegistry,
    SempSubscriptionSource,
    SubscriptionSource,
    TemplateRegistry,
)
from .taxonomy_logger import LoggerConfig, TaxonomyLogger
from .topic_tools import (
    from_mqtt_pattern,
    match_template,
    merge_empty_template,
    merge_topic_template,
    validate_topic,
)

# Single __all__ declaration with all public exports
__all__ = [
    "FeedDirectoryRegistry",
    "FeedInfo",
    "FeedRecord",
    "HttpSubscriptionSource",
    "HttpTemplateRegistry",
    "LoggerConfig",
    "QueueSubscription",
    "QueueSubscriptionList",
    "RegistryFetchError",
    "ResolverConfig",
    "SempConfig",
    "SempSubscriptionSource",
    "SourceFetchError",
    "SubscriptionFetchError",
    "SubscriptionSource",
    "TaxonomyError",
    "TaxonomyLogger",
    "TemplateRegistry",
    "TopicResolver",
    "from_mqtt_pattern",
    "load_config",
    "match_template",
    "merge_empty_template",
    "merge_topic_template",
    "validate_topic",
]
