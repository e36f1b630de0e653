"""Record models for the external template registry and subscription sources.

This module defines the payload shapes returned by the local feeds server
and by the broker's SEMP management API.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class FeedInfo(BaseModel):
    """Descriptive information about a registered feed.

    Attributes:
        name: Optional display name of the feed
        topic: Topic template describing the feed taxonomy
            (e.g., "demographics/patient/death/{verb}/0.1.0/{district}")
    """

    model_config = ConfigDict(extra="ignore")

    name: str | None = None
    topic: str | None = None


# AIDEV-NOTE: The feeds server nests the template under feedinfo; flat registries put it at top level
class FeedRecord(BaseModel):
    """One entry of the template registry.

    Attributes:
        directory: Feed directory name on the feeds server, if any
        feedinfo: Nested feed information holding the template
        topic: Template for registries that expose it at top level
    """

    model_config = ConfigDict(extra="ignore")

    directory: str | None = None
    feedinfo: FeedInfo | None = None
    topic: str | None = None

    @property
    def template(self) -> str | None:
        """Usable topic template of the record, or None if it has none."""
        candidates = (self.feedinfo.topic if self.feedinfo else None, self.topic)
        for candidate in candidates:
            if candidate and candidate.strip():
                return candidate
        return None


class QueueSubscription(BaseModel):
    """A single topic subscription bound to a queue, as reported by SEMP."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    queue_name: str | None = Field(default=None, alias="queueName")
    subscription_topic: str | None = Field(default=None, alias="subscriptionTopic")


class QueueSubscriptionList(BaseModel):
    """Envelope of the SEMP v2 queue subscription collection."""

    model_config = ConfigDict(extra="ignore")

    data: list[QueueSubscription] = Field(default_factory=list)

    @field_validator("data", mode="before")
    @classmethod
    def _missing_data_is_empty(cls, value):
        return [] if value is None else value

    @property
    def topics(self) -> list[str]:
        return [sub.subscription_topic for sub in self.data if sub.subscription_topic]
