"""Error hierarchy for topic taxonomy resolution.

- TaxonomyError: base class for all errors raised by this package
- SourceFetchError: an external registry or subscription source failed
  - RegistryFetchError: degrades a single resolution to an empty result
  - SubscriptionFetchError: fails the whole queue lookup
"""


class TaxonomyError(Exception):
    """Base class for all topic taxonomy errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(message)


class SourceFetchError(TaxonomyError):
    """Fetching data from an external collaborator failed."""


class RegistryFetchError(SourceFetchError):
    """The topic template registry could not be fetched."""


class SubscriptionFetchError(SourceFetchError):
    """The subscription list of a queue could not be fetched."""

    def __init__(self, message: str, queue_name: str | None = None) -> None:
        super().__init__(message, code="SUBSCRIPTION_FETCH_ERROR")
        self.queue_name = queue_name
