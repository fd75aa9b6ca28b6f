"""Error types raised by echopan."""

from typing import Dict, Optional


class EchopanError(Exception):
    """Base class for all echopan errors."""


class ConfigurationError(EchopanError):
    """Missing or invalid configuration. Fatal for a publish cycle."""


class FeedFetchError(EchopanError):
    """Feed could not be fetched or parsed."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"error parsing feed URL {url}: {reason}")
        self.url = url
        self.reason = reason


class FeedNotFoundError(EchopanError):
    """No feed matches the requested key."""


class EnclosureLengthError(EchopanError):
    """Enclosure length is not a base-10 unsigned integer."""

    def __init__(self, url: str, length: Optional[str]) -> None:
        super().__init__(f"failed to parse enclosure length {length!r} for URL '{url}'")
        self.url = url
        self.length = length


class DownloadError(EchopanError):
    """Enclosure download failed."""


class DeliveryError(EchopanError):
    """Notifier failed to deliver a message."""


class SyncError(EchopanError):
    """One or more feeds failed during a batch operation."""

    def __init__(self, operation: str, failures: Dict[str, str]) -> None:
        super().__init__(
            f"one or more errors occurred during {operation}: "
            + ", ".join(sorted(failures))
        )
        self.operation = operation
        self.failures = failures
