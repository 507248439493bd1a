"""Exception types shared across feedgrab."""


class FeedgrabError(Exception):
    """Base class for feedgrab errors."""


class ConfigError(FeedgrabError):
    """Invalid or missing configuration."""


class CheckpointNotFound(FeedgrabError, LookupError):
    """No checkpoint has been written for a search term."""

    def __init__(self, term: str):
        super().__init__(f"no checkpoint for term {term!r}")
        self.term = term


class ElementNotFound(FeedgrabError):
    """A required UI element could not be located on the page."""

    def __init__(self, selector: str):
        super().__init__(f"element not found: {selector}")
        self.selector = selector


class DownloadError(FeedgrabError):
    """A single download attempt failed."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"{reason} ({url})")
        self.url = url
        self.reason = reason


class CheckpointCorrupt(FeedgrabError):
    """A checkpoint exists but is not a JSON array of URL strings."""

    def __init__(self, term: str, reason: str):
        super().__init__(f"bad checkpoint for term {term!r}: {reason}")
        self.term = term
        self.reason = reason
