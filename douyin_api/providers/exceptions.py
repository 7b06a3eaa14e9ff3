"""Provider-specific exceptions."""


class ProviderError(Exception):
    """Base exception for provider errors."""

    pass


class UpstreamError(ProviderError):
    """Raised when an upstream HTTP call fails, times out or returns a non-2xx status."""

    def __init__(self, message: str, status: int = 0):
        self.status = status
        super().__init__(message)


class InvalidURLError(ProviderError):
    """Raised when the share URL is missing or malformed."""

    pass


class VideoIdNotFoundError(ProviderError):
    """Raised when no content ID can be extracted from a share URL."""

    pass


class PageFetchError(ProviderError):
    """Raised when the share page returned an empty body."""

    pass


class PageParseError(ProviderError):
    """Raised when the share page carries no parsable embedded state."""

    pass
