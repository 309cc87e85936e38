"""
Error taxonomy for the GitLab line-change miner.

Single-request failures derive from HTTPRequestError. Pagination wraps them
in PageFetchError so callers can tell a broken listing page from a broken
per-commit request.
"""
from typing import Optional


class MinerError(Exception):
    """Base class for every error raised by the miner."""


class ConfigError(MinerError):
    """Required configuration is missing."""


class HTTPRequestError(MinerError):
    """A single HTTP request could not be completed."""


class RequestConstructionError(HTTPRequestError):
    """The request could not be built (bad method or malformed URL)."""


class TransportError(HTTPRequestError):
    """The network call itself failed (DNS, refused connection, timeout)."""


class UnexpectedStatusError(HTTPRequestError):
    """The server answered with anything other than HTTP 200."""

    def __init__(self, status_code: int, url: str):
        self.status_code = status_code
        self.url = url
        super().__init__(f"request failed with status: {status_code} ({url})")


class ParseError(MinerError):
    """A response body was not the JSON we expected."""


class PageFetchError(MinerError):
    """A listing page could not be fetched."""

    def __init__(self, url: str, page: int, reason: Optional[Exception] = None):
        self.url = url
        self.page = page
        message = f"failed to fetch page {page} of {url}"
        if reason is not None:
            message += f": {reason}"
        super().__init__(message)
