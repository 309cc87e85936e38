"""
Thin GitLab REST client.

One request per call, no retries, and the response body is always released
before returning. Pagination follows GitLab's ``page``/``per_page`` scheme and
ends at the first empty page.
"""
import json
from typing import Dict, Iterator, List, Optional

import requests
from requests.adapters import HTTPAdapter

from .console import log_message
from .errors import (
    HTTPRequestError,
    PageFetchError,
    ParseError,
    RequestConstructionError,
    TransportError,
    UnexpectedStatusError,
)


# ============================================================================
# API CONFIGURATION
# ============================================================================

API_PREFIX = "api/v4"
PER_PAGE = 100          # Max page size accepted by GitLab
DEFAULT_TIMEOUT = 30    # Seconds; None disables the timeout
DEFAULT_POOL_SIZE = 20

HTTP_METHODS = {"GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"}

# requests exceptions raised before anything goes on the wire
CONSTRUCTION_ERRORS = (
    requests.exceptions.MissingSchema,
    requests.exceptions.InvalidSchema,
    requests.exceptions.InvalidURL,
    requests.exceptions.InvalidHeader,
    requests.exceptions.URLRequired,
)


def create_session(pool_size: int = DEFAULT_POOL_SIZE) -> requests.Session:
    """Creates a requests session with connection pooling and no retries."""
    session = requests.Session()

    adapter = HTTPAdapter(
        max_retries=0,
        pool_connections=pool_size,
        pool_maxsize=pool_size,
    )

    session.mount("http://", adapter)
    session.mount("https://", adapter)

    session.headers.update({
        'Accept': 'application/json',
        'User-Agent': 'GitLab-Line-Miner/1.0',
    })

    return session


class GitLabClient:
    """Issues authenticated requests against one GitLab instance."""

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: Optional[float] = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
        pool_size: int = DEFAULT_POOL_SIZE,
        logger=None,
    ):
        """
        Initialize the client.

        Args:
            base_url: Root URL of the GitLab instance, e.g. https://gitlab.com
            token: Private token sent as a bearer token
            timeout: Per-request timeout in seconds, or None to block indefinitely
            session: Session to reuse; a pooled one is created when omitted
            pool_size: Connection pool size for a created session
            logger: Logger instance for logging
        """
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.session = session if session is not None else create_session(pool_size)
        self.logger = logger

    @property
    def headers(self) -> Dict[str, str]:
        """Get headers with the authentication token."""
        return {'Authorization': f'Bearer {self.token}'}

    def url(self, *parts) -> str:
        """Build an API URL, e.g. ``url("projects", 7)`` -> ``<base>/api/v4/projects/7``."""
        return "/".join([self.base_url, API_PREFIX] + [str(p).strip("/") for p in parts])

    def close(self):
        self.session.close()

    def make_request(self, method: str, url: str, params: Optional[Dict] = None,
                     headers: Optional[Dict[str, str]] = None) -> bytes:
        """
        Perform exactly one request and return the raw body.

        Raises:
            RequestConstructionError: method or URL is malformed
            TransportError: the network call could not complete
            UnexpectedStatusError: the status code is not 200
        """
        if not isinstance(method, str) or method.upper() not in HTTP_METHODS:
            raise RequestConstructionError(f"failed to create request: invalid method {method!r}")

        request_headers = dict(self.headers)
        if headers:
            request_headers.update(headers)

        try:
            with self.session.request(
                method.upper(),
                url,
                params=params,
                headers=request_headers,
                timeout=self.timeout,
                allow_redirects=False,
                stream=True,
            ) as response:
                if response.status_code != 200:
                    raise UnexpectedStatusError(response.status_code, url)
                return response.content
        except CONSTRUCTION_ERRORS as e:
            raise RequestConstructionError(f"failed to create request: {e}") from e
        except requests.exceptions.RequestException as e:
            raise TransportError(f"request failed: {e}") from e

    def get_json(self, url: str, params: Optional[Dict] = None):
        """GET ``url`` and decode the JSON body."""
        body = self.make_request("GET", url, params=params)
        try:
            return json.loads(body)
        except ValueError as e:
            raise ParseError(f"failed to parse response from {url}: {e}") from e

    def iter_pages(self, url: str, params: Optional[Dict] = None,
                   per_page: int = PER_PAGE) -> Iterator[List]:
        """
        Yield the decoded entries of each page until the first empty page.

        Raises:
            PageFetchError: a page request failed
            ParseError: a page body was not a JSON list
        """
        page = 1
        while True:
            page_params = {"per_page": per_page, "page": page}
            if params:
                page_params.update(params)

            try:
                body = self.make_request("GET", url, params=page_params)
            except HTTPRequestError as e:
                raise PageFetchError(url, page, e) from e

            try:
                entries = json.loads(body)
            except ValueError as e:
                raise ParseError(f"failed to parse page {page} of {url}: {e}") from e
            if not isinstance(entries, list):
                raise ParseError(f"expected a list on page {page} of {url}, got {type(entries).__name__}")

            if not entries:
                log_message(self.logger, 'debug', f"{url}: end of pagination at page {page}")
                return

            yield entries
            page += 1
