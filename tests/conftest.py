from __future__ import annotations

import json
import threading
import time
from typing import Any, Callable, Dict, List, Optional

import pytest

from gitlab_line_miner.client import GitLabClient


BASE_URL = "https://gitlab.example.com"
API = f"{BASE_URL}/api/v4"


class FakeResponse:
    def __init__(self, status_code: int = 200, content: bytes = b""):
        self.status_code = status_code
        self._content = content
        self.closed = False

    @property
    def content(self) -> bytes:
        return self._content

    def close(self) -> None:
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc) -> None:
        self.close()


def json_response(payload: Any, status: int = 200) -> FakeResponse:
    return FakeResponse(status, json.dumps(payload).encode("utf-8"))


class FakeSession:
    """In-memory stand-in for requests.Session.request, routed by URL."""

    def __init__(self, delay: float = 0.0):
        self.routes: Dict[str, Callable[[Dict[str, Any]], FakeResponse]] = {}
        self.calls: List[Dict[str, Any]] = []
        self.responses: List[FakeResponse] = []
        self.delay = delay
        self._lock = threading.Lock()
        self._in_flight = 0
        self.max_in_flight = 0
        self.closed = False

    def route(self, url: str, handler: Callable[[Dict[str, Any]], FakeResponse]) -> None:
        self.routes[url] = handler

    def json(self, url: str, payload: Any, status: int = 200) -> None:
        self.route(url, lambda params: json_response(payload, status))

    def raw(self, url: str, content: bytes, status: int = 200) -> None:
        self.route(url, lambda params: FakeResponse(status, content))

    def fail(self, url: str, exc: Exception) -> None:
        def handler(params):
            raise exc
        self.route(url, handler)

    def json_pages(self, url: str, items: List[Any]) -> None:
        def handler(params):
            per_page = int(params["per_page"])
            page = int(params["page"])
            start = (page - 1) * per_page
            return json_response(items[start:start + per_page])
        self.route(url, handler)

    def pages_for(self, url: str) -> List[int]:
        return [int(c["params"]["page"]) for c in self.calls if c["url"] == url]

    def request(self, method, url, params=None, headers=None, timeout=None,
                allow_redirects=True, stream=False):
        with self._lock:
            self.calls.append({
                "method": method,
                "url": url,
                "params": dict(params or {}),
                "headers": dict(headers or {}),
                "timeout": timeout,
                "allow_redirects": allow_redirects,
                "stream": stream,
            })
            self._in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self._in_flight)
        try:
            if self.delay:
                time.sleep(self.delay)
            handler = self.routes.get(url)
            if handler is None:
                response = FakeResponse(404, b'{"message": "404 Not Found"}')
            else:
                response = handler(dict(params or {}))
            with self._lock:
                self.responses.append(response)
            return response
        finally:
            with self._lock:
                self._in_flight -= 1

    def close(self) -> None:
        self.closed = True


def add_project(session: FakeSession, project_id: int, commits: List[Dict[str, Any]]) -> None:
    """Register a project's commit listing and per-commit stats.

    Each commit is ``{"id", "author_email", "additions", "deletions", "total"}``.
    """
    listing_url = f"{API}/projects/{project_id}/repository/commits"
    session.json_pages(listing_url, [{"id": c["id"], "author_email": c["author_email"]} for c in commits])
    for c in commits:
        session.json(
            f"{listing_url}/{c['id']}",
            {"id": c["id"], "stats": {"additions": c["additions"], "deletions": c["deletions"], "total": c["total"]}},
        )


def commit(sha: str, email: str, additions: int, deletions: int, total: int) -> Dict[str, Any]:
    return {"id": sha, "author_email": email, "additions": additions, "deletions": deletions, "total": total}


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def client(session: FakeSession) -> GitLabClient:
    return GitLabClient(BASE_URL, "secret-token", timeout=5, session=session)
