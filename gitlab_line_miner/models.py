"""Records built from GitLab API payloads."""
from dataclasses import dataclass
from typing import Dict

from .errors import ParseError


@dataclass(frozen=True)
class ProjectDescriptor:
    """A project as returned by the project listing (simple representation)."""

    id: int
    name: str
    path_with_namespace: str

    @property
    def match_text(self) -> str:
        # Name and path are joined with no separator
        return self.name + self.path_with_namespace

    @classmethod
    def from_api(cls, data: Dict) -> "ProjectDescriptor":
        if not isinstance(data, dict):
            raise ParseError(f"failed to parse projects: unexpected entry {data!r}")
        try:
            return cls(
                id=int(data["id"]),
                name=data.get("name") or "",
                path_with_namespace=data.get("path_with_namespace") or "",
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ParseError(f"failed to parse projects: {e}") from e


@dataclass(frozen=True)
class CommitDescriptor:
    """A commit as returned by the commit listing."""

    id: str
    author_email: str

    @classmethod
    def from_api(cls, data: Dict) -> "CommitDescriptor":
        if not isinstance(data, dict) or "id" not in data:
            raise ParseError(f"failed to parse commits: unexpected entry {data!r}")
        return cls(id=str(data["id"]), author_email=data.get("author_email") or "")


@dataclass(frozen=True)
class DiffStatistics:
    """
    Line-change statistics of one commit.

    ``total`` is passed through as GitLab reports it; it is not required to
    equal ``additions + deletions``.
    """

    additions: int = 0
    deletions: int = 0
    total: int = 0

    @classmethod
    def from_commit_payload(cls, payload: Dict) -> "DiffStatistics":
        """Read the ``stats`` object of a single-commit response. Missing keys read as 0."""
        if not isinstance(payload, dict):
            raise ParseError(f"unexpected commit payload of type {type(payload).__name__}")
        stats = payload.get("stats") or {}
        if not isinstance(stats, dict):
            raise ParseError(f"unexpected stats value {stats!r}")
        return cls(
            additions=_stat_count(stats, "additions"),
            deletions=_stat_count(stats, "deletions"),
            total=_stat_count(stats, "total"),
        )


def _stat_count(stats: Dict, key: str) -> int:
    """Missing or null counts read as 0; anything but a JSON integer is rejected."""
    value = stats.get(key)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ParseError(f"invalid stats value for {key!r}: {value!r}")
    return value
