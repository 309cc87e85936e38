"""
Per-author line-change tallies.

An AuthorTally is owned by one project worker. The CombinedTally is the one
object shared between workers; every write goes through its lock.
"""
from dataclasses import dataclass
from threading import Lock
from typing import Dict, Iterator, Optional, Tuple

from .models import DiffStatistics


@dataclass
class LineCounts:
    """Running added/removed/total line counts for one author."""

    added: int = 0
    removed: int = 0
    total: int = 0

    def add(self, other: "LineCounts") -> None:
        self.added += other.added
        self.removed += other.removed
        self.total += other.total

    def as_dict(self) -> Dict[str, int]:
        return {"added": self.added, "removed": self.removed, "total": self.total}


class AuthorTally:
    """Mapping of author email (used as-is, case-sensitive) to LineCounts."""

    def __init__(self, counts: Optional[Dict[str, LineCounts]] = None):
        self._counts: Dict[str, LineCounts] = {}
        for author, value in (counts or {}).items():
            self._counts[author] = LineCounts(value.added, value.removed, value.total)

    def _entry(self, author: str) -> LineCounts:
        if author not in self._counts:
            self._counts[author] = LineCounts()
        return self._counts[author]

    def add_commit(self, author: str, stats: DiffStatistics) -> None:
        """Fold one commit's diff statistics into its author's counters."""
        entry = self._entry(author)
        entry.added += stats.additions
        entry.removed += stats.deletions
        entry.total += stats.total

    def merge(self, other: "AuthorTally") -> None:
        """Add every author of ``other`` into this tally, field by field."""
        for author, counts in other.items():
            self._entry(author).add(counts)

    def get(self, author: str) -> Optional[LineCounts]:
        return self._counts.get(author)

    def authors(self):
        return sorted(self._counts)

    def items(self) -> Iterator[Tuple[str, LineCounts]]:
        return iter(list(self._counts.items()))

    def grand_totals(self) -> LineCounts:
        """Sum of every field across all authors."""
        totals = LineCounts()
        for counts in self._counts.values():
            totals.add(counts)
        return totals

    def as_dict(self) -> Dict[str, Dict[str, int]]:
        return {author: counts.as_dict() for author, counts in self._counts.items()}

    def copy(self) -> "AuthorTally":
        return AuthorTally(self._counts)

    def __len__(self) -> int:
        return len(self._counts)

    def __eq__(self, other) -> bool:
        if not isinstance(other, AuthorTally):
            return NotImplemented
        return self.as_dict() == other.as_dict()

    def __repr__(self) -> str:
        return f"AuthorTally({self.as_dict()!r})"


class CombinedTally:
    """Cross-project accumulator guarded by a single lock."""

    def __init__(self):
        self._tally = AuthorTally()
        self._lock = Lock()
        self.merged_projects = 0

    def merge(self, project_tally: AuthorTally) -> None:
        """Merge one project's tally. The lock is held for the merge only."""
        with self._lock:
            self._tally.merge(project_tally)
            self.merged_projects += 1

    def snapshot(self) -> AuthorTally:
        """Copy of the accumulated tally; read it after all workers have joined."""
        with self._lock:
            return self._tally.copy()
