"""Plain-text rendering of the combined results."""
from typing import List

from .aggregator import AuthorTally


def format_results(tally: AuthorTally) -> List[str]:
    """
    Render one block per author, sorted by email, followed by grand totals.
    """
    lines = ["--- Combined Results ---"]

    for author in tally.authors():
        counts = tally.get(author)
        lines.extend([
            f"Author: {author}",
            f"Added Lines: {counts.added}",
            f"Removed Lines: {counts.removed}",
            f"Total Lines: {counts.total}",
            "---",
        ])

    totals = tally.grand_totals()
    lines.extend([
        f"Total added: {totals.added}",
        f"Total removed: {totals.removed}",
        f"Total: {totals.total}",
    ])
    return lines


def print_results(tally: AuthorTally) -> None:
    print("\n".join(format_results(tally)))
