"""Commit listing and per-commit diff statistics for one project."""
from .aggregator import AuthorTally
from .client import GitLabClient
from .console import log_message
from .errors import HTTPRequestError, ParseError
from .models import CommitDescriptor, DiffStatistics


def fetch_diff_stats(client: GitLabClient, project_id: int, commit_id: str) -> DiffStatistics:
    """Get the diff statistics of a single commit."""
    url = client.url("projects", project_id, "repository", "commits", commit_id)
    payload = client.get_json(url)
    return DiffStatistics.from_commit_payload(payload)


def get_changed_lines(client: GitLabClient, project_id: int, since: str = "", logger=None) -> AuthorTally:
    """
    Sum line changes per author over the project's commits since ``since``.

    Listing failures propagate (PageFetchError, ParseError) and abort the
    project. A commit whose diff cannot be fetched or parsed is logged and
    skipped.

    Args:
        client: GitLabClient instance
        project_id: Numeric project id
        since: ISO 8601 date; empty means no lower bound
        logger: Logger instance for logging

    Returns:
        AuthorTally local to this project
    """
    url = client.url("projects", project_id, "repository", "commits")
    params = {"since": since} if since else None
    changes = AuthorTally()

    for entries in client.iter_pages(url, params=params):
        for entry in entries:
            commit = CommitDescriptor.from_api(entry)

            try:
                stats = fetch_diff_stats(client, project_id, commit.id)
            except HTTPRequestError as e:
                log_message(logger, 'error', f"Error getting diff for commit {commit.id}: {e}")
                continue
            except ParseError as e:
                log_message(logger, 'error', f"Error parsing diff stats for commit {commit.id}: {e}")
                continue

            changes.add_commit(commit.author_email, stats)

    return changes
