"""Project enumeration with a name+path regex filter."""
import re
from typing import Callable, List

from .client import GitLabClient
from .console import log_message
from .models import ProjectDescriptor


def compile_filter(pattern: str, logger=None) -> Callable[[ProjectDescriptor], bool]:
    """
    Build the project predicate for ``pattern``.

    An empty pattern matches everything. An invalid pattern matches nothing;
    the run still completes, but a warning is logged because every project
    will be excluded.
    """
    try:
        regex = re.compile(pattern or "")
    except re.error as e:
        log_message(logger, 'warning',
                    f"Invalid project filter pattern {pattern!r}: {e}. No project will match")
        return lambda project: False
    return lambda project: regex.search(project.match_text) is not None


def get_all_projects(client: GitLabClient, pattern: str = "", logger=None) -> List[ProjectDescriptor]:
    """
    List every project visible to the token whose name+path matches ``pattern``.

    Projects are returned in listing order. Any page failure aborts the whole
    enumeration with PageFetchError or ParseError.
    """
    accept = compile_filter(pattern, logger)
    url = client.url("projects")
    all_projects = []
    seen = 0

    for entries in client.iter_pages(url, params={"simple": "true"}):
        for entry in entries:
            project = ProjectDescriptor.from_api(entry)
            seen += 1
            if accept(project):
                all_projects.append(project)

    log_message(logger, 'info', f"Found {len(all_projects)} matching project(s) out of {seen}")
    return all_projects
