"""
Bounded fan-out of per-project fetches and fan-in into one combined tally.

One unit of work per project runs on a fixed-size thread pool. A bounded
semaphore of the same size gates the units, each unit merges its local tally
under the combined tally's lock, and the caller only gets the result back once
every launched unit has finished.
"""
from concurrent.futures import ThreadPoolExecutor, as_completed
from threading import BoundedSemaphore, Lock
from typing import List, Optional

import requests
from tqdm import tqdm

from .aggregator import CombinedTally
from .client import GitLabClient
from .config import DEFAULT_CONCURRENCY, MinerConfig
from .console import log_message, safe_print
from .enumerator import get_all_projects
from .errors import MinerError
from .fetcher import get_changed_lines
from .models import ProjectDescriptor


def process_single_project(
    client: GitLabClient,
    project: ProjectDescriptor,
    since: str,
    combined: CombinedTally,
    logger=None,
) -> bool:
    """
    Fetch one project's tally and merge it into ``combined``.

    Returns:
        True if the project was merged, False if it was skipped
    """
    safe_print(f"Processing project: {project.name} (ID: {project.id})")
    try:
        changes = get_changed_lines(client, project.id, since, logger=logger)
    except MinerError as e:
        log_message(logger, 'error', f"Skipping project {project.name} due to errors: {e}")
        return False

    combined.merge(changes)
    return True


def process_projects_parallel(
    client: GitLabClient,
    projects: List[ProjectDescriptor],
    since: str = "",
    concurrency: int = DEFAULT_CONCURRENCY,
    combined: Optional[CombinedTally] = None,
    show_progress: bool = True,
    logger=None,
) -> CombinedTally:
    """
    Process all projects using parallel workers.

    Args:
        client: GitLabClient shared by all workers
        projects: Projects to process
        since: ISO 8601 lower bound for commits; empty for none
        concurrency: Maximum number of projects in flight at once
        combined: Accumulator to merge into; a new one is created when omitted
        show_progress: Show a tqdm progress bar
        logger: Logger instance for logging

    Returns:
        The combined tally, after every unit has finished
    """
    if concurrency < 1:
        raise ValueError(f"concurrency must be at least 1, got {concurrency}")
    if combined is None:
        combined = CombinedTally()
    if not projects:
        return combined

    slots = BoundedSemaphore(concurrency)
    pbar_lock = Lock()
    skipped = 0

    def unit(project: ProjectDescriptor) -> bool:
        with slots:
            return process_single_project(client, project, since, combined, logger)

    with tqdm(total=len(projects), desc="Mining projects", unit="project",
              disable=not show_progress) as pbar:

        def advance(_future=None):
            with pbar_lock:
                pbar.update(1)

        with ThreadPoolExecutor(max_workers=concurrency) as executor:
            # Submit all tasks
            future_to_project = {}
            for project in projects:
                try:
                    future = executor.submit(unit, project)
                except RuntimeError as e:
                    skipped += 1
                    log_message(logger, 'error',
                                f"Failed to acquire worker slot for project {project.name}: {e}")
                    advance()
                    continue
                # Runs in the worker before it picks up the next project
                future.add_done_callback(advance)
                future_to_project[future] = project

            safe_print("Waiting to finish all calculations")

            for future in as_completed(future_to_project):
                project = future_to_project[future]
                try:
                    if not future.result():
                        skipped += 1
                except Exception as e:
                    skipped += 1
                    log_message(logger, 'error',
                                f"Unexpected error while processing project {project.name}: "
                                f"{type(e).__name__}: {e}")

    log_message(logger, 'info',
                f"Merged {len(projects) - skipped}/{len(projects)} project(s), skipped {skipped}")
    return combined


def run(config: MinerConfig, session: Optional[requests.Session] = None, logger=None) -> CombinedTally:
    """
    Enumerate projects and aggregate their line changes.

    A failed enumeration is logged and yields an empty tally.
    """
    client = GitLabClient(
        config.gitlab_url,
        config.token,
        timeout=config.timeout,
        session=session,
        pool_size=config.concurrency,
        logger=logger,
    )
    try:
        try:
            projects = get_all_projects(client, config.pattern, logger=logger)
        except MinerError as e:
            log_message(logger, 'error', f"Error fetching projects: {e}")
            projects = []

        return process_projects_parallel(
            client,
            projects,
            since=config.since_date(),
            concurrency=config.concurrency,
            show_progress=config.show_progress,
            logger=logger,
        )
    finally:
        if session is None:
            client.close()
