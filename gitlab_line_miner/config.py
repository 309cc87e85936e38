"""
Run configuration.

Values come from environment variables, and command-line flags override them.
Bad optional values fall back to their defaults with a warning; only a
missing token is fatal.
"""
import argparse
import os
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Mapping, Optional, Sequence

from .console import log_message
from .errors import ConfigError


# ============================================================================
# DEFAULTS
# ============================================================================

DEFAULT_GITLAB_URL = "https://gitlab.com"
DEFAULT_SINCE_DAYS = 360
DEFAULT_CONCURRENCY = 20
DEFAULT_TIMEOUT = 30.0

ENV_TOKEN = "GITLAB_PRIVATE_TOKEN"
ENV_SINCE_DAYS = "SINCE_DAYS"
ENV_PATTERN = "PATTERN_TO_FIND"
ENV_CONCURRENCY = "CONCURRENCY_NUMBER"
ENV_GITLAB_URL = "GITLAB_URL"
ENV_TIMEOUT = "REQUEST_TIMEOUT"


@dataclass
class MinerConfig:
    token: str
    since_days: int = DEFAULT_SINCE_DAYS
    pattern: str = ""
    concurrency: int = DEFAULT_CONCURRENCY
    gitlab_url: str = DEFAULT_GITLAB_URL
    timeout: Optional[float] = DEFAULT_TIMEOUT
    log_file: Optional[str] = None
    show_progress: bool = True

    def since_date(self, today: Optional[date] = None) -> str:
        """Lower bound for commits, ``since_days`` before ``today``, as YYYY-MM-DD."""
        today = today or date.today()
        return (today - timedelta(days=self.since_days)).isoformat()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gitlab-line-miner",
        description="Sum added/removed lines per author across GitLab projects",
    )
    parser.add_argument(
        "--token",
        help=f"GitLab private token (or set {ENV_TOKEN} env var)",
    )
    parser.add_argument(
        "--since-days",
        help=f"Look back this many days (or set {ENV_SINCE_DAYS}; default: {DEFAULT_SINCE_DAYS})",
    )
    parser.add_argument(
        "--pattern",
        help=f"Regex matched against project name+path (or set {ENV_PATTERN}; default: match all)",
    )
    parser.add_argument(
        "--workers",
        help=f"Number of projects processed in parallel (or set {ENV_CONCURRENCY}; default: {DEFAULT_CONCURRENCY})",
    )
    parser.add_argument(
        "--gitlab-url",
        help=f"Base URL of the GitLab instance (or set {ENV_GITLAB_URL}; default: {DEFAULT_GITLAB_URL})",
    )
    parser.add_argument(
        "--timeout",
        help=f"Per-request timeout in seconds, 0 to disable (or set {ENV_TIMEOUT}; default: {DEFAULT_TIMEOUT:g})",
    )
    parser.add_argument(
        "--log-file",
        help="Also write log lines to this file",
    )
    parser.add_argument(
        "--no-progress",
        action="store_true",
        help="Disable the progress bar",
    )
    return parser


def parse_positive_int(raw: Optional[str], default: int, name: str, logger=None) -> int:
    """Parse ``raw`` as a positive int, falling back to ``default`` with a warning."""
    try:
        value = int(str(raw).strip())
    except (TypeError, ValueError):
        log_message(logger, 'warning', f"Error parsing {name}: {raw!r}. Pick default {default}")
        return default
    if value <= 0:
        log_message(logger, 'warning', f"Error parsing {name}: {value} is not positive. Pick default {default}")
        return default
    return value


def parse_timeout(raw: Optional[str], logger=None) -> Optional[float]:
    """Parse a timeout in seconds. ``0`` disables it; unset or invalid uses the default."""
    if raw is None or str(raw).strip() == "":
        return DEFAULT_TIMEOUT
    try:
        value = float(str(raw).strip())
    except ValueError:
        log_message(logger, 'warning', f"Error parsing {ENV_TIMEOUT}: {raw!r}. Pick default {DEFAULT_TIMEOUT:g}s")
        return DEFAULT_TIMEOUT
    if value < 0:
        log_message(logger, 'warning', f"Error parsing {ENV_TIMEOUT}: {value:g} is negative. Pick default {DEFAULT_TIMEOUT:g}s")
        return DEFAULT_TIMEOUT
    return value or None


def _pick(cli_value, environ: Mapping[str, str], key: str):
    if cli_value is not None:
        return cli_value
    return environ.get(key)


def load_config(
    argv: Optional[Sequence[str]] = None,
    environ: Optional[Mapping[str, str]] = None,
    logger=None,
) -> MinerConfig:
    """
    Build a MinerConfig from ``argv`` and ``environ``.

    Raises:
        ConfigError: no token was given
    """
    environ = os.environ if environ is None else environ
    args = build_parser().parse_args(argv)

    token = (_pick(args.token, environ, ENV_TOKEN) or "").strip()
    if not token:
        raise ConfigError(f"Error: {ENV_TOKEN} environment variable must be set.")

    since_days = parse_positive_int(
        _pick(args.since_days, environ, ENV_SINCE_DAYS), DEFAULT_SINCE_DAYS, ENV_SINCE_DAYS, logger
    )
    concurrency = parse_positive_int(
        _pick(args.workers, environ, ENV_CONCURRENCY), DEFAULT_CONCURRENCY, ENV_CONCURRENCY, logger
    )

    gitlab_url = (_pick(args.gitlab_url, environ, ENV_GITLAB_URL) or "").strip()
    if not gitlab_url:
        log_message(logger, 'info', f"Gitlab URL is not set. Using default: {DEFAULT_GITLAB_URL}")
        gitlab_url = DEFAULT_GITLAB_URL

    return MinerConfig(
        token=token,
        since_days=since_days,
        pattern=_pick(args.pattern, environ, ENV_PATTERN) or "",
        concurrency=concurrency,
        gitlab_url=gitlab_url.rstrip("/"),
        timeout=parse_timeout(_pick(args.timeout, environ, ENV_TIMEOUT), logger),
        log_file=args.log_file,
        show_progress=not args.no_progress,
    )
