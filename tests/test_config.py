from __future__ import annotations

from datetime import date

import pytest

from gitlab_line_miner.config import (
    DEFAULT_CONCURRENCY,
    DEFAULT_GITLAB_URL,
    DEFAULT_SINCE_DAYS,
    DEFAULT_TIMEOUT,
    MinerConfig,
    load_config,
)
from gitlab_line_miner.errors import ConfigError


def test_missing_token_is_fatal() -> None:
    with pytest.raises(ConfigError) as excinfo:
        load_config([], {})
    assert "GITLAB_PRIVATE_TOKEN" in str(excinfo.value)


def test_defaults() -> None:
    config = load_config([], {"GITLAB_PRIVATE_TOKEN": "abc"})

    assert config.token == "abc"
    assert config.since_days == DEFAULT_SINCE_DAYS
    assert config.concurrency == DEFAULT_CONCURRENCY
    assert config.gitlab_url == DEFAULT_GITLAB_URL
    assert config.pattern == ""
    assert config.timeout == DEFAULT_TIMEOUT
    assert config.show_progress is True


def test_environment_values() -> None:
    config = load_config([], {
        "GITLAB_PRIVATE_TOKEN": "abc",
        "SINCE_DAYS": "30",
        "PATTERN_TO_FIND": "backend",
        "CONCURRENCY_NUMBER": "5",
        "GITLAB_URL": "https://git.internal/",
        "REQUEST_TIMEOUT": "12.5",
    })

    assert config.since_days == 30
    assert config.pattern == "backend"
    assert config.concurrency == 5
    assert config.gitlab_url == "https://git.internal"
    assert config.timeout == 12.5


def test_flags_override_environment() -> None:
    config = load_config(
        ["--token", "cli", "--since-days", "7", "--workers", "3", "--pattern", "web", "--no-progress"],
        {"GITLAB_PRIVATE_TOKEN": "env", "SINCE_DAYS": "30", "CONCURRENCY_NUMBER": "9"},
    )

    assert config.token == "cli"
    assert config.since_days == 7
    assert config.concurrency == 3
    assert config.pattern == "web"
    assert config.show_progress is False


@pytest.mark.parametrize("raw", ["", "abc", "0", "-3", "1.5"])
def test_bad_since_days_falls_back(raw: str) -> None:
    config = load_config([], {"GITLAB_PRIVATE_TOKEN": "t", "SINCE_DAYS": raw})
    assert config.since_days == DEFAULT_SINCE_DAYS


@pytest.mark.parametrize("raw", ["", "many", "0", "-1"])
def test_bad_concurrency_falls_back(raw: str) -> None:
    config = load_config([], {"GITLAB_PRIVATE_TOKEN": "t", "CONCURRENCY_NUMBER": raw})
    assert config.concurrency == DEFAULT_CONCURRENCY


def test_zero_timeout_disables_it() -> None:
    config = load_config(["--timeout", "0"], {"GITLAB_PRIVATE_TOKEN": "t"})
    assert config.timeout is None


def test_since_date_format() -> None:
    config = MinerConfig(token="t", since_days=360)
    assert config.since_date(today=date(2025, 3, 1)) == "2024-03-06"
