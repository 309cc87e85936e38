"""Command-line entry point."""
import sys
from typing import Optional, Sequence

from .config import load_config
from .console import setup_logging
from .coordinator import run
from .errors import ConfigError
from .report import print_results


def main(argv: Optional[Sequence[str]] = None, environ=None) -> int:
    """
    Run the miner and print the combined per-author results.

    Exits 1 only when no token is configured; every other failure is logged
    and still produces a (possibly empty) report.
    """
    logger = setup_logging()

    try:
        config = load_config(argv, environ, logger=logger)
    except ConfigError as e:
        print(str(e))
        return 1

    if config.log_file:
        logger = setup_logging(config.log_file)

    logger.info(
        f"Mining {config.gitlab_url} since {config.since_date()} "
        f"with {config.concurrency} parallel worker(s)"
    )

    combined = run(config, logger=logger)
    print_results(combined.snapshot())
    return 0


if __name__ == "__main__":
    sys.exit(main())
