"""Sum GitLab line changes per author across projects."""
from .aggregator import AuthorTally, CombinedTally, LineCounts
from .client import GitLabClient
from .config import MinerConfig, load_config
from .coordinator import process_projects_parallel, run
from .enumerator import get_all_projects
from .errors import (
    ConfigError,
    HTTPRequestError,
    MinerError,
    PageFetchError,
    ParseError,
    RequestConstructionError,
    TransportError,
    UnexpectedStatusError,
)
from .fetcher import get_changed_lines
from .models import CommitDescriptor, DiffStatistics, ProjectDescriptor

__version__ = "1.0.0"
