"""cronpilot: cron scheduling for annotated Python handler methods."""

__version__ = "0.1.0"

from cronpilot.config import Settings, YamlConfigStore, load_settings  # noqa: E402
from cronpilot.errors import (  # noqa: E402
    ConfigError,
    CronError,
    InvalidCronExpressionError,
    JobRegistrationError,
    ManifestError,
    SchedulerNotInitializedError,
    SourceParseError,
)
from cronpilot.scheduler import (  # noqa: E402
    AnnotationEntry,
    CronScheduler,
    Job,
    is_valid_cron_expr,
    parse_cron_from_file,
)

__all__ = [
    "AnnotationEntry",
    "ConfigError",
    "CronError",
    "CronScheduler",
    "InvalidCronExpressionError",
    "Job",
    "JobRegistrationError",
    "ManifestError",
    "SchedulerNotInitializedError",
    "Settings",
    "SourceParseError",
    "YamlConfigStore",
    "__version__",
    "is_valid_cron_expr",
    "load_settings",
    "parse_cron_from_file",
]
