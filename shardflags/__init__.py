"""ShardFlags: deterministic feature flag and contextual bandit assignment."""

__version__ = "0.1.0"

from shardflags.errors.exceptions import (  # noqa: E402
    BanditEvaluationError,
    ConfigurationIntegrityError,
    InvalidAttributeTypeError,
    InvalidConfigurationError,
    TypeMismatchError,
)
from shardflags.models.configuration import Configuration  # noqa: E402
from shardflags.repositories.memory_repo import ConfigurationStore  # noqa: E402
from shardflags.services.assignment_service import (  # noqa: E402
    AssignmentClient,
    AssignmentLogger,
    StructlogAssignmentLogger,
)
from shardflags.services.bandit_service import BanditEvaluator  # noqa: E402
from shardflags.services.configuration_loader import (  # noqa: E402
    build_configuration,
    load_configuration_files,
)
from shardflags.services.flag_service import evaluate_flag  # noqa: E402

__all__ = [
    "AssignmentClient",
    "AssignmentLogger",
    "BanditEvaluationError",
    "BanditEvaluator",
    "Configuration",
    "ConfigurationIntegrityError",
    "ConfigurationStore",
    "InvalidAttributeTypeError",
    "InvalidConfigurationError",
    "StructlogAssignmentLogger",
    "TypeMismatchError",
    "__version__",
    "build_configuration",
    "evaluate_flag",
    "load_configuration_files",
]
