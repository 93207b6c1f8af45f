"""Exceptions and Flask error handlers for ShardFlags."""

from shardflags.errors.exceptions import (
    BanditEvaluationError,
    ConfigurationIntegrityError,
    InvalidAttributeTypeError,
    InvalidConfigurationError,
    ShardFlagsError,
    TypeMismatchError,
)

__all__ = [
    "BanditEvaluationError",
    "ConfigurationIntegrityError",
    "InvalidAttributeTypeError",
    "InvalidConfigurationError",
    "ShardFlagsError",
    "TypeMismatchError",
]
