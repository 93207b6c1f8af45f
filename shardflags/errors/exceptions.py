# shardflags/errors/exceptions.py
"""Domain exceptions raised by the ShardFlags evaluation core.

Evaluation distinguishes between:
- integrity errors, which mean the configuration snapshot (or the caller's
  input) is self-inconsistent and must surface to the caller,
- type errors from the value model, which callers either check for or
  recover from locally.
"""


from __future__ import annotations

from typing import Any


class ShardFlagsError(Exception):
    """Base class for every error raised by ShardFlags."""


class ConfigurationIntegrityError(ShardFlagsError):
    """Raised when a configuration snapshot contradicts itself.

    Examples: a split pointing at an unknown variation key, or a bandit
    evaluated without any candidate actions.
    """


class BanditEvaluationError(ConfigurationIntegrityError):
    """Raised when the weighted action selection fails to pick an action."""


class InvalidConfigurationError(ShardFlagsError):
    """Raised when a configuration payload violates its JSON Schema."""

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class TypeMismatchError(ShardFlagsError, TypeError):
    """Raised by ``Value`` accessors when the stored kind disagrees."""

    def __init__(self, expected: str, actual: str) -> None:
        super().__init__(f"Expected a {expected} value but found {actual}")
        self.expected = expected
        self.actual = actual


class InvalidAttributeTypeError(ShardFlagsError, ValueError):
    """Raised when a context attribute is not numeric, boolean or string."""

    def __init__(self, key: str, value: Any) -> None:
        super().__init__(
            f"Value for {key} has invalid type {type(value).__name__}"
        )
        self.key = key
        self.value = value
