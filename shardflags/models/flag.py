# shardflags/models/flag.py
"""Flag definition model.

These dataclasses are built once when a configuration snapshot is loaded
and are never mutated afterwards. Collections are stored as tuples and
mappings are wrapped in read-only proxies.
"""


from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from shardflags.models.value import Value


DEFAULT_TOTAL_SHARDS = 10_000


def _frozen_mapping(data: Optional[Mapping]) -> Mapping:
    return MappingProxyType(dict(data or {}))


class OperatorType(str, Enum):
    MATCHES = "MATCHES"
    NOT_MATCHES = "NOT_MATCHES"
    GTE = "GTE"
    GT = "GT"
    LTE = "LTE"
    LT = "LT"
    ONE_OF = "ONE_OF"
    NOT_ONE_OF = "NOT_ONE_OF"
    IS_NULL = "IS_NULL"


class VariationType(str, Enum):
    STRING = "STRING"
    INTEGER = "INTEGER"
    NUMERIC = "NUMERIC"
    BOOLEAN = "BOOLEAN"
    JSON = "JSON"


@dataclass(frozen=True)
class ShardRange:
    """Half-open bucket interval ``[start, end)``."""

    start: int
    end: int


@dataclass(frozen=True)
class Shard:
    salt: str
    ranges: Tuple[ShardRange, ...]


@dataclass(frozen=True)
class Split:
    variation_key: str
    shards: Tuple[Shard, ...]
    extra_logging: Mapping[str, str] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "extra_logging", _frozen_mapping(self.extra_logging)
        )


@dataclass(frozen=True)
class Condition:
    attribute: str
    operator: OperatorType
    value: Value


@dataclass(frozen=True)
class Rule:
    """Conjunction of conditions. An empty rule matches every subject."""

    conditions: Tuple[Condition, ...] = ()


@dataclass(frozen=True)
class Allocation:
    key: str
    splits: Tuple[Split, ...]
    rules: Tuple[Rule, ...] = ()
    do_log: bool = True
    start_at: Optional[datetime] = None
    end_at: Optional[datetime] = None

    def is_active(self, now: datetime) -> bool:
        """An allocation is active unless ``now`` lies outside its window."""
        if self.start_at is not None and now < self.start_at:
            return False
        if self.end_at is not None and now > self.end_at:
            return False
        return True


@dataclass(frozen=True)
class Variation:
    key: str
    value: Value


@dataclass(frozen=True)
class Flag:
    """A feature flag: ordered allocations over a set of variations.

    Attributes:
        key: Flag identifier.
        enabled: Kill switch; a disabled flag never assigns.
        allocations: Evaluated in order, first match wins.
        variations: Variation key -> ``Variation``.
        total_shards: Size of the bucket space used by split shards.
        variation_type: Declared type of the variation values, if known.
    """

    key: str
    enabled: bool
    allocations: Tuple[Allocation, ...]
    variations: Mapping[str, Variation]
    total_shards: int = DEFAULT_TOTAL_SHARDS
    variation_type: Optional[VariationType] = None

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "variations", _frozen_mapping(self.variations)
        )
