"""Immutable data model for flags, bandits and configuration snapshots."""

from shardflags.models.bandit import (
    ActionCoefficients,
    AttributeSet,
    BanditFlagVariation,
    BanditModel,
    BanditReference,
    CategoricalAttributeCoefficient,
    ContextAttributes,
    ModelData,
    NumericAttributeCoefficient,
)
from shardflags.models.configuration import Configuration
from shardflags.models.flag import (
    Allocation,
    Condition,
    Flag,
    OperatorType,
    Rule,
    Shard,
    ShardRange,
    Split,
    Variation,
    VariationType,
)
from shardflags.models.results import (
    AssignmentEvent,
    BanditEvaluation,
    BanditEvent,
    BanditResult,
    FlagEvaluation,
)
from shardflags.models.value import Value, ValueKind, is_null_value

__all__ = [
    "ActionCoefficients",
    "Allocation",
    "AssignmentEvent",
    "AttributeSet",
    "BanditEvaluation",
    "BanditEvent",
    "BanditFlagVariation",
    "BanditModel",
    "BanditReference",
    "BanditResult",
    "CategoricalAttributeCoefficient",
    "Condition",
    "Configuration",
    "ContextAttributes",
    "Flag",
    "FlagEvaluation",
    "ModelData",
    "NumericAttributeCoefficient",
    "OperatorType",
    "Rule",
    "Shard",
    "ShardRange",
    "Split",
    "Value",
    "ValueKind",
    "Variation",
    "VariationType",
    "is_null_value",
]
