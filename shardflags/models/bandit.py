# shardflags/models/bandit.py
"""Contextual bandit model and attribute containers."""


from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

from shardflags.errors.exceptions import InvalidAttributeTypeError


@dataclass(frozen=True)
class NumericAttributeCoefficient:
    attribute_key: str
    coefficient: float
    missing_value_coefficient: float


@dataclass(frozen=True)
class CategoricalAttributeCoefficient:
    attribute_key: str
    missing_value_coefficient: float
    value_coefficients: Mapping[str, float] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "value_coefficients",
            MappingProxyType(dict(self.value_coefficients)),
        )


@dataclass(frozen=True)
class ActionCoefficients:
    action_key: str
    intercept: float
    subject_numeric_coefficients: Tuple[NumericAttributeCoefficient, ...] = ()
    subject_categorical_coefficients: Tuple[
        CategoricalAttributeCoefficient, ...
    ] = ()
    action_numeric_coefficients: Tuple[NumericAttributeCoefficient, ...] = ()
    action_categorical_coefficients: Tuple[
        CategoricalAttributeCoefficient, ...
    ] = ()


@dataclass(frozen=True)
class ModelData:
    gamma: float
    coefficients: Mapping[str, ActionCoefficients]
    default_action_score: float = 0.0
    action_probability_floor: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "coefficients", MappingProxyType(dict(self.coefficients))
        )


@dataclass(frozen=True)
class BanditModel:
    """A named, versioned bandit model as delivered by the bandits payload."""

    bandit_key: str
    model_version: str
    model_data: ModelData
    model_name: Optional[str] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class BanditFlagVariation:
    """Links one (flag, variation value) pair to the bandit scoring it."""

    bandit_key: str
    flag_key: str
    allocation_key: str
    variation_key: str
    variation_value: str


@dataclass(frozen=True)
class BanditReference:
    model_version: str
    flag_variations: Tuple[BanditFlagVariation, ...] = ()


@dataclass(frozen=True)
class AttributeSet:
    """Attributes split by how the bandit model consumes them."""

    numeric_attributes: Mapping[str, float]
    categorical_attributes: Mapping[str, str]

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        return {
            "numericAttributes": dict(self.numeric_attributes),
            "categoricalAttributes": dict(self.categorical_attributes),
        }


def _is_numeric(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_categorical(value: Any) -> bool:
    return isinstance(value, (str, bool))


class ContextAttributes:
    """Attributes of a keyed entity (a subject or an action).

    Only numeric, boolean and string values are accepted; ``None`` values
    are dropped. Strings and booleans are categorical, numbers are numeric.
    """

    def __init__(
        self,
        key: str,
        attributes: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.key = key
        self._attributes: Dict[str, Any] = {}
        for name, value in (attributes or {}).items():
            if value is None:
                continue
            if not (_is_numeric(value) or _is_categorical(value)):
                raise InvalidAttributeTypeError(name, value)
            self._attributes[name] = value

    @classmethod
    def from_dict(
        cls, key: str, attributes: Optional[Mapping[str, Any]]
    ) -> "ContextAttributes":
        return cls(key, attributes)

    def as_dict(self) -> Dict[str, Any]:
        return dict(self._attributes)

    def numeric_attributes(self) -> Dict[str, float]:
        return {
            name: float(value)
            for name, value in self._attributes.items()
            if _is_numeric(value)
        }

    def categorical_attributes(self) -> Dict[str, str]:
        result: Dict[str, str] = {}
        for name, value in self._attributes.items():
            if isinstance(value, bool):
                result[name] = "true" if value else "false"
            elif isinstance(value, str):
                result[name] = value
        return result

    def as_attribute_set(self) -> AttributeSet:
        return AttributeSet(
            numeric_attributes=MappingProxyType(self.numeric_attributes()),
            categorical_attributes=MappingProxyType(
                self.categorical_attributes()
            ),
        )

    def __repr__(self) -> str:
        return f"ContextAttributes(key={self.key!r}, {self._attributes!r})"
