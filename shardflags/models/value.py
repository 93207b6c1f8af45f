# shardflags/models/value.py
"""Typed value model shared by flag variations and rule conditions.

A ``Value`` is a tagged union: the ``kind`` says which payload it holds and
the accessors refuse to hand out a payload of another kind. Raw Python
values (as produced by ``json.loads``) are classified once, at the edge,
with :meth:`Value.infer`.
"""


from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

import structlog

from shardflags.errors.exceptions import TypeMismatchError


logger = structlog.get_logger(__name__)


class ValueKind(str, Enum):
    NULL = "NULL"
    BOOLEAN = "BOOLEAN"
    INTEGER = "INTEGER"
    NUMERIC = "NUMERIC"
    STRING = "STRING"
    STRING_ARRAY = "STRING_ARRAY"
    JSON = "JSON"


@dataclass(frozen=True)
class Value:
    """An immutable flag or condition value.

    Attributes:
        kind: Which of the supported kinds the payload belongs to.
        payload: The Python payload. String arrays are stored as tuples.
    """

    kind: ValueKind
    payload: Any = None

    @classmethod
    def null(cls) -> "Value":
        return cls(ValueKind.NULL, None)

    @classmethod
    def of_bool(cls, value: bool) -> "Value":
        return cls(ValueKind.BOOLEAN, bool(value))

    @classmethod
    def of_integer(cls, value: int) -> "Value":
        return cls(ValueKind.INTEGER, int(value))

    @classmethod
    def of_numeric(cls, value: float) -> "Value":
        return cls(ValueKind.NUMERIC, float(value))

    @classmethod
    def of_string(cls, value: str) -> "Value":
        return cls(ValueKind.STRING, value)

    @classmethod
    def of_string_array(cls, values: List[Any]) -> "Value":
        return cls(
            ValueKind.STRING_ARRAY,
            tuple(to_comparable_string(v) for v in values),
        )

    @classmethod
    def of_json(cls, value: Dict[str, Any]) -> "Value":
        return cls(ValueKind.JSON, value)

    @classmethod
    def infer(cls, raw: Any) -> "Value":
        """Classify a raw Python value.

        Precedence: sequences, booleans, floats, integers, strings (JSON
        object text becomes ``JSON``), mappings. ``None`` and anything
        unrecognised become ``NULL``.
        """
        if isinstance(raw, Value):
            return raw
        if raw is None:
            return cls.null()
        if isinstance(raw, (list, tuple, set, frozenset)):
            return cls.of_string_array(list(raw))
        # bool must be checked before int: bool is an int subclass.
        if isinstance(raw, bool):
            return cls.of_bool(raw)
        if isinstance(raw, float):
            return cls.of_numeric(raw)
        if isinstance(raw, int):
            return cls.of_integer(raw)
        if isinstance(raw, str):
            parsed = _try_parse_json_object(raw)
            if parsed is not None:
                return cls.of_json(parsed)
            return cls.of_string(raw)
        if isinstance(raw, dict):
            return cls.of_json(raw)

        logger.warning("unexpected_value_type", value_type=type(raw).__name__)
        return cls.null()

    def is_numeric(self) -> bool:
        return self.kind in (ValueKind.INTEGER, ValueKind.NUMERIC)

    def is_null(self) -> bool:
        return self.kind is ValueKind.NULL

    def as_bool(self) -> bool:
        self._require(ValueKind.BOOLEAN)
        return self.payload

    def as_double(self) -> float:
        if not self.is_numeric():
            raise TypeMismatchError("numeric", self.kind.value)
        return float(self.payload)

    def as_integer(self) -> int:
        self._require(ValueKind.INTEGER)
        return self.payload

    def as_string(self) -> str:
        self._require(ValueKind.STRING)
        return self.payload

    def as_string_array(self) -> List[str]:
        self._require(ValueKind.STRING_ARRAY)
        return list(self.payload)

    def as_json(self) -> Dict[str, Any]:
        self._require(ValueKind.JSON)
        return self.payload

    def to_python(self) -> Any:
        """Return the payload in a JSON-serializable shape."""
        if self.kind is ValueKind.STRING_ARRAY:
            return list(self.payload)
        return self.payload

    def _require(self, kind: ValueKind) -> None:
        if self.kind is not kind:
            raise TypeMismatchError(kind.value, self.kind.value)


def is_null_value(value: Optional[Value]) -> bool:
    """True if ``value`` is missing, of ``NULL`` kind, or holds ``None``."""
    return value is None or value.is_null() or value.payload is None


def to_comparable_string(raw: Any) -> str:
    """Render a raw value the way condition values are written.

    Integral floats render as integers (``123456789.0`` -> ``"123456789"``)
    so that numeric attributes compare equal to string condition values.
    Values that are neither strings nor numbers use compact JSON.
    """
    if isinstance(raw, Value):
        raw = raw.to_python()
    if isinstance(raw, str):
        return raw
    if isinstance(raw, bool):
        return "true" if raw else "false"
    if isinstance(raw, int):
        return str(raw)
    if isinstance(raw, float):
        if raw.is_integer():
            return str(int(raw))
        return repr(raw)
    if isinstance(raw, tuple):
        raw = list(raw)
    return json.dumps(raw, separators=(",", ":"))


def _try_parse_json_object(text: str) -> Optional[Dict[str, Any]]:
    stripped = text.strip()
    if not stripped.startswith("{"):
        return None
    try:
        parsed = json.loads(stripped)
    except ValueError:
        return None
    return parsed if isinstance(parsed, dict) else None
