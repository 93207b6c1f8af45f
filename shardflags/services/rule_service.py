# shardflags/services/rule_service.py
"""Targeting rule evaluation for ShardFlags.

A rule is a conjunction of conditions and the first matching rule wins.
Conditions never raise: anything that goes wrong while evaluating one
(type mismatch, unparsable version, bad regex) is a non-match.
"""


from __future__ import annotations

import re
from typing import Any, Callable, Dict, Mapping, Optional, Sequence

import semver
import structlog

from shardflags.models.flag import Condition, OperatorType, Rule
from shardflags.models.value import Value, is_null_value, to_comparable_string


logger = structlog.get_logger(__name__)


_COMPARATORS: Dict[OperatorType, Callable[[Any, Any], bool]] = {
    OperatorType.GTE: lambda a, b: a >= b,
    OperatorType.GT: lambda a, b: a > b,
    OperatorType.LTE: lambda a, b: a <= b,
    OperatorType.LT: lambda a, b: a < b,
}


def find_matching_rule(
    subject_attributes: Mapping[str, Any], rules: Sequence[Rule]
) -> Optional[Rule]:
    """Return the first rule in ``rules`` matched by the subject, if any.

    Args:
        subject_attributes: Attribute name -> raw value.
        rules: Rules in configuration order.

    Returns:
        The first matching rule, or ``None``. An empty ``rules`` sequence
        yields ``None``; callers treat "no rules" as match-all themselves.
    """
    for rule in rules:
        if matches_rule(subject_attributes, rule):
            return rule
    return None


def matches_rule(subject_attributes: Mapping[str, Any], rule: Rule) -> bool:
    return all(
        evaluate_condition(subject_attributes, condition)
        for condition in rule.conditions
    )


def evaluate_condition(
    subject_attributes: Mapping[str, Any], condition: Condition
) -> bool:
    """Evaluate one condition against the subject's attributes.

    ``IS_NULL`` compares the condition's boolean with whether the attribute
    is missing or null. Every other operator fails on a null attribute.
    """
    try:
        raw = subject_attributes.get(condition.attribute)
        attribute = (
            None
            if condition.attribute not in subject_attributes
            else Value.infer(raw)
        )
        is_null = is_null_value(attribute)

        if condition.operator is OperatorType.IS_NULL:
            return condition.value.as_bool() == is_null
        if is_null:
            return False

        return _evaluate_operator(raw, attribute, condition)
    except Exception as exc:  # noqa: BLE001 - a bad condition is a non-match
        logger.debug(
            "condition_evaluation_failed",
            attribute=condition.attribute,
            operator=condition.operator.value,
            error=str(exc),
        )
        return False


def _evaluate_operator(raw: Any, attribute: Value, condition: Condition) -> bool:
    # ``attribute`` drives the numeric checks; text operators see ``raw`` so a
    # string is matched exactly as the caller passed it.
    operator = condition.operator

    if operator in _COMPARATORS:
        return _compare(raw, attribute, condition.value, _COMPARATORS[operator])

    if operator is OperatorType.MATCHES:
        return _matches_regex(raw, condition.value)
    if operator is OperatorType.NOT_MATCHES:
        return not _matches_regex(raw, condition.value)

    if operator is OperatorType.ONE_OF:
        return _is_one_of(raw, condition.value)
    if operator is OperatorType.NOT_ONE_OF:
        return not _is_one_of(raw, condition.value)

    return False


def _compare(
    raw: Any,
    attribute: Value,
    reference: Value,
    comparator: Callable[[Any, Any], bool],
) -> bool:
    if attribute.is_numeric() and reference.is_numeric():
        return comparator(attribute.as_double(), reference.as_double())

    attribute_version = _parse_version(raw)
    reference_version = _parse_version(reference)
    if attribute_version is None or reference_version is None:
        return False
    return comparator(attribute_version, reference_version)


def _parse_version(value: Any) -> Optional[semver.Version]:
    """Parse a semantic version, accepting ``"1"`` and ``"1.2"`` shorthands.

    Pre-releases sort before their release and are ordered identifier by
    identifier, numeric identifiers below alphanumeric ones.
    """
    try:
        return semver.Version.parse(
            to_comparable_string(value), optional_minor_and_patch=True
        )
    except (TypeError, ValueError):
        return None


def _matches_regex(raw: Any, pattern: Value) -> bool:
    return (
        re.search(to_comparable_string(pattern), to_comparable_string(raw))
        is not None
    )


def _is_one_of(raw: Any, candidates: Value) -> bool:
    return to_comparable_string(raw) in candidates.as_string_array()
