# shardflags/services/flag_service.py
"""Flag evaluation service for ShardFlags.

Provides a pure, stateless function to evaluate a single feature flag
for a given subject.
"""


from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from shardflags.errors.exceptions import ConfigurationIntegrityError
from shardflags.models.flag import Flag
from shardflags.models.results import FlagEvaluation
from shardflags.services.rule_service import find_matching_rule
from shardflags.services.sharder import matches_all_shards


# Rules may target the subject key as an ordinary attribute.
SUBJECT_KEY_ATTRIBUTE = "id"


def evaluate_flag(
    flag: Flag,
    subject_key: str,
    subject_attributes: Optional[Mapping[str, Any]] = None,
    now: Optional[datetime] = None,
) -> Optional[FlagEvaluation]:
    """Pure evaluation of a single feature flag for a given subject.

    Args:
        flag: The flag definition from the active configuration snapshot.
        subject_key: Identifier of the subject being assigned.
        subject_attributes: Attribute name -> raw value. Never mutated.
        now: Evaluation time, defaults to the current UTC time.

    Rules:
        - Disabled flag -> no evaluation.
        - Allocations are walked in order; one outside its
          ``[start_at, end_at]`` window is skipped.
        - An allocation with no rules is eligible for everyone, otherwise
          one of its rules must match.
        - Within an eligible allocation the first split whose shards all
          contain the subject picks the variation.

    Returns:
        A ``FlagEvaluation``, or ``None`` when nothing matched.

    Raises:
        ConfigurationIntegrityError: If the chosen split references a
            variation the flag does not define.
    """
    if not flag.enabled:
        return None

    attributes: Dict[str, Any] = dict(subject_attributes or {})
    attributes.setdefault(SUBJECT_KEY_ATTRIBUTE, subject_key)

    if now is None:
        now = datetime.now(timezone.utc)

    for allocation in flag.allocations:
        if not allocation.is_active(now):
            continue

        if allocation.rules and (
            find_matching_rule(attributes, allocation.rules) is None
        ):
            continue

        for split in allocation.splits:
            if not matches_all_shards(
                split.shards, subject_key, flag.total_shards
            ):
                continue

            variation = flag.variations.get(split.variation_key)
            if variation is None:
                raise ConfigurationIntegrityError(
                    f"Variation {split.variation_key} could not be found "
                    f"for flag {flag.key}"
                )

            return FlagEvaluation(
                variation=variation,
                do_log=allocation.do_log,
                allocation_key=allocation.key,
                extra_logging=dict(split.extra_logging),
            )

    return None
