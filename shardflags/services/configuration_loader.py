# shardflags/services/configuration_loader.py
"""Build configuration snapshots from their JSON wire format.

Payloads are validated against the JSON Schemas first, then mapped field by
field onto the immutable model. Wire field names are camelCase and must be
preserved exactly.
"""


from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import structlog

from shardflags.errors.exceptions import InvalidConfigurationError
from shardflags.models.bandit import (
    ActionCoefficients,
    BanditFlagVariation,
    BanditModel,
    BanditReference,
    CategoricalAttributeCoefficient,
    ModelData,
    NumericAttributeCoefficient,
)
from shardflags.models.configuration import Configuration
from shardflags.models.flag import (
    DEFAULT_TOTAL_SHARDS,
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
from shardflags.models.value import Value
from shardflags.validators.configuration_validator import (
    validate_bandits_configuration,
    validate_flags_configuration,
)


logger = structlog.get_logger(__name__)


def build_configuration(
    flags_payload: Mapping[str, Any],
    bandits_payload: Optional[Mapping[str, Any]] = None,
    flag_config_version: Optional[str] = None,
) -> Configuration:
    """Validate and assemble a new configuration snapshot.

    Args:
        flags_payload: The flags configuration document.
        bandits_payload: The bandit models document, if bandits are used.
        flag_config_version: Version tag of the flags document (for example
            an ETag), kept on the snapshot for diagnostics.

    Returns:
        A new immutable ``Configuration``.

    Raises:
        InvalidConfigurationError: If either payload violates its schema.
    """
    validate_flags_configuration(flags_payload)
    flags = [parse_flag(raw) for raw in flags_payload["flags"].values()]
    references = {
        key: parse_bandit_reference(raw)
        for key, raw in (flags_payload.get("banditReferences") or {}).items()
    }

    bandits: List[BanditModel] = []
    if bandits_payload is not None:
        validate_bandits_configuration(bandits_payload)
        bandits = [
            parse_bandit(raw) for raw in bandits_payload["bandits"].values()
        ]

    configuration = Configuration(
        flags=flags,
        bandits=bandits,
        bandit_references=references,
        flag_config_version=flag_config_version,
    )
    logger.info(
        "configuration_built",
        flags=len(configuration.flags),
        bandits=len(configuration.bandits),
        flag_config_version=flag_config_version,
    )
    return configuration


def load_configuration_files(
    flags_path: Union[str, Path],
    bandits_path: Optional[Union[str, Path]] = None,
) -> Configuration:
    """Build a snapshot from JSON documents on disk."""
    flags_payload = _read_json(flags_path)
    bandits_payload = _read_json(bandits_path) if bandits_path else None
    return build_configuration(flags_payload, bandits_payload)


def parse_flag(raw: Mapping[str, Any]) -> Flag:
    variation_type = (
        VariationType(raw["variationType"])
        if raw.get("variationType")
        else None
    )
    variations = {
        key: Variation(
            key=variation["key"],
            value=_parse_variation_value(variation["value"], variation_type),
        )
        for key, variation in raw["variations"].items()
    }
    return Flag(
        key=raw["key"],
        enabled=raw["enabled"],
        allocations=tuple(parse_allocation(a) for a in raw["allocations"]),
        variations=variations,
        total_shards=raw.get("totalShards", DEFAULT_TOTAL_SHARDS),
        variation_type=variation_type,
    )


def parse_allocation(raw: Mapping[str, Any]) -> Allocation:
    return Allocation(
        key=raw["key"],
        rules=tuple(
            Rule(
                conditions=tuple(
                    parse_condition(c) for c in rule.get("conditions", [])
                )
            )
            for rule in raw.get("rules") or []
        ),
        splits=tuple(parse_split(s) for s in raw["splits"]),
        do_log=raw.get("doLog", True),
        start_at=parse_timestamp(raw.get("startAt")),
        end_at=parse_timestamp(raw.get("endAt")),
    )


def parse_condition(raw: Mapping[str, Any]) -> Condition:
    return Condition(
        attribute=raw["attribute"],
        operator=OperatorType(raw["operator"]),
        value=Value.infer(raw.get("value")),
    )


def parse_split(raw: Mapping[str, Any]) -> Split:
    return Split(
        variation_key=raw["variationKey"],
        shards=tuple(
            Shard(
                salt=shard["salt"],
                ranges=tuple(
                    ShardRange(start=r["start"], end=r["end"])
                    for r in shard["ranges"]
                ),
            )
            for shard in raw["shards"]
        ),
        extra_logging=raw.get("extraLogging") or {},
    )


def parse_bandit_reference(raw: Mapping[str, Any]) -> BanditReference:
    return BanditReference(
        model_version=raw["modelVersion"],
        flag_variations=tuple(
            BanditFlagVariation(
                bandit_key=fv["key"],
                flag_key=fv["flagKey"],
                allocation_key=fv["allocationKey"],
                variation_key=fv["variationKey"],
                variation_value=fv["variationValue"],
            )
            for fv in raw["flagVariations"]
        ),
    )


def parse_bandit(raw: Mapping[str, Any]) -> BanditModel:
    model = raw["modelData"]
    return BanditModel(
        bandit_key=raw["banditKey"],
        model_name=raw.get("modelName"),
        model_version=raw["modelVersion"],
        updated_at=parse_timestamp(raw.get("updatedAt")),
        model_data=ModelData(
            gamma=model["gamma"],
            default_action_score=model.get("defaultActionScore", 0.0),
            action_probability_floor=model.get("actionProbabilityFloor", 0.0),
            coefficients={
                key: _parse_action_coefficients(c)
                for key, c in model["coefficients"].items()
            },
        ),
    )


def parse_timestamp(raw: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    if raw is None:
        return None
    text = raw[:-1] + "+00:00" if raw.endswith("Z") else raw
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as exc:
        raise InvalidConfigurationError(
            f"Invalid timestamp {raw!r}"
        ) from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _parse_variation_value(
    raw: Any, variation_type: Optional[VariationType]
) -> Value:
    if variation_type is VariationType.STRING and isinstance(raw, str):
        return Value.of_string(raw)
    if (
        variation_type is VariationType.INTEGER
        and isinstance(raw, float)
        and raw.is_integer()
    ):
        return Value.of_integer(int(raw))
    if (
        variation_type is VariationType.NUMERIC
        and isinstance(raw, int)
        and not isinstance(raw, bool)
    ):
        return Value.of_numeric(float(raw))
    return Value.infer(raw)


def _parse_numeric_coefficient(
    raw: Mapping[str, Any],
) -> NumericAttributeCoefficient:
    return NumericAttributeCoefficient(
        attribute_key=raw["attributeKey"],
        coefficient=raw["coefficient"],
        missing_value_coefficient=raw["missingValueCoefficient"],
    )


def _parse_categorical_coefficient(
    raw: Mapping[str, Any],
) -> CategoricalAttributeCoefficient:
    return CategoricalAttributeCoefficient(
        attribute_key=raw["attributeKey"],
        missing_value_coefficient=raw["missingValueCoefficient"],
        value_coefficients=raw["valueCoefficients"],
    )


def _parse_action_coefficients(raw: Mapping[str, Any]) -> ActionCoefficients:
    return ActionCoefficients(
        action_key=raw["actionKey"],
        intercept=raw["intercept"],
        subject_numeric_coefficients=tuple(
            _parse_numeric_coefficient(c)
            for c in raw.get("subjectNumericCoefficients", [])
        ),
        subject_categorical_coefficients=tuple(
            _parse_categorical_coefficient(c)
            for c in raw.get("subjectCategoricalCoefficients", [])
        ),
        action_numeric_coefficients=tuple(
            _parse_numeric_coefficient(c)
            for c in raw.get("actionNumericCoefficients", [])
        ),
        action_categorical_coefficients=tuple(
            _parse_categorical_coefficient(c)
            for c in raw.get("actionCategoricalCoefficients", [])
        ),
    )


def _read_json(path: Union[str, Path]) -> Dict[str, Any]:
    with Path(path).open("r", encoding="utf-8") as f:
        return json.load(f)
