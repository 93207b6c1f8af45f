# shardflags/models/results.py
"""Evaluation results and the events handed to assignment loggers."""


from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from shardflags.models.bandit import AttributeSet
from shardflags.models.flag import Variation


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class FlagEvaluation:
    variation: Variation
    do_log: bool
    allocation_key: str
    extra_logging: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class BanditEvaluation:
    flag_key: str
    subject_key: str
    subject_attributes: AttributeSet
    action_key: str
    action_attributes: AttributeSet
    action_score: float
    action_weight: float
    gamma: float
    optimality_gap: float


@dataclass(frozen=True)
class BanditResult:
    """Outcome of a bandit-backed assignment.

    ``action`` is ``None`` when no bandit applied and only the flag
    variation was assigned.
    """

    variation: str
    action: Optional[str] = None

    def __str__(self) -> str:
        return self.action if self.action is not None else self.variation


@dataclass(frozen=True)
class AssignmentEvent:
    feature_flag: str
    allocation: str
    variation: str
    subject: str
    subject_attributes: Mapping[str, Any]
    meta_data: Mapping[str, str]
    extra_logging: Mapping[str, str] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=_utc_now)

    @property
    def experiment(self) -> str:
        return f"{self.feature_flag}-{self.allocation}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "experiment": self.experiment,
            "featureFlag": self.feature_flag,
            "allocation": self.allocation,
            "variation": self.variation,
            "subject": self.subject,
            "subjectAttributes": dict(self.subject_attributes),
            "metaData": dict(self.meta_data),
            "extraLogging": dict(self.extra_logging),
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class BanditEvent:
    flag_key: str
    bandit_key: str
    subject: str
    action: str
    action_probability: float
    optimality_gap: float
    model_version: str
    subject_attributes: AttributeSet
    action_attributes: AttributeSet
    meta_data: Mapping[str, str]
    timestamp: datetime = field(default_factory=_utc_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "flagKey": self.flag_key,
            "banditKey": self.bandit_key,
            "subject": self.subject,
            "action": self.action,
            "actionProbability": self.action_probability,
            "optimalityGap": self.optimality_gap,
            "modelVersion": self.model_version,
            "subjectNumericAttributes": dict(
                self.subject_attributes.numeric_attributes
            ),
            "subjectCategoricalAttributes": dict(
                self.subject_attributes.categorical_attributes
            ),
            "actionNumericAttributes": dict(
                self.action_attributes.numeric_attributes
            ),
            "actionCategoricalAttributes": dict(
                self.action_attributes.categorical_attributes
            ),
            "metaData": dict(self.meta_data),
            "timestamp": self.timestamp.isoformat(),
        }
