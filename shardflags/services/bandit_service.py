# shardflags/services/bandit_service.py
"""Contextual bandit evaluation (FALCON) for ShardFlags.

Actions are scored with a linear model, the scores are turned into a
probability distribution with a probability floor, and one action is picked
deterministically by bucketing the subject with the sharder.
"""


from __future__ import annotations

from typing import Dict, Mapping, Sequence

import structlog

from shardflags.errors.exceptions import (
    BanditEvaluationError,
    ConfigurationIntegrityError,
)
from shardflags.models.bandit import (
    ActionCoefficients,
    AttributeSet,
    CategoricalAttributeCoefficient,
    ContextAttributes,
    ModelData,
    NumericAttributeCoefficient,
)
from shardflags.models.results import BanditEvaluation
from shardflags.services.sharder import get_shard


logger = structlog.get_logger(__name__)

DEFAULT_BANDIT_TOTAL_SHARDS = 10_000


class BanditEvaluator:
    """Scores and selects an action for a subject given a bandit model.

    The evaluator holds no per-call state and may be shared across threads.
    """

    def __init__(self, total_shards: int = DEFAULT_BANDIT_TOTAL_SHARDS) -> None:
        self.total_shards = total_shards

    def evaluate_bandit(
        self,
        flag_key: str,
        subject: ContextAttributes,
        actions: Mapping[str, ContextAttributes],
        model: ModelData,
    ) -> BanditEvaluation:
        """Evaluate the bandit for one subject over the candidate actions.

        Args:
            flag_key: The flag the bandit is attached to; part of the hash
                input used for selection.
            subject: The subject key and attributes.
            actions: Action key -> action attributes.
            model: Coefficients and hyper-parameters of the bandit.

        Returns:
            The selected action with its score, weight and optimality gap.

        Raises:
            ConfigurationIntegrityError: If ``actions`` is empty.
            BanditEvaluationError: If no action could be selected.
        """
        if not actions:
            raise ConfigurationIntegrityError(
                f"No actions provided for bandit evaluation of {flag_key}"
            )

        subject_attributes = subject.as_attribute_set()
        action_attributes = {
            key: context.as_attribute_set() for key, context in actions.items()
        }

        scores = self.score_actions(
            subject_attributes, action_attributes, model
        )
        weights = self.weigh_actions(
            scores, model.gamma, model.action_probability_floor
        )
        selected = self.select_action(flag_key, subject.key, weights)

        score = scores[selected]
        gap = max(scores.values()) - score

        return BanditEvaluation(
            flag_key=flag_key,
            subject_key=subject.key,
            subject_attributes=subject_attributes,
            action_key=selected,
            action_attributes=action_attributes[selected],
            action_score=score,
            action_weight=weights[selected],
            gamma=model.gamma,
            optimality_gap=gap,
        )

    @staticmethod
    def score_actions(
        subject_attributes: AttributeSet,
        actions: Mapping[str, AttributeSet],
        model: ModelData,
    ) -> Dict[str, float]:
        """Score every action; unknown actions get the default score."""
        scores: Dict[str, float] = {}
        for action_key, attributes in actions.items():
            coefficients = model.coefficients.get(action_key)
            if coefficients is None:
                scores[action_key] = model.default_action_score
            else:
                scores[action_key] = score_action(
                    subject_attributes, attributes, coefficients
                )
        return scores

    @staticmethod
    def weigh_actions(
        action_scores: Mapping[str, float],
        gamma: float,
        probability_floor: float,
    ) -> Dict[str, float]:
        """Turn scores into selection probabilities (FALCON).

        The best action (highest score, ties broken by the smallest key)
        takes whatever probability the other actions leave over; every
        other action gets at least ``probability_floor / n``.
        """
        number_of_actions = len(action_scores)
        best_key, best_score = min(
            action_scores.items(), key=lambda item: (-item[1], item[0])
        )
        min_probability = probability_floor / number_of_actions

        weights: Dict[str, float] = {}
        for action_key, score in action_scores.items():
            if action_key == best_key:
                continue
            weights[action_key] = max(
                min_probability,
                1.0 / (number_of_actions + gamma * (best_score - score)),
            )

        weights[best_key] = max(0.0, 1.0 - sum(weights.values()))
        return weights

    def select_action(
        self,
        flag_key: str,
        subject_key: str,
        action_weights: Mapping[str, float],
    ) -> str:
        """Pick an action by walking a hash-shuffled cumulative distribution."""
        shuffled = sorted(
            action_weights.items(),
            key=lambda item: (
                get_shard(
                    f"{flag_key}-{subject_key}-{item[0]}", self.total_shards
                ),
                item[0],
            ),
        )

        shard = get_shard(f"{flag_key}-{subject_key}", self.total_shards)
        shard_value = shard / self.total_shards

        cumulative_weight = 0.0
        for action_key, weight in shuffled:
            cumulative_weight += weight
            if cumulative_weight > shard_value:
                return action_key

        logger.error(
            "bandit_selection_exhausted",
            flag_key=flag_key,
            subject_key=subject_key,
            cumulative_weight=cumulative_weight,
        )
        raise BanditEvaluationError(
            f"No action selected for {flag_key} {subject_key}"
        )


def score_action(
    subject_attributes: AttributeSet,
    action_attributes: AttributeSet,
    coefficients: ActionCoefficients,
) -> float:
    score = coefficients.intercept
    score += score_numeric_attributes(
        coefficients.subject_numeric_coefficients,
        subject_attributes.numeric_attributes,
    )
    score += score_categorical_attributes(
        coefficients.subject_categorical_coefficients,
        subject_attributes.categorical_attributes,
    )
    score += score_numeric_attributes(
        coefficients.action_numeric_coefficients,
        action_attributes.numeric_attributes,
    )
    score += score_categorical_attributes(
        coefficients.action_categorical_coefficients,
        action_attributes.categorical_attributes,
    )
    return score


def score_numeric_attributes(
    coefficients: Sequence[NumericAttributeCoefficient],
    attributes: Mapping[str, float],
) -> float:
    score = 0.0
    for coefficient in coefficients:
        value = attributes.get(coefficient.attribute_key)
        if value is None:
            score += coefficient.missing_value_coefficient
        else:
            score += coefficient.coefficient * value
    return score


def score_categorical_attributes(
    coefficients: Sequence[CategoricalAttributeCoefficient],
    attributes: Mapping[str, str],
) -> float:
    score = 0.0
    for coefficient in coefficients:
        value = attributes.get(coefficient.attribute_key)
        if value is not None and value in coefficient.value_coefficients:
            score += coefficient.value_coefficients[value]
        else:
            score += coefficient.missing_value_coefficient
    return score
