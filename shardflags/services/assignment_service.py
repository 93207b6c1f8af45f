# shardflags/services/assignment_service.py
"""Client facade over the evaluation core.

This module centralizes:
- Input validation for assignment calls.
- Flag lookup in the active configuration snapshot.
- Typed getters that fall back to the caller's default value.
- Bandit action selection for flags whose variation maps to a bandit.
- Best-effort forwarding of assignment and bandit events to a logger.
"""


from __future__ import annotations

import uuid
from typing import (
    Any,
    Callable,
    Dict,
    Iterable,
    Mapping,
    Optional,
    Protocol,
    TypeVar,
    Union,
)

import structlog

from shardflags import __version__
from shardflags.errors.exceptions import BanditEvaluationError, TypeMismatchError
from shardflags.models.bandit import ContextAttributes
from shardflags.models.configuration import Configuration
from shardflags.models.flag import VariationType
from shardflags.models.results import (
    AssignmentEvent,
    BanditEvent,
    BanditResult,
    FlagEvaluation,
)
from shardflags.models.value import Value, is_null_value
from shardflags.repositories.memory_repo import ConfigurationStore
from shardflags.services.bandit_service import BanditEvaluator
from shardflags.services.flag_service import evaluate_flag


logger = structlog.get_logger(__name__)

SDK_NAME = "shardflags"
SDK_LANGUAGE = "python"

T = TypeVar("T")

Attributes = Mapping[str, Any]
Actions = Union[
    Iterable[str],
    Mapping[str, Union[ContextAttributes, Optional[Attributes]]],
]


class AssignmentLogger(Protocol):
    """Sink for assignment and bandit events."""

    def log_assignment(self, event: AssignmentEvent) -> None:
        ...

    def log_bandit_action(self, event: BanditEvent) -> None:
        ...


class StructlogAssignmentLogger:
    """Assignment logger writing events to the structured application log."""

    def __init__(self, name: str = "shardflags.assignments") -> None:
        self._logger = structlog.get_logger(name)

    def log_assignment(self, event: AssignmentEvent) -> None:
        self._logger.info("assignment", assignment=event.to_dict())

    def log_bandit_action(self, event: BanditEvent) -> None:
        self._logger.info("bandit_action", bandit_action=event.to_dict())


def _validate_not_blank(value: str, message: str) -> None:
    if not value or not value.strip():
        raise ValueError(message)


class AssignmentClient:
    """Assigns variations and bandit actions from the active snapshot.

    Args:
        store: Holder of the active configuration snapshot.
        assignment_logger: Sink receiving assignment and bandit events.
        bandit_evaluator: Evaluator used for bandit-backed flags.
    """

    def __init__(
        self,
        store: ConfigurationStore,
        assignment_logger: AssignmentLogger,
        bandit_evaluator: Optional[BanditEvaluator] = None,
    ) -> None:
        self._store = store
        self._assignment_logger = assignment_logger
        self._bandit_evaluator = bandit_evaluator or BanditEvaluator()
        self._meta_data = {
            "sdkLanguage": SDK_LANGUAGE,
            "sdkName": SDK_NAME,
            "sdkVersion": __version__,
            "clientUID": str(uuid.uuid4()),
        }

    @property
    def meta_data(self) -> Dict[str, str]:
        return dict(self._meta_data)

    def get_assignment_details(
        self,
        flag_key: str,
        subject_key: str,
        subject_attributes: Optional[Attributes] = None,
        expected_type: Optional[VariationType] = None,
    ) -> Optional[FlagEvaluation]:
        """Evaluate a flag for a subject and log the assignment.

        Args:
            flag_key: Key of the flag to evaluate.
            subject_key: Identifier of the subject.
            subject_attributes: Attributes used by targeting rules.
            expected_type: If given, flags declaring another variation type
                are not evaluated.

        Returns:
            The evaluation, or ``None`` when the flag is unknown, disabled,
            of the wrong type, or no allocation matched.

        Raises:
            ValueError: If ``flag_key`` or ``subject_key`` is blank.
            ConfigurationIntegrityError: If the snapshot is inconsistent.
        """
        return self._evaluate(
            self._store.get(),
            flag_key,
            subject_key,
            subject_attributes,
            expected_type,
        )

    def get_string_assignment(
        self,
        flag_key: str,
        subject_key: str,
        subject_attributes: Optional[Attributes],
        default: str,
    ) -> str:
        return self._typed_assignment(
            self._store.get(),
            flag_key,
            subject_key,
            subject_attributes,
            VariationType.STRING,
            default,
            Value.as_string,
        )

    def get_integer_assignment(
        self,
        flag_key: str,
        subject_key: str,
        subject_attributes: Optional[Attributes],
        default: int,
    ) -> int:
        return self._typed_assignment(
            self._store.get(),
            flag_key,
            subject_key,
            subject_attributes,
            VariationType.INTEGER,
            default,
            Value.as_integer,
        )

    def get_numeric_assignment(
        self,
        flag_key: str,
        subject_key: str,
        subject_attributes: Optional[Attributes],
        default: float,
    ) -> float:
        return self._typed_assignment(
            self._store.get(),
            flag_key,
            subject_key,
            subject_attributes,
            VariationType.NUMERIC,
            default,
            Value.as_double,
        )

    def get_boolean_assignment(
        self,
        flag_key: str,
        subject_key: str,
        subject_attributes: Optional[Attributes],
        default: bool,
    ) -> bool:
        return self._typed_assignment(
            self._store.get(),
            flag_key,
            subject_key,
            subject_attributes,
            VariationType.BOOLEAN,
            default,
            Value.as_bool,
        )

    def get_json_assignment(
        self,
        flag_key: str,
        subject_key: str,
        subject_attributes: Optional[Attributes],
        default: Dict[str, Any],
    ) -> Dict[str, Any]:
        return self._typed_assignment(
            self._store.get(),
            flag_key,
            subject_key,
            subject_attributes,
            VariationType.JSON,
            default,
            Value.as_json,
        )

    def get_bandit_action(
        self,
        flag_key: str,
        subject_key: str,
        subject_attributes: Optional[Attributes],
        actions: Actions,
        default: str,
    ) -> BanditResult:
        """Assign a variation and, for bandit variations, pick an action.

        Args:
            flag_key: Key of the bandit-backed flag.
            subject_key: Identifier of the subject.
            subject_attributes: Numeric, boolean or string attributes.
            actions: Either action keys, or action key -> attributes.
            default: Variation used when nothing is assigned.

        Returns:
            ``BanditResult(variation, action)``; ``action`` is ``None`` when
            the variation is not backed by a bandit or no actions were given.

        Raises:
            ValueError: If a key is blank.
            InvalidAttributeTypeError: If an attribute has an unsupported
                type.
        """
        _validate_not_blank(flag_key, "Invalid argument: flag_key cannot be blank")
        configuration = self._store.get()

        subject = ContextAttributes.from_dict(subject_key, subject_attributes)
        action_contexts = _to_action_contexts(actions)

        variation = self._typed_assignment(
            configuration,
            flag_key,
            subject_key,
            subject_attributes,
            VariationType.STRING,
            default,
            Value.as_string,
        )

        if not action_contexts:
            return BanditResult(variation)

        bandit_key = configuration.try_get_bandit_key(flag_key, variation)
        if bandit_key is None:
            return BanditResult(variation)

        bandit = configuration.try_get_bandit(bandit_key)
        if bandit is None:
            logger.error(
                "bandit_model_not_found",
                bandit_key=bandit_key,
                flag_key=flag_key,
                variation=variation,
            )
            return BanditResult(variation)

        try:
            evaluation = self._bandit_evaluator.evaluate_bandit(
                flag_key, subject, action_contexts, bandit.model_data
            )
        except BanditEvaluationError as exc:
            logger.error(
                "bandit_evaluation_failed",
                flag_key=flag_key,
                bandit_key=bandit_key,
                error=str(exc),
            )
            return BanditResult(variation)

        self._log_bandit_action(
            BanditEvent(
                flag_key=flag_key,
                bandit_key=bandit_key,
                subject=subject_key,
                action=evaluation.action_key,
                action_probability=evaluation.action_weight,
                optimality_gap=evaluation.optimality_gap,
                model_version=bandit.model_version,
                subject_attributes=evaluation.subject_attributes,
                action_attributes=evaluation.action_attributes,
                meta_data=self.meta_data,
            )
        )
        return BanditResult(variation, evaluation.action_key)

    def _typed_assignment(
        self,
        configuration: Configuration,
        flag_key: str,
        subject_key: str,
        subject_attributes: Optional[Attributes],
        expected_type: VariationType,
        default: T,
        accessor: Callable[[Value], T],
    ) -> T:
        result = self._evaluate(
            configuration,
            flag_key,
            subject_key,
            subject_attributes,
            expected_type,
        )
        if result is None:
            return default

        try:
            return accessor(result.variation.value)
        except TypeMismatchError as exc:
            logger.warning(
                "variation_type_mismatch",
                flag_key=flag_key,
                expected=expected_type.value,
                error=str(exc),
            )
            return default

    def _evaluate(
        self,
        configuration: Configuration,
        flag_key: str,
        subject_key: str,
        subject_attributes: Optional[Attributes],
        expected_type: Optional[VariationType],
    ) -> Optional[FlagEvaluation]:
        _validate_not_blank(
            subject_key, "Invalid argument: subject_key cannot be blank"
        )
        _validate_not_blank(flag_key, "Invalid argument: flag_key cannot be blank")

        flag = configuration.try_get_flag(flag_key)
        if flag is None:
            logger.warning("flag_not_found", flag_key=flag_key)
            return None

        if not flag.enabled:
            logger.info("flag_disabled", flag_key=flag_key)
            return None

        if (
            expected_type is not None
            and flag.variation_type is not None
            and flag.variation_type is not expected_type
        ):
            logger.warning(
                "variation_type_mismatch",
                flag_key=flag_key,
                expected=expected_type.value,
                declared=flag.variation_type.value,
            )
            return None

        attributes = dict(subject_attributes or {})
        result = evaluate_flag(flag, subject_key, attributes)
        if result is None:
            logger.info(
                "no_matching_allocation",
                flag_key=flag_key,
                subject_key=subject_key,
            )
            return None

        if is_null_value(result.variation.value):
            logger.warning("assigned_variation_is_null", flag_key=flag_key)
            return None

        if result.do_log:
            self._log_assignment(
                AssignmentEvent(
                    feature_flag=flag_key,
                    allocation=result.allocation_key,
                    variation=result.variation.key,
                    subject=subject_key,
                    subject_attributes=attributes,
                    meta_data=self.meta_data,
                    extra_logging=result.extra_logging,
                )
            )
        return result

    def _log_assignment(self, event: AssignmentEvent) -> None:
        try:
            self._assignment_logger.log_assignment(event)
        except Exception as exc:  # noqa: BLE001 - logging never breaks assignment
            logger.warning(
                "assignment_logging_failed",
                flag_key=event.feature_flag,
                error=str(exc),
            )

    def _log_bandit_action(self, event: BanditEvent) -> None:
        try:
            self._assignment_logger.log_bandit_action(event)
        except Exception as exc:  # noqa: BLE001 - logging never breaks assignment
            logger.warning(
                "bandit_logging_failed",
                flag_key=event.flag_key,
                error=str(exc),
            )


def _to_action_contexts(actions: Actions) -> Dict[str, ContextAttributes]:
    if isinstance(actions, Mapping):
        contexts: Dict[str, ContextAttributes] = {}
        for key, attributes in actions.items():
            if isinstance(attributes, ContextAttributes):
                contexts[key] = attributes
            else:
                contexts[key] = ContextAttributes.from_dict(key, attributes)
        return contexts
    return {key: ContextAttributes(key) for key in dict.fromkeys(actions)}
