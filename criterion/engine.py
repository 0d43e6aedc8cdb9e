"""
engine.py

Criterion Engine: evaluation pipeline

The Engine runs one decision against one input and one profile:

    1. Resolve the profile (inline value or registry id)
    2. Validate the profile against profile_schema
    3. Validate the input against input_schema
    4. Evaluate rules, first match wins
    5. Validate the matching rule's output against output_schema
    6. Build the Result

Every business outcome is a status on the Result. Nothing in the pipeline
catches exceptions: a rule function that raises, or a broken schema, is a
defect and reaches the caller as-is.

Design Invariants:
- Synchronous, one linear pass per call, no retries
- No per-call state on the Engine; one instance may be shared across threads
- No process-wide default instance: construct an Engine and inject it
- Rules run only on validated input and profile
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Optional, Union

from criterion.config import EngineSettings
from criterion.decision import Decision
from criterion.evaluator import evaluate_rules
from criterion.explain import format_explanation
from criterion.logging import get_logger
from criterion.profile import ProfileResolutionError, resolve_profile
from criterion.registry import ProfileRegistry
from criterion.result import Result, ResultBuilder
from criterion.validation import MISSING, Invalid

logger = get_logger(__name__)


@dataclass(frozen=True)
class RunOptions:
    """Per-call options: the profile, inline or as a registry id."""
    profile: Any = MISSING


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _format_timestamp(moment: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a Z suffix."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _profile_argument(options: Union[RunOptions, Mapping[str, Any], None]) -> Any:
    if options is None:
        return MISSING
    if isinstance(options, RunOptions):
        return options.profile
    if isinstance(options, Mapping):
        return options.get("profile", MISSING)
    raise TypeError(
        f"options must be RunOptions or a mapping with a 'profile' key, got {type(options).__name__}"
    )


class Engine:
    """
    Evaluates decisions.

    Example:
        engine = Engine()
        result = engine.run(decision, {"amount": 15000}, {"profile": {"threshold": 10000}})
        print(engine.explain(result))

    Args:
        settings: Engine settings (defaults read from the environment).
        clock: Zero-argument callable returning the evaluation time.
    """

    __slots__ = ('_settings', '_clock')

    def __init__(
        self,
        settings: Optional[EngineSettings] = None,
        *,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._settings = settings or EngineSettings()
        self._clock = clock or _utc_now

    @property
    def settings(self) -> EngineSettings:
        return self._settings

    def run(
        self,
        decision: Decision,
        input: Any,
        options: Union[RunOptions, Mapping[str, Any], None] = None,
        registry: Optional[ProfileRegistry] = None,
    ) -> Result:
        """
        Evaluate decision against input.

        Args:
            decision: The decision to evaluate.
            input: Input facts, validated against decision.input_schema.
            options: RunOptions or {"profile": <profile or registry id>}.
            registry: Registry used when the profile is given by id.

        Returns:
            Result with status OK, NO_MATCH, INVALID_INPUT or INVALID_OUTPUT.

        Raises:
            Whatever a rule function raises; RuleContractError for rule
            functions returning the wrong type.
        """
        if not isinstance(decision, Decision):
            raise TypeError(f"decision must be Decision, got {type(decision).__name__}")

        builder = ResultBuilder(
            decision_id=decision.id,
            decision_version=decision.version,
            evaluated_at=_format_timestamp(self._clock()),
        )
        result = self._evaluate(decision, input, _profile_argument(options), registry, builder)

        if self._settings.log_evaluations:
            logger.debug(
                "decision_evaluated",
                decision_id=result.meta.decision_id,
                decision_version=result.meta.decision_version,
                status=result.status.value,
                matched_rule=result.meta.matched_rule,
                rules_evaluated=len(result.meta.evaluated_rules),
                profile_id=result.meta.profile_id,
            )
        return result

    def _evaluate(
        self,
        decision: Decision,
        input: Any,
        profile_arg: Any,
        registry: Optional[ProfileRegistry],
        builder: ResultBuilder,
    ) -> Result:
        # Step 1: Profile resolution
        resolved = resolve_profile(profile_arg, registry)
        if isinstance(resolved, ProfileResolutionError):
            return builder.invalid_input(resolved.reason)
        builder = builder.with_profile_id(resolved.profile_id)

        # Step 2: Profile validation
        profile_check = decision.profile_schema.validate(resolved.value)
        if isinstance(profile_check, Invalid):
            return builder.invalid_input(f"Profile validation failed: {profile_check.error}")

        # Step 3: Input validation
        input_check = decision.input_schema.validate(input)
        if isinstance(input_check, Invalid):
            return builder.invalid_input(f"Input validation failed: {input_check.error}")

        # Step 4: Rule evaluation
        evaluation = evaluate_rules(decision.rules, input_check.value, profile_check.value)
        builder = builder.with_trace(evaluation.trace)
        if evaluation.matched is None:
            return builder.no_match()

        # Step 5: Output emission and validation
        rule = evaluation.matched
        candidate = rule.emit(input_check.value, profile_check.value)
        output_check = decision.output_schema.validate(candidate)
        if isinstance(output_check, Invalid):
            return builder.invalid_output(rule.id, output_check.error)

        # Step 6: Result
        return builder.ok(rule.id, output_check.value, evaluation.explanation)

    def explain(self, result: Result) -> str:
        """Render result as a human-readable report (see criterion.explain)."""
        return format_explanation(result)

    def __repr__(self) -> str:
        return f"Engine(log_evaluations={self._settings.log_evaluations})"
