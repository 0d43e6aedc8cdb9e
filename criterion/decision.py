"""
decision.py

Criterion Decision Primitive

A Decision is an immutable definition of a business decision: the
contracts of its input, output and profile, plus an ordered list of pure
rules. It is created once at definition time and shared by reference
across every evaluation.

Design Invariants:
- Immutable once created
- All fields validated on construction
- Rule ids unique within a decision
- Rule order is significant and preserved
- No evaluation logic (see criterion.evaluator)
"""

import json
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from criterion.validation import Validator, as_validator

_SEMVER_PATTERN = re.compile(
    r'^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)'
    r'(?:-[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?'
    r'(?:\+[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?$'
)


# =============================================================================
# Definition Errors
# =============================================================================

class DecisionValidationError(Exception):
    """
    Raised when a Decision or Rule cannot be constructed.

    This is NOT an evaluation outcome. It is a definition-time error
    indicating that the caller attempted to declare an invalid decision.
    """

    def __init__(
        self,
        message: str,
        *,
        field_name: Optional[str] = None,
        error_code: str = "D000",
    ):
        self.message = message
        self.field_name = field_name
        self.error_code = error_code
        super().__init__(self.format())

    def format(self) -> str:
        """Format as human-readable error message."""
        if self.field_name:
            return f"[{self.error_code}] Decision definition invalid for '{self.field_name}': {self.message}"
        return f"[{self.error_code}] Decision definition invalid: {self.message}"


class MissingRequiredFieldError(DecisionValidationError):
    """Raised when a required field is missing or None."""

    def __init__(self, field_name: str):
        super().__init__(
            message=f"Required field '{field_name}' is missing or None",
            field_name=field_name,
            error_code="D001",
        )


class InvalidFieldTypeError(DecisionValidationError):
    """Raised when a field has an invalid type."""

    def __init__(self, field_name: str, expected: str, actual: str):
        super().__init__(
            message=f"Expected {expected}, got {actual}",
            field_name=field_name,
            error_code="D002",
        )
        self.expected = expected
        self.actual = actual


class InvalidVersionError(DecisionValidationError):
    """Raised when a decision version is not a semantic version."""

    def __init__(self, version: str):
        super().__init__(
            message=f"Version must be a semantic version (MAJOR.MINOR.PATCH), got {version!r}",
            field_name="version",
            error_code="D003",
        )
        self.version = version


class InvalidRuleError(DecisionValidationError):
    """Raised when a Rule structure is invalid."""

    def __init__(self, rule_id: str, reason: str):
        super().__init__(
            message=f"Invalid rule '{rule_id}': {reason}",
            field_name="rules",
            error_code="D004",
        )
        self.rule_id = rule_id
        self.reason = reason


class DuplicateRuleIdError(DecisionValidationError):
    """Raised when two rules of the same decision share an id."""

    def __init__(self, rule_id: str):
        super().__init__(
            message=f"Duplicate rule ID: '{rule_id}'",
            field_name="rules",
            error_code="D005",
        )
        self.rule_id = rule_id


class InvalidMetaError(DecisionValidationError):
    """Raised when decision meta is not a JSON-serializable mapping."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            field_name="meta",
            error_code="D006",
        )


class ImmutabilityViolationError(Exception):
    """Raised when attempting to mutate an immutable Decision."""

    def __init__(self, field_name: str):
        self.field_name = field_name
        super().__init__(f"Cannot modify Decision.{field_name}: Decision is immutable")


# =============================================================================
# Rule
# =============================================================================

@dataclass(frozen=True)
class Rule:
    """
    A pure (condition, producer, explanation) triple.

    - when(input, profile) -> bool decides whether the rule applies
    - emit(input, profile) produces the candidate output, called only on match
    - explain(input, profile) -> str justifies the match, called only on match

    Rules carry no state and must not perform I/O. The engine cannot
    enforce purity; determinism tests are the safety net.
    """
    id: str
    when: Callable[[Any, Any], bool]
    emit: Callable[[Any, Any], Any]
    explain: Callable[[Any, Any], str]

    def __post_init__(self):
        if not isinstance(self.id, str):
            raise InvalidFieldTypeError("rule.id", "str", type(self.id).__name__)
        if not self.id.strip():
            raise InvalidRuleError(self.id, "id cannot be empty")
        for name in ("when", "emit", "explain"):
            if not callable(getattr(self, name)):
                raise InvalidRuleError(self.id, f"'{name}' must be callable")

    def __repr__(self) -> str:
        return f"Rule(id={self.id!r})"


def create_rule(
    *,
    id: str,
    when: Callable[[Any, Any], bool],
    emit: Callable[[Any, Any], Any],
    explain: Callable[[Any, Any], str],
) -> Rule:
    """Create a Rule."""
    return Rule(id=id, when=when, emit=emit, explain=explain)


# === Helper Functions ===

def _coerce_rule(item: Any, index: int) -> Rule:
    if isinstance(item, Rule):
        return item
    if isinstance(item, Mapping):
        missing = [k for k in ("id", "when", "emit", "explain") if k not in item]
        if missing:
            raise InvalidRuleError(
                str(item.get("id", f"rules[{index}]")),
                f"missing key(s): {', '.join(missing)}",
            )
        return Rule(id=item["id"], when=item["when"], emit=item["emit"], explain=item["explain"])
    raise InvalidFieldTypeError(f"rules[{index}]", "Rule", type(item).__name__)


def _copy_meta(meta: Any) -> Dict[str, Any]:
    if not isinstance(meta, Mapping):
        raise InvalidMetaError(f"meta must be a mapping, got {type(meta).__name__}")
    try:
        return json.loads(json.dumps(dict(meta), sort_keys=True))
    except (TypeError, ValueError) as e:
        raise InvalidMetaError(f"meta must be JSON-serializable: {e}") from e


# =============================================================================
# Decision
# =============================================================================

class Decision:
    """
    Immutable definition of a decision.

    Example:
        decision = Decision(
            id="transaction-risk",
            version="1.0.0",
            input_schema=Transaction,
            output_schema=Risk,
            profile_schema=RiskProfile,
            rules=[
                Rule("high", when=..., emit=..., explain=...),
                Rule("low", when=..., emit=..., explain=...),
            ],
            meta={"owner": "risk-team"},
        )
    """

    __slots__ = (
        '_id',
        '_version',
        '_input_schema',
        '_output_schema',
        '_profile_schema',
        '_rules',
        '_meta',
        '_frozen',
    )

    def __init__(
        self,
        *,
        id: str,
        version: str,
        input_schema: Any,
        output_schema: Any,
        profile_schema: Any,
        rules: Iterable[Union[Rule, Mapping[str, Any]]],
        meta: Optional[Mapping[str, Any]] = None,
    ):
        """
        Create a new Decision.

        Args:
            id: Decision identifier.
            version: Semantic version of this definition.
            input_schema: Validator or pydantic-compatible type for inputs.
            output_schema: Validator or pydantic-compatible type for outputs.
            profile_schema: Validator or pydantic-compatible type for profiles.
            rules: Ordered rules (Rule instances or mappings with the same keys).
                   May be empty.
            meta: Optional free-form metadata (description, owner, tags...).

        Raises:
            MissingRequiredFieldError: If a required field is missing.
            InvalidFieldTypeError: If a field has wrong type.
            InvalidVersionError: If version is not semver.
            InvalidRuleError / DuplicateRuleIdError: If rules are invalid.
            InvalidMetaError: If meta is not JSON-serializable.
        """
        object.__setattr__(self, '_frozen', False)

        if id is None:
            raise MissingRequiredFieldError("id")
        if not isinstance(id, str):
            raise InvalidFieldTypeError("id", "str", type(id).__name__)
        if not id.strip():
            raise DecisionValidationError("id cannot be empty", field_name="id", error_code="D007")

        if version is None:
            raise MissingRequiredFieldError("version")
        if not isinstance(version, str):
            raise InvalidFieldTypeError("version", "str", type(version).__name__)
        if not _SEMVER_PATTERN.match(version):
            raise InvalidVersionError(version)

        schemas = {}
        for name, schema in (
            ("input_schema", input_schema),
            ("output_schema", output_schema),
            ("profile_schema", profile_schema),
        ):
            if schema is None:
                raise MissingRequiredFieldError(name)
            schemas[name] = as_validator(schema)

        if rules is None:
            raise MissingRequiredFieldError("rules")
        if isinstance(rules, (str, bytes, Mapping)):
            raise InvalidFieldTypeError("rules", "sequence of Rule", type(rules).__name__)
        coerced: List[Rule] = []
        seen = set()
        for i, item in enumerate(rules):
            rule = _coerce_rule(item, i)
            if rule.id in seen:
                raise DuplicateRuleIdError(rule.id)
            seen.add(rule.id)
            coerced.append(rule)

        self._id = id
        self._version = version
        self._input_schema = schemas["input_schema"]
        self._output_schema = schemas["output_schema"]
        self._profile_schema = schemas["profile_schema"]
        self._rules = tuple(coerced)
        self._meta = _copy_meta(meta) if meta is not None else None

        object.__setattr__(self, '_frozen', True)

    def __setattr__(self, name: str, value: Any) -> None:
        """Prevent mutation after construction."""
        if getattr(self, '_frozen', False):
            raise ImmutabilityViolationError(name)
        object.__setattr__(self, name, value)

    def __delattr__(self, name: str) -> None:
        """Prevent deletion of attributes."""
        raise ImmutabilityViolationError(name)

    # === Properties (read-only access) ===

    @property
    def id(self) -> str:
        return self._id

    @property
    def version(self) -> str:
        return self._version

    @property
    def input_schema(self) -> Validator:
        return self._input_schema

    @property
    def output_schema(self) -> Validator:
        return self._output_schema

    @property
    def profile_schema(self) -> Validator:
        return self._profile_schema

    @property
    def rules(self) -> Tuple[Rule, ...]:
        """Rules in declaration order (immutable tuple)."""
        return self._rules

    @property
    def meta(self) -> Optional[Dict[str, Any]]:
        """Free-form metadata (deep copy to prevent mutation)."""
        if self._meta is None:
            return None
        return json.loads(json.dumps(self._meta))

    @property
    def rule_ids(self) -> Tuple[str, ...]:
        return tuple(rule.id for rule in self._rules)

    def get_rule(self, rule_id: str) -> Optional[Rule]:
        """Look up a rule by id."""
        for rule in self._rules:
            if rule.id == rule_id:
                return rule
        return None

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self) -> str:
        return f"Decision(id={self._id!r}, version={self._version!r}, rules={len(self._rules)})"

    def __str__(self) -> str:
        return f"Decision: {self._id} v{self._version}"


def define_decision(
    *,
    id: str,
    version: str,
    input_schema: Any,
    output_schema: Any,
    profile_schema: Any,
    rules: Iterable[Union[Rule, Mapping[str, Any]]],
    meta: Optional[Mapping[str, Any]] = None,
) -> Decision:
    """Define a Decision. See Decision for argument details."""
    return Decision(
        id=id,
        version=version,
        input_schema=input_schema,
        output_schema=output_schema,
        profile_schema=profile_schema,
        rules=rules,
        meta=meta,
    )
