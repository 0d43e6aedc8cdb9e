"""
result.py

Criterion Result: the single return value of an evaluation

A Result carries a status, the validated output (only on OK) and the audit
metadata needed to explain the outcome after the fact. It is plain data:
no callables, timestamps as ISO-8601 strings, output rendered to
JSON-compatible values, so adapters can re-serialize it as-is.

Design Invariants:
- Created fresh per evaluation, never retained or mutated by the engine
- data is None unless status is OK
- matched_rule is present only on OK
- profile_id is present only when the profile came from a registry
- Deterministic serialization (sorted keys)
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Tuple

from pydantic_core import to_jsonable_python

from criterion.trace import RuleTrace


class ResultStatus(str, Enum):
    """
    Outcome of an evaluation.

    - OK: a rule matched and its output passed the output schema
    - NO_MATCH: no rule matched (a valid terminal outcome)
    - INVALID_INPUT: profile unresolved or profile/input failed validation
    - INVALID_OUTPUT: the matching rule emitted an output that failed
      validation (a defect in the rule, not a business outcome)
    """
    OK = "OK"
    NO_MATCH = "NO_MATCH"
    INVALID_INPUT = "INVALID_INPUT"
    INVALID_OUTPUT = "INVALID_OUTPUT"

    def __str__(self) -> str:
        return self.value


NO_MATCH_EXPLANATION = "No rule matched the given input"


def to_plain(value: Any) -> Any:
    """Render a validated value (models, dataclasses, dates...) as JSON-compatible data."""
    return to_jsonable_python(value)


@dataclass(frozen=True)
class ResultMeta:
    """Audit metadata of a Result."""
    decision_id: str
    decision_version: str
    evaluated_rules: Tuple[RuleTrace, ...]
    explanation: str
    evaluated_at: str
    profile_id: Optional[str] = None
    matched_rule: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary using the wire (camelCase) keys."""
        result: Dict[str, Any] = {
            "decisionId": self.decision_id,
            "decisionVersion": self.decision_version,
            "evaluatedAt": self.evaluated_at,
            "evaluatedRules": [entry.to_dict() for entry in self.evaluated_rules],
            "explanation": self.explanation,
        }
        if self.profile_id is not None:
            result["profileId"] = self.profile_id
        if self.matched_rule is not None:
            result["matchedRule"] = self.matched_rule
        return dict(sorted(result.items()))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ResultMeta":
        """Reconstruct from dictionary."""
        return cls(
            decision_id=data["decisionId"],
            decision_version=data["decisionVersion"],
            evaluated_rules=tuple(
                RuleTrace.from_dict(entry) for entry in data.get("evaluatedRules", [])
            ),
            explanation=data.get("explanation", ""),
            evaluated_at=data["evaluatedAt"],
            profile_id=data.get("profileId"),
            matched_rule=data.get("matchedRule"),
        )


@dataclass(frozen=True)
class Result:
    """
    Outcome of one evaluation.

    Example:
        result = engine.run(decision, {"amount": 15000}, {"profile": {"threshold": 10000}})
        result.status               # ResultStatus.OK
        result.data                 # {"risk": "HIGH"}
        result.meta.matched_rule    # "high"
    """
    status: ResultStatus
    data: Any
    meta: ResultMeta

    @property
    def ok(self) -> bool:
        return self.status is ResultStatus.OK

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "data": self.data,
            "meta": self.meta.to_dict(),
            "status": self.status.value,
        }

    def to_json(self, *, indent: Optional[int] = None) -> str:
        """
        Serialize to JSON string.

        Keys are sorted at all levels; identical results give identical JSON.
        """
        return json.dumps(
            self.to_dict(),
            sort_keys=True,
            ensure_ascii=False,
            indent=indent,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Result":
        """Reconstruct a Result from its dictionary form."""
        return cls(
            status=ResultStatus(data["status"]),
            data=data.get("data"),
            meta=ResultMeta.from_dict(data["meta"]),
        )

    @classmethod
    def from_json(cls, json_str: str) -> "Result":
        return cls.from_dict(json.loads(json_str))

    def __repr__(self) -> str:
        return (
            f"Result(status={self.status.value}, "
            f"decision={self.meta.decision_id!r}, "
            f"matched_rule={self.meta.matched_rule!r})"
        )


@dataclass(frozen=True)
class ResultBuilder:
    """
    Assembles Results for a single evaluation.

    Holds the audit fields common to every outcome of one run (decision
    identity, timestamp, registry profile id) so each pipeline exit only
    supplies what differs.
    """
    decision_id: str
    decision_version: str
    evaluated_at: str
    profile_id: Optional[str] = None
    trace: Tuple[RuleTrace, ...] = field(default=())

    def with_profile_id(self, profile_id: Optional[str]) -> "ResultBuilder":
        return ResultBuilder(
            decision_id=self.decision_id,
            decision_version=self.decision_version,
            evaluated_at=self.evaluated_at,
            profile_id=profile_id,
            trace=self.trace,
        )

    def with_trace(self, trace: Sequence[RuleTrace]) -> "ResultBuilder":
        return ResultBuilder(
            decision_id=self.decision_id,
            decision_version=self.decision_version,
            evaluated_at=self.evaluated_at,
            profile_id=self.profile_id,
            trace=tuple(trace),
        )

    def _meta(self, explanation: str, matched_rule: Optional[str] = None) -> ResultMeta:
        return ResultMeta(
            decision_id=self.decision_id,
            decision_version=self.decision_version,
            evaluated_rules=self.trace,
            explanation=explanation,
            evaluated_at=self.evaluated_at,
            profile_id=self.profile_id,
            matched_rule=matched_rule,
        )

    def invalid_input(self, explanation: str) -> Result:
        return Result(ResultStatus.INVALID_INPUT, None, self._meta(explanation))

    def no_match(self) -> Result:
        return Result(ResultStatus.NO_MATCH, None, self._meta(NO_MATCH_EXPLANATION))

    def invalid_output(self, rule_id: str, error: str) -> Result:
        return Result(
            ResultStatus.INVALID_OUTPUT,
            None,
            self._meta(f"Output validation failed in rule '{rule_id}': {error}"),
        )

    def ok(self, rule_id: str, data: Any, explanation: str) -> Result:
        return Result(
            ResultStatus.OK,
            to_plain(data),
            self._meta(explanation, matched_rule=rule_id),
        )
