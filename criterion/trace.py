"""
trace.py

Criterion Trace Entry

A RuleTrace records one rule whose condition was checked during an
evaluation: which rule, whether it matched and, for the single matching
rule, its explanation. An evaluation's trace is an ordered tuple of these
entries and is always a prefix of the decision's rules.

Design Invariants:
- Pure data, immutable
- Only the matching entry carries an explanation
- Serializes to the wire keys ruleId / matched / explanation
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional


class TraceValidationError(Exception):
    """Raised when a trace entry cannot be constructed."""

    def __init__(self, message: str, *, error_code: str = "T000"):
        self.message = message
        self.error_code = error_code
        super().__init__(self.format())

    def format(self) -> str:
        """Format as human-readable error message."""
        return f"[{self.error_code}] Trace validation failed: {self.message}"


@dataclass(frozen=True)
class RuleTrace:
    """One checked rule in an evaluation trace."""
    rule_id: str
    matched: bool
    explanation: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.rule_id, str):
            raise TraceValidationError(
                f"rule_id must be str, got {type(self.rule_id).__name__}",
                error_code="T001",
            )
        if not isinstance(self.matched, bool):
            raise TraceValidationError(
                f"matched must be bool, got {type(self.matched).__name__}",
                error_code="T002",
            )
        if self.explanation is not None and not self.matched:
            raise TraceValidationError(
                f"unmatched rule '{self.rule_id}' cannot carry an explanation",
                error_code="T003",
            )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        result: Dict[str, Any] = {"ruleId": self.rule_id, "matched": self.matched}
        if self.explanation is not None:
            result["explanation"] = self.explanation
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RuleTrace":
        """Reconstruct from dictionary."""
        return cls(
            rule_id=data.get("ruleId"),
            matched=data.get("matched"),
            explanation=data.get("explanation"),
        )

    def __str__(self) -> str:
        marker = "✓" if self.matched else "✗"
        if self.explanation:
            return f"{marker} {self.rule_id}: {self.explanation}"
        return f"{marker} {self.rule_id}"
