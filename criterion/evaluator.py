"""
evaluator.py

Criterion RuleEvaluator: first-match rule evaluation

Walks a decision's rules in declaration order and stops at the first rule
whose condition holds.

    for each rule, in order:
        matched = rule.when(input, profile)      # always recorded
        if matched:
            explanation = rule.explain(input, profile)
            stop                                  # later rules never run

Design Invariants:
- Rules after the first match are not invoked at all
- Only the matching rule's explain() is called
- The trace is a prefix of the rule list, one entry per when() call
- Worst case (no match) is O(rules): every condition is checked
- Exceptions raised by rule functions propagate to the caller untouched;
  they are defects in the rule definition, not evaluation outcomes
"""

from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple

from criterion.decision import Rule
from criterion.trace import RuleTrace


class RuleContractError(TypeError):
    """Raised when a rule function returns a value of the wrong type."""

    def __init__(self, rule_id: str, function: str, expected: str, actual: str):
        self.rule_id = rule_id
        self.function = function
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Rule '{rule_id}': {function}() must return {expected}, got {actual}"
        )


@dataclass(frozen=True)
class RuleEvaluation:
    """Outcome of walking the rule list."""
    matched: Optional[Rule]
    trace: Tuple[RuleTrace, ...]
    explanation: Optional[str] = None

    @property
    def is_match(self) -> bool:
        return self.matched is not None


def evaluate_rules(
    rules: Sequence[Rule],
    input_value: Any,
    profile: Any,
) -> RuleEvaluation:
    """
    Evaluate rules in order, short-circuiting at the first match.

    Args:
        rules: Ordered rules of a decision.
        input_value: Validated input.
        profile: Validated profile.

    Returns:
        RuleEvaluation with the matching rule (or None), the trace and the
        matching rule's explanation.

    Raises:
        RuleContractError: If when() returns a non-bool or explain() a non-str.
        Any exception raised by a rule function.
    """
    trace: List[RuleTrace] = []

    for rule in rules:
        matched = rule.when(input_value, profile)
        if not isinstance(matched, bool):
            raise RuleContractError(rule.id, "when", "bool", type(matched).__name__)

        if not matched:
            trace.append(RuleTrace(rule_id=rule.id, matched=False))
            continue

        explanation = rule.explain(input_value, profile)
        if not isinstance(explanation, str):
            raise RuleContractError(rule.id, "explain", "str", type(explanation).__name__)

        trace.append(RuleTrace(rule_id=rule.id, matched=True, explanation=explanation))
        return RuleEvaluation(matched=rule, trace=tuple(trace), explanation=explanation)

    return RuleEvaluation(matched=None, trace=tuple(trace))
