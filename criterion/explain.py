"""
explain.py

Criterion ExplainFormatter

Renders a Result as a human-readable report. The report is built from the
Result's own data only: no rule is re-run and the decision is never
consulted, so a Result deserialized long after the fact explains exactly
as the live one did.

Example output:

    Decision: transaction-risk v1.0.0
    Profile: us
    Status: OK
    Matched: high
    Reason: Amount 15000 exceeds threshold 10000

    Evaluation trace:
      ✓ high: Amount 15000 exceeds threshold 10000
"""

from typing import List

from criterion.result import Result

MATCHED_MARKER = "✓"
UNMATCHED_MARKER = "✗"


def format_explanation(result: Result) -> str:
    """Render result as a deterministic multi-line report."""
    meta = result.meta
    lines: List[str] = [f"Decision: {meta.decision_id} v{meta.decision_version}"]

    if meta.profile_id is not None:
        lines.append(f"Profile: {meta.profile_id}")
    lines.append(f"Status: {result.status.value}")
    lines.append(f"Matched: {meta.matched_rule if meta.matched_rule is not None else 'none'}")
    lines.append(f"Reason: {meta.explanation}")

    lines.append("")
    lines.append("Evaluation trace:")
    if not meta.evaluated_rules:
        lines.append("  (no rules evaluated)")
    for entry in meta.evaluated_rules:
        marker = MATCHED_MARKER if entry.matched else UNMATCHED_MARKER
        if entry.explanation is not None:
            lines.append(f"  {marker} {entry.rule_id}: {entry.explanation}")
        else:
            lines.append(f"  {marker} {entry.rule_id}")

    return "\n".join(lines)
