"""
testing.py

Helpers for testing decisions: table-driven case checks and rule coverage.

    check = check_decision(
        decision,
        profile={"threshold": 10000},
        cases=[
            DecisionCase({"amount": 15000}, expected_rule="high"),
            DecisionCase({"amount": 500}, expected_output={"risk": "LOW"}),
        ],
        require_reachable_rules=True,
    )
    assert check.passed, check.failures

A rule counts as covered when at least one case evaluated to OK with that
rule matched.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from criterion.decision import Decision
from criterion.engine import Engine, RunOptions
from criterion.registry import ProfileRegistry
from criterion.result import Result, ResultStatus
from criterion.validation import MISSING


class FailureKind(str, Enum):
    CASE_FAILED = "case_failed"
    UNREACHABLE_RULE = "unreachable_rule"


@dataclass(frozen=True)
class DecisionCase:
    """One input with its expected outcome. Unset expectations are not checked."""
    input: Any
    name: Optional[str] = None
    profile: Any = MISSING
    expected_status: Optional[ResultStatus] = None
    expected_rule: Optional[str] = None
    expected_output: Optional[Mapping[str, Any]] = None

    @property
    def label(self) -> str:
        return self.name if self.name is not None else repr(self.input)


@dataclass(frozen=True)
class CheckFailure:
    kind: FailureKind
    message: str
    details: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DecisionCheck:
    passed: bool
    failures: Tuple[CheckFailure, ...]
    rules_covered: Tuple[str, ...]
    rules_uncovered: Tuple[str, ...]


@dataclass(frozen=True)
class CoverageReport:
    total_rules: int
    covered_rules: int
    coverage_percentage: float
    rules_covered: Tuple[str, ...]
    rules_uncovered: Tuple[str, ...]
    rule_hits: Dict[str, int]


def _expectation_failures(case: DecisionCase, result: Result) -> List[CheckFailure]:
    failures: List[CheckFailure] = []
    label = case.label

    if case.expected_status is not None and result.status != case.expected_status:
        expected = ResultStatus(case.expected_status).value
        failures.append(CheckFailure(
            FailureKind.CASE_FAILED,
            f'Case "{label}" expected status "{expected}" but got "{result.status.value}"',
            {"case": label, "expected": expected, "actual": result.status.value},
        ))

    if case.expected_rule is not None and result.meta.matched_rule != case.expected_rule:
        actual = result.meta.matched_rule or "none"
        failures.append(CheckFailure(
            FailureKind.CASE_FAILED,
            f'Case "{label}" expected rule "{case.expected_rule}" but got "{actual}"',
            {"case": label, "expected": case.expected_rule, "actual": result.meta.matched_rule},
        ))

    if case.expected_output is not None:
        if not isinstance(result.data, Mapping):
            failures.append(CheckFailure(
                FailureKind.CASE_FAILED,
                f'Case "{label}" expected output but got no data (status {result.status.value})',
                {"case": label, "expected": dict(case.expected_output), "actual": result.data},
            ))
        else:
            for key, value in case.expected_output.items():
                actual = result.data.get(key, MISSING)
                if actual != value:
                    failures.append(CheckFailure(
                        FailureKind.CASE_FAILED,
                        f'Case "{label}" expected output.{key} to be {value!r} but got {actual!r}',
                        {"case": label, "expected": {key: value}, "actual": {key: actual}},
                    ))

    return failures


def check_decision(
    decision: Decision,
    *,
    cases: Sequence[DecisionCase],
    profile: Any = MISSING,
    registry: Optional[ProfileRegistry] = None,
    require_reachable_rules: bool = False,
    engine: Optional[Engine] = None,
) -> DecisionCheck:
    """
    Run every case through the engine and compare with its expectations.

    Args:
        decision: Decision under test.
        cases: Cases to run, in order.
        profile: Default profile for cases that do not set their own.
        registry: Registry for profiles given by id.
        require_reachable_rules: Report rules no case matched as failures.
        engine: Engine to use; a fresh one is built when omitted.
    """
    engine = engine or Engine()
    hits = {rule.id: 0 for rule in decision.rules}
    failures: List[CheckFailure] = []

    for case in cases:
        case_profile = profile if case.profile is MISSING else case.profile
        result = engine.run(decision, case.input, RunOptions(profile=case_profile), registry)
        if result.status is ResultStatus.OK and result.meta.matched_rule in hits:
            hits[result.meta.matched_rule] += 1
        failures.extend(_expectation_failures(case, result))

    covered = tuple(rule_id for rule_id, n in hits.items() if n > 0)
    uncovered = tuple(rule_id for rule_id, n in hits.items() if n == 0)

    if require_reachable_rules:
        for rule_id in uncovered:
            failures.append(CheckFailure(
                FailureKind.UNREACHABLE_RULE,
                f'Rule "{rule_id}" was never matched by any case',
                {"rule_id": rule_id},
            ))

    return DecisionCheck(
        passed=not failures,
        failures=tuple(failures),
        rules_covered=covered,
        rules_uncovered=uncovered,
    )


def rule_coverage(
    decision: Decision,
    *,
    inputs: Iterable[Any],
    profile: Any,
    registry: Optional[ProfileRegistry] = None,
    engine: Optional[Engine] = None,
) -> CoverageReport:
    """Count how often each rule matched (with status OK) across inputs."""
    engine = engine or Engine()
    hits = {rule.id: 0 for rule in decision.rules}
    options = RunOptions(profile=profile)

    for input_value in inputs:
        result = engine.run(decision, input_value, options, registry)
        if result.status is ResultStatus.OK and result.meta.matched_rule in hits:
            hits[result.meta.matched_rule] += 1

    total = len(hits)
    covered = tuple(rule_id for rule_id, n in hits.items() if n > 0)
    uncovered = tuple(rule_id for rule_id, n in hits.items() if n == 0)
    percentage = (len(covered) / total) * 100 if total else 100.0

    return CoverageReport(
        total_rules=total,
        covered_rules=len(covered),
        coverage_percentage=percentage,
        rules_covered=covered,
        rules_uncovered=uncovered,
        rule_hits=hits,
    )


def format_coverage_report(report: CoverageReport) -> str:
    lines = ["=== Rule Coverage Report ===", ""]
    lines.append(
        f"Coverage: {report.covered_rules}/{report.total_rules} rules "
        f"({report.coverage_percentage:.1f}%)"
    )

    if report.rules_covered:
        lines.append("")
        lines.append("Covered rules:")
        for rule_id in report.rules_covered:
            lines.append(f"  ✓ {rule_id} ({report.rule_hits[rule_id]} hits)")

    if report.rules_uncovered:
        lines.append("")
        lines.append("Uncovered rules:")
        for rule_id in report.rules_uncovered:
            lines.append(f"  ✗ {rule_id}")

    return "\n".join(lines)


def meets_coverage_threshold(report: CoverageReport, threshold: float) -> bool:
    """True when coverage_percentage is at least threshold (0-100)."""
    return report.coverage_percentage >= threshold
