"""
test_engine.py

End-to-end tests for the evaluation pipeline.

Tests prove:
- Same decision, input and profile give the same Result
- Falsy but schema-valid inputs are evaluated
- Profile problems and invalid inputs short-circuit before any rule runs
- Profile failures are reported before input failures
- Emitted output is validated; failures never surface as OK
- Rule exceptions propagate to the caller
- Evaluations are logged only when enabled
"""

from datetime import datetime, timezone
from typing import Optional

import pytest
from pydantic import BaseModel
from structlog.testing import capture_logs

from criterion import (
    Engine,
    EngineSettings,
    ProfileRegistry,
    ResultStatus,
    RunOptions,
    create_rule,
    define_decision,
)
from criterion.engine import _format_timestamp
from criterion.validation import MISSING

FIXED_TIME = datetime(2026, 1, 15, 9, 30, 0, 123456, tzinfo=timezone.utc)


class Transaction(BaseModel):
    amount: float


class RiskProfile(BaseModel):
    threshold: float


class Risk(BaseModel):
    risk: str


class Counter(BaseModel):
    count: int


class Toggle(BaseModel):
    enabled: bool


class Label(BaseModel):
    text: str


class Empty(BaseModel):
    pass


class Outcome(BaseModel):
    outcome: str
    note: Optional[str] = None


def _risk_decision(low_emit=None):
    return define_decision(
        id="transaction-risk",
        version="1.0.0",
        input_schema=Transaction,
        output_schema=Risk,
        profile_schema=RiskProfile,
        rules=[
            create_rule(
                id="high",
                when=lambda tx, p: tx.amount > p.threshold,
                emit=lambda tx, p: {"risk": "HIGH"},
                explain=lambda tx, p: "high",
            ),
            create_rule(
                id="low",
                when=lambda tx, p: True,
                emit=low_emit or (lambda tx, p: {"risk": "LOW"}),
                explain=lambda tx, p: "low",
            ),
        ],
    )


def _accept_all(input_schema, field):
    return define_decision(
        id=f"accept-{field}",
        version="1.0.0",
        input_schema=input_schema,
        output_schema=Outcome,
        profile_schema=Empty,
        rules=[
            create_rule(
                id="seen",
                when=lambda i, p: True,
                emit=lambda i, p: {"outcome": repr(getattr(i, field))},
                explain=lambda i, p: "accepted",
            ),
        ],
    )


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def engine() -> Engine:
    return Engine(EngineSettings(), clock=lambda: FIXED_TIME)


@pytest.fixture
def decision():
    return _risk_decision()


@pytest.fixture
def registry() -> ProfileRegistry:
    registry = ProfileRegistry()
    registry.register("us", {"threshold": 10000})
    return registry


# =============================================================================
# SECTION 1: Happy path
# =============================================================================

class TestEvaluation:

    def test_high_risk(self, engine, decision):
        result = engine.run(decision, {"amount": 15000}, {"profile": {"threshold": 10000}})
        assert result.status is ResultStatus.OK
        assert result.data == {"risk": "HIGH"}
        assert result.meta.matched_rule == "high"
        assert result.meta.explanation == "high"
        assert [t.to_dict() for t in result.meta.evaluated_rules] == [
            {"ruleId": "high", "matched": True, "explanation": "high"},
        ]

    def test_low_risk(self, engine, decision):
        result = engine.run(decision, {"amount": 500}, {"profile": {"threshold": 10000}})
        assert result.status is ResultStatus.OK
        assert result.data == {"risk": "LOW"}
        assert result.meta.matched_rule == "low"
        assert [t.to_dict() for t in result.meta.evaluated_rules] == [
            {"ruleId": "high", "matched": False},
            {"ruleId": "low", "matched": True, "explanation": "low"},
        ]

    def test_meta_identifies_decision(self, engine, decision):
        result = engine.run(decision, {"amount": 1}, RunOptions(profile={"threshold": 10}))
        assert result.meta.decision_id == "transaction-risk"
        assert result.meta.decision_version == "1.0.0"
        assert result.meta.evaluated_at == "2026-01-15T09:30:00.123Z"
        assert result.meta.profile_id is None

    def test_profile_from_registry(self, engine, decision, registry):
        result = engine.run(decision, {"amount": 15000}, {"profile": "us"}, registry)
        assert result.status is ResultStatus.OK
        assert result.data == {"risk": "HIGH"}
        assert result.meta.profile_id == "us"

    def test_registry_ignored_for_inline_profile(self, engine, decision, registry):
        result = engine.run(decision, {"amount": 500}, {"profile": {"threshold": 100}}, registry)
        assert result.data == {"risk": "HIGH"}
        assert result.meta.profile_id is None

    def test_no_match(self, engine):
        decision = define_decision(
            id="never",
            version="1.0.0",
            input_schema=Transaction,
            output_schema=Risk,
            profile_schema=RiskProfile,
            rules=[
                create_rule(id=name, when=lambda i, p: False, emit=lambda i, p: {}, explain=lambda i, p: "")
                for name in ("a", "b", "c")
            ],
        )
        result = engine.run(decision, {"amount": 1}, {"profile": {"threshold": 1}})
        assert result.status is ResultStatus.NO_MATCH
        assert result.data is None
        assert result.meta.matched_rule is None
        assert result.meta.explanation == "No rule matched the given input"
        assert [t.rule_id for t in result.meta.evaluated_rules] == ["a", "b", "c"]

    def test_zero_rules_is_no_match(self, engine):
        decision = define_decision(
            id="empty",
            version="1.0.0",
            input_schema=Transaction,
            output_schema=Risk,
            profile_schema=RiskProfile,
            rules=[],
        )
        result = engine.run(decision, {"amount": 1}, {"profile": {"threshold": 1}})
        assert result.status is ResultStatus.NO_MATCH
        assert result.meta.evaluated_rules == ()

    def test_output_is_validated_value(self, engine):
        decision = define_decision(
            id="coerce",
            version="1.0.0",
            input_schema=Transaction,
            output_schema=Outcome,
            profile_schema=Empty,
            rules=[
                create_rule(
                    id="only",
                    when=lambda i, p: True,
                    emit=lambda i, p: {"outcome": "done"},
                    explain=lambda i, p: "done",
                ),
            ],
        )
        result = engine.run(decision, {"amount": 1}, {"profile": {}})
        assert result.data == {"outcome": "done", "note": None}


# =============================================================================
# SECTION 2: Falsy values
# =============================================================================

class TestFalsyInputs:

    def test_zero(self, engine):
        result = engine.run(_accept_all(Counter, "count"), {"count": 0}, {"profile": {}})
        assert result.status is ResultStatus.OK
        assert result.data["outcome"] == "0"

    def test_false(self, engine):
        result = engine.run(_accept_all(Toggle, "enabled"), {"enabled": False}, {"profile": {}})
        assert result.status is ResultStatus.OK
        assert result.data["outcome"] == "False"

    def test_empty_string(self, engine):
        result = engine.run(_accept_all(Label, "text"), {"text": ""}, {"profile": {}})
        assert result.status is ResultStatus.OK
        assert result.data["outcome"] == "''"

    def test_bare_falsy_input(self, engine):
        decision = define_decision(
            id="bare",
            version="1.0.0",
            input_schema=int,
            output_schema=int,
            profile_schema=Empty,
            rules=[create_rule(id="echo", when=lambda i, p: True, emit=lambda i, p: i, explain=lambda i, p: "echo")],
        )
        result = engine.run(decision, 0, {"profile": {}})
        assert result.status is ResultStatus.OK
        assert result.data == 0


# =============================================================================
# SECTION 3: Invalid input and profile
# =============================================================================

class TestInvalidInput:

    def _spy_decision(self, calls):
        def when(i, p):
            calls.append("when")
            return True

        return define_decision(
            id="spy",
            version="1.0.0",
            input_schema=Transaction,
            output_schema=Risk,
            profile_schema=RiskProfile,
            rules=[create_rule(id="any", when=when, emit=lambda i, p: {"risk": "X"}, explain=lambda i, p: "x")],
        )

    def test_invalid_input(self, engine):
        calls = []
        result = engine.run(self._spy_decision(calls), {"amount": "lots"}, {"profile": {"threshold": 1}})
        assert result.status is ResultStatus.INVALID_INPUT
        assert result.data is None
        assert result.meta.explanation.startswith("Input validation failed: amount: ")
        assert result.meta.evaluated_rules == ()
        assert calls == []

    def test_missing_input(self, engine, decision):
        result = engine.run(decision, MISSING, {"profile": {"threshold": 1}})
        assert result.status is ResultStatus.INVALID_INPUT
        assert result.meta.explanation == "Input validation failed: value is required"

    def test_invalid_profile(self, engine):
        calls = []
        result = engine.run(self._spy_decision(calls), {"amount": 1}, {"profile": {"threshold": "high"}})
        assert result.status is ResultStatus.INVALID_INPUT
        assert result.meta.explanation.startswith("Profile validation failed: threshold: ")
        assert calls == []

    def test_profile_failure_reported_before_input_failure(self, engine, decision):
        result = engine.run(decision, {"amount": "lots"}, {"profile": {}})
        assert result.meta.explanation == "Profile validation failed: threshold: Field required"

    def test_no_profile_supplied(self, engine, decision):
        for options in (None, {}, RunOptions()):
            result = engine.run(decision, {"amount": 1}, options)
            assert result.status is ResultStatus.INVALID_INPUT
            assert result.meta.explanation == "No profile supplied"

    def test_profile_id_without_registry(self, engine, decision):
        result = engine.run(decision, {"amount": 1}, {"profile": "us"})
        assert result.status is ResultStatus.INVALID_INPUT
        assert result.meta.explanation == "Profile ID 'us' provided but no registry supplied"
        assert result.meta.profile_id is None

    def test_unknown_profile_id(self, engine, decision, registry):
        calls = []
        result = engine.run(self._spy_decision(calls), {"amount": 1}, {"profile": "jp"}, registry)
        assert result.status is ResultStatus.INVALID_INPUT
        assert result.meta.explanation == "Profile not found: jp"
        assert calls == []

    def test_invalid_registered_profile_keeps_profile_id(self, engine, decision):
        registry = ProfileRegistry({"broken": {"threshold": "n/a"}})
        result = engine.run(decision, {"amount": 1}, {"profile": "broken"}, registry)
        assert result.status is ResultStatus.INVALID_INPUT
        assert result.meta.profile_id == "broken"


# =============================================================================
# SECTION 4: Invalid output
# =============================================================================

class TestInvalidOutput:

    def test_bad_emit_is_invalid_output(self, engine):
        decision = _risk_decision(low_emit=lambda tx, p: {"level": "LOW"})
        result = engine.run(decision, {"amount": 1}, {"profile": {"threshold": 10}})
        assert result.status is ResultStatus.INVALID_OUTPUT
        assert result.data is None
        assert result.meta.matched_rule is None
        assert result.meta.explanation == "Output validation failed in rule 'low': risk: Field required"
        assert [t.rule_id for t in result.meta.evaluated_rules] == ["high", "low"]

    def test_emit_only_called_for_match(self, engine):
        emitted = []

        def emit(tx, p):
            emitted.append(tx.amount)
            return {"risk": "LOW"}

        engine.run(_risk_decision(low_emit=emit), {"amount": 99999}, {"profile": {"threshold": 10}})
        assert emitted == []


# =============================================================================
# SECTION 5: Defects and arguments
# =============================================================================

class TestDefects:

    def test_rule_exception_propagates(self, engine):
        def explode(tx, p):
            raise RuntimeError("rule bug")

        decision = _risk_decision(low_emit=explode)
        with pytest.raises(RuntimeError, match="rule bug"):
            engine.run(decision, {"amount": 1}, {"profile": {"threshold": 10}})

    def test_non_decision_rejected(self, engine):
        with pytest.raises(TypeError):
            engine.run({"id": "fake"}, {"amount": 1}, {"profile": {}})

    def test_bad_options_rejected(self, engine, decision):
        with pytest.raises(TypeError):
            engine.run(decision, {"amount": 1}, "us")


# =============================================================================
# SECTION 6: Determinism
# =============================================================================

class TestDeterminism:

    def test_same_call_same_result(self, engine, decision):
        first = engine.run(decision, {"amount": 15000}, {"profile": {"threshold": 10000}})
        second = engine.run(decision, {"amount": 15000}, {"profile": {"threshold": 10000}})
        assert first == second
        assert first.to_json() == second.to_json()

    def test_results_are_independent(self, engine, decision):
        first = engine.run(decision, {"amount": 15000}, {"profile": {"threshold": 10000}})
        engine.run(decision, {"amount": 5}, {"profile": {"threshold": 10000}})
        assert first.data == {"risk": "HIGH"}

    def test_input_not_mutated(self, engine, decision):
        payload = {"amount": 15000}
        profile = {"threshold": 10000}
        engine.run(decision, payload, {"profile": profile})
        assert payload == {"amount": 15000}
        assert profile == {"threshold": 10000}

    def test_explain_is_stable(self, engine, decision):
        result = engine.run(decision, {"amount": 500}, {"profile": {"threshold": 10000}})
        assert engine.explain(result) == engine.explain(result)
        assert "Matched: low" in engine.explain(result)


class TestTimestamp:

    def test_naive_datetime_treated_as_utc(self):
        assert _format_timestamp(datetime(2026, 1, 1, 12, 0, 0)) == "2026-01-01T12:00:00.000Z"

    def test_default_clock_is_utc(self, decision):
        result = Engine().run(decision, {"amount": 1}, {"profile": {"threshold": 10}})
        assert result.meta.evaluated_at.endswith("Z")


# =============================================================================
# SECTION 7: Logging
# =============================================================================

class TestEvaluationLogging:

    def test_silent_by_default(self, engine, decision):
        with capture_logs() as logs:
            engine.run(decision, {"amount": 1}, {"profile": {"threshold": 10}})
        assert logs == []

    def test_logs_when_enabled(self, decision, registry):
        engine = Engine(EngineSettings(log_evaluations=True), clock=lambda: FIXED_TIME)
        with capture_logs() as logs:
            engine.run(decision, {"amount": 15000}, {"profile": "us"}, registry)
        assert logs == [{
            "event": "decision_evaluated",
            "log_level": "debug",
            "decision_id": "transaction-risk",
            "decision_version": "1.0.0",
            "status": "OK",
            "matched_rule": "high",
            "rules_evaluated": 1,
            "profile_id": "us",
        }]
