"""
Criterion: Deterministic Decision Engine
========================================

Criterion evaluates business decisions declared as data: typed input,
output and profile contracts plus an ordered list of pure rules. The first
matching rule wins, its output is validated, and every evaluation returns
a Result carrying a status, the output and a full audit trail.

Stability Guarantees (v1.x)
---------------------------
Everything exported in ``__all__`` is public and follows semantic
versioning. Symbols prefixed with an underscore are internal.

Example
-------
::

    from pydantic import BaseModel
    from criterion import Engine, create_rule, define_decision

    class Transaction(BaseModel):
        amount: float

    class RiskProfile(BaseModel):
        threshold: float

    class Risk(BaseModel):
        risk: str

    decision = define_decision(
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
                explain=lambda tx, p: f"Amount {tx.amount} exceeds {p.threshold}",
            ),
            create_rule(
                id="low",
                when=lambda tx, p: True,
                emit=lambda tx, p: {"risk": "LOW"},
                explain=lambda tx, p: "Default",
            ),
        ],
    )

    engine = Engine()
    result = engine.run(decision, {"amount": 15000}, {"profile": {"threshold": 10000}})
    print(engine.explain(result))
"""

__version__ = "1.0.0"

__all__ = [
    # --- Package Metadata ---
    "__version__",

    # --- Validation ---
    "MISSING",
    "Valid",
    "Invalid",
    "ValidationResult",
    "Validator",
    "PydanticValidator",
    "as_validator",
    "validate",

    # --- Decision Primitive ---
    "Decision",
    "Rule",
    "define_decision",
    "create_rule",
    "DecisionValidationError",
    "MissingRequiredFieldError",
    "InvalidFieldTypeError",
    "InvalidVersionError",
    "InvalidRuleError",
    "DuplicateRuleIdError",
    "InvalidMetaError",
    "ImmutabilityViolationError",

    # --- Profiles ---
    "ProfileRegistry",
    "create_profile_registry",
    "RegistryError",
    "InvalidProfileIdError",
    "ResolvedProfile",
    "ProfileResolutionError",
    "resolve_profile",

    # --- Evaluation ---
    "RuleTrace",
    "RuleEvaluation",
    "RuleContractError",
    "evaluate_rules",

    # --- Result ---
    "Result",
    "ResultMeta",
    "ResultStatus",
    "ResultBuilder",

    # --- Engine ---
    "Engine",
    "RunOptions",
    "EngineSettings",
    "format_explanation",

    # --- Schema Export ---
    "DecisionSchema",
    "SchemaExportError",
    "to_json_schema",
    "extract_decision_schema",
]

from criterion.config import EngineSettings
from criterion.decision import (
    Decision,
    DecisionValidationError,
    DuplicateRuleIdError,
    ImmutabilityViolationError,
    InvalidFieldTypeError,
    InvalidMetaError,
    InvalidRuleError,
    InvalidVersionError,
    MissingRequiredFieldError,
    Rule,
    create_rule,
    define_decision,
)
from criterion.engine import Engine, RunOptions
from criterion.evaluator import RuleContractError, RuleEvaluation, evaluate_rules
from criterion.explain import format_explanation
from criterion.profile import ProfileResolutionError, ResolvedProfile, resolve_profile
from criterion.registry import (
    InvalidProfileIdError,
    ProfileRegistry,
    RegistryError,
    create_profile_registry,
)
from criterion.result import Result, ResultBuilder, ResultMeta, ResultStatus
from criterion.schema import (
    DecisionSchema,
    SchemaExportError,
    extract_decision_schema,
    to_json_schema,
)
from criterion.trace import RuleTrace
from criterion.validation import (
    MISSING,
    Invalid,
    PydanticValidator,
    Valid,
    ValidationResult,
    Validator,
    as_validator,
    validate,
)

# criterion.testing (decision test helpers) and criterion.logging
# (configure_logging) are imported explicitly by the code that needs them.
