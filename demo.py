"""
demo.py

Minimal demo for the Criterion engine.
- Declares a transaction-risk decision
- Evaluates it with an inline profile and a registered profile
- Prints the Result as JSON and as an explanation report
"""

from pydantic import BaseModel

from criterion import Engine, EngineSettings, ProfileRegistry, RunOptions, create_rule, define_decision
from criterion.logging import configure_logging


class Transaction(BaseModel):
    amount: float


class RiskProfile(BaseModel):
    threshold: float


class Risk(BaseModel):
    risk: str


transaction_risk = define_decision(
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
            explain=lambda tx, p: f"Amount {tx.amount:g} exceeds threshold {p.threshold:g}",
        ),
        create_rule(
            id="low",
            when=lambda tx, p: True,
            emit=lambda tx, p: {"risk": "LOW"},
            explain=lambda tx, p: f"Amount {tx.amount:g} within threshold {p.threshold:g}",
        ),
    ],
)


def main():
    settings = EngineSettings(log_evaluations=True, log_level="debug", log_json=False)
    configure_logging(settings=settings)
    engine = Engine(settings)

    # --- Inline profile ---
    result = engine.run(transaction_risk, {"amount": 15000}, RunOptions(profile={"threshold": 10000}))
    print("\nResult:")
    print(result.to_json(indent=2))

    # --- Registered profile ---
    registry = ProfileRegistry()
    registry.register("us", {"threshold": 10000})
    result = engine.run(transaction_risk, {"amount": 500}, RunOptions(profile="us"), registry)
    print("\nExplanation:")
    print(engine.explain(result))


if __name__ == "__main__":
    main()
