"""
transaction_limit.py

Pattern: Threshold
Decision: Transaction Limit

Compare a numeric value against profile boundaries to permit, flag or block.

Run with: python -m examples.transaction_limit
"""

from pydantic import BaseModel, Field

from criterion import Engine, RunOptions, define_decision


class Transaction(BaseModel):
    amount: float = Field(gt=0)
    currency: str = Field(min_length=3, max_length=3)


class LimitProfile(BaseModel):
    max_amount: float = Field(gt=0)
    warning_threshold: float = Field(gt=0)


class LimitOutcome(BaseModel):
    allowed: bool
    warning: bool
    reason: str


transaction_limit = define_decision(
    id="transaction-limit",
    version="1.0.0",
    input_schema=Transaction,
    output_schema=LimitOutcome,
    profile_schema=LimitProfile,
    meta={"description": "Blocks or flags large transactions", "tags": ["threshold"]},
    rules=[
        {
            "id": "exceeds-max",
            "when": lambda tx, p: tx.amount > p.max_amount,
            "emit": lambda tx, p: {
                "allowed": False,
                "warning": False,
                "reason": "Transaction exceeds maximum limit",
            },
            "explain": lambda tx, p: (
                f"Amount {tx.currency} {tx.amount:g} exceeds maximum {tx.currency} {p.max_amount:g}"
            ),
        },
        {
            "id": "above-warning",
            "when": lambda tx, p: tx.amount > p.warning_threshold,
            "emit": lambda tx, p: {
                "allowed": True,
                "warning": True,
                "reason": "Transaction allowed but flagged for review",
            },
            "explain": lambda tx, p: (
                f"Amount {tx.currency} {tx.amount:g} above warning threshold "
                f"{tx.currency} {p.warning_threshold:g}"
            ),
        },
        {
            "id": "normal",
            "when": lambda tx, p: True,
            "emit": lambda tx, p: {
                "allowed": True,
                "warning": False,
                "reason": "Transaction within normal limits",
            },
            "explain": lambda tx, p: (
                f"Amount {tx.currency} {tx.amount:g} within limits (max: {tx.currency} {p.max_amount:g})"
            ),
        },
    ],
)

DEFAULT_PROFILE = {"max_amount": 10000, "warning_threshold": 5000}


def main() -> None:
    engine = Engine()
    options = RunOptions(profile=DEFAULT_PROFILE)
    for tx in (
        {"amount": 100, "currency": "USD"},
        {"amount": 7500, "currency": "USD"},
        {"amount": 15000, "currency": "USD"},
    ):
        result = engine.run(transaction_limit, tx, options)
        print(engine.explain(result))
        print()


if __name__ == "__main__":
    main()
