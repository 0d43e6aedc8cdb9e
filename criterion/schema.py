"""
schema.py

JSON Schema export for decision contracts.

Lets external tooling (documentation, form builders, API gateways)
discover what a decision accepts and returns without importing the Python
types. Only pydantic-backed validators, or validators exposing their own
json_schema() method, can be exported.
"""

from dataclasses import dataclass
from typing import Any, Dict

from criterion.decision import Decision
from criterion.validation import PydanticValidator, Validator


class SchemaExportError(TypeError):
    """Raised when a validator cannot describe itself as JSON Schema."""

    def __init__(self, validator: Any):
        self.validator = validator
        super().__init__(
            f"Cannot export JSON Schema from {type(validator).__name__}: "
            f"validator has no json_schema() method"
        )


@dataclass(frozen=True)
class DecisionSchema:
    """JSON Schemas of a decision's three contracts."""
    id: str
    version: str
    input_schema: Dict[str, Any]
    output_schema: Dict[str, Any]
    profile_schema: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "version": self.version,
            "inputSchema": self.input_schema,
            "outputSchema": self.output_schema,
            "profileSchema": self.profile_schema,
        }


def to_json_schema(validator: Validator) -> Dict[str, Any]:
    """
    Return the JSON Schema of a validator.

    Example:
        class Order(BaseModel):
            amount: float

        to_json_schema(PydanticValidator(Order))
        # {"title": "Order", "type": "object",
        #  "properties": {"amount": {"title": "Amount", "type": "number"}},
        #  "required": ["amount"]}
    """
    if isinstance(validator, PydanticValidator):
        return validator.json_schema()
    export = getattr(validator, "json_schema", None)
    if callable(export):
        return export()
    raise SchemaExportError(validator)


def extract_decision_schema(decision: Decision) -> DecisionSchema:
    """Collect the JSON Schemas of a decision's input, output and profile."""
    return DecisionSchema(
        id=decision.id,
        version=decision.version,
        input_schema=to_json_schema(decision.input_schema),
        output_schema=to_json_schema(decision.output_schema),
        profile_schema=to_json_schema(decision.profile_schema),
    )
