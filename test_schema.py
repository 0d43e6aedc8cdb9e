"""
test_schema.py

Tests for JSON Schema export of decision contracts.

Tests prove:
- Pydantic-backed contracts export their JSON Schema
- Custom validators export when they provide json_schema()
- Validators without a schema are reported, not guessed
"""

import pytest
from pydantic import BaseModel

from criterion import create_rule, define_decision
from criterion.schema import (
    DecisionSchema,
    SchemaExportError,
    extract_decision_schema,
    to_json_schema,
)
from criterion.validation import Invalid, PydanticValidator, Valid


class Order(BaseModel):
    amount: float


class Policy(BaseModel):
    limit: int


class Verdict(BaseModel):
    approved: bool


class PositiveInt:
    def validate(self, value):
        if isinstance(value, int) and value > 0:
            return Valid(value)
        return Invalid("must be a positive integer")

    def json_schema(self):
        return {"type": "integer", "exclusiveMinimum": 0}


class Opaque:
    def validate(self, value):
        return Valid(value)


def _decision(input_schema=Order):
    return define_decision(
        id="order-check",
        version="2.1.0",
        input_schema=input_schema,
        output_schema=Verdict,
        profile_schema=Policy,
        rules=[create_rule(id="ok", when=lambda i, p: True, emit=lambda i, p: {"approved": True}, explain=lambda i, p: "ok")],
    )


class TestToJsonSchema:

    def test_model_schema(self):
        schema = to_json_schema(PydanticValidator(Order))
        assert schema["type"] == "object"
        assert schema["title"] == "Order"
        assert schema["properties"]["amount"]["type"] == "number"
        assert schema["required"] == ["amount"]

    def test_custom_validator_schema(self):
        assert to_json_schema(PositiveInt()) == {"type": "integer", "exclusiveMinimum": 0}

    def test_validator_without_schema(self):
        with pytest.raises(SchemaExportError) as exc_info:
            to_json_schema(Opaque())
        assert "Opaque" in str(exc_info.value)


class TestExtractDecisionSchema:

    def test_extract(self):
        exported = extract_decision_schema(_decision())
        assert isinstance(exported, DecisionSchema)
        assert exported.id == "order-check"
        assert exported.version == "2.1.0"
        assert exported.input_schema["title"] == "Order"
        assert exported.output_schema["properties"]["approved"]["type"] == "boolean"
        assert exported.profile_schema["properties"]["limit"]["type"] == "integer"

    def test_to_dict_keys(self):
        data = extract_decision_schema(_decision()).to_dict()
        assert set(data) == {"id", "version", "inputSchema", "outputSchema", "profileSchema"}

    def test_mixed_validators(self):
        exported = extract_decision_schema(_decision(input_schema=PositiveInt()))
        assert exported.input_schema == {"type": "integer", "exclusiveMinimum": 0}

    def test_unexportable_contract(self):
        with pytest.raises(SchemaExportError):
            extract_decision_schema(_decision(input_schema=Opaque()))
