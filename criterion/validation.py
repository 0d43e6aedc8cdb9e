"""
validation.py

Criterion Validator: schema validation boundary

A Validator checks a value against a declared schema and answers with a
tagged result instead of raising: either Valid(value) carrying the
validated (possibly coerced) value, or Invalid(error) carrying a
human-readable description of every issue found.

Design Invariants:
- Absence is not falsiness: MISSING is rejected outright, while 0, False,
  "" and None are handed to the schema like any other value
- Rejection is based on schema conformance only
- Validation failures are values, never exceptions
- A malformed schema is a programming error and raises at definition time
"""

from dataclasses import dataclass
from typing import Any, Protocol, Union, runtime_checkable

from pydantic import TypeAdapter, ValidationError


# =============================================================================
# Absent-value sentinel
# =============================================================================

class _Missing:
    """Marker for a value that was not supplied at all."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()


# =============================================================================
# Tagged results
# =============================================================================

@dataclass(frozen=True)
class Valid:
    """Successful validation carrying the validated value."""
    value: Any

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Invalid:
    """Failed validation carrying a human-readable error."""
    error: str

    @property
    def ok(self) -> bool:
        return False


ValidationResult = Union[Valid, Invalid]


@runtime_checkable
class Validator(Protocol):
    """Anything that can check a value and return a ValidationResult."""

    def validate(self, value: Any) -> ValidationResult:
        ...


# =============================================================================
# Pydantic-backed validator
# =============================================================================

def format_validation_error(error: ValidationError) -> str:
    """
    Flatten a pydantic ValidationError into one line.

    Each issue is rendered as "<dotted location>: <message>" and issues are
    joined with ", ". Issues without a location render the message alone.
    """
    parts = []
    for issue in error.errors():
        loc = ".".join(str(p) for p in issue.get("loc", ()))
        msg = issue.get("msg", "invalid value")
        parts.append(f"{loc}: {msg}" if loc else msg)
    return ", ".join(parts)


class PydanticValidator:
    """
    Validator backed by a pydantic TypeAdapter.

    Accepts anything pydantic can build a schema for: BaseModel subclasses,
    dataclasses, TypedDicts, builtin and generic types.

    Example:
        class Order(BaseModel):
            amount: float

        validator = PydanticValidator(Order)
        validator.validate({"amount": 0})   # Valid(Order(amount=0.0))
        validator.validate({})              # Invalid("amount: Field required")
    """

    __slots__ = ('_schema', '_adapter', '_strict')

    def __init__(self, schema: Any, *, strict: bool = False):
        self._schema = schema
        self._strict = strict
        # Raises if pydantic cannot build a schema for the given type
        self._adapter = TypeAdapter(schema)

    @property
    def schema(self) -> Any:
        """The wrapped schema type."""
        return self._schema

    @property
    def strict(self) -> bool:
        """Whether pydantic strict mode (no type coercion) is used."""
        return self._strict

    def validate(self, value: Any) -> ValidationResult:
        if value is MISSING:
            return Invalid("value is required")
        try:
            return Valid(self._adapter.validate_python(value, strict=self._strict))
        except ValidationError as e:
            return Invalid(format_validation_error(e))

    def json_schema(self) -> dict:
        """JSON Schema of the wrapped type."""
        return self._adapter.json_schema()

    def __repr__(self) -> str:
        name = getattr(self._schema, "__name__", repr(self._schema))
        return f"PydanticValidator({name}, strict={self._strict})"


# =============================================================================
# Helpers
# =============================================================================

def as_validator(schema: Any) -> Validator:
    """
    Coerce a schema declaration into a Validator.

    Objects that already implement validate() are returned unchanged;
    everything else is wrapped in a PydanticValidator.
    """
    if isinstance(schema, Validator) and not isinstance(schema, type):
        return schema
    return PydanticValidator(schema)


def validate(value: Any, schema: Any) -> ValidationResult:
    """Validate value against schema (a Validator or a pydantic-compatible type)."""
    if value is MISSING:
        return Invalid("value is required")
    return as_validator(schema).validate(value)
