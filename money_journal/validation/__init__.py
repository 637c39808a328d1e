"""Validation layer: schema checks at every storage boundary."""

from money_journal.validation.validator import (
    SCHEMAS,
    ValidationError,
    ValidationOutcome,
    resolve_schema,
    serialize,
    serialize_array,
    validate,
    validate_array,
    validate_safe,
)

__all__ = [
    "SCHEMAS",
    "ValidationError",
    "ValidationOutcome",
    "resolve_schema",
    "serialize",
    "serialize_array",
    "validate",
    "validate_array",
    "validate_safe",
]
