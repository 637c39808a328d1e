"""
Boundary Validation

DESIGN DECISION: Data is checked at the storage edges only.
- Everything read from storage is parsed into a model before use
- Everything written to storage is serialized and parsed again first
- Objects built by already-validated constructors are trusted in memory

A failure names the offending field path (``user.transactions.0.amount``
style, wire names) so the caller can tell the child what to fix.

IMPORTANT: Validation NEVER silently fixes issues. Coercions pydantic
applies (numeric strings, naive datetimes) are the only normalization.
"""

from typing import Any, Optional, Sequence, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from money_journal.errors import MoneyJournalError
from money_journal.models.backup import ExportData
from money_journal.models.finance import (
    Goal,
    GoalInput,
    GoalUpdate,
    Transaction,
    TransactionInput,
    TransactionUpdate,
    User,
    UserInput,
    UserUpdate,
)
from money_journal.models.learning import LearningCard, UserProgress


ModelT = TypeVar("ModelT", bound=BaseModel)

SchemaRef = Union[str, Type[BaseModel]]


# Registered schemas, addressable by name
SCHEMAS: dict[str, Type[BaseModel]] = {
    "user": User,
    "user_input": UserInput,
    "user_update": UserUpdate,
    "transaction": Transaction,
    "transaction_input": TransactionInput,
    "transaction_update": TransactionUpdate,
    "goal": Goal,
    "goal_input": GoalInput,
    "goal_update": GoalUpdate,
    "user_progress": UserProgress,
    "learning_card": LearningCard,
    "export": ExportData,
}


class ValidationError(MoneyJournalError):
    """
    Data failed schema validation.

    Attributes:
        field: Dotted path of the first offending field ("" for whole-object rules)
        message: Human-readable message, already prefixed
        errors: The full pydantic error list
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        errors: Optional[list[dict]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.field = field
        self.errors = errors or []


class ValidationOutcome(BaseModel):
    """Result of validate_safe: either data or an error, never both."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    success: bool
    data: Any = None
    error: Optional[ValidationError] = None


def resolve_schema(schema: SchemaRef) -> Type[BaseModel]:
    """Look up a schema by registered name, or pass a model class through."""
    if isinstance(schema, str):
        try:
            return SCHEMAS[schema]
        except KeyError:
            raise ValueError(
                f"Unknown schema '{schema}'. Known: {', '.join(sorted(SCHEMAS))}"
            ) from None
    return schema


def _field_path(loc: Sequence[Union[str, int]]) -> str:
    return ".".join(str(part) for part in loc)


def _from_pydantic(
    error: PydanticValidationError,
    prefix: str,
    index: Optional[int] = None,
) -> ValidationError:
    details = error.errors()
    if not details:
        return ValidationError(f"{prefix}: Unknown validation error", errors=[])

    first = details[0]
    path = _field_path(first["loc"])
    if index is None:
        return ValidationError(f"{prefix}: {first['msg']}", field=path, errors=details)
    return ValidationError(
        f"{prefix} at index {index}: {first['msg']}",
        field=f"[{index}].{path}",
        errors=details,
    )


def validate(
    schema: Union[str, Type[ModelT]],
    data: Any,
    error_prefix: str = "Validation failed",
) -> ModelT:
    """
    Validate data against a schema.

    Args:
        schema: Model class or registered schema name
        data: Raw data (dict from JSON, or an existing model)
        error_prefix: Prepended to the error message

    Returns:
        The typed, validated model

    Raises:
        ValidationError: With the first offending field path
    """
    model = resolve_schema(schema)
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise _from_pydantic(e, error_prefix) from e


def validate_safe(schema: SchemaRef, data: Any) -> ValidationOutcome:
    """Validate without raising. Check ``outcome.success``."""
    try:
        return ValidationOutcome(success=True, data=validate(schema, data))
    except ValidationError as e:
        return ValidationOutcome(success=False, error=e)


def validate_array(
    schema: Union[str, Type[ModelT]],
    items: Sequence[Any],
    error_prefix: str = "Array validation failed",
) -> list[ModelT]:
    """
    Validate every item of a sequence.

    Raises:
        ValidationError: For the first failing index, field ``[i].path``
    """
    model = resolve_schema(schema)
    validated = []
    for index, item in enumerate(items):
        try:
            validated.append(model.model_validate(item))
        except PydanticValidationError as e:
            raise _from_pydantic(e, error_prefix, index=index) from e
    return validated


def serialize(model: BaseModel) -> dict:
    """JSON-ready wire form (camelCase keys, numbers for money)."""
    return model.model_dump(mode="json", by_alias=True)


def serialize_array(models: Sequence[BaseModel]) -> list[dict]:
    return [serialize(m) for m in models]
