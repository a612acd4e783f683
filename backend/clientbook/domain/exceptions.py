"""Domain-specific exceptions — framework-independent."""

from dataclasses import dataclass


class EntityNotFoundError(Exception):
    """Raised when a requested entity does not exist."""

    def __init__(self, entity_type: str, entity_id: int | str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with id '{entity_id}' not found")


@dataclass(frozen=True)
class ValidationIssue:
    """A single rule violation with a machine-readable code."""

    code: str
    message: str


class RecordValidationError(Exception):
    """Raised when a record fails one or more validation rules.

    Carries every accumulated issue, never just the first one.
    """

    def __init__(self, entity_type: str, issues: list[ValidationIssue]):
        self.entity_type = entity_type
        self.issues = list(issues)
        summary = "; ".join(f"{i.code}: {i.message}" for i in self.issues)
        super().__init__(f"{entity_type} validation failed — {summary}")

    @property
    def codes(self) -> list[str]:
        return [issue.code for issue in self.issues]


class PersistenceError(Exception):
    """Raised when the backing store rejects a read or write.

    The store's own diagnostic message is kept in ``detail``.
    """

    def __init__(self, operation: str, entity_type: str, detail: str):
        self.operation = operation
        self.entity_type = entity_type
        self.detail = detail
        super().__init__(f"Failed to {operation} {entity_type}: {detail}")


class ConstraintViolationError(PersistenceError):
    """Raised when a write breaks a store constraint (unique key, primary key)."""


class UnknownCapabilityError(Exception):
    """Raised when the database version probe cannot produce an answer."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"Could not determine database capabilities: {detail}")
