"""Validation results and the syntactic checks shared by the record services."""

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

from email_validator import EmailNotValidError, validate_email
from pydantic import AnyUrl, TypeAdapter, ValidationError

from clientbook.domain.exceptions import RecordValidationError, ValidationIssue

# An extra rule receives the record and the id excluded from uniqueness checks.
ValidationRule = Callable[[Any, str | None], Iterable[ValidationIssue]]

_URL_ADAPTER = TypeAdapter(AnyUrl)


@dataclass
class ValidationResult:
    """Every issue found while validating one record."""

    entity_type: str
    issues: list[ValidationIssue] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.issues

    @property
    def codes(self) -> list[str]:
        return [issue.code for issue in self.issues]

    def add(self, code: str, message: str) -> None:
        self.issues.append(ValidationIssue(code=code, message=message))

    def extend(self, issues: Iterable[ValidationIssue]) -> None:
        self.issues.extend(issues)

    def raise_for_issues(self) -> None:
        if self.issues:
            raise RecordValidationError(self.entity_type, self.issues)


def is_valid_email(value: str) -> bool:
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def is_valid_url(value: str) -> bool:
    try:
        _URL_ADAPTER.validate_python(value)
    except ValidationError:
        return False
    return True
