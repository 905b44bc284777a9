"""
Input Validation for Ledger Mutations

Every mutating operation validates its input before anything reaches
storage. Validation collects all issues it can find (rather than stopping
at the first one) so the caller can show them together:

- error-level issues block the mutation (ValidationError is raised)
- warning-level issues are reported but the write proceeds

Validation NEVER silently fixes input beyond trimming whitespace and
upper-casing currency codes.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from pocket_ledger.models.ledger import (
    HEX_COLOR_PATTERN,
    Tag,
    TransactionType,
    ValidationIssue,
    ValidationResult,
)


AmountInput = Union[Decimal, int, float, str]

MIN_DAY_OF_MONTH = 1
MAX_DAY_OF_MONTH = 31

_HEX_COLOR = re.compile(HEX_COLOR_PATTERN)


class ValidationError(ValueError):
    """
    Malformed or out-of-range input caught before reaching storage.

    Carries every error-level issue that was found.
    """

    def __init__(self, result: ValidationResult):
        self.result = result
        self.operation = result.operation
        self.issues = [i for i in result.issues if i.severity == "error"]
        messages = "; ".join(f"{i.field}: {i.message}" for i in self.issues)
        super().__init__(f"Invalid {result.operation}: {messages}")


def parse_amount(raw: AmountInput) -> Optional[Decimal]:
    """
    Convert user input to a Decimal, or None if it is not numeric.

    Floats go through str() so 0.1 becomes Decimal("0.1") rather than its
    binary expansion.
    """
    if isinstance(raw, bool):
        return None
    if isinstance(raw, Decimal):
        return raw
    try:
        if isinstance(raw, float):
            return Decimal(str(raw))
        if isinstance(raw, str):
            return Decimal(raw.strip())
        return Decimal(raw)
    except (InvalidOperation, TypeError, ValueError):
        return None


def normalize_currency(code: Optional[str]) -> str:
    return (code or "").strip().upper()


class EntryValidator:
    """
    Validates the payload of every mutating ledger operation.

    The checks are pure; whether a referenced tag exists is looked up by
    the caller and passed in.
    """

    def _amount_issues(self, amount: Optional[Decimal], raw: AmountInput) -> list[ValidationIssue]:
        if amount is None:
            return [ValidationIssue(
                field="amount",
                issue_type="invalid_format",
                message=f"Amount is not a number: {raw!r}",
                severity="error",
            )]
        if not amount.is_finite():
            return [ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Amount must be a finite number",
                severity="error",
            )]
        if amount <= 0:
            return [ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Amount must be greater than zero",
                severity="error",
            )]
        return []

    def _currency_issues(self, currency: str) -> list[ValidationIssue]:
        if not currency:
            return [ValidationIssue(
                field="currency",
                issue_type="missing",
                message="Currency code is required",
                severity="error",
            )]
        if len(currency) > 8:
            return [ValidationIssue(
                field="currency",
                issue_type="invalid_format",
                message=f"Currency code is too long: {currency}",
                severity="error",
            )]
        return []

    def _parse_type(self, raw: object) -> tuple[Optional[TransactionType], list[ValidationIssue]]:
        try:
            return TransactionType(raw), []
        except ValueError:
            return None, [ValidationIssue(
                field="type",
                issue_type="invalid_value",
                message=f"Type must be income or expense: {raw!r}",
                severity="error",
            )]

    def validate_transaction(
        self,
        raw_amount: AmountInput,
        currency: str,
        tag_id: int,
        tag: Optional[Tag],
        raw_type: Union[TransactionType, str],
    ) -> tuple[Optional[Decimal], Optional[TransactionType], ValidationResult]:
        """
        Check a new transaction.

        Returns: (parsed_amount, parsed_type, result)
        """
        amount = parse_amount(raw_amount)
        issues = self._amount_issues(amount, raw_amount)
        issues += self._currency_issues(currency)
        type, type_issues = self._parse_type(raw_type)
        issues += type_issues

        if tag is None:
            issues.append(ValidationIssue(
                field="tag_id",
                issue_type="not_found",
                message=f"Tag {tag_id} does not exist",
                severity="error",
            ))
        elif type is not None and tag.type != type:
            # Recorded as-is; the tag/type pairing is only advisory
            issues.append(ValidationIssue(
                field="type",
                issue_type="type_mismatch",
                message=f"Tag '{tag.name}' is a {tag.type.value} tag, entry is {type.value}",
                severity="warning",
            ))

        return amount, type, ValidationResult(operation="insert_transaction", issues=issues)

    def validate_tag(
        self,
        name: str,
        raw_type: Union[TransactionType, str],
        color: str,
    ) -> tuple[Optional[TransactionType], ValidationResult]:
        """Check a new custom tag."""
        issues = []
        if not name.strip():
            issues.append(ValidationIssue(
                field="name",
                issue_type="missing",
                message="Tag name cannot be empty",
                severity="error",
            ))
        elif len(name.strip()) > 100:
            issues.append(ValidationIssue(
                field="name",
                issue_type="too_long",
                message="Tag name cannot exceed 100 characters",
                severity="error",
            ))
        type, type_issues = self._parse_type(raw_type)
        issues += type_issues
        if not _HEX_COLOR.match(color):
            issues.append(ValidationIssue(
                field="color",
                issue_type="invalid_format",
                message=f"Color must be an #RRGGBB hex string: {color!r}",
                severity="error",
            ))
        return type, ValidationResult(operation="create_tag", issues=issues)

    def validate_recurring(
        self,
        raw_amount: AmountInput,
        currency: str,
        day_of_month: int,
        tag_id: Optional[int],
        tag: Optional[Tag],
    ) -> tuple[Optional[Decimal], ValidationResult]:
        """
        Check a new recurring-expense definition.

        The tag is mandatory and must exist. Pointing at an income tag is
        allowed but reported as a warning.

        Returns: (parsed_amount, result)
        """
        amount = parse_amount(raw_amount)
        issues = self._amount_issues(amount, raw_amount)
        issues += self._currency_issues(currency)

        if (
            isinstance(day_of_month, bool)
            or not isinstance(day_of_month, int)
            or not MIN_DAY_OF_MONTH <= day_of_month <= MAX_DAY_OF_MONTH
        ):
            issues.append(ValidationIssue(
                field="day_of_month",
                issue_type="out_of_range",
                message=f"Day must be between {MIN_DAY_OF_MONTH} and {MAX_DAY_OF_MONTH}",
                severity="error",
            ))

        if tag_id is None:
            issues.append(ValidationIssue(
                field="tag_id",
                issue_type="missing",
                message="A recurring expense needs a tag",
                severity="error",
            ))
        elif tag is None:
            issues.append(ValidationIssue(
                field="tag_id",
                issue_type="not_found",
                message=f"Tag {tag_id} does not exist",
                severity="error",
            ))
        elif tag.type != TransactionType.EXPENSE:
            issues.append(ValidationIssue(
                field="tag_id",
                issue_type="type_mismatch",
                message=f"Tag '{tag.name}' is a {tag.type.value} tag, recurring entries are expenses",
                severity="warning",
            ))

        return amount, ValidationResult(operation="create_recurring", issues=issues)

    def validate_currency(self, currency: str) -> ValidationResult:
        """Check a currency code on its own (default-currency preference)."""
        return ValidationResult(
            operation="set_default_currency",
            issues=self._currency_issues(currency),
        )

    @staticmethod
    def ensure_valid(result: ValidationResult) -> None:
        """Raise ValidationError if the result carries any error."""
        if result.has_errors:
            raise ValidationError(result)
