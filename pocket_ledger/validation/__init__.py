"""Input validation package."""

from pocket_ledger.validation.validator import (
    EntryValidator,
    ValidationError,
    normalize_currency,
    parse_amount,
)

__all__ = [
    "EntryValidator",
    "ValidationError",
    "normalize_currency",
    "parse_amount",
]
