"""
Category Aggregation

Folds a filtered set of transactions into per-category totals for one
(type, currency) partition - the data behind a pie chart.

Contract:
- transactions with a null or dangling tag form ONE synthetic bucket keyed
  OTHER_BUCKET_ID and labeled "Other"
- bucket sums reconcile exactly with the total (Decimal arithmetic)
- each percentage is rounded half-up on its own; the percentages are NOT
  adjusted to add up to 100
- buckets are ordered by sum descending, tag id ascending on ties
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from pocket_ledger.models.ledger import (
    MISSING_TAG_NAME,
    NEUTRAL_COLOR,
    OTHER_BUCKET_ID,
    AggregationResult,
    CategoryBucket,
    ResolvedTag,
    TransactionType,
    TransactionView,
)


_HUNDRED = Decimal(100)
_ZERO = Decimal(0)


def percentage_of(part: Decimal, total: Decimal) -> int:
    """round(part / total * 100), half-up; 0 when total is not positive."""
    if total <= 0:
        return 0
    return int((part / total * _HUNDRED).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def select_currency(
    preferred: Optional[str],
    available: list[str],
    fallback: str,
) -> str:
    """
    Pick the currency a report should be computed in.

    Keeps the caller's previous choice while the range still has data in
    it; otherwise the first available currency; otherwise the fallback.
    """
    if preferred and preferred in available:
        return preferred
    if available:
        return available[0]
    return fallback


class AggregationEngine:
    """Groups transactions into CategoryBuckets."""

    def aggregate(
        self,
        transactions: Iterable[TransactionView],
        type: TransactionType,
        currency: str,
    ) -> AggregationResult:
        groups: dict[int, dict] = {}

        for tx in transactions:
            if tx.type != type or tx.currency != currency:
                continue

            if isinstance(tx.tag_ref, ResolvedTag):
                key = tx.tag_ref.tag_id
                name, color = tx.tag_ref.display_name, tx.tag_ref.display_color
            else:
                key, name, color = OTHER_BUCKET_ID, MISSING_TAG_NAME, NEUTRAL_COLOR

            group = groups.setdefault(key, {"name": name, "color": color, "sum": _ZERO})
            group["sum"] += tx.amount

        total = sum((g["sum"] for g in groups.values()), _ZERO)

        buckets = [
            CategoryBucket(
                tag_id=key,
                tag_name=g["name"],
                color=g["color"],
                sum=g["sum"],
                percentage=percentage_of(g["sum"], total),
            )
            for key, g in groups.items()
        ]
        buckets.sort(key=lambda b: (-b.sum, b.tag_id))

        return AggregationResult(
            type=type,
            currency=currency,
            total=total,
            buckets=buckets,
        )
