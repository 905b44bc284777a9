"""
Report Execution

Answers one ReportRequest with one LedgerReport:

1. resolve the window to inclusive bounds
2. list the currencies present in that range and pick the report currency
3. fetch the transactions in range (tag filter applied, both types kept
   so the list screen shows income and expense together)
4. aggregate the requested type in the chosen currency

Every number in the report comes from stored rows. Storage failures
propagate; degrading to an empty report is the caller's decision.
"""

from typing import Optional

from pocket_ledger.models.ledger import (
    AggregationResult,
    LedgerReport,
    ReportRequest,
    TransactionFilter,
    TransactionType,
)
from pocket_ledger.queries.aggregation import AggregationEngine, select_currency
from pocket_ledger.queries.date_window import DateWindowResolver
from pocket_ledger.services.ledger import TransactionLedger


class ReportExecutor:
    """
    Executes report requests against the transaction ledger.

    GUARANTEES:
    - The report currency is always one present in range, or the fallback
      when the range is empty
    - Statistics are computed from exactly the transactions returned
    """

    def __init__(
        self,
        ledger: TransactionLedger,
        fallback_currency: str,
        engine: Optional[AggregationEngine] = None,
    ):
        self._ledger = ledger
        self._fallback_currency = fallback_currency
        self._engine = engine or AggregationEngine()

    async def execute(self, request: ReportRequest) -> LedgerReport:
        date_start, date_end = DateWindowResolver.resolve(request.window)

        available = await self._ledger.distinct_currencies(date_start, date_end)
        currency = select_currency(request.currency, available, self._fallback_currency)

        transactions = await self._ledger.query(
            TransactionFilter(
                date_start=date_start,
                date_end=date_end,
                tag_ids=request.tag_ids,
            )
        )
        statistics = self._engine.aggregate(transactions, request.type, currency)

        return LedgerReport(
            date_start=date_start,
            date_end=date_end,
            window_label=DateWindowResolver.describe(request.window),
            transactions=transactions,
            available_currencies=available,
            currency=currency,
            statistics=statistics,
        )

    def empty_report(
        self,
        request: ReportRequest,
        error_message: Optional[str] = None,
    ) -> LedgerReport:
        """A report with no data, flagged degraded when an error is given."""
        date_start, date_end = DateWindowResolver.resolve(request.window)
        currency = request.currency or self._fallback_currency
        return LedgerReport(
            date_start=date_start,
            date_end=date_end,
            window_label=DateWindowResolver.describe(request.window),
            currency=currency,
            statistics=AggregationResult(
                type=TransactionType(request.type),
                currency=currency,
            ),
            degraded=error_message is not None,
            error_message=error_message,
        )
