"""Reporting queries: date windows, aggregation and report execution."""

from pocket_ledger.queries.aggregation import AggregationEngine, percentage_of, select_currency
from pocket_ledger.queries.date_window import DateWindowResolver, month_bounds
from pocket_ledger.queries.executor import ReportExecutor

__all__ = [
    "AggregationEngine",
    "DateWindowResolver",
    "ReportExecutor",
    "month_bounds",
    "percentage_of",
    "select_currency",
]
