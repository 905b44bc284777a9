"""
Tests for the end-to-end flows.

Flows are built by create_app_components on a temporary SQLite file.
Storage failures are simulated with a store subclass that raises.
"""

import pytest
import pytest_asyncio
from datetime import date, datetime
from decimal import Decimal

from pocket_ledger.models.ledger import (
    MonthlyWindow,
    NavigationDirection,
    ReportRequest,
    SlidingWindow,
    TransactionType,
)
from pocket_ledger.orchestrator import ReportingFlow, create_app_components
from pocket_ledger.services.storage import SQLiteClient, SQLiteEntityStore, StorageError
from pocket_ledger.validation import ValidationError

EXPENSE = TransactionType.EXPENSE
INCOME = TransactionType.INCOME
MARCH_2024 = MonthlyWindow(year=2024, month=3)


class FailingReadStore(SQLiteEntityStore):
    """Store whose report reads fail."""

    async def distinct_currencies(self, date_start, date_end):
        raise StorageError("database is locked")


class FailingWriteStore(SQLiteEntityStore):
    """Store whose transaction inserts fail."""

    async def insert_transaction(self, *args, **kwargs):
        raise StorageError("disk I/O error")


@pytest_asyncio.fixture
async def components(db_path):
    entry_flow, reporting_flow, management_flow, store = await create_app_components(db_path)
    yield entry_flow, reporting_flow, management_flow
    await store.close()


@pytest_asyncio.fixture
async def food_and_transport(components):
    """Food 100 + Transport 50 + Food 30 CNY in March 2024."""
    entry_flow, _, _ = components
    tags = {t.name: t.id for t in await entry_flow.available_tags(EXPENSE)}
    await entry_flow.record("100", datetime(2024, 3, 2, 12, 0), tags["Food"], EXPENSE)
    await entry_flow.record("50", datetime(2024, 3, 3, 9, 0), tags["Transport"], EXPENSE)
    await entry_flow.record("30", datetime(2024, 3, 4, 19, 0), tags["Food"], EXPENSE)
    return tags


class TestEntryCreationFlow:
    """Tests for recording entries."""

    @pytest.mark.asyncio
    async def test_available_tags_by_type(self, components):
        """Test the entry form offers only tags of the chosen type."""
        entry_flow, _, _ = components
        income = await entry_flow.available_tags(INCOME)
        assert [t.name for t in income] == ["Salary"]

    @pytest.mark.asyncio
    async def test_record_uses_stored_default(self, components):
        """Test that a missing currency is filled from the stored default."""
        entry_flow, reporting_flow, management_flow = components
        await management_flow.set_default_currency("usd")
        tags = {t.name: t.id for t in await entry_flow.available_tags(EXPENSE)}

        await entry_flow.record("8", date(2024, 3, 1), tags["Food"], EXPENSE)

        report = await reporting_flow.refresh(ReportRequest(window=MARCH_2024))
        assert report.transactions[0].currency == "USD"

    @pytest.mark.asyncio
    async def test_record_explicit_currency(self, components):
        """Test that an explicit currency wins over the default."""
        entry_flow, reporting_flow, _ = components
        tags = {t.name: t.id for t in await entry_flow.available_tags(EXPENSE)}

        await entry_flow.record("8", date(2024, 3, 1), tags["Food"], EXPENSE, currency="EUR")

        report = await reporting_flow.refresh(ReportRequest(window=MARCH_2024))
        assert report.available_currencies == ["EUR"]
        assert report.currency == "EUR"

    @pytest.mark.asyncio
    async def test_record_invalid_writes_nothing(self, components):
        """Test that a rejected entry leaves the ledger untouched."""
        entry_flow, reporting_flow, _ = components
        tags = {t.name: t.id for t in await entry_flow.available_tags(EXPENSE)}

        with pytest.raises(ValidationError):
            await entry_flow.record("-3", date(2024, 3, 1), tags["Food"], EXPENSE)

        report = await reporting_flow.refresh(ReportRequest(window=MARCH_2024))
        assert report.transactions == []

    @pytest.mark.asyncio
    async def test_write_failure_propagates(self, db_path):
        """Test that a failed insert raises StorageError to the caller."""
        store = FailingWriteStore(SQLiteClient(db_path))
        entry_flow, _, _, _ = await create_app_components(store=store)
        tags = {t.name: t.id for t in await entry_flow.available_tags(EXPENSE)}

        with pytest.raises(StorageError):
            await entry_flow.record("10", date(2024, 3, 1), tags["Food"], EXPENSE)
        await store.close()


class TestReportingFlow:
    """Tests for the reporting refresh."""

    @pytest.mark.asyncio
    async def test_monthly_scenario(self, components, food_and_transport):
        """Test the Food/Transport month gives 180 split 72/28."""
        _, reporting_flow, _ = components

        report = await reporting_flow.refresh(ReportRequest(window=MARCH_2024))

        assert report.degraded is False
        assert report.window_label == "March 2024"
        assert (report.date_start, report.date_end) == (date(2024, 3, 1), date(2024, 3, 31))
        assert report.currency == "CNY"
        assert len(report.transactions) == 3
        assert report.statistics.total == Decimal("180")
        assert [(b.tag_name, b.sum, b.percentage) for b in report.statistics.buckets] == [
            ("Food", Decimal("130"), 72),
            ("Transport", Decimal("50"), 28),
        ]

    @pytest.mark.asyncio
    async def test_tag_filter_applies_to_list_and_statistics(self, components, food_and_transport):
        """Test that a tag filter narrows both the list and the buckets."""
        _, reporting_flow, _ = components
        request = ReportRequest(
            window=MARCH_2024,
            tag_ids=frozenset({food_and_transport["Transport"]}),
        )

        report = await reporting_flow.refresh(request)

        assert {t.tag_name for t in report.transactions} == {"Transport"}
        assert report.statistics.total == Decimal("50")
        assert report.statistics.buckets[0].percentage == 100

    @pytest.mark.asyncio
    async def test_list_keeps_both_types(self, components, food_and_transport):
        """Test that income shows in the list but not in expense statistics."""
        entry_flow, reporting_flow, _ = components
        salary = (await entry_flow.available_tags(INCOME))[0]
        await entry_flow.record("1000", date(2024, 3, 10), salary.id, INCOME)

        report = await reporting_flow.refresh(ReportRequest(window=MARCH_2024))
        assert len(report.transactions) == 4
        assert report.statistics.total == Decimal("180")

        income = await reporting_flow.refresh(ReportRequest(window=MARCH_2024, type=INCOME))
        assert income.statistics.total == Decimal("1000")

    @pytest.mark.asyncio
    async def test_currency_falls_back_when_absent(self, components, food_and_transport):
        """Test a preferred currency missing from the range is replaced."""
        _, reporting_flow, _ = components
        report = await reporting_flow.refresh(ReportRequest(window=MARCH_2024, currency="USD"))
        assert report.currency == "CNY"

    @pytest.mark.asyncio
    async def test_empty_range(self, components):
        """Test an empty range yields the fallback currency and no buckets."""
        _, reporting_flow, _ = components
        window = SlidingWindow(start_date=date(2020, 1, 1), end_date=date(2020, 1, 31))

        report = await reporting_flow.refresh(ReportRequest(window=window))

        assert report.transactions == []
        assert report.available_currencies == []
        assert report.currency == "CNY"
        assert report.statistics.total == Decimal("0")
        assert report.statistics.buckets == []

    @pytest.mark.asyncio
    async def test_navigate_request(self, components, food_and_transport):
        """Test stepping the month away and back again."""
        _, reporting_flow, _ = components
        request = ReportRequest(window=MARCH_2024)

        april = ReportingFlow.navigate(request, NavigationDirection.NEXT)
        assert april.window == MonthlyWindow(year=2024, month=4)
        assert (await reporting_flow.refresh(april)).transactions == []

        back = ReportingFlow.navigate(april, NavigationDirection.PREVIOUS)
        assert len((await reporting_flow.refresh(back)).transactions) == 3

    def test_default_request(self):
        """Test the initial sliding and monthly requests."""
        sliding = ReportingFlow.default_request(today=date(2024, 3, 15))
        assert sliding.window == SlidingWindow(start_date=date(2024, 2, 15), end_date=date(2024, 3, 15))
        assert sliding.type == EXPENSE

        monthly = ReportingFlow.default_request(monthly=True, today=date(2024, 3, 15))
        assert monthly.window == MARCH_2024

    @pytest.mark.asyncio
    async def test_read_failure_degrades_to_empty(self, db_path):
        """Test that a failed read returns an empty degraded report."""
        store = FailingReadStore(SQLiteClient(db_path))
        _, reporting_flow, _, _ = await create_app_components(store=store)

        report = await reporting_flow.refresh(ReportRequest(window=MARCH_2024))

        assert report.degraded is True
        assert report.error_message == "database is locked"
        assert report.transactions == []
        assert report.statistics.buckets == []
        assert report.window_label == "March 2024"
        await store.close()

    @pytest.mark.asyncio
    async def test_read_failure_keeps_previous(self, db_path, components, food_and_transport):
        """Test that a failed read returns the previous report flagged degraded."""
        _, reporting_flow, _ = components
        previous = await reporting_flow.refresh(ReportRequest(window=MARCH_2024))

        store = FailingReadStore(SQLiteClient(db_path))
        _, failing_flow, _, _ = await create_app_components(store=store)
        report = await failing_flow.refresh(ReportRequest(window=MARCH_2024), previous=previous)

        assert report.degraded is True
        assert report.report_id == previous.report_id
        assert len(report.transactions) == 3
        await store.close()


class TestManagementFlow:
    """Tests for tags, recurring expenses and preferences."""

    @pytest.mark.asyncio
    async def test_recurring_defaults_to_stored_currency(self, components):
        """Test that recurring expenses take the default currency when none is given."""
        entry_flow, _, management_flow = components
        tags = {t.name: t.id for t in await entry_flow.available_tags(EXPENSE)}
        await management_flow.set_default_currency("GBP")

        await management_flow.create_recurring("1200", 1, tags["Housing"], note="rent")
        await management_flow.create_recurring("15", 20, tags["Entertainment"], currency="usd")

        rows = await management_flow.list_recurring()
        assert [(r.day_of_month, r.currency) for r in rows] == [(1, "GBP"), (20, "USD")]

    @pytest.mark.asyncio
    async def test_recurring_day_32_rejected(self, components):
        """Test that day 32 raises ValidationError and day 31 succeeds."""
        entry_flow, _, management_flow = components
        tags = {t.name: t.id for t in await entry_flow.available_tags(EXPENSE)}
        with pytest.raises(ValidationError):
            await management_flow.create_recurring("100", 32, tags["Housing"])
        assert await management_flow.create_recurring("100", 31, tags["Housing"]) > 0

    @pytest.mark.asyncio
    async def test_recurring_needs_known_tag(self, components):
        """Test that recurring expenses without a tag or with an unknown tag are rejected."""
        _, _, management_flow = components
        with pytest.raises(ValidationError):
            await management_flow.create_recurring("100", 1, None)
        with pytest.raises(ValidationError):
            await management_flow.create_recurring("100", 1, 9999)
        assert await management_flow.list_recurring() == []

    @pytest.mark.asyncio
    async def test_custom_tag_lifecycle(self, components):
        """Test creating and deleting a custom tag, and refusing a built-in."""
        entry_flow, _, management_flow = components
        tag = await management_flow.create_tag("Pets", EXPENSE, color="#8BC34A")
        assert tag.id in {t.id for t in await entry_flow.available_tags(EXPENSE)}

        assert await management_flow.delete_tag(tag.id) is True
        builtin = [t for t in await management_flow.list_tags() if not t.is_custom]
        assert await management_flow.delete_tag(builtin[0].id) is False

    @pytest.mark.asyncio
    async def test_delete_transaction(self, components, food_and_transport):
        """Test that a deleted transaction disappears from the next refresh."""
        _, reporting_flow, management_flow = components
        report = await reporting_flow.refresh(ReportRequest(window=MARCH_2024))

        await management_flow.delete_transaction(report.transactions[0].id)

        report = await reporting_flow.refresh(ReportRequest(window=MARCH_2024))
        assert len(report.transactions) == 2
        assert report.statistics.total == Decimal("150")
