"""Tests for recurring-expense definitions."""

import pytest
from decimal import Decimal

from pocket_ledger.models.ledger import TransactionType
from pocket_ledger.validation import ValidationError


class TestCreate:
    """Tests for RecurringExpenseRegistry.create."""

    @pytest.mark.asyncio
    async def test_day_31_accepted(self, recurring_registry, builtin):
        """Test that day 31 is a valid day of month."""
        rec_id = await recurring_registry.create("3000", "CNY", 31, builtin["Housing"], "rent")
        rows = await recurring_registry.list_all()
        assert [r.id for r in rows] == [rec_id]
        assert rows[0].day_of_month == 31
        assert rows[0].amount == Decimal("3000")
        assert rows[0].tag_name == "Housing"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("day", [0, 32, -1])
    async def test_day_out_of_range(self, recurring_registry, builtin, day):
        """Test that days outside 1..31 are rejected."""
        with pytest.raises(ValidationError) as exc_info:
            await recurring_registry.create("100", "CNY", day, builtin["Housing"])
        assert exc_info.value.issues[0].field == "day_of_month"
        assert await recurring_registry.list_all() == []

    @pytest.mark.asyncio
    async def test_non_positive_amount(self, recurring_registry, builtin):
        """Test that a zero amount is rejected."""
        with pytest.raises(ValidationError):
            await recurring_registry.create("0", "CNY", 15, builtin["Utilities"])

    @pytest.mark.asyncio
    async def test_currency_normalized(self, recurring_registry, builtin):
        """Test that the currency code is upper-cased."""
        await recurring_registry.create("9.99", "usd", 15, builtin["Entertainment"])
        rows = await recurring_registry.list_all()
        assert rows[0].currency == "USD"

    @pytest.mark.asyncio
    async def test_tag_required(self, recurring_registry):
        """Test that a definition without a tag is rejected."""
        with pytest.raises(ValidationError) as exc_info:
            await recurring_registry.create("100", "CNY", 5, None)
        assert [(i.field, i.issue_type) for i in exc_info.value.issues] == [("tag_id", "missing")]
        assert await recurring_registry.list_all() == []

    @pytest.mark.asyncio
    async def test_unknown_tag_rejected(self, recurring_registry):
        """Test that a tag id with no row behind it is rejected."""
        with pytest.raises(ValidationError) as exc_info:
            await recurring_registry.create("100", "CNY", 5, 9999)
        assert [(i.field, i.issue_type) for i in exc_info.value.issues] == [("tag_id", "not_found")]
        assert await recurring_registry.list_all() == []

    @pytest.mark.asyncio
    async def test_income_tag_allowed(self, recurring_registry, builtin):
        """Test that an income tag is stored anyway."""
        await recurring_registry.create("50", "CNY", 10, builtin["Salary"])
        rows = await recurring_registry.list_all()
        assert [r.tag_name for r in rows] == ["Salary"]


class TestList:
    """Tests for RecurringExpenseRegistry.list_all."""

    @pytest.mark.asyncio
    async def test_ordered_by_day_then_id(self, recurring_registry, builtin):
        """Test ordering by day of month, ties by id."""
        rent = builtin["Housing"]
        late = await recurring_registry.create("10", "CNY", 28, rent)
        early = await recurring_registry.create("10", "CNY", 1, rent)
        tie = await recurring_registry.create("10", "CNY", 28, rent)

        rows = await recurring_registry.list_all()
        assert [r.id for r in rows] == [early, late, tie]

    @pytest.mark.asyncio
    async def test_missing_tag_fallback(self, recurring_registry, tag_catalog):
        """Test that a definition keeps working after its tag is deleted."""
        tag = await tag_catalog.create("Gym", TransactionType.EXPENSE)
        await recurring_registry.create("200", "CNY", 5, tag.id)
        await tag_catalog.delete(tag.id)

        rows = await recurring_registry.list_all()
        assert rows[0].tag_id == tag.id
        assert rows[0].tag_name == "Other"


class TestDelete:
    """Tests for RecurringExpenseRegistry.delete."""

    @pytest.mark.asyncio
    async def test_delete_is_idempotent(self, recurring_registry, builtin):
        """Test that deleting twice does not raise."""
        rec_id = await recurring_registry.create("10", "CNY", 10, builtin["Utilities"])
        await recurring_registry.delete(rec_id)
        await recurring_registry.delete(rec_id)
        assert await recurring_registry.list_all() == []
