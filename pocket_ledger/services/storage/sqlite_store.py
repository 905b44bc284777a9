"""
SQLite Storage Implementation

SQLite is the relational backend behind the entity store. The four
tables and their column names are a stable contract with the
presentation layer:

    tags(id, name, type, icon, color, is_custom)
    transactions(id, amount, currency, date, tag_id, type, note)
    recurring_expenses(id, amount, currency, day_of_month, tag_id, note)
    settings(key, value)

Amounts are stored as decimal strings so that sums reconcile exactly.
Foreign keys are declared but never enforced: tag_id is a weak reference
and deleting a tag leaves referencing rows untouched.

The sqlite3 calls are synchronous; each coroutine performs exactly one
unit of work and commits it before returning.
"""

import sqlite3
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pocket_ledger.config import get_settings
from pocket_ledger.models.ledger import (
    BUILTIN_TAGS,
    DEFAULT_CURRENCY_KEY,
    DEFAULT_TAG_ICON,
    NEUTRAL_COLOR,
    RecurringExpenseView,
    Tag,
    TransactionFilter,
    TransactionType,
    TransactionView,
    resolve_tag_ref,
)
from pocket_ledger.services.storage.interface import (
    ConnectionError,
    EntityStoreInterface,
    NotFoundError,
    StorageError,
)


TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

SCHEMA = """
    CREATE TABLE IF NOT EXISTS tags (
        id        INTEGER PRIMARY KEY AUTOINCREMENT,
        name      TEXT    NOT NULL,
        type      TEXT    NOT NULL DEFAULT 'expense' CHECK(type IN ('expense','income')),
        icon      TEXT,
        color     TEXT,
        is_custom INTEGER NOT NULL DEFAULT 0
    );

    CREATE TABLE IF NOT EXISTS transactions (
        id       INTEGER PRIMARY KEY AUTOINCREMENT,
        amount   TEXT    NOT NULL,
        currency TEXT    NOT NULL,
        date     TEXT    NOT NULL,
        tag_id   INTEGER REFERENCES tags(id),
        type     TEXT    NOT NULL CHECK(type IN ('expense','income')),
        note     TEXT
    );

    CREATE TABLE IF NOT EXISTS recurring_expenses (
        id           INTEGER PRIMARY KEY AUTOINCREMENT,
        amount       TEXT    NOT NULL,
        currency     TEXT    NOT NULL,
        day_of_month INTEGER NOT NULL CHECK(day_of_month BETWEEN 1 AND 31),
        tag_id       INTEGER REFERENCES tags(id),
        note         TEXT
    );

    CREATE TABLE IF NOT EXISTS settings (
        key   TEXT PRIMARY KEY,
        value TEXT
    );

    CREATE INDEX IF NOT EXISTS idx_transactions_date   ON transactions(date);
    CREATE INDEX IF NOT EXISTS idx_transactions_tag_id ON transactions(tag_id);
"""

# Joined tag columns share one alias scheme across transactions and
# recurring expenses so both can be mapped by _joined_tag().
TAG_JOIN_COLUMNS = """
    tg.id        AS joined_tag_id,
    tg.name      AS tag_name,
    tg.type      AS tag_type,
    tg.icon      AS tag_icon,
    tg.color     AS tag_color,
    tg.is_custom AS tag_is_custom
"""


class SQLiteClient:
    """
    Low-level SQLite connection wrapper.

    Opens one connection lazily and reuses it for the lifetime of the store.
    """

    def __init__(self, db_path: Optional[str] = None):
        settings = get_settings().storage
        self.db_path = db_path or settings.path
        self._journal_mode = settings.journal_mode
        self._conn: Optional[sqlite3.Connection] = None

    def connect(self) -> sqlite3.Connection:
        """Open the database (once) and apply connection pragmas."""
        if self._conn is None:
            try:
                conn = sqlite3.connect(self.db_path, check_same_thread=False)
                conn.row_factory = sqlite3.Row
                # tag_id is a weak reference; dangling ids are legal
                conn.execute("PRAGMA foreign_keys = OFF")
                if self.db_path != ":memory:":
                    conn.execute(f"PRAGMA journal_mode = {self._journal_mode}")
            except sqlite3.Error as e:
                raise ConnectionError(f"Failed to open SQLite database {self.db_path}: {e}")
            self._conn = conn
        return self._conn

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None


class SQLiteEntityStore(EntityStoreInterface):
    """
    SQLite implementation of the entity store.

    Every sqlite3 failure is re-raised as StorageError so callers only
    deal with the storage exception hierarchy.
    """

    def __init__(self, client: Optional[SQLiteClient] = None):
        self._client = client or SQLiteClient()

    # -------------------------------------------------------------------------
    # Row mapping
    # -------------------------------------------------------------------------

    @staticmethod
    def _row_to_tag(row: sqlite3.Row) -> Tag:
        return Tag(
            id=row["id"],
            name=row["name"],
            type=TransactionType(row["type"]),
            icon=row["icon"] or DEFAULT_TAG_ICON,
            color=row["color"] or NEUTRAL_COLOR,
            is_custom=bool(row["is_custom"]),
        )

    @staticmethod
    def _joined_tag(row: sqlite3.Row) -> Optional[Tag]:
        """Rebuild the LEFT JOINed tag, or None when the reference dangles."""
        if row["joined_tag_id"] is None:
            return None
        return Tag(
            id=row["joined_tag_id"],
            name=row["tag_name"],
            type=TransactionType(row["tag_type"]),
            icon=row["tag_icon"] or DEFAULT_TAG_ICON,
            color=row["tag_color"] or NEUTRAL_COLOR,
            is_custom=bool(row["tag_is_custom"]),
        )

    def _row_to_transaction(self, row: sqlite3.Row) -> TransactionView:
        return TransactionView(
            id=row["id"],
            amount=Decimal(row["amount"]),
            currency=row["currency"],
            date=datetime.fromisoformat(row["date"]),
            tag_id=row["tag_id"],
            type=TransactionType(row["type"]),
            note=row["note"],
            tag_ref=resolve_tag_ref(row["tag_id"], self._joined_tag(row)),
        )

    def _row_to_recurring(self, row: sqlite3.Row) -> RecurringExpenseView:
        return RecurringExpenseView(
            id=row["id"],
            amount=Decimal(row["amount"]),
            currency=row["currency"],
            day_of_month=row["day_of_month"],
            tag_id=row["tag_id"],
            note=row["note"],
            tag_ref=resolve_tag_ref(row["tag_id"], self._joined_tag(row)),
        )

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def initialize(self, default_currency: str) -> None:
        """Create schema and seed defaults."""
        conn = self._client.connect()
        try:
            conn.executescript(SCHEMA)

            count = conn.execute("SELECT COUNT(*) FROM tags").fetchone()[0]
            if count == 0:
                conn.executemany(
                    """INSERT INTO tags(name, type, icon, color, is_custom)
                       VALUES (?, ?, ?, ?, 0)""",
                    [(t["name"], t["type"], t["icon"], t["color"]) for t in BUILTIN_TAGS],
                )

            conn.execute(
                "INSERT OR IGNORE INTO settings(key, value) VALUES (?, ?)",
                (DEFAULT_CURRENCY_KEY, default_currency),
            )
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise StorageError(f"Failed to initialize schema: {e}")

    async def close(self) -> None:
        self._client.close()

    # -------------------------------------------------------------------------
    # Tags
    # -------------------------------------------------------------------------

    async def insert_tag(
        self,
        name: str,
        type: TransactionType,
        icon: str,
        color: str,
        is_custom: bool,
    ) -> Tag:
        conn = self._client.connect()
        try:
            cursor = conn.execute(
                """INSERT INTO tags(name, type, icon, color, is_custom)
                   VALUES (?, ?, ?, ?, ?)""",
                (name, type.value, icon, color, 1 if is_custom else 0),
            )
            conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to insert tag: {e}")
        return Tag(
            id=cursor.lastrowid,
            name=name,
            type=type,
            icon=icon,
            color=color,
            is_custom=is_custom,
        )

    async def get_tag(self, tag_id: int) -> Optional[Tag]:
        conn = self._client.connect()
        try:
            row = conn.execute(
                "SELECT * FROM tags WHERE id = ?", (tag_id,)
            ).fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to get tag: {e}")
        return self._row_to_tag(row) if row else None

    async def list_tags(
        self,
        type: Optional[TransactionType] = None,
    ) -> list[Tag]:
        conn = self._client.connect()
        sql = "SELECT * FROM tags"
        params: list = []
        if type is not None:
            sql += " WHERE type = ?"
            params.append(type.value)
        sql += " ORDER BY type, id"
        try:
            rows = conn.execute(sql, params).fetchall()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to list tags: {e}")
        return [self._row_to_tag(r) for r in rows]

    async def count_tags(self) -> int:
        conn = self._client.connect()
        try:
            return conn.execute("SELECT COUNT(*) FROM tags").fetchone()[0]
        except sqlite3.Error as e:
            raise StorageError(f"Failed to count tags: {e}")

    async def delete_tag(self, tag_id: int) -> None:
        conn = self._client.connect()
        try:
            cursor = conn.execute("DELETE FROM tags WHERE id = ?", (tag_id,))
            conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to delete tag: {e}")
        if cursor.rowcount == 0:
            raise NotFoundError(f"Tag {tag_id} not found")

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    async def insert_transaction(
        self,
        amount: Decimal,
        currency: str,
        occurred_at: datetime,
        tag_id: Optional[int],
        type: TransactionType,
        note: Optional[str],
    ) -> int:
        conn = self._client.connect()
        try:
            cursor = conn.execute(
                """INSERT INTO transactions(amount, currency, date, tag_id, type, note)
                   VALUES (?, ?, ?, ?, ?, ?)""",
                (
                    str(amount), currency, occurred_at.strftime(TIMESTAMP_FORMAT),
                    tag_id, type.value, note,
                ),
            )
            conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to insert transaction: {e}")
        return cursor.lastrowid

    async def delete_transaction(self, tx_id: int) -> None:
        conn = self._client.connect()
        try:
            cursor = conn.execute("DELETE FROM transactions WHERE id = ?", (tx_id,))
            conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to delete transaction: {e}")
        if cursor.rowcount == 0:
            raise NotFoundError(f"Transaction {tx_id} not found")

    async def select_transactions(
        self,
        criteria: TransactionFilter,
    ) -> list[TransactionView]:
        conn = self._client.connect()
        sql = f"""
            SELECT t.*, {TAG_JOIN_COLUMNS}
            FROM transactions t
            LEFT JOIN tags tg ON t.tag_id = tg.id
            WHERE date(t.date) >= date(?) AND date(t.date) <= date(?)
        """
        params: list = [criteria.date_start.isoformat(), criteria.date_end.isoformat()]

        if criteria.has_tag_filter:
            tag_ids = sorted(criteria.tag_ids)
            placeholders = ",".join("?" * len(tag_ids))
            sql += f" AND t.tag_id IN ({placeholders})"
            params.extend(tag_ids)
        if criteria.type is not None:
            sql += " AND t.type = ?"
            params.append(criteria.type.value)

        sql += " ORDER BY t.date DESC, t.id DESC"
        try:
            rows = conn.execute(sql, params).fetchall()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to select transactions: {e}")
        return [self._row_to_transaction(r) for r in rows]

    async def distinct_currencies(
        self,
        date_start: date,
        date_end: date,
    ) -> list[str]:
        conn = self._client.connect()
        try:
            rows = conn.execute(
                """SELECT DISTINCT currency FROM transactions
                   WHERE date(date) BETWEEN date(?) AND date(?)
                   ORDER BY currency""",
                (date_start.isoformat(), date_end.isoformat()),
            ).fetchall()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to list currencies: {e}")
        return [r["currency"] for r in rows]

    # -------------------------------------------------------------------------
    # Recurring expenses
    # -------------------------------------------------------------------------

    async def insert_recurring(
        self,
        amount: Decimal,
        currency: str,
        day_of_month: int,
        tag_id: Optional[int],
        note: Optional[str],
    ) -> int:
        conn = self._client.connect()
        try:
            cursor = conn.execute(
                """INSERT INTO recurring_expenses(amount, currency, day_of_month, tag_id, note)
                   VALUES (?, ?, ?, ?, ?)""",
                (str(amount), currency, day_of_month, tag_id, note),
            )
            conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to insert recurring expense: {e}")
        return cursor.lastrowid

    async def delete_recurring(self, rec_id: int) -> None:
        conn = self._client.connect()
        try:
            cursor = conn.execute(
                "DELETE FROM recurring_expenses WHERE id = ?", (rec_id,)
            )
            conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to delete recurring expense: {e}")
        if cursor.rowcount == 0:
            raise NotFoundError(f"Recurring expense {rec_id} not found")

    async def list_recurring(self) -> list[RecurringExpenseView]:
        conn = self._client.connect()
        try:
            rows = conn.execute(
                f"""SELECT r.*, {TAG_JOIN_COLUMNS}
                    FROM recurring_expenses r
                    LEFT JOIN tags tg ON r.tag_id = tg.id
                    ORDER BY r.day_of_month, r.id"""
            ).fetchall()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to list recurring expenses: {e}")
        return [self._row_to_recurring(r) for r in rows]

    # -------------------------------------------------------------------------
    # Settings
    # -------------------------------------------------------------------------

    async def get_setting(self, key: str) -> Optional[str]:
        conn = self._client.connect()
        try:
            row = conn.execute(
                "SELECT value FROM settings WHERE key = ?", (key,)
            ).fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to read setting {key}: {e}")
        return row["value"] if row else None

    async def upsert_setting(self, key: str, value: str) -> None:
        conn = self._client.connect()
        try:
            conn.execute(
                "INSERT OR REPLACE INTO settings(key, value) VALUES (?, ?)",
                (key, value),
            )
            conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to write setting {key}: {e}")
