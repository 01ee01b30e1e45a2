"""
Delivery store backed by DuckDB (through ibis).

Creates the ``monitor`` schema and ``deliveries`` table on first use.
Timestamps are stored as naive UTC and handed back as aware UTC datetimes.
"""

from __future__ import annotations

import threading
from datetime import datetime, timedelta
from enum import StrEnum
from pathlib import Path
from typing import Any

import ibis

from feedwatch.config.settings import StoreSettings
from feedwatch.core.delivery import DeliveryStatus, ExpectedDelivery, as_utc, day_start
from feedwatch.exceptions import StoreError
from feedwatch.utils.logging import get_logger

logger = get_logger("feedwatch.state")

SCHEMA = "monitor"
TABLE = f"{SCHEMA}.deliveries"
_COLUMNS = "id, feed_type, \"timestamp\", status, filename, previous_timestamp"


class UpsertOutcome(StrEnum):
    CREATED = "created"
    FILLED = "filled"  # existing row, filename was empty and has been set
    UNCHANGED = "unchanged"


def _escape_sql_string(value: str) -> str:
    """Escape single quotes for SQL strings."""
    return value.replace("'", "''")


def _sql_value(value: Any) -> str:
    """Convert a Python value to its SQL literal."""
    if value is None:
        return "NULL"
    elif isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    elif isinstance(value, (int, float)):
        return str(value)
    elif isinstance(value, datetime):
        naive = as_utc(value).replace(tzinfo=None)
        return f"TIMESTAMP '{naive.strftime('%Y-%m-%d %H:%M:%S.%f')}'"
    else:
        return f"'{_escape_sql_string(str(value))}'"


class DeliveryStore:
    """Persistence for expected deliveries."""

    def __init__(self, path: str = ":memory:", connection: ibis.BaseBackend | None = None):
        """
        Args:
            path: DuckDB database file, or ``:memory:``
            connection: Existing ibis DuckDB backend to use instead of opening ``path``
        """
        self.path = path
        self._connection = connection
        self._initialized = False
        # One DuckDB connection is shared by the reconcile thread and request handlers
        self._lock = threading.RLock()

    @classmethod
    def from_settings(cls, settings: StoreSettings) -> DeliveryStore:
        return cls(path=settings.path)

    def _get_connection(self) -> ibis.BaseBackend:
        if self._connection is None:
            try:
                if self.path == ":memory:":
                    self._connection = ibis.duckdb.connect()
                else:
                    Path(self.path).parent.mkdir(parents=True, exist_ok=True)
                    self._connection = ibis.duckdb.connect(self.path)
            except Exception as e:
                raise StoreError(f"Cannot open delivery store '{self.path}': {e}", details={"path": self.path}) from e
        if not self._initialized:
            self._initialize_schema(self._connection)
        return self._connection

    def _initialize_schema(self, conn: ibis.BaseBackend) -> None:
        """Create schema, id sequence and deliveries table if they don't exist."""
        try:
            conn.raw_sql(f"CREATE SCHEMA IF NOT EXISTS {SCHEMA}")
            conn.raw_sql(f"CREATE SEQUENCE IF NOT EXISTS {SCHEMA}.delivery_id_seq START 1")
            conn.raw_sql(
                f"""
                CREATE TABLE IF NOT EXISTS {TABLE} (
                    id BIGINT DEFAULT nextval('{SCHEMA}.delivery_id_seq'),
                    feed_type VARCHAR NOT NULL,
                    "timestamp" TIMESTAMP NOT NULL,
                    status VARCHAR NOT NULL DEFAULT 'expected',
                    filename VARCHAR,
                    previous_timestamp TIMESTAMP,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    PRIMARY KEY (feed_type, "timestamp")
                )
                """
            )
        except Exception as e:
            raise StoreError(f"Cannot initialize delivery store schema: {e}") from e
        self._initialized = True
        logger.debug(f"Delivery store initialized at {self.path}")

    def _fetch(self, query: str) -> list[tuple]:
        with self._lock:
            conn = self._get_connection()
            try:
                return conn.raw_sql(query).fetchall()
            except Exception as e:
                raise StoreError(f"Delivery store query failed: {e}", details={"query": query.strip()}) from e

    def _execute(self, query: str) -> None:
        with self._lock:
            conn = self._get_connection()
            try:
                conn.raw_sql(query)
            except Exception as e:
                raise StoreError(f"Delivery store write failed: {e}", details={"query": query.strip()}) from e

    # ------------------------------------------------------------------
    # Schedule generation
    # ------------------------------------------------------------------

    def upsert_expected(self, feed_type: str, timestamp: datetime, filename: str) -> UpsertOutcome:
        """
        Make sure an ``expected`` row exists for (feed_type, timestamp).

        An existing row keeps its status; its filename is only set when empty.
        """
        key = f"feed_type = {_sql_value(feed_type)} AND \"timestamp\" = {_sql_value(timestamp)}"
        with self._lock:
            rows = self._fetch(f"SELECT filename FROM {TABLE} WHERE {key}")
            if not rows:
                self._execute(
                    f"INSERT INTO {TABLE} (feed_type, \"timestamp\", status, filename) VALUES "
                    f"({_sql_value(feed_type)}, {_sql_value(timestamp)}, "
                    f"{_sql_value(DeliveryStatus.EXPECTED.value)}, {_sql_value(filename)})"
                )
                return UpsertOutcome.CREATED
            if not rows[0][0]:
                self._execute(
                    f"UPDATE {TABLE} SET filename = {_sql_value(filename)}, updated_at = CURRENT_TIMESTAMP "
                    f"WHERE {key}"
                )
                return UpsertOutcome.FILLED
            return UpsertOutcome.UNCHANGED

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------

    def last_received(self) -> dict[str, datetime]:
        """Latest ``received`` timestamp per feed type."""
        rows = self._fetch(
            f"SELECT feed_type, MAX(\"timestamp\") FROM {TABLE} "
            f"WHERE status = {_sql_value(DeliveryStatus.RECEIVED.value)} GROUP BY feed_type"
        )
        return {feed_type: as_utc(ts) for feed_type, ts in rows if ts is not None}

    def due(self, now: datetime) -> list[ExpectedDelivery]:
        """All deliveries with ``timestamp <= now``, oldest first."""
        rows = self._fetch(
            f"SELECT {_COLUMNS} FROM {TABLE} WHERE \"timestamp\" <= {_sql_value(now)} ORDER BY \"timestamp\" ASC, feed_type ASC"
        )
        return [_row_to_delivery(r) for r in rows]

    def update_status(
        self, delivery_id: int, status: DeliveryStatus, previous_timestamp: datetime | None
    ) -> None:
        self._execute(
            f"UPDATE {TABLE} SET status = {_sql_value(status.value)}, "
            f"previous_timestamp = {_sql_value(previous_timestamp)}, updated_at = CURRENT_TIMESTAMP "
            f"WHERE id = {int(delivery_id)}"
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def for_day(self, feed_type: str, day: datetime) -> list[ExpectedDelivery]:
        """Deliveries of ``feed_type`` within ``[day 00:00Z, +24h)``, oldest first."""
        start = day_start(day)
        end = start + timedelta(days=1)
        rows = self._fetch(
            f"SELECT {_COLUMNS} FROM {TABLE} "
            f"WHERE feed_type = {_sql_value(feed_type)} "
            f"AND \"timestamp\" >= {_sql_value(start)} AND \"timestamp\" < {_sql_value(end)} "
            f"ORDER BY \"timestamp\" ASC"
        )
        return [_row_to_delivery(r) for r in rows]

    def get(self, feed_type: str, timestamp: datetime) -> ExpectedDelivery | None:
        rows = self._fetch(
            f"SELECT {_COLUMNS} FROM {TABLE} "
            f"WHERE feed_type = {_sql_value(feed_type)} AND \"timestamp\" = {_sql_value(timestamp)}"
        )
        return _row_to_delivery(rows[0]) if rows else None

    def count(self) -> int:
        return int(self._fetch(f"SELECT COUNT(*) FROM {TABLE}")[0][0])

    def close(self) -> None:
        with self._lock:
            if self._connection is not None:
                try:
                    self._connection.disconnect()
                except Exception as e:
                    logger.debug(f"Error closing delivery store: {e}")
            self._connection = None
            self._initialized = False


def _row_to_delivery(row: tuple) -> ExpectedDelivery:
    delivery_id, feed_type, timestamp, status, filename, previous = row
    return ExpectedDelivery(
        id=int(delivery_id) if delivery_id is not None else None,
        feed_type=feed_type,
        timestamp=as_utc(timestamp),
        status=DeliveryStatus(status),
        filename=filename,
        previous_timestamp=as_utc(previous) if previous is not None else None,
    )
