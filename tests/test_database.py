"""
Test unitari per DataStore (sessione database mockata).
"""
import pytest
from unittest.mock import AsyncMock, MagicMock

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from core.database import DataStore, get_async_database_url
from ingest.errors import StoreWriteFailure


class FakeSession:
    """Sessione async minimale per DataStore."""

    def __init__(self, execute_error=None):
        self.execute = AsyncMock(side_effect=execute_error)
        self.commit = AsyncMock()
        self.rollback = AsyncMock()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class TestDataStore:
    """Test per insert batch."""

    @pytest.mark.asyncio
    async def test_insert_single_batch(self):
        session = FakeSession()
        store = DataStore(session_factory=lambda: session)
        rows = [
            {"product": "Soap", "qty": 1, "sales": 2, "period": "p"},
            {"product": "Wax", "qty": 3, "sales": 4, "period": "p"},
        ]

        inserted = await store.insert_rows("sales_data", rows)

        assert inserted == 2
        session.execute.assert_awaited_once()
        assert session.execute.await_args.args[1] == rows
        session.commit.assert_awaited_once()
        session.rollback.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_rows_skip_store(self):
        factory = MagicMock()
        store = DataStore(session_factory=factory)

        assert await store.insert_rows("sales_data", []) == 0
        factory.assert_not_called()

    @pytest.mark.asyncio
    async def test_store_error_reported(self):
        error = IntegrityError("INSERT", {}, Exception("duplicate key value"))
        session = FakeSession(execute_error=error)
        store = DataStore(session_factory=lambda: session)

        with pytest.raises(StoreWriteFailure) as exc_info:
            await store.insert_rows("inventory_data", [{"part": "Secret Part", "source_file_name": "f"}])

        # Solo il messaggio del driver: niente SQL né valori delle righe
        assert exc_info.value.message == "duplicate key value"
        assert exc_info.value.status_code == 500
        session.rollback.assert_awaited_once()
        session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_store_error_without_driver_error(self):
        session = FakeSession(execute_error=SQLAlchemyError("connection closed"))
        store = DataStore(session_factory=lambda: session)

        with pytest.raises(StoreWriteFailure) as exc_info:
            await store.insert_rows("sales_data", [{"product": "Soap", "period": "p"}])

        assert exc_info.value.message == "connection closed"

    @pytest.mark.asyncio
    async def test_unknown_table(self):
        store = DataStore(session_factory=MagicMock())
        with pytest.raises(StoreWriteFailure, match="Unknown table"):
            await store.insert_rows("missing_table", [{"a": 1}])


class TestDatabaseUrl:
    """Test per URL driver async."""

    def test_postgresql_url(self):
        assert get_async_database_url("postgresql://u:p@h/db") == "postgresql+asyncpg://u:p@h/db"

    def test_postgres_alias(self):
        assert get_async_database_url("postgres://u:p@h/db") == "postgresql+asyncpg://u:p@h/db"

    def test_other_url_unchanged(self):
        assert get_async_database_url("sqlite+aiosqlite:///x.db") == "sqlite+aiosqlite:///x.db"
