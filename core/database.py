"""
Database core module per ops-dashboard-ingest.

Gestisce connessione, tabelle inventario/vendite e insert batch atomico.
Il servizio scrive soltanto: le righe non vengono mai rilette.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List

from sqlalchemy import Column, DateTime, Float, Integer, String, Text, insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from core.config import get_config
from ingest.errors import StoreWriteFailure

logger = logging.getLogger(__name__)

# Base per i modelli
Base = declarative_base()

_config = get_config()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class InventoryData(Base):
    """Una riga per (part, location, upload) dal report inventario."""
    __tablename__ = _config.inventory_table

    id = Column(Integer, primary_key=True)
    part = Column(String(200), index=True)
    description = Column(Text)
    uom = Column(String(50))
    on_hand = Column(Float, default=0)
    allocated = Column(Float, default=0)
    not_available = Column(Float, default=0)
    drop_ship = Column(Float, default=0)
    available = Column(Float, default=0)
    on_order = Column(Float, default=0)
    committed = Column(Float, default=0)
    short = Column(Float, default=0)
    location = Column(String(200), index=True)
    source_file_name = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=_utcnow)


class SalesData(Base):
    """Una riga per prodotto e periodo dal report vendite."""
    __tablename__ = _config.sales_table

    id = Column(Integer, primary_key=True)
    product = Column(String(255), nullable=False, index=True)
    qty = Column(Float, default=0)
    sales = Column(Float, default=0)
    period = Column(String(50), nullable=False, index=True)
    created_at = Column(DateTime, default=_utcnow)


def get_async_database_url(database_url: str) -> str:
    """Forza il driver asyncpg sull'URL PostgreSQL."""
    if database_url.startswith("postgres://"):
        database_url = "postgresql://" + database_url[len("postgres://"):]
    if database_url.startswith("postgresql://"):
        return database_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return database_url


# Engine asincrono per PostgreSQL
engine = create_async_engine(get_async_database_url(_config.database_url), echo=False)

# Session factory asincrona
AsyncSessionLocal = sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False
)


async def create_tables():
    """Crea tabelle se non esistono."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def check_connection() -> str:
    """Stato connessione database per /health."""
    try:
        async with AsyncSessionLocal() as session:
            await session.execute(select(1))
        return "connected"
    except Exception as e:
        return f"error: {str(e)}"


class DataStore:
    """
    Store esterno: inserisce righe in una tabella in un unico batch.

    Nessun chunking né retry: o tutte le righe passano in una transazione,
    o l'errore dello store viene riportato invariato.
    """

    def __init__(self, session_factory=AsyncSessionLocal):
        self.session_factory = session_factory

    async def insert_rows(self, table_name: str, rows: List[Dict[str, Any]]) -> int:
        """
        Inserisce righe in batch con transaction atomica.

        Args:
            table_name: Nome tabella (inventory_data / sales_data)
            rows: Lista dizionari colonna → valore

        Returns:
            Numero righe inserite

        Raises:
            StoreWriteFailure: Se lo store rifiuta l'insert
        """
        if not rows:
            return 0

        table = Base.metadata.tables.get(table_name)
        if table is None:
            raise StoreWriteFailure(f"Unknown table: {table_name}")

        async with self.session_factory() as session:
            try:
                await session.execute(insert(table), rows)
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(f"[BATCH_INSERT] Insert into {table_name} failed: {e}")
                raise StoreWriteFailure(str(getattr(e, "orig", None) or e)) from e

        logger.info(f"[BATCH_INSERT] Inserted {len(rows)} rows into {table_name}")
        return len(rows)


_store: DataStore | None = None


def get_store() -> DataStore:
    """Ottiene istanza DataStore (singleton)."""
    global _store
    if _store is None:
        _store = DataStore()
    return _store
