"""
Record Builder - Trasforma righe dati in record di dominio.

Inventario: un record per ogni riga, nessuno scarto (snapshot completo).
Vendite: scarta righe continuazione UPC, subtotali e righe vuote.
"""
import logging
import re
from typing import List, Optional

from ingest.column_mapper import (
    INVENTORY_FALLBACK_HEADERS,
    INVENTORY_NUMERIC_FIELDS,
    INVENTORY_TEXT_FIELDS,
    PhraseColumnMap,
    TokenColumnMap,
)
from ingest.header_detector import HeaderLocation
from ingest.normalization import cell_text, coerce_number
from ingest.types import InventoryRecord, Row, SalesRecord

logger = logging.getLogger(__name__)

UPC_CONTINUATION_RE = re.compile(r'^upc', re.IGNORECASE)


def _text_field(row: Row, column_map: PhraseColumnMap, field_name: str) -> Optional[str]:
    phrase = INVENTORY_TEXT_FIELDS[field_name]
    fallback = INVENTORY_FALLBACK_HEADERS.get(field_name)
    if column_map.column_for(phrase, fallback) is None:
        return None
    return cell_text(column_map.value(row, phrase, fallback))


def build_inventory_record(
    row: Row,
    column_map: PhraseColumnMap,
    location: Optional[str],
    file_name: str
) -> InventoryRecord:
    """
    Costruisce un InventoryRecord da una riga dati.

    Campi testo: None se la colonna manca, altrimenti testo della cella.
    Campi numerici: coerce_number (default 0).
    """
    text_values = {name: _text_field(row, column_map, name) for name in INVENTORY_TEXT_FIELDS}
    numeric_values = {
        name: coerce_number(column_map.value(row, phrase))
        for name, phrase in INVENTORY_NUMERIC_FIELDS.items()
    }
    return InventoryRecord(
        location=location,
        source_file_name=file_name,
        **text_values,
        **numeric_values
    )


def build_inventory_records(
    header_location: HeaderLocation,
    column_map: PhraseColumnMap,
    location: Optional[str],
    file_name: str
) -> List[InventoryRecord]:
    records = [
        build_inventory_record(row, column_map, location, file_name)
        for row in header_location.data_rows
    ]
    logger.info(f"[RECORD_BUILDER] Built {len(records)} inventory records from {file_name}")
    return records


def is_valid_sales_record(record: SalesRecord) -> bool:
    """Record valido se prodotto non vuoto E (qty > 0 O sales > 0)."""
    return bool(record.product) and (record.qty > 0 or record.sales > 0)


def build_sales_record(row: Row, column_map: TokenColumnMap, period: str) -> Optional[SalesRecord]:
    """
    Costruisce un SalesRecord da una riga dati.

    Le righe continuazione (codice a barre "UPC ..." nella colonna prodotto)
    hanno il prodotto svuotato e vengono quindi scartate.

    Returns:
        SalesRecord, o None se la riga va scartata
    """
    product = ''
    if column_map.column_for('product') is not None:
        product = cell_text(column_map.value(row, 'product')).strip()

    if UPC_CONTINUATION_RE.match(product):
        product = ''

    record = SalesRecord(
        product=product,
        qty=coerce_number(column_map.value(row, 'qty')),
        sales=coerce_number(column_map.value(row, 'sales')),
        period=period
    )
    return record if is_valid_sales_record(record) else None


def build_sales_records(
    header_location: HeaderLocation,
    column_map: TokenColumnMap,
    period: str
) -> List[SalesRecord]:
    records: List[SalesRecord] = []
    for row in header_location.data_rows:
        record = build_sales_record(row, column_map, period)
        if record is not None:
            records.append(record)

    logger.info(
        f"[RECORD_BUILDER] Built {len(records)} sales records, "
        f"{len(header_location.data_rows) - len(records)} rows discarded"
    )
    return records
