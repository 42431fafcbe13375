"""
Pipeline Orchestratore - Decode → Header → Mapping → Record.

Gestisce il flusso completo per i due layout:
- FIXED_OFFSET (inventario): header a riga fissa, nessuno scarto righe
- HEURISTIC (vendite): header cercato per contenuto, filtro righe rumore

Sincrona e senza stato condiviso: ogni chiamata lavora sulla propria griglia.
L'insert nello store è responsabilità del chiamante (un solo batch).
"""
import logging
import time
from typing import Optional

from core.config import DashboardConfig, get_config
from core.logger import log_json
from ingest.column_mapper import PhraseColumnMap, TokenColumnMap
from ingest.csv_parser import parse_csv
from ingest.errors import (
    EmptyFile,
    IngestError,
    MissingRequiredField,
    NoValidRecords,
    UnexpectedFailure,
)
from ingest.excel_parser import parse_excel
from ingest.gate import detect_file_kind
from ingest.header_detector import HeaderLocation, locate_fixed_header, locate_sales_header
from ingest.record_builder import build_inventory_records, build_sales_records
from ingest.types import FileKind, IngestResult, Layout, RawGrid

logger = logging.getLogger(__name__)


def decode_file(file_content: bytes, file_kind: FileKind) -> tuple:
    """
    Decodifica bytes in RawGrid secondo il tipo file.

    Raises:
        UnexpectedFailure: Se il decoder fallisce
    """
    try:
        if file_kind == 'csv':
            return parse_csv(file_content)
        return parse_excel(file_content)
    except Exception as e:
        logger.error(f"[PIPELINE] Decode failed ({file_kind}): {e}", exc_info=True)
        raise UnexpectedFailure(str(e)) from e


def _ingest_inventory(
    grid: RawGrid,
    file_kind: FileKind,
    file_name: str,
    location: Optional[str],
    config: DashboardConfig
) -> IngestResult:
    offset = config.inventory_csv_header_row if file_kind == 'csv' else config.inventory_header_row
    header_location = locate_fixed_header(grid, offset)
    if header_location is None:
        # Nessun header: ogni campo risulta "non trovato"
        header_location = HeaderLocation(row_index=offset, header=[], data_rows=[])

    if not header_location.data_rows:
        raise EmptyFile("No data rows found")

    column_map = PhraseColumnMap(header_location.header)
    logger.info(f"[PIPELINE] Parsed headers: {column_map.detected_headers}")

    records = build_inventory_records(header_location, column_map, location, file_name)
    if records:
        logger.debug(f"[PIPELINE] First mapped row: {records[0].to_row()}")

    return IngestResult(
        records=records,
        headers_detected=column_map.detected_headers,
        header_row=header_location.row_index,
        rows_total=len(header_location.data_rows),
        rows_rejected=0
    )


def _ingest_sales(grid: RawGrid, period: str, config: DashboardConfig) -> IngestResult:
    header_location = locate_sales_header(grid, config.get_sales_title_markers())
    column_map = TokenColumnMap(header_location.header)

    records = build_sales_records(header_location, column_map, period)
    if not records:
        logger.warning("[PIPELINE] No valid rows extracted - check data formatting")
        raise NoValidRecords()

    return IngestResult(
        records=records,
        headers_detected=column_map.detected_headers,
        header_row=header_location.row_index,
        rows_total=len(header_location.data_rows),
        rows_rejected=len(header_location.data_rows) - len(records)
    )


def ingest_file(
    file_content: bytes,
    file_name: str,
    layout: Layout,
    *,
    file_kind: Optional[str] = None,
    location: Optional[str] = None,
    period: Optional[str] = None,
    config: Optional[DashboardConfig] = None
) -> IngestResult:
    """
    Orchestratore principale della pipeline di ingest.

    Flow (si interrompe al primo errore):
    1. Gate: tipo file da estensione → UnsupportedFileType
    2. Decode in RawGrid → EmptyFile se zero righe
    3. Header: riga fissa (inventario) o ricerca euristica (vendite) → HeaderNotFound
    4. Column mapping
    5. Record: inventario senza scarti; vendite filtrate → NoValidRecords

    Args:
        file_content: Contenuto file (bytes)
        file_name: Nome file originale
        layout: Layout.FIXED_OFFSET (inventario) o Layout.HEURISTIC (vendite)
        file_kind: 'csv' o 'spreadsheet' (se None, da estensione)
        location: Tag località per inventario (può mancare)
        period: Periodo di riferimento per vendite (obbligatorio)
        config: Configurazione (default get_config())

    Returns:
        IngestResult con record e header rilevati

    Raises:
        IngestError: Sottoclasse specifica per ogni fallimento
    """
    start_time = time.time()
    config = config or get_config()
    layout = Layout(layout)

    try:
        if layout is Layout.HEURISTIC and not period:
            raise MissingRequiredField("Missing period")

        kind = detect_file_kind(file_name, file_kind)
        empty_message = "No data rows found" if layout is Layout.FIXED_OFFSET else "Empty file detected"
        if not file_content:
            raise EmptyFile(empty_message)

        grid, detection_info = decode_file(file_content, kind)
        if not grid:
            raise EmptyFile(empty_message)

        if layout is Layout.FIXED_OFFSET:
            result = _ingest_inventory(grid, kind, file_name, location, config)
        else:
            result = _ingest_sales(grid, period, config)

        result.file_kind = kind
        result.detection_info = detection_info

    except IngestError as e:
        log_json(
            level='warning' if e.status_code < 500 else 'error',
            message=f"Ingest failed: {e.message}",
            stage=layout.value,
            file_name=file_name,
            elapsed_sec=time.time() - start_time,
            decision='error',
            error_type=type(e).__name__
        )
        raise

    log_json(
        level='info',
        message=f"Ingest completed: {len(result.records)} records",
        stage=layout.value,
        file_name=file_name,
        rows_total=result.rows_total,
        rows_valid=len(result.records),
        rows_rejected=result.rows_rejected,
        elapsed_sec=time.time() - start_time,
        decision='save',
        header_row=result.header_row,
        headers_detected=result.headers_detected
    )
    logger.info(
        f"[PIPELINE] Completed: {file_name} | layout={layout.value}, "
        f"records={len(result.records)}, rejected={result.rows_rejected}"
    )
    return result
