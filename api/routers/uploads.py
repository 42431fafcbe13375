"""
Router per upload report inventario e vendite.

Endpoint:
- POST /upload-inventory: Report inventario (.csv/.xlsx/.xls) → inventory_data
- POST /upload-sales: Report vendite → sales_data per periodo
"""
import calendar
import logging
from typing import Optional

from fastapi import APIRouter, File, Form, UploadFile
from fastapi.responses import JSONResponse

from core.config import get_config
from core.database import get_store
from core.logger import log_with_context, set_request_context
from ingest.errors import IngestError, MissingRequiredField
from ingest.pipeline import ingest_file
from ingest.types import Layout

logger = logging.getLogger(__name__)

router = APIRouter(tags=["uploads"])


def period_end_date(year: int, month: int) -> str:
    """
    Periodo normalizzato: ultimo giorno del mese in formato MM/DD/YYYY.

    Es. (2025, 10) → "10/31/2025".
    """
    if not 1 <= month <= 12:
        raise MissingRequiredField("Missing period")
    last_day = calendar.monthrange(year, month)[1]
    return f"{month:02d}/{last_day:02d}/{year:04d}"


def error_response(error: IngestError) -> JSONResponse:
    return JSONResponse({"error": error.message}, status_code=error.status_code)


async def _read_upload(file: Optional[UploadFile]) -> bytes:
    if file is None or not file.filename:
        raise MissingRequiredField("No file uploaded")
    return await file.read()


@router.post("/upload-inventory")
async def upload_inventory(
    file: Optional[UploadFile] = File(None),
    location: Optional[str] = Form(None),
    dry_run: bool = Form(False)
):
    """
    Importa un report inventario.

    Ogni riga dati diventa un record (campi mancanti a 0), con `location`
    e nome file allegati. Tutti i record vengono inseriti in un unico batch.
    """
    config = get_config()
    set_request_context(upload_kind="inventory", file_name=file.filename if file else None)

    try:
        file_content = await _read_upload(file)
        result = ingest_file(
            file_content,
            file.filename,
            Layout.FIXED_OFFSET,
            location=location
        )

        body = {"inserted": len(result.records), "headers_detected": result.headers_detected}

        if dry_run:
            log_with_context("info", f"Dry-run: {len(result.records)} inventory rows not saved")
            body["dry_run"] = True
            return body

        body["inserted"] = await get_store().insert_rows(config.inventory_table, result.rows())
        log_with_context("info", f"Inserted {body['inserted']} inventory rows from {file.filename}")
        return body

    except IngestError as e:
        log_with_context("warning" if e.status_code < 500 else "error", f"Upload failed: {e.message}")
        return error_response(e)
    except Exception as e:
        logger.error(f"[UPLOAD] Inventory upload failed: {e}", exc_info=True)
        return JSONResponse({"error": str(e)}, status_code=500)


@router.post("/upload-sales")
async def upload_sales(
    file: Optional[UploadFile] = File(None),
    period: Optional[str] = Form(None),
    year: Optional[int] = Form(None),
    month: Optional[int] = Form(None),
    dry_run: bool = Form(False)
):
    """
    Importa un report vendite per un periodo.

    `period` è una data normalizzata fornita dal chiamante; in alternativa
    `year` + `month` producono l'ultimo giorno del mese (MM/DD/YYYY).
    """
    config = get_config()
    set_request_context(upload_kind="sales", file_name=file.filename if file else None)

    try:
        file_content = await _read_upload(file)

        period = (period or "").strip()
        if not period:
            if year is None or month is None:
                raise MissingRequiredField("Missing period")
            period = period_end_date(year, month)

        result = ingest_file(
            file_content,
            file.filename,
            Layout.HEURISTIC,
            period=period
        )

        if dry_run:
            log_with_context("info", f"Dry-run: {len(result.records)} sales rows not saved")
            return {
                "inserted": len(result.records),
                "period": period,
                "status": "preview",
                "dry_run": True
            }

        inserted = await get_store().insert_rows(config.sales_table, result.rows())
        log_with_context("info", f"Inserted {inserted} sales rows for period {period}")
        return {"inserted": inserted, "period": period, "status": "success"}

    except IngestError as e:
        log_with_context("warning" if e.status_code < 500 else "error", f"Upload failed: {e.message}")
        return error_response(e)
    except Exception as e:
        logger.error(f"[UPLOAD] Sales upload failed: {e}", exc_info=True)
        return JSONResponse({"error": str(e)}, status_code=500)
