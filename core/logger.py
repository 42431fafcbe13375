"""
Logging strutturato per ops-dashboard-ingest.

Unifica logging colorato e structured logging con supporto JSON.
"""
import logging
import json
import uuid
import sys
import contextvars
from typing import Optional, Dict, Any
from datetime import datetime, timezone

import colorlog

# Context variables per tracciare richieste
_request_context: contextvars.ContextVar[Dict[str, Any]] = contextvars.ContextVar('request_context', default={})


def setup_colored_logging(service_name: str = "ingest"):
    """
    Configura logging colorato con colorlog.

    Args:
        service_name: Nome del servizio per identificare log
    """
    handler = colorlog.StreamHandler(sys.stdout)
    handler.setLevel(logging.DEBUG)

    formatter = colorlog.ColoredFormatter(
        f'%(log_color)s[%(levelname)s]%(reset)s %(cyan)s{service_name}%(reset)s | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
        reset=True,
        log_colors={
            'DEBUG': 'white',
            'INFO': 'blue',
            'WARNING': 'yellow',
            'ERROR': 'red',
            'CRITICAL': 'red,bg_white',
        },
        secondary_log_colors={},
        style='%'
    )
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.INFO)
    root_logger.handlers = []
    root_logger.addHandler(handler)

    # Riduci verbosità librerie
    logging.getLogger('sqlalchemy.engine').setLevel(logging.WARNING)
    logging.getLogger('multipart').setLevel(logging.WARNING)

    return root_logger


def set_request_context(
    upload_kind: Optional[str] = None,
    file_name: Optional[str] = None,
    correlation_id: Optional[str] = None
) -> Dict[str, Any]:
    """
    Imposta contesto richiesta per logging strutturato.

    Args:
        upload_kind: 'inventory' o 'sales'
        file_name: Nome file caricato
        correlation_id: ID correlazione (genera se None)
    """
    if correlation_id is None:
        correlation_id = str(uuid.uuid4())

    context: Dict[str, Any] = {"correlation_id": correlation_id}
    if upload_kind is not None:
        context["upload_kind"] = upload_kind
    if file_name is not None:
        context["file_name"] = file_name

    _request_context.set(context)
    return context


def get_request_context() -> Dict[str, Any]:
    """Recupera contesto richiesta corrente."""
    return _request_context.get({})


def log_with_context(level: str, message: str, **extra):
    """
    Log con prefissi di contesto (correlation_id, upload_kind).

    Args:
        level: 'info', 'warning', 'error', 'debug'
        message: Messaggio da loggare
    """
    ctx = get_request_context()

    log_message = message
    if ctx.get("upload_kind"):
        log_message = f"[{ctx['upload_kind']}] {log_message}"
    if ctx.get("correlation_id"):
        log_message = f"[correlation_id={ctx['correlation_id']}] {log_message}"

    logger = logging.getLogger(__name__)
    log_func = getattr(logger, level.lower(), logger.info)
    log_func(log_message, **extra)


def log_json(
    level: str,
    message: str,
    stage: Optional[str] = None,
    file_name: Optional[str] = None,
    rows_total: Optional[int] = None,
    rows_valid: Optional[int] = None,
    rows_rejected: Optional[int] = None,
    elapsed_sec: Optional[float] = None,
    decision: Optional[str] = None,
    **extra
):
    """
    Log strutturato in formato JSON line.

    Args:
        level: 'info', 'warning', 'error', 'debug'
        message: Messaggio da loggare
        stage: Fase pipeline (decode, header, build, store)
        file_name: Nome file processato
        rows_total: Numero righe dati
        rows_valid: Numero record emessi
        rows_rejected: Numero righe scartate
        elapsed_sec: Tempo elaborazione in secondi
        decision: Esito ('save', 'error', 'preview')
        **extra: Campi aggiuntivi
    """
    ctx = get_request_context()

    log_data: Dict[str, Any] = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "level": level.upper(),
        "message": message,
    }

    if ctx.get("correlation_id"):
        log_data["correlation_id"] = ctx["correlation_id"]
    if ctx.get("upload_kind"):
        log_data["upload_kind"] = ctx["upload_kind"]

    file_name = file_name or ctx.get("file_name")
    if file_name:
        log_data["file_name"] = file_name
    if stage:
        log_data["stage"] = stage

    if rows_total is not None:
        log_data["rows_total"] = rows_total
    if rows_valid is not None:
        log_data["rows_valid"] = rows_valid
    if rows_rejected is not None:
        log_data["rows_rejected"] = rows_rejected
    if elapsed_sec is not None:
        log_data["elapsed_sec"] = round(elapsed_sec, 4)
    if decision:
        log_data["decision"] = decision

    log_data.update(extra)

    logger = logging.getLogger(__name__)
    log_func = getattr(logger, level.lower(), logger.info)
    log_func(json.dumps(log_data, ensure_ascii=False, default=str))
