"""
Gate - Routing file per tipo.

Determina il decoder da usare in base all'estensione del file.
"""
import logging
from typing import Optional

from ingest.errors import UnsupportedFileType
from ingest.types import FileKind

logger = logging.getLogger(__name__)

CSV_EXTENSIONS = ('csv',)
SPREADSHEET_EXTENSIONS = ('xlsx', 'xls')


def detect_file_kind(file_name: str, file_kind: Optional[str] = None) -> FileKind:
    """
    Determina il tipo file dall'estensione (case-insensitive).

    Args:
        file_name: Nome file caricato
        file_kind: Tipo esplicito ('csv' o 'spreadsheet'); se None usa il nome file

    Returns:
        'csv' per file delimitati, 'spreadsheet' per .xlsx/.xls

    Raises:
        UnsupportedFileType: Se estensione o tipo non supportati
    """
    if file_kind is not None:
        if file_kind in ('csv', 'spreadsheet'):
            return file_kind
        logger.error(f"[GATE] Unknown file kind '{file_kind}' for {file_name}")
        raise UnsupportedFileType()

    ext = file_name.rsplit('.', 1)[-1].lower().strip() if '.' in (file_name or '') else ''

    if ext in CSV_EXTENSIONS:
        logger.info(f"[GATE] File {file_name} routed to CSV decoder")
        return 'csv'

    if ext in SPREADSHEET_EXTENSIONS:
        logger.info(f"[GATE] File {file_name} routed to spreadsheet decoder")
        return 'spreadsheet'

    logger.error(f"[GATE] Unsupported file type: {file_name!r}. Supported: CSV, XLSX, XLS")
    raise UnsupportedFileType()
