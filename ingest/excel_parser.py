"""
Excel Parser.

Decodifica .xlsx/.xls in RawGrid con pandas (primo sheet, nessun header).
"""
import pandas as pd
import io
import logging
from typing import Tuple, Dict, Any, List

from ingest.types import RawGrid, Row

logger = logging.getLogger(__name__)


def _row_from_series(values: List[Any]) -> Row:
    """Converte NaN in None e rimuove le celle vuote in coda."""
    row: Row = [None if pd.isna(value) else value for value in values]
    while row and row[-1] is None:
        row.pop()
    return row


def parse_excel(file_content: bytes) -> Tuple[RawGrid, Dict[str, Any]]:
    """
    Parse file Excel in una griglia di righe.

    Legge sempre il primo sheet: i report esportati hanno i dati lì, gli
    sheet successivi sono riepiloghi. Le celle numeriche restano numeriche.

    Args:
        file_content: Contenuto file (bytes)

    Returns:
        Tuple (grid, sheet_info):
        - grid: Lista righe (celle str/int/float/None)
        - sheet_info: Dict con sheet_name, total_sheets, rows, columns
    """
    excel_file = pd.ExcelFile(io.BytesIO(file_content))
    sheet_names = excel_file.sheet_names

    logger.info(f"[EXCEL_PARSER] Excel file has {len(sheet_names)} sheets: {sheet_names}")

    if not sheet_names:
        return [], {'sheet_name': None, 'total_sheets': 0, 'rows': 0, 'columns': 0}

    sheet_name = sheet_names[0]
    df = pd.read_excel(
        excel_file,
        sheet_name=sheet_name,
        header=None,
        dtype=object
    )

    grid: RawGrid = [_row_from_series(list(values)) for values in df.itertuples(index=False, name=None)]
    # Le righe vuote in coda non sono dati
    while grid and not grid[-1]:
        grid.pop()

    logger.info(
        f"[EXCEL_PARSER] Excel parsed: sheet='{sheet_name}', "
        f"{len(grid)} rows, {len(df.columns)} columns"
    )

    sheet_info = {
        'sheet_name': sheet_name,
        'total_sheets': len(sheet_names),
        'rows': len(grid),
        'columns': len(df.columns),
    }

    return grid, sheet_info
