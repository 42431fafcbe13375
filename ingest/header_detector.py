"""
Header Detector - Individua la riga header in una RawGrid.

Due policy:
- fixed-offset: header a un indice di riga noto (template report inventario)
- heuristic: scansione dall'alto per la prima riga con firma
  "product" + ("qty"/"quantity" o "sales"), saltando le righe titolo
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from ingest.errors import HeaderNotFound
from ingest.normalization import is_blank_row, normalize_header_token
from ingest.types import RawGrid, Row

logger = logging.getLogger(__name__)

# Titoli report già normalizzati a token (es. "Gross Sales By Product")
REPORT_TITLE_MARKERS = ('grosssalesbyproduct',)

PRODUCT_SIGNALS = ('product',)
QTY_SIGNALS = ('qty', 'quantity')
SALES_SIGNALS = ('sales',)


@dataclass
class HeaderLocation:
    row_index: int
    header: Row
    data_rows: List[Row] = field(default_factory=list)
    leading_columns_trimmed: int = 0


def locate_fixed_header(grid: RawGrid, offset: int) -> Optional[HeaderLocation]:
    """
    Header all'indice fisso `offset` (0-based).

    Le righe completamente vuote dopo l'header sono escluse (come per CSV);
    quelle prima dell'header contano per l'offset.

    Returns:
        HeaderLocation, o None se la griglia ha meno righe del necessario
    """
    if offset < 0 or len(grid) <= offset:
        logger.warning(
            f"[HEADER_DETECTOR] Grid has {len(grid)} rows, header offset {offset} out of range"
        )
        return None

    return HeaderLocation(
        row_index=offset,
        header=list(grid[offset]),
        data_rows=[list(row) for row in grid[offset + 1:] if not is_blank_row(row)]
    )


def _has_signal(tokens: Sequence[str], signals: Sequence[str]) -> bool:
    return any(signal in token for token in tokens for signal in signals)


def is_report_title_row(row: Row, markers: Sequence[str] = REPORT_TITLE_MARKERS) -> bool:
    """True se la concatenazione dei token della riga contiene un titolo report."""
    joined = ''.join(normalize_header_token(cell) for cell in row)
    return any(marker and marker in joined for marker in markers)


def is_sales_header_row(row: Row, markers: Sequence[str] = REPORT_TITLE_MARKERS) -> bool:
    """
    Verifica se una riga è l'header del report vendite.

    Una riga è header se:
    - non è una riga titolo (anche se contiene "product" e "qty")
    - almeno una cella contiene "product"
    - almeno una cella contiene "qty"/"quantity" oppure "sales"

    Args:
        row: Celle della riga
        markers: Titoli report da escludere (normalizzati a token)

    Returns:
        True se la riga sembra essere l'header
    """
    if is_report_title_row(row, markers):
        return False

    tokens = [normalize_header_token(cell) for cell in row]
    has_product = _has_signal(tokens, PRODUCT_SIGNALS)
    has_qty = _has_signal(tokens, QTY_SIGNALS)
    has_sales = _has_signal(tokens, SALES_SIGNALS)
    return has_product and (has_qty or has_sales)


def locate_sales_header(
    grid: RawGrid,
    markers: Sequence[str] = REPORT_TITLE_MARKERS
) -> HeaderLocation:
    """
    Trova la prima riga header (dall'alto) e rimuove le colonne vuote iniziali.

    Le colonne iniziali il cui header normalizza a token vuoto vengono tolte
    sia dall'header sia da ogni riga dati successiva.

    Raises:
        HeaderNotFound: Se nessuna riga soddisfa il predicato
    """
    for idx, row in enumerate(grid):
        if not is_sales_header_row(row, markers):
            continue

        first_non_empty = next(
            (i for i, cell in enumerate(row) if normalize_header_token(cell) != ''),
            0
        )
        location = HeaderLocation(
            row_index=idx,
            header=list(row[first_non_empty:]),
            data_rows=[list(data_row[first_non_empty:]) for data_row in grid[idx + 1:]],
            leading_columns_trimmed=first_non_empty
        )
        logger.info(
            f"[HEADER_DETECTOR] Header trovato alla riga {idx}: {location.header[:5]} "
            f"({first_non_empty} colonne iniziali rimosse)"
        )
        return location

    logger.error(f"[HEADER_DETECTOR] Could not locate header row in {len(grid)} rows")
    raise HeaderNotFound()
