"""
CSV Parser.

Decodifica CSV in RawGrid (encoding detection, delimiter sniff, csv reader).
Le righe restano irregolari: righe titolo con una sola cella convivono con
righe dati più larghe.
"""
import io
import codecs
import csv
import logging
import chardet
from typing import Tuple, Dict, Any, Optional

from ingest.normalization import is_blank_row
from ingest.types import RawGrid

logger = logging.getLogger(__name__)

ENCODING_FALLBACKS = ['utf-8-sig', 'utf-8', 'cp1252', 'latin-1']
SEPARATORS = [',', ';', '\t', '|']

# Soglia oltre la quale si prova prima l'encoding suggerito da chardet
CHARDET_MIN_CONFIDENCE = 0.9


def _normalize_encoding_name(name: Optional[str]) -> Optional[str]:
    """Nome codec Python per il suggerimento chardet (latin-1/ascii → cp1252)."""
    if not name:
        return None
    try:
        codec = codecs.lookup(name).name
    except LookupError:
        return None
    if codec in ('iso8859-1', 'ascii'):
        return 'cp1252'
    return codec


def detect_encoding(file_content: bytes) -> Tuple[str, float]:
    """
    Rileva encoding file.

    Ordine: utf-8-sig → utf-8 → suggerimento chardet (se affidabile) →
    cp1252 → latin-1. latin-1 decodifica qualunque byte, quindi resta ultimo.

    Args:
        file_content: Contenuto file (bytes)

    Returns:
        Tuple (encoding, confidence)
    """
    encoding_result = chardet.detect(file_content[:10000])
    confidence = encoding_result.get('confidence') or 0.0

    candidates = list(ENCODING_FALLBACKS)
    guess = _normalize_encoding_name(encoding_result.get('encoding'))
    if guess and confidence >= CHARDET_MIN_CONFIDENCE and guess not in candidates[:2]:
        candidates.insert(2, guess)

    for enc in candidates:
        try:
            file_content.decode(enc)
            logger.debug(f"[CSV_PARSER] Encoding detection: {enc} (confidence={confidence:.2f})")
            return enc, confidence
        except (UnicodeDecodeError, LookupError):
            continue

    logger.warning("[CSV_PARSER] Encoding detection failed, using utf-8 with errors='ignore'")
    return 'utf-8', 0.0


def detect_delimiter(text: str, sample_lines: int = 10) -> str:
    """
    Rileva separatore CSV usando csv.Sniffer + fallback a punteggio.

    Args:
        text: Contenuto file decodificato
        sample_lines: Numero righe da analizzare

    Returns:
        Separatore CSV (',', ';', '\\t', '|')
    """
    lines = text.splitlines()[:sample_lines]
    non_empty_lines = [l for l in lines if l.strip()]

    if not non_empty_lines:
        return ','

    try:
        sniffer = csv.Sniffer()
        sample = '\n'.join(non_empty_lines[:3])
        delimiter = sniffer.sniff(sample, delimiters=''.join(SEPARATORS)).delimiter
        logger.debug(f"[CSV_PARSER] CSV Sniffer detected delimiter: '{delimiter}'")
        return delimiter
    except csv.Error:
        pass

    # Fallback: il separatore che produce più colonne, bonus se consistente
    separator_scores = {}
    for sep in SEPARATORS:
        column_counts = [len(line.split(sep)) for line in non_empty_lines]
        score = sum(count for count in column_counts if count >= 2)
        if score and len(set(column_counts)) == 1:
            score *= 2
        separator_scores[sep] = score

    best_sep = max(separator_scores.items(), key=lambda x: x[1])[0]
    if separator_scores[best_sep] == 0:
        best_sep = ','
    logger.debug(f"[CSV_PARSER] Fallback delimiter detection: '{best_sep}'")
    return best_sep


def parse_csv(
    file_content: bytes,
    separator: Optional[str] = None,
    encoding: Optional[str] = None
) -> Tuple[RawGrid, Dict[str, Any]]:
    """
    Parse file CSV in una griglia di righe.

    Le righe completamente vuote vengono saltate.

    Args:
        file_content: Contenuto file (bytes)
        separator: Separatore CSV (se None, auto-rileva)
        encoding: Encoding file (se None, auto-rileva)

    Returns:
        Tuple (grid, detection_info):
        - grid: Lista righe, ogni riga lista di stringhe
        - detection_info: Dict con encoding, separator, rows
    """
    method = 'provided' if separator is not None else 'auto-detected'

    if encoding is None:
        encoding, enc_confidence = detect_encoding(file_content)
    else:
        enc_confidence = 1.0

    text = file_content.decode(encoding, errors='ignore')

    if separator is None:
        separator = detect_delimiter(text)

    reader = csv.reader(io.StringIO(text), delimiter=separator)
    grid: RawGrid = [list(row) for row in reader if not is_blank_row(row)]

    logger.info(
        f"[CSV_PARSER] CSV parsed: {len(grid)} rows, "
        f"encoding={encoding}, separator='{separator}'"
    )

    detection_info = {
        'encoding': encoding,
        'encoding_confidence': enc_confidence,
        'separator': separator,
        'rows': len(grid),
        'columns': max((len(row) for row in grid), default=0),
        'method': method
    }

    return grid, detection_info
