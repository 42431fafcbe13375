"""
Normalization per celle di foglio di calcolo.

Due strategie di normalizzazione header, volutamente separate:
- phrase: match esatto di frase (layout inventario, es. "on hand")
- token: match per sottostringa senza punteggiatura/spazi (layout vendite,
  es. "Qty." e "Quantity Shipped" contengono entrambi un segnale quantità)

Più la coercizione numerica con default globale a 0.
"""
import math
import re
from typing import Any, Iterable, Union

# Default applicato a ogni campo numerico mancante o non interpretabile
DEFAULT_NUMBER = 0

_LINE_BREAK_RE = re.compile(r'\r\n|\r|\n')
_WHITESPACE_RE = re.compile(r'\s+')
_NON_TOKEN_RE = re.compile(r'[^a-z0-9]')
_NON_NUMERIC_RE = re.compile(r'[^0-9.\-]')


def normalize_header_phrase(cell: Any) -> str:
    """
    Normalizza header per match esatto di frase.

    CR/LF → spazio, rimuove virgolette doppie, collassa spazi multipli,
    trim e lowercase. Gli spazi interni restano ("On\\nHand" → "on hand").

    Args:
        cell: Valore cella header (qualsiasi tipo)

    Returns:
        Frase canonica
    """
    if cell is None:
        return ""
    text = _LINE_BREAK_RE.sub(' ', str(cell))
    text = text.replace('"', '')
    text = _WHITESPACE_RE.sub(' ', text)
    return text.strip().lower()


def normalize_header_token(cell: Any) -> str:
    """
    Normalizza header per match fuzzy a sottostringa.

    Lowercase e rimozione di tutto ciò che non è lettera minuscola o cifra
    ("Qty." → "qty", "Gross Sales" → "grosssales").
    """
    if not cell:
        return ""
    return _NON_TOKEN_RE.sub('', str(cell).lower())


def coerce_number(cell: Any) -> Union[int, float]:
    """
    Converte una cella in numero finito.

    Regole:
    - None → DEFAULT_NUMBER
    - int/float già numerici → restituiti invariati (nessun re-parsing)
    - stringhe → NBSP in spazio, rimozione di tutto tranne cifre, punto e
      meno ("$1,234.50" → 1234.5), parse float
    - risultato non finito o non interpretabile → DEFAULT_NUMBER

    Args:
        cell: Valore cella

    Returns:
        Numero finito
    """
    if cell is None:
        return DEFAULT_NUMBER

    if isinstance(cell, (int, float)) and not isinstance(cell, bool):
        if isinstance(cell, float) and not math.isfinite(cell):
            return DEFAULT_NUMBER
        return cell

    text = str(cell).replace('\u00a0', ' ')
    text = _NON_NUMERIC_RE.sub('', text).strip()
    if not text:
        return DEFAULT_NUMBER

    try:
        value = float(text)
    except ValueError:
        return DEFAULT_NUMBER

    return value if math.isfinite(value) else DEFAULT_NUMBER


def cell_text(cell: Any) -> str:
    """
    Rende una cella come testo per i campi descrittivi.

    I float interi letti da Excel perdono il ".0" (100.0 → "100").
    """
    if cell is None:
        return ""
    if isinstance(cell, float) and math.isfinite(cell) and cell.is_integer():
        return str(int(cell))
    return str(cell)


def is_blank_row(row: Iterable[Any]) -> bool:
    """True se nessuna cella della riga contiene testo non vuoto."""
    return all(cell_text(cell).strip() == '' for cell in row)
