"""
Column Mapper - Mappa campi semantici su colonne sorgente.

- PhraseColumnMap (inventario): frase canonica → indice colonna, match esatto
- TokenColumnMap (vendite): indice colonna → token, match a sottostringa
"""
import logging
from typing import Dict, List, Optional, Sequence, Tuple

from ingest.normalization import normalize_header_phrase, normalize_header_token
from ingest.types import Cell, Row

logger = logging.getLogger(__name__)

# Campo record → frase header canonica nel report inventario
INVENTORY_TEXT_FIELDS = {
    'part': 'part',
    'description': 'description',
    'uom': 'uom',
}

INVENTORY_NUMERIC_FIELDS = {
    'on_hand': 'on hand',
    'allocated': 'allocated',
    'not_available': 'not available',
    'drop_ship': 'drop ship',
    'available': 'available',
    'on_order': 'on order',
    'committed': 'committed',
    'short': 'short',
}

# Spelling alternativo (header grezzo) usato se la frase canonica manca
INVENTORY_FALLBACK_HEADERS = {
    'part': 'Part',
}

# Ordine significativo: una colonna viene classificata dalla prima regola che matcha
SALES_FIELD_SIGNALS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ('product', ('product',)),
    ('qty', ('qty', 'quantity')),
    ('sales', ('sale',)),
)


class PhraseColumnMap:
    """Mappa frase canonica → colonna, costruita una volta per file."""

    def __init__(self, header: Optional[Row]):
        self.header: Row = list(header or [])
        self._by_phrase: Dict[str, int] = {}
        self._by_raw: Dict[str, int] = {}

        for idx, cell in enumerate(self.header):
            phrase = normalize_header_phrase(cell)
            if not phrase:
                continue
            self._by_phrase.setdefault(phrase, idx)
            self._by_raw.setdefault(str(cell), idx)

    @property
    def detected_headers(self) -> List[str]:
        return list(self._by_phrase.keys())

    def column_for(self, phrase: str, fallback_header: Optional[str] = None) -> Optional[int]:
        """Indice colonna per la frase, poi per lo spelling alternativo, altrimenti None."""
        if phrase in self._by_phrase:
            return self._by_phrase[phrase]
        if fallback_header is not None and fallback_header in self._by_raw:
            return self._by_raw[fallback_header]
        return None

    def value(self, row: Row, phrase: str, fallback_header: Optional[str] = None) -> Cell:
        idx = self.column_for(phrase, fallback_header)
        if idx is None or idx >= len(row):
            return None
        return row[idx]


def classify_sales_token(token: str) -> Optional[str]:
    """Campo vendite indicato dal token header ('product', 'qty', 'sales') o None."""
    for field_name, signals in SALES_FIELD_SIGNALS:
        if any(signal in token for signal in signals):
            return field_name
    return None


class TokenColumnMap:
    """
    Mappa posizione colonna → token header, con risoluzione campo → colonna.

    Per ogni campo vince la prima colonna classificata per esso; le colonne
    successive con lo stesso segnale vengono ignorate.
    """

    def __init__(self, header: Sequence[Cell]):
        self.tokens: Dict[int, str] = {
            idx: normalize_header_token(cell) for idx, cell in enumerate(header)
        }
        self.fields: Dict[str, int] = {}

        for idx, token in self.tokens.items():
            field_name = classify_sales_token(token)
            if field_name is None:
                continue
            if field_name in self.fields:
                logger.debug(
                    f"[COLUMN_MAPPER] Colonna {idx} ('{token}') ignorata: "
                    f"campo '{field_name}' già mappato a colonna {self.fields[field_name]}"
                )
                continue
            self.fields[field_name] = idx

        logger.info(f"[COLUMN_MAPPER] Sales columns resolved: {self.fields}")

    @property
    def detected_headers(self) -> List[str]:
        return [self.tokens[idx] for idx in sorted(self.fields.values())]

    def column_for(self, field_name: str) -> Optional[int]:
        return self.fields.get(field_name)

    def value(self, row: Row, field_name: str) -> Cell:
        idx = self.fields.get(field_name)
        if idx is None or idx >= len(row):
            return None
        return row[idx]
