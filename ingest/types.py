from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Literal, Any, Dict, List, Union

Cell = Union[str, int, float, None]
Row = List[Cell]
RawGrid = List[Row]

FileKind = Literal["csv", "spreadsheet"]


class Layout(str, Enum):
    """Layout sorgente: seleziona la terna (locator, mapper, builder)."""
    FIXED_OFFSET = "fixed-offset"
    HEURISTIC = "heuristic"


@dataclass(frozen=True)
class InventoryRecord:
    part: Optional[str]
    description: Optional[str]
    uom: Optional[str]
    on_hand: float = 0
    allocated: float = 0
    not_available: float = 0
    drop_ship: float = 0
    available: float = 0
    on_order: float = 0
    committed: float = 0
    short: float = 0
    location: Optional[str] = None
    source_file_name: str = ""

    def to_row(self) -> Dict[str, Any]:
        return {
            "part": self.part,
            "description": self.description,
            "uom": self.uom,
            "on_hand": self.on_hand,
            "allocated": self.allocated,
            "not_available": self.not_available,
            "drop_ship": self.drop_ship,
            "available": self.available,
            "on_order": self.on_order,
            "committed": self.committed,
            "short": self.short,
            "location": self.location,
            "source_file_name": self.source_file_name,
        }


@dataclass(frozen=True)
class SalesRecord:
    product: str
    qty: float = 0
    sales: float = 0
    period: str = ""

    def to_row(self) -> Dict[str, Any]:
        return {
            "product": self.product,
            "qty": self.qty,
            "sales": self.sales,
            "period": self.period,
        }


Record = Union[InventoryRecord, SalesRecord]


@dataclass
class IngestResult:
    records: List[Record]
    headers_detected: List[str]
    header_row: Optional[int] = None
    rows_total: int = 0
    rows_rejected: int = 0
    file_kind: Optional[FileKind] = None
    detection_info: Dict[str, Any] = field(default_factory=dict)

    def rows(self) -> List[Dict[str, Any]]:
        """Record pronti per l'insert batch."""
        return [record.to_row() for record in self.records]
