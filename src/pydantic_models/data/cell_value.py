from __future__ import annotations

from datetime import date
from typing import Literal, Union

from pydantic import BaseModel


class TextCell(BaseModel):
    kind: Literal["text"] = "text"
    value: str


class NumberCell(BaseModel):
    kind: Literal["number"] = "number"
    value: float


class DateCell(BaseModel):
    kind: Literal["date"] = "date"
    value: date


class EmptyCell(BaseModel):
    kind: Literal["empty"] = "empty"


# Geschlossene Variante für Zellinhalte an der Grenze zur Arbeitsmappe.
CellValue = Union[TextCell, NumberCell, DateCell, EmptyCell]

EMPTY = EmptyCell()


def cell_text(cell: CellValue) -> str:
    """Zellinhalt als getrimmter String ('' für leere Zellen)."""
    if isinstance(cell, TextCell):
        return cell.value.strip()
    if isinstance(cell, NumberCell):
        number = cell.value
        return str(int(number)) if number.is_integer() else str(number)
    if isinstance(cell, DateCell):
        return cell.value.isoformat()
    return ""


def is_blank(cell: CellValue) -> bool:
    return cell_text(cell) == ""
