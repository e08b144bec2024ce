from __future__ import annotations

import asyncio
import os
import shutil
import tempfile
from datetime import date, datetime, time, timedelta
from io import BytesIO
from pathlib import Path
from typing import Any, List, Optional, Union

from loguru import logger
from openpyxl import load_workbook
from openpyxl.utils import get_column_letter
from openpyxl.utils.datetime import to_excel
from openpyxl.workbook.workbook import Workbook
from openpyxl.worksheet.worksheet import Worksheet

from pydantic_models.data.cell_value import (
    EMPTY,
    CellValue,
    DateCell,
    EmptyCell,
    NumberCell,
    TextCell,
    cell_text,
)
from shared_modules.errors import NotFoundError, WorkbookIOError
from shared_modules.utils import to_float

RawValue = Union[str, int, float, date, datetime, None]


def to_cell_value(raw: Any) -> CellValue:
    """Übersetzt einen openpyxl-Zellwert in die geschlossene CellValue-Variante."""
    if raw is None:
        return EMPTY
    if isinstance(raw, str):
        return TextCell(value=raw) if raw != "" else EMPTY
    if isinstance(raw, (int, float)):
        return NumberCell(value=float(raw))
    if isinstance(raw, datetime):
        return DateCell(value=raw.date())
    if isinstance(raw, date):
        return DateCell(value=raw)
    if isinstance(raw, (time, timedelta)):
        # Zeitformatierte Zellen liefert openpyxl als time/timedelta, Excel speichert Tagesbruchteile
        return NumberCell(value=to_float(raw))
    return TextCell(value=str(raw))


def to_raw_value(value: Union[CellValue, RawValue]) -> RawValue:
    if isinstance(value, TextCell):
        return value.value
    if isinstance(value, NumberCell):
        return value.value
    if isinstance(value, DateCell):
        return value.value
    if isinstance(value, EmptyCell):
        return None
    return value


class SheetHandle:
    """
    Schmaler Zugriff auf ein Arbeitsblatt: Zellen lesen/schreiben, belegten Bereich abfragen.
    Zeilen und Spalten sind 1-basiert.
    """

    def __init__(self, worksheet: Worksheet) -> None:
        self._ws = worksheet

    @property
    def name(self) -> str:
        return self._ws.title

    @property
    def max_row(self) -> int:
        """Letzte Zeile des belegten Bereichs."""
        return self._ws.max_row

    def read(self, row: int, col: int) -> CellValue:
        return to_cell_value(self._ws.cell(row=row, column=col).value)

    def read_text(self, row: int, col: int) -> str:
        return cell_text(self.read(row, col))

    def read_number(self, row: int, col: int) -> Optional[float]:
        """
        Zellwert als Zahl. Datumswerte liefern ihre Excel-Seriennummer, Text wird
        geparst ("12,5"); None, wenn sich keine Zahl ergibt.
        """
        raw = self._ws.cell(row=row, column=col).value
        if isinstance(raw, (datetime, date)):
            # Umkehrung der openpyxl-Datumsumrechnung (inkl. Schaltjahrfehler 1900)
            return float(to_excel(raw))
        return to_float(raw)

    def write(
        self,
        row: int,
        col: int,
        value: Union[CellValue, RawValue],
        number_format: Optional[str] = None,
    ) -> None:
        """
        Schreibt einen Wert, ohne die Formatierung der Zelle zu verändern.
        `number_format` wird nur gesetzt, wenn die Zelle noch das Standardformat hat.
        """
        cell = self._ws.cell(row=row, column=col)
        cell.value = to_raw_value(value)
        if number_format and cell.number_format == "General":
            cell.number_format = number_format

    def set_column_width(self, col: int, width: float) -> None:
        self._ws.column_dimensions[get_column_letter(col)].width = width


class WorkbookHandle:
    """In-Memory-Arbeitsmappe; Änderungen werden erst mit WorkbookAccess.save geschrieben."""

    def __init__(self, workbook: Workbook) -> None:
        self.workbook = workbook

    @property
    def sheet_names(self) -> List[str]:
        return list(self.workbook.sheetnames)

    def sheet(self, name: str) -> Optional[SheetHandle]:
        if name not in self.workbook.sheetnames:
            return None
        return SheetHandle(self.workbook[name])

    def find_sheet(self, name: str) -> Optional[SheetHandle]:
        """Wie sheet(), aber ohne Beachtung der Groß-/Kleinschreibung."""
        wanted = name.lower()
        for sheet_name in self.workbook.sheetnames:
            if sheet_name.lower() == wanted:
                return SheetHandle(self.workbook[sheet_name])
        return None

    def add_sheet(self, name: str) -> SheetHandle:
        return SheetHandle(self.workbook.create_sheet(title=name))


class WorkbookAccess:
    """
    Lädt und speichert Arbeitsmappen über Byte-Puffer.
    Die Datei wird komplett gelesen und aus dem Speicher geparst; gespeichert wird
    über eine temporäre Datei im selben Verzeichnis, die das Ziel ersetzt.
    """

    async def load(self, path: Union[str, Path]) -> WorkbookHandle:
        target = Path(path)
        logger.debug(f"Lade Arbeitsmappe: {target}")
        try:
            data = await asyncio.to_thread(target.read_bytes)
        except FileNotFoundError as exc:
            raise NotFoundError(target) from exc
        except OSError as exc:
            raise WorkbookIOError(target, "Lesen", exc) from exc

        try:
            workbook = await asyncio.to_thread(load_workbook, BytesIO(data))
        except Exception as exc:
            logger.error(f"Arbeitsmappe {target.name} konnte nicht geparst werden: {exc}")
            raise WorkbookIOError(target, "Lesen", exc) from exc
        logger.debug(f"Arbeitsmappe geladen: {target.name} ({len(data)} Bytes)")
        return WorkbookHandle(workbook)

    async def save(self, handle: WorkbookHandle, path: Union[str, Path]) -> None:
        target = Path(path)
        logger.debug(f"Speichere Arbeitsmappe: {target}")
        try:
            data = await asyncio.to_thread(self._serialize, handle.workbook)
            await asyncio.to_thread(self._replace_file, target, data)
        except Exception as exc:
            logger.error(f"Fehler beim Speichern der Datei {target.name}: {exc}")
            raise WorkbookIOError(target, "Speichern", exc) from exc
        logger.debug(f"Arbeitsmappe gespeichert: {target.name}")

    @staticmethod
    def _serialize(workbook: Workbook) -> bytes:
        buffer = BytesIO()
        workbook.save(buffer)
        return buffer.getvalue()

    @staticmethod
    def _replace_file(target: Path, data: bytes) -> None:
        # Symlinks bleiben erhalten, ersetzt wird das Linkziel
        target = Path(os.path.realpath(target))
        fd, tmp_name = tempfile.mkstemp(prefix=target.stem + "_", suffix=".tmp", dir=str(target.parent))
        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "wb") as tmp:
                tmp.write(data)
            if target.exists():
                # mkstemp legt 0600 an; Rechte der Arbeitsmappe übernehmen
                shutil.copymode(target, tmp_path)
            os.replace(tmp_path, target)
        finally:
            if tmp_path.exists():
                try:
                    tmp_path.unlink()
                except OSError:
                    logger.warning(f"Temporäre Datei konnte nicht gelöscht werden: {tmp_path}")
