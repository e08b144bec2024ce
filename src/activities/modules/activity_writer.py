from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import List, Optional, Union

from loguru import logger

from activities.modules.backup_manager import BackupManager
from activities.modules.workbook_access import SheetHandle, WorkbookAccess
from pydantic_models.config.workbook_layout_config import WorkbookLayoutConfig
from pydantic_models.data.activity_record import ActivityRecord, ActivityRow
from pydantic_models.data.cell_value import CellValue, DateCell, NumberCell, TextCell, is_blank
from shared_modules.config import Config
from shared_modules.errors import ActivityStoreError, SheetNotFoundError
from shared_modules.file_validation import validate_excel_file
from shared_modules.utils import to_date

MINUTES_PER_DAY = 24 * 60


class ActivityWriter:
    """
    Schreibt Tätigkeiten in das Monatsblatt einer LV-Arbeitsmappe und liest sie zurück.

    Reihenfolge beim Schreiben: prüfen, sichern, laden, Zielzeile suchen, schreiben, speichern.
    Die Sicherung liegt immer vor der ersten Änderung an der Datei.
    """

    def __init__(
        self,
        workbook_access: Optional[WorkbookAccess] = None,
        backup_manager: Optional[BackupManager] = None,
        layout: Optional[WorkbookLayoutConfig] = None,
    ) -> None:
        self.workbook_access = workbook_access or WorkbookAccess()
        self.backup_manager = backup_manager or BackupManager()
        self.layout = layout or WorkbookLayoutConfig()

    @classmethod
    def from_config(cls, config: Config) -> "ActivityWriter":
        return cls(
            workbook_access=WorkbookAccess(),
            backup_manager=BackupManager(config.backup),
            layout=config.workbook,
        )

    async def validate_file(self, path: Union[str, Path]) -> Path:
        return await validate_excel_file(path, self.layout)

    # --------------------------------------------------------------------- #
    # Schreiben
    # --------------------------------------------------------------------- #

    def _has_content(self, sheet: SheetHandle, row: int) -> bool:
        return not (
            is_blank(sheet.read(row, self.layout.topic_col))
            and is_blank(sheet.read(row, self.layout.description_col))
        )

    def find_append_row(self, sheet: SheetHandle) -> int:
        """
        Sucht die Zeile für den nächsten Eintrag.

        Ab der ersten Datenzeile zählt eine Zeile als belegt, wenn Thema oder Tätigkeit
        gefüllt ist. Nach `empty_row_limit` leeren Zeilen in Folge endet der Datenbereich
        (darunter liegen z. B. Summenzeilen). Ziel ist die Zeile nach der letzten belegten.
        """
        start = self.layout.data_start_row
        last_content: Optional[int] = None
        empty_streak = 0
        for row in range(start, sheet.max_row + 1):
            if self._has_content(sheet, row):
                last_content = row
                empty_streak = 0
                continue
            empty_streak += 1
            if empty_streak >= self.layout.empty_row_limit:
                break
        return last_content + 1 if last_content is not None else start

    async def add_activity(self, path: Union[str, Path], record: ActivityRecord) -> int:
        """
        Hängt eine Tätigkeit an das Monatsblatt zum Datum des Eintrags an.

        Returns:
            int: Die geschriebene Zeilennummer.

        Raises:
            InvalidFileError, NotFoundError: Datei unzulässig oder nicht vorhanden.
            SheetNotFoundError: Monatsblatt fehlt.
            WorkbookIOError: Lesen oder Speichern fehlgeschlagen.
        """
        target = await self.validate_file(path)
        await self.backup_manager.create_backup(target)
        handle = await self.workbook_access.load(target)

        sheet_name = self.layout.month_sheet_name(record.date.month)
        sheet = handle.sheet(sheet_name)
        if sheet is None:
            logger.error(f'Sheet "{sheet_name}" fehlt in {target.name}.')
            raise SheetNotFoundError(sheet_name, target)

        row = self.find_append_row(sheet)
        self._write_record(sheet, row, record)
        await self.workbook_access.save(handle, target)
        logger.info(f'Tätigkeit gespeichert: {target.name} / "{sheet_name}" Zeile {row}')
        return row

    def _write_record(self, sheet: SheetHandle, row: int, record: ActivityRecord) -> None:
        layout = self.layout
        sheet.write(row, layout.date_col, record.date)
        sheet.write(row, layout.topic_col, record.topic)
        sheet.write(row, layout.description_col, record.description)
        if record.duration_minutes is not None:
            # Excel-Zeiten sind Tagesbruchteile
            sheet.write(
                row,
                layout.duration_col,
                record.duration_minutes / MINUTES_PER_DAY,
                number_format=layout.duration_number_format,
            )
        # Nullen nicht schreiben, sonst überschreiben sie die Vorlage sichtbar
        if record.distance_km > 0:
            sheet.write(row, layout.distance_col, record.distance_km)
        if record.expense_amount > 0:
            sheet.write(row, layout.expense_col, record.expense_amount)

    # --------------------------------------------------------------------- #
    # Lesen
    # --------------------------------------------------------------------- #

    async def get_activities(self, path: Union[str, Path], month: int) -> List[ActivityRow]:
        """
        Liest alle Tätigkeiten eines Monats (1-12). Ohne Sicherung, die Datei bleibt unverändert.

        Lesezugriffe sind fehlertolerant: fehlt das Monatsblatt oder ist die Datei
        ungültig, fehlend oder nicht lesbar, ist das Ergebnis leer.
        """
        try:
            target = await self.validate_file(path)
            handle = await self.workbook_access.load(target)
        except ActivityStoreError as exc:
            logger.error(f"Tätigkeiten aus {path} konnten nicht gelesen werden: {exc}")
            return []

        sheet_name = self.layout.month_sheet_name(month)
        sheet = handle.sheet(sheet_name)
        if sheet is None:
            logger.debug(f'Kein Blatt "{sheet_name}" in {target.name}.')
            return []

        activities: List[ActivityRow] = []
        for row in range(self.layout.data_start_row, sheet.max_row + 1):
            activity = self._read_row(sheet, row)
            if activity is not None:
                activities.append(activity)
        logger.debug(f'{len(activities)} Tätigkeiten aus {target.name} / "{sheet_name}" gelesen.')
        return activities

    def _read_row(self, sheet: SheetHandle, row: int) -> Optional[ActivityRow]:
        layout = self.layout
        date_cell = sheet.read(row, layout.date_col)
        topic = sheet.read_text(row, layout.topic_col)
        description = sheet.read_text(row, layout.description_col)
        if is_blank(date_cell) and not topic and not description:
            return None

        return ActivityRow(
            row_number=row,
            date=_cell_date(date_cell),
            topic=topic,
            description=description,
            duration_minutes=_cell_minutes(sheet, row, layout.duration_col),
            distance_km=sheet.read_number(row, layout.distance_col) or 0.0,
            expense_amount=sheet.read_number(row, layout.expense_col) or 0.0,
        )


def _cell_minutes(sheet: SheetHandle, row: int, col: int) -> Optional[int]:
    # "[h]:mm" liefert timedelta, "h:mm" ab 24 h ein Datum; beides als Tagesbruchteil
    fraction = sheet.read_number(row, col)
    if fraction is None:
        text = sheet.read_text(row, col)
        if text:
            logger.warning(f"Zeile {row}: Zeitwert '{text}' ist keine Zahl, wird ignoriert.")
        return None
    if fraction < 0:
        logger.warning(f"Zeile {row}: negativer Zeitwert {fraction} wird ignoriert.")
        return None
    return round(fraction * MINUTES_PER_DAY)


def _cell_date(cell: CellValue) -> Optional[date]:
    if isinstance(cell, DateCell):
        return cell.value
    if isinstance(cell, NumberCell):
        return to_date(cell.value)
    if isinstance(cell, TextCell):
        return to_date(cell.value)
    return None
