from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Union

from loguru import logger
from pydantic import BaseModel

from activities.modules.activity_writer import ActivityWriter
from glossar.modules.glossar_store import GlossarStore
from pydantic_models.data.activity_record import ActivityRecord, ActivityRow
from shared_modules.errors import ActivityStoreError
from shared_modules.file_registry import FileRegistry

DEFAULT_TOPIC = "Unbekannt"


class SaveResult(BaseModel):
    success: bool
    error: Optional[str] = None
    file_path: Optional[str] = None
    row_number: Optional[int] = None


class ActivityService:
    """
    Einstieg für das Speichern diktierter Tätigkeiten.
    Normalisiert Auftraggeber und Thema über das Glossar, wählt die aktive Datei
    für Auftraggeber und Jahr und schreibt die Zeile. Fehler werden als SaveResult gemeldet.
    """

    def __init__(
        self,
        writer: ActivityWriter,
        registry: FileRegistry,
        glossar_store: Optional[GlossarStore] = None,
    ) -> None:
        self.writer = writer
        self.registry = registry
        self.glossar_store = glossar_store

    def prepare(self, record: ActivityRecord) -> ActivityRecord:
        if self.glossar_store is not None:
            record = self.glossar_store.normalize_activity(record)
        if not (record.topic or "").strip():
            record = record.model_copy(update={"topic": DEFAULT_TOPIC})
        return record

    def _missing_file_error(self, client: Optional[str]) -> str:
        active = self.registry.active_files()
        if not active:
            return 'Keine aktiven Excel-Dateien konfiguriert. Bitte unter "Dateien" konfigurieren.'
        available = ", ".join(f.client_name for f in active)
        return f'Keine Datei für Auftraggeber "{client or "unbekannt"}" gefunden. Verfügbar: {available}'

    async def save(self, record: ActivityRecord) -> SaveResult:
        record = self.prepare(record)
        year = record.date.year

        file_cfg = self.registry.find_file_for_client(record.client, year) if record.client else None
        if file_cfg is None:
            error = self._missing_file_error(record.client)
            logger.warning(f"Keine Datei für {record.client or 'unbekannt'}/{year}: {error}")
            return SaveResult(success=False, error=error)

        try:
            row = await self.writer.add_activity(file_cfg.path, record)
        except ActivityStoreError as exc:
            logger.error(f"Speichern in {file_cfg.path} fehlgeschlagen: {exc}")
            return SaveResult(success=False, error=str(exc), file_path=file_cfg.path)
        return SaveResult(success=True, file_path=file_cfg.path, row_number=row)

    async def list_activities(self, path: Union[str, Path], month: int) -> List[ActivityRow]:
        """Tätigkeiten eines Monats; bei Fehlern eine leere Liste."""
        if not 1 <= month <= 12:
            logger.error(f"Ungültiger Monat: {month}")
            return []
        try:
            return await self.writer.get_activities(path, month)
        except ActivityStoreError as exc:
            logger.error(f"Lesen aus {path} fehlgeschlagen: {exc}")
            return []
