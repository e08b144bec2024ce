from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

import pytest
from openpyxl import Workbook

from activities.modules.activity_writer import ActivityWriter
from activities.modules.backup_manager import BackupManager
from activities.modules.workbook_access import WorkbookAccess
from glossar.modules.glossar_cache import GlossarCache
from glossar.modules.glossar_loader import GlossarLoader
from pydantic_models.config.backup_config import BackupConfig
from pydantic_models.config.glossar_config import GlossarConfig
from pydantic_models.config.workbook_layout_config import GERMAN_MONTH_NAMES, WorkbookLayoutConfig
from shared_modules.config import Config

HEADER = ("Datum", "Thema", "Tätigkeit", "Zeit", "km", "Auslagen")

# Monat (1-12) -> Liste von (Thema, Tätigkeit) ab Zeile 7
MonthRows = Dict[int, Sequence[Tuple[Optional[str], Optional[str]]]]
GlossarRows = Iterable[Tuple[str, str, str]]


def build_workbook(
    path: Path,
    rows: Optional[MonthRows] = None,
    glossar: Optional[GlossarRows] = None,
    months: Sequence[str] = GERMAN_MONTH_NAMES,
) -> Path:
    """Legt eine LV-Arbeitsmappe mit zwölf Monatsblättern (Kopf in Zeilen 1-6) an."""
    wb = Workbook()
    wb.remove(wb.active)
    for month_name in months:
        ws = wb.create_sheet(title=month_name)
        ws.cell(row=1, column=1, value=f"Leistungsverzeichnis {month_name}")
        for col, title in enumerate(HEADER, start=1):
            ws.cell(row=6, column=col, value=title)

    for month, month_rows in (rows or {}).items():
        ws = wb[months[month - 1]]
        for offset, (topic, description) in enumerate(month_rows):
            if topic is not None:
                ws.cell(row=7 + offset, column=2, value=topic)
            if description is not None:
                ws.cell(row=7 + offset, column=3, value=description)

    if glossar is not None:
        ws = wb.create_sheet(title="Glossar")
        for col, title in enumerate(("Kategorie", "Begriff", "Synonyme"), start=1):
            ws.cell(row=1, column=col, value=title)
        for row, values in enumerate(glossar, start=2):
            for col, value in enumerate(values, start=1):
                ws.cell(row=row, column=col, value=value or None)

    path.parent.mkdir(parents=True, exist_ok=True)
    wb.save(path)
    return path


class CountingWorkbookAccess(WorkbookAccess):
    """Zählt Ladevorgänge und protokolliert die Reihenfolge der Zugriffe."""

    def __init__(self, events: Optional[List[str]] = None) -> None:
        self.loads = 0
        self.events = events if events is not None else []

    async def load(self, path):
        self.loads += 1
        self.events.append("load")
        return await super().load(path)

    async def save(self, handle, path):
        self.events.append("save")
        await super().save(handle, path)


class RecordingBackupManager(BackupManager):
    def __init__(self, settings=None, events: Optional[List[str]] = None) -> None:
        super().__init__(settings)
        self.events = events if events is not None else []
        self.snapshots: List[bytes] = []

    async def create_backup(self, path):
        self.events.append("backup")
        if Path(path).is_file():
            self.snapshots.append(Path(path).read_bytes())
        return await super().create_backup(path)


@pytest.fixture
def layout() -> WorkbookLayoutConfig:
    return WorkbookLayoutConfig()


@pytest.fixture
def make_workbook(tmp_path: Path) -> Callable[..., Path]:
    def _make(name: str = "LV IDT 2025.xlsx", **kwargs) -> Path:
        return build_workbook(tmp_path / name, **kwargs)

    return _make


@pytest.fixture
def events() -> List[str]:
    return []


@pytest.fixture
def workbook_access(events: List[str]) -> CountingWorkbookAccess:
    return CountingWorkbookAccess(events)


@pytest.fixture
def backup_manager(events: List[str]) -> RecordingBackupManager:
    return RecordingBackupManager(BackupConfig(max_backups=5), events)


@pytest.fixture
def writer(workbook_access, backup_manager, layout) -> ActivityWriter:
    return ActivityWriter(workbook_access, backup_manager, layout)


@pytest.fixture
def loader(workbook_access, backup_manager, layout) -> GlossarLoader:
    return GlossarLoader(workbook_access, backup_manager, GlossarCache(), layout, GlossarConfig())


@pytest.fixture
def fresh_config(monkeypatch, tmp_path: Path):
    """Setzt den Config-Singleton zurück und verhindert Log-Dateien im Arbeitsverzeichnis."""
    monkeypatch.setattr(Config, "_instance", None)
    monkeypatch.chdir(tmp_path)
    yield Config
    monkeypatch.setattr(Config, "_instance", None)
