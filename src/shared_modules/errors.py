from __future__ import annotations

from pathlib import Path
from typing import Optional, Union


class ActivityStoreError(Exception):
    """Basisklasse aller Fehler beim Lesen und Schreiben der LV-Arbeitsmappen."""


class InvalidFileError(ActivityStoreError, ValueError):
    """Falsche Dateiendung, unzulässiger Pfad oder Datei zu groß."""

    def __init__(self, path: Union[str, Path], reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Ungültige Datei {self.path}: {reason}")


class NotFoundError(ActivityStoreError, FileNotFoundError):
    """Quelldatei existiert nicht."""

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        super().__init__(f"Datei nicht gefunden: {self.path}")


class SheetNotFoundError(ActivityStoreError, LookupError):
    """Erwartetes Blatt fehlt in der Arbeitsmappe."""

    def __init__(self, sheet_name: str, path: Optional[Union[str, Path]] = None) -> None:
        self.sheet_name = sheet_name
        self.path = Path(path) if path is not None else None
        where = f" in {self.path}" if self.path is not None else ""
        super().__init__(f'Sheet "{sheet_name}" nicht gefunden{where}')


class WorkbookIOError(ActivityStoreError, OSError):
    """Arbeitsmappe konnte nicht gelesen oder geschrieben werden."""

    def __init__(self, path: Union[str, Path], action: str, cause: BaseException) -> None:
        self.path = Path(path)
        self.action = action
        super().__init__(f"Fehler beim {action} der Arbeitsmappe {self.path}: {cause}")
