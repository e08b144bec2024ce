from __future__ import annotations

from typing import Callable, Iterable, List, Optional

from loguru import logger

from pydantic_models.config.xlsx_file_config import XlsxFileConfig
from pydantic_models.data.glossar import normalize_for_lookup


class FileRegistry:
    """
    Verwaltet die konfigurierten Arbeitsmappen (eine pro Auftraggeber und Jahr).
    Änderungen werden über `on_change` persistiert, z. B. mit Config.save_files.
    """

    def __init__(
        self,
        files: Iterable[XlsxFileConfig] = (),
        on_change: Optional[Callable[[List[XlsxFileConfig]], None]] = None,
    ) -> None:
        self.files: List[XlsxFileConfig] = list(files)
        self.on_change = on_change

    def active_files(self) -> List[XlsxFileConfig]:
        return [f for f in self.files if f.active]

    def find_file_for_client(self, client_name: str, year: int) -> Optional[XlsxFileConfig]:
        """Aktive Datei für Auftraggeber und Jahr (Groß-/Kleinschreibung und Leerraum egal)."""
        key = normalize_for_lookup(client_name)
        for file_cfg in self.files:
            if file_cfg.active and file_cfg.year == year and normalize_for_lookup(file_cfg.client_name) == key:
                return file_cfg
        return None

    def upsert(self, path: str, **updates) -> XlsxFileConfig:
        """
        Aktualisiert den Eintrag für `path` oder legt ihn an.
        Ein aktivierter Eintrag deaktiviert andere aktive Dateien desselben Auftraggebers/Jahres.
        """
        existing = next((f for f in self.files if f.path == path), None)
        if existing is not None:
            # neu validieren, model_copy überspringt die Validatoren
            updated = XlsxFileConfig(**{**existing.model_dump(), **updates})
            self.files[self.files.index(existing)] = updated
        else:
            updated = XlsxFileConfig(path=path, **updates)
            self.files.append(updated)

        if updated.active:
            for idx, other in enumerate(self.files):
                if other is not updated and other.active and other.registry_key == updated.registry_key:
                    logger.info(f"Deaktiviere {other.path}, da {path} für {updated.client_name} {updated.year} aktiv ist.")
                    self.files[idx] = other.model_copy(update={"active": False})
        self._changed()
        return updated

    def remove(self, path: str) -> None:
        self.files = [f for f in self.files if f.path != path]
        logger.info(f"Datei entfernt: {path}")
        self._changed()

    def _changed(self) -> None:
        if self.on_change is not None:
            self.on_change(self.files)
