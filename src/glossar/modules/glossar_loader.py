from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Iterable, List, Optional, Union

from loguru import logger

from activities.modules.backup_manager import BackupManager
from activities.modules.workbook_access import SheetHandle, WorkbookAccess
from glossar.modules.glossar_cache import GlossarCache
from glossar.modules.glossar_merge import merge_glossars
from pydantic_models.config.glossar_config import GlossarConfig
from pydantic_models.config.workbook_layout_config import WorkbookLayoutConfig
from pydantic_models.data.glossar import Glossar, GlossarCategory, GlossarEntry
from shared_modules.config import Config
from shared_modules.file_validation import validate_excel_file

GLOSSAR_DATA_START_ROW = 2


def split_synonyms(raw: str) -> List[str]:
    """Kommagetrennte Synonyme, getrimmt und ohne Duplikate."""
    return list(dict.fromkeys(part.strip() for part in raw.split(",") if part.strip()))


class GlossarLoader:
    """
    Liest das Blatt "Glossar" einer LV-Arbeitsmappe und baut daraus ein Glossar.

    Lesezugriffe sind fehlertolerant: jede Störung wird protokolliert und führt zu None.
    Ergebnisse werden pro Datei und Änderungszeitpunkt im GlossarCache gehalten.
    """

    def __init__(
        self,
        workbook_access: Optional[WorkbookAccess] = None,
        backup_manager: Optional[BackupManager] = None,
        cache: Optional[GlossarCache] = None,
        layout: Optional[WorkbookLayoutConfig] = None,
        settings: Optional[GlossarConfig] = None,
    ) -> None:
        self.workbook_access = workbook_access or WorkbookAccess()
        self.backup_manager = backup_manager or BackupManager()
        self.cache = cache if cache is not None else GlossarCache()
        self.layout = layout or WorkbookLayoutConfig()
        self.settings = settings or GlossarConfig()

    @classmethod
    def from_config(cls, config: Config, cache: Optional[GlossarCache] = None) -> "GlossarLoader":
        return cls(
            workbook_access=WorkbookAccess(),
            backup_manager=BackupManager(config.backup),
            cache=cache,
            layout=config.workbook,
            settings=config.glossar,
        )

    async def load_glossar(self, path: Union[str, Path]) -> Optional[Glossar]:
        """
        Lädt das Glossar einer Datei.

        Returns:
            Optional[Glossar]: None, wenn die Datei ungültig ist, kein Glossar-Blatt hat
            oder nicht gelesen werden kann.
        """
        try:
            target = await validate_excel_file(path, self.layout)
            stat = await asyncio.to_thread(target.stat)
            cached = self.cache.get(target, stat.st_mtime_ns)
            if cached is not None:
                logger.debug(f"Glossar aus Cache: {target.name}")
                return cached

            handle = await self.workbook_access.load(target)
            sheet = handle.find_sheet(self.settings.sheet_name)
            if sheet is None:
                logger.info(f'Kein Blatt "{self.settings.sheet_name}" in {target.name}.')
                return None

            glossar = Glossar.from_entries(self._read_entries(sheet, target))
            self.cache.put(target, stat.st_mtime_ns, glossar)
            logger.info(f"Glossar geladen: {len(glossar.entries)} Einträge aus {target.name}")
            return glossar
        except Exception as exc:
            logger.error(f"Glossar aus {path} konnte nicht geladen werden: {exc}")
            return None

    def _read_entries(self, sheet: SheetHandle, target: Path) -> List[GlossarEntry]:
        entries: List[GlossarEntry] = []
        for row in range(GLOSSAR_DATA_START_ROW, sheet.max_row + 1):
            category_raw = sheet.read_text(row, 1)
            term = sheet.read_text(row, 2)
            if not category_raw or not term:
                continue
            category = GlossarCategory.parse(category_raw)
            if category is None:
                logger.warning(
                    f"{target.name}, Zeile {row}: unbekannte Kategorie '{category_raw}', "
                    f"wird als {GlossarCategory.SONSTIGES.value} übernommen."
                )
                category = GlossarCategory.SONSTIGES
            entries.append(
                GlossarEntry(
                    category=category,
                    term=term,
                    synonyms=split_synonyms(sheet.read_text(row, 3)),
                )
            )
        return entries

    def clear_cache(self, path: Optional[Union[str, Path]] = None) -> None:
        self.cache.clear(path)

    async def ensure_glossar(self, path: Union[str, Path], client_name: str) -> Optional[Glossar]:
        """Lädt das Glossar; fehlt es, wird es aus den vorhandenen Themen angelegt."""
        existing = await self.load_glossar(path)
        if existing is not None:
            return existing
        logger.info(f"Kein Glossar in {Path(path).name}, lege es an.")
        # zirkulärer Import
        from glossar.modules.glossar_bootstrapper import GlossarBootstrapper

        return await GlossarBootstrapper(self).create_glossar_sheet(path, client_name)

    async def load_glossars_from_paths(self, paths: Iterable[Union[str, Path]]) -> Optional[Glossar]:
        """
        Lädt mehrere Glossare parallel und führt die erfolgreichen zusammen.
        Fehler einzelner Dateien beeinflussen die übrigen nicht.
        """
        path_list = list(paths)
        if not path_list:
            return None
        results = await asyncio.gather(
            *(self.load_glossar(path) for path in path_list), return_exceptions=True
        )
        loaded: List[Glossar] = []
        for path, result in zip(path_list, results):
            if isinstance(result, BaseException):
                logger.error(f"Glossar aus {path} fehlgeschlagen: {result}")
            elif result is not None:
                loaded.append(result)
        if not loaded:
            logger.warning("Keines der Glossare konnte geladen werden.")
            return None
        return merge_glossars(loaded)
