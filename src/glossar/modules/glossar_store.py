from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from loguru import logger

from glossar.modules.glossar_bootstrapper import GlossarBootstrapper
from glossar.modules.glossar_loader import GlossarLoader
from glossar.modules.glossar_merge import merge_glossars
from glossar.modules.term_normalizer import normalize_text
from pydantic_models.config.xlsx_file_config import XlsxFileConfig
from pydantic_models.data.activity_record import ActivityRecord
from pydantic_models.data.glossar import Glossar, GlossarEntry


class GlossarStore:
    """
    Hält das zusammengeführte Glossar aller aktiven Arbeitsmappen.
    Wird vom Aufrufer erzeugt und an die Dienste weitergereicht.
    """

    def __init__(self, loader: GlossarLoader, threshold: Optional[float] = None) -> None:
        self.loader = loader
        self.threshold = threshold if threshold is not None else loader.settings.similarity_threshold
        self.glossar: Optional[Glossar] = None

    async def reload(self, files: Iterable[XlsxFileConfig]) -> Optional[Glossar]:
        """Lädt (oder erstellt) die Glossare aller aktiven Dateien parallel und führt sie zusammen."""
        active = [f for f in files if f.active]
        if not active:
            logger.info("Keine aktiven Dateien, Glossar bleibt leer.")
            self.glossar = None
            return None

        results = await asyncio.gather(
            *(self.loader.ensure_glossar(f.path, f.client_name) for f in active),
            return_exceptions=True,
        )
        loaded: List[Glossar] = []
        for file_cfg, result in zip(active, results):
            if isinstance(result, BaseException):
                logger.error(f"Glossar für {file_cfg.path} fehlgeschlagen: {result}")
            elif result is not None:
                loaded.append(result)

        self.glossar = merge_glossars(loaded) if loaded else None
        logger.info(f"Glossar neu geladen: {len(loaded)} von {len(active)} Dateien.")
        return self.glossar

    def normalize(self, text: str) -> str:
        return normalize_text(text, self.glossar, self.threshold)

    def normalize_activity(self, record: ActivityRecord) -> ActivityRecord:
        """Auftraggeber und Thema auf die kanonische Schreibweise bringen."""
        updates = {}
        if record.client:
            updates["client"] = self.normalize(record.client)
        if record.topic:
            updates["topic"] = self.normalize(record.topic)
        return record.model_copy(update=updates) if updates else record

    def entries(self) -> List[GlossarEntry]:
        return list(self.glossar.entries) if self.glossar else []

    def known_terms(self) -> Dict[str, List[str]]:
        if self.glossar is None:
            return {"auftraggeber": [], "themen": [], "kunden": []}
        return self.glossar.all_known_terms()

    def clear(self) -> None:
        self.glossar = None
        self.loader.clear_cache()

    async def create_from_data(self, path: Union[str, Path], client_name: str) -> Optional[Glossar]:
        """Legt das Glossar-Blatt einer einzelnen Datei aus deren Themen an."""
        return await GlossarBootstrapper(self.loader).create_glossar_sheet(path, client_name)
