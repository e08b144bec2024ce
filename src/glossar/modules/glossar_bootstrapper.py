from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Union

from loguru import logger

from activities.modules.workbook_access import WorkbookHandle
from glossar.modules.glossar_loader import GlossarLoader
from glossar.modules.term_clustering import TermCluster, cluster_terms
from pydantic_models.data.glossar import Glossar, GlossarCategory
from shared_modules.file_validation import validate_excel_file


class GlossarBootstrapper:
    """
    Legt das Blatt "Glossar" einmalig aus den bereits erfassten Themen an.
    Ähnliche Schreibweisen werden dabei zu einem Begriff mit Synonymen zusammengefasst.
    """

    def __init__(self, loader: GlossarLoader) -> None:
        self.loader = loader

    def collect_topics(self, handle: WorkbookHandle) -> List[str]:
        """Alle Themen der zwölf Monatsblätter, inklusive Wiederholungen (für die Häufigkeit)."""
        layout = self.loader.layout
        topics: List[str] = []
        for month_name in layout.month_names:
            sheet = handle.sheet(month_name)
            if sheet is None:
                continue
            for row in range(layout.data_start_row, sheet.max_row + 1):
                topic = sheet.read_text(row, layout.topic_col)
                if topic:
                    topics.append(topic)
        return topics

    async def create_glossar_sheet(self, path: Union[str, Path], client_name: str) -> Optional[Glossar]:
        """
        Erstellt das Glossar-Blatt. Ist es schon vorhanden, wird nur geladen.

        Returns:
            Optional[Glossar]: das frisch geladene Glossar, None bei jedem Fehler.
        """
        loader = self.loader
        settings = loader.settings
        try:
            target = await validate_excel_file(path, loader.layout)
            await loader.backup_manager.create_backup(target)
            handle = await loader.workbook_access.load(target)

            if handle.find_sheet(settings.sheet_name) is not None:
                logger.info(f"Glossar-Blatt existiert bereits in {target.name}.")
                return await loader.load_glossar(target)

            topics = self.collect_topics(handle)
            clusters = cluster_terms(topics, settings.similarity_threshold)
            logger.info(
                f"{len(topics)} Themen aus {target.name} zu {len(clusters)} Begriffen zusammengefasst."
            )

            self._write_sheet(handle, client_name, clusters)
            await loader.workbook_access.save(handle, target)
            logger.info(f"Glossar-Blatt in {target.name} angelegt.")

            loader.clear_cache(target)
            return await loader.load_glossar(target)
        except Exception as exc:
            logger.error(f"Glossar-Blatt in {path} konnte nicht angelegt werden: {exc}")
            return None

    def _write_sheet(self, handle: WorkbookHandle, client_name: str, clusters: List[TermCluster]) -> None:
        settings = self.loader.settings
        sheet = handle.add_sheet(settings.sheet_name)
        for col, (title, width) in enumerate(zip(settings.header, settings.column_widths), start=1):
            sheet.set_column_width(col, width)
            sheet.write(1, col, title)

        rows = []
        if client_name and client_name.strip():
            rows.append((GlossarCategory.AUFTRAGGEBER.value, client_name.strip(), ""))
        for cluster in clusters:
            rows.append((GlossarCategory.THEMA.value, cluster.canonical, ", ".join(cluster.synonyms)))

        for row, values in enumerate(rows, start=2):
            for col, value in enumerate(values, start=1):
                sheet.write(row, col, value or None)
