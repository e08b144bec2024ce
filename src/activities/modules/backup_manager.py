from __future__ import annotations

import asyncio
import re
import shutil
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Set, Union

from loguru import logger

from pydantic_models.config.backup_config import BackupConfig
from shared_modules.errors import NotFoundError, WorkbookIOError
from shared_modules.utils import ensure_dir, log_exceptions

# Format: name_YYYY-MM-DD_HH-mm-ss.xlsx
TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"
_TIMESTAMP_RE = r"\d{4}-\d{2}-\d{2}_\d{2}-\d{2}-\d{2}"


class BackupManager:
    """
    Legt vor jeder Änderung eine datierte Kopie der Arbeitsmappe an.

    Die Kopie wird synchron zum Aufrufer erstellt; das Aufräumen alter Kopien
    (über `max_backups` hinaus) läuft als eigener Task und blockiert den
    Aufrufer nicht. Fehler beim Aufräumen werden nur geloggt.
    """

    def __init__(self, settings: Optional[BackupConfig] = None) -> None:
        self.settings: BackupConfig = settings or BackupConfig()
        self._pending: Set[asyncio.Task] = set()

    def backup_dir(self, path: Union[str, Path]) -> Path:
        return Path(path).parent / self.settings.directory_name

    def _backup_name_re(self, path: Path) -> re.Pattern:
        return re.compile(rf"^{re.escape(path.stem)}_{_TIMESTAMP_RE}{re.escape(path.suffix)}$")

    async def create_backup(self, path: Union[str, Path]) -> Path:
        """
        Kopiert die Datei nach `backups/<name>_<Zeitstempel><endung>`.

        Raises:
            NotFoundError: Quelldatei existiert nicht.
            WorkbookIOError: Kopieren fehlgeschlagen.
        """
        source = Path(path)
        if not await asyncio.to_thread(source.is_file):
            raise NotFoundError(source)

        timestamp = datetime.now().strftime(TIMESTAMP_FORMAT)
        backup_dir = self.backup_dir(source)
        backup_path = backup_dir / f"{source.stem}_{timestamp}{source.suffix}"
        try:
            await asyncio.to_thread(ensure_dir, backup_dir)
            await asyncio.to_thread(shutil.copy2, source, backup_path)
        except OSError as exc:
            logger.error(f"Sicherung von {source} fehlgeschlagen: {exc}")
            raise WorkbookIOError(source, "Sichern", exc) from exc
        logger.info(f"Sicherung erstellt: {backup_path}")

        self._schedule_prune(source)
        return backup_path

    def _schedule_prune(self, source: Path) -> None:
        task = asyncio.get_running_loop().create_task(self._prune_quietly(source))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _prune_quietly(self, source: Path) -> None:
        with log_exceptions(f"Alte Sicherungen für {source.name} konnten nicht gelöscht werden"):
            await self.prune_backups(source)

    async def prune_backups(self, path: Union[str, Path]) -> List[Path]:
        """Löscht alle Sicherungen der Datei jenseits der neuesten `max_backups`."""
        backups = await self.list_backups(path)
        to_delete = backups[self.settings.max_backups:]
        for old_backup in to_delete:
            await asyncio.to_thread(old_backup.unlink)
            logger.debug(f"Alte Sicherung gelöscht: {old_backup.name}")
        if to_delete:
            logger.info(f"{len(to_delete)} alte Sicherung(en) von {Path(path).name} entfernt.")
        return to_delete

    async def list_backups(self, path: Union[str, Path]) -> List[Path]:
        """Alle Sicherungen der Datei, neueste zuerst; leer, wenn es kein Backup-Verzeichnis gibt."""
        source = Path(path)
        backup_dir = self.backup_dir(source)
        name_re = self._backup_name_re(source)

        def _scan() -> List[Path]:
            if not backup_dir.is_dir():
                return []
            names = sorted((p.name for p in backup_dir.iterdir() if name_re.match(p.name)), reverse=True)
            return [backup_dir / name for name in names]

        return await asyncio.to_thread(_scan)

    async def restore_backup(self, backup_path: Union[str, Path], original_path: Union[str, Path]) -> None:
        """
        Stellt eine Sicherung wieder her. Der aktuelle Stand wird vorher selbst gesichert,
        sofern die Originaldatei noch existiert.
        """
        backup = Path(backup_path)
        original = Path(original_path)
        try:
            # vorab lesen, die neue Sicherung kann denselben Zeitstempel tragen
            data = await asyncio.to_thread(backup.read_bytes)
        except FileNotFoundError as exc:
            raise NotFoundError(backup) from exc
        except OSError as exc:
            raise WorkbookIOError(backup, "Lesen", exc) from exc
        try:
            await self.create_backup(original)
        except NotFoundError:
            logger.debug(f"Keine aktuelle Datei zum Sichern vorhanden: {original}")

        try:
            await asyncio.to_thread(original.write_bytes, data)
        except OSError as exc:
            raise WorkbookIOError(original, "Wiederherstellen", exc) from exc
        logger.info(f"Wiederhergestellt: {backup} -> {original}")

    async def drain(self) -> None:
        """Wartet auf laufende Aufräum-Tasks."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
