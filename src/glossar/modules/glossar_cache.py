from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional, Tuple, Union

from loguru import logger

from pydantic_models.data.glossar import Glossar


class GlossarCache:
    """
    Zwischenspeicher für geladene Glossare.
    Ein Eintrag gilt nur, solange sich der Änderungszeitpunkt der Datei nicht geändert hat.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, Tuple[int, Glossar]] = {}

    @staticmethod
    def _key(path: Union[str, Path]) -> str:
        return str(Path(path))

    def get(self, path: Union[str, Path], mtime_ns: int) -> Optional[Glossar]:
        cached = self._entries.get(self._key(path))
        if cached is None:
            return None
        cached_mtime, glossar = cached
        if cached_mtime != mtime_ns:
            logger.debug(f"Glossar-Cache veraltet: {path}")
            return None
        return glossar

    def put(self, path: Union[str, Path], mtime_ns: int, glossar: Glossar) -> None:
        self._entries[self._key(path)] = (mtime_ns, glossar)

    def clear(self, path: Optional[Union[str, Path]] = None) -> None:
        if path is None:
            self._entries.clear()
            logger.debug("Glossar-Cache geleert.")
        else:
            self._entries.pop(self._key(path), None)
            logger.debug(f"Glossar-Cache für {path} geleert.")

    def __len__(self) -> int:
        return len(self._entries)
