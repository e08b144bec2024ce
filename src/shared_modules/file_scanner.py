from __future__ import annotations

import asyncio
import re
from pathlib import Path
from typing import List, Optional, Tuple

from loguru import logger
from pydantic import BaseModel

_PREFIX_RE = re.compile(r"^LV\s*", re.IGNORECASE)
_SPACED_YEAR_RE = re.compile(r"(\d)\s*(\d)\s*(\d)\s*(\d)")
_SHORT_YEAR_RE = re.compile(r"\b(\d{2})\b")


class ScannedFile(BaseModel):
    """Gefundene Arbeitsmappe; Auftraggeber/Jahr sind None, wenn der Name nichts hergibt."""
    path: str
    filename: str
    client_name: Optional[str] = None
    year: Optional[int] = None


def extract_file_info(filename: str) -> Tuple[Optional[str], Optional[int]]:
    """
    Liest Auftraggeber und Jahr aus Dateinamen wie "LV IDT 2025.xlsx",
    "LV IDT 2 0 2 6.xlsx" oder "LV ABC Corp 25.xlsx".
    """
    name = _PREFIX_RE.sub("", Path(filename).stem)

    year: Optional[int] = None
    match = _SPACED_YEAR_RE.search(name)
    if match:
        year = int("".join(match.groups()))
    else:
        short = _SHORT_YEAR_RE.search(name)
        if short:
            year = 2000 + int(short.group(1))

    if year is None:
        return None, None

    client = re.split(r"\d", name, maxsplit=1)[0].strip()
    return (client or None), year


async def scan_directory(base_path: Path, pattern: str = "LV*.xlsx") -> List[ScannedFile]:
    """Sucht Arbeitsmappen im Verzeichnis und ordnet sie Auftraggeber/Jahr zu."""
    logger.info(f"Durchsuche {base_path} nach {pattern}")
    files = await asyncio.to_thread(lambda: sorted(p for p in Path(base_path).glob(pattern) if p.is_file()))
    logger.info(f"{len(files)} Dateien gefunden.")

    results: List[ScannedFile] = []
    for file_path in files:
        client, year = extract_file_info(file_path.name)
        if client is None:
            logger.warning(f"Auftraggeber/Jahr nicht erkennbar: {file_path.name}")
        else:
            logger.debug(f"{file_path.name} -> {client} ({year})")
        results.append(ScannedFile(path=str(file_path), filename=file_path.name, client_name=client, year=year))
    return results
