from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional, Union

from loguru import logger

from pydantic_models.config.workbook_layout_config import WorkbookLayoutConfig
from shared_modules.errors import InvalidFileError, NotFoundError


def check_excel_path(path: Union[str, Path], layout: Optional[WorkbookLayoutConfig] = None) -> Path:
    """
    Prüft Pfad und Endung ohne Dateizugriff.

    Raises:
        InvalidFileError: Bei '..' im Pfad oder falscher Endung.
    """
    layout = layout or WorkbookLayoutConfig()
    target = Path(path)
    if ".." in target.parts:
        raise InvalidFileError(target, "Pfad mit '..' ist nicht erlaubt")
    if target.suffix.lower() not in layout.allowed_extensions:
        raise InvalidFileError(target, f"Unzulässige Dateiendung '{target.suffix}'")
    return target


async def validate_excel_file(path: Union[str, Path], layout: Optional[WorkbookLayoutConfig] = None) -> Path:
    """
    Prüft eine Arbeitsmappe vor jedem Zugriff: Pfad, Endung (.xlsx/.xls), Existenz und Größe.

    Args:
        path: Pfad zur Arbeitsmappe.
        layout: Layout mit erlaubten Endungen und Größenlimit (Default: 50 MiB).

    Returns:
        Path: Der geprüfte Pfad.

    Raises:
        InvalidFileError: Endung, Pfad oder Größe unzulässig.
        NotFoundError: Datei existiert nicht.
    """
    layout = layout or WorkbookLayoutConfig()
    target = check_excel_path(path, layout)
    try:
        stats = await asyncio.to_thread(target.stat)
    except FileNotFoundError as exc:
        raise NotFoundError(target) from exc
    if stats.st_size > layout.max_file_size:
        logger.warning(f"Datei zu groß ({stats.st_size} Bytes): {target}")
        raise InvalidFileError(target, f"Datei zu groß ({stats.st_size} Bytes, erlaubt sind {layout.max_file_size})")
    return target
