import asyncio
from pathlib import Path

from loguru import logger
from rich import print

from shared_modules.config import Config
from shared_modules.file_registry import FileRegistry
from shared_modules.file_scanner import scan_directory


def main() -> None:
    """
    Durchsucht xlsx_base_path nach LV-Arbeitsmappen und trägt neue Dateien in die
    Konfiguration ein. Bereits bekannte Einträge bleiben unverändert; neue Dateien
    werden aktiv, wenn für Auftraggeber und Jahr noch keine aktive Datei existiert.
    """
    config_path: Path = Path(__file__).parents[2] / ".config" / "aktivitaeten_config.yaml"
    config = Config(config_path)

    base_path = config.structure.xlsx_base_path
    if not base_path:
        logger.error("xlsx_base_path ist nicht konfiguriert.")
        return

    registry = FileRegistry(config.files, on_change=config.save_files)
    known = {f.path for f in registry.files}
    scanned = asyncio.run(scan_directory(Path(base_path).expanduser(), config.structure.file_pattern))

    for found in scanned:
        if found.path in known or found.client_name is None or found.year is None:
            continue
        active = registry.find_file_for_client(found.client_name, found.year) is None
        registry.upsert(found.path, client_name=found.client_name, year=found.year, active=active)
        logger.info(f"Neu eingetragen: {found.filename} ({found.client_name} {found.year}, aktiv={active})")

    print([f.model_dump() for f in registry.active_files()])


if __name__ == "__main__":
    main()
