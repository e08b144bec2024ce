import asyncio
from pathlib import Path

from loguru import logger
from rich import print

from glossar.modules.glossar_loader import GlossarLoader
from glossar.modules.glossar_store import GlossarStore
from shared_modules.config import Config
from shared_modules.file_registry import FileRegistry


async def refresh(config: Config) -> GlossarStore:
    registry = FileRegistry(config.files)
    store = GlossarStore(GlossarLoader.from_config(config))
    await store.reload(registry.active_files())
    await store.loader.backup_manager.drain()
    return store


def main() -> None:
    """
    Lädt die Glossare aller aktiven Arbeitsmappen neu (fehlende werden aus den
    erfassten Themen angelegt) und zeigt die bekannten Begriffe an.
    """
    config_path: Path = Path(__file__).parents[2] / ".config" / "aktivitaeten_config.yaml"
    config = Config(config_path)

    logger.info(f"Lade Glossare für {len(config.files)} konfigurierte Dateien.")
    store = asyncio.run(refresh(config))
    print(store.known_terms())


if __name__ == "__main__":
    main()
