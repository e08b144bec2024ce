import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Type

import yaml
from loguru import logger
from pydantic import BaseModel

from pydantic_models.config.backup_config import BackupConfig
from pydantic_models.config.glossar_config import GlossarConfig
from pydantic_models.config.logging_config import LoggingConfig
from pydantic_models.config.structure_config import StructureConfig
from pydantic_models.config.workbook_layout_config import WorkbookLayoutConfig
from pydantic_models.config.xlsx_file_config import XlsxFileConfig

DEFAULT_CONFIG_PATH = Path.home() / ".aktivitaeten" / "config.yaml"


class Config:
    """
    Singleton für das Laden und Prüfen der Konfiguration.
    Nutzt statische Pydantic-Modelle für alle Abschnitte.
    Prüft die Dateiliste auf doppelte aktive Auftraggeber/Jahr-Kombinationen.
    Fehlt die Datei, gelten die Defaults aller Abschnitte.
    """

    _instance: Optional["Config"] = None

    def __new__(cls, config_path: Optional[Path] = None):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, config_path: Optional[Path] = None):
        # Fallback-Logger für Fehler beim Laden der Config
        logger.remove()
        logger.add(sys.stderr, level="WARNING")
        self.config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
        try:
            self.raw_config: Dict[str, Any] = self._load_config()
            self.logging = self._parse_section(self.raw_config, "logging", LoggingConfig)
            self.structure = self._parse_section(self.raw_config, "structure", StructureConfig)
            self._setup_logging()
            logger.debug(f"Lade Konfiguration von {self.config_path}")
        except Exception as e:
            logger.error(f"Fehler beim Laden der Konfiguration: {e}")
            raise

        self.workbook = self._parse_section(self.raw_config, "workbook", WorkbookLayoutConfig)
        self.backup = self._parse_section(self.raw_config, "backup", BackupConfig)
        self.glossar = self._parse_section(self.raw_config, "glossar", GlossarConfig)
        self.files = self._parse_files(self.raw_config.get("files") or [])

        self._validate_structure_and_paths()
        self._validate_consistency()
        logger.debug("Konfiguration erfolgreich geladen und validiert.")
        self._initialized = True

    def _setup_logging(self) -> None:
        """
        Initialisiert loguru mit den Einstellungen aus der Config-Datei.
        Relative Log-Dateien landen im Log-Verzeichnis neben den Arbeitsmappen.
        """
        logger.remove()
        log_file = getattr(self.logging, "log_file", None)
        log_level = getattr(self.logging, "log_level", "INFO")
        if log_file:
            log_path = Path(log_file)
            if not log_path.is_absolute() and self.structure.xlsx_base_path:
                log_path = Path(self.structure.xlsx_base_path).expanduser() / (self.structure.log_path or "") / log_path
            logger.add(log_path, level=log_level)
        logger.add(sys.stderr, level=log_level)

    def _load_config(self) -> Dict[str, Any]:
        """
        Lädt die YAML-Konfigurationsdatei.
        """
        if not self.config_path.exists():
            logger.warning(f"Keine Konfigurationsdatei unter {self.config_path}, verwende Defaults.")
            return {}
        with open(self.config_path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}

    def _parse_section(self, config: Dict[str, Any], section: str, model: Type[BaseModel]) -> Any:
        """
        Parst einen Abschnitt der Config mit dem passenden Pydantic-Modell.
        """
        data = config.get(section) or {}
        logger.debug(f"Parsiere Abschnitt '{section}': {data}")
        return model(**data)

    def _parse_files(self, files: List[Dict[str, Any]]) -> List[XlsxFileConfig]:
        """
        Parst die Liste der konfigurierten Arbeitsmappen.
        """
        result = []
        for file_data in files:
            logger.debug(f"Parsiere Datei-Eintrag: {file_data}")
            result.append(XlsxFileConfig(**file_data))
        return result

    def _validate_consistency(self) -> None:
        """
        Prüft, dass pro Auftraggeber und Jahr höchstens eine Datei aktiv ist.
        """
        seen: Dict[tuple, str] = {}
        for file_cfg in self.files:
            if not file_cfg.active:
                continue
            key = file_cfg.registry_key
            if key in seen:
                logger.error(
                    f"Mehrere aktive Dateien für '{file_cfg.client_name}' {file_cfg.year}: "
                    f"{seen[key]} und {file_cfg.path}"
                )
                raise ValueError(
                    f"Mehrere aktive Dateien für '{file_cfg.client_name}' {file_cfg.year}."
                )
            seen[key] = file_cfg.path

    def _validate_structure_and_paths(self) -> None:
        """
        Prüft die konfigurierten Pfade. Fehlende Dateien oder Verzeichnisse
        sind kein Fehler (z. B. Netzlaufwerk getrennt), werden aber gemeldet.
        """
        base_raw = getattr(self.structure, "xlsx_base_path", None)
        if base_raw:
            base = Path(base_raw).expanduser()
            if not base.exists():
                logger.warning(f"xlsx_base_path existiert nicht: {base}")
        for file_cfg in self.files:
            if file_cfg.active and not Path(file_cfg.path).exists():
                logger.warning(f"Aktive Datei nicht gefunden: {file_cfg.path}")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Allgemeiner Getter für beliebige Felder (dot-notation für verschachtelte Felder).
        """
        parts = key.split(".")
        val = self.raw_config
        for part in parts:
            if isinstance(val, dict) and part in val:
                val = val[part]
            else:
                logger.debug(f"Feld '{key}' nicht gefunden, Rückgabe Default: {default}")
                return default
        return val

    def save_files(self, files: List[XlsxFileConfig]) -> None:
        """
        Schreibt die Dateiliste zurück in die YAML-Datei; übrige Abschnitte bleiben unverändert.
        """
        self.files = list(files)
        self._validate_consistency()
        self.raw_config["files"] = [f.model_dump(by_alias=True) for f in self.files]
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(self.raw_config, f, allow_unicode=True, sort_keys=False)
        logger.info(f"Konfiguration gespeichert: {self.config_path}")


if __name__ == "__main__":
    config_path = (
        Path(__file__).parent.parent.parent / ".config" / "aktivitaeten_config.yaml"
    )
    config = Config(config_path)
    logger.info("Arbeitsmappen-Verzeichnis: {}", config.structure.xlsx_base_path)
    # Validierung erfolgt beim Laden automatisch
