from typing import Optional
from pydantic import BaseModel

class StructureConfig(BaseModel):
    """
    Modell für die Struktur-Konfiguration des Projekts.

    Attribute:
        xlsx_base_path (Optional[str]): Verzeichnis, in dem die LV-Arbeitsmappen liegen.
        log_path (Optional[str]): Pfad zum Log-Verzeichnis relativ zu xlsx_base_path (Standard: ".logs").
        file_pattern (str): Glob-Muster für die Suche nach Arbeitsmappen.
    """
    xlsx_base_path: Optional[str] = None
    log_path: Optional[str] = ".logs"
    file_pattern: str = "LV*.xlsx"
