from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from pydantic_models.data.glossar import normalize_for_lookup


class XlsxFileConfig(BaseModel):
    """
    Eine Auftraggeber-/Jahres-Arbeitsmappe aus der Konfiguration.
    Pro (client_name, year) darf höchstens eine Datei aktiv sein.
    """
    path: str
    client_name: str = Field(default="", alias="auftraggeber")
    year: int = Field(alias="jahr")
    active: bool = False

    model_config = {"populate_by_name": True}

    @field_validator("path")
    @classmethod
    def expand_home(cls, v: str) -> str:
        return str(Path(v).expanduser()) if v.startswith("~") else v

    @field_validator("client_name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return v.strip()

    @property
    def registry_key(self) -> tuple[str, int]:
        return normalize_for_lookup(self.client_name), self.year
