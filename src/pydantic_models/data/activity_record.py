from __future__ import annotations

import datetime as dt
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class ActivityRecord(BaseModel):
    """
    Fachliches Datenmodell für eine diktierte Tätigkeit.
    Wird vom Parser geliefert, optional über das Glossar normalisiert und
    anschließend als neue Zeile im passenden Monatsblatt gespeichert.
    `client` dient nur der Dateiauswahl und wird nicht ins Blatt geschrieben.
    """
    date: dt.date
    description: str
    topic: Optional[str] = None
    client: Optional[str] = None
    duration_minutes: Optional[int] = Field(default=None, ge=0)
    distance_km: float = Field(default=0.0, ge=0.0)
    expense_amount: float = Field(default=0.0, ge=0.0)

    @field_validator("distance_km", "expense_amount", mode="before")
    @classmethod
    def none_is_zero(cls, value):
        """Fehlende Kilometer/Auslagen zählen als 0."""
        return 0.0 if value is None else value


class ActivityRow(BaseModel):
    """
    Eine aus einem Monatsblatt gelesene Tätigkeit samt Zeilennummer.
    Ältere Zeilen haben nicht immer ein Datum, daher ist es hier optional.
    """
    row_number: int
    date: Optional[dt.date] = None
    topic: str = ""
    description: str = ""
    duration_minutes: Optional[int] = None
    distance_km: float = 0.0
    expense_amount: float = 0.0
