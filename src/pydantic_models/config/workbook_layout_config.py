from typing import List

from pydantic import BaseModel, field_validator, model_validator

GERMAN_MONTH_NAMES: List[str] = [
    "Januar", "Februar", "März", "April", "Mai", "Juni",
    "Juli", "August", "September", "Oktober", "November", "Dezember",
]


class WorkbookLayoutConfig(BaseModel):
    """
    Layout der LV-Arbeitsmappen (ein Blatt pro Monat).

    Kopfzeilen belegen die Zeilen 1 bis `header_end_row`; Aktivitäten beginnen
    in `data_start_row`. Dieselbe Startzeile gilt für Schreiben, Lesen und
    das Auswerten der Themen beim Anlegen eines Glossars.
    Spalten sind 1-basiert (A=1).
    """
    month_names: List[str] = GERMAN_MONTH_NAMES
    header_end_row: int = 6
    empty_row_limit: int = 6

    date_col: int = 1
    topic_col: int = 2
    description_col: int = 3
    duration_col: int = 4
    distance_col: int = 5
    expense_col: int = 6

    duration_number_format: str = "[h]:mm"
    max_file_size: int = 50 * 1024 * 1024
    allowed_extensions: tuple[str, ...] = (".xlsx", ".xls")

    @property
    def data_start_row(self) -> int:
        return self.header_end_row + 1

    def month_sheet_name(self, month: int) -> str:
        """Blattname für einen Monat (1-12)."""
        if not 1 <= month <= 12:
            raise ValueError(f"Ungültiger Monat: {month}")
        return self.month_names[month - 1]

    @field_validator("month_names")
    @classmethod
    def twelve_months(cls, v: List[str]) -> List[str]:
        if len(v) != 12:
            raise ValueError("month_names muss genau 12 Einträge enthalten")
        return v

    @model_validator(mode="after")
    def distinct_columns(self) -> "WorkbookLayoutConfig":
        cols = [
            self.date_col,
            self.topic_col,
            self.description_col,
            self.duration_col,
            self.distance_col,
            self.expense_col,
        ]
        if len(set(cols)) != len(cols):
            raise ValueError("Spaltenzuordnung enthält doppelte Spalten")
        if min(cols) < 1:
            raise ValueError("Spalten sind 1-basiert")
        return self
