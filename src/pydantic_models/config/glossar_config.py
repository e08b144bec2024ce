from pydantic import BaseModel, Field


class GlossarConfig(BaseModel):
    """
    Einstellungen für das Glossar-Blatt und den unscharfen Abgleich.
    `similarity_threshold` gilt sowohl für die Normalisierung als auch für das Clustering
    beim erstmaligen Anlegen eines Glossars.
    """
    sheet_name: str = "Glossar"
    header: tuple[str, str, str] = ("Kategorie", "Begriff", "Synonyme")
    column_widths: tuple[int, int, int] = (15, 30, 40)
    similarity_threshold: float = Field(default=0.75, gt=0.0, le=1.0)
