from __future__ import annotations

import re
from enum import Enum
from typing import Dict, Iterable, List, Optional

from loguru import logger
from pydantic import BaseModel, Field

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_for_lookup(text: str) -> str:
    """Kleinschreibung, getrimmt, Leerraum auf ein Leerzeichen reduziert."""
    return _WHITESPACE_RE.sub(" ", text.lower().strip())


class GlossarCategory(str, Enum):
    """
    Geschlossene Menge der Glossar-Kategorien, so wie sie im Blatt stehen.
    Auftraggeber = Client, Thema = Topic, Kunde = Contact, Sonstiges = Other.
    """
    AUFTRAGGEBER = "Auftraggeber"
    THEMA = "Thema"
    KUNDE = "Kunde"
    SONSTIGES = "Sonstiges"

    @classmethod
    def parse(cls, value: str) -> Optional["GlossarCategory"]:
        """Liest eine Kategorie aus dem Blatt (Groß-/Kleinschreibung egal, englische Aliase erlaubt)."""
        key = normalize_for_lookup(value)
        for member in cls:
            if member.value.lower() == key:
                return member
        return _CATEGORY_ALIASES.get(key)


_CATEGORY_ALIASES: Dict[str, GlossarCategory] = {
    "client": GlossarCategory.AUFTRAGGEBER,
    "topic": GlossarCategory.THEMA,
    "contact": GlossarCategory.KUNDE,
    "other": GlossarCategory.SONSTIGES,
}


class GlossarEntry(BaseModel):
    """
    Ein kanonischer Begriff mit seinen Schreibvarianten.
    """
    category: GlossarCategory
    term: str
    synonyms: List[str] = Field(default_factory=list)


def _empty_categories() -> Dict[GlossarCategory, List[GlossarEntry]]:
    return {category: [] for category in GlossarCategory}


class Glossar(BaseModel):
    """
    Abfragbarer Index über Glossar-Einträge.

    - entries: alle Einträge in Einfügereihenfolge
    - by_category: Einträge je Kategorie, alle vier Kategorien immer vorhanden
    - lookup_map: normalisierter Begriff bzw. normalisiertes Synonym -> kanonischer Begriff
    """
    entries: List[GlossarEntry] = Field(default_factory=list)
    by_category: Dict[GlossarCategory, List[GlossarEntry]] = Field(default_factory=_empty_categories)
    lookup_map: Dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_entries(cls, entries: Iterable[GlossarEntry]) -> "Glossar":
        glossar = cls()
        for entry in entries:
            glossar.add(entry)
        return glossar

    def add(self, entry: GlossarEntry) -> None:
        self.entries.append(entry)
        self.by_category[entry.category].append(entry)
        for key in [entry.term, *entry.synonyms]:
            normalized = normalize_for_lookup(key)
            previous = self.lookup_map.get(normalized)
            if previous is not None and previous != entry.term:
                logger.warning(
                    f"Glossar: '{key}' war '{previous}' zugeordnet und zeigt jetzt auf '{entry.term}'."
                )
            self.lookup_map[normalized] = entry.term

    def known_terms(self, category: GlossarCategory) -> List[str]:
        return [entry.term for entry in self.by_category.get(category, [])]

    def all_known_terms(self) -> Dict[str, List[str]]:
        """Bekannte Begriffe für den Parser-Prompt: Auftraggeber, Themen, Kunden."""
        return {
            "auftraggeber": self.known_terms(GlossarCategory.AUFTRAGGEBER),
            "themen": self.known_terms(GlossarCategory.THEMA),
            "kunden": self.known_terms(GlossarCategory.KUNDE),
        }
