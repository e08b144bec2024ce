from __future__ import annotations

from typing import Iterable

from pydantic_models.data.glossar import Glossar


def merge_glossars(glossars: Iterable[Glossar]) -> Glossar:
    """
    Führt mehrere Glossare zusammen.
    Einträge werden in Eingabereihenfolge aneinandergehängt; bei gleichen Lookup-Schlüsseln
    gewinnt das später übergebene Glossar.
    """
    merged = Glossar()
    for glossar in glossars:
        merged.entries.extend(glossar.entries)
        for category, entries in glossar.by_category.items():
            merged.by_category.setdefault(category, []).extend(entries)
        merged.lookup_map.update(glossar.lookup_map)
    return merged
