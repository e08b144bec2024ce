from __future__ import annotations

from typing import Optional

from rapidfuzz.distance import Levenshtein

from pydantic_models.data.glossar import Glossar, normalize_for_lookup

DEFAULT_THRESHOLD = 0.75


def similarity(a: str, b: str) -> float:
    """
    Ähnlichkeit zweier Begriffe zwischen 0 und 1 auf Basis der Levenshtein-Distanz.
    Groß-/Kleinschreibung wird ignoriert; zwei leere Strings gelten als identisch.
    """
    left, right = a.lower(), b.lower()
    longest = max(len(left), len(right))
    if longest == 0:
        return 1.0
    return 1.0 - Levenshtein.distance(left, right) / longest


def normalize_text(text: str, glossar: Optional[Glossar], threshold: float = DEFAULT_THRESHOLD) -> str:
    """
    Ersetzt einen Begriff durch seine kanonische Schreibweise aus dem Glossar.

    1. exakter Treffer im Lookup (nach Normalisierung)
    2. sonst der ähnlichste Schlüssel, sofern die Ähnlichkeit den Schwellwert übersteigt
    3. sonst bleibt der Text unverändert

    Bei gleicher Ähnlichkeit gewinnt der zuerst eingetragene Schlüssel.
    """
    if not text or glossar is None:
        return text

    normalized = normalize_for_lookup(text)
    exact = glossar.lookup_map.get(normalized)
    if exact is not None:
        return exact

    best_score = threshold
    best_match: Optional[str] = None
    for key, canonical in glossar.lookup_map.items():
        score = similarity(normalized, key)
        if score > best_score:
            best_score = score
            best_match = canonical
    return best_match if best_match is not None else text
