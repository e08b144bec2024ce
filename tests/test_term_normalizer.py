from __future__ import annotations

import pytest

from glossar.modules.term_normalizer import normalize_text, similarity
from pydantic_models.data.glossar import Glossar, GlossarCategory, GlossarEntry


@pytest.fixture
def glossar() -> Glossar:
    return Glossar.from_entries(
        [
            GlossarEntry(category=GlossarCategory.AUFTRAGGEBER, term="IDT", synonyms=["I.D.T."]),
            GlossarEntry(category=GlossarCategory.THEMA, term="Meeting", synonyms=["Besprechung", "Sitzung"]),
            GlossarEntry(category=GlossarCategory.THEMA, term="Budget"),
        ]
    )


def test_similarity() -> None:
    assert similarity("", "") == 1.0
    assert similarity("Meeting", "meeting") == 1.0
    assert similarity("abc", "") == 0.0
    assert similarity("meetin", "meeting") == pytest.approx(6 / 7)


def test_exact_lookup_ignores_case_and_whitespace(glossar) -> None:
    assert normalize_text("  meeting ", glossar) == "Meeting"
    assert normalize_text("BESPRECHUNG", glossar) == "Meeting"
    assert normalize_text("i.d.t.", glossar) == "IDT"


def test_fuzzy_match_above_threshold(glossar) -> None:
    assert normalize_text("meetin", glossar) == "Meeting"
    assert normalize_text("Budgt", glossar) == "Budget"


def test_no_match_returns_input_unchanged(glossar) -> None:
    assert normalize_text("xyz", glossar) == "xyz"
    assert normalize_text("  Neues Thema ", glossar) == "  Neues Thema "


def test_threshold_is_strict() -> None:
    glossar = Glossar.from_entries([GlossarEntry(category=GlossarCategory.THEMA, term="abcd")])
    # Ähnlichkeit genau 0.75
    assert similarity("abce", "abcd") == 0.75
    assert normalize_text("abce", glossar) == "abce"
    assert normalize_text("abce", glossar, threshold=0.7) == "abcd"


def test_ties_keep_first_key() -> None:
    glossar = Glossar.from_entries(
        [
            GlossarEntry(category=GlossarCategory.THEMA, term="Alpha1"),
            GlossarEntry(category=GlossarCategory.THEMA, term="Alpha2"),
        ]
    )
    assert normalize_text("Alpha3", glossar) == "Alpha1"


def test_without_glossar() -> None:
    assert normalize_text("meetin", None) == "meetin"
    assert normalize_text("", Glossar()) == ""


@pytest.mark.parametrize("text", ["meetin", "Meeting", "xyz", "besprechung", "Budgt", "", "IDT "])
def test_normalization_is_idempotent(glossar, text) -> None:
    once = normalize_text(text, glossar)
    assert normalize_text(once, glossar) == once
