from __future__ import annotations

from glossar.modules.term_clustering import TermCluster, cluster_terms


def test_most_frequent_form_becomes_canonical() -> None:
    clusters = cluster_terms(["Dev", "Dev", "Development"], threshold=0.25)
    assert clusters == [TermCluster(canonical="Dev", synonyms=["Development"])]


def test_dissimilar_terms_stay_apart_at_default_threshold() -> None:
    clusters = cluster_terms(["Dev", "Dev", "Development"])
    assert [c.canonical for c in clusters] == ["Dev", "Development"]


def test_ties_prefer_longer_then_lexicographic() -> None:
    clusters = cluster_terms(["Meting", "Meeting", "meeting", "Budget"])
    assert clusters == [
        TermCluster(canonical="Budget"),
        TermCluster(canonical="Meeting", synonyms=["Meting", "meeting"]),
    ]


def test_blank_terms_are_ignored() -> None:
    assert cluster_terms(["", "   ", " Budget "]) == [TermCluster(canonical="Budget")]
    assert cluster_terms([]) == []


def test_clusters_sorted_case_insensitive() -> None:
    clusters = cluster_terms(["zebra", "Apfel", "birne"])
    assert [c.canonical for c in clusters] == ["Apfel", "birne", "zebra"]


def test_term_joins_via_synonym() -> None:
    # "Berichten" ist dem Hauptbegriff nicht ähnlich genug, aber "Berichte"
    clusters = cluster_terms(["Bericht", "Bericht", "Berichte", "Berichten"], threshold=0.8)
    assert clusters == [TermCluster(canonical="Bericht", synonyms=["Berichte", "Berichten"])]
