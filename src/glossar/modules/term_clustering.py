from __future__ import annotations

from collections import Counter
from typing import Iterable, List

from pydantic import BaseModel, Field

from glossar.modules.term_normalizer import DEFAULT_THRESHOLD, similarity


class TermCluster(BaseModel):
    """Gruppe ähnlicher Schreibweisen mit ihrem Hauptbegriff."""
    canonical: str
    synonyms: List[str] = Field(default_factory=list)


def _representative(forms: List[str], counts: Counter) -> str:
    # häufigste Form, dann die längere, dann alphabetisch
    return min(forms, key=lambda form: (-counts[form], -len(form), form))


def cluster_terms(terms: Iterable[str], threshold: float = DEFAULT_THRESHOLD) -> List[TermCluster]:
    """
    Fasst ähnliche Begriffe zusammen.

    Jede Schreibweise wird (in Reihenfolge des ersten Auftretens) dem ersten Cluster
    zugeordnet, dessen Hauptbegriff oder eines seiner Mitglieder mindestens `threshold`
    ähnlich ist; sonst eröffnet sie ein neues Cluster. Der Hauptbegriff wird nach jeder
    Zuordnung neu bestimmt.
    """
    counts: Counter = Counter()
    order: List[str] = []
    for term in terms:
        cleaned = (term or "").strip()
        if not cleaned:
            continue
        if cleaned not in counts:
            order.append(cleaned)
        counts[cleaned] += 1

    groups: List[List[str]] = []
    representatives: List[str] = []
    for form in order:
        for idx, members in enumerate(groups):
            if similarity(form, representatives[idx]) >= threshold or any(
                similarity(form, member) >= threshold for member in members
            ):
                members.append(form)
                representatives[idx] = _representative(members, counts)
                break
        else:
            groups.append([form])
            representatives.append(form)

    clusters = [
        TermCluster(
            canonical=representative,
            synonyms=sorted(member for member in members if member != representative),
        )
        for members, representative in zip(groups, representatives)
    ]
    clusters.sort(key=lambda cluster: (cluster.canonical.casefold(), cluster.canonical))
    return clusters
