"""Order catalog candidates by how closely their release name matches a file.

Distances are computed on raw strings: no case folding, no tokenization.
Each comparison costs O(n*m) in the two string lengths.
"""

from typing import Callable, Iterable, TypeVar

T = TypeVar("T")


def levenshtein_distance(a: str, b: str) -> int:
    """Edit distance with unit cost for insertion, deletion and substitution."""
    n, m = len(a), len(b)
    # Two-row rolling table: previous[j] holds d[i-1][j]
    previous = list(range(m + 1))
    for i in range(1, n + 1):
        current = [i] + [0] * m
        for j in range(1, m + 1):
            cost = 0 if a[i - 1] == b[j - 1] else 1
            current[j] = min(
                previous[j] + 1,         # deletion
                current[j - 1] + 1,      # insertion
                previous[j - 1] + cost,  # substitution
            )
        previous = current
    return previous[m]


def rank_by_similarity(
    reference: str,
    candidates: Iterable[T],
    label: Callable[[T], str | None] = lambda c: c,  # type: ignore[assignment,return-value]
) -> list[T]:
    """Sort candidates by ascending distance from reference to their label.

    A missing label compares as the empty string. The sort is stable, so
    equally distant candidates keep their catalog order.
    """
    return sorted(candidates, key=lambda c: levenshtein_distance(reference, label(c) or ""))
