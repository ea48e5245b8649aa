from typing import Iterable

from models.review import SearchResult


def rank_key(result: SearchResult) -> tuple[float, int]:
    """Sort key: platform rating (missing counts as 0), then review count."""
    return (result.rating or 0.0, result.review_count)


def drop_empty(results: Iterable[SearchResult]) -> list[SearchResult]:
    return [r for r in results if r.has_reviews]


def rank_results(results: Iterable[SearchResult]) -> list[SearchResult]:
    """
    Order results best-first by (rating, review count).

    Results equal on both keys keep their input order (sorted() stays stable
    with reverse=True).
    """
    return sorted(results, key=rank_key, reverse=True)
