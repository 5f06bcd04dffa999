"""Typo-tolerant product search and query suggestions."""

from __future__ import annotations

from collections.abc import Iterable

from storefront.models.product import Product, SearchHit

# (field name, weight) in scoring order.
_FIELD_WEIGHTS: tuple[tuple[str, float], ...] = (
    ("name", 3.0),
    ("category", 2.0),
    ("maker", 1.5),
    ("state", 1.5),
    ("description", 0.5),
)
_LIST_FIELD_WEIGHTS: tuple[tuple[str, float], ...] = (
    ("materials", 1.0),
    ("tags", 1.0),
)
_SCORE_NORMALIZER = 10.0


def levenshtein_distance(left: str, right: str) -> int:
    """Edit distance between two strings."""

    if len(left) < len(right):
        left, right = right, left
    previous = list(range(len(right) + 1))
    for i, left_char in enumerate(left, start=1):
        current = [i]
        for j, right_char in enumerate(right, start=1):
            cost = 0 if left_char == right_char else 1
            current.append(
                min(
                    previous[j - 1] + cost,
                    previous[j] + 1,
                    current[j - 1] + 1,
                )
            )
        previous = current
    return previous[-1]


def fuzzy_match(text: str, query: str) -> float:
    """Score in [0, 1] describing how well ``query`` matches ``text``."""

    text_lower = text.lower()
    query_lower = query.lower()
    if not text_lower or not query_lower:
        return 0.0

    if text_lower == query_lower:
        return 1.0

    position = text_lower.find(query_lower)
    if position != -1:
        position_bonus = max(0.0, 1 - position / len(text_lower))
        return 0.8 + position_bonus * 0.1

    words = text_lower.split()
    query_words = query_lower.split()
    if all(any(word.startswith(qw) for word in words) for qw in query_words):
        return 0.7

    # Edit distance only for short queries to limit false positives.
    if 3 <= len(query_lower) <= 15:
        distance = levenshtein_distance(text_lower, query_lower)
        similarity = 1 - distance / max(len(text_lower), len(query_lower))
        if similarity > 0.4:
            return similarity * 0.5

        for word in words:
            if len(word) < 3:
                continue
            word_distance = levenshtein_distance(word, query_lower)
            word_similarity = 1 - word_distance / max(len(word), len(query_lower))
            if word_similarity > 0.6:
                return word_similarity * 0.4

    return 0.0


def _score_product(product: Product, query: str) -> SearchHit:
    total = 0.0
    matched: list[str] = []

    for name, weight in _FIELD_WEIGHTS:
        score = fuzzy_match(getattr(product, name) or "", query)
        if score > 0:
            total += score * weight
            matched.append(name)

    for name, weight in _LIST_FIELD_WEIGHTS:
        for value in getattr(product, name):
            score = fuzzy_match(value, query)
            if score > 0:
                total += score * weight
                matched.append(name)
                break

    final = total / _SCORE_NORMALIZER
    if product.verified:
        final *= 1.1
    if product.featured:
        final *= 1.1
    if product.in_stock:
        final *= 1.05
    return SearchHit(product=product, score=final, matched_fields=matched)


def search_products(
    products: Iterable[Product],
    query: str,
    *,
    limit: int = 10,
    min_score: float = 0.2,
) -> list[SearchHit]:
    """Rank ``products`` by relevance to ``query``, best first."""

    normalized = query.strip().lower()
    if not normalized:
        return []

    results = []
    for product in products:
        scored = _score_product(product, normalized)
        if scored.matched_fields and scored.score >= min_score:
            results.append(scored)

    results.sort(key=lambda item: item.score, reverse=True)
    return results[:limit]


def search_suggestions(
    products: Iterable[Product],
    query: str,
    limit: int = 5,
) -> list[str]:
    """Completions drawn from names, categories, makers, states and materials."""

    if len(query.strip()) < 2:
        return []

    query_lower = query.strip().lower()
    suggestions: dict[str, None] = {}
    for product in products:
        candidates = [product.name, product.category, product.maker, product.state]
        candidates.extend(product.materials)
        for candidate in candidates:
            if candidate and query_lower in candidate.lower():
                suggestions.setdefault(candidate, None)
        if len(suggestions) >= limit * 2:
            break

    def _rank(value: str) -> tuple[int, int, str]:
        starts = value.lower().startswith(query_lower)
        return (0 if starts else 1, len(value), value)

    return sorted(suggestions, key=_rank)[:limit]
