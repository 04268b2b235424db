"""Name matching over the index listing.

A strategy maps ``(query, corpus)`` to the matching names in corpus order.
``nearest_match`` then optionally reduces a result set to the single name
closest to the query by Levenshtein distance.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Protocol

from pypisearch.errors import ConfigurationError, InvalidQueryError

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from pypisearch.config import MatcherSettings


class MatchStrategy(Protocol):
    def match(self, query: str, corpus: Iterable[str]) -> list[str]: ...


class SubstringMatcher:
    """Literal substring scan, case-insensitive unless configured otherwise."""

    def __init__(self, case_sensitive: bool = False) -> None:
        self.case_sensitive = case_sensitive

    def match(self, query: str, corpus: Iterable[str]) -> list[str]:
        if self.case_sensitive:
            return [name for name in corpus if query in name]
        needle = query.casefold()
        return [name for name in corpus if needle in name.casefold()]


class RegexMatcher:
    def __init__(self, case_sensitive: bool = False) -> None:
        self.case_sensitive = case_sensitive

    def match(self, query: str, corpus: Iterable[str]) -> list[str]:
        flags = 0 if self.case_sensitive else re.IGNORECASE
        try:
            pattern = re.compile(query, flags)
        except re.error as exc:
            raise InvalidQueryError(f"Invalid pattern {query!r}: {exc}") from exc
        return [name for name in corpus if pattern.search(name)]


def build_matcher(settings: MatcherSettings) -> MatchStrategy:
    if settings.strategy == "substring":
        return SubstringMatcher(case_sensitive=settings.case_sensitive)
    if settings.strategy == "regex":
        return RegexMatcher(case_sensitive=settings.case_sensitive)
    raise ConfigurationError(f"Unknown matcher strategy: {settings.strategy!r}")


def search(entries: Iterable[str], query: str) -> list[str]:
    """Entries containing ``query``, ignoring case."""
    return SubstringMatcher().match(query, entries)


def edit_distance(a: str, b: str) -> int:
    """Levenshtein distance with unit costs."""
    if len(a) < len(b):
        a, b = b, a
    # Single row over the shorter string
    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            current.append(
                min(
                    previous[j] + 1,  # deletion
                    current[j - 1] + 1,  # insertion
                    previous[j - 1] + (ca != cb),  # substitution
                )
            )
        previous = current
    return previous[-1]


def nearest_match(candidates: Sequence[str], query: str) -> str:
    """The candidate closest to ``query``; the earliest one wins ties."""
    if not candidates:
        raise ValueError("nearest_match requires at least one candidate")
    best = candidates[0]
    best_distance = edit_distance(best, query)
    for candidate in candidates[1:]:
        distance = edit_distance(candidate, query)
        if distance < best_distance:
            best, best_distance = candidate, distance
    return best
