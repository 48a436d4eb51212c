"""Search module - fuzzy capability ranking."""

from capgraph.search.fuzzy import FuzzyMatch, FuzzyMatcher, SearchResult, fuzzy_match, normalize

__all__ = [
    "FuzzyMatch",
    "FuzzyMatcher",
    "SearchResult",
    "fuzzy_match",
    "normalize",
]
