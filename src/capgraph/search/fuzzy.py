"""Fuzzy capability search.

Scoring ladder for a (target, query) pair, both lowercased with ``_`` and
``-`` read as spaces:

    1.0  target equals query
    0.9  query is a substring of target
    per query word (words of one character are ignored):
        0.9  word is a substring of target
        0.7  word and any target word are prefixes of one another
        0.5  typo: similar length, word >= 4 chars, <= 2 character differences
    mean of the word scores if every word scored, otherwise no match
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

import jellyfish

from capgraph.config import settings
from capgraph.graph.hierarchy import CapabilityTreeNode

logger = logging.getLogger(__name__)

EXACT_SCORE = 1.0
SUBSTRING_SCORE = 0.9
PREFIX_SCORE = 0.7
TYPO_SCORE = 0.5

TYPO_MAX_DIFFS = 2
TYPO_MIN_WORD_LENGTH = 4


@dataclass(frozen=True)
class FuzzyMatch:
    """Result of matching one query against one target string."""

    matches: bool
    score: float


NO_MATCH = FuzzyMatch(matches=False, score=0.0)


def normalize(text: str) -> str:
    """Lowercase and treat ``_``/``-`` as word separators."""
    return text.lower().replace("_", " ").replace("-", " ")


def _is_typo(target_word: str, query_word: str) -> bool:
    if abs(len(target_word) - len(query_word)) > TYPO_MAX_DIFFS:
        return False
    if len(query_word) < TYPO_MIN_WORD_LENGTH:
        return False
    # Positional differences plus the length difference
    return jellyfish.hamming_distance(target_word, query_word) <= TYPO_MAX_DIFFS


def _word_score(query_word: str, target: str, target_words: list[str]) -> float:
    if query_word in target:
        return SUBSTRING_SCORE
    best = 0.0
    for target_word in target_words:
        if target_word.startswith(query_word) or query_word.startswith(target_word):
            return PREFIX_SCORE
        if _is_typo(target_word, query_word):
            best = TYPO_SCORE
    return best


def fuzzy_match(target: str | None, query: str | None) -> FuzzyMatch:
    """
    Score how well ``query`` matches ``target``.

    Empty targets or queries never match.
    """
    if not target or not query:
        return NO_MATCH

    target_norm = normalize(target)
    query_norm = normalize(query)
    if not target_norm.strip() or not query_norm.strip():
        return NO_MATCH

    if target_norm == query_norm:
        return FuzzyMatch(matches=True, score=EXACT_SCORE)
    if query_norm in target_norm:
        return FuzzyMatch(matches=True, score=SUBSTRING_SCORE)

    target_words = target_norm.split()
    query_words = [w for w in query_norm.split() if len(w) > 1]
    if not query_words:
        return NO_MATCH

    scores = [_word_score(w, target_norm, target_words) for w in query_words]
    if all(s > 0 for s in scores):
        return FuzzyMatch(matches=True, score=sum(scores) / len(scores))
    return NO_MATCH


@dataclass
class SearchResult:
    """A ranked capability search hit."""

    id: str
    name: str
    score: float
    matched_field: str  # name, description, fqdn, tool or server
    success_rate: float = 0.0
    tool_count: int = 0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "type": "capability",
            "score": self.score,
            "matchedField": self.matched_field,
            "successRate": self.success_rate,
            "toolCount": self.tool_count,
        }


class FuzzyMatcher:
    """Ranks capabilities against a free-text query across several fields."""

    def __init__(
        self,
        min_query_length: int | None = None,
        max_results: int | None = None,
    ) -> None:
        self.min_query_length = (
            min_query_length if min_query_length is not None else settings.search_min_query_length
        )
        self.max_results = max_results if max_results is not None else settings.search_max_results

    def score(self, node: CapabilityTreeNode, query: str) -> tuple[FuzzyMatch, str]:
        """Best match of ``query`` over a capability's fields, with the field name."""
        cap = node.capability
        fields: list[tuple[str, str | None]] = [
            ("name", cap.name),
            ("description", cap.description),
            ("fqdn", cap.fqdn),
        ]
        for instance in node.tools:
            fields.append(("tool", instance.name))
            fields.append(("server", instance.server))

        best, best_field = NO_MATCH, "name"
        for field_name, value in fields:
            match = fuzzy_match(value, query)
            if match.matches and match.score > best.score:
                best, best_field = match, field_name
        return best, best_field

    def rank(self, capabilities: Iterable[CapabilityTreeNode], query: str) -> list[SearchResult]:
        """
        Rank capabilities by their best field score.

        Args:
            capabilities: Capabilities to search (e.g. ``hierarchy.walk()``)
            query: Free-text query

        Returns:
            Matches sorted by score (ties by name), at most ``max_results``
        """
        query = (query or "").strip()
        if len(query) < self.min_query_length:
            return []

        results: list[SearchResult] = []
        for node in capabilities:
            match, field_name = self.score(node, query)
            if not match.matches:
                continue
            results.append(
                SearchResult(
                    id=node.id,
                    name=node.name,
                    score=match.score,
                    matched_field=field_name,
                    success_rate=node.capability.success_rate,
                    tool_count=len(node.tools),
                )
            )

        results.sort(key=lambda r: (-r.score, r.name, r.id))
        logger.debug(f"Search '{query}': {len(results)} matches")
        return results[: self.max_results]
