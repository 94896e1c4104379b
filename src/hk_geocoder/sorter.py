from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

from rapidfuzz import fuzz

from .address import Address, Language
from .models import LandRecord
from .normalizer import AddressNormalizer, NormalizedAddress


@dataclass
class ScoringWeights:
    coverage_weight: float
    similarity_weight: float
    doorplate_weight: float


class LandResultSorter:
    """Orders Lands Department results by textual relevance to the query."""

    def __init__(self, weights: ScoringWeights, normalizer: Optional[AddressNormalizer] = None) -> None:
        self.weights = weights
        self.normalizer = normalizer or AddressNormalizer()

    def sort(self, query: str, records: Sequence[Address]) -> List[Address]:
        if len(records) < 2:
            return list(records)
        normalized = self.normalizer.normalize(query)
        scored = [(self.score(normalized, record), record) for record in records]
        # sorted() is stable with reverse=True, so equal scores keep input order
        return [record for _, record in sorted(scored, key=lambda pair: pair[0], reverse=True)]

    def score(self, query: NormalizedAddress, record: Address) -> float:
        candidate = self.normalizer.normalize(self._candidate_text(record, query.is_chinese))
        coverage = self._token_coverage(query.tokens, candidate.tokens)
        similarity = self._similarity(query.text, candidate.text)
        doorplate = self._doorplate_score(query.house_number, candidate.house_number)
        return (
            coverage * self.weights.coverage_weight
            + similarity * self.weights.similarity_weight
            + doorplate * self.weights.doorplate_weight
        )

    def _candidate_text(self, record: Address, chinese: bool) -> str:
        land = record.record
        if isinstance(land, LandRecord):
            if chinese:
                return f"{land.name_zh} {land.address_zh}"
            return f"{land.name_en} {land.address_en}"
        return record.full_address(Language.CHINESE if chinese else Language.ENGLISH)

    def _token_coverage(self, query_tokens: List[str], candidate_tokens: List[str]) -> float:
        if not query_tokens:
            return 0.0
        candidate_set = set(candidate_tokens)
        hits = sum(1 for token in query_tokens if token in candidate_set)
        return hits / len(query_tokens)

    def _similarity(self, a: str, b: str) -> float:
        if not a or not b:
            return 0.0
        return fuzz.partial_ratio(a, b) / 100.0

    def _doorplate_score(
        self, query_house: Optional[tuple[int, int]], candidate_house: Optional[tuple[int, int]]
    ) -> float:
        if not query_house or not candidate_house:
            return 0.0
        low, high = candidate_house
        if low <= query_house[0] <= high and low <= query_house[1] <= high:
            return 1.0
        return 0.2
