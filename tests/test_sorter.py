"""Tests for hk_geocoder.sorter module."""

import pytest

from hk_geocoder.address import Address
from hk_geocoder.models import parse_land_response
from hk_geocoder.sorter import LandResultSorter, ScoringWeights


@pytest.fixture(scope="module")
def sorter() -> LandResultSorter:
    return LandResultSorter(ScoringWeights(coverage_weight=0.5, similarity_weight=0.3, doorplate_weight=0.2))


@pytest.fixture()
def land_addresses(land_payload: list) -> list:
    return [Address.from_land(record) for record in parse_land_response(land_payload)]


def _names(addresses) -> list:
    return [address.record.name_zh for address in addresses]


class TestSort:
    def test_chinese_query_best_match_first(self, sorter: LandResultSorter, land_addresses: list):
        assert _names(sorter.sort("沙田正街1號", land_addresses)) == ["沙田大會堂", "荃灣大會堂"]

    def test_english_query_best_match_first(self, sorter: LandResultSorter, land_addresses: list):
        reversed_input = list(reversed(land_addresses))
        assert _names(sorter.sort("72 Tai Ho Road", reversed_input)) == ["荃灣大會堂", "沙田大會堂"]

    def test_floor_does_not_distract(self, sorter: LandResultSorter, land_addresses: list):
        assert _names(sorter.sort("沙田正街1號3樓", land_addresses))[0] == "沙田大會堂"

    def test_ties_keep_input_order(self, sorter: LandResultSorter, land_payload: list):
        twin = dict(land_payload[1])
        twin["x"] = twin["x"] + 5
        records = parse_land_response([land_payload[1], twin])
        addresses = [Address.from_land(record) for record in records]
        assert sorter.sort("沙田正街1號", addresses) == addresses
        assert sorter.sort("沙田正街1號", list(reversed(addresses))) == list(reversed(addresses))

    def test_empty_and_single(self, sorter: LandResultSorter, land_addresses: list):
        assert sorter.sort("沙田正街1號", []) == []
        assert sorter.sort("anything", land_addresses[:1]) == land_addresses[:1]

    def test_returns_new_list(self, sorter: LandResultSorter, land_addresses: list):
        original = list(land_addresses)
        sorter.sort("沙田正街1號", land_addresses)
        assert land_addresses == original


class TestScore:
    def test_doorplate_match_beats_mismatch(self, sorter: LandResultSorter):
        assert sorter._doorplate_score((1, 1), (1, 3)) == 1.0
        assert sorter._doorplate_score((5, 5), (1, 3)) == 0.2
        assert sorter._doorplate_score(None, (1, 3)) == 0.0

    def test_coverage(self, sorter: LandResultSorter):
        assert sorter._token_coverage(["A", "B"], ["B", "C"]) == 0.5
        assert sorter._token_coverage([], ["B"]) == 0.0

    def test_exact_match_scores_full_weight(self, sorter: LandResultSorter, land_addresses: list):
        query = sorter.normalizer.normalize("沙田大會堂沙田正街1號")
        assert sorter.score(query, land_addresses[1]) == pytest.approx(1.0)
