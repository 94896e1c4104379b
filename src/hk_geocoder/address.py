"""Geocoded address records returned by both providers."""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Union

from .models import Block, LandRecord, OGCIORecord, PremisesDetail, Street, Village
from .projection import to_wgs84

EARTH_RADIUS_KM = 6371.0


class Source(str, Enum):
    OGCIO = "ogcio"
    LAND = "land"


class Language(str, Enum):
    CHINESE = "chi"
    ENGLISH = "eng"


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in km between two WGS84 points."""
    dlat = math.radians(lat2 - lat1)
    dlon = math.radians(lon2 - lon1)
    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(math.radians(lat1))
        * math.cos(math.radians(lat2))
        * math.sin(dlon / 2) ** 2
    )
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(a))


@dataclass(frozen=True)
class Address:
    source: Source
    record: Union[OGCIORecord, LandRecord]
    latitude: float
    longitude: float
    match_score: Optional[float] = None
    # set only on copies returned by reconciliation
    distance: Optional[float] = field(default=None, compare=False)

    @classmethod
    def from_ogcio(cls, record: OGCIORecord) -> Address:
        return cls(
            source=Source.OGCIO,
            record=record,
            latitude=record.geo.latitude,
            longitude=record.geo.longitude,
            match_score=record.score,
        )

    @classmethod
    def from_land(cls, record: LandRecord) -> Address:
        lon, lat = to_wgs84(record.x, record.y)
        return cls(source=Source.LAND, record=record, latitude=lat, longitude=lon)

    def coordinates(self) -> tuple[float, float]:
        return self.longitude, self.latitude

    def distance_to(self, other: Address) -> float:
        """Kilometres between this address and *other*."""
        return haversine_km(self.latitude, self.longitude, other.latitude, other.longitude)

    def with_distance(self, distance: float) -> Address:
        return replace(self, distance=distance)

    def components(self, language: Language | str = Language.CHINESE) -> list[tuple[str, str]]:
        """Ordered (label, value) parts of the address, largest area first for Chinese."""
        language = Language(language)
        if isinstance(self.record, LandRecord):
            return _land_components(self.record, language)
        return _ogcio_components(self.record, language)

    def full_address(self, language: Language | str = Language.CHINESE) -> str:
        """Formatted address text, or "" if the record has nothing in *language*."""
        language = Language(language)
        values = [value for _, value in self.components(language)]
        if language is Language.CHINESE:
            return "".join(values)
        return ", ".join(values)

    def to_dict(self) -> dict:
        """Convert to a plain dictionary (useful for JSON serialisation)."""
        return {
            "source": self.source.value,
            "address_zh": self.full_address(Language.CHINESE),
            "address_en": self.full_address(Language.ENGLISH),
            "latitude": self.latitude,
            "longitude": self.longitude,
            "match_score": self.match_score,
            "distance": self.distance,
        }


def _land_components(record: LandRecord, language: Language) -> list[tuple[str, str]]:
    if language is Language.CHINESE:
        parts = [("address", record.address_zh), ("name", record.name_zh)]
    else:
        parts = [("name", record.name_en), ("address", record.address_en)]
    return [(label, value.strip()) for label, value in parts if value and value.strip()]


def _number_range(number_from: str, number_to: str) -> str:
    if number_from and number_to and number_to != number_from:
        return f"{number_from}-{number_to}"
    return number_from or number_to


def _street_text(street: Optional[Street], language: Language) -> str:
    if street is None or not street.street_name:
        return ""
    number = _number_range(street.building_no_from, street.building_no_to)
    if not number:
        return street.street_name
    if language is Language.CHINESE:
        return f"{street.street_name}{number}號"
    return f"{number} {street.street_name}"


def _village_text(village: Optional[Village], language: Language) -> str:
    if village is None or not village.village_name:
        return ""
    number = _number_range(village.building_no_from, village.building_no_to)
    if not number:
        return village.village_name
    if language is Language.CHINESE:
        return f"{village.village_name}{number}號"
    return f"{number} {village.village_name}"


def _block_text(block: Optional[Block], language: Language) -> str:
    if block is None or not (block.block_no or block.block_descriptor):
        return ""
    pieces = [block.block_descriptor, block.block_no] if block.descriptor_first else [block.block_no, block.block_descriptor]
    pieces = [piece for piece in pieces if piece]
    return ("" if language is Language.CHINESE else " ").join(pieces)


def _ogcio_components(record: OGCIORecord, language: Language) -> list[tuple[str, str]]:
    detail: PremisesDetail = record.chi if language is Language.CHINESE else record.eng
    parts = [
        ("region", detail.region),
        ("district", detail.district.dc_district if detail.district else ""),
        ("village", _village_text(detail.village, language)),
        ("street", _street_text(detail.street, language)),
        ("estate", detail.estate.estate_name if detail.estate else ""),
        ("block", _block_text(detail.block, language)),
        ("building", detail.building_name),
    ]
    if language is Language.ENGLISH:
        parts.reverse()
    return [(label, value) for label, value in parts if value]
