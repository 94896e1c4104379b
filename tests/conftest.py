"""Shared fixtures: realistic provider payloads and in-memory providers."""

import asyncio
from typing import Callable, Optional

import pytest

from hk_geocoder.address import Address, Source
from hk_geocoder.exceptions import ProviderError
from hk_geocoder.models import GeospatialInformation, LandRecord, OGCIORecord, PremisesDetail
from hk_geocoder.providers import SpatialProvider, TextProvider

BASE_LAT = 22.2800
BASE_LON = 114.1600
# haversine km per degree of latitude with a 6371 km radius
KM_PER_DEGREE = 111.19492664455873


def north_of_base(km: float) -> float:
    """Latitude *km* kilometres north of BASE_LAT (same longitude)."""
    return BASE_LAT + km / KM_PER_DEGREE


@pytest.fixture()
def ogcio_entry() -> dict:
    """One SuggestedAddress entry as the OGCIO lookup returns it."""
    return {
        "Address": {
            "PremisesAddress": {
                "EngPremisesAddress": {
                    "BuildingName": "HSBC MAIN BUILDING",
                    "EngStreet": {"StreetName": "QUEEN'S ROAD CENTRAL", "BuildingNoFrom": "1"},
                    "EngDistrict": {"DcDistrict": "CENTRAL & WESTERN DISTRICT"},
                    "Region": "HK",
                },
                "ChiPremisesAddress": {
                    "BuildingName": "香港滙豐總行大廈",
                    "ChiStreet": {"StreetName": "皇后大道中", "BuildingNoFrom": "1"},
                    "ChiDistrict": {"DcDistrict": "中西區"},
                    "Region": "香港",
                },
                "GeospatialInformation": {
                    "Northing": "815900",
                    "Easting": "833900",
                    "Latitude": "22.2803",
                    "Longitude": "114.1593",
                },
                "GeoAddress": "3650710000T20050430",
            }
        },
        "ValidationInformation": {"Score": 78.5},
    }


@pytest.fixture()
def ogcio_payload(ogcio_entry: dict) -> dict:
    return {"RequestAddress": {"AddressLine": ["皇后大道中1號"]}, "SuggestedAddress": [ogcio_entry]}


@pytest.fixture()
def land_payload() -> list:
    """Lands Department locationSearch body, HK1980 Grid coordinates."""
    return [
        {
            "addressZH": "荃灣大河道72號",
            "nameZH": "荃灣大會堂",
            "x": 834300,
            "y": 825400,
            "nameEN": "Tsuen Wan Town Hall",
            "addressEN": "72 Tai Ho Road, Tsuen Wan",
        },
        {
            "addressZH": "沙田正街1號",
            "nameZH": "沙田大會堂",
            "x": 836200,
            "y": 826800,
            "nameEN": "Sha Tin Town Hall",
            "addressEN": "1 Yuen Wo Road, Sha Tin",
        },
    ]


@pytest.fixture()
def make_ogcio() -> Callable[..., Address]:
    def factory(name: str, latitude: float, longitude: float = BASE_LON, score: float = 50.0) -> Address:
        record = OGCIORecord(
            chi=PremisesDetail(building_name=name),
            eng=PremisesDetail(building_name=name.upper()),
            geo=GeospatialInformation(latitude=latitude, longitude=longitude),
            score=score,
        )
        return Address.from_ogcio(record)

    return factory


@pytest.fixture()
def make_land() -> Callable[..., Address]:
    def factory(
        name_zh: str, latitude: float, longitude: float = BASE_LON, address_zh: str = ""
    ) -> Address:
        record = LandRecord(name_zh=name_zh, address_zh=address_zh, x=0, y=0)
        return Address(source=Source.LAND, record=record, latitude=latitude, longitude=longitude)

    return factory


class FakeTextProvider(TextProvider):
    """Answers from a query -> results table and records every query."""

    def __init__(self, responses: dict, delays: Optional[dict] = None, fail_on: Optional[set] = None):
        self.responses = responses
        self.delays = delays or {}
        self.fail_on = fail_on or set()
        self.calls: list = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.cancelled: list = []

    async def search(self, address, limit=None):
        self.calls.append(address)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(address, 0))
            if address in self.fail_on:
                raise ProviderError("ogcio", "HTTP 503")
            return list(self.responses.get(address, []))
        except asyncio.CancelledError:
            self.cancelled.append(address)
            raise
        finally:
            self.in_flight -= 1


class FakeSpatialProvider(SpatialProvider):
    def __init__(self, responses: dict, delays: Optional[dict] = None, fail_on: Optional[set] = None):
        self.responses = responses
        self.delays = delays or {}
        self.fail_on = fail_on or set()
        self.calls: list = []
        self.cancelled: list = []

    async def search(self, address):
        self.calls.append(address)
        try:
            await asyncio.sleep(self.delays.get(address, 0))
            if address in self.fail_on:
                raise ProviderError("land", "request error: ConnectError()")
            return list(self.responses.get(address, []))
        except asyncio.CancelledError:
            self.cancelled.append(address)
            raise
