from __future__ import annotations

from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter, field_validator, model_validator


class _Schema(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True, coerce_numbers_to_str=True)

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


class Street(_Schema):
    street_name: str = Field(default="", alias="StreetName")
    building_no_from: str = Field(default="", alias="BuildingNoFrom")
    building_no_to: str = Field(default="", alias="BuildingNoTo")
    location_name: str = Field(default="", alias="LocationName")


class District(_Schema):
    dc_district: str = Field(default="", alias="DcDistrict")


class Estate(_Schema):
    estate_name: str = Field(default="", alias="EstateName")


class Block(_Schema):
    block_descriptor: str = Field(default="", alias="BlockDescriptor")
    block_no: str = Field(default="", alias="BlockNo")
    descriptor_first: bool = Field(default=False, alias="BlockDescriptorPrecedenceIndicator")

    @field_validator("descriptor_first", mode="before")
    @classmethod
    def parse_indicator(cls, value: Any) -> bool:
        if isinstance(value, str):
            return value.strip().upper() == "Y"
        return bool(value)


class Village(_Schema):
    village_name: str = Field(default="", alias="VillageName")
    building_no_from: str = Field(default="", alias="BuildingNoFrom")
    building_no_to: str = Field(default="", alias="BuildingNoTo")


class PremisesDetail(_Schema):
    """One language half (English or Chinese) of an OGCIO premises address."""

    building_name: str = Field(default="", alias="BuildingName")
    street: Optional[Street] = Field(default=None, validation_alias=AliasChoices("EngStreet", "ChiStreet", "street"))
    district: Optional[District] = Field(
        default=None, validation_alias=AliasChoices("EngDistrict", "ChiDistrict", "district")
    )
    estate: Optional[Estate] = Field(default=None, validation_alias=AliasChoices("EngEstate", "ChiEstate", "estate"))
    block: Optional[Block] = Field(default=None, validation_alias=AliasChoices("EngBlock", "ChiBlock", "block"))
    village: Optional[Village] = Field(
        default=None, validation_alias=AliasChoices("EngVillage", "ChiVillage", "village")
    )
    region: str = Field(default="", alias="Region")


class GeospatialInformation(_Schema):
    latitude: float = Field(alias="Latitude")
    longitude: float = Field(alias="Longitude")
    northing: Optional[float] = Field(default=None, alias="Northing")
    easting: Optional[float] = Field(default=None, alias="Easting")


class OGCIORecord(_Schema):
    """A single OGCIO suggestion, flattened out of its envelope."""

    eng: PremisesDetail = Field(default_factory=PremisesDetail, alias="EngPremisesAddress")
    chi: PremisesDetail = Field(default_factory=PremisesDetail, alias="ChiPremisesAddress")
    geo: GeospatialInformation = Field(alias="GeospatialInformation")
    geo_address: str = Field(default="", alias="GeoAddress")
    score: float = Field(default=0.0, alias="Score")

    @model_validator(mode="before")
    @classmethod
    def flatten_envelope(cls, data: Any) -> Any:
        if not isinstance(data, dict) or "Address" not in data:
            return data
        premises = (data.get("Address") or {}).get("PremisesAddress")
        if not isinstance(premises, dict):
            raise ValueError("SuggestedAddress entry has no PremisesAddress")
        flat = dict(premises)
        validation = data.get("ValidationInformation") or {}
        if "Score" in validation:
            flat["Score"] = validation["Score"]
        return flat

    @field_validator("geo", mode="before")
    @classmethod
    def first_geospatial(cls, value: Any) -> Any:
        # OGCIO returns a list when a premises spans several points
        if isinstance(value, list):
            if not value:
                raise ValueError("GeospatialInformation is empty")
            return value[0]
        return value


class OGCIOResponse(_Schema):
    suggested: list[OGCIORecord] = Field(default_factory=list, alias="SuggestedAddress")


class LandRecord(_Schema):
    address_zh: str = Field(default="", alias="addressZH")
    name_zh: str = Field(default="", alias="nameZH")
    address_en: str = Field(default="", alias="addressEN")
    name_en: str = Field(default="", alias="nameEN")
    x: float
    y: float


LAND_RESPONSE = TypeAdapter(list[LandRecord])


def parse_ogcio_response(payload: Any) -> list[OGCIORecord]:
    """Validate a decoded OGCIO body; raises pydantic.ValidationError."""
    return OGCIOResponse.model_validate(payload).suggested


def parse_land_response(payload: Any) -> list[LandRecord]:
    """Validate a decoded Lands Department body; raises pydantic.ValidationError."""
    return LAND_RESPONSE.validate_python(payload)
