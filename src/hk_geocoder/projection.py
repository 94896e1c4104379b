"""Reprojection between the Hong Kong 1980 Grid and WGS84."""

from __future__ import annotations

from functools import lru_cache

from pyproj import Transformer

HK1980_GRID = "EPSG:2326"
WGS84 = "EPSG:4326"
COORDINATE_PRECISION = 4


@lru_cache(maxsize=None)
def _transformer(source_crs: str, target_crs: str) -> Transformer:
    return Transformer.from_crs(source_crs, target_crs, always_xy=True)


def transform(source_crs: str, target_crs: str, point: tuple[float, float]) -> tuple[float, float]:
    """Project *point* (x, y) from *source_crs* to *target_crs*; geographic CRSs use (lon, lat)."""
    x, y = _transformer(source_crs, target_crs).transform(point[0], point[1])
    return float(x), float(y)


def to_wgs84(easting: float, northing: float) -> tuple[float, float]:
    """
    Convert an HK1980 Grid position to (longitude, latitude).

    Both values are rounded to 4 decimal places (about 11 m), the precision
    the reconciliation threshold is tuned for.
    """
    lon, lat = transform(HK1980_GRID, WGS84, (easting, northing))
    return round(lon, COORDINATE_PRECISION), round(lat, COORDINATE_PRECISION)


def to_hk1980(longitude: float, latitude: float) -> tuple[float, float]:
    """Convert WGS84 (longitude, latitude) back to HK1980 Grid (easting, northing)."""
    return transform(WGS84, HK1980_GRID, (longitude, latitude))
