"""hk_geocoder — Resolve free-text Hong Kong addresses with OGCIO and Lands Department lookups."""

from hk_geocoder.address import Address, Language, Source
from hk_geocoder.config import ResolverConfig, load_config
from hk_geocoder.exceptions import ConfigError, HKGeocoderError, ProviderError
from hk_geocoder.resolver import AddressResolver, resolve, resolve_many

__all__ = [
    "Address",
    "AddressResolver",
    "ConfigError",
    "HKGeocoderError",
    "Language",
    "ProviderError",
    "ResolverConfig",
    "Source",
    "load_config",
    "resolve",
    "resolve_many",
]
