"""Exception hierarchy for hk_geocoder."""

from __future__ import annotations


class HKGeocoderError(Exception):
    """Base exception for all hk_geocoder errors."""


class ProviderError(HKGeocoderError):
    """A provider call failed or returned a body that could not be parsed."""

    def __init__(self, provider: str, detail: str):
        self.provider = provider
        self.detail = detail
        super().__init__(f"{provider} lookup failed: {detail}")


class ConfigError(HKGeocoderError):
    """The configuration file is missing or invalid."""

    def __init__(self, path: str, detail: str):
        self.path = path
        super().__init__(f"Invalid configuration at {path}: {detail}")
