from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .exceptions import ConfigError

OGCIO_URL = "https://www.als.ogcio.gov.hk/lookup"
LAND_URL = "https://geodata.gov.hk/gs/api/v1.0.0/locationSearch"


class ProviderConfig(BaseModel):
    ogcio_url: str = OGCIO_URL
    land_url: str = LAND_URL
    record_count: int = 200
    timeout: float = 10.0

    @field_validator("record_count", "timeout")
    @classmethod
    def ensure_positive(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("must be positive")
        return value


class ReconcileConfig(BaseModel):
    # kilometres; 50 m against a haversine distance_to
    near_threshold: float = Field(default=0.05, gt=0)


class ScoringConfig(BaseModel):
    coverage_weight: float = 0.5
    similarity_weight: float = 0.3
    doorplate_weight: float = 0.2


class RuntimeConfig(BaseModel):
    concurrency_limit: int = Field(default=10, ge=1)
    log_level: str = "INFO"


class ResolverConfig(BaseModel):
    providers: ProviderConfig = Field(default_factory=ProviderConfig)
    reconcile: ReconcileConfig = Field(default_factory=ReconcileConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    runtime: RuntimeConfig = Field(default_factory=RuntimeConfig)


def load_config(path: str | Path) -> ResolverConfig:
    path = Path(path)
    if not path.is_file():
        raise ConfigError(str(path), "file not found")
    with open(path, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh) or {}
    if not isinstance(data, dict):
        raise ConfigError(str(path), "top level must be a mapping")
    try:
        return ResolverConfig(**data)
    except ValidationError as exc:
        raise ConfigError(str(path), str(exc)) from exc
