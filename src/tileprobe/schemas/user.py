"""UserConfig: Forgiving, minimal user-facing configuration.

This schema accepts user inputs in a variety of formats, with aliases
for common naming patterns (e.g., URL → url_template, LON → longitude).

UserConfig is intentionally minimal - users only specify what they want
to override from the expert defaults.
"""

from typing import Literal, Optional
from pydantic import Field, field_validator
from tileprobe.schemas.base import ProbeBaseModel


class UserHttpConfig(ProbeBaseModel):
    """User-facing HTTP config."""
    timeout_sec: Optional[float] = None
    user_agent: Optional[str] = None


class UserSchedulerConfig(ProbeBaseModel):
    """User-facing scheduler config."""
    max_concurrency: Optional[int] = None
    failure_policy: Optional[Literal["fail_fast", "skip_tile"]] = None

    @field_validator("failure_policy", mode="before")
    @classmethod
    def normalize_policy(cls, v):
        """Accept 'FAIL-FAST', 'skip-tile' and friends."""
        if isinstance(v, str):
            return v.lower().strip().replace("-", "_")
        return v


class UserConfig(ProbeBaseModel):
    """User-facing configuration schema.

    Usage
    -----
        user_cfg = UserConfig(
            URL="https://tiles.example.com/{z}/{x}/{y}.pbf",
            LON=139.76,
            LAT=35.68,
            ZOOM=10,
        )

        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    # Probe settings (flat aliases)
    url_template: Optional[str] = Field(None, alias="URL")
    longitude: Optional[float] = Field(None, alias="LON")
    latitude: Optional[float] = Field(None, alias="LAT")
    zoom: Optional[int] = Field(None, alias="ZOOM")
    offset: Optional[int] = Field(None, alias="OFFSET")
    compression: Optional[bool] = Field(None, alias="GZIP")

    # Operational settings (flat aliases)
    max_concurrency: Optional[int] = Field(None, alias="MAX_CONCURRENCY")
    failure_policy: Optional[str] = Field(None, alias="ON_ERROR")
    timeout_sec: Optional[float] = Field(None, alias="TIMEOUT_SEC")
    output_format: Optional[Literal["table", "json"]] = Field(None, alias="FORMAT")
    log_level: Optional[str] = Field(None, alias="LOG_LEVEL")

    # Nested overrides (advanced users)
    http: Optional[UserHttpConfig] = None
    scheduler: Optional[UserSchedulerConfig] = None

    model_config = ProbeBaseModel.model_config.copy()
    # Allow forgiving input dictionaries (ignore unknown legacy keys)
    model_config.update({"populate_by_name": True, "extra": "ignore"})

    @field_validator("longitude", "latitude", mode="before")
    @classmethod
    def coerce_numeric_fields(cls, v):
        """Accept int or float for coordinates."""
        if v is not None:
            return float(v)
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        if isinstance(v, str):
            return v.upper().strip()
        return v

    def to_internal_overrides(self) -> dict:
        """Convert flat UserConfig to nested InternalConfig structure.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        probe = {}
        for name in ("url_template", "longitude", "latitude", "zoom", "offset", "compression"):
            value = getattr(self, name)
            if value is not None:
                probe[name] = value
        if probe:
            overrides["probe"] = probe

        # HTTP section
        http = {}
        if self.timeout_sec is not None:
            http["timeout_sec"] = self.timeout_sec
        if self.http is not None:
            http.update(self.http.model_dump(exclude_none=True))
        if http:
            overrides["http"] = http

        # Scheduler section
        scheduler = {}
        if self.max_concurrency is not None:
            scheduler["max_concurrency"] = self.max_concurrency
        if self.failure_policy is not None:
            scheduler["failure_policy"] = self.failure_policy.lower().replace("-", "_")
        if self.scheduler is not None:
            scheduler.update(self.scheduler.model_dump(exclude_none=True))
        if scheduler:
            overrides["scheduler"] = scheduler

        if self.output_format is not None:
            overrides["output"] = {"format": self.output_format}

        if self.log_level is not None:
            overrides["logging"] = {"level": self.log_level}

        return overrides
