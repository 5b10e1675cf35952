"""ParamConfig: Expert defaults for the tileprobe pipeline.

This module defines the complete default configuration. ALL pipeline
parameters must have defaults here. No runtime code should define fallback
values - this is the single source of truth for defaults.

Runtime code NEVER reads from ParamConfig directly - it only receives InternalConfig.
"""

from typing import Literal, Optional
from pydantic import Field, field_validator
from tileprobe.schemas.base import ProbeBaseModel


# =============================================================================
# Nested Configuration Models
# =============================================================================

class ProbeConfig(ProbeBaseModel):
    """What to probe: tile service template and the grid around a point."""
    url_template: Optional[str] = None
    longitude: float = Field(120.0, ge=-180.0, le=180.0, description="Longitude in degrees")
    latitude: float = Field(31.0, ge=-90.0, le=90.0, description="Latitude in degrees")
    zoom: int = Field(6, ge=0, description="Base zoom level")
    offset: int = Field(2, ge=0, description="Zoom offset added to the base zoom")
    compression: bool = Field(True, description="Send 'Accept-Encoding: gzip'")

    @field_validator("longitude", "latitude", mode="before")
    @classmethod
    def coerce_degrees_to_float(cls, v):
        """Allow int or float for coordinates."""
        return float(v)


class HttpConfig(ProbeBaseModel):
    """HTTP client settings shared by all fetches."""
    timeout_sec: float = Field(30.0, gt=0, description="Connect/read timeout per request")
    user_agent: str = "tileprobe/0.1.0"


class SchedulerConfig(ProbeBaseModel):
    """Fan-out settings."""
    max_concurrency: Optional[int] = Field(
        None, ge=1, description="Cap on in-flight fetches (None = one per tile)"
    )
    failure_policy: Literal["fail_fast", "skip_tile"] = "fail_fast"


class OutputConfig(ProbeBaseModel):
    """Report output configuration."""
    format: Literal["table", "json"] = "table"


class LoggingConfig(ProbeBaseModel):
    """Logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"


# =============================================================================
# Main ParamConfig
# =============================================================================

class ParamConfig(ProbeBaseModel):
    """Complete expert configuration with all defaults.

    Usage
    -----
    This config is NOT used directly by runtime code. It serves as the
    base layer in config resolution:

        internal_cfg = resolve_config(param_cfg, user_cfg, cli_cfg)

    Runtime code only sees InternalConfig.
    """

    probe: ProbeConfig = Field(default_factory=ProbeConfig)
    http: HttpConfig = Field(default_factory=HttpConfig)
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
