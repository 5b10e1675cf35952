"""InternalConfig: Authoritative runtime configuration.

This is the ONLY config schema that runtime code sees. It is fully validated,
normalized, and contains NO optional fields that processing code depends on.

All .get() calls, fallback defaults, and validation logic are FORBIDDEN in
runtime code - everything is explicit here.
"""

from typing import Literal, Optional
from pydantic import Field, field_validator
from tileprobe.schemas.base import ProbeBaseModel


TEMPLATE_PLACEHOLDERS = ("{z}", "{x}", "{y}")


# =============================================================================
# Nested Configuration Models (Runtime)
# =============================================================================

class InternalProbeConfig(ProbeBaseModel):
    """Runtime probe configuration."""
    url_template: str
    longitude: float = Field(ge=-180.0, le=180.0)
    latitude: float = Field(ge=-90.0, le=90.0)
    zoom: int = Field(ge=0)
    offset: int = Field(ge=0)
    compression: bool

    @field_validator("url_template", mode="before")
    @classmethod
    def require_template(cls, v):
        """A template must be given and carry every placeholder."""
        if v is None or not str(v).strip():
            raise ValueError("url_template is required (e.g. https://host/{z}/{x}/{y}.pbf)")
        missing = [p for p in TEMPLATE_PLACEHOLDERS if p not in v]
        if missing:
            raise ValueError(f"url_template is missing placeholder(s): {', '.join(missing)}")
        return v

    @property
    def target_zoom(self) -> int:
        return self.zoom + self.offset


class InternalHttpConfig(ProbeBaseModel):
    """Runtime HTTP settings."""
    timeout_sec: float = Field(gt=0)
    user_agent: str


class InternalSchedulerConfig(ProbeBaseModel):
    """Runtime fan-out settings."""
    max_concurrency: Optional[int] = Field(ge=1)
    failure_policy: Literal["fail_fast", "skip_tile"]


class InternalOutputConfig(ProbeBaseModel):
    """Runtime output configuration."""
    format: Literal["table", "json"]


class InternalLoggingConfig(ProbeBaseModel):
    """Runtime logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


# =============================================================================
# Main InternalConfig
# =============================================================================

class InternalConfig(ProbeBaseModel):
    """Authoritative runtime configuration.

    This is the explicit configuration structure handed to the pipeline
    entry point (``ProbeOrchestrator``). It replaces any process-wide state:
    URL template, center point, base zoom, zoom offset and compression
    toggle all travel here, together with the HTTP, fan-out, output and
    logging settings.

    Usage
    -----
    Runtime modules receive InternalConfig and access fields directly:

        def __init__(self, config: InternalConfig):
            self.timeout = config.http.timeout_sec  # NOT .get()
            self.zoom = config.probe.target_zoom

    Rules
    -----
    - NO .get() calls
    - NO fallback defaults
    - NO validation

    All of that happens during config resolution, not in runtime code.
    """

    probe: InternalProbeConfig
    http: InternalHttpConfig
    scheduler: InternalSchedulerConfig
    output: InternalOutputConfig
    logging: InternalLoggingConfig
