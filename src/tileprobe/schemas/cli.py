"""CLIConfig: Command-line operational overrides.

Mirrors the flags of the ``tileprobe`` command: URL template, center point,
zoom, offset, compression toggle and a few operational knobs.

This schema handles command-line arguments parsed by argparse.
"""

from typing import Literal, Optional
from pydantic import model_validator
from tileprobe.schemas.base import ProbeBaseModel


class CLIConfig(ProbeBaseModel):
    """Command-line configuration overrides.

    Highest priority in config resolution.

    Notes
    -----
    ``no_gzip`` is the negative flag of the command line; it is turned into
    ``probe.compression = False`` here so runtime code only ever sees the
    positive toggle.

    Usage
    -----
        cli_cfg = CLIConfig(
            url="https://tiles.example.com/{z}/{x}/{y}.pbf",
            lon=139.76,
            lat=35.68,
            no_gzip=True,
        )

        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    url: Optional[str] = None
    lon: Optional[float] = None
    lat: Optional[float] = None
    zoom: Optional[int] = None
    offset: Optional[int] = None
    no_gzip: Optional[bool] = None
    max_concurrency: Optional[int] = None
    timeout: Optional[float] = None
    on_error: Optional[Literal["fail_fast", "skip_tile"]] = None
    output_format: Optional[Literal["table", "json"]] = None
    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = None

    @model_validator(mode="after")
    def reject_negative_zoom(self):
        """Zoom and offset are non-negative integers."""
        for name in ("zoom", "offset"):
            value = getattr(self, name)
            if value is not None and value < 0:
                raise ValueError(f"{name} must be >= 0, got {value}")
        return self

    def to_internal_overrides(self) -> dict:
        """Convert CLI config to internal config structure.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        probe = {}
        if self.url is not None:
            probe["url_template"] = self.url
        if self.lon is not None:
            probe["longitude"] = self.lon
        if self.lat is not None:
            probe["latitude"] = self.lat
        if self.zoom is not None:
            probe["zoom"] = self.zoom
        if self.offset is not None:
            probe["offset"] = self.offset
        if self.no_gzip:
            probe["compression"] = False
        if probe:
            overrides["probe"] = probe

        if self.timeout is not None:
            overrides["http"] = {"timeout_sec": self.timeout}

        scheduler = {}
        if self.max_concurrency is not None:
            scheduler["max_concurrency"] = self.max_concurrency
        if self.on_error is not None:
            scheduler["failure_policy"] = self.on_error
        if scheduler:
            overrides["scheduler"] = scheduler

        if self.output_format is not None:
            overrides["output"] = {"format": self.output_format}

        if self.log_level is not None:
            overrides["logging"] = {"level": self.log_level}

        return overrides
