"""Pydantic configuration schemas for tileprobe.

Exports
-------
resolve_config : function
    Single entrypoint for configuration resolution
InternalConfig : class
    Fully validated, authoritative runtime configuration
ParamConfig : class
    Expert defaults (complete)
UserConfig : class
    User-facing configuration (forgiving, minimal)
CLIConfig : class
    Command-line operational overrides
"""

from tileprobe.schemas.resolve import resolve_config
from tileprobe.schemas.internal import InternalConfig
from tileprobe.schemas.param import ParamConfig
from tileprobe.schemas.user import UserConfig
from tileprobe.schemas.cli import CLIConfig

__all__ = [
    'resolve_config',
    'InternalConfig',
    'ParamConfig',
    'UserConfig',
    'CLIConfig',
]
