"""Common pydantic base for the tileprobe config layers.

ParamConfig, UserConfig, CLIConfig and InternalConfig all derive from
``ProbeBaseModel``; UserConfig alone relaxes ``extra`` so that a user's
config module may carry unrelated names.
"""

from pydantic import BaseModel, ConfigDict


class ProbeBaseModel(BaseModel):
    """Strict base for tileprobe settings.

    A misspelt key such as ``{"probe": {"radius": 3}}`` is a
    ``ValidationError`` rather than a silently ignored setting, and
    mutating a resolved config is checked too, so
    ``config.output.format = "csv"`` fails the same way. Surrounding
    whitespace is stripped from strings (a pasted URL template or user
    agent) before any field validator sees the stored value.
    """

    model_config = ConfigDict(
        extra='forbid',
        validate_assignment=True,
        use_enum_values=True,     # FailurePolicy members stored as "fail_fast" / "skip_tile"
        str_strip_whitespace=True,
    )
