import pytest

from tileprobe.schemas.user import UserConfig
from tileprobe.schemas.cli import CLIConfig
from tileprobe.schemas.param import ParamConfig
from tileprobe.schemas.resolve import resolve_config

pytestmark = pytest.mark.unit

URL = "https://t.test/{z}/{x}/{y}.pbf"


def test_cli_overrides_do_not_mutate_user():
    user = UserConfig.model_validate({"URL": URL, "ZOOM": 5})
    cli = CLIConfig.model_validate({"zoom": 9})

    internal = resolve_config(ParamConfig(), user, cli)

    assert internal.probe.zoom == 9
    assert user.zoom == 5


def test_user_values_survive_partial_cli():
    user = UserConfig(URL=URL, LON=2.35, LAT=48.85, ON_ERROR="skip_tile")
    cli = CLIConfig(offset=3)

    config = resolve_config(ParamConfig(), user, cli)

    assert config.probe.offset == 3
    assert config.probe.longitude == 2.35
    assert config.probe.latitude == 48.85
    assert config.scheduler.failure_policy == "skip_tile"


def test_cli_url_beats_user_url():
    user = UserConfig(URL="https://user.test/{z}/{x}/{y}")
    cli = CLIConfig(url="https://cli.test/{z}/{x}/{y}")

    config = resolve_config(ParamConfig(), user, cli)
    assert config.probe.url_template == "https://cli.test/{z}/{x}/{y}"


def test_cli_no_gzip_beats_user_gzip():
    user = UserConfig(URL=URL, GZIP=True)
    cli = CLIConfig(no_gzip=True)

    assert resolve_config(ParamConfig(), user, cli).probe.compression is False


def test_cli_precedence_no_user_config():
    config = resolve_config(ParamConfig(), None, CLIConfig(url=URL, max_concurrency=2))

    assert config.scheduler.max_concurrency == 2
    assert config.probe.zoom == 6
