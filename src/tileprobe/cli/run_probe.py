"""Command-line entry point of the tile probe.

Argument parsing lives in ``build_parser``; ``run_probe`` does the actual
work so it can be called from scripts and tests without going through
``sys.argv``.
"""

import sys
import json
import logging
import argparse
import importlib.util
from pathlib import Path
from typing import Optional, Dict, Any

from pydantic import ValidationError

from tileprobe.pipeline.orchestrator import ProbeOrchestrator
from tileprobe.reporting import render_json, render_table
from tileprobe.schemas import resolve_config, ParamConfig, UserConfig, CLIConfig
from tileprobe.tiles.errors import FetchError


logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FETCH_FAILED = 1
EXIT_BAD_CONFIG = 2


def load_user_config_dict(config_path: str) -> dict:
    """Load user config dict from Python file.

    Returns the raw dict before Pydantic validation.

    Parameters
    ----------
    config_path : str
        Path to user config Python file containing CONFIG dict.

    Returns
    -------
    dict
        Raw user configuration dictionary.

    Raises
    ------
    FileNotFoundError
        If config file does not exist.
    ValueError
        If no CONFIG dict found in file.
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")

    spec = importlib.util.spec_from_file_location("config_module", path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    for name in dir(module):
        if name.startswith('CONFIG'):
            obj = getattr(module, name)
            if isinstance(obj, dict):
                return obj

    raise ValueError(f"No CONFIG dict found in {path}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tileprobe",
        description="Probe a vector tile service and report tile size and feature statistics",
    )
    parser.add_argument("--url", help="Tile URL template containing {z}, {x} and {y}")
    parser.add_argument("--lon", type=float, help="Center longitude (default 120.0)")
    parser.add_argument("--lat", type=float, help="Center latitude (default 31.0)")
    parser.add_argument("--zoom", type=int, help="Base zoom level (default 6)")
    parser.add_argument("--offset", type=int, help="Zoom offset below the base tile (default 2)")
    parser.add_argument("--no-gzip", action="store_true", help="Do not request gzip compression")
    parser.add_argument("--max-concurrency", type=int, help="Cap on concurrent fetches")
    parser.add_argument("--timeout", type=float, help="Per-request timeout in seconds")
    parser.add_argument("--on-error", choices=["fail_fast", "skip_tile"],
                        help="Failure policy (default fail_fast)")
    parser.add_argument("--format", dest="output_format", choices=["table", "json"],
                        help="Report format (default table)")
    parser.add_argument("--config", help="Python file exposing a CONFIG dict")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def run_probe(
    cli_args: Optional[Dict[str, Any]] = None,
    user_config_path: Optional[str] = None,
    verbose: bool = False,
    session=None,
) -> str:
    """Resolve configuration, run the probe and return the rendered report.

    Parameters
    ----------
    cli_args : dict, optional
        CLI overrides, keys as in ``CLIConfig``. None values are ignored.
    user_config_path : str, optional
        Python file with a CONFIG dict.
    verbose : bool, optional
        Force DEBUG logging and log the resolved configuration.
    session : requests.Session, optional
        HTTP session to use instead of a fresh one.

    Raises
    ------
    FileNotFoundError, ValueError, ValidationError
        Configuration could not be loaded or is invalid.
    FetchError
        A tile fetch failed and the failure policy is ``fail_fast``.

    Examples
    --------
    ::

        report = run_probe({"url": "https://t.example.com/{z}/{x}/{y}.pbf", "zoom": 10})
        print(report)
    """
    param_cfg = ParamConfig()

    user_cfg = None
    if user_config_path:
        user_cfg = UserConfig.model_validate(load_user_config_dict(user_config_path))

    cli_args = dict(cli_args or {})
    if verbose:
        cli_args["log_level"] = "DEBUG"
    cli_dict = {k: v for k, v in cli_args.items() if v is not None}
    cli_cfg = CLIConfig.model_validate(cli_dict) if cli_dict else CLIConfig()

    # Param < User < CLI
    config = resolve_config(param_cfg, user_cfg, cli_cfg)

    orchestrator = ProbeOrchestrator(config, session=session)
    if verbose:
        logger.debug("Resolved configuration:\n%s", json.dumps(config.model_dump(), indent=2))

    summary = orchestrator.run()

    if config.output.format == "json":
        return render_json(summary)
    return render_table(summary)


def main(argv=None) -> int:
    """Console script entry point; returns the process exit status."""
    args = build_parser().parse_args(argv)

    cli_args = {
        "url": args.url,
        "lon": args.lon,
        "lat": args.lat,
        "zoom": args.zoom,
        "offset": args.offset,
        "no_gzip": True if args.no_gzip else None,
        "max_concurrency": args.max_concurrency,
        "timeout": args.timeout,
        "on_error": args.on_error,
        "output_format": args.output_format,
    }

    try:
        report = run_probe(cli_args, user_config_path=args.config, verbose=args.verbose)
    except (ValidationError, ValueError, FileNotFoundError) as e:
        print(f"tileprobe: invalid configuration: {e}", file=sys.stderr)
        return EXIT_BAD_CONFIG
    except FetchError as e:
        print(f"tileprobe: {e}", file=sys.stderr)
        return EXIT_FETCH_FAILED

    print(report)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
