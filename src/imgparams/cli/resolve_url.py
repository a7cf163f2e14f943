"""Core URL resolution CLI logic.

This module contains the actual resolver runner, separated from argument
parsing in scripts/. Scripts are thin wrappers; this is the real
implementation.
"""

import argparse
import importlib.util
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from imgparams.pipeline import ParameterHandler, to_query_string
from imgparams.schemas import (
    CLIConfig,
    ParamConfig,
    ProcessingContext,
    ResolutionResult,
    UserConfig,
    resolve_config,
)

__all__ = ['load_user_config_dict', 'setup_logging', 'resolve_url', 'main']

logger = logging.getLogger(__name__)


def load_user_config_dict(config_path: str) -> dict:
    """Load user config dict from a Python file.

    Returns the raw dict before Pydantic validation.

    Parameters
    ----------
    config_path : str
        Path to user config Python file containing a CONFIG dict.

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


def setup_logging(level: str = "INFO") -> None:
    """Configure the root logger with a single console handler."""
    formatter = logging.Formatter(
        fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(formatter)
    root.addHandler(console)


def resolve_url(
    url: str,
    user_config_path: Optional[str] = None,
    cli_args: Optional[Dict[str, Any]] = None,
    dimensions: Optional[tuple[float, float]] = None,
) -> ResolutionResult:
    """Resolve one URL with configuration resolved Param < User < CLI.

    Parameters
    ----------
    url : str
        Request URL, absolute or ``path?query``.
    user_config_path : str, optional
        Python file with a CONFIG dict of user overrides.
    cli_args : dict, optional
        CLI overrides. Keys: advanced_features, log_level. All optional.
    dimensions : tuple, optional
        Source image ``(width, height)`` for condition directives.

    Returns
    -------
    ResolutionResult
        Canonical options and diagnostics.
    """
    user_cfg = None
    if user_config_path is not None:
        user_cfg = UserConfig.model_validate(load_user_config_dict(user_config_path))

    cli_dict = {k: v for k, v in (cli_args or {}).items() if v is not None}
    cli_cfg = CLIConfig.model_validate(cli_dict) if cli_dict else CLIConfig()

    config = resolve_config(ParamConfig(), user_cfg, cli_cfg)
    setup_logging(config.logging.level)

    handler = ParameterHandler(config)
    context = ProcessingContext(
        advanced_features=config.features.advanced,
        dimensions=dimensions,
    )
    return handler.resolve(url, context)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Resolve an image transformation URL into canonical options"
    )
    parser.add_argument("url", help="Request URL or path?query")
    parser.add_argument("--config", help="Path to user config file")
    parser.add_argument("--advanced", action="store_true", default=None,
                        help="Enable blur, mirror, composite and condition directives")
    parser.add_argument("--width", type=float, help="Source image width for conditions")
    parser.add_argument("--height", type=float, help="Source image height for conditions")
    parser.add_argument("--query-string", action="store_true",
                        help="Print options as a standard query string instead of JSON")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Debug logging and diagnostics output")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    dimensions = None
    if args.width is not None and args.height is not None:
        dimensions = (args.width, args.height)

    result = resolve_url(
        args.url,
        user_config_path=args.config,
        cli_args={
            "advanced_features": args.advanced,
            "log_level": "DEBUG" if args.verbose else None,
        },
        dimensions=dimensions,
    )

    if args.query_string:
        print(to_query_string(result.options))
    else:
        print(json.dumps(result.options, indent=2))

    if args.verbose:
        print("\nDiagnostics:")
        print(json.dumps(result.diagnostics, indent=2, default=str))
    return 0
