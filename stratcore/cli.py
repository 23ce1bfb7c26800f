"""Command line entry point: list presets and validate resolved configs."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Optional, Sequence

from stratcore.core.errors import StrategyCoreError
from stratcore.settings import configure_logging
from stratcore.strategy.presets import PRESETS, build_config


def list_presets() -> int:
    for name in sorted(PRESETS):
        print(f"{name}\t{PRESETS[name]['variant']}")
    return 0


def validate(preset: Optional[str], config_path: Optional[str]) -> int:
    """Resolve preset plus JSON overrides and print the result. Returns process exit code."""
    overrides = None
    try:
        if config_path:
            overrides = json.loads(Path(config_path).read_text(encoding="utf-8"))
            if not isinstance(overrides, dict):
                raise ValueError("config file must hold a JSON object")
        config = build_config(preset, overrides)
    except (OSError, ValueError, StrategyCoreError) as exc:
        print(f"[FAIL] {exc}", file=sys.stderr)
        return 1
    print(config.model_dump_json(indent=2))
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="stratcore", description="Strategy core configuration tools")
    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("presets", help="List named presets")
    validate_parser = subparsers.add_parser("validate", help="Validate a preset and overrides")
    validate_parser.add_argument("--preset")
    validate_parser.add_argument("--config", help="JSON file of overrides")
    args = parser.parse_args(argv)

    configure_logging()
    if args.command == "presets":
        return list_presets()
    if args.command == "validate":
        return validate(args.preset, args.config)
    parser.error("Pass a command: presets or validate")
    return 2


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
