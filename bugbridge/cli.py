"""Command-line helper validating a routing file before deployment."""

from __future__ import annotations

import argparse
from pathlib import Path

import msgspec

from .config import ConfigError, describe_target, load_bridge_config


def main(argv: list[str] | None = None) -> int:
    """Validate a routing file and optionally export it as JSON.

    Parameters
    ----------
    argv : list[str] | None, optional
        Command-line arguments. ``None`` defaults to ``sys.argv``.

    Returns
    -------
    int
        Exit code: 0 on success, 1 when validation fails.

    """
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("config", type=Path, help="YAML routing file to validate")
    parser.add_argument(
        "--json-out",
        type=Path,
        default=None,
        help="Optional path to write the validated routing file as JSON",
    )
    args = parser.parse_args(argv)

    config_path: Path = args.config
    try:
        config = load_bridge_config(config_path)
    except ConfigError as exc:
        print(f"Routing file validation failed for {config_path}:")
        for issue in exc.issues:
            print(f"  - {issue}")
        return 1

    if args.json_out:
        args.json_out.write_bytes(msgspec.json.encode(config))

    count = len(config.repositories)
    print(f"routing file {config_path} is valid ({count} repositories)")
    for slug, route in config.repositories.items():
        print(f"  {slug}: {describe_target(route.target)}, {len(route.roles)} role(s)")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
