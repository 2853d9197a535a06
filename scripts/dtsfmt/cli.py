"""Command-line interface for the devicetree formatter."""

import argparse
import sys
from pathlib import Path
from typing import Any

from .config import RC_FILENAME, Config, discover_config, find_rc_file, load_config
from .emitter import EMIT_MODES, FormattedFile, create_emitter
from .errors import ConfigError, DtsfmtError
from .layouts import list_layouts
from .printer import format_source

SOURCE_SUFFIXES = (".dts", ".dtsi", ".overlay", ".keymap")


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="dtsfmt",
        description="Format devicetree sources and ZMK keymaps",
    )
    parser.add_argument(
        "paths",
        nargs="*",
        type=Path,
        metavar="PATH",
        help="Files or directories to format (default: read stdin, write stdout)",
    )
    parser.add_argument(
        "-c", "--check",
        action="store_true",
        help="Report files that are not formatted instead of writing them",
    )
    parser.add_argument(
        "--emit",
        choices=EMIT_MODES,
        default="files",
        help="Where to write formatted output (default: files)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help=f"Configuration file (default: nearest {RC_FILENAME})",
    )
    parser.add_argument(
        "--layout",
        help="Keyboard layout for keymap bindings (overrides the configuration)",
    )
    parser.add_argument(
        "--list-layouts",
        action="store_true",
        help="List available keyboard layouts and exit",
    )
    return parser


def collect_files(paths: list[Path]) -> list[Path]:
    """Expand directories into the devicetree files they contain."""
    files = []
    for path in paths:
        if path.is_dir():
            files.extend(
                sorted(p for p in path.rglob("*") if p.is_file() and p.suffix in SOURCE_SUFFIXES)
            )
        else:
            files.append(path)
    return files


def cli_overrides(args: argparse.Namespace) -> dict[str, Any]:
    """Configuration values given as command-line flags."""
    return {"layout": args.layout} if args.layout else {}


def resolve_configs(args: argparse.Namespace, files: list[Path]) -> dict[Path, Config]:
    """Load the configuration for every file before any of them is formatted.

    Files sharing an rc file share one Config.

    Raises:
        ConfigError: If any configuration is invalid
    """
    overrides = cli_overrides(args)
    if args.config is not None:
        config = load_config(args.config, overrides)
        return {path: config for path in files}

    loaded: dict[Path | None, Config] = {}
    configs = {}
    for path in files:
        rc_file = find_rc_file(path)
        if rc_file not in loaded:
            loaded[rc_file] = discover_config(path, overrides)
        configs[path] = loaded[rc_file]
    return configs


def cmd_list_layouts(args: argparse.Namespace) -> int:
    """Execute --list-layouts."""
    cwd = Path.cwd()
    config = resolve_configs(args, [cwd])[cwd]

    print("Available layouts:")
    for name in list_layouts(config.layouts):
        marker = " (active)" if name == config.layout else ""
        print(f"  - {name}{marker}")
    return 0


def cmd_stdin(args: argparse.Namespace) -> int:
    """Format stdin to stdout, or check it."""
    cwd = Path.cwd()
    config = resolve_configs(args, [cwd])[cwd]
    source = sys.stdin.read()

    try:
        formatted = format_source(source, config)
    except DtsfmtError as e:
        print(f"Error: <stdin>: {e}", file=sys.stderr)
        return 1

    emitter = create_emitter("stdout", check=args.check)
    unformatted = emitter.emit(FormattedFile(None, source, formatted))
    return 1 if unformatted else 0


def cmd_format(args: argparse.Namespace) -> int:
    """Format every file named on the command line."""
    files = collect_files(args.paths)
    configs = resolve_configs(args, files)
    emitter = create_emitter(args.emit, check=args.check)

    failed = False
    for path in files:
        try:
            source = path.read_text()
            formatted = format_source(source, configs[path])
            failed |= emitter.emit(FormattedFile(path, source, formatted))
        except (OSError, DtsfmtError) as e:
            print(f"Error: {path}: {e}", file=sys.stderr)
            failed = True

    return 1 if failed else 0


def run(argv: list[str] | None = None) -> int:
    """Parse arguments and run the matching command; returns the exit code."""
    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        if args.list_layouts:
            return cmd_list_layouts(args)
        if not args.paths:
            return cmd_stdin(args)
        return cmd_format(args)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def main() -> None:
    """Main CLI entry point."""
    sys.exit(run())


if __name__ == "__main__":
    main()
