"""Command-line interface for hwmonitor."""

from __future__ import annotations

import argparse
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

from hwmonitor.cli.commands import (
    Command,
    OnceCommand,
    ProvisionCommand,
    StatusCommand,
    WatchCommand,
)
from hwmonitor.cli.exit_codes import EXIT_INVALID_USAGE, EXIT_SUCCESS
from hwmonitor.config import load_config
from hwmonitor.config.loader import ConfigError
from hwmonitor.config.models import MonitorConfig
from hwmonitor.core.logging import configure_logging, get_logger

LOGGER = get_logger(__name__)


def _get_version() -> str:
    try:
        return version("hwmonitor")
    except PackageNotFoundError:
        # Fallback for editable installs that have not yet built metadata.
        from hwmonitor import __version__

        return __version__


def _add_executable_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--executable",
        metavar="PATH",
        help="Use this tool executable instead of provisioning one.",
    )


def _add_components_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--components",
        metavar="LIST",
        help=(
            "Comma-separated categories (cpu,gpu,memory,motherboard,storage,network,uptime). "
            "Default: all categories plus uptime."
        ),
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hwmonitor",
        description="hwmonitor - Provision and read the LynxHardwareCLI hardware monitor.",
    )

    # Global options
    parser.add_argument(
        "--version",
        action="store_true",
        help="Show hwmonitor version and exit.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose (info-level) logging.",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Reduce logging output to errors only.",
    )
    parser.add_argument(
        "--config",
        metavar="PATH",
        type=Path,
        help="Path to config file (default: .hwmonitor.yml in the current directory).",
    )
    parser.add_argument(
        "--no-runtime-check",
        action="store_true",
        help="Skip the .NET runtime prerequisite check.",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    provision = subparsers.add_parser(
        "provision",
        help="Download (or reuse) the monitor tool and print its path.",
    )
    provision.add_argument(
        "--dir",
        metavar="DIR",
        help="Install root; versions are cached under <dir>/<tool> (default: ~/.hwmonitor/bin).",
    )

    once = subparsers.add_parser("once", help="Print one hardware report as JSON.")
    _add_components_option(once)
    once.add_argument(
        "--timeout-ms",
        type=int,
        metavar="N",
        help="Milliseconds to wait for the tool (default: 10000).",
    )
    _add_executable_option(once)

    watch = subparsers.add_parser("watch", help="Stream hardware reports as JSON lines.")
    watch.add_argument(
        "--interval-ms",
        type=int,
        metavar="N",
        help="Update interval in milliseconds (default: 2000).",
    )
    _add_components_option(watch)
    watch.add_argument(
        "--duration",
        type=float,
        metavar="SECONDS",
        help="Stop after this many seconds (default: run until interrupted).",
    )
    _add_executable_option(watch)

    subparsers.add_parser("status", help="Show platform, cache and runtime status.")

    return parser


def cli_args_to_config_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Convert CLI arguments to config override dict.

    Only options given explicitly on the command line are included.
    """
    overrides: Dict[str, Any] = {}
    monitoring: Dict[str, Any] = {}

    components = getattr(args, "components", None)
    if components is not None:
        monitoring["components"] = components
    timeout_ms = getattr(args, "timeout_ms", None)
    if timeout_ms is not None:
        monitoring["timeout_ms"] = timeout_ms
    interval_ms = getattr(args, "interval_ms", None)
    if interval_ms is not None:
        monitoring["interval_ms"] = interval_ms

    if monitoring:
        overrides["monitoring"] = monitoring
    if args.no_runtime_check:
        overrides["require_runtime"] = False

    return overrides


def _effective_log_level(args: argparse.Namespace, config: MonitorConfig) -> str:
    if args.debug:
        return "debug"
    if args.quiet:
        return "error"
    if args.verbose:
        return "info"
    return config.log_level


def _get_command(name: str) -> Command:
    commands: Dict[str, Command] = {
        "provision": ProvisionCommand(),
        "once": OnceCommand(),
        "watch": WatchCommand(),
        "status": StatusCommand(version=_get_version()),
    }
    return commands[name]


def main(argv: Optional[Iterable[str]] = None) -> int:
    """CLI entrypoint.

    Returns an exit code suitable for use as a console script.
    """
    parser = build_parser()
    try:
        args = parser.parse_args(list(argv) if argv is not None else None)
    except SystemExit as e:
        # argparse exits 0 for --help and 2 for usage errors
        return EXIT_SUCCESS if e.code == 0 else EXIT_INVALID_USAGE

    # Configure logging as early as possible.
    configure_logging(debug=args.debug, verbose=args.verbose, quiet=args.quiet)

    if args.version:
        print(_get_version())
        return EXIT_SUCCESS

    if not args.command:
        parser.print_help()
        return EXIT_SUCCESS

    try:
        config = load_config(
            project_root=Path.cwd(),
            cli_config_path=args.config,
            cli_overrides=cli_args_to_config_overrides(args),
        )
    except ConfigError as e:
        LOGGER.error(str(e))
        return EXIT_INVALID_USAGE

    args.log_level = _effective_log_level(args, config)
    configure_logging(args.log_level)

    return _get_command(args.command).execute(args, config)


if __name__ == "__main__":  # pragma: no cover - exercised via console script
    raise SystemExit(main())
