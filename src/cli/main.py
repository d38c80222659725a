# SPDX-License-Identifier: MIT
"""Command-line interface for forcing a direnv environment rebuild."""

from __future__ import annotations

import argparse
import platform
import shutil
import sys
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Any, Callable, Sequence

import logfire

from core import ProjectDirMissingError, ReloadError, ReloadTrigger, inspect_cache
from observability.monitoring import init_logfire
from constants import DEFAULT_DIRENV_BIN
from runtime.settings import Settings, load_settings
from utils import LoggingErrorHandler, SubprocessRunner

LOG_LEVELS = ["fatal", "error", "warn", "notice", "info", "debug", "trace"]

# Aliases accepted for ``log_level`` in configuration.
_LEVEL_ALIASES = {"warning": "warn", "critical": "fatal"}

# Exit status for unusable configuration, matching argparse usage errors.
CONFIG_ERROR_EXIT = 2

# Destination prefix for verbosity flags given after the subcommand.
SUBCOMMAND_COUNT_PREFIX = "sub_"


def _print_version() -> None:
    """Print the installed package version."""
    try:
        pkg_version = version("direnv-refresh")
    except PackageNotFoundError:  # pragma: no cover - fallback for source checkouts
        pkg_version = "unknown"
    print(f"direnv-refresh {pkg_version}")


def _resolve_direnv_bin(args: argparse.Namespace) -> str:
    """Return the direnv executable from flags, environment or config file."""
    if args.direnv_bin:
        return args.direnv_bin
    try:
        # A placeholder satisfies the required project directory; only the
        # binary is read.
        settings = load_settings(
            args.config, {"project_dir": args.project_dir or Path.cwd()}
        )
    except (FileNotFoundError, RuntimeError):
        return DEFAULT_DIRENV_BIN
    return settings.direnv_bin


def _print_diagnostics(args: argparse.Namespace) -> None:
    """Output basic environment information for health checks."""
    _print_version()
    print(f"Python {platform.python_version()}")
    print(f"Platform {platform.platform()}")
    binary = _resolve_direnv_bin(args)
    resolved = shutil.which(binary)
    print(f"direnv: {resolved}" if resolved else f"direnv: {binary} not found")


def _base_level_index(log_level: str) -> int:
    """Return the ``LOG_LEVELS`` index for a configured level name."""
    name = log_level.lower()
    name = _LEVEL_ALIASES.get(name, name)
    return LOG_LEVELS.index(name) if name in LOG_LEVELS else LOG_LEVELS.index("info")


def _configure_logging(args: argparse.Namespace, settings: Settings) -> None:
    """Configure Logfire based on the configured level and verbosity flags."""
    index = _base_level_index(settings.log_level) + args.verbose - args.quiet
    index = max(0, min(len(LOG_LEVELS) - 1, index))
    init_logfire(settings.logfire_token, LOG_LEVELS[index])  # type: ignore[arg-type]


def _cmd_reload(args: argparse.Namespace, settings: Settings) -> int:
    """Force a rebuild and normalise cache timestamps."""
    # Failures are printed below; keep the log record off the console.
    trigger = ReloadTrigger(
        settings,
        runner=SubprocessRunner(),
        error_handler=LoggingErrorHandler(console_log=False),
    )
    try:
        outcome = trigger.run()
    except ProjectDirMissingError as exc:
        print(str(exc), file=sys.stderr)
        print(f"(Looking for {exc.project_dir})", file=sys.stderr)
        print(exc.hint, file=sys.stderr)
        return exc.exit_code
    except ReloadError as exc:
        print(f"direnv-refresh: {exc}", file=sys.stderr)
        return exc.exit_code
    prefix = "Would reload" if outcome.dry_run else "Reloaded"
    print(
        f"{prefix} {outcome.project_dir} "
        f"({len(outcome.cache_files)} cache file(s) synchronised)"
    )
    return 0


def _cmd_status(args: argparse.Namespace, settings: Settings) -> int:
    """Report whether the cached environment is up to date."""
    try:
        status = inspect_cache(settings)
    except ReloadError as exc:
        print(f"direnv-refresh: {exc}", file=sys.stderr)
        return exc.exit_code
    print(f"marker {status.marker} mtime_ns={status.marker_mtime_ns}")
    if not status.cache_files:
        print(
            f"no cache files match {settings.cache_pattern!r}"
            f" in {settings.cache_path}"
        )
    for entry in status.cache_files:
        label = "fresh" if entry.fresh else "stale"
        print(f"  {label:<5} {entry.path} mtime_ns={entry.mtime_ns}")
    print("up to date" if status.fresh else "needs reload")
    return 0 if status.fresh else 1


def _add_common_args(
    parser: argparse.ArgumentParser, count_prefix: str = ""
) -> argparse.ArgumentParser:
    """Attach options shared by every subcommand to ``parser``.

    ``count_prefix`` renames the ``-v`` and ``-q`` destinations so counts given
    after a subcommand can be added to those given before it.
    """
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to a YAML configuration file",
    )
    parser.add_argument(
        "--project-dir",
        type=str,
        default=None,
        help="Project root to reload. Can also be set via DR_PROJECT_DIR.",
    )
    parser.add_argument(
        "--direnv-bin",
        type=str,
        default=None,
        help="direnv executable to invoke",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=None,
        help="Log each step without running direnv or touching files",
    )
    parser.add_argument(
        "--strict-cache",
        action="store_true",
        default=None,
        help="Fail when no cache files match the cache pattern",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        dest=f"{count_prefix}verbose",
        default=0,
        help="Increase logging verbosity",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="count",
        dest=f"{count_prefix}quiet",
        default=0,
        help="Decrease logging verbosity",
    )
    return parser


def _add_reload_subparser(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
    common: argparse.ArgumentParser,
) -> argparse.ArgumentParser:
    """Create the ``reload`` subcommand parser."""
    parser = subparsers.add_parser(
        "reload",
        parents=[common],
        help="Force a rebuild of the cached environment (default)",
        description=(
            "Run 'direnv exec' with the force-rebuild variable set, touch the"
            " marker file and copy its timestamps onto the cache files."
        ),
    )
    parser.set_defaults(func=_cmd_reload)
    return parser


def _add_status_subparser(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
    common: argparse.ArgumentParser,
) -> argparse.ArgumentParser:
    """Create the ``status`` subcommand parser."""
    parser = subparsers.add_parser(
        "status",
        parents=[common],
        help="Report whether the cached environment is up to date",
        description=(
            "Compare cache file timestamps against the marker file; exits 1"
            " when any cache file is stale or none exist."
        ),
    )
    parser.set_defaults(func=_cmd_status)
    return parser


def _build_parser() -> argparse.ArgumentParser:
    """Return an argument parser configured with subcommands."""
    parser = _add_common_args(
        argparse.ArgumentParser(
            prog="direnv-refresh",
            description=(
                "Force direnv to rebuild a project's cached environment and keep"
                " the cache timestamps consistent with the marker file."
            ),
            formatter_class=argparse.ArgumentDefaultsHelpFormatter,
        )
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print the direnv-refresh version and exit.",
    )
    parser.add_argument(
        "--diagnostics",
        action="store_true",
        help="Print environment diagnostics and exit.",
    )
    # Options repeated after the subcommand only override when given.
    common = _add_common_args(
        argparse.ArgumentParser(add_help=False),
        count_prefix=SUBCOMMAND_COUNT_PREFIX,
    )
    for action in common._actions:
        action.default = argparse.SUPPRESS
    subparsers = parser.add_subparsers(dest="command")
    _add_reload_subparser(subparsers, common)
    _add_status_subparser(subparsers, common)
    parser.set_defaults(func=_cmd_reload)
    return parser


def _parse_args(
    parser: argparse.ArgumentParser, argv: Sequence[str] | None
) -> argparse.Namespace:
    """Parse ``argv`` and total ``-v``/``-q`` counts from every position."""
    args = parser.parse_args(argv)
    for name in ("verbose", "quiet"):
        extra = getattr(args, f"{SUBCOMMAND_COUNT_PREFIX}{name}", 0)
        setattr(args, name, getattr(args, name) + extra)
    return args


def _apply_args_to_settings(args: argparse.Namespace, settings: Settings) -> None:
    """Override settings fields based on CLI arguments."""
    arg_mapping: dict[str, tuple[str, Callable[[Any], Any] | None]] = {
        "project_dir": ("project_dir", lambda value: Path(value).expanduser()),
        "direnv_bin": ("direnv_bin", None),
        "dry_run": ("dry_run", None),
        "strict_cache": ("on_empty_cache", lambda _: "error"),
    }
    for arg_name, (attr, converter) in arg_mapping.items():
        value = getattr(args, arg_name, None)
        if value is not None:  # branch: override settings when flag provided
            setattr(settings, attr, converter(value) if converter else value)


def main(argv: Sequence[str] | None = None) -> None:
    """Parse arguments and dispatch to the requested subcommand.

    Raises:
        SystemExit: With the failing step's exit code when a command fails.
    """
    args = _parse_args(_build_parser(), argv)
    if args.version:
        _print_version()
        return
    if args.diagnostics:
        _print_diagnostics(args)
        return
    overrides: dict[str, Any] = {}
    if args.project_dir is not None:
        # Lets --project-dir satisfy the required setting during validation.
        overrides["project_dir"] = args.project_dir
    try:
        settings = load_settings(args.config, overrides)
    except (FileNotFoundError, RuntimeError) as exc:
        print(f"direnv-refresh: {exc}", file=sys.stderr)
        raise SystemExit(CONFIG_ERROR_EXIT) from exc
    _apply_args_to_settings(args, settings)
    _configure_logging(args, settings)
    try:
        code = args.func(args, settings)
    finally:
        logfire.force_flush()
    if code:
        raise SystemExit(code)


if __name__ == "__main__":
    # Allow module to be executed as a standalone script
    main()
