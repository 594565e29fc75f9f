"""Main entry point for msglogger."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from msglogger.service.native import MessageLoggerNative


def setup_logging(
    level: str = "INFO",
    debug: bool = False,
    log_to_file: bool = False,
    log_file_path: Path | None = None,
    log_file_max_bytes: int = 5 * 1024 * 1024,
    log_file_backup_count: int = 3,
    log_format: str = "text",
    module_levels: dict[str, str] | None = None,
) -> None:
    """Configure logging with console and optional file output.

    Args:
        level: Log level string (DEBUG, INFO, WARNING, ERROR)
        debug: If True, overrides level to DEBUG
        log_to_file: Enable file logging in addition to console
        log_file_path: Path to log file (required for file logging)
        log_file_max_bytes: Maximum size per log file before rotation
        log_file_backup_count: Number of rotated backup files to keep
        log_format: "text" or "json"
        module_levels: Per-module level overrides
    """
    effective_level = logging.DEBUG if debug else getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(effective_level)

    # Clear any existing handlers to avoid duplicates
    root_logger.handlers.clear()

    from msglogger.utils.logging import (
        AttachmentContextFilter,
        JSONFormatter,
        configure_module_levels,
    )

    formatter: logging.Formatter
    if log_format == "json":
        formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] [%(attachment_id)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    # Logs go to stderr so command output on stdout stays clean
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(effective_level)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(AttachmentContextFilter())
    root_logger.addHandler(console_handler)

    if log_to_file and log_file_path:
        try:
            log_file_path.parent.mkdir(parents=True, exist_ok=True)

            file_handler = RotatingFileHandler(
                log_file_path,
                maxBytes=log_file_max_bytes,
                backupCount=log_file_backup_count,
                encoding="utf-8",
            )
            file_handler.setLevel(effective_level)
            file_handler.setFormatter(formatter)
            file_handler.addFilter(AttachmentContextFilter())
            root_logger.addHandler(file_handler)

            logging.info(f"File logging enabled: {log_file_path}")
        except OSError as e:
            # Continue with console-only logging
            logging.warning(f"Failed to initialize file logging: {e}. Using console-only logging.")

    if module_levels:
        configure_module_levels(module_levels)


def build_parser() -> argparse.ArgumentParser:
    """Create the command line parser."""
    from msglogger import __version__

    parser = argparse.ArgumentParser(
        prog="msglogger",
        description="msglogger - inspect and manage the message logger's local data",
    )
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=None,
        help="Base data directory (env: MSGLOGGER_DATA_DIR)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (env: MSGLOGGER_LOG_LEVEL)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=None,
        help="Enable debug mode (env: MSGLOGGER_DEBUG)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"msglogger {__version__}",
    )

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("config", help="Print and check the configuration")
    commands.add_parser("images", help="List cached attachment images")
    commands.add_parser("show-log", help="Print the stored message log")

    delete_parser = commands.add_parser("delete-image", help="Delete a cached image")
    delete_parser.add_argument("attachment_id")

    set_dir_parser = commands.add_parser("set-dir", help="Change and persist a directory")
    set_dir_parser.add_argument("kind", choices=["image", "log"])
    set_dir_parser.add_argument("path", type=Path)

    reveal_parser = commands.add_parser("reveal", help="Show a file in the file manager")
    reveal_parser.add_argument("path", type=Path)

    return parser


async def _run_command(args: argparse.Namespace, native: MessageLoggerNative) -> int:
    from msglogger.storage.directories import DirectoryKind

    if args.command == "images":
        await native.init()
        records = sorted(native.images.index.records(), key=lambda record: record.id)
        for record in records:
            print(f"{record.id}\t{record.path}")
        print(f"{len(records)} cached images in {native.resolver.resolve_image_dir()}")
        return 0

    if args.command == "show-log":
        logs = await native.get_logs()
        if logs is None:
            print(f"No message log at {native.logs.log_path}")
            return 1
        print(json.dumps(logs, indent=2, ensure_ascii=False))
        return 0

    if args.command == "delete-image":
        await native.init()
        if native.images.path_of(args.attachment_id) is None:
            print(f"Image not cached: {args.attachment_id}")
            return 1
        await native.delete_image(args.attachment_id)
        print(f"Deleted {args.attachment_id}")
        return 0

    if args.command == "set-dir":
        kind = DirectoryKind(args.kind)
        if not await native.set_directory(kind, args.path.expanduser().resolve()):
            print(f"Failed to save {kind.value} directory")
            return 1
        print(f"{kind.value} directory set to {native.resolver.resolve(kind)}")
        return 0

    if args.command == "reveal":
        await native.show_item_in_folder(args.path)
        return 0

    raise ValueError(f"Unknown command: {args.command}")


def main(argv: list[str] | None = None) -> int:
    """Run the msglogger command line tool."""
    from msglogger.config import Settings, reset_settings
    from msglogger.service.native import MessageLoggerNative
    from msglogger.storage.errors import StorageError

    parser = build_parser()
    args = parser.parse_args(argv)

    # Reset cache to apply CLI args
    reset_settings()
    cli_overrides: dict[str, Any] = {}
    if args.data_dir is not None:
        cli_overrides["data_dir"] = args.data_dir
    if args.log_level is not None:
        cli_overrides["log_level"] = args.log_level
    if args.debug is not None:
        cli_overrides["debug"] = args.debug
    settings = Settings(**cli_overrides)

    if args.command == "config":
        settings.print_config()
        warnings = settings.check()
        if warnings:
            print()
            print("Configuration warnings:")
            for warning in warnings:
                print(f"  • {warning}")
            return 1
        print()
        print("Configuration is valid")
        return 0

    setup_logging(
        level=settings.log_level,
        debug=settings.debug,
        log_to_file=settings.log_to_file,
        log_file_path=settings.log_file_path if settings.log_to_file else None,
        log_file_max_bytes=settings.log_file_max_bytes,
        log_file_backup_count=settings.log_file_backup_count,
        log_format=settings.log_format,
        module_levels=settings.log_module_levels,
    )

    native = MessageLoggerNative.from_settings(settings)
    try:
        return asyncio.run(_run_command(args, native))
    except StorageError as e:
        logging.getLogger(__name__).error(f"{args.command} failed: {e}")
        return 2


if __name__ == "__main__":
    sys.exit(main())
