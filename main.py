#!/usr/bin/env python3
"""
Random Quotes - Main Entry Point
Configure quote widgets from plain-text files and show random quotes

Usage:
    python main.py configure 7 "/notes/stoics.txt;/notes/misc.txt"
    python main.py show 7          # Source files and all stored quotes
    python main.py quote 7         # One random quote
    python main.py watch 7 -i 10   # New random quote every 10 seconds
    python main.py remove 7        # Forget widget 7
    python main.py list            # All configured widgets
"""

import sys
import argparse
from pathlib import Path

# Ensure we can import from project root
sys.path.insert(0, str(Path(__file__).parent))

import config
from core.logger import (
    setup_logging,
    log_startup_banner,
    log_section,
    log_subsection,
    log_error,
)
from core.database import init_database
from core.preferences import PreferenceStore
from concurrency.locks import init_lock_manager
from quotes.files_processor import init_file_processor
from quotes.configuration import init_configurator
from interface.cli import init_cli, get_cli


def initialize_system(verbose: bool = False) -> bool:
    """
    Initialize all system components.

    Returns:
        True if successful, False otherwise
    """
    setup_logging(
        log_file_path=config.DIAGNOSTIC_LOG_PATH,
        level=config.LOG_LEVEL,
        log_to_file=config.LOG_TO_FILE,
        log_to_console=config.LOG_TO_CONSOLE and verbose
    )

    log_startup_banner(config.VERSION, config.PROJECT_NAME)

    database = init_database(
        db_path=config.DATABASE_PATH,
        busy_timeout_ms=config.DB_BUSY_TIMEOUT_MS
    )
    if database is None:
        log_error("Failed to initialize preference database")
        return False

    print_configuration()

    store = PreferenceStore(database)
    init_lock_manager()
    processor = init_file_processor(store)
    configurator = init_configurator(store, processor=processor)
    init_cli(configurator)

    return True


def print_configuration() -> None:
    """Print configuration summary."""
    log_section("Configuration", "📡")
    log_subsection(f"Database: {config.DATABASE_PATH}")
    log_subsection(f"Diagnostic Log: {config.DIAGNOSTIC_LOG_PATH}")
    log_subsection(f"Accepted extension: .{config.QUOTE_FILE_EXTENSION} ({config.QUOTE_FILE_ENCODING})")
    log_subsection(f"Ingest workers: {config.INGEST_MAX_WORKERS}")
    timeout = config.SAVE_LOCK_TIMEOUT_SECONDS
    log_subsection(f"Save lock timeout: {'none' if timeout is None else f'{timeout}s'}")
    log_subsection(f"Refresh interval: {config.QUOTE_REFRESH_INTERVAL}s")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=f"{config.PROJECT_NAME} - random quotes from your own text files",
        epilog=__doc__,
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Echo diagnostic log output to the console"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    configure = subparsers.add_parser("configure", help="Set the quote files for a widget")
    configure.add_argument("widget_id", help="Widget instance id")
    configure.add_argument("paths", help="Semicolon-separated list of .txt files")

    for name, help_text in (
        ("show", "Show a widget's files and quotes"),
        ("quote", "Print one random quote"),
        ("remove", "Delete a widget's preferences"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("widget_id", help="Widget instance id")

    watch = subparsers.add_parser("watch", help="Rotate random quotes until Ctrl+C")
    watch.add_argument("widget_id", help="Widget instance id")
    watch.add_argument(
        "-i", "--interval",
        type=float,
        default=config.QUOTE_REFRESH_INTERVAL,
        help="Seconds between quotes"
    )

    subparsers.add_parser("list", help="List configured widgets")
    return parser


def main(argv=None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    if not initialize_system(verbose=args.verbose):
        return 1

    cli = get_cli()

    if args.command == "configure":
        return cli.configure(args.widget_id, args.paths)
    if args.command == "show":
        return cli.show(args.widget_id)
    if args.command == "quote":
        return cli.quote(args.widget_id)
    if args.command == "watch":
        return cli.watch(args.widget_id, interval=args.interval)
    if args.command == "remove":
        return cli.remove(args.widget_id)
    if args.command == "list":
        return cli.list_widgets()
    return 1


if __name__ == "__main__":
    sys.exit(main())
