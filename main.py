#!/usr/bin/env python3
"""AutoStore - Move documents from DocuWare document trays into file cabinets."""

import argparse
import os
import sys
from typing import List, Optional

from autostore import AutoStore, __version__
from autostore.config import ConfigError, Config, load_config, DEFAULT_CONFIG_PATH
from docuware import create_client
from workflows import run_autostore

EXIT_OK = 0
EXIT_RUN_FAILED = 1
EXIT_CONFIG_ERROR = 2


def trace_error(error: Exception) -> None:
    """Print a failed run's error message."""
    AutoStore.print_right(f"[red]Error message:\n{error}[/red]")


def run_processing(config: Config, dry_run: bool = False) -> int:
    """Run all configured tasks, returning the process exit code."""
    try:
        client = create_client(config.root_url, timeout=config.timeout)
        reports = run_autostore(client, config, dry_run=dry_run)
    except Exception as e:
        trace_error(e)
        return EXIT_RUN_FAILED

    stored = sum(report.stored for report in reports)
    AutoStore.print_right(f"\n[green]Done: stored {stored} documents in {len(reports)} tasks[/green]")
    return EXIT_OK


def main(config: Config, dry_run: bool = False) -> int:
    """Main entry point (CLI mode)."""
    print("Docuware Autostore\n")
    return run_processing(config, dry_run=dry_run)


def main_tui(config: Config, dry_run: bool = False) -> int:
    """Main entry point (TUI mode)."""
    from textui import AutoStoreApp

    # Quitting before the run finished leaves the failure code in place
    result = {"code": EXIT_RUN_FAILED}

    def process_func():
        result["code"] = run_processing(config, dry_run=dry_run)

    app = AutoStoreApp(platform=config.root_url, dry_run=dry_run,
                       process_func=process_func)
    app.run()
    return result["code"]


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Store documents from DocuWare document trays into file cabinets"
    )
    parser.add_argument("-c", "--config", type=str,
                        default=os.environ.get('AUTOSTORE_CONFIG', DEFAULT_CONFIG_PATH),
                        help="Config file path (default: ./config.json or $AUTOSTORE_CONFIG)")
    parser.add_argument("-d", "--dry-run", action="store_true",
                        help="List matching documents and suggestions without storing")
    parser.add_argument("--tui", action="store_true",
                        help="Use the TextUI instead of plain CLI output")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


def cli(argv: Optional[List[str]] = None) -> int:
    """Console script entry point."""
    args = parse_args(argv)
    AutoStore.configure(args)

    # Configuration errors are reported before any network activity
    try:
        config = load_config(args.config)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    if args.tui:
        return main_tui(config, dry_run=AutoStore.dry_run)
    return main(config, dry_run=AutoStore.dry_run)


if __name__ == "__main__":
    sys.exit(cli())
