#!/usr/bin/env python3
"""
cli.py: Command-line entry point for the infoscreen server.

Loads the configuration, imports the content feeds once and then serves every
configured screen while a background worker keeps the feeds in sync.
Pass --once to import the feeds a single time and print a summary instead.
"""

import argparse
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.table import Table

from .config import DEFAULT_CONFIG_FILE, load_config
from .context import AppContext
from .core.errors import ConfigError
from .lifecycle import BrowserLauncher, ScheduledShutdown
from .utils.log_utils import configure_logging, get_logger
from .web.server import ScreenServer

logger = get_logger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description='Serve display content to infoscreen front-ends')
    parser.add_argument('config',
                        nargs='?',
                        default=str(DEFAULT_CONFIG_FILE),
                        help=f'Path to the JSON config file (default: {DEFAULT_CONFIG_FILE})')
    parser.add_argument('--log-level',
                        choices=['debug', 'info', 'warning', 'error', 'critical'],
                        default='info',
                        help='Set logging level (default: info)')
    parser.add_argument('--once',
                        action='store_true',
                        help='Import all feeds once, print a summary and exit')
    return parser.parse_args(argv)


def print_summary(context: AppContext, console: Console) -> None:
    """Print one row per content source."""
    table = Table(title="Content sources")
    table.add_column("Type")
    table.add_column("Path")
    table.add_column("Serial", justify="right")
    table.add_column("Entries", justify="right")
    for source in context.registry.sources():
        table.add_row(source.source_type.name, source.source_path or "-",
                      str(source.serial), str(len(source.entries)))
    console.print(table)

    stats = context.cache.get_stats()
    console.print(f"Repository: {context.repository.root}  "
                  f"Cache limit: {stats['size_limit'] / (1024 * 1024):.0f} MB")


def serve(context: AppContext) -> None:
    """Run the sync worker, the screen servers and the lifecycle helpers until stopped."""
    config = context.config
    worker = context.create_sync_worker()
    servers = [ScreenServer(context, screen) for screen in context.screens]
    browser = BrowserLauncher(config.browser_path, f"http://localhost:{context.screens[0].config.bind_port}/",
                              stop_event=context.stop_event)
    shutdown = ScheduledShutdown(config.terminate_hour, config.terminate_minute, context.stop_event)

    worker.start()
    for server in servers:
        server.start()
    browser.start()
    if shutdown.enabled:
        shutdown.start()

    try:
        while not context.stop_event.wait(1.0):
            pass
    except KeyboardInterrupt:
        logger.info("Interrupted")
    finally:
        context.stop_event.set()
        for server in servers:
            server.shutdown()
        browser.stop()
        worker.stop(timeout=5.0)


def main(argv=None) -> int:
    args = parse_args(argv)
    level = getattr(logging, args.log_level.upper())
    configure_logging(level)

    try:
        config = load_config(Path(args.config))
    except ConfigError as e:
        logger.error("%s", e)
        return 1

    if config.log_file and not args.once:
        try:
            configure_logging(level, config.log_file)
        except OSError as e:
            logger.error("Cannot open log file: %s", e)
            return 1

    context = AppContext(config)
    context.registry.update_all()

    if args.once:
        print_summary(context, Console())
        return 0

    serve(context)
    return 0


if __name__ == "__main__":
    sys.exit(main())
