#!/usr/bin/env python3
"""
consoled - runs the status dashboard on the system consoles.

Log output of the process is shown in the dashboard's log pane and copied to
stdout, so it still ends up in the journal.
"""

import logging
import os
import sys

from consoled.config import load_config
from consoled.constants import Paths
from consoled.logging_config import attach_dashboard, detach_dashboard, setup_logging
from consoled.tui.dashboard import get_dashboard, release_dashboard
from consoled.utils.error_handling import ConfigError, ConsoleError, ErrorCategory, handle_error

logger = logging.getLogger(__name__)


def main(argv=None) -> int:
    """Main entry point"""
    import argparse

    parser = argparse.ArgumentParser(description='Console status dashboard')
    parser.add_argument('--config', '-c', type=str,
                        help=f'Path to a YAML or JSON settings file '
                             f'(default: {Paths.CONFIG_FILE} if present)')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Show debug log records')
    parser.add_argument('--log-file', type=str,
                        help='Also write logs to this file')
    parser.add_argument('--product', type=str,
                        help='Product name shown in the header')

    args = parser.parse_args(argv)

    # Until the dashboard exists, log straight to stdout
    setup_logging(verbose=args.verbose, log_file=args.log_file, console=True)

    config_path = args.config
    if config_path is None and os.path.exists(Paths.CONFIG_FILE):
        config_path = Paths.CONFIG_FILE

    try:
        config = load_config(config_path)
    except ConfigError as e:
        handle_error(e, "load configuration", ErrorCategory.CONFIG,
                     additional_context={'path': config_path})
        return 1
    if args.product:
        config.product_name = args.product

    try:
        dashboard = get_dashboard(config)
    except ConsoleError as e:
        handle_error(e, "open consoles", ErrorCategory.CONSOLE)
        return 1

    # The sink mirrors to stdout itself
    setup_logging(verbose=args.verbose, log_file=args.log_file, console=False)
    attach_dashboard(dashboard.sink)

    try:
        paths = getattr(dashboard.screen.stream, 'paths', ['console'])
        logger.info(f"Dashboard running on {', '.join(paths)}")
        dashboard.run()
    finally:
        detach_dashboard()
        release_dashboard()

    return 0


if __name__ == '__main__':
    sys.exit(main())
