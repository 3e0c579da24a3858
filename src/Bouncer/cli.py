"""
Command line front end for Bouncer.
"""
import argparse
import logging
import sys
from typing import Optional

from Bouncer import __version__
from Bouncer.Models import DEFAULT_TIMEOUT, Options
from Bouncer.bouncer import Bouncer
from Bouncer.config_loader import MAX_TIMEOUT, ConfigLoader, ConfigValidationError, default_config_path
from Bouncer.dependency_check import DependencyChecker

logger = logging.getLogger(__name__)


class BouncerArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that exits with status 1 on bad input."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def parse_timeout(value: str) -> int:
    """
    Parse a timeout in seconds.

    Accepts decimal, 0x hexadecimal, 0o octal and C-style leading-zero octal.
    """
    try:
        timeout = int(value, 0)
    except ValueError:
        stripped = value.strip()
        if len(stripped) > 1 and stripped.startswith("0") and stripped.isdigit():
            try:
                timeout = int(stripped, 8)
            except ValueError:
                raise argparse.ArgumentTypeError(f"'{value}' is not a valid number.") from None
        else:
            raise argparse.ArgumentTypeError(f"'{value}' is not a valid number.") from None

    if timeout < 0:
        raise argparse.ArgumentTypeError("No negative values for timeout allowed.")
    if timeout > MAX_TIMEOUT:
        raise argparse.ArgumentTypeError(f"Maximum value for timeout is {MAX_TIMEOUT}.")
    return timeout


def build_parser() -> argparse.ArgumentParser:
    parser = BouncerArgumentParser(
        prog="bouncer",
        description="Politely ask matching X11 windows to close and wait for them to go away.",
    )
    parser.add_argument("-V", "--version", action="version", version=f"bouncer {__version__}")
    parser.add_argument("-d", "--debug", action="store_true", help="Print some verbose messages")
    parser.add_argument("-n", "--no-bounce", action="store_true",
                        help="Don't send any events, just detect the windows.")
    parser.add_argument("-a", "--all", action="store_true", help="Affect all windows.")
    parser.add_argument("-t", "--timeout", type=parse_timeout, default=None,
                        help=f"Time to wait before program exits (default = {DEFAULT_TIMEOUT}).")
    parser.add_argument("-p", "--pattern", action="append", default=[], dest="patterns",
                        help="Specify patterns on command line.")
    parser.add_argument("-c", "--config", default=None,
                        help="Read patterns from this file instead of ~/.bouncerc.")
    parser.add_argument("--display", default=None, help="X display to use instead of $DISPLAY.")
    parser.add_argument("--check-deps", action="store_true", help="Report missing dependencies and exit.")
    return parser


def _load_config(path):
    """
    Load the configuration file.

    :return: ConfigLoader on success, None if the file is unavailable or invalid
    """
    if path is None:
        logger.error("$HOME Variable not set.")
        return None

    loader = ConfigLoader(path)
    try:
        loader.load()
    except FileNotFoundError as e:
        logger.error(f"{e}")
        return None
    except ConfigValidationError as e:
        logger.error(f"Configuration Error: {e}")
        return None
    except OSError as e:
        logger.error(f"Opening '{path}' - {e}")
        return None
    return loader


def build_options(args) -> Optional[Options]:
    """
    Merge command line and configuration file into Options.

    :return: Options, or None when no pattern source is usable
    """
    options = Options(
        all_windows=args.all,
        dry_run=args.no_bounce,
        verbose=args.debug,
        display_name=args.display,
    )

    config_timeout = None
    if not args.all:
        options.patterns = list(args.patterns)
        loader = _load_config(args.config or default_config_path())
        if loader is not None:
            options.patterns.extend(loader.patterns)
            config_timeout = loader.timeout

        if not options.patterns:
            logger.error("No patterns given on the command line or in the configuration file.")
            return None

    if args.timeout is not None:
        options.timeout = args.timeout
    elif config_timeout is not None:
        options.timeout = config_timeout

    return options


def main(argv=None) -> int:
    """Main application entry point."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(message)s",
        stream=sys.stderr,
    )

    if args.check_deps:
        checker = DependencyChecker()
        checker.print_report()
        return 1 if checker.has_critical_failures() else 0

    if args.debug and not args.all and args.patterns:
        logger.info("Patterns from command line:")
        for pattern in args.patterns:
            logger.info(f"  {pattern}")

    options = build_options(args)
    if options is None:
        return 1

    logger.info("Verbose mode")
    logger.info(f"Timeout: {options.timeout} seconds")
    if options.dry_run:
        logger.info("No actual action will be performed.")

    return Bouncer(options).run()


if __name__ == "__main__":
    sys.exit(main())
