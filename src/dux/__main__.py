"""Command line entry point for the Dux interpreter.

Run a script:
    python -m dux script.dux

Start an interactive session:
    python -m dux
"""

import argparse
import getpass
import logging
from logging.handlers import RotatingFileHandler
import sys
from typing import List

from dux.dux import Dux
from dux.dux_error import DuxEvalError, DuxParseError
from dux.dux_repl import DuxRepl
from dux.dux_value import DuxErrorValue


def setup_logging(log_file: str | None, level: str) -> None:
    """
    Configure logging.  Nothing is logged unless a log file is given.

    Args:
        log_file: Path of the log file, or None to leave logging unconfigured
        level: Logging level name, e.g. "DEBUG"
    """
    if log_file is None:
        return

    handler = RotatingFileHandler(
        log_file,
        maxBytes=1024*1024,  # 1MB
        backupCount=4,
        encoding='utf-8'
    )

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[handler]
    )


def run_file(path: str, max_depth: int) -> int:
    """
    Evaluate a script file and print its final value.

    Args:
        path: Path of the script
        max_depth: Maximum depth of nested function calls

    Returns:
        Process exit code
    """
    logger = logging.getLogger("DuxMain")

    try:
        with open(path, encoding='utf-8') as f:
            source = f.read()

    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    dux = Dux(max_depth=max_depth)

    try:
        result = dux.run(source)

    except DuxParseError as e:
        for message in e.errors:
            print(f"\t{message}")

        return 1

    except DuxEvalError as e:
        logger.exception("Failed to evaluate %s", path)
        print(e.message, file=sys.stderr)
        return 1

    print(result.inspect())
    return 1 if isinstance(result, DuxErrorValue) else 0


def run_repl(max_depth: int, show_tokens: bool) -> int:
    """
    Greet the user and start an interactive session on standard input and output.

    Args:
        max_depth: Maximum depth of nested function calls
        show_tokens: Print tokens instead of evaluating each line

    Returns:
        Process exit code
    """
    try:
        user = getpass.getuser()

    except (KeyError, OSError):
        user = "there"

    print(f"Welcome {user}. Dux Language Interpreter!")
    print("You can evaluate Dux commands here")

    repl = DuxRepl(sys.stdin, sys.stdout, max_depth=max_depth, show_tokens=show_tokens)
    repl.start()
    return 0


def main(argv: List[str] | None = None) -> int:
    """Main entry point for CLI."""
    parser = argparse.ArgumentParser(
        prog="dux",
        description="Dux language interpreter",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                       # Interactive session
  %(prog)s script.dux            # Run a script and print its result
  %(prog)s --tokens              # Interactive token dump
        """
    )

    parser.add_argument(
        'file',
        nargs='?',
        help='Dux script to run; starts an interactive session if omitted'
    )

    parser.add_argument(
        '--max-depth',
        type=int,
        default=100,
        help='Maximum depth of nested function calls (default: 100)'
    )

    parser.add_argument(
        '--tokens',
        action='store_true',
        help='In an interactive session, print the tokens of each line instead of evaluating it'
    )

    parser.add_argument(
        '--log-file',
        help='Write log messages to this file'
    )

    parser.add_argument(
        '--log-level',
        default='INFO',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Logging level used with --log-file (default: INFO)'
    )

    args = parser.parse_args(argv)

    setup_logging(args.log_file, args.log_level)

    if args.file is not None:
        return run_file(args.file, args.max_depth)

    return run_repl(args.max_depth, args.tokens)


if __name__ == "__main__":
    sys.exit(main())
