"""Main entry point for the BCalc command-line tool."""

import argparse
from datetime import datetime, timezone
import glob
import logging
from logging.handlers import RotatingFileHandler
import os
import sys
from typing import List

from bcalc.bcalc import BCalc
from bcalc.bcalc_config import BCalcConfig
from bcalc.bcalc_error import BCalcError
from bcalc.bcalc_file_reader import run_file
from bcalc.bcalc_repl import BCalcRepl


MAX_LOG_FILES = 20
MAX_LOG_BYTES = 1024 * 1024


def setup_logging(log_dir: str, level: str) -> str:
    """
    Send this run's log records to a new timestamped file in log_dir.

    Only the newest MAX_LOG_FILES files are kept.

    Returns:
        Path of the log file for this run
    """
    log_dir = os.path.expanduser(log_dir)
    os.makedirs(log_dir, exist_ok=True)

    started = datetime.now(timezone.utc).strftime("%Y-%m-%d-%H-%M-%S-%f")[:23]
    log_file = os.path.join(log_dir, f"bcalc-{started}.log")

    handler = RotatingFileHandler(
        log_file,
        maxBytes=MAX_LOG_BYTES,
        backupCount=MAX_LOG_FILES - 1,
        encoding='utf-8'
    )

    # force: replace handlers left by an earlier main() in the same process
    logging.basicConfig(
        level=getattr(logging, level),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[handler],
        force=True
    )

    cleanup_old_logs(log_dir, max_logs=MAX_LOG_FILES)
    return log_file


def cleanup_old_logs(log_dir: str, max_logs: int) -> None:
    """Delete all but the max_logs most recently modified log files."""
    log_files = sorted(glob.glob(os.path.join(log_dir, "*.log*")), key=os.path.getmtime)

    for stale in log_files[:max(len(log_files) - max_logs, 0)]:
        try:
            os.remove(stale)

        except OSError as e:
            logging.getLogger("BCalcMain").warning("Could not remove old log %s: %s", stale, e)


def build_arg_parser() -> argparse.ArgumentParser:
    """Build the command-line argument parser."""
    parser = argparse.ArgumentParser(
        prog="bcalc",
        description="BCalc calculator language",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                         # Start the interactive REPL
  %(prog)s program.bc              # Run a file and print the final value
  %(prog)s --max-depth 1000 fib.bc # Allow deeper recursion
        """
    )
    parser.add_argument('file', nargs='?', help='Source file to run (starts the REPL if omitted)')
    parser.add_argument('--config', '-c', help='YAML configuration file')
    parser.add_argument('--max-depth', type=int, help='Maximum number of nested user function calls')
    parser.add_argument('--chunk-size', type=int, help='Characters read per chunk when running a file')
    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        help='Logging level'
    )
    parser.add_argument('--log-dir', default='~/.bcalc/logs', help='Directory for log files')
    return parser


def load_config(args: argparse.Namespace) -> BCalcConfig:
    """Load the configuration file, if any, and apply command-line overrides."""
    config = BCalcConfig.load_from_file(args.config) if args.config else BCalcConfig()

    if args.max_depth is not None:
        config.max_depth = args.max_depth

    if args.chunk_size is not None:
        config.chunk_size = args.chunk_size

    if args.log_level is not None:
        config.log_level = args.log_level

    config.validate()
    return config


def main(argv: List[str] | None = None) -> int:
    """Main CLI entry point."""
    args = build_arg_parser().parse_args(argv)

    try:
        config = load_config(args)

    except BCalcError as e:
        print(str(e), file=sys.stderr)
        return 2

    log_file = setup_logging(args.log_dir, config.log_level)
    logger = logging.getLogger("BCalcMain")
    logger.debug("Logging to %s", log_file)

    calc = BCalc(max_depth=config.max_depth)

    if args.file is None:
        logger.info("Starting REPL")
        BCalcRepl(calc, prompt=config.prompt).run()
        return 0

    logger.info("Running %s", args.file)
    try:
        result = run_file(args.file, calc, chunk_size=config.chunk_size)

    except FileNotFoundError:
        print(f"Error: file not found: {args.file}", file=sys.stderr)
        return 1

    except BCalcError as e:
        logger.info("Run of %s failed: %s", args.file, e.message)
        print(str(e), file=sys.stderr)
        return 1

    print(calc.format_result(result))
    return 0


if __name__ == "__main__":
    sys.exit(main())
