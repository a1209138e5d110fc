"""
Command-line interface for the PDF Scanner.

pdfscan searches PDF documents under one or more directories for a literal
phrase and prints one matching path per line. pdfscan-extract dumps the text
of documents into a single text file.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional
import logging

from pydantic import ValidationError

from .config.parser import ConfigurationError, create_config_template, load_config, validate_config_file
from .models.config import ScanConfig
from .models.search_config import SearchConfig
from .search.coordinator import run_search
from .search.extract import extract_to_file


logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ARCHIVE_FAILED = 1
EXIT_WRITE_FAILED = 1
EXIT_CONFIG_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the pdfscan command."""
    parser = argparse.ArgumentParser(
        prog="pdfscan",
        description="Search PDF documents for a literal phrase",
    )
    parser.add_argument(
        "-s", "--search-phrase", dest="phrase", default="",
        help="Literal phrase to search for; if empty, every document matches",
    )
    parser.add_argument(
        "-d", "--directory", dest="directories", action="append", metavar="DIRECTORY",
        help="Directory to search (repeatable); defaults to your home directory",
    )
    parser.add_argument(
        "-z", "--zip", action="store_true",
        help="Create a ZIP archive of all matching files after the search",
    )
    parser.add_argument(
        "-c", "--case-sensitive", action="store_true",
        help="Respect letter case when matching",
    )
    parser.add_argument("--config", metavar="PATH", help="YAML configuration file")
    parser.add_argument(
        "--write-config", metavar="PATH",
        help="Write a commented configuration template to PATH and exit",
    )
    parser.add_argument(
        "--check-config", metavar="PATH",
        help="Validate the configuration file at PATH and exit",
    )
    parser.add_argument(
        "-v", "--verbose", action="count", default=0,
        help="Increase log output (-v for info, -vv for debug)",
    )
    return parser


def build_extract_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the pdfscan-extract command."""
    parser = argparse.ArgumentParser(
        prog="pdfscan-extract",
        description="Extract text from PDF documents and save it to a file",
    )
    parser.add_argument("output_file", help="Output text file path")
    parser.add_argument("input_paths", nargs="+", help="Input paths (directories or PDF files)")
    parser.add_argument("--config", metavar="PATH", help="YAML configuration file")
    parser.add_argument(
        "-v", "--verbose", action="count", default=0,
        help="Increase log output (-v for info, -vv for debug)",
    )
    return parser


def configure_logging(scan_config: ScanConfig, verbosity: int = 0) -> None:
    """
    Configure the root logger from settings and -v flags.

    Args:
        scan_config: Settings holding the configured level and format
        verbosity: Number of -v flags given
    """
    level = scan_config.logging.get_level()
    if verbosity >= 2:
        level = min(level, logging.DEBUG)
    elif verbosity == 1:
        level = min(level, logging.INFO)

    logging.basicConfig(level=level, format=scan_config.logging.format, stream=sys.stderr, force=True)


def load_scan_config(config_path: Optional[str], verbosity: int = 0) -> ScanConfig:
    """
    Load application settings and configure logging from them.

    Configuration warnings are logged once logging is set up.

    Raises:
        ConfigurationError: If the settings cannot be loaded
    """
    result = load_config(config_path)
    configure_logging(result.config, verbosity)
    for warning in result.warnings:
        logger.info(warning)
    return result.config


def write_config_template(path: str) -> int:
    """Handle --write-config."""
    try:
        create_config_template(path)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR
    print(f"Wrote configuration template to {path}", file=sys.stderr)
    return EXIT_OK


def check_config_file(path: str) -> int:
    """Handle --check-config: report every problem, exit 2 if there are any."""
    errors = validate_config_file(path)
    for error in errors:
        print(f"Error: {error}", file=sys.stderr)
    if errors:
        return EXIT_CONFIG_ERROR
    print(f"Configuration file is valid: {path}", file=sys.stderr)
    return EXIT_OK


def build_search_config(args: argparse.Namespace) -> SearchConfig:
    """
    Turn parsed arguments into a search configuration.

    Raises:
        ConfigurationError: If the arguments do not form a valid search
    """
    roots = args.directories or [str(Path.home())]
    try:
        return SearchConfig(
            phrase=args.phrase,
            case_sensitive=args.case_sensitive,
            roots=roots,
            build_archive=args.zip,
        )
    except ValidationError as e:
        raise ConfigurationError(f"Invalid search arguments: {e}") from e


def main(argv: Optional[List[str]] = None) -> int:
    """
    Entry point of the pdfscan command.

    Args:
        argv: Arguments without the program name (sys.argv[1:] if None)

    Returns:
        Process exit status
    """
    args = build_parser().parse_args(argv)

    if args.write_config:
        return write_config_template(args.write_config)
    if args.check_config:
        return check_config_file(args.check_config)

    try:
        scan_config = load_scan_config(args.config, args.verbose)
        search_config = build_search_config(args)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    outcome = run_search(search_config, scan_config)

    for match in outcome.results.matches:
        print(match.path)

    if outcome.archive is not None:
        print(str(outcome.archive), file=sys.stderr)
        if not outcome.archive.success:
            return EXIT_ARCHIVE_FAILED

    return EXIT_OK


def extract_main(argv: Optional[List[str]] = None) -> int:
    """
    Entry point of the pdfscan-extract command.

    Args:
        argv: Arguments without the program name (sys.argv[1:] if None)

    Returns:
        Process exit status
    """
    args = build_extract_parser().parse_args(argv)

    try:
        scan_config = load_scan_config(args.config, args.verbose)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    try:
        summary = extract_to_file(args.output_file, args.input_paths, scan_config)
    except OSError as e:
        print(f"Error: cannot write {args.output_file}: {e}", file=sys.stderr)
        return EXIT_WRITE_FAILED

    print(str(summary), file=sys.stderr)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
