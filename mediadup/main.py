#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Main CLI entry point for the media deduplicator.
"""

import argparse
import sys
import logging

from .config import (
    ACTION_ALIASES, ACTION_REPORT_ONLY, ACTIONS, DEFAULT_KEEP_POLICY, KEEP_POLICIES,
    SKIP_LOG_FILENAME, state_dir
)
from .commands.inspect import cmd_compare, cmd_compare_pixels, cmd_hash
from .commands.report import cmd_show_report
from .commands.scan import cmd_find_duplicates
from .commands.worker import cmd_worker
from .errors import MediadupError
from .jsonio import enable_json_logging
from .scanning.scanner import ScanOptions
from .scanning.skiplog import SkipLog


def setup_logging(verbose: bool):
    """Configure logging for the CLI tool."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)]
    )
    logging.debug("Verbose logging enabled (DEBUG level).")


def _action(value: str) -> str:
    action = ACTION_ALIASES.get(value, value)
    if action not in ACTIONS:
        raise argparse.ArgumentTypeError(
            f"invalid action {value!r} (choose from {', '.join(ACTIONS)})"
        )
    return action


def _positive_int(value: str) -> int:
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {value!r}")
    if n < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {n}")
    return n


def create_parser():
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        prog="mediadup",
        description="Find media files whose content is identical once metadata is ignored",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""Examples:
  # Report duplicate groups under a photo library
  %(prog)s find-duplicates ~/Pictures

  # Replace duplicates with hard links, keeping the oldest copy
  %(prog)s find-duplicates ~/Pictures --action hard-link --keep oldest --jobs 4

  # Compare two files ignoring metadata
  %(prog)s compare a.jpg b.jpg
        """
    )

    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Enable verbose (DEBUG) output")
    parser.add_argument("--json", action="store_true",
                        help="Output results as JSON instead of human-readable text")
    parser.add_argument("--state-dir",
                        help="Directory for report, stats and logs "
                             "(default: $MEDIADUP_STATE_DIR or ~/.cache/mediadup)")

    subparsers = parser.add_subparsers(dest="command", required=True, help="Available commands")

    _add_scan_parser(subparsers)
    _add_inspect_parsers(subparsers)
    _add_report_parser(subparsers)
    _add_worker_parser(subparsers)

    return parser


def _add_scan_parser(subparsers):
    scan_parser = subparsers.add_parser("find-duplicates", help="Scan a directory for duplicates")
    scan_parser.add_argument("root", help="Directory to scan")
    scan_parser.add_argument("--cache-db",
                             help="Hash cache database (default: $MEDIADUP_CACHE_DB or ~/.mediadup_cache.db)")
    scan_parser.add_argument("--jobs", type=_positive_int,
                             help="Number of worker processes (default: CPU count)")
    scan_parser.add_argument("--action", type=_action, default=ACTION_REPORT_ONLY,
                             help=f"What to do with duplicates: {', '.join(ACTIONS)} "
                                  f"(default: {ACTION_REPORT_ONLY})")
    scan_parser.add_argument("--trash-dir",
                             help="Destination for --action relocate "
                                  "(default: $MEDIADUP_TRASH_DIR or ~/.Trash/mediadup)")
    scan_parser.add_argument("--keep", choices=list(KEEP_POLICIES), default=DEFAULT_KEEP_POLICY,
                             help=f"Which group member survives (default: {DEFAULT_KEEP_POLICY})")
    scan_parser.add_argument("--no-cache", action="store_true",
                             help="Do not read or write the hash cache")
    scan_parser.add_argument("--threads", action="store_true",
                             help="Use worker threads instead of processes")
    scan_parser.add_argument("--no-progress", action="store_true",
                             help="Hide the progress bar")


def _add_inspect_parsers(subparsers):
    hash_parser = subparsers.add_parser("hash", help="Print the normalized hash of a file")
    hash_parser.add_argument("file")

    compare_parser = subparsers.add_parser("compare", help="Compare two files ignoring metadata")
    compare_parser.add_argument("file_a")
    compare_parser.add_argument("file_b")

    pixels_parser = subparsers.add_parser("compare-pixels",
                                          help="Pixel RMSE between two images (0 = identical)")
    pixels_parser.add_argument("file_a")
    pixels_parser.add_argument("file_b")


def _add_report_parser(subparsers):
    report_parser = subparsers.add_parser("report", help="Show the last scan's summary")
    report_parser.add_argument("--detailed", action="store_true",
                               help="List every duplicate group")


def _add_worker_parser(subparsers):
    worker_parser = subparsers.add_parser("worker", help="Hash one file through the cache (internal)")
    worker_parser.add_argument("cache_db")
    worker_parser.add_argument("file")


def run(args) -> int:
    """Dispatch a parsed command line; returns the exit code."""
    as_json = getattr(args, 'json', False)
    state = state_dir(args.state_dir)
    skip_log = SkipLog(state / SKIP_LOG_FILENAME)

    if args.command == "find-duplicates":
        options = ScanOptions(
            action=args.action,
            keep_policy=args.keep,
            jobs=args.jobs,
            cache_db=args.cache_db,
            trash_dir=args.trash_dir,
            state_dir=state,
            use_cache=not args.no_cache,
            executor="thread" if args.threads else "process",
            progress=not (args.no_progress or as_json),
        )
        logging.info("Starting find-duplicates on %s", args.root)
        return cmd_find_duplicates(args.root, options, as_json)

    elif args.command == "hash":
        return cmd_hash(args.file, skip_log=skip_log, as_json=as_json)

    elif args.command == "compare":
        return cmd_compare(args.file_a, args.file_b, skip_log=skip_log, as_json=as_json)

    elif args.command == "compare-pixels":
        return cmd_compare_pixels(args.file_a, args.file_b, as_json=as_json)

    elif args.command == "report":
        return cmd_show_report(state, args.detailed, as_json)

    elif args.command == "worker":
        return cmd_worker(args.cache_db, args.file, skip_log=skip_log)

    raise ValueError(f"Unknown command: {args.command}")


def main(argv=None):
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if getattr(args, 'json', False):
        enable_json_logging(args.verbose)
    else:
        setup_logging(args.verbose)

    logging.debug("Parsed arguments: %s", args)

    try:
        code = run(args)
    except KeyboardInterrupt:
        if getattr(args, 'json', False):
            from .jsonio import error
            code = error(args.command, "Operation interrupted by user", code=130)
        else:
            logging.warning("Operation interrupted by user.")
            code = 130
    except MediadupError as e:
        if getattr(args, 'json', False):
            from .jsonio import error
            code = error(args.command, str(e), debug={"exception_type": type(e).__name__}, code=2)
        else:
            logging.error("%s", e)
            code = 2
    except Exception as e:
        if getattr(args, 'json', False):
            from .jsonio import error
            debug_info = {"exception_type": type(e).__name__} if args.verbose else None
            code = error(args.command, str(e), debug=debug_info, code=1)
        else:
            logging.error("Error occurred: %s", e, exc_info=args.verbose)
            code = 1
    sys.exit(code)


if __name__ == "__main__":
    main()
