"""CLI entry point for tfindex."""

import argparse
import sys
from pathlib import Path
from typing import NoReturn

from .. import __version__
from ..core.config import Config
from ..utils.logging import configure_logging
from . import commands


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="tfindex",
        description="Terraform module indexer - sync, search and diff module repositories",
    )
    parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("-q", "--quiet", action="store_true", help="Warnings and errors only")
    parser.add_argument("--db", help="Index database path (default: $INDEX_PATH)")

    subparsers = parser.add_subparsers(dest="command", required=False)

    # Sync commands
    sync_parser = subparsers.add_parser("sync", help="Full sync of all module repositories")
    commands.add_sync_arguments(sync_parser)

    update_parser = subparsers.add_parser("update", help="Sync repositories changed upstream")
    commands.add_sync_arguments(update_parser)

    compare_parser = subparsers.add_parser("compare", help="Files changed between two tags")
    commands.add_compare_arguments(compare_parser)

    # Release commands
    release_parser = subparsers.add_parser("release", help="Release metadata and diffs")
    commands.add_release_arguments(release_parser)

    # Query commands
    search_parser = subparsers.add_parser("search", help="Search indexed modules")
    commands.add_search_arguments(search_parser)

    show_parser = subparsers.add_parser("show", help="Show a module's structure")
    commands.add_show_arguments(show_parser)

    subparsers.add_parser("categories", help="List learned category tags")

    return parser


def main(argv: list[str] | None = None) -> NoReturn:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)
    configure_logging(verbose=args.verbose, quiet=args.quiet)

    config = Config.from_env()
    if args.db:
        config.db_path = Path(args.db)

    try:
        if args.command == "sync":
            commands.handle_sync(args, config)
        elif args.command == "update":
            commands.handle_update(args, config)
        elif args.command == "compare":
            commands.handle_compare(args, config)
        elif args.command == "release":
            commands.handle_release(args, config)
        elif args.command == "search":
            commands.handle_search(args, config)
        elif args.command == "show":
            commands.handle_show(args, config)
        elif args.command == "categories":
            commands.handle_categories(args, config)
        else:
            parser.print_help()

        sys.exit(0)
    except KeyboardInterrupt:
        print("Error: interrupted", file=sys.stderr)
        sys.exit(130)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
