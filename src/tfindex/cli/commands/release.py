"""Release commands for tfindex CLI."""

from ...core.config import Config
from ...releases.matcher import DEFAULT_MAX_LINES
from ...services import ServiceContainer


def add_release_arguments(parser) -> None:
    """Add the release subcommands.

    Args:
        parser: Argument parser for the ``release`` command.
    """
    subparsers = parser.add_subparsers(dest="release_cmd", required=True)

    show_parser = subparsers.add_parser("show", help="Show a release summary")
    show_parser.add_argument("module", help="Module name or owner/name")
    show_parser.add_argument("version", nargs="?", help="Version or tag (default: latest)")

    backfill_parser = subparsers.add_parser(
        "backfill", help="Store a release from the indexed CHANGELOG.md"
    )
    backfill_parser.add_argument("module", help="Module name or owner/name")
    backfill_parser.add_argument("version", help="Version or tag")

    snippet_parser = subparsers.add_parser(
        "snippet", help="Show the diff that implemented a changelog entry"
    )
    snippet_parser.add_argument("module", help="Module name or owner/name")
    snippet_parser.add_argument("version", help="Version or tag")
    snippet_parser.add_argument("query", help="Entry identifier or words from its title")
    snippet_parser.add_argument(
        "-n",
        "--max-lines",
        type=int,
        default=DEFAULT_MAX_LINES,
        help=f"Maximum diff lines to show (default: {DEFAULT_MAX_LINES})",
    )
    snippet_parser.add_argument(
        "--fallback",
        help="Alternative text to match against entry titles",
    )


def handle_release(args, config: Config) -> None:
    """Dispatch ``release`` subcommands.

    Args:
        args: Parsed command arguments.
        config: Application configuration.
    """
    with ServiceContainer(config) as services:
        if args.release_cmd == "show":
            print(services.releases.get_release_summary(args.module, args.version))
        elif args.release_cmd == "backfill":
            release, entries = services.releases.backfill_release(args.module, args.version)
            print(f"✓ Backfilled release {release.tag} for {args.module} with {len(entries)} entries")
        elif args.release_cmd == "snippet":
            print(
                services.releases.get_release_snippet(
                    args.module,
                    args.version,
                    args.query,
                    max_lines=args.max_lines,
                    fallback=args.fallback,
                )
            )
