"""Sync and compare commands for tfindex CLI."""

import signal
import threading

from ...core.config import Config
from ...core.types import SyncProgress
from ...services import ServiceContainer


def add_sync_arguments(parser) -> None:
    """Add arguments for sync commands.

    Args:
        parser: Argument parser for the command.
    """
    parser.add_argument(
        "-o",
        "--org",
        help="GitHub organization (default: $GITHUB_ORG or cloudnationhq)",
    )
    parser.add_argument(
        "--no-changelogs",
        action="store_true",
        help="Skip release ingestion from CHANGELOG.md",
    )


def add_compare_arguments(parser) -> None:
    parser.add_argument("full_name", help="Repository as owner/name")
    parser.add_argument("from_tag", help="Base tag")
    parser.add_argument("to_tag", help="Head tag")
    parser.add_argument(
        "--patches",
        action="store_true",
        help="Print the patch of every changed file",
    )


def _apply_sync_arguments(args, config: Config) -> None:
    if args.org:
        config.github.org = args.org
    if args.no_changelogs:
        config.sync.ingest_changelogs = False


def _cancel_on_interrupt() -> threading.Event:
    """Event set by Ctrl-C so the pass stops after the current repository."""
    cancel = threading.Event()

    def _handler(signum, frame) -> None:
        if cancel.is_set():
            raise KeyboardInterrupt
        print("Interrupted: finishing current repository (Ctrl-C again to abort)")
        cancel.set()

    signal.signal(signal.SIGINT, _handler)
    return cancel


def handle_sync(args, config: Config) -> None:
    """Full sync of every eligible repository.

    Args:
        args: Parsed command arguments.
        config: Application configuration.
    """
    _apply_sync_arguments(args, config)
    cancel = _cancel_on_interrupt()
    with ServiceContainer(config) as services:
        progress = services.sync.sync_all(cancel=cancel)
    _print_progress(progress, "Full sync")


def handle_update(args, config: Config) -> None:
    """Incremental sync of repositories changed since the last pass."""
    _apply_sync_arguments(args, config)
    cancel = _cancel_on_interrupt()
    with ServiceContainer(config) as services:
        progress = services.sync.sync_updates(cancel=cancel)
    _print_progress(progress, "Incremental sync")
    if progress.updated_repos:
        print("Updated:")
        for name in progress.updated_repos:
            print(f"  {name}")


def handle_compare(args, config: Config) -> None:
    """Print the files changed between two tags."""
    with ServiceContainer(config) as services:
        result = services.sync.compare_tags(args.full_name, args.from_tag, args.to_tag)

    print(f"{args.full_name}: {args.from_tag}...{args.to_tag}")
    if result.html_url:
        print(f"Compare: {result.html_url}")
    print(f"Changed files: {len(result.files)}")
    for changed in result.files:
        status = f" [{changed.status}]" if changed.status else ""
        print(f"  {changed.filename}{status}")
        if args.patches and changed.patch:
            print(changed.patch)


def _print_progress(progress: SyncProgress, title: str) -> None:
    print(f"{title}{' (cancelled)' if progress.cancelled else ''}")
    print("=" * 50)
    print(f"Repositories: {progress.total_repos}")
    print(f"Processed: {progress.processed_repos}")
    if progress.skipped_repos:
        print(f"Skipped (up-to-date): {progress.skipped_repos}")
    print(f"Synced: {progress.synced_repos}")
    if progress.errors:
        print(f"Errors: {len(progress.errors)}")
        for error in progress.errors[:10]:
            print(f"  {error}")
