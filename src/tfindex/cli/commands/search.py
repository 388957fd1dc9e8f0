"""Search and inspection commands for tfindex CLI."""

from ...core.config import Config
from ...services import ServiceContainer


def add_search_arguments(parser) -> None:
    """Add arguments for the search command.

    Args:
        parser: Argument parser for the command.
    """
    parser.add_argument("query", help="Search query")
    parser.add_argument(
        "-l",
        "--limit",
        type=int,
        default=20,
        help="Maximum results to return (default: 20)",
    )


def add_show_arguments(parser) -> None:
    parser.add_argument("module", help="Module name or owner/name")


def handle_search(args, config: Config) -> None:
    """Keyword search over module names, descriptions, tags and resources."""
    with ServiceContainer(config) as services:
        hits = services.search.search_modules(args.query, limit=args.limit)

    if not hits:
        print("No modules found.")
        return

    print(f"Search results for {args.query!r}")
    print("=" * 50)
    for hit in hits:
        module = hit.module
        print(f"[{hit.score:>3}] {module.name}")
        if module.description:
            print(f"      {module.description}")
        if module.tags:
            print(f"      tags: {', '.join(module.tags)}")


def handle_show(args, config: Config) -> None:
    """Print a module's structure."""
    with ServiceContainer(config) as services:
        module = services.releases.resolve_module(args.module)
        structure = services.structure_repo.get_structure(module.id)
        related = services.search.related_modules(module.name)

    print(module.name)
    print("=" * 50)
    if module.description:
        print(module.description)
    print(f"Provider: {module.provider or 'unknown'}")
    print(f"Tags: {', '.join(module.tags) or '-'}")
    print(f"Examples: {'yes' if module.has_examples else 'no'}")
    print(f"Last updated: {module.last_updated or '-'}")

    print(f"\nVariables ({len(structure.variables)}):")
    for variable in structure.variables:
        flag = "required" if variable.required else f"default = {variable.default_text}"
        sensitive = ", sensitive" if variable.sensitive else ""
        print(f"  {variable.name}: {variable.type or 'any'} ({flag}{sensitive})")

    print(f"\nOutputs ({len(structure.outputs)}):")
    for output in structure.outputs:
        print(f"  {output.name}{' (sensitive)' if output.sensitive else ''}")

    print(f"\nResources ({len(structure.resources)}):")
    for resource in structure.resources:
        print(f"  {resource.type}.{resource.name}")

    if structure.data_sources:
        print(f"\nData sources ({len(structure.data_sources)}):")
        for data_source in structure.data_sources:
            print(f"  data.{data_source.type}.{data_source.name}")

    if related:
        print("\nRelated modules:")
        for other in related:
            print(f"  {other.name}")


def handle_categories(args, config: Config) -> None:
    """List learned category tags and the modules carrying them."""
    with ServiceContainer(config) as services:
        categories = services.search.categories()

    if not categories:
        print("No categories learned yet. Run a sync first.")
        return

    for tag, names in categories.items():
        print(f"{tag} ({len(names)})")
        for name in names:
            print(f"  {name}")
