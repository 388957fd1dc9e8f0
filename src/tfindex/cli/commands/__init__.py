"""Command implementations for tfindex CLI."""

from .release import add_release_arguments, handle_release
from .search import (
    add_search_arguments,
    add_show_arguments,
    handle_categories,
    handle_search,
    handle_show,
)
from .sync import (
    add_compare_arguments,
    add_sync_arguments,
    handle_compare,
    handle_sync,
    handle_update,
)

__all__ = [
    "add_release_arguments",
    "handle_release",
    "add_search_arguments",
    "add_show_arguments",
    "handle_categories",
    "handle_search",
    "handle_show",
    "add_compare_arguments",
    "add_sync_arguments",
    "handle_compare",
    "handle_sync",
    "handle_update",
]
