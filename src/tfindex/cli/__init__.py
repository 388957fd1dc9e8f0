"""Command line interface for tfindex."""

from .main import create_parser, main

__all__ = ["create_parser", "main"]
