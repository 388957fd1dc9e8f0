"""Terraform module index: sync, structural extraction and release diffs."""

__version__ = "1.0.0"
