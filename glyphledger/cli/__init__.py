"""Command-line interface for glyphledger."""
from .main import cli

__all__ = ["cli"]
