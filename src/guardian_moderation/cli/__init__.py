"""
Guardian Moderation CLI

Unified command-line interface for the Guardian moderation engine.
"""

from .main import cli, main

__all__ = ["cli", "main"]
