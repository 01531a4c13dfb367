"""
Console configuration for the note generator.

This module sets up a Rich console for displaying output in a user-friendly manner.
"""
from rich.console import Console

console = Console()
