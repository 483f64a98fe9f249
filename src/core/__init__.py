"""
Core functionality for the Pokémon GO Team Optimizer.

This package holds the application settings shared by the command line
entry point and the optimizer.
"""

from src.core.config import settings

__all__ = [
    "settings",
]
