"""
Pokémon GO Team Optimizer - Source Package

This package contains the components of the team optimizer: the type chart,
the knowledge base (records, store, loaders), and the genetic search with its
multi-component fitness function.
"""

__version__ = "1.0.0"
__author__ = "DevQ.ai Team"

# Package-level imports for convenience
from src.core.config import settings

__all__ = [
    "settings",
    "__version__",
    "__author__",
]
