"""
Genetic Team Optimizer.

This package implements the evolutionary search for competitive teams:
greedy team construction, constraint-preserving genetic operators, and a
weighted multi-component fitness function.
"""

from src.genetic.core import (
    OptimizerConfig,
    TournamentMode,
    TeamChromosome,
    TeamOptimizer,
    SearchResult,
    InvalidAnchorError,
    TeamConstructionError,
    create_default_config,
    create_test_config,
    create_exhaustive_config
)
from src.genetic.fitness import TeamFitness

__version__ = "1.0.0"

__all__ = [
    "OptimizerConfig",
    "TournamentMode",
    "TeamChromosome",
    "TeamOptimizer",
    "SearchResult",
    "InvalidAnchorError",
    "TeamConstructionError",
    "create_default_config",
    "create_test_config",
    "create_exhaustive_config",
    "TeamFitness",
]
