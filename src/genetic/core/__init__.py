"""
Genetic Core Module - Team Search Components.

This module contains the core components of the team optimizer, including
configuration, chromosome representation, population management, genetic
operators, and the main search engine.
"""

from src.genetic.core.config import (
    OptimizerConfig,
    EvolutionParameters,
    FitnessConfig,
    LoggingConfig,
    ParallelizationConfig,
    TournamentMode,
    UnknownModeError,
    create_default_config,
    create_test_config,
    create_exhaustive_config
)

from src.genetic.core.chromosome import (
    TeamChromosome,
    TeamBuilder,
    TeamConstructionError,
    create_chromosome,
    is_valid_chromosome
)

from src.genetic.core.population import (
    Population,
    sort_by_fitness,
    best_chromosome,
    worst_chromosome,
    calculate_diversity,
    has_converged
)

from src.genetic.core.operators import (
    GeneticOperators,
    adaptive_mutation_rate,
    default_elite_count
)

from src.genetic.core.engine import (
    TeamOptimizer,
    SearchResult,
    InvalidAnchorError
)

__all__ = [
    # Configuration
    "OptimizerConfig",
    "EvolutionParameters",
    "FitnessConfig",
    "LoggingConfig",
    "ParallelizationConfig",
    "TournamentMode",
    "UnknownModeError",
    "create_default_config",
    "create_test_config",
    "create_exhaustive_config",

    # Chromosome representation
    "TeamChromosome",
    "TeamBuilder",
    "TeamConstructionError",
    "create_chromosome",
    "is_valid_chromosome",

    # Population management
    "Population",
    "sort_by_fitness",
    "best_chromosome",
    "worst_chromosome",
    "calculate_diversity",
    "has_converged",

    # Operators
    "GeneticOperators",
    "adaptive_mutation_rate",
    "default_elite_count",

    # Engine
    "TeamOptimizer",
    "SearchResult",
    "InvalidAnchorError"
]
