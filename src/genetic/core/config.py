"""
Optimizer Configuration Module.

This module defines configuration classes for the team optimizer, including
the tournament modes, evolution parameters, fitness component weights, and
logging/parallelization settings.
"""

from enum import Enum
from typing import Optional, Dict, Any, Literal
from pydantic import BaseModel, Field, ConfigDict, field_validator
import os


class UnknownModeError(ValueError):
    """Raised when a tournament mode name is not recognized."""
    pass


class TournamentMode(str, Enum):
    """Competitive formats supported by the optimizer."""

    GBL = "GBL"
    PLAY_POKEMON = "PlayPokemon"

    @property
    def team_size(self) -> int:
        """Number of team slots for this format."""
        return 3 if self is TournamentMode.GBL else 6

    @classmethod
    def parse(cls, value: Any) -> "TournamentMode":
        """Parse a mode from its value or member name, case-insensitively."""
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower().replace("-", "_")
        for mode in cls:
            if normalized in (mode.value.lower(), mode.name.lower(), mode.name.lower().replace("_", "")):
                return mode
        raise UnknownModeError(
            f"Unknown tournament mode '{value}'. Expected one of: "
            f"{', '.join(m.value for m in cls)}"
        )


class EvolutionParameters(BaseModel):
    """Parameters controlling the genetic search."""

    model_config = ConfigDict(validate_assignment=True)

    # Population parameters
    population_size: int = Field(
        default=150,
        ge=2,
        le=10000,
        description="Number of teams in each generation"
    )
    generations: int = Field(
        default=75,
        ge=1,
        le=1000,
        description="Generation budget of a search"
    )

    # Genetic operators
    mutation_rate: float = Field(
        default=0.2,
        ge=0.0,
        le=1.0,
        description="Probability that a child is mutated"
    )
    crossover_rate: float = Field(
        default=0.8,
        ge=0.0,
        le=1.0,
        description="Probability that two parents are recombined"
    )

    # Selection parameters
    elite_size: Optional[int] = Field(
        default=None,
        ge=0,
        description="Teams preserved verbatim each generation (None for 10% rounded up)"
    )
    tournament_size: int = Field(
        default=3,
        ge=1,
        description="Number of contestants in tournament selection"
    )

    # Advanced parameters
    adaptive_mutation: bool = Field(
        default=True,
        description="Adjust the mutation rate from population diversity between generations"
    )
    early_stopping: bool = Field(
        default=False,
        description="Stop once the top of the population has converged"
    )
    convergence_threshold: float = Field(
        default=0.01,
        gt=0.0,
        description="Fitness spread under which the population counts as converged"
    )
    stagnation_generations: Optional[int] = Field(
        default=None,
        ge=2,
        description="Stop once the best fitness has not moved for this many generations (None to disable)"
    )

    @field_validator('elite_size')
    def validate_elite_size(cls, v, info):
        """Ensure elite size is less than population size."""
        if v is not None and 'population_size' in info.data and v >= info.data['population_size']:
            raise ValueError('Elite size must be less than population size')
        return v


class FitnessConfig(BaseModel):
    """Weights of the fitness components and bonuses."""

    model_config = ConfigDict(validate_assignment=True)

    type_coverage_weight: float = Field(default=0.25, ge=0.0)
    ranking_weight: float = Field(default=0.15, ge=0.0)
    type_synergy_weight: float = Field(default=0.20, ge=0.0)
    stat_balance_weight: float = Field(default=0.12, ge=0.0)
    strategy_weight: float = Field(default=0.10, ge=0.0)
    type_diversity_weight: float = Field(default=0.08, ge=0.0)
    shadow_preference_weight: float = Field(default=0.08, ge=0.0)
    energy_weight: float = Field(default=0.05, ge=0.0)
    meta_threat_weight: float = Field(default=0.05, ge=0.0)

    surprise_bonus_weight: float = Field(
        default=0.15,
        ge=0.0,
        description="Weight of the off-meta bonus in the 3-slot format"
    )
    consistency_bonus_weight: float = Field(
        default=0.10,
        ge=0.0,
        description="Weight of the consistency bonus in the 6-slot format"
    )
    anchor_bonus_weight: float = Field(
        default=0.5,
        ge=0.0,
        description="Weight of the anchor synergy bonus when anchors are present"
    )
    meta_threat_limit: int = Field(
        default=50,
        ge=1,
        description="Number of leading meta threats considered"
    )
    cache_size: int = Field(
        default=0,
        ge=0,
        description="Memoized team evaluations (0 disables caching)"
    )

    def component_weights(self) -> Dict[str, float]:
        """Weights of the base components keyed by component name."""
        return {
            "type_coverage": self.type_coverage_weight,
            "ranking": self.ranking_weight,
            "type_synergy": self.type_synergy_weight,
            "stat_balance": self.stat_balance_weight,
            "strategy": self.strategy_weight,
            "type_diversity": self.type_diversity_weight,
            "shadow_preference": self.shadow_preference_weight,
            "energy": self.energy_weight,
            "meta_threat": self.meta_threat_weight,
        }


class LoggingConfig(BaseModel):
    """Progress reporting during a search."""

    enable_logging: bool = Field(
        default=True,
        description="Report generation progress"
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level"
    )
    log_interval: int = Field(
        default=10,
        ge=1,
        description="Generations between progress reports"
    )
    history_limit: int = Field(
        default=100,
        ge=1,
        description="Generation statistics retained in memory"
    )


class ParallelizationConfig(BaseModel):
    """Configuration for concurrent fitness evaluation."""

    enable_parallel: bool = Field(
        default=False,
        description="Evaluate each generation in a thread pool"
    )
    num_workers: Optional[int] = Field(
        default=None,
        ge=1,
        description="Number of worker threads (None for auto)"
    )
    chunk_size: int = Field(
        default=10,
        ge=1,
        description="Teams per evaluation chunk"
    )


class OptimizerConfig(BaseModel):
    """Main configuration class for the team optimizer."""

    model_config = ConfigDict(
        validate_assignment=True,
        extra='forbid'
    )

    # Sub-configurations
    evolution: EvolutionParameters = Field(
        default_factory=EvolutionParameters,
        description="Genetic search parameters"
    )
    fitness: FitnessConfig = Field(
        default_factory=FitnessConfig,
        description="Fitness component weights"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Progress reporting"
    )
    parallelization: ParallelizationConfig = Field(
        default_factory=ParallelizationConfig,
        description="Parallel evaluation configuration"
    )

    # General settings
    random_seed: Optional[int] = Field(
        default=None,
        description="Seed of the shared random source"
    )
    bracket: Optional[str] = Field(
        default=None,
        description="Restrict the candidate pool to characters with IVs for this CP bracket"
    )

    @classmethod
    def from_env(cls) -> "OptimizerConfig":
        """Read TEAMBUILDER_* environment overrides."""
        config_dict = {}

        # Evolution parameters from env
        if pop_size := os.getenv("TEAMBUILDER_POPULATION_SIZE"):
            config_dict.setdefault("evolution", {})["population_size"] = int(pop_size)
        if generations := os.getenv("TEAMBUILDER_GENERATIONS"):
            config_dict.setdefault("evolution", {})["generations"] = int(generations)
        if mutation_rate := os.getenv("TEAMBUILDER_MUTATION_RATE"):
            config_dict.setdefault("evolution", {})["mutation_rate"] = float(mutation_rate)
        if crossover_rate := os.getenv("TEAMBUILDER_CROSSOVER_RATE"):
            config_dict.setdefault("evolution", {})["crossover_rate"] = float(crossover_rate)
        if elite_size := os.getenv("TEAMBUILDER_ELITE_SIZE"):
            config_dict.setdefault("evolution", {})["elite_size"] = int(elite_size)
        if stagnation := os.getenv("TEAMBUILDER_STAGNATION_GENERATIONS"):
            config_dict.setdefault("evolution", {})["stagnation_generations"] = int(stagnation)
        if tournament_size := os.getenv("TEAMBUILDER_TOURNAMENT_SIZE"):
            config_dict.setdefault("evolution", {})["tournament_size"] = int(tournament_size)

        # Parallelization from env
        if num_workers := os.getenv("TEAMBUILDER_NUM_WORKERS"):
            config_dict.setdefault("parallelization", {})["num_workers"] = int(num_workers)

        # General settings
        if random_seed := os.getenv("TEAMBUILDER_RANDOM_SEED"):
            config_dict["random_seed"] = int(random_seed)
        if bracket := os.getenv("TEAMBUILDER_BRACKET"):
            config_dict["bracket"] = bracket

        return cls(**config_dict)

    @classmethod
    def from_settings(cls, settings) -> "OptimizerConfig":
        """Create configuration from application settings."""
        return cls(
            evolution=EvolutionParameters(
                population_size=settings.optimizer_population_size,
                generations=settings.optimizer_generations,
                mutation_rate=settings.optimizer_mutation_rate,
                crossover_rate=settings.optimizer_crossover_rate,
                tournament_size=settings.optimizer_tournament_size,
            ),
            logging=LoggingConfig(log_level=settings.log_level),
            random_seed=settings.optimizer_random_seed,
            bracket=settings.ranking_bracket or None,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return self.model_dump()

    def save(self, filepath: str) -> None:
        """Save configuration to JSON file."""
        import json
        with open(filepath, 'w') as f:
            json.dump(self.to_dict(), f, indent=2, default=str)

    @classmethod
    def load(cls, filepath: str) -> "OptimizerConfig":
        """Load configuration from JSON file."""
        import json
        with open(filepath, 'r') as f:
            data = json.load(f)
        return cls(**data)

    def validate_consistency(self) -> None:
        """Cross-field checks that single-field validation cannot express."""
        evolution = self.evolution
        if evolution.elite_size is not None and evolution.elite_size >= evolution.population_size:
            raise ValueError(
                f"Elite size ({evolution.elite_size}) must be less than "
                f"population size ({evolution.population_size})"
            )

        if evolution.tournament_size > evolution.population_size:
            raise ValueError(
                f"Tournament size ({evolution.tournament_size}) must not exceed "
                f"population size ({evolution.population_size})"
            )

        if evolution.stagnation_generations is not None and \
           evolution.stagnation_generations > self.logging.history_limit:
            raise ValueError(
                f"Stagnation window ({evolution.stagnation_generations}) must fit in the "
                f"history limit ({self.logging.history_limit})"
            )

        if sum(self.fitness.component_weights().values()) <= 0:
            raise ValueError("At least one fitness component weight must be positive")


# Convenience functions
def create_default_config() -> OptimizerConfig:
    """Create a default configuration matching the standard search budget."""
    return OptimizerConfig()


def create_test_config() -> OptimizerConfig:
    """Small, seeded configuration for unit tests."""
    return OptimizerConfig(
        evolution=EvolutionParameters(
            population_size=20,
            generations=5,
            mutation_rate=0.2,
            crossover_rate=0.8,
        ),
        logging=LoggingConfig(
            log_level="WARNING",
            log_interval=1
        ),
        parallelization=ParallelizationConfig(
            enable_parallel=False  # Deterministic ordering for tests
        ),
        random_seed=42
    )


def create_exhaustive_config() -> OptimizerConfig:
    """Create a configuration for long, thorough searches."""
    return OptimizerConfig(
        evolution=EvolutionParameters(
            population_size=400,
            generations=200,
            mutation_rate=0.2,
            crossover_rate=0.85,
            adaptive_mutation=True,
            early_stopping=True
        ),
        fitness=FitnessConfig(cache_size=50000),
        parallelization=ParallelizationConfig(
            enable_parallel=True
        ),
        logging=LoggingConfig(
            log_interval=25
        )
    )
