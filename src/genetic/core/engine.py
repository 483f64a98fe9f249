"""
Team Optimization Engine.

This module implements the search driver that orchestrates the evolution
process: anchor validation, population initialization, fitness evaluation,
best-team tracking, adaptive mutation, and next-generation assembly.
"""

import logging
import multiprocessing
import random
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Dict, Any, Sequence

import logfire

from src.genetic.core.chromosome import TeamChromosome, TeamBuilder
from src.genetic.core.config import OptimizerConfig, TournamentMode, create_default_config
from src.genetic.core.operators import GeneticOperators, adaptive_mutation_rate
from src.genetic.core.population import Population
from src.genetic.fitness.team_fitness import TeamFitness, CachedFitnessFunction
from src.knowledge.store import KnowledgeStore, base_species


class InvalidAnchorError(ValueError):
    """Raised when the requested anchors cannot form a legal team."""

    def __init__(self, message: str, anchors: Optional[Sequence[str]] = None):
        super().__init__(message)
        self.anchors = list(anchors or [])


@dataclass
class SearchResult:
    """Outcome of a team search."""

    team: List[str]
    fitness: float
    mode: TournamentMode
    anchors: List[int] = field(default_factory=list)
    generations_run: int = 0
    converged: bool = False
    breakdown: Dict[str, float] = field(default_factory=dict)
    history: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "team": list(self.team),
            "fitness": self.fitness,
            "mode": self.mode.value,
            "anchors": list(self.anchors),
            "generations_run": self.generations_run,
            "converged": self.converged,
            "breakdown": dict(self.breakdown),
        }


class TeamOptimizer:
    """
    Main engine for running the team search.

    One random.Random instance is shared by team construction and the
    genetic operators, so a seeded optimizer reproduces its runs.
    """

    def __init__(
        self,
        store: KnowledgeStore,
        config: Optional[OptimizerConfig] = None,
        rng: Optional[random.Random] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the optimizer.

        Args:
            store: Read-only knowledge store
            config: Optimizer configuration
            rng: Random source; seeded from config.random_seed when omitted
            logger: Optional logger instance
        """
        self.store = store
        self.config = config or create_default_config()
        self.config.validate_consistency()
        self.logger = logger or self._setup_logger()

        self.rng = rng or random.Random(self.config.random_seed)
        self.builder = TeamBuilder(store, self.rng)
        self.operators = GeneticOperators(self.rng)

        # State tracking
        self.current_population: Optional[Population] = None
        self.start_time: Optional[datetime] = None
        self.total_evaluations = 0

    def _setup_logger(self) -> logging.Logger:
        """Setup default logger."""
        logger = logging.getLogger("teambuilder.engine")
        logger.setLevel(getattr(logging, self.config.logging.log_level))

        if not logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            logger.addHandler(handler)

        return logger

    def create_fitness(self, mode: TournamentMode):
        """Fitness function for a mode, cached when configured."""
        fitness = TeamFitness(self.store, mode, self.config.fitness)
        if self.config.fitness.cache_size > 0:
            return CachedFitnessFunction(fitness, cache_size=self.config.fitness.cache_size)
        return fitness

    def validate_anchors(self, anchor_keys: Sequence[str], mode: TournamentMode) -> List[str]:
        """
        Check that anchors can be placed on a team of the mode's size.

        Raises:
            InvalidAnchorError: If there are more anchors than slots, two
                anchors share a base species, or an anchor is unknown
        """
        anchors = list(anchor_keys)
        team_size = mode.team_size

        if len(anchors) > team_size:
            raise InvalidAnchorError(
                f"{len(anchors)} anchors exceed the team size of {team_size} for {mode.value}",
                anchors,
            )

        seen = set()
        for key in anchors:
            base = base_species(key)
            if base in seen:
                raise InvalidAnchorError(f"Anchors repeat the base species '{base}'", anchors)
            seen.add(base)

            if self.store.character_by_key(key) is None:
                raise InvalidAnchorError(f"Unknown anchor '{key}'", anchors)

        return anchors

    def candidate_pool(self) -> List[str]:
        return self.store.candidate_pool(self.config.bracket)

    def search(
        self,
        mode: TournamentMode,
        anchor_keys: Sequence[str] = (),
        population_size: Optional[int] = None,
        generations: Optional[int] = None,
    ) -> SearchResult:
        """
        Search for the best team.

        Args:
            mode: Tournament format (fixes team size and mode bonus)
            anchor_keys: Characters locked into the leading slots, in order
            population_size: Teams per generation (defaults to config)
            generations: Generation budget (defaults to config)

        Returns:
            SearchResult with the best team ever evaluated

        Raises:
            ValueError: If population_size or generations is below 1
            InvalidAnchorError: If the anchors are invalid
            TeamConstructionError: If the pool cannot fill a team
        """
        mode = TournamentMode.parse(mode)
        evolution = self.config.evolution
        if population_size is None:
            population_size = evolution.population_size
        if generations is None:
            generations = evolution.generations
        if population_size < 1 or generations < 1:
            raise ValueError(
                f"Population size ({population_size}) and generations ({generations}) must be at least 1"
            )

        anchors = self.validate_anchors(anchor_keys, mode)
        pool = self.candidate_pool()
        fitness = self.create_fitness(mode)

        with logfire.span("Team Search",
                          mode=mode.value,
                          anchors=anchors,
                          population_size=population_size,
                          generations=generations,
                          pool_size=len(pool)):

            self.start_time = datetime.now()
            self.logger.info(
                f"Starting {mode.value} search with population size {population_size}, "
                f"{generations} generations, pool of {len(pool)}"
            )

            self.current_population = Population(
                self.builder.initialize_population(population_size, pool, mode.team_size, anchors),
                history_limit=self.config.logging.history_limit,
            )
            population = self.current_population

            elite_count = evolution.elite_size
            if elite_count is not None and elite_count >= population_size:
                elite_count = None

            mutation_rate = evolution.mutation_rate
            early_stopped = False
            generations_run = 0

            executor = None
            if self.config.parallelization.enable_parallel:
                num_workers = self.config.parallelization.num_workers or multiprocessing.cpu_count()
                executor = ThreadPoolExecutor(max_workers=num_workers)

            try:
                for generation in range(generations):
                    with logfire.span("Generation", generation=generation):
                        self._evaluate_population(population.chromosomes, fitness, executor)
                        generations_run = generation + 1

                        # Update statistics and best team
                        if population.update_best():
                            self.logger.debug(
                                f"New best at generation {generation}: {population.best_ever.fitness:.4f}"
                            )
                        stats = population.record_history()

                        if self.config.logging.enable_logging and \
                           generation % self.config.logging.log_interval == 0:
                            self._log_progress(generation, stats, mutation_rate)

                        if evolution.early_stopping and population.has_converged(evolution.convergence_threshold):
                            self.logger.info(f"Population converged at generation {generation}")
                            early_stopped = True
                            break

                        if evolution.stagnation_generations is not None and \
                           population.detect_stagnation(evolution.stagnation_generations):
                            self.logger.info(
                                f"Best fitness stagnated for {evolution.stagnation_generations} "
                                f"generations, stopping at generation {generation}"
                            )
                            break

                        if evolution.adaptive_mutation:
                            mutation_rate = adaptive_mutation_rate(stats["diversity"], evolution.mutation_rate)

                        # Create next generation (unless last generation)
                        if generation < generations - 1:
                            with logfire.span("Create Next Generation"):
                                population.replace(self.operators.create_next_generation(
                                    population.chromosomes,
                                    pool,
                                    mode,
                                    elite_count=elite_count,
                                    crossover_rate=evolution.crossover_rate,
                                    mutation_rate=mutation_rate,
                                    tournament_size=evolution.tournament_size,
                                ))
            finally:
                if executor:
                    executor.shutdown(wait=True)

            best = population.best_ever
            elapsed_time = datetime.now() - self.start_time
            self.logger.info(
                f"Search completed in {elapsed_time}: best fitness {best.fitness:.4f} "
                f"with {best.team}"
            )

            return SearchResult(
                team=list(best.team),
                fitness=best.fitness,
                mode=mode,
                anchors=list(best.anchors),
                generations_run=generations_run,
                converged=early_stopped or population.has_converged(evolution.convergence_threshold),
                breakdown=dict(best.breakdown),
                history=list(population.history),
            )

    def _evaluate_population(self, chromosomes: List[TeamChromosome], fitness,
                             executor: Optional[ThreadPoolExecutor]) -> None:
        """Evaluate fitness for every chromosome of the generation."""
        with logfire.span("Evaluate Population", size=len(chromosomes)):
            if executor is None:
                fitness.evaluate_population(chromosomes)
            else:
                chunk_size = self.config.parallelization.chunk_size
                chunks = [chromosomes[i:i + chunk_size] for i in range(0, len(chromosomes), chunk_size)]
                # map() yields results in submission order
                for _ in executor.map(fitness.evaluate_population, chunks):
                    pass

            self.total_evaluations += len(chromosomes)

    def _log_progress(self, generation: int, stats: Dict[str, Any], mutation_rate: float) -> None:
        """Log evolution progress."""
        self.logger.info(
            f"Generation {generation}: "
            f"Best: {stats.get('best_fitness', 0):.4f}, "
            f"Avg: {stats.get('avg_fitness', 0):.4f}, "
            f"Diversity: {stats.get('diversity', 0):.2f}"
        )

        metrics = {
            "evolution_generation": generation,
            **{k: v for k, v in stats.items() if k not in ("generation", "timestamp")},
            "mutation_rate": mutation_rate,
            "total_evaluations": self.total_evaluations,
        }
        logfire.info("Evolution Progress", **metrics)

    def describe_team(self, team: Sequence[str], bracket: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        Member details for display.

        Returns:
            One dict per member with typing, role, ranking, resource cost,
            and recommended moveset; unknown keys only carry the key
        """
        bracket = bracket or self.config.bracket or "cp1500"
        details = []
        for key in team:
            record = self.store.character_by_key(key)
            if record is None:
                details.append({"species_id": key})
                continue

            ranking = self.store.rankings_for(record.species_name)
            moveset = self.store.recommended_moveset(record)
            details.append({
                "species_id": record.species_id,
                "name": record.species_name,
                "types": list(record.types),
                "role": record.role,
                "bulk_ratio": round(record.bulk_ratio, 3),
                "ranking_average": ranking.average if ranking else None,
                "ranking_overall": ranking.overall if ranking else None,
                "fast_move": moveset.fast_move,
                "charged_moves": list(moveset.charged_moves),
                "resource_cost": self.store.resource_cost(record, bracket),
            })
        return details
