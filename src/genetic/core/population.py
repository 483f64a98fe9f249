"""
Population Management for the Team Optimizer.

This module provides the population-level utilities used by the operators and
the search loop (sorting, diversity, convergence detection) and a tracker
that records per-generation statistics and the best team seen so far.
"""

from typing import List, Optional, Dict, Any
from datetime import datetime
import math
import statistics

import numpy as np

from src.genetic.core.chromosome import TeamChromosome


# Share of the sorted population inspected for convergence
CONVERGENCE_SLICE = 0.3


def sort_by_fitness(population: List[TeamChromosome]) -> List[TeamChromosome]:
    """New list sorted by descending fitness (stable for equal scores)."""
    return sorted(population, key=lambda c: c.fitness, reverse=True)


def best_chromosome(population: List[TeamChromosome]) -> TeamChromosome:
    return sort_by_fitness(population)[0]


def worst_chromosome(population: List[TeamChromosome]) -> TeamChromosome:
    return sort_by_fitness(population)[-1]


def calculate_diversity(population: List[TeamChromosome]) -> float:
    """
    Share of distinct teams in the population.

    Teams are compared ignoring slot order; the chromosomes themselves are
    left untouched.
    """
    if not population:
        return 0.0
    unique_teams = {c.signature for c in population}
    return len(unique_teams) / len(population)


def has_converged(population: List[TeamChromosome], threshold: float = 0.01) -> bool:
    """
    Check whether the top 30% of the population share nearly equal fitness.

    Args:
        population: Evaluated chromosomes
        threshold: Maximum fitness spread that counts as converged

    Returns:
        True if best minus the ceil(30%)-th best fitness is below the
        threshold, or if that slice is empty
    """
    ranked = sort_by_fitness(population)
    top = ranked[:math.ceil(len(population) * CONVERGENCE_SLICE)]
    if not top:
        return True
    return (top[0].fitness - top[-1].fitness) < threshold


class Population:
    """
    Tracks the current generation of a search.

    Holds the evaluated chromosomes, the best-ever chromosome (as an
    independent clone), and a bounded history of generation statistics.
    """

    def __init__(self, chromosomes: Optional[List[TeamChromosome]] = None,
                 generation: int = 0, history_limit: int = 100):
        """Initialize population tracker."""
        self.chromosomes: List[TeamChromosome] = list(chromosomes or [])
        self.generation = generation
        self.history_limit = history_limit
        self.best_ever: Optional[TeamChromosome] = None
        self.statistics: Dict[str, Any] = {}
        self.history: List[Dict[str, Any]] = []

    def __len__(self) -> int:
        return len(self.chromosomes)

    def replace(self, chromosomes: List[TeamChromosome]) -> None:
        """Replace the current generation wholesale."""
        self.chromosomes = list(chromosomes)
        self.generation += 1

    def update_best(self) -> bool:
        """
        Update the best-ever chromosome from the current generation.

        Returns:
            True if a strictly better chromosome was found
        """
        if not self.chromosomes:
            return False

        current = best_chromosome(self.chromosomes)
        if self.best_ever is None or current.fitness > self.best_ever.fitness:
            self.best_ever = current.clone()
            return True
        return False

    def diversity(self) -> float:
        return calculate_diversity(self.chromosomes)

    def has_converged(self, threshold: float = 0.01) -> bool:
        return has_converged(self.chromosomes, threshold)

    def calculate_statistics(self) -> Dict[str, Any]:
        """Calculate fitness statistics of the current generation."""
        if not self.chromosomes:
            return {}

        fitnesses = np.array([c.fitness for c in self.chromosomes], dtype=float)

        stats = {
            "generation": self.generation,
            "population_size": len(self.chromosomes),
            "best_fitness": float(np.max(fitnesses)),
            "worst_fitness": float(np.min(fitnesses)),
            "avg_fitness": float(np.mean(fitnesses)),
            "median_fitness": float(np.median(fitnesses)),
            "fitness_std": statistics.stdev(fitnesses.tolist()) if len(fitnesses) > 1 else 0.0,
            "diversity": self.diversity(),
            "unique_teams": len({c.signature for c in self.chromosomes}),
        }
        if self.best_ever is not None:
            stats["best_ever_fitness"] = self.best_ever.fitness

        self.statistics = stats
        return stats

    def record_history(self) -> Dict[str, Any]:
        """Record current population state in history."""
        entry = {
            **self.calculate_statistics(),
            "timestamp": datetime.now().isoformat()
        }
        self.history.append(entry)

        # Limit history size
        if len(self.history) > self.history_limit:
            self.history = self.history[-self.history_limit:]

        return entry

    def detect_stagnation(self, lookback: int = 5) -> bool:
        """Detect if the best fitness has stopped improving."""
        if len(self.history) < lookback:
            return False

        recent_best = [h.get("best_fitness", 0) for h in self.history[-lookback:]]
        return max(recent_best) - min(recent_best) < 0.001
