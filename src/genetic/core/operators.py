"""
Genetic Operators for Team Evolution.

Selection, crossover, mutation, and elitism over team chromosomes. Every
operator preserves the two team invariants: anchor slots are never changed
and no base species appears twice. Operators never raise on an
unsatisfiable repair; they fall back to an unmodified copy instead.
"""

from typing import List, Optional, Sequence
import math
import random

from src.genetic.core.chromosome import TeamChromosome
from src.genetic.core.config import TournamentMode
from src.genetic.core.population import sort_by_fitness
from src.knowledge.store import base_species, validate_team_uniqueness


DEFAULT_ELITE_FRACTION = 0.1

# Diversity bands for adaptive mutation
LOW_DIVERSITY = 0.3
HIGH_DIVERSITY = 0.7
MAX_ADAPTIVE_RATE = 0.5
MIN_ADAPTIVE_RATE = 0.05


def default_elite_count(population_size: int) -> int:
    """10% of the population, rounded up."""
    return math.ceil(population_size * DEFAULT_ELITE_FRACTION)


def adaptive_mutation_rate(diversity: float, base_rate: float = 0.2) -> float:
    """
    Adjust the mutation rate from population diversity.

    Low diversity doubles the rate (capped at 0.5), high diversity halves it
    (floored at 0.05); anything in between keeps the base rate.
    """
    if diversity < LOW_DIVERSITY:
        return min(base_rate * 2, MAX_ADAPTIVE_RATE)
    if diversity > HIGH_DIVERSITY:
        return max(base_rate * 0.5, MIN_ADAPTIVE_RATE)
    return base_rate


class GeneticOperators:
    """
    Operators bound to a single random source.

    Sharing one seeded random.Random between construction, operators, and
    the search loop makes runs reproducible.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def tournament_selection(
        self, population: List[TeamChromosome], tournament_size: int = 3
    ) -> TeamChromosome:
        """Best of `tournament_size` uniform draws with replacement; first wins ties."""
        best = population[self.rng.randrange(len(population))]
        for _ in range(tournament_size - 1):
            contender = population[self.rng.randrange(len(population))]
            if contender.fitness > best.fitness:
                best = contender
        return best

    def crossover(
        self, parent1: TeamChromosome, parent2: TeamChromosome, mode: TournamentMode
    ) -> TeamChromosome:
        """
        Single-point crossover that keeps anchors and species uniqueness.

        The child starts as a copy of parent1. From a random mutable cut point
        onwards each mutable slot takes parent2's member unless its base
        species is already on the team.

        Args:
            parent1: Parent supplying anchors and the prefix
            parent2: Parent supplying the suffix
            mode: Tournament format, fixing the team size

        Returns:
            New child chromosome
        """
        team_size = TournamentMode.parse(mode).team_size
        child = parent1.clone()

        mutable = child.mutable_slots(team_size)
        if not mutable:
            return child

        cut = mutable[self.rng.randrange(len(mutable))]

        used = set()
        for index in child.anchors:
            if index < len(child.team):
                used.add(base_species(child.team[index]))
        for slot in mutable:
            if slot < cut:
                used.add(base_species(child.team[slot]))

        for slot in mutable:
            if slot >= cut and slot < len(parent2.team):
                candidate = parent2.team[slot]
                candidate_base = base_species(candidate)
                if candidate_base not in used:
                    child.team[slot] = candidate
                    used.add(candidate_base)

        if not validate_team_uniqueness(child.team):
            return parent1.clone()
        return child

    def mutate(
        self,
        chromosome: TeamChromosome,
        pool: Sequence[str],
        mutation_rate: float,
        mode: TournamentMode,
    ) -> TeamChromosome:
        """
        Replace one random mutable slot with an unused pool member.

        Returns an unmodified copy when the mutation roll fails, there are no
        mutable slots, or every pool member's base species is already taken.
        """
        if self.rng.random() >= mutation_rate:
            return chromosome.clone()

        team_size = TournamentMode.parse(mode).team_size
        mutated = chromosome.clone()

        mutable = mutated.mutable_slots(team_size)
        if not mutable:
            return mutated

        slot = mutable[self.rng.randrange(len(mutable))]

        used = {base_species(key) for key in mutated.team}
        available = [key for key in pool if base_species(key) not in used]
        if not available:
            return mutated

        mutated.team[slot] = available[self.rng.randrange(len(available))]

        if not validate_team_uniqueness(mutated.team):
            return chromosome.clone()
        return mutated

    def select_elites(self, population: List[TeamChromosome], elite_count: int) -> List[TeamChromosome]:
        """Clones of the `elite_count` fittest chromosomes."""
        return [c.clone() for c in sort_by_fitness(population)[:elite_count]]

    def create_next_generation(
        self,
        population: List[TeamChromosome],
        pool: Sequence[str],
        mode: TournamentMode,
        elite_count: Optional[int] = None,
        crossover_rate: float = 0.8,
        mutation_rate: float = 0.2,
        tournament_size: int = 3,
    ) -> List[TeamChromosome]:
        """
        Assemble the next generation.

        Elites are carried over first; the rest are children of two
        independently selected parents, crossed over with probability
        `crossover_rate` and then offered to mutation.

        Returns:
            List of the same length as `population`
        """
        if elite_count is None:
            elite_count = default_elite_count(len(population))

        next_generation = self.select_elites(population, elite_count)

        while len(next_generation) < len(population):
            parent1 = self.tournament_selection(population, tournament_size)
            parent2 = self.tournament_selection(population, tournament_size)

            if self.rng.random() < crossover_rate:
                child = self.crossover(parent1, parent2, mode)
            else:
                child = parent1.clone()

            child = self.mutate(child, pool, mutation_rate, mode)
            next_generation.append(child)

        return next_generation
