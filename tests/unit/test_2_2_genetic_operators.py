"""
Unit tests for Genetic Operators (Subtask 2.2).

Tests cover:
- Tournament selection
- Constraint-preserving crossover
- Fail-soft mutation
- Elitism and next-generation assembly
- Adaptive mutation rates
- Invariant preservation over randomized trials
"""

import random

import pytest

from src.genetic.core.chromosome import TeamBuilder, create_chromosome, is_valid_chromosome
from src.genetic.core.config import TournamentMode
from src.genetic.core.operators import GeneticOperators, adaptive_mutation_rate, default_elite_count
from src.knowledge.store import base_species


class ScriptedRandom(random.Random):
    """Random source whose randrange answers are scripted."""

    def __init__(self, picks, rolls=None):
        super().__init__(0)
        self.picks = list(picks)
        self.rolls = list(rolls or [])

    def randrange(self, *args, **kwargs):
        return self.picks.pop(0)

    def random(self):
        return self.rolls.pop(0) if self.rolls else super().random()


def _scored(team, fitness, anchors=None):
    chromosome = create_chromosome(team, anchors)
    chromosome.fitness = fitness
    return chromosome


class TestTournamentSelection:
    """Test suite for tournament selection."""

    def test_single_member(self, rng):
        """Test selection from a one-member population."""
        only = _scored(["a", "b", "c"], 0.1)

        assert GeneticOperators(rng).tournament_selection([only], 3) is only

    def test_large_tournament_finds_best(self):
        """Test that a large tournament returns the fittest member."""
        population = [_scored([str(i)], i / 10) for i in range(3)]

        winner = GeneticOperators(random.Random(3)).tournament_selection(population, 50)

        assert winner is population[2]

    def test_first_drawn_wins_ties(self):
        """Test tie handling."""
        first = _scored(["a"], 0.5)
        second = _scored(["b"], 0.5)
        operators = GeneticOperators(ScriptedRandom([1, 0, 1]))

        assert operators.tournament_selection([first, second], 3) is second

    def test_returns_the_member_itself(self):
        """Test that selection does not copy."""
        population = [_scored(["a"], 0.2), _scored(["b"], 0.9)]
        operators = GeneticOperators(ScriptedRandom([0, 1, 0]))

        assert operators.tournament_selection(population, 3) is population[1]


class TestCrossover:
    """Test suite for crossover."""

    def test_suffix_comes_from_second_parent(self):
        """Test single-point crossover at a known cut."""
        parent1 = create_chromosome(["medicham", "azumarill", "registeel"])
        parent2 = create_chromosome(["altaria", "swampert", "galvantula"])
        operators = GeneticOperators(ScriptedRandom([1]))

        child = operators.crossover(parent1, parent2, TournamentMode.GBL)

        assert child.team == ["medicham", "swampert", "galvantula"]
        assert child is not parent1
        assert parent1.team == ["medicham", "azumarill", "registeel"]

    def test_duplicate_species_are_skipped(self):
        """Test that used base species keep the first parent's member."""
        parent1 = create_chromosome(["medicham", "azumarill", "registeel"])
        parent2 = create_chromosome(["altaria", "medicham", "machamp_shadow"])
        operators = GeneticOperators(ScriptedRandom([1]))

        child = operators.crossover(parent1, parent2, TournamentMode.GBL)

        assert child.team == ["medicham", "azumarill", "machamp_shadow"]

    def test_anchors_are_kept(self):
        """Test that anchor slots never take the second parent's member."""
        parent1 = create_chromosome(["medicham", "azumarill", "registeel"], [0])
        parent2 = create_chromosome(["altaria", "swampert", "galvantula"], [0])
        operators = GeneticOperators(ScriptedRandom([0]))

        child = operators.crossover(parent1, parent2, TournamentMode.GBL)

        assert child.team == ["medicham", "swampert", "galvantula"]
        assert child.anchors == [0]

    def test_fully_anchored_team(self):
        """Test crossover without mutable slots."""
        parent1 = create_chromosome(["medicham", "azumarill", "registeel"], [0, 1, 2])
        parent2 = create_chromosome(["altaria", "swampert", "galvantula"])

        child = GeneticOperators(ScriptedRandom([])).crossover(parent1, parent2, TournamentMode.GBL)

        assert child.team == parent1.team
        assert child is not parent1


class TestMutation:
    """Test suite for mutation."""

    def test_failed_roll_returns_copy(self, rng, catalog_store):
        """Test that a zero rate never mutates."""
        chromosome = create_chromosome(["medicham", "azumarill", "registeel"])

        mutated = GeneticOperators(rng).mutate(chromosome, catalog_store.candidate_pool(), 0.0, TournamentMode.GBL)

        assert mutated.team == chromosome.team
        assert mutated is not chromosome

    def test_mutation_changes_one_mutable_slot(self, rng, catalog_store):
        """Test that exactly one non-anchor slot is replaced."""
        pool = catalog_store.candidate_pool()
        chromosome = create_chromosome(["medicham", "azumarill", "registeel"], [0, 1])
        operators = GeneticOperators(rng)

        for _ in range(20):
            mutated = operators.mutate(chromosome, pool, 1.0, TournamentMode.GBL)

            assert mutated.team[:2] == ["medicham", "azumarill"]
            assert mutated.team[2] != "registeel"
            assert mutated.team[2] in pool
            assert is_valid_chromosome(mutated, TournamentMode.GBL)
        assert chromosome.team == ["medicham", "azumarill", "registeel"]

    def test_no_unused_candidates(self, rng):
        """Test mutation when every pool member is already on the team."""
        chromosome = create_chromosome(["medicham", "azumarill", "registeel"])

        mutated = GeneticOperators(rng).mutate(
            chromosome, ["medicham", "azumarill", "registeel"], 1.0, TournamentMode.GBL
        )

        assert mutated.team == chromosome.team

    def test_fully_anchored_team(self, rng, catalog_store):
        """Test mutation without mutable slots."""
        chromosome = create_chromosome(["medicham", "azumarill", "registeel"], [0, 1, 2])

        mutated = GeneticOperators(rng).mutate(chromosome, catalog_store.candidate_pool(), 1.0, "GBL")

        assert mutated.team == chromosome.team


class TestElitismAndGenerations:
    """Test suite for elitism and generation assembly."""

    def test_default_elite_count(self):
        """Test 10% rounded up."""
        assert default_elite_count(50) == 5
        assert default_elite_count(15) == 2
        assert default_elite_count(1) == 1

    def test_select_elites_are_clones(self, rng):
        """Test elite selection."""
        population = [_scored([str(i)], i / 10) for i in range(5)]

        elites = GeneticOperators(rng).select_elites(population, 2)

        assert [e.team for e in elites] == [["4"], ["3"]]
        assert elites[0] is not population[4]
        assert elites[0].fitness == 0.4

    def test_next_generation_keeps_size_and_elites(self, rng, synthetic_store):
        """Test that elites lead the next generation."""
        pool = synthetic_store.candidate_pool()
        builder = TeamBuilder(synthetic_store, rng)
        population = builder.initialize_population(20, pool, 3)
        for index, chromosome in enumerate(population):
            chromosome.fitness = index / 20

        next_generation = GeneticOperators(rng).create_next_generation(population, pool, TournamentMode.GBL)

        assert len(next_generation) == 20
        assert next_generation[0].team == population[19].team
        assert next_generation[1].team == population[18].team
        assert all(is_valid_chromosome(c, TournamentMode.GBL) for c in next_generation)

    def test_next_generation_without_crossover_or_mutation(self, rng, catalog_store):
        """Test that children are copies of selected parents when both rates are zero."""
        pool = catalog_store.candidate_pool()
        population = TeamBuilder(catalog_store, rng).initialize_population(10, pool, 3)
        teams = [c.team for c in population]

        next_generation = GeneticOperators(rng).create_next_generation(
            population, pool, TournamentMode.GBL, elite_count=0, crossover_rate=0.0, mutation_rate=0.0
        )

        assert all(child.team in teams for child in next_generation)


class TestAdaptiveMutation:
    """Test suite for adaptive mutation rates."""

    @pytest.mark.parametrize("diversity, base, expected", [
        (0.1, 0.2, 0.4),
        (0.1, 0.3, 0.5),
        (0.5, 0.2, 0.2),
        (0.9, 0.2, 0.1),
        (0.9, 0.05, 0.05),
    ])
    def test_rates(self, diversity, base, expected):
        """Test low, medium and high diversity bands."""
        assert adaptive_mutation_rate(diversity, base) == pytest.approx(expected)


class TestInvariantPreservation:
    """Randomized checks that operators keep teams legal."""

    @pytest.mark.parametrize("mode, anchors", [
        (TournamentMode.GBL, []),
        (TournamentMode.GBL, None),
        (TournamentMode.PLAY_POKEMON, []),
        (TournamentMode.PLAY_POKEMON, None),
    ])
    def test_operators_preserve_validity_and_anchors(self, synthetic_store, mode, anchors):
        """Test crossover and mutation over many random trials."""
        rng = random.Random(2024)
        pool = synthetic_store.candidate_pool()
        if anchors is None:
            by_base = {}
            for key in pool:
                by_base.setdefault(base_species(key), key)
            anchors = list(by_base.values())[:2]
        builder = TeamBuilder(synthetic_store, rng)
        operators = GeneticOperators(rng)

        for _ in range(200):
            parent1 = builder.random_chromosome(pool, mode.team_size, anchors)
            parent2 = builder.random_chromosome(pool, mode.team_size, anchors)

            child = operators.crossover(parent1, parent2, mode)
            mutated = operators.mutate(child, pool, 0.5, mode)

            for result in (child, mutated):
                assert is_valid_chromosome(result, mode)
                for index in result.anchors:
                    assert result.team[index] == parent1.team[index]
