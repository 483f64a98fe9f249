"""
Unit tests for the Team Chromosome model (Subtask 2.1).

Tests cover:
- Chromosome creation, cloning and serialization
- Team validity per tournament format
- Greedy incremental team construction
- Anchor placement
- Construction failure on exhausted pools
- Population sorting, diversity, convergence and statistics
"""

import random

import pytest

from src.genetic.core.chromosome import (
    TeamChromosome,
    TeamBuilder,
    TeamConstructionError,
    create_chromosome,
    is_valid_chromosome,
)
from src.genetic.core.config import TournamentMode
from src.genetic.core.population import (
    Population,
    sort_by_fitness,
    best_chromosome,
    worst_chromosome,
    calculate_diversity,
    has_converged,
)
from src.knowledge.store import base_species


def _with_fitness(team, fitness, anchors=None):
    chromosome = create_chromosome(team, anchors)
    chromosome.fitness = fitness
    return chromosome


class TestTeamChromosome:
    """Test suite for the chromosome representation."""

    def test_creation(self):
        """Test that new chromosomes start unscored."""
        chromosome = create_chromosome(["medicham", "azumarill", "registeel"], [0])

        assert chromosome.fitness == 0.0
        assert chromosome.breakdown == {}
        assert chromosome.anchors == [0]
        assert len(chromosome) == 3

    def test_clone_is_independent(self):
        """Test that clones never alias the team or anchors."""
        original = _with_fitness(["medicham", "azumarill", "registeel"], 0.8, [0])
        original.breakdown = {"ranking": 0.9}
        copy = original.clone()

        copy.team[1] = "altaria"
        copy.anchors.append(1)
        copy.breakdown["ranking"] = 0.1

        assert original.team == ["medicham", "azumarill", "registeel"]
        assert original.anchors == [0]
        assert original.breakdown == {"ranking": 0.9}
        assert copy.fitness == 0.8

    def test_signature_ignores_order(self):
        """Test order-independent identity."""
        first = create_chromosome(["medicham", "azumarill", "registeel"])
        second = create_chromosome(["registeel", "medicham", "azumarill"])

        assert first.signature == second.signature

    def test_mutable_slots(self):
        """Test anchor and mutable slot indices."""
        chromosome = create_chromosome(["a", "b", "c", "d", "e", "f"], [0, 2])

        assert chromosome.is_anchor_slot(2)
        assert not chromosome.is_anchor_slot(1)
        assert chromosome.mutable_slots() == [1, 3, 4, 5]
        assert chromosome.mutable_slots(3) == [1]

    def test_dict_round_trip(self):
        """Test serialization."""
        original = _with_fitness(["medicham", "azumarill", "registeel"], 0.75, [1])
        original.breakdown = {"strategy": 0.3}

        restored = TeamChromosome.from_dict(original.to_dict())

        assert restored.team == original.team
        assert restored.anchors == [1]
        assert restored.fitness == 0.75
        assert restored.breakdown == {"strategy": 0.3}

    def test_base_species(self):
        """Test base species of the members."""
        chromosome = create_chromosome(["marowak_alolan", "machamp_shadow", "medicham"])

        assert chromosome.base_species() == ["marowak", "machamp", "medicham"]


class TestChromosomeValidity:
    """Test suite for team validity."""

    def test_valid_three_slot_team(self):
        """Test a legal 3-slot team."""
        assert is_valid_chromosome(create_chromosome(["medicham", "azumarill", "registeel"]), TournamentMode.GBL)

    def test_wrong_size(self):
        """Test team size per format."""
        team = create_chromosome(["medicham", "azumarill", "registeel"])

        assert not is_valid_chromosome(team, TournamentMode.PLAY_POKEMON)
        assert not is_valid_chromosome(create_chromosome(["medicham"]), "GBL")

    def test_repeated_base_species(self):
        """Test that two forms of one species are illegal."""
        team = create_chromosome(["machamp", "machamp_shadow", "medicham"])

        assert not is_valid_chromosome(team, TournamentMode.GBL)


class TestTeamBuilder:
    """Test suite for greedy team construction."""

    @pytest.fixture
    def builder(self, catalog_store, rng):
        return TeamBuilder(catalog_store, rng)

    def test_random_team_is_valid(self, builder, catalog_store):
        """Test that constructed teams are legal for both formats."""
        pool = catalog_store.candidate_pool()

        for _ in range(25):
            gbl = builder.random_chromosome(pool, 3)
            play = builder.random_chromosome(pool, 6)

            assert is_valid_chromosome(gbl, TournamentMode.GBL)
            assert is_valid_chromosome(play, TournamentMode.PLAY_POKEMON)
            assert gbl.anchors == []
            assert all(key in pool for key in play.team)

    def test_anchors_take_leading_slots(self, builder, catalog_store):
        """Test that anchors are placed first, in order."""
        pool = catalog_store.candidate_pool()

        chromosome = builder.random_chromosome(pool, 3, ["azumarill", "medicham"])

        assert chromosome.team[:2] == ["azumarill", "medicham"]
        assert chromosome.anchors == [0, 1]
        assert base_species(chromosome.team[2]) not in ("azumarill", "medicham")

    def test_extra_anchors_are_truncated(self, builder, catalog_store):
        """Test that only team_size anchors are placed."""
        pool = catalog_store.candidate_pool()

        chromosome = builder.random_chromosome(pool, 3, ["azumarill", "medicham", "altaria", "swampert"])

        assert chromosome.team == ["azumarill", "medicham", "altaria"]
        assert chromosome.anchors == [0, 1, 2]

    def test_anchor_variants_block_their_species(self, builder, catalog_store):
        """Test that an anchored variant excludes its base species."""
        pool = catalog_store.candidate_pool()

        for _ in range(20):
            chromosome = builder.random_chromosome(pool, 6, ["machamp_shadow"])
            assert "machamp" not in chromosome.team

    def test_empty_pool_raises(self, builder):
        """Test construction from an empty pool."""
        with pytest.raises(TeamConstructionError) as exc_info:
            builder.random_chromosome([], 3)

        assert exc_info.value.pool_size == 0
        assert exc_info.value.team_size == 3

    def test_exhausted_pool_raises(self, builder):
        """Test a pool with fewer base species than slots."""
        with pytest.raises(TeamConstructionError) as exc_info:
            builder.random_chromosome(["machamp", "machamp_shadow"], 3)

        assert exc_info.value.pool_size == 2
        assert exc_info.value.used_species == 1
        assert "1000 attempts" in str(exc_info.value)

    def test_shadow_glass_cannon_bonus(self, builder, catalog_store):
        """Test that shadow glass cannons score higher."""
        machamp = catalog_store.character_by_key("machamp")
        shadow = catalog_store.character_by_key("machamp_shadow")

        assert builder._score_candidate("machamp", machamp, 0, [], {}) == 13
        assert builder._score_candidate("machamp_shadow", shadow, 0, [], {}) == 15

    def test_bulky_bonus_after_first_slot(self, builder, catalog_store):
        """Test the bonus for the first bulky member past slot 0."""
        azumarill = catalog_store.character_by_key("azumarill")
        machamp = catalog_store.character_by_key("machamp")

        assert builder._score_candidate("azumarill", azumarill, 0, [], {}) == 16
        assert builder._score_candidate("azumarill", azumarill, 1, [machamp], {"fighting": 1}) == 19

    def test_type_repeat_and_shared_weakness_penalties(self, builder, catalog_store):
        """Test penalties for a repeated type and two shared weaknesses."""
        medicham = catalog_store.character_by_key("medicham")
        machamp = catalog_store.character_by_key("machamp")

        # fighting repeated (-2), psychic new (+3), first bulky (+3), flying and fairy shared (-3)
        assert builder._score_candidate("medicham", medicham, 1, [machamp], {"fighting": 1}) == 11

    def test_initialize_population(self, builder, catalog_store):
        """Test building a whole population."""
        population = builder.initialize_population(15, catalog_store.candidate_pool(), 3, ["registeel"])

        assert len(population) == 15
        assert all(c.team[0] == "registeel" for c in population)
        assert all(is_valid_chromosome(c, TournamentMode.GBL) for c in population)

    def test_seeded_construction_is_reproducible(self, catalog_store):
        """Test that one seed builds the same teams."""
        pool = catalog_store.candidate_pool()
        first = TeamBuilder(catalog_store, random.Random(8)).initialize_population(5, pool, 3)
        second = TeamBuilder(catalog_store, random.Random(8)).initialize_population(5, pool, 3)

        assert [c.team for c in first] == [c.team for c in second]


class TestPopulationUtilities:
    """Test suite for population-level functions."""

    def test_sorting(self):
        """Test descending, stable ordering."""
        a = _with_fitness(["a", "b", "c"], 0.5)
        b = _with_fitness(["d", "e", "f"], 0.9)
        c = _with_fitness(["g", "h", "i"], 0.5)
        population = [a, b, c]

        assert sort_by_fitness(population) == [b, a, c]
        assert population == [a, b, c]
        assert best_chromosome(population) is b
        assert worst_chromosome(population) is c

    def test_diversity_ignores_slot_order(self):
        """Test diversity without reordering any team."""
        population = [
            create_chromosome(["a", "b", "c"]),
            create_chromosome(["c", "b", "a"]),
            create_chromosome(["a", "b", "d"]),
        ]

        assert calculate_diversity(population) == pytest.approx(2 / 3)
        assert population[1].team == ["c", "b", "a"]
        assert calculate_diversity([]) == 0.0

    def test_has_converged(self):
        """Test the top-30% spread check."""
        flat = [_with_fitness([str(i)], 1.0 - i * 0.001) for i in range(10)]
        spread = [_with_fitness([str(i)], 1.0 - i * 0.1) for i in range(10)]

        assert has_converged(flat)
        assert not has_converged(spread)
        assert has_converged(spread, threshold=0.25)
        assert has_converged([])


class TestPopulationTracker:
    """Test suite for the population tracker."""

    def test_update_best_keeps_a_clone(self):
        """Test that the best-ever chromosome is a snapshot."""
        leader = _with_fitness(["a", "b", "c"], 0.9)
        population = Population([leader, _with_fitness(["d", "e", "f"], 0.4)])

        assert population.update_best()
        leader.team[0] = "z"

        assert population.best_ever.team == ["a", "b", "c"]
        assert population.best_ever is not leader
        assert not population.update_best()

    def test_update_best_only_on_strict_improvement(self):
        """Test that ties keep the earlier best."""
        population = Population([_with_fitness(["a", "b", "c"], 0.7)])
        population.update_best()

        population.replace([_with_fitness(["d", "e", "f"], 0.7)])

        assert not population.update_best()
        assert population.best_ever.team == ["a", "b", "c"]
        assert population.generation == 1

    def test_statistics(self):
        """Test fitness statistics of a generation."""
        population = Population([
            _with_fitness(["a", "b", "c"], 0.2),
            _with_fitness(["c", "b", "a"], 0.4),
            _with_fitness(["d", "e", "f"], 0.9),
        ])

        stats = population.calculate_statistics()

        assert stats["best_fitness"] == 0.9
        assert stats["worst_fitness"] == 0.2
        assert stats["avg_fitness"] == pytest.approx(0.5)
        assert stats["median_fitness"] == pytest.approx(0.4)
        assert stats["fitness_std"] > 0
        assert stats["unique_teams"] == 2
        assert stats["diversity"] == pytest.approx(2 / 3)

    def test_single_member_statistics(self):
        """Test the spread of a one-team population."""
        stats = Population([_with_fitness(["a", "b", "c"], 0.3)]).calculate_statistics()

        assert stats["fitness_std"] == 0.0
        assert Population().calculate_statistics() == {}

    def test_history_is_bounded(self):
        """Test the history limit."""
        population = Population([_with_fitness(["a", "b", "c"], 0.3)], history_limit=3)

        for _ in range(5):
            population.record_history()

        assert len(population.history) == 3
        assert "timestamp" in population.history[-1]

    def test_detect_stagnation(self):
        """Test stagnation over the recent history."""
        population = Population([_with_fitness(["a", "b", "c"], 0.3)])

        assert not population.detect_stagnation(lookback=3)
        for _ in range(3):
            population.record_history()

        assert population.detect_stagnation(lookback=3)
