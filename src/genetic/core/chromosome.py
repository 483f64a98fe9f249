"""
Team Chromosome Representation.

A chromosome is an ordered team of character keys plus the indices of the
slots locked by the user ("anchors"). This module also implements the greedy
incremental construction used to seed the initial population: each open slot
is filled with the best-scoring of a handful of sampled candidates, so later
slots see the typing and role choices of earlier ones.
"""

from typing import List, Dict, Any, Optional, Sequence, Tuple
import random

import logfire

from src.coverage.type_chart import SUPER_EFFECTIVE
from src.genetic.core.config import TournamentMode
from src.knowledge.models import CharacterRecord, GLASS_CANNON_THRESHOLD, BULKY_THRESHOLD
from src.knowledge.store import KnowledgeStore, base_species, validate_team_uniqueness


# Candidate sampling limits for greedy construction
CANDIDATES_PER_SLOT = 20
MAX_CANDIDATE_DRAWS = 100
MAX_FALLBACK_DRAWS = 1000


class TeamConstructionError(Exception):
    """Raised when no unused base species can be drawn from the pool."""

    def __init__(self, pool_size: int, used_species: int, team_size: int):
        super().__init__(
            f"Failed to find a unique character after {MAX_FALLBACK_DRAWS} attempts. "
            f"Pool size: {pool_size}, Used: {used_species}, Team size: {team_size}"
        )
        self.pool_size = pool_size
        self.used_species = used_species
        self.team_size = team_size


class TeamChromosome:
    """
    Chromosome representing a candidate team.

    Slots listed in `anchors` hold user-locked members that operators must
    never change.
    """

    def __init__(self, team: Optional[List[str]] = None, anchors: Optional[List[int]] = None):
        self.team: List[str] = list(team or [])
        self.anchors: List[int] = list(anchors or [])
        self.fitness: float = 0.0
        self.breakdown: Dict[str, float] = {}

    @property
    def signature(self) -> str:
        """Order-independent identity of the team."""
        return ",".join(sorted(self.team))

    def is_anchor_slot(self, index: int) -> bool:
        return index in self.anchors

    def mutable_slots(self, team_size: Optional[int] = None) -> List[int]:
        """Indices of the non-anchor slots."""
        size = len(self.team) if team_size is None else team_size
        return [i for i in range(size) if not self.is_anchor_slot(i)]

    def base_species(self) -> List[str]:
        return [base_species(key) for key in self.team]

    def to_dict(self) -> Dict[str, Any]:
        """Convert chromosome to dictionary representation."""
        return {
            "team": list(self.team),
            "anchors": list(self.anchors),
            "fitness": self.fitness,
            "breakdown": dict(self.breakdown),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TeamChromosome":
        """Create chromosome from dictionary representation."""
        chromosome = cls(team=data.get("team", []), anchors=data.get("anchors", []))
        chromosome.fitness = data.get("fitness", 0.0)
        chromosome.breakdown = dict(data.get("breakdown", {}))
        return chromosome

    def clone(self) -> "TeamChromosome":
        """Copy with independent team and anchor lists."""
        return TeamChromosome.from_dict(self.to_dict())

    def __len__(self) -> int:
        return len(self.team)

    def __repr__(self) -> str:
        return f"TeamChromosome(team={self.team}, anchors={self.anchors}, fitness={self.fitness:.4f})"


def create_chromosome(team: Sequence[str], anchors: Optional[Sequence[int]] = None) -> TeamChromosome:
    """Build a chromosome with fitness 0."""
    return TeamChromosome(list(team), list(anchors or []))


def is_valid_chromosome(chromosome: TeamChromosome, mode: TournamentMode) -> bool:
    """Team size matches the format and no base species repeats."""
    if len(chromosome.team) != TournamentMode.parse(mode).team_size:
        return False
    return validate_team_uniqueness(chromosome.team)


class TeamBuilder:
    """
    Builds random teams that respect base-species uniqueness.

    Candidates are scored by type novelty, role balance, and how many
    weaknesses they share with the members already placed.
    """

    def __init__(self, store: KnowledgeStore, rng: Optional[random.Random] = None):
        self.store = store
        self.rng = rng or random.Random()
        self.chart = store.type_chart

    def _weaknesses(self, record: CharacterRecord) -> List[str]:
        return self.chart.super_effective_types(record.types)

    def _score_candidate(
        self,
        key: str,
        record: CharacterRecord,
        slot_index: int,
        placed: List[CharacterRecord],
        type_counts: Dict[str, int],
    ) -> float:
        score = 10.0

        for type_name in record.types:
            count = type_counts.get(type_name, 0)
            if count >= 2:
                score -= 5
            elif count == 1:
                score -= 2
            else:
                score += 3

        glass_cannons = sum(1 for member in placed if member.bulk_ratio < GLASS_CANNON_THRESHOLD)
        bulky = sum(1 for member in placed if member.bulk_ratio >= BULKY_THRESHOLD)

        ratio = record.bulk_ratio
        if ratio < GLASS_CANNON_THRESHOLD:
            if glass_cannons >= 2:
                score -= 4
            if "_shadow" in key:
                score += 2
        elif ratio >= BULKY_THRESHOLD:
            if bulky == 0 and slot_index > 0:
                score += 3

        shared = 0
        for weakness in self._weaknesses(record):
            for member in placed:
                if self.chart.effectiveness(weakness, member.types) >= SUPER_EFFECTIVE:
                    shared += 1

        if shared >= 3:
            score -= 6
        elif shared == 2:
            score -= 3
        elif shared == 1:
            score -= 1

        return score

    def _fallback_draw(self, pool: Sequence[str], used: set, team_size: int) -> str:
        for _ in range(MAX_FALLBACK_DRAWS):
            key = self.rng.choice(pool)
            if base_species(key) not in used:
                return key
        raise TeamConstructionError(len(pool), len(used), team_size)

    def random_chromosome(
        self,
        pool: Sequence[str],
        team_size: int,
        anchor_keys: Optional[Sequence[str]] = None,
    ) -> TeamChromosome:
        """
        Build one team greedily, slot by slot.

        Args:
            pool: Candidate character keys
            team_size: Number of slots (3 or 6)
            anchor_keys: Keys locked into the leading slots, in order

        Returns:
            A chromosome with unique base species

        Raises:
            TeamConstructionError: If an open slot cannot be filled
        """
        team: List[str] = [""] * team_size
        anchors: List[int] = []
        used: set = set()
        type_counts: Dict[str, int] = {}
        placed: List[CharacterRecord] = []

        def place(index: int, key: str) -> None:
            team[index] = key
            used.add(base_species(key))
            record = self.store.character_by_key(key)
            if record is not None:
                placed.append(record)
                for type_name in record.types:
                    type_counts[type_name] = type_counts.get(type_name, 0) + 1

        for index, key in enumerate(list(anchor_keys or [])[:team_size]):
            place(index, key)
            anchors.append(index)

        candidate_limit = min(CANDIDATES_PER_SLOT, len(pool))

        for slot_index in range(team_size):
            if slot_index in anchors:
                continue

            selected: Optional[str] = None
            best_score = float("-inf")
            scored = 0
            draws = 0

            while scored < candidate_limit and draws < MAX_CANDIDATE_DRAWS:
                draws += 1
                key = self.rng.choice(pool)
                if base_species(key) in used:
                    continue
                record = self.store.character_by_key(key)
                if record is None:
                    continue

                scored += 1
                score = self._score_candidate(key, record, slot_index, placed, type_counts)
                if score > best_score:
                    best_score = score
                    selected = key

            if selected is None:
                if not pool:
                    raise TeamConstructionError(0, len(used), team_size)
                selected = self._fallback_draw(pool, used, team_size)

            place(slot_index, selected)

        return TeamChromosome(team, anchors)

    def initialize_population(
        self,
        size: int,
        pool: Sequence[str],
        team_size: int,
        anchor_keys: Optional[Sequence[str]] = None,
    ) -> List[TeamChromosome]:
        """Build `size` independent random teams."""
        with logfire.span("Initialize Population", size=size, team_size=team_size, pool_size=len(pool)):
            return [self.random_chromosome(pool, team_size, anchor_keys) for _ in range(size)]
