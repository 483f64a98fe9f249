"""
Lineup strategy fitness evaluation.

A lineup is an ordered (lead, switch, closer) triple. The 3-slot format plays
its whole team as one lineup; the 6-slot format brings six and picks three,
so every ordered triple of distinct members is scored and the best is kept.
"""

from itertools import permutations
from typing import Dict, Any, Optional, Sequence, Tuple

from src.genetic.core.chromosome import TeamChromosome
from src.genetic.core.config import TournamentMode
from src.genetic.fitness.base import FitnessFunction, FitnessMetrics
from src.knowledge.models import CharacterRecord
from src.knowledge.store import KnowledgeStore


LINEUP_SIZE = 3


class StrategyFitness(FitnessFunction):
    """Scores ABA / ABB / ABC lineup patterns."""

    name = "strategy"

    def __init__(self, store: KnowledgeStore, mode: TournamentMode,
                 config: Optional[Dict[str, Any]] = None):
        super().__init__(store, config)
        self.mode = TournamentMode.parse(mode)

    def score_lineup(self, lineup: Sequence[str]) -> float:
        """
        Score a (lead, switch, closer) lineup.

        +0.3 when lead and closer share a type, +0.3 when switch and closer
        share a type, +0.4 for at least five distinct types; capped at 1.
        """
        if len(lineup) != LINEUP_SIZE:
            return 0.0

        records = [self.store.character_by_key(key) for key in lineup]
        if any(record is None for record in records):
            return 0.0
        lead, switch, closer = records

        score = 0.0
        if set(lead.types) & set(closer.types):
            score += 0.3
        if set(switch.types) & set(closer.types):
            score += 0.3
        if len(set(lead.types) | set(switch.types) | set(closer.types)) >= 5:
            score += 0.4

        return min(score, 1.0)

    def best_lineup(self, team: Sequence[str]) -> Tuple[float, Optional[Tuple[str, ...]]]:
        """Best ordered triple of a 6-member team; the first best triple wins ties."""
        if len(team) != TournamentMode.PLAY_POKEMON.team_size:
            return 0.0, None

        best_score = 0.0
        best: Optional[Tuple[str, ...]] = None
        for lineup in permutations(team, LINEUP_SIZE):
            score = self.score_lineup(lineup)
            if best is None or score > best_score:
                best_score = score
                best = lineup
        return best_score, best

    def calculate_metrics(self, chromosome: TeamChromosome) -> FitnessMetrics:
        if self.mode is TournamentMode.GBL:
            score = self.score_lineup(chromosome.team)
            return FitnessMetrics(score=score, details={"lineup": list(chromosome.team)})

        score, lineup = self.best_lineup(chromosome.team)
        return FitnessMetrics(score=score, details={"lineup": list(lineup) if lineup else []})

    def evaluate(self, chromosome: TeamChromosome) -> float:
        return self.calculate_metrics(chromosome).score
