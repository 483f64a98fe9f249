"""
Ranking-based fitness evaluation.

Scores derived from the ranking tables: the team's mean aggregate ranking,
the off-meta "surprise" bonus of the 3-slot format, and the consistency
bonus of the 6-slot format.
"""

from typing import List

from src.genetic.core.chromosome import TeamChromosome
from src.genetic.fitness.base import FitnessFunction, FitnessMetrics
from src.knowledge.models import RankingRecord, EMPTY_RANKING


class RankingFitness(FitnessFunction):
    """Mean ranking average of the ranked members, scaled to [0, 1]."""

    name = "ranking"

    def rankings(self, chromosome: TeamChromosome) -> List[RankingRecord]:
        """Ranking per slot; unknown members get an empty ranking."""
        return [self.store.ranking_for_character(key) or EMPTY_RANKING for key in chromosome.team]

    def calculate_metrics(self, chromosome: TeamChromosome) -> FitnessMetrics:
        ranked = [r.average for r in self.rankings(chromosome) if r.average > 0]
        if not ranked:
            return FitnessMetrics(score=0.0, details={"ranked_members": 0})

        return FitnessMetrics(
            score=sum(ranked) / len(ranked) / 100,
            details={"ranked_members": len(ranked), "averages": ranked}
        )

    def evaluate(self, chromosome: TeamChromosome) -> float:
        return self.calculate_metrics(chromosome).score


class SurpriseFactorFitness(RankingFitness):
    """
    Off-meta bonus.

    Members with an overall score in [60, 80) add 0.3 and ranked members
    below 60 add 0.5; the sum is averaged over the team and capped at 1.
    """

    name = "surprise_factor"

    def evaluate(self, chromosome: TeamChromosome) -> float:
        if not chromosome.team:
            return 0.0

        score = 0.0
        for ranking in self.rankings(chromosome):
            if 60 <= ranking.overall < 80:
                score += 0.3
            if 0 < ranking.overall < 60:
                score += 0.5

        return min(score / len(chromosome.team), 1.0)

    def calculate_metrics(self, chromosome: TeamChromosome) -> FitnessMetrics:
        return FitnessMetrics(score=self.evaluate(chromosome), details={})


class ConsistencyFitness(RankingFitness):
    """Rewards members whose ranking average is at least 85 (full) or 75 (half)."""

    name = "consistency"

    def evaluate(self, chromosome: TeamChromosome) -> float:
        if not chromosome.team:
            return 0.0

        score = 0.0
        for ranking in self.rankings(chromosome):
            if ranking.average >= 85:
                score += 1.0
            elif ranking.average >= 75:
                score += 0.5

        return score / len(chromosome.team)

    def calculate_metrics(self, chromosome: TeamChromosome) -> FitnessMetrics:
        return FitnessMetrics(score=self.evaluate(chromosome), details={})
