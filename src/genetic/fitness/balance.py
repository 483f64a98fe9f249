"""
Stat balance fitness evaluation.

Members are classified by bulk ratio ((defense + stamina) / attack) into
glass cannons (< 1.8), balanced (1.8 to 2.5), and bulky (>= 2.5). These
components reward a mix of roles and shadow forms on the right roles.
"""

from typing import Dict

from src.genetic.core.chromosome import TeamChromosome
from src.genetic.fitness.base import FitnessFunction, FitnessMetrics
from src.knowledge.models import GLASS_CANNON_THRESHOLD, BULKY_THRESHOLD


class StatBalanceFitness(FitnessFunction):
    """Rewards a mix of bulky, balanced, and attack-weighted members."""

    name = "stat_balance"

    def role_counts(self, chromosome: TeamChromosome) -> Dict[str, int]:
        counts = {"bulky": 0, "balanced": 0, "glass_cannon": 0}
        for record in self.members(chromosome):
            counts[record.role] += 1
        return counts

    def calculate_metrics(self, chromosome: TeamChromosome) -> FitnessMetrics:
        counts = self.role_counts(chromosome)
        total = sum(counts.values())
        if total == 0:
            return FitnessMetrics(score=0.0, details=counts)

        score = 1.0

        # Too many glass cannons
        if counts["glass_cannon"] > total * 0.5:
            score -= 0.3
        elif counts["glass_cannon"] > total * 0.4:
            score -= 0.15

        # Too frail overall
        if counts["bulky"] == 0 and counts["balanced"] <= 1:
            score -= 0.3

        if counts["bulky"] >= 1:
            score += 0.1
        if counts["balanced"] >= 2:
            score += 0.1

        return FitnessMetrics(score=max(0.0, score), details=counts)

    def evaluate(self, chromosome: TeamChromosome) -> float:
        return self.calculate_metrics(chromosome).score


class ShadowPreferenceFitness(FitnessFunction):
    """
    Shadow forms belong on glass cannons.

    Per member: +0.15 for a shadow glass cannon, -0.05 for a non-shadow glass
    cannon whose shadow variant exists but is not on the team, -0.05 for a
    shadow bulky member. Averaged over the resolved members, so the score
    can be slightly negative.
    """

    name = "shadow_preference"

    def evaluate(self, chromosome: TeamChromosome) -> float:
        members = self.members(chromosome)
        if not members:
            return 0.0

        score = 0.0
        for record in members:
            ratio = record.bulk_ratio

            if ratio < GLASS_CANNON_THRESHOLD:
                if record.is_shadow:
                    score += 0.15
                else:
                    shadow_key = f"{record.species_id}_shadow"
                    variant = self.store.character_by_key(shadow_key)
                    if variant is not None and "shadow" in variant.tags and shadow_key not in chromosome.team:
                        score -= 0.05

            if ratio >= BULKY_THRESHOLD and record.is_shadow:
                score -= 0.05

        return score / len(members)
