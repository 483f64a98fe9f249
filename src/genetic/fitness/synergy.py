"""
Type synergy fitness evaluation.

This module covers the components that look at how member typings interact:
duplicate types, stacked weaknesses, teammates resisting each other's
weaknesses, and the support the rest of the team gives the anchors.
"""

from typing import Dict, Any, List

from src.coverage.type_chart import SUPER_EFFECTIVE, NOT_VERY_EFFECTIVE
from src.genetic.core.chromosome import TeamChromosome
from src.genetic.fitness.base import FitnessFunction, FitnessMetrics
from src.knowledge.models import CharacterRecord


class TypeDiversityFitness(FitnessFunction):
    """Penalizes repeated types: -0.3 per type on 3+ members, -0.1 per type on exactly 2."""

    name = "type_diversity"

    def evaluate(self, chromosome: TeamChromosome) -> float:
        members = self.members(chromosome)
        if not members:
            return 0.0

        type_counts: Dict[str, int] = {}
        for record in members:
            for type_name in record.types:
                type_counts[type_name] = type_counts.get(type_name, 0) + 1

        score = 1.0
        for count in type_counts.values():
            if count >= 3:
                score -= 0.3
            elif count == 2:
                score -= 0.1

        return max(0.0, score)


class TypeSynergyFitness(FitnessFunction):
    """
    Stacked-weakness penalty plus mutual-cover bonus.

    Each type that 4+, 3, or 2 members are weak to costs 0.4, 0.25, or 0.1.
    For every member, the share of its weaknesses resisted by at least one
    teammate is averaged over the team and added with weight 0.3.
    """

    name = "type_synergy"

    def calculate_metrics(self, chromosome: TeamChromosome) -> FitnessMetrics:
        members = self.members(chromosome)
        if not members:
            return FitnessMetrics(score=0.0, details={})

        member_weaknesses: List[List[str]] = []
        weakness_counts: Dict[str, int] = {}
        for record in members:
            weaknesses = self.weaknesses(record)
            member_weaknesses.append(weaknesses)
            for type_name in weaknesses:
                weakness_counts[type_name] = weakness_counts.get(type_name, 0) + 1

        score = 1.0
        for count in weakness_counts.values():
            if count >= 4:
                score -= 0.4
            elif count == 3:
                score -= 0.25
            elif count == 2:
                score -= 0.1

        coverage_total = 0.0
        for i, weaknesses in enumerate(member_weaknesses):
            if not weaknesses:
                continue
            covered = 0
            for weakness in weaknesses:
                for j, teammate in enumerate(members):
                    if i != j and self.chart.effectiveness(weakness, teammate.types) <= NOT_VERY_EFFECTIVE:
                        covered += 1
                        break
            coverage_total += covered / len(weaknesses)

        coverage_bonus = coverage_total / len(member_weaknesses)
        score += coverage_bonus * 0.3

        return FitnessMetrics(
            score=max(0.0, score),
            details={
                "stacked_weaknesses": {t: c for t, c in weakness_counts.items() if c >= 2},
                "coverage_bonus": coverage_bonus,
            }
        )

    def evaluate(self, chromosome: TeamChromosome) -> float:
        return self.calculate_metrics(chromosome).score


class AnchorSynergyFitness(FitnessFunction):
    """
    How well the non-anchor members support each anchor.

    Per anchor: 60% the share of its weaknesses some teammate resists, 40% the
    share of its weakness types some teammate's charged move hits super
    effectively (the weakness type is treated as a monotype defender).
    Averaged across anchors.
    """

    name = "anchor_synergy"

    def _anchor_score(self, anchor: CharacterRecord, supporters: List[CharacterRecord]) -> Dict[str, float]:
        weaknesses = self.weaknesses(anchor)
        if not weaknesses:
            return {"defensive": 0.0, "offensive": 0.0}

        resisted = 0
        for weakness in weaknesses:
            if any(self.chart.effectiveness(weakness, s.types) <= NOT_VERY_EFFECTIVE for s in supporters):
                resisted += 1

        countered = 0
        for weakness in weaknesses:
            if any(
                self.chart.effectiveness(move.type, [weakness]) >= SUPER_EFFECTIVE
                for s in supporters
                for move in self.charged_moves(s)
            ):
                countered += 1

        return {
            "defensive": resisted / len(weaknesses),
            "offensive": countered / len(weaknesses),
        }

    def calculate_metrics(self, chromosome: TeamChromosome) -> FitnessMetrics:
        if not chromosome.anchors:
            return FitnessMetrics(score=0.0, details={})

        anchors = []
        supporters = []
        for index, key in enumerate(chromosome.team):
            record = self.store.character_by_key(key)
            if record is None:
                continue
            if chromosome.is_anchor_slot(index):
                anchors.append(record)
            else:
                supporters.append(record)

        if not anchors or not supporters:
            return FitnessMetrics(score=0.0, details={})

        per_anchor = {}
        total = 0.0
        for anchor in anchors:
            parts = self._anchor_score(anchor, supporters)
            anchor_score = parts["defensive"] * 0.6 + parts["offensive"] * 0.4
            per_anchor[anchor.species_id] = anchor_score
            total += anchor_score

        return FitnessMetrics(score=total / len(anchors), details={"per_anchor": per_anchor})

    def evaluate(self, chromosome: TeamChromosome) -> float:
        return self.calculate_metrics(chromosome).score
