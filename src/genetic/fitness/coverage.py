"""
Type coverage fitness evaluation.

This module scores how well a team's charged moves hit every type and how
well its typings resist incoming attacks, and how many of the current
meta threats the team can hit super effectively.
"""

from typing import Dict, Any, List, Optional

from src.coverage.type_chart import SUPER_EFFECTIVE
from src.genetic.core.chromosome import TeamChromosome
from src.genetic.fitness.base import FitnessFunction, FitnessMetrics
from src.knowledge.store import KnowledgeStore


# Normalizers for the raw coverage scores
OFFENSIVE_NORMALIZER = 18
DEFENSIVE_NORMALIZER = 10


class TypeCoverageFitness(FitnessFunction):
    """
    Offensive and defensive type coverage.

    Offensive coverage is computed over the union of every member's charged
    move types and weighs 60%; defensive coverage over the member typings
    weighs 40% and is floored at zero.
    """

    name = "type_coverage"

    def __init__(self, store: KnowledgeStore, config: Optional[Dict[str, Any]] = None):
        super().__init__(store, config)
        self.offensive_weight = self.config.get("offensive_weight", 0.6)
        self.defensive_weight = self.config.get("defensive_weight", 0.4)

    def calculate_metrics(self, chromosome: TeamChromosome) -> FitnessMetrics:
        members = self.members(chromosome)
        if not members:
            return FitnessMetrics(score=0.0, details={})

        move_types = []
        for record in members:
            for move in self.charged_moves(record):
                if move.type not in move_types:
                    move_types.append(move.type)

        offensive = self.chart.offensive_coverage(move_types)
        defensive = self.chart.defensive_coverage([record.types for record in members])

        offensive_score = offensive.coverage_score / OFFENSIVE_NORMALIZER
        defensive_score = max(0.0, defensive.coverage_score / DEFENSIVE_NORMALIZER)
        score = offensive_score * self.offensive_weight + defensive_score * self.defensive_weight

        return FitnessMetrics(
            score=score,
            details={
                "move_types": move_types,
                "offensive_score": offensive_score,
                "defensive_score": defensive_score,
                "super_effective": sorted(offensive.super_effective),
                "resisted_types": sorted(defensive.resisted_types),
                "weak_types": sorted(defensive.weak_types),
            }
        )

    def evaluate(self, chromosome: TeamChromosome) -> float:
        return self.calculate_metrics(chromosome).score


class MetaThreatFitness(FitnessFunction):
    """
    Share of the leading meta threats the team can hit super effectively.

    A threat counts as covered once if any member has a charged move dealing
    at least 1.6x to it.
    """

    name = "meta_threat"

    def __init__(self, store: KnowledgeStore, config: Optional[Dict[str, Any]] = None):
        super().__init__(store, config)
        self.threat_limit = self.config.get("meta_threat_limit", 50)

    def calculate_metrics(self, chromosome: TeamChromosome) -> FitnessMetrics:
        members = self.members(chromosome)
        threats = self.store.meta_threats()[:self.threat_limit]
        if not members or not threats:
            return FitnessMetrics(score=0.0, details={"covered": [], "considered": len(threats)})

        move_types = {move.type for record in members for move in self.charged_moves(record)}

        covered: List[str] = []
        for threat in threats:
            if any(self.chart.effectiveness(t, threat.types) >= SUPER_EFFECTIVE for t in move_types):
                covered.append(threat.name)

        return FitnessMetrics(
            score=len(covered) / len(threats),
            details={"covered": covered, "considered": len(threats)}
        )

    def evaluate(self, chromosome: TeamChromosome) -> float:
        return self.calculate_metrics(chromosome).score
