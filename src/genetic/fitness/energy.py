"""
Energy breakpoint fitness evaluation.

Scores each member's moveset on charged-move pairing and on how quickly its
fast move builds energy for its first charged move.
"""

from typing import Dict, Any, Optional

from src.genetic.core.chromosome import TeamChromosome
from src.genetic.fitness.base import FitnessFunction, FitnessMetrics
from src.knowledge.movesets import MoveAnalyzer
from src.knowledge.store import KnowledgeStore


# Highest attainable move-pair synergy (spam + nuke, buff, mixed categories)
MAX_SYNERGY = 3.5


class EnergyFitness(FitnessFunction):
    """Average of move-pair synergy and capped shield pressure across members."""

    name = "energy"

    def __init__(self, store: KnowledgeStore, config: Optional[Dict[str, Any]] = None):
        super().__init__(store, config)
        self.analyzer = MoveAnalyzer(store)

    def calculate_metrics(self, chromosome: TeamChromosome) -> FitnessMetrics:
        members = self.members(chromosome)
        if not members:
            return FitnessMetrics(score=0.0, details={})

        total_synergy = 0.0
        total_pressure = 0.0

        for record in members:
            charged = list(record.charged_moves[:2])
            if len(charged) == 2:
                synergy = self.analyzer.evaluate_move_synergy(charged[0], charged[1])
                total_synergy += synergy.synergy_score / MAX_SYNERGY

            if record.fast_moves and charged:
                pressure = self.analyzer.pressure_score(record.fast_moves[0], charged[0])
                total_pressure += min(pressure * 2, 1.0)

        avg_synergy = total_synergy / len(members)
        avg_pressure = total_pressure / len(members)

        return FitnessMetrics(
            score=avg_synergy * 0.5 + avg_pressure * 0.5,
            details={"avg_synergy": avg_synergy, "avg_pressure": avg_pressure}
        )

    def evaluate(self, chromosome: TeamChromosome) -> float:
        return self.calculate_metrics(chromosome).score
