"""
Base classes for fitness evaluation in the team optimizer.

This module provides the abstract base class shared by every fitness
component together with the record-resolution helpers they rely on.
"""

from abc import ABC, abstractmethod
from typing import Dict, Any, List, Optional
from dataclasses import dataclass

from src.genetic.core.chromosome import TeamChromosome
from src.knowledge.models import CharacterRecord, MoveRecord
from src.knowledge.store import KnowledgeStore


@dataclass
class FitnessMetrics:
    """Score of one component with its supporting details."""
    score: float  # Component score, roughly [0, 1]
    details: Dict[str, Any]  # Detailed breakdown of the score


class FitnessFunction(ABC):
    """
    Abstract base class for fitness components.

    Components read from the knowledge store only. Members, moves, or
    rankings missing from the store contribute nothing; evaluation never
    raises for incomplete data.
    """

    name: str = "fitness"

    def __init__(self, store: KnowledgeStore, config: Optional[Dict[str, Any]] = None):
        """
        Initialize fitness function.

        Args:
            store: Knowledge store used to resolve team members
            config: Configuration parameters for the fitness function
        """
        self.store = store
        self.config = config or {}

    @property
    def chart(self):
        return self.store.type_chart

    @abstractmethod
    def evaluate(self, chromosome: TeamChromosome) -> float:
        """
        Evaluate a team chromosome and return a fitness score.

        Args:
            chromosome: The team to evaluate

        Returns:
            Component score, 0 for an empty team
        """
        pass

    def calculate_metrics(self, chromosome: TeamChromosome) -> FitnessMetrics:
        """
        Calculate detailed metrics for a team.

        Components override this when they have more to report than the
        bare score.
        """
        return FitnessMetrics(score=self.evaluate(chromosome), details={})

    def members(self, chromosome: TeamChromosome) -> List[CharacterRecord]:
        """Records of the team members present in the store, in slot order."""
        records = []
        for key in chromosome.team:
            record = self.store.character_by_key(key)
            if record is not None:
                records.append(record)
        return records

    def charged_moves(self, record: CharacterRecord) -> List[MoveRecord]:
        """Known charged moves of a character."""
        moves = []
        for move_id in record.charged_moves:
            move = self.store.move_by_key(move_id)
            if move is not None:
                moves.append(move)
        return moves

    def weaknesses(self, record: CharacterRecord) -> List[str]:
        return self.chart.super_effective_types(record.types)
