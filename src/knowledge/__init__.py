"""
Knowledge base for the team optimizer.

Read-only catalogs of characters, moves, rankings, and meta threats, plus
loaders for the JSON/CSV exports and a synthetic catalog generator.
"""

from src.knowledge.models import (
    BaseStats,
    CharacterRecord,
    MoveRecord,
    RankingRecord,
    MetaThreat,
    RecommendedMoveset,
)
from src.knowledge.store import (
    KnowledgeStore,
    InMemoryKnowledgeStore,
    base_species,
    is_same_base_species,
    validate_team_uniqueness,
)
from src.knowledge.movesets import MoveAnalyzer, MoveSynergy
from src.knowledge.loader import KnowledgeLoadError, load_knowledge_store
from src.knowledge.synthetic import SyntheticKnowledgeGenerator

__all__ = [
    "BaseStats",
    "CharacterRecord",
    "MoveRecord",
    "RankingRecord",
    "MetaThreat",
    "RecommendedMoveset",
    "KnowledgeStore",
    "InMemoryKnowledgeStore",
    "base_species",
    "is_same_base_species",
    "validate_team_uniqueness",
    "MoveAnalyzer",
    "MoveSynergy",
    "KnowledgeLoadError",
    "load_knowledge_store",
    "SyntheticKnowledgeGenerator",
]
