"""
Knowledge Store for Team Optimization.

This module defines the read-only lookup interface that team construction and
fitness evaluation consume, together with an in-memory implementation backed
by O(1) dictionaries and the species helpers shared across the optimizer.
"""

import math
from abc import ABC, abstractmethod
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Any

from src.coverage.type_chart import TypeChart, DEFAULT_TYPE_CHART
from src.knowledge.models import (
    CharacterRecord,
    MoveRecord,
    RankingRecord,
    MetaThreat,
    RecommendedMoveset,
    XL_LEVEL_THRESHOLD,
)


DEFAULT_BRACKET = "cp1500"


def base_species(key: str) -> str:
    """
    Extract the base species from a character key.

    Form and shadow suffixes are separated by underscores, so
    "marowak_alolan_shadow" becomes "marowak".
    """
    return key.split("_")[0]


def is_same_base_species(key1: str, key2: str) -> bool:
    return base_species(key1) == base_species(key2)


def validate_team_uniqueness(team: Sequence[str]) -> bool:
    """Check that no two team members share a base species."""
    bases = [base_species(key) for key in team]
    return len(set(bases)) == len(bases)


def cp_multiplier(level: float) -> float:
    """Approximate CP multiplier for a level."""
    return math.sqrt(level / 100 + 0.5)


class KnowledgeStore(ABC):
    """
    Abstract read-only knowledge base.

    Implementations expose characters, moves, rankings, meta threats, and
    the type chart. None of the accessors may mutate state, so a store can
    be shared between concurrent fitness evaluations.
    """

    @abstractmethod
    def character_by_key(self, key: str) -> Optional[CharacterRecord]:
        """Look up a character by its species key."""
        pass

    @abstractmethod
    def filter_characters(
        self, predicate: Callable[[CharacterRecord], bool]
    ) -> List[CharacterRecord]:
        """Return characters matching the predicate in catalog order."""
        pass

    @abstractmethod
    def move_by_key(self, key: str) -> Optional[MoveRecord]:
        """Look up a move by its move key."""
        pass

    @abstractmethod
    def rankings_for(self, name: str) -> Optional[RankingRecord]:
        """Ranking summary for a character display name."""
        pass

    @abstractmethod
    def meta_threats(self) -> List[MetaThreat]:
        """Ordered list of top-ranked characters."""
        pass

    @property
    @abstractmethod
    def type_chart(self) -> TypeChart:
        """Type effectiveness chart used by this knowledge base."""
        pass

    # Derived lookups shared by all stores

    def ranking_for_character(self, key: str) -> Optional[RankingRecord]:
        """Ranking summary for a character key, resolved through its display name."""
        record = self.character_by_key(key)
        if record is None:
            return None
        return self.rankings_for(record.species_name)

    def available_characters(self) -> List[CharacterRecord]:
        """All released characters."""
        return self.filter_characters(lambda c: c.released)

    def league_characters(self, bracket: str = DEFAULT_BRACKET) -> List[CharacterRecord]:
        """Released characters with default IVs for a CP bracket."""
        return self.filter_characters(lambda c: c.released and bracket in c.default_ivs)

    def ranked_league_characters(self, bracket: str = DEFAULT_BRACKET) -> List[CharacterRecord]:
        """League characters that also appear in the rankings."""
        return [
            c for c in self.league_characters(bracket)
            if self.rankings_for(c.species_name) is not None
        ]

    def candidate_pool(self, bracket: Optional[str] = None) -> List[str]:
        """
        Character keys eligible for team construction.

        Args:
            bracket: Optional CP bracket; when given only characters with
                default IVs for it are returned

        Returns:
            Ordered list of character keys
        """
        records = self.league_characters(bracket) if bracket else self.available_characters()
        return [c.species_id for c in records]

    def stat_product(self, record: CharacterRecord, bracket: str = DEFAULT_BRACKET) -> float:
        """Attack x defense x stamina at the bracket's default IVs."""
        ivs = record.ivs_for(bracket)
        if not ivs:
            return 0.0

        level, atk_iv, def_iv, hp_iv = ivs[:4]
        multiplier = cp_multiplier(level)

        attack = (record.base_stats.atk + atk_iv) * multiplier
        defense = (record.base_stats.def_ + def_iv) * multiplier
        stamina = math.floor((record.base_stats.hp + hp_iv) * multiplier)
        return attack * defense * stamina

    def requires_xl_candy(self, record: CharacterRecord, bracket: str = DEFAULT_BRACKET) -> bool:
        ivs = record.ivs_for(bracket)
        if not ivs:
            return False
        return ivs[0] > XL_LEVEL_THRESHOLD

    def resource_cost(self, record: CharacterRecord, bracket: str = DEFAULT_BRACKET) -> Dict[str, Any]:
        """Investment summary for building a character."""
        return {
            "buddy_distance": record.buddy_distance,
            "third_move_cost": record.third_move_cost,
            "requires_xl": self.requires_xl_candy(record, bracket),
            "is_shadow": record.is_shadow,
        }

    def recommended_moveset(self, record: CharacterRecord) -> RecommendedMoveset:
        """Moveset from the rankings, or the first learnable moves when unranked."""
        ranking = self.rankings_for(record.species_name)
        if ranking is not None and ranking.moveset is not None:
            return ranking.moveset
        fast = record.fast_moves[0] if record.fast_moves else ""
        return RecommendedMoveset(fast_move=fast, charged_moves=tuple(record.charged_moves[:2]))


class InMemoryKnowledgeStore(KnowledgeStore):
    """Knowledge store backed by plain dictionaries."""

    def __init__(
        self,
        characters: Iterable[CharacterRecord],
        moves: Iterable[MoveRecord],
        rankings: Optional[Iterable[RankingRecord]] = None,
        meta_threats: Optional[Iterable[MetaThreat]] = None,
        type_chart: Optional[TypeChart] = None,
    ):
        self._characters: List[CharacterRecord] = list(characters)
        self._by_key: Dict[str, CharacterRecord] = {}
        self._by_dex: Dict[int, CharacterRecord] = {}
        for record in self._characters:
            self._by_key[record.species_id] = record
            self._by_dex.setdefault(record.dex, record)

        self._moves: Dict[str, MoveRecord] = {m.move_id: m for m in moves}
        self._rankings: Dict[str, RankingRecord] = {r.name: r for r in (rankings or [])}
        self._meta_threats: List[MetaThreat] = list(meta_threats or [])
        self._type_chart = type_chart or DEFAULT_TYPE_CHART

    def character_by_key(self, key: str) -> Optional[CharacterRecord]:
        return self._by_key.get(key)

    def character_by_dex(self, dex: int) -> Optional[CharacterRecord]:
        return self._by_dex.get(dex)

    def filter_characters(
        self, predicate: Callable[[CharacterRecord], bool]
    ) -> List[CharacterRecord]:
        return [c for c in self._characters if predicate(c)]

    def move_by_key(self, key: str) -> Optional[MoveRecord]:
        return self._moves.get(key)

    def rankings_for(self, name: str) -> Optional[RankingRecord]:
        return self._rankings.get(name)

    def meta_threats(self) -> List[MetaThreat]:
        return list(self._meta_threats)

    @property
    def type_chart(self) -> TypeChart:
        return self._type_chart

    @property
    def characters(self) -> List[CharacterRecord]:
        return list(self._characters)

    @property
    def moves(self) -> List[MoveRecord]:
        return list(self._moves.values())

    def __len__(self) -> int:
        return len(self._characters)

    def __repr__(self) -> str:
        return (
            f"InMemoryKnowledgeStore(characters={len(self._characters)}, "
            f"moves={len(self._moves)}, rankings={len(self._rankings)})"
        )
