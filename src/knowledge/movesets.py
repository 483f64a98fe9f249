"""
Move analytics.

Energy, timing and synergy calculations over move records. All lookups go
through a knowledge store; unknown moves score zero rather than raising.
"""

import math
from typing import Dict, Iterable, List, Optional, Any
from dataclasses import dataclass

from src.knowledge.store import KnowledgeStore


SECONDS_PER_TURN = 0.5


@dataclass
class MoveSynergy:
    """Synergy between a pair of charged moves."""
    has_spam_nuke: bool = False
    has_buff: bool = False
    synergy_score: float = 0.0


class MoveAnalyzer:
    """Analyzes fast/charged move combinations."""

    def __init__(self, store: KnowledgeStore):
        self.store = store

    def is_fast_move(self, move_id: str) -> bool:
        move = self.store.move_by_key(move_id)
        return move is not None and move.is_fast

    def turns_to_charge(self, fast_move_id: str, charged_move_id: str) -> int:
        """Number of fast moves needed to reach a charged move, 0 if unknown."""
        fast = self.store.move_by_key(fast_move_id)
        charged = self.store.move_by_key(charged_move_id)
        if not fast or not charged or not fast.energy_gain or not charged.energy:
            return 0
        return math.ceil(charged.energy / fast.energy_gain)

    def time_to_charge(self, fast_move_id: str, charged_move_id: str) -> float:
        """Seconds needed to reach a charged move."""
        turns = self.turns_to_charge(fast_move_id, charged_move_id)
        fast = self.store.move_by_key(fast_move_id)
        if not fast or not fast.turns:
            return 0.0
        return turns * fast.turns * SECONDS_PER_TURN

    def pressure_score(self, fast_move_id: str, charged_move_id: str) -> float:
        """Shield pressure: inverse of the time to charge."""
        seconds = self.time_to_charge(fast_move_id, charged_move_id)
        if seconds == 0:
            return 0.0
        return 1 / seconds

    def has_buff_effects(self, move_id: str) -> bool:
        move = self.store.move_by_key(move_id)
        return move is not None and move.has_buffs

    def buff_details(self, move_id: str) -> Optional[Dict[str, Any]]:
        move = self.store.move_by_key(move_id)
        if move is None or not move.has_buffs:
            return None
        return {
            "stats": list(move.buffs),
            "target": move.buff_target or "opponent",
            "chance": move.buff_apply_chance or "100%",
        }

    def move_category(self, move_id: str) -> str:
        move = self.store.move_by_key(move_id)
        if move is None:
            return "unknown"
        return move.category

    def damage_per_energy(self, move_id: str) -> float:
        move = self.store.move_by_key(move_id)
        if not move or not move.energy:
            return 0.0
        return move.power / move.energy

    def evaluate_move_synergy(self, charged_move_1: str, charged_move_2: str) -> MoveSynergy:
        """
        Score a pair of charged moves.

        A cheap move paired with an expensive one scores 2 points, any buff
        effect 1 point, and differing categories another 0.5.
        """
        move1 = self.store.move_by_key(charged_move_1)
        move2 = self.store.move_by_key(charged_move_2)
        if move1 is None or move2 is None:
            return MoveSynergy()

        cat1 = move1.category
        cat2 = move2.category

        has_spam_nuke = {cat1, cat2} == {"spam", "nuke"}
        has_buff = move1.has_buffs or move2.has_buffs

        score = 0.0
        if has_spam_nuke:
            score += 2
        if has_buff:
            score += 1
        if cat1 != cat2:
            score += 0.5

        return MoveSynergy(has_spam_nuke=has_spam_nuke, has_buff=has_buff, synergy_score=score)

    def moveset_types(self, move_ids: Iterable[str]) -> List[str]:
        """Distinct types of the known moves, in first-seen order."""
        seen: List[str] = []
        for move_id in move_ids:
            move = self.store.move_by_key(move_id)
            if move is not None and move.type not in seen:
                seen.append(move.type)
        return seen
