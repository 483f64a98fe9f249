"""
Knowledge Base Records.

This module defines the immutable records served by the knowledge store:
characters (species with stats, typing, and learnable moves), moves,
ranking summaries, and meta threats. Field aliases follow the camelCase
keys of the JSON game-master exports so records can be validated directly
from the raw files.
"""

from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


# Bulk ratio thresholds used to classify character roles
GLASS_CANNON_THRESHOLD = 1.8
BULKY_THRESHOLD = 2.5

# Charged move energy thresholds
SPAM_ENERGY_THRESHOLD = 40
GENERAL_ENERGY_THRESHOLD = 50

# Characters needing a level above this for a bracket require XL candy
XL_LEVEL_THRESHOLD = 40

SHADOW_MARKER = "_shadow"


class BaseStats(BaseModel):
    """Base attack, defense, and stamina of a species."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    atk: float = Field(ge=0, description="Base attack")
    def_: float = Field(alias="def", ge=0, description="Base defense")
    hp: float = Field(ge=0, description="Base stamina")


class CharacterRecord(BaseModel):
    """A single playable character (species or form variant)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    species_id: str = Field(alias="speciesId", min_length=1)
    species_name: str = Field(alias="speciesName")
    dex: int = Field(default=0, ge=0)
    base_stats: BaseStats = Field(alias="baseStats")
    types: Tuple[str, ...] = Field(min_length=1, max_length=2)
    default_ivs: Dict[str, Tuple[float, ...]] = Field(default_factory=dict, alias="defaultIVs")
    fast_moves: Tuple[str, ...] = Field(default=(), alias="fastMoves")
    charged_moves: Tuple[str, ...] = Field(default=(), alias="chargedMoves")
    tags: Tuple[str, ...] = Field(default=())
    buddy_distance: int = Field(default=0, alias="buddyDistance")
    third_move_cost: int = Field(default=0, alias="thirdMoveCost")
    released: bool = True

    @field_validator("types", mode="before")
    @classmethod
    def normalize_types(cls, v):
        """Lowercase type names and drop the 'none' placeholder."""
        if isinstance(v, str):
            v = [v]
        return tuple(t.lower() for t in v if t and t.lower() != "none")

    @property
    def base_species(self) -> str:
        """Species key without form/shadow suffixes."""
        return self.species_id.split("_")[0]

    @property
    def is_shadow(self) -> bool:
        return SHADOW_MARKER in self.species_id

    @property
    def bulk_ratio(self) -> float:
        """(defense + stamina) / attack; high values indicate bulky builds."""
        if self.base_stats.atk == 0:
            return float("inf")
        return (self.base_stats.def_ + self.base_stats.hp) / self.base_stats.atk

    @property
    def role(self) -> str:
        ratio = self.bulk_ratio
        if ratio < GLASS_CANNON_THRESHOLD:
            return "glass_cannon"
        if ratio >= BULKY_THRESHOLD:
            return "bulky"
        return "balanced"

    def ivs_for(self, bracket: str) -> Optional[Tuple[float, ...]]:
        """Default (level, atk_iv, def_iv, hp_iv) for a league bracket, if any."""
        return self.default_ivs.get(bracket)


class MoveRecord(BaseModel):
    """A fast or charged move."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    move_id: str = Field(alias="moveId", min_length=1)
    name: str = ""
    type: str
    power: float = 0
    energy: float = 0
    energy_gain: float = Field(default=0, alias="energyGain")
    turns: Optional[int] = None
    cooldown: float = 0
    buffs: Tuple[float, ...] = ()
    buff_target: Optional[str] = Field(default=None, alias="buffTarget")
    buff_apply_chance: Optional[str] = Field(default=None, alias="buffApplyChance")

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, v):
        return v.lower() if isinstance(v, str) else v

    @property
    def is_fast(self) -> bool:
        """Fast moves carry a turn count."""
        return self.turns is not None

    @property
    def has_buffs(self) -> bool:
        return len(self.buffs) > 0

    @property
    def category(self) -> str:
        """Charged move category by energy cost: spam, general, nuke, or unknown."""
        if not self.energy:
            return "unknown"
        if self.energy <= SPAM_ENERGY_THRESHOLD:
            return "spam"
        if self.energy <= GENERAL_ENERGY_THRESHOLD:
            return "general"
        return "nuke"


class RecommendedMoveset(BaseModel):
    """Fast move and charged moves suggested by the ranking export."""

    model_config = ConfigDict(frozen=True)

    fast_move: str
    charged_moves: Tuple[str, ...] = ()


class RankingRecord(BaseModel):
    """Aggregated ranking scores of one character across contexts."""

    model_config = ConfigDict(frozen=True)

    name: str
    scores: Dict[str, float] = Field(
        default_factory=dict,
        description="Score per ranking category (overall, leads, closers, ...)"
    )
    average: float = 0.0
    overall: float = 0.0
    moveset: Optional[RecommendedMoveset] = None


class MetaThreat(BaseModel):
    """A top-ranked character the team should be able to answer."""

    model_config = ConfigDict(frozen=True)

    name: str
    types: Tuple[str, ...] = ()

    @field_validator("types", mode="before")
    @classmethod
    def normalize_types(cls, v):
        return tuple(t.lower() for t in v if t and str(t).lower() != "none")


EMPTY_RANKING = RankingRecord(name="")


__all__ = [
    "BaseStats",
    "CharacterRecord",
    "MoveRecord",
    "RecommendedMoveset",
    "RankingRecord",
    "MetaThreat",
    "EMPTY_RANKING",
    "GLASS_CANNON_THRESHOLD",
    "BULKY_THRESHOLD",
    "SPAM_ENERGY_THRESHOLD",
    "GENERAL_ENERGY_THRESHOLD",
    "XL_LEVEL_THRESHOLD",
]
