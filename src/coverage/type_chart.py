"""
Type Effectiveness Calculations for Team Optimization.

This module wraps the 18x18 attack/defense multiplier matrix used by Pokémon GO
battles and provides the matchup, STAB, and team-level coverage calculations
that the fitness engine and team construction depend on.
"""

from typing import Dict, List, Optional, Sequence, Set, Iterable
from dataclasses import dataclass, field


SUPER_EFFECTIVE = 1.6
NOT_VERY_EFFECTIVE = 0.625
IMMUNE = 0.39
NEUTRAL = 1.0
STAB_MULTIPLIER = 1.2
DOUBLE_SUPER_EFFECTIVE = round(SUPER_EFFECTIVE * SUPER_EFFECTIVE, 6)

# Placeholder used by ranking exports for single-typed species
NO_TYPE = "none"

POKEMON_TYPES: List[str] = [
    "normal", "fire", "water", "electric", "grass", "ice",
    "fighting", "poison", "ground", "flying", "psychic", "bug",
    "rock", "ghost", "dragon", "dark", "steel", "fairy",
]

# attacking type -> (super effective against, not very effective against, "immune" defenders)
_MATCHUPS: Dict[str, tuple] = {
    "normal": ([], ["rock", "steel"], ["ghost"]),
    "fire": (["grass", "ice", "bug", "steel"], ["fire", "water", "rock", "dragon"], []),
    "water": (["fire", "ground", "rock"], ["water", "grass", "dragon"], []),
    "electric": (["water", "flying"], ["electric", "grass", "dragon"], ["ground"]),
    "grass": (
        ["water", "ground", "rock"],
        ["fire", "grass", "poison", "flying", "bug", "dragon", "steel"],
        [],
    ),
    "ice": (["grass", "ground", "flying", "dragon"], ["fire", "water", "ice", "steel"], []),
    "fighting": (
        ["normal", "ice", "rock", "dark", "steel"],
        ["poison", "flying", "psychic", "bug", "fairy"],
        ["ghost"],
    ),
    "poison": (["grass", "fairy"], ["poison", "ground", "rock", "ghost"], ["steel"]),
    "ground": (["fire", "electric", "poison", "rock", "steel"], ["grass", "bug"], ["flying"]),
    "flying": (["grass", "fighting", "bug"], ["electric", "rock", "steel"], []),
    "psychic": (["fighting", "poison"], ["psychic", "steel"], ["dark"]),
    "bug": (
        ["grass", "psychic", "dark"],
        ["fire", "fighting", "poison", "flying", "ghost", "steel", "fairy"],
        [],
    ),
    "rock": (["fire", "ice", "flying", "bug"], ["fighting", "ground", "steel"], []),
    "ghost": (["psychic", "ghost"], ["dark"], ["normal"]),
    "dragon": (["dragon"], ["steel"], ["fairy"]),
    "dark": (["psychic", "ghost"], ["fighting", "dark", "fairy"], []),
    "steel": (["ice", "rock", "fairy"], ["fire", "water", "electric", "steel"], []),
    "fairy": (["fighting", "dragon", "dark"], ["fire", "poison", "steel"], []),
}


def build_default_matrix() -> Dict[str, Dict[str, float]]:
    """Build the full Pokémon GO type chart as a nested mapping."""
    matrix: Dict[str, Dict[str, float]] = {}
    for attack_type in POKEMON_TYPES:
        super_effective, resisted, immune = _MATCHUPS[attack_type]
        row = {}
        for defense_type in POKEMON_TYPES:
            if defense_type in super_effective:
                row[defense_type] = SUPER_EFFECTIVE
            elif defense_type in resisted:
                row[defense_type] = NOT_VERY_EFFECTIVE
            elif defense_type in immune:
                row[defense_type] = IMMUNE
            else:
                row[defense_type] = NEUTRAL
        matrix[attack_type] = row
    return matrix


@dataclass
class OffensiveCoverage:
    """Best-case multipliers of a move-type set against every defending type."""
    super_effective: Set[str] = field(default_factory=set)
    neutral: Set[str] = field(default_factory=set)
    not_very_effective: Set[str] = field(default_factory=set)
    coverage_score: float = 0.0


@dataclass
class DefensiveCoverage:
    """Team-wide resistances and stacked weaknesses."""
    resisted_types: Set[str] = field(default_factory=set)
    weak_types: Set[str] = field(default_factory=set)
    coverage_score: float = 0.0


def _clean_types(types: Iterable[Optional[str]]) -> List[str]:
    return [t.lower() for t in types if t and t.lower() != NO_TYPE]


class TypeChart:
    """
    Type effectiveness calculator over an attack/defense multiplier matrix.

    The matrix maps attacking type -> defending type -> multiplier. Entries
    missing from the matrix are treated as neutral. All type names are
    compared case-insensitively.
    """

    def __init__(self, matrix: Optional[Dict[str, Dict[str, float]]] = None):
        """
        Initialize the chart.

        Args:
            matrix: Optional custom multiplier matrix; defaults to the
                standard Pokémon GO chart
        """
        source = matrix if matrix is not None else build_default_matrix()
        self.matrix: Dict[str, Dict[str, float]] = {
            attack.lower(): {defense.lower(): float(value) for defense, value in row.items()}
            for attack, row in source.items()
        }

    @property
    def types(self) -> List[str]:
        """All attacking types known to the chart."""
        return list(self.matrix.keys())

    def effectiveness(self, attack_type: str, defense_types: Sequence[str]) -> float:
        """
        Calculate the type effectiveness multiplier.

        Args:
            attack_type: The attacking move's type
            defense_types: The defender's types (1 or 2)

        Returns:
            Product of the per-type multipliers, rounded to avoid float drift
        """
        row = self.matrix.get(attack_type.lower(), {})
        multiplier = 1.0
        for defense_type in _clean_types(defense_types):
            multiplier *= row.get(defense_type, NEUTRAL)
        return round(multiplier, 6)

    def has_stab(self, move_type: str, own_types: Sequence[str]) -> bool:
        """Check whether a move receives the same-type attack bonus."""
        normalized = move_type.lower()
        return any(t.lower() == normalized for t in own_types if t)

    def total_multiplier(
        self,
        move_type: str,
        attacker_types: Sequence[str],
        defender_types: Sequence[str],
    ) -> float:
        """Effectiveness times STAB for a single move."""
        stab = STAB_MULTIPLIER if self.has_stab(move_type, attacker_types) else 1.0
        return self.effectiveness(move_type, defender_types) * stab

    def super_effective_types(self, defense_types: Sequence[str]) -> List[str]:
        """Attacking types that deal 1.6x or more to the given typing."""
        return [
            attack_type for attack_type in self.types
            if self.effectiveness(attack_type, defense_types) >= SUPER_EFFECTIVE
        ]

    def resistant_types(self, defense_types: Sequence[str]) -> List[str]:
        """Attacking types that the given typing takes 0.625x or less from."""
        return [
            attack_type for attack_type in self.types
            if self.effectiveness(attack_type, defense_types) <= NOT_VERY_EFFECTIVE
        ]

    def offensive_coverage(self, move_types: Iterable[str]) -> OffensiveCoverage:
        """
        Calculate offensive coverage for a set of move types.

        For every defending type the best multiplier achievable by any of the
        move types decides whether it counts as super effective, neutral, or
        resisted. Score: 1 point per super effective type, 0.5 per neutral.

        Args:
            move_types: Move types available to the team

        Returns:
            OffensiveCoverage with the per-type classification and score
        """
        move_types = list(move_types)
        coverage = OffensiveCoverage()

        for defense_type in self.types:
            best = 0.0
            for attack_type in move_types:
                best = max(best, self.effectiveness(attack_type, [defense_type]))

            if best >= SUPER_EFFECTIVE:
                coverage.super_effective.add(defense_type)
            elif best == NEUTRAL:
                coverage.neutral.add(defense_type)
            else:
                coverage.not_very_effective.add(defense_type)

        coverage.coverage_score = len(coverage.super_effective) + len(coverage.neutral) * 0.5
        return coverage

    def defensive_coverage(self, team_types: Iterable[Sequence[str]]) -> DefensiveCoverage:
        """
        Calculate defensive coverage for a team's typings.

        A type is resisted by the team when at least two members resist it, and
        is a team weakness when at least three members are weak to it.
        Score: 1 point per resisted type, -0.5 per team weakness.

        Args:
            team_types: One type list per team member

        Returns:
            DefensiveCoverage with resisted/weak type sets and score
        """
        team_types = [_clean_types(types) for types in team_types]
        coverage = DefensiveCoverage()

        for attack_type in self.types:
            resist_count = 0
            weak_count = 0
            for defense_types in team_types:
                value = self.effectiveness(attack_type, defense_types)
                if value <= NOT_VERY_EFFECTIVE:
                    resist_count += 1
                elif value >= SUPER_EFFECTIVE:
                    weak_count += 1

            if resist_count >= 2:
                coverage.resisted_types.add(attack_type)
            if weak_count >= 3:
                coverage.weak_types.add(attack_type)

        coverage.coverage_score = len(coverage.resisted_types) - len(coverage.weak_types) * 0.5
        return coverage


def effectiveness_category(multiplier: float) -> str:
    """Human-readable label for a multiplier."""
    if multiplier >= DOUBLE_SUPER_EFFECTIVE:
        return "Double Super Effective"
    if multiplier >= SUPER_EFFECTIVE:
        return "Super Effective"
    if multiplier == NEUTRAL:
        return "Neutral"
    if IMMUNE <= multiplier <= NOT_VERY_EFFECTIVE:
        return "Resisted"
    if multiplier < IMMUNE:
        return "Double Resisted"
    return "Neutral"


DEFAULT_TYPE_CHART = TypeChart()
