"""
Type coverage utilities.

Pure functions over the type effectiveness matrix used throughout team
construction and fitness evaluation.
"""

from src.coverage.type_chart import (
    TypeChart,
    OffensiveCoverage,
    DefensiveCoverage,
    DEFAULT_TYPE_CHART,
    POKEMON_TYPES,
    SUPER_EFFECTIVE,
    NOT_VERY_EFFECTIVE,
    IMMUNE,
    STAB_MULTIPLIER,
    build_default_matrix,
    effectiveness_category,
)

__all__ = [
    "TypeChart",
    "OffensiveCoverage",
    "DefensiveCoverage",
    "DEFAULT_TYPE_CHART",
    "POKEMON_TYPES",
    "SUPER_EFFECTIVE",
    "NOT_VERY_EFFECTIVE",
    "IMMUNE",
    "STAB_MULTIPLIER",
    "build_default_matrix",
    "effectiveness_category",
]
