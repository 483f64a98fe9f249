"""
Fitness evaluation for the team optimizer.

Each component scores one aspect of a team (coverage, rankings, lineups,
energy, synergy, balance); TeamFitness combines them into a single scalar.
"""

from src.genetic.fitness.base import FitnessFunction, FitnessMetrics
from src.genetic.fitness.coverage import TypeCoverageFitness, MetaThreatFitness
from src.genetic.fitness.ranking import RankingFitness, SurpriseFactorFitness, ConsistencyFitness
from src.genetic.fitness.strategy import StrategyFitness
from src.genetic.fitness.energy import EnergyFitness
from src.genetic.fitness.synergy import TypeDiversityFitness, TypeSynergyFitness, AnchorSynergyFitness
from src.genetic.fitness.balance import StatBalanceFitness, ShadowPreferenceFitness
from src.genetic.fitness.team_fitness import TeamFitness, CachedFitnessFunction

__all__ = [
    "FitnessFunction",
    "FitnessMetrics",
    "TypeCoverageFitness",
    "MetaThreatFitness",
    "RankingFitness",
    "SurpriseFactorFitness",
    "ConsistencyFitness",
    "StrategyFitness",
    "EnergyFitness",
    "TypeDiversityFitness",
    "TypeSynergyFitness",
    "AnchorSynergyFitness",
    "StatBalanceFitness",
    "ShadowPreferenceFitness",
    "TeamFitness",
    "CachedFitnessFunction",
]
