"""
Combined team fitness.

TeamFitness sums the weighted base components, then adds the format's bonus
and, when the team has anchors, the anchor synergy bonus. The total is not
re-normalized and may exceed 1.0.
"""

from collections import OrderedDict
from typing import Dict, Any, List, Optional, Tuple
import threading

from src.genetic.core.chromosome import TeamChromosome
from src.genetic.core.config import FitnessConfig, TournamentMode
from src.genetic.fitness.base import FitnessFunction, FitnessMetrics
from src.genetic.fitness.balance import StatBalanceFitness, ShadowPreferenceFitness
from src.genetic.fitness.coverage import TypeCoverageFitness, MetaThreatFitness
from src.genetic.fitness.energy import EnergyFitness
from src.genetic.fitness.ranking import RankingFitness, SurpriseFactorFitness, ConsistencyFitness
from src.genetic.fitness.strategy import StrategyFitness
from src.genetic.fitness.synergy import TypeDiversityFitness, TypeSynergyFitness, AnchorSynergyFitness
from src.knowledge.store import KnowledgeStore


class TeamFitness(FitnessFunction):
    """
    Weighted multi-component fitness for one tournament format.

    Component scores are computed independently; the breakdown reports the
    unweighted score of each component alongside the weighted total.
    """

    name = "team_fitness"

    def __init__(
        self,
        store: KnowledgeStore,
        mode: TournamentMode,
        config: Optional[FitnessConfig] = None,
    ):
        """
        Initialize combined fitness.

        Args:
            store: Knowledge store shared by all components
            mode: Tournament format deciding team size, lineup scoring,
                and the mode bonus
            config: Component weights; defaults to FitnessConfig()
        """
        self.fitness_config = config or FitnessConfig()
        super().__init__(store, self.fitness_config.model_dump())
        self.mode = TournamentMode.parse(mode)

        self.weights = self.fitness_config.component_weights()
        self.components: Dict[str, FitnessFunction] = {
            "type_coverage": TypeCoverageFitness(store),
            "ranking": RankingFitness(store),
            "type_synergy": TypeSynergyFitness(store),
            "stat_balance": StatBalanceFitness(store),
            "strategy": StrategyFitness(store, self.mode),
            "type_diversity": TypeDiversityFitness(store),
            "shadow_preference": ShadowPreferenceFitness(store),
            "energy": EnergyFitness(store),
            "meta_threat": MetaThreatFitness(
                store, {"meta_threat_limit": self.fitness_config.meta_threat_limit}
            ),
        }

        if self.mode is TournamentMode.GBL:
            self.mode_bonus: FitnessFunction = SurpriseFactorFitness(store)
            self.mode_bonus_weight = self.fitness_config.surprise_bonus_weight
        else:
            self.mode_bonus = ConsistencyFitness(store)
            self.mode_bonus_weight = self.fitness_config.consistency_bonus_weight

        self.anchor_synergy = AnchorSynergyFitness(store)
        self.anchor_bonus_weight = self.fitness_config.anchor_bonus_weight

    def evaluate_with_breakdown(self, chromosome: TeamChromosome) -> Tuple[float, Dict[str, float]]:
        """
        Evaluate a team and return the score of every component.

        Args:
            chromosome: The team to evaluate

        Returns:
            Tuple of (total fitness, unweighted component scores)
        """
        breakdown: Dict[str, float] = {}
        total = 0.0

        for name, component in self.components.items():
            score = component.evaluate(chromosome)
            breakdown[name] = score
            total += score * self.weights[name]

        bonus = self.mode_bonus.evaluate(chromosome)
        breakdown[self.mode_bonus.name] = bonus
        total += bonus * self.mode_bonus_weight

        if chromosome.anchors:
            anchor_score = self.anchor_synergy.evaluate(chromosome)
            breakdown[self.anchor_synergy.name] = anchor_score
            total += anchor_score * self.anchor_bonus_weight

        return total, breakdown

    def evaluate(self, chromosome: TeamChromosome) -> float:
        return self.evaluate_with_breakdown(chromosome)[0]

    def calculate_metrics(self, chromosome: TeamChromosome) -> FitnessMetrics:
        """Total score with per-component metrics."""
        total, breakdown = self.evaluate_with_breakdown(chromosome)

        component_metrics = {
            name: component.calculate_metrics(chromosome)
            for name, component in self.components.items()
        }
        return FitnessMetrics(
            score=total,
            details={
                "mode": self.mode.value,
                "breakdown": breakdown,
                "weights": dict(self.weights),
                "component_metrics": component_metrics,
            }
        )

    def evaluate_population(self, population: List[TeamChromosome]) -> None:
        """Assign fitness and breakdown to every chromosome in place."""
        for chromosome in population:
            chromosome.fitness, chromosome.breakdown = self.evaluate_with_breakdown(chromosome)


class CachedFitnessFunction(FitnessFunction):
    """
    LRU cache around a team fitness function.

    Keys are the ordered team plus its anchor slots, since lineup order and
    anchors both change the score.
    """

    def __init__(self, fitness_function: TeamFitness, cache_size: int = 1000):
        """
        Initialize cached fitness function.

        Args:
            fitness_function: The fitness function to wrap
            cache_size: Maximum number of evaluations to cache
        """
        super().__init__(fitness_function.store, fitness_function.config)
        self.fitness_function = fitness_function
        self.cache_size = cache_size
        self.cache: "OrderedDict[Tuple, Tuple[float, Dict[str, float]]]" = OrderedDict()
        self.hits = 0
        self.misses = 0
        self._lock = threading.Lock()

    @property
    def mode(self) -> TournamentMode:
        return self.fitness_function.mode

    def _get_cache_key(self, chromosome: TeamChromosome) -> Tuple:
        return tuple(chromosome.team), tuple(sorted(chromosome.anchors))

    def evaluate_with_breakdown(self, chromosome: TeamChromosome) -> Tuple[float, Dict[str, float]]:
        """Evaluate with caching."""
        key = self._get_cache_key(chromosome)

        with self._lock:
            if key in self.cache:
                self.cache.move_to_end(key)
                self.hits += 1
                score, breakdown = self.cache[key]
                return score, dict(breakdown)

        result = self.fitness_function.evaluate_with_breakdown(chromosome)

        with self._lock:
            self.misses += 1
            self.cache[key] = result
            self.cache.move_to_end(key)
            # Evict oldest if cache full
            while len(self.cache) > self.cache_size:
                self.cache.popitem(last=False)

        return result[0], dict(result[1])

    def evaluate(self, chromosome: TeamChromosome) -> float:
        return self.evaluate_with_breakdown(chromosome)[0]

    def calculate_metrics(self, chromosome: TeamChromosome) -> FitnessMetrics:
        """Pass through to wrapped function."""
        return self.fitness_function.calculate_metrics(chromosome)

    def evaluate_population(self, population: List[TeamChromosome]) -> None:
        for chromosome in population:
            chromosome.fitness, chromosome.breakdown = self.evaluate_with_breakdown(chromosome)

    def clear_cache(self) -> None:
        """Clear the evaluation cache."""
        with self._lock:
            self.cache.clear()
            self.hits = 0
            self.misses = 0
