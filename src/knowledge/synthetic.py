"""
Synthetic knowledge base generator.

Produces reproducible character/move/ranking catalogs for tests, demos, and
benchmarking the optimizer without the real game master exports. Character
names come from Faker; stats, typings, and rankings from a seeded
random.Random so two generators with the same seed build identical stores.
"""

import random
import re
from typing import Dict, List, Optional, Sequence

from faker import Faker
import logfire

from src.coverage.type_chart import POKEMON_TYPES
from src.knowledge.models import (
    BaseStats,
    CharacterRecord,
    MoveRecord,
    RankingRecord,
    MetaThreat,
    RecommendedMoveset,
)
from src.knowledge.store import InMemoryKnowledgeStore, DEFAULT_BRACKET


RANKING_CATEGORIES = ("overall", "leads", "closers", "switches")

# (suffix, power, energy, buffs) for each generated charged move of a type
CHARGED_MOVE_TEMPLATES = [
    ("BURST", 45, 35, ()),
    ("WAVE", 75, 45, ()),
    ("STORM", 130, 65, ()),
    ("SURGE", 60, 40, (1, 0)),
]
# (suffix, power, energy_gain, turns)
FAST_MOVE_TEMPLATES = [
    ("JAB", 3, 9, 2),
    ("SLAM", 8, 6, 3),
]


class SyntheticKnowledgeGenerator:
    """
    Generates synthetic knowledge stores.

    Every generated character has at least one fast move and two charged
    moves, base species keys never contain underscores, and variants
    (shadow and regional forms) share their parent's base species.
    """

    def __init__(self, seed: int = 42):
        self.seed = seed
        self.rng = random.Random(seed)
        self.faker = Faker()
        self.faker.seed_instance(seed)

    def generate_moves(self, types: Sequence[str] = POKEMON_TYPES) -> List[MoveRecord]:
        """Two fast and four charged moves per type."""
        moves = []
        for type_name in types:
            prefix = type_name.upper()
            for suffix, power, gain, turns in FAST_MOVE_TEMPLATES:
                moves.append(MoveRecord(
                    move_id=f"{prefix}_{suffix}",
                    name=f"{type_name.title()} {suffix.title()}",
                    type=type_name,
                    power=power,
                    energy_gain=gain,
                    turns=turns,
                    cooldown=turns * 500,
                ))
            for suffix, power, energy, buffs in CHARGED_MOVE_TEMPLATES:
                moves.append(MoveRecord(
                    move_id=f"{prefix}_{suffix}",
                    name=f"{type_name.title()} {suffix.title()}",
                    type=type_name,
                    power=power,
                    energy=energy,
                    cooldown=500,
                    buffs=buffs,
                    buff_target="self" if buffs else None,
                    buff_apply_chance="1" if buffs else None,
                ))
        return moves

    def _unique_names(self, count: int) -> List[str]:
        names: List[str] = []
        keys = set()
        while len(names) < count:
            name = self.faker.unique.first_name()
            key = re.sub(r"[^a-z]", "", name.lower())
            if not key or key in keys:
                continue
            keys.add(key)
            names.append(name)
        return names

    def _random_types(self, single_type: Optional[str]) -> List[str]:
        if single_type:
            return [single_type]
        if self.rng.random() < 0.5:
            return [self.rng.choice(POKEMON_TYPES)]
        return self.rng.sample(POKEMON_TYPES, 2)

    def _moves_for(self, types: Sequence[str]) -> Dict[str, List[str]]:
        primary = types[0].upper()
        coverage = self.rng.choice(POKEMON_TYPES).upper()

        fast = [f"{primary}_{self.rng.choice(FAST_MOVE_TEMPLATES)[0]}"]
        if len(types) > 1:
            fast.append(f"{types[1].upper()}_{FAST_MOVE_TEMPLATES[0][0]}")

        templates = self.rng.sample(CHARGED_MOVE_TEMPLATES, 2)
        charged = [f"{primary}_{templates[0][0]}", f"{coverage}_{templates[1][0]}"]
        secondary = f"{types[-1].upper()}_{CHARGED_MOVE_TEMPLATES[2][0]}"
        if secondary not in charged:
            charged.append(secondary)
        return {"fast": fast, "charged": charged}

    def _character(
        self,
        species_id: str,
        name: str,
        dex: int,
        types: Sequence[str],
        stats: BaseStats,
        moves: Dict[str, List[str]],
        tags: Sequence[str] = (),
    ) -> CharacterRecord:
        level = self.rng.choice([18.5, 22.0, 25.5, 30.0, 38.5, 45.0, 50.0])
        return CharacterRecord(
            species_id=species_id,
            species_name=name,
            dex=dex,
            base_stats=stats,
            types=list(types),
            default_ivs={DEFAULT_BRACKET: (level, 0, 15, 15)},
            fast_moves=moves["fast"],
            charged_moves=moves["charged"],
            tags=list(tags),
            buddy_distance=self.rng.choice([1, 3, 5, 20]),
            third_move_cost=self.rng.choice([10000, 50000, 75000, 100000]),
            released=True,
        )

    def generate_characters(
        self,
        count: int,
        variant_rate: float = 0.0,
        single_type: Optional[str] = None,
    ) -> List[CharacterRecord]:
        """
        Generate characters for `count` distinct base species.

        Args:
            count: Number of distinct base species
            variant_rate: Probability that a species also gets a shadow and,
                independently, a regional form
            single_type: Force every character to this monotype

        Returns:
            List of character records, variants following their parent
        """
        characters: List[CharacterRecord] = []

        for dex, name in enumerate(self._unique_names(count), start=1):
            key = re.sub(r"[^a-z]", "", name.lower())
            types = self._random_types(single_type)
            stats = BaseStats(
                atk=self.rng.randint(90, 280),
                def_=self.rng.randint(80, 250),
                hp=self.rng.randint(100, 300),
            )
            moves = self._moves_for(types)

            shadow_eligible = self.rng.random() < variant_rate
            tags = ["shadoweligible"] if shadow_eligible else []
            characters.append(self._character(key, name, dex, types, stats, moves, tags))

            if shadow_eligible:
                characters.append(self._character(
                    f"{key}_shadow", f"{name} (Shadow)", dex, types, stats, moves, ["shadow"]
                ))

            if self.rng.random() < variant_rate:
                regional_types = self._random_types(single_type)
                characters.append(self._character(
                    f"{key}_alolan", f"{name} (Alolan)", dex, regional_types, stats,
                    self._moves_for(regional_types), ["regional"],
                ))

        return characters

    def generate_rankings(self, characters: Sequence[CharacterRecord]) -> List[RankingRecord]:
        rankings = []
        for record in characters:
            scores = {category: round(self.rng.uniform(35, 98), 1) for category in RANKING_CATEGORIES}
            rankings.append(RankingRecord(
                name=record.species_name,
                scores=scores,
                average=sum(scores.values()) / len(scores),
                overall=scores["overall"],
                moveset=RecommendedMoveset(
                    fast_move=record.fast_moves[0],
                    charged_moves=tuple(record.charged_moves[:2]),
                ),
            ))
        return rankings

    def generate_store(
        self,
        count: int = 30,
        variant_rate: float = 0.0,
        single_type: Optional[str] = None,
        with_rankings: bool = True,
        meta_threat_count: int = 50,
    ) -> InMemoryKnowledgeStore:
        """
        Generate a complete knowledge store.

        Args:
            count: Number of distinct base species
            variant_rate: Probability of shadow/regional variants per species
            single_type: Force a single shared monotype
            with_rankings: Whether to generate rankings and meta threats
            meta_threat_count: Number of top-ranked characters kept as threats

        Returns:
            InMemoryKnowledgeStore over the generated catalog
        """
        with logfire.span("Generate Synthetic Knowledge Base", count=count, seed=self.seed):
            characters = self.generate_characters(count, variant_rate, single_type)
            moves = self.generate_moves()

            rankings: List[RankingRecord] = []
            threats: List[MetaThreat] = []
            if with_rankings:
                rankings = self.generate_rankings(characters)
                by_name = {c.species_name: c for c in characters}
                top = sorted(rankings, key=lambda r: r.overall, reverse=True)[:meta_threat_count]
                threats = [MetaThreat(name=r.name, types=by_name[r.name].types) for r in top]

            return InMemoryKnowledgeStore(characters, moves, rankings, threats)
