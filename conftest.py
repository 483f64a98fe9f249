"""
PyTest configuration and fixtures for the Pokémon GO Team Optimizer.

This module provides a small hand-built knowledge base with known typings,
a generated synthetic knowledge base, seeded random sources, and optimizer
configurations for fast tests.
"""

import os
import sys
import random
import pytest
import logfire

# Add project root to Python path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from src.core.config import settings
from src.genetic.core.config import create_test_config
from src.knowledge.models import (
    CharacterRecord,
    MoveRecord,
    RankingRecord,
    MetaThreat,
    RecommendedMoveset,
)
from src.knowledge.store import InMemoryKnowledgeStore
from src.knowledge.synthetic import SyntheticKnowledgeGenerator


# Override settings for testing
settings.environment = "testing"
settings.logfire_environment = "testing"
settings.logfire_send_to_logfire = False

logfire.configure(send_to_logfire=False, console=False)


LEAGUE_IVS = {"cp1500": (25.5, 0, 15, 15)}

# (species_id, name, types, (atk, def, hp), fast, charged, tags, default_ivs)
CATALOG_CHARACTERS = [
    ("medicham", "Medicham", ["fighting", "psychic"], (121, 152, 155),
     ["COUNTER"], ["ICE_PUNCH", "PSYCHIC"], [], {"cp1500": (49.0, 15, 15, 15)}),
    ("azumarill", "Azumarill", ["water", "fairy"], (112, 152, 225),
     ["BUBBLE"], ["ICE_BEAM", "PLAY_ROUGH", "HYDRO_PUMP"], [], LEAGUE_IVS),
    ("registeel", "Registeel", ["steel"], (143, 285, 190),
     ["LOCK_ON"], ["FLASH_CANNON", "FOCUS_BLAST"], [], {"cp2500": (40.0, 15, 15, 15)}),
    ("altaria", "Altaria", ["dragon", "flying"], (141, 201, 181),
     ["DRAGON_BREATH"], ["SKY_ATTACK", "MOONBLAST"], [], LEAGUE_IVS),
    ("machamp", "Machamp", ["fighting"], (234, 159, 207),
     ["COUNTER"], ["CROSS_CHOP", "ROCK_SLIDE"], ["shadoweligible"], LEAGUE_IVS),
    ("machamp_shadow", "Machamp (Shadow)", ["fighting"], (234, 159, 207),
     ["COUNTER"], ["CROSS_CHOP", "ROCK_SLIDE"], ["shadow"], LEAGUE_IVS),
    ("galvantula", "Galvantula", ["bug", "electric"], (201, 128, 172),
     ["VOLT_SWITCH"], ["LUNGE", "DISCHARGE"], [], LEAGUE_IVS),
    ("marowak_alolan", "Marowak (Alolan)", ["fire", "ghost"], (144, 186, 155),
     ["FIRE_SPIN"], ["SHADOW_BALL", "FLAMETHROWER"], [], LEAGUE_IVS),
    ("swampert", "Swampert", ["water", "ground"], (208, 175, 225),
     ["MUD_SHOT"], ["HYDRO_CANNON", "EARTHQUAKE"], [], LEAGUE_IVS),
]

# (move_id, name, type, power, energy, energy_gain, turns, buffs)
CATALOG_MOVES = [
    ("COUNTER", "Counter", "fighting", 8, 0, 7, 2, ()),
    ("BUBBLE", "Bubble", "water", 8, 0, 11, 3, ()),
    ("LOCK_ON", "Lock-On", "normal", 1, 0, 5, 1, ()),
    ("DRAGON_BREATH", "Dragon Breath", "dragon", 4, 0, 3, 1, ()),
    ("VOLT_SWITCH", "Volt Switch", "electric", 12, 0, 16, 4, ()),
    ("FIRE_SPIN", "Fire Spin", "fire", 9, 0, 10, 3, ()),
    ("MUD_SHOT", "Mud Shot", "ground", 3, 0, 9, 2, ()),
    ("ICE_PUNCH", "Ice Punch", "ice", 55, 40, 0, None, ()),
    ("PSYCHIC", "Psychic", "psychic", 75, 55, 0, None, ()),
    ("ICE_BEAM", "Ice Beam", "ice", 90, 55, 0, None, ()),
    ("PLAY_ROUGH", "Play Rough", "fairy", 90, 60, 0, None, ()),
    ("HYDRO_PUMP", "Hydro Pump", "water", 130, 75, 0, None, ()),
    ("FLASH_CANNON", "Flash Cannon", "steel", 110, 70, 0, None, ()),
    ("FOCUS_BLAST", "Focus Blast", "fighting", 150, 75, 0, None, ()),
    ("SKY_ATTACK", "Sky Attack", "flying", 75, 45, 0, None, ()),
    ("MOONBLAST", "Moonblast", "fairy", 110, 60, 0, None, (-1, 0)),
    ("CROSS_CHOP", "Cross Chop", "fighting", 50, 35, 0, None, ()),
    ("ROCK_SLIDE", "Rock Slide", "rock", 75, 45, 0, None, ()),
    ("LUNGE", "Lunge", "bug", 60, 45, 0, None, (0, -1)),
    ("DISCHARGE", "Discharge", "electric", 65, 40, 0, None, ()),
    ("SHADOW_BALL", "Shadow Ball", "ghost", 100, 55, 0, None, ()),
    ("FLAMETHROWER", "Flamethrower", "fire", 90, 55, 0, None, ()),
    ("HYDRO_CANNON", "Hydro Cannon", "water", 80, 40, 0, None, ()),
    ("EARTHQUAKE", "Earthquake", "ground", 120, 65, 0, None, ()),
]

# name -> (average, overall)
CATALOG_RANKINGS = {
    "Medicham": (90.0, 92.0),
    "Azumarill": (88.0, 90.0),
    "Swampert": (84.0, 85.0),
    "Registeel": (80.0, 78.0),
    "Altaria": (76.0, 70.0),
    "Machamp (Shadow)": (65.0, 62.0),
    "Galvantula": (60.0, 58.0),
    "Machamp": (55.0, 50.0),
}


def build_catalog_store() -> InMemoryKnowledgeStore:
    """Hand-built knowledge base with known typings, moves, and rankings."""
    characters = [
        CharacterRecord(
            species_id=key,
            species_name=name,
            dex=index + 1,
            base_stats={"atk": atk, "def": def_, "hp": hp},
            types=types,
            default_ivs=ivs,
            fast_moves=fast,
            charged_moves=charged,
            tags=tags,
            buddy_distance=3,
            third_move_cost=50000,
        )
        for index, (key, name, types, (atk, def_, hp), fast, charged, tags, ivs)
        in enumerate(CATALOG_CHARACTERS)
    ]
    characters.append(CharacterRecord(
        species_id="mew",
        species_name="Mew",
        dex=151,
        base_stats={"atk": 210, "def": 210, "hp": 225},
        types=["psychic"],
        fast_moves=["COUNTER"],
        charged_moves=["PSYCHIC", "FOCUS_BLAST"],
        released=False,
    ))

    moves = [
        MoveRecord(
            move_id=move_id,
            name=name,
            type=type_name,
            power=power,
            energy=energy,
            energy_gain=gain,
            turns=turns,
            buffs=buffs,
            buff_target="opponent" if buffs else None,
        )
        for move_id, name, type_name, power, energy, gain, turns, buffs in CATALOG_MOVES
    ]

    by_name = {c.species_name: c for c in characters}
    rankings = [
        RankingRecord(
            name=name,
            scores={"overall": overall, "leads": average},
            average=average,
            overall=overall,
            moveset=RecommendedMoveset(
                fast_move=by_name[name].fast_moves[0],
                charged_moves=tuple(by_name[name].charged_moves[:2]),
            ),
        )
        for name, (average, overall) in CATALOG_RANKINGS.items()
    ]
    meta_threats = [
        MetaThreat(name="Medicham", types=["fighting", "psychic"]),
        MetaThreat(name="Azumarill", types=["water", "fairy"]),
        MetaThreat(name="Swampert", types=["water", "ground"]),
        MetaThreat(name="Registeel", types=["steel", "none"]),
    ]
    return InMemoryKnowledgeStore(characters, moves, rankings, meta_threats)


@pytest.fixture
def catalog_store():
    """Hand-built knowledge base with known typings."""
    return build_catalog_store()


@pytest.fixture
def synthetic_store():
    """Generated knowledge base of 30 base species with a few variants."""
    return SyntheticKnowledgeGenerator(seed=7).generate_store(count=30, variant_rate=0.2)


@pytest.fixture
def rng():
    """Seeded random source."""
    return random.Random(1234)


@pytest.fixture
def test_config():
    """Small, seeded optimizer configuration."""
    return create_test_config()
