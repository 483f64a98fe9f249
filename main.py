"""
Pokémon GO Team Optimizer - Command Line Entry Point

This module wires configuration, Logfire observability, the knowledge base,
and the genetic team search into a single command:

    python main.py --mode GBL --anchor medicham --data-dir data/
    python main.py --mode PlayPokemon --synthetic 60 --seed 7 --json
"""

import argparse
import json
import logging
import sys
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
import logfire
from pydantic import ValidationError

from src.core.config import settings
from src.genetic.core.chromosome import TeamConstructionError
from src.genetic.core.config import OptimizerConfig, TournamentMode, UnknownModeError
from src.genetic.core.engine import TeamOptimizer, InvalidAnchorError, SearchResult
from src.knowledge.loader import KnowledgeLoadError, load_knowledge_store
from src.knowledge.store import KnowledgeStore
from src.knowledge.synthetic import SyntheticKnowledgeGenerator


logger = logging.getLogger("teambuilder.cli")


def configure_observability() -> None:
    """Configure Logfire and standard logging from settings."""
    logfire.configure(
        send_to_logfire=settings.logfire_send_to_logfire,
        console=False,
        **settings.get_logfire_settings()
    )
    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        description="Search for a competitive team with a genetic algorithm"
    )
    parser.add_argument(
        "--mode",
        default=TournamentMode.GBL.value,
        help="Tournament format: GBL (3 slots) or PlayPokemon (6 slots)"
    )
    parser.add_argument(
        "--anchor",
        action="append",
        default=[],
        metavar="SPECIES_ID",
        help="Lock a character into the team (repeatable, order is kept)"
    )
    parser.add_argument(
        "--data-dir",
        default=settings.data_dir,
        help="Directory with pokemon.json, moves.json and ranking CSVs"
    )
    parser.add_argument(
        "--synthetic",
        type=int,
        default=None,
        metavar="N",
        help="Use a generated knowledge base of N species instead of --data-dir"
    )
    parser.add_argument("--population", type=int, default=None, help="Teams per generation")
    parser.add_argument("--generations", type=int, default=None, help="Number of generations")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducible runs")
    parser.add_argument("--bracket", default=None, help="Only consider characters with IVs for this bracket (e.g. cp1500)")
    parser.add_argument("--json", action="store_true", help="Print the result as JSON")
    return parser


def load_store(args: argparse.Namespace) -> KnowledgeStore:
    """Load the knowledge base requested on the command line."""
    if args.synthetic:
        seed = args.seed if args.seed is not None else 42
        return SyntheticKnowledgeGenerator(seed=seed).generate_store(count=args.synthetic, variant_rate=0.2)
    return load_knowledge_store(args.data_dir, meta_threat_count=settings.meta_threat_count)


def build_config(args: argparse.Namespace) -> OptimizerConfig:
    """Optimizer configuration from settings overridden by command-line flags."""
    config = OptimizerConfig.from_settings(settings)
    if args.population is not None:
        config.evolution.population_size = args.population
    if args.generations is not None:
        config.evolution.generations = args.generations
    if args.seed is not None:
        config.random_seed = args.seed
    if args.bracket is not None:
        config.bracket = args.bracket
    return config


def format_result(result: SearchResult, members: List[Dict[str, Any]]) -> str:
    """Human-readable summary of a search result."""
    lines = [
        f"Best {result.mode.value} team (fitness {result.fitness:.4f}, "
        f"{result.generations_run} generations{', converged' if result.converged else ''}):"
    ]
    for index, member in enumerate(members):
        marker = "*" if index in result.anchors else " "
        if "name" not in member:
            lines.append(f" {marker} {index + 1}. {member['species_id']}")
            continue
        moves = ", ".join(member["charged_moves"])
        lines.append(
            f" {marker} {index + 1}. {member['name']} [{'/'.join(member['types'])}] "
            f"{member['role']} - {member['fast_move']} | {moves}"
        )

    lines.append("Breakdown:")
    for name, score in result.breakdown.items():
        lines.append(f"   {name:<18} {score:.3f}")
    return "\n".join(lines)


def main(argv: Optional[List[str]] = None) -> int:
    """Run the command line interface and return an exit code."""
    load_dotenv()
    args = build_parser().parse_args(argv)
    configure_observability()

    try:
        mode = TournamentMode.parse(args.mode)
        store = load_store(args)
        config = build_config(args)
        optimizer = TeamOptimizer(store, config)
        result = optimizer.search(mode, anchor_keys=args.anchor)
    except (UnknownModeError, InvalidAnchorError, KnowledgeLoadError, TeamConstructionError) as e:
        logfire.error("Team search failed", error=str(e), error_type=type(e).__name__)
        print(f"error: {e}", file=sys.stderr)
        return 1
    except (ValidationError, ValueError) as e:
        # Flag values the optimizer configuration rejects
        logfire.error("Invalid search configuration", error=str(e), error_type=type(e).__name__)
        print(f"error: invalid configuration: {e}", file=sys.stderr)
        return 1

    members = optimizer.describe_team(result.team)
    if args.json:
        print(json.dumps({**result.to_dict(), "members": members}, indent=2))
    else:
        print(format_result(result, members))
    return 0


if __name__ == "__main__":
    sys.exit(main())
