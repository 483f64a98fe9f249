"""
Knowledge base loader.

Builds an InMemoryKnowledgeStore from a data directory holding the game
master exports:

    pokemon.json                  character catalog (required)
    moves.json                    move catalog (required)
    type_effectiveness.json       attack -> defense -> multiplier (optional)
    rankings-<category>.csv       ranking tables, one per category (optional)

Ranking tables are read with pandas. Each character's average is the mean of
its scores across every category it appears in; its overall score comes from
the "overall" table, whose row order also defines the meta threat list.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import logfire
import pandas as pd
from pydantic import ValidationError

from src.coverage.type_chart import TypeChart
from src.knowledge.models import (
    CharacterRecord,
    MoveRecord,
    RankingRecord,
    MetaThreat,
    RecommendedMoveset,
)
from src.knowledge.store import InMemoryKnowledgeStore


logger = logging.getLogger("teambuilder.knowledge")

CHARACTERS_FILE = "pokemon.json"
MOVES_FILE = "moves.json"
TYPE_CHART_FILE = "type_effectiveness.json"
RANKINGS_PATTERN = "rankings-*.csv"
OVERALL_CATEGORY = "overall"
DEFAULT_META_THREAT_COUNT = 100

NAME_COLUMN = "Pokemon"
SCORE_COLUMN = "Score"
TYPE_COLUMNS = ("Type 1", "Type 2")
FAST_MOVE_COLUMN = "Fast Move"
CHARGED_MOVE_COLUMNS = ("Charged Move 1", "Charged Move 2")


class KnowledgeLoadError(Exception):
    """Raised when a knowledge base directory cannot be loaded."""

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.path = str(path) if path is not None else None
        self.details = details or {}


def _read_json(path: Path) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise KnowledgeLoadError(f"Invalid JSON in {path.name}: {e}", path=path) from e
    except UnicodeDecodeError as e:
        raise KnowledgeLoadError(f"{path.name} is not valid UTF-8: {e.reason}", path=path) from e


def _parse_records(path: Path, model, raw: Any) -> List[Any]:
    if not isinstance(raw, list):
        raise KnowledgeLoadError(f"{path.name} must contain a JSON array", path=path)

    records = []
    for index, item in enumerate(raw):
        try:
            records.append(model.model_validate(item))
        except ValidationError as e:
            raise KnowledgeLoadError(
                f"Invalid record #{index} in {path.name}: {e.error_count()} validation error(s)",
                path=path,
                details={"index": index, "errors": e.errors()},
            ) from e
    return records


def _move_id_for(name: str, by_name: Dict[str, str]) -> str:
    """Resolve a move display name from a ranking export to a move key."""
    if name in by_name:
        return by_name[name]
    return name.strip().upper().replace(" ", "_").replace("-", "_")


def _category_from_path(path: Path) -> str:
    return path.stem[len("rankings-"):].lower()


def load_ranking_tables(
    paths: List[Path],
    moves: List[MoveRecord],
    meta_threat_count: int = DEFAULT_META_THREAT_COUNT,
) -> Tuple[List[RankingRecord], List[MetaThreat]]:
    """
    Aggregate per-category ranking CSVs into ranking records.

    Args:
        paths: One CSV per ranking category
        moves: Move catalog, used to map move display names to keys
        meta_threat_count: How many leading rows of the overall table become
            meta threats

    Returns:
        Tuple of (ranking records, meta threats)
    """
    scores: Dict[str, Dict[str, float]] = {}
    movesets: Dict[str, RecommendedMoveset] = {}
    meta_threats: List[MetaThreat] = []
    move_ids_by_name = {m.name: m.move_id for m in moves if m.name}

    for path in sorted(paths):
        category = _category_from_path(path)
        try:
            frame = pd.read_csv(path)
        except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
            raise KnowledgeLoadError(f"Unreadable ranking table {path.name}: {e}", path=path) from e

        missing = [c for c in (NAME_COLUMN, SCORE_COLUMN) if c not in frame.columns]
        if missing:
            raise KnowledgeLoadError(
                f"{path.name} is missing columns: {', '.join(missing)}",
                path=path,
            )

        frame = frame.dropna(subset=[NAME_COLUMN, SCORE_COLUMN])
        for index, row in enumerate(frame.to_dict(orient="records")):
            name = str(row[NAME_COLUMN])
            try:
                score = float(row[SCORE_COLUMN])
            except (TypeError, ValueError) as e:
                raise KnowledgeLoadError(
                    f"Non-numeric {SCORE_COLUMN} for {name} in {path.name}: {row[SCORE_COLUMN]!r}",
                    path=path,
                    details={"index": index, "name": name},
                ) from e
            scores.setdefault(name, {})[category] = score

            if name not in movesets and isinstance(row.get(FAST_MOVE_COLUMN), str):
                charged = tuple(
                    _move_id_for(row[col], move_ids_by_name)
                    for col in CHARGED_MOVE_COLUMNS
                    if isinstance(row.get(col), str)
                )
                movesets[name] = RecommendedMoveset(
                    fast_move=_move_id_for(row[FAST_MOVE_COLUMN], move_ids_by_name),
                    charged_moves=charged,
                )

        if category == OVERALL_CATEGORY:
            for row in frame.head(meta_threat_count).to_dict(orient="records"):
                types = [row.get(col) for col in TYPE_COLUMNS if isinstance(row.get(col), str)]
                meta_threats.append(MetaThreat(name=str(row[NAME_COLUMN]), types=types))

        logger.debug(f"Loaded {len(frame)} rows from {path.name}")

    rankings = [
        RankingRecord(
            name=name,
            scores=by_category,
            average=sum(by_category.values()) / len(by_category),
            overall=by_category.get(OVERALL_CATEGORY, 0.0),
            moveset=movesets.get(name),
        )
        for name, by_category in scores.items()
    ]
    return rankings, meta_threats


def load_knowledge_store(
    data_dir: Union[str, Path],
    meta_threat_count: int = DEFAULT_META_THREAT_COUNT,
) -> InMemoryKnowledgeStore:
    """
    Load a knowledge store from a data directory.

    Args:
        data_dir: Directory holding the catalog files
        meta_threat_count: Number of overall-ranking leaders kept as meta threats

    Returns:
        Populated InMemoryKnowledgeStore

    Raises:
        KnowledgeLoadError: If required files are missing or malformed
    """
    data_path = Path(data_dir)
    if not data_path.is_dir():
        raise KnowledgeLoadError(f"Data directory not found: {data_path}", path=data_path)

    with logfire.span("Load Knowledge Base", data_dir=str(data_path)):
        for required in (CHARACTERS_FILE, MOVES_FILE):
            if not (data_path / required).is_file():
                raise KnowledgeLoadError(
                    f"Missing required file {required} in {data_path}",
                    path=data_path / required,
                )

        characters_path = data_path / CHARACTERS_FILE
        moves_path = data_path / MOVES_FILE
        characters = _parse_records(characters_path, CharacterRecord, _read_json(characters_path))
        moves = _parse_records(moves_path, MoveRecord, _read_json(moves_path))

        type_chart = None
        chart_path = data_path / TYPE_CHART_FILE
        if chart_path.is_file():
            matrix = _read_json(chart_path)
            if not isinstance(matrix, dict):
                raise KnowledgeLoadError(f"{TYPE_CHART_FILE} must contain a JSON object", path=chart_path)
            type_chart = TypeChart(matrix)

        ranking_paths = list(data_path.glob(RANKINGS_PATTERN))
        rankings, meta_threats = load_ranking_tables(ranking_paths, moves, meta_threat_count)

        store = InMemoryKnowledgeStore(
            characters=characters,
            moves=moves,
            rankings=rankings,
            meta_threats=meta_threats,
            type_chart=type_chart,
        )

        logger.info(
            f"Loaded knowledge base: {len(characters)} characters, {len(moves)} moves, "
            f"{len(rankings)} ranked, {len(meta_threats)} meta threats"
        )
        logfire.info(
            "Knowledge Base Loaded",
            characters=len(characters),
            moves=len(moves),
            rankings=len(rankings),
            meta_threats=len(meta_threats),
        )
        return store
