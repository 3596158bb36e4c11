"""Move catalog: read-only move definitions loaded from JSON.

Provides cached access to the bundled ``assets/moves.json`` plus a plain
in-memory catalog class so tests and callers can supply their own data.
"""
from __future__ import annotations
import json
from functools import lru_cache
from pathlib import Path
from typing import Dict, Iterable, List, Any

from pocketduel.battle.models import MoveDefinition
from pocketduel.core.errors import DataLoadError
from pocketduel.core.paths import MOVES_FILE

class MoveCatalog:
    def __init__(self, moves: Iterable[MoveDefinition]):
        self._moves: Dict[int, MoveDefinition] = {}
        for m in moves:
            if m.move_id in self._moves:
                raise ValueError(f"Duplicate move id {m.move_id}")
            self._moves[m.move_id] = m

    @classmethod
    def from_records(cls, records: Iterable[Dict[str, Any]]) -> "MoveCatalog":
        return cls(MoveDefinition.from_dict(r) for r in records)

    @classmethod
    def from_file(cls, path: Path) -> "MoveCatalog":
        try:
            records = json.loads(path.read_text(encoding="utf-8"))
            return cls.from_records(records)
        except (OSError, ValueError, KeyError) as e:
            raise DataLoadError(str(path), str(e)) from e

    def get(self, move_id: int) -> MoveDefinition:
        try:
            return self._moves[int(move_id)]
        except KeyError:
            raise KeyError(f"Move not found: {move_id}") from None

    def __contains__(self, move_id: object) -> bool:
        return move_id in self._moves

    def __len__(self) -> int:
        return len(self._moves)

    def all(self) -> List[MoveDefinition]:
        return [self._moves[k] for k in sorted(self._moves)]

@lru_cache(maxsize=None)
def default_move_catalog() -> MoveCatalog:
    return MoveCatalog.from_file(MOVES_FILE)

__all__ = ["MoveCatalog", "default_move_catalog"]
