"""Creature lookup: owned/trainer creatures and species for wild encounters.

Owned creatures are stored with concrete stats and per-move PP. Wild
creatures are spawned from a species entry with level-scaled stats:
``hp = base_hp + level*2`` and ``attack/defense = floor(base + level*1.5)``.
"""
from __future__ import annotations
import json
import math
import uuid
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple, Any

from pocketduel.battle.models import CreatureSnapshot, KnownMove
from pocketduel.battle.experience import clamp_level
from pocketduel.core.errors import CreatureNotFound, DataLoadError
from pocketduel.core.paths import CREATURES_FILE, SPECIES_FILE
from .moves import MoveCatalog, default_move_catalog

MAX_KNOWN_MOVES = 4

@dataclass(frozen=True)
class Species:
    species_id: int
    name: str
    types: Tuple[str, ...]
    hp: int
    attack: int
    defense: int
    moves: Tuple[int, ...] = ()

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Species":
        return cls(
            species_id=int(raw["species_id"]),
            name=raw["name"],
            types=tuple(t.lower() for t in raw["types"]),
            hp=int(raw["hp"]),
            attack=int(raw["attack"]),
            defense=int(raw["defense"]),
            moves=tuple(int(m) for m in raw.get("moves", [])),
        )

def wild_stats(species: Species, level: int) -> Dict[str, int]:
    return {
        "hp": math.floor(species.hp + level * 2),
        "attack": math.floor(species.attack + level * 1.5),
        "defense": math.floor(species.defense + level * 1.5),
    }

class CreatureCatalog:
    def __init__(self, moves: MoveCatalog, species: Iterable[Species] = (),
                 creatures: Iterable[CreatureSnapshot] = ()):
        self.moves = moves
        self._species: Dict[int, Species] = {s.species_id: s for s in species}
        self._creatures: Dict[str, CreatureSnapshot] = {}
        for c in creatures:
            self.add(c)

    @classmethod
    def from_files(cls, species_path: Path, creatures_path: Path,
                   moves: Optional[MoveCatalog] = None) -> "CreatureCatalog":
        moves = moves or default_move_catalog()
        try:
            species_raw = json.loads(species_path.read_text(encoding="utf-8"))
            creatures_raw = json.loads(creatures_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise DataLoadError(f"{species_path}, {creatures_path}", str(e)) from e
        catalog = cls(moves, species=[Species.from_dict(r) for r in species_raw])
        for raw in creatures_raw:
            try:
                catalog.add(catalog._snapshot_from_record(raw))
            except (KeyError, ValueError, CreatureNotFound) as e:
                raise DataLoadError(str(creatures_path), f"creature {raw.get('creature_id')}: {e}") from e
        return catalog

    def _snapshot_from_record(self, raw: Dict[str, Any]) -> CreatureSnapshot:
        species = self.species(int(raw["species_id"]))
        known = [KnownMove(self.moves.get(m["move_id"]), m.get("current_pp"))
                 for m in raw.get("moves", [])][:MAX_KNOWN_MOVES]
        return CreatureSnapshot(
            creature_id=raw["creature_id"],
            species_id=species.species_id,
            species_name=species.name,
            level=clamp_level(raw["level"]),
            types=tuple(raw.get("types") or species.types),
            max_hp=int(raw["max_hp"]),
            current_hp=raw.get("current_hp"),
            attack=int(raw["attack"]),
            defense=int(raw["defense"]),
            special_attack=raw.get("special_attack"),
            special_defense=raw.get("special_defense"),
            moves=tuple(known),
            nickname=raw.get("nickname"),
            owner_id=raw.get("owner_id"),
        )

    def add(self, snapshot: CreatureSnapshot):
        self._creatures[snapshot.creature_id] = snapshot

    def species(self, species_id: int) -> Species:
        sp = self._species.get(species_id)
        if sp is None:
            raise CreatureNotFound(f"species:{species_id}")
        return sp

    def snapshot(self, creature_id: str) -> CreatureSnapshot:
        snap = self._creatures.get(str(creature_id))
        if snap is None:
            raise CreatureNotFound(str(creature_id))
        return snap

    def owned_by(self, owner_id: str) -> List[CreatureSnapshot]:
        return [c for c in self._creatures.values() if c.owner_id == owner_id]

    def spawn_wild(self, species_id: int, level: int) -> CreatureSnapshot:
        """Build a fresh wild creature; it is not added to the catalog."""
        species = self.species(species_id)
        level = clamp_level(level)
        stats = wild_stats(species, level)
        known = tuple(KnownMove(self.moves.get(mid)) for mid in species.moves[-MAX_KNOWN_MOVES:])
        return CreatureSnapshot(
            creature_id=f"wild-{species.species_id}-{uuid.uuid4().hex[:8]}",
            species_id=species.species_id,
            species_name=species.name,
            level=level,
            types=species.types,
            max_hp=stats["hp"],
            attack=stats["attack"],
            defense=stats["defense"],
            moves=known,
        )

@lru_cache(maxsize=None)
def default_creature_catalog() -> CreatureCatalog:
    return CreatureCatalog.from_files(SPECIES_FILE, CREATURES_FILE)

__all__ = ["Species", "CreatureCatalog", "wild_stats", "default_creature_catalog"]
