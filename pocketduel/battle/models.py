"""Battle data model: move definitions, creature snapshots and the session aggregate.

Snapshots and move definitions are immutable reference data captured when a
battle starts. ``CombatState`` holds the only mutable numbers (HP and PP) and
clamps every write. ``BattleSession`` owns both combat states and enforces the
phase order ``SelectingCommand -> ResolvingTurn -> SelectingCommand | Ended``.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional, Tuple, Any

from pocketduel.core.errors import InvariantViolation


class Category(str, Enum):
    PHYSICAL = "physical"
    SPECIAL = "special"
    STATUS = "status"


class BattleType(str, Enum):
    WILD = "Wild"
    TRAINER = "Trainer"


class Phase(str, Enum):
    SELECTING_COMMAND = "SelectingCommand"
    RESOLVING_TURN = "ResolvingTurn"
    ENDED = "Ended"


class Outcome(str, Enum):
    PLAYER_WON = "PlayerWon"
    ENEMY_WON = "EnemyWon"
    DRAW = "Draw"
    PLAYER_FLED = "PlayerFled"


class Winner(str, Enum):
    PLAYER = "Player"
    ENEMY = "Enemy"
    DRAW = "Draw"


class Effectiveness(str, Enum):
    INEFFECTIVE = "Ineffective"
    NOT_VERY_EFFECTIVE = "NotVeryEffective"
    NORMAL = "Normal"
    SUPER_EFFECTIVE = "SuperEffective"


WINNER_BY_OUTCOME = {
    Outcome.PLAYER_WON: Winner.PLAYER,
    Outcome.ENEMY_WON: Winner.ENEMY,
    Outcome.DRAW: Winner.DRAW,
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class MoveDefinition:
    move_id: int
    name: str
    type: str
    category: Category
    power: int = 0
    accuracy: int = 100
    max_pp: int = 0
    description: str = ""

    def __post_init__(self):
        if not 0 <= self.accuracy <= 100:
            raise ValueError(f"Move {self.name}: accuracy must be within 0-100")
        if self.power < 0 or self.max_pp < 0:
            raise ValueError(f"Move {self.name}: power and PP cannot be negative")

    @property
    def is_status(self) -> bool:
        return self.category == Category.STATUS or self.power == 0

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "MoveDefinition":
        return cls(
            move_id=int(raw["move_id"]),
            name=raw["name"],
            type=raw["type"].lower(),
            category=Category(raw["category"]),
            power=int(raw.get("power", 0)),
            accuracy=int(raw.get("accuracy", 100)),
            max_pp=int(raw.get("pp", raw.get("max_pp", 0))),
            description=raw.get("description", ""),
        )


@dataclass(frozen=True)
class KnownMove:
    move: MoveDefinition
    current_pp: Optional[int] = None  # None => full PP

    def __post_init__(self):
        pp = self.move.max_pp if self.current_pp is None else self.current_pp
        object.__setattr__(self, "current_pp", max(0, min(int(pp), self.move.max_pp)))

    @property
    def move_id(self) -> int:
        return self.move.move_id


@dataclass(frozen=True)
class CreatureSnapshot:
    creature_id: str
    species_id: int
    species_name: str
    level: int
    types: Tuple[str, ...]
    max_hp: int
    attack: int
    defense: int
    moves: Tuple[KnownMove, ...] = ()
    current_hp: Optional[int] = None  # None => full HP
    special_attack: Optional[int] = None
    special_defense: Optional[int] = None
    nickname: Optional[str] = None
    owner_id: Optional[str] = None

    def __post_init__(self):
        if self.level < 1:
            raise ValueError(f"Creature {self.creature_id}: level must be at least 1")
        if self.max_hp <= 0:
            raise ValueError(f"Creature {self.creature_id}: max_hp must be positive")
        if self.attack <= 0 or self.defense <= 0:
            raise ValueError(f"Creature {self.creature_id}: attack and defense must be positive")
        if not self.types:
            raise ValueError(f"Creature {self.creature_id}: at least one type is required")
        hp = self.max_hp if self.current_hp is None else self.current_hp
        object.__setattr__(self, "current_hp", max(0, min(int(hp), self.max_hp)))
        object.__setattr__(self, "types", tuple(t.lower() for t in self.types))
        object.__setattr__(self, "moves", tuple(self.moves))

    @property
    def display_name(self) -> str:
        return self.nickname or self.species_name

    @property
    def sp_atk(self) -> int:
        return self.special_attack if self.special_attack is not None else self.attack

    @property
    def sp_def(self) -> int:
        return self.special_defense if self.special_defense is not None else self.defense

    def known_move(self, move_id: int) -> Optional[KnownMove]:
        for km in self.moves:
            if km.move_id == move_id:
                return km
        return None


class CombatState:
    """Mutable HP/PP for one side of a battle. Every write is clamped."""

    def __init__(self, snapshot: CreatureSnapshot):
        self.max_hp = snapshot.max_hp
        self.current_hp = int(snapshot.current_hp or 0)
        self.max_pp: Dict[int, int] = {km.move_id: km.move.max_pp for km in snapshot.moves}
        self.pp: Dict[int, int] = {km.move_id: int(km.current_pp or 0) for km in snapshot.moves}
        self._sealed = False

    def seal(self):
        self._sealed = True

    def _check_open(self):
        if self._sealed:
            raise InvariantViolation("combat state is read-only once the battle has ended")

    @property
    def is_fainted(self) -> bool:
        return self.current_hp <= 0

    def pp_of(self, move_id: int) -> int:
        return self.pp.get(move_id, 0)

    def usable_move_ids(self) -> List[int]:
        return [mid for mid, pp in self.pp.items() if pp > 0]

    def take_damage(self, amount: int) -> int:
        """Remove up to ``amount`` HP; returns the HP actually removed."""
        self._check_open()
        if amount < 0:
            raise InvariantViolation(f"negative damage {amount}")
        removed = min(int(amount), self.current_hp)
        self.current_hp = max(0, min(self.current_hp - removed, self.max_hp))
        return removed

    def consume_pp(self, move_id: int, amount: int = 1) -> int:
        self._check_open()
        if move_id not in self.pp:
            raise InvariantViolation(f"move {move_id} is not known")
        if self.pp[move_id] <= 0:
            raise InvariantViolation(f"move {move_id} has no PP left")
        self.pp[move_id] = max(0, min(self.pp[move_id] - amount, self.max_pp[move_id]))
        return self.pp[move_id]


@dataclass
class BattleLogEntry:
    turn: int
    action: str          # move / system / flee
    actor: str
    message: str
    move_id: Optional[int] = None
    damage: int = 0
    created_at: datetime = field(default_factory=_utcnow)


_ALLOWED_PHASES = {
    Phase.SELECTING_COMMAND: {Phase.RESOLVING_TURN, Phase.ENDED},
    Phase.RESOLVING_TURN: {Phase.SELECTING_COMMAND, Phase.ENDED},
    Phase.ENDED: set(),
}


class BattleSession:
    def __init__(self, battle_id: str, player_id: str, battle_type: BattleType,
                 player: CreatureSnapshot, enemy: CreatureSnapshot):
        self.battle_id = battle_id
        self.player_id = player_id
        self.battle_type = battle_type
        self.player = player
        self.enemy = enemy
        self.player_state = CombatState(player)
        self.enemy_state = CombatState(enemy)
        self.turn_counter = 1
        self.phase = Phase.SELECTING_COMMAND
        self.outcome: Optional[Outcome] = None
        self.end_reason: Optional[str] = None
        self.created_at = _utcnow()
        self.ended_at: Optional[datetime] = None
        self.log: List[BattleLogEntry] = []

    @property
    def is_ended(self) -> bool:
        return self.phase == Phase.ENDED

    @property
    def winner(self) -> Optional[Winner]:
        if self.outcome is None:
            return None
        return WINNER_BY_OUTCOME.get(self.outcome)

    def advance(self, phase: Phase):
        if phase not in _ALLOWED_PHASES[self.phase]:
            raise InvariantViolation(f"phase {self.phase.value} cannot move to {phase.value}")
        self.phase = phase

    def finish(self, outcome: Outcome, reason: Optional[str] = None):
        self.advance(Phase.ENDED)
        self.outcome = outcome
        self.end_reason = reason
        self.ended_at = _utcnow()
        self.player_state.seal()
        self.enemy_state.seal()

    def record(self, action: str, actor: str, message: str,
               move_id: Optional[int] = None, damage: int = 0) -> BattleLogEntry:
        entry = BattleLogEntry(self.turn_counter, action, actor, message, move_id, damage)
        self.log.append(entry)
        return entry

    def recent_log(self, limit: int) -> List[BattleLogEntry]:
        if limit <= 0:
            return []
        return self.log[-limit:]


@dataclass(frozen=True)
class TurnEvent:
    """Semantic event for the presentation layer (damage, miss, faint...)."""
    kind: str   # move_used / missed / damage / critical / effectiveness / no_effect / fainted / no_moves / battle_ended
    side: str   # player / enemy: the side the event concerns
    text: str
    amount: int = 0


@dataclass(frozen=True)
class MoveResult:
    actor_id: str
    actor_name: str
    move_id: int
    move_name: str
    hit: bool
    critical: bool
    effectiveness: Effectiveness
    damage: int
    target_hp: int


@dataclass(frozen=True)
class TurnOutcome:
    battle_id: str
    turn: int
    player_action: MoveResult
    enemy_action: Optional[MoveResult]
    player_hp: int
    enemy_hp: int
    remaining_pp: int
    phase: Phase
    outcome: Optional[Outcome]
    winner: Optional[Winner]
    experience_gained: int
    events: Tuple[TurnEvent, ...]
    message: str

    @property
    def is_terminal(self) -> bool:
        return self.phase == Phase.ENDED


__all__ = [
    "Category", "BattleType", "Phase", "Outcome", "Winner", "Effectiveness",
    "MoveDefinition", "KnownMove", "CreatureSnapshot", "CombatState",
    "BattleLogEntry", "BattleSession", "TurnEvent", "MoveResult", "TurnOutcome",
]
