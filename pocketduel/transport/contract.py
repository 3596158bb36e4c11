"""Battle transport contract: request/response records exchanged with the endpoint.

Every record converts to and from a plain JSON-compatible dict. Domain
objects never cross the boundary; the endpoint builds views from them.
"""
from __future__ import annotations
from dataclasses import dataclass, asdict, field
from typing import Any, Dict, List, Optional

from pocketduel.battle.models import (
    BattleLogEntry, BattleSession, CombatState, CreatureSnapshot, MoveDefinition,
    Phase, TurnEvent, TurnOutcome,
)

STATUS_IN_PROGRESS = "InProgress"
STATUS_ENDED = "Ended"

DEFAULT_BATTLE_TYPE = "Trainer"


# ---------------------------------------------------------------------------
# Views
# ---------------------------------------------------------------------------

@dataclass
class MoveView:
    move_id: int
    name: str
    type: str
    category: str
    power: int
    accuracy: int
    current_pp: int
    max_pp: int
    description: str = ""

    @classmethod
    def from_definition(cls, move: MoveDefinition, current_pp: Optional[int] = None) -> "MoveView":
        return cls(
            move_id=move.move_id,
            name=move.name,
            type=move.type,
            category=move.category.value,
            power=move.power,
            accuracy=move.accuracy,
            current_pp=move.max_pp if current_pp is None else current_pp,
            max_pp=move.max_pp,
            description=move.description,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MoveView":
        return cls(
            move_id=int(data["move_id"]),
            name=data["name"],
            type=data.get("type", "normal"),
            category=data.get("category", "physical"),
            power=int(data.get("power", 0)),
            accuracy=int(data.get("accuracy", 100)),
            current_pp=int(data.get("current_pp", 0)),
            max_pp=int(data.get("max_pp", 0)),
            description=data.get("description", ""),
        )


@dataclass
class CreatureView:
    creature_id: str
    name: str
    species_name: str
    level: int
    types: List[str]
    current_hp: int
    max_hp: int
    moves: List[MoveView] = field(default_factory=list)

    @classmethod
    def from_snapshot(cls, snapshot: CreatureSnapshot, state: CombatState) -> "CreatureView":
        return cls(
            creature_id=snapshot.creature_id,
            name=snapshot.display_name,
            species_name=snapshot.species_name,
            level=snapshot.level,
            types=list(snapshot.types),
            current_hp=state.current_hp,
            max_hp=state.max_hp,
            moves=[MoveView.from_definition(km.move, state.pp_of(km.move_id)) for km in snapshot.moves],
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CreatureView":
        return cls(
            creature_id=data["creature_id"],
            name=data["name"],
            species_name=data.get("species_name", data["name"]),
            level=int(data["level"]),
            types=list(data.get("types", [])),
            current_hp=int(data["current_hp"]),
            max_hp=int(data["max_hp"]),
            moves=[MoveView.from_dict(m) for m in data.get("moves", [])],
        )

    def move(self, move_id: int) -> Optional[MoveView]:
        for m in self.moves:
            if m.move_id == move_id:
                return m
        return None


@dataclass
class LogEntryView:
    turn: int
    action: str
    actor: str
    message: str
    move_id: Optional[int] = None
    damage: int = 0
    created_at: str = ""

    @classmethod
    def from_entry(cls, entry: BattleLogEntry) -> "LogEntryView":
        return cls(entry.turn, entry.action, entry.actor, entry.message,
                   entry.move_id, entry.damage, entry.created_at.isoformat())

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LogEntryView":
        return cls(
            turn=int(data["turn"]),
            action=data["action"],
            actor=data["actor"],
            message=data["message"],
            move_id=data.get("move_id"),
            damage=int(data.get("damage", 0)),
            created_at=data.get("created_at", ""),
        )


@dataclass
class BattleSessionView:
    battle_id: str
    player_id: str
    battle_type: str
    phase: str
    turn_counter: int
    player: CreatureView
    enemy: CreatureView
    outcome: Optional[str] = None
    winner: Optional[str] = None
    end_reason: Optional[str] = None
    created_at: str = ""
    ended_at: Optional[str] = None
    recent_log: List[LogEntryView] = field(default_factory=list)

    @classmethod
    def from_session(cls, session: BattleSession, recent_log_limit: int = 5) -> "BattleSessionView":
        return cls(
            battle_id=session.battle_id,
            player_id=session.player_id,
            battle_type=session.battle_type.value,
            phase=session.phase.value,
            turn_counter=session.turn_counter,
            player=CreatureView.from_snapshot(session.player, session.player_state),
            enemy=CreatureView.from_snapshot(session.enemy, session.enemy_state),
            outcome=session.outcome.value if session.outcome else None,
            winner=session.winner.value if session.winner else None,
            end_reason=session.end_reason,
            created_at=session.created_at.isoformat(),
            ended_at=session.ended_at.isoformat() if session.ended_at else None,
            recent_log=[LogEntryView.from_entry(e) for e in session.recent_log(recent_log_limit)],
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BattleSessionView":
        return cls(
            battle_id=data["battle_id"],
            player_id=data["player_id"],
            battle_type=data["battle_type"],
            phase=data["phase"],
            turn_counter=int(data["turn_counter"]),
            player=CreatureView.from_dict(data["player"]),
            enemy=CreatureView.from_dict(data["enemy"]),
            outcome=data.get("outcome"),
            winner=data.get("winner"),
            end_reason=data.get("end_reason"),
            created_at=data.get("created_at", ""),
            ended_at=data.get("ended_at"),
            recent_log=[LogEntryView.from_dict(e) for e in data.get("recent_log", [])],
        )

    @property
    def is_ended(self) -> bool:
        return self.phase == Phase.ENDED.value

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _battle_from(data: Dict[str, Any]) -> Optional[BattleSessionView]:
    raw = data.get("battle")
    return BattleSessionView.from_dict(raw) if raw is not None else None


# ---------------------------------------------------------------------------
# Start
# ---------------------------------------------------------------------------

@dataclass
class StartRequest:
    player_id: str
    player_creature_id: str
    enemy_creature_id: str
    battle_type: str = DEFAULT_BATTLE_TYPE

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StartRequest":
        return cls(
            player_id=data["player_id"],
            player_creature_id=data["player_creature_id"],
            enemy_creature_id=str(data["enemy_creature_id"]),
            battle_type=data.get("battle_type", DEFAULT_BATTLE_TYPE),
        )


@dataclass
class StartResponse:
    success: bool
    battle: Optional[BattleSessionView] = None
    error: Optional[str] = None
    error_code: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StartResponse":
        return cls(
            success=bool(data["success"]),
            battle=_battle_from(data),
            error=data.get("error"),
            error_code=data.get("error_code"),
        )


# ---------------------------------------------------------------------------
# UseMove
# ---------------------------------------------------------------------------

@dataclass
class UseMoveRequest:
    battle_id: str
    acting_creature_id: str
    move_id: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UseMoveRequest":
        return cls(
            battle_id=data["battle_id"],
            acting_creature_id=data["acting_creature_id"],
            move_id=int(data["move_id"]),
        )


@dataclass
class UseMoveResponse:
    success: bool
    message: str = ""
    move_id: Optional[int] = None
    move_name: Optional[str] = None
    hit: bool = False
    critical: bool = False
    effectiveness: Optional[str] = None
    damage_dealt: int = 0
    attacker_hp: Optional[int] = None
    target_hp: Optional[int] = None
    remaining_pp: Optional[int] = None
    battle_status: Optional[str] = None
    winner: Optional[str] = None
    outcome: Optional[str] = None
    turn: Optional[int] = None
    enemy_move_name: Optional[str] = None
    enemy_damage: int = 0
    experience_gained: int = 0
    events: List[TurnEvent] = field(default_factory=list)
    error_code: Optional[str] = None

    @classmethod
    def from_outcome(cls, outcome: TurnOutcome) -> "UseMoveResponse":
        player = outcome.player_action
        enemy = outcome.enemy_action
        return cls(
            success=True,
            message=outcome.message,
            move_id=player.move_id,
            move_name=player.move_name,
            hit=player.hit,
            critical=player.critical,
            effectiveness=player.effectiveness.value,
            damage_dealt=player.damage,
            attacker_hp=outcome.player_hp,
            target_hp=outcome.enemy_hp,
            remaining_pp=outcome.remaining_pp,
            battle_status=STATUS_ENDED if outcome.is_terminal else STATUS_IN_PROGRESS,
            winner=outcome.winner.value if outcome.winner else None,
            outcome=outcome.outcome.value if outcome.outcome else None,
            turn=outcome.turn,
            enemy_move_name=enemy.move_name if enemy else None,
            enemy_damage=enemy.damage if enemy else 0,
            experience_gained=outcome.experience_gained,
            events=list(outcome.events),
        )

    @classmethod
    def failure(cls, message: str, error_code: Optional[str] = None) -> "UseMoveResponse":
        return cls(success=False, message=message, error_code=error_code)

    @property
    def is_ended(self) -> bool:
        return self.battle_status == STATUS_ENDED

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UseMoveResponse":
        return cls(
            success=bool(data["success"]),
            message=data.get("message", ""),
            move_id=data.get("move_id"),
            move_name=data.get("move_name"),
            hit=bool(data.get("hit", False)),
            critical=bool(data.get("critical", False)),
            effectiveness=data.get("effectiveness"),
            damage_dealt=int(data.get("damage_dealt", 0)),
            attacker_hp=data.get("attacker_hp"),
            target_hp=data.get("target_hp"),
            remaining_pp=data.get("remaining_pp"),
            battle_status=data.get("battle_status"),
            winner=data.get("winner"),
            outcome=data.get("outcome"),
            turn=data.get("turn"),
            enemy_move_name=data.get("enemy_move_name"),
            enemy_damage=int(data.get("enemy_damage", 0)),
            experience_gained=int(data.get("experience_gained", 0)),
            events=[TurnEvent(**e) for e in data.get("events", [])],
            error_code=data.get("error_code"),
        )


# ---------------------------------------------------------------------------
# End / Status / Moves
# ---------------------------------------------------------------------------

@dataclass
class EndRequest:
    battle_id: str
    reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EndRequest":
        return cls(battle_id=data["battle_id"], reason=data.get("reason"))


@dataclass
class EndResponse:
    success: bool
    message: str = ""
    outcome: Optional[str] = None
    error_code: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EndResponse":
        return cls(
            success=bool(data["success"]),
            message=data.get("message", ""),
            outcome=data.get("outcome"),
            error_code=data.get("error_code"),
        )


@dataclass
class StatusRequest:
    battle_id: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StatusRequest":
        return cls(battle_id=data["battle_id"])


@dataclass
class StatusResponse:
    success: bool
    battle: Optional[BattleSessionView] = None
    error: Optional[str] = None
    error_code: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StatusResponse":
        return cls(
            success=bool(data["success"]),
            battle=_battle_from(data),
            error=data.get("error"),
            error_code=data.get("error_code"),
        )


@dataclass
class MoveListResponse:
    success: bool
    moves: List[MoveView] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MoveListResponse":
        return cls(success=bool(data["success"]), moves=[MoveView.from_dict(m) for m in data.get("moves", [])])


__all__ = [
    "STATUS_IN_PROGRESS", "STATUS_ENDED",
    "MoveView", "CreatureView", "LogEntryView", "BattleSessionView",
    "StartRequest", "StartResponse", "UseMoveRequest", "UseMoveResponse",
    "EndRequest", "EndResponse", "StatusRequest", "StatusResponse", "MoveListResponse",
]
