"""Client-side battle mirror and its reducer.

``reduce(mirror, event)`` is a pure function: it never calls the transport and
never mutates its inputs. The controller performs transport calls and feeds the
results back in as events. ``ResolvingTurn`` is the input lock: while a move is
in flight, selection and confirmation are rejected.
"""
from __future__ import annotations
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Tuple

from pocketduel.battle.models import Outcome, Phase, TurnEvent
from pocketduel.core.errors import InvalidTransition
from pocketduel.transport.contract import BattleSessionView, CreatureView, UseMoveResponse

# Failure codes after which the server-side battle can no longer be resumed.
# battle_already_ended is included on purpose: retrying a move on an ended
# battle can never succeed, so the mirror ends instead of re-opening input.
SESSION_GONE_CODES = frozenset({"battle_not_found", "battle_already_ended"})


class ClientPhase(str, Enum):
    IDLE = "Idle"
    STARTING = "Starting"
    START_FAILED = "StartFailed"
    AWAITING_COMMAND = "AwaitingCommand"
    RESOLVING_TURN = "ResolvingTurn"
    ENDED = "Ended"


@dataclass(frozen=True)
class BattleMirror:
    phase: ClientPhase = ClientPhase.IDLE
    battle: Optional[BattleSessionView] = None
    selected_move_id: Optional[int] = None
    pending_message: Optional[str] = None
    last_events: Tuple[TurnEvent, ...] = ()
    last_error: Optional[str] = None
    winner: Optional[str] = None
    outcome: Optional[str] = None
    experience_gained: int = 0

    @property
    def player(self) -> Optional[CreatureView]:
        return self.battle.player if self.battle else None

    @property
    def enemy(self) -> Optional[CreatureView]:
        return self.battle.enemy if self.battle else None

    @property
    def is_locked(self) -> bool:
        return self.phase == ClientPhase.RESOLVING_TURN


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StartRequested:
    pass

@dataclass(frozen=True)
class StartSucceeded:
    battle: BattleSessionView

@dataclass(frozen=True)
class StartFailed:
    error: str

@dataclass(frozen=True)
class MoveSelected:
    move_id: Optional[int]

@dataclass(frozen=True)
class MoveConfirmed:
    pass

@dataclass(frozen=True)
class MoveSucceeded:
    response: UseMoveResponse

@dataclass(frozen=True)
class MoveFailed:
    error: str
    code: Optional[str] = None

@dataclass(frozen=True)
class FleeSucceeded:
    message: str
    outcome: Optional[str] = None

@dataclass(frozen=True)
class FleeFailed:
    error: str
    code: Optional[str] = None

@dataclass(frozen=True)
class StatusSynced:
    battle: BattleSessionView

@dataclass(frozen=True)
class MessageShown:
    pass

@dataclass(frozen=True)
class ErrorCleared:
    pass

@dataclass(frozen=True)
class ReturnedToIdle:
    pass


_ALLOWED = {
    StartRequested: {ClientPhase.IDLE, ClientPhase.START_FAILED},
    StartSucceeded: {ClientPhase.STARTING},
    StartFailed: {ClientPhase.STARTING},
    MoveSelected: {ClientPhase.AWAITING_COMMAND},
    MoveConfirmed: {ClientPhase.AWAITING_COMMAND},
    MoveSucceeded: {ClientPhase.RESOLVING_TURN},
    MoveFailed: {ClientPhase.RESOLVING_TURN},
    FleeSucceeded: {ClientPhase.AWAITING_COMMAND},
    FleeFailed: {ClientPhase.AWAITING_COMMAND},
    StatusSynced: {ClientPhase.AWAITING_COMMAND, ClientPhase.ENDED},
    MessageShown: set(ClientPhase),
    ErrorCleared: set(ClientPhase),
    ReturnedToIdle: {ClientPhase.ENDED, ClientPhase.START_FAILED},
}


def accepts(mirror: BattleMirror, event) -> bool:
    """True when ``reduce`` would take ``event`` in the mirror's current state."""
    if mirror.phase not in _ALLOWED.get(type(event), set()):
        return False
    if isinstance(event, MoveConfirmed):
        return mirror.selected_move_id is not None
    if isinstance(event, MessageShown):
        return mirror.pending_message is not None
    if isinstance(event, ErrorCleared):
        return mirror.last_error is not None
    return True


def _apply_turn(battle: BattleSessionView, response: UseMoveResponse) -> BattleSessionView:
    moves = [
        replace(m, current_pp=response.remaining_pp)
        if m.move_id == response.move_id and response.remaining_pp is not None else m
        for m in battle.player.moves
    ]
    player = replace(
        battle.player,
        current_hp=battle.player.current_hp if response.attacker_hp is None else response.attacker_hp,
        moves=moves,
    )
    enemy = replace(
        battle.enemy,
        current_hp=battle.enemy.current_hp if response.target_hp is None else response.target_hp,
    )
    return replace(
        battle,
        player=player,
        enemy=enemy,
        phase=Phase.ENDED.value if response.is_ended else Phase.SELECTING_COMMAND.value,
        turn_counter=battle.turn_counter + 1 if response.turn is None else response.turn + 1,
        outcome=response.outcome,
        winner=response.winner,
    )


def reduce(mirror: BattleMirror, event) -> BattleMirror:
    if not accepts(mirror, event):
        raise InvalidTransition(mirror.phase.value, type(event).__name__)

    if isinstance(event, StartRequested):
        return BattleMirror(phase=ClientPhase.STARTING)

    if isinstance(event, StartSucceeded):
        battle = event.battle
        opening = battle.recent_log[-1].message if battle.recent_log else None
        return replace(
            mirror,
            phase=ClientPhase.ENDED if battle.is_ended else ClientPhase.AWAITING_COMMAND,
            battle=battle,
            pending_message=opening,
            winner=battle.winner,
            outcome=battle.outcome,
        )

    if isinstance(event, StartFailed):
        return replace(mirror, phase=ClientPhase.START_FAILED, last_error=event.error)

    if isinstance(event, MoveSelected):
        selected = None if event.move_id == mirror.selected_move_id else event.move_id
        return replace(mirror, selected_move_id=selected)

    if isinstance(event, MoveConfirmed):
        return replace(mirror, phase=ClientPhase.RESOLVING_TURN, selected_move_id=None,
                       last_error=None, last_events=())

    if isinstance(event, MoveSucceeded):
        response = event.response
        return replace(
            mirror,
            phase=ClientPhase.ENDED if response.is_ended else ClientPhase.AWAITING_COMMAND,
            battle=_apply_turn(mirror.battle, response) if mirror.battle else None,
            pending_message=response.message,
            last_events=tuple(response.events),
            winner=response.winner,
            outcome=response.outcome,
            experience_gained=response.experience_gained,
        )

    if isinstance(event, MoveFailed):
        gone = event.code in SESSION_GONE_CODES
        return replace(mirror, phase=ClientPhase.ENDED if gone else ClientPhase.AWAITING_COMMAND,
                       last_error=event.error)

    if isinstance(event, FleeSucceeded):
        outcome = event.outcome or Outcome.PLAYER_FLED.value
        battle = replace(mirror.battle, phase=Phase.ENDED.value, outcome=outcome) if mirror.battle else None
        return replace(mirror, phase=ClientPhase.ENDED, battle=battle, selected_move_id=None,
                       pending_message=event.message, outcome=outcome)

    if isinstance(event, FleeFailed):
        gone = event.code in SESSION_GONE_CODES
        return replace(mirror, phase=ClientPhase.ENDED if gone else ClientPhase.AWAITING_COMMAND,
                       last_error=event.error)

    if isinstance(event, StatusSynced):
        battle = event.battle
        return replace(
            mirror,
            phase=ClientPhase.ENDED if battle.is_ended else mirror.phase,
            battle=battle,
            winner=battle.winner,
            outcome=battle.outcome,
        )

    if isinstance(event, MessageShown):
        return replace(mirror, pending_message=None)

    if isinstance(event, ErrorCleared):
        if mirror.phase == ClientPhase.START_FAILED:
            return BattleMirror()
        return replace(mirror, last_error=None)

    # ReturnedToIdle
    return BattleMirror()


__all__ = [
    "ClientPhase", "BattleMirror", "reduce", "accepts", "SESSION_GONE_CODES",
    "StartRequested", "StartSucceeded", "StartFailed", "MoveSelected", "MoveConfirmed",
    "MoveSucceeded", "MoveFailed", "FleeSucceeded", "FleeFailed", "StatusSynced",
    "MessageShown", "ErrorCleared", "ReturnedToIdle",
]
