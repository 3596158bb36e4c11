"""Battle client: owns the mirror and talks to the transport.

The transport is passed in by whoever owns the client; nothing here reaches
for a shared instance. Rejected intents return False and leave the mirror as
it was.
"""
from __future__ import annotations
from typing import Callable, List, Optional

from pocketduel.core.errors import TransportError
from pocketduel.core.logging import logger
from pocketduel.transport.contract import (
    EndRequest, StartRequest, StatusRequest, UseMoveRequest, DEFAULT_BATTLE_TYPE,
)
from pocketduel.transport.local import BattleTransport
from .state import (
    BattleMirror, ClientPhase, ErrorCleared, FleeFailed, FleeSucceeded, MessageShown,
    MoveConfirmed, MoveFailed, MoveSelected, MoveSucceeded, ReturnedToIdle, StartFailed,
    StartRequested, StartSucceeded, StatusSynced, accepts, reduce,
)

TRANSPORT_ERROR_MESSAGE = "Could not reach the battle server. Please try again."

MirrorListener = Callable[[BattleMirror], None]


class BattleClient:
    def __init__(self, transport: BattleTransport, player_id: str):
        self.transport = transport
        self.player_id = player_id
        self.mirror = BattleMirror()
        self._listeners: List[MirrorListener] = []

    def on_change(self, fn: MirrorListener):
        self._listeners.append(fn)

    def _dispatch(self, event) -> BattleMirror:
        self.mirror = reduce(self.mirror, event)
        for fn in self._listeners:
            fn(self.mirror)
        return self.mirror

    @property
    def phase(self) -> ClientPhase:
        return self.mirror.phase

    # ------------------------------------------------------------------
    def start(self, player_creature_id: str, enemy_creature_id: str,
              battle_type: str = DEFAULT_BATTLE_TYPE) -> bool:
        if not accepts(self.mirror, StartRequested()):
            return False
        self._dispatch(StartRequested())
        request = StartRequest(self.player_id, player_creature_id, str(enemy_creature_id), battle_type)
        try:
            response = self.transport.start(request)
        except TransportError as e:
            logger.warn("StartTransportFailed", error=str(e))
            self._dispatch(StartFailed(TRANSPORT_ERROR_MESSAGE))
            return False
        except Exception:
            self._dispatch(StartFailed(TRANSPORT_ERROR_MESSAGE))
            raise
        if response.success and response.battle is not None:
            self._dispatch(StartSucceeded(response.battle))
            return True
        self._dispatch(StartFailed(response.error or TRANSPORT_ERROR_MESSAGE))
        return False

    def select_move(self, move_id: Optional[int]) -> bool:
        event = MoveSelected(move_id)
        if not accepts(self.mirror, event):
            return False
        self._dispatch(event)
        return True

    def confirm_move(self) -> bool:
        """Send the selected move. True only when the turn resolved."""
        if not accepts(self.mirror, MoveConfirmed()):
            return False
        move_id = self.mirror.selected_move_id
        battle = self.mirror.battle
        self._dispatch(MoveConfirmed())
        try:
            response = self.transport.use_move(
                UseMoveRequest(battle.battle_id, battle.player.creature_id, move_id))
        except TransportError as e:
            logger.warn("UseMoveTransportFailed", battle_id=battle.battle_id, error=str(e))
            self._dispatch(MoveFailed(TRANSPORT_ERROR_MESSAGE))
            return False
        except Exception:
            # Never leave the input lock held
            self._dispatch(MoveFailed(TRANSPORT_ERROR_MESSAGE))
            raise
        if not response.success:
            self._dispatch(MoveFailed(response.message, response.error_code))
            return False
        self._dispatch(MoveSucceeded(response))
        return True

    def request_flee(self) -> bool:
        if self.mirror.phase != ClientPhase.AWAITING_COMMAND:
            return False
        battle_id = self.mirror.battle.battle_id
        try:
            response = self.transport.end(EndRequest(battle_id))
        except TransportError as e:
            logger.warn("FleeTransportFailed", battle_id=battle_id, error=str(e))
            self._dispatch(FleeFailed(TRANSPORT_ERROR_MESSAGE))
            return False
        if not response.success:
            self._dispatch(FleeFailed(response.message, response.error_code))
            return False
        self._dispatch(FleeSucceeded(response.message, response.outcome))
        return True

    def refresh(self) -> bool:
        """Re-sync the mirror from the server's view of the battle."""
        if self.mirror.battle is None or not accepts(self.mirror, StatusSynced(self.mirror.battle)):
            return False
        try:
            response = self.transport.status(StatusRequest(self.mirror.battle.battle_id))
        except TransportError as e:
            logger.warn("StatusTransportFailed", error=str(e))
            return False
        if not response.success or response.battle is None:
            return False
        self._dispatch(StatusSynced(response.battle))
        return True

    def acknowledge_message(self) -> Optional[str]:
        message = self.mirror.pending_message
        if not accepts(self.mirror, MessageShown()):
            return None
        self._dispatch(MessageShown())
        return message

    def clear_error(self) -> bool:
        if not accepts(self.mirror, ErrorCleared()):
            return False
        self._dispatch(ErrorCleared())
        return True

    def return_to_idle(self) -> bool:
        if not accepts(self.mirror, ReturnedToIdle()):
            return False
        self._dispatch(ReturnedToIdle())
        return True


__all__ = ["BattleClient", "TRANSPORT_ERROR_MESSAGE"]
