"""In-process battle endpoint.

``LocalTransport`` plays the server side of the transport contract on top of a
:class:`~pocketduel.battle.service.BattleService`. Request failures raised by
the service come back as ``success=False`` responses carrying the error's
``code``; they never escape as exceptions. With ``wire=True`` (the default)
every request and response is serialised to JSON text and parsed back, so the
client only ever sees what a real network hop would deliver.
"""
from __future__ import annotations
import json
from typing import Any, Callable, Dict, Protocol, Type, TypeVar

from pocketduel.battle.service import BattleService
from pocketduel.core.errors import BattleError, TransportError, ValidationError
from pocketduel.core.logging import logger
from .contract import (
    BattleSessionView, EndRequest, EndResponse, MoveListResponse, MoveView,
    StartRequest, StartResponse, StatusRequest, StatusResponse,
    UseMoveRequest, UseMoveResponse,
)

GENERIC_CODE = "invalid_request"

R = TypeVar("R")


class BattleTransport(Protocol):
    def start(self, request: StartRequest) -> StartResponse: ...
    def use_move(self, request: UseMoveRequest) -> UseMoveResponse: ...
    def end(self, request: EndRequest) -> EndResponse: ...
    def status(self, request: StatusRequest) -> StatusResponse: ...
    def list_moves(self) -> MoveListResponse: ...


def _error_code(e: ValidationError) -> str:
    return getattr(e, "code", GENERIC_CODE)


def _error_message(e: ValidationError) -> str:
    return getattr(e, "message", str(e))


class LocalTransport:
    def __init__(self, service: BattleService, wire: bool = True):
        self.service = service
        self.wire = wire

    # -- wire codec -------------------------------------------------------
    def _encode(self, payload: Dict[str, Any]) -> str:
        return json.dumps(payload)

    def _decode(self, text: str, cls: Type[R], parse: Callable[[Dict[str, Any]], R]) -> R:
        try:
            data = json.loads(text)
            if not isinstance(data, dict):
                raise ValueError("payload is not an object")
            return parse(data)
        except (ValueError, KeyError, TypeError) as e:
            logger.error("TransportDecodeFailed", record=cls.__name__, error=str(e))
            raise TransportError(f"Malformed {cls.__name__}: {e}") from e

    def _inbound(self, request):
        if not self.wire:
            return request
        cls = type(request)
        return self._decode(self._encode(request.to_dict()), cls, cls.from_dict)

    def _outbound(self, response):
        if not self.wire:
            return response
        cls = type(response)
        return self._decode(self._encode(response.to_dict()), cls, cls.from_dict)

    @property
    def _log_limit(self) -> int:
        return self.service.settings.recent_log_limit

    # -- endpoints --------------------------------------------------------
    def start(self, request: StartRequest) -> StartResponse:
        request = self._inbound(request)
        try:
            session = self.service.start_battle(request.player_id, request.player_creature_id,
                                                request.enemy_creature_id, request.battle_type)
            response = StartResponse(True, battle=BattleSessionView.from_session(session, self._log_limit))
        except ValidationError as e:
            logger.info("StartRejected", player=request.player_id, code=_error_code(e))
            response = StartResponse(False, error=_error_message(e), error_code=_error_code(e))
        return self._outbound(response)

    def use_move(self, request: UseMoveRequest) -> UseMoveResponse:
        request = self._inbound(request)
        try:
            outcome = self.service.use_move(request.battle_id, request.acting_creature_id, request.move_id)
            response = UseMoveResponse.from_outcome(outcome)
        except BattleError as e:
            logger.info("UseMoveRejected", battle_id=request.battle_id, code=e.code)
            response = UseMoveResponse.failure(e.message, e.code)
        return self._outbound(response)

    def end(self, request: EndRequest) -> EndResponse:
        request = self._inbound(request)
        try:
            session = self.service.end_battle(request.battle_id, request.reason)
            last = session.log[-1].message if session.log else ""
            response = EndResponse(True, message=last, outcome=session.outcome.value if session.outcome else None)
        except BattleError as e:
            response = EndResponse(False, message=e.message, error_code=e.code)
        return self._outbound(response)

    def status(self, request: StatusRequest) -> StatusResponse:
        request = self._inbound(request)
        try:
            with self.service.store.locked(request.battle_id) as session:
                view = BattleSessionView.from_session(session, self._log_limit)
            response = StatusResponse(True, battle=view)
        except BattleError as e:
            response = StatusResponse(False, error=e.message, error_code=e.code)
        return self._outbound(response)

    def list_moves(self) -> MoveListResponse:
        moves = [MoveView.from_definition(m) for m in self.service.list_moves()]
        return self._outbound(MoveListResponse(True, moves=moves))


__all__ = ["BattleTransport", "LocalTransport"]
