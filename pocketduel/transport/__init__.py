"""
Battle transport package.
- contract.py (request/response records and session views)
- local.py (in-process endpoint with JSON wire round-trip)
"""
from .contract import (
    BattleSessionView, EndRequest, EndResponse, StartRequest, StartResponse,
    StatusRequest, StatusResponse, UseMoveRequest, UseMoveResponse,
)
from .local import BattleTransport, LocalTransport
__all__ = [
    "BattleSessionView", "EndRequest", "EndResponse", "StartRequest", "StartResponse",
    "StatusRequest", "StatusResponse", "UseMoveRequest", "UseMoveResponse",
    "BattleTransport", "LocalTransport",
]
