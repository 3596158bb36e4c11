"""
Battle client package.
- state.py (mirror, events and the pure reducer)
- controller.py (transport-facing client driving the reducer)
"""
from .state import BattleMirror, ClientPhase, reduce
from .controller import BattleClient
__all__ = ["BattleMirror", "ClientPhase", "reduce", "BattleClient"]
