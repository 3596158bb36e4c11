"""Authoritative in-memory store of active battle sessions.

Each session gets its own re-entrant lock; ``locked()`` holds it for the whole
read-validate-mutate sequence of one request. The registry lock only guards
insertion, lookup and removal, so unrelated battles never wait on each other.
"""
from __future__ import annotations
import threading
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional

from pocketduel.core.errors import BattleNotFound
from .models import BattleSession

class BattleSessionStore:
    def __init__(self):
        self._sessions: Dict[str, BattleSession] = {}
        self._locks: Dict[str, threading.RLock] = {}
        self._registry_lock = threading.Lock()

    def add(self, session: BattleSession) -> BattleSession:
        with self._registry_lock:
            if session.battle_id in self._sessions:
                raise ValueError(f"Battle id {session.battle_id} already stored")
            self._sessions[session.battle_id] = session
            self._locks[session.battle_id] = threading.RLock()
        return session

    def get(self, battle_id: str) -> BattleSession:
        with self._registry_lock:
            session = self._sessions.get(battle_id)
        if session is None:
            raise BattleNotFound(battle_id)
        return session

    def _lock_for(self, battle_id: str) -> threading.RLock:
        with self._registry_lock:
            lock = self._locks.get(battle_id)
        if lock is None:
            raise BattleNotFound(battle_id)
        return lock

    @contextmanager
    def locked(self, battle_id: str) -> Iterator[BattleSession]:
        lock = self._lock_for(battle_id)
        with lock:
            yield self.get(battle_id)

    def active_for_player(self, player_id: str) -> Optional[BattleSession]:
        with self._registry_lock:
            sessions = list(self._sessions.values())
        for s in sessions:
            if s.player_id == player_id and not s.is_ended:
                return s
        return None

    def discard(self, battle_id: str) -> bool:
        with self._registry_lock:
            self._locks.pop(battle_id, None)
            return self._sessions.pop(battle_id, None) is not None

    def all(self) -> List[BattleSession]:
        with self._registry_lock:
            return list(self._sessions.values())

    def __len__(self) -> int:
        with self._registry_lock:
            return len(self._sessions)

__all__ = ["BattleSessionStore"]
