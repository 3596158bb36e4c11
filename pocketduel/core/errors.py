"""
Error classes for clearer exception sources.
"""
from __future__ import annotations

class PocketDuelError(Exception):
    pass

class DataLoadError(PocketDuelError):
    def __init__(self, path: str, detail: str):
        super().__init__(f"Failed to load {path}: {detail}")
        self.path = path
        self.detail = detail

class ValidationError(PocketDuelError):
    pass

class InvariantViolation(PocketDuelError):
    """A battle invariant was broken. Always a defect, never a game outcome."""

class InvalidTransition(ValidationError):
    def __init__(self, phase: str, event: str):
        super().__init__(f"Event '{event}' is not accepted in phase '{phase}'")
        self.phase = phase
        self.event = event

class TransportError(PocketDuelError):
    """Network-level or decoding failure between client and battle endpoint."""

# ---------------------------------------------------------------------------
# Battle request failures (reported to callers as success=False responses)
# ---------------------------------------------------------------------------

class BattleError(ValidationError):
    code = "battle_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

class CreatureNotFound(BattleError):
    code = "creature_not_found"

    def __init__(self, creature_id: str):
        super().__init__(f"Creature '{creature_id}' was not found")
        self.creature_id = creature_id

class CreatureUnableToBattle(BattleError):
    code = "creature_unable_to_battle"

    def __init__(self, creature_id: str, name: str):
        super().__init__(f"{name} is unable to battle")
        self.creature_id = creature_id

class BattleNotFound(BattleError):
    code = "battle_not_found"

    def __init__(self, battle_id: str):
        super().__init__(f"Battle '{battle_id}' was not found")
        self.battle_id = battle_id

class BattleAlreadyEnded(BattleError):
    code = "battle_already_ended"

    def __init__(self, battle_id: str):
        super().__init__("This battle has already ended")
        self.battle_id = battle_id

class InvalidActor(BattleError):
    code = "invalid_actor"

    def __init__(self, creature_id: str):
        super().__init__(f"Creature '{creature_id}' cannot act in this battle")
        self.creature_id = creature_id

class MoveNotAvailable(BattleError):
    code = "move_not_available"

    def __init__(self, message: str, move_id: int):
        super().__init__(message)
        self.move_id = move_id

class ActiveBattleExists(BattleError):
    code = "active_battle_exists"

    def __init__(self, player_id: str, battle_id: str):
        super().__init__("A battle is already in progress")
        self.player_id = player_id
        self.battle_id = battle_id
