"""
Battle engine package.
Modules:
- models.py (moves, creature snapshots, combat state, session aggregate)
- mechanics.py (damage calc, accuracy, crits, type matchups)
- ai.py (enemy counter move choice)
- experience.py (victory rewards)
- session.py (session store with per-battle locks)
- service.py (turn resolution pipeline)
"""
from .models import (
    BattleSession, BattleType, Category, CreatureSnapshot, Effectiveness, MoveDefinition,
    Outcome, Phase, TurnOutcome, Winner,
)
from .mechanics import DamageRules, resolve_damage
__all__ = [
    "BattleSession", "BattleType", "Category", "CreatureSnapshot", "Effectiveness",
    "MoveDefinition", "Outcome", "Phase", "TurnOutcome", "Winner",
    "DamageRules", "resolve_damage",
]
