from __future__ import annotations
import random
from typing import Optional
from .models import CreatureSnapshot, CombatState, KnownMove
from .mechanics import type_multiplier

def usable_moves(user: CreatureSnapshot, state: CombatState) -> list[KnownMove]:
    return [km for km in user.moves if state.pp_of(km.move_id) > 0]

def choose_move(user: CreatureSnapshot, state: CombatState, foe: CreatureSnapshot,
                rng: random.Random, strategy: str = "random") -> Optional[KnownMove]:
    """Pick the enemy's counter move; None when every move is out of PP."""
    candidates = usable_moves(user, state)
    if not candidates:
        return None
    if strategy == "first":
        return candidates[0]
    if strategy == "strongest":
        best = None
        best_score = -1.0
        for km in candidates:
            score = km.move.power * type_multiplier(km.move.type, foe.types)
            if score > best_score:
                best_score = score
                best = km
        return best
    return rng.choice(candidates)
