"""Player-facing battle text."""
from __future__ import annotations
from .models import Effectiveness, BattleType

EFFECTIVENESS_TEXT = {
    Effectiveness.SUPER_EFFECTIVE: "It's super effective!",
    Effectiveness.NOT_VERY_EFFECTIVE: "It's not very effective...",
}

def move_used(attacker: str, move: str) -> str:
    return f"{attacker} used {move}!"

def move_missed(attacker: str, move: str) -> str:
    return f"{attacker} used {move}... but it missed!"

def move_result(attacker: str, move: str, defender: str, damage: int,
                critical: bool, effectiveness: Effectiveness) -> str:
    if effectiveness == Effectiveness.INEFFECTIVE:
        return f"{attacker} used {move}! It doesn't affect {defender}..."
    parts = [move_used(attacker, move)]
    if damage > 0:
        parts.append(f"{damage} damage!")
    if critical:
        parts.append("A critical hit!")
    eff = EFFECTIVENESS_TEXT.get(effectiveness)
    if eff:
        parts.append(eff)
    return " ".join(parts)

def not_enough_pp(move: str) -> str:
    return f"Not enough PP left for {move}!"

def unknown_move(creature: str) -> str:
    return f"{creature} doesn't know that move!"

def no_moves_left(creature: str) -> str:
    return f"{creature} has no moves left to use!"

def fainted(creature: str) -> str:
    return f"{creature} fainted!"

def victory(creature: str) -> str:
    return f"{creature} won the battle!"

def experience_gained(creature: str, amount: int) -> str:
    return f"{creature} gained {amount} EXP. Points!"

def battle_opened(battle_type: BattleType, enemy: str) -> str:
    if battle_type == BattleType.WILD:
        return f"A wild {enemy} appeared!"
    return f"The trainer sent out {enemy}!"

def fled() -> str:
    return "Got away safely!"

def battle_closed() -> str:
    return "The battle has ended."
