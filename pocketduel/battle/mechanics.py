"""Damage resolution: accuracy, critical hits, type matchups and final damage.

All randomness goes through the ``rng`` argument (a ``random.Random``) so tests
can force hits, misses and criticals. Draw order per damaging move is fixed:
one accuracy draw, then one critical draw.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Mapping, Tuple
import math
import random

from .models import CreatureSnapshot, MoveDefinition, Category, Effectiveness

# attacking type -> defending type -> multiplier (missing pairs are 1.0)
TYPE_CHART: Dict[str, Dict[str, float]] = {
    "normal":   {"rock": 0.5},
    "electric": {"electric": 0.5, "water": 2.0, "flying": 2.0, "grass": 0.5, "ground": 0.0},
    "water":    {"water": 0.5, "grass": 0.5, "fire": 2.0, "ground": 2.0, "rock": 2.0},
    "flying":   {"electric": 0.5, "grass": 2.0, "rock": 0.5, "fighting": 2.0},
    "grass":    {"water": 2.0, "flying": 0.5, "grass": 0.5, "fire": 0.5, "ground": 2.0, "rock": 2.0},
    "fire":     {"water": 0.5, "grass": 2.0, "fire": 0.5, "rock": 0.5},
    "ground":   {"electric": 2.0, "flying": 0.0, "grass": 0.5, "fire": 2.0, "rock": 2.0},
    "rock":     {"flying": 2.0, "fire": 2.0, "ground": 0.5, "fighting": 0.5},
    "fighting": {"normal": 2.0, "flying": 0.5, "rock": 2.0, "psychic": 0.5},
    "psychic":  {"fighting": 2.0, "psychic": 0.5},
}

DEFAULT_CRITICAL_CHANCE = 1 / 16
DEFAULT_CRITICAL_MULTIPLIER = 1.5


@dataclass(frozen=True)
class DamageRules:
    critical_chance: float = DEFAULT_CRITICAL_CHANCE
    critical_multiplier: float = DEFAULT_CRITICAL_MULTIPLIER
    type_chart: Mapping[str, Mapping[str, float]] = field(default_factory=lambda: TYPE_CHART)

    @classmethod
    def from_settings(cls, data) -> "DamageRules":
        return cls(critical_chance=float(data.critical_chance),
                   critical_multiplier=float(data.critical_multiplier))


@dataclass(frozen=True)
class DamageResult:
    hit: bool
    critical: bool
    effectiveness: Effectiveness
    multiplier: float
    damage: int


MISSED = DamageResult(hit=False, critical=False, effectiveness=Effectiveness.NORMAL, multiplier=1.0, damage=0)


def type_multiplier(move_type: str, defender_types: Tuple[str, ...],
                    chart: Mapping[str, Mapping[str, float]] = TYPE_CHART) -> float:
    mult = 1.0
    offense = chart.get(move_type.lower(), {})
    for t in defender_types:
        mult *= offense.get(t.lower(), 1.0)
    return mult


def effectiveness_for(multiplier: float) -> Effectiveness:
    if multiplier == 0:
        return Effectiveness.INEFFECTIVE
    if multiplier < 1:
        return Effectiveness.NOT_VERY_EFFECTIVE
    if multiplier > 1:
        return Effectiveness.SUPER_EFFECTIVE
    return Effectiveness.NORMAL


def accuracy_check(move: MoveDefinition, rng: random.Random) -> bool:
    return rng.random() * 100 < move.accuracy


def roll_critical(rng: random.Random, chance: float = DEFAULT_CRITICAL_CHANCE) -> bool:
    return rng.random() < chance


def base_damage(attacker: CreatureSnapshot, defender: CreatureSnapshot, move: MoveDefinition) -> int:
    if move.category == Category.SPECIAL:
        atk, dfn = attacker.sp_atk, defender.sp_def
    else:
        atk, dfn = attacker.attack, defender.defense
    raw = ((2 * attacker.level / 5 + 2) * move.power * atk / max(1, dfn)) / 50
    return math.floor(raw) + 2


def resolve_damage(attacker: CreatureSnapshot, defender: CreatureSnapshot, move: MoveDefinition,
                   defender_hp: int, rng: random.Random, rules: DamageRules = DamageRules()) -> DamageResult:
    """Resolve one move against the defender's current HP.

    The returned damage is what the defender actually loses: it is never
    negative and never exceeds ``defender_hp``.
    """
    if not accuracy_check(move, rng):
        return MISSED
    if move.is_status:
        return DamageResult(hit=True, critical=False, effectiveness=Effectiveness.NORMAL, multiplier=1.0, damage=0)
    critical = roll_critical(rng, rules.critical_chance)
    mult = type_multiplier(move.type, defender.types, rules.type_chart)
    dmg = base_damage(attacker, defender, move) * mult
    if critical:
        dmg *= rules.critical_multiplier
    dmg = max(0, min(math.floor(dmg), max(0, defender_hp)))
    return DamageResult(
        hit=True,
        critical=critical and mult > 0,
        effectiveness=effectiveness_for(mult),
        multiplier=mult,
        damage=dmg,
    )


__all__ = [
    "TYPE_CHART", "DamageRules", "DamageResult", "type_multiplier", "effectiveness_for",
    "accuracy_check", "roll_critical", "base_damage", "resolve_damage",
]
