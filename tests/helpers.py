"""Shared builders for battle tests."""
import random
from typing import Iterable

from pocketduel.battle.models import Category, CreatureSnapshot, MoveDefinition


class ScriptedRandom(random.Random):
    """random() returns the queued values first, then falls back to the seed.

    choice/randint keep using getrandbits, so they never eat queued values.
    """

    def __init__(self, values: Iterable[float] = (), seed: int = 0):
        super().__init__(seed)
        self.values = list(values)

    def random(self):
        if self.values:
            return self.values.pop(0)
        return super().random()

    def getrandbits(self, k):
        return super().getrandbits(k)


# accuracy draw, critical draw
HIT = [0.0, 0.99]
CRIT = [0.0, 0.0]
MISS = [0.999]


def make_move(move_id=900, name="Test Beam", type_="normal", category=Category.SPECIAL,
              power=40, accuracy=100, max_pp=10) -> MoveDefinition:
    return MoveDefinition(move_id, name, type_, category, power, accuracy, max_pp)


def make_creature(creature_id="c1", level=15, attack=55, defense=40, max_hp=65,
                  current_hp=None, types=("normal",), moves=(), **extra) -> CreatureSnapshot:
    return CreatureSnapshot(
        creature_id=creature_id,
        species_id=extra.pop("species_id", 0),
        species_name=extra.pop("species_name", creature_id.title()),
        level=level,
        types=tuple(types),
        max_hp=max_hp,
        current_hp=current_hp,
        attack=attack,
        defense=defense,
        moves=tuple(moves),
        **extra,
    )
