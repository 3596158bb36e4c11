import random

import pytest

from pocketduel.battle.ai import choose_move, usable_moves
from pocketduel.battle.experience import clamp_level, experience_for_victory
from pocketduel.battle.models import Category, CombatState, KnownMove
from helpers import make_creature, make_move


def _enemy(pp=(None, None)):
    tackle = make_move(1, "Tackle", "normal", Category.PHYSICAL, 40)
    shock = make_move(4, "Thunder Shock", "electric", Category.SPECIAL, 40)
    snap = make_creature("enemy", types=("electric",),
                         moves=[KnownMove(tackle, pp[0]), KnownMove(shock, pp[1])])
    return snap, CombatState(snap)


def test_first_strategy_takes_first_usable():
    snap, state = _enemy(pp=(0, None))
    foe = make_creature("foe")
    assert choose_move(snap, state, foe, random.Random(1), "first").move_id == 4


def test_strongest_strategy_weighs_type_matchups():
    snap, state = _enemy()
    water = make_creature("foe", types=("water",))
    ground = make_creature("foe", types=("ground",))
    assert choose_move(snap, state, water, random.Random(1), "strongest").move.name == "Thunder Shock"
    assert choose_move(snap, state, ground, random.Random(1), "strongest").move.name == "Tackle"


def test_random_strategy_only_picks_usable_moves():
    snap, state = _enemy(pp=(None, 0))
    foe = make_creature("foe")
    rng = random.Random(5)
    picks = {choose_move(snap, state, foe, rng).move_id for _ in range(20)}
    assert picks == {1}


def test_no_usable_moves_returns_none():
    snap, state = _enemy(pp=(0, 0))
    assert usable_moves(snap, state) == []
    assert choose_move(snap, state, make_creature("foe"), random.Random(1), "first") is None


@pytest.mark.parametrize("winner, loser, expected", [
    (15, 12, 84),
    (12, 12, 120),
    (10, 30, 900),
    (50, 5, 25),
    (0, 1, 10),
])
def test_experience_for_victory(winner, loser, expected):
    assert experience_for_victory(winner, loser) == expected


def test_clamp_level():
    assert clamp_level(0) == 1
    assert clamp_level(57) == 57
    assert clamp_level(250) == 100
