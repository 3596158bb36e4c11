import random
from typing import Optional

import pytest

from pocketduel.battle.models import Category, CreatureSnapshot, KnownMove
from pocketduel.battle.service import BattleService
from pocketduel.data.creatures import CreatureCatalog, default_creature_catalog
from pocketduel.data.moves import MoveCatalog
from pocketduel.system.settings import SettingsData
from helpers import ScriptedRandom, make_creature, make_move


@pytest.fixture
def duel_factory():
    """Build a service over two hand-made creatures (player first, enemy second)."""

    def build(hero: CreatureSnapshot, rival: CreatureSnapshot, rng: Optional[random.Random] = None,
              **settings) -> BattleService:
        used = {km.move_id: km.move for c in (hero, rival) for km in c.moves}
        catalog = CreatureCatalog(MoveCatalog(used.values()), creatures=[hero, rival])
        settings.setdefault("enemy_strategy", "first")
        return BattleService(catalog, settings=SettingsData(**settings), rng=rng or ScriptedRandom())

    return build


@pytest.fixture
def scenario_pair():
    """Player level 15 / attack 55 with a 40-power special move; enemy level 12 / defense 40 / HP 35."""
    beam = make_move(900, "Test Beam", "normal", Category.SPECIAL, 40, 100, 10)
    tackle = make_move(901, "Tackle", "normal", Category.PHYSICAL, 40, 100, 35)
    hero = make_creature("hero", level=15, attack=55, defense=40, max_hp=65, moves=[KnownMove(beam)])
    rival = make_creature("rival", level=12, attack=40, defense=40, max_hp=35, moves=[KnownMove(tackle)])
    return hero, rival


@pytest.fixture
def fixture_service():
    """Service over the bundled creature fixtures with a seeded RNG."""
    return BattleService(default_creature_catalog(), settings=SettingsData(enemy_strategy="first"),
                         rng=ScriptedRandom(seed=7))
