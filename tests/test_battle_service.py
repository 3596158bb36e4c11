import pytest

from pocketduel.battle.models import (
    BattleType, Category, KnownMove, Outcome, Phase, Winner,
)
from pocketduel.core.errors import (
    ActiveBattleExists, BattleAlreadyEnded, BattleNotFound, CreatureNotFound,
    CreatureUnableToBattle, InvalidActor, InvariantViolation, MoveNotAvailable, ValidationError,
)
from pocketduel.system.settings import SettingsData
from helpers import HIT, ScriptedRandom, make_creature, make_move


def _start(service, hero, rival):
    return service.start_battle("player-1", hero.creature_id, rival.creature_id, BattleType.TRAINER)


def test_start_opens_selecting_command_at_turn_one(duel_factory, scenario_pair):
    hero, rival = scenario_pair
    service = duel_factory(hero, rival)
    session = _start(service, hero, rival)
    assert session.battle_id.startswith("battle-")
    assert session.phase == Phase.SELECTING_COMMAND
    assert session.turn_counter == 1
    assert session.outcome is None
    assert session.log[0].message == "The trainer sent out Rival!"
    assert service.get_battle(session.battle_id) is session


def test_each_start_creates_a_new_session(duel_factory, scenario_pair):
    hero, rival = scenario_pair
    service = duel_factory(hero, rival)
    a = _start(service, hero, rival)
    b = _start(service, hero, rival)
    assert a.battle_id != b.battle_id
    assert len(service.store) == 2


def test_normal_hit_then_enemy_counter(duel_factory, scenario_pair):
    hero, rival = scenario_pair
    service = duel_factory(hero, rival, rng=ScriptedRandom(HIT + HIT))
    session = _start(service, hero, rival)
    out = service.use_move(session.battle_id, "hero", 900)
    assert out.player_action.damage == 10
    assert out.enemy_hp == 25
    # Tackle from level 12 / attack 40 into defense 40: floor(272/50) + 2 = 7
    assert out.enemy_action is not None and out.enemy_action.damage == 7
    assert out.player_hp == 58
    assert out.phase == Phase.SELECTING_COMMAND
    assert out.outcome is None and out.winner is None
    assert out.remaining_pp == 9
    assert session.turn_counter == 2
    assert session.enemy_state.pp_of(901) == 34


def test_knockout_ends_battle_without_counter(duel_factory, scenario_pair):
    hero, rival = scenario_pair
    rival = make_creature("rival", level=12, defense=40, max_hp=35, current_hp=10, moves=rival.moves)
    service = duel_factory(hero, rival, rng=ScriptedRandom(HIT))
    session = _start(service, hero, rival)
    out = service.use_move(session.battle_id, "hero", 900)
    assert out.enemy_hp == 0
    assert out.phase == Phase.ENDED
    assert out.winner == Winner.PLAYER
    assert out.outcome == Outcome.PLAYER_WON
    assert out.enemy_action is None
    assert out.player_hp == 65
    assert session.enemy_state.pp_of(901) == 35
    assert out.experience_gained == 84
    kinds = [e.kind for e in out.events]
    assert "fainted" in kinds and kinds[-1] == "battle_ended"


def test_enemy_knockout_hands_win_to_enemy(duel_factory, scenario_pair):
    hero, rival = scenario_pair
    hero = make_creature("hero", level=15, attack=55, max_hp=65, current_hp=5, moves=hero.moves)
    service = duel_factory(hero, rival, rng=ScriptedRandom(HIT + HIT))
    session = _start(service, hero, rival)
    out = service.use_move(session.battle_id, "hero", 900)
    assert out.player_hp == 0
    assert out.winner == Winner.ENEMY
    assert out.outcome == Outcome.ENEMY_WON
    assert out.experience_gained == 0
    assert session.is_ended


def test_out_of_pp_move_is_rejected_and_changes_nothing(duel_factory):
    beam = make_move(900, "Test Beam")
    poke = make_move(902, "Poke", category=Category.PHYSICAL)
    hero = make_creature("hero", moves=[KnownMove(beam, 0), KnownMove(poke)])
    rival = make_creature("rival", max_hp=35, moves=[KnownMove(make_move(901, "Tackle"))])
    service = duel_factory(hero, rival)
    session = _start(service, hero, rival)
    with pytest.raises(MoveNotAvailable) as exc:
        service.use_move(session.battle_id, "hero", 900)
    assert exc.value.message == "Not enough PP left for Test Beam!"
    assert exc.value.code == "move_not_available"
    assert session.phase == Phase.SELECTING_COMMAND
    assert session.turn_counter == 1
    assert session.player_state.current_hp == 65
    assert session.enemy_state.current_hp == 35
    assert session.player_state.pp == {900: 0, 902: 10}


def test_used_move_loses_exactly_one_pp(duel_factory):
    beam = make_move(900, "Test Beam", max_pp=5)
    poke = make_move(902, "Poke", category=Category.PHYSICAL, max_pp=8)
    hero = make_creature("hero", max_hp=500, moves=[KnownMove(beam), KnownMove(poke)])
    rival = make_creature("rival", max_hp=300, defense=200, moves=[KnownMove(make_move(901, "Tackle"))])
    service = duel_factory(hero, rival, rng=ScriptedRandom(seed=3))
    session = _start(service, hero, rival)
    for expected in (4, 3, 2, 1, 0):
        out = service.use_move(session.battle_id, "hero", 900)
        assert out.remaining_pp == expected
        assert session.player_state.pp_of(902) == 8
    with pytest.raises(MoveNotAvailable):
        service.use_move(session.battle_id, "hero", 900)


def test_validation_order(duel_factory, scenario_pair):
    hero, rival = scenario_pair
    service = duel_factory(hero, rival)
    session = _start(service, hero, rival)
    with pytest.raises(BattleNotFound):
        service.use_move("battle-missing", "hero", 900)
    with pytest.raises(InvalidActor):
        service.use_move(session.battle_id, "rival", 901)
    with pytest.raises(MoveNotAvailable) as exc:
        service.use_move(session.battle_id, "hero", 4242)
    assert "doesn't know" in exc.value.message
    service.end_battle(session.battle_id)
    with pytest.raises(BattleAlreadyEnded):
        service.use_move(session.battle_id, "rival", 901)


def test_end_battle_then_use_move_fails(duel_factory, scenario_pair):
    hero, rival = scenario_pair
    service = duel_factory(hero, rival)
    session = _start(service, hero, rival)
    ended = service.end_battle(session.battle_id)
    assert ended.phase == Phase.ENDED
    assert ended.outcome == Outcome.PLAYER_FLED
    assert ended.winner is None
    log_len = len(session.log)
    with pytest.raises(BattleAlreadyEnded):
        service.use_move(session.battle_id, "hero", 900)
    assert len(session.log) == log_len
    assert session.player_state.pp_of(900) == 10


def test_end_battle_is_idempotent(duel_factory, scenario_pair):
    hero, rival = scenario_pair
    service = duel_factory(hero, rival)
    seen = []
    service.on_battle_ended(lambda s: seen.append(s.outcome))
    session = _start(service, hero, rival)
    service.end_battle(session.battle_id, "draw")
    again = service.end_battle(session.battle_id)
    assert again.outcome == Outcome.DRAW
    assert again.winner == Winner.DRAW
    assert seen == [Outcome.DRAW]


def test_end_listeners_fire_on_knockout(duel_factory, scenario_pair):
    hero, rival = scenario_pair
    rival = make_creature("rival", max_hp=35, current_hp=1, moves=rival.moves)
    service = duel_factory(hero, rival, rng=ScriptedRandom(HIT))
    seen = []
    service.on_battle_ended(lambda s: seen.append(s.battle_id))
    session = _start(service, hero, rival)
    service.use_move(session.battle_id, "hero", 900)
    assert seen == [session.battle_id]


def _broken_listener(session):
    raise RuntimeError("persistence down")


def test_failing_end_listener_does_not_undo_knockout(duel_factory, scenario_pair):
    hero, rival = scenario_pair
    rival = make_creature("rival", max_hp=35, current_hp=10, moves=rival.moves)
    service = duel_factory(hero, rival, rng=ScriptedRandom(HIT))
    seen = []
    service.on_battle_ended(_broken_listener)
    service.on_battle_ended(lambda s: seen.append(s.battle_id))
    session = _start(service, hero, rival)
    out = service.use_move(session.battle_id, "hero", 900)
    assert out.phase == Phase.ENDED
    assert out.enemy_hp == 0
    assert out.outcome == Outcome.PLAYER_WON
    assert seen == [session.battle_id]
    assert service.get_battle(session.battle_id).is_ended


def test_failing_end_listener_on_flee(duel_factory, scenario_pair):
    hero, rival = scenario_pair
    service = duel_factory(hero, rival)
    service.on_battle_ended(_broken_listener)
    session = _start(service, hero, rival)
    ended = service.end_battle(session.battle_id)
    assert ended.phase == Phase.ENDED
    assert ended.outcome == Outcome.PLAYER_FLED


def test_release_drops_only_ended_battles(duel_factory, scenario_pair):
    hero, rival = scenario_pair
    service = duel_factory(hero, rival)
    session = _start(service, hero, rival)
    assert service.release(session.battle_id) is False
    assert service.get_battle(session.battle_id) is session
    service.end_battle(session.battle_id)
    assert service.release(session.battle_id) is True
    assert len(service.store) == 0
    with pytest.raises(BattleNotFound):
        service.get_battle(session.battle_id)
    with pytest.raises(BattleNotFound):
        service.release(session.battle_id)


def test_apply_settings_swaps_rules(duel_factory, scenario_pair):
    hero, rival = scenario_pair
    service = duel_factory(hero, rival)
    service.apply_settings(SettingsData(enemy_strategy="strongest", critical_chance=0.5))
    assert service.settings.enemy_strategy == "strongest"
    assert service.rules.critical_chance == 0.5


def test_enemy_without_pp_skips_counter(duel_factory, scenario_pair):
    hero, _ = scenario_pair
    rival = make_creature("rival", max_hp=35, moves=[KnownMove(make_move(901, "Tackle"), 0)])
    service = duel_factory(hero, rival, rng=ScriptedRandom(HIT))
    session = _start(service, hero, rival)
    out = service.use_move(session.battle_id, "hero", 900)
    assert out.enemy_action is None
    assert out.player_hp == 65
    assert any(e.kind == "no_moves" for e in out.events)
    assert out.phase == Phase.SELECTING_COMMAND


def test_ended_session_state_is_sealed(duel_factory, scenario_pair):
    hero, rival = scenario_pair
    service = duel_factory(hero, rival)
    session = _start(service, hero, rival)
    service.end_battle(session.battle_id)
    with pytest.raises(InvariantViolation):
        session.enemy_state.take_damage(1)
    with pytest.raises(InvariantViolation):
        session.advance(Phase.RESOLVING_TURN)


def test_turn_log_records_each_action(duel_factory, scenario_pair):
    hero, rival = scenario_pair
    service = duel_factory(hero, rival, rng=ScriptedRandom(HIT + HIT))
    session = _start(service, hero, rival)
    service.use_move(session.battle_id, "hero", 900)
    moves_logged = [e for e in session.log if e.action == "move"]
    assert [e.actor for e in moves_logged] == ["Hero", "Rival"]
    assert moves_logged[0].damage == 10 and moves_logged[0].turn == 1
    assert session.recent_log(2) == session.log[-2:]


def test_start_rejects_unknown_creatures(duel_factory, scenario_pair):
    hero, rival = scenario_pair
    service = duel_factory(hero, rival)
    with pytest.raises(CreatureNotFound):
        service.start_battle("player-1", "nobody", "rival", "Trainer")
    with pytest.raises(CreatureNotFound):
        service.start_battle("player-1", "hero", "nobody", "Trainer")
    with pytest.raises(ValidationError):
        service.start_battle("player-1", "hero", "rival", "Raid")


def test_fainted_creature_cannot_start(duel_factory, scenario_pair):
    hero, rival = scenario_pair
    hero = make_creature("hero", current_hp=0, moves=hero.moves)
    service = duel_factory(hero, rival)
    with pytest.raises(CreatureUnableToBattle):
        service.start_battle("player-1", "hero", "rival", "Trainer")


def test_fainted_trainer_enemy_cannot_start(duel_factory, scenario_pair):
    hero, rival = scenario_pair
    rival = make_creature("rival", max_hp=35, current_hp=0, moves=rival.moves)
    service = duel_factory(hero, rival)
    with pytest.raises(CreatureUnableToBattle):
        service.start_battle("player-1", "hero", "rival", "Trainer")
    assert len(service.store) == 0


def test_single_active_battle_setting(duel_factory, scenario_pair):
    hero, rival = scenario_pair
    service = duel_factory(hero, rival, single_active_battle=True)
    first = _start(service, hero, rival)
    with pytest.raises(ActiveBattleExists) as exc:
        _start(service, hero, rival)
    assert exc.value.battle_id == first.battle_id
    service.end_battle(first.battle_id)
    assert _start(service, hero, rival).battle_id != first.battle_id


def test_wild_battle_spawns_species_in_level_range(fixture_service):
    session = fixture_service.start_battle("player-1", "owned-pikachu-01", "16", "Wild")
    enemy = session.enemy
    assert enemy.creature_id.startswith("wild-16-")
    assert enemy.species_name == "Pidgey"
    assert 10 <= enemy.level <= 19
    assert enemy.max_hp == 40 + enemy.level * 2
    assert [km.move_id for km in enemy.moves] == [1, 9, 15]
    assert session.log[0].message == "A wild Pidgey appeared!"


def test_wild_battle_with_unknown_species(fixture_service):
    with pytest.raises(CreatureNotFound):
        fixture_service.start_battle("player-1", "owned-pikachu-01", "999", "Wild")
    with pytest.raises(CreatureNotFound):
        fixture_service.start_battle("player-1", "owned-pikachu-01", "pidgey", "Wild")


def test_immune_enemy_on_fixtures(fixture_service):
    session = fixture_service.start_battle("player-1", "owned-pikachu-01", "trainer-brock-geodude", "Trainer")
    out = fixture_service.use_move(session.battle_id, "owned-pikachu-01", 4)
    assert out.player_action.hit
    assert out.player_action.damage == 0
    assert out.player_action.effectiveness.value == "Ineffective"
    assert "doesn't affect" in out.message
    assert out.enemy_hp == 64


def test_list_moves_returns_catalog(fixture_service):
    ids = [m.move_id for m in fixture_service.list_moves()]
    assert ids == sorted(ids)
    assert 4 in ids and len(ids) == 19
