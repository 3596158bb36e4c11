from rich.console import Console

from pocketduel.cli import _parse_args, build_service, play, run
from pocketduel.client.controller import BattleClient
from pocketduel.client.state import ClientPhase
from pocketduel.system.settings import Settings
from pocketduel.transport.local import LocalTransport
from helpers import HIT, ScriptedRandom


def _inputs(*answers):
    queue = list(answers)

    def read(prompt):
        if not queue:
            raise EOFError
        return queue.pop(0)

    return read


def _client(duel_factory, scenario_pair, rng=None):
    hero, rival = scenario_pair
    return BattleClient(LocalTransport(duel_factory(hero, rival, rng=rng)), "player-1")


def test_play_until_knockout(duel_factory, scenario_pair):
    client = _client(duel_factory, scenario_pair, ScriptedRandom(HIT * 8))
    out = Console(record=True, width=120, color_system=None)
    outcome = play(client, "hero", "rival", read=_inputs("1", "1", "1", "1"), out=out)
    assert outcome == "PlayerWon"
    assert client.phase == ClientPhase.IDLE
    text = out.export_text()
    assert "The trainer sent out Rival!" in text
    assert "You won!" in text


def test_bad_choice_then_run(duel_factory, scenario_pair):
    client = _client(duel_factory, scenario_pair)
    out = Console(record=True, width=120, color_system=None)
    outcome = play(client, "hero", "rival", read=_inputs("9", "r"), out=out)
    assert outcome == "PlayerFled"
    text = out.export_text()
    assert "Pick one of the listed moves." in text
    assert "Got away safely!" in text


def test_end_of_input_counts_as_running(duel_factory, scenario_pair):
    client = _client(duel_factory, scenario_pair)
    assert play(client, "hero", "rival", read=_inputs(), out=Console(record=True)) == "PlayerFled"


def test_start_failure_is_reported(duel_factory, scenario_pair):
    client = _client(duel_factory, scenario_pair)
    out = Console(record=True, width=120, color_system=None)
    assert play(client, "nobody", "rival", read=_inputs(), out=out) is None
    assert "Creature 'nobody' was not found" in out.export_text()
    assert client.phase == ClientPhase.IDLE


def test_parse_args_defaults():
    args = _parse_args([])
    assert args.player == "owned-pikachu-01"
    assert args.enemy is None and not args.wild
    args = _parse_args(["--wild", "--enemy", "25", "--seed", "7"])
    assert args.wild and args.enemy == "25" and args.seed == 7
    args = _parse_args(["--strategy", "strongest", "--list"])
    assert args.strategy == "strongest" and args.list


def test_finished_battle_is_released(duel_factory, scenario_pair):
    hero, rival = scenario_pair
    service = duel_factory(hero, rival)
    client = BattleClient(LocalTransport(service), "player-1")
    outcome = play(client, "hero", "rival", read=_inputs("r"), out=Console(record=True), release=service.release)
    assert outcome == "PlayerFled"
    assert len(service.store) == 0


def test_list_shows_owned_creatures(tmp_path):
    out = Console(record=True, width=120, color_system=None)
    run(["--list", "--settings", str(tmp_path / "settings.json")], out=out)
    text = out.export_text()
    assert "YOUR CREATURES" in text
    assert "Sparky" in text
    assert "owned-squirtle-01" in text
    assert "trainer-brock-geodude" not in text


def test_settings_changes_reach_the_service(tmp_path):
    settings = Settings.load(tmp_path / "settings.json")
    service = build_service(settings)
    settings.update(enemy_strategy="strongest", critical_chance=0.5)
    assert service.settings.enemy_strategy == "strongest"
    assert service.rules.critical_chance == 0.5
