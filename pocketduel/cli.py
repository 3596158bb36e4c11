from __future__ import annotations
import argparse
import random
from pathlib import Path
from typing import Callable, List, Optional

from rich.console import Console

from pocketduel.battle.service import BattleService
from pocketduel.client.controller import BattleClient
from pocketduel.client.state import ClientPhase
from pocketduel.core.logging import logger
from pocketduel.data.creatures import default_creature_catalog
from pocketduel.system.settings import ENEMY_STRATEGIES, Settings
from pocketduel.transport.local import LocalTransport
from pocketduel.ui import battle as battle_ui

DEFAULT_PLAYER = "player-1"
DEFAULT_PLAYER_CREATURE = "owned-pikachu-01"
DEFAULT_TRAINER_ENEMY = "trainer-brock-geodude"

RUN_KEYS = {"r", "run", "flee"}

Reader = Callable[[str], str]
Releaser = Callable[[str], bool]


def build_service(settings: Settings, rng: Optional[random.Random] = None) -> BattleService:
    """Service over the bundled fixtures; follows later settings changes."""
    service = BattleService(default_creature_catalog(), settings=settings.data, rng=rng)
    settings.on_change(service.apply_settings)
    return service


def _flush(client: BattleClient, out: Console):
    if client.mirror.last_error:
        battle_ui.render_error(client.mirror.last_error, out)
        client.clear_error()
    message = client.acknowledge_message()
    if message:
        battle_ui.render_message(message, out)


def _pick_move(client: BattleClient, choice: str) -> Optional[int]:
    moves = client.mirror.player.moves
    if choice.isdigit() and 1 <= int(choice) <= len(moves):
        return moves[int(choice) - 1].move_id
    return None


def play(client: BattleClient, player_creature_id: str, enemy_creature_id: str,
         battle_type: str = "Trainer", read: Reader = input, out: Optional[Console] = None,
         release: Optional[Releaser] = None) -> Optional[str]:
    """Run one interactive battle; returns the outcome name (None if it never started).

    ``release`` is called with the battle id once the finished battle has been
    shown, so the server side can drop it.
    """
    out = out or battle_ui.console
    if not client.start(player_creature_id, enemy_creature_id, battle_type):
        battle_ui.render_error(client.mirror.last_error or "Could not start the battle.", out)
        client.clear_error()
        return None
    _flush(client, out)

    while client.phase == ClientPhase.AWAITING_COMMAND:
        battle_ui.render_battle(client.mirror, out)
        try:
            choice = read("Move number, or R to run: ").strip().lower()
        except (EOFError, KeyboardInterrupt):
            choice = "r"
        if choice in RUN_KEYS:
            client.request_flee()
            _flush(client, out)
            continue
        move_id = _pick_move(client, choice)
        if move_id is None:
            battle_ui.render_error("Pick one of the listed moves.", out)
            continue
        client.select_move(move_id)
        client.confirm_move()
        battle_ui.render_events(client.mirror, out)
        _flush(client, out)

    outcome = client.mirror.outcome
    if client.phase == ClientPhase.ENDED:
        battle_id = client.mirror.battle.battle_id if client.mirror.battle else None
        battle_ui.render_outcome(client.mirror, out)
        client.return_to_idle()
        if release is not None and battle_id is not None:
            release(battle_id)
    return outcome


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="pocketduel", description="One-on-one creature battle in the terminal.")
    parser.add_argument("--player", default=DEFAULT_PLAYER_CREATURE, help="owned creature id to battle with")
    parser.add_argument("--enemy", default=None, help="trainer creature id, or species id with --wild")
    parser.add_argument("--wild", action="store_true", help="fight a wild creature of the given species")
    parser.add_argument("--seed", type=int, default=None, help="seed for a reproducible battle")
    parser.add_argument("--settings", type=Path, default=None, help="settings file to use")
    parser.add_argument("--strategy", choices=sorted(ENEMY_STRATEGIES), default=None,
                        help="how the opponent picks its counter move (saved to settings)")
    parser.add_argument("--list", action="store_true", help="show your creatures and exit")
    return parser.parse_args(argv)


def run(argv: Optional[List[str]] = None, out: Optional[Console] = None):
    args = _parse_args(argv)
    settings = Settings.load(args.settings)
    settings.apply_log_level()
    if args.list:
        battle_ui.render_roster(default_creature_catalog().owned_by(DEFAULT_PLAYER), out)
        return
    rng = random.Random(args.seed) if args.seed is not None else None
    service = build_service(settings, rng)
    if args.strategy:
        settings.update(enemy_strategy=args.strategy)
        settings.save()
    client = BattleClient(LocalTransport(service), DEFAULT_PLAYER)
    if args.wild:
        battle_type, enemy = "Wild", args.enemy or "16"
    else:
        battle_type, enemy = "Trainer", args.enemy or DEFAULT_TRAINER_ENEMY
    logger.debug("CliStart", player=args.player, enemy=enemy, type=battle_type)
    play(client, args.player, enemy, battle_type, out=out, release=service.release)
