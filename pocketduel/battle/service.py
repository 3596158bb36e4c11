"""Turn resolution service: the server-authoritative side of a battle.

Owns the session store and is the only code that mutates a session. One
``use_move`` call resolves a full turn: the player's move, then (if the enemy
is still standing) the enemy's immediate counter, then the terminal check.
Request failures are raised as :class:`~pocketduel.core.errors.BattleError`
subclasses; the transport endpoint turns them into ``success=False`` replies.
"""
from __future__ import annotations
import random
import uuid
from typing import Callable, List, Optional, Union

from pocketduel.core.errors import (
    ActiveBattleExists, BattleAlreadyEnded, CreatureNotFound, CreatureUnableToBattle,
    InvalidActor, InvariantViolation, MoveNotAvailable, ValidationError,
)
from pocketduel.core.logging import logger
from pocketduel.data.creatures import CreatureCatalog
from pocketduel.data.moves import MoveCatalog
from pocketduel.system.settings import SettingsData
from . import messages
from .ai import choose_move
from .experience import experience_for_victory
from .mechanics import DamageRules, resolve_damage
from .models import (
    BattleSession, BattleType, CreatureSnapshot, Effectiveness, KnownMove,
    MoveDefinition, MoveResult, Outcome, Phase, TurnEvent, TurnOutcome,
)
from .session import BattleSessionStore

EndListener = Callable[[BattleSession], None]

FLEE_REASON = "flee"
DRAW_REASON = "draw"


class BattleService:
    def __init__(self, creatures: CreatureCatalog, moves: Optional[MoveCatalog] = None,
                 store: Optional[BattleSessionStore] = None, settings: Optional[SettingsData] = None,
                 rng: Optional[random.Random] = None):
        self.creatures = creatures
        self.moves = moves or creatures.moves
        self.store = store or BattleSessionStore()
        self.settings = settings or SettingsData()
        self.rules = DamageRules.from_settings(self.settings)
        self.rng = rng or random.Random()
        self._end_listeners: List[EndListener] = []

    def apply_settings(self, settings: SettingsData):
        """Pick up changed settings; turns resolved afterwards use the new rules."""
        self.settings = settings
        self.rules = DamageRules.from_settings(settings)
        logger.debug("ServiceSettingsApplied", strategy=settings.enemy_strategy,
                     critical_chance=settings.critical_chance)

    def on_battle_ended(self, fn: EndListener):
        """Register a callback run once per battle when it reaches Ended."""
        self._end_listeners.append(fn)

    def _notify_ended(self, session: BattleSession):
        # The battle is already committed; listener failures are logged, not raised
        for fn in self._end_listeners:
            try:
                fn(session)
            except Exception as e:
                logger.error("BattleEndListenerFailed", battle_id=session.battle_id, error=repr(e))

    # ------------------------------------------------------------------
    # Start
    # ------------------------------------------------------------------
    def start_battle(self, player_id: str, player_creature_id: str, enemy_creature_id: str,
                     battle_type: Union[BattleType, str]) -> BattleSession:
        try:
            battle_type = BattleType(battle_type)
        except ValueError:
            raise ValidationError(f"Unknown battle type '{battle_type}'") from None
        if self.settings.single_active_battle:
            active = self.store.active_for_player(player_id)
            if active is not None:
                raise ActiveBattleExists(player_id, active.battle_id)

        player = self.creatures.snapshot(player_creature_id)
        if player.current_hp == 0:
            raise CreatureUnableToBattle(player.creature_id, player.display_name)
        enemy = self._load_enemy(enemy_creature_id, battle_type)
        if enemy.current_hp == 0:
            raise CreatureUnableToBattle(enemy.creature_id, enemy.display_name)

        session = BattleSession(f"battle-{uuid.uuid4()}", player_id, battle_type, player, enemy)
        session.record("system", "system", messages.battle_opened(battle_type, enemy.display_name))
        self.store.add(session)
        logger.info("BattleStarted", battle_id=session.battle_id, player=player.creature_id,
                    enemy=enemy.creature_id, type=battle_type.value)
        return session

    def _load_enemy(self, enemy_creature_id: str, battle_type: BattleType) -> CreatureSnapshot:
        if battle_type == BattleType.TRAINER:
            return self.creatures.snapshot(enemy_creature_id)
        # Wild encounters pass a species id
        try:
            species_id = int(enemy_creature_id)
        except (TypeError, ValueError):
            raise CreatureNotFound(str(enemy_creature_id)) from None
        level = self.rng.randint(self.settings.wild_level_min, self.settings.wild_level_max)
        return self.creatures.spawn_wild(species_id, level)

    # ------------------------------------------------------------------
    # Use move
    # ------------------------------------------------------------------
    def use_move(self, battle_id: str, acting_creature_id: str, move_id: int) -> TurnOutcome:
        with self.store.locked(battle_id) as session:
            if session.is_ended:
                raise BattleAlreadyEnded(battle_id)
            if acting_creature_id != session.player.creature_id:
                raise InvalidActor(acting_creature_id)
            known = session.player.known_move(move_id)
            if known is None:
                raise MoveNotAvailable(messages.unknown_move(session.player.display_name), move_id)
            if session.player_state.pp_of(known.move_id) <= 0:
                logger.debug("MoveOutOfPP", battle_id=battle_id, move=known.move.name)
                raise MoveNotAvailable(messages.not_enough_pp(known.move.name), move_id)
            result = self._resolve_turn(session, known)
        if result.is_terminal:
            self._notify_ended(session)
        return result

    def _resolve_turn(self, session: BattleSession, known: KnownMove) -> TurnOutcome:
        session.advance(Phase.RESOLVING_TURN)
        turn = session.turn_counter
        events: List[TurnEvent] = []
        lines: List[str] = []

        remaining_pp = session.player_state.consume_pp(known.move_id)
        player_action = self._apply_move(session, "player", known.move, events, lines)

        enemy_action: Optional[MoveResult] = None
        if not session.enemy_state.is_fainted:
            counter = choose_move(session.enemy, session.enemy_state, session.player,
                                  self.rng, self.settings.enemy_strategy)
            if counter is None:
                text = messages.no_moves_left(session.enemy.display_name)
                events.append(TurnEvent("no_moves", "enemy", text))
                lines.append(text)
                session.record("system", session.enemy.display_name, text)
            else:
                session.enemy_state.consume_pp(counter.move_id)
                enemy_action = self._apply_move(session, "enemy", counter.move, events, lines)

        outcome = self._terminal_outcome(session)
        experience = 0
        if outcome is not None:
            experience = self._close_by_knockout(session, outcome, events, lines)
        session.turn_counter += 1
        if outcome is None:
            session.advance(Phase.SELECTING_COMMAND)

        logger.info("TurnResolved", battle_id=session.battle_id, turn=turn,
                    player_hp=session.player_state.current_hp, enemy_hp=session.enemy_state.current_hp,
                    phase=session.phase.value)
        return TurnOutcome(
            battle_id=session.battle_id,
            turn=turn,
            player_action=player_action,
            enemy_action=enemy_action,
            player_hp=session.player_state.current_hp,
            enemy_hp=session.enemy_state.current_hp,
            remaining_pp=remaining_pp,
            phase=session.phase,
            outcome=session.outcome,
            winner=session.winner,
            experience_gained=experience,
            events=tuple(events),
            message=" ".join(lines),
        )

    def _sides(self, session: BattleSession, side: str):
        if side == "player":
            return session.player, session.enemy, session.enemy_state
        return session.enemy, session.player, session.player_state

    def _apply_move(self, session: BattleSession, side: str, move: MoveDefinition,
                    events: List[TurnEvent], lines: List[str]) -> MoveResult:
        attacker, defender, defender_state = self._sides(session, side)
        target_side = "enemy" if side == "player" else "player"
        hp_before = defender_state.current_hp
        result = resolve_damage(attacker, defender, move, hp_before, self.rng, self.rules)
        if not 0 <= result.damage <= hp_before:
            raise InvariantViolation(f"damage {result.damage} outside [0, {hp_before}]")

        if not result.hit:
            text = messages.move_missed(attacker.display_name, move.name)
            events.append(TurnEvent("missed", side, text))
        else:
            defender_state.take_damage(result.damage)
            text = messages.move_result(attacker.display_name, move.name, defender.display_name,
                                        result.damage, result.critical, result.effectiveness)
            events.append(TurnEvent("move_used", side, messages.move_used(attacker.display_name, move.name)))
            if result.effectiveness == Effectiveness.INEFFECTIVE:
                events.append(TurnEvent("no_effect", target_side, f"It doesn't affect {defender.display_name}..."))
            elif result.damage > 0:
                events.append(TurnEvent("damage", target_side,
                                        f"{defender.display_name} took {result.damage} damage.", result.damage))
            if result.critical:
                events.append(TurnEvent("critical", target_side, "A critical hit!"))
            eff_text = messages.EFFECTIVENESS_TEXT.get(result.effectiveness)
            if eff_text:
                events.append(TurnEvent("effectiveness", target_side, eff_text))
        lines.append(text)
        session.record("move", attacker.display_name, text, move.move_id, result.damage)
        logger.debug("MoveResolved", battle_id=session.battle_id, actor=attacker.creature_id,
                     move=move.name, hit=result.hit, critical=result.critical,
                     effectiveness=result.effectiveness.value, damage=result.damage)
        return MoveResult(
            actor_id=attacker.creature_id,
            actor_name=attacker.display_name,
            move_id=move.move_id,
            move_name=move.name,
            hit=result.hit,
            critical=result.critical,
            effectiveness=result.effectiveness,
            damage=result.damage,
            target_hp=defender_state.current_hp,
        )

    @staticmethod
    def _terminal_outcome(session: BattleSession) -> Optional[Outcome]:
        # Player resolves first, so a double knockout still goes to the player
        if session.enemy_state.is_fainted:
            return Outcome.PLAYER_WON
        if session.player_state.is_fainted:
            return Outcome.ENEMY_WON
        return None

    def _close_by_knockout(self, session: BattleSession, outcome: Outcome,
                           events: List[TurnEvent], lines: List[str]) -> int:
        if outcome == Outcome.PLAYER_WON:
            loser, loser_side, winner = session.enemy, "enemy", session.player
        else:
            loser, loser_side, winner = session.player, "player", session.enemy
        for text, kind, side in (
            (messages.fainted(loser.display_name), "fainted", loser_side),
            (messages.victory(winner.display_name), "battle_ended", "player" if loser_side == "enemy" else "enemy"),
        ):
            events.append(TurnEvent(kind, side, text))
            lines.append(text)
            session.record("system", "system", text)
        experience = 0
        if outcome == Outcome.PLAYER_WON:
            experience = experience_for_victory(winner.level, loser.level)
            lines.append(messages.experience_gained(winner.display_name, experience))
        session.finish(outcome, reason="knockout")
        logger.info("BattleEnded", battle_id=session.battle_id, outcome=outcome.value, experience=experience)
        return experience

    # ------------------------------------------------------------------
    # End / queries
    # ------------------------------------------------------------------
    def end_battle(self, battle_id: str, reason: Optional[str] = None) -> BattleSession:
        """Force the battle to Ended. Calling it on an ended battle changes nothing."""
        with self.store.locked(battle_id) as session:
            if session.is_ended:
                logger.debug("EndBattleNoop", battle_id=battle_id, outcome=session.outcome)
                return session
            outcome = Outcome.DRAW if reason == DRAW_REASON else Outcome.PLAYER_FLED
            text = messages.fled() if outcome == Outcome.PLAYER_FLED else messages.battle_closed()
            session.record("flee", session.player.display_name, text)
            session.finish(outcome, reason or FLEE_REASON)
            logger.info("BattleEnded", battle_id=battle_id, outcome=outcome.value, reason=reason or FLEE_REASON)
        self._notify_ended(session)
        return session

    def get_battle(self, battle_id: str) -> BattleSession:
        return self.store.get(battle_id)

    def release(self, battle_id: str) -> bool:
        """Drop an ended battle from the store. Battles still in progress are kept."""
        with self.store.locked(battle_id) as session:
            if not session.is_ended:
                return False
        released = self.store.discard(battle_id)
        if released:
            logger.debug("BattleReleased", battle_id=battle_id)
        return released

    def list_moves(self) -> List[MoveDefinition]:
        return self.moves.all()


__all__ = ["BattleService", "FLEE_REASON", "DRAW_REASON"]
