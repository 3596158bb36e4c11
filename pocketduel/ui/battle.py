"""Terminal battle rendering built on rich.

Battle screens read the client mirror and the roster reads catalog snapshots;
nothing here talks to the transport.
Both creatures are shown side by side in panels with HP bars and coloured
type abbreviations, the move list is a table with PP, and turn events are
printed as styled lines.
"""
from __future__ import annotations
from typing import Iterable, List, Optional

from rich.align import Align
from rich.box import ROUNDED
from rich.columns import Columns
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from pocketduel.battle.models import CreatureSnapshot, TurnEvent
from pocketduel.client.state import BattleMirror, ClientPhase
from pocketduel.core.types import format_types, rich_type_text
from pocketduel.transport.contract import CreatureView

console = Console()

MENU_COLOR = "bright_cyan"

EVENT_STYLES = {
    "move_used": "bold bright_white",
    "missed": "dim",
    "damage": "bright_white",
    "critical": "bold yellow",
    "effectiveness": "bold magenta",
    "no_effect": "dim",
    "fainted": "bold red",
    "no_moves": "dim",
    "battle_ended": "bold green",
}

OUTCOME_TEXT = {
    "PlayerWon": "[bold green]You won![/bold green]",
    "EnemyWon": "[bold red]You lost...[/bold red]",
    "PlayerFled": "[bright_white]You ran from the battle.[/bright_white]",
    "Draw": "[bright_white]The battle ended in a draw.[/bright_white]",
}


def hp_bar(current: int, max_hp: int, length: int = 20) -> str:
    """HP bar as rich markup: green above half, yellow above a quarter, else red."""
    if max_hp <= 0:
        return "[red]FAINTED[/red]"
    current = max(0, min(current, max_hp))
    percent = current / max_hp
    filled = int(percent * length)
    if current > 0 and filled == 0:
        filled = 1
    if percent > 0.5:
        color = "green"
    elif percent > 0.25:
        color = "yellow"
    else:
        color = "red"
    bar = "█" * filled + "░" * (length - filled)
    return f"[{color}]{bar}[/{color}]"


def creature_panel(creature: CreatureView, title: str) -> Panel:
    info = f"{creature.name} Lv{creature.level}"
    types = format_types(tuple(creature.types))
    body = (
        f"[bold bright_white]{info}[/bold bright_white]\n"
        f"[bright_white][[/bright_white]{types}[bright_white]][/bright_white]\n"
        f"[bright_white]HP: {creature.current_hp}/{creature.max_hp}[/bright_white]\n"
        f"{hp_bar(creature.current_hp, creature.max_hp)}"
    )
    return Panel(
        body,
        title=f"[bright_white bold]{title}[/bright_white bold]",
        box=ROUNDED,
        style="bright_white",
        width=45,
        padding=(0, 1),
    )


def hud(mirror: BattleMirror) -> Optional[Align]:
    if mirror.battle is None:
        return None
    columns = Columns(
        [creature_panel(mirror.enemy, "OPPONENT"), creature_panel(mirror.player, "YOUR CREATURE")],
        equal=True, expand=False, padding=(0, 4),
    )
    return Align.center(columns)


def move_table(creature: CreatureView, selected_move_id: Optional[int] = None) -> Table:
    table = Table(
        title=f"[bold {MENU_COLOR}]SELECT MOVE[/bold {MENU_COLOR}]",
        box=ROUNDED,
        style="bright_white",
        width=80,
    )
    table.add_column("#", justify="right", style="dim")
    table.add_column("Move", justify="left")
    table.add_column("Type", justify="left")
    table.add_column("Pow", justify="right")
    table.add_column("Acc", justify="right")
    table.add_column("PP", justify="right")
    for i, m in enumerate(creature.moves, start=1):
        name = m.name
        if m.move_id == selected_move_id:
            name = f"[{MENU_COLOR}]► {name}[/{MENU_COLOR}]"
        pp = f"{m.current_pp}/{m.max_pp}"
        if m.current_pp == 0:
            pp = f"[dim red]{pp}[/dim red]"
        table.add_row(
            str(i),
            name,
            rich_type_text(m.type, m.type.upper()),
            str(m.power) if m.power else "-",
            str(m.accuracy),
            pp,
        )
    return table


def roster_table(creatures: Iterable[CreatureSnapshot]) -> Table:
    table = Table(title=f"[bold {MENU_COLOR}]YOUR CREATURES[/bold {MENU_COLOR}]", box=ROUNDED,
                  style="bright_white")
    table.add_column("Id", style="dim")
    table.add_column("Name")
    table.add_column("Lv", justify="right")
    table.add_column("Type")
    table.add_column("HP", justify="right")
    for c in creatures:
        table.add_row(c.creature_id, c.display_name, str(c.level), format_types(c.types),
                      f"{c.current_hp}/{c.max_hp}")
    return table


def event_lines(events: Iterable[TurnEvent]) -> List[str]:
    lines = []
    for ev in events:
        style = EVENT_STYLES.get(ev.kind, "bright_white")
        lines.append(f"[{style}]{ev.text}[/{style}]")
    return lines


def render_battle(mirror: BattleMirror, out: Optional[Console] = None):
    out = out or console
    view = hud(mirror)
    if view is None:
        return
    out.print()
    out.print(view)
    out.print()
    if mirror.phase == ClientPhase.AWAITING_COMMAND:
        out.print(Align.center(move_table(mirror.player, mirror.selected_move_id)))


def render_events(mirror: BattleMirror, out: Optional[Console] = None):
    out = out or console
    for line in event_lines(mirror.last_events):
        out.print(line)


def render_roster(creatures: Iterable[CreatureSnapshot], out: Optional[Console] = None):
    (out or console).print(roster_table(creatures))


def render_message(text: str, out: Optional[Console] = None):
    (out or console).print(Panel(text, box=ROUNDED, style="bright_white"))


def render_error(text: str, out: Optional[Console] = None):
    (out or console).print(Panel(f"[bold red]{text}[/bold red]", title="ERROR", box=ROUNDED, style="red"))


def render_outcome(mirror: BattleMirror, out: Optional[Console] = None):
    out = out or console
    text = OUTCOME_TEXT.get(mirror.outcome or "", "[bright_white]The battle is over.[/bright_white]")
    if mirror.experience_gained:
        text += f"\n[bright_white]{mirror.player.name} gained {mirror.experience_gained} EXP. Points![/bright_white]"
    out.print(Panel(text, title="BATTLE OVER", box=ROUNDED, style="bright_white"))


__all__ = [
    "hp_bar", "creature_panel", "hud", "move_table", "roster_table", "event_lines",
    "render_battle", "render_events", "render_roster", "render_message", "render_error", "render_outcome",
]
