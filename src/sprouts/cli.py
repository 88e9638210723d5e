from __future__ import annotations

import threading
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from sprouts.config import Settings, load_settings
from sprouts.content import available_packs, load_pack
from sprouts.learning.parent_settings import (
    PinPad,
    change_pin,
    set_time_limit,
    toggle_allowed,
    toggle_lock,
)
from sprouts.learning.progress import summarize_progress
from sprouts.learning.timer import SessionTicker
from sprouts.system import SproutsApp

app = typer.Typer(help="Sprouts quiz engine: play in the terminal and manage parent controls.")
settings_app = typer.Typer(help="PIN-gated parent controls.")
app.add_typer(settings_app, name="settings")
console = Console()


@app.callback()
def main() -> None:
    """Load a local .env before any command runs."""
    load_dotenv(override=False)


def _settings(config: Optional[Path], pack: Optional[str], data_dir: Optional[Path]) -> Settings:
    settings = load_settings(config)
    if pack:
        settings.app.pack = pack
    if data_dir:
        settings.paths.data_dir = data_dir
    return settings


def _load_app(config: Optional[Path], pack: Optional[str], data_dir: Optional[Path]) -> SproutsApp:
    try:
        return SproutsApp(_settings(config, pack, data_dir))
    except (FileNotFoundError, ValueError) as exc:
        raise typer.BadParameter(str(exc)) from exc


def _authenticate(sprouts: SproutsApp, pin: str) -> None:
    """Run the PIN through the pad; saves the PIN when none was set yet."""
    if len(pin) != 4 or not pin.isdigit():
        raise typer.BadParameter("PIN must be exactly four digits.")
    current = sprouts.settings_store.load_parent_settings()
    pad = PinPad(current.pin)
    if not pad.enter(pin):
        console.print("[red]Wrong PIN.[/red]")
        raise typer.Exit(code=1)
    if pad.new_pin:
        sprouts.settings_store.save_parent_settings(change_pin(current, pad.new_pin))
        console.print("Parent PIN set.")


ConfigOption = typer.Option(None, help="Path to configuration YAML.")
PackOption = typer.Option(None, help="Content pack to use (overrides config).")
DataDirOption = typer.Option(None, help="Directory for saved progress and settings.")
PinOption = typer.Option(..., prompt="Parent PIN", hide_input=True, help="Four-digit parent PIN.")


@app.command()
def packs() -> None:
    """List the packaged content packs."""
    table = Table(title="Content packs")
    table.add_column("ID")
    table.add_column("Title")
    table.add_column("Modes")
    for pack_id in available_packs():
        pack = load_pack(pack_id)
        table.add_row(pack.id, pack.title, ", ".join(mode.label for mode in pack.modes))
    console.print(table)


@app.command()
def play(
    config: Optional[Path] = ConfigOption,
    pack: Optional[str] = PackOption,
    data_dir: Optional[Path] = DataDirOption,
    mode: Optional[str] = typer.Option(None, help="Mode key to start with."),
    theme: Optional[str] = typer.Option(None, help="Theme to start with."),
    difficulty: Optional[str] = typer.Option(None, help="Difficulty to start with."),
) -> None:
    """
    Play an interactive quiz round in the terminal.

    Answer with 1-3, ``h`` for a hint, ``q`` to stop. The parent session limit is enforced
    by a background ticker; progress is saved after every answer.
    """
    sprouts = _load_app(config, pack, data_dir)
    session, timer = sprouts.start_session()
    for selector, value in (
        (session.select_mode, mode),
        (session.select_theme, theme),
        (session.select_difficulty, difficulty),
    ):
        if value and not selector(value):
            console.print(f"[yellow]'{value}' is not available; keeping the current choice.[/yellow]")

    lock = threading.Lock()
    ticker = SessionTicker(timer, lock=lock)
    ticker.start()
    console.print(
        f"[bold]{sprouts.pack.title}[/bold] - {sprouts.pack.mode_label(session.mode)}, "
        f"{session.theme}, {session.difficulty}"
    )
    try:
        while not session.ended:
            problem = session.problem
            if problem.is_empty:
                console.print(f"[yellow]{problem.prompt}[/yellow]")
                break
            console.print(f"\n[bold]{problem.prompt}[/bold]")
            for index, option in enumerate(problem.options, start=1):
                marker = " [dim](not this one)[/dim]" if session.hinted_index == index - 1 else ""
                console.print(f"  {index}. {option}{marker}")
            choice = typer.prompt("Your answer").strip().lower()
            if choice == "q":
                break
            if choice == "h":
                session.hint()
                continue
            if not choice.isdigit() or not 1 <= int(choice) <= len(problem.options):
                console.print("Pick 1, 2 or 3.")
                continue
            with lock:
                # the ticker may have ended the session while we waited for input
                if session.ended:
                    break
                outcome = session.answer(problem.options[int(choice) - 1])
            style = "green" if outcome.correct else "red"
            console.print(f"[{style}]{outcome.message}[/{style}] seeds: {outcome.seeds}, level: {outcome.level}")
            if outcome.leveled_up:
                console.print(f"Your garden grew a {outcome.collectible}!")
        if session.ended:
            console.print("\n[bold green]Great job! Time for a break.[/bold green]")
    finally:
        ticker.stop()
        timer.close()


@app.command()
def stats(
    config: Optional[Path] = ConfigOption,
    pack: Optional[str] = PackOption,
    data_dir: Optional[Path] = DataDirOption,
) -> None:
    """Show the parent progress summary."""
    sprouts = _load_app(config, pack, data_dir)
    summary = summarize_progress(sprouts.progress_store.load_progress())

    console.print(
        f"Accuracy: {summary['accuracy']}%  Best streak: {summary['streak_best']}  "
        f"Questions: {summary['questions']}  Play time: {summary['play_time']}  "
        f"Sessions: {summary['sessions']}"
    )
    for title, rows in (("Difficulty", summary["per_difficulty"]), ("Mode", summary["per_mode"])):
        table = Table()
        table.add_column(title)
        table.add_column("Done", justify="right")
        table.add_column("Correct", justify="right")
        for name, answered, correct in rows:
            table.add_row(name.capitalize(), str(answered), str(correct))
        console.print(table)


@settings_app.command("show")
def settings_show(
    pin: str = PinOption,
    config: Optional[Path] = ConfigOption,
    pack: Optional[str] = PackOption,
    data_dir: Optional[Path] = DataDirOption,
) -> None:
    """Print the current parent settings."""
    sprouts = _load_app(config, pack, data_dir)
    _authenticate(sprouts, pin)
    current = sprouts.settings_store.load_parent_settings()
    limit = "None" if current.session_time_limit == 0 else f"{current.session_time_limit}m"
    console.print(f"Session limit: {limit}")
    console.print(f"Gentle stop: {'on' if current.stop_after_current_question else 'off'}")
    console.print(
        "Locks: "
        + ", ".join(
            f"{name}={'locked' if getattr(current.locks, name) else 'open'}"
            for name in ("theme", "difficulty", "game_mode")
        )
    )
    console.print(f"Allowed themes: {', '.join(current.allowed_themes)}")
    console.print(f"Allowed difficulties: {', '.join(current.allowed_difficulties)}")
    console.print(f"Allowed modes: {', '.join(current.allowed_modes)}")


@settings_app.command("limit")
def settings_limit(
    minutes: int = typer.Argument(..., help="Session limit in minutes (0 for none)."),
    pin: str = PinOption,
    config: Optional[Path] = ConfigOption,
    pack: Optional[str] = PackOption,
    data_dir: Optional[Path] = DataDirOption,
) -> None:
    """Set the session time limit."""
    sprouts = _load_app(config, pack, data_dir)
    _authenticate(sprouts, pin)
    current = sprouts.settings_store.load_parent_settings()
    try:
        updated = set_time_limit(current, minutes, sprouts.settings.game.time_limit_choices)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    sprouts.settings_store.save_parent_settings(updated)
    console.print(f"Session limit set to {minutes} minutes.")


@settings_app.command("gentle-stop")
def settings_gentle_stop(
    pin: str = PinOption,
    config: Optional[Path] = ConfigOption,
    pack: Optional[str] = PackOption,
    data_dir: Optional[Path] = DataDirOption,
) -> None:
    """Toggle finishing the current question before a break."""
    sprouts = _load_app(config, pack, data_dir)
    _authenticate(sprouts, pin)
    current = sprouts.settings_store.load_parent_settings()
    updated = current.model_copy(
        update={"stop_after_current_question": not current.stop_after_current_question}
    )
    sprouts.settings_store.save_parent_settings(updated)
    console.print(f"Gentle stop {'on' if updated.stop_after_current_question else 'off'}.")


@settings_app.command("lock")
def settings_lock(
    target: str = typer.Argument(..., help="theme, difficulty or game_mode."),
    pin: str = PinOption,
    config: Optional[Path] = ConfigOption,
    pack: Optional[str] = PackOption,
    data_dir: Optional[Path] = DataDirOption,
) -> None:
    """Toggle a selector lock."""
    sprouts = _load_app(config, pack, data_dir)
    _authenticate(sprouts, pin)
    current = sprouts.settings_store.load_parent_settings()
    try:
        updated = toggle_lock(current, target)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    sprouts.settings_store.save_parent_settings(updated)
    state = "locked" if getattr(updated.locks, target) else "unlocked"
    console.print(f"{target} {state}.")


@settings_app.command("allow")
def settings_allow(
    kind: str = typer.Argument(..., help="themes, difficulties or modes."),
    value: str = typer.Argument(..., help="Key to toggle in the allow-list."),
    pin: str = PinOption,
    config: Optional[Path] = ConfigOption,
    pack: Optional[str] = PackOption,
    data_dir: Optional[Path] = DataDirOption,
) -> None:
    """Toggle one entry of an allow-list; the last remaining entry cannot be removed."""
    sprouts = _load_app(config, pack, data_dir)
    _authenticate(sprouts, pin)
    current = sprouts.settings_store.load_parent_settings()
    try:
        updated = toggle_allowed(current, f"allowed_{kind}", value)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    sprouts.settings_store.save_parent_settings(updated)
    console.print(f"Allowed {kind}: {', '.join(getattr(updated, f'allowed_{kind}'))}")


@settings_app.command("pin")
def settings_pin(
    new_pin: str = typer.Argument(..., help="New four-digit PIN."),
    pin: str = PinOption,
    config: Optional[Path] = ConfigOption,
    pack: Optional[str] = PackOption,
    data_dir: Optional[Path] = DataDirOption,
) -> None:
    """Change the parent PIN."""
    sprouts = _load_app(config, pack, data_dir)
    _authenticate(sprouts, pin)
    current = sprouts.settings_store.load_parent_settings()
    updated = change_pin(current, new_pin)
    if updated is current:
        raise typer.BadParameter("PIN must be exactly four digits.")
    sprouts.settings_store.save_parent_settings(updated)
    console.print("Parent PIN changed.")


if __name__ == "__main__":
    app()
