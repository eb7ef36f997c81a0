"""
Kioku: Main CLI for flashcard study.

A Rich terminal interface for spaced repetition study.

Commands:
- kioku add      - Add a card
- kioku list     - List cards with their learning status
- kioku topics   - Show topics and card counts
- kioku delete   - Delete a card
- kioku due      - Count cards due for review
- kioku study    - Start (or resume) a study session
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional

import typer
from loguru import logger
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import IntPrompt, Prompt
from rich.table import Table

from kioku.config import Settings, get_settings
from kioku.core.card import Card
from kioku.core.clock import SystemClock
from kioku.core.errors import CardNotFound, EmptySelection, SessionDesync, SessionExhausted
from kioku.core.scheduler import SM2Scheduler
from kioku.db.database import create_db_engine
from kioku.db.repository import StudyMode
from kioku.db.session_store import SessionStore
from kioku.db.sql_repository import SqlCardRepository
from kioku.logging_setup import configure_logging
from kioku.study.service import StudyService

from .render import GRADE_CHOICES, FrontSide, render_back, render_front, style_status

# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="kioku",
    help="Kioku: spaced-repetition flashcards",
    no_args_is_help=True,
)
console = Console()


def _learner(learner: str | None, settings: Settings) -> str:
    return learner or settings.learner_id


def build_service(settings: Settings) -> StudyService:
    """Wire repository, scheduler and session store from settings."""
    engine = create_db_engine(settings.database_url, echo=settings.log_level == "DEBUG")
    clock = SystemClock(settings.timezone)
    return StudyService(
        repository_factory=lambda learner_id: SqlCardRepository(engine, learner_id),
        clock=clock,
        scheduler=SM2Scheduler(settings.sm2_config(), clock=clock),
        policy=settings.review_policy(),
        session_store=SessionStore(settings.session_dir),
    )


def _format_due(moment: datetime, now: datetime) -> str:
    if moment <= now:
        return "[yellow]now[/yellow]"
    return moment.astimezone(now.tzinfo).strftime("%Y-%m-%d %H:%M")


# =============================================================================
# Collection Commands
# =============================================================================


@app.command()
def add(
    front: str = typer.Argument(..., help="Front-language text"),
    back: str = typer.Argument(..., help="Back-language text"),
    reading: Optional[str] = typer.Option(None, "--reading", "-r", help="Pronunciation aid"),
    topic: Optional[str] = typer.Option(None, "--topic", "-t", help="Topic label"),
    learner: Optional[str] = typer.Option(None, "--learner", "-L", help="Learner id"),
) -> None:
    """Add a new card, due immediately."""
    settings = get_settings()
    service = build_service(settings)
    if not front.strip() or not back.strip():
        console.print("[red]Both faces need text.[/red]")
        raise typer.Exit(1)

    card = Card.new(front, back, reading=reading, topic=topic, clock=service.clock)
    service.repository(_learner(learner, settings)).add_card(card)
    console.print(f"[green]Added[/green] {escape(card.front)} - {escape(card.back)} [dim]({card.id})[/dim]")


@app.command("list")
def list_cards(
    topic: Optional[str] = typer.Option(None, "--topic", "-t", help="Only this topic"),
    learner: Optional[str] = typer.Option(None, "--learner", "-L", help="Learner id"),
) -> None:
    """List cards with their learning status."""
    settings = get_settings()
    service = build_service(settings)
    repository = service.repository(_learner(learner, settings))

    cards = repository.all_cards()
    if topic:
        cards = [c for c in cards if c.topic == topic]
    if not cards:
        console.print("[dim]No cards yet.[/dim]")
        return

    now = service.clock.now()
    table = Table()
    table.add_column("ID", style="dim")
    table.add_column("Front")
    table.add_column("Reading")
    table.add_column("Back")
    table.add_column("Topic")
    table.add_column("Status")
    table.add_column("Interval", justify="right")
    table.add_column("Due")

    for card in cards:
        table.add_row(
            card.id,
            escape(card.front),
            escape(card.reading or ""),
            escape(card.back),
            escape(card.topic),
            style_status(card.status),
            f"{card.interval_days}d",
            _format_due(card.next_review_at, now),
        )

    console.print(table)


@app.command()
def topics(
    learner: Optional[str] = typer.Option(None, "--learner", "-L", help="Learner id"),
) -> None:
    """Show topics and how many cards each holds."""
    settings = get_settings()
    service = build_service(settings)
    counts = service.repository(_learner(learner, settings)).list_topics()
    if not counts:
        console.print("[dim]No cards yet.[/dim]")
        return

    table = Table(show_header=False, box=None)
    table.add_column("Topic", style="bold")
    table.add_column("Cards", justify="right")
    for name, count in counts.items():
        table.add_row(escape(name), str(count))
    console.print(table)


@app.command()
def delete(
    card_id: str = typer.Argument(..., help="Card id (see `kioku list`)"),
    learner: Optional[str] = typer.Option(None, "--learner", "-L", help="Learner id"),
) -> None:
    """Delete a card. Running sessions skip it."""
    settings = get_settings()
    service = build_service(settings)
    try:
        service.repository(_learner(learner, settings)).delete_card(card_id)
    except CardNotFound as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]Deleted {card_id}[/green]")


@app.command()
def due(
    learner: Optional[str] = typer.Option(None, "--learner", "-L", help="Learner id"),
) -> None:
    """Count cards due for review now."""
    settings = get_settings()
    service = build_service(settings)
    count = service.due_count(_learner(learner, settings))
    if count:
        console.print(f"You have [bold]{count}[/bold] cards to review.")
    else:
        console.print("[green]Nothing due. All caught up.[/green]")


# =============================================================================
# Study
# =============================================================================


def _ask_grade(card: Card, side: FrontSide, show_reading: bool) -> int | None:
    """
    Show a card and collect a grade.

    Returns:
        Grade 0-5, or None when the learner pauses the session
    """
    console.print(Panel(render_front(card, side, show_reading), border_style="cyan", padding=(1, 2)))
    action = Prompt.ask(
        "[dim]f = flip, 5 = know it perfectly, q = pause[/dim]",
        choices=["f", "5", "q"],
        default="f",
    )
    if action == "q":
        return None
    if action == "5":
        return 5

    console.print(Panel(render_back(card, side), border_style="green", padding=(1, 2)))
    for value, label in GRADE_CHOICES:
        console.print(f"  {value} = {label}")
    return IntPrompt.ask("Grade", choices=[str(value) for value, _ in GRADE_CHOICES])


@app.command()
def study(
    mode: StudyMode = typer.Option(
        StudyMode.DUE,
        "--mode", "-m",
        case_sensitive=False,
        help="Which cards to study: due, topic or all",
    ),
    topic: Optional[str] = typer.Option(None, "--topic", "-t", help="Topic for --mode topic"),
    front: Optional[FrontSide] = typer.Option(
        None,
        "--front", "-f",
        case_sensitive=False,
        help="Face shown first (defaults to settings)",
    ),
    shuffle: Optional[bool] = typer.Option(
        None,
        "--shuffle/--no-shuffle",
        help="Randomize card order (defaults to settings)",
    ),
    resume: bool = typer.Option(False, "--resume", help="Continue the saved session"),
    learner: Optional[str] = typer.Option(None, "--learner", "-L", help="Learner id"),
) -> None:
    """
    Start an interactive study session.

    Cards graded below 4 come back later in the same session; the rest are
    rescheduled with SM-2. The session is saved after every card.
    """
    settings = get_settings()
    service = build_service(settings)
    learner_id = _learner(learner, settings)
    side = front or FrontSide(settings.front_side)

    if mode is StudyMode.TOPIC and not topic:
        console.print("[red]--mode topic needs --topic.[/red]")
        raise typer.Exit(1)

    session = service.resume(learner_id) if resume else None
    if session is None:
        if resume:
            console.print("[dim]No saved session; starting a new one.[/dim]")
        try:
            session = service.start(
                learner_id,
                mode=mode,
                topic=topic,
                shuffle=settings.shuffle_sessions if shuffle is None else shuffle,
            )
        except EmptySelection:
            console.print("\n[green]Nothing to study right now![/green]")
            raise typer.Exit(0)

    console.print(f"\n[bold]Session: {session.remaining} cards[/bold] [dim]({session.mode})[/dim]")

    reviewed = 0
    retries = 0
    try:
        while True:
            try:
                card = service.current(learner_id)
            except SessionExhausted:
                break

            grade = _ask_grade(card, side, settings.show_reading_immediately)
            if grade is None:
                console.print("\n[yellow]Session paused. Continue with --resume.[/yellow]")
                return

            outcome = service.grade(learner_id, card.id, grade)
            reviewed += 1
            if outcome.requeued:
                retries += 1
                console.print("[yellow]We'll come back to this card.[/yellow]")
            elif outcome.updated_card is not None:
                console.print(
                    f"[green]Next review in {outcome.updated_card.interval_days} day(s).[/green]"
                )
    except SessionDesync as e:
        logger.error(f"Study session aborted: {e}")
        console.print(f"[red]Session aborted: {e}[/red]")
        raise typer.Exit(1)
    except KeyboardInterrupt:
        console.print("\n\n[yellow]Session interrupted. Continue with --resume.[/yellow]")
        return

    console.print(Panel(
        f"[bold]Session Complete![/bold]\n\n"
        f"Cards graded: {reviewed}\n"
        f"Retried in session: {retries}\n"
        f"Still due: {service.due_count(learner_id)}",
        title="Summary",
        border_style="green",
    ))


# =============================================================================
# Entry Point
# =============================================================================


def main() -> None:
    """CLI entry point."""
    settings = get_settings()
    configure_logging(settings.log_level, settings.log_file)
    app()


if __name__ == "__main__":
    main()
