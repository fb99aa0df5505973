"""Interactive CLI application."""
import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from rich.console import Console
from rich.panel import Panel
from rich.prompt import IntPrompt, Prompt
from rich.table import Table

from immersion_tracker.config import DEFAULT_DB_PATH
from immersion_tracker.db import init_db
from immersion_tracker.errors import NoCardsToReviewError, TrackerError
from immersion_tracker.flashcards import (
    add_flashcard, apply_review, create_deck, get_deck, get_deck_cards, get_deck_summary, get_decks,
)
from immersion_tracker.importer import import_file
from immersion_tracker.log import setup_logging
from immersion_tracker.models import Difficulty, utc_now
from immersion_tracker.session import ReviewSession
from immersion_tracker.settings import get_new_card_limit, set_new_card_limit

console = Console()
logger = logging.getLogger(__name__)

EXIT_WORDS = ("q", "menu")

# Answer keys shown under each card; numbers are shortcuts for the names.
ANSWER_KEYS = {
    "1": Difficulty.AGAIN,
    "2": Difficulty.HARD,
    "3": Difficulty.GOOD,
    "4": Difficulty.EASY,
    **{d.value: d for d in Difficulty},
}


class SessionExitRequested(Exception):
    """Raised when the user leaves a review session early."""


def session_prompt(prompt: str, choices: Optional[list] = None, **kwargs) -> str:
    """Prompt inside a session; 'q' or 'menu' aborts back to the main menu."""
    if choices is not None:
        choices = list(choices) + list(EXIT_WORDS)
        kwargs.setdefault("show_choices", False)
    answer = Prompt.ask(prompt, choices=choices, **kwargs)
    if answer.strip().lower() in EXIT_WORDS:
        raise SessionExitRequested()
    return answer


def ask_difficulty() -> Difficulty:
    answer = session_prompt(
        "[red]1[/red] again  [yellow]2[/yellow] hard  [green]3[/green] good  [blue]4[/blue] easy",
        choices=list(ANSWER_KEYS),
    )
    return ANSWER_KEYS[answer.strip().lower()]


def show_welcome():
    console.print(Panel(
        "[bold]Immersion Tracker[/bold]\n[dim]Vocabulary review with spaced repetition[/dim]",
        title="Welcome", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("decks", "List decks with due and new cards"),
        ("new-deck", "Create a deck"),
        ("add", "Add a flashcard"),
        ("review", "Review a deck"),
        ("import", "Import cards from a file"),
        ("settings", "Change the new card limit"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def show_session_stats(session: ReviewSession, now: datetime) -> None:
    stats = session.stats
    console.print(Panel(
        f"Reviewed: [bold]{stats.reviewed}[/bold]  |  "
        f"Accuracy: [bold]{stats.accuracy}%[/bold]  |  "
        f"Time: [bold]{stats.elapsed_minutes(now)}m[/bold]",
        title="Session Stats", border_style="green",
    ))


def run_review_session(
    db_path: str,
    deck_id: int,
    clock: Callable[[], datetime] = utc_now,
) -> Optional[ReviewSession]:
    """Review a deck's due cards, then its new cards, saving each answer."""
    cards = get_deck_cards(db_path, deck_id)
    session = ReviewSession(cards, new_card_limit=get_new_card_limit(db_path))
    try:
        session.start(clock())
    except NoCardsToReviewError:
        console.print("[yellow]No cards available for review![/yellow]")
        return None

    console.print(f"\n[bold]Review Session[/bold] — {session.total} cards\n")
    while session.current is not None:
        card = session.current
        number = session.total - session.remaining + 1
        body = f"[bold]{card.front}[/bold]"
        if card.context:
            body += f'\n[dim italic]"{card.context}"[/dim italic]'
        title = f"Card {number}/{session.total}"
        if card.video_title:
            title += f" · {card.video_title}"
        console.print(Panel(body, title=title, border_style="cyan"))
        session_prompt("[dim]Press Enter to reveal answer[/dim]", default="")
        console.print(Panel(card.back, border_style="green"))
        difficulty = ask_difficulty()
        _, delta = session.answer(difficulty, clock())
        apply_review(db_path, card.id, delta)
        console.print(f"[dim]Next review in {delta['interval']} day(s)[/dim]\n")

    console.print("[green]Session complete![/green]")
    show_session_stats(session, clock())
    return session


def choose_deck(db_path: str) -> Optional[int]:
    decks = get_decks(db_path)
    if not decks:
        console.print("[yellow]No decks yet. Use 'new-deck' to create one.[/yellow]")
        return None
    for d in decks:
        console.print(f"  [cyan]{d.id}[/cyan]) {d.name} [dim]({d.card_count} cards)[/dim]")
    return IntPrompt.ask("Select deck", choices=[str(d.id) for d in decks])


def cmd_decks(db_path: str):
    decks = get_decks(db_path)
    if not decks:
        console.print("[yellow]No decks yet. Use 'new-deck' to create one.[/yellow]")
        return
    table = Table(title="Decks")
    table.add_column("ID", justify="right")
    table.add_column("Deck", style="cyan")
    table.add_column("Cards", justify="right")
    table.add_column("Due", justify="right")
    table.add_column("New", justify="right")
    now = utc_now()
    for d in decks:
        summary = get_deck_summary(db_path, d.id, now)
        table.add_row(
            str(d.id), d.name, str(summary["total"]),
            f"[red]{summary['due']}[/red]" if summary["due"] else "0",
            f"[blue]{summary['new']}[/blue]" if summary["new"] else "0",
        )
    console.print(table)


def cmd_new_deck(db_path: str):
    name = Prompt.ask("Deck name")
    description = Prompt.ask("Description", default="")
    deck_id = create_deck(db_path, name, description)
    console.print(f"[green]Created deck {deck_id}: {name.strip()}[/green]")


def cmd_add(db_path: str):
    deck_id = choose_deck(db_path)
    if deck_id is None:
        return
    front = Prompt.ask("Front")
    back = Prompt.ask("Back")
    context = Prompt.ask("Context sentence", default="")
    video_title = Prompt.ask("Watched in (show or video)", default="")
    add_flashcard(db_path, deck_id, front, back, context=context, video_title=video_title)
    console.print("[green]Card added![/green]")


def cmd_review(db_path: str):
    deck_id = choose_deck(db_path)
    if deck_id is None:
        return
    deck = get_deck(db_path, deck_id)
    console.print(f"\n[bold]Reviewing: {deck.name}[/bold]")
    try:
        run_review_session(db_path, deck_id)
    except SessionExitRequested:
        console.print("[dim]Session ended early. Answered cards are saved.[/dim]")


def cmd_import(db_path: str):
    deck_id = choose_deck(db_path)
    if deck_id is None:
        return
    file_path = Prompt.ask("File path")
    if not Path(file_path).exists():
        console.print(f"[red]File not found: {file_path}[/red]")
        return
    result = import_file(db_path, file_path, deck_id)
    console.print(f"[green]Imported {result['imported']} cards from {result['filename']}[/green]")
    if result["skipped"]:
        console.print(f"[yellow]Skipped {result['skipped']} lines without a front and back[/yellow]")


def cmd_settings(db_path: str):
    current = get_new_card_limit(db_path)
    limit = IntPrompt.ask("New cards per session", default=current)
    set_new_card_limit(db_path, limit)
    console.print(f"[green]New card limit set to {limit}[/green]")


COMMANDS = {
    "decks": cmd_decks,
    "new-deck": cmd_new_deck,
    "add": cmd_add,
    "review": cmd_review,
    "import": cmd_import,
    "settings": cmd_settings,
}


def main():
    db_path = DEFAULT_DB_PATH
    setup_logging()
    init_db(db_path)
    show_welcome()

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="review").strip().lower()
        if choice in ("quit", "exit", "q"):
            console.print("[dim]¡Hasta luego![/dim]")
            break
        command = COMMANDS.get(choice)
        if command is None:
            console.print("[red]Unknown command. Try again.[/red]")
            continue
        try:
            command(db_path)
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except (TrackerError, ValueError) as e:
            console.print(f"[red]{e}[/red]")
        except Exception as e:
            logger.exception("Command %s failed", choice)
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
