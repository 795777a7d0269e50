"""Interactive CLI application."""
import sys

from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, FloatPrompt, IntPrompt, Prompt
from rich.table import Table

from algo_tutor.catalog import load_catalog
from algo_tutor.config import get_settings
from algo_tutor.dashboard import (
    get_mastery_color, get_skill_rows, get_study_stats, get_weak_skills,
)
from algo_tutor.db import SqliteStore
from algo_tutor.errors import CatalogIntegrityError, GraphIntegrityError, TutorError
from algo_tutor.models import Mode
from algo_tutor.tutor import Tutor

console = Console()

MODE_STYLES = {
    Mode.REVIEW: ("Spaced Review", "magenta"),
    Mode.DISCOVERY: ("New Discovery", "cyan"),
    Mode.CRAM: ("Cram Mode", "red"),
}


def configure_logging(level: str) -> None:
    logger.remove()
    logger.add(sys.stderr, level=level, format="<level>{message}</level>")


def show_welcome():
    console.print(Panel(
        "[bold]Algorithm Practice Tutor[/bold]\n[dim]Skill tree + spaced repetition[/dim]",
        title="Welcome", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("next", "Get the next problem"),
        ("log", "Log an attempt by problem id"),
        ("skills", "Skill tree + mastery"),
        ("due", "Reviews due now"),
        ("stats", "Practice statistics"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def ask_attempt(tutor: Tutor, problem_id: int) -> None:
    minutes = FloatPrompt.ask("Minutes spent")
    solved = Confirm.ask("Solved?")
    viewed_hint = Confirm.ask("Looked at a hint or the solution?", default=False)
    result = tutor.log_attempt(problem_id, minutes * 60, solved, viewed_hint)
    state = result.review_state
    skill = tutor.catalog.graph.skill(tutor.catalog.resolve(problem_id)[0].skill_id)
    console.print(
        f"[bold]{result.outcome.value}[/bold] - next review in {state.interval} day(s) "
        f"({state.due:%Y-%m-%d}), ease {state.ease_factor:.2f}"
    )
    console.print(f"{skill.name} mastery: [bold]{result.mastery:.0%}[/bold]")
    for sid in sorted(result.newly_unlocked):
        console.print(f"[green]Unlocked: {tutor.catalog.graph.skill(sid).name}[/green]")


def cmd_next(tutor: Tutor):
    pick = tutor.recommend()
    if pick is None:
        console.print("[yellow]No problems available in unlocked skills.[/yellow]")
        return
    label, color = MODE_STYLES[pick.mode]
    skill = tutor.catalog.graph.skill(pick.problem.skill_id)
    difficulty = pick.variant.difficulty if pick.variant else pick.problem.difficulty
    console.print(Panel(
        f"[bold]{pick.title}[/bold] [dim]({difficulty.value})[/dim]\n"
        f"Skill: {skill.name}\n[link={pick.url}]{pick.url}[/link]",
        title=label, border_style=color,
    ))
    if Confirm.ask("Log an attempt now?", default=True):
        problem_id = pick.variant.id if pick.variant else pick.problem.id
        ask_attempt(tutor, problem_id)


def cmd_log(tutor: Tutor):
    problem_id = IntPrompt.ask("Problem id")
    ask_attempt(tutor, problem_id)


def cmd_skills(tutor: Tutor):
    threshold = tutor.tuning.unlock_threshold
    table = Table(title="Skill Tree")
    table.add_column("Skill", style="cyan")
    table.add_column("Mastery", justify="right")
    table.add_column("Progress", justify="right")
    table.add_column("Status")
    for row in get_skill_rows(tutor):
        color = get_mastery_color(row["mastery"], threshold)
        if row["unlocked"]:
            status = f"[{color}]{row['label']}[/{color}]"
        else:
            status = f"[dim]Locked ({', '.join(row['blocked_by'])})[/dim]"
        table.add_row(
            row["name"], f"{row['mastery']:.0%}", f"{row['attempted']}/{row['total']}", status,
        )
    console.print(table)

    weak = get_weak_skills(tutor)
    if weak:
        console.print(f"\n  [yellow]Recommendation: Focus on {weak[0]['name']}[/yellow]")


def cmd_due(tutor: Tutor):
    due = tutor.due_reviews()
    if not due:
        console.print("[green]No reviews due right now![/green]")
        return
    table = Table(title="Due Reviews")
    table.add_column("Id", justify="right")
    table.add_column("Problem")
    table.add_column("Due")
    table.add_column("Ease", justify="right")
    for state in due:
        problem = tutor.catalog.problems[state.problem_id]
        table.add_row(str(problem.id), problem.title, f"{state.due:%Y-%m-%d}", f"{state.ease_factor:.2f}")
    console.print(table)


def cmd_stats(tutor: Tutor):
    stats = get_study_stats(tutor)
    console.print(f"\n  Attempts: [bold]{stats['attempts']}[/bold]  |  "
                  f"Unassisted solves: [bold]{stats['unassisted_solves']}[/bold]  |  "
                  f"Problems seen: [bold]{stats['problems_seen']}[/bold]  |  "
                  f"Due: [bold]{stats['due_reviews']}[/bold]  |  "
                  f"Hours: [bold]{stats['hours_practiced']}[/bold]")


COMMANDS = {
    "next": cmd_next,
    "log": cmd_log,
    "skills": cmd_skills,
    "due": cmd_due,
    "stats": cmd_stats,
}


def main():
    settings = get_settings()
    configure_logging(settings.log_level)
    try:
        catalog = load_catalog(settings.catalog_path)
    except (GraphIntegrityError, CatalogIntegrityError) as e:
        console.print(f"[red]Catalog error: {e}[/red]")
        sys.exit(1)
    tutor = Tutor(catalog, SqliteStore(settings.db_path), settings.tuning)

    show_welcome()

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="next").strip().lower()
        try:
            if choice in ("quit", "exit", "q"):
                console.print("[dim]Happy grinding![/dim]")
                break
            command = COMMANDS.get(choice)
            if command is None:
                console.print("[red]Unknown command. Try again.[/red]")
                continue
            command(tutor)
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except TutorError as e:
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
