"""Interactive CLI application."""
import os
import sys

from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, IntPrompt, Prompt
from rich.table import Table

from edustream.activity import heatmap
from edustream.dashboard import format_duration, get_area_progress, get_dashboard_stats
from edustream.db import DEFAULT_DB_PATH, init_db
from edustream.models import RESOURCE_TYPES, StudyStatus
from edustream.retention import MAX_LEVEL, QUIZ_PASS_RATIO, interval_days, quiz_outcome
from edustream.review import (
    ReviewCommand, complete_quiz_review, complete_topic_review, get_due_topics,
    get_upcoming_reviews,
)
from edustream.store import (
    add_resource, add_time_spent, create_area, create_topic, delete_area, delete_resource,
    delete_topic, list_areas, move_area, move_topic, set_resource_watched, set_status,
    update_notes, update_video_notes,
)

console = Console()


def configure_logging() -> None:
    logger.remove()
    logger.add(
        sys.stderr,
        level=os.environ.get("EDUSTREAM_LOG_LEVEL", "WARNING").upper(),
        format="<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {message}",
    )


def notify(message: str) -> None:
    console.print(f"[yellow]{message}[/yellow]")


def show_welcome():
    console.print(Panel(
        "[bold]EduStream[/bold]\n[dim]Study areas, topics and spaced review[/dim]",
        title="Welcome", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("areas", "List study areas"),
        ("add-area", "Create a study area"),
        ("topics", "List topics of an area"),
        ("add-topic", "Add a topic to an area"),
        ("status", "Move a topic on the board"),
        ("notes", "Edit topic notes"),
        ("resource", "Attach a resource to a topic"),
        ("watched", "Mark a resource as watched"),
        ("video-notes", "Edit notes on a video resource"),
        ("delete-resource", "Remove a resource"),
        ("move", "Reorder a topic within its area"),
        ("move-area", "Reorder study areas"),
        ("delete-topic", "Delete a topic"),
        ("delete-area", "Delete an area and its topics"),
        ("time", "Log study time on a topic"),
        ("review", "Review topics that are due"),
        ("quiz", "Record a quiz score for a topic"),
        ("due", "Due and upcoming reviews"),
        ("dashboard", "Progress + statistics"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def level_bar(level: int) -> str:
    return f"[green]{'■' * level}[/green][dim]{'□' * (MAX_LEVEL - level)}[/dim]"


def choose_area(db_path: str):
    areas = list_areas(db_path)
    if not areas:
        console.print("[yellow]No areas yet. Use 'add-area' first.[/yellow]")
        return None
    for i, area in enumerate(areas, 1):
        console.print(f"  [cyan]{i}[/cyan]) {area.icon} {area.name}")
    choice = IntPrompt.ask("Select area", choices=[str(i) for i in range(1, len(areas) + 1)])
    return areas[choice - 1]


def choose_topic(db_path: str, topics=None):
    if topics is None:
        area = choose_area(db_path)
        if area is None:
            return None
        topics = area.topics
    if not topics:
        console.print("[yellow]No topics here.[/yellow]")
        return None
    for i, topic in enumerate(topics, 1):
        console.print(f"  [cyan]{i}[/cyan]) {topic.title} [dim]{topic.status.value}[/dim]")
    choice = IntPrompt.ask("Select topic", choices=[str(i) for i in range(1, len(topics) + 1)])
    return topics[choice - 1]


def show_review_result(result) -> None:
    topic = result.topic
    console.print(
        f"Level {level_bar(topic.review_level)} {topic.review_level}  "
        f"next review [bold]{topic.next_review_at:%Y-%m-%d}[/bold] "
        f"(in {interval_days(topic.review_level)} days)"
    )
    if not result.persisted:
        console.print("[dim]The new schedule is kept for this session only.[/dim]")


def cmd_areas(db_path: str):
    table = Table(title="Study Areas")
    table.add_column("Area", style="cyan")
    table.add_column("Topics", justify="right")
    table.add_column("Progress", justify="right")
    for row in get_area_progress(db_path):
        table.add_row(f"{row['icon']} {row['name']}", str(row["total"]), f"{row['progress']}%")
    console.print(table)


def cmd_add_area(db_path: str):
    name = Prompt.ask("Area name").strip()
    if not name:
        return
    area = create_area(db_path, name)
    console.print(f"[green]Created {area.icon} {area.name}[/green]")


def cmd_topics(db_path: str):
    area = choose_area(db_path)
    if area is None:
        return
    table = Table(title=f"{area.icon} {area.name}")
    table.add_column("Topic", style="cyan")
    table.add_column("Status")
    table.add_column("Level")
    table.add_column("Next review")
    table.add_column("Time", justify="right")
    for topic in area.topics:
        table.add_row(
            topic.title,
            topic.status.value,
            level_bar(topic.review_level),
            f"{topic.next_review_at:%Y-%m-%d}" if topic.next_review_at else "-",
            format_duration(topic.time_spent),
        )
    console.print(table)


def cmd_add_topic(db_path: str):
    area = choose_area(db_path)
    if area is None:
        return
    title = Prompt.ask("Topic title").strip()
    if not title:
        return
    description = Prompt.ask("Description", default="")
    topic = create_topic(db_path, area.id, title, description)
    console.print(f"[green]Added {topic.title}[/green]")


def cmd_status(db_path: str):
    topic = choose_topic(db_path)
    if topic is None:
        return
    status = Prompt.ask(
        "New status", choices=[s.value for s in StudyStatus], default=topic.status.value,
    )
    set_status(db_path, topic.id, StudyStatus(status))
    console.print(f"[green]{topic.title} → {status}[/green]")


def cmd_notes(db_path: str):
    topic = choose_topic(db_path)
    if topic is None:
        return
    if topic.notes:
        console.print(Panel(topic.notes, title="Current notes", border_style="dim"))
    notes = Prompt.ask("Notes")
    update_notes(db_path, topic.id, notes)
    console.print("[green]Notes saved.[/green]")


def cmd_resource(db_path: str):
    topic = choose_topic(db_path)
    if topic is None:
        return
    kind = Prompt.ask("Type", choices=list(RESOURCE_TYPES), default="link")
    title = Prompt.ask("Title")
    url = Prompt.ask("URL")
    add_resource(db_path, topic.id, kind, title, url)
    console.print(f"[green]Attached {title} to {topic.title}[/green]")


def choose_resource(db_path: str, kind: str | None = None):
    topic = choose_topic(db_path)
    if topic is None:
        return None
    resources = [r for r in topic.resources if kind is None or r.type == kind]
    if not resources:
        console.print("[yellow]No matching resources on this topic.[/yellow]")
        return None
    for i, res in enumerate(resources, 1):
        mark = "[green]✓[/green]" if res.watched else " "
        console.print(f"  [cyan]{i}[/cyan]) {mark} {res.title} [dim]{res.type}[/dim]")
    choice = IntPrompt.ask("Select resource", choices=[str(i) for i in range(1, len(resources) + 1)])
    return resources[choice - 1]


def cmd_watched(db_path: str):
    resource = choose_resource(db_path)
    if resource is None:
        return
    set_resource_watched(db_path, resource.id, not resource.watched)
    state = "watched" if not resource.watched else "not watched"
    console.print(f"[green]{resource.title} marked {state}[/green]")


def cmd_video_notes(db_path: str):
    resource = choose_resource(db_path, kind="video")
    if resource is None:
        return
    if resource.video_notes:
        console.print(Panel(resource.video_notes, title="Current video notes", border_style="dim"))
    notes = Prompt.ask("Video notes")
    update_video_notes(db_path, resource.id, notes)
    console.print("[green]Video notes saved.[/green]")


def cmd_delete_resource(db_path: str):
    resource = choose_resource(db_path)
    if resource is None:
        return
    if Confirm.ask(f"Delete {resource.title}?", default=False):
        delete_resource(db_path, resource.id)
        console.print(f"[green]Deleted {resource.title}[/green]")


def cmd_move(db_path: str):
    topic = choose_topic(db_path)
    if topic is None:
        return
    position = IntPrompt.ask("New position (1 = top)", default=1)
    move_topic(db_path, topic.id, position - 1)
    console.print(f"[green]Moved {topic.title}[/green]")


def cmd_move_area(db_path: str):
    area = choose_area(db_path)
    if area is None:
        return
    position = IntPrompt.ask("New position (1 = top)", default=1)
    move_area(db_path, area.id, position - 1)
    console.print(f"[green]Moved {area.icon} {area.name}[/green]")


def cmd_delete_topic(db_path: str):
    topic = choose_topic(db_path)
    if topic is None:
        return
    if Confirm.ask(f"Delete {topic.title} and its resources?", default=False):
        delete_topic(db_path, topic.id)
        console.print(f"[green]Deleted {topic.title}[/green]")


def cmd_delete_area(db_path: str):
    area = choose_area(db_path)
    if area is None:
        return
    if Confirm.ask(f"Delete {area.name} and all {len(area.topics)} topic(s)?", default=False):
        delete_area(db_path, area.id)
        console.print(f"[green]Deleted {area.name}[/green]")


def cmd_time(db_path: str):
    topic = choose_topic(db_path)
    if topic is None:
        return
    minutes = IntPrompt.ask("Minutes studied", default=25)
    total = add_time_spent(db_path, topic.id, max(minutes, 0) * 60)
    console.print(f"[green]{topic.title}: {format_duration(total)} total[/green]")


def cmd_review(db_path: str):
    due = get_due_topics(db_path)
    if not due:
        console.print("[green]Nothing due for review right now![/green]")
        return
    console.print(f"\n[bold]Review Session[/bold] — {len(due)} topics\n")
    for i, topic in enumerate(due, 1):
        console.print(Panel(
            topic.notes or topic.description or "[dim]No notes[/dim]",
            title=f"{i}/{len(due)} {topic.title}", border_style="cyan",
        ))
        success = Confirm.ask("Did you remember it?")
        result = complete_topic_review(db_path, ReviewCommand(topic.id, success), notify=notify)
        show_review_result(result)
        console.print()


def cmd_quiz(db_path: str):
    topic = choose_topic(db_path)
    if topic is None:
        return
    total = max(IntPrompt.ask("Number of questions", default=5), 1)
    correct = IntPrompt.ask("Correct answers", choices=[str(i) for i in range(total + 1)])
    result = complete_quiz_review(db_path, topic.id, correct, total, notify=notify)
    if quiz_outcome(correct, total):
        console.print("[green]Passed! Review level updated.[/green]")
    else:
        console.print(
            f"[yellow]Below {QUIZ_PASS_RATIO:.0%} — this topic will come back soon.[/yellow]"
        )
    show_review_result(result)


def cmd_due(db_path: str):
    due = get_due_topics(db_path)
    upcoming = get_upcoming_reviews(db_path)
    table = Table(title="Reviews")
    table.add_column("Topic", style="cyan")
    table.add_column("Level", justify="right")
    table.add_column("When")
    for topic in due:
        table.add_row(topic.title, str(topic.review_level), f"[red]due {topic.next_review_at:%Y-%m-%d}[/red]")
    for topic in upcoming:
        table.add_row(topic.title, str(topic.review_level), f"{topic.next_review_at:%Y-%m-%d}")
    console.print(table)


def cmd_dashboard(db_path: str):
    stats = get_dashboard_stats(db_path)
    console.print(Panel(
        f"[bold]{stats['rank']}[/bold]  |  Streak: [bold]{stats['streak']}[/bold] days",
        title="Dashboard", border_style="blue",
    ))
    bar_filled = int(stats["overall_progress"] / 5)
    bar = f"[green]{'█' * bar_filled}{'░' * (20 - bar_filled)}[/green]"
    console.print(
        f"\n  Overall Progress: [bold]{stats['overall_progress']}%[/bold] {bar} "
        f"({stats['completed_topics']}/{stats['total_topics']} topics)\n"
    )

    table = Table(title="Areas")
    table.add_column("Area", style="cyan")
    table.add_column("Completed", justify="right")
    table.add_column("Progress", justify="right")
    for row in get_area_progress(db_path):
        table.add_row(f"{row['icon']} {row['name']}", f"{row['completed']}/{row['total']}", f"{row['progress']}%")
    console.print(table)

    console.print(f"\n  Focused time: [bold]{format_duration(stats['time_spent'])}[/bold]  |  "
                  f"Avg level: [bold]{stats['average_review_level']}[/bold]  |  "
                  f"Due reviews: [bold]{stats['due_reviews']}[/bold]")

    days = heatmap(db_path, days=28)
    cells = "".join("[green]■[/green]" if d.count else "[dim]□[/dim]" for d in days)
    console.print(f"\n  Last 4 weeks: {cells}")

    if stats["due_reviews"]:
        console.print(f"\n  [yellow]{stats['due_reviews']} topic(s) waiting for review — try 'review'[/yellow]")


COMMANDS = {
    "areas": cmd_areas,
    "add-area": cmd_add_area,
    "topics": cmd_topics,
    "add-topic": cmd_add_topic,
    "status": cmd_status,
    "notes": cmd_notes,
    "resource": cmd_resource,
    "watched": cmd_watched,
    "video-notes": cmd_video_notes,
    "delete-resource": cmd_delete_resource,
    "move": cmd_move,
    "move-area": cmd_move_area,
    "delete-topic": cmd_delete_topic,
    "delete-area": cmd_delete_area,
    "time": cmd_time,
    "review": cmd_review,
    "quiz": cmd_quiz,
    "due": cmd_due,
    "dashboard": cmd_dashboard,
}


def main():
    configure_logging()
    db_path = DEFAULT_DB_PATH
    init_db(db_path)
    show_welcome()

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="dashboard").strip().lower()
        if choice in ("quit", "exit", "q"):
            console.print("[dim]Keep it up![/dim]")
            break
        command = COMMANDS.get(choice)
        if command is None:
            console.print("[red]Unknown command. Try again.[/red]")
            continue
        try:
            command(db_path)
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except Exception as e:
            logger.exception(f"Command {choice!r} failed")
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
