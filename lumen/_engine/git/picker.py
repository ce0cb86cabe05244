from typing import List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from lumen._types.git import CommitSummary


def display_commits(commits: List[CommitSummary], console: Console) -> None:
    """Display commits in table format"""
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("No.", style="dim", width=6, justify="center")
    table.add_column("Commit", style="yellow", width=9)
    table.add_column("Subject", style="cyan", min_width=20)
    table.add_column("Author", style="green")
    table.add_column("When", style="dim", justify="right")

    for i, commit in enumerate(commits, 1):
        table.add_row(
            str(i),
            commit.short_hash,
            commit.subject,
            commit.author_name,
            commit.relative_date,
        )

    console.print(
        Panel(table, title="[bold cyan]Recent Commits", border_style="cyan")
    )


def select_commit(commits: List[CommitSummary], console: Console) -> Optional[str]:
    """Let the user select a commit; returns its full hash, or None on quit"""
    if not commits:
        return None

    display_commits(commits, console)
    console.print("\n[bold yellow]Select a commit to explain (enter number or 'q' to quit):")

    while True:
        try:
            choice = console.input("[bold cyan]>>> ").strip()
        except EOFError:
            # Ctrl-D or closed stdin
            return None
        if choice.lower() == "q":
            return None

        try:
            index = int(choice) - 1
        except ValueError:
            console.print("[bold red]Please enter a valid number")
            continue

        if 0 <= index < len(commits):
            return commits[index].hash
        console.print("[bold red]Invalid number")
