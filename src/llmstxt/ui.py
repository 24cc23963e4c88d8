"""
Terminal output and interactive prompts.

Everything the CLI prints goes through the module-level ``console`` so
commands, storage and lockfile code report in the same style.
"""

import sys
from contextlib import contextmanager
from typing import Iterator, List, Optional, Sequence, Tuple

import readchar
import typer
from rich.console import Console
from rich.live import Live
from rich.panel import Panel

BANNER = """
██╗     ██╗     ███╗   ███╗███████╗████████╗██╗  ██╗████████╗
██║     ██║     ████╗ ████║██╔════╝╚══██╔══╝╚██╗██╔╝╚══██╔══╝
██║     ██║     ██╔████╔██║███████╗   ██║    ╚███╔╝    ██║
██║     ██║     ██║╚██╔╝██║╚════██║   ██║    ██╔██╗    ██║
███████╗███████╗██║ ╚═╝ ██║███████║   ██║   ██╔╝ ██╗   ██║
╚══════╝╚══════╝╚═╝     ╚═╝╚══════╝   ╚═╝   ╚═╝  ╚═╝   ╚═╝
"""

console = Console()

# (value, label, hint)
Option = Tuple[str, str, str]


def show_banner(version: str):
    """Display the ASCII art banner."""
    console.print(f"[cyan]{BANNER}[/cyan]")
    console.print(f"[dim]llms.txt documentation for your AI coding agents · v{version}[/dim]\n")


def success(message: str):
    console.print(f"[green]✓[/green] {message}")


def warn(message: str):
    console.print(f"[yellow]⚠[/yellow] {message}")


def error(message: str):
    console.print(f"[red]✗[/red] {message}")


def info(message: str):
    console.print(f"[blue]ℹ[/blue] {message}")


def dim(message: str):
    console.print(f"[dim]{message}[/dim]")


def is_interactive(yes: bool = False) -> bool:
    """Prompts are shown only on a TTY and only without --yes."""
    return sys.stdin.isatty() and not yes


@contextmanager
def spinner(text: str) -> Iterator[None]:
    """Show a spinner while the body runs; the body prints its own outcome."""
    with console.status(f"[cyan]{text}[/cyan]"):
        yield


def get_key() -> str:
    """Get a single keypress in a cross-platform way using readchar."""
    try:
        key = readchar.readkey()
    except (OSError, EOFError):
        return 'esc'

    if key == readchar.key.UP or key == readchar.key.CTRL_P:
        return 'up'
    if key == readchar.key.DOWN or key == readchar.key.CTRL_N:
        return 'down'
    if key == readchar.key.ENTER:
        return 'enter'
    if key == readchar.key.ESC:
        return 'esc'
    if key == readchar.key.CTRL_C:
        raise KeyboardInterrupt
    if key == ' ':
        return 'space'
    if key.lower() == 'a':
        return 'a'
    return key


def multiselect(
    options: Sequence[Option],
    prompt_text: str,
    preselected: Optional[Sequence[str]] = None,
) -> Optional[List[str]]:
    """
    Interactive multi-select using arrow keys and space.

    Controls:
    - ↑/↓: Navigate
    - Space: Toggle selection
    - A: Select/deselect all
    - Enter: Confirm
    - Esc: Cancel

    Returns the selected values in option order, or None if cancelled.
    Without a TTY the preselection is returned unchanged.
    """
    values = [value for value, _, _ in options]
    selected = set(preselected or [])

    if not sys.stdin.isatty() or not options:
        return [v for v in values if v in selected]

    cursor_index = 0

    def create_selection_panel():
        lines = []
        for i, (value, label, hint) in enumerate(options):
            cursor = "→" if i == cursor_index else " "
            check = "✓" if value in selected else " "
            hint_text = f" [dim]({hint})[/dim]" if hint else ""
            if i == cursor_index:
                lines.append(f"[bold cyan]{cursor} [{check}] {label}[/bold cyan]{hint_text}")
            else:
                lines.append(f"[white]{cursor} [{check}] {label}[/white]{hint_text}")

        lines.append("")
        lines.append("[dim]↑/↓: navigate  Space: toggle  A: all  Enter: confirm  Esc: cancel[/dim]")

        return Panel(
            "\n".join(lines),
            title=f"[bold cyan]{prompt_text}[/bold cyan]",
            border_style="cyan"
        )

    try:
        with Live(create_selection_panel(), console=console, transient=True, refresh_per_second=10) as live:
            while True:
                key = get_key()

                if key == 'up':
                    cursor_index = (cursor_index - 1) % len(options)
                elif key == 'down':
                    cursor_index = (cursor_index + 1) % len(options)
                elif key == 'space':
                    current = values[cursor_index]
                    if current in selected:
                        selected.remove(current)
                    else:
                        selected.add(current)
                elif key == 'a':
                    if len(selected) == len(values):
                        selected.clear()
                    else:
                        selected = set(values)
                elif key == 'enter':
                    break
                elif key == 'esc':
                    return None

                live.update(create_selection_panel())
    except KeyboardInterrupt:
        return None

    return [v for v in values if v in selected]


def confirm(message: str, default: bool = True) -> bool:
    """Yes/no prompt; Ctrl-C or EOF counts as no."""
    try:
        return typer.confirm(message, default=default)
    except (typer.Abort, EOFError):
        return False


def select(
    options: Sequence[Option],
    prompt_text: str,
    default: Optional[str] = None,
) -> Optional[str]:
    """
    Single choice using arrow keys and Enter. Esc cancels and returns None.

    Without a TTY the default (or the first option) is returned.
    """
    values = [value for value, _, _ in options]
    if not values:
        return None
    cursor_index = values.index(default) if default in values else 0

    if not sys.stdin.isatty():
        return values[cursor_index]

    def create_selection_panel():
        lines = []
        for i, (_, label, hint) in enumerate(options):
            hint_text = f" [dim]({hint})[/dim]" if hint else ""
            if i == cursor_index:
                lines.append(f"[bold cyan]→ {label}[/bold cyan]{hint_text}")
            else:
                lines.append(f"[white]  {label}[/white]{hint_text}")

        lines.append("")
        lines.append("[dim]↑/↓: navigate  Enter: choose  Esc: cancel[/dim]")

        return Panel(
            "\n".join(lines),
            title=f"[bold cyan]{prompt_text}[/bold cyan]",
            border_style="cyan"
        )

    try:
        with Live(create_selection_panel(), console=console, transient=True, refresh_per_second=10) as live:
            while True:
                key = get_key()

                if key == 'up':
                    cursor_index = (cursor_index - 1) % len(options)
                elif key == 'down':
                    cursor_index = (cursor_index + 1) % len(options)
                elif key == 'enter':
                    break
                elif key == 'esc':
                    return None

                live.update(create_selection_panel())
    except KeyboardInterrupt:
        return None

    return values[cursor_index]


def prompt(message: str) -> Optional[str]:
    """Free-text prompt; Ctrl-C or EOF returns None."""
    try:
        return typer.prompt(message, default="", show_default=False).strip()
    except (typer.Abort, EOFError):
        return None
