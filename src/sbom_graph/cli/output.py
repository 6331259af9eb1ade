"""
Centralized CLI output management.

Status lines and progress go to stderr so stdout stays clean for result
tables. Global --quiet and --verbose flags are respected everywhere except
for errors and result tables, which always print.
"""

from collections.abc import Iterable
from enum import Enum

from rich.console import Console
from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from ..shared.progress import ChannelEvent, ProgressEvent


class OutputLevel(Enum):
    """Output verbosity levels."""

    QUIET = "quiet"  # Errors and result tables only
    NORMAL = "normal"
    VERBOSE = "verbose"  # Adds debug detail


class CLIOutputManager:
    """Output manager shared by the analyze and merge commands."""

    def __init__(self, level: OutputLevel = OutputLevel.NORMAL, use_colors: bool = True):
        self.level = level
        self.status_console = Console(
            stderr=True, no_color=not use_colors, quiet=(level == OutputLevel.QUIET)
        )
        # Never quiet
        self.error_console = Console(stderr=True, no_color=not use_colors)
        self.results_console = Console(no_color=not use_colors)

    def info(self, message: str) -> None:
        self.status_console.print(message)

    def success(self, message: str) -> None:
        self.status_console.print(f"✓ {message}", style="green")

    def warning(self, message: str) -> None:
        self.status_console.print(f"⚠️  {message}", style="yellow")

    def error(self, message: str) -> None:
        """Print error message (always shown regardless of quiet mode)."""
        self.error_console.print(f"✗ {message}", style="red bold")

    def debug(self, message: str) -> None:
        if self.level == OutputLevel.VERBOSE:
            self.status_console.print(f"🔍 {message}", style="dim")

    def interrupt_info(self, message: str) -> None:
        self.error_console.print(f"⚠️  {message}", style="yellow bold")

    def table(self, table: Table) -> None:
        self.results_console.print(table)

    def follow_progress(self, events: Iterable[ChannelEvent]) -> ChannelEvent | None:
        """Render analysis progress events until the terminal one.

        In quiet mode the events are drained without output.

        Returns:
            The last event seen, normally the terminal event
        """
        last = None
        if self.is_quiet:
            for last in events:
                pass
            return last

        progress = Progress(
            TextColumn("{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            TimeElapsedColumn(),
            console=self.status_console,
            transient=True,
        )
        with progress:
            bar = progress.add_task("Starting...", total=100)
            for last in events:
                if isinstance(last, ProgressEvent):
                    progress.update(bar, completed=last.percent, description=last.message)
        return last

    @property
    def is_quiet(self) -> bool:
        return self.level == OutputLevel.QUIET

    @property
    def is_verbose(self) -> bool:
        return self.level == OutputLevel.VERBOSE


def create_output_manager(
    quiet: bool = False, verbose: bool = False, use_colors: bool = True
) -> CLIOutputManager:
    """Factory function to create output manager from CLI flags."""
    if quiet:
        level = OutputLevel.QUIET
    elif verbose:
        level = OutputLevel.VERBOSE
    else:
        level = OutputLevel.NORMAL

    return CLIOutputManager(level=level, use_colors=use_colors)
