"""Console rendering of change events."""

from rich.console import Console
from rich.text import Text

from koala_tracker.models import ChangeType, FileChangeEvent

EVENT_STYLES = {
    ChangeType.FOUND: "cyan",
    ChangeType.ADDED: "green",
    ChangeType.ALTERED: "yellow",
    ChangeType.REMOVED: "red",
}


def describe_line_delta(delta: int) -> str:
    """Phrase a line count difference from the previous file's perspective."""
    if delta == 0:
        return "Same amount of lines in"
    if delta > 0:
        return f"{delta} lines added to"
    return f"{abs(delta)} lines removed from"


def format_event(event: FileChangeEvent) -> str:
    """Render one event as a single console line."""
    change_type = ChangeType(event.change_type)
    if change_type == ChangeType.FOUND:
        return f'Found File: "{event.name}"'
    if change_type == ChangeType.ADDED:
        return f'{"Added:":<8} "{event.name}"'
    if change_type == ChangeType.REMOVED:
        return f'{"Removed:":<8} "{event.name}"'
    return f'{"Altered:":<8} "{event.name}" :: {describe_line_delta(event.line_delta or 0)} new file.'


class ConsoleReporter:
    """Event listener printing every change to a rich console."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console(highlight=False)

    def __call__(self, event: FileChangeEvent) -> None:
        style = EVENT_STYLES.get(ChangeType(event.change_type))
        self.console.print(Text(format_event(event), style=style or ""), soft_wrap=True)

    def notify(self, message: str) -> None:
        """Print a plain status message."""
        self.console.print(Text(message), soft_wrap=True)
