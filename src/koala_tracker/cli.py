"""
Command line entry point.

Usage:
    koala-tracker DIRECTORY PATTERN [--interval SECONDS] [--workers N]

Example:
    koala-tracker "/data/file folder" "*.txt"
"""

import logging
import logging.config
import signal
import threading
from pathlib import Path

import click
from pydantic import ValidationError

from koala_tracker.config import TrackerConfig, get_config, set_config
from koala_tracker.models import ConfigurationError, InvalidInvocationError, MonitoringError, ShutdownError
from koala_tracker.monitoring import TrackerCoordinator
from koala_tracker.reporting import ConsoleReporter

logger = logging.getLogger(__name__)

USAGE_HINT = (
    "This program takes 2 arguments, the directory to watch and a file pattern,\n"
    "\tExample: koala-tracker \"/data/file folder\" \"*.txt\"\n"
    "\tThe first argument is a path to any existing folder. You may use an absolute or relative path.\n"
    "\tThe second argument is the file filter to apply to the folder scan.\n"
)

EXIT_USAGE = 2
EXIT_TERMINATED = 1
EXIT_LOOP_FAILED = 3


def validate_invocation(directory: str, pattern: str) -> Path:
    """
    Check the positional arguments and resolve the directory.

    Returns:
        Absolute path of the directory to watch

    Raises:
        InvalidInvocationError: If the directory does not exist or the pattern is empty
    """
    if not pattern:
        raise InvalidInvocationError("A file pattern is required", directory=directory)

    resolved = Path(directory).expanduser().resolve()
    if not resolved.is_dir():
        raise InvalidInvocationError(f"Directory does not exist: {resolved}", directory=directory, pattern=pattern)
    return resolved


def run_tracker(
    directory: Path,
    pattern: str,
    reporter: ConsoleReporter,
    shutdown_requested: threading.Event,
    config: TrackerConfig | None = None,
) -> int:
    """
    Monitor a directory until shutdown is requested.

    Args:
        directory: Validated directory to watch
        pattern: File name filter
        reporter: Console listener for change events
        shutdown_requested: Event set by the signal handlers
        config: Tracker configuration (the global configuration if None)

    Returns:
        Process exit status
    """
    coordinator = TrackerCoordinator(config or get_config(), listeners=[reporter])

    reporter.notify(f'Scanning "{directory}" for pattern "{pattern}"')
    try:
        coordinator.start_monitoring(directory, pattern)
    except MonitoringError as e:
        logger.error("Could not start monitoring: %s", e)
        reporter.notify(f"Unable to start monitoring: {e.message}")
        return EXIT_TERMINATED

    status = EXIT_TERMINATED
    while not shutdown_requested.wait(timeout=1.0):
        if not coordinator.is_monitoring:
            logger.error("Poll loop exited unexpectedly")
            status = EXIT_LOOP_FAILED
            break

    if status == EXIT_LOOP_FAILED:
        reporter.notify("Monitoring stopped unexpectedly. Shutting down.")
    else:
        reporter.notify("Call to shut down received. Attempting to close cleanly.")
    try:
        coordinator.stop_monitoring()
    except ShutdownError as e:
        logger.warning("Exiting with scan still in progress: %s", e)
    reporter.notify("Koala hunt terminated.")
    return status


def install_signal_handlers(shutdown_requested: threading.Event) -> None:
    """Translate termination signals into a cooperative shutdown request."""

    def handle_signal(signum, frame):
        logger.debug("Received signal %s", signum)
        shutdown_requested.set()

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)
    if hasattr(signal, "SIGBREAK"):
        signal.signal(signal.SIGBREAK, handle_signal)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("directory", required=False)
@click.argument("pattern", required=False)
@click.option("--interval", "-i", type=float, default=None, help="Seconds between scans (default 10)")
@click.option("--workers", "-w", type=int, default=None, help="Maximum files probed concurrently")
@click.option("--skip-unreadable", is_flag=True, default=False, help="Skip files that cannot be read instead of abandoning the scan")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.pass_context
def cli(
    ctx: click.Context,
    directory: str | None,
    pattern: str | None,
    interval: float | None,
    workers: int | None,
    skip_unreadable: bool,
    verbose: bool,
) -> None:
    """Watch DIRECTORY for files matching PATTERN and report additions, removals and alterations."""
    reporter = ConsoleReporter()

    try:
        if directory is None or pattern is None:
            raise InvalidInvocationError("Exactly two arguments are required", directory=directory, pattern=pattern)
        resolved = validate_invocation(directory, pattern)
    except InvalidInvocationError as e:
        click.echo(USAGE_HINT)
        click.echo(f"Error: {e.message}", err=True)
        ctx.exit(EXIT_USAGE)

    overrides = {}
    if interval is not None:
        overrides["check_interval_seconds"] = interval
    if workers is not None:
        overrides["max_probe_workers"] = workers
    if skip_unreadable:
        overrides["skip_unreadable_files"] = True
    if verbose:
        overrides["log_level"] = "DEBUG"

    try:
        config = TrackerConfig(**overrides)
    except (ValidationError, ConfigurationError) as e:
        click.echo(f"Invalid configuration: {e}", err=True)
        ctx.exit(EXIT_USAGE)

    set_config(config)
    logging.config.dictConfig(config.get_log_config())

    shutdown_requested = threading.Event()
    install_signal_handlers(shutdown_requested)

    ctx.exit(run_tracker(resolved, pattern, reporter, shutdown_requested))


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
