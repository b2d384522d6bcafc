"""CLI interface for wslreclaim."""

import typer

from wslreclaim.config import load_settings
from wslreclaim.display import console, show_error, show_packages, show_report, show_scan_header
from wslreclaim.errors import ReclaimError, UserCancelled
from wslreclaim.logging_setup import setup_logging
from wslreclaim.packages import detect_package_query, report_largest_packages
from wslreclaim.runner import LocalRunner
from wslreclaim.scanner import DEFAULT_THRESHOLD_MB, DuQuery, aggregate
from wslreclaim.session import ReclaimSession

# Create Typer apps
app = typer.Typer(
    name="wslreclaim",
    help="Reclaim disk space from WSL distributions - analyze, trim and compact ext4.vhdx",
    add_completion=False,
)

du_app = typer.Typer(
    name="wslreclaim-du",
    help="Show where disk space is lost under / (run inside a distribution)",
    add_completion=False,
)


@app.command()
def reclaim() -> None:
    """Pick a distribution, optionally analyze and trim it, then compact its disk image."""
    settings = load_settings()
    setup_logging(settings.log_level, settings.log_file)

    try:
        ReclaimSession(settings=settings).run()
    except UserCancelled as e:
        console.print(f"[yellow]Cancelled: {e}[/yellow]")
        raise typer.Exit(0)
    except ReclaimError as e:
        show_error(str(e))
        raise typer.Exit(1)


@du_app.command()
def analyze(
    threshold_mb: int = typer.Argument(
        DEFAULT_THRESHOLD_MB, min=1, help="Minimum directory size in MB"
    ),
) -> None:
    """Report directories above a size threshold, three levels deep."""
    settings = load_settings()
    setup_logging(settings.log_level, settings.log_file)

    runner = LocalRunner()
    show_scan_header(threshold_mb)
    report = aggregate(
        root="/",
        excludes=settings.excludes,
        threshold_mb=threshold_mb,
        query=DuQuery(runner),
        max_depth=settings.max_depth,
    )
    show_report(report)
    show_packages(report_largest_packages(detect_package_query(runner), settings.top_packages))


def run() -> None:
    """Console script entry point for wslreclaim."""
    app()


def run_du() -> None:
    """Console script entry point for wslreclaim-du."""
    du_app()


if __name__ == "__main__":
    run()
