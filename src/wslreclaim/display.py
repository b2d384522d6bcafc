"""Rich terminal display for wslreclaim."""

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.prompt import Confirm, IntPrompt
from rich.table import Table

from wslreclaim.formatting import format_bytes
from wslreclaim.models import (
    AnalysisReport,
    CompactionResult,
    Distribution,
    PackageReport,
    ReportLine,
    TrimResult,
)

console = Console()

SEPARATOR = "-" * 48


def render_line(line: ReportLine) -> str:
    """Console markup for a report line: large sizes in red, tree glyphs dimmed."""
    size = f"[red]{line.formatted_size}[/red]" if line.large else line.formatted_size
    prefix = f"[bright_black]{line.prefix}[/bright_black]" if line.prefix else ""
    return f"{size}  {prefix}{escape(line.path)}"


def show_banner() -> None:
    """Display the welcome banner."""
    console.print(
        Panel(
            "[bold blue]wslreclaim[/bold blue]\n"
            "[dim]Shrink WSL disk images[/dim]",
            expand=False,
        )
    )


def show_distributions(distributions: list[Distribution]) -> None:
    """Display the numbered list of distributions."""
    table = Table(title="WSL Distributions", show_header=True, header_style="bold")
    table.add_column("#", justify="right")
    table.add_column("Name")
    table.add_column("Version", justify="right")
    table.add_column("Storage path")

    for i, dist in enumerate(distributions, 1):
        name = f"{dist.name} [dim](default)[/dim]" if dist.is_default else dist.name
        table.add_row(str(i), name, str(dist.version), escape(str(dist.base_path)))

    console.print(table)


def show_scan_header(threshold_mb: int) -> None:
    """Announce the disk usage scan."""
    console.print(
        f"[yellow]>>> Scanning with parallel threads (threshold: >{threshold_mb}MB) <<<[/yellow]"
    )


def show_report(report: AnalysisReport) -> None:
    """Display the disk usage report between separators."""
    console.print(SEPARATOR)
    if report.is_empty:
        console.print(f"[dim]Nothing above {report.threshold_mb}MB under {escape(report.root)}[/dim]")
    for line in report.lines:
        console.print(render_line(line), highlight=False)
    console.print(SEPARATOR)


def show_packages(report: PackageReport) -> None:
    """Display the largest installed packages, or the reason they were skipped."""
    if report.skipped:
        console.print(f"[yellow]{escape(report.notice or 'Package report skipped')}[/yellow]")
        return

    console.print(f"[bold]Largest {len(report.packages)} installed packages[/bold]")
    for line in report.lines:
        console.print(f"  {escape(line)}", highlight=False)


def show_disk_image(distribution: Distribution, size_bytes: int) -> None:
    """Display the selected distribution's disk image and its size."""
    console.print(f"[bold]{escape(distribution.name)}[/bold]")
    console.print(f"  Disk image: {escape(str(distribution.disk_image))}")
    console.print(f"  Size:       [bold]{format_bytes(size_bytes)}[/bold]")


def show_trim_result(result: TrimResult) -> None:
    """Display the outcome of fstrim."""
    if result.output:
        console.print(f"[dim]{escape(result.output)}[/dim]")
    if result.success:
        console.print("[green]✓[/green] Filesystem trimmed")
    else:
        console.print(
            f"[yellow]! fstrim failed (status {result.returncode}); compaction will still run[/yellow]"
        )


def show_compaction_progress() -> Progress:
    """Create progress bar for compaction."""
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
        TimeElapsedColumn(),
        console=console,
    )


def show_compaction_result(result: CompactionResult) -> None:
    """Display compaction summary."""
    console.print()
    console.print("[bold green]Compaction Complete![/bold green]")
    console.print()

    table = Table(show_header=False)
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")

    table.add_row("Size before", format_bytes(result.size_before))
    table.add_row("Size after", format_bytes(result.size_after))
    table.add_row("Space reclaimed", f"[bold green]{format_bytes(result.reclaimed_bytes)}[/bold green]")

    console.print(table)


def show_error(message: str) -> None:
    """Display a fatal error."""
    console.print(f"[red]Error: {escape(message)}[/red]")


def confirm_action(message: str, default: bool = False) -> bool:
    """Ask for confirmation."""
    return Confirm.ask(message, default=default, console=console)


def choose_number(message: str, upper: int) -> int:
    """Ask for a number between 0 and upper."""
    choices = [str(i) for i in range(upper + 1)]
    return IntPrompt.ask(message, choices=choices, show_choices=False, console=console)
