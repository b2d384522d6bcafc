"""Interactive reclaim flow: select, analyze, trim, compact."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from wslreclaim import display
from wslreclaim.config import Settings
from wslreclaim.distributions import list_distributions, resolve_disk_image
from wslreclaim.errors import PreconditionError, UserCancelled
from wslreclaim.logging_setup import logger
from wslreclaim.maintenance import compact_disk_image, shutdown_wsl, trim_filesystem
from wslreclaim.models import CompactionResult, Distribution
from wslreclaim.packages import detect_package_query, report_largest_packages
from wslreclaim.runner import LocalRunner, WslRunner
from wslreclaim.scanner import DuQuery, aggregate
from wslreclaim.system import is_elevated


@dataclass
class ReclaimSession:
    """One run of the reclaim flow, start to finish."""

    settings: Settings = field(default_factory=Settings)
    list_distributions: Callable[[], list[Distribution]] = list_distributions
    runner_factory: Callable[[str], LocalRunner] = WslRunner
    is_elevated: Callable[[], bool] = is_elevated
    confirm: Callable[[str], bool] = display.confirm_action
    choose: Callable[[str, int], int] = display.choose_number
    shutdown: Callable[[], None] = shutdown_wsl
    compact: Callable[..., CompactionResult] = compact_disk_image

    def run(self) -> CompactionResult:
        """
        Run the whole flow.

        Raises:
            PreconditionError: A prerequisite is missing
            UserCancelled: The user declined before compaction
        """
        display.show_banner()

        if not self.is_elevated():
            raise PreconditionError("Administrator privileges are required to compact disk images")

        distribution = self.select_distribution()
        disk_image = resolve_disk_image(distribution)
        display.show_disk_image(distribution, disk_image.stat().st_size)

        runner = self.runner_factory(distribution.name)

        if self.confirm("Analyze disk usage inside the distribution first?"):
            self.analyze(runner)

        if self.confirm("Trim the filesystem (fstrim) before compacting?"):
            display.show_trim_result(trim_filesystem(runner))

        if not self.confirm(
            f"Compact {disk_image}? WSL will be shut down and this cannot be interrupted."
        ):
            raise UserCancelled("Compaction cancelled")

        return self.compact_image(disk_image)

    def select_distribution(self) -> Distribution:
        """Show registered distributions and let the user pick one (0 cancels)."""
        distributions = self.list_distributions()
        if not distributions:
            raise PreconditionError("No WSL distributions found")

        display.show_distributions(distributions)
        choice = self.choose("Select a distribution (0 to quit)", len(distributions))
        if choice == 0:
            raise UserCancelled("No distribution selected")

        distribution = distributions[choice - 1]
        logger.info(f"Selected distribution {distribution.name} at {distribution.base_path}")
        return distribution

    def analyze(self, runner: LocalRunner) -> None:
        """Show the disk usage report and the largest packages."""
        display.show_scan_header(self.settings.threshold_mb)
        report = aggregate(
            root="/",
            excludes=self.settings.excludes,
            threshold_mb=self.settings.threshold_mb,
            query=DuQuery(runner),
            max_depth=self.settings.max_depth,
        )
        display.show_report(report)

        packages = report_largest_packages(detect_package_query(runner), self.settings.top_packages)
        display.show_packages(packages)

    def compact_image(self, disk_image: Path) -> CompactionResult:
        """Shut WSL down and compact the image with a progress bar."""
        display.console.print("[dim]Shutting down WSL...[/dim]")
        self.shutdown()

        with display.show_compaction_progress() as progress:
            task = progress.add_task("Compacting...", total=100)

            def update_progress(percent: int) -> None:
                progress.update(task, completed=percent)

            result = self.compact(disk_image, on_progress=update_progress)
            progress.update(task, completed=100)

        display.show_compaction_result(result)
        return result
