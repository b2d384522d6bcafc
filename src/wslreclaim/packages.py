"""Largest installed packages report."""

from typing import Optional, Protocol

from wslreclaim.errors import CommandError
from wslreclaim.logging_setup import logger
from wslreclaim.models import InstalledPackage, PackageReport
from wslreclaim.runner import LocalRunner

DEFAULT_TOP_PACKAGES = 16

SKIPPED_NOTICE = "No package database found (dpkg-query unavailable); skipping package sizes."


class PackageQuery(Protocol):
    """Source of (installed size in KB, package name) pairs."""

    def installed_sizes(self) -> list[tuple[int, str]]: ...


class DpkgQuery:
    """Package sizes from the Debian/Ubuntu package database."""

    COMMAND = ["dpkg-query", "-W", "-f", "${Installed-Size}\t${Package}\n"]

    def __init__(self, runner: LocalRunner):
        self.runner = runner

    def installed_sizes(self) -> list[tuple[int, str]]:
        result = self.runner.capture(self.COMMAND)
        if result.returncode != 0:
            raise CommandError(self.COMMAND, f"dpkg-query failed: {result.stderr.strip()}", result.returncode)

        pairs = []
        for line in result.stdout.splitlines():
            size, _, name = line.partition("\t")
            name = name.strip()
            if not name:
                continue
            try:
                pairs.append((int(size), name))
            except ValueError:
                # Virtual and half-installed packages report no size
                continue
        return pairs


def detect_package_query(runner: LocalRunner) -> Optional[PackageQuery]:
    """Return a package query if a package database is available, else None."""
    if runner.has_command("dpkg-query"):
        return DpkgQuery(runner)
    logger.info("dpkg-query not available; package report disabled")
    return None


def report_largest_packages(
    query: Optional[PackageQuery],
    top_n: int = DEFAULT_TOP_PACKAGES,
) -> PackageReport:
    """
    List the largest installed packages.

    Args:
        query: Package query, or None when no package database exists
        top_n: Number of packages to keep

    Returns:
        PackageReport in ascending size order (largest last); skipped when there is no usable query
    """
    if query is None:
        return PackageReport(skipped=True, notice=SKIPPED_NOTICE)

    try:
        pairs = query.installed_sizes()
    except (CommandError, OSError) as e:
        logger.warning(f"Package size query failed: {e}")
        return PackageReport(skipped=True, notice=f"Package size query failed: {e}")

    packages = [InstalledPackage(name=name, size_mb=round(size_kb / 1024, 2)) for size_kb, name in pairs]
    packages.sort(key=lambda p: p.size_mb)
    return PackageReport(packages=packages[-top_n:] if top_n > 0 else [])
