"""Disk usage analysis: threshold-filtered directory tree report."""

import hashlib
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Callable, Sequence

from wslreclaim.errors import CommandError
from wslreclaim.formatting import format_size_kb, is_large
from wslreclaim.logging_setup import logger
from wslreclaim.models import AnalysisReport, ReportLine, ScanJob, SizeEntry
from wslreclaim.runner import LocalRunner

DEFAULT_THRESHOLD_MB = 128
DEFAULT_MAX_DEPTH = 3

INDENT = "    "
TEE = "├── "
CORNER = "└── "

# (directory, excludes) -> usage of the directory and its immediate children
DiskUsageQuery = Callable[[str, Sequence[str]], list[SizeEntry]]


class DuQuery:
    """Disk usage query backed by `du -k --max-depth=1`."""

    def __init__(self, runner: LocalRunner | None = None):
        self.runner = runner or LocalRunner()

    def __call__(self, path: str, excludes: Sequence[str]) -> list[SizeEntry]:
        cmd = ["du", "-k", "--max-depth=1"]
        cmd += [f"--exclude={ex}" for ex in excludes]
        cmd.append(path)
        # du exits non-zero when any subdirectory is unreadable; the lines it
        # did produce are still valid.
        result = self.runner.capture(cmd)
        return parse_du_output(result.stdout)


def parse_du_output(output: str) -> list[SizeEntry]:
    """Parse "<kb>\\t<path>" lines, skipping anything malformed."""
    entries = []
    for line in output.splitlines():
        size, sep, path = line.partition("\t")
        if not sep:
            continue
        try:
            size_kb = int(size)
        except ValueError:
            continue
        if size_kb < 0:
            continue
        entries.append(SizeEntry(size_kb=size_kb, path=path))
    return entries


def _normalize(path: str) -> str:
    return path.rstrip("/") or "/"


def is_excluded(path: str, excludes: Sequence[str]) -> bool:
    """Check if path is an excluded subpath or nested under one."""
    path = _normalize(path)
    for ex in excludes:
        ex = _normalize(ex)
        if path == ex or path.startswith(ex.rstrip("/") + "/"):
            return True
    return False


def path_key(path: str) -> str:
    """Stable identifier for a path, safe to use where raw paths are not."""
    return hashlib.md5(path.encode("utf-8", "replace")).hexdigest()


def scan_directory(
    path: str,
    excludes: Sequence[str],
    threshold_kb: int,
    query: DiskUsageQuery | None = None,
) -> list[SizeEntry]:
    """
    Get the immediate children of a directory at or above a size threshold.

    Inaccessible children are simply absent from the result; a query that
    fails outright yields an empty list.

    Args:
        path: Directory to scan
        excludes: Subpaths to leave out, together with everything below them
        threshold_kb: Minimum size in KB
        query: Disk usage query (defaults to du on this machine)

    Returns:
        Entries sorted by size descending, ties in scan order
    """
    query = query or DuQuery()
    try:
        raw = query(path, excludes)
    except (CommandError, OSError) as e:
        logger.debug(f"Disk usage query failed for {path}: {e}")
        return []

    own = _normalize(path)
    entries = [
        e
        for e in raw
        if e.path
        and _normalize(e.path) != own
        and not is_excluded(e.path, excludes)
        and e.size_kb >= threshold_kb
    ]
    entries.sort(key=lambda e: e.size_kb, reverse=True)
    return entries


def make_line(entry: SizeEntry, prefix: str = "") -> ReportLine:
    """Render a report line for an entry."""
    return ReportLine(
        size_kb=entry.size_kb,
        formatted_size=format_size_kb(entry.size_kb),
        prefix=prefix,
        path=entry.path,
        large=is_large(entry.size_kb),
    )


def explore(
    path: str,
    depth: int,
    excludes: Sequence[str],
    threshold_kb: int,
    query: DiskUsageQuery | None = None,
    max_depth: int = DEFAULT_MAX_DEPTH,
    lines: list[ReportLine] | None = None,
) -> list[ReportLine]:
    """
    Build the indented report tree below a directory.

    Each child line is followed immediately by its own subtree while
    depth < max_depth - 1.

    Args:
        path: Directory to explore
        depth: Depth of the children of path (1 for the children of a top-level entry)
        excludes: Subpaths to leave out
        threshold_kb: Minimum size in KB
        query: Disk usage query
        max_depth: Maximum report depth below the scan root
        lines: List to append to as lines are produced; a failure part way
            through leaves everything emitted so far in place

    Returns:
        Report lines in tree order (the same list as lines, when given)
    """
    entries = scan_directory(path, excludes, threshold_kb, query)
    if lines is None:
        lines = []
    for i, entry in enumerate(entries):
        glyph = CORNER if i == len(entries) - 1 else TEE
        lines.append(make_line(entry, INDENT * (depth - 1) + glyph))
        if depth < max_depth - 1:
            explore(entry.path, depth + 1, excludes, threshold_kb, query, max_depth, lines)
    return lines


def _run_job(
    job: ScanJob,
    excludes: Sequence[str],
    threshold_kb: int,
    query: DiskUsageQuery | None,
    max_depth: int,
) -> None:
    job.lines.append(make_line(job.entry))
    explore(job.entry.path, 1, excludes, threshold_kb, query, max_depth, job.lines)


def aggregate(
    root: str = "/",
    excludes: Sequence[str] = (),
    threshold_mb: int = DEFAULT_THRESHOLD_MB,
    query: DiskUsageQuery | None = None,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> AnalysisReport:
    """
    Analyze disk usage below root, one worker per top-level directory.

    Every worker fills its own job; the report is merged only after all
    workers have finished, in the descending order of the top-level scan.

    Args:
        root: Scan root
        excludes: Subpaths to leave out
        threshold_mb: Minimum directory size in MB
        query: Disk usage query (defaults to du on this machine)
        max_depth: Maximum report depth below root

    Returns:
        AnalysisReport with the top-level entries and merged lines
    """
    if threshold_mb <= 0:
        raise ValueError(f"threshold must be positive, got {threshold_mb}")

    query = query or DuQuery()
    threshold_kb = threshold_mb * 1024
    top_level = scan_directory(root, excludes, threshold_kb, query)
    logger.info(f"Found {len(top_level)} top-level directories above {threshold_mb}MB in {root}")

    jobs = {path_key(e.path): ScanJob(entry=e, key=path_key(e.path)) for e in top_level}

    if jobs:
        with ThreadPoolExecutor(max_workers=len(jobs)) as executor:
            future_to_job = {
                executor.submit(_run_job, job, excludes, threshold_kb, query, max_depth): job
                for job in jobs.values()
            }
            wait(future_to_job)

        for future, job in future_to_job.items():
            error = future.exception()
            if error is not None:
                logger.warning(f"Scan of {job.entry.path} incomplete: {error}")

    lines: list[ReportLine] = []
    for entry in top_level:
        lines.extend(jobs[path_key(entry.path)].lines)

    return AnalysisReport(root=root, threshold_mb=threshold_mb, top_level=top_level, lines=lines)
