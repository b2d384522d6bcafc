"""Filesystem trim and disk image compaction."""

import os
import re
import signal
import subprocess
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterable, Iterator

from wslreclaim.errors import CommandError
from wslreclaim.logging_setup import logger
from wslreclaim.models import CompactionResult, TrimResult
from wslreclaim.runner import WSL_EXE, LocalRunner
from wslreclaim.system import is_windows

PROGRESS_RE = re.compile(r"(\d+)\s+percent\s+completed", re.IGNORECASE)


def trim_filesystem(runner: LocalRunner) -> TrimResult:
    """
    Trim every mounted filesystem that supports it.

    Failure is reported in the result, never raised.
    """
    try:
        result = runner.capture(["fstrim", "-av"])
    except CommandError as e:
        logger.warning(f"fstrim could not be run: {e}")
        return TrimResult(success=False, returncode=-1, output=str(e))

    output = (result.stdout + result.stderr).strip()
    if result.returncode != 0:
        logger.warning(f"fstrim exited with status {result.returncode}")
    return TrimResult(success=result.returncode == 0, returncode=result.returncode, output=output)


def shutdown_wsl(runner: LocalRunner | None = None) -> None:
    """Stop every running distribution so the disk image is released."""
    runner = runner or LocalRunner()
    result = runner.capture([WSL_EXE, "--shutdown"])
    if result.returncode != 0:
        raise CommandError([WSL_EXE, "--shutdown"], f"wsl --shutdown failed: {result.stderr.strip()}", result.returncode)


def compaction_script(disk_image: Path) -> str:
    """diskpart script that compacts a disk image."""
    return "\n".join(
        [
            f'select vdisk file="{disk_image}"',
            "attach vdisk readonly",
            "compact vdisk",
            "detach vdisk",
            "exit",
            "",
        ]
    )


def parse_progress(lines: Iterable[str]) -> Iterator[int]:
    """Yield each reported percentage once, skipping repeats of the last value."""
    last = None
    for line in lines:
        match = PROGRESS_RE.search(line)
        if not match:
            continue
        percent = int(match.group(1))
        if percent == last:
            continue
        last = percent
        yield percent


@contextmanager
def interrupts_ignored():
    """Ignore Ctrl+C for the duration of the block."""
    previous = signal.signal(signal.SIGINT, signal.SIG_IGN)
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


def compact_disk_image(
    disk_image: Path,
    on_progress: Callable[[int], None] | None = None,
) -> CompactionResult:
    """
    Compact a disk image with diskpart.

    Runs with Ctrl+C ignored: interrupting diskpart mid-compaction can leave
    the image attached.

    Args:
        disk_image: Path to the .vhdx file
        on_progress: Optional callback(percent) for each new progress value

    Returns:
        CompactionResult with sizes before and after

    Raises:
        CommandError: If diskpart cannot be started or fails
    """
    size_before = disk_image.stat().st_size

    fd, script_path = tempfile.mkstemp(suffix=".txt", prefix="wslreclaim-")
    try:
        with os.fdopen(fd, "w") as f:
            f.write(compaction_script(disk_image))

        cmd = ["diskpart", "/s", script_path]
        popen_kwargs = {}
        if is_windows():
            # Keep console Ctrl+C from reaching diskpart
            popen_kwargs["creationflags"] = subprocess.CREATE_NEW_PROCESS_GROUP
        logger.debug(f"Executing command: {' '.join(cmd)}")
        with interrupts_ignored():
            try:
                proc = subprocess.Popen(
                    cmd, stdout=subprocess.PIPE, stderr=subprocess.STDOUT, text=True,
                    errors="replace",
                    **popen_kwargs,
                )
            except OSError as e:
                raise CommandError(cmd, f"Cannot run diskpart: {e}") from e

            with proc:
                for percent in parse_progress(proc.stdout):
                    if on_progress:
                        on_progress(percent)
            returncode = proc.returncode
        logger.debug(f"Command completed with return code: {returncode}")
    finally:
        os.unlink(script_path)

    if returncode != 0:
        raise CommandError(cmd, f"diskpart exited with status {returncode}", returncode)

    return CompactionResult(
        disk_image=disk_image,
        size_before=size_before,
        size_after=disk_image.stat().st_size,
    )
