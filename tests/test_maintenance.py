"""Tests for trim and compaction."""

import signal
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from wslreclaim.errors import CommandError
from wslreclaim.maintenance import (
    compact_disk_image,
    compaction_script,
    interrupts_ignored,
    parse_progress,
    shutdown_wsl,
    trim_filesystem,
)


class TestTrimFilesystem:
    def test_success(self, fake_runner):
        runner = fake_runner(outputs={"fstrim": ("/: 10 GiB trimmed\n", 0)})
        result = trim_filesystem(runner)
        assert result.success
        assert "trimmed" in result.output
        assert runner.calls == [["fstrim", "-av"]]

    def test_failure_is_reported_not_raised(self, fake_runner):
        runner = fake_runner(outputs={"fstrim": ("", 1)})
        result = trim_filesystem(runner)
        assert not result.success
        assert result.returncode == 1

    def test_unrunnable_command(self):
        runner = MagicMock()
        runner.capture.side_effect = CommandError(["fstrim"], "Cannot run fstrim")
        result = trim_filesystem(runner)
        assert not result.success
        assert result.returncode == -1


class TestShutdownWsl:
    def test_runs_shutdown(self, fake_runner):
        runner = fake_runner()
        shutdown_wsl(runner)
        assert runner.calls == [["wsl.exe", "--shutdown"]]

    def test_failure_raises(self, fake_runner):
        runner = fake_runner(outputs={"wsl.exe": ("", 1)})
        with pytest.raises(CommandError):
            shutdown_wsl(runner)


class TestCompactionScript:
    def test_script_steps(self):
        script = compaction_script(Path("C:/WSL/ext4.vhdx"))
        lines = script.splitlines()
        assert lines[0] == 'select vdisk file="C:/WSL/ext4.vhdx"'
        assert lines[1:] == ["attach vdisk readonly", "compact vdisk", "detach vdisk", "exit"]


class TestParseProgress:
    def test_duplicates_suppressed(self):
        lines = [
            "Microsoft DiskPart version 10.0",
            "  0 percent completed",
            "  0 percent completed",
            " 10 percent completed",
            " 10 percent completed",
            " 55 percent completed",
            "100 percent completed",
            "DiskPart successfully compacted the virtual disk file.",
        ]
        assert list(parse_progress(lines)) == [0, 10, 55, 100]

    def test_independent_calls_do_not_share_state(self):
        assert list(parse_progress(["50 percent completed"])) == [50]
        assert list(parse_progress(["50 percent completed"])) == [50]

    def test_no_progress_lines(self):
        assert list(parse_progress(["nothing here"])) == []


class TestInterruptsIgnored:
    def test_handler_restored(self):
        before = signal.getsignal(signal.SIGINT)
        with interrupts_ignored():
            assert signal.getsignal(signal.SIGINT) == signal.SIG_IGN
        assert signal.getsignal(signal.SIGINT) == before

    def test_handler_restored_on_error(self):
        before = signal.getsignal(signal.SIGINT)
        with pytest.raises(RuntimeError):
            with interrupts_ignored():
                raise RuntimeError("boom")
        assert signal.getsignal(signal.SIGINT) == before


class FakePopen:
    def __init__(self, output, returncode=0):
        self.stdout = iter(output)
        self.returncode = returncode

    def __enter__(self):
        return self

    def __exit__(self, *args):
        return False


class TestCompactDiskImage:
    def test_reports_progress_and_sizes(self, tmp_path):
        image = tmp_path / "ext4.vhdx"
        image.write_bytes(b"\0" * 4096)
        seen = []

        fake = FakePopen(["10 percent completed\n", "10 percent completed\n", "100 percent completed\n"])
        with patch("wslreclaim.maintenance.subprocess.Popen", return_value=fake) as popen:
            result = compact_disk_image(image, on_progress=seen.append)

        assert seen == [10, 100]
        assert result.size_before == 4096
        assert result.size_after == 4096
        cmd = popen.call_args.args[0]
        assert cmd[:2] == ["diskpart", "/s"]
        assert not Path(cmd[2]).exists()

    def test_non_zero_exit_raises(self, tmp_path):
        image = tmp_path / "ext4.vhdx"
        image.write_bytes(b"\0")
        with patch("wslreclaim.maintenance.subprocess.Popen", return_value=FakePopen([], returncode=5)):
            with pytest.raises(CommandError) as exc:
                compact_disk_image(image)
        assert exc.value.returncode == 5

    def test_missing_diskpart_raises(self, tmp_path):
        image = tmp_path / "ext4.vhdx"
        image.write_bytes(b"\0")
        with patch("wslreclaim.maintenance.subprocess.Popen", side_effect=FileNotFoundError("diskpart")):
            with pytest.raises(CommandError):
                compact_disk_image(image)

    def test_interrupt_handler_restored(self, tmp_path):
        image = tmp_path / "ext4.vhdx"
        image.write_bytes(b"\0")
        before = signal.getsignal(signal.SIGINT)
        with patch("wslreclaim.maintenance.subprocess.Popen", return_value=FakePopen([])):
            compact_disk_image(image)
        assert signal.getsignal(signal.SIGINT) == before

    def test_new_process_group_on_windows(self, tmp_path):
        image = tmp_path / "ext4.vhdx"
        image.write_bytes(b"\0")
        with patch("wslreclaim.maintenance.is_windows", return_value=True), \
                patch("wslreclaim.maintenance.subprocess.CREATE_NEW_PROCESS_GROUP", 0x200, create=True), \
                patch("wslreclaim.maintenance.subprocess.Popen", return_value=FakePopen([])) as popen:
            compact_disk_image(image)
        assert popen.call_args.kwargs["creationflags"] == 0x200

    def test_no_creationflags_elsewhere(self, tmp_path):
        image = tmp_path / "ext4.vhdx"
        image.write_bytes(b"\0")
        with patch("wslreclaim.maintenance.is_windows", return_value=False), \
                patch("wslreclaim.maintenance.subprocess.Popen", return_value=FakePopen([])) as popen:
            compact_disk_image(image)
        assert "creationflags" not in popen.call_args.kwargs
