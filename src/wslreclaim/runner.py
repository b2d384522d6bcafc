"""Command execution, locally or inside a WSL distribution."""

import shlex
import shutil
import subprocess

from wslreclaim.errors import CommandError
from wslreclaim.logging_setup import logger

WSL_EXE = "wsl.exe"


class LocalRunner:
    """Runs commands directly on this machine."""

    def prefix(self) -> list[str]:
        """Arguments placed before every command."""
        return []

    def capture(self, cmd: list[str]) -> subprocess.CompletedProcess:
        """
        Execute a command and capture its output.

        A non-zero exit status is returned to the caller, not raised.

        Args:
            cmd: Command and arguments as list

        Returns:
            CompletedProcess with text stdout and stderr

        Raises:
            CommandError: If the executable cannot be started
        """
        full = self.prefix() + cmd
        printable = " ".join(shlex.quote(x) for x in full)
        logger.debug(f"Executing command: {printable}")
        try:
            result = subprocess.run(full, capture_output=True, text=True, errors="replace")
        except OSError as e:
            raise CommandError(full, f"Cannot run {full[0]}: {e}") from e
        logger.debug(f"Command completed with return code: {result.returncode}")
        return result

    def has_command(self, name: str) -> bool:
        """Check whether a command is available."""
        return shutil.which(name) is not None


class WslRunner(LocalRunner):
    """Runs commands as root inside a WSL distribution via wsl.exe.

    --exec hands argv to the distribution without a shell, so arguments such
    as dpkg-query format strings reach the command unexpanded.
    """

    def __init__(self, distribution: str):
        self.distribution = distribution

    def prefix(self) -> list[str]:
        return [WSL_EXE, "-d", self.distribution, "-u", "root", "--exec"]

    def has_command(self, name: str) -> bool:
        try:
            result = self.capture(["sh", "-c", f"command -v {shlex.quote(name)}"])
        except CommandError:
            return False
        return result.returncode == 0 and bool(result.stdout.strip())
