"""Registered WSL distributions, read from the Windows registry."""

from pathlib import Path
from typing import Callable, Iterable, Optional

from wslreclaim.errors import PreconditionError
from wslreclaim.logging_setup import logger
from wslreclaim.models import Distribution
from wslreclaim.system import is_windows

LXSS_KEY = r"Software\Microsoft\Windows\CurrentVersion\Lxss"
LONG_PATH_PREFIX = "\\\\?\\"

# (subkey id, {value name: value}) pairs plus the DefaultDistribution id
RegistryReader = Callable[[], tuple[Iterable[tuple[str, dict]], Optional[str]]]


def normalize_base_path(raw: str) -> Path:
    """Strip the \\\\?\\ long-path prefix that WSL stores on some installs."""
    if raw.startswith(LONG_PATH_PREFIX):
        raw = raw[len(LONG_PATH_PREFIX):]
    return Path(raw)


def read_lxss_registry() -> tuple[list[tuple[str, dict]], Optional[str]]:
    """Read every distribution subkey under HKCU\\...\\Lxss."""
    import winreg

    subkeys: list[tuple[str, dict]] = []
    try:
        root = winreg.OpenKey(winreg.HKEY_CURRENT_USER, LXSS_KEY)
    except OSError:
        logger.info("No Lxss registry key; WSL has no registered distributions")
        return subkeys, None

    with root:
        try:
            default, _ = winreg.QueryValueEx(root, "DefaultDistribution")
        except OSError:
            default = None

        index = 0
        while True:
            try:
                sub_id = winreg.EnumKey(root, index)
            except OSError:
                break
            index += 1
            values = {}
            with winreg.OpenKey(root, sub_id) as sub:
                for name in ("DistributionName", "BasePath", "Version"):
                    try:
                        values[name], _ = winreg.QueryValueEx(sub, name)
                    except OSError:
                        continue
            subkeys.append((sub_id, values))

    return subkeys, default


def list_distributions(reader: RegistryReader | None = None) -> list[Distribution]:
    """
    Enumerate registered distributions.

    Subkeys missing a name or base path are skipped. Off Windows, and
    without an explicit reader, the result is empty.

    Args:
        reader: Registry reader (defaults to the real HKCU registry)

    Returns:
        Distributions sorted by name
    """
    if reader is None:
        if not is_windows():
            logger.info("Not running on Windows; no distributions to enumerate")
            return []
        reader = read_lxss_registry

    subkeys, default = reader()
    distributions = []
    for sub_id, values in subkeys:
        name = values.get("DistributionName")
        base_path = values.get("BasePath")
        if not name or not base_path:
            logger.debug(f"Skipping incomplete registry entry {sub_id}")
            continue
        distributions.append(
            Distribution(
                name=name,
                base_path=normalize_base_path(base_path),
                version=values.get("Version", 2),
                is_default=sub_id == default,
            )
        )

    distributions.sort(key=lambda d: d.name.lower())
    return distributions


def resolve_disk_image(distribution: Distribution) -> Path:
    """
    Locate a distribution's disk image.

    Raises:
        PreconditionError: If the storage path or the disk image is missing
    """
    if not distribution.base_path.is_dir():
        raise PreconditionError(
            f"Storage path for {distribution.name} not found: {distribution.base_path}"
        )
    image = distribution.disk_image
    if not image.is_file():
        raise PreconditionError(f"Disk image for {distribution.name} not found: {image}")
    return image
