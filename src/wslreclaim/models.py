"""Data models for wslreclaim."""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

DISK_IMAGE_NAME = "ext4.vhdx"


class SizeEntry(BaseModel):
    """Disk usage of one directory as reported by a disk-usage query."""

    size_kb: int = Field(..., ge=0, description="Disk usage in KB")
    path: str = Field(..., description="Directory path")


class ReportLine(BaseModel):
    """One rendered line of the disk usage report."""

    model_config = ConfigDict(frozen=True)

    size_kb: int = Field(..., ge=0, description="Disk usage in KB")
    formatted_size: str = Field(..., description="Fixed-width size column")
    prefix: str = Field("", description="Tree glyphs encoding depth and sibling position")
    path: str = Field(..., description="Directory path")
    large: bool = Field(False, description="Whether the size is in the gigabyte class")

    @property
    def text(self) -> str:
        """Plain-text rendering of the line."""
        return f"{self.formatted_size}  {self.prefix}{self.path}"


class ScanJob(BaseModel):
    """Work item for one top-level directory, owned by a single worker."""

    entry: SizeEntry
    key: str = Field(..., description="Content-derived key of the entry path")
    lines: list[ReportLine] = Field(default_factory=list)


class AnalysisReport(BaseModel):
    """Merged disk usage report for a scan root."""

    root: str = Field(..., description="Scan root")
    threshold_mb: int = Field(..., description="Minimum directory size in MB")
    top_level: list[SizeEntry] = Field(default_factory=list)
    lines: list[ReportLine] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        """True if nothing above the threshold was found."""
        return not self.lines


class InstalledPackage(BaseModel):
    """An installed package and its reported size."""

    name: str
    size_mb: float = Field(..., description="Installed size in MB, rounded to two decimals")


class PackageReport(BaseModel):
    """Largest installed packages, or a skip notice when no package database exists."""

    skipped: bool = False
    notice: Optional[str] = None
    packages: list[InstalledPackage] = Field(default_factory=list)

    @property
    def lines(self) -> list[str]:
        """One "name, size" line per package."""
        return [f"{p.name}, {p.size_mb:.2f} MB" for p in self.packages]


class Distribution(BaseModel):
    """A registered WSL distribution."""

    name: str = Field(..., description="Distribution name")
    base_path: Path = Field(..., description="Directory holding the disk image")
    version: int = Field(2, description="WSL version")
    is_default: bool = Field(False, description="Whether this is the default distribution")

    @property
    def disk_image(self) -> Path:
        """Path of the backing disk image."""
        return self.base_path / DISK_IMAGE_NAME


class TrimResult(BaseModel):
    """Result of trimming a distribution's filesystem."""

    success: bool
    returncode: int
    output: str = ""


class CompactionResult(BaseModel):
    """Result of compacting a disk image."""

    disk_image: Path
    size_before: int = Field(..., description="Image size in bytes before compaction")
    size_after: int = Field(..., description="Image size in bytes after compaction")

    @property
    def reclaimed_bytes(self) -> int:
        """Bytes returned to the host (never negative)."""
        return max(self.size_before - self.size_after, 0)
