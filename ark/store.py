"""
Snapshot storage for Ark.

A snapshot store is a single directory holding ``export<YYYYMMDD>.zip``
files. Entries that do not follow that naming convention are invisible to
the store and are never touched.

Usage:
    from ark.store import SnapshotStore

    store = SnapshotStore("/opt/backup")
    store.ensure_location()
    result = store.create(date.today(), ["/path/to/xy.db", "/path/to/xy.sql"])
    for snapshot in store.list():
        print(snapshot.name)
"""

from __future__ import annotations

import errno
import os
import tempfile
import zipfile
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Iterable, Protocol, Sequence

from loguru import logger

from ark.dates import parse_snapshot_name, snapshot_name
from ark.utils.timing import timed_section


class ArchiveVerificationError(OSError):
    """A freshly written archive failed its integrity check."""


class ArchiveWriter(Protocol):
    """Writes a set of files into a single archive."""

    def write(self, target: Path, sources: Sequence[Path]) -> None: ...

    def verify(self, target: Path) -> None: ...


class ZipArchiveWriter:
    """
    Zip archive writer.

    Each source is stored under its base name; directory structure of the
    source paths is not preserved.
    """

    def __init__(
        self,
        compression: int = zipfile.ZIP_DEFLATED,
        compresslevel: int | None = None,
    ):
        self.compression = compression
        self.compresslevel = compresslevel

    def write(self, target: Path, sources: Sequence[Path]) -> None:
        with zipfile.ZipFile(
            target,
            "w",
            compression=self.compression,
            compresslevel=self.compresslevel,
        ) as zf:
            for source in sources:
                zf.write(source, arcname=source.name)
                logger.debug(f"Added {source} as {source.name}")

    def verify(self, target: Path) -> None:
        """
        Check every member's CRC.

        Raises:
            ArchiveVerificationError: If the archive is unreadable or corrupt
        """
        try:
            with zipfile.ZipFile(target) as zf:
                bad = zf.testzip()
        except zipfile.BadZipFile as e:
            raise ArchiveVerificationError(f"Unreadable archive {target}: {e}") from e

        if bad is not None:
            raise ArchiveVerificationError(f"Corrupt member {bad!r} in {target}")


@dataclass(frozen=True)
class Snapshot:
    """One archive on disk, identified by the day it captures."""

    date: date
    path: Path

    @property
    def name(self) -> str:
        return self.path.name


@dataclass(frozen=True)
class CreateResult:
    """
    Outcome of ``SnapshotStore.create``.

    Attributes:
        snapshot: The snapshot for the requested day
        created: False when it already existed and creation was skipped
        elapsed_seconds: Time spent writing the archive
    """

    snapshot: Snapshot
    created: bool
    elapsed_seconds: float = 0.0

    @property
    def skipped(self) -> bool:
        return not self.created


class SnapshotStore:
    """
    Directory of dated snapshots.

    Args:
        location: Destination directory
        writer: Archive writer collaborator (default: ZipArchiveWriter)
    """

    def __init__(self, location: str | Path, writer: ArchiveWriter | None = None):
        self.location = Path(location)
        self.writer = writer or ZipArchiveWriter()

    def ensure_location(self) -> None:
        """Create the destination directory if needed."""
        self.location.mkdir(parents=True, exist_ok=True)

    def path_for(self, day: date) -> Path:
        return self.location / snapshot_name(day)

    def exists(self, day: date) -> bool:
        return self.path_for(day).is_file()

    def list(self) -> list[Snapshot]:
        """
        Enumerate managed snapshots, oldest first.

        Raises:
            OSError: If the directory cannot be read
        """
        snapshots = []
        for entry in self.location.iterdir():
            day = parse_snapshot_name(entry.name)
            if day is None or not entry.is_file():
                continue
            snapshots.append(Snapshot(date=day, path=entry))

        snapshots.sort(key=lambda s: s.date)
        logger.debug(f"Found {len(snapshots)} snapshots in {self.location}")
        return snapshots

    def create(self, day: date, sources: Iterable[str | Path]) -> CreateResult:
        """
        Create the snapshot for ``day`` unless it already exists.

        The archive is written under a hidden temporary name, verified, and
        renamed into place, so a crash never leaves a partial file that a
        later run would mistake for a finished snapshot.

        Args:
            day: Calendar day the snapshot captures
            sources: Files to archive, in order

        Returns:
            CreateResult; ``created`` is False when the snapshot already existed

        Raises:
            ValueError: If sources is empty or two sources share a base name
            OSError: If a source is unreadable or the archive cannot be written
        """
        target = self.path_for(day)
        snapshot = Snapshot(date=day, path=target)

        if target.exists():
            logger.info(f"Snapshot {target.name} already exists, skipping")
            return CreateResult(snapshot=snapshot, created=False)

        source_paths = check_sources(sources)

        with timed_section(f"create {target.name}") as timing:
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{target.name}.", suffix=".tmp", dir=self.location
            )
            os.close(fd)
            tmp_path = Path(tmp_name)

            try:
                self.writer.write(tmp_path, source_paths)
                self.writer.verify(tmp_path)
                os.replace(tmp_path, target)
            except BaseException:
                # Interrupts included: a stray temp file is never listed or rotated.
                tmp_path.unlink(missing_ok=True)
                raise

        timing.log()
        elapsed = timing.elapsed_seconds
        logger.info(f"Created snapshot {target} ({len(source_paths)} files, {elapsed:.3f}s)")
        return CreateResult(snapshot=snapshot, created=True, elapsed_seconds=elapsed)

    def delete(self, snapshot: Snapshot) -> bool:
        """
        Remove a snapshot file.

        Returns:
            True if the file was removed, False if it was already gone

        Raises:
            OSError: For any failure other than the file being missing
        """
        try:
            snapshot.path.unlink()
        except FileNotFoundError:
            logger.warning(f"Snapshot already deleted: {snapshot.path}")
            return False

        logger.info(f"Deleted snapshot {snapshot.path}")
        return True


def check_sources(sources: Iterable[str | Path]) -> list[Path]:
    """
    Validate source files before anything is written.

    Returns:
        The sources as paths, in order

    Raises:
        ValueError: If sources is empty or two sources share a base name
        FileNotFoundError: If a source is missing or not a regular file
        PermissionError: If a source cannot be read
    """
    paths = [Path(s) for s in sources]
    if not paths:
        raise ValueError("No source files given")

    seen: dict[str, Path] = {}
    for path in paths:
        if not path.is_file():
            raise FileNotFoundError(errno.ENOENT, "Source file not found", str(path))
        if not os.access(path, os.R_OK):
            raise PermissionError(errno.EACCES, "Source file not readable", str(path))
        if path.name in seen:
            raise ValueError(
                f"Duplicate archive entry {path.name!r}: {seen[path.name]} and {path}"
            )
        seen[path.name] = path

    return paths
