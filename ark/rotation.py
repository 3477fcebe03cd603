"""
Backup-and-rotate job for Ark.

Sequences one scheduled run: ensure the destination exists, create today's
snapshot unless it already exists, list the snapshots on disk, plan
retention, and delete everything the plan does not keep.

Usage:
    from ark.rotation import RotationJob

    result = RotationJob(["/path/to/xy.db"], "/opt/backup").run()
    print(result.to_dict())
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Callable, Iterable, Protocol

from loguru import logger

from ark.dates import SystemClock, format_key, snapshot_name
from ark.retention.policy import RetentionPlanner, RetentionPolicy
from ark.store import ArchiveWriter, Snapshot, SnapshotStore, check_sources
from ark.utils.timing import timed_section


class Clock(Protocol):
    def today(self) -> date: ...


@dataclass
class RotationResult:
    """
    Result of one backup-and-rotate run.

    Attributes:
        snapshot: Name of today's snapshot
        created: Whether today's snapshot was written by this run
        skipped: Whether creation was skipped because it already existed
        creation_seconds: Time spent writing today's snapshot
        kept: Names of snapshots retained
        deleted: Names of snapshots removed (or that would be, in dry-run)
        errors: Per-file deletion failures
        dry_run: Whether this was a dry run
    """

    snapshot: str
    created: bool = False
    skipped: bool = False
    creation_seconds: float = 0.0
    kept: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)
    errors: list[dict[str, str]] = field(default_factory=list)
    dry_run: bool = False

    @property
    def success(self) -> bool:
        """True when every planned deletion went through."""
        return len(self.errors) == 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "snapshot": self.snapshot,
            "created": self.created,
            "skipped": self.skipped,
            "creation_seconds": self.creation_seconds,
            "kept": self.kept,
            "deleted": self.deleted,
            "errors": self.errors,
            "dry_run": self.dry_run,
        }


class RotationJob:
    """
    Daily snapshot creation followed by retention-driven rotation.

    Fatal conditions (no sources, destination cannot be created, source
    unreadable, directory cannot be listed) raise. A snapshot that cannot
    be deleted is reported and the remaining deletions continue.
    """

    def __init__(
        self,
        sources: Iterable[str | Path],
        backup_dir: str | Path,
        clock: Clock | None = None,
        policy: RetentionPolicy | None = None,
        writer: ArchiveWriter | None = None,
        dry_run: bool = False,
        echo: Callable[[str], None] = print,
    ):
        """
        Initialize the job.

        Args:
            sources: Files to archive, in order
            backup_dir: Destination directory for snapshots
            clock: Source of today's date (default: local system date)
            policy: Retention constants (default: DEFAULT_POLICY)
            writer: Archive writer (default: zip)
            dry_run: If True, report actions without writing or deleting
            echo: Sink for user-facing announcements
        """
        self.sources = [Path(s) for s in sources]
        self.store = SnapshotStore(backup_dir, writer=writer)
        self.clock = clock or SystemClock()
        self.planner = RetentionPlanner(policy)
        self.dry_run = dry_run
        self.echo = echo

    def run(self) -> RotationResult:
        if not self.sources:
            raise ValueError("No source files given")

        today = self.clock.today()
        logger.debug(f"Starting rotation for {format_key(today)} in {self.store.location}")

        result = RotationResult(snapshot=snapshot_name(today), dry_run=self.dry_run)

        if self.dry_run and not self.store.location.is_dir():
            check_sources(self.sources)
            self.echo(f"Would create backup directory: {self.store.location}")
            self.echo(f"Would create backup: {result.snapshot}")
            return result

        with timed_section("rotation") as timing:
            self.store.ensure_location()
            self._create(today, result)
            self._rotate(today, result)

        timing.log()
        logger.info(
            f"Rotation complete: created={result.created}, kept={len(result.kept)}, "
            f"deleted={len(result.deleted)}, errors={len(result.errors)}"
        )
        return result

    def _rotate(self, today: date, result: RotationResult) -> None:
        snapshots = self.store.list()
        logger.debug(f"Backup files found: {len(snapshots)}")

        deletions = self.planner.plan_deletions(today, [s.date for s in snapshots])

        for snapshot in snapshots:
            if snapshot.date in deletions:
                self._delete(snapshot, result)
            else:
                result.kept.append(snapshot.name)

    def _create(self, today: date, result: RotationResult) -> None:
        name = result.snapshot

        if self.store.exists(today):
            result.skipped = True
            self.echo(f"Backup {name} already exists. Skipping creation.")
            return

        if self.dry_run:
            check_sources(self.sources)
            self.echo(f"Would create backup: {name}")
            return

        created = self.store.create(today, self.sources)
        if created.skipped:
            # Another run wrote it between the check and the write.
            result.skipped = True
            self.echo(f"Backup {name} already exists. Skipping creation.")
            return

        result.created = True
        result.creation_seconds = created.elapsed_seconds
        self.echo(f"Created backup: {name} ({created.elapsed_seconds:.3f}s)")

    def _delete(self, snapshot: Snapshot, result: RotationResult) -> None:
        if self.dry_run:
            result.deleted.append(snapshot.name)
            self.echo(f"Would delete old backup: {snapshot.name}")
            return

        try:
            removed = self.store.delete(snapshot)
        except OSError as e:
            logger.error(f"Failed to delete {snapshot.path}: {e}")
            result.errors.append({"name": snapshot.name, "error": str(e)})
            return

        result.deleted.append(snapshot.name)
        if removed:
            self.echo(f"Deleted old backup: {snapshot.name}")
        else:
            self.echo(f"Old backup already gone: {snapshot.name}")
