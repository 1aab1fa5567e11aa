"""Storage maintenance: orphaned blob cleanup and usage statistics."""

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from gameshare.models import Game, GameImage
from gameshare.services.games import IMAGE_PREFIX
from gameshare.services.storage import storage

logger = logging.getLogger(__name__)

# Unreferenced blobs younger than this may belong to a request that has not committed yet
DEFAULT_MIN_AGE = timedelta(minutes=15)


@dataclass
class CleanupResult:
    """Outcome of an orphaned blob scan."""

    dry_run: bool
    db_references: int
    storage_blobs: int
    orphaned: list[str] = field(default_factory=list)
    skipped_recent: list[str] = field(default_factory=list)
    deleted_count: int = 0
    failed_deletions: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.failed_deletions


async def collect_blob_references(session: AsyncSession) -> set[str]:
    """Collect every storage key referenced by a game or game image."""
    keys: set[str] = set()

    for (key,) in await session.execute(select(Game.thumbnail_key)):
        if key:
            keys.add(key)

    for (key,) in await session.execute(select(GameImage.image_key)):
        if key:
            keys.add(key)

    return keys


async def cleanup_orphaned_blobs(
    session: AsyncSession,
    dry_run: bool = True,
    min_age: timedelta = DEFAULT_MIN_AGE,
) -> CleanupResult:
    """Find and delete game image blobs that are not referenced in the database.

    Replaced images, deleted games and uploads from failed requests all leave
    blobs behind; this is the only place they are removed. Blobs modified within
    ``min_age`` are reported in ``skipped_recent`` and left alone, since a game
    being created right now uploads its images before committing the rows.
    """
    db_keys = await collect_blob_references(session)
    logger.info(f"Found {len(db_keys)} blob references in database")

    all_blobs = await storage.list_files(f"{IMAGE_PREFIX}/")
    logger.info(f"Found {len(all_blobs)} blobs in storage")

    result = CleanupResult(
        dry_run=dry_run,
        db_references=len(db_keys),
        storage_blobs=len(all_blobs),
    )

    cutoff = datetime.now(UTC) - min_age
    for blob_key in sorted(b for b in all_blobs if b not in db_keys):
        modified = await storage.get_modified(blob_key)
        if modified is None:
            # Deleted since listing
            continue
        if modified > cutoff:
            result.skipped_recent.append(blob_key)
        else:
            result.orphaned.append(blob_key)

    logger.info(
        f"Found {len(result.orphaned)} orphaned blobs "
        f"({len(result.skipped_recent)} too recent to remove)"
    )

    if dry_run:
        return result

    for blob_key in result.orphaned:
        try:
            if await storage.delete_file(blob_key):
                result.deleted_count += 1
                logger.debug(f"Deleted orphaned blob: {blob_key}")
            else:
                result.failed_deletions.append(blob_key)
        except Exception as e:
            logger.error(f"Failed to delete blob {blob_key}: {e}")
            result.failed_deletions.append(blob_key)

    logger.info(
        f"Blob cleanup complete: {len(result.orphaned)} orphaned, "
        f"{result.deleted_count} deleted, {len(result.failed_deletions)} failed"
    )
    return result


async def storage_usage(prefix: str = "") -> dict[str, dict[str, int]]:
    """Count blobs and bytes per top-level prefix."""
    by_prefix: dict[str, dict[str, int]] = {}

    for key in await storage.list_files(prefix):
        size = await storage.get_size(key)
        if size is None:
            continue
        top = key.split("/")[0] if "/" in key else "root"
        stats = by_prefix.setdefault(top, {"count": 0, "size": 0})
        stats["count"] += 1
        stats["size"] += size

    return by_prefix
