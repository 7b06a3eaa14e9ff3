"""File-backed resolution cache with TTL expiry and a periodic sweeper.

One JSON file per video ID (``video_<id>.cache``) holds the non-volatile
part of a resolution: the quality-URL document plus fps/width/height.
Statistics are never cached.

- ``lookup`` ignores records whose ``timestamp`` is at least ``ttl`` old but
  never deletes them.
- ``store`` writes to a hidden temp file in the same directory and renames
  it over the target, so readers see either the old or the new record.
- ``sweep`` deletes cache files whose mtime is older than ``ttl``; every
  other file in the directory is left alone.

All I/O failures are logged and reported as a miss / no-op.
"""

import asyncio
import contextlib
import hashlib
import json
import os
import tempfile
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

import structlog

from douyin_api.core.config import CacheConfig
from douyin_api.core.metrics import MetricsCollector
from douyin_api.core.validation import is_valid_video_id
from douyin_api.models.payload import QualitySourceDocument
from douyin_api.models.video import CacheRecord, VideoMetadata

logger = structlog.get_logger(__name__)

FILE_PREFIX = "video_"
FILE_SUFFIX = ".cache"
TEMP_PREFIX = ".video_"
TEMP_SUFFIX = ".tmp"


@dataclass
class SweepResult:
    """Result of a sweep over the cache directory."""

    files_deleted: int
    files_kept: int


class CacheError(Exception):
    """Raised when the cache directory cannot be prepared."""

    pass


class CacheStore:
    """Keyed, TTL-bounded persistence of resolved non-volatile fields."""

    def __init__(self, config: CacheConfig, clock: Callable[[], float] = time.time) -> None:
        """Initialize the cache store.

        Args:
            config: Cache configuration with directory and TTL.
            clock: Source of "now" in epoch seconds.
        """
        self.config = config
        self.cache_dir = Path(config.cache_dir)
        self.ttl = config.ttl
        self._clock = clock

        logger.debug("cache_store_initialized", cache_dir=str(self.cache_dir), ttl=self.ttl)

    def initialize(self) -> None:
        """Create the cache directory and verify it is writable.

        Raises:
            CacheError: If the directory cannot be created or written.
        """
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            probe = self.cache_dir / f".write_test_{os.getpid()}"
            probe.touch()
            probe.unlink(missing_ok=True)
        except OSError as e:
            raise CacheError(f"Cache directory is not writable: {self.cache_dir}: {e}") from e

        logger.info("cache_initialized", cache_dir=str(self.cache_dir), ttl=self.ttl)

    def path_for(self, video_id: str) -> Path:
        """Map a video ID to its cache file.

        Numeric IDs are used verbatim; anything else is hashed so the name
        stays inside the cache directory and distinct IDs never collide.
        """
        video_id = str(video_id)
        if is_valid_video_id(video_id):
            key = video_id
        else:
            key = "h" + hashlib.sha256(video_id.encode()).hexdigest()
        return self.cache_dir / f"{FILE_PREFIX}{key}{FILE_SUFFIX}"

    def is_expired(self, record: CacheRecord) -> bool:
        return self._clock() - record.timestamp >= self.ttl

    def lookup(self, video_id: str) -> Optional[CacheRecord]:
        """Return the live record for ``video_id`` or None.

        Expired, missing, unreadable and corrupt records all read as None.
        """
        path = self.path_for(video_id)

        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
            record = CacheRecord.from_json_dict(str(video_id), raw)
        except FileNotFoundError:
            MetricsCollector.record_cache_lookup(hit=False)
            return None
        except (OSError, ValueError, AttributeError) as e:
            logger.warning("cache_read_failed", video_id=video_id, error=str(e))
            MetricsCollector.record_cache_lookup(hit=False)
            return None

        if self.is_expired(record):
            logger.debug("cache_record_expired", video_id=video_id, age=self.age(record))
            MetricsCollector.record_cache_lookup(hit=False)
            return None

        MetricsCollector.record_cache_lookup(hit=True)
        logger.debug("cache_hit", video_id=video_id, age=self.age(record))
        return record

    def store(
        self,
        video_id: str,
        document: QualitySourceDocument,
        metadata: VideoMetadata,
    ) -> Optional[CacheRecord]:
        """Overwrite the record for ``video_id`` with ``timestamp = now``.

        Returns:
            The written record, or None when the write failed.
        """
        record = CacheRecord(
            video_id=str(video_id),
            timestamp=self._clock(),
            document=document,
            metadata=metadata,
        )
        path = self.path_for(video_id)
        temp_path: Optional[str] = None

        try:
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.cache_dir,
                prefix=TEMP_PREFIX,
                suffix=TEMP_SUFFIX,
                delete=False,
            ) as handle:
                temp_path = handle.name
                json.dump(record.to_json_dict(), handle, ensure_ascii=False)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(temp_path, path)
        except (OSError, TypeError, ValueError) as e:
            logger.warning("cache_write_failed", video_id=video_id, error=str(e))
            if temp_path:
                with contextlib.suppress(OSError):
                    os.unlink(temp_path)
            return None

        logger.debug("cache_written", video_id=video_id, path=str(path))
        return record

    def delete(self, video_id: str) -> bool:
        """Remove the record for ``video_id``. Returns True if a file was deleted."""
        try:
            self.path_for(video_id).unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.warning("cache_delete_failed", video_id=video_id, error=str(e))
            return False

        logger.info("cache_record_deleted", video_id=video_id)
        return True

    def age(self, record: CacheRecord) -> float:
        return max(self._clock() - record.timestamp, 0.0)

    @staticmethod
    def _is_cache_file(path: Path) -> bool:
        name = path.name
        if name.startswith(FILE_PREFIX) and name.endswith(FILE_SUFFIX):
            return True
        # Leftovers from interrupted writes
        return name.startswith(TEMP_PREFIX) and name.endswith(TEMP_SUFFIX)

    def sweep(self) -> SweepResult:
        """Delete cache files whose modification time is older than the TTL.

        Files that do not follow the cache naming scheme are never touched.
        """
        files_deleted = 0
        files_kept = 0
        now = self._clock()

        try:
            entries = list(self.cache_dir.iterdir())
        except OSError as e:
            logger.debug("cache_sweep_skipped", error=str(e))
            return SweepResult(files_deleted=0, files_kept=0)

        for path in entries:
            if not self._is_cache_file(path):
                continue

            try:
                if not path.is_file():
                    continue
                if now - path.stat().st_mtime > self.ttl:
                    path.unlink()
                    files_deleted += 1
                else:
                    files_kept += 1
            except OSError as e:
                logger.debug("cache_sweep_delete_failed", path=str(path), error=str(e))

        MetricsCollector.record_cache_sweep(files_deleted)
        if files_deleted:
            logger.info("cache_swept", files_deleted=files_deleted, files_kept=files_kept)

        return SweepResult(files_deleted=files_deleted, files_kept=files_kept)


async def sweep_scheduler(
    cache: CacheStore,
    interval: int = 3600,
    run_once: bool = False,
) -> Optional[SweepResult]:
    """Run the sweep periodically in the background.

    Args:
        cache: CacheStore to sweep.
        interval: Seconds between sweeps.
        run_once: If True, run only one cycle (for testing).

    Returns:
        SweepResult if run_once is True, None otherwise.
    """
    logger.info("cache_sweeper_started", interval_seconds=interval)

    while True:
        await asyncio.sleep(interval)
        result = cache.sweep()

        if run_once:
            return result
