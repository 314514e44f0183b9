"""
File caching utilities for document exports.
Implements TTL-based caching so repeated downloads skip re-rendering.
"""

import time
from pathlib import Path

import aiofiles

from config import EXPORT_CACHE_DIR, EXPORT_CACHE_TTL
from logger import get_logger

logger = get_logger(__name__)


class FileCache:
    """Manages cached export files."""

    def __init__(self, cache_dir: str | Path = EXPORT_CACHE_DIR, default_ttl: int = EXPORT_CACHE_TTL):
        """
        Initialize file cache.

        Args:
            cache_dir: Directory to store cached files
            default_ttl: Time-to-live in seconds
        """
        self.cache_dir = Path(cache_dir)
        self.default_ttl = default_ttl
        self.cache_dir.mkdir(parents=True, exist_ok=True)

    def get_cache_path(self, doc_id: str, version: int, format_type: str) -> Path:
        """
        Generate consistent cache file path.

        The document timestamp is part of the name, so an edited document
        never serves a stale export.

        Args:
            doc_id: Document identifier
            version: Document timestamp
            format_type: Export format (md, txt, html, json, toon)

        Returns:
            Path to cached file
        """
        filename = f"{doc_id[:16]}_{version}.{format_type}"
        return self.cache_dir / filename

    def get_cached_file(self, doc_id: str, version: int, format_type: str) -> Path | None:
        """
        Check if cached file exists and is still valid.

        Returns:
            Path to cached file if valid, None otherwise
        """
        filepath = self.get_cache_path(doc_id, version, format_type)

        try:
            file_age = time.time() - filepath.stat().st_mtime
        except FileNotFoundError:
            logger.debug(f"Cache miss: {filepath}")
            return None

        if file_age > self.default_ttl:
            logger.debug(f"Cache expired: {filepath} (age: {file_age:.0f}s)")
            try:
                filepath.unlink()
            except OSError as e:
                logger.warning(f"Failed to remove expired cache file: {e}")
            return None

        logger.info(f"Cache hit: {filepath} (age: {file_age:.0f}s)")
        return filepath

    async def save_to_cache(
        self,
        doc_id: str,
        version: int,
        format_type: str,
        content: str
    ) -> Path:
        """
        Save rendered export to cache.

        Returns:
            Path to saved file
        """
        filepath = self.get_cache_path(doc_id, version, format_type)

        async with aiofiles.open(filepath, "w", encoding="utf-8", errors="replace") as f:
            await f.write(content)

        logger.info(f"Saved to cache: {filepath} ({len(content)} bytes)")
        return filepath

    def cleanup_expired_files(self, ttl_seconds: int | None = None) -> tuple[int, int]:
        """
        Remove cached files older than TTL.

        Args:
            ttl_seconds: Time-to-live override, uses default if None

        Returns:
            Tuple of (files_removed, bytes_freed)
        """
        ttl = self.default_ttl if ttl_seconds is None else ttl_seconds
        current_time = time.time()
        files_removed = 0
        bytes_freed = 0

        for filepath in self.cache_dir.glob("*"):
            if not filepath.is_file():
                continue

            # Files can vanish between the listing and stat/unlink
            try:
                stat = filepath.stat()
                file_age = current_time - stat.st_mtime
                if file_age <= ttl:
                    continue
                filepath.unlink()
            except OSError as e:
                logger.warning(f"Failed to remove {filepath}: {e}")
                continue

            files_removed += 1
            bytes_freed += stat.st_size
            logger.debug(f"Cleaned up expired file: {filepath} (age: {file_age:.0f}s)")

        if files_removed > 0:
            logger.info(
                f"Cache cleanup complete: removed {files_removed} files, "
                f"freed {bytes_freed / 1024:.2f} KB"
            )

        return files_removed, bytes_freed


# Global cache instance
_cache_instance: FileCache | None = None


def get_file_cache() -> FileCache:
    """Get or create global file cache instance."""
    global _cache_instance
    if _cache_instance is None:
        _cache_instance = FileCache()
    return _cache_instance
