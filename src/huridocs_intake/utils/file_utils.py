"""
File handling utilities.
"""
import json
import time
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List

logger = logging.getLogger(__name__)


class ProcessedDatabase:
    """Simple JSON-based registry of imported documents."""

    def __init__(self, db_path: Path):
        self.db_path = db_path
        self.data = {}
        self.load()

    def load(self):
        """Load the database from file."""
        if self.db_path.exists():
            try:
                with open(self.db_path, 'r', encoding='utf-8') as f:
                    self.data = json.load(f)
            except (OSError, ValueError) as e:
                logger.warning(f"Failed to load processed DB: {e}")
                self.data = {}

    def save(self):
        """Save the database to file."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.db_path, 'w', encoding='utf-8') as f:
            json.dump(self.data, f, ensure_ascii=False, indent=2)

    def is_processed(self, key: str) -> bool:
        """Check if a file has been processed."""
        return key in self.data

    def get(self, key: str) -> Dict[str, Any]:
        return self.data.get(key, {})

    def mark(self, key: str, status: str, **metadata):
        """Mark a file as processed with given status and metadata."""
        self.data[key] = {'status': status, 'timestamp': time.time(), **metadata}
        self.save()

    def clear(self):
        """Clear all processed records."""
        self.data.clear()
        self.save()


def find_documents(root: Path, suffixes: Iterable[str]) -> List[Path]:
    """Find files below ``root`` whose suffix is supported, sorted by path."""
    wanted = {s.lower() for s in suffixes}
    if not root.exists():
        logger.error(f"Directory not found: {root}")
        return []
    return sorted(p for p in root.rglob('*') if p.is_file() and p.suffix.lower() in wanted)


def cleanup_cache(cache_dir: Path, days: int) -> int:
    """Remove cache files older than specified days."""
    cutoff = time.time() - (days * 24 * 60 * 60)

    removed_count = 0
    for cache_file in cache_dir.glob('*.json'):
        try:
            if cache_file.stat().st_mtime < cutoff:
                cache_file.unlink()
                removed_count += 1
        except OSError as e:
            logger.warning(f"Failed to remove cache file {cache_file}: {e}")

    logger.info(f"Removed {removed_count} old cache files")
    return removed_count
