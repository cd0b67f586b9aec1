"""
Remote Config Cache

Local file cache of the last activated remote snapshot, so a start
without network still serves the last remote values.
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from enrollment_client.common.logging_setup import get_service_logger

logger = get_service_logger("config.cache")


class RemoteConfigCache:
    """
    Activated snapshot cache.

    Stores:
    - entries: provider key -> string value
    - _cached_at: ISO timestamp of the save
    """

    def __init__(self, cache_path: Path | str):
        self.cache_path = Path(cache_path).expanduser()

    def save(self, entries: dict[str, str]) -> None:
        """
        Save activated entries to cache.

        Written to a temp file then renamed so a crash never leaves a
        half-written cache behind.
        """
        data = {
            "entries": entries,
            "_cached_at": datetime.now(timezone.utc).isoformat(),
        }

        self.cache_path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = self.cache_path.with_suffix(".tmp")
        with open(temp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        temp_path.replace(self.cache_path)

        logger.info(
            f"Remote config cached ({len(entries)} keys)",
            extra={"cache_path": str(self.cache_path)},
        )

    def load(self) -> dict[str, str] | None:
        """
        Load entries from cache.

        Returns:
            Cached entries, or None if not found or unreadable
        """
        if not self.cache_path.exists():
            return None

        try:
            with open(self.cache_path, "r", encoding="utf-8") as f:
                data: Any = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.error(f"Error loading cached remote config: {e}")
            return None

        entries = data.get("entries") if isinstance(data, dict) else None
        if not isinstance(entries, dict):
            logger.warning("Cached remote config has no entries, ignoring")
            return None

        return {str(k): str(v) for k, v in entries.items()}

    def clear(self) -> None:
        """Remove the cache file"""
        if self.cache_path.exists():
            self.cache_path.unlink()
            logger.info("Remote config cache cleared")
