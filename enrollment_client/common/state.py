"""
Shared Config State

Process-wide canonical record of the resolved API base URL.

The config synchronizer is the only writer. Any component may read it
without triggering I/O. Writes replace the whole snapshot, so readers
always see a consistent (api_base_url, is_loaded, last_fetched_at) triple.
"""

import threading
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class ConfigSnapshot:
    """Resolved configuration triple"""
    api_base_url: str
    is_loaded: bool = False
    last_fetched_at: datetime | None = None

    def to_dict(self) -> dict:
        return {
            "api_base_url": self.api_base_url,
            "is_loaded": self.is_loaded,
            "last_fetched_at": (
                self.last_fetched_at.isoformat() if self.last_fetched_at else None
            ),
        }


class SharedConfigState:
    """
    Single-writer config record.

    Holds an immutable ConfigSnapshot; write() swaps the reference under a
    lock so there is never a read-modify-write on individual fields.
    """

    def __init__(self, default_api_base_url: str):
        self._initial = ConfigSnapshot(api_base_url=default_api_base_url)
        self._snapshot = self._initial
        self._lock = threading.Lock()

    @property
    def initial(self) -> ConfigSnapshot:
        return self._initial

    def read(self) -> ConfigSnapshot:
        """Current snapshot. Never blocks on I/O, never fails."""
        with self._lock:
            return self._snapshot

    def write(self, snapshot: ConfigSnapshot) -> None:
        """Replace the whole snapshot"""
        if not isinstance(snapshot, ConfigSnapshot):
            raise TypeError(f"Expected ConfigSnapshot, got {type(snapshot).__name__}")
        with self._lock:
            self._snapshot = snapshot

    def reset(self) -> None:
        """Restore the initial triple (default URL, not loaded, no timestamp)"""
        with self._lock:
            self._snapshot = self._initial

    # Selectors
    @property
    def api_base_url(self) -> str:
        return self.read().api_base_url

    @property
    def is_loaded(self) -> bool:
        return self.read().is_loaded
