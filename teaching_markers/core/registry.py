"""
Shared registry of coordinate frames.

The registry is the only mutable state shared between the static
broadcaster (timer callback) and the marker feedback path (interactive
marker server callbacks, possibly on other executor threads). Entries are
immutable and only ever replaced, so a shallow copy taken under the lock is
an independent snapshot.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Optional

from teaching_markers.common.geometry import Transform


class FrameActivity(Enum):
    """
    Tri-state ownership flag of a frame.

    INACTIVE frames are republished by the static broadcaster. ACTIVE frames
    are owned by live marker feedback. UNSET is treated exactly like ACTIVE.
    """
    INACTIVE = "inactive"
    ACTIVE = "active"
    UNSET = "unset"

    @classmethod
    def from_optional(cls, active: Optional[bool]) -> "FrameActivity":
        """Map the optional `active` boolean used in scene files."""
        if active is None:
            return cls.UNSET
        return cls.ACTIVE if active else cls.INACTIVE

    @property
    def broadcasts_static(self) -> bool:
        return self is FrameActivity.INACTIVE


@dataclass(frozen=True)
class FrameEntry:
    parent_frame_id: str
    child_frame_id: str
    transform: Transform
    activity: FrameActivity = FrameActivity.UNSET


class FrameRegistry:
    """Lock-protected map of child frame id -> FrameEntry."""

    def __init__(self):
        self._lock = threading.Lock()
        self._frames: Dict[str, FrameEntry] = {}

    @classmethod
    def from_entries(cls, entries: Iterable[FrameEntry]) -> "FrameRegistry":
        registry = cls()
        for entry in entries:
            registry.insert(entry.child_frame_id, entry)
        return registry

    def insert(self, frame_id: str, entry: FrameEntry) -> None:
        """Insert or replace the entry stored under frame_id."""
        with self._lock:
            self._frames[frame_id] = entry

    def snapshot(self) -> Dict[str, FrameEntry]:
        """Independent copy of the full map. The lock covers the copy only."""
        with self._lock:
            return dict(self._frames)

    def get(self, frame_id: str) -> Optional[FrameEntry]:
        with self._lock:
            return self._frames.get(frame_id)

    def __contains__(self, frame_id: object) -> bool:
        with self._lock:
            return frame_id in self._frames

    def __len__(self) -> int:
        with self._lock:
            return len(self._frames)
