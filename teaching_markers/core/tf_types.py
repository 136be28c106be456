"""
Transform and feedback data types flowing through the core pipeline.

Layouts follow tf2_msgs/TFMessage (a list of geometry_msgs/TransformStamped)
and visualization_msgs/InteractiveMarkerFeedback, reduced to the fields the
pipeline reads.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from teaching_markers.common.geometry import Pose, Stamp, Transform


@dataclass(frozen=True)
class TransformRecord:
    """One stamped parent -> child transform (TransformStamped)."""
    stamp: Stamp
    parent_frame_id: str
    child_frame_id: str
    transform: Transform


@dataclass(frozen=True)
class TransformMessage:
    """Ordered batch of records; the unit of publication (TFMessage)."""
    transforms: Tuple[TransformRecord, ...] = ()

    def __len__(self) -> int:
        return len(self.transforms)


@dataclass(frozen=True)
class FeedbackEvent:
    """A user edit reported by the interactive marker server."""
    marker_name: str
    pose: Pose
    event_type: Optional[int] = None


@dataclass(frozen=True)
class PublishQueueEntry:
    marker_name: str
    message: TransformMessage
