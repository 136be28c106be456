"""
Feedback -> transform conversion.

Each feedback pose becomes exactly one TransformMessage holding one record.
The pose is copied verbatim: no smoothing, no filtering and no quaternion
normalization (the interactive marker server already sends unit quaternions).
"""

from __future__ import annotations

from teaching_markers.common.geometry import Clock, Pose, Transform, system_clock
from teaching_markers.core.tf_types import TransformMessage, TransformRecord


def pose_to_transform(pose: Pose) -> Transform:
    return Transform(translation=pose.position, rotation=pose.orientation)


def feedback_to_transform(
    marker_name: str,
    spawn_frame_id: str,
    pose: Pose,
    clock: Clock = system_clock,
) -> TransformMessage:
    """
    Build the transform message for one marker pose.

    Args:
        marker_name: Marker name, used as the child frame id
        spawn_frame_id: Frame the marker was spawned in (parent frame id)
        pose: Marker pose expressed in spawn_frame_id
        clock: Stamp source, read once at conversion time

    Returns:
        TransformMessage with a single record
    """
    record = TransformRecord(
        stamp=clock(),
        parent_frame_id=spawn_frame_id,
        child_frame_id=marker_name,
        transform=pose_to_transform(pose),
    )
    return TransformMessage(transforms=(record,))
