"""
Common package for teaching markers.

Shared geometry values and constants used by both the core pipeline and
the ROS server layer.
"""

from teaching_markers.common import constants
from teaching_markers.common.geometry import (
    Clock,
    Pose,
    Quaternion,
    Stamp,
    Transform,
    Vector3,
    normalize_quaternion,
    system_clock,
)

__all__ = [
    "constants",
    "Clock",
    "Pose",
    "Quaternion",
    "Stamp",
    "Transform",
    "Vector3",
    "normalize_quaternion",
    "system_clock",
]
