"""
Plain geometry values shared by the core pipeline.

These mirror the ROS message layouts (geometry_msgs/Vector3, Quaternion,
Transform, Pose and builtin_interfaces/Time) as immutable dataclasses so the
core can be exercised without a ROS installation. Conversion to and from the
real message types lives in teaching_markers.server.messages.

Quaternion convention: (x, y, z, w), the same order as ROS and
scipy.spatial.transform.Rotation.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Callable, Sequence

import numpy as np
from scipy.spatial.transform import Rotation


# Time source used by the broadcaster and converter; returns the current stamp.
Clock = Callable[[], "Stamp"]

NANOSEC_PER_SEC = 1_000_000_000


@dataclass(frozen=True)
class Vector3:
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    @classmethod
    def from_sequence(cls, values: Sequence[float]) -> "Vector3":
        if len(values) != 3:
            raise ValueError(f"Expected 3-element vector, got {len(values)}")
        return cls(float(values[0]), float(values[1]), float(values[2]))

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=float)


@dataclass(frozen=True)
class Quaternion:
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    w: float = 1.0

    @classmethod
    def identity(cls) -> "Quaternion":
        return cls(0.0, 0.0, 0.0, 1.0)

    @classmethod
    def from_sequence(cls, values: Sequence[float]) -> "Quaternion":
        if len(values) != 4:
            raise ValueError(f"Expected 4-element quaternion, got {len(values)}")
        return cls(float(values[0]), float(values[1]), float(values[2]), float(values[3]))

    @classmethod
    def from_rpy(cls, roll: float, pitch: float, yaw: float, degrees: bool = False) -> "Quaternion":
        """Quaternion from fixed-axis roll/pitch/yaw (the URDF / tf2 convention)."""
        q = Rotation.from_euler("xyz", [roll, pitch, yaw], degrees=degrees).as_quat()
        return cls.from_sequence(q)

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z, self.w], dtype=float)

    def norm(self) -> float:
        return float(np.linalg.norm(self.as_array()))


def normalize_quaternion(q: Quaternion) -> Quaternion:
    """
    Return q scaled to unit length.

    Raises:
        ValueError: if q has zero (or non-finite) norm.
    """
    arr = q.as_array()
    norm = float(np.linalg.norm(arr))
    if not np.isfinite(norm) or norm == 0.0:
        raise ValueError(f"Cannot normalize quaternion with norm {norm}")
    return Quaternion.from_sequence(arr / norm)


@dataclass(frozen=True)
class Transform:
    translation: Vector3 = field(default_factory=Vector3)
    rotation: Quaternion = field(default_factory=Quaternion.identity)

    @classmethod
    def identity(cls) -> "Transform":
        return cls(Vector3(), Quaternion.identity())


@dataclass(frozen=True)
class Pose:
    position: Vector3 = field(default_factory=Vector3)
    orientation: Quaternion = field(default_factory=Quaternion.identity)

    @classmethod
    def identity(cls) -> "Pose":
        return cls(Vector3(), Quaternion.identity())


@dataclass(frozen=True, order=True)
class Stamp:
    sec: int = 0
    nanosec: int = 0

    @classmethod
    def from_nanoseconds(cls, nanoseconds: int) -> "Stamp":
        sec, nanosec = divmod(int(nanoseconds), NANOSEC_PER_SEC)
        return cls(sec=sec, nanosec=nanosec)

    def to_sec(self) -> float:
        return float(self.sec) + float(self.nanosec) * 1e-9


def system_clock() -> Stamp:
    """Wall-clock stamp; the node replaces this with its ROS clock."""
    return Stamp.from_nanoseconds(time.time_ns())
