"""
Declarative teaching marker construction.

A teaching marker carries six controls: rotate and move along each of the
X, Y and Z axes. Control orientations are always normalized after
construction so RViz gets unit quaternions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Optional, Tuple

from teaching_markers.common import constants
from teaching_markers.common.geometry import Pose, Quaternion, Vector3, normalize_quaternion


class Axis(Enum):
    X = "x"
    Y = "y"
    Z = "z"


class InteractionMode(IntEnum):
    """Subset of visualization_msgs/InteractiveMarkerControl interaction modes."""
    MOVE_AXIS = constants.INTERACTION_MODE_MOVE_AXIS
    ROTATE_AXIS = constants.INTERACTION_MODE_ROTATE_AXIS


class MarkerShape(IntEnum):
    """Subset of visualization_msgs/Marker types."""
    ARROW = constants.MARKER_TYPE_ARROW
    CUBE = constants.MARKER_TYPE_CUBE
    SPHERE = constants.MARKER_TYPE_SPHERE
    CYLINDER = constants.MARKER_TYPE_CYLINDER
    MESH_RESOURCE = constants.MARKER_TYPE_MESH_RESOURCE

    @classmethod
    def parse(cls, value) -> "MarkerShape":
        if isinstance(value, int):
            return cls(value)
        try:
            return cls[str(value).strip().upper()]
        except KeyError:
            valid = ", ".join(s.name.lower() for s in cls)
            raise ValueError(f"Unknown visual shape '{value}' (expected one of: {valid})")


@dataclass(frozen=True)
class ColorRGBA:
    r: float = 0.8
    g: float = 0.1
    b: float = 0.1
    a: float = 1.0


@dataclass(frozen=True)
class VisualDescriptor:
    """Visual attached to a marker; drawn in the marker's own frame."""
    shape: MarkerShape = MarkerShape.CUBE
    mesh_resource: str = ""
    color: ColorRGBA = field(default_factory=ColorRGBA)
    scale: Vector3 = field(default_factory=lambda: Vector3(0.1, 0.1, 0.1))
    pose: Pose = field(default_factory=Pose.identity)

    def __post_init__(self):
        if self.shape is MarkerShape.MESH_RESOURCE and not self.mesh_resource:
            raise ValueError("mesh_resource visual requires a mesh_resource URI")


@dataclass(frozen=True)
class ControlSpec:
    name: str
    interaction_mode: InteractionMode
    axis: Axis
    orientation: Quaternion
    always_visible: bool = True


@dataclass(frozen=True)
class MarkerHandle:
    name: str
    spawn_frame_id: str
    pose: Pose
    controls: Tuple[ControlSpec, ...]
    description: str = ""
    scale: float = constants.MARKER_SCALE_DEFAULT
    visual: Optional[VisualDescriptor] = None


# Order matches what RViz shows: rotate/move pairs per axis.
TEACHING_CONTROLS: Tuple[Tuple[str, InteractionMode, Axis], ...] = (
    ("rotate_x", InteractionMode.ROTATE_AXIS, Axis.X),
    ("move_x", InteractionMode.MOVE_AXIS, Axis.X),
    ("rotate_y", InteractionMode.ROTATE_AXIS, Axis.Y),
    ("move_y", InteractionMode.MOVE_AXIS, Axis.Y),
    ("rotate_z", InteractionMode.ROTATE_AXIS, Axis.Z),
    ("move_z", InteractionMode.MOVE_AXIS, Axis.Z),
)


def axis_orientation(axis: Axis) -> Quaternion:
    """Control orientation for an axis: (axis component 1, w 1), normalized."""
    q = Quaternion(
        x=1.0 if axis is Axis.X else 0.0,
        y=1.0 if axis is Axis.Y else 0.0,
        z=1.0 if axis is Axis.Z else 0.0,
        w=1.0,
    )
    return normalize_quaternion(q)


def prepare_control(name: str, interaction_mode: InteractionMode, axis: Axis) -> ControlSpec:
    return ControlSpec(
        name=name,
        interaction_mode=interaction_mode,
        axis=axis,
        orientation=axis_orientation(axis),
        always_visible=True,
    )


def build_marker_handle(
    name: str,
    spawn_frame_id: str,
    initial_pose: Optional[Pose] = None,
    visual: Optional[VisualDescriptor] = None,
    scale: float = constants.MARKER_SCALE_DEFAULT,
) -> MarkerHandle:
    """Teaching marker with rotate/move controls on all three axes."""
    controls = tuple(prepare_control(*spec) for spec in TEACHING_CONTROLS)
    return MarkerHandle(
        name=name,
        spawn_frame_id=spawn_frame_id,
        pose=initial_pose if initial_pose is not None else Pose.identity(),
        controls=controls,
        description=name,
        scale=scale,
        visual=visual,
    )
