"""
Configuration classes for teaching marker parameters.

Node-level settings come from ROS parameters (TeachingMarkersConfig.from_ros_node).
The scene (static frames to seed the registry and markers to spawn) comes
from a YAML file (load_scene_config).

Scene file layout:

    teaching_markers:
      frames:
        - parent_frame_id: world
          child_frame_id: base_link
          translation: [0.0, 0.0, 1.0]
          rotation: [0.0, 0.0, 0.0, 1.0]    # or rpy_deg: [r, p, y] / rpy: [r, p, y]
          active: false                     # false: static, true/null: not broadcast
      markers:
        - name: teaching_marker
          spawn_frame_id: base_link
          initial_pose:                     # optional
            position: [0.0, 0.0, 0.0]
            orientation: [0.0, 0.0, 0.0, 1.0]
          visual:                           # optional
            type: mesh_resource
            mesh_resource: package://teaching_markers/mesh/3DBenchy.stl
            scale: [0.004, 0.004, 0.004]
            color: [0.8, 0.1, 0.1, 1.0]
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from teaching_markers.common import constants
from teaching_markers.common.geometry import Pose, Quaternion, Transform, Vector3
from teaching_markers.core.markers import ColorRGBA, MarkerShape, VisualDescriptor
from teaching_markers.core.registry import FrameActivity, FrameEntry
from teaching_markers.core.relay import OverflowPolicy


@dataclass
class TopicConfig:
    """ROS topic configuration."""
    static_topic: str = constants.STATIC_TOPIC_DEFAULT
    live_topic: str = constants.LIVE_TOPIC_DEFAULT
    visuals_topic: str = constants.VISUALS_TOPIC_DEFAULT
    qos_depth: int = constants.QOS_DEPTH_DEFAULT
    durability: str = constants.DURABILITY_DEFAULT


@dataclass
class BroadcastConfig:
    """Static frame broadcaster configuration."""
    period_sec: float = constants.BROADCAST_PERIOD_SEC_DEFAULT


@dataclass
class RelayConfig:
    """Publish relay configuration."""
    capacity: int = constants.RELAY_QUEUE_CAPACITY_DEFAULT
    overflow_policy: OverflowPolicy = OverflowPolicy.BLOCK


@dataclass
class ServerConfig:
    """Interactive marker server configuration."""
    server_name: str = constants.SERVER_NAME_DEFAULT
    scene_config_path: str = ""


@dataclass
class TeachingMarkersConfig:
    """Complete node configuration."""
    topics: TopicConfig = field(default_factory=TopicConfig)
    broadcast: BroadcastConfig = field(default_factory=BroadcastConfig)
    relay: RelayConfig = field(default_factory=RelayConfig)
    server: ServerConfig = field(default_factory=ServerConfig)

    def validate(self) -> None:
        if self.broadcast.period_sec <= 0.0:
            raise ValueError(f"broadcast_period_sec must be > 0, got {self.broadcast.period_sec}")
        if self.relay.capacity < 0:
            raise ValueError(f"relay_capacity must be >= 0, got {self.relay.capacity}")
        if self.topics.qos_depth <= 0:
            raise ValueError(f"qos_depth must be > 0, got {self.topics.qos_depth}")
        durabilities = (constants.DURABILITY_TRANSIENT_LOCAL, constants.DURABILITY_VOLATILE)
        if self.topics.durability not in durabilities:
            raise ValueError(
                f"durability must be one of {durabilities}, got '{self.topics.durability}'"
            )
        if not self.topics.static_topic or not self.topics.live_topic:
            raise ValueError("static_topic and live_topic must be set")

    @staticmethod
    def declare_parameters(node) -> None:
        """Declare every parameter read by from_ros_node."""
        node.declare_parameter("server_name", constants.SERVER_NAME_DEFAULT)
        node.declare_parameter("scene_config_path", "")
        node.declare_parameter("static_topic", constants.STATIC_TOPIC_DEFAULT)
        node.declare_parameter("live_topic", constants.LIVE_TOPIC_DEFAULT)
        node.declare_parameter("visuals_topic", constants.VISUALS_TOPIC_DEFAULT)
        node.declare_parameter("qos_depth", constants.QOS_DEPTH_DEFAULT)
        node.declare_parameter("durability", constants.DURABILITY_DEFAULT)
        node.declare_parameter("broadcast_period_sec", constants.BROADCAST_PERIOD_SEC_DEFAULT)
        node.declare_parameter("relay_capacity", constants.RELAY_QUEUE_CAPACITY_DEFAULT)
        node.declare_parameter("relay_overflow_policy", constants.RELAY_POLICY_DEFAULT)

    @classmethod
    def from_ros_node(cls, node) -> "TeachingMarkersConfig":
        """Create configuration from ROS node parameters."""
        topics = TopicConfig(
            static_topic=str(node.get_parameter("static_topic").value),
            live_topic=str(node.get_parameter("live_topic").value),
            visuals_topic=str(node.get_parameter("visuals_topic").value),
            qos_depth=int(node.get_parameter("qos_depth").value),
            durability=str(node.get_parameter("durability").value).strip().lower(),
        )

        broadcast = BroadcastConfig(
            period_sec=float(node.get_parameter("broadcast_period_sec").value),
        )

        relay = RelayConfig(
            capacity=int(node.get_parameter("relay_capacity").value),
            overflow_policy=OverflowPolicy.parse(node.get_parameter("relay_overflow_policy").value),
        )

        server = ServerConfig(
            server_name=str(node.get_parameter("server_name").value),
            scene_config_path=str(node.get_parameter("scene_config_path").value).strip(),
        )

        config = cls(topics=topics, broadcast=broadcast, relay=relay, server=server)
        config.validate()
        return config


# =============================================================================
# Scene file
# =============================================================================


@dataclass(frozen=True)
class MarkerConfig:
    name: str
    spawn_frame_id: str
    initial_pose: Optional[Pose] = None
    visual: Optional[VisualDescriptor] = None


@dataclass
class SceneConfig:
    frames: List[FrameEntry] = field(default_factory=list)
    markers: List[MarkerConfig] = field(default_factory=list)


def _require_mapping(raw: Any, where: str) -> Mapping[str, Any]:
    if not isinstance(raw, Mapping):
        raise ValueError(f"{where}: expected a mapping, got {raw!r}")
    return raw


def _require(section: Mapping[str, Any], key: str, where: str) -> Any:
    if key not in section or section[key] in (None, ""):
        raise ValueError(f"{where}: missing required key '{key}'")
    return section[key]


def _parse_vector(values: Any, where: str) -> Vector3:
    if not isinstance(values, (list, tuple)):
        raise ValueError(f"{where}: expected a list of 3 numbers, got {values!r}")
    try:
        return Vector3.from_sequence([float(v) for v in values])
    except (TypeError, ValueError) as e:
        raise ValueError(f"{where}: {e}") from e


def _parse_rotation(section: Mapping[str, Any], key: str, where: str) -> Quaternion:
    """Quaternion from `key` ([x, y, z, w]), `rpy_deg` or `rpy`; identity if absent."""
    try:
        if section.get(key) is not None:
            return Quaternion.from_sequence([float(v) for v in section[key]])
        if section.get("rpy_deg") is not None:
            return Quaternion.from_rpy(*[float(v) for v in section["rpy_deg"]], degrees=True)
        if section.get("rpy") is not None:
            return Quaternion.from_rpy(*[float(v) for v in section["rpy"]])
    except (TypeError, ValueError) as e:
        raise ValueError(f"{where}: invalid rotation: {e}") from e
    return Quaternion.identity()


def _parse_frame(raw: Any, index: int) -> FrameEntry:
    where = f"frames[{index}]"
    raw = _require_mapping(raw, where)
    parent = str(_require(raw, "parent_frame_id", where))
    child = str(_require(raw, "child_frame_id", where))
    translation = _parse_vector(raw.get("translation", [0.0, 0.0, 0.0]), f"{where}.translation")
    rotation = _parse_rotation(raw, "rotation", where)
    return FrameEntry(
        parent_frame_id=parent,
        child_frame_id=child,
        transform=Transform(translation=translation, rotation=rotation),
        activity=FrameActivity.from_optional(raw.get("active")),
    )


def _parse_pose(raw: Any, where: str) -> Pose:
    raw = _require_mapping(raw, where)
    position = _parse_vector(raw.get("position", [0.0, 0.0, 0.0]), f"{where}.position")
    orientation = _parse_rotation(raw, "orientation", where)
    return Pose(position=position, orientation=orientation)


def _parse_visual(raw: Any, where: str) -> VisualDescriptor:
    raw = _require_mapping(raw, where)
    shape = MarkerShape.parse(raw.get("type", "cube"))
    color_values = raw.get("color", [0.8, 0.1, 0.1, 1.0])
    if not isinstance(color_values, (list, tuple)) or len(color_values) != 4 or not all(
        isinstance(c, (int, float)) for c in color_values
    ):
        raise ValueError(f"{where}.color: expected [r, g, b, a], got {color_values!r}")
    visual_pose = raw.get("pose")
    return VisualDescriptor(
        shape=shape,
        mesh_resource=str(raw.get("mesh_resource", "") or ""),
        color=ColorRGBA(*[float(c) for c in color_values]),
        scale=_parse_vector(raw.get("scale", [0.1, 0.1, 0.1]), f"{where}.scale"),
        pose=_parse_pose(visual_pose, f"{where}.pose") if visual_pose else Pose.identity(),
    )


def _parse_marker(raw: Any, index: int) -> MarkerConfig:
    where = f"markers[{index}]"
    raw = _require_mapping(raw, where)
    name = str(_require(raw, "name", where))
    spawn = str(_require(raw, "spawn_frame_id", where))
    initial_pose = raw.get("initial_pose")
    visual = raw.get("visual")
    try:
        return MarkerConfig(
            name=name,
            spawn_frame_id=spawn,
            initial_pose=_parse_pose(initial_pose, f"{where}.initial_pose") if initial_pose else None,
            visual=_parse_visual(visual, f"{where}.visual") if visual else None,
        )
    except ValueError as e:
        raise ValueError(f"{where} ('{name}'): {e}") from e


def parse_scene_config(data: Optional[Mapping[str, Any]]) -> SceneConfig:
    """Build a SceneConfig from already-loaded YAML data."""
    data = dict(_require_mapping(data or {}, "scene config"))

    # ROS2 YAML files wrap parameters in /**:/ros__parameters:
    if "/**" in data and "ros__parameters" in (data.get("/**") or {}):
        data = data["/**"]["ros__parameters"] or {}
    if "teaching_markers" in data:
        data = data["teaching_markers"] or {}
        if "ros__parameters" in data:
            data = data["ros__parameters"] or {}

    frames_raw = data.get("frames") or []
    markers_raw = data.get("markers") or []
    if not isinstance(frames_raw, list) or not isinstance(markers_raw, list):
        raise ValueError("scene config: 'frames' and 'markers' must be lists")

    frames = [_parse_frame(raw, i) for i, raw in enumerate(frames_raw)]
    markers = [_parse_marker(raw, i) for i, raw in enumerate(markers_raw)]

    names = [m.name for m in markers]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        raise ValueError(f"scene config: duplicate marker names {duplicates}")

    return SceneConfig(frames=frames, markers=markers)


def load_scene_config(path: str) -> SceneConfig:
    """Load a scene YAML file; fails fast on malformed content."""
    import yaml

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    try:
        return parse_scene_config(data)
    except ValueError as e:
        raise ValueError(f"{e} (from {path})") from e
