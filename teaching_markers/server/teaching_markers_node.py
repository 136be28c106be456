"""
Teaching Markers Node.

Spawns interactive teaching markers in RViz and keeps the TF tree in sync
with user edits:

    scene YAML ──► FrameRegistry ──► StaticFrameBroadcaster (timer) ──► /tf_static
                        ▲
    RViz edits ──► InteractiveMarkerServer ──► MarkerOrchestrator
                                                    │
                                                    ▼
                                              PublishRelay (thread) ──► /tf_static

Static frames flagged `active: false` in the scene are rebroadcast every
tick with TRANSIENT_LOCAL durability. Marker frames are published once at
spawn and then once per feedback event.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import rclpy
from rclpy.node import Node
from rclpy.qos import QoSProfile, ReliabilityPolicy, DurabilityPolicy, HistoryPolicy
from tf2_msgs.msg import TFMessage

from teaching_markers.common import constants
from teaching_markers.common.geometry import Stamp
from teaching_markers.config import SceneConfig, TeachingMarkersConfig, load_scene_config
from teaching_markers.core.broadcaster import StaticFrameBroadcaster
from teaching_markers.core.orchestrator import MarkerOrchestrator, MarkerRegistrationError
from teaching_markers.core.registry import FrameRegistry
from teaching_markers.core.relay import PublishRelay
from teaching_markers.core.tf_types import TransformMessage
from teaching_markers.server.adapters import RosMarkerServer, RosVisualSink
from teaching_markers.server.messages import stamp_from_time, to_tf_message


class TeachingMarkersNode(Node):
    """Interactive teaching markers with a durable static frame broadcaster."""

    def __init__(self, parameter_overrides: Optional[Dict[str, Any]] = None) -> None:
        overrides = None
        if parameter_overrides:
            from rclpy.parameter import Parameter
            overrides = [Parameter(k, value=v) for k, v in parameter_overrides.items()]
        super().__init__(constants.NODE_ID, parameter_overrides=overrides)

        TeachingMarkersConfig.declare_parameters(self)
        self.config = TeachingMarkersConfig.from_ros_node(self)

        self.scene = self._load_scene()
        self._init_publishers()
        self._init_pipeline()
        self._spawn_markers()

        self.get_logger().info(
            f"Teaching markers started: {len(self.orchestrator.marker_names)} marker(s), "
            f"{len(self.scene.frames)} seeded frame(s)"
        )

    def _load_scene(self) -> SceneConfig:
        path = self.config.server.scene_config_path
        if not path:
            self.get_logger().warn("No scene_config_path set; starting without frames or markers")
            return SceneConfig()
        scene = load_scene_config(path)
        self.get_logger().info(f"Scene loaded from {path}")
        return scene

    def _durable_qos(self) -> QoSProfile:
        durability = (
            DurabilityPolicy.TRANSIENT_LOCAL
            if self.config.topics.durability == constants.DURABILITY_TRANSIENT_LOCAL
            else DurabilityPolicy.VOLATILE
        )
        return QoSProfile(
            depth=self.config.topics.qos_depth,
            reliability=ReliabilityPolicy.RELIABLE,
            durability=durability,
            history=HistoryPolicy.KEEP_LAST,
        )

    def _init_publishers(self) -> None:
        topics = self.config.topics
        qos = self._durable_qos()

        self.static_pub = self.create_publisher(TFMessage, topics.static_topic, qos)
        if topics.live_topic == topics.static_topic:
            self.live_pub = self.static_pub
        else:
            self.live_pub = self.create_publisher(TFMessage, topics.live_topic, qos)

        self.get_logger().info(
            f"Static frames: {topics.static_topic}, marker frames: {topics.live_topic} "
            f"(durability={topics.durability}, depth={topics.qos_depth})"
        )

    def _init_pipeline(self) -> None:
        logger = self.get_logger()

        self.registry = FrameRegistry.from_entries(self.scene.frames)

        self.relay = PublishRelay(
            publish=self._publish_live,
            capacity=self.config.relay.capacity,
            overflow_policy=self.config.relay.overflow_policy,
            logger=logger,
            name="teaching_markers_relay",
        )
        self.relay.start()

        self.static_broadcaster = StaticFrameBroadcaster(
            registry=self.registry,
            publish=self._publish_static,
            clock=self._now,
            logger=logger,
        )
        self.static_timer = self.create_timer(
            self.config.broadcast.period_sec, self.static_broadcaster.tick
        )

        self.marker_server = RosMarkerServer(self, self.config.server.server_name)
        self.visual_sink = RosVisualSink(
            self,
            self.config.topics.visuals_topic,
            self._durable_qos(),
            namespace=self.config.server.server_name,
        )
        self.orchestrator = MarkerOrchestrator(
            registry=self.registry,
            relay=self.relay,
            server=self.marker_server,
            visual_sink=self.visual_sink,
            clock=self._now,
            logger=logger,
        )

        self.get_logger().info(
            f"Static broadcast every {self.config.broadcast.period_sec:.3f}s; relay capacity "
            f"{self.config.relay.capacity or 'unbounded'} ({self.config.relay.overflow_policy.value})"
        )

    def _spawn_markers(self) -> None:
        for marker in self.scene.markers:
            try:
                self.orchestrator.insert(
                    marker.name,
                    marker.spawn_frame_id,
                    initial_pose=marker.initial_pose,
                    visual=marker.visual,
                )
            except MarkerRegistrationError as e:
                self.get_logger().error(str(e))

    def _now(self) -> Stamp:
        return stamp_from_time(self.get_clock().now())

    def _publish_static(self, message: TransformMessage) -> None:
        self.static_pub.publish(to_tf_message(message))

    def _publish_live(self, message: TransformMessage) -> None:
        self.live_pub.publish(to_tf_message(message))

    def destroy_node(self):
        """Clean up."""
        self.relay.stop()
        self.marker_server.shutdown()
        self.get_logger().info(
            f"Relay stopped: published={self.relay.published_count}, "
            f"dropped={self.relay.dropped_count}, failed={self.relay.failed_count}"
        )
        super().destroy_node()


def main() -> None:
    rclpy.init()
    node = TeachingMarkersNode()

    try:
        rclpy.spin(node)
    except KeyboardInterrupt:
        pass
    finally:
        node.destroy_node()
        rclpy.shutdown()


if __name__ == "__main__":
    main()
