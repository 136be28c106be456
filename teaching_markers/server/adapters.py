"""
ROS implementations of the orchestrator's collaborators.

RosMarkerServer wraps interactive_markers.InteractiveMarkerServer and turns
its InteractiveMarkerFeedback callbacks into FeedbackEvents. RosVisualSink
publishes the visuals attached to markers as one latched MarkerArray.
"""

from __future__ import annotations

from typing import Dict

from interactive_markers import InteractiveMarkerServer
from rclpy.node import Node
from rclpy.qos import QoSProfile
from visualization_msgs.msg import InteractiveMarkerFeedback, Marker, MarkerArray

from teaching_markers.core.markers import MarkerHandle, VisualDescriptor
from teaching_markers.core.orchestrator import FeedbackCallback
from teaching_markers.server.messages import feedback_from_msg, to_interactive_marker, to_visual_marker


class RosMarkerServer:
    """MarkerServer backed by the interactive_markers package."""

    def __init__(self, node: Node, server_name: str):
        self.node = node
        self.server = InteractiveMarkerServer(node, server_name)

    def insert(self, handle: MarkerHandle, feedback_callback: FeedbackCallback) -> None:
        def on_feedback(msg: InteractiveMarkerFeedback) -> None:
            feedback_callback(feedback_from_msg(msg))

        self.server.insert(to_interactive_marker(handle), feedback_callback=on_feedback)

    def apply_changes(self) -> None:
        self.server.applyChanges()

    def shutdown(self) -> None:
        self.server.shutdown()


class RosVisualSink:
    """VisualSink publishing every known visual in one MarkerArray on flush."""

    def __init__(self, node: Node, topic: str, qos: QoSProfile, namespace: str):
        self.node = node
        self.namespace = namespace
        self.pub = node.create_publisher(MarkerArray, topic, qos)
        self._markers: Dict[str, Marker] = {}
        self._ids: Dict[str, int] = {}
        self._dirty = False

    def add(self, marker_name: str, visual: VisualDescriptor) -> None:
        marker_id = self._ids.setdefault(marker_name, len(self._ids))
        self._markers[marker_name] = to_visual_marker(marker_name, visual, marker_id, self.namespace)
        self._dirty = True

    def flush(self) -> None:
        if not self._dirty:
            return
        self.pub.publish(MarkerArray(markers=list(self._markers.values())))
        self._dirty = False
