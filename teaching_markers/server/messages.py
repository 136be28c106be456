"""
Conversions between core values and ROS messages.

Only this module and its siblings in teaching_markers.server import message
packages; the core works on the plain dataclasses in common.geometry and
core.tf_types.
"""

from __future__ import annotations

from builtin_interfaces.msg import Time
from geometry_msgs.msg import Point
from geometry_msgs.msg import Pose as PoseMsg
from geometry_msgs.msg import Quaternion as QuaternionMsg
from geometry_msgs.msg import TransformStamped
from geometry_msgs.msg import Vector3 as Vector3Msg
from tf2_msgs.msg import TFMessage
from visualization_msgs.msg import (
    InteractiveMarker,
    InteractiveMarkerControl,
    InteractiveMarkerFeedback,
    Marker,
)

from teaching_markers.common.geometry import Pose, Quaternion, Stamp, Vector3
from teaching_markers.core.markers import ControlSpec, MarkerHandle, VisualDescriptor
from teaching_markers.core.tf_types import FeedbackEvent, TransformMessage, TransformRecord


def stamp_from_time(now) -> Stamp:
    """rclpy.time.Time -> Stamp."""
    return Stamp.from_nanoseconds(now.nanoseconds)


def stamp_to_msg(stamp: Stamp) -> Time:
    return Time(sec=int(stamp.sec), nanosec=int(stamp.nanosec))


def quaternion_to_msg(q: Quaternion) -> QuaternionMsg:
    return QuaternionMsg(x=float(q.x), y=float(q.y), z=float(q.z), w=float(q.w))


def quaternion_from_msg(msg) -> Quaternion:
    return Quaternion(x=float(msg.x), y=float(msg.y), z=float(msg.z), w=float(msg.w))


def pose_to_msg(pose: Pose) -> PoseMsg:
    out = PoseMsg()
    out.position = Point(x=float(pose.position.x), y=float(pose.position.y), z=float(pose.position.z))
    out.orientation = quaternion_to_msg(pose.orientation)
    return out


def pose_from_msg(msg) -> Pose:
    pos = msg.position
    return Pose(
        position=Vector3(float(pos.x), float(pos.y), float(pos.z)),
        orientation=quaternion_from_msg(msg.orientation),
    )


def record_to_msg(record: TransformRecord) -> TransformStamped:
    out = TransformStamped()
    out.header.stamp = stamp_to_msg(record.stamp)
    out.header.frame_id = record.parent_frame_id
    out.child_frame_id = record.child_frame_id
    t = record.transform.translation
    out.transform.translation = Vector3Msg(x=float(t.x), y=float(t.y), z=float(t.z))
    out.transform.rotation = quaternion_to_msg(record.transform.rotation)
    return out


def to_tf_message(message: TransformMessage) -> TFMessage:
    return TFMessage(transforms=[record_to_msg(r) for r in message.transforms])


def feedback_from_msg(msg: InteractiveMarkerFeedback) -> FeedbackEvent:
    return FeedbackEvent(
        marker_name=msg.marker_name,
        pose=pose_from_msg(msg.pose),
        event_type=int(msg.event_type),
    )


def control_to_msg(control: ControlSpec) -> InteractiveMarkerControl:
    out = InteractiveMarkerControl()
    out.name = control.name
    out.orientation = quaternion_to_msg(control.orientation)
    out.interaction_mode = int(control.interaction_mode)
    out.always_visible = bool(control.always_visible)
    return out


def to_interactive_marker(handle: MarkerHandle) -> InteractiveMarker:
    marker = InteractiveMarker()
    marker.header.frame_id = handle.spawn_frame_id
    marker.name = handle.name
    marker.description = handle.description
    marker.scale = float(handle.scale)
    marker.pose = pose_to_msg(handle.pose)
    marker.controls = [control_to_msg(c) for c in handle.controls]
    return marker


def to_visual_marker(marker_name: str, visual: VisualDescriptor, marker_id: int, namespace: str) -> Marker:
    """Visual drawn in the marker's own frame, so it follows the marker."""
    out = Marker()
    out.header.frame_id = marker_name
    out.ns = namespace
    out.id = int(marker_id)
    out.action = Marker.ADD
    out.type = int(visual.shape)
    out.mesh_resource = visual.mesh_resource
    out.pose = pose_to_msg(visual.pose)
    out.scale = Vector3Msg(x=float(visual.scale.x), y=float(visual.scale.y), z=float(visual.scale.z))
    out.color.r = float(visual.color.r)
    out.color.g = float(visual.color.g)
    out.color.b = float(visual.color.b)
    out.color.a = float(visual.color.a)
    out.frame_locked = True
    return out
