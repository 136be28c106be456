"""
Core pipeline for teaching markers.

ROS-free: frame registry, static frame broadcaster, feedback conversion,
publish relay and marker orchestration. The ROS node in
teaching_markers.server injects publishers, clocks and the interactive
marker server into these classes.
"""

from teaching_markers.core.broadcaster import StaticFrameBroadcaster, build_static_message
from teaching_markers.core.converter import feedback_to_transform
from teaching_markers.core.markers import (
    Axis,
    ColorRGBA,
    ControlSpec,
    InteractionMode,
    MarkerHandle,
    MarkerShape,
    VisualDescriptor,
    build_marker_handle,
)
from teaching_markers.core.orchestrator import (
    MarkerOrchestrator,
    MarkerRegistrationError,
    MarkerState,
)
from teaching_markers.core.registry import FrameActivity, FrameEntry, FrameRegistry
from teaching_markers.core.relay import OverflowPolicy, PublishRelay
from teaching_markers.core.tf_types import (
    FeedbackEvent,
    PublishQueueEntry,
    TransformMessage,
    TransformRecord,
)

__all__ = [
    "StaticFrameBroadcaster",
    "build_static_message",
    "feedback_to_transform",
    "Axis",
    "ColorRGBA",
    "ControlSpec",
    "InteractionMode",
    "MarkerHandle",
    "MarkerShape",
    "VisualDescriptor",
    "build_marker_handle",
    "MarkerOrchestrator",
    "MarkerRegistrationError",
    "MarkerState",
    "FrameActivity",
    "FrameEntry",
    "FrameRegistry",
    "OverflowPolicy",
    "PublishRelay",
    "FeedbackEvent",
    "PublishQueueEntry",
    "TransformMessage",
    "TransformRecord",
]
