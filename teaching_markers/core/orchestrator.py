"""
Marker orchestration: wires one teaching marker into the pipeline.

insert() builds the marker, seeds its transform (so the marker frame exists
before the first user edit), registers it with the interactive marker server
and forwards its optional visual. Each later feedback event is converted to
a transform, recorded in the registry and queued on the shared relay.

The interactive marker server and the visual sink are injected; the ROS
implementations live in teaching_markers.server.adapters and tests use
synthetic ones that emit feedback directly.
"""

from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Any, Callable, Dict, Optional, Protocol

from teaching_markers.common.geometry import Clock, Pose, system_clock
from teaching_markers.core.converter import feedback_to_transform, pose_to_transform
from teaching_markers.core.markers import MarkerHandle, VisualDescriptor, build_marker_handle
from teaching_markers.core.registry import FrameActivity, FrameEntry, FrameRegistry
from teaching_markers.core.relay import PublishRelay
from teaching_markers.core.tf_types import FeedbackEvent, TransformMessage


FeedbackCallback = Callable[[FeedbackEvent], None]


class MarkerRegistrationError(RuntimeError):
    """The interactive marker server refused a marker, or the request was invalid."""


class MarkerServer(Protocol):
    def insert(self, handle: MarkerHandle, feedback_callback: FeedbackCallback) -> None: ...

    def apply_changes(self) -> None: ...


class VisualSink(Protocol):
    def add(self, marker_name: str, visual: VisualDescriptor) -> None: ...

    def flush(self) -> None: ...


class MarkerState(Enum):
    UNREGISTERED = "unregistered"
    REGISTERED = "registered"  # no feedback yet
    LIVE = "live"


class MarkerOrchestrator:
    """Owns the registry hand-off and feedback wiring for all teaching markers."""

    def __init__(
        self,
        registry: FrameRegistry,
        relay: PublishRelay,
        server: MarkerServer,
        visual_sink: Optional[VisualSink] = None,
        clock: Clock = system_clock,
        logger: Optional[Any] = None,
    ):
        self.registry = registry
        self.relay = relay
        self.server = server
        self.visual_sink = visual_sink
        self._clock = clock
        self.logger = logger if logger is not None else logging.getLogger(__name__)

        self._lock = threading.Lock()
        self._states: Dict[str, MarkerState] = {}
        self._handles: Dict[str, MarkerHandle] = {}
        self.feedback_count = 0

    def insert(
        self,
        name: str,
        spawn_frame_id: str,
        initial_pose: Optional[Pose] = None,
        visual: Optional[VisualDescriptor] = None,
    ) -> MarkerHandle:
        """
        Create a teaching marker and start tracking its feedback.

        Raises:
            MarkerRegistrationError: invalid name/frame, or the server
                rejected the marker. Nothing else about the node is affected.

        A failure to publish the visual is logged; the marker stays registered.
        """
        if not name:
            raise MarkerRegistrationError("Marker name must be a non-empty string")
        if not spawn_frame_id:
            raise MarkerRegistrationError(f"Marker '{name}' needs a spawn frame id")

        handle = build_marker_handle(name, spawn_frame_id, initial_pose, visual)

        # Seed the marker frame before any feedback arrives
        self._publish_pose(handle, handle.pose)

        def on_feedback(event: FeedbackEvent) -> None:
            self.handle_feedback(handle, event)

        try:
            self.server.insert(handle, on_feedback)
            self.server.apply_changes()
        except Exception as e:
            raise MarkerRegistrationError(f"Failed to register marker '{name}': {e}") from e

        with self._lock:
            self._handles[name] = handle
            self._states[name] = MarkerState.REGISTERED

        if visual is not None and self.visual_sink is not None:
            try:
                self.visual_sink.add(name, visual)
                self.visual_sink.flush()
            except Exception as e:
                # The marker itself is registered; only its visual is missing
                self.logger.error(f"Failed to publish visual for marker '{name}': {e}")

        self.logger.info(
            f"Teaching marker '{name}' spawned at '{spawn_frame_id}'"
            + (" with visual" if visual is not None else "")
        )
        return handle

    def handle_feedback(self, handle: MarkerHandle, event: FeedbackEvent) -> TransformMessage:
        """Convert one feedback event and queue the resulting transform."""
        msg = self._publish_pose(handle, event.pose)
        with self._lock:
            self._states[handle.name] = MarkerState.LIVE
            self.feedback_count += 1
        return msg

    def _publish_pose(self, handle: MarkerHandle, pose: Pose) -> TransformMessage:
        msg = feedback_to_transform(handle.name, handle.spawn_frame_id, pose, self._clock)
        self.registry.insert(
            handle.name,
            FrameEntry(
                parent_frame_id=handle.spawn_frame_id,
                child_frame_id=handle.name,
                transform=pose_to_transform(pose),
                activity=FrameActivity.ACTIVE,
            ),
        )
        self.relay.submit(handle.name, msg)
        return msg

    def state(self, name: str) -> MarkerState:
        with self._lock:
            return self._states.get(name, MarkerState.UNREGISTERED)

    def handle(self, name: str) -> Optional[MarkerHandle]:
        with self._lock:
            return self._handles.get(name)

    @property
    def marker_names(self):
        with self._lock:
            return sorted(self._handles)
