import threading
from typing import List, Optional

import pytest

from teaching_markers.common.geometry import Pose, Quaternion, Stamp, Transform, Vector3
from teaching_markers.core.markers import MarkerHandle, VisualDescriptor
from teaching_markers.core.orchestrator import MarkerOrchestrator
from teaching_markers.core.registry import FrameActivity, FrameEntry, FrameRegistry
from teaching_markers.core.relay import PublishRelay
from teaching_markers.core.tf_types import FeedbackEvent, TransformMessage


# =============================================================================
# Synthetic collaborators
# =============================================================================


class StepClock:
    """Deterministic clock: every call advances by one millisecond."""

    def __init__(self, start_sec: int = 100):
        self._ns = start_sec * 1_000_000_000
        self.calls = 0

    def __call__(self) -> Stamp:
        self.calls += 1
        self._ns += 1_000_000
        return Stamp.from_nanoseconds(self._ns)


class RecordingPublisher:
    """Publish callable that records messages, optionally failing on some calls."""

    def __init__(self, fail_on: Optional[set] = None, delay_event: Optional[threading.Event] = None):
        self.messages: List[TransformMessage] = []
        self.calls = 0
        self.fail_on = fail_on or set()
        self.delay_event = delay_event
        self._lock = threading.Lock()

    def __call__(self, message: TransformMessage) -> None:
        if self.delay_event is not None:
            self.delay_event.wait(timeout=5.0)
        with self._lock:
            self.calls += 1
            call_index = self.calls
        if call_index in self.fail_on:
            raise RuntimeError(f"publisher down (call {call_index})")
        with self._lock:
            self.messages.append(message)


class FakeMarkerServer:
    """Stands in for the interactive marker server; emits feedback on demand."""

    def __init__(self, reject: Optional[set] = None):
        self.reject = reject or set()
        self.inserted: List[MarkerHandle] = []
        self.callbacks = {}
        self.callback_registrations = 0
        self.apply_count = 0

    def insert(self, handle, feedback_callback):
        if handle.name in self.reject:
            raise ValueError(f"marker '{handle.name}' rejected")
        self.inserted.append(handle)
        self.callbacks[handle.name] = feedback_callback
        self.callback_registrations += 1

    def apply_changes(self):
        self.apply_count += 1

    def emit(self, name: str, position, orientation=(0.0, 0.0, 0.0, 1.0)):
        pose = Pose(Vector3.from_sequence(position), Quaternion.from_sequence(orientation))
        self.callbacks[name](FeedbackEvent(marker_name=name, pose=pose))


class FakeVisualSink:
    def __init__(self, fail: bool = False):
        self.added = []
        self.flush_count = 0
        self.fail = fail

    def add(self, marker_name: str, visual: VisualDescriptor) -> None:
        self.added.append((marker_name, visual))

    def flush(self) -> None:
        if self.fail:
            raise RuntimeError("visuals publisher down")
        self.flush_count += 1


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def clock():
    return StepClock()


@pytest.fixture
def publisher():
    return RecordingPublisher()


@pytest.fixture
def base_link_entry():
    return FrameEntry(
        parent_frame_id="world",
        child_frame_id="base_link",
        transform=Transform(Vector3(0.0, 0.0, 1.0), Quaternion.identity()),
        activity=FrameActivity.INACTIVE,
    )


@pytest.fixture
def registry():
    return FrameRegistry()


@pytest.fixture
def relay(publisher):
    relay = PublishRelay(publisher)
    relay.start()
    yield relay
    relay.stop(timeout=5.0)


@pytest.fixture
def marker_server():
    return FakeMarkerServer()


@pytest.fixture
def visual_sink():
    return FakeVisualSink()


@pytest.fixture
def orchestrator(registry, relay, marker_server, visual_sink, clock):
    return MarkerOrchestrator(
        registry=registry,
        relay=relay,
        server=marker_server,
        visual_sink=visual_sink,
        clock=clock,
    )
