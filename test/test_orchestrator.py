"""
Tests for MarkerOrchestrator with a synthetic interactive marker server:
seeding, feedback -> relay wiring, registry ownership, registration errors.
"""

import logging
import threading

import pytest

from teaching_markers.common.geometry import Pose, Quaternion, Vector3
from teaching_markers.core.broadcaster import StaticFrameBroadcaster
from teaching_markers.core.markers import MarkerShape, VisualDescriptor
from teaching_markers.core.orchestrator import (
    MarkerOrchestrator,
    MarkerRegistrationError,
    MarkerState,
)
from teaching_markers.core.registry import FrameActivity
from teaching_markers.core.relay import PublishRelay

from conftest import FakeMarkerServer, FakeVisualSink, RecordingPublisher


def _records(publisher):
    return [m.transforms[0] for m in publisher.messages]


class TestInsert:

    def test_seed_then_feedback_publishes_expected_record(
        self, orchestrator, marker_server, relay, publisher
    ):
        orchestrator.insert("m1", "base_link")
        marker_server.emit("m1", (1.0, 2.0, 3.0), (0.0, 0.0, 0.0, 1.0))
        assert relay.wait_until_idle(timeout=5.0)

        seed, feedback = publisher.messages
        assert len(seed) == 1
        assert seed.transforms[0].transform.translation == Vector3(0.0, 0.0, 0.0)
        assert seed.transforms[0].transform.rotation == Quaternion.identity()

        assert len(feedback) == 1
        record = feedback.transforms[0]
        assert record.child_frame_id == "m1"
        assert record.parent_frame_id == "base_link"
        assert record.transform.translation == Vector3(1.0, 2.0, 3.0)
        assert record.transform.rotation == Quaternion(0.0, 0.0, 0.0, 1.0)

    def test_initial_pose_is_seeded(self, orchestrator, relay, publisher, marker_server):
        pose = Pose(Vector3(0.5, 0.0, 0.2), Quaternion(0.0, 0.0, 1.0, 0.0))
        orchestrator.insert("m1", "base_link", initial_pose=pose)
        assert relay.wait_until_idle(timeout=5.0)

        (record,) = _records(publisher)
        assert record.transform.translation == pose.position
        assert record.transform.rotation == pose.orientation
        assert marker_server.inserted[0].pose == pose

    def test_registers_handle_and_applies_changes(self, orchestrator, marker_server):
        handle = orchestrator.insert("m1", "base_link")

        assert marker_server.inserted == [handle]
        assert marker_server.apply_count == 1
        assert len(handle.controls) == 6

    def test_visual_forwarded_and_flushed(self, orchestrator, visual_sink):
        visual = VisualDescriptor(shape=MarkerShape.MESH_RESOURCE, mesh_resource="file:///benchy.stl")
        orchestrator.insert("m1", "base_link", visual=visual)
        orchestrator.insert("m2", "base_link")

        assert visual_sink.added == [("m1", visual)]
        assert visual_sink.flush_count == 1

    def test_visual_failure_is_logged_and_marker_stays_registered(
        self, registry, relay, marker_server, clock, caplog
    ):
        orchestrator = MarkerOrchestrator(
            registry, relay, marker_server, visual_sink=FakeVisualSink(fail=True), clock=clock
        )
        visual = VisualDescriptor(shape=MarkerShape.CUBE)

        with caplog.at_level(logging.ERROR):
            handle = orchestrator.insert("m1", "base_link", visual=visual)

        assert marker_server.inserted == [handle]
        assert orchestrator.state("m1") is MarkerState.REGISTERED
        assert "Failed to publish visual for marker 'm1'" in caplog.text

    def test_same_name_overwrites_registry_entry(self, orchestrator, registry, marker_server):
        orchestrator.insert("m1", "base_link")
        orchestrator.insert("m1", "tool0", initial_pose=Pose(Vector3(1.0, 0.0, 0.0)))

        assert len(registry) == 1
        assert registry.get("m1").parent_frame_id == "tool0"
        assert marker_server.callback_registrations == 2
        assert orchestrator.marker_names == ["m1"]


class TestFeedback:

    def test_n_events_publish_n_messages_in_order(self, orchestrator, marker_server, relay, publisher):
        orchestrator.insert("m1", "base_link")
        positions = [(float(i), float(-i), 0.5 * i) for i in range(25)]
        for p in positions:
            marker_server.emit("m1", p, (0.0, 0.0, 0.6, 0.8))
        assert relay.wait_until_idle(timeout=5.0)

        records = _records(publisher)[1:]
        assert len(records) == 25
        for record, p in zip(records, positions):
            assert record.transform.translation == Vector3(*p)
            assert record.transform.rotation == Quaternion(0.0, 0.0, 0.6, 0.8)

    def test_stalled_publisher_loses_no_feedback_with_default_relay(
        self, registry, marker_server, clock
    ):
        gate = threading.Event()
        publisher = RecordingPublisher(delay_event=gate)
        relay = PublishRelay(publisher)
        relay.start()
        try:
            orchestrator = MarkerOrchestrator(registry, relay, marker_server, clock=clock)
            orchestrator.insert("m1", "base_link")
            for i in range(1500):
                marker_server.emit("m1", (float(i), 0.0, 0.0))
            gate.set()
            assert relay.wait_until_idle(timeout=10.0)
        finally:
            gate.set()
            relay.stop(timeout=5.0)

        records = _records(publisher)
        assert len(records) == 1501
        assert relay.dropped_count == 0
        assert [r.transform.translation.x for r in records[1:]] == [float(i) for i in range(1500)]

    def test_registry_follows_feedback_and_stays_active(self, orchestrator, marker_server, registry):
        orchestrator.insert("m1", "base_link")
        marker_server.emit("m1", (4.0, 5.0, 6.0))

        entry = registry.get("m1")
        assert entry.activity is FrameActivity.ACTIVE
        assert entry.transform.translation == Vector3(4.0, 5.0, 6.0)

    def test_marker_frames_never_in_static_broadcast(
        self, orchestrator, marker_server, registry, base_link_entry, clock
    ):
        registry.insert("base_link", base_link_entry)
        orchestrator.insert("m1", "base_link")
        marker_server.emit("m1", (1.0, 1.0, 1.0))

        static_pub = RecordingPublisher()
        StaticFrameBroadcaster(registry, static_pub, clock=clock).tick()

        (msg,) = static_pub.messages
        assert [r.child_frame_id for r in msg.transforms] == ["base_link"]

    def test_state_machine(self, orchestrator, marker_server):
        assert orchestrator.state("m1") is MarkerState.UNREGISTERED
        orchestrator.insert("m1", "base_link")
        assert orchestrator.state("m1") is MarkerState.REGISTERED
        marker_server.emit("m1", (0.0, 0.0, 1.0))
        assert orchestrator.state("m1") is MarkerState.LIVE
        marker_server.emit("m1", (0.0, 0.0, 2.0))
        assert orchestrator.state("m1") is MarkerState.LIVE
        assert orchestrator.feedback_count == 2


class TestRegistrationErrors:

    def test_server_rejection_reported(self, registry, relay, clock):
        server = FakeMarkerServer(reject={"bad"})
        orchestrator = MarkerOrchestrator(registry, relay, server, clock=clock)

        with pytest.raises(MarkerRegistrationError, match="Failed to register marker 'bad'"):
            orchestrator.insert("bad", "base_link")
        assert orchestrator.state("bad") is MarkerState.UNREGISTERED

        # Other markers are unaffected
        orchestrator.insert("good", "base_link")
        assert orchestrator.state("good") is MarkerState.REGISTERED

    @pytest.mark.parametrize("name, frame", [("", "base_link"), ("m1", "")])
    def test_invalid_arguments(self, orchestrator, marker_server, name, frame):
        with pytest.raises(MarkerRegistrationError):
            orchestrator.insert(name, frame)
        assert marker_server.inserted == []
