"""
Tests for the static frame broadcaster: only INACTIVE frames are
rebroadcast, publish failures are survived and clock failures are not.
"""

import logging

import pytest

from teaching_markers.common.geometry import Quaternion, Stamp, Transform, Vector3
from teaching_markers.core.broadcaster import StaticFrameBroadcaster, build_static_message
from teaching_markers.core.registry import FrameActivity, FrameEntry, FrameRegistry

from conftest import RecordingPublisher


def _entry(child: str, activity: FrameActivity) -> FrameEntry:
    return FrameEntry("world", child, Transform.identity(), activity)


class TestBuildStaticMessage:

    def test_keeps_only_inactive_frames(self):
        frames = {
            "static_a": _entry("static_a", FrameActivity.INACTIVE),
            "live": _entry("live", FrameActivity.ACTIVE),
            "static_b": _entry("static_b", FrameActivity.INACTIVE),
            "unknown": _entry("unknown", FrameActivity.UNSET),
        }
        msg = build_static_message(frames, Stamp(5, 0))

        children = sorted(r.child_frame_id for r in msg.transforms)
        assert children == ["static_a", "static_b"]
        assert all(r.stamp == Stamp(5, 0) for r in msg.transforms)

    def test_unset_excluded_like_active(self):
        only_unset = {"u": _entry("u", FrameActivity.UNSET)}
        only_active = {"a": _entry("a", FrameActivity.ACTIVE)}

        assert len(build_static_message(only_unset, Stamp())) == 0
        assert len(build_static_message(only_active, Stamp())) == 0

    def test_empty_registry_gives_empty_message(self):
        assert build_static_message({}, Stamp()).transforms == ()


class TestStaticFrameBroadcaster:

    def test_single_tick_publishes_base_link(self, base_link_entry, clock, publisher):
        registry = FrameRegistry.from_entries([base_link_entry])
        broadcaster = StaticFrameBroadcaster(registry, publisher, clock=clock)

        broadcaster.tick()

        assert len(publisher.messages) == 1
        (record,) = publisher.messages[0].transforms
        assert record.child_frame_id == "base_link"
        assert record.parent_frame_id == "world"
        assert record.transform.translation == Vector3(0.0, 0.0, 1.0)
        assert record.transform.rotation == Quaternion.identity()

    def test_each_tick_uses_fresh_snapshot_and_stamp(self, base_link_entry, clock, publisher):
        registry = FrameRegistry.from_entries([base_link_entry])
        broadcaster = StaticFrameBroadcaster(registry, publisher, clock=clock)

        first = broadcaster.tick()
        registry.insert("base_link", FrameEntry("world", "base_link", Transform.identity(), FrameActivity.ACTIVE))
        registry.insert("camera", _entry("camera", FrameActivity.INACTIVE))
        second = broadcaster.tick()

        assert [r.child_frame_id for r in first.transforms] == ["base_link"]
        assert [r.child_frame_id for r in second.transforms] == ["camera"]
        assert second.transforms[0].stamp > first.transforms[0].stamp
        assert broadcaster.tick_count == 2

    def test_publish_failure_is_logged_and_next_tick_runs(self, base_link_entry, clock, caplog):
        publisher = RecordingPublisher(fail_on={1})
        registry = FrameRegistry.from_entries([base_link_entry])
        broadcaster = StaticFrameBroadcaster(registry, publisher, clock=clock)

        with caplog.at_level(logging.ERROR):
            broadcaster.tick()
            broadcaster.tick()

        assert broadcaster.failed_publishes == 1
        assert len(publisher.messages) == 1
        assert "Static broadcaster failed" in caplog.text

    def test_clock_failure_propagates(self, base_link_entry, publisher):
        def broken_clock():
            raise RuntimeError("clock unavailable")

        registry = FrameRegistry.from_entries([base_link_entry])
        broadcaster = StaticFrameBroadcaster(registry, publisher, clock=broken_clock)

        with pytest.raises(RuntimeError, match="clock unavailable"):
            broadcaster.tick()
        assert publisher.messages == []
