"""
Static frame broadcaster.

Every tick the registry is snapshotted and all INACTIVE frames are
republished as one TFMessage on the durable (transient-local) static
channel, so late-joining tf listeners still receive them. Frames that are
ACTIVE or UNSET belong to live marker feedback and are skipped.

The node drives tick() from an rclpy timer. A failed publish is logged and
the next tick tries again. A failing clock is not handled here: the
exception leaves tick() and takes the broadcaster down rather than
publishing with a made-up stamp.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Optional

from teaching_markers.common.geometry import Clock, Stamp, system_clock
from teaching_markers.core.registry import FrameEntry, FrameRegistry
from teaching_markers.core.tf_types import TransformMessage, TransformRecord


def build_static_message(frames: Mapping[str, FrameEntry], stamp: Stamp) -> TransformMessage:
    """One record per INACTIVE frame, all stamped with the tick stamp."""
    records = tuple(
        TransformRecord(
            stamp=stamp,
            parent_frame_id=entry.parent_frame_id,
            child_frame_id=entry.child_frame_id,
            transform=entry.transform,
        )
        for entry in frames.values()
        if entry.activity.broadcasts_static
    )
    return TransformMessage(transforms=records)


class StaticFrameBroadcaster:
    """Periodic republisher of the registry's static frames."""

    def __init__(
        self,
        registry: FrameRegistry,
        publish: Callable[[TransformMessage], None],
        clock: Clock = system_clock,
        logger: Optional[Any] = None,
    ):
        self.registry = registry
        self._publish = publish
        self._clock = clock
        self.logger = logger if logger is not None else logging.getLogger(__name__)

        self.tick_count = 0
        self.failed_publishes = 0
        self.last_message: Optional[TransformMessage] = None

    def tick(self) -> TransformMessage:
        stamp = self._clock()
        frames = self.registry.snapshot()
        msg = build_static_message(frames, stamp)
        self.tick_count += 1
        self.last_message = msg

        try:
            self._publish(msg)
        except Exception as e:
            self.failed_publishes += 1
            self.logger.error(f"Static broadcaster failed to send a message with: '{e}'")

        if self.tick_count == 1:
            self.logger.info(f"Static broadcaster first tick: {len(msg)} static frame(s)")
        return msg
