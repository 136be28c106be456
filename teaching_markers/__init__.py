"""
Teaching markers: interactive RViz markers that keep the TF tree in sync.

Subpackages:
- common/: geometry values and constants
- core/: registry, static broadcaster, feedback relay, orchestration (no ROS imports)
- server/: rclpy node and ROS adapters
"""

from __future__ import annotations

from importlib import import_module
from typing import Any

__all__ = [
    "FrameRegistry",
    "StaticFrameBroadcaster",
    "PublishRelay",
    "MarkerOrchestrator",
    "TeachingMarkersNode",
]

_LAZY_ATTRS: dict[str, tuple[str, str]] = {
    "FrameRegistry": ("teaching_markers.core.registry", "FrameRegistry"),
    "StaticFrameBroadcaster": ("teaching_markers.core.broadcaster", "StaticFrameBroadcaster"),
    "PublishRelay": ("teaching_markers.core.relay", "PublishRelay"),
    "MarkerOrchestrator": ("teaching_markers.core.orchestrator", "MarkerOrchestrator"),
    # Requires rclpy
    "TeachingMarkersNode": ("teaching_markers.server.teaching_markers_node", "TeachingMarkersNode"),
}


def __getattr__(name: str) -> Any:
    target = _LAZY_ATTRS.get(name)
    if target is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    module_name, attr_name = target
    module = import_module(module_name)
    return getattr(module, attr_name)


def __dir__() -> list[str]:
    return sorted(set(globals().keys()) | set(_LAZY_ATTRS.keys()))
