"""
Teaching Markers Constants and Configuration Values.

All magic numbers are centralized here with clear documentation.
"""

# =============================================================================
# Node / Server Identity
# =============================================================================

# ROS node name
NODE_ID = "teaching_markers_server"

# Interactive marker server namespace (topics live under /<name>/...)
SERVER_NAME_DEFAULT = "teaching_markers"

# =============================================================================
# Topic Constants
# =============================================================================

# Durable channel for periodically rebroadcast static frames
STATIC_TOPIC_DEFAULT = "tf_static"

# Channel for feedback-driven transforms (same durable channel by default)
LIVE_TOPIC_DEFAULT = "tf_static"

# Visual descriptors attached to markers (MarkerArray)
VISUALS_TOPIC_DEFAULT = "teaching_markers/visuals"

# History depth for the durable publishers
QOS_DEPTH_DEFAULT = 100

# Durability modes accepted by the "durability" parameter
DURABILITY_TRANSIENT_LOCAL = "transient_local"
DURABILITY_VOLATILE = "volatile"
DURABILITY_DEFAULT = DURABILITY_TRANSIENT_LOCAL

# =============================================================================
# Static Broadcast Constants
# =============================================================================

# Tick interval of the static frame broadcaster (seconds)
BROADCAST_PERIOD_SEC_DEFAULT = 0.1  # 100 ms

# =============================================================================
# Publish Relay Constants
# =============================================================================

# Queue capacity shared by all markers (0 = unbounded, nothing is ever dropped)
RELAY_QUEUE_CAPACITY_DEFAULT = 0

# Overflow policies when the queue is full
RELAY_POLICY_DROP_OLDEST = "drop_oldest"
RELAY_POLICY_REJECT = "reject"
RELAY_POLICY_BLOCK = "block"
RELAY_POLICY_DEFAULT = RELAY_POLICY_BLOCK

# How long shutdown waits for queued messages to be published (seconds)
RELAY_SHUTDOWN_TIMEOUT_SEC = 2.0

# =============================================================================
# Marker Geometry Constants
# =============================================================================

# Size of the interactive marker controls in RViz (meters)
MARKER_SCALE_DEFAULT = 0.3

# Tolerance for unit-norm checks on quaternions
QUATERNION_NORM_TOLERANCE = 1e-6

# Values of visualization_msgs/InteractiveMarkerControl interaction modes
INTERACTION_MODE_MOVE_AXIS = 3
INTERACTION_MODE_ROTATE_AXIS = 5

# Values of visualization_msgs/Marker types usable as visual descriptors
MARKER_TYPE_ARROW = 0
MARKER_TYPE_CUBE = 1
MARKER_TYPE_SPHERE = 2
MARKER_TYPE_CYLINDER = 3
MARKER_TYPE_MESH_RESOURCE = 10
