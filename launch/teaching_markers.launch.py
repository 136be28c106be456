import os

from launch import LaunchDescription
from launch.actions import DeclareLaunchArgument
from launch.substitutions import LaunchConfiguration
from launch_ros.actions import Node
from ament_index_python.packages import get_package_share_directory


def generate_launch_description():
    default_scene = os.path.join(
        get_package_share_directory("teaching_markers"), "config", "teaching_markers.yaml"
    )

    scene_config_path = LaunchConfiguration("scene_config_path")
    broadcast_period_sec = LaunchConfiguration("broadcast_period_sec")
    relay_overflow_policy = LaunchConfiguration("relay_overflow_policy")
    use_sim_time = LaunchConfiguration("use_sim_time")

    return LaunchDescription(
        [
            DeclareLaunchArgument("scene_config_path", default_value=default_scene),
            DeclareLaunchArgument("broadcast_period_sec", default_value="0.1"),
            DeclareLaunchArgument(
                "relay_overflow_policy",
                default_value="block",
                description="Behaviour when the publish queue is full: drop_oldest, reject, block",
            ),
            DeclareLaunchArgument("use_sim_time", default_value="false"),
            Node(
                package="teaching_markers",
                executable="teaching_markers_node",
                name="teaching_markers_server",
                output="screen",
                parameters=[{
                    "use_sim_time": use_sim_time,
                    "scene_config_path": scene_config_path,
                    "broadcast_period_sec": broadcast_period_sec,
                    "relay_overflow_policy": relay_overflow_policy,
                }],
            ),
        ]
    )
