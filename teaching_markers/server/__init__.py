"""
ROS 2 server layer: the rclpy node, message conversions and the
interactive marker / visual adapters. Importing this package requires a
sourced ROS 2 environment.
"""
