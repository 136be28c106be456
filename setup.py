from setuptools import find_packages, setup

package_name = "teaching_markers"

setup(
    name=package_name,
    version="0.1.0",
    packages=find_packages(exclude=["test"]),
    data_files=[
        ("share/ament_index/resource_index/packages", ["resource/" + package_name]),
        ("share/" + package_name, ["package.xml"]),
        (
            "share/" + package_name + "/launch",
            [
                "launch/teaching_markers.launch.py",
            ],
        ),
        (
            "share/" + package_name + "/config",
            [
                "config/teaching_markers.yaml",
            ],
        ),
    ],
    install_requires=["setuptools", "numpy", "scipy", "pyyaml"],
    extras_require={"test": ["pytest"]},
    zip_safe=True,
    maintainer="you",
    maintainer_email="you@example.com",
    description="Interactive teaching markers that keep the TF tree in sync with RViz edits (ROS 2 Jazzy)",
    license="Apache-2.0",
    tests_require=["pytest"],
    entry_points={
        "console_scripts": [
            "teaching_markers_node = teaching_markers.server.teaching_markers_node:main",
        ],
    },
)
