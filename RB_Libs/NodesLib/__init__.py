"""
Region Blur Nodes Library.

Node executors that expose the photo and video blur operations to a
node-graph pipeline, plus the executor registry.

Modules:
    blur_nodes: Path Blur, Face Blur and Frame Blur nodes
    node_executors: Registry mapping node types to executors
"""

from RB_Libs.NodesLib.blur_nodes import (
    create_face_blur_node,
    create_frame_blur_node,
    create_path_blur_node,
    execute_face_blur_node,
    execute_frame_blur_node,
    execute_path_blur_node,
)
from RB_Libs.NodesLib.node_executors import (
    NodeExecutorRegistry,
    get_default_registry,
    register_default_executors,
)

__all__ = [
    "create_face_blur_node",
    "create_frame_blur_node",
    "create_path_blur_node",
    "execute_face_blur_node",
    "execute_frame_blur_node",
    "execute_path_blur_node",
    "NodeExecutorRegistry",
    "get_default_registry",
    "register_default_executors",
]
