"""
Node Executors Registry.

Maps node type names to executor functions so a host pipeline can run
region blur nodes by type.

Classes:
    NodeExecutorRegistry: Registry for node executors

Functions:
    get_default_registry: Get the global default registry (singleton)
    register_default_executors: Register the built-in blur node executors
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from RB_Libs.constants import (
    NODE_TYPE_FACE_BLUR,
    NODE_TYPE_FRAME_BLUR,
    NODE_TYPE_PATH_BLUR,
)

logger = logging.getLogger(__name__)

# Type alias for executor function
ExecutorFunction = Callable[[Dict[str, Any], List[Any]], Any]


class NodeExecutorRegistry:
    """
    Registry for node type executors.

    Example:
        >>> registry = NodeExecutorRegistry()
        >>> registry.register("Path Blur", execute_path_blur_node, input_count=1)
        >>> result = registry.execute("Path Blur", node, [image])
    """

    def __init__(self):
        self._executors: Dict[str, ExecutorFunction] = {}
        self._node_metadata: Dict[str, Dict[str, Any]] = {}

    def register(
        self,
        node_type: str,
        executor: ExecutorFunction,
        description: str = "",
        input_count: int = 0,
        output_count: int = 1,
        tags: Optional[List[str]] = None,
    ) -> None:
        """
        Register a node executor.

        Args:
            node_type: Unique node type name (e.g., "Path Blur")
            executor: Callable accepting (node_dict, inputs)
            description: Human-readable description
            input_count: Expected number of inputs
            output_count: Expected number of outputs
            tags: Optional categorization tags

        Raises:
            ValueError: If node_type is empty or executor is not callable
            RuntimeError: If node_type is already registered
        """
        node_type = str(node_type).strip()
        if not node_type:
            raise ValueError("node_type cannot be empty")
        if not callable(executor):
            raise ValueError(f"executor must be callable, got {type(executor)}")
        if node_type in self._executors:
            raise RuntimeError(
                f"Node type '{node_type}' is already registered. "
                f"Use unregister() first to replace it."
            )

        self._executors[node_type] = executor
        self._node_metadata[node_type] = {
            "description": str(description),
            "input_count": int(input_count),
            "output_count": int(output_count),
            "tags": list(tags) if tags else [],
        }
        logger.debug(f"Registered executor for node type: {node_type}")

    def unregister(self, node_type: str) -> bool:
        """Remove a node type; returns False if it was not registered."""
        node_type = str(node_type).strip()
        if node_type not in self._executors:
            return False
        del self._executors[node_type]
        del self._node_metadata[node_type]
        logger.debug(f"Unregistered executor for node type: {node_type}")
        return True

    def get_executor(self, node_type: str) -> ExecutorFunction:
        """
        Get the executor for a node type.

        Raises:
            KeyError: If node_type is not registered
        """
        node_type = str(node_type).strip()
        if node_type not in self._executors:
            available = ", ".join(self.list_node_types())
            raise KeyError(
                f"No executor registered for node type '{node_type}'. "
                f"Available types: {available}"
            )
        return self._executors[node_type]

    def has_executor(self, node_type: str) -> bool:
        return str(node_type).strip() in self._executors

    def execute(self, node_type: str, node_dict: Dict[str, Any], inputs: List[Any]) -> Any:
        """Look up and run the executor for node_type."""
        return self.get_executor(node_type)(node_dict, inputs)

    def list_node_types(self) -> List[str]:
        return sorted(self._executors)

    def get_metadata(self, node_type: str) -> Dict[str, Any]:
        """
        Get description, input_count, output_count and tags for a node type.

        Raises:
            KeyError: If node_type is not registered
        """
        node_type = str(node_type).strip()
        if node_type not in self._node_metadata:
            raise KeyError(f"No metadata for node type: {node_type}")
        return dict(self._node_metadata[node_type])

    def filter_by_tag(self, tag: str) -> List[str]:
        """Sorted node types carrying tag (case-insensitive)."""
        tag = str(tag).strip().lower()
        return sorted(
            node_type
            for node_type, meta in self._node_metadata.items()
            if tag in [t.lower() for t in meta.get("tags", [])]
        )

    def clear(self) -> None:
        self._executors.clear()
        self._node_metadata.clear()
        logger.warning("Node executor registry cleared")


# Global singleton registry
_default_registry: Optional[NodeExecutorRegistry] = None


def get_default_registry() -> NodeExecutorRegistry:
    """Get the global registry, creating and populating it on first call."""
    global _default_registry

    if _default_registry is None:
        _default_registry = NodeExecutorRegistry()
        register_default_executors(_default_registry)

    return _default_registry


def register_default_executors(registry: NodeExecutorRegistry) -> None:
    """Register the Path Blur, Face Blur and Frame Blur executors."""
    from RB_Libs.NodesLib.blur_nodes import (
        execute_face_blur_node,
        execute_frame_blur_node,
        execute_path_blur_node,
    )

    registry.register(
        node_type=NODE_TYPE_PATH_BLUR,
        executor=execute_path_blur_node,
        description="Blur hand-drawn regions of a photo",
        input_count=1,
        output_count=1,
        tags=["processing", "blur", "photo"],
    )

    registry.register(
        node_type=NODE_TYPE_FACE_BLUR,
        executor=execute_face_blur_node,
        description="Blur detected faces in a photo with feathered ellipses",
        input_count=2,
        output_count=1,
        tags=["processing", "blur", "photo", "face"],
    )

    registry.register(
        node_type=NODE_TYPE_FRAME_BLUR,
        executor=execute_frame_blur_node,
        description="Blur tracked targets in one video frame",
        input_count=2,
        output_count=1,
        tags=["processing", "blur", "video", "face"],
    )

    logger.info("Registered default node executors")
