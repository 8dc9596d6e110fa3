from .transform import Transform
from .node import SceneNode
from .kinds import NodeKindRegistry, COLLISION_VOLUME, TRIGGER_VOLUME
from .config import ImportConfig
from .scene_state import SceneState, NodeSpec, TransformSpec

__all__ = [
    "Transform",
    "SceneNode",
    "NodeKindRegistry",
    "COLLISION_VOLUME",
    "TRIGGER_VOLUME",
    "ImportConfig",
    "SceneState",
    "NodeSpec",
    "TransformSpec",
]
