from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .node import SceneNode

# Capabilities
COLLISION_VOLUME = "collision_volume"
TRIGGER_VOLUME = "trigger_volume"

# ----------------------------------------------------------------------------------------

class NodeKindRegistry:
    """
    Registry of node kinds, their base kinds and their capabilities.

    Capabilities are inherited along the base chain, so a kind registered with
    a collision-volume base is a collision volume too.
    """

    _bases: dict[str, str | None] = {}
    _capabilities: dict[str, frozenset[str]] = {}

    @classmethod
    def register(cls, kind: str, base: str | None = None, capabilities: tuple[str, ...] = ()) -> None:
        """
        Register a node kind.

        Args:
            kind: the name of the kind
            base: the kind this one derives from, if any
            capabilities: capabilities added by this kind

        Raises:
            KeyError: If the base kind is not registered.
        """

        if base is not None and base not in cls._bases:
            raise KeyError(f"Unknown base kind: {base}. Available kinds: {list(cls._bases.keys())}")

        cls._bases[kind] = base
        cls._capabilities[kind] = frozenset(capabilities)

    @classmethod
    def unregister(cls, kind: str) -> None:
        """
        Remove a kind. Kinds deriving from it lose their base.

        Args:
            kind: the name of the kind
        """

        cls._bases.pop(kind, None)
        cls._capabilities.pop(kind, None)
        for other, base in cls._bases.items():
            if base == kind:
                cls._bases[other] = None

    @classmethod
    def is_registered(cls, kind: str) -> bool:
        return kind in cls._bases

    @classmethod
    def capabilities_of(cls, kind: str) -> frozenset[str]:
        """
        Get all capabilities of a kind, including inherited ones.

        Args:
            kind: the name of the kind

        Returns:
            capabilities: the capabilities, empty for unknown kinds
        """

        capabilities: set[str] = set()
        seen: set[str] = set()
        current = kind
        while current is not None and current in cls._bases and current not in seen:
            seen.add(current)
            capabilities |= cls._capabilities[current]
            current = cls._bases[current]
        return frozenset(capabilities)

    @classmethod
    def has_capability(cls, kind: str, capability: str) -> bool:
        return capability in cls.capabilities_of(kind)

    @classmethod
    def is_collision_volume(cls, node: SceneNode) -> bool:
        return cls.has_capability(node.kind, COLLISION_VOLUME)

    @classmethod
    def is_trigger_volume(cls, node: SceneNode) -> bool:
        return cls.has_capability(node.kind, TRIGGER_VOLUME)

# ----------------------------------------------------------------------------------------

# Built-in kinds
NodeKindRegistry.register("Node3D")
NodeKindRegistry.register("MeshInstance3D", base="Node3D")
NodeKindRegistry.register("CollisionShape3D", base="Node3D")
NodeKindRegistry.register("CollisionObject3D", base="Node3D")
NodeKindRegistry.register("PhysicsBody3D", base="CollisionObject3D", capabilities=(COLLISION_VOLUME,))
NodeKindRegistry.register("StaticBody3D", base="PhysicsBody3D")
NodeKindRegistry.register("AnimatableBody3D", base="StaticBody3D")
NodeKindRegistry.register("RigidBody3D", base="PhysicsBody3D")
NodeKindRegistry.register("CharacterBody3D", base="PhysicsBody3D")
NodeKindRegistry.register("Area3D", base="CollisionObject3D", capabilities=(TRIGGER_VOLUME,))
