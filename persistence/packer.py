import math
import logging
from dataclasses import dataclass, field
from typing import Any
from scenes import SceneNode, Transform
from .errors import ErrorCode, PackFailed

logger = logging.getLogger(__name__)

# Characters a node name cannot contain in a packed scene
INVALID_NAME_CHARACTERS = ('/', ':', '"', '@', '%')

# ----------------------------------------------------------------------------------------

@dataclass
class PackedNode:
    """
    A node of a packed scene.

    Attributes:
        name: the node name, unique among its siblings
        kind: the node kind
        parent: the index of the parent node, -1 for the root
        transform: a copy of the local transform
        properties: a copy of the node properties
    """

    name: str
    kind: str
    parent: int
    transform: Transform
    properties: dict[str, Any] = field(default_factory=dict)

@dataclass
class PackedScene:
    """
    A flat, self-contained representation of a node tree, parents before children.
    """

    nodes: list[PackedNode] = field(default_factory=list)

    def node_path(self, index: int) -> str:
        """
        Get the path of a node relative to the root.

        Args:
            index: the index of the node

        Returns:
            path: "." for the root, otherwise the slash separated names below the root
        """

        names = []
        while self.nodes[index].parent != -1:
            names.append(self.nodes[index].name)
            index = self.nodes[index].parent
        return "/".join(reversed(names)) if names else "."

# ----------------------------------------------------------------------------------------

def _unique_names(children: list[SceneNode]) -> list[str]:
    """
    Make sibling names unique by appending the lowest free number to repeats.
    """

    reserved = {child.name for child in children}
    used: set[str] = set()
    names = []
    for child in children:
        name = child.name
        if name in used:
            suffix = 2
            while f"{child.name}{suffix}" in reserved or f"{child.name}{suffix}" in used:
                suffix += 1
            name = f"{child.name}{suffix}"
            logger.debug(f"Renamed duplicate sibling '{child.name}' to '{name}' in packed scene")
        used.add(name)
        names.append(name)
    return names

def _check_node(node: SceneNode, name: str) -> None:
    if not name or name in (".", "..") or any(c in name for c in INVALID_NAME_CHARACTERS):
        raise PackFailed(f"Invalid node name {name!r} at '{node.get_path()}'.", ErrorCode.INVALID_NAME)

    if not node.transform.is_finite():
        raise PackFailed(f"Node '{node.get_path()}' has a non-finite transform.", ErrorCode.INVALID_DATA)

    for key, value in node.properties.items():
        if not isinstance(value, (bool, int, float, str)):
            raise PackFailed(f"Property '{key}' of node '{node.get_path()}' has unsupported type "
                             f"{type(value).__name__}.", ErrorCode.INVALID_DATA)
        if isinstance(value, float) and not math.isfinite(value):
            raise PackFailed(f"Property '{key}' of node '{node.get_path()}' is not finite.", ErrorCode.INVALID_DATA)

def pack_scene(root: SceneNode) -> PackedScene:
    """
    Pack a node tree into a flat scene, parents before children.

    The live tree is not modified. Duplicate sibling names are made unique in
    the packed scene only.

    Args:
        root: the root of the tree

    Returns:
        packed: the packed scene

    Raises:
        PackFailed: If the tree cannot be packed.
    """

    if root is None:
        raise PackFailed("Nothing to pack.", ErrorCode.INVALID_DATA)

    packed = PackedScene()
    seen: set[int] = set()
    stack: list[tuple[SceneNode, str, int]] = [(root, root.name, -1)]

    while stack:
        node, name, parent = stack.pop()
        if id(node) in seen:
            raise PackFailed(f"Node '{name}' is reachable more than once.", ErrorCode.CYCLIC_LINK)
        seen.add(id(node))

        _check_node(node, name)
        index = len(packed.nodes)
        packed.nodes.append(PackedNode(name, node.kind, parent, node.transform.copy(), dict(node.properties)))

        # Reversed so the stack pops children in order
        child_names = _unique_names(node.children)
        for child, child_name in reversed(list(zip(node.children, child_names))):
            stack.append((child, child_name, index))

    return packed

def unpack_scene(packed: PackedScene) -> SceneNode:
    """
    Instantiate a node tree from a packed scene.

    Args:
        packed: the packed scene

    Returns:
        root: the root of the new tree
    """

    if not packed.nodes:
        raise ValueError("The packed scene has no nodes.")

    instances: list[SceneNode] = []
    for i, packed_node in enumerate(packed.nodes):
        node = SceneNode(packed_node.name, packed_node.kind, packed_node.transform.copy(), packed_node.properties)
        if packed_node.parent == -1:
            if i != 0:
                raise ValueError(f"Packed node {i} ('{packed_node.name}') is a second root.")
        elif not 0 <= packed_node.parent < i:
            raise ValueError(f"Packed node {i} ('{packed_node.name}') has invalid parent {packed_node.parent}.")
        else:
            instances[packed_node.parent].add_child(node)
        instances.append(node)

    return instances[0]
