from __future__ import annotations

from typing import Any, Callable, Iterator
from .transform import Transform

# ----------------------------------------------------------------------------------------

class SceneNode:
    def __init__(self,
                 name: str,
                 kind: str = "Node3D",
                 transform: Transform | None = None,
                 properties: dict[str, Any] | None = None) -> None:
        """
        Initialize a scene node.

        Args:
            name: the name of the node, not necessarily unique among siblings
            kind: the node kind, see NodeKindRegistry
            transform: the local transform relative to the parent
            properties: extra scalar properties carried to the scene file
        """

        self.name = name
        self.kind = kind
        self.transform = transform if transform is not None else Transform()
        self.properties: dict[str, Any] = dict(properties) if properties else {}

        self.parent: SceneNode | None = None
        self.children: list[SceneNode] = []

    def add_child(self, node: SceneNode, index: int | None = None) -> SceneNode:
        """
        Attach a detached node as a child.

        Args:
            node: the node to attach
            index: the slot to insert at, appended if None

        Returns:
            node: the attached node
        """

        assert node.parent is None, f"Node '{node.name}' already has a parent"
        assert node is not self, "Cannot attach a node to itself"

        if index is None:
            self.children.append(node)
        else:
            self.children.insert(index, node)
        node.parent = self
        return node

    def replace_child_at(self, index: int, new_node: SceneNode, keep_children: bool = True) -> SceneNode:
        """
        Swap the child at a slot for a new node.

        The new node takes the exact slot of the old one. With keep_children the
        old node's children move, in order, to the end of the new node's children;
        otherwise they stay attached to the detached old node and leave the tree.

        Args:
            index: the slot of the child to replace
            new_node: the detached node to put in its place
            keep_children: whether to re-parent the old node's children

        Returns:
            old_node: the detached old node
        """

        assert new_node.parent is None, f"Node '{new_node.name}' already has a parent"

        old_node = self.children[index]
        self.children[index] = new_node
        new_node.parent = self
        old_node.parent = None

        if keep_children:
            for child in old_node.children:
                child.parent = new_node
                new_node.children.append(child)
            old_node.children = []

        return old_node

    def get_index(self) -> int:
        """
        Returns:
            The slot of the node in its parent's children, -1 for a root
        """

        if self.parent is None:
            return -1
        for i, sibling in enumerate(self.parent.children):
            if sibling is self:
                return i
        raise RuntimeError(f"Node '{self.name}' is missing from its parent's children")

    def get_path(self) -> str:
        """
        Returns:
            The slash separated names from the root down to this node
        """

        names = []
        node = self
        while node is not None:
            names.append(node.name)
            node = node.parent
        return "/".join(reversed(names))

    def find_node(self, path: str) -> SceneNode | None:
        """
        Find a descendant by a slash separated path relative to this node.

        The first sibling with a matching name wins.

        Args:
            path: the relative path, "." for this node

        Returns:
            node: the node found, or None
        """

        node = self
        if path in ("", "."):
            return node
        for name in path.split("/"):
            node = next((child for child in node.children if child.name == name), None)
            if node is None:
                return None
        return node

    def walk(self) -> Iterator[SceneNode]:
        """
        Iterate the subtree depth first, parents before children.
        """

        yield self
        for child in list(self.children):
            yield from child.walk()

    def format_tree(self, inspector: Callable[[SceneNode], str] | None = None) -> str:
        """
        Render the subtree as an indented text tree.

        Args:
            inspector: optional function returning extra text per node

        Returns:
            text: the rendered tree
        """

        lines = []

        def _format_node(node: SceneNode, prefix: str | None = None, last: bool = True) -> None:
            if prefix is None:
                first_prefix = ""
                prefix = ""
            else:
                first_prefix = prefix + (" ┗━" if last else " ┣━")
                prefix = prefix + ("   " if last else " ┃ ")

            line = first_prefix + node.name.ljust(max(30 - len(first_prefix), 0)) + " " + node.kind
            if inspector is not None:
                line += " " + inspector(node)
            lines.append(line)

            for child in node.children:
                _format_node(child, prefix, child is node.children[-1])

        _format_node(self)
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"SceneNode(name={self.name!r}, kind={self.kind!r}, children={len(self.children)})"
