"""
Binary glTF (.glb) encoding of packed scenes.

The scene is written as a glTF 2.0 document of plain nodes, one per packed
node, with the local transform as translation, rotation and scale. The node
kind and properties go in the node extras. The document carries no meshes, so
it is assembled here and wrapped in a GLB container with a single JSON chunk.
"""

import json
import struct
import numpy as np
from typing import Any
from scenes import Transform
from .errors import ErrorCode, PackFailed
from .packer import PackedNode, PackedScene

GLB_MAGIC = b"glTF"
GLB_VERSION = 2
CHUNK_JSON = 0x4E4F534A

_HEADER = struct.Struct("<4sII")
_CHUNK_HEADER = struct.Struct("<II")

# ----------------------------------------------------------------------------------------

def _node_entry(node: PackedNode, children: list[int]) -> dict[str, Any]:
    entry: dict[str, Any] = {"name": node.name}
    if children:
        entry["children"] = children

    transform = node.transform
    if np.any(transform.translation != 0.0):
        entry["translation"] = transform.translation.tolist()
    if not np.array_equal(transform.rotation, [0.0, 0.0, 0.0, 1.0]):
        entry["rotation"] = transform.rotation.tolist()
    if not np.array_equal(transform.scale, [1.0, 1.0, 1.0]):
        entry["scale"] = transform.scale.tolist()

    extras: dict[str, Any] = {"kind": node.kind}
    if node.properties:
        extras["properties"] = dict(node.properties)
    entry["extras"] = extras
    return entry

def to_gltf(packed: PackedScene) -> dict[str, Any]:
    """
    Build the glTF document of a packed scene.

    Node indices in the document match the packed indices.

    Args:
        packed: the packed scene

    Returns:
        gltf: the glTF document
    """

    children: list[list[int]] = [[] for _ in packed.nodes]
    for i, node in enumerate(packed.nodes):
        if node.parent != -1:
            children[node.parent].append(i)

    return {
        "asset": {"version": "2.0", "generator": "collision-trigger-import"},
        "scene": 0,
        "scenes": [{"name": packed.nodes[0].name, "nodes": [0]}],
        "nodes": [_node_entry(node, children[i]) for i, node in enumerate(packed.nodes)],
    }

def dumps(packed: PackedScene) -> bytes:
    """
    Encode a packed scene as binary glTF.

    Args:
        packed: the packed scene

    Returns:
        data: the .glb bytes

    Raises:
        PackFailed: If the scene cannot be encoded.
    """

    if not packed.nodes:
        raise PackFailed("The packed scene has no nodes.", ErrorCode.INVALID_DATA)

    try:
        document = json.dumps(to_gltf(packed), separators=(",", ":"), allow_nan=False).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise PackFailed(f"glTF encoding failed: {e}", ErrorCode.ENCODE_FAILED) from e

    # Chunks are 4-byte aligned, JSON is padded with spaces
    document += b" " * (-len(document) % 4)
    length = _HEADER.size + _CHUNK_HEADER.size + len(document)
    return _HEADER.pack(GLB_MAGIC, GLB_VERSION, length) + _CHUNK_HEADER.pack(len(document), CHUNK_JSON) + document

# ----------------------------------------------------------------------------------------

def _read_document(data: bytes) -> dict[str, Any]:
    if len(data) < _HEADER.size + _CHUNK_HEADER.size:
        raise ValueError("Data too short for a GLB container")

    magic, version, length = _HEADER.unpack_from(data, 0)
    if magic != GLB_MAGIC:
        raise ValueError(f"Not a GLB container (magic {magic!r})")
    if version != GLB_VERSION:
        raise ValueError(f"Unsupported GLB version {version}")
    if length > len(data):
        raise ValueError(f"GLB container truncated: {len(data)} of {length} bytes")

    chunk_length, chunk_type = _CHUNK_HEADER.unpack_from(data, _HEADER.size)
    if chunk_type != CHUNK_JSON:
        raise ValueError("The first GLB chunk is not JSON")
    start = _HEADER.size + _CHUNK_HEADER.size
    return json.loads(data[start:start + chunk_length].decode("utf-8"))

def _node_transform(entry: dict[str, Any]) -> Transform:
    if "matrix" in entry:
        return Transform.from_matrix(np.asarray(entry["matrix"], dtype=float).reshape(4, 4).T)
    return Transform(entry.get("translation"), entry.get("rotation"), entry.get("scale"))

def loads(data: bytes) -> PackedScene:
    """
    Decode binary glTF into a packed scene.

    The default scene must have a single root node. Nodes without a kind are
    read as Node3D; geometry and other glTF content are ignored.

    Args:
        data: the .glb bytes

    Returns:
        packed: the packed scene

    Raises:
        ValueError: If the data is not a GLB scene with a single root.
    """

    gltf = _read_document(data)
    nodes = gltf.get("nodes", [])
    scenes = gltf.get("scenes", [])
    scene_index = gltf.get("scene", 0)
    if not 0 <= scene_index < len(scenes):
        raise ValueError("The glTF document has no scene")
    roots = scenes[scene_index].get("nodes", [])
    if len(roots) != 1:
        raise ValueError(f"Expected a single root node, got {len(roots)}")

    packed = PackedScene()
    seen: set[int] = set()
    stack: list[tuple[int, int]] = [(roots[0], -1)]
    while stack:
        node_index, parent = stack.pop()
        if not 0 <= node_index < len(nodes) or node_index in seen:
            raise ValueError(f"Invalid or repeated node index {node_index}")
        seen.add(node_index)

        entry = nodes[node_index]
        extras = entry.get("extras") or {}
        packed.nodes.append(PackedNode(entry.get("name", f"Node{node_index}"),
                                       extras.get("kind", "Node3D"),
                                       parent,
                                       _node_transform(entry),
                                       dict(extras.get("properties", {}))))

        index = len(packed.nodes) - 1
        for child_index in reversed(entry.get("children", [])):
            stack.append((child_index, index))

    return packed
