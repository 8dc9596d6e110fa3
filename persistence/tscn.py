"""
Text scene (.tscn) encoding of packed scenes.

The layout follows the Godot 4 text scene format: a [gd_scene] header followed
by one [node] section per node, parents before children, each with its
properties as `key = value` lines. The transform is written as a Transform3D
with the basis in row-major order followed by the origin.
"""

import re
import math
import numpy as np
from typing import Any
from scenes import Transform
from .errors import ErrorCode, PackFailed
from .packer import PackedNode, PackedScene

FORMAT_VERSION = 3

_SECTION_RE = re.compile(r'^\[(\w+)((?:\s+\w+=(?:"(?:[^"\\]|\\.)*"|[^\s\]]+))*)\s*\]$')
_ATTRIBUTE_RE = re.compile(r'(\w+)=("(?:[^"\\]|\\.)*"|[^\s\]]+)')
_PROPERTY_RE = re.compile(r'^(\w+)\s*=\s*(.+)$')
_TRANSFORM_RE = re.compile(r'^Transform3D\((.*)\)$')
_INT_RE = re.compile(r'^[-+]?\d+$')

_ESCAPES = {"\\": "\\\\", '"': '\\"', "\n": "\\n", "\t": "\\t", "\r": "\\r"}
_UNESCAPES = {v[1]: k for k, v in _ESCAPES.items()}

# ----------------------------------------------------------------------------------------

def _quote(text: str) -> str:
    return '"' + "".join(_ESCAPES.get(c, c) for c in text) + '"'

def _unquote(text: str) -> str:
    if len(text) < 2 or text[0] != '"' or text[-1] != '"':
        raise ValueError(f"Not a quoted string: {text}")
    return re.sub(r'\\(.)', lambda m: _UNESCAPES.get(m.group(1), m.group(1)), text[1:-1])

def _format_float(value: float) -> str:
    value = float(value)
    if not math.isfinite(value):
        raise PackFailed(f"Cannot encode non-finite value {value}.", ErrorCode.ENCODE_FAILED)
    return repr(value)

def _encode_value(value: Any) -> str:
    # bool before int, bool is an int subclass
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return _format_float(value)
    if isinstance(value, str):
        return _quote(value)
    raise PackFailed(f"Cannot encode value of type {type(value).__name__}.", ErrorCode.ENCODE_FAILED)

def _encode_transform(transform: Transform) -> str:
    matrix = transform.matrix
    values = list(matrix[:3, :3].flatten()) + list(matrix[:3, 3])
    return "Transform3D(" + ", ".join(_format_float(v) for v in values) + ")"

def _decode_value(text: str) -> Any:
    text = text.strip()
    if text == "true":
        return True
    if text == "false":
        return False
    if text.startswith('"'):
        return _unquote(text)
    if _INT_RE.match(text):
        return int(text)
    try:
        return float(text)
    except ValueError:
        # Unknown value types are kept verbatim
        return text

def _decode_transform(text: str) -> Transform:
    match = _TRANSFORM_RE.match(text.strip())
    if match is None:
        raise ValueError(f"Not a Transform3D: {text}")
    values = [float(v) for v in match.group(1).split(",")]
    if len(values) != 12:
        raise ValueError(f"Transform3D needs 12 values, got {len(values)}")
    matrix = np.eye(4)
    matrix[:3, :3] = np.asarray(values[:9]).reshape(3, 3)
    matrix[:3, 3] = values[9:]
    return Transform.from_matrix(matrix)

# ----------------------------------------------------------------------------------------

def dumps(packed: PackedScene) -> str:
    """
    Encode a packed scene as text.

    Args:
        packed: the packed scene

    Returns:
        text: the scene text

    Raises:
        PackFailed: If a value cannot be encoded.
    """

    if not packed.nodes:
        raise PackFailed("The packed scene has no nodes.", ErrorCode.INVALID_DATA)

    lines = [f"[gd_scene format={FORMAT_VERSION}]"]
    identity = Transform()
    for node in packed.nodes:
        header = f"[node name={_quote(node.name)} type={_quote(node.kind)}"
        if node.parent != -1:
            header += f" parent={_quote(packed.node_path(node.parent))}"
        lines += ["", header + "]"]

        if node.transform != identity:
            lines.append(f"transform = {_encode_transform(node.transform)}")
        for key, value in node.properties.items():
            if not re.match(r'^\w+$', key) or key == "transform":
                raise PackFailed(f"Invalid property name {key!r} on node '{node.name}'.", ErrorCode.INVALID_NAME)
            lines.append(f"{key} = {_encode_value(value)}")

    return "\n".join(lines) + "\n"

def loads(text: str) -> PackedScene:
    """
    Decode scene text into a packed scene.

    Args:
        text: the scene text

    Returns:
        packed: the packed scene

    Raises:
        ValueError: If the text is not a valid scene.
    """

    packed = PackedScene()
    paths: dict[str, int] = {}
    current: PackedNode | None = None
    has_header = False

    for line_number, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip()
        if not line or line.startswith(";"):
            continue

        section = _SECTION_RE.match(line)
        if section is not None:
            tag = section.group(1)
            attributes = {key: value for key, value in _ATTRIBUTE_RE.findall(section.group(2))}

            if tag == "gd_scene":
                has_header = True
                current = None
                continue
            if tag != "node":
                # Resources and connections are not part of a node tree
                current = None
                continue
            if not has_header:
                raise ValueError(f"Line {line_number}: node section before the [gd_scene] header")

            if "name" not in attributes:
                raise ValueError(f"Line {line_number}: node section without a name")
            name = _unquote(attributes["name"])
            kind = _unquote(attributes.get("type", '"Node3D"'))
            if "parent" in attributes:
                parent_path = _unquote(attributes["parent"])
                if parent_path not in paths:
                    raise ValueError(f"Line {line_number}: unknown parent '{parent_path}' of node '{name}'")
                parent = paths[parent_path]
                path = name if parent_path == "." else f"{parent_path}/{name}"
            else:
                if packed.nodes:
                    raise ValueError(f"Line {line_number}: second root node '{name}'")
                parent = -1
                path = "."

            current = PackedNode(name, kind, parent, Transform())
            paths[path] = len(packed.nodes)
            packed.nodes.append(current)
            continue

        prop = _PROPERTY_RE.match(line)
        if prop is None:
            raise ValueError(f"Line {line_number}: cannot parse '{line}'")
        if current is None:
            continue

        key, value = prop.group(1), prop.group(2)
        if key == "transform":
            current.transform = _decode_transform(value)
        else:
            current.properties[key] = _decode_value(value)

    if not has_header:
        raise ValueError("Missing [gd_scene] header")
    if not packed.nodes:
        raise ValueError("The scene has no nodes")
    return packed
