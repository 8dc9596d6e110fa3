import time
import json
import pathlib
import warnings
import numpy as np
from typing import Union
from pydantic import BaseModel, Field
from .kinds import NodeKindRegistry
from .node import SceneNode
from .transform import Transform

SUPPORTED_VERSION = "nodeTree@1.0"

# ----------------------------------------------------------------------------------------

class TransformSpec(BaseModel):
    translation: list[float] = Field(default_factory=lambda: [0.0, 0.0, 0.0], min_length=3, max_length=3)
    rotation: list[float] = Field(default_factory=lambda: [0.0, 0.0, 0.0, 1.0], min_length=4, max_length=4)
    scale: list[float] = Field(default_factory=lambda: [1.0, 1.0, 1.0], min_length=3, max_length=3)
    data: list[float] | None = Field(default=None, min_length=16, max_length=16)  # column-major 4x4

class NodeSpec(BaseModel):
    name: str
    type: str = "Node3D"
    transform: TransformSpec = Field(default_factory=TransformSpec)
    properties: dict[str, Union[bool, int, float, str]] = Field(default_factory=dict)
    children: list["NodeSpec"] = Field(default_factory=list)

NodeSpec.model_rebuild()

# ----------------------------------------------------------------------------------------

class SceneState:
    def __init__(self, source: pathlib.Path | dict = None) -> None:
        """
        Initialize a node tree state object.

        Args:
            source: the source of the node tree dictionary
        """

        self.raw_json: dict = None
        self.name: str = None
        self.version: str = None
        self.source_path: pathlib.Path | None = None
        self.root: NodeSpec = None

        # Load the node tree dictionary if provided
        if source is not None:
            self.load(source)

    def load(self, source: pathlib.Path | dict) -> None:
        """
        Load a node tree dictionary from a file or a dictionary.

        Args:
            source: the source of the node tree dictionary
        """

        # Load the node tree dictionary
        if isinstance(source, pathlib.Path):
            with open(source, "r") as f:
                state_dict = json.load(f)
            self.name = source.stem
            self.source_path = source
        elif isinstance(source, dict):
            state_dict = source
            self.name = f"node_tree@{time.strftime('%y%m%d-%H%M%S')}"
        else:
            raise TypeError(f"Unsupported source type: {type(source).__name__}")

        self.raw_json = state_dict

        # Verify it is a node tree dictionary
        if state_dict.get("format") != "nodeTree":
            raise ValueError("The format of the dictionary is not 'nodeTree'.")

        scene_spec: dict = state_dict.get("scene", None)
        if scene_spec is None:
            raise ValueError("The dictionary does not contain a 'scene' key.")

        # Check version
        self.version = scene_spec.get("version", None)
        if self.version != SUPPORTED_VERSION:
            warnings.warn(f"This module is developed for {SUPPORTED_VERSION}, but the node tree version is {self.version}.")

        # An explicit scene name wins over the file stem
        if scene_spec.get("name"):
            self.name = scene_spec["name"]

        root_spec: dict = scene_spec.get("root", None)
        if root_spec is None:
            raise ValueError("The scene does not contain a 'root' key.")
        self.root = NodeSpec.model_validate(root_spec)

    def build_tree(self) -> SceneNode:
        """
        Build a fresh node tree from the loaded state.

        Returns:
            root: the root node
        """

        if self.root is None:
            raise ValueError("No node tree loaded.")
        return _build_node(self.root)

# ----------------------------------------------------------------------------------------

def _build_transform(spec: TransformSpec) -> Transform:
    if spec.data is not None:
        return Transform.from_matrix(np.asarray(spec.data, dtype=float).reshape(4, 4).T)
    return Transform(spec.translation, spec.rotation, spec.scale)

def _build_node(spec: NodeSpec) -> SceneNode:
    if not NodeKindRegistry.is_registered(spec.type):
        warnings.warn(f"Node '{spec.name}' has unregistered kind '{spec.type}'; treating it as generic.")

    node = SceneNode(spec.name, spec.type, _build_transform(spec.transform), spec.properties)
    for child_spec in spec.children:
        node.add_child(_build_node(child_spec))
    return node
