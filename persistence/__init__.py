from .errors import (
    ErrorCode,
    SaveError,
    InvalidSourcePath,
    InvalidSceneName,
    DirectoryCreateFailed,
    PackFailed,
    WriteFailed,
)
from .packer import PackedNode, PackedScene, pack_scene, unpack_scene
from .saver import SaveOutcome, SceneSaver, load_scene

__all__ = [
    "ErrorCode",
    "SaveError",
    "InvalidSourcePath",
    "InvalidSceneName",
    "DirectoryCreateFailed",
    "PackFailed",
    "WriteFailed",
    "PackedNode",
    "PackedScene",
    "pack_scene",
    "unpack_scene",
    "SaveOutcome",
    "SceneSaver",
    "load_scene",
]
