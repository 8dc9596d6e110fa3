import contextlib
import os
import logging
import pathlib
from dataclasses import dataclass
from scenes import SceneNode, ImportConfig
from . import glb, tscn
from .errors import (
    ErrorCode,
    SaveError,
    InvalidSourcePath,
    InvalidSceneName,
    DirectoryCreateFailed,
    WriteFailed,
)
from .packer import pack_scene, unpack_scene

logger = logging.getLogger(__name__)

# ----------------------------------------------------------------------------------------

@dataclass
class SaveOutcome:
    """
    Outcome of saving a scene, one field per step.

    Attributes:
        saved_path: the destination path, None if it could not be derived
        directory_created: whether the destination directory had to be created
        directory_error: the directory creation failure, if any (saving went on)
        packed: whether packing succeeded
        written: whether the file was written
        error: the failure that stopped the save, if any
    """

    saved_path: pathlib.Path | None = None
    directory_created: bool = False
    directory_error: DirectoryCreateFailed | None = None
    packed: bool = False
    written: bool = False
    error: SaveError | None = None

    @property
    def ok(self) -> bool:
        return self.written and self.error is None

# ----------------------------------------------------------------------------------------

class SceneSaver:
    def __init__(self, cfg: ImportConfig) -> None:
        """
        Initialize the scene saver.

        Args:
            cfg: the import configuration, selects the scene file format
        """

        self.cfg = cfg

    def resolve_path(self, scene_name: str, source_path: str | os.PathLike) -> pathlib.Path:
        """
        Derive the scene file path next to the source file.

        Args:
            scene_name: the display name of the scene, used as file name
            source_path: the path of the imported source file

        Returns:
            saved_path: <source directory>/<scene name><extension>

        Raises:
            InvalidSourcePath: If the source path is empty.
            InvalidSceneName: If the scene name is empty or not a plain file name.
        """

        if source_path is None or not os.fspath(source_path):
            raise InvalidSourcePath()
        if not scene_name:
            raise InvalidSceneName()
        if scene_name in (".", "..") or any(sep in scene_name for sep in ("/", "\\")) \
                or pathlib.Path(scene_name).name != scene_name:
            raise InvalidSceneName(f"Scene name {scene_name!r} is not a plain file name.")

        return pathlib.Path(source_path).parent / f"{scene_name}{self.cfg.scene_extension}"

    def ensure_directory(self, directory: pathlib.Path) -> bool:
        """
        Make sure a directory exists, creating it and its parents if needed.

        Relative paths are created relative to the current working directory.

        Args:
            directory: the directory

        Returns:
            created: whether the directory had to be created

        Raises:
            DirectoryCreateFailed: If the directory could not be created.
        """

        if directory.is_dir():
            return False
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DirectoryCreateFailed(f"Cannot create directory '{directory}': {e}",
                                        ErrorCode.CANT_CREATE) from e
        logger.debug(f"Created directory {directory}")
        return True

    def pack(self, root: SceneNode) -> bytes:
        """
        Pack a node tree and encode it in the configured scene format.

        Args:
            root: the root of the tree

        Returns:
            data: the encoded scene

        Raises:
            PackFailed: If the tree cannot be packed or encoded.
        """

        packed = pack_scene(root)
        if self.cfg.save_as_tscn:
            return tscn.dumps(packed).encode("utf-8")
        return glb.dumps(packed)

    def write(self, data: bytes, saved_path: pathlib.Path) -> None:
        """
        Write encoded scene data, replacing any existing file in one step.

        Args:
            data: the encoded scene
            saved_path: the destination path

        Raises:
            WriteFailed: If the file could not be written. No partial file is left.
        """

        tmp_path = saved_path.with_name(f".{saved_path.name}.{os.getpid()}.tmp")
        try:
            with open(tmp_path, "wb") as f:
                f.write(data)
            os.replace(tmp_path, saved_path)
        except OSError as e:
            with contextlib.suppress(OSError):
                tmp_path.unlink()
            raise WriteFailed(f"Cannot write '{saved_path}': {e}", ErrorCode.from_os_error(e)) from e

    def save(self, root: SceneNode, scene_name: str, source_path: str | os.PathLike) -> SaveOutcome:
        """
        Save a node tree next to its source file.

        Every step is attempted at most once. A failed directory creation is
        recorded and saving goes on; any other failure stops the save and is
        recorded on the outcome.

        Args:
            root: the root of the tree, not modified
            scene_name: the display name of the scene
            source_path: the path of the imported source file

        Returns:
            outcome: the outcome of each step
        """

        outcome = SaveOutcome()
        try:
            outcome.saved_path = self.resolve_path(scene_name, source_path)

            try:
                outcome.directory_created = self.ensure_directory(outcome.saved_path.parent)
            except DirectoryCreateFailed as e:
                outcome.directory_error = e

            data = self.pack(root)
            outcome.packed = True

            self.write(data, outcome.saved_path)
            outcome.written = True
        except SaveError as e:
            outcome.error = e

        return outcome

# ----------------------------------------------------------------------------------------

def load_scene(path: str | os.PathLike) -> SceneNode:
    """
    Load a saved scene file back into a node tree.

    Args:
        path: the .tscn or .glb file

    Returns:
        root: the root of the loaded tree
    """

    path = pathlib.Path(path)
    if path.suffix == ".tscn":
        with open(path, "r", encoding="utf-8") as f:
            return unpack_scene(tscn.loads(f.read()))
    if path.suffix == ".glb":
        with open(path, "rb") as f:
            return unpack_scene(glb.loads(f.read()))
    raise ValueError(f"Only .tscn and .glb scenes can be loaded, got '{path.name}'")
