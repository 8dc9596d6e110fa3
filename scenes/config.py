from dataclasses import dataclass

@dataclass
class ImportConfig:
    """
    Configuration for post-processing an imported scene.

    Attributes:
        hint_tag: the name suffix marking nodes to convert into trigger volumes
        save_as_tscn: whether to save a text scene (.tscn) rather than a binary glTF (.glb)
        debug_mode: whether to log the per-replacement trace and the resolved save path
        save_enabled: whether to save the processed scene next to its source file
        keep_children: whether children of a replaced node move to its replacement
        trigger_kind: the node kind created in place of a collision volume
    """

    hint_tag: str = "_CM"
    save_as_tscn: bool = True
    debug_mode: bool = True
    save_enabled: bool = True
    keep_children: bool = True
    trigger_kind: str = "Area3D"

    @property
    def scene_extension(self) -> str:
        return ".tscn" if self.save_as_tscn else ".glb"
