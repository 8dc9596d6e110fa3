import logging
from dataclasses import dataclass, field
from typing import Callable
from scenes import SceneNode, NodeKindRegistry, ImportConfig

logger = logging.getLogger(__name__)

# ----------------------------------------------------------------------------------------

@dataclass
class ReplaceResult:
    """
    Result of converting collision volumes into trigger volumes.

    Attributes:
        root: the (mutated) root node
        replaced_count: the number of nodes replaced
        warnings: one message per tagged node that is not a collision volume, in traversal order
        replaced_paths: the node paths of the replacements, in traversal order
    """

    root: SceneNode
    replaced_count: int = 0
    warnings: list[str] = field(default_factory=list)
    replaced_paths: list[str] = field(default_factory=list)

# ----------------------------------------------------------------------------------------

def replace_collision_volumes(root: SceneNode,
                              tag: str,
                              is_collision_volume: Callable[[SceneNode], bool] = NodeKindRegistry.is_collision_volume,
                              keep_children: bool = True,
                              trigger_kind: str = "Area3D") -> ReplaceResult:
    """
    Replace every tagged collision volume below the root with a trigger volume.

    The walk is depth first over a snapshot of each child list, so a replacement
    never changes which siblings are visited. The replacement keeps the name, a
    copy of the transform and the slot of the original, and the walk continues
    into it. The root itself is never replaced. An empty tag matches every name.

    Args:
        root: the root of the tree
        tag: the name suffix marking candidates
        is_collision_volume: classifier deciding whether a node is a collision volume
        keep_children: whether children of a replaced node move to its replacement
        trigger_kind: the kind of the replacement nodes

    Returns:
        result: the root, the number of replacements and the warnings
    """

    if root is None:
        raise ValueError("Cannot replace collision volumes in a missing tree.")

    result = ReplaceResult(root=root)

    def _visit(node: SceneNode) -> None:
        for index, child in enumerate(list(node.children)):
            current = child
            if child.name.endswith(tag):
                if is_collision_volume(child):
                    current = SceneNode(child.name, trigger_kind, child.transform.copy())
                    node.replace_child_at(index, current, keep_children=keep_children)
                    result.replaced_count += 1
                    result.replaced_paths.append(current.get_path())
                else:
                    result.warnings.append(
                        f"'{child.name}' matches tag '{tag}' but is not a collision volume (kind: {child.kind})"
                    )
            _visit(current)

    _visit(root)
    return result

# ----------------------------------------------------------------------------------------

class TriggerReplacer:
    """
    Converts tagged collision volumes according to an import configuration.
    """

    def __init__(self,
                 cfg: ImportConfig,
                 is_collision_volume: Callable[[SceneNode], bool] = NodeKindRegistry.is_collision_volume) -> None:
        """
        Initialize the replacer.

        Args:
            cfg: the import configuration
            is_collision_volume: classifier deciding whether a node is a collision volume

        Raises:
            ValueError: If the classifier takes the trigger kind for a collision volume.
        """

        # Replacements must never be candidates themselves
        trigger = SceneNode(cfg.hint_tag, cfg.trigger_kind)
        if is_collision_volume(trigger):
            raise ValueError(f"Trigger kind '{cfg.trigger_kind}' is classified as a collision volume.")
        if not NodeKindRegistry.is_trigger_volume(trigger):
            logger.warning(f"'{cfg.trigger_kind}' is not a registered trigger volume kind.")

        self.cfg = cfg
        self.is_collision_volume = is_collision_volume

    def run(self, root: SceneNode) -> ReplaceResult:
        return replace_collision_volumes(root,
                                         self.cfg.hint_tag,
                                         is_collision_volume=self.is_collision_volume,
                                         keep_children=self.cfg.keep_children,
                                         trigger_kind=self.cfg.trigger_kind)
