import os
import logging
import pathlib
from dataclasses import dataclass, field
from typing import Callable
from scenes import SceneNode, ImportConfig
from triggers import TriggerReplacer
from persistence import SceneSaver, SaveOutcome

logger = logging.getLogger(__name__)

# ----------------------------------------------------------------------------------------

@dataclass
class ImportResult:
    """
    Result of post-processing one imported scene.

    Attributes:
        root: the processed root node, always handed back to the caller
        replaced_count: the number of collision volumes turned into trigger volumes
        warnings: the per-node warnings of the replacement, in traversal order
        no_matches: whether nothing was replaced
        source_path: the resolved source path, None if not resolved
        save: the save outcome, None if saving was skipped
    """

    root: SceneNode
    replaced_count: int = 0
    warnings: list[str] = field(default_factory=list)
    no_matches: bool = False
    source_path: pathlib.Path | None = None
    save: SaveOutcome | None = None

    @property
    def saved_path(self) -> pathlib.Path | None:
        if self.save is None or not self.save.ok:
            return None
        return self.save.saved_path

# ----------------------------------------------------------------------------------------

class PostImportProcessor:
    def __init__(self,
                 cfg: ImportConfig,
                 replacer: TriggerReplacer | None = None,
                 saver: SceneSaver | None = None) -> None:
        """
        Initialize the post-import processor.

        Args:
            cfg: the import configuration
            replacer: the replacer to use, built from the configuration if None
            saver: the saver to use, built from the configuration if None
        """

        self.cfg = cfg
        self.replacer = replacer if replacer is not None else TriggerReplacer(cfg)
        self.saver = saver if saver is not None else SceneSaver(cfg)

    def process(self,
                root: SceneNode,
                source_resolver: Callable[[], str | os.PathLike | None] | None = None) -> ImportResult:
        """
        Convert tagged collision volumes, then save the scene next to its source.

        Failures are logged and never raised; the root is always returned.

        Args:
            root: the root of the imported tree
            source_resolver: callable returning the source file path of the import

        Returns:
            result: the processed root and what happened to it
        """

        if root is None:
            raise ValueError("No scene root to process.")

        # Replace collision volumes
        replace_result = self.replacer.run(root)
        result = ImportResult(root=replace_result.root,
                              replaced_count=replace_result.replaced_count,
                              warnings=list(replace_result.warnings),
                              no_matches=replace_result.replaced_count == 0)

        for warning in replace_result.warnings:
            logger.warning(warning)
        if result.no_matches:
            logger.warning(f"No collision volumes with suffix '{self.cfg.hint_tag}' found in '{root.name}'.")

        for path in replace_result.replaced_paths:
            self._debug(f"Replaced '{path}' with {self.cfg.trigger_kind}")
        self._debug(f"Replaced {result.replaced_count} node(s) in '{root.name}':\n{root.format_tree()}")

        if not self.cfg.save_enabled:
            return result

        # Resolve where the scene came from
        try:
            source_path = source_resolver() if source_resolver is not None else None
        except Exception as e:
            logger.error(f"Could not resolve the source path of '{root.name}': {e}")
            return result
        if source_path is None:
            logger.error(f"Could not resolve the source path of '{root.name}'; not saving.")
            return result
        result.source_path = pathlib.Path(source_path)

        # Save
        result.save = self.saver.save(root, root.name, source_path)
        self._report_save(root.name, result.save)

        return result

    def _debug(self, message: str) -> None:
        if self.cfg.debug_mode:
            logger.debug(message)

    def _report_save(self, scene_name: str, outcome: SaveOutcome) -> None:
        if outcome.saved_path is not None:
            self._debug(f"Saving '{scene_name}' to {outcome.saved_path}")
        if outcome.directory_created:
            self._debug(f"Created directory {outcome.saved_path.parent}")
        if outcome.directory_error is not None:
            logger.error(str(outcome.directory_error))

        error = outcome.error
        if error is not None and error.step == "resolve":
            logger.error(f"Not saving '{scene_name}': {error}")
            return

        if outcome.packed:
            logger.info(f"Packed scene '{scene_name}'.")
        elif error is not None:
            logger.error(f"Failed to pack scene '{scene_name}' (error {error.code.name}): {error}")
            return

        if outcome.written:
            logger.info(f"Saved scene '{scene_name}' to {outcome.saved_path}")
        elif error is not None:
            logger.error(f"Failed to save scene '{scene_name}' (error {error.code.name}): {error}")
