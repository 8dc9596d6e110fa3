import logging
import pathlib
import hydra
from natsort import natsorted
from tqdm import tqdm
from dataclasses import dataclass
from omegaconf import DictConfig, OmegaConf

from scenes import SceneState, ImportConfig
from pipeline import ImportLoggingContext, ImportResult, PostImportProcessor

logger = logging.getLogger(__name__)

# ========================================================================================

@dataclass
class InputConfig:
    root_dir: str
    scene_mode: str = "all"
    scene_list: list[str] | None = None
    log_file: str | None = None

@dataclass
class BatchSummary:
    files: int = 0
    load_failures: int = 0
    replaced: int = 0
    no_matches: int = 0
    saved: int = 0
    save_failures: int = 0

    def add(self, result: ImportResult) -> None:
        self.replaced += result.replaced_count
        self.no_matches += int(result.no_matches)
        if result.save is not None:
            if result.save.ok:
                self.saved += 1
            else:
                self.save_failures += 1

# ========================================================================================

def _fetch_node_tree_files(input_cfg: InputConfig) -> list[pathlib.Path]:
    """
    Fetch the node tree files to process.

    Args:
        input_cfg: the input configuration

    Returns:
        files: the node tree files, in natural order
    """

    root_dir = pathlib.Path(input_cfg.root_dir).expanduser()
    files = natsorted(list(root_dir.glob("*.json")))

    match input_cfg.scene_mode:
        case "all":
            return files
        case "list":
            wanted = set(input_cfg.scene_list or [])
            return [f for f in files if f.stem in wanted]
        case _:
            raise ValueError(f"Unknown scene mode: {input_cfg.scene_mode}")

def process_file(processor: PostImportProcessor, node_tree_file: pathlib.Path) -> ImportResult | None:
    """
    Load one node tree file and post-process it as an import of that file.

    Args:
        processor: the post-import processor
        node_tree_file: the node tree file

    Returns:
        result: the import result, None if the file could not be loaded
    """

    try:
        scene_state = SceneState(node_tree_file)
        root = scene_state.build_tree()
    except Exception as e:
        logger.error(f"Error loading node tree: {node_tree_file} - error: {e}")
        return None

    # The scene is named after the state, not after whatever the root node is called
    root.name = scene_state.name
    return processor.process(root, lambda: node_tree_file)

# ========================================================================================

@hydra.main(version_base=None, config_path="configs", config_name="config")
def main(cfg: DictConfig) -> None:

    import_cfg = ImportConfig(**OmegaConf.to_container(cfg.import_cfg, resolve=True))
    input_cfg = InputConfig(**OmegaConf.to_container(cfg.input, resolve=True))
    log_file = pathlib.Path(input_cfg.log_file) if input_cfg.log_file else None

    with ImportLoggingContext(debug_mode=import_cfg.debug_mode, log_file_path=log_file):

        node_tree_files = _fetch_node_tree_files(input_cfg)
        logger.info(f"Processing {len(node_tree_files)} node tree file(s) from {input_cfg.root_dir}")

        processor = PostImportProcessor(import_cfg)
        summary = BatchSummary()
        for node_tree_file in tqdm(node_tree_files, desc="Importing", unit="scene"):
            summary.files += 1
            result = process_file(processor, node_tree_file)
            if result is None:
                summary.load_failures += 1
                continue
            summary.add(result)

        logger.info(
            f"Done. files: {summary.files}, load failures: {summary.load_failures}, "
            f"replaced: {summary.replaced}, without matches: {summary.no_matches}, "
            f"saved: {summary.saved}, save failures: {summary.save_failures}"
        )

if __name__ == "__main__":
    main()
