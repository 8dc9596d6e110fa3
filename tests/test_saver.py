import os
import errno
import pytest
from scenes import SceneNode, ImportConfig
from persistence import (
    ErrorCode,
    InvalidSourcePath,
    InvalidSceneName,
    DirectoryCreateFailed,
    PackFailed,
    WriteFailed,
    SceneSaver,
    load_scene,
)


def _files(directory):
    return sorted(p.name for p in directory.rglob("*"))


def test_resolve_path_uses_source_directory(tmp_path):
    source = tmp_path / "models" / "level.glb"

    assert SceneSaver(ImportConfig()).resolve_path("Level", source) == tmp_path / "models" / "Level.tscn"
    assert SceneSaver(ImportConfig(save_as_tscn=False)).resolve_path("Level", str(source)) == tmp_path / "models" / "Level.glb"


@pytest.mark.parametrize("source_path", ["", None])
def test_empty_source_path_writes_nothing(tmp_path, cube_tree, source_path):
    outcome = SceneSaver(ImportConfig()).save(cube_tree, "Level", source_path)

    assert isinstance(outcome.error, InvalidSourcePath)
    assert outcome.saved_path is None
    assert not outcome.packed and not outcome.written and not outcome.ok
    assert _files(tmp_path) == []


def test_empty_scene_name_writes_nothing(tmp_path, cube_tree):
    outcome = SceneSaver(ImportConfig()).save(cube_tree, "", tmp_path / "level.json")

    assert isinstance(outcome.error, InvalidSceneName)
    assert _files(tmp_path) == []


def test_save_and_load_round_trip(tmp_path, cube_tree):
    outcome = SceneSaver(ImportConfig()).save(cube_tree, "Level", tmp_path / "level.json")

    assert outcome.ok
    assert outcome.packed and outcome.written
    assert not outcome.directory_created
    assert outcome.saved_path == tmp_path / "Level.tscn"
    assert _files(tmp_path) == ["Level.tscn"]

    loaded = load_scene(outcome.saved_path)
    assert [(n.get_path(), n.kind) for n in loaded.walk()] == [(n.get_path(), n.kind) for n in cube_tree.walk()]
    assert loaded.find_node("Cube/Cube_CM").transform.is_close(cube_tree.find_node("Cube/Cube_CM").transform)


def test_missing_directory_is_created(tmp_path, cube_tree):
    source = tmp_path / "new" / "deep" / "level.json"

    outcome = SceneSaver(ImportConfig()).save(cube_tree, "Level", source)

    assert outcome.ok
    assert outcome.directory_created
    assert (tmp_path / "new" / "deep" / "Level.tscn").is_file()


def test_relative_directory_is_created_under_cwd(tmp_path, monkeypatch, cube_tree):
    monkeypatch.chdir(tmp_path)

    outcome = SceneSaver(ImportConfig()).save(cube_tree, "Level", "imports/level.json")

    assert outcome.ok
    assert (tmp_path / "imports" / "Level.tscn").is_file()


def test_uncreatable_directory_is_reported_and_write_fails(tmp_path, cube_tree):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")

    outcome = SceneSaver(ImportConfig()).save(cube_tree, "Level", blocker / "sub" / "level.json")

    assert isinstance(outcome.directory_error, DirectoryCreateFailed)
    assert outcome.directory_error.code == ErrorCode.CANT_CREATE
    assert outcome.packed
    assert isinstance(outcome.error, WriteFailed)
    assert not outcome.written
    assert not (blocker / "sub" / "Level.tscn").exists()
    assert _files(tmp_path) == ["blocker"]


def test_pack_failure_skips_write(tmp_path):
    root = SceneNode("Level")
    root.add_child(SceneNode("bad/name"))

    outcome = SceneSaver(ImportConfig()).save(root, "Level", tmp_path / "level.json")

    assert isinstance(outcome.error, PackFailed)
    assert outcome.error.code == ErrorCode.INVALID_NAME
    assert not outcome.packed and not outcome.written
    assert _files(tmp_path) == []


def test_write_failure_leaves_no_partial_file(tmp_path, monkeypatch, cube_tree):
    def _deny(src, dst):
        raise PermissionError(errno.EACCES, "Permission denied", str(dst))

    monkeypatch.setattr(os, "replace", _deny)

    outcome = SceneSaver(ImportConfig()).save(cube_tree, "Level", tmp_path / "level.json")

    assert outcome.packed
    assert isinstance(outcome.error, WriteFailed)
    assert outcome.error.code == ErrorCode.NO_PERMISSION
    assert _files(tmp_path) == []


def test_last_writer_wins(tmp_path):
    saver = SceneSaver(ImportConfig())
    saver.save(SceneNode("Level", "Node3D"), "Level", tmp_path / "level.json")
    saver.save(SceneNode("Level", "Area3D"), "Level", tmp_path / "level.json")

    assert load_scene(tmp_path / "Level.tscn").kind == "Area3D"
    assert _files(tmp_path) == ["Level.tscn"]


def test_binary_scene(tmp_path, cube_tree):
    cube_tree.find_node("Cube").properties["visible"] = False
    outcome = SceneSaver(ImportConfig(save_as_tscn=False)).save(cube_tree, "Level", tmp_path / "level.json")

    assert outcome.ok
    assert outcome.saved_path == tmp_path / "Level.glb"
    assert outcome.saved_path.read_bytes()[:4] == b"glTF"
    assert _files(tmp_path) == ["Level.glb"]

    loaded = load_scene(outcome.saved_path)
    assert [(n.get_path(), n.kind) for n in loaded.walk()] == [(n.get_path(), n.kind) for n in cube_tree.walk()]
    assert loaded.find_node("Cube").properties == {"visible": False}
    assert loaded.find_node("Cube/Cube_CM").transform.is_close(cube_tree.find_node("Cube/Cube_CM").transform)


@pytest.mark.parametrize("scene_name", ["sub/Level", "../escaped", "..", ".", "a\\b"])
def test_scene_name_with_path_parts_writes_nothing(tmp_path, cube_tree, scene_name):
    source = tmp_path / "a" / "level.json"
    source.parent.mkdir()

    outcome = SceneSaver(ImportConfig()).save(cube_tree, scene_name, source)

    assert isinstance(outcome.error, InvalidSceneName)
    assert outcome.error.code == ErrorCode.INVALID_NAME
    assert outcome.saved_path is None
    assert not outcome.directory_created and not outcome.written
    assert _files(tmp_path) == ["a"]


def test_load_scene_rejects_other_formats(tmp_path):
    with pytest.raises(ValueError):
        load_scene(tmp_path / "Level.obj")
