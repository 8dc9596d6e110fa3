import numpy as np
import pytest
from scenes import SceneNode, Transform
from persistence import ErrorCode, PackFailed, pack_scene, unpack_scene


def test_pack_is_pre_order_with_parent_indices(cube_tree):
    cube_tree.add_child(SceneNode("Lamp", "MeshInstance3D"))

    packed = pack_scene(cube_tree)

    assert [node.name for node in packed.nodes] == ["Root", "Cube", "Cube_CM", "Lamp"]
    assert [node.parent for node in packed.nodes] == [-1, 0, 1, 0]
    assert [packed.node_path(i) for i in range(4)] == [".", "Cube", "Cube/Cube_CM", "Lamp"]


def test_pack_copies_transforms_and_properties():
    root = SceneNode("Root", properties={"layer": 2})
    packed = pack_scene(root)

    packed.nodes[0].transform.translation[0] = 5.0
    packed.nodes[0].properties["layer"] = 3

    assert root.transform == Transform()
    assert root.properties == {"layer": 2}


def test_duplicate_sibling_names_are_made_unique_in_packed_scene_only():
    root = SceneNode("Root")
    for name in ("Cube", "Cube", "Cube2"):
        root.add_child(SceneNode(name))

    packed = pack_scene(root)

    assert [node.name for node in packed.nodes[1:]] == ["Cube", "Cube3", "Cube2"]
    assert [child.name for child in root.children] == ["Cube", "Cube", "Cube2"]


@pytest.mark.parametrize("name", ["", ".", "..", "a/b", "a:b", 'a"b', "a@b", "a%b"])
def test_invalid_names_fail(name):
    root = SceneNode("Root")
    root.add_child(SceneNode(name))

    with pytest.raises(PackFailed) as info:
        pack_scene(root)
    assert info.value.code == ErrorCode.INVALID_NAME


def test_dotted_names_pack():
    root = SceneNode("Root")
    root.add_child(SceneNode("Cube.001"))

    assert pack_scene(root).nodes[1].name == "Cube.001"


def test_cycle_fails():
    root = SceneNode("Root")
    root.children.append(root)

    with pytest.raises(PackFailed) as info:
        pack_scene(root)
    assert info.value.code == ErrorCode.CYCLIC_LINK


def test_non_finite_transform_fails():
    root = SceneNode("Root")
    root.add_child(SceneNode("Bad", transform=Transform([np.nan, 0.0, 0.0])))

    with pytest.raises(PackFailed) as info:
        pack_scene(root)
    assert info.value.code == ErrorCode.INVALID_DATA


@pytest.mark.parametrize("value", [[1, 2], {"a": 1}, None, float("inf")])
def test_unsupported_property_fails(value):
    root = SceneNode("Root", properties={"value": value})

    with pytest.raises(PackFailed) as info:
        pack_scene(root)
    assert info.value.code == ErrorCode.INVALID_DATA


def test_missing_root_fails():
    with pytest.raises(PackFailed):
        pack_scene(None)


def test_unpack_rebuilds_tree(cube_tree):
    rebuilt = unpack_scene(pack_scene(cube_tree))

    assert [(n.get_path(), n.kind) for n in rebuilt.walk()] == [(n.get_path(), n.kind) for n in cube_tree.walk()]
    assert rebuilt.find_node("Cube/Cube_CM").transform == cube_tree.find_node("Cube/Cube_CM").transform
    assert rebuilt is not cube_tree


def test_unpack_rejects_bad_parents(cube_tree):
    packed = pack_scene(cube_tree)
    packed.nodes[1].parent = 2

    with pytest.raises(ValueError):
        unpack_scene(packed)
