import pytest
from scenes import SceneNode, Transform

# 45 degrees about z
ROTATION_Z_45 = [0.0, 0.0, 0.3826834323650898, 0.9238795325112867]


def make_cube_tree(collision_kind: str = "StaticBody3D") -> SceneNode:
    """Root -> Cube (mesh) -> Cube_CM (collision_kind)."""
    root = SceneNode("Root")
    cube = root.add_child(SceneNode("Cube", "MeshInstance3D", Transform([0.0, 1.0, 0.0])))
    cube.add_child(SceneNode("Cube_CM", collision_kind, Transform([0.0, 0.5, 0.0], ROTATION_Z_45, [2.0, 1.0, 2.0])))
    return root


@pytest.fixture
def cube_tree() -> SceneNode:
    return make_cube_tree()


@pytest.fixture
def mesh_cube_tree() -> SceneNode:
    return make_cube_tree("MeshInstance3D")
