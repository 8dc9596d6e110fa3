import pytest
from scenes import SceneNode, NodeKindRegistry, COLLISION_VOLUME, TRIGGER_VOLUME


@pytest.mark.parametrize("kind", ["PhysicsBody3D", "StaticBody3D", "AnimatableBody3D", "RigidBody3D", "CharacterBody3D"])
def test_physics_bodies_are_collision_volumes(kind):
    assert NodeKindRegistry.is_collision_volume(SceneNode("n", kind))


@pytest.mark.parametrize("kind", ["Node3D", "MeshInstance3D", "CollisionShape3D", "CollisionObject3D", "Area3D", "Unknown3D"])
def test_other_kinds_are_not_collision_volumes(kind):
    assert not NodeKindRegistry.is_collision_volume(SceneNode("n", kind))


def test_area_is_trigger_volume():
    assert NodeKindRegistry.is_trigger_volume(SceneNode("n", "Area3D"))
    assert not NodeKindRegistry.is_trigger_volume(SceneNode("n", "StaticBody3D"))


def test_unknown_kind_has_no_capabilities():
    assert not NodeKindRegistry.is_registered("Unknown3D")
    assert NodeKindRegistry.capabilities_of("Unknown3D") == frozenset()


@pytest.fixture
def custom_kinds():
    yield
    NodeKindRegistry.unregister("VehicleBody3D")
    NodeKindRegistry.unregister("Sensor3D")


def test_registered_kind_inherits_capabilities(custom_kinds):
    NodeKindRegistry.register("VehicleBody3D", base="RigidBody3D")
    NodeKindRegistry.register("Sensor3D", base="Node3D", capabilities=(TRIGGER_VOLUME,))

    assert NodeKindRegistry.has_capability("VehicleBody3D", COLLISION_VOLUME)
    assert NodeKindRegistry.capabilities_of("Sensor3D") == frozenset({TRIGGER_VOLUME})


def test_register_with_unknown_base_raises():
    with pytest.raises(KeyError):
        NodeKindRegistry.register("Orphan3D", base="Missing3D")
    assert not NodeKindRegistry.is_registered("Orphan3D")
