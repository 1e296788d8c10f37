import pytest

from t3dupgrade.t3dobject import T3DObject
from t3dupgrade.upgraders import (
    ActorUpgrader,
    GenericUpgrader,
    NoteUpgrader,
    PrefabInstanceUpgrader,
    UpgradeError,
    Upgrader,
    VolumeUpgrader,
)
from t3dupgrade.utils import (
    Rotator,
    Vector,
    parse_vector,
    rotator_to_ue4,
    write_rotator,
    write_vector,
)


def _actor(class_name="Actor", name="Act_0", props=(), subs=()):
    obj = T3DObject(type="Actor", class_name=class_name, name=name, sub_objects=list(subs))
    obj.properties.extend(props)
    return obj


def _component(name="", obj_name="", props=(), class_name="SceneComponent", type_="Object"):
    obj = T3DObject(type=type_, class_name=class_name, name=name, obj_name=obj_name)
    obj.properties.extend(props)
    return obj


def test_base_upgrader_is_abstract():
    with pytest.raises(TypeError):
        Upgrader()


def test_actor_upgrader_adds_label():
    obj = _actor(name="Thing_4")
    ActorUpgrader().upgrade(obj)
    assert obj.properties.find("ActorLabel") == '"Thing_4"'


def test_convert_transform_defaults():
    upgrader = ActorUpgrader()
    assert upgrader.convert_transform(_actor()) == (Vector(), Rotator(), Vector(1.0, 1.0, 1.0))


def test_convert_transform_reads_and_removes_keys():
    obj = _actor(
        props=[
            ("Location", "(X=1.0,Y=2.0,Z=3.0)"),
            ("Rotation", "(Pitch=16384,Yaw=0,Roll=0)"),
            ("DrawScale3D", "(X=1.0,Y=2.0,Z=3.0)"),
            ("DrawScale", "2.0"),
            ("Other", "kept"),
        ]
    )
    location, rotation, scale = ActorUpgrader().convert_transform(obj)
    assert location == Vector(1.0, 2.0, 3.0)
    assert rotation == rotator_to_ue4(Rotator(16384.0, 0.0, 0.0))
    assert rotation.pitch == pytest.approx(90.0, abs=1e-3)
    assert scale == Vector(1.0, 2.0, 3.0) * 2.0
    assert list(obj.properties) == [("Other", "kept")]


def test_corrected_scale_leaves_properties():
    obj = _actor(props=[("DrawScale3D", "(X=1.0,Y=2.0,Z=3.0)"), ("DrawScale", "2.0")])
    scale = ActorUpgrader().corrected_scale(obj)
    assert scale == parse_vector("(X=1.0,Y=2.0,Z=3.0)") * 2.0
    assert len(obj.properties) == 2


def test_convert_and_assign_combines_translation():
    source = _actor(props=[("Location", "(X=2.0,Y=0.0,Z=0.0)")])
    target = _component(props=[("Translation", "(X=1.0,Y=0.0,Z=0.0)")])
    ActorUpgrader().convert_and_assign_transform(source, target)
    assert "Translation" not in target.properties
    assert "Location" not in source.properties
    assert target.properties.find("RelativeLocation") == write_vector(
        Vector(2.0, 0.0, 0.0) + Vector(1.0, 0.0, 0.0)
    )
    assert target.properties.find("RelativeRotation") == write_rotator(Rotator())
    assert target.properties.find("RelativeScale3D") == write_vector(Vector(1.0, 1.0, 1.0))


def test_generic_upgrader_sets_root_component():
    comp = _component(name="StaticMeshComponent0", obj_name="Comp_1")
    obj = _actor(
        props=[
            ("Components(0)", "StaticMeshComponent'Comp_1'"),
            ("Location", "(X=1.0,Y=2.0,Z=3.0)"),
        ],
        subs=[comp],
    )
    GenericUpgrader().upgrade(obj)
    assert obj.properties.find("RootComponent") == '"Comp_1"'
    assert obj.properties.find("ActorLabel") == '"Act_0"'
    assert "Location" not in obj.properties
    assert comp.properties.find("RelativeLocation") == write_vector(Vector(1.0, 2.0, 3.0))


def test_generic_upgrader_falls_back_to_second_component():
    comp = _component(obj_name="Comp_2")
    obj = _actor(props=[("Components(1)", "SceneComponent'Comp_2'")], subs=[comp])
    GenericUpgrader().upgrade(obj)
    assert obj.properties.find("RootComponent") == '"Comp_2"'


def test_generic_upgrader_skips_world_info():
    obj = _actor(class_name="WorldInfo", name="WorldInfo_0")
    GenericUpgrader().upgrade(obj)
    assert list(obj.properties) == [("ActorLabel", '"WorldInfo_0"')]


def test_generic_upgrader_requires_components():
    with pytest.raises(UpgradeError):
        GenericUpgrader().upgrade(_actor())


def test_generic_upgrader_requires_matching_sub_object():
    obj = _actor(props=[("Components(0)", "SceneComponent'Missing_0'")])
    with pytest.raises(UpgradeError):
        GenericUpgrader().upgrade(obj)


def test_note_upgrader_replaces_components():
    old = _component(name="Sprite", obj_name="Sprite_0")
    obj = _actor(
        class_name="Note",
        props=[
            ("Components(0)", "SpriteComponent'Sprite_0'"),
            ("ObjectArchetype", "Note'Engine.Default__Note'"),
            ("Location", "(X=4.0,Y=5.0,Z=6.0)"),
        ],
        subs=[old],
    )
    NoteUpgrader().upgrade(obj)
    assert [sub.name for sub in obj.sub_objects] == ["SceneComp"]
    assert "Components(0)" not in obj.properties
    assert "ObjectArchetype" not in obj.properties
    assert obj.properties.find("RootComponent") == '"SceneComp"'
    scene = obj.sub_objects[0]
    assert scene.properties.find("RelativeLocation") == write_vector(Vector(4.0, 5.0, 6.0))


def test_prefab_upgrader_makes_note():
    obj = _actor(
        class_name="PrefabInstance",
        name="Prefab_0",
        props=[("TemplatePrefab", "Prefab'Pkg.Thing'"), ("Location", "(X=1.0,Y=1.0,Z=1.0)")],
    )
    PrefabInstanceUpgrader().upgrade(obj)
    assert obj.class_name == "/Script/Engine.Note"
    assert obj.archetype == "/Script/Engine.Note'/Script/Engine.Default__Note'"
    assert obj.name == "Prefab_0"
    assert obj.type == "Actor"
    assert list(obj.properties) == [
        ("RootComponent", '"SceneComp"'),
        ("ActorLabel", '"Prefab_0"'),
        ("Text", "\"Prefab Prefab'Pkg.Thing'\""),
    ]
    scene = obj.sub_objects[0]
    assert scene.properties.find("RelativeLocation") == write_vector(Vector(1.0, 1.0, 1.0))


def test_prefab_upgrader_without_template():
    obj = _actor(class_name="PrefabInstance", name="Prefab_1")
    PrefabInstanceUpgrader().upgrade(obj)
    assert obj.properties.find("Text") == '"Prefab "'


def test_volume_upgrader_rewires_brush():
    brush = _component(
        name="BrushComponent0",
        obj_name="BrushComponent_3",
        class_name="BrushComponent",
        props=[("Brush", "Model'Model_1'")],
    )
    model = T3DObject(type="Brush", name="Model_1")
    obj = _actor(
        class_name="BlockingVolume",
        props=[
            ("Components(0)", "BrushComponent'BrushComponent_3'"),
            ("Brush", "Model'Model_1'"),
            ("BrushComponent", "BrushComponent'BrushComponent_3'"),
            ("CollisionComponent", "BrushComponent'BrushComponent_3'"),
            ("Location", "(X=8.0,Y=0.0,Z=0.0)"),
        ],
        subs=[brush, model],
    )
    VolumeUpgrader().upgrade(obj)
    assert obj.properties.find("Brush") == '"Model_1"'
    assert obj.properties.find("BrushComponent") == '"BrushComponent0"'
    assert obj.properties.find("RootComponent") == '"BrushComponent0"'
    assert "Components(0)" not in obj.properties
    assert "CollisionComponent" not in obj.properties
    assert "Brush" not in brush.properties
    assert brush.properties.find("RelativeLocation") == write_vector(Vector(8.0, 0.0, 0.0))


def test_volume_upgrader_requires_two_sub_objects():
    obj = _actor(class_name="BlockingVolume", subs=[_component(name="BrushComponent0")])
    with pytest.raises(UpgradeError):
        VolumeUpgrader().upgrade(obj)