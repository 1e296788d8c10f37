import pytest

from t3dupgrade.settings import ImporterSettings
from t3dupgrade.staticmesh import (
    StaticMeshUpgrader,
    collect_materials,
    merge_vertex_paint,
    replace_materials,
)
from t3dupgrade.t3dobject import PropertyMap, T3DObject
from t3dupgrade.upgraders import UpgradeError
from t3dupgrade.utils import Vector, parse_vector, remapped_package_path

SETTINGS = ImporterSettings(package_remap={"Pkg": "/Game/Pkg"})


def _mesh_component(**props):
    return T3DObject(type="Object", class_name="StaticMeshComponent", name="StaticMeshComponent0",
                     properties=PropertyMap(props.items()))


def test_collect_materials():
    comp = T3DObject(properties=PropertyMap([
        ("Materials(0)", "None"),
        ("Materials(1)", "Material'Pkg.Rock'"),
        ("StaticMesh", "StaticMesh'Pkg.Rock'"),
    ]))
    assert collect_materials(comp, SETTINGS) == {
        "OverrideMaterials(0)": "None",
        "OverrideMaterials(1)": remapped_package_path("Material'Pkg.Rock'", SETTINGS),
    }


def test_replace_materials_keeps_other_properties():
    comp = T3DObject(properties=PropertyMap([
        ("Materials(0)", "Material'Pkg.Rock'"),
        ("CastShadow", "False"),
    ]))
    replace_materials(comp, SETTINGS)

    keys = [key for key, _ in comp.properties]
    assert keys == ["CastShadow", "OverrideMaterials(0)"]
    assert comp.properties.find("OverrideMaterials(0)") == remapped_package_path("Material'Pkg.Rock'", SETTINGS)


def test_merge_vertex_paint():
    comp = _mesh_component(**{"LODData(0)": "(PaintedVertices=((Position=(X=1))),Other=1)"})
    comp.custom_properties = "CustomLODData LOD=0 ColorVertexData(3)=(FF,FF,FF)"
    merge_vertex_paint(comp)

    assert comp.custom_properties.startswith("CustomLODData LOD=0 PaintedVertices(3)=((Position=(X=1))")
    assert comp.custom_properties.endswith(" ColorVertexData(3)=(FF,FF,FF)")


def test_merge_vertex_paint_without_block():
    comp = _mesh_component()
    comp.custom_properties = "Something else"
    with pytest.raises(ValueError):
        merge_vertex_paint(comp)


def test_merge_vertex_paint_without_lod_data():
    comp = _mesh_component()
    comp.custom_properties = "CustomLODData LOD=1 ColorVertexData(3)=(FF,FF,FF)"
    with pytest.raises(ValueError):
        merge_vertex_paint(comp)


def _mesh_actor():
    comp = _mesh_component(StaticMesh="StaticMesh'Pkg.Rock'", **{"Materials(0)": "None"})
    comp.sub_objects.append(T3DObject(type="Object", class_name="ShadowMap2D", name="ShadowMap2D_0"))
    actor = T3DObject(type="Actor", class_name="StaticMeshActor", name="StaticMeshActor_0", sub_objects=[comp])
    actor.properties.add("Components(0)", "StaticMeshComponent'StaticMeshComponent0'")
    actor.properties.add("ObjectArchetype", "StaticMeshActor'Engine.Default__StaticMeshActor'")
    actor.properties.add("Location", "(X=4.0,Y=5.0,Z=6.0)")
    return actor


def test_static_mesh_upgrade():
    actor = _mesh_actor()
    StaticMeshUpgrader(SETTINGS).upgrade(actor)
    comp = actor.sub_objects[0]

    assert comp.sub_objects == []
    assert comp.properties.find("StaticMesh") == remapped_package_path("StaticMesh'Pkg.Rock'", SETTINGS)
    assert comp.properties.find("OverrideMaterials(0)") == "None"
    assert parse_vector(comp.properties.find("RelativeLocation")) == Vector(4.0, 5.0, 6.0)
    assert actor.properties.find("RootComponent") == '"StaticMeshComponent0"'
    assert actor.properties.find("StaticMeshComponent") == '"StaticMeshComponent0"'
    assert actor.properties.find("ActorLabel") == '"StaticMeshActor_0"'
    assert "Components(0)" not in actor.properties
    assert "ObjectArchetype" not in actor.properties


def test_static_mesh_upgrade_without_component():
    actor = T3DObject(type="Actor", class_name="StaticMeshActor", name="StaticMeshActor_1")
    with pytest.raises(UpgradeError):
        StaticMeshUpgrader(SETTINGS).upgrade(actor)