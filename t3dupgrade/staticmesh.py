"""Upgrading static mesh actors: mesh and material paths, transform, components."""

from __future__ import annotations

import logging
import re

from t3dupgrade.settings import ImporterSettings
from t3dupgrade.t3dobject import T3DObject
from t3dupgrade.upgraders import ActorUpgrader, UpgradeError
from t3dupgrade.utils import parse_command, parse_value, remapped_package_path

log = logging.getLogger(__name__)

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")
_COMPONENT_NAME = "StaticMeshComponent0"
_QUOTED_COMPONENT = f'"{_COMPONENT_NAME}"'


def _leading_int(text: str) -> int:
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


def _find_ignore_case(text: str, needle: str) -> int:
    return text.lower().find(needle.lower())


def merge_vertex_paint(mesh_comp: T3DObject) -> None:
    """Fold the painted vertices of ``LODData`` into the ``CustomLODData`` block.

    Raises ValueError when the custom properties or the LOD data lack the
    expected parts.
    """
    rest = parse_command(mesh_comp.custom_properties, "CustomLODData")
    if rest is None:
        raise ValueError(f"Missing CustomLODData block on {mesh_comp.name}!")

    lod_text = parse_value(rest, "LOD=")
    if lod_text is None:
        raise ValueError(f"Invalid CustomLODData on {mesh_comp.name}!")
    lod_index = _leading_int(lod_text)

    color_start = _find_ignore_case(rest, "ColorVertexData")
    if color_start < 0:
        raise ValueError(f"Invalid CustomLODData on {mesh_comp.name}!")
    color_vertex_data = rest[color_start:]

    count_text = parse_value(rest, "ColorVertexData(")
    vertex_count = _leading_int(count_text) if count_text is not None else -1

    lod_data = mesh_comp.properties.find(f"LODData({lod_index})")
    if lod_data is None:
        raise ValueError(f"Missing LODData({lod_index}) on {mesh_comp.name}!")
    lod_data = lod_data[1:-1]

    painted_start = _find_ignore_case(lod_data, "PaintedVertices")
    if painted_start < 0:
        raise ValueError(f"Missing PaintedVertices in LODData({lod_index}) on {mesh_comp.name}!")
    painted = lod_data[painted_start:]
    equals = painted.find("=")
    if equals < 0:
        raise ValueError(f"Malformed PaintedVertices on {mesh_comp.name}!")

    painted_with_count = f"PaintedVertices({vertex_count}){painted[equals:]}"
    mesh_comp.custom_properties = (
        f"CustomLODData LOD={lod_index} {painted_with_count} {color_vertex_data}"
    )


def _material_pairs(obj: T3DObject, settings: ImporterSettings) -> list[tuple[str, str]]:
    pairs = []
    for key, value in obj.properties:
        if not key.lower().startswith("materials("):
            continue
        new_value = "None" if value.lower() == "none" else remapped_package_path(value, settings)
        pairs.append(("Override" + key, new_value))
    return pairs


def collect_materials(obj: T3DObject, settings: ImporterSettings) -> dict[str, str]:
    """Override material keys of ``obj`` mapped to remapped material paths."""
    return dict(_material_pairs(obj, settings))


def replace_materials(obj: T3DObject, settings: ImporterSettings) -> None:
    """Replace ``Materials(n)`` properties with ``OverrideMaterials(n)`` and remapped paths."""
    materials = _material_pairs(obj, settings)
    obj.properties.remove_if(lambda key, _value: key.lower().startswith("materials"))
    obj.properties.extend(materials)


class StaticMeshUpgrader(ActorUpgrader):
    """Moves a static mesh actor onto its mesh component with remapped assets."""

    def upgrade(self, obj: T3DObject) -> None:
        super().upgrade(obj)

        component = obj.sub_object_by_name(_COMPONENT_NAME)
        if component is None:
            raise UpgradeError(f"Failed to find {_COMPONENT_NAME} on {obj.name}")

        # Usually shadow maps, which the newer engine cannot read.
        component.sub_objects.clear()

        mesh_path = component.properties.find("StaticMesh")
        if mesh_path is not None:
            component.properties.remove("StaticMesh")
            component.properties.add("StaticMesh", remapped_package_path(mesh_path, self.settings))

        replace_materials(component, self.settings)
        self.convert_and_assign_transform(obj, component)

        for key in ("Components(0)", "Components(1)", "ObjectArchetype", "StaticMeshComponent"):
            obj.properties.remove(key)

        obj.properties.add("RootComponent", _QUOTED_COMPONENT)
        obj.properties.add("StaticMeshComponent", _QUOTED_COMPONENT)