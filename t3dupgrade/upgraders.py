"""Upgraders that rewrite legacy actors into the newer component layout."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import fields

from t3dupgrade.settings import ImporterSettings
from t3dupgrade.t3dobject import T3DObject
from t3dupgrade.utils import (
    Rotator,
    Vector,
    parse_float,
    parse_rotator,
    parse_vector,
    write_rotator,
    write_vector,
)

log = logging.getLogger(__name__)

_ONE_VECTOR = Vector(1.0, 1.0, 1.0)


class UpgradeError(Exception):
    """Raised when an object cannot be upgraded."""


def _scene_component() -> T3DObject:
    return T3DObject(type="Object", class_name="SceneComponent", name="SceneComp")


class Upgrader(ABC):
    """Rewrites a parsed object in place."""

    def __init__(self, settings: ImporterSettings | None = None) -> None:
        self.settings = settings if settings is not None else ImporterSettings()

    @abstractmethod
    def upgrade(self, obj: T3DObject) -> None:
        """Upgrade ``obj`` in place; raise UpgradeError when that is not possible."""


class ActorUpgrader(Upgrader):
    """Common actor handling: label and transform conversion."""

    def upgrade(self, obj: T3DObject) -> None:
        obj.properties.add("ActorLabel", f'"{obj.name}"')

    def convert_transform(self, obj: T3DObject) -> tuple[Vector, Rotator, Vector]:
        """Take location, rotation and scale off ``obj``, converted to the new units.

        The legacy keys are removed; missing ones yield the identity transform.
        """
        props = obj.properties
        location = Vector()
        rotation = Rotator()
        scale = _ONE_VECTOR

        value = props.find("Location")
        if value is not None:
            location = parse_vector(value)
            props.remove("Location")

        value = props.find("Rotation")
        if value is not None:
            rotation = parse_rotator(value, True)
            props.remove("Rotation")

        value = props.find("DrawScale3D")
        if value is not None:
            scale = parse_vector(value)
            props.remove("DrawScale3D")

        value = props.find("DrawScale")
        if value is not None:
            props.remove("DrawScale")
            scale = scale * parse_float(value)

        return location, rotation, scale

    def convert_and_assign_transform(self, from_obj: T3DObject, to_obj: T3DObject) -> None:
        """Move the transform of ``from_obj`` onto ``to_obj`` as relative values.

        A ``Translation`` or ``Rotation`` already on ``to_obj`` is added in.
        """
        location, rotation, scale = self.convert_transform(from_obj)

        translation = to_obj.properties.find("Translation")
        if translation is not None:
            to_obj.properties.remove("Translation")
            location = location + parse_vector(translation)

        sub_rotation = to_obj.properties.find("Rotation")
        if sub_rotation is not None:
            to_obj.properties.remove("Rotation")
            rotation = rotation + parse_rotator(sub_rotation, True)

        to_obj.properties.add("RelativeLocation", write_vector(location))
        to_obj.properties.add("RelativeRotation", write_rotator(rotation))
        to_obj.properties.add("RelativeScale3D", write_vector(scale))

    def corrected_scale(self, obj: T3DObject) -> Vector:
        """``DrawScale3D * DrawScale`` of ``obj``, leaving its properties alone."""
        scale_3d = _ONE_VECTOR
        draw_scale = 1.0

        value = obj.properties.find("DrawScale3D")
        if value is not None:
            scale_3d = parse_vector(value)

        value = obj.properties.find("DrawScale")
        if value is not None:
            draw_scale = parse_float(value)

        return scale_3d * draw_scale


class GenericUpgrader(ActorUpgrader):
    """Makes the first listed component the root and moves the transform onto it."""

    def upgrade(self, obj: T3DObject) -> None:
        super().upgrade(obj)

        if obj.class_name.lower() == "worldinfo":
            return

        components = obj.properties.find("Components(0)")
        if components is None:
            components = obj.properties.find("Components(1)")
        if components is None:
            raise UpgradeError(f"No components listed on {obj.name}")

        start = components.find("'")
        name = components[start + 1:][:-1]

        component = obj.sub_object_by_obj_name(name)
        if component is None:
            raise UpgradeError(f"Failed to find sub object with objname '{name}' on {obj.name}")

        self.convert_and_assign_transform(obj, component)
        obj.properties.add("RootComponent", f'"{name}"')


class NoteUpgrader(ActorUpgrader):
    """Replaces a note's legacy components with a scene component."""

    def upgrade(self, obj: T3DObject) -> None:
        super().upgrade(obj)

        obj.sub_objects.clear()
        for key in ("Components(0)", "Components(1)", "ObjectArchetype"):
            obj.properties.remove(key)

        scene = _scene_component()
        self.convert_and_assign_transform(obj, scene)
        obj.sub_objects.append(scene)
        obj.properties.add("RootComponent", '"SceneComp"')


class PrefabInstanceUpgrader(ActorUpgrader):
    """Replaces a prefab instance with a note naming the prefab."""

    def upgrade(self, obj: T3DObject) -> None:
        old_name = obj.name

        template_prefab = obj.properties.find("TemplatePrefab")
        if template_prefab is None:
            template_prefab = ""
        else:
            obj.properties.remove("TemplatePrefab")

        note = T3DObject(
            type="Actor",
            class_name="/Script/Engine.Note",
            name=old_name,
            archetype="/Script/Engine.Note'/Script/Engine.Default__Note'",
        )

        scene = _scene_component()
        self.convert_and_assign_transform(obj, scene)
        note.sub_objects.append(scene)

        note.properties.add("RootComponent", '"SceneComp"')
        note.properties.add("ActorLabel", f'"{old_name}"')
        note.properties.add("Text", f'"Prefab {template_prefab}"')

        for item in fields(T3DObject):
            setattr(obj, item.name, getattr(note, item.name))


class VolumeUpgrader(ActorUpgrader):
    """Rewires a brush volume to its brush component and model."""

    def upgrade(self, obj: T3DObject) -> None:
        super().upgrade(obj)

        for key in ("Components(0)", "ObjectArchetype", "Model", "BrushComponent", "CollisionComponent"):
            obj.properties.remove(key)

        if len(obj.sub_objects) < 2:
            raise UpgradeError(f"Volume {obj.name} needs a brush component and a model")
        brush_component, model = obj.sub_objects[0], obj.sub_objects[1]

        brush_component.properties.remove("Brush")
        self.convert_and_assign_transform(obj, brush_component)

        obj.properties.remove("Brush")
        obj.properties.add("Brush", f'"{model.name}"')
        obj.properties.add("BrushComponent", '"BrushComponent0"')
        obj.properties.add("RootComponent", '"BrushComponent0"')