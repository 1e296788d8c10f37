"""Upgrading legacy light actors to the newer light component layout."""

from __future__ import annotations

import enum
import logging
import re
import struct
from collections.abc import Callable

from t3dupgrade.settings import ImporterSettings
from t3dupgrade.t3dobject import PropertyMap, T3DObject
from t3dupgrade.upgraders import ActorUpgrader, UpgradeError
from t3dupgrade.utils import parse_float, remapped_package_path

log = logging.getLogger(__name__)

_LIGHT_NAME_PATTERN = re.compile(r"(Dominant)?(Point|Sky|Spot|Directional)Light(Movable|Toggleable)?")
_MODIFIER_PATTERNS = tuple(
    re.compile(re.escape(word), re.IGNORECASE) for word in ("Movable", "Toggleable", "Dominant")
)
_UNWANTED_CLASSES = frozenset(
    name.lower()
    for name in ("DrawLightConeComponent", "DrawLightRadiusComponent", "SpriteComponent", "ArrowComponent")
)

DEFAULT_BRIGHTNESS = 1.0
DEFAULT_RADIUS = 1024.0


def _f32(value: float) -> float:
    return struct.unpack("<f", struct.pack("<f", value))[0]


class LightType(enum.IntEnum):
    """Kind of light named by a legacy light class."""

    NONE = 0
    POINT = 1
    SPOT = 2
    DIRECTIONAL = 3
    SKY = 4


class LightModifier(enum.IntFlag):
    """Modifiers that a legacy light class name may carry."""

    NONE = 0
    TOGGLEABLE = 1
    MOVABLE = 2
    DOMINANT = 4


_TYPES = {
    "Point": LightType.POINT,
    "Spot": LightType.SPOT,
    "Directional": LightType.DIRECTIONAL,
    "Sky": LightType.SKY,
}
_MODIFIERS = {"Movable": LightModifier.MOVABLE, "Toggleable": LightModifier.TOGGLEABLE}
_COMPONENT_NAMES = {
    LightType.DIRECTIONAL: "DirectionalLightComponent0",
    LightType.SPOT: "SpotLightComponent0",
    LightType.SKY: "SkyLightComponent0",
    LightType.POINT: "PointLightComponent0",
}
_TYPED_COMPONENT_KEYS = {
    LightType.POINT: "PointLightComponent",
    LightType.SPOT: "SpotLightComponent",
    LightType.DIRECTIONAL: "DirectionalLightComponent",
}


def light_type_and_flags(class_name: str) -> tuple[LightType, LightModifier]:
    """Light type and modifiers encoded in a legacy light class name.

    Raises ValueError when the name is not a light class.
    """
    match = _LIGHT_NAME_PATTERN.search(class_name)
    if match is None:
        raise ValueError(f"{class_name!r} is not a light class")
    dominant, type_name, modifier = match.groups()
    flags = _MODIFIERS[modifier] if modifier else LightModifier.NONE
    if dominant:
        flags |= LightModifier.DOMINANT
    return _TYPES[type_name], flags


def strip_modifiers(text: str) -> str:
    """Remove the words Movable, Toggleable and Dominant, ignoring case."""
    for pattern in _MODIFIER_PATTERNS:
        text = pattern.sub("", text)
    return text


def light_component_name(light_type: LightType, flags: LightModifier) -> str:
    """Name of the light component that a light of this kind carries."""
    name = _COMPONENT_NAMES.get(light_type, "")
    if flags & LightModifier.DOMINANT:
        return "Dominant" + name
    return name


def _rewrite_first(props: PropertyMap, key: str, rewrite: Callable[[str], str]) -> None:
    """Replace the first value stored under ``key`` by ``rewrite(value)``, keeping order."""
    pairs = list(props)
    folded = key.lower()
    position = next((i for i, (name, _) in enumerate(pairs) if name.lower() == folded), None)
    if position is None:
        return
    name, value = pairs[position]
    pairs[position] = (name, rewrite(value))
    props.remove_if(lambda _key, _value: True)
    props.extend(pairs)


def remove_unwanted_components(obj: T3DObject) -> None:
    """Drop sprite, arrow and draw components and rebuild the components list."""
    count_before = len(obj.sub_objects)
    obj.sub_objects[:] = [
        sub for sub in obj.sub_objects if sub.class_name.lower() not in _UNWANTED_CLASSES
    ]
    for index in range(count_before):
        obj.properties.remove(f"Components({index})")
    for index, sub in enumerate(obj.sub_objects):
        obj.properties.add(f"Components({index})", sub.name)


def _mobility(flags: LightModifier) -> str:
    if flags == LightModifier.MOVABLE:
        return "Movable"
    if flags in (LightModifier.TOGGLEABLE, LightModifier.DOMINANT):
        return "Stationary"
    return "Static"


def upgrade_shared_properties(
    obj: T3DObject,
    light_type: LightType,
    flags: LightModifier,
    settings: ImporterSettings,
) -> None:
    """Rewrite brightness, radius, falloff, light function and mobility of a light component."""
    props = obj.properties
    brightness = DEFAULT_BRIGHTNESS
    radius = DEFAULT_RADIUS

    value = props.find("Brightness")
    if value is not None:
        brightness = _f32(parse_float(value))
        props.remove("Brightness")

    value = props.find("Radius")
    if value is not None:
        radius = _f32(parse_float(value))
        props.remove("Radius")

    brightness = _f32(brightness * _f32(settings.light_brightness_multiplier))
    props.add("IndirectLightingIntensity", f"{_f32(settings.indirect_lighting_intensity):f}")

    if radius != DEFAULT_RADIUS:
        radius = _f32(radius * _f32(settings.light_radius_multiplier))

    props.add("Intensity", f"{brightness:f}")
    props.add("AttenuationRadius", f"{radius:f}")

    if light_type != LightType.DIRECTIONAL:
        props.add("bUseInverseSquaredFalloff", "false")
        falloff = props.find("FalloffExponent")
        props.add("LightFalloffExponent", falloff if falloff is not None else "2")

    light_function = next(
        (sub for sub in obj.sub_objects if sub.name.lower().startswith("lightfunction")), None
    )
    if light_function is not None:
        material = light_function.properties.find("SourceMaterial")
        if material is not None:
            props.add("LightFunctionMaterial", remapped_package_path(material, settings))
        scale = light_function.properties.find("Scale")
        if scale is not None:
            props.add("LightFunctionScale", scale)
        disabled = light_function.properties.find("DisabledBrightness")
        if disabled is not None:
            props.add("DisabledBrightness", disabled)
        obj.sub_objects.clear()

    props.add("Mobility", _mobility(flags))


class LightUpgrader(ActorUpgrader):
    """Upgrades point, spot, directional and sky lights and their variants."""

    def upgrade(self, obj: T3DObject) -> None:
        super().upgrade(obj)

        try:
            light_type, flags = light_type_and_flags(obj.class_name)
        except ValueError as exc:
            raise UpgradeError(str(exc)) from exc

        obj.class_name = strip_modifiers(obj.class_name)
        obj.archetype = strip_modifiers(obj.archetype)
        _rewrite_first(obj.properties, "ObjectArchetype", strip_modifiers)

        remove_unwanted_components(obj)

        component_name = light_component_name(light_type, flags)
        component = obj.sub_object_by_name(component_name)
        if component is None:
            raise UpgradeError(f"Failed to find component with name {component_name}")

        component.class_name = strip_modifiers(component.class_name)
        component.archetype = strip_modifiers(component.archetype)
        _rewrite_first(component.properties, "ObjectArchetype", strip_modifiers)

        self.convert_and_assign_transform(obj, component)

        obj.properties.remove("LightComponent")
        obj.properties.add("LightComponent", component.name)
        obj.properties.add("RootComponent", component.name)

        upgrade_shared_properties(component, light_type, flags, self.settings)

        typed_key = _TYPED_COMPONENT_KEYS.get(light_type)
        if typed_key is not None:
            obj.properties.add(typed_key, component.name)