"""Importer settings: class remapping, package remapping and light tuning."""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

_REMAP_KEYS = frozenset({"class_path", "properties", "archetype"})
_FLOAT_FIELDS = (
    "light_brightness_multiplier",
    "light_radius_multiplier",
    "indirect_lighting_intensity",
)
_SETTING_KEYS = frozenset({"class_remapping", "package_remap", *_FLOAT_FIELDS})


def _default_archetype(class_path: str) -> str:
    """Full name of the default object of the class at ``class_path``."""
    package, dot, name = class_path.rpartition(".")
    if not dot:
        return f"{name} Default__{name}"
    return f"{name} {package}.Default__{name}"


@dataclass
class ClassRemap:
    """Target class for actors of a given legacy class, with extra properties."""

    class_path: str | None = None
    properties: dict[str, str] = field(default_factory=dict)
    archetype: str = ""

    def __post_init__(self) -> None:
        if not self.archetype and self.class_path:
            self.archetype = _default_archetype(self.class_path)


def _default_class_remapping() -> dict[str, ClassRemap]:
    return {"PathBlockingVolume": ClassRemap("/Script/Engine.BlockingVolume")}


def _string_dict(value: Any, what: str) -> dict[str, str]:
    if not isinstance(value, Mapping):
        raise ValueError(f"{what} must be a mapping of strings")
    return {str(key): str(item) for key, item in value.items()}


def _remap_from(name: str, entry: Any) -> ClassRemap:
    if entry is None:
        return ClassRemap()
    if isinstance(entry, str):
        return ClassRemap(entry)
    if not isinstance(entry, Mapping):
        raise ValueError(f"class remap for {name!r} must be a mapping")
    unknown = set(entry) - _REMAP_KEYS
    if unknown:
        raise ValueError(f"unknown keys in class remap for {name!r}: {sorted(unknown)}")
    class_path = entry.get("class_path")
    return ClassRemap(
        class_path=None if class_path is None else str(class_path),
        properties=_string_dict(entry.get("properties", {}), f"properties of {name!r}"),
        archetype=str(entry.get("archetype", "")),
    )


@dataclass
class ImporterSettings:
    """Settings that steer remapping and upgrading of level objects."""

    class_remapping: dict[str, ClassRemap] = field(default_factory=_default_class_remapping)
    package_remap: dict[str, str] = field(default_factory=dict)
    light_brightness_multiplier: float = 10.0
    light_radius_multiplier: float = 1.25
    indirect_lighting_intensity: float = 1.0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ImporterSettings:
        """Build settings from a mapping; keys that are present replace the defaults."""
        if not isinstance(data, Mapping):
            raise TypeError("settings must be a mapping")
        unknown = set(data) - _SETTING_KEYS
        if unknown:
            raise ValueError(f"unknown settings: {sorted(unknown)}")

        kwargs: dict[str, Any] = {}
        if "class_remapping" in data:
            remapping = data["class_remapping"]
            if not isinstance(remapping, Mapping):
                raise ValueError("class_remapping must be a mapping")
            kwargs["class_remapping"] = {
                str(name): _remap_from(str(name), entry) for name, entry in remapping.items()
            }
        if "package_remap" in data:
            kwargs["package_remap"] = _string_dict(data["package_remap"], "package_remap")
        for name in _FLOAT_FIELDS:
            if name in data:
                try:
                    kwargs[name] = float(data[name])
                except (TypeError, ValueError) as exc:
                    raise ValueError(f"{name} must be a number") from exc
        return cls(**kwargs)


def load_settings(path: str | os.PathLike[str]) -> ImporterSettings:
    """Read settings from a JSON file holding one object."""
    with open(path, encoding="utf-8") as handle:
        data = json.load(handle)
    if not isinstance(data, dict):
        raise ValueError(f"settings file {os.fspath(path)!r} must hold a JSON object")
    return ImporterSettings.from_dict(data)