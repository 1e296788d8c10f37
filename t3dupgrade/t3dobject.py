"""In-memory form of T3D objects and actors, and writing them back as text."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field

from t3dupgrade.utils import fixup_rotator_string

NEWLINE = "\r\n"
# Notes carry their line breaks as escape sequences inside a quoted value.
_NOTE_NEWLINE = "\\r\\n"


def _same(left: str, right: str) -> bool:
    return left.lower() == right.lower()


def _trim_quotes(text: str) -> str:
    if text.startswith('"'):
        text = text[1:]
    if text.endswith('"'):
        text = text[:-1]
    return text


def _escape_quotes(text: str) -> str:
    """Put a backslash before each quote that is not already escaped."""
    result = []
    escaped = False
    for char in text:
        if escaped:
            escaped = False
        elif char == "\\":
            escaped = True
        elif char == '"':
            result.append("\\")
        result.append(char)
    return "".join(result)


class PropertyMap:
    """Ordered key/value pairs where a key may repeat; keys compare case-insensitively."""

    def __init__(self, pairs: Iterable[tuple[str, str]] = ()) -> None:
        self._items: list[tuple[str, str]] = [(key, value) for key, value in pairs]

    def add(self, key: str, value: str) -> None:
        self._items.append((key, value))

    def find(self, key: str) -> str | None:
        """First value stored under ``key``, or None."""
        return next((value for name, value in self._items if _same(name, key)), None)

    def remove(self, key: str) -> int:
        """Remove every pair with ``key``; return how many were removed."""
        return self.remove_if(lambda name, _value: _same(name, key))

    def remove_if(self, predicate: Callable[[str, str], bool]) -> int:
        """Remove every pair for which ``predicate(key, value)`` holds."""
        kept = [(key, value) for key, value in self._items if not predicate(key, value)]
        removed = len(self._items) - len(kept)
        self._items = kept
        return removed

    def extend(self, pairs: Iterable[tuple[str, str]]) -> None:
        for key, value in pairs:
            self.add(key, value)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and any(_same(name, key) for name, _ in self._items)

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PropertyMap):
            return NotImplemented
        return self._items == other._items

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"PropertyMap({self._items!r})"


def _scene_component() -> T3DObject:
    return T3DObject(type="Object", class_name="SceneComponent", name="SceneComp")


@dataclass(eq=False)
class T3DObject:
    """One ``Begin <Type> ... End <Type>`` block with its sub-objects and properties."""

    class_name: str = ""
    name: str = ""
    archetype: str = ""
    obj_name: str = ""
    type: str = ""
    t3d_header: str = ""
    custom_properties: str = ""
    sub_objects: list[T3DObject] = field(default_factory=list)
    properties: PropertyMap = field(default_factory=PropertyMap)

    @property
    def _space_separated(self) -> bool:
        return _same(self.type, "Polygon")

    def reconstruct_t3d(self, indent: int = 0, write_root_header: bool = True) -> str:
        """Write the object back as T3D text."""
        pad = "\t" * indent
        parts = []
        if write_root_header:
            header = f"{pad}Begin {self.type}"
            for label, value in (
                ("Class", self.class_name),
                ("Name", self.name),
                ("ObjName", self.obj_name),
                ("Archetype", self.archetype),
            ):
                if value:
                    header += f" {label}={value}"
            parts.append(header + NEWLINE)

        for sub_object in self.sub_objects:
            parts.append(sub_object.reconstruct_t3d(indent + 1) + NEWLINE)

        separator = " " if self._space_separated else "="
        for key, value in self.properties:
            parts.append(f"{pad}\t{key}{separator}{value}{NEWLINE}")

        if write_root_header:
            parts.append(f"{pad}End {self.type}")
        return "".join(parts)

    def sub_object_by_name(self, name: str) -> T3DObject | None:
        return next((obj for obj in self.sub_objects if _same(obj.name, name)), None)

    def sub_object_by_obj_name(self, name: str) -> T3DObject | None:
        return next((obj for obj in self.sub_objects if _same(obj.obj_name, name)), None)

    @classmethod
    def make_note_from_actor(cls, actor: T3DObject) -> T3DObject:
        """A note actor standing where ``actor`` was, listing its root properties."""
        location = ""
        rotation = ""
        root_name = actor.properties.find("RootComponent")
        if root_name is not None:
            source = actor.sub_object_by_name(_trim_quotes(root_name))
            location_key, rotation_key = "RelativeLocation", "RelativeRotation"
        else:
            source = actor
            location_key, rotation_key = "Location", "Rotation"

        if source is not None:
            found_location = source.properties.find(location_key)
            if found_location is not None:
                location = found_location
            found_rotation = source.properties.find(rotation_key)
            if found_rotation is not None:
                rotation = fixup_rotator_string(found_rotation)

        scene = _scene_component()
        scene.properties.add("RelativeLocation", location)
        scene.properties.add("RelativeRotation", rotation)

        note = cls(class_name="Note", name=actor.name, type="Actor", sub_objects=[scene])
        note.properties.add("RootComponent", '"SceneComp"')
        note.properties.add("ActorLabel", f'"{actor.name}"')

        lines = "".join(
            f"{_escape_quotes(key)}={_escape_quotes(value)}{_NOTE_NEWLINE}"
            for key, value in actor.properties
        )
        text = f'"Properties for Root Object.{_NOTE_NEWLINE}{_NOTE_NEWLINE}{lines}"'
        note.properties.add("Text", text)
        return note

    @classmethod
    def make_note(cls, text: str) -> T3DObject:
        """A note actor at the origin carrying ``text``."""
        note = cls(class_name="Note", type="Actor", sub_objects=[_scene_component()])
        note.properties.add("RootComponent", '"SceneComp"')
        note.properties.add("Text", f'"{_escape_quotes(text)}"')
        return note

    def __eq__(self, other: object) -> bool:
        """Compare header fields only; properties and sub-objects are not compared."""
        if not isinstance(other, T3DObject):
            return NotImplemented
        return all(
            _same(getattr(self, attribute), getattr(other, attribute))
            for attribute in (
                "class_name",
                "name",
                "archetype",
                "obj_name",
                "type",
                "t3d_header",
                "custom_properties",
            )
        )

    __hash__ = None  # type: ignore[assignment]