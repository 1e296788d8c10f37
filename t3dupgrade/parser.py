"""Reading T3D map text into trees of T3DObject."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Iterator

from t3dupgrade.t3dobject import T3DObject
from t3dupgrade.utils import parse_begin, parse_command, parse_end, parse_value

log = logging.getLogger(__name__)

# Polygon lines separate key and value by an arbitrary run of spaces.
_SPACE_SPLIT_PROPERTY = re.compile(r"(\w+)\s+([+\-0-9.,]+)")
_LINE_BREAK = re.compile(r"\r\n?|\n")


class T3DParseError(ValueError):
    """Raised when T3D text does not have the expected structure."""


def _split_lines(text: str) -> list[str]:
    lines = _LINE_BREAK.split(text)
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def _split_property(line: str, space_separated: bool) -> tuple[str, str]:
    if space_separated:
        match = _SPACE_SPLIT_PROPERTY.search(line)
        if match is None:
            raise T3DParseError(f"Failed to split string: {line}")
        return match.group(1), match.group(2)
    key, separator, value = line.partition("=")
    if not separator:
        raise T3DParseError(f"Failed to split string: {line}")
    return key, value


def _read_body(obj: T3DObject, lines: Iterator[str], *, custom_properties: bool) -> None:
    """Fill ``obj`` from ``lines`` up to and including its ``End`` line."""
    space_separated = obj.type.lower() == "polygon"
    for line in lines:
        if parse_end(line, obj.type) is not None:
            return

        if parse_command(line, "BEGIN") is not None:
            try:
                obj.sub_objects.append(parse_object(line, lines))
            except T3DParseError as exc:
                raise T3DParseError(f"Failed to parse sub object on: {obj.class_name}") from exc
            continue

        if custom_properties:
            rest = parse_command(line, "CUSTOMPROPERTIES")
            if rest is not None:
                obj.custom_properties = rest
                continue

        key, value = _split_property(line.strip(), space_separated)
        obj.properties.add(key, value)


def parse_actor(header: str, lines: Iterable[str]) -> T3DObject:
    """Parse an actor whose header (the text after ``Begin Actor``) is ``header``.

    Lines are consumed from ``lines`` up to the matching ``End Actor``.
    """
    class_name = parse_value(header, "CLASS=")
    if class_name is None:
        raise T3DParseError("Failed to extract classname!")
    name = parse_value(header, "NAME=")
    if name is None:
        raise T3DParseError("Failed to extract name!")

    actor = T3DObject(
        class_name=class_name,
        name=name,
        obj_name=parse_value(header, "OBJNAME=") or "",
        archetype=parse_value(header, "ARCHETYPE=") or "",
        type="Actor",
    )
    _read_body(actor, iter(lines), custom_properties=False)
    return actor


def parse_object(header: str, lines: Iterable[str]) -> T3DObject:
    """Parse a ``Begin <Type> ...`` block whose full opening line is ``header``."""
    object_type = parse_value(header, "BEGIN ")
    if object_type is None:
        raise T3DParseError("Failed to extract object type!")

    obj = T3DObject(
        type=object_type,
        class_name=parse_value(header, "CLASS=") or "",
        name=parse_value(header, "NAME=") or "",
        obj_name=parse_value(header, "OBJNAME=") or "",
        archetype=parse_value(header, "ARCHETYPE=") or "",
    )

    kind = object_type.lower()
    if kind == "object" and (not obj.class_name or not obj.name):
        raise T3DParseError(f"Object was missing Class or Name. Header: {header}")
    if kind == "model" and not obj.name:
        raise T3DParseError(f"Model was missing Name. Header: {header}")

    _read_body(obj, iter(lines), custom_properties=True)
    return obj


def parse_map(text: str) -> list[T3DObject]:
    """Parse the actors of a ``Begin Map`` document.

    Parsing stops at the first actor that cannot be read; the actors read
    before it are returned.
    """
    rest = parse_begin(text.lstrip(), "MAP")
    if rest is None:
        raise T3DParseError("File did not contain map!")

    all_lines = _split_lines(rest)
    if all_lines:
        map_name = parse_value(all_lines[0], "Name=")
        if map_name is not None:
            log.info("Import map: %s", map_name)

    objects: list[T3DObject] = []
    lines = iter(all_lines)
    for line in lines:
        header = parse_begin(line, "ACTOR")
        if header is None:
            continue
        try:
            objects.append(parse_actor(header, lines))
        except T3DParseError as exc:
            log.error("Failed to parse actor: %s", exc)
            break
    return objects