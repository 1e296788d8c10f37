"""Parsing helpers for T3D text: commands, key values, vectors and rotators."""

from __future__ import annotations

import logging
import re
import struct
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from t3dupgrade.settings import ImporterSettings

log = logging.getLogger(__name__)


def _single(value: float) -> float:
    return struct.unpack("<f", struct.pack("<f", value))[0]


# Legacy rotation units to degrees and back, held at single precision.
UNR_TO_DEG = _single(0.00549316540360483)
DEG_TO_UNR = _single(182.0444)

# Class'Package.Sub.Path'
_PACKAGE_NAME_PATTERN = re.compile(r"(\w*)'([^.]*).(.*)'")
_FLOAT_PREFIX = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_UNQUOTED_VALUE = re.compile(r"[^\s,)]*")


@dataclass(frozen=True)
class Vector:
    """A three component vector."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __add__(self, other: Vector) -> Vector:
        if not isinstance(other, Vector):
            return NotImplemented
        return Vector(self.x + other.x, self.y + other.y, self.z + other.z)

    def __mul__(self, factor: float | Vector) -> Vector:
        if isinstance(factor, Vector):
            return Vector(self.x * factor.x, self.y * factor.y, self.z * factor.z)
        if isinstance(factor, (int, float)):
            return Vector(self.x * factor, self.y * factor, self.z * factor)
        return NotImplemented

    __rmul__ = __mul__


@dataclass(frozen=True)
class Rotator:
    """Pitch, yaw and roll."""

    pitch: float = 0.0
    yaw: float = 0.0
    roll: float = 0.0

    def __add__(self, other: Rotator) -> Rotator:
        if not isinstance(other, Rotator):
            return NotImplemented
        return Rotator(self.pitch + other.pitch, self.yaw + other.yaw, self.roll + other.roll)


def _find_key(text: str, key: str) -> int:
    """Case-insensitive position of ``key`` in ``text``, skipping quoted runs."""
    lowered = text.lower()
    needle = key.lower()
    in_quotes = False
    for index, char in enumerate(lowered):
        if char == '"':
            in_quotes = not in_quotes
        if not in_quotes and lowered.startswith(needle, index):
            return index
    return -1


def parse_value(text: str, key: str) -> str | None:
    """Value following ``key`` (e.g. ``"Name="``), or None if the key is absent.

    A quoted value runs to the closing quote; otherwise the value stops at
    whitespace, a comma or a closing parenthesis.
    """
    index = _find_key(text, key)
    if index < 0:
        return None
    rest = text[index + len(key):]
    if rest.startswith('"'):
        end = rest.find('"', 1)
        return rest[1:] if end < 0 else rest[1:end]
    match = _UNQUOTED_VALUE.match(rest)
    return match.group(0) if match else ""


def parse_command(text: str, match: str) -> str | None:
    """Text after the leading word ``match`` (case-insensitive), or None."""
    stripped = text.lstrip(" \t")
    size = len(match)
    if stripped[:size].lower() != match.lower():
        return None
    following = stripped[size:size + 1]
    if following and (following.isalnum() or following == "_"):
        return None
    return stripped[size:].lstrip(" \t")


def parse_begin(text: str, match: str) -> str | None:
    """Text after ``Begin <match>``, or None if the line does not open that block."""
    rest = parse_command(text, "BEGIN")
    return None if rest is None else parse_command(rest, match)


def parse_end(text: str, match: str) -> str | None:
    """Text after ``End <match>``, or None if the line does not close that block."""
    rest = parse_command(text, "END")
    return None if rest is None else parse_command(rest, match)


def parse_float(text: str) -> float:
    """Leading number of ``text``; 0.0 when there is none."""
    match = _FLOAT_PREFIX.match(text)
    return float(match.group(1)) if match else 0.0


def _parse_components(text: str, names: tuple[str, ...]) -> list[float] | None:
    values = []
    for name in names:
        key = f"{name}="
        index = _find_key(text, key)
        if index < 0:
            log.error("Failed to extract %s value from %s.", name, text)
            return None
        values.append(parse_float(text[index + len(key):]))
    return values


def rotator_to_ue4(rotator: Rotator) -> Rotator:
    """Convert a rotator from legacy rotation units to degrees."""
    return Rotator(
        rotator.pitch * UNR_TO_DEG,
        rotator.yaw * UNR_TO_DEG,
        rotator.roll * UNR_TO_DEG,
    )


def parse_rotator(text: str, fixup: bool) -> Rotator:
    """Read ``(Pitch=..,Yaw=..,Roll=..)``; a missing part yields a zero rotator."""
    values = _parse_components(text, ("Pitch", "Yaw", "Roll"))
    if values is None:
        return Rotator()
    rotator = Rotator(*values)
    return rotator_to_ue4(rotator) if fixup else rotator


def write_rotator(rotator: Rotator) -> str:
    """Format a rotator as T3D text."""
    return f"(Pitch={rotator.pitch:f},Yaw={rotator.yaw:f},Roll={rotator.roll:f})"


def fixup_rotator_string(text: str) -> str:
    """Rewrite a legacy rotator string in degrees."""
    return write_rotator(parse_rotator(text, True))


def parse_vector(text: str) -> Vector:
    """Read ``(X=..,Y=..,Z=..)``; a missing part yields a zero vector."""
    values = _parse_components(text, ("X", "Y", "Z"))
    if values is None:
        return Vector()
    return Vector(*values)


def write_vector(vector: Vector) -> str:
    """Format a vector as T3D text."""
    return f"(X={vector.x:f},Y={vector.y:f},Z={vector.z:f})"


def _lookup(mapping: dict[str, str], key: str) -> str | None:
    if key in mapping:
        return mapping[key]
    folded = key.lower()
    return next((value for name, value in mapping.items() if name.lower() == folded), None)


def remapped_package_path(original_path: str, settings: ImporterSettings) -> str:
    """Map ``Class'Package.Group.Name'`` to ``Class'<remapped>/Group/Name.Name'``.

    The path is returned unchanged when it does not have that shape or when
    its package has no entry in ``settings.package_remap``.
    """
    match = _PACKAGE_NAME_PATTERN.search(original_path)
    if match is None:
        log.warning("Failed to extract package path from %s", original_path)
        return original_path

    class_name, package, sub_path = (group or "" for group in match.groups())
    remapped = _lookup(settings.package_remap, package)
    if remapped is None:
        log.warning("Failed to find remap for package %s", package)
        return original_path

    object_name = sub_path.rpartition(".")[2]
    sub_path = f"{sub_path.replace('.', '/')}.{object_name}"
    return f"{class_name}'{remapped}/{sub_path}'"