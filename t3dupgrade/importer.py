"""Turning a legacy T3D map into upgraded T3D text, and the command that does it."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Iterable, Sequence

from t3dupgrade.light import LightUpgrader
from t3dupgrade.parser import T3DParseError, parse_map
from t3dupgrade.settings import ImporterSettings, load_settings
from t3dupgrade.staticmesh import StaticMeshUpgrader
from t3dupgrade.t3dobject import NEWLINE, T3DObject
from t3dupgrade.upgraders import (
    GenericUpgrader,
    NoteUpgrader,
    PrefabInstanceUpgrader,
    UpgradeError,
    Upgrader,
    VolumeUpgrader,
)

log = logging.getLogger(__name__)

_IGNORED_OBJECTS = frozenset({"mappackage", "toplevelpackage"})
_SKIPPED_ON_EXPORT = frozenset({"decalactor"})

_LIGHT_CLASSES = (
    "PointLight",
    "DominantPointLight",
    "PointLightMovable",
    "PointLightToggleable",
    "SpotLight",
    "DominantSpotLight",
    "SpotLightMovable",
    "SpotLightToggleable",
    "SkyLight",
    "SkyLightToggleable",
    "DirectionalLight",
    "DirectionalLightToggleable",
    "DominantDirectionalLight",
    "DominantDirectionalLightMovable",
)

UPGRADER_CLASSES: dict[str, type[Upgrader]] = {
    "note": NoteUpgrader,
    "prefabinstance": PrefabInstanceUpgrader,
    "blockingvolume": VolumeUpgrader,
    "pathblockingvolume": VolumeUpgrader,
    "brush": VolumeUpgrader,
    "staticmeshactor": StaticMeshUpgrader,
    **{name.lower(): LightUpgrader for name in _LIGHT_CLASSES},
}


def is_ignored_object(class_name: str) -> bool:
    """Whether objects of ``class_name`` are left out of an import."""
    return class_name.lower() in _IGNORED_OBJECTS


def upgrader_for(class_name: str) -> type[Upgrader]:
    """Upgrader class for actors of ``class_name``; the generic one when none is registered."""
    upgrader = UPGRADER_CLASSES.get(class_name.lower())
    if upgrader is None:
        log.warning("Failed to find upgrader for %s. Using generic actor upgrader instead", class_name)
        return GenericUpgrader
    return upgrader


def remap_objects(objects: Iterable[T3DObject], settings: ImporterSettings) -> None:
    """Apply the class remapping of ``settings`` to ``objects`` in place."""
    objects = list(objects)
    for class_name, remap in settings.class_remapping.items():
        if remap.class_path is None:
            continue
        folded = class_name.lower()
        for obj in objects:
            if obj.class_name.lower() != folded:
                continue
            obj.class_name = remap.class_path
            if obj.archetype:
                obj.archetype = remap.archetype


def upgrade_objects(objects: Iterable[T3DObject], settings: ImporterSettings) -> None:
    """Upgrade every object in place; stop with UpgradeError at the first failure."""
    for obj in objects:
        upgrader = upgrader_for(obj.class_name)(settings)
        try:
            upgrader.upgrade(obj)
        except UpgradeError as exc:
            raise UpgradeError(f"Failed to upgrade class {obj.class_name}: {exc}") from exc


def export_objects(objects: Iterable[T3DObject]) -> str:
    """Write upgraded actors as a T3D map, leaving out classes that are not imported."""
    parts = [f"Begin Map{NEWLINE}", f"Begin Level{NEWLINE}"]
    for obj in objects:
        if obj.class_name.lower() in _SKIPPED_ON_EXPORT:
            continue
        parts.append(obj.reconstruct_t3d(0) + NEWLINE)
    parts.append(f"End Level{NEWLINE}")
    parts.append(f"End Map{NEWLINE}")
    return "".join(parts)


def convert_map(text: str, settings: ImporterSettings | None = None) -> str:
    """Parse, remap and upgrade a legacy T3D map and return the new T3D text."""
    if settings is None:
        settings = ImporterSettings()
    objects = [obj for obj in parse_map(text) if not is_ignored_object(obj.class_name)]
    remap_objects(objects, settings)
    upgrade_objects(objects, settings)
    return export_objects(objects)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="t3dupgrade",
        description="Upgrade a legacy T3D map export to the newer actor layout.",
    )
    parser.add_argument("input", help="T3D map file to read")
    parser.add_argument("-o", "--output", help="file to write; standard output when omitted")
    parser.add_argument("-s", "--settings", help="JSON settings file")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Command-line entry point; returns the exit status."""
    args = _build_parser().parse_args(argv)
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s: %(message)s")

    try:
        settings = load_settings(args.settings) if args.settings else ImporterSettings()
        with open(args.input, encoding="utf-8", errors="replace") as handle:
            text = handle.read()
        result = convert_map(text, settings)
        if args.output:
            with open(args.output, "w", encoding="utf-8", newline="") as handle:
                handle.write(result)
        else:
            sys.stdout.write(result)
    except (OSError, ValueError, UpgradeError) as exc:
        kind = "parse error" if isinstance(exc, T3DParseError) else "error"
        print(f"t3dupgrade: {kind}: {exc}", file=sys.stderr)
        return 1
    return 0