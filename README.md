# t3dupgrade

`t3dupgrade` reads a level exported as T3D text by an older engine
generation and rewrites its actors into the component layout a newer
editor expects, producing new T3D text.

## How a map is converted

`t3dupgrade.importer.convert_map(text, settings=None)` runs these steps:

1. **Parse** – `t3dupgrade.parser.parse_map` reads the `Begin Map` block
   into a list of `T3DObject` actors. Nested `Begin ... End` blocks
   (objects, models, polygons) become sub-objects; header fields (class,
   name, object name, archetype), properties (keys may repeat) and
   `CustomProperties` lines are kept. Polygon properties are split on
   whitespace, all others on `=`. A document that does not open with
   `Begin Map` raises `T3DParseError`; parsing stops at the first actor
   that cannot be read, keeping the actors read before it.
2. **Filter** – actors of class `MapPackage` or `TopLevelPackage` are
   dropped (`is_ignored_object`).
3. **Remap** – `remap_objects` replaces class names listed in the
   settings' class remapping with the target class path, and replaces a
   non-empty archetype with the target's default archetype.
4. **Upgrade** – `upgrade_objects` hands each actor to the upgrader that
   `upgrader_for` picks by class name (case-insensitive):
   - `Note` → `NoteUpgrader`
   - `PrefabInstance` → `PrefabInstanceUpgrader` (replaced by a note
     naming the prefab)
   - `BlockingVolume`, `PathBlockingVolume`, `Brush` → `VolumeUpgrader`
   - `StaticMeshActor` → `StaticMeshUpgrader` (mesh and material paths
     remapped, `Materials(n)` become `OverrideMaterials(n)`)
   - the point, spot, sky and directional light classes with their
     `Dominant`, `Movable` and `Toggleable` variants → `LightUpgrader`
   - anything else → `GenericUpgrader`, which makes the component named
     by `Components(0)` (or `Components(1)`) the root component.

   Legacy `Location`, `Rotation`, `DrawScale3D` and `DrawScale` are moved
   onto the root component as `RelativeLocation`, `RelativeRotation` (in
   degrees) and `RelativeScale3D`. The first upgrader that fails raises
   `UpgradeError` and the conversion stops; for instance an unregistered
   actor class with no `Components(0)`/`Components(1)` entry fails, except
   `WorldInfo`, which is left with just its label.
5. **Export** – `export_objects` writes the actors inside
   `Begin Map` / `Begin Level` ... `End Level` / `End Map`, with `\r\n`
   line endings, leaving out `DecalActor` actors.

## Installation

```
pip install .
```

The package has no runtime dependencies.

## Command line

```
t3dupgrade MyMap.t3d -o Upgraded.t3d -s settings.json
```

- `input` – the T3D map file to read.
- `-o`, `--output` – file to write; standard output when omitted.
- `-s`, `--settings` – JSON settings file; built-in defaults when omitted.

On a read, parse, settings or upgrade error a message is printed to
standard error and the exit status is 1.

## Settings

`ImporterSettings` holds:

| field | default |
|---|---|
| `class_remapping` | `PathBlockingVolume` → `/Script/Engine.BlockingVolume` |
| `package_remap` | empty |
| `light_brightness_multiplier` | `10.0` |
| `light_radius_multiplier` | `1.25` (applied only when a radius differs from `1024`) |
| `indirect_lighting_intensity` | `1.0` |

`load_settings(path)` reads a JSON object with any of these keys; keys
present replace the defaults and unknown keys raise `ValueError`. A class
remapping entry may be a class path string, `null`, or an object with
`class_path`, `archetype` and `properties`:

```json
{
  "package_remap": {"MyPackage": "/Game/MyGame/Meshes/MyPackage"},
  "class_remapping": {
    "PathBlockingVolume": "/Script/Engine.BlockingVolume",
    "OldTrigger": {"class_path": "/Script/Engine.TriggerBox"}
  },
  "light_brightness_multiplier": 8
}
```

With that table, `remapped_package_path("StaticMesh'MyPackage.Sub.MyMesh'", settings)`
gives `StaticMesh'/Game/MyGame/Meshes/MyPackage/Sub/MyMesh.MyMesh'`;
paths whose package is not listed are returned unchanged. The
`properties` of a class remap entry are stored but not applied.

## Library use

```python
from t3dupgrade.importer import convert_map
from t3dupgrade.settings import load_settings

settings = load_settings("settings.json")
with open("MyMap.t3d", encoding="utf-8") as handle:
    upgraded = convert_map(handle.read(), settings)
```

Other pieces:

- `t3dupgrade.t3dobject` – `T3DObject` (`reconstruct_t3d`,
  `sub_object_by_name`, `sub_object_by_obj_name`, `make_note_from_actor`,
  `make_note`) and `PropertyMap`, an ordered multi-map with
  case-insensitive keys.
- `t3dupgrade.utils` – `Vector`, `Rotator`, `parse_vector`,
  `write_vector`, `parse_rotator`, `write_rotator`, `rotator_to_ue4`,
  `fixup_rotator_string`, `parse_value`, `parse_command`, `parse_begin`,
  `parse_end`, `parse_float`, `remapped_package_path`.
- `t3dupgrade.light` – `light_type_and_flags`, `strip_modifiers`,
  `light_component_name`, `remove_unwanted_components`,
  `upgrade_shared_properties`.
- `t3dupgrade.staticmesh` – `merge_vertex_paint`, `collect_materials`,
  `replace_materials`.

## What it does not do

The package works on text only. It does not spawn actors in an editor
level, resolve classes or assets, or rebuild brush geometry; the upgraded
T3D is meant to be imported by the editor. `convert_map` does not replace
actors of unknown classes with notes by itself; `T3DObject.make_note_from_actor`
is there for callers who want that.

## Running the tests

```
pip install .[test]
pytest
```