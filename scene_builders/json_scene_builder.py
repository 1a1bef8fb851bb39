import json
import logging
import math
from pathlib import Path
from typing import Optional

from core.camera import Camera
from core.errors import SceneArgumentError
from core.geometry import Box, Plane, Primitive, Sphere
from core.lights import DirectionalLight, Light, PointLight, SurfaceLight
from core.material import LambertianMaterial, MaterialStrategy, MetalMaterial, PhongMaterial
from core.math import Vec3
from core.scene import Scene, SceneBuilder

logger = logging.getLogger(__name__)

DEFAULT_AMBIENT = [0.1, 0.1, 0.1]


def _vector(node: dict, key: str, default) -> Vec3:
    values = node.get(key)
    if values is None:
        values = default
    return Vec3.from_values(values, key)


def _number(node: dict, key: str, default: float) -> float:
    value = node.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise SceneArgumentError(f"'{key}' must be a finite number, got {value!r}")
    return float(value)


def _integer(node: dict, key: str, default: int) -> int:
    value = node.get(key, default)
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, bool) or not isinstance(value, int):
        raise SceneArgumentError(f"'{key}' must be an integer, got {value!r}")
    return value


def _text(node: dict, key: str, default: str) -> str:
    value = node.get(key, default)
    if value is None:
        return default
    return str(value)


def _list(root: dict, key: str) -> list:
    items = root.get(key) or []
    if not isinstance(items, list):
        raise SceneArgumentError(f"'{key}' must be a list")
    return items


# -- primitives -------------------------------------------------------------

def _sphere(node: dict, name: str, material_id: str) -> Primitive:
    return Sphere(name, material_id,
                  _vector(node, "position", [0, 0, 0]),
                  _number(node, "radius", 1.0))


def _plane(node: dict, name: str, material_id: str) -> Primitive:
    return Plane(name, material_id,
                 _vector(node, "position", [0, 0, 0]),
                 _vector(node, "normal", [0, 1, 0]))


def _box(node: dict, name: str, material_id: str) -> Primitive:
    return Box(name, material_id,
               _vector(node, "position", [0, 0, 0]),
               _number(node, "width", 1.0),
               _number(node, "height", 1.0),
               _number(node, "depth", 1.0))


# -- lights -----------------------------------------------------------------

def _point_light(node: dict, color: Vec3, intensity: float) -> Light:
    return PointLight(color, intensity, _vector(node, "position", [0, 10, 0]))


def _directional_light(node: dict, color: Vec3, intensity: float) -> Light:
    return DirectionalLight(color, intensity, _vector(node, "direction", [0, -1, 0]))


def _surface_light(node: dict, color: Vec3, intensity: float) -> Light:
    return SurfaceLight(color, intensity,
                        _vector(node, "position", [0, 10, 0]),
                        _vector(node, "normal", [0, -1, 0]),
                        _number(node, "width", 2.0),
                        _number(node, "height", 2.0),
                        _integer(node, "samples", 16))


# -- materials --------------------------------------------------------------

def _phong(node: dict, color: Vec3, ambient: Vec3) -> MaterialStrategy:
    return PhongMaterial(color,
                         diffuse=_number(node, "diffuseCoefficient", 0.8),
                         specular=_number(node, "specularCoefficient", 0.5),
                         hardness=_number(node, "specularHardness", 50.0),
                         reflectivity=_number(node, "reflectivity", 0.0),
                         transparency=_number(node, "transparency", 0.0),
                         refractive_index=_number(node, "refractiveIndex", 1.0),
                         ambient=ambient)


def _lambertian(node: dict, color: Vec3, ambient: Vec3) -> MaterialStrategy:
    return LambertianMaterial(color,
                              diffuse=_number(node, "diffuseCoefficient", 0.8),
                              ambient=ambient)


def _metal(node: dict, color: Vec3, ambient: Vec3) -> MaterialStrategy:
    return MetalMaterial(color,
                         reflectivity=_number(node, "reflectivity", 1.0),
                         fuzziness=_number(node, "fuzziness", 0.0))


class JsonSceneBuilder:
    """
    Builds a Scene from the JSON scene format.

    Each section is dispatched on its "type" field through the tables below;
    entries whose type is not listed are logged and skipped.
    """

    PRIMITIVES = {
        "sphere": _sphere,
        "plane": _plane,
        "box": _box,
    }

    LIGHTS = {
        "point": _point_light,
        "directional": _directional_light,
        "surface": _surface_light,
    }

    MATERIALS = {
        "phong": _phong,
        "lambertian": _lambertian,
        "metal": _metal,
    }

    def load_file(self, path) -> Scene:
        path = Path(path)
        if not path.is_file():
            raise FileNotFoundError(f"Scene file not found: {path}")
        with open(path, "r", encoding="utf-8") as f:
            scene = self._parse(self._decode(f.read(), str(path)))
        logger.info("Loaded scene %s: %dx%d, %d primitive(s), %d light(s), %d material(s)",
                    path, scene.width, scene.height,
                    len(scene.primitives), len(scene.lights), len(scene.materials))
        return scene

    def load_string(self, text: str) -> Scene:
        return self._parse(self._decode(text, "<string>"))

    @staticmethod
    def _decode(text: str, source: str) -> dict:
        try:
            root = json.loads(text)
        except json.JSONDecodeError as e:
            raise SceneArgumentError(f"Invalid scene JSON in {source}: {e}") from e
        if not isinstance(root, dict):
            raise SceneArgumentError(f"Scene JSON in {source} must be an object")
        return root

    def _parse(self, root: dict) -> Scene:
        builder = SceneBuilder()
        builder.camera(self._camera(root.get("camera") or {}, _number(root, "focalDistance", 5.0)))
        builder.image_size(_integer(root, "imageWidth", 800), _integer(root, "imageHeight", 600))
        builder.samples_per_pixel(_integer(root, "samplesPerPixel", 1))
        builder.max_bounces(_integer(root, "rayMaxBounces", 3))
        builder.background(_vector(root, "backgroundColor", [0, 0, 0]))

        for node in _list(root, "materials"):
            parsed = self._material(node)
            if parsed is not None:
                builder.add_material(*parsed)

        for node in _list(root, "lights"):
            light = self._light(node)
            if light is not None:
                builder.add_light(light)

        for node in _list(root, "primitives"):
            primitive = self._primitive(node)
            if primitive is not None:
                builder.add_primitive(primitive)

        return builder.build()

    @staticmethod
    def _camera(node: dict, focal_distance: float) -> Camera:
        return Camera(_vector(node, "position", [0, 0, -5]),
                      _vector(node, "direction", [0, 0, 1]),
                      _vector(node, "normalUp", [0, 1, 0]),
                      _number(node, "angleOfVision", 60.0),
                      focal_distance)

    def _material(self, node: dict):
        material_type = _text(node, "type", "phong")
        factory = self.MATERIALS.get(material_type)
        if factory is None:
            logger.warning("Unknown material type: %s", material_type)
            return None
        material_id = _text(node, "id", "default")
        color = _vector(node, "color", [1, 1, 1])
        ambient = _vector(node, "ambient", DEFAULT_AMBIENT)
        return material_id, factory(node, color, ambient)

    def _light(self, node: dict) -> Optional[Light]:
        light_type = _text(node, "type", "point")
        factory = self.LIGHTS.get(light_type)
        if factory is None:
            logger.warning("Unknown light type: %s", light_type)
            return None
        return factory(node,
                       _vector(node, "color", [1, 1, 1]),
                       _number(node, "intensity", 1.0))

    def _primitive(self, node: dict) -> Optional[Primitive]:
        primitive_type = _text(node, "type", "")
        factory = self.PRIMITIVES.get(primitive_type)
        if factory is None:
            logger.warning("Unknown primitive type: %s", primitive_type)
            return None
        return factory(node,
                       _text(node, "name", "unnamed"),
                       _text(node, "materialId", "default"))
