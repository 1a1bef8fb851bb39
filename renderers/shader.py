import logging
import threading
from typing import Optional

from core.geometry import Intersection
from core.math import Ray, Vec3
from core.scene import Scene

logger = logging.getLogger(__name__)

# Sentinel for primitives whose material id is not in the scene
MISSING_MATERIAL_COLOR = Vec3(1.0, 0.0, 1.0)


class Shader:
    """Dispatches a hit to the scatter rule of its material."""

    def __init__(self, scene: Scene):
        self.scene = scene
        self._reported = set()
        self._lock = threading.Lock()

    def shade(self, hit: Optional[Intersection], ray: Ray, depth: int) -> Vec3:
        if hit is None:
            return self.scene.background

        material = self.scene.material_for(hit)
        if material is None:
            self._report_missing(hit.primitive.material_id, hit.primitive.name)
            return MISSING_MATERIAL_COLOR

        return material.scatter(ray, hit, self.scene, depth)

    def _report_missing(self, material_id: str, primitive_name: str):
        with self._lock:
            if material_id in self._reported:
                return
            self._reported.add(material_id)
        logger.warning("Material '%s' referenced by '%s' not found, rendering as magenta",
                       material_id, primitive_name)
