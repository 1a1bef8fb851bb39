import logging
import math
import random
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import List, Tuple

import numpy as np

from core import config
from core.camera import Viewport
from core.errors import RenderInterruptedError, SceneArgumentError
from core.image import Image
from core.math import Ray, Vec3
from core.scene import Scene
from renderers.base_renderer import BaseRenderer, RendererFactory
from renderers.shader import Shader

logger = logging.getLogger(__name__)


def split_bands(height: int, threads: int) -> List[Tuple[int, int]]:
    """Contiguous [start, end) row bands of ceil(height / threads) rows; the last may be shorter."""
    band_height = math.ceil(height / threads)
    return [(start, min(start + band_height, height)) for start in range(0, height, band_height)]


class _RenderJob:
    """State of one render() call, shared read-only by the band workers except for the counters."""

    def __init__(self, renderer: "CPURenderer", scene: Scene):
        self.renderer = renderer
        self.scene = scene
        self.viewport: Viewport = scene.camera.viewport(scene.width, scene.height)
        self.shader = Shader(scene)
        self.total_pixels = scene.width * scene.height
        # linear colors, one row per pixel address row * width + col
        self.colors = np.zeros((self.total_pixels, 3), dtype=np.float64)
        self.cancel = threading.Event()
        self._done = 0
        self._done_lock = threading.Lock()

    def trace(self, ray: Ray, depth: int) -> Vec3:
        scene = self.scene
        if depth >= scene.max_bounces:
            return scene.background
        hit = scene.intersect(ray)
        if hit is None:
            return scene.background
        return self.shader.shade(hit, ray, depth)

    def pixel_color(self, row: int, col: int) -> Vec3:
        scene = self.scene
        samples = scene.samples_per_pixel
        color = Vec3(0, 0, 0)
        for s in range(samples):
            # sample 0 is the pixel center so single-sample renders are deterministic
            if s == 0:
                u_offset = v_offset = 0.5
            else:
                u_offset = random.random()
                v_offset = random.random()
            u = (col + u_offset) / scene.width
            v = (row + v_offset) / scene.height
            color = color + self.trace(self.viewport.get_ray(u, v), 0)
        return color / samples

    def render_band(self, band_index: int, start_row: int, end_row: int):
        width = self.scene.width
        for row in range(start_row, end_row):
            if self.cancel.is_set():
                return
            for col in range(width):
                color = self.pixel_color(row, col)
                self.colors[row * width + col] = (color.x, color.y, color.z)
                self._pixel_done()
        self.renderer._notify_tile_completed(band_index)

    def _pixel_done(self):
        with self._done_lock:
            self._done += 1
            done = self._done
        if done % self.renderer.progress_interval == 0 or done == self.total_pixels:
            self.renderer._notify_progress(done, self.total_pixels)


class CPURenderer(BaseRenderer):
    """Whitted ray tracer that splits the image into row bands, one per worker thread."""

    def __init__(self, threads: int = 1, progress_interval: int = None):
        super().__init__("cpu_raytracer")
        if isinstance(threads, bool) or not isinstance(threads, int) or threads < 1:
            raise SceneArgumentError(f"Thread count must be a positive integer, got {threads!r}")
        if progress_interval is None:
            progress_interval = config.PROGRESS_UPDATE_INTERVAL
        if progress_interval < 1:
            raise SceneArgumentError(f"Progress interval must be positive, got {progress_interval}")
        self.threads = threads
        self.progress_interval = progress_interval

    def get_capabilities(self) -> List[str]:
        return [
            "ray_tracing",
            "shadows",
            "reflection",
            "refraction",
            "area_lights",
            "anti_aliasing",
        ]

    def trace(self, scene: Scene, ray: Ray, depth: int = 0) -> Vec3:
        """Radiance along a single ray, outside of a full render."""
        return _RenderJob(self, scene).trace(ray, depth)

    def render(self, scene: Scene) -> Image:
        job = _RenderJob(self, scene)
        bands = split_bands(scene.height, self.threads)
        logger.info("Rendering %dx%d, %d sample(s) per pixel, %d band(s)",
                    scene.width, scene.height, scene.samples_per_pixel, len(bands))

        self._notify_render_start(job.total_pixels)

        executor = ThreadPoolExecutor(max_workers=len(bands), thread_name_prefix="render-band")
        try:
            futures = [executor.submit(job.render_band, index, start, end)
                       for index, (start, end) in enumerate(bands)]
            for future in futures:
                future.result()
        except KeyboardInterrupt as exc:
            job.cancel.set()
            executor.shutdown(wait=True, cancel_futures=True)
            raise RenderInterruptedError("Render interrupted, partial image discarded") from exc
        except Exception:
            job.cancel.set()
            raise
        finally:
            executor.shutdown(wait=True)

        image = Image.from_radiance(scene.width, scene.height, job.colors)
        self._notify_render_complete()
        return image


RendererFactory.register("cpu_raytracer", CPURenderer)
