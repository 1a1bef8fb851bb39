import logging

from core.errors import SceneArgumentError
from core.image import Image
from operations.base_operation import BaseOperation, OperationFactory, OperationOptions
from renderers.base_renderer import RendererFactory
from renderers.observers import ConsoleProgressListener
from scene_builders.json_scene_builder import JsonSceneBuilder

# registers "cpu_raytracer"
import renderers.cpu_renderer  # noqa: F401

logger = logging.getLogger(__name__)


class RayTracerOperation(BaseOperation):
    """Loads a JSON scene, renders it and writes the result as PNG."""

    def __init__(self, renderer: str = "cpu_raytracer"):
        super().__init__("ray-tracer")
        self.renderer_name = renderer

    def execute(self, options: OperationOptions) -> Image:
        if not options.input or not options.output:
            raise SceneArgumentError("ray-tracer requires both --input and --output")

        scene = JsonSceneBuilder().load_file(options.input)

        renderer = RendererFactory.create(self.renderer_name, threads=options.threads)
        renderer.add_progress_listener(ConsoleProgressListener())
        image = renderer.render(scene)

        image.save(options.output)
        logger.info("Image saved: %s", options.output)
        return image


OperationFactory.register("ray-tracer", RayTracerOperation)
