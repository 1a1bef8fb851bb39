from abc import ABC, abstractmethod
from typing import List

from core.image import Image
from core.scene import Scene
from renderers.observers import RenderProgressListener


class BaseRenderer(ABC):
    """Base class every renderer implements; also holds the progress listeners."""

    def __init__(self, name: str):
        self.name = name
        self._listeners: List[RenderProgressListener] = []

    @abstractmethod
    def render(self, scene: Scene) -> Image:
        """Render the scene into an RGB24 image grid."""
        pass

    @abstractmethod
    def get_capabilities(self) -> List[str]:
        pass

    def get_name(self) -> str:
        return self.name

    def supports(self, feature: str) -> bool:
        return feature in self.get_capabilities()

    # Listeners are registered before render() starts
    def add_progress_listener(self, listener: RenderProgressListener):
        if listener is not None:
            self._listeners.append(listener)

    def remove_progress_listener(self, listener: RenderProgressListener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    @property
    def listeners(self) -> List[RenderProgressListener]:
        return list(self._listeners)

    def _notify_render_start(self, total_pixels: int):
        for listener in self._listeners:
            listener.render_start(total_pixels)

    def _notify_progress(self, pixels_done: int, total_pixels: int):
        for listener in self._listeners:
            listener.progress_update(pixels_done, total_pixels)

    def _notify_tile_completed(self, tile_id: int):
        for listener in self._listeners:
            listener.tile_completed(tile_id)

    def _notify_render_complete(self):
        for listener in self._listeners:
            listener.render_complete()


class RendererFactory:
    _renderers = {}

    @classmethod
    def register(cls, name: str, renderer_class):
        cls._renderers[name] = renderer_class

    @classmethod
    def create(cls, name: str, **kwargs) -> BaseRenderer:
        if name not in cls._renderers:
            raise ValueError(f"Unknown renderer: {name}")
        return cls._renderers[name](**kwargs)

    @classmethod
    def list_available(cls) -> List[str]:
        return list(cls._renderers.keys())
