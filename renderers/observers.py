import logging
import threading

logger = logging.getLogger(__name__)


class RenderProgressListener:
    """
    Receives render lifecycle events. Every method is a no-op by default, so
    listeners override only what they need. Callbacks run on worker threads
    and must be safe to call concurrently.
    """

    def render_start(self, total_pixels: int):
        pass

    def progress_update(self, pixels_done: int, total_pixels: int):
        pass

    def tile_completed(self, tile_id: int):
        pass

    def render_complete(self):
        pass


class ConsoleProgressListener(RenderProgressListener):
    """Logs progress every 10%."""

    def __init__(self):
        self._last_step = -1
        self._lock = threading.Lock()

    def render_start(self, total_pixels: int):
        with self._lock:
            self._last_step = -1
        logger.info("Starting render: %d pixels", total_pixels)

    def progress_update(self, pixels_done: int, total_pixels: int):
        if total_pixels <= 0:
            return
        step = pixels_done * 10 // total_pixels
        with self._lock:
            if step <= self._last_step:
                return
            self._last_step = step
        logger.info("Progress: %d%%", step * 10)

    def render_complete(self):
        logger.info("Rendering complete: 100%")
