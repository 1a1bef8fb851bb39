"""Environment driven settings for the ray tracer."""

import os

# Logging
LOG_LEVEL = os.getenv("RAYTRACER_LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("RAYTRACER_LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s")
LOG_FILE = os.getenv("RAYTRACER_LOG_FILE") or None

# Pixels between two progress notifications
PROGRESS_UPDATE_INTERVAL = int(os.getenv("RAYTRACER_PROGRESS_INTERVAL", "1000"))
