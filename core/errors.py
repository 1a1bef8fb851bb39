class RayTracerError(Exception):
    """Base class for every error raised by the renderer."""


class SceneArgumentError(RayTracerError, ValueError):
    """Invalid scene parameter: raised before any rendering starts."""


class VectorMathError(RayTracerError, ArithmeticError):
    """Numerical failure such as normalizing a zero-length vector."""


class RenderInterruptedError(RayTracerError):
    """The render was interrupted; the partial image has been discarded."""
