"""Public API for the striped, multi-threaded Mandelbrot renderer."""

from .errors import PartitionError, RenderError
from .geometry import ImageBounds, Viewport, pixel_to_complex
from .kernels import escape_time
from .partition import Stripe, plan_stripes, rows_per_stripe
from .renderers.cpu_threads import render_frame_cpu, render_stripe

__all__ = [
    "ImageBounds",
    "PartitionError",
    "RenderError",
    "Stripe",
    "Viewport",
    "escape_time",
    "pixel_to_complex",
    "plan_stripes",
    "render_frame_cpu",
    "render_stripe",
    "rows_per_stripe",
]
