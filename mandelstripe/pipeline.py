from __future__ import annotations

import time
from typing import Any, Dict

from mandelstripe.geometry import ImageBounds, Viewport
from mandelstripe.image.pillow_writer import write_image
from mandelstripe.partition import plan_stripes, rows_per_stripe
from mandelstripe.renderers.cpu_threads import render_frame_cpu
from mandelstripe.util.logging_setup import get_logger

def render_info(cfg: Dict[str, Any]) -> Dict[str, Any]:
    bounds = ImageBounds(int(cfg["width"]), int(cfg["height"]))
    viewport = Viewport(cfg["upper_left"], cfg["lower_right"])
    stripes = plan_stripes(bounds, viewport, int(cfg["threads"]))
    return {
        "renderer": "cpu-threads",
        "threads": int(cfg["threads"]),
        "stripes": len(stripes),
        "rows_per_stripe": rows_per_stripe(bounds.height, int(cfg["threads"])),
        "limit": int(cfg["limit"]),
    }

def render_to_file(*, cfg: Dict[str, Any], progress: bool = False) -> Dict[str, Any]:
    """Render the configured viewport and hand the finished buffer to the image sink."""
    logger = get_logger()

    bounds = ImageBounds(int(cfg["width"]), int(cfg["height"]))
    viewport = Viewport(cfg["upper_left"], cfg["lower_right"])
    output = str(cfg["output"])

    logger.info("Render start size=%sx%s upper_left=%s lower_right=%s threads=%s limit=%s",
                bounds.width, bounds.height, viewport.upper_left, viewport.lower_right,
                cfg["threads"], cfg["limit"])

    start = time.perf_counter()
    pixels = render_frame_cpu(
        bounds=bounds, viewport=viewport, threads=int(cfg["threads"]),
        limit=int(cfg["limit"]), progress=progress,
    )
    elapsed = time.perf_counter() - start
    logger.info("Render complete in %.3fs", elapsed)

    path = write_image(output, pixels, bounds)
    return {"output": path, "width": bounds.width, "height": bounds.height, "elapsed_seconds": elapsed}
