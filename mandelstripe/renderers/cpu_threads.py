from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import List, Optional, Tuple

import numpy as np
from tqdm import tqdm

from mandelstripe.errors import PartitionError, RenderError
from mandelstripe.geometry import ImageBounds, Viewport
from mandelstripe.kernels import render_stripe_kernel
from mandelstripe.partition import Stripe, plan_stripes
from mandelstripe.util.logging_setup import get_logger

DEFAULT_LIMIT = 255

def default_threads() -> int:
    return max(1, os.cpu_count() or 1)

def render_stripe(
    pixels: np.ndarray,
    bounds: ImageBounds,
    viewport: Viewport,
    limit: int = DEFAULT_LIMIT,
    *,
    top: int = 0,
    image_height: Optional[int] = None,
) -> None:
    """Fill ``pixels`` with the grayscale escape-time image of ``viewport``.

    ``pixels`` is the row-major view owned by this stripe and must hold
    exactly ``width * height`` bytes. Escaping points get ``255 - i``,
    points that never escape get 0.

    By default ``viewport`` covers just these bounds. When ``image_height``
    is given, ``viewport`` covers the whole image instead and the stripe's
    rows start at row ``top`` of it.
    """
    width, height = bounds
    if pixels.ndim != 1 or pixels.shape[0] != width * height:
        raise PartitionError(
            f"stripe buffer holds {pixels.size} pixels, bounds {width}x{height} need {width * height}"
        )
    if pixels.dtype != np.uint8:
        raise PartitionError(f"stripe buffer must be uint8, got {pixels.dtype}")
    if image_height is None:
        top, image_height = 0, height
    elif top < 0 or top + height > image_height:
        raise PartitionError(f"stripe rows {top}..{top + height} fall outside image height {image_height}")

    ul, lr = viewport.upper_left, viewport.lower_right
    render_stripe_kernel(
        pixels, int(width), int(height), int(top), int(image_height),
        float(ul.real), float(ul.imag), float(lr.real), float(lr.imag),
        int(limit),
    )

def _render_one(pixels: np.ndarray, stripe: Stripe, viewport: Viewport, image_height: int, limit: int, frame_id: str) -> int:
    logger = get_logger()
    logger.debug("[Frame %s] Stripe %s start rows=%s..%s", frame_id, stripe.index, stripe.top, stripe.top + stripe.height)
    render_stripe(pixels, stripe.bounds, viewport, limit, top=stripe.top, image_height=image_height)
    logger.debug("[Frame %s] Stripe %s done", frame_id, stripe.index)
    return stripe.index

def render_frame_cpu(
    *,
    bounds: Tuple[int, int],
    viewport: Viewport,
    threads: Optional[int] = None,
    limit: int = DEFAULT_LIMIT,
    progress: bool = False,
    frame_id: str = "0",
) -> np.ndarray:
    """Render the full image, one worker thread per stripe.

    Returns the flat ``uint8`` buffer of ``width * height`` pixels only once
    every worker has finished. If any stripe fails, all workers are still
    joined and a single ``RenderError`` is raised instead.
    """
    logger = get_logger()
    bounds = ImageBounds(*bounds)
    if bounds.width < 1 or bounds.height < 1:
        raise ValueError(f"bounds must be positive, got {bounds.width}x{bounds.height}")
    if threads is None:
        threads = default_threads()

    stripes = plan_stripes(bounds, viewport, threads)
    buf = np.zeros(bounds.size, dtype=np.uint8)

    logger.info("[Frame %s] CPU render start size=%sx%s threads=%s stripes=%s limit=%s",
                frame_id, bounds.width, bounds.height, threads, len(stripes), limit)

    failures: List[Tuple[int, BaseException]] = []
    with ThreadPoolExecutor(max_workers=len(stripes), thread_name_prefix="stripe") as pool:
        futures = {
            pool.submit(_render_one, buf[s.start:s.stop], s, viewport, bounds.height, limit, frame_id): s
            for s in stripes
        }
        done = as_completed(futures)
        if progress:
            done = tqdm(done, total=len(futures), desc=f"frame {frame_id}", unit="stripe")
        for fut in done:
            stripe = futures[fut]
            exc = fut.exception()
            if exc is not None:
                logger.error("[Frame %s] Stripe %s failed", frame_id, stripe.index, exc_info=exc)
                failures.append((stripe.index, exc))

    if failures:
        failures.sort(key=lambda f: f[0])
        raise RenderError(failures) from failures[0][1]

    logger.info("[Frame %s] CPU render done", frame_id)
    return buf
