from __future__ import annotations

from dataclasses import dataclass
from typing import List

from mandelstripe.geometry import ImageBounds, Viewport, pixel_to_complex


@dataclass(frozen=True)
class Stripe:
    """A row-contiguous slice of the image assigned to one worker."""

    index: int
    top: int
    bounds: ImageBounds
    viewport: Viewport

    @property
    def height(self) -> int:
        return self.bounds.height

    @property
    def start(self) -> int:
        return self.top * self.bounds.width

    @property
    def stop(self) -> int:
        return (self.top + self.bounds.height) * self.bounds.width


def rows_per_stripe(height: int, threads: int) -> int:
    if threads < 1:
        raise ValueError("threads must be >= 1.")
    return height // threads + 1


def plan_stripes(bounds: ImageBounds, viewport: Viewport, threads: int) -> List[Stripe]:
    """Split ``bounds`` into consecutive horizontal stripes.

    Every stripe but the last is ``rows_per_stripe(height, threads)`` rows
    tall; the last one takes what remains and is never empty. Each stripe
    gets its own viewport, interpolated against the full image, so it can be
    rendered with bounds local to itself.
    """
    width, height = bounds
    step = rows_per_stripe(height, threads)

    stripes: List[Stripe] = []
    top = 0
    while top < height:
        stripe_height = min(step, height - top)
        local = Viewport(
            upper_left=pixel_to_complex(bounds, (0, top), viewport),
            lower_right=pixel_to_complex(bounds, (width, top + stripe_height), viewport),
        )
        stripes.append(Stripe(
            index=len(stripes),
            top=top,
            bounds=ImageBounds(width, stripe_height),
            viewport=local,
        ))
        top += stripe_height
    return stripes
