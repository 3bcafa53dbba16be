from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple, Tuple

from mandelstripe.kernels import pixel_to_complex_kernel


class ImageBounds(NamedTuple):
    width: int
    height: int

    @property
    def size(self) -> int:
        return self.width * self.height


@dataclass(frozen=True)
class Viewport:
    """Rectangle of the complex plane mapped onto the pixel grid.

    ``upper_left`` must lie above and to the left of ``lower_right``: the
    real part grows left to right while the imaginary part shrinks top to
    bottom, the opposite direction of the pixel row index.
    """

    upper_left: complex
    lower_right: complex

    @property
    def span(self) -> Tuple[float, float]:
        return (
            self.lower_right.real - self.upper_left.real,
            self.upper_left.imag - self.lower_right.imag,
        )

    def validate(self) -> "Viewport":
        if not self.upper_left.real < self.lower_right.real:
            raise ValueError(
                f"upper_left.re ({self.upper_left.real}) must be less than lower_right.re ({self.lower_right.real})."
            )
        if not self.upper_left.imag > self.lower_right.imag:
            raise ValueError(
                f"upper_left.im ({self.upper_left.imag}) must be greater than lower_right.im ({self.lower_right.imag})."
            )
        return self


def pixel_to_complex(bounds: ImageBounds, pixel: Tuple[int, int], viewport: Viewport) -> complex:
    """Map pixel ``(column, row)`` of ``bounds`` to its point in ``viewport``.

    No range checks: ``(width, height)`` itself is accepted and lands on
    ``lower_right``.
    """
    col, row = pixel
    return pixel_to_complex_kernel(
        bounds[0], bounds[1], col, row,
        viewport.upper_left.real, viewport.upper_left.imag,
        viewport.lower_right.real, viewport.lower_right.imag,
    )
