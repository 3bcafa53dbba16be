from __future__ import annotations

from typing import Optional

from numba import njit

# Intensity written for pixels that never escape.
INSIDE = 0
MAX_INTENSITY = 255
NO_ESCAPE = -1


@njit(nogil=True)
def pixel_to_complex_kernel(width, height, col, row, ul_re, ul_im, lr_re, lr_im):
    span_re = lr_re - ul_re
    span_im = ul_im - lr_im
    # Rows grow downwards, the imaginary axis grows upwards.
    return complex(ul_re + col * span_re / width, ul_im - row * span_im / height)


@njit(nogil=True)
def escape_time_kernel(c, limit):
    """Iteration index at which the orbit of ``c`` leaves radius 2, or -1."""
    z = 0j
    for i in range(limit):
        z = z * z + c
        if z.real * z.real + z.imag * z.imag > 4.0:
            return i
    return NO_ESCAPE


@njit(nogil=True)
def intensity(escape):
    if escape < 0:
        return INSIDE
    value = MAX_INTENSITY - escape
    if value < 0:
        return 0
    return value


@njit(nogil=True)
def render_stripe_kernel(pixels, width, height, top, image_height, ul_re, ul_im, lr_re, lr_im, limit):
    # Rows are mapped through the whole image so a pixel's point does not
    # depend on which stripe holds it.
    for row in range(height):
        for column in range(width):
            point = pixel_to_complex_kernel(width, image_height, column, top + row, ul_re, ul_im, lr_re, lr_im)
            pixels[row * width + column] = intensity(escape_time_kernel(point, limit))


def escape_time(c: complex, limit: int) -> Optional[int]:
    """Decide whether ``c`` escapes the radius-2 circle within ``limit`` iterations.

    Returns the 0-based iteration at which ``|z|`` first exceeded 2, or
    ``None`` when the orbit stayed bounded (``c`` is probably in the set).
    A limit of zero is an immediate non-escape.
    """
    i = escape_time_kernel(complex(c), int(limit))
    if i == NO_ESCAPE:
        return None
    return int(i)
