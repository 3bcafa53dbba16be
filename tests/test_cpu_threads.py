import numpy as np
import pytest

from mandelstripe.errors import PartitionError, RenderError
from mandelstripe.geometry import ImageBounds, Viewport, pixel_to_complex
from mandelstripe.kernels import escape_time
from mandelstripe.renderers import cpu_threads
from mandelstripe.renderers.cpu_threads import render_frame_cpu, render_stripe

# FULL has dyadic corners; the others are not exactly representable in binary.
FULL = Viewport(complex(-2.0, 1.5), complex(1.0, -1.5))
SEAHORSE = Viewport(complex(-1.20, 0.35), complex(-1.0, 0.20))
ELEPHANT = Viewport(complex(0.25, 0.1), complex(0.35, 0.0))
SPIRAL = Viewport(complex(-0.7463, 0.1102), complex(-0.7453, 0.1092))


def _reference(bounds, viewport, limit=255):
    out = np.zeros(bounds.size, dtype=np.uint8)
    for row in range(bounds.height):
        for col in range(bounds.width):
            i = escape_time(pixel_to_complex(bounds, (col, row), viewport), limit)
            out[row * bounds.width + col] = 0 if i is None else 255 - i
    return out


def test_render_stripe_matches_per_pixel_reference():
    bounds = ImageBounds(24, 16)
    pixels = np.zeros(bounds.size, dtype=np.uint8)
    render_stripe(pixels, bounds, FULL)
    np.testing.assert_array_equal(pixels, _reference(bounds, FULL))


def test_render_stripe_marks_set_members_black_and_outside_bright():
    bounds = ImageBounds(3, 3)
    pixels = np.zeros(bounds.size, dtype=np.uint8)
    # Pixel (1, 1) maps to the origin, pixel (0, 0) to -3+3i.
    render_stripe(pixels, bounds, Viewport(complex(-3.0, 3.0), complex(6.0, -6.0)))
    assert pixels[4] == 0
    assert pixels[0] == 255


def test_render_stripe_clamps_for_large_limits():
    bounds = ImageBounds(16, 12)
    pixels = np.zeros(bounds.size, dtype=np.uint8)
    render_stripe(pixels, bounds, SEAHORSE, limit=5000)
    assert pixels.dtype == np.uint8
    assert pixels.min() >= 0 and pixels.max() <= 255


@pytest.mark.parametrize("size", [0, 11, 13])
def test_render_stripe_rejects_mismatched_buffer(size):
    with pytest.raises(PartitionError):
        render_stripe(np.zeros(size, dtype=np.uint8), ImageBounds(4, 3), FULL)


def test_render_stripe_rejects_wrong_dtype():
    with pytest.raises(PartitionError):
        render_stripe(np.zeros(12, dtype=np.int32), ImageBounds(4, 3), FULL)


def test_render_stripe_rejects_two_dimensional_buffer():
    with pytest.raises(PartitionError):
        render_stripe(np.zeros((3, 4), dtype=np.uint8), ImageBounds(4, 3), FULL)


@pytest.mark.parametrize("bounds, viewport", [
    (ImageBounds(64, 48), FULL),
    (ImageBounds(1000, 750), SEAHORSE),
    (ImageBounds(300, 220), ELEPHANT),
    (ImageBounds(257, 193), SPIRAL),
])
def test_parallel_render_matches_single_thread(bounds, viewport):
    single = render_frame_cpu(bounds=bounds, viewport=viewport, threads=1)
    eight = render_frame_cpu(bounds=bounds, viewport=viewport, threads=8)
    assert single.tobytes() == eight.tobytes()


@pytest.mark.parametrize("viewport", [FULL, SEAHORSE, SPIRAL])
@pytest.mark.parametrize("threads", [1, 3, 8, 64])
def test_parallel_render_matches_reference(threads, viewport):
    bounds = ImageBounds(32, 24)
    pixels = render_frame_cpu(bounds=bounds, viewport=viewport, threads=threads)
    np.testing.assert_array_equal(pixels, _reference(bounds, viewport))


def test_render_stripe_maps_rows_through_whole_image():
    bounds = ImageBounds(40, 30)
    expected = _reference(bounds, SEAHORSE)
    top, height = 11, 9
    pixels = np.zeros(bounds.width * height, dtype=np.uint8)
    render_stripe(pixels, ImageBounds(bounds.width, height), SEAHORSE, top=top, image_height=bounds.height)
    np.testing.assert_array_equal(pixels, expected[top * bounds.width:(top + height) * bounds.width])


@pytest.mark.parametrize("top", [-1, 22])
def test_render_stripe_rejects_rows_outside_image(top):
    with pytest.raises(PartitionError):
        render_stripe(np.zeros(40 * 9, dtype=np.uint8), ImageBounds(40, 9), SEAHORSE, top=top, image_height=30)


def test_end_to_end_seahorse_valley():
    pixels = render_frame_cpu(bounds=(1000, 750), viewport=SEAHORSE, threads=8, limit=255)
    assert pixels.shape == (750000,)
    assert pixels.dtype == np.uint8
    # The view straddles the set boundary: both members and escapees appear.
    assert (pixels == 0).any()
    assert (pixels > 0).any()


def test_default_thread_count_renders(monkeypatch):
    monkeypatch.setattr(cpu_threads, "default_threads", lambda: 3)
    pixels = render_frame_cpu(bounds=(20, 10), viewport=FULL)
    assert pixels.size == 200


def test_progress_bar_does_not_change_output():
    bounds = ImageBounds(16, 16)
    plain = render_frame_cpu(bounds=bounds, viewport=FULL, threads=4)
    shown = render_frame_cpu(bounds=bounds, viewport=FULL, threads=4, progress=True)
    assert plain.tobytes() == shown.tobytes()


def test_worker_failure_aborts_whole_render(monkeypatch):
    real = cpu_threads._render_one
    finished = []

    def flaky(pixels, stripe, viewport, image_height, limit, frame_id):
        if stripe.index == 1:
            raise RuntimeError("stripe exploded")
        finished.append(real(pixels, stripe, viewport, image_height, limit, frame_id))
        return stripe.index

    monkeypatch.setattr(cpu_threads, "_render_one", flaky)
    with pytest.raises(RenderError) as excinfo:
        render_frame_cpu(bounds=(8, 8), viewport=FULL, threads=4)

    assert [i for i, _ in excinfo.value.failures] == [1]
    assert isinstance(excinfo.value.__cause__, RuntimeError)
    # Every other worker still ran to completion before the error surfaced.
    assert sorted(finished) == [0, 2]


def test_rejects_empty_bounds():
    with pytest.raises(ValueError):
        render_frame_cpu(bounds=(0, 10), viewport=FULL, threads=2)


def test_rejects_zero_threads():
    with pytest.raises(ValueError):
        render_frame_cpu(bounds=(4, 4), viewport=FULL, threads=0)
