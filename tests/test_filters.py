import random

import pytest
from PIL import Image

from akb_converter.filters import (
    apply_delta, flip_vertical, from_pixel_data, get_pixel_data, revert_delta
)
from akb_converter.utils import UnsupportedFormatError

SAMPLE = bytes([10, 20, 30, 40, 50, 60, 70, 80, 90, 100, 110, 120])


def test_delta():
    pixels = bytearray(SAMPLE)
    apply_delta(pixels, 3, 6)
    assert pixels == bytearray([10, 20, 30, 30, 30, 30, 60, 60, 60, 60, 60, 60])


def test_delta_wraps():
    pixels = bytearray([200, 0, 100, 10])
    apply_delta(pixels, 1, 2)
    assert pixels == bytearray([200, 56, 156, 10])


def test_delta_round_trip():
    rng = random.Random(3)
    for pixel_size in (3, 4):
        for width, height in ((1, 1), (5, 1), (1, 6), (7, 9)):
            stride = width * pixel_size
            original = bytearray(rng.randrange(256) for _ in range(stride * height))
            pixels = bytearray(original)
            apply_delta(pixels, pixel_size, stride)
            revert_delta(pixels, pixel_size, stride)
            assert pixels == original


def test_flip():
    pixels = bytearray(SAMPLE)
    flip_vertical(pixels, 2, 2, 3)
    assert pixels == bytearray(SAMPLE[6:] + SAMPLE[:6])
    rows = [bytes([row] * 8) for row in range(3)]
    pixels = bytearray(b"".join(rows))
    flip_vertical(pixels, 2, 3, 4)
    assert pixels == bytearray(b"".join(reversed(rows)))


def test_pixel_data_is_bgr():
    image = Image.new("RGB", (1, 1), (1, 2, 3))
    assert get_pixel_data(image) == (bytearray([3, 2, 1]), 3)
    image = Image.new("RGBA", (1, 1), (1, 2, 3, 4))
    assert get_pixel_data(image) == (bytearray([3, 2, 1, 4]), 4)
    assert from_pixel_data(b"\x03\x02\x01", (1, 1), 3).getpixel((0, 0)) == (1, 2, 3)


def test_unsupported_mode():
    with pytest.raises(UnsupportedFormatError):
        get_pixel_data(Image.new("L", (2, 2)))


def test_palette_is_expanded():
    image = Image.new("RGB", (1, 1), (1, 2, 3)).convert("P")
    assert get_pixel_data(image) == (bytearray([3, 2, 1, 255]), 4)


if __name__ == "__main__":
    test_delta()
    test_delta_wraps()
    test_delta_round_trip()
    test_flip()
    test_pixel_data_is_bgr()
