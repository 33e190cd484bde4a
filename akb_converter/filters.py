from typing import Tuple

from PIL import Image

from akb_converter.utils import UnsupportedFormatError

# bytes per pixel & channel order of the AKB pixel buffer, by source image mode
PIXEL_FORMATS = {
    "RGB": (3, "BGR"),
    "RGBA": (4, "BGRA"),
}

# palette images are expanded to 32-bit before packing
PALETTE_MODES = ("P", "PA")

IMAGE_MODES = {size: mode for mode, (size, _) in PIXEL_FORMATS.items()}


def get_pixel_data(image: Image.Image) -> Tuple[bytearray, int]:
    """ returns the BGR / BGRA pixel buffer of the image & its bytes per pixel """
    if image.mode in PALETTE_MODES:
        image = image.convert("RGBA")
    try:
        pixel_size, raw_mode = PIXEL_FORMATS[image.mode]
    except KeyError:
        raise UnsupportedFormatError(
            f"Only 24-bit or 32-bit images are supported, got mode {image.mode}"
        ) from None
    return bytearray(image.tobytes("raw", raw_mode)), pixel_size


def from_pixel_data(pixels: bytes, size: Tuple[int, int], pixel_size: int) -> Image.Image:
    mode = IMAGE_MODES[pixel_size]
    return Image.frombytes(mode, size, bytes(pixels), "raw", PIXEL_FORMATS[mode][1])


def apply_delta(pixels: bytearray, pixel_size: int, stride: int):
    """
    Replaces every byte by its difference to the byte one row above, then the
    bytes of the first row by their difference to the same channel of the
    previous pixel. The first pixel is kept as is. Works in place, mod 256.
    """
    if stride <= 0:
        return
    pixels[stride:] = bytes((a - b) & 0xff for a, b in zip(pixels[stride:], pixels))
    first_row = pixels[:stride]
    pixels[pixel_size:stride] = bytes((a - b) & 0xff for a, b in zip(first_row[pixel_size:], first_row))


def revert_delta(pixels: bytearray, pixel_size: int, stride: int):
    """ inverse of apply_delta, sums the differences back in ascending order """
    if stride <= 0:
        return
    for i in range(pixel_size, min(stride, len(pixels))):
        pixels[i] = (pixels[i] + pixels[i - pixel_size]) & 0xff
    for start in range(stride, len(pixels), stride):
        row = pixels[start:start + stride]
        above = pixels[start - stride:start]
        pixels[start:start + stride] = bytes((a + b) & 0xff for a, b in zip(row, above))


def flip_vertical(pixels: bytearray, width: int, height: int, pixel_size: int):
    """ reverses the row order of the buffer in place """
    if not pixels:
        return
    image = Image.frombytes(IMAGE_MODES[pixel_size], (width, height), bytes(pixels))
    pixels[:] = image.transpose(Image.Transpose.FLIP_TOP_BOTTOM).tobytes()
