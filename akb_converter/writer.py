import logging
from io import BytesIO
from typing import Tuple

from PIL import Image

from akb_converter.container import (
    BasicContainer, ContainerHeader, ExtendedContainer, flags_for
)
from akb_converter.filters import apply_delta, flip_vertical, get_pixel_data
from akb_converter.lzss import compress
from akb_converter.metadata import CanvasMetadata
from akb_converter.utils import CanvasSizeError, to_i32bit, to_u16bit, to_u32bit

logger = logging.getLogger(__name__)


def encode_pixels(pixels: bytearray, width: int, height: int, pixel_size: int) -> bytes:
    """ delta filter, flip & compress, the buffer is consumed in the process """
    apply_delta(pixels, pixel_size, width * pixel_size)
    flip_vertical(pixels, width, height, pixel_size)
    return compress(pixels)


def build_container(metadata: CanvasMetadata, source_size: Tuple[int, int], pixel_size: int,
                    payload: bytes) -> BasicContainer:
    metadata = metadata.expand_to_fit(source_size)
    for name, value in (("width", metadata.width), ("height", metadata.height)):
        if not 0 <= value <= 0xFFFF:
            raise CanvasSizeError(f"Canvas {name} {value} does not fit in 16 bits")
    for name, value in (
        ("offset x", metadata.offset_x),
        ("offset y", metadata.offset_y),
        ("right edge", metadata.offset_x + source_size[0]),
        ("bottom edge", metadata.offset_y + source_size[1]),
    ):
        if not -0x80000000 <= value <= 0x7FFFFFFF:
            raise CanvasSizeError(f"Image {name} {value} does not fit in 32 bits")
    if not -0x80000000 <= metadata.background_color <= 0xFFFFFFFF:
        raise CanvasSizeError(f"Background color {metadata.background_color} does not fit in 32 bits")
    header = ContainerHeader(
        width=metadata.width,
        height=metadata.height,
        flags=flags_for(pixel_size),
        background_color=metadata.background_color,
        x0=metadata.offset_x,
        y0=metadata.offset_y,
        x1=metadata.offset_x + source_size[0],
        y1=metadata.offset_y + source_size[1],
    )
    if metadata.background_image:
        return ExtendedContainer(header, payload, metadata.background_image)
    return BasicContainer(header, payload)


def write_header(container: BasicContainer, destination: BytesIO):
    header = container.header
    destination.write(container.MAGIC)
    destination.write(to_u16bit(header.width))
    destination.write(to_u16bit(header.height))
    destination.write(to_u32bit(header.flags))
    destination.write(to_i32bit(header.background_color))
    destination.write(to_i32bit(header.x0))
    destination.write(to_i32bit(header.y0))
    destination.write(to_i32bit(header.x1))
    destination.write(to_i32bit(header.y1))


def write_container(container: BasicContainer, destination: BytesIO):
    write_header(container, destination)
    destination.write(container.payload)
    destination.write(container.trailer())


def write(image: Image.Image, metadata: CanvasMetadata, destination: BytesIO):
    pixels, pixel_size = get_pixel_data(image)
    payload = encode_pixels(pixels, image.width, image.height, pixel_size)
    container = build_container(metadata, image.size, pixel_size, payload)
    write_container(container, destination)
    logger.debug("%s container, %d payload bytes", container.MAGIC.decode("ascii"), len(payload))
