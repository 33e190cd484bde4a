from PIL import Image

from akb_converter.container import (
    CONTAINER_TYPES, HEADER_SIZE, BasicContainer, ContainerHeader
)
from akb_converter.filters import flip_vertical, from_pixel_data, revert_delta
from akb_converter.lzss import decompress
from akb_converter.metadata import CanvasMetadata
from akb_converter.utils import ByteReader, InvalidContainerError


def read_container(input_stream: bytes) -> BasicContainer:
    if len(input_stream) < HEADER_SIZE:
        raise InvalidContainerError("Not a valid AKB image file.")
    byte_reader = ByteReader(input_stream)
    magic: bytes = byte_reader.read_and_shift(4)
    for container_type in CONTAINER_TYPES:
        if container_type.match_magic(magic):
            break
    else:
        raise InvalidContainerError("Not a valid AKB image file.")
    header = ContainerHeader(
        width=byte_reader.read_u16(),
        height=byte_reader.read_u16(),
        flags=byte_reader.read_u32(),
        background_color=byte_reader.read_i32(),
        x0=byte_reader.read_i32(),
        y0=byte_reader.read_i32(),
        x1=byte_reader.read_i32(),
        y1=byte_reader.read_i32(),
    )
    payload_end = len(input_stream) - container_type.TRAILER_SIZE
    if payload_end < HEADER_SIZE:
        raise InvalidContainerError("AKB image file is missing its trailer.")
    return container_type.from_trailer(header, input_stream[HEADER_SIZE:payload_end], input_stream[payload_end:])


def extract_metadata(input_stream: bytes) -> CanvasMetadata:
    container = read_container(input_stream)
    header = container.header
    return CanvasMetadata(
        width=header.width,
        height=header.height,
        offset_x=header.x0,
        offset_y=header.y0,
        background_color=header.background_color,
        background_image=container.background_image,
    )


def read(input_stream: bytes) -> Image.Image:
    container = read_container(input_stream)
    width, height = container.header.image_size
    pixel_size = container.header.pixel_size
    if width < 0 or height < 0:
        raise InvalidContainerError(f"AKB image rectangle is inverted: {width}x{height}")
    pixels = bytearray(decompress(container.payload, width * height * pixel_size))
    # undo the encoder stages in reverse order
    flip_vertical(pixels, width, height, pixel_size)
    revert_delta(pixels, pixel_size, width * pixel_size)
    return from_pixel_data(pixels, (width, height), pixel_size)
