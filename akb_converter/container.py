from dataclasses import dataclass
from typing import List, Optional, Type

from akb_converter.utils import CanvasSizeError

HEADER_SIZE = 32
BACKGROUND_IMAGE_SIZE = 32
BACKGROUND_IMAGE_ENCODING = "cp932"

FLAGS_32BIT = 0x80000000
FLAGS_24BIT = 0x400000FF


def flags_for(pixel_size: int) -> int:
    return FLAGS_32BIT if pixel_size == 4 else FLAGS_24BIT


def pixel_size_for(flags: int) -> int:
    return 4 if flags & FLAGS_32BIT else 3


@dataclass
class ContainerHeader:
    width: int
    height: int
    flags: int
    background_color: int
    x0: int
    y0: int
    x1: int
    y1: int

    @property
    def image_size(self):
        return self.x1 - self.x0, self.y1 - self.y0

    @property
    def pixel_size(self) -> int:
        return pixel_size_for(self.flags)


class BasicContainer:
    """ "AKB " image, header followed by the compressed pixels """

    MAGIC = b"AKB "
    TRAILER_SIZE = 0

    def __init__(self, header: ContainerHeader, payload: bytes):
        self.header = header
        self.payload = payload

    @property
    def background_image(self) -> Optional[str]:
        return None

    def trailer(self) -> bytes:
        return b""

    @classmethod
    def match_magic(cls, magic: bytes) -> bool:
        return cls.MAGIC == magic

    @classmethod
    def from_trailer(cls, header: ContainerHeader, payload: bytes, trailer: bytes) -> "BasicContainer":
        return cls(header, payload)


class ExtendedContainer(BasicContainer):
    """ "AKB+" image, carries the name of a background image after the pixels """

    MAGIC = b"AKB+"
    TRAILER_SIZE = BACKGROUND_IMAGE_SIZE

    def __init__(self, header: ContainerHeader, payload: bytes, background_image: str):
        super().__init__(header, payload)
        self._background_image = background_image

    @property
    def background_image(self) -> Optional[str]:
        return self._background_image

    def trailer(self) -> bytes:
        return encode_background_image(self._background_image)

    @classmethod
    def from_trailer(cls, header: ContainerHeader, payload: bytes, trailer: bytes) -> "BasicContainer":
        return cls(header, payload, decode_background_image(trailer))


CONTAINER_TYPES: List[Type[BasicContainer]] = [
    BasicContainer,
    ExtendedContainer
]


def encode_background_image(name: str) -> bytes:
    encoded = name.encode(BACKGROUND_IMAGE_ENCODING)
    if len(encoded) > BACKGROUND_IMAGE_SIZE:
        raise CanvasSizeError(
            f"Background image name takes {len(encoded)} bytes, the field holds {BACKGROUND_IMAGE_SIZE}"
        )
    return encoded.ljust(BACKGROUND_IMAGE_SIZE, b"\x00")


def decode_background_image(field: bytes) -> str:
    """
    Returns the name stored before the first NUL byte. Older extraction tooling
    kept the leading NUL run instead, which always yields an empty name.
    """
    return field.split(b"\x00", 1)[0].decode(BACKGROUND_IMAGE_ENCODING)
