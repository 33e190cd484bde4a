import struct
from functools import cache
from io import BytesIO

# LZSS window parameters, fixed by the AKB format
N = 4096  # ring buffer size
F = 18  # lookahead size, upper limit for a match length
THRESHOLD = 2  # matches longer than this are sent as position & length pairs
NIL = N  # "no node" index of the match trees


class AkbError(Exception):
    pass


class UnsupportedFormatError(AkbError):
    """ raised when the source image is neither 24-bit nor 32-bit """


class InvalidContainerError(AkbError):
    """ raised when a byte stream is not a valid AKB container """


class TruncatedStreamError(AkbError):
    """ raised when a compressed unit is cut short by the end of the stream """


class CanvasSizeError(AkbError):
    """ raised when a header field does not fit in its slot """


@cache
def to_u8bit(num: int):
    if num < 0:
        num = 256 + num
    return struct.pack("<B", num)


def to_u16bit(num: int):
    return struct.pack("<H", num)


def to_u32bit(num: int):
    if num < 0:
        num = 4294967296 + num
    return struct.pack("<I", num)


def to_i32bit(num: int):
    if num > 0x7FFFFFFF:
        num = num - 4294967296
    return struct.pack("<i", num)


class ByteReader:

    def __init__(self, array: bytes):
        self.array = array
        self._offset = 0

    def remaining(self) -> int:
        return max(len(self.array) - self._offset, 0)

    def read(self, number_of_bytes: int) -> bytes:
        """ reads number_of_bytes bytes from the given array at the current offset & returns them """
        return self.array[self._offset:self._offset + number_of_bytes]

    def shift(self, number_of_bytes: int):
        """ shifts the offset ahead by number_of_bytes bytes """
        self._offset += number_of_bytes

    def read_and_shift(self, number_of_bytes: int) -> bytes:
        result = self.read(number_of_bytes)
        if len(result) < number_of_bytes:
            raise TruncatedStreamError(
                f"wanted {number_of_bytes} bytes at offset {self._offset}, got {len(result)}"
            )
        self.shift(number_of_bytes)
        return result

    def read_u16(self) -> int:
        return int.from_bytes(self.read_and_shift(2), "little")

    def read_u32(self) -> int:
        return int.from_bytes(self.read_and_shift(4), "little")

    def read_i32(self) -> int:
        return int.from_bytes(self.read_and_shift(4), "little", signed=True)


class CodeGroup:
    """
    Eight units of code preceded by one flag byte. Bit k of the flag byte is set
    when unit k is a literal, cleared when it is a position & length pair.
    """

    UNITS = 8

    def __init__(self):
        self.flags: int = 0
        self.mask: int = 1
        self.code = bytearray()

    def push(self, flag: int, code: bytes):
        if flag:
            self.flags |= self.mask
        self.code += code
        self.mask <<= 1

    def is_full(self) -> bool:
        return self.mask == 1 << self.UNITS

    def is_empty(self) -> bool:
        return self.mask == 1

    def flush(self, output: BytesIO):
        """ writes the flag byte & the buffered units, then starts a new group """
        if self.is_empty():
            return
        output.write(to_u8bit(self.flags))
        output.write(self.code)
        self.flags = 0
        self.mask = 1
        self.code = bytearray()
