from typing import List, Type, TYPE_CHECKING

from akb_converter.utils import ByteReader, CodeGroup, THRESHOLD, to_u8bit

if TYPE_CHECKING:
    from akb_converter.lzss import MatchResult, RingWindow


class GenericUnit:

    FLAG: int

    @classmethod
    def match_flag(cls, flag_bit: int) -> bool:
        """ returns whether the given flag bit announces this unit """
        return cls.FLAG == flag_bit

    @classmethod
    def write(cls, group: CodeGroup, match: "MatchResult", literal: int) -> int:
        """ Pushes the unit into the group, returns how many input bytes it covers """
        raise NotImplementedError

    @classmethod
    def read(cls, reader: ByteReader, window: "RingWindow") -> bytes:
        """ Returns the bytes the unit expands to, updating the window """
        raise NotImplementedError

    @staticmethod
    def can_be_used(match: "MatchResult") -> bool:
        """ returns whether the unit can be used in writing given the current match """
        return True


class LiteralUnit(GenericUnit):

    FLAG = 1

    @classmethod
    def write(cls, group: CodeGroup, match: "MatchResult", literal: int) -> int:
        group.push(cls.FLAG, to_u8bit(literal))
        return 1

    @classmethod
    def read(cls, reader: ByteReader, window: "RingWindow") -> bytes:
        byte: int = reader.read_and_shift(1)[0]
        window.put(byte)
        return bytes((byte,))


class MatchUnit(GenericUnit):

    FLAG = 0

    @classmethod
    def write(cls, group: CodeGroup, match: "MatchResult", literal: int) -> int:
        low: int = match.position & 0xff
        high: int = ((match.position >> 4) & 0xf0) | (match.length - (THRESHOLD + 1))
        group.push(cls.FLAG, bytes((low, high)))
        return match.length

    @classmethod
    def read(cls, reader: ByteReader, window: "RingWindow") -> bytes:
        position, length = decode_match(reader.read_and_shift(2))
        return window.copy(position, length)

    @staticmethod
    def can_be_used(match: "MatchResult") -> bool:
        return match.length > THRESHOLD


def decode_match(token: bytes):
    """ splits a two byte match token into its (position, length) pair """
    low, high = token[0], token[1]
    return low | ((high & 0xf0) << 4), (high & 0x0f) + THRESHOLD + 1


# Unit queues, determine the priority of each unit on the others while writing/reading

WRITE_UNIT_QUEUE: List[Type[GenericUnit]] = [
    MatchUnit,
    LiteralUnit
]

READ_UNIT_QUEUE: List[Type[GenericUnit]] = [
    LiteralUnit,
    MatchUnit
]
