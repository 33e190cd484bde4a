"""
LZSS codec of the AKB pixel payload.

The encoder keeps a 4096 byte ring buffer plus an 18 byte lookahead and finds
the longest previous match of the lookahead through 256 binary search trees,
one per leading byte value. Trees are stored as parallel index arrays keyed by
ring buffer position, so no node objects are allocated while encoding.
"""
import logging
from io import BytesIO
from typing import List, NamedTuple, Optional

from akb_converter.units import READ_UNIT_QUEUE, WRITE_UNIT_QUEUE
from akb_converter.utils import ByteReader, CodeGroup, F, N, NIL, TruncatedStreamError

logger = logging.getLogger(__name__)


class MatchResult(NamedTuple):
    position: int
    length: int


class MatchTree:
    """
    256 binary search trees over the strings window[p:p + F].

    Nodes 0..N-1 are ring buffer positions, node N is NIL and nodes N+1..N+256
    are the roots, one per leading byte. A root only uses its right child.
    """

    def __init__(self, window: bytearray):
        self.window = window
        self.left: List[int] = [NIL] * (N + 1)
        self.right: List[int] = [NIL] * (N + 257)
        self.parent: List[int] = [NIL] * (N + 1)

    def insert(self, r: int) -> MatchResult:
        """
        Inserts window[r:r + F] and returns the longest match met on the way down.
        A full length match replaces the old node, which would leave the window first.
        """
        window, left, right, parent = self.window, self.left, self.right, self.parent
        key = window[r:r + F]
        p: int = N + 1 + key[0]
        left[r] = right[r] = NIL
        match_position: int = 0
        match_length: int = 0
        cmp: int = 1
        while True:
            if cmp >= 0:
                if right[p] != NIL:
                    p = right[p]
                else:
                    right[p] = r
                    parent[r] = p
                    return MatchResult(match_position, match_length)
            else:
                if left[p] != NIL:
                    p = left[p]
                else:
                    left[p] = r
                    parent[r] = p
                    return MatchResult(match_position, match_length)
            i = 1
            while i < F:
                cmp = key[i] - window[p + i]
                if cmp != 0:
                    break
                i += 1
            if i > match_length:
                match_position = p
                match_length = i
                if i >= F:
                    break
        # r takes the place of p
        parent[r] = parent[p]
        left[r] = left[p]
        right[r] = right[p]
        parent[left[p]] = r
        parent[right[p]] = r
        self._relink(p, r)
        parent[p] = NIL
        return MatchResult(match_position, match_length)

    def delete(self, p: int):
        left, right, parent = self.left, self.right, self.parent
        if parent[p] == NIL:
            return
        if right[p] == NIL:
            q = left[p]
        elif left[p] == NIL:
            q = right[p]
        else:
            # promote the in-order predecessor
            q = left[p]
            if right[q] != NIL:
                while right[q] != NIL:
                    q = right[q]
                right[parent[q]] = left[q]
                parent[left[q]] = parent[q]
                left[q] = left[p]
                parent[left[p]] = q
            right[q] = right[p]
            parent[right[p]] = q
        parent[q] = parent[p]
        self._relink(p, q)
        parent[p] = NIL

    def _relink(self, old: int, new: int):
        """ points the parent of old at new """
        dad = self.parent[old]
        if self.right[dad] == old:
            self.right[dad] = new
        else:
            assert dad < N and self.left[dad] == old, f"match tree corrupted at node {old}"
            self.left[dad] = new


class LzssEncoder:

    def __init__(self):
        self._reset()

    def _reset(self):
        self.window = bytearray(N + F - 1)
        self.tree = MatchTree(self.window)

    def compress(self, data: bytes) -> bytes:
        self._reset()
        window, tree = self.window, self.tree
        output = BytesIO()
        group = CodeGroup()
        s: int = 0
        r: int = N - F
        # the lookahead starts at the tail of the ring, behind a zeroed lead-in
        length: int = min(F, len(data))
        if length == 0:
            return b""
        window[r:r + length] = data[:length]
        ptr: int = length
        # seed the tree with the lead-in strings, closest to r last
        for i in range(1, F + 1):
            tree.insert(r - i)
        match = tree.insert(r)
        while length > 0:
            # a match may run into the padding past the end of the input
            if match.length > length:
                match = MatchResult(match.position, length)
            for unit in WRITE_UNIT_QUEUE:
                if unit.can_be_used(match):
                    last_match_length = unit.write(group, match, window[r])
                    break
            if group.is_full():
                group.flush(output)
            i = 0
            while i < last_match_length and ptr < len(data):
                tree.delete(s)
                c = data[ptr]
                ptr += 1
                window[s] = c
                if s < F - 1:
                    window[s + N] = c
                s = (s + 1) & (N - 1)
                r = (r + 1) & (N - 1)
                match = tree.insert(r)
                i += 1
            # input exhausted, flush what is left of the lookahead
            while i < last_match_length:
                tree.delete(s)
                s = (s + 1) & (N - 1)
                r = (r + 1) & (N - 1)
                length -= 1
                if length:
                    match = tree.insert(r)
                i += 1
        group.flush(output)
        logger.debug("compressed %d bytes into %d", len(data), output.tell())
        return output.getvalue()


def compress(data: bytes) -> bytes:
    return LzssEncoder().compress(data)


class RingWindow:
    """ The decoder side of the ring buffer, replays literals & copies """

    def __init__(self):
        self.buffer = bytearray(N)
        self.position: int = N - F

    def put(self, byte: int):
        self.buffer[self.position] = byte
        self.position = (self.position + 1) & (N - 1)

    def copy(self, position: int, length: int) -> bytes:
        output = bytearray()
        for k in range(length):
            byte = self.buffer[(position + k) & (N - 1)]
            output.append(byte)
            self.put(byte)
        return bytes(output)


def decompress(data: bytes, size: Optional[int] = None) -> bytes:
    """
    Expands an LZSS token stream. When size is given, decoding stops as soon as
    that many bytes are produced and the output is cut to exactly size bytes.
    """
    reader = ByteReader(data)
    window = RingWindow()
    output = bytearray()
    while reader.remaining() and (size is None or len(output) < size):
        flags: int = reader.read_and_shift(1)[0]
        for bit in range(8):
            if not reader.remaining() or (size is not None and len(output) >= size):
                break
            flag_bit = (flags >> bit) & 1
            for unit in READ_UNIT_QUEUE:
                if unit.match_flag(flag_bit):
                    output += unit.read(reader, window)
                    break
    if size is not None:
        if len(output) < size:
            raise TruncatedStreamError(f"expected {size} bytes, stream holds {len(output)}")
        del output[size:]
    return bytes(output)
