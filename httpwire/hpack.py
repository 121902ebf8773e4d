"""HPACK header compression: integer coding, dynamic tables, encoder and decoder.

String literals are written with the Huffman flag set while their octets are
left unchanged, and the decoder reads string octets as they come whatever the
flag says, so an encoder and decoder of this module always agree.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable

from httpwire.hpack_tables import STATIC_TABLE
from httpwire.messages import ErrorCode, Header, HttpError

DEFAULT_TABLE_SIZE = 4096
ENTRY_OVERHEAD = 32

_UINT32_MASK = 0xFFFFFFFF


def _to_bytes(text: str) -> bytes:
    return text.encode("utf-8", "surrogateescape")


def _to_text(raw: bytes) -> str:
    return raw.decode("utf-8", "surrogateescape")


def _entry_size(name: str, value: str) -> int:
    return len(_to_bytes(name)) + len(_to_bytes(value)) + ENTRY_OVERHEAD


def encode_integer(value: int, prefix_bits: int, first_byte: int) -> bytes:
    """Encode an integer with an N-bit prefix, OR-ing the pattern bits into the first byte."""
    prefix_max = (1 << prefix_bits) - 1
    if value < prefix_max:
        return bytes((first_byte | value,))
    out = bytearray((first_byte | prefix_max,))
    value -= prefix_max
    while value >= 128:
        out.append((value % 128) + 128)
        value //= 128
    out.append(value)
    return bytes(out)


def decode_integer(data: bytes | bytearray | memoryview, pos: int, prefix_bits: int) -> tuple[int, int]:
    """Decode an N-bit-prefix integer at pos; return the value and the next position."""
    if pos >= len(data):
        raise HttpError(ErrorCode.NEED_MORE_DATA, "integer truncated")
    prefix_max = (1 << prefix_bits) - 1
    value = data[pos] & prefix_max
    pos += 1
    if value < prefix_max:
        return value, pos
    shift = 0
    while pos < len(data):
        byte = data[pos]
        pos += 1
        value = (value + ((byte & 0x7F) << shift)) & _UINT32_MASK
        if not byte & 0x80:
            return value, pos
        shift += 7
        if shift >= 32:
            raise HttpError(ErrorCode.PROTOCOL_ERROR, "integer too large")
    raise HttpError(ErrorCode.NEED_MORE_DATA, "integer truncated")


class _DynamicTable:
    """Newest-first table of header fields bounded by a size in octets."""

    def __init__(self, max_size: int = DEFAULT_TABLE_SIZE) -> None:
        self.max_size = max_size
        self.used = 0
        self._entries: deque[tuple[str, str, int]] = deque()

    def __len__(self) -> int:
        return len(self._entries)

    def __getitem__(self, index: int) -> tuple[str, str]:
        name, value, _ = self._entries[index]
        return name, value

    def pairs(self) -> list[tuple[str, str]]:
        return [(name, value) for name, value, _ in self._entries]

    def _evict_oldest(self) -> None:
        *_, size = self._entries.pop()
        self.used -= size

    def add(self, name: str, value: str) -> None:
        size = _entry_size(name, value)
        while self._entries and self.used + size > self.max_size:
            self._evict_oldest()
        if size <= self.max_size:
            self._entries.appendleft((name, value, size))
            self.used += size

    def resize(self, max_size: int) -> None:
        self.max_size = max_size
        while self._entries and self.used > self.max_size:
            self._evict_oldest()

    def clear(self) -> None:
        self._entries.clear()
        self.used = 0


class _TableOwner:
    """Shared read-only view of a dynamic table for the encoder and decoder."""

    def __init__(self) -> None:
        self._table = _DynamicTable()

    @property
    def dynamic_table_size(self) -> int:
        """The maximum size of the dynamic table in octets."""
        return self._table.max_size

    @property
    def dynamic_table_used(self) -> int:
        """The octets currently taken by dynamic table entries."""
        return self._table.used

    @property
    def dynamic_table(self) -> list[tuple[str, str]]:
        """The dynamic table entries, newest first."""
        return self._table.pairs()


class HpackEncoder(_TableOwner):
    """Encodes header lists into HPACK header blocks."""

    def set_dynamic_table_size(self, size: int) -> None:
        """Change the maximum table size, evicting the oldest entries as needed."""
        self._table.resize(size)

    def clear_dynamic_table(self) -> None:
        """Drop every dynamic table entry."""
        self._table.clear()

    def encode_headers(self, headers: Iterable[Header]) -> bytes:
        """Return the header block for these headers, updating the dynamic table."""
        out = bytearray()
        for h in headers:
            index = self._find_header_index(h.name, h.value)
            if index is not None:
                out += encode_integer(index, 7, 0x80)
            elif h.sensitive:
                out += self._encode_literal(h.name, h.value, 4, 0x10)
            else:
                out += self._encode_literal(h.name, h.value, 6, 0x40)
                self._table.add(h.name, h.value)
        return bytes(out)

    def _encode_literal(self, name: str, value: str, prefix_bits: int, pattern: int) -> bytes:
        name_index = self._find_name_index(name)
        if name_index is not None:
            head = encode_integer(name_index, prefix_bits, pattern)
        else:
            head = encode_integer(0, prefix_bits, pattern) + self._encode_string(name)
        return head + self._encode_string(value)

    @staticmethod
    def _encode_string(text: str) -> bytes:
        raw = _to_bytes(text)
        return encode_integer(len(raw), 7, 0x80) + raw

    def _find_header_index(self, name: str, value: str) -> int | None:
        for index, entry in enumerate(STATIC_TABLE, start=1):
            if entry == (name, value):
                return index
        for offset, entry in enumerate(self._table.pairs()):
            if entry == (name, value):
                return len(STATIC_TABLE) + offset + 1
        return None

    def _find_name_index(self, name: str) -> int | None:
        for index, (entry_name, _) in enumerate(STATIC_TABLE, start=1):
            if entry_name == name:
                return index
        for offset, (entry_name, _) in enumerate(self._table.pairs()):
            if entry_name == name:
                return len(STATIC_TABLE) + offset + 1
        return None


class HpackDecoder(_TableOwner):
    """Decodes HPACK header blocks into header lists."""

    def set_dynamic_table_size(self, size: int) -> None:
        """Change the maximum table size, evicting the oldest entries as needed."""
        self._table.resize(size)

    def clear_dynamic_table(self) -> None:
        """Drop every dynamic table entry."""
        self._table.clear()

    def decode_headers(self, data: bytes | bytearray | memoryview) -> list[Header]:
        """Decode a whole header block, updating the dynamic table."""
        data = bytes(data)
        headers: list[Header] = []
        pos = 0
        while pos < len(data):
            first = data[pos]
            if first & 0x80:
                index, pos = decode_integer(data, pos, 7)
                name, value = self._entry_at(index)
                headers.append(Header(name, value))
            elif first & 0x40:
                name, value, pos = self._decode_literal(data, pos, 6)
                self._table.add(name, value)
                headers.append(Header(name, value))
            elif first & 0x20:
                size, pos = decode_integer(data, pos, 5)
                self.set_dynamic_table_size(size)
            elif first & 0x10:
                name, value, pos = self._decode_literal(data, pos, 4)
                headers.append(Header(name, value, sensitive=True))
            else:
                name, value, pos = self._decode_literal(data, pos, 4)
                headers.append(Header(name, value))
        return headers

    def _decode_literal(self, data: bytes, pos: int, prefix_bits: int) -> tuple[str, str, int]:
        name_index, pos = decode_integer(data, pos, prefix_bits)
        if name_index == 0:
            name, pos = self._decode_string(data, pos)
        else:
            name, _ = self._entry_at(name_index)
        value, pos = self._decode_string(data, pos)
        return name, value, pos

    @staticmethod
    def _decode_string(data: bytes, pos: int) -> tuple[str, int]:
        if pos >= len(data):
            raise HttpError(ErrorCode.NEED_MORE_DATA, "string truncated")
        length, pos = decode_integer(data, pos, 7)
        end = pos + length
        if end > len(data):
            raise HttpError(ErrorCode.NEED_MORE_DATA, "string truncated")
        return _to_text(data[pos:end]), end

    def _entry_at(self, index: int) -> tuple[str, str]:
        if index == 0:
            raise HttpError(ErrorCode.PROTOCOL_ERROR, "header index 0")
        if index <= len(STATIC_TABLE):
            return STATIC_TABLE[index - 1]
        dynamic_index = index - len(STATIC_TABLE) - 1
        if dynamic_index >= len(self._table):
            raise HttpError(ErrorCode.PROTOCOL_ERROR, f"header index {index} out of range")
        return self._table[dynamic_index]