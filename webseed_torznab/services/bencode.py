# webseed_torznab/services/bencode.py

"""
Bencode codec for BitTorrent metainfo files.

Decoded values use plain Python types, forming a closed union:

    int    -> bencode integer (signed 64-bit, never ``bool``)
    bytes  -> bencode byte string (raw, never text-decoded)
    list   -> bencode list
    dict   -> bencode dictionary with ``bytes`` keys

Dictionaries keep the key order found in the input. ``encode`` always sorts
keys by raw byte value, so its output is the canonical encoding that the
info-hash is computed from.
"""

from __future__ import annotations

import re
from typing import Union

BencodeValue = Union[int, bytes, list["BencodeValue"], dict[bytes, "BencodeValue"]]

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1
# Maximum number of nested lists/dictionaries, the top-level value included.
MAX_DEPTH = 256

_INT_RE = re.compile(rb"0|-?[1-9][0-9]*")
_LENGTH_RE = re.compile(rb"0|[1-9][0-9]*")

_INT_START = ord("i")
_LIST_START = ord("l")
_DICT_START = ord("d")
_END = ord("e")
_DIGITS = frozenset(b"0123456789")


class MalformedBencode(ValueError):
    """Raised when a byte buffer is not valid bencode.

    Attributes:
        message: Description of the problem.
        offset: Byte offset in the input where the problem was detected.
    """

    def __init__(self, message: str, offset: int):
        super().__init__(f"{message} at byte offset {offset}")
        self.message = message
        self.offset = offset


class _Decoder:
    """Cursor-based recursive descent parser over an immutable buffer."""

    def __init__(self, data: bytes):
        self.data = data
        self.pos = 0

    def decode(self) -> BencodeValue:
        value = self._decode_value(0)
        if self.pos != len(self.data):
            raise MalformedBencode("Trailing data after top-level value", self.pos)
        return value

    def _decode_value(self, depth: int) -> BencodeValue:
        """Decodes the value at the cursor; ``depth`` counts enclosing containers."""
        if self.pos >= len(self.data):
            raise MalformedBencode("Unexpected end of input", self.pos)

        token = self.data[self.pos]
        if token == _INT_START:
            return self._decode_int()
        if token in _DIGITS:
            return self._decode_bytes()
        if token in (_LIST_START, _DICT_START) and depth >= MAX_DEPTH:
            raise MalformedBencode(f"Nesting deeper than {MAX_DEPTH} levels", self.pos)
        if token == _LIST_START:
            return self._decode_list(depth)
        if token == _DICT_START:
            return self._decode_dict(depth)
        raise MalformedBencode(f"Invalid token {bytes([token])!r}", self.pos)

    def _decode_int(self) -> int:
        start = self.pos
        end = self.data.find(b"e", start + 1)
        if end == -1:
            raise MalformedBencode("Unterminated integer", start)

        digits = self.data[start + 1 : end]
        if not _INT_RE.fullmatch(digits):
            raise MalformedBencode(f"Invalid integer {digits!r}", start)

        value = int(digits)
        if not INT64_MIN <= value <= INT64_MAX:
            raise MalformedBencode("Integer outside signed 64-bit range", start)

        self.pos = end + 1
        return value

    def _decode_bytes(self) -> bytes:
        start = self.pos
        colon = self.data.find(b":", start)
        if colon == -1:
            raise MalformedBencode("Missing ':' after string length", start)

        prefix = self.data[start:colon]
        if not _LENGTH_RE.fullmatch(prefix):
            raise MalformedBencode(f"Invalid string length {prefix!r}", start)

        begin = colon + 1
        end = begin + int(prefix)
        if end > len(self.data):
            raise MalformedBencode(
                f"String of length {int(prefix)} runs past end of input", start
            )

        self.pos = end
        return self.data[begin:end]

    def _decode_list(self, depth: int) -> list[BencodeValue]:
        start = self.pos
        self.pos += 1
        items: list[BencodeValue] = []
        while True:
            if self.pos >= len(self.data):
                raise MalformedBencode("Unterminated list", start)
            if self.data[self.pos] == _END:
                self.pos += 1
                return items
            items.append(self._decode_value(depth + 1))

    def _decode_dict(self, depth: int) -> dict[bytes, BencodeValue]:
        start = self.pos
        self.pos += 1
        result: dict[bytes, BencodeValue] = {}
        while True:
            if self.pos >= len(self.data):
                raise MalformedBencode("Unterminated dictionary", start)
            token = self.data[self.pos]
            if token == _END:
                self.pos += 1
                return result
            if token not in _DIGITS:
                raise MalformedBencode(
                    "Dictionary key must be a byte string", self.pos
                )

            key_offset = self.pos
            key = self._decode_bytes()
            if key in result:
                raise MalformedBencode(f"Duplicate dictionary key {key!r}", key_offset)
            result[key] = self._decode_value(depth + 1)


def decode(data: bytes | bytearray | memoryview) -> BencodeValue:
    """
    Decodes exactly one bencoded value spanning the whole buffer.

    Raises:
        MalformedBencode: On truncated input, invalid integers or length
            prefixes, unterminated containers, non-string dictionary keys,
            duplicate keys, excessive nesting or trailing bytes.
    """
    return _Decoder(bytes(data)).decode()


def decode_dict(data: bytes | bytearray | memoryview) -> dict[bytes, BencodeValue]:
    """Decodes a metainfo buffer whose top-level value must be a dictionary."""
    value = decode(data)
    if not isinstance(value, dict):
        raise MalformedBencode("Top-level value is not a dictionary", 0)
    return value


def encode(value: BencodeValue) -> bytes:
    """
    Returns the canonical bencoding of ``value``.

    Dictionary keys are written in ascending raw-byte order regardless of the
    order they were inserted in. ``bytearray``/``memoryview`` are accepted as
    byte strings and ``tuple`` as a list; anything else outside the four
    bencode types raises TypeError.
    """
    chunks: list[bytes] = []
    _encode_into(value, chunks)
    return b"".join(chunks)


def _encode_into(value: object, out: list[bytes]) -> None:
    # bool is an int subclass and has no bencode representation.
    if isinstance(value, bool):
        raise TypeError("Cannot bencode a bool; use an int instead")

    if isinstance(value, int):
        if not INT64_MIN <= value <= INT64_MAX:
            raise ValueError(f"Integer {value} is outside signed 64-bit range")
        out.append(b"i%de" % value)
    elif isinstance(value, (bytes, bytearray, memoryview)):
        raw = bytes(value)
        out.append(b"%d:" % len(raw))
        out.append(raw)
    elif isinstance(value, (list, tuple)):
        out.append(b"l")
        for item in value:
            _encode_into(item, out)
        out.append(b"e")
    elif isinstance(value, dict):
        for key in value:
            if not isinstance(key, bytes):
                raise TypeError(
                    f"Dictionary keys must be bytes, got {type(key).__name__}"
                )
        out.append(b"d")
        for key in sorted(value):
            out.append(b"%d:" % len(key))
            out.append(key)
            _encode_into(value[key], out)
        out.append(b"e")
    else:
        raise TypeError(f"Cannot bencode value of type {type(value).__name__}")


def extract_subtree(
    top: dict[bytes, BencodeValue], key: str | bytes
) -> BencodeValue | None:
    """
    Returns the already-decoded value stored under a top-level key, or None
    when the key is absent. The subtree is shared, not copied or re-decoded.
    """
    if not isinstance(top, dict):
        raise TypeError("extract_subtree expects a decoded dictionary")
    if isinstance(key, str):
        key = key.encode("utf-8")
    return top.get(key)
