"""A small reader and writer for DER encoded ASN.1 elements."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

CLASS_UNIVERSAL = 0
CLASS_APPLICATION = 1
CLASS_CONTEXT = 2
CLASS_PRIVATE = 3

TAG_BOOLEAN = 1
TAG_INTEGER = 2
TAG_OCTET_STRING = 4
TAG_NULL = 5
TAG_OBJECT_IDENTIFIER = 6
TAG_ENUMERATED = 10
TAG_SEQUENCE = 16
TAG_SET = 17


class DerError(ValueError):
    """Raised when DER data is malformed."""


@dataclass(frozen=True)
class Element:
    """A single tag-length-value element."""

    tag_class: int
    number: int
    constructed: bool
    content: bytes


def read_element(raw: bytes) -> tuple[Element, bytes]:
    """Read one element from the front of ``raw`` and return it with the remaining bytes."""
    data = bytes(raw)
    if not data:
        raise DerError("unexpected end of data")

    first = data[0]
    tag_class = first >> 6
    constructed = bool(first & 0x20)
    number = first & 0x1F
    pos = 1
    if number == 0x1F:
        number = 0
        while True:
            if pos >= len(data):
                raise DerError("truncated tag")
            byte = data[pos]
            pos += 1
            if number == 0 and byte == 0x80:
                raise DerError("non-minimal tag encoding")
            number = (number << 7) | (byte & 0x7F)
            if not byte & 0x80:
                break
        if number < 0x1F:
            raise DerError("non-minimal tag encoding")

    if pos >= len(data):
        raise DerError("missing length")
    length = data[pos]
    pos += 1
    if length == 0x80:
        raise DerError("indefinite length is not allowed")
    if length > 0x80:
        count = length & 0x7F
        if pos + count > len(data):
            raise DerError("truncated length")
        length = int.from_bytes(data[pos : pos + count], "big")
        pos += count
        if length < 0x80 or count != (length.bit_length() + 7) // 8:
            raise DerError("non-minimal length encoding")

    end = pos + length
    if end > len(data):
        raise DerError("truncated content")
    return Element(tag_class, number, constructed, data[pos:end]), data[end:]


def iter_elements(raw: bytes) -> Iterator[Element]:
    """Yield consecutive elements until ``raw`` is exhausted."""
    data = bytes(raw)
    while data:
        element, data = read_element(data)
        yield element


def _encode_identifier(tag_class: int, number: int, constructed: bool) -> bytes:
    lead = (tag_class << 6) | (0x20 if constructed else 0)
    if number < 0x1F:
        return bytes([lead | number])
    groups = []
    while True:
        groups.append(number & 0x7F)
        number >>= 7
        if not number:
            break
    groups.reverse()
    return bytes([lead | 0x1F, *(group | 0x80 for group in groups[:-1]), groups[-1]])


def _encode_length(length: int) -> bytes:
    if length < 0x80:
        return bytes([length])
    body = length.to_bytes((length.bit_length() + 7) // 8, "big")
    return bytes([0x80 | len(body)]) + body


def encode_element(tag_class: int, number: int, constructed: bool, content: bytes) -> bytes:
    """Encode an element from its tag and content."""
    if tag_class not in (CLASS_UNIVERSAL, CLASS_APPLICATION, CLASS_CONTEXT, CLASS_PRIVATE):
        raise ValueError(f"invalid tag class {tag_class}")
    if number < 0:
        raise ValueError(f"invalid tag number {number}")
    content = bytes(content)
    return _encode_identifier(tag_class, number, constructed) + _encode_length(len(content)) + content