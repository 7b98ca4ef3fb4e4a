"""Attested credential data carried inside authenticator data."""

from __future__ import annotations

import secrets
import struct
from dataclasses import dataclass

import cbor2

AAGUID_SIZE = 16
"""Number of bytes in an AAGUID."""

_MAX_CREDENTIAL_ID_LENGTH = 0xFFFF


class InvalidAttestedCredentialDataError(ValueError):
    """Raised when attested credential data cannot be decoded."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"invalid attested credential data: {detail}")


def new_random_aaguid() -> bytes:
    """Return a random AAGUID."""
    return secrets.token_bytes(AAGUID_SIZE)


@dataclass
class AttestedCredentialData:
    """The AAGUID, credential id and COSE public key of a new credential."""

    aaguid: bytes
    credential_id: bytes = b""
    credential_public_key: bytes = b""

    def __post_init__(self) -> None:
        self.aaguid = bytes(self.aaguid)
        self.credential_id = bytes(self.credential_id)
        self.credential_public_key = bytes(self.credential_public_key)
        if len(self.aaguid) != AAGUID_SIZE:
            raise ValueError(f"AAGUID must be {AAGUID_SIZE} bytes")

    def marshal(self) -> bytes:
        """Encode as aaguid, 16-bit big-endian id length, id and public key."""
        if len(self.credential_id) > _MAX_CREDENTIAL_ID_LENGTH:
            raise ValueError("credential id is too long")
        return (
            self.aaguid
            + struct.pack(">H", len(self.credential_id))
            + self.credential_id
            + self.credential_public_key
        )


def unmarshal_attested_credential_data(raw: bytes) -> tuple[AttestedCredentialData, bytes]:
    """Decode attested credential data, returning it with the bytes that follow it."""
    data = bytes(raw)
    if len(data) < AAGUID_SIZE:
        raise InvalidAttestedCredentialDataError("missing AAGUID")
    aaguid, data = data[:AAGUID_SIZE], data[AAGUID_SIZE:]

    if len(data) < 2:
        raise InvalidAttestedCredentialDataError("missing credential id length")
    (length,) = struct.unpack_from(">H", data)
    data = data[2:]
    if len(data) < length:
        raise InvalidAttestedCredentialDataError("missing credential id")
    credential_id, data = data[:length], data[length:]

    public_key, data = _extract_cbor(data)
    return AttestedCredentialData(aaguid, credential_id, public_key), data


class _MalformedCbor(Exception):
    pass


def _cbor_item_end(data: bytes, pos: int) -> int:
    if pos >= len(data):
        raise _MalformedCbor("truncated")
    initial = data[pos]
    pos += 1
    major, info = initial >> 5, initial & 0x1F

    if info == 31:
        if major in (0, 1, 6, 7):
            raise _MalformedCbor("unexpected indefinite length")
        while True:
            if pos >= len(data):
                raise _MalformedCbor("truncated")
            if data[pos] == 0xFF:
                return pos + 1
            pos = _cbor_item_end(data, pos)
    if info < 24:
        argument = info
    elif info <= 27:
        size = 1 << (info - 24)
        if pos + size > len(data):
            raise _MalformedCbor("truncated")
        argument = int.from_bytes(data[pos : pos + size], "big")
        pos += size
    else:
        raise _MalformedCbor("reserved additional information")

    if major in (2, 3):
        end = pos + argument
        if end > len(data):
            raise _MalformedCbor("truncated")
        return end
    if major in (4, 5):
        count = argument * (2 if major == 5 else 1)
        for _ in range(count):
            pos = _cbor_item_end(data, pos)
        return pos
    if major == 6:
        return _cbor_item_end(data, pos)
    return pos


def _extract_cbor(raw: bytes) -> tuple[bytes, bytes]:
    try:
        end = _cbor_item_end(raw, 0)
        cbor2.loads(raw[:end])
    except (_MalformedCbor, ValueError, EOFError, RecursionError) as exc:
        raise InvalidAttestedCredentialDataError("invalid credential public key") from exc
    return raw[:end], raw[end:]