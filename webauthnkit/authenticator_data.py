"""Authenticator data: the contextual bindings made by an authenticator."""

from __future__ import annotations

import struct
from dataclasses import dataclass

from .attested_credential_data import (
    AttestedCredentialData,
    InvalidAttestedCredentialDataError,
    _extract_cbor,
    unmarshal_attested_credential_data,
)
from .flags import AUTHENTICATOR_FLAGS_SIZE, AuthenticatorFlags

RPID_HASH_SIZE = 32
"""Number of bytes in the SHA-256 hash of the RP ID."""

_SIGN_COUNT_SIZE = 4
_MAX_SIGN_COUNT = 0xFFFFFFFF


class InvalidAuthenticatorDataError(ValueError):
    """Raised when authenticator data cannot be decoded."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"invalid authenticator data: {detail}")


@dataclass
class AuthenticatorData:
    """RP ID hash, flags, sign count and optional credential and extension data."""

    rp_id_hash: bytes
    flags: AuthenticatorFlags = AuthenticatorFlags(0)
    sign_count: int = 0
    attested_credential_data: AttestedCredentialData | None = None
    extensions: bytes = b""

    def __post_init__(self) -> None:
        self.rp_id_hash = bytes(self.rp_id_hash)
        if len(self.rp_id_hash) != RPID_HASH_SIZE:
            raise ValueError(f"RP ID hash must be {RPID_HASH_SIZE} bytes")
        self.flags = AuthenticatorFlags(self.flags)
        if not 0 <= self.sign_count <= _MAX_SIGN_COUNT:
            raise ValueError("sign count must fit in 32 bits")
        self.extensions = bytes(self.extensions)

    def marshal(self) -> bytes:
        """Encode in the layout read by :func:`unmarshal_authenticator_data`."""
        parts = [self.rp_id_hash, struct.pack(">BI", int(self.flags), self.sign_count)]
        if self.flags.attested_credential_data_included():
            if self.attested_credential_data is None:
                raise ValueError("cannot marshal missing attested credential data")
            parts.append(self.attested_credential_data.marshal())
        if self.flags.extension_data_included():
            parts.append(self.extensions)
        return b"".join(parts)


def unmarshal_authenticator_data(raw: bytes) -> tuple[AuthenticatorData, bytes]:
    """Decode authenticator data, returning it with the bytes that follow it.

    Layout: rpIdHash (32 bytes), flags (1 byte), signCount (4 bytes, big-endian),
    attested credential data (if flagged) and a CBOR extensions map (if flagged).
    """
    data = bytes(raw)

    if len(data) < RPID_HASH_SIZE:
        raise InvalidAuthenticatorDataError("missing RPIDHash")
    rp_id_hash, data = data[:RPID_HASH_SIZE], data[RPID_HASH_SIZE:]

    if len(data) < AUTHENTICATOR_FLAGS_SIZE:
        raise InvalidAuthenticatorDataError("missing flags")
    flags = AuthenticatorFlags(data[0])
    data = data[AUTHENTICATOR_FLAGS_SIZE:]

    if len(data) < _SIGN_COUNT_SIZE:
        raise InvalidAuthenticatorDataError("missing sign count")
    (sign_count,) = struct.unpack_from(">I", data)
    data = data[_SIGN_COUNT_SIZE:]

    attested = None
    if flags.attested_credential_data_included():
        attested, data = unmarshal_attested_credential_data(data)

    extensions = b""
    if flags.extension_data_included():
        try:
            extensions, data = _extract_cbor(data)
        except InvalidAttestedCredentialDataError as exc:
            raise InvalidAuthenticatorDataError("missing extensions") from exc

    return (
        AuthenticatorData(
            rp_id_hash=rp_id_hash,
            flags=flags,
            sign_count=sign_count,
            attested_credential_data=attested,
            extensions=extensions,
        ),
        data,
    )