"""Authenticator responses to registration and authentication ceremonies."""

from __future__ import annotations

import base64
import hashlib
import json
import re
from dataclasses import dataclass
from typing import Any

from .attestation_object import AttestationObject, unmarshal_attestation_object
from .authenticator_data import AuthenticatorData, unmarshal_authenticator_data

_BASE64URL = re.compile(r"[A-Za-z0-9_-]*")


def _to_base64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _from_base64url(value: str) -> bytes:
    stripped = value.rstrip("=")
    if not _BASE64URL.fullmatch(stripped) or len(stripped) % 4 == 1:
        raise ValueError(f"invalid base64url data: {value!r}")
    return base64.urlsafe_b64decode(stripped + "=" * (-len(stripped) % 4))


def _load_object(raw: str | bytes) -> dict[str, Any]:
    decoded = json.loads(raw)
    if not isinstance(decoded, dict):
        raise ValueError("expected a JSON object")
    return decoded


def _bytes_field(decoded: dict[str, Any], key: str) -> bytes:
    value = decoded.get(key)
    if value is None:
        return b""
    if not isinstance(value, str):
        raise ValueError(f"field {key} must be a string")
    return _from_base64url(value)


def _nullable_bytes_field(decoded: dict[str, Any], key: str) -> bytes | None:
    if decoded.get(key) is None:
        return None
    return _bytes_field(decoded, key)


@dataclass
class AuthenticatorAssertionResponse:
    """An authenticator's response to a request for an authentication assertion."""

    client_data_json: bytes = b""
    authenticator_data: bytes = b""
    signature: bytes = b""
    user_handle: bytes | None = None

    def client_data_json_hash(self) -> bytes:
        """Return the SHA-256 hash of the client data JSON."""
        return hashlib.sha256(self.client_data_json).digest()

    def unmarshal_authenticator_data(self) -> AuthenticatorData:
        """Decode the authenticator data."""
        data, _ = unmarshal_authenticator_data(self.authenticator_data)
        return data

    def to_json(self) -> str:
        """Encode as JSON with base64url byte fields and a nullable user handle."""
        return json.dumps(
            {
                "clientDataJSON": _to_base64url(self.client_data_json),
                "authenticatorData": _to_base64url(self.authenticator_data),
                "signature": _to_base64url(self.signature),
                "userHandle": None
                if self.user_handle is None
                else _to_base64url(self.user_handle),
            }
        )

    @classmethod
    def from_json(cls, raw: str | bytes) -> AuthenticatorAssertionResponse:
        """Decode from the JSON form produced by :meth:`to_json`."""
        decoded = _load_object(raw)
        return cls(
            client_data_json=_bytes_field(decoded, "clientDataJSON"),
            authenticator_data=_bytes_field(decoded, "authenticatorData"),
            signature=_bytes_field(decoded, "signature"),
            user_handle=_nullable_bytes_field(decoded, "userHandle"),
        )


@dataclass
class AuthenticatorAttestationResponse:
    """An authenticator's response to a request to create a new credential."""

    client_data_json: bytes = b""
    attestation_object: bytes = b""

    def client_data_json_hash(self) -> bytes:
        """Return the SHA-256 hash of the client data JSON."""
        return hashlib.sha256(self.client_data_json).digest()

    def unmarshal_attestation_object(self) -> AttestationObject:
        """Decode the attestation object."""
        obj, _ = unmarshal_attestation_object(self.attestation_object)
        return obj

    def to_json(self) -> str:
        """Encode as JSON with base64url byte fields."""
        return json.dumps(
            {
                "clientDataJSON": _to_base64url(self.client_data_json),
                "attestationObject": _to_base64url(self.attestation_object),
            }
        )

    @classmethod
    def from_json(cls, raw: str | bytes) -> AuthenticatorAttestationResponse:
        """Decode from the JSON form produced by :meth:`to_json`."""
        decoded = _load_object(raw)
        return cls(
            client_data_json=_bytes_field(decoded, "clientDataJSON"),
            attestation_object=_bytes_field(decoded, "attestationObject"),
        )