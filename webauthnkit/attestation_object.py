"""Attestation objects: authenticator data plus an attestation statement."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import cbor2

from .attestation_statement import AttestationFormat, AttestationStatement
from .attested_credential_data import _extract_cbor
from .authenticator_data import AuthenticatorData, unmarshal_authenticator_data


class InvalidAttestationObjectError(ValueError):
    """Raised when an attestation object cannot be decoded."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"invalid attestation object: {detail}")


@dataclass
class AttestationObject:
    """Authenticator data, statement format and attestation statement."""

    auth_data: bytes = b""
    format: AttestationFormat | str = ""
    statement: AttestationStatement = field(default_factory=AttestationStatement)

    def __post_init__(self) -> None:
        self.auth_data = bytes(self.auth_data)
        if not isinstance(self.statement, AttestationStatement):
            self.statement = AttestationStatement(self.statement or {})

    def unmarshal_authenticator_data(self) -> AuthenticatorData:
        """Decode the authenticator data."""
        data, _ = unmarshal_authenticator_data(self.auth_data)
        return data


def _as_format(value: str) -> AttestationFormat | str:
    try:
        return AttestationFormat(value)
    except ValueError:
        return value


def _field(decoded: dict[Any, Any], key: str, kind: type, default: Any) -> Any:
    value = decoded.get(key)
    if value is None:
        return default
    if not isinstance(value, kind):
        raise InvalidAttestationObjectError(f"unexpected type for {key}")
    return value


def unmarshal_attestation_object(raw: bytes) -> tuple[AttestationObject, bytes]:
    """Decode a CBOR attestation object, returning it with the bytes that follow it."""
    try:
        item, remaining = _extract_cbor(bytes(raw))
        decoded = cbor2.loads(item)
    except ValueError as exc:
        raise InvalidAttestationObjectError("malformed CBOR") from exc

    if not isinstance(decoded, dict):
        raise InvalidAttestationObjectError("expected a map")

    auth_data = _field(decoded, "authData", bytes, b"")
    fmt = _field(decoded, "fmt", str, "")
    statement = _field(decoded, "attStmt", dict, {})
    if not all(isinstance(key, str) for key in statement):
        raise InvalidAttestationObjectError("attestation statement keys must be strings")

    return (
        AttestationObject(
            auth_data=auth_data,
            format=_as_format(fmt),
            statement=AttestationStatement(statement),
        ),
        remaining,
    )