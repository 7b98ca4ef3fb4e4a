"""Attestation statements, formats and types."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from cryptography import x509

if TYPE_CHECKING:
    from .attestation_object import AttestationObject


class InvalidAttestationStatementError(ValueError):
    """Raised when an attestation statement is invalid."""


class InvalidCertificateError(ValueError):
    """Raised when an attestation statement has an invalid x5c certificate."""


class MissingCertificateError(ValueError):
    """Raised when an attestation statement has no x5c certificate."""


class AttestationFormat(str, enum.Enum):
    """Defined attestation statement formats."""

    ANDROID_KEY = "android-key"
    ANDROID_SAFETYNET = "android-safetynet"
    APPLE = "apple"
    FIDO_U2F = "fido-u2f"
    NONE = "none"
    PACKED = "packed"
    TPM = "tpm"

    def __str__(self) -> str:
        return self.value


class AttestationType(str, enum.Enum):
    """Attestation types."""

    BASIC = "Basic"
    SELF = "Self"
    ATTESTATION_CA = "AttCA"
    ANONYMIZATION_CA = "AnonCA"
    NONE = "None"
    UNKNOWN = "Unknown"

    def __str__(self) -> str:
        return self.value


class AttestationStatement(dict):
    """The format-specific statement map of an attestation object."""

    def get_algorithm(self) -> int:
        """Return the "alg" field, or 0 if it is missing or not an integer."""
        alg = self.get("alg")
        if isinstance(alg, int) and not isinstance(alg, bool):
            return alg
        return 0

    def get_signature(self) -> bytes | None:
        """Return the "sig" field, or None if it is missing or not bytes."""
        sig = self.get("sig")
        if isinstance(sig, (bytes, bytearray)):
            return bytes(sig)
        return None

    def unmarshal_certificates(self) -> list[x509.Certificate]:
        """Parse the DER certificates stored under "x5c"."""
        if "x5c" not in self:
            raise MissingCertificateError("missing certificate")
        chain: Any = self["x5c"]
        if not isinstance(chain, (list, tuple)):
            raise InvalidCertificateError("invalid certificate")

        certificates = []
        for der in chain:
            if not isinstance(der, (bytes, bytearray)):
                raise InvalidCertificateError("invalid certificate")
            try:
                certificates.append(x509.load_der_x509_certificate(bytes(der)))
            except ValueError as exc:
                raise InvalidCertificateError(f"invalid certificate: {exc}") from exc
        return certificates


@dataclass
class VerifyAttestationStatementResult:
    """The attestation type and trust paths found by a verification."""

    type: AttestationType
    trust_paths: list[list[x509.Certificate]] = field(default_factory=list)


def verify_none_attestation_statement(
    attestation_object: AttestationObject,
    client_data_json_hash: bytes,
) -> VerifyAttestationStatementResult:
    """Verify a "none" attestation statement, which always succeeds."""
    return VerifyAttestationStatementResult(type=AttestationType.NONE)