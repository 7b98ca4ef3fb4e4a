"""Reading WebAuthn-specific extensions of X.509 certificates."""

from __future__ import annotations

from collections.abc import Iterator

from cryptography import x509

from .android import KeyDescription, unmarshal_key_description
from .attested_credential_data import AAGUID_SIZE
from .der import (
    CLASS_CONTEXT,
    CLASS_UNIVERSAL,
    TAG_OCTET_STRING,
    TAG_SEQUENCE,
    DerError,
    Element,
    iter_elements,
    read_element,
)

OID_AAGUID = x509.ObjectIdentifier("1.3.6.1.4.1.45724.1.1.4")
OID_AIK_CERTIFICATE = x509.ObjectIdentifier("2.23.133.8.3")
OID_ANDROID_KEY = x509.ObjectIdentifier("1.3.6.1.4.1.11129.2.1.17")
OID_APPLE_NONCE = x509.ObjectIdentifier("1.2.840.113635.100.8.2")


class CertificateExtensionError(ValueError):
    """Raised when a certificate extension is missing or malformed."""


class MissingAAGUIDError(CertificateExtensionError):
    """The certificate has no AAGUID extension."""


class AAGUIDMarkedCriticalError(CertificateExtensionError):
    """The AAGUID extension is marked critical."""


class MissingAppleNonceError(CertificateExtensionError):
    """The certificate has no Apple nonce extension."""


class InvalidAppleNonceError(CertificateExtensionError):
    """The Apple nonce extension is malformed."""


class MissingAndroidKeyError(CertificateExtensionError):
    """The certificate has no Android key attestation extension."""


class InvalidAndroidKeyError(CertificateExtensionError):
    """The Android key attestation extension is malformed."""


def _extensions_with(certificate: x509.Certificate, oid: x509.ObjectIdentifier) -> Iterator[x509.Extension]:
    return (extension for extension in certificate.extensions if extension.oid == oid)


def _extension_value(extension: x509.Extension) -> bytes:
    value = extension.value
    if isinstance(value, x509.UnrecognizedExtension):
        return value.value
    return value.public_bytes()


def _is_universal(element: Element, number: int, constructed: bool) -> bool:
    return (
        element.tag_class == CLASS_UNIVERSAL
        and element.number == number
        and element.constructed == constructed
    )


def certificate_has_aik(certificate: x509.Certificate) -> bool:
    """Return True if the certificate has the AIK extended key usage."""
    try:
        usage = certificate.extensions.get_extension_for_class(x509.ExtendedKeyUsage).value
    except x509.ExtensionNotFound:
        return False
    return any(oid == OID_AIK_CERTIFICATE for oid in usage)


def get_certificate_aaguid(certificate: x509.Certificate) -> bytes:
    """Return the AAGUID carried in the id-fido-gen-ce-aaguid extension."""
    for extension in _extensions_with(certificate, OID_AAGUID):
        if extension.critical:
            raise AAGUIDMarkedCriticalError("AAGUID marked critical")
        try:
            element, _ = read_element(_extension_value(extension))
        except DerError as exc:
            raise CertificateExtensionError(f"invalid AAGUID: {exc}") from exc
        if not _is_universal(element, TAG_OCTET_STRING, False) or len(element.content) != AAGUID_SIZE:
            raise CertificateExtensionError("invalid AAGUID")
        return element.content
    raise MissingAAGUIDError("missing AAGUID")


def _parse_apple_nonce(value: bytes) -> bytes:
    sequence, _ = read_element(value)
    if not _is_universal(sequence, TAG_SEQUENCE, True):
        raise DerError("expected a sequence")
    first = next(iter_elements(sequence.content), None)
    if first is None or first.tag_class != CLASS_CONTEXT or first.number != 1 or not first.constructed:
        raise DerError("missing nonce")
    inner, _ = read_element(first.content)
    if not _is_universal(inner, TAG_OCTET_STRING, False):
        raise DerError("nonce is not an octet string")
    return inner.content


def get_certificate_apple_nonce(certificate: x509.Certificate) -> bytes:
    """Return the nonce from the Apple anonymous attestation extension."""
    for extension in _extensions_with(certificate, OID_APPLE_NONCE):
        try:
            return _parse_apple_nonce(_extension_value(extension))
        except DerError as exc:
            raise InvalidAppleNonceError("invalid apple nonce") from exc
    raise MissingAppleNonceError("missing apple nonce")


def get_certificate_android_key_description(certificate: x509.Certificate) -> KeyDescription:
    """Return the key description from the Android key attestation extension."""
    for extension in _extensions_with(certificate, OID_ANDROID_KEY):
        try:
            description, _ = unmarshal_key_description(_extension_value(extension))
        except ValueError as exc:
            raise InvalidAndroidKeyError(f"invalid android key: {exc}") from exc
        return description
    raise MissingAndroidKeyError("missing android key")