import datetime

import pytest
from cryptography import x509
from cryptography.hazmat.primitives.asymmetric import ed25519
from cryptography.x509.oid import ExtendedKeyUsageOID, NameOID

from webauthnkit.android import AuthorizationList, KeyDescription, KeyMasterPurpose
from webauthnkit.certificate import (
    OID_AAGUID,
    OID_AIK_CERTIFICATE,
    OID_ANDROID_KEY,
    OID_APPLE_NONCE,
    AAGUIDMarkedCriticalError,
    CertificateExtensionError,
    InvalidAndroidKeyError,
    InvalidAppleNonceError,
    MissingAAGUIDError,
    MissingAndroidKeyError,
    MissingAppleNonceError,
    certificate_has_aik,
    get_certificate_aaguid,
    get_certificate_android_key_description,
    get_certificate_apple_nonce,
)
from webauthnkit.der import (
    CLASS_CONTEXT,
    CLASS_UNIVERSAL,
    TAG_OCTET_STRING,
    TAG_SEQUENCE,
    encode_element,
)


def _certificate(*extensions):
    signing_key = ed25519.Ed25519PrivateKey.generate()
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "test")])
    builder = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(signing_key.public_key())
        .serial_number(1)
        .not_valid_before(datetime.datetime(2020, 1, 1, tzinfo=datetime.timezone.utc))
        .not_valid_after(datetime.datetime(2040, 1, 1, tzinfo=datetime.timezone.utc))
    )
    for extension, critical in extensions:
        builder = builder.add_extension(extension, critical=critical)
    return builder.sign(signing_key, None)


def _octet_string(content):
    return encode_element(CLASS_UNIVERSAL, TAG_OCTET_STRING, False, content)


def test_aaguid_missing():
    with pytest.raises(MissingAAGUIDError):
        get_certificate_aaguid(_certificate())


def test_aaguid_marked_critical():
    certificate = _certificate((x509.UnrecognizedExtension(OID_AAGUID, b""), True))
    with pytest.raises(AAGUIDMarkedCriticalError):
        get_certificate_aaguid(certificate)


def test_aaguid_present():
    aaguid = bytes(range(16))
    certificate = _certificate((x509.UnrecognizedExtension(OID_AAGUID, _octet_string(aaguid)), False))
    assert get_certificate_aaguid(certificate) == aaguid


@pytest.mark.parametrize("value", [b"", _octet_string(b"short"), b"\x04\x10\x00"])
def test_aaguid_malformed(value):
    certificate = _certificate((x509.UnrecognizedExtension(OID_AAGUID, value), False))
    with pytest.raises(CertificateExtensionError, match="invalid AAGUID"):
        get_certificate_aaguid(certificate)


def test_certificate_has_aik():
    with_aik = _certificate(
        (x509.ExtendedKeyUsage([ExtendedKeyUsageOID.CLIENT_AUTH, OID_AIK_CERTIFICATE]), False)
    )
    without_aik = _certificate((x509.ExtendedKeyUsage([ExtendedKeyUsageOID.CLIENT_AUTH]), False))
    assert certificate_has_aik(with_aik) is True
    assert certificate_has_aik(without_aik) is False
    assert certificate_has_aik(_certificate()) is False


def test_apple_nonce_present():
    nonce = bytes(range(32))
    value = encode_element(
        CLASS_UNIVERSAL,
        TAG_SEQUENCE,
        True,
        encode_element(CLASS_CONTEXT, 1, True, _octet_string(nonce)),
    )
    certificate = _certificate((x509.UnrecognizedExtension(OID_APPLE_NONCE, value), False))
    assert get_certificate_apple_nonce(certificate) == nonce


def test_apple_nonce_missing():
    with pytest.raises(MissingAppleNonceError):
        get_certificate_apple_nonce(_certificate())


@pytest.mark.parametrize(
    "value",
    [
        b"\x30\x05\x01",
        _octet_string(b"nonce"),
        encode_element(CLASS_UNIVERSAL, TAG_SEQUENCE, True, _octet_string(b"nonce")),
    ],
)
def test_apple_nonce_invalid(value):
    certificate = _certificate((x509.UnrecognizedExtension(OID_APPLE_NONCE, value), False))
    with pytest.raises(InvalidAppleNonceError):
        get_certificate_apple_nonce(certificate)


def test_android_key_description_present():
    description = KeyDescription(
        attestation_challenge=bytes(32),
        tee_enforced=AuthorizationList(purpose=(KeyMasterPurpose.SIGN,)),
    )
    certificate = _certificate(
        (x509.UnrecognizedExtension(OID_ANDROID_KEY, description.marshal()), False)
    )
    decoded = get_certificate_android_key_description(certificate)
    assert decoded == description
    assert decoded.tee_enforced.has_purpose(KeyMasterPurpose.SIGN)
    assert not decoded.software_enforced.has_purpose(KeyMasterPurpose.SIGN)


def test_android_key_description_missing():
    with pytest.raises(MissingAndroidKeyError):
        get_certificate_android_key_description(_certificate())


def test_android_key_description_invalid():
    certificate = _certificate((x509.UnrecognizedExtension(OID_ANDROID_KEY, b"\x30\x00"), False))
    with pytest.raises(InvalidAndroidKeyError, match="invalid android key"):
        get_certificate_android_key_description(certificate)