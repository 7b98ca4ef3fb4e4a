import datetime

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ed25519
from cryptography.x509.oid import NameOID

from webauthnkit.attestation_object import AttestationObject
from webauthnkit.attestation_statement import (
    AttestationFormat,
    AttestationStatement,
    AttestationType,
    InvalidCertificateError,
    MissingCertificateError,
    verify_none_attestation_statement,
)


def _certificate_der(name: x509.Name) -> bytes:
    signing_key = ed25519.Ed25519PrivateKey.generate()
    certificate = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(signing_key.public_key())
        .serial_number(1)
        .not_valid_before(datetime.datetime(2020, 1, 1, tzinfo=datetime.timezone.utc))
        .not_valid_after(datetime.datetime(2040, 1, 1, tzinfo=datetime.timezone.utc))
        .sign(signing_key, None)
    )
    return certificate.public_bytes(serialization.Encoding.DER)


def test_unmarshal_certificates_valid():
    name = x509.Name(
        [
            x509.NameAttribute(NameOID.COUNTRY_NAME, "CN"),
            x509.NameAttribute(NameOID.ORGANIZATION_NAME, "Feitian Technologies"),
            x509.NameAttribute(NameOID.ORGANIZATIONAL_UNIT_NAME, "Authenticator Attestation"),
            x509.NameAttribute(NameOID.COMMON_NAME, "FT BioPass FIDO2 USB"),
        ]
    )
    statement = AttestationStatement({"alg": -7, "sig": b"sig", "x5c": [_certificate_der(name)]})
    certificates = statement.unmarshal_certificates()
    assert len(certificates) == 1
    assert (
        certificates[0].subject.rfc4514_string()
        == "CN=FT BioPass FIDO2 USB,OU=Authenticator Attestation,O=Feitian Technologies,C=CN"
    )


def test_unmarshal_certificates_missing():
    with pytest.raises(MissingCertificateError):
        AttestationStatement().unmarshal_certificates()


@pytest.mark.parametrize(
    "x5c",
    [
        "NOT_A_CERTIFICATE",
        b"NOT_A_CERTIFICATE",
        None,
        ["NOT_A_CERTIFICATE"],
        [b"NOT_A_CERTIFICATE"],
    ],
)
def test_unmarshal_certificates_invalid(x5c):
    with pytest.raises(InvalidCertificateError):
        AttestationStatement({"x5c": x5c}).unmarshal_certificates()


@pytest.mark.parametrize(
    ("statement", "expected"),
    [({"alg": -7}, -7), ({"alg": -257}, -257), ({}, 0), ({"alg": "ES256"}, 0), ({"alg": True}, 0)],
)
def test_get_algorithm(statement, expected):
    assert AttestationStatement(statement).get_algorithm() == expected


@pytest.mark.parametrize(
    ("statement", "expected"),
    [({"sig": b"\x01\x02"}, b"\x01\x02"), ({}, None), ({"sig": "text"}, None)],
)
def test_get_signature(statement, expected):
    assert AttestationStatement(statement).get_signature() == expected


def test_verify_none_attestation_statement():
    attestation_object = AttestationObject(
        auth_data=bytes(37), format=AttestationFormat.NONE, statement=AttestationStatement()
    )
    result = verify_none_attestation_statement(attestation_object, bytes(32))
    assert result.type is AttestationType.NONE
    assert result.trust_paths == []


def test_format_string_form():
    assert str(AttestationFormat("fido-u2f")) == "fido-u2f"
    assert AttestationFormat("tpm") is AttestationFormat.TPM