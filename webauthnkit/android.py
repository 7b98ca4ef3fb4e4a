"""Android key attestation and SafetyNet types."""

from __future__ import annotations

import base64
import enum
from dataclasses import dataclass, field
from typing import Any

from .der import (
    CLASS_CONTEXT,
    CLASS_UNIVERSAL,
    TAG_BOOLEAN,
    TAG_ENUMERATED,
    TAG_INTEGER,
    TAG_NULL,
    TAG_OCTET_STRING,
    TAG_SEQUENCE,
    TAG_SET,
    DerError,
    Element,
    encode_element,
    iter_elements,
    read_element,
)


class KeyMasterPurpose(enum.IntEnum):
    """Purpose of a keymaster key."""

    ENCRYPT = 0
    DECRYPT = 1
    SIGN = 2
    VERIFY = 3
    DERIVE_KEY = 4
    WRAP = 5
    AGREE_KEY = 6
    ATTEST_KEY = 7


class KeyOrigin(enum.IntEnum):
    """Where a keymaster key came from."""

    GENERATED = 0
    DERIVED = 1
    IMPORTED = 2
    UNKNOWN = 3


class SecurityLevel(enum.IntEnum):
    """Security level of the attestation or keymaster."""

    SOFTWARE = 0
    TRUSTED_ENVIRONMENT = 1
    STRONG_BOX = 2


class VerifiedBootState(enum.IntEnum):
    """State of the device's verified boot."""

    VERIFIED = 0
    SELF_SIGNED = 1
    UNVERIFIED = 2
    FAILED = 3


@dataclass
class RootOfTrust:
    """Verification state of a device's boot."""

    verified_boot_key: bytes = b""
    device_locked: bool = False
    verified_boot_state: int = VerifiedBootState.VERIFIED
    verified_boot_hash: bytes = b""


@dataclass
class AuthorizationList:
    """A keymaster authorization list."""

    purpose: tuple[int, ...] = ()
    algorithm: int = 0
    key_size: int = 0
    digest: tuple[int, ...] = ()
    padding: tuple[int, ...] = ()
    ec_curve: int = 0
    rsa_public_exponent: int = 0
    rollback_resistance: bool = False
    active_date_time: int = 0
    origination_expire_date_time: int = 0
    usage_expire_date_time: int = 0
    no_auth_required: bool = False
    user_auth_type: int = 0
    auth_timeout: int = 0
    allow_while_on_body: bool = False
    trusted_user_presence_required: bool = False
    trusted_confirmation_required: bool = False
    unlocked_device_required: bool = False
    all_applications: bool = False
    application_id: bool = False
    creation_date_time: int = 0
    origin: int = KeyOrigin.GENERATED
    root_of_trust: RootOfTrust | None = None
    os_version: int = 0
    os_patch_level: int = 0
    attestation_application_id: bytes = b""
    attestation_id_brand: bytes = b""
    attestation_id_device: bytes = b""
    attestation_id_product: bytes = b""
    attestation_id_serial: bytes = b""
    attestation_id_imei: bytes = b""
    attestation_id_meid: bytes = b""
    attestation_id_manufacturer: bytes = b""
    attestation_id_model: bytes = b""
    vendor_patch_level: int = 0
    boot_patch_level: int = 0

    def has_purpose(self, purpose: int) -> bool:
        """Return True if the purpose set contains ``purpose``."""
        return purpose in self.purpose


@dataclass
class KeyDescription:
    """Description of an Android hardware-backed key."""

    attestation_version: int = 0
    attestation_security_level: int = SecurityLevel.SOFTWARE
    keymaster_version: int = 0
    keymaster_security_level: int = SecurityLevel.SOFTWARE
    attestation_challenge: bytes = b""
    unique_id: bytes = b""
    software_enforced: AuthorizationList = field(default_factory=AuthorizationList)
    tee_enforced: AuthorizationList = field(default_factory=AuthorizationList)

    def marshal(self) -> bytes:
        """Encode the key description as DER."""
        return _sequence(
            _integer(self.attestation_version),
            _integer(self.attestation_security_level, TAG_ENUMERATED),
            _integer(self.keymaster_version),
            _integer(self.keymaster_security_level, TAG_ENUMERATED),
            _octet_string(self.attestation_challenge),
            _octet_string(self.unique_id),
            _marshal_authorization_list(self.software_enforced),
            _marshal_authorization_list(self.tee_enforced),
        )


def unmarshal_key_description(raw: bytes) -> tuple[KeyDescription, bytes]:
    """Decode a DER key description, returning it with any bytes that follow it."""
    element, remaining = read_element(raw)
    _expect(element, TAG_SEQUENCE, True, "key description")
    children = list(iter_elements(element.content))
    if len(children) < 8:
        raise DerError("key description: too few fields")
    description = KeyDescription(
        attestation_version=_decode_integer(children[0]),
        attestation_security_level=_enum_or_int(
            SecurityLevel, _decode_integer(children[1], TAG_ENUMERATED)
        ),
        keymaster_version=_decode_integer(children[2]),
        keymaster_security_level=_enum_or_int(
            SecurityLevel, _decode_integer(children[3], TAG_ENUMERATED)
        ),
        attestation_challenge=_decode_octet_string(children[4]),
        unique_id=_decode_octet_string(children[5]),
        software_enforced=_unmarshal_authorization_list(children[6]),
        tee_enforced=_unmarshal_authorization_list(children[7]),
    )
    return description, remaining


@dataclass
class SafetyNetClaims:
    """Fields of the payload of a SafetyNet attestation response."""

    timestamp_ms: int = 0
    nonce: bytes = b""
    apk_package_name: str = ""
    apk_certificate_digest_sha256: list[bytes] = field(default_factory=list)
    cts_profile_match: bool = False
    basic_integrity: bool = False
    evaluation_type: str = ""

    @classmethod
    def from_dict(cls, claims: dict[str, Any]) -> SafetyNetClaims:
        """Build the claims from a decoded JSON payload; byte fields are standard base64."""
        digests = claims.get("apkCertificateDigestSha256") or []
        return cls(
            timestamp_ms=int(claims.get("timestampMs") or 0),
            nonce=base64.b64decode(claims.get("nonce") or "", validate=True),
            apk_package_name=str(claims.get("apkPackageName") or ""),
            apk_certificate_digest_sha256=[
                base64.b64decode(digest, validate=True) for digest in digests
            ],
            cts_profile_match=bool(claims.get("ctsProfileMatch") or False),
            basic_integrity=bool(claims.get("basicIntegrity") or False),
            evaluation_type=str(claims.get("evaluationType") or ""),
        )


# --- encoding helpers -------------------------------------------------------

_INT = "int"
_INT_SET = "int_set"
_FLAG = "flag"
_BYTES = "bytes"
_ROOT = "root"

_FIELDS = (
    (1, "purpose", _INT_SET),
    (2, "algorithm", _INT),
    (3, "key_size", _INT),
    (5, "digest", _INT_SET),
    (6, "padding", _INT_SET),
    (10, "ec_curve", _INT),
    (200, "rsa_public_exponent", _INT),
    (303, "rollback_resistance", _FLAG),
    (400, "active_date_time", _INT),
    (401, "origination_expire_date_time", _INT),
    (402, "usage_expire_date_time", _INT),
    (503, "no_auth_required", _FLAG),
    (504, "user_auth_type", _INT),
    (505, "auth_timeout", _INT),
    (506, "allow_while_on_body", _FLAG),
    (507, "trusted_user_presence_required", _FLAG),
    (508, "trusted_confirmation_required", _FLAG),
    (509, "unlocked_device_required", _FLAG),
    (600, "all_applications", _FLAG),
    (601, "application_id", _FLAG),
    (701, "creation_date_time", _INT),
    (702, "origin", _INT),
    (704, "root_of_trust", _ROOT),
    (705, "os_version", _INT),
    (706, "os_patch_level", _INT),
    (709, "attestation_application_id", _BYTES),
    (710, "attestation_id_brand", _BYTES),
    (711, "attestation_id_device", _BYTES),
    (712, "attestation_id_product", _BYTES),
    (713, "attestation_id_serial", _BYTES),
    (714, "attestation_id_imei", _BYTES),
    (715, "attestation_id_meid", _BYTES),
    (716, "attestation_id_manufacturer", _BYTES),
    (717, "attestation_id_model", _BYTES),
    (718, "vendor_patch_level", _INT),
    (719, "boot_patch_level", _INT),
)
_FIELDS_BY_TAG = {tag: (name, kind) for tag, name, kind in _FIELDS}
_ENUM_FIELDS: dict[str, type[enum.IntEnum]] = {
    "purpose": KeyMasterPurpose,
    "origin": KeyOrigin,
}

_NULL = encode_element(CLASS_UNIVERSAL, TAG_NULL, False, b"")


def _enum_or_int(enum_type: type[enum.IntEnum], value: int) -> int:
    try:
        return enum_type(value)
    except ValueError:
        return value


def _integer(value: int, tag: int = TAG_INTEGER) -> bytes:
    value = int(value)
    width = (value if value >= 0 else ~value).bit_length() // 8 + 1
    return encode_element(CLASS_UNIVERSAL, tag, False, value.to_bytes(width, "big", signed=True))


def _octet_string(value: bytes) -> bytes:
    return encode_element(CLASS_UNIVERSAL, TAG_OCTET_STRING, False, value)


def _boolean(value: bool) -> bytes:
    return encode_element(CLASS_UNIVERSAL, TAG_BOOLEAN, False, b"\xff" if value else b"\x00")


def _sequence(*parts: bytes) -> bytes:
    return encode_element(CLASS_UNIVERSAL, TAG_SEQUENCE, True, b"".join(parts))


def _set_of_integers(values: tuple[int, ...]) -> bytes:
    items = sorted(_integer(value) for value in values)
    return encode_element(CLASS_UNIVERSAL, TAG_SET, True, b"".join(items))


def _marshal_root_of_trust(root: RootOfTrust) -> bytes:
    return _sequence(
        _octet_string(root.verified_boot_key),
        _boolean(root.device_locked),
        _integer(root.verified_boot_state, TAG_ENUMERATED),
        _octet_string(root.verified_boot_hash),
    )


_ENCODERS = {
    _INT: lambda value: _integer(value) if value else None,
    _INT_SET: lambda value: _set_of_integers(tuple(value)) if value else None,
    _FLAG: lambda value: _NULL if value else None,
    _BYTES: lambda value: _octet_string(value) if value else None,
    _ROOT: lambda value: _marshal_root_of_trust(value) if value is not None else None,
}


def _marshal_authorization_list(authorizations: AuthorizationList) -> bytes:
    parts = []
    for tag, name, kind in _FIELDS:
        inner = _ENCODERS[kind](getattr(authorizations, name))
        if inner is not None:
            parts.append(encode_element(CLASS_CONTEXT, tag, True, inner))
    return _sequence(*parts)


# --- decoding helpers -------------------------------------------------------


def _expect(element: Element, number: int, constructed: bool, what: str) -> None:
    if (
        element.tag_class != CLASS_UNIVERSAL
        or element.number != number
        or element.constructed != constructed
    ):
        raise DerError(f"{what}: unexpected tag {element.tag_class}/{element.number}")


def _decode_integer(element: Element, tag: int = TAG_INTEGER) -> int:
    _expect(element, tag, False, "integer")
    if not element.content:
        raise DerError("integer: empty content")
    return int.from_bytes(element.content, "big", signed=True)


def _decode_octet_string(element: Element) -> bytes:
    _expect(element, TAG_OCTET_STRING, False, "octet string")
    return bytes(element.content)


def _decode_boolean(element: Element) -> bool:
    _expect(element, TAG_BOOLEAN, False, "boolean")
    if element.content == b"\xff":
        return True
    if element.content == b"\x00":
        return False
    raise DerError("boolean: invalid content")


def _decode_int_set(element: Element) -> tuple[int, ...]:
    _expect(element, TAG_SET, True, "set")
    return tuple(_decode_integer(item) for item in iter_elements(element.content))


def _decode_root_of_trust(element: Element) -> RootOfTrust:
    _expect(element, TAG_SEQUENCE, True, "root of trust")
    children = list(iter_elements(element.content))
    if len(children) < 4:
        raise DerError("root of trust: too few fields")
    return RootOfTrust(
        verified_boot_key=_decode_octet_string(children[0]),
        device_locked=_decode_boolean(children[1]),
        verified_boot_state=_enum_or_int(
            VerifiedBootState, _decode_integer(children[2], TAG_ENUMERATED)
        ),
        verified_boot_hash=_decode_octet_string(children[3]),
    )


def _decode_flag(content: bytes) -> bool:
    if not content:
        return True
    inner, _ = read_element(content)
    if inner.tag_class == CLASS_UNIVERSAL and inner.number == TAG_NULL:
        return True
    return _decode_boolean(inner)


_DECODERS = {
    _INT: _decode_integer,
    _INT_SET: _decode_int_set,
    _BYTES: _decode_octet_string,
    _ROOT: _decode_root_of_trust,
}


def _unmarshal_authorization_list(element: Element) -> AuthorizationList:
    _expect(element, TAG_SEQUENCE, True, "authorization list")
    values: dict[str, Any] = {}
    for item in iter_elements(element.content):
        if item.tag_class != CLASS_CONTEXT or item.number not in _FIELDS_BY_TAG:
            continue
        name, kind = _FIELDS_BY_TAG[item.number]
        if kind == _FLAG:
            values[name] = _decode_flag(item.content)
            continue
        inner, _ = read_element(item.content)
        value = _DECODERS[kind](inner)
        enum_type = _ENUM_FIELDS.get(name)
        if enum_type is not None:
            if isinstance(value, tuple):
                value = tuple(_enum_or_int(enum_type, v) for v in value)
            else:
                value = _enum_or_int(enum_type, value)
        values[name] = value
    return AuthorizationList(**values)