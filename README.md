# webauthnkit

Building blocks for a WebAuthn relying party. The package decodes and
re-encodes authenticator data and reads attestation objects and their
statements. It also pulls the WebAuthn-specific extensions out of
attestation certificates and reads and writes the base64url JSON form of
authenticator responses.

## Installation

```
pip install webauthnkit
```

To run the test suite:

```
pip install "webauthnkit[test]"
pytest
```

## Modules

- `webauthnkit.flags`
  - `AuthenticatorFlags` is an `IntFlag` for the flag byte of authenticator data.
  - `user_present()`, `user_verified()`, `attested_credential_data_included()`
    and `extension_data_included()` test the individual bits.
- `webauthnkit.authenticator_data`
  - `unmarshal_authenticator_data(raw)` returns an `AuthenticatorData` together
    with any bytes that follow it.
  - `AuthenticatorData` holds `rp_id_hash`, `flags`, `sign_count`,
    `attested_credential_data` and `extensions`.
  - `AuthenticatorData.marshal()` writes the same layout back.
  - Malformed input raises `InvalidAuthenticatorDataError`.
- `webauthnkit.attested_credential_data`
  - `AttestedCredentialData` holds the AAGUID, the credential id and the
    COSE-encoded credential public key, and has a `marshal()` method.
  - `unmarshal_attested_credential_data(raw)` decodes it.
  - `new_random_aaguid()` returns 16 random bytes.
  - Malformed input raises `InvalidAttestedCredentialDataError`.
- `webauthnkit.attestation_object`
  - `unmarshal_attestation_object(raw)` decodes the CBOR map with `authData`,
    `fmt` and `attStmt` into an `AttestationObject`, and returns any trailing
    bytes as well.
  - `AttestationObject.unmarshal_authenticator_data()` decodes its
    authenticator data.
  - Malformed input raises `InvalidAttestationObjectError`.
- `webauthnkit.attestation_statement`
  - `AttestationFormat` and `AttestationType` are enums.
  - `AttestationStatement` is a `dict` with these methods:
    - `get_algorithm()` returns `0` when `alg` is absent.
    - `get_signature()` returns `None` when `sig` is absent.
    - `unmarshal_certificates()` parses `x5c` into `cryptography` certificates.
      It raises `MissingCertificateError` or `InvalidCertificateError`.
  - `verify_none_attestation_statement()` handles the `none` format and returns
    a `VerifyAttestationStatementResult`.
- `webauthnkit.certificate` has functions that take a `cryptography`
  `x509.Certificate`:
  - `certificate_has_aik()` checks for the TPM AIK extended key usage.
  - `get_certificate_aaguid()` reads the AAGUID extension.
  - `get_certificate_apple_nonce()` reads the Apple nonce extension.
  - `get_certificate_android_key_description()` reads the Android key
    attestation extension.
  - Failures raise subclasses of `CertificateExtensionError`, for example
    `MissingAAGUIDError` or `AAGUIDMarkedCriticalError`.
- `webauthnkit.android`
  - `KeyDescription` and `AuthorizationList` describe an Android keymaster key.
  - `KeyDescription.marshal()` encodes a key description as DER, and
    `unmarshal_key_description(raw)` decodes one.
  - `AuthorizationList.has_purpose()` tests the purpose set.
  - The enums are `KeyMasterPurpose`, `KeyOrigin`, `SecurityLevel` and
    `VerifiedBootState`.
  - `SafetyNetClaims.from_dict()` builds SafetyNet claims from a decoded JSON
    payload.
- `webauthnkit.der` is a small DER reader and writer:
  - `read_element()`
  - `iter_elements()`
  - `encode_element()`
  - The `Element` dataclass and the `DerError` exception.
- `webauthnkit.responses`
  - `AuthenticatorAttestationResponse` and `AuthenticatorAssertionResponse`
    each have these methods:
    - `client_data_json_hash()` returns a SHA-256 digest.
    - `from_json()` and `to_json()` read and write the JSON form with base64url
      byte fields.
  - The attestation response has `unmarshal_attestation_object()`.
  - The assertion response has `unmarshal_authenticator_data()`.

## Example

```python
from webauthnkit.responses import AuthenticatorAttestationResponse

with open("registration.json") as f:
    response = AuthenticatorAttestationResponse.from_json(f.read())

attestation_object = response.unmarshal_attestation_object()
auth_data = attestation_object.unmarshal_authenticator_data()

print(attestation_object.format)
print(auth_data.sign_count, auth_data.flags.user_verified())
print(response.client_data_json_hash().hex())
```

All of the errors listed above are subclasses of `ValueError`.

## What the package does not do

- It has no verifiers for the `packed`, `tpm`, `android-key`,
  `android-safetynet`, `apple` or `fido-u2f` attestation formats. Only the
  `none` format is verified. For the other formats the package gives you the
  parsed pieces: the statement, the certificates and their extensions.
- It does not parse the client data JSON. It only hashes it.
- It does not decode COSE public keys and does not check signatures.
- It does not run registration or authentication ceremonies, store
  credentials, or provide a server or a command.