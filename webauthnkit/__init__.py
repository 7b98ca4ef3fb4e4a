"""Decoding and encoding of WebAuthn authenticator data, attestation objects and responses."""

__version__ = "0.1.0"