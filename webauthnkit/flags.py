"""Authenticator data flags."""

from __future__ import annotations

import enum

AUTHENTICATOR_FLAGS_SIZE = 1
"""Number of bytes the flags occupy in authenticator data."""


class AuthenticatorFlags(enum.IntFlag):
    """Bit flags describing the contents of authenticator data."""

    USER_PRESENT = 1 << 0
    USER_VERIFIED = 1 << 2
    ATTESTED_CREDENTIAL_DATA = 1 << 6
    EXTENSION_DATA = 1 << 7

    def _has(self, flag: AuthenticatorFlags) -> bool:
        return (int(self) & int(flag)) == int(flag)

    def user_present(self) -> bool:
        """Return True if the user is present."""
        return self._has(AuthenticatorFlags.USER_PRESENT)

    def user_verified(self) -> bool:
        """Return True if the user is verified."""
        return self._has(AuthenticatorFlags.USER_VERIFIED)

    def attested_credential_data_included(self) -> bool:
        """Return True if attested credential data follows the sign count."""
        return self._has(AuthenticatorFlags.ATTESTED_CREDENTIAL_DATA)

    def extension_data_included(self) -> bool:
        """Return True if extension data is included."""
        return self._has(AuthenticatorFlags.EXTENSION_DATA)