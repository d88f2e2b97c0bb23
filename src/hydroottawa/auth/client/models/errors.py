"""Exception hierarchy for Hydro Ottawa authentication errors.

Separates the failure modes a caller must tell apart: a rejected password,
a broken handshake, and a network failure. Only the last is worth retrying.
"""

from __future__ import annotations


class HoAuthError(Exception):
    """Base exception for all authentication related errors."""

    pass


class TransportError(HoAuthError):
    """Raised when a server cannot be reached or answers with an HTTP failure.

    Retryable by re-running the whole handshake with fresh SRP parameters.
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ProtocolError(HoAuthError):
    """Raised when a server sends malformed or semantically invalid data.

    Never retried: it indicates a corrupted handshake or tampering.
    """

    pass


class InvalidServerValueError(ProtocolError):
    """Raised when a server ephemeral value fails an SRP safety check."""

    pass


class MalformedChallengeError(ProtocolError):
    """Raised when the InitiateAuth response lacks a challenge parameter."""

    pass


class MissingHeaderError(ProtocolError):
    """Raised when the vendor token response lacks the bearer token header."""

    def __init__(self, header_name: str):
        super().__init__(f"Missing header: {header_name}")
        self.header_name = header_name


class InvalidTokenFormatError(ProtocolError):
    """Raised when the vendor token header is not of the form 'Bearer <token>'."""

    pass


class CryptoError(HoAuthError):
    """Raised when SRP material cannot be generated or used."""

    pass


class AuthError(HoAuthError):
    """Raised when the identity provider explicitly rejects the user."""

    pass


class InvalidCredentialsError(AuthError):
    """Raised when the identity provider rejects the username or password."""

    def __init__(self, message: str, error_type: str | None = None):
        super().__init__(message)
        self.error_type = error_type
