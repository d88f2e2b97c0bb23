"""Cognito SRP-6a client primitive.

Implements the client role of the Secure Remote Password variant used by
Amazon Cognito user pools (USER_SRP_AUTH / PASSWORD_VERIFIER). Pure
computation: no network access, no logging of secret material.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import secrets
from collections.abc import Callable
from datetime import datetime, timezone

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from hydroottawa.auth.client.models.config import CognitoConfig
from hydroottawa.auth.client.models.errors import (
    CryptoError,
    InvalidServerValueError,
    ProtocolError,
)
from hydroottawa.auth.client.models.srp import ProofMaterial, SRPParameters

INFO_BITS = b"Caldera Derived Key"
DERIVED_KEY_LENGTH = 16
PRIVATE_VALUE_BYTES = 128

_WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
_MONTHS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)  # fmt: skip


def hash_hex(data: bytes) -> str:
    """SHA-256 digest as 64 lowercase hex characters."""
    return hashlib.sha256(data).hexdigest()


def hex_hash(hex_string: str) -> str:
    """SHA-256 over the bytes a hex string encodes."""
    return hash_hex(bytes.fromhex(hex_string))


def pad_hex(value: int | str) -> str:
    """Hex-encode a value the way Cognito serializes big integers.

    Odd-length strings get a leading '0'; strings whose first nibble has the
    high bit set get a leading '00' so the value reads as positive.
    """
    hex_str = value if isinstance(value, str) else format(value, "x")
    if len(hex_str) % 2 == 1:
        return f"0{hex_str}"
    if hex_str and hex_str[0] in "89ABCDEFabcdef":
        return f"00{hex_str}"
    return hex_str


def format_timestamp(moment: datetime) -> str:
    """Format a moment as Cognito expects, e.g. 'Tue Mar 4 07:05:09 UTC 2025'.

    English names and an unpadded day are required regardless of locale; any
    other rendering makes the server-side signature check fail.
    """
    moment = moment.astimezone(timezone.utc)
    return (
        f"{_WEEKDAYS[moment.weekday()]} {_MONTHS[moment.month - 1]} {moment.day} "
        f"{moment:%H:%M:%S} UTC {moment.year}"
    )


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def _parse_hex(name: str, value: str) -> int:
    try:
        bytes.fromhex(pad_hex(value))
        return int(value, 16)
    except (TypeError, ValueError) as e:
        raise ProtocolError(f"Challenge parameter {name} is not valid hex") from e


class CognitoSRP:
    """SRP client for a single Cognito authentication attempt.

    Holds the user's password and the private ephemeral value ``a`` between
    InitiateAuth and RespondToAuthChallenge. Call ``generate_auth_parameters``
    once per attempt, ``verify`` with the challenge the server returned, then
    ``discard`` to drop the secrets.

    Python integers do not offer constant-time modular exponentiation; secret
    exponents are kept out of error messages and reprs.
    """

    def __init__(
        self,
        config: CognitoConfig,
        username: str,
        password: str,
        random_bytes: Callable[[int], bytes] = secrets.token_bytes,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._config = config
        self._group = config.group
        self._username = username
        self._password: str | None = password
        self._random_bytes = random_bytes
        self._clock = clock
        self._params: SRPParameters | None = None
        self._k = int(hex_hash(pad_hex(self._group.n) + pad_hex(self._group.g)), 16)

    @property
    def parameters(self) -> SRPParameters | None:
        """Ephemeral values of the current attempt, if generated."""
        return self._params

    def generate_auth_parameters(self) -> SRPParameters:
        """Generate fresh ephemeral values and the public value A.

        Every call replaces any previous pair; a challenge must always be
        answered with the pair whose A was sent in the InitiateAuth request.

        Returns:
            SRPParameters: username plus private ``a`` and public ``A``

        Raises:
            CryptoError: If the randomness source fails or A is degenerate
        """
        if self._password is None:
            raise CryptoError("SRP client has been discarded")

        n, g = self._group.n, self._group.g
        small_a = 0
        try:
            while small_a == 0:
                small_a = int.from_bytes(self._random_bytes(PRIVATE_VALUE_BYTES), "big") % n
        except (OSError, NotImplementedError) as e:
            raise CryptoError("Secure random source unavailable") from e

        large_a = pow(g, small_a, n)
        if large_a % n == 0:
            raise CryptoError("Safety check for A failed")

        self._params = SRPParameters(
            username=self._username, small_a=small_a, large_a=large_a
        )
        return self._params

    def verify(
        self, secret_block: str, user_id_for_srp: str, salt: str, srp_b: str
    ) -> ProofMaterial:
        """Answer a PASSWORD_VERIFIER challenge.

        Args:
            secret_block: Base64 SECRET_BLOCK, echoed back unmodified
            user_id_for_srp: USER_ID_FOR_SRP from the challenge
            salt: Hex SALT from the challenge
            srp_b: Hex SRP_B, the server public ephemeral value

        Returns:
            ProofMaterial: signature and timestamp for the challenge response

        Raises:
            InvalidServerValueError: If B mod N == 0 or u == 0
            ProtocolError: If salt, SRP_B or SECRET_BLOCK cannot be decoded
            CryptoError: If called before generate_auth_parameters or after discard
        """
        if self._params is None or self._password is None:
            raise CryptoError("SRP parameters must be generated before verify")

        n, g = self._group.n, self._group.g
        large_b = _parse_hex("SRP_B", srp_b)
        if large_b % n == 0:
            raise InvalidServerValueError("Server public value B is zero modulo N")

        _parse_hex("SALT", salt)
        try:
            secret_block_bytes = base64.b64decode(secret_block, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ProtocolError("SECRET_BLOCK is not valid base64") from e

        u = self._compute_u(self._params.large_a, large_b)
        if u == 0:
            raise InvalidServerValueError("Scrambling parameter u is zero")

        x = self._compute_x(user_id_for_srp, salt)
        base = (large_b - self._k * pow(g, x, n)) % n
        shared_secret = pow(base, self._params.small_a + u * x, n)
        derived_key = self._derive_key(shared_secret, u)

        timestamp = format_timestamp(self._clock())
        message = b"".join(
            (
                self._config.pool_name.encode("utf-8"),
                user_id_for_srp.encode("utf-8"),
                secret_block_bytes,
                timestamp.encode("utf-8"),
            )
        )
        signature = base64.b64encode(
            hmac.new(derived_key, message, hashlib.sha256).digest()
        ).decode("ascii")

        return ProofMaterial(
            secret_block=secret_block,
            timestamp=timestamp,
            signature=signature,
            shared_secret=shared_secret,
            derived_key=derived_key,
        )

    def discard(self) -> None:
        """Drop the password and ephemeral values of this attempt."""
        self._password = None
        self._params = None

    def _compute_u(self, large_a: int, large_b: int) -> int:
        return int(hex_hash(pad_hex(large_a) + pad_hex(large_b)), 16)

    def _compute_x(self, user_id_for_srp: str, salt: str) -> int:
        identity = f"{self._config.pool_name}{user_id_for_srp}:{self._password}"
        identity_hash = hash_hex(identity.encode("utf-8"))
        return int(hex_hash(pad_hex(salt) + identity_hash), 16)

    def _derive_key(self, shared_secret: int, u: int) -> bytes:
        hkdf = HKDF(
            algorithm=hashes.SHA256(),
            length=DERIVED_KEY_LENGTH,
            salt=bytes.fromhex(pad_hex(u)),
            info=INFO_BITS,
        )
        return hkdf.derive(bytes.fromhex(pad_hex(shared_secret)))
