"""SRP handshake models for Cognito USER_SRP_AUTH.

Contains the client's ephemeral values, the server-supplied challenge, the
computed password proof and the tokens returned on success.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict, Field


@dataclass(frozen=True)
class Credentials:
    """Username and password for one authentication attempt."""

    username: str
    password: str = field(repr=False)


@dataclass(frozen=True)
class SRPParameters:
    """Client ephemeral values for a single authentication attempt.

    The private value never leaves the process. A fresh instance must be
    generated for every attempt.
    """

    username: str
    small_a: int = field(repr=False)
    large_a: int = field(repr=False)

    @property
    def srp_a(self) -> str:
        """Public value A as sent on the wire (lowercase hex)."""
        return format(self.large_a, "x")


class ChallengeParameters(BaseModel):
    """PASSWORD_VERIFIER challenge parameters from InitiateAuth."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    salt: str = Field(alias="SALT", min_length=1)
    secret_block: str = Field(alias="SECRET_BLOCK", min_length=1)
    srp_b: str = Field(alias="SRP_B", min_length=1)
    username: str = Field(alias="USERNAME", min_length=1)
    user_id_for_srp: str = Field(alias="USER_ID_FOR_SRP", min_length=1)


@dataclass(frozen=True)
class ProofMaterial:
    """Client proof for the PASSWORD_VERIFIER challenge.

    Holds the shared secret S and derived key K for the duration of one
    RespondToAuthChallenge call only. Both are excluded from repr.
    """

    secret_block: str
    timestamp: str
    signature: str
    shared_secret: int = field(repr=False)
    derived_key: bytes = field(repr=False)


class AuthenticationResult(BaseModel):
    """Tokens issued by Cognito after a successful challenge response."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    access_token: str = Field(alias="AccessToken", min_length=1)
    id_token: str = Field(alias="IdToken", min_length=1)
    refresh_token: str | None = Field(default=None, alias="RefreshToken")
    expires_in: int | None = Field(default=None, alias="ExpiresIn")
    token_type: str = Field(default="Bearer", alias="TokenType")
