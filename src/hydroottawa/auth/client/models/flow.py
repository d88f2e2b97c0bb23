"""Handshake state and request models for the Cognito SRP flow."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from hydroottawa.auth.client.models.srp import (
    AuthenticationResult,
    ChallengeParameters,
)

INITIATE_AUTH_TARGET = "AWSCognitoIdentityProviderService.InitiateAuth"
RESPOND_TO_CHALLENGE_TARGET = "AWSCognitoIdentityProviderService.RespondToAuthChallenge"
AMZ_JSON_CONTENT_TYPE = "application/x-amz-json-1.1"


class HandshakeState(str, Enum):
    IDLE = "idle"
    INITIATED = "initiated"
    CHALLENGE_RECEIVED = "challenge_received"
    CHALLENGE_ANSWERED = "challenge_answered"
    TOKENS_OBTAINED = "tokens_obtained"
    FAILED = "failed"


_TRANSITIONS: dict[HandshakeState, frozenset[HandshakeState]] = {
    HandshakeState.IDLE: frozenset({HandshakeState.INITIATED}),
    HandshakeState.INITIATED: frozenset({HandshakeState.CHALLENGE_RECEIVED}),
    HandshakeState.CHALLENGE_RECEIVED: frozenset({HandshakeState.CHALLENGE_ANSWERED}),
    HandshakeState.CHALLENGE_ANSWERED: frozenset({HandshakeState.TOKENS_OBTAINED}),
    HandshakeState.TOKENS_OBTAINED: frozenset(),
    HandshakeState.FAILED: frozenset(),
}


@dataclass
class Handshake:
    """Progress of a single authentication attempt.

    Any non-terminal state may move to FAILED. Other moves follow the
    IDLE -> INITIATED -> CHALLENGE_RECEIVED -> CHALLENGE_ANSWERED ->
    TOKENS_OBTAINED chain.
    """

    state: HandshakeState = HandshakeState.IDLE
    challenge: ChallengeParameters | None = None
    result: AuthenticationResult | None = field(default=None, repr=False)
    error: Exception | None = None

    @property
    def is_terminal(self) -> bool:
        return self.state in (HandshakeState.TOKENS_OBTAINED, HandshakeState.FAILED)

    def advance(self, new_state: HandshakeState) -> None:
        if new_state not in _TRANSITIONS[self.state]:
            raise RuntimeError(
                f"Invalid handshake transition {self.state.value} -> {new_state.value}"
            )
        self.state = new_state

    def fail(self, error: Exception) -> None:
        if self.is_terminal:
            raise RuntimeError(f"Cannot fail a finished handshake ({self.state.value})")
        self.state = HandshakeState.FAILED
        self.error = error


@dataclass(frozen=True)
class InitiateAuthRequest:
    """InitiateAuth request body for the USER_SRP_AUTH flow."""

    client_id: str
    username: str
    srp_a: str
    auth_flow: str = "USER_SRP_AUTH"

    def to_json(self) -> dict[str, Any]:
        return {
            "AuthFlow": self.auth_flow,
            "ClientId": self.client_id,
            "AuthParameters": {"USERNAME": self.username, "SRP_A": self.srp_a},
            "ClientMetadata": {},
        }


@dataclass(frozen=True)
class RespondToAuthChallengeRequest:
    """RespondToAuthChallenge request body for PASSWORD_VERIFIER."""

    client_id: str
    username: str
    secret_block: str
    timestamp: str
    signature: str = field(repr=False)
    challenge_name: str = "PASSWORD_VERIFIER"

    def to_json(self) -> dict[str, Any]:
        return {
            "ChallengeName": self.challenge_name,
            "ClientId": self.client_id,
            "ChallengeResponses": {
                "USERNAME": self.username,
                "PASSWORD_CLAIM_SECRET_BLOCK": self.secret_block,
                "TIMESTAMP": self.timestamp,
                "PASSWORD_CLAIM_SIGNATURE": self.signature,
            },
            "ClientMetadata": {},
        }
