"""Cognito USER_SRP_AUTH challenge orchestration service.

Drives the two JSON-over-HTTP round trips with the Cognito identity provider
(InitiateAuth, then RespondToAuthChallenge) and uses the SRP primitive for
all cryptographic material.
"""

from __future__ import annotations

import asyncio
import logging
import secrets
from collections.abc import Callable
from datetime import datetime
from typing import Any

import httpx
from pydantic import ValidationError

from hydroottawa.auth.client.models.config import CognitoConfig
from hydroottawa.auth.client.models.errors import (
    HoAuthError,
    InvalidCredentialsError,
    MalformedChallengeError,
    ProtocolError,
    TransportError,
)
from hydroottawa.auth.client.models.flow import (
    AMZ_JSON_CONTENT_TYPE,
    INITIATE_AUTH_TARGET,
    RESPOND_TO_CHALLENGE_TARGET,
    Handshake,
    HandshakeState,
    InitiateAuthRequest,
    RespondToAuthChallengeRequest,
)
from hydroottawa.auth.client.models.srp import (
    AuthenticationResult,
    ChallengeParameters,
    Credentials,
)
from hydroottawa.auth.client.primitives.srp import CognitoSRP, utc_now

logger = logging.getLogger(__name__)

# Cognito error types that mean "this user cannot sign in with this password"
REJECTION_TYPES = frozenset(
    {
        "NotAuthorizedException",
        "UserNotFoundException",
        "UserNotConfirmedException",
        "PasswordResetRequiredException",
    }
)

# Cognito error types that mean "slow down and try again later"
THROTTLING_TYPES = frozenset({"TooManyRequestsException", "LimitExceededException"})


class CognitoChallengeManager:
    """Runs the Cognito SRP handshake for one set of credentials at a time.

    Each call to ``authenticate`` is a single attempt with its own ephemeral
    values. Nothing is retried here; a caller that wants another attempt calls
    ``authenticate`` again, which starts over from IDLE with fresh SRP values.
    """

    def __init__(
        self,
        config: CognitoConfig | None = None,
        http_client: httpx.AsyncClient | None = None,
        random_bytes: Callable[[int], bytes] = secrets.token_bytes,
        clock: Callable[[], datetime] = utc_now,
    ):
        """Initialize the challenge manager.

        Args:
            config: Identity-provider deployment settings
            http_client: Shared HTTP client; one is created when omitted
            random_bytes: Secure randomness source for SRP private values
            clock: UTC clock used for the challenge timestamp
        """
        self.config = config or CognitoConfig()
        self._owns_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(
            timeout=self.config.timeout
        )
        self._random_bytes = random_bytes
        self._clock = clock

    async def authenticate(self, credentials: Credentials) -> AuthenticationResult:
        """Run the full SRP handshake and return the Cognito tokens.

        Args:
            credentials: Username and password for this attempt

        Returns:
            AuthenticationResult: Access and ID tokens

        Raises:
            TransportError: If Cognito cannot be reached or times out
            ProtocolError: If Cognito returns malformed or invalid data
            CryptoError: If SRP values cannot be generated
            InvalidCredentialsError: If Cognito rejects the credentials
        """
        handshake = Handshake()
        srp = CognitoSRP(
            self.config,
            credentials.username,
            credentials.password,
            random_bytes=self._random_bytes,
            clock=self._clock,
        )
        try:
            challenge = await self.initiate(handshake, srp)
            return await self.respond(handshake, srp, challenge)
        except HoAuthError as e:
            if not handshake.is_terminal:
                handshake.fail(e)
            logger.debug(f"Handshake failed in state {handshake.state.value}: {e}")
            raise
        finally:
            srp.discard()

    async def initiate(
        self, handshake: Handshake, srp: CognitoSRP
    ) -> ChallengeParameters:
        """Send InitiateAuth with a fresh A and parse the returned challenge.

        Moves the handshake IDLE -> INITIATED -> CHALLENGE_RECEIVED.
        """
        params = srp.generate_auth_parameters()
        request = InitiateAuthRequest(
            client_id=self.config.client_id,
            username=params.username,
            srp_a=params.srp_a,
        )

        handshake.advance(HandshakeState.INITIATED)
        logger.debug(f"Initiating SRP auth for client {self.config.client_id}")
        response = await self._post(INITIATE_AUTH_TARGET, request.to_json())
        self._raise_for_status(response, "InitiateAuth")
        data = self._parse_body(response)

        challenge_name = data.get("ChallengeName")
        if challenge_name is not None and challenge_name != "PASSWORD_VERIFIER":
            raise ProtocolError(f"Unsupported challenge: {challenge_name}")

        try:
            challenge = ChallengeParameters.model_validate(
                data.get("ChallengeParameters") or {}
            )
        except ValidationError as e:
            raise MalformedChallengeError(
                f"Invalid PASSWORD_VERIFIER challenge: {e}"
            ) from e

        handshake.advance(HandshakeState.CHALLENGE_RECEIVED)
        handshake.challenge = challenge
        logger.debug("Received PASSWORD_VERIFIER challenge")
        return challenge

    async def respond(
        self,
        handshake: Handshake,
        srp: CognitoSRP,
        challenge: ChallengeParameters,
    ) -> AuthenticationResult:
        """Answer the PASSWORD_VERIFIER challenge and parse the tokens.

        Moves the handshake CHALLENGE_RECEIVED -> CHALLENGE_ANSWERED ->
        TOKENS_OBTAINED.
        """
        if handshake.challenge is not challenge:
            raise RuntimeError("Challenge does not belong to this handshake")

        proof = srp.verify(
            challenge.secret_block,
            challenge.user_id_for_srp,
            challenge.salt,
            challenge.srp_b,
        )
        request = RespondToAuthChallengeRequest(
            client_id=self.config.client_id,
            username=challenge.username,
            secret_block=proof.secret_block,
            timestamp=proof.timestamp,
            signature=proof.signature,
        )
        del proof

        handshake.advance(HandshakeState.CHALLENGE_ANSWERED)
        response = await self._post(RESPOND_TO_CHALLENGE_TARGET, request.to_json())
        self._raise_for_status(response, "RespondToAuthChallenge")
        data = self._parse_body(response)

        if "AuthenticationResult" not in data:
            next_challenge = data.get("ChallengeName", "unknown")
            raise ProtocolError(
                f"Expected tokens, received further challenge: {next_challenge}"
            )

        try:
            result = AuthenticationResult.model_validate(data["AuthenticationResult"])
        except ValidationError as e:
            raise ProtocolError(f"Invalid AuthenticationResult: {e}") from e

        handshake.advance(HandshakeState.TOKENS_OBTAINED)
        handshake.result = result
        logger.info("SRP authentication successful")
        return result

    async def _post(self, target: str, body: dict[str, Any]) -> httpx.Response:
        headers = {
            "Content-Type": AMZ_JSON_CONTENT_TYPE,
            "X-Amz-Target": target,
        }
        try:
            return await asyncio.wait_for(
                self._http_client.post(
                    self.config.cognito_endpoint, json=body, headers=headers
                ),
                timeout=self.config.timeout,
            )
        except asyncio.TimeoutError as e:
            raise TransportError(
                f"Timed out after {self.config.timeout}s calling {target}"
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(f"HTTP error calling {target}: {e}") from e

    def _raise_for_status(self, response: httpx.Response, operation: str) -> None:
        """Classify a non-200 Cognito response.

        Rejections of the user become InvalidCredentialsError. Everything else,
        throttling and bodies that are not Cognito error payloads included, is
        a TransportError carrying the status code.
        """
        status_code = response.status_code
        if status_code == 200:
            return

        try:
            data = response.json()
        except ValueError:
            data = None
        if not isinstance(data, dict):
            raise TransportError(
                f"{operation} failed with {status_code}", status_code=status_code
            )

        error_type, message = self._provider_error(data)
        if error_type in REJECTION_TYPES:
            logger.warning(f"{operation} rejected: {error_type}")
            raise InvalidCredentialsError(
                f"Authentication failed: {message}", error_type=error_type
            )
        if error_type in THROTTLING_TYPES:
            logger.warning(f"{operation} throttled by Cognito: {message}")
        raise TransportError(
            f"{operation} failed with {status_code}: {error_type} - {message}",
            status_code=status_code,
        )

    def _parse_body(self, response: httpx.Response) -> dict[str, Any]:
        try:
            data = response.json()
        except ValueError as e:
            raise ProtocolError("Cognito response is not valid JSON") from e
        if not isinstance(data, dict):
            raise ProtocolError("Cognito response is not a JSON object")
        return data

    def _provider_error(self, data: dict[str, Any]) -> tuple[str, str]:
        error_type = str(data.get("__type", "UnknownError")).rsplit("#", 1)[-1]
        message = data.get("message") or data.get("Message") or "No message provided"
        return error_type, str(message)

    async def close(self) -> None:
        """Close the HTTP client if this manager created it."""
        if self._owns_client:
            await self._http_client.aclose()
