"""Complete Hydro Ottawa authentication client.

Coordinates the Cognito SRP handshake and the app-token exchange to produce
an authenticated session for the Hydro Ottawa API.
"""

from __future__ import annotations

import logging
import secrets
from collections.abc import Callable
from datetime import datetime

import httpx

from hydroottawa.auth.client.models.config import CognitoConfig
from hydroottawa.auth.client.models.session import HoAuth
from hydroottawa.auth.client.models.srp import Credentials
from hydroottawa.auth.client.primitives.srp import utc_now
from hydroottawa.auth.client.services.challenge import CognitoChallengeManager
from hydroottawa.auth.client.services.exchange import AppTokenExchange

logger = logging.getLogger(__name__)


class HoAuthClient:
    """Authenticates Hydro Ottawa users and returns ``HoAuth`` sessions.

    Owns one HTTP client shared by the handshake and the token exchange.
    Use as an async context manager, or call ``close`` when done.
    """

    def __init__(
        self,
        config: CognitoConfig | None = None,
        http_client: httpx.AsyncClient | None = None,
        random_bytes: Callable[[int], bytes] = secrets.token_bytes,
        clock: Callable[[], datetime] = utc_now,
    ):
        """Initialize the authentication client.

        Args:
            config: Deployment settings; production defaults when omitted
            http_client: HTTP client to use; one is created when omitted
            random_bytes: Secure randomness source for SRP private values
            clock: UTC clock used for the challenge timestamp
        """
        self.config = config or CognitoConfig()
        self._owns_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(
            timeout=self.config.timeout
        )
        self.challenge_manager = CognitoChallengeManager(
            self.config, self._http_client, random_bytes=random_bytes, clock=clock
        )
        self.token_exchange = AppTokenExchange(self.config, self._http_client)

    async def authenticate(self, username: str, password: str) -> HoAuth:
        """Authenticate a user and return a complete session.

        Performs the complete flow:
        1. InitiateAuth with a fresh SRP public value
        2. RespondToAuthChallenge with the password proof
        3. Exchange the Cognito tokens for the Hydro Ottawa JWT

        Returns:
            HoAuth: Session with all three tokens

        Raises:
            InvalidCredentialsError: If Cognito rejects the credentials
            TransportError: If a server cannot be reached
            ProtocolError: If a server violates the expected protocol
            CryptoError: If SRP values cannot be generated
        """
        logger.info(f"Authenticating {username} with Hydro Ottawa")

        auth_result = await self.challenge_manager.authenticate(
            Credentials(username=username, password=password)
        )
        jwt_token = await self.token_exchange.exchange(auth_result)

        session = HoAuth(
            jwt_token=jwt_token,
            id_token=auth_result.id_token,
            access_token=auth_result.access_token,
        )
        logger.info("Authentication successful")
        return session

    async def close(self) -> None:
        """Close the HTTP client if this client created it."""
        if self._owns_client:
            await self._http_client.aclose()

    async def __aenter__(self) -> HoAuthClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
