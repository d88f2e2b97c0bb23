"""Hydro Ottawa app-token exchange service.

Trades the Cognito ID and access tokens for the vendor bearer token, which
the app-token endpoint returns in a remapped authorization header.
"""

from __future__ import annotations

import asyncio
import logging

import httpx

from hydroottawa.auth.client.models.config import CognitoConfig
from hydroottawa.auth.client.models.errors import (
    InvalidTokenFormatError,
    MissingHeaderError,
    TransportError,
)
from hydroottawa.auth.client.models.session import BEARER_PREFIX, redact
from hydroottawa.auth.client.models.srp import AuthenticationResult

logger = logging.getLogger(__name__)


def extract_bearer_token(header_value: str) -> str:
    """Strip the literal 'Bearer ' prefix from a header value.

    Raises:
        InvalidTokenFormatError: If the prefix is absent or nothing follows it
    """
    if not header_value.startswith(BEARER_PREFIX):
        raise InvalidTokenFormatError("Token doesn't start with 'Bearer '")
    token = header_value[len(BEARER_PREFIX) :]
    if not token:
        raise InvalidTokenFormatError("Bearer token is empty")
    return token


class AppTokenExchange:
    """Exchanges Cognito tokens for the Hydro Ottawa JWT.

    Single-shot: a missing or malformed header is a vendor contract
    violation and is raised immediately.
    """

    def __init__(
        self,
        config: CognitoConfig | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.config = config or CognitoConfig()
        self._owns_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(
            timeout=self.config.timeout
        )

    async def exchange(self, auth_result: AuthenticationResult) -> str:
        """Fetch the vendor bearer token for a set of Cognito tokens.

        Args:
            auth_result: Tokens from a successful SRP handshake

        Returns:
            The vendor JWT without its 'Bearer ' prefix

        Raises:
            TransportError: If the endpoint cannot be reached or fails
            MissingHeaderError: If the token header is absent
            InvalidTokenFormatError: If the header is not 'Bearer <token>'
        """
        url = self.config.app_token_url
        headers = {
            "Accept": "application/json",
            "x-id": auth_result.id_token,
            "x-access": auth_result.access_token,
        }
        logger.debug(f"Requesting app token from {url}")

        try:
            response = await asyncio.wait_for(
                self._http_client.get(url, headers=headers),
                timeout=self.config.timeout,
            )
        except asyncio.TimeoutError as e:
            raise TransportError(
                f"Timed out after {self.config.timeout}s requesting app token"
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(f"HTTP error requesting app token: {e}") from e

        if not 200 <= response.status_code < 300:
            raise TransportError(
                f"App token request failed with {response.status_code}",
                status_code=response.status_code,
            )

        header_value = response.headers.get(self.config.token_header)
        if header_value is None:
            raise MissingHeaderError(self.config.token_header)

        token = extract_bearer_token(header_value)
        logger.info(f"Obtained Hydro Ottawa app token {redact(token)}")
        return token

    async def close(self) -> None:
        """Close the HTTP client if this service created it."""
        if self._owns_client:
            await self._http_client.aclose()
