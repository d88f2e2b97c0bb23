"""Hydro Ottawa account API client.

Consumes an ``HoAuth`` session and attaches its tokens to every request.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from hydroottawa.api.models import HoHourlyUsage, HoProfile
from hydroottawa.auth.client.models.config import CognitoConfig
from hydroottawa.auth.client.models.session import HoAuth

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class ApiError(Exception):
    """Raised when an API call fails."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class SessionExpiredError(ApiError):
    """Raised on 401; the session must be discarded and re-authenticated."""

    pass


class UnexpectedResponseError(ApiError):
    """Raised when a 2xx response body does not have the expected shape."""

    pass


class HoApi:
    """Client for the profile and hourly usage endpoints."""

    def __init__(
        self,
        config: CognitoConfig | None = None,
        http_client: httpx.AsyncClient | None = None,
        debug_responses: bool = False,
    ):
        self.config = config or CognitoConfig()
        self.api_uri = self.config.api_uri.rstrip("/")
        self.debug_responses = debug_responses
        self._owns_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(
            timeout=self.config.timeout
        )

    async def profile(self, auth: HoAuth) -> HoProfile:
        """Fetch account and user information."""
        data = await self._request("GET", "/profile", auth)
        return self._parse(HoProfile, data, "profile")

    async def hourly(self, auth: HoAuth, day: date) -> HoHourlyUsage:
        """Fetch hourly consumption for a single day."""
        data = await self._request(
            "POST",
            "/usage/consumption/hourly",
            auth,
            json={"date": day.strftime("%Y-%m-%d")},
        )
        return self._parse(HoHourlyUsage, data, "hourly usage")

    async def _request(
        self,
        method: str,
        path: str,
        auth: HoAuth,
        json: dict[str, Any] | None = None,
    ) -> Any:
        headers = {"Accept": "application/json", **auth.auth_headers()}
        try:
            response = await self._http_client.request(
                method, f"{self.api_uri}{path}", headers=headers, json=json
            )
        except httpx.HTTPError as e:
            raise ApiError(f"HTTP error calling {path}: {e}") from e

        if response.status_code == 401:
            raise SessionExpiredError(
                f"Session rejected by {path}", status_code=response.status_code
            )
        if not 200 <= response.status_code < 300:
            raise ApiError(
                f"{path} failed with {response.status_code}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise UnexpectedResponseError(f"{path} response is not valid JSON") from e

        if self.debug_responses:
            logger.debug(f"{path} response: {data}")
        return data

    def _parse(self, model: type[ModelT], data: Any, what: str) -> ModelT:
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise UnexpectedResponseError(f"Unexpected {what} response: {e}") from e

    async def close(self) -> None:
        if self._owns_client:
            await self._http_client.aclose()
