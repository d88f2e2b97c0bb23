"""Tests for the Hydro Ottawa account API client."""

from datetime import date
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from hydroottawa.api.client import (
    ApiError,
    HoApi,
    SessionExpiredError,
    UnexpectedResponseError,
)
from hydroottawa.auth.client.models.config import CognitoConfig
from hydroottawa.auth.client.models.session import HoAuth

SESSION = HoAuth(jwt_token="jwt-token", id_token="id-token", access_token="access-token")

ADDRESS = {
    "apartment": "",
    "city": "Ottawa",
    "postalCode": "K1A 0A1",
    "province": "ON",
    "streetName": "Main St",
    "streetNumber": "100",
}

PROFILE = {
    "accountInformation": {
        "accountId": "1234567",
        "businessPhoneNumber": "",
        "businessPhoneNumberExtension": "",
        "homePhoneNumber": "613-555-0100",
        "mailingAddress": ADDRESS,
        "mobilePhoneNumber": "",
        "premiseId": "P-1",
        "pseudoName": "Home",
        "serviceAddress": ADDRESS,
    },
    "userInformation": {
        "languagePreference": "EN",
        "mfaEnabled": False,
        "mfaPhoneNumber": "",
        "socialSignIn": False,
        "username": "alice",
    },
}

HOURLY = {
    "intervals": [
        {
            "startDateTime": "2025-03-03T00:00:00",
            "endDateTime": "2025-03-03T01:00:00",
            "rateBand": "OFF_PEAK",
            "hourlyUsage": 0.42,
            "hourlyCost": 0.04,
        }
    ],
    "summary": {
        "accountId": "1234567",
        "actualDate": "2025-03-03",
        "ratePlan": "TOU",
        "billingPeriodStartDate": "2025-02-15",
        "billingPeriodEndDate": "2025-03-15",
        "totalUsage": 0.42,
        "totalCost": 0.04,
        "hourlyAverageUsage": 0.42,
        "hourlyAverageCost": 0.04,
        "totalOffPeakUsage": 0.42,
        "totalOffPeakCost": 0.04,
        "totalMidPeakUsage": 0.0,
        "totalMidPeakCost": 0.0,
        "totalOnPeakUsage": 0.0,
        "totalOnPeakCost": 0.0,
        "totalUloUsage": 0.0,
        "totalUloCost": 0.0,
        "numberOfHours": 1,
    },
}


def _response(status_code: int, body) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = body
    return response


class TestHoApi:
    def setup_method(self):
        # Arrange
        self.api = HoApi(
            CognitoConfig(api_uri="https://api.test/"), http_client=AsyncMock()
        )

    async def test_profile_attaches_session_headers(self):
        # Arrange
        self.api._http_client.request.return_value = _response(200, PROFILE)

        # Act
        profile = await self.api.profile(SESSION)

        # Assert
        assert profile.account_information.account_id == "1234567"
        assert profile.account_information.service_address.city == "Ottawa"
        assert profile.user_information.username == "alice"

        call_args = self.api._http_client.request.call_args
        assert call_args[0] == ("GET", "https://api.test/profile")
        headers = call_args[1]["headers"]
        assert headers["Authorization"] == "Bearer jwt-token"
        assert headers["x-id"] == "id-token"
        assert headers["x-access"] == "access-token"

    async def test_hourly_posts_date(self):
        # Arrange
        self.api._http_client.request.return_value = _response(200, HOURLY)

        # Act
        usage = await self.api.hourly(SESSION, date(2025, 3, 3))

        # Assert
        assert usage.summary.number_of_hours == 1
        assert usage.intervals[0].rate_band == "OFF_PEAK"
        call_args = self.api._http_client.request.call_args
        assert call_args[0] == ("POST", "https://api.test/usage/consumption/hourly")
        assert call_args[1]["json"] == {"date": "2025-03-03"}

    async def test_unauthorized_means_session_expired(self):
        self.api._http_client.request.return_value = _response(401, {})
        with pytest.raises(SessionExpiredError):
            await self.api.profile(SESSION)

    async def test_unexpected_payload_is_unexpected_response(self):
        self.api._http_client.request.return_value = _response(200, {"intervals": []})
        with pytest.raises(UnexpectedResponseError, match="hourly usage"):
            await self.api.hourly(SESSION, date(2025, 3, 3))

    async def test_server_error_is_api_error(self):
        self.api._http_client.request.return_value = _response(500, {})
        with pytest.raises(ApiError) as exc_info:
            await self.api.profile(SESSION)
        assert exc_info.value.status_code == 500
        assert not isinstance(exc_info.value, UnexpectedResponseError)

    async def test_non_json_body_is_unexpected_response(self):
        # Arrange
        response = _response(200, None)
        response.json.side_effect = ValueError("not json")
        self.api._http_client.request.return_value = response

        # Act & Assert
        with pytest.raises(UnexpectedResponseError, match="not valid JSON"):
            await self.api.profile(SESSION)

    async def test_network_failure_is_api_error(self):
        self.api._http_client.request.side_effect = httpx.ConnectError("refused")
        with pytest.raises(ApiError):
            await self.api.profile(SESSION)

    def test_defaults_to_production_api(self):
        api = HoApi(http_client=AsyncMock())
        assert api.api_uri == CognitoConfig().api_uri
