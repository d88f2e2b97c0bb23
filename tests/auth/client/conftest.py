"""Simulated Cognito user pool and Hydro Ottawa app-token endpoint.

The simulator plays the server side of Cognito's SRP variant: it stores a
password verifier, issues PASSWORD_VERIFIER challenges and checks the
client's PASSWORD_CLAIM_SIGNATURE.
"""

import base64
import hashlib
import hmac
import json
import secrets
from dataclasses import dataclass, field
from datetime import datetime, timezone

import httpx
import pytest

from hydroottawa.auth.client.models.config import CognitoConfig

TEST_CONFIG = CognitoConfig(
    cognito_endpoint="https://cognito.test/",
    client_id="test-client-id",
    user_pool_id="ca-central-1_TestPool",
    api_uri="https://api.test",
    timeout=5.0,
)

FIXED_NOW = datetime(2025, 3, 4, 7, 5, 9, tzinfo=timezone.utc)


# Cognito encoding rules, kept independent of the client code.
_DERIVED_KEY_INFO = b"Caldera Derived Key"


def _pad(value) -> str:
    hex_string = value if isinstance(value, str) else "%x" % value
    if len(hex_string) % 2 == 1:
        return "0" + hex_string
    if hex_string[0] in "89ABCDEFabcdef":
        return "00" + hex_string
    return hex_string


def _sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def _hash_padded(hex_string: str) -> int:
    return int(_sha256_hex(bytes.fromhex(hex_string)), 16)


def _hkdf(ikm: bytes, salt: bytes) -> bytes:
    prk = hmac.new(salt, ikm, hashlib.sha256).digest()
    return hmac.new(prk, _DERIVED_KEY_INFO + b"\x01", hashlib.sha256).digest()[:16]


@dataclass
class _PendingChallenge:
    username: str
    large_a: int
    small_b: int
    large_b: int


@dataclass
class CognitoSimulator:
    """Server side of Cognito USER_SRP_AUTH for a single user."""

    config: CognitoConfig
    username: str = "alice"
    password: str = "correct-pw"
    user_id_for_srp: str = "3f1c2a9e-alice"
    salt: str = field(default_factory=lambda: secrets.token_hex(16))
    challenges: dict[str, _PendingChallenge] = field(default_factory=dict)
    requests: list[httpx.Request] = field(default_factory=list)

    def __post_init__(self) -> None:
        group = self.config.group
        self.k = _hash_padded(_pad(group.n) + _pad(group.g))
        identity = f"{self.config.pool_name}{self.user_id_for_srp}:{self.password}"
        x = _hash_padded(_pad(self.salt) + _sha256_hex(identity.encode()))
        self.verifier = pow(group.g, x, group.n)

    def issue_challenge(self, username: str, srp_a: str) -> dict:
        n, g = self.config.group.n, self.config.group.g
        large_a = int(srp_a, 16)
        small_b = int.from_bytes(secrets.token_bytes(128), "big") % n
        large_b = (self.k * self.verifier + pow(g, small_b, n)) % n
        secret_block = base64.b64encode(secrets.token_bytes(64)).decode()
        self.challenges[secret_block] = _PendingChallenge(
            username, large_a, small_b, large_b
        )
        return {
            "SALT": self.salt,
            "SECRET_BLOCK": secret_block,
            "SRP_B": format(large_b, "x"),
            "USERNAME": username,
            "USER_ID_FOR_SRP": self.user_id_for_srp,
        }

    def expected_signature(self, secret_block: str, timestamp: str) -> str:
        n = self.config.group.n
        pending = self.challenges[secret_block]
        u = _hash_padded(_pad(pending.large_a) + _pad(pending.large_b))
        shared = pow(pending.large_a * pow(self.verifier, u, n), pending.small_b, n)
        key = _hkdf(bytes.fromhex(_pad(shared)), bytes.fromhex(_pad(u)))
        message = (
            self.config.pool_name.encode()
            + self.user_id_for_srp.encode()
            + base64.b64decode(secret_block)
            + timestamp.encode()
        )
        return base64.b64encode(hmac.new(key, message, hashlib.sha256).digest()).decode()

    def check_signature(self, responses: dict) -> bool:
        secret_block = responses["PASSWORD_CLAIM_SECRET_BLOCK"]
        if secret_block not in self.challenges:
            return False
        expected = self.expected_signature(secret_block, responses["TIMESTAMP"])
        return hmac.compare_digest(expected, responses["PASSWORD_CLAIM_SIGNATURE"])

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.host == "api.test":
            return self._app_token(request)

        body = json.loads(request.content)
        target = request.headers["X-Amz-Target"].rsplit(".", 1)[-1]
        if target == "InitiateAuth":
            params = body["AuthParameters"]
            if params["USERNAME"] != self.username:
                return _error("UserNotFoundException", "User does not exist.")
            return httpx.Response(
                200,
                json={
                    "ChallengeName": "PASSWORD_VERIFIER",
                    "ChallengeParameters": self.issue_challenge(
                        params["USERNAME"], params["SRP_A"]
                    ),
                },
            )
        if target == "RespondToAuthChallenge":
            if not self.check_signature(body["ChallengeResponses"]):
                return _error("NotAuthorizedException", "Incorrect username or password.")
            return httpx.Response(
                200,
                json={
                    "AuthenticationResult": {
                        "AccessToken": "cognito-access-token",
                        "IdToken": "cognito-id-token",
                        "RefreshToken": "cognito-refresh-token",
                        "ExpiresIn": 3600,
                        "TokenType": "Bearer",
                    },
                    "ChallengeParameters": {},
                },
            )
        return _error("InvalidParameterException", f"Unknown target {target}")

    def _app_token(self, request: httpx.Request) -> httpx.Response:
        digest = hashlib.sha256(
            (request.headers["x-id"] + request.headers["x-access"]).encode()
        ).hexdigest()
        return httpx.Response(
            200,
            headers={"x-amzn-remapped-authorization": f"Bearer {digest}"},
            json={},
        )


def _error(error_type: str, message: str) -> httpx.Response:
    return httpx.Response(400, json={"__type": error_type, "message": message})


@pytest.fixture
def cognito_config() -> CognitoConfig:
    return TEST_CONFIG


@pytest.fixture
def simulator() -> CognitoSimulator:
    return CognitoSimulator(TEST_CONFIG)


@pytest.fixture
async def simulated_http_client(simulator):
    async with httpx.AsyncClient(transport=httpx.MockTransport(simulator.handle)) as client:
        yield client
