"""Authenticated session for Hydro Ottawa API calls."""

from __future__ import annotations

from dataclasses import dataclass, field

BEARER_PREFIX = "Bearer "


def redact(token: str | None) -> str:
    """Render a token for logs without revealing it."""
    if token is None:
        return "<none>"
    if not token:
        return "<empty>"
    return f"<redacted:{len(token)} chars>"


@dataclass(frozen=True)
class HoAuth:
    """Tokens produced by a successful SRP handshake and app-token exchange.

    There is no expiry tracking and no refresh. A 401 from the API means the
    session should be dropped and the handshake run again.
    """

    jwt_token: str = field(repr=False)
    id_token: str = field(repr=False)
    access_token: str = field(repr=False)

    def __post_init__(self) -> None:
        if not (self.jwt_token and self.id_token and self.access_token):
            raise ValueError("HoAuth requires non-empty jwt, id and access tokens")

    def auth_headers(self) -> dict[str, str]:
        """Headers every Hydro Ottawa API request must carry."""
        return {
            "x-id": self.id_token,
            "x-access": self.access_token,
            "Authorization": f"{BEARER_PREFIX}{self.jwt_token}",
        }
