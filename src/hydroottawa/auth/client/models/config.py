"""Deployment configuration for the Cognito SRP handshake.

Defaults target the production Hydro Ottawa user pool. Every value can be
overridden so the client can be pointed at another deployment or a mock.
"""

from __future__ import annotations

from dataclasses import dataclass, field

# RFC 5054 3072-bit group, as used by Cognito user pools
_COGNITO_N_HEX = (
    "FFFFFFFFFFFFFFFFC90FDAA22168C234C4C6628B80DC1CD1"
    "29024E088A67CC74020BBEA63B139B22514A08798E3404DD"
    "EF9519B3CD3A431B302B0A6DF25F14374FE1356D6D51C245"
    "E485B576625E7EC6F44C42E9A637ED6B0BFF5CB6F406B7ED"
    "EE386BFB5A899FA5AE9F24117C4B1FE649286651ECE45B3D"
    "C2007CB8A163BF0598DA48361C55D39A69163FA8FD24CF5F"
    "83655D23DCA3AD961C62F356208552BB9ED529077096966D"
    "670C354E4ABC9804F1746C08CA18217C32905E462E36CE3B"
    "E39E772C180E86039B2783A2EC07A28FB5C55DF06F4C52C9"
    "DE2BCBF6955817183995497CEA956AE515D2261898FA0510"
    "15728E5A8AAAC42DAD33170D04507A33A85521ABDF1CBA64"
    "ECFB850458DBEF0A8AEA71575D060C7DB3970F85A6E1E4C7"
    "ABF5AE8CDB0933D71E8C94E04A25619DCEE3D2261AD2EE6B"
    "F12FFA06D98A0864D87602733EC86A64521F2B18177B200C"
    "BBE117577A615D6C770988C0BAD946E208E24FA074E5AB31"
    "43DB5BFCE0FD108E4B82D120A93AD2CAFFFFFFFFFFFFFFFF"
)


@dataclass(frozen=True)
class SRPGroup:
    """SRP group parameters: prime modulus N and generator g."""

    n: int = int(_COGNITO_N_HEX, 16)
    g: int = 2

    def __post_init__(self) -> None:
        if self.n < 3 or not (1 < self.g < self.n):
            raise ValueError("SRP group requires N > 2 and 1 < g < N")

    @property
    def byte_length(self) -> int:
        return (self.n.bit_length() + 7) // 8


@dataclass(frozen=True)
class CognitoConfig:
    """Immutable identity-provider and vendor endpoint configuration."""

    cognito_endpoint: str = "https://cognito-idp.ca-central-1.amazonaws.com/"
    client_id: str = "7scfcis6ecucktmp4aqi1jk6cb"
    user_pool_id: str = "ca-central-1_VYnwOhMBK"
    api_uri: str = "https://api-myaccount.hydroottawa.com"
    app_token_path: str = "/app-token"
    token_header: str = "x-amzn-remapped-authorization"
    group: SRPGroup = field(default_factory=SRPGroup)
    timeout: float = 30.0  # Seconds per network round-trip

    def __post_init__(self) -> None:
        if "_" not in self.user_pool_id:
            raise ValueError(
                f"user_pool_id must look like '<region>_<pool>': {self.user_pool_id}"
            )
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")

    @property
    def pool_name(self) -> str:
        """Pool identifier without the region prefix."""
        return self.user_pool_id.split("_", 1)[1]

    @property
    def app_token_url(self) -> str:
        return f"{self.api_uri.rstrip('/')}{self.app_token_path}"
