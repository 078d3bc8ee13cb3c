"""
Access tokens for host admin users.

The host signs in its users; this layer only needs to read who is
calling and which capabilities they hold. Claims:
- sub: user id
- name: display name
- caps: capability list checked against each settings page
"""

from datetime import UTC, datetime, timedelta
from typing import Any, cast

from jose import JWTError, jwt

from src.domain.principal import Principal

DEFAULT_SECRET_KEY = "dev-secret-unsafe"
ALGORITHM = "HS256"
ACCESS_TOKEN_TTL = timedelta(hours=24)


def create_access_token(
    data: dict[str, Any],
    secret_key: str = DEFAULT_SECRET_KEY,
    expires_delta: timedelta = ACCESS_TOKEN_TTL,
    now_utc: datetime | None = None,
) -> str:
    """Sign `data` with an expiry; `now_utc` pins the clock in tests."""
    issued = now_utc or datetime.now(UTC)
    claims = {**data, "exp": issued + expires_delta}
    return cast(str, jwt.encode(claims, secret_key, algorithm=ALGORITHM))


def decode_access_token(token: str, secret_key: str = DEFAULT_SECRET_KEY) -> dict[str, Any] | None:
    try:
        return cast(dict[str, Any], jwt.decode(token, secret_key, algorithms=[ALGORITHM]))
    except JWTError:
        return None


def principal_from_claims(payload: dict[str, Any]) -> Principal | None:
    """Map decoded claims to a Principal; None when `sub` is unusable."""
    user_id = payload.get("sub")
    if not isinstance(user_id, str) or not user_id:
        return None

    caps = payload.get("caps")
    if not isinstance(caps, list):
        caps = []

    return Principal(
        id=user_id,
        display_name=str(payload.get("name") or ""),
        capabilities=[str(c) for c in caps],
    )
