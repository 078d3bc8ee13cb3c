"""
Action tokens guarding export/import requests.

A token is a short-lived signed JWT bound to an action name
(`{option_group}_export_settings`, `{option_group}_import_settings`) and
to the requesting user.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

ALGORITHM = "HS256"
NONCE_TTL_MINUTES = 60 * 12  # 12 hours


def export_action(option_group: str) -> str:
    return f"{option_group}_export_settings"


def import_action(option_group: str) -> str:
    return f"{option_group}_import_settings"


def create_nonce(
    action: str,
    user_id: str,
    secret_key: str,
    ttl_minutes: int = NONCE_TTL_MINUTES,
    now_utc: datetime | None = None,
) -> str:
    """
    Create a token for one action.

    Args:
        action: Action name the token is valid for
        user_id: Subject the token is issued to
        secret_key: Signing key
        ttl_minutes: Token lifetime
        now_utc: Current UTC time (for testing/determinism)
    """
    current_time = now_utc if now_utc is not None else datetime.now(UTC)
    claims = {
        "act": action,
        "sub": str(user_id),
        "exp": current_time + timedelta(minutes=ttl_minutes),
    }
    token: str = jwt.encode(claims, secret_key, algorithm=ALGORITHM)
    return token


def verify_nonce(token: str | None, action: str, user_id: str, secret_key: str) -> bool:
    """True when the token is valid, unexpired and issued for this action and user."""
    if not token:
        return False
    try:
        payload = jwt.decode(token, secret_key, algorithms=[ALGORITHM])
    except JWTError:
        return False
    return payload.get("act") == action and payload.get("sub") == str(user_id)
