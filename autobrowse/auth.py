"""Credential store and login gate.

Flow:
  1. The phone app pushes ``{base_url, api_key, access_token}`` via
     ``PUT /auth/credentials`` → stored in the ``auto_auth`` table
  2. Every library entry point asks ``is_logged_in(session, store)``
  3. Fast path: the host already put ``isLoggedIn`` in the session extras
  4. Slow path: load stored credentials, check the JWT ``exp`` claim locally
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
import math
import time

from fastapi import APIRouter
from pydantic import BaseModel

from autobrowse.db import get_db
from autobrowse.session import EXTRA_IS_LOGGED_IN, LibrarySession
from browse_core.models import AuthConfig

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


# ---------------------------------------------------------------------------
# Token helpers
# ---------------------------------------------------------------------------

def _decode_jwt_claims(token: str) -> dict:
    """Decode the (unverified) payload segment of a JWT."""
    parts = token.split(".")
    if len(parts) != 3:
        raise ValueError("not a JWT")
    payload = parts[1]
    payload += "=" * (-len(payload) % 4)
    claims = json.loads(base64.urlsafe_b64decode(payload.encode("ascii")))
    if not isinstance(claims, dict):
        raise ValueError("JWT payload is not an object")
    return claims


def is_token_expired(token: str, *, now: float | None = None) -> bool:
    """True if *token*'s ``exp`` claim is in the past.

    Undecodable tokens and tokens without a finite numeric ``exp`` count as expired.
    """
    try:
        claims = _decode_jwt_claims(token)
    except (ValueError, UnicodeError, binascii.Error) as exc:
        logger.debug("Unreadable access token: %s", exc)
        return True

    exp = claims.get("exp")
    if not isinstance(exp, (int, float)) or isinstance(exp, bool) or not math.isfinite(exp):
        return True
    return exp <= (time.time() if now is None else now)


# ---------------------------------------------------------------------------
# Credential store (DB-backed)
# ---------------------------------------------------------------------------

class CredentialStore:
    """Single-row store for the backend credentials."""

    async def load(self) -> AuthConfig | None:
        db = get_db()
        cursor = await db.execute(
            "SELECT base_url, api_key, access_token FROM auto_auth WHERE id = 1"
        )
        row = await cursor.fetchone()
        if not row:
            return None
        return AuthConfig(base_url=row[0], api_key=row[1], access_token=row[2])

    async def save(self, base_url: str | None, api_key: str | None, access_token: str | None) -> None:
        db = get_db()
        await db.execute(
            """
            INSERT INTO auto_auth (id, base_url, api_key, access_token)
            VALUES (1, ?, ?, ?)
            ON CONFLICT(id)
            DO UPDATE SET base_url     = excluded.base_url,
                          api_key      = excluded.api_key,
                          access_token = excluded.access_token,
                          updated_at   = datetime('now')
            """,
            (base_url, api_key, access_token),
        )
        await db.commit()

    async def clear(self) -> None:
        db = get_db()
        await db.execute("DELETE FROM auto_auth")
        await db.commit()


# ---------------------------------------------------------------------------
# Gate
# ---------------------------------------------------------------------------

async def is_logged_in(session: LibrarySession, store: CredentialStore) -> bool:
    """Decide whether real content may be shown for this call."""
    flag = session.extras.get(EXTRA_IS_LOGGED_IN)
    if flag is not None:
        return bool(flag)

    config = await store.load()
    if config is None or not config.access_token:
        logger.info("Auth gate: no stored access token")
        return False
    expired = is_token_expired(config.access_token)
    logger.info("Auth gate: stored token expired=%s", expired)
    return not expired


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

class CredentialsIn(BaseModel):
    base_url: str
    api_key: str
    access_token: str


@router.put("/auth/credentials", status_code=204)
async def put_credentials(body: CredentialsIn) -> None:
    """Store the backend credentials pushed by the phone app."""
    await CredentialStore().save(body.base_url, body.api_key, body.access_token)
    logger.info("Stored credentials for %s", body.base_url)


@router.delete("/auth/credentials", status_code=204)
async def delete_credentials() -> None:
    """Forget the stored credentials (sign out)."""
    await CredentialStore().clear()
