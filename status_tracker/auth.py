"""
App Store Connect API token.

Apple wants an ES256-signed JWT made from the API key's .p8 private key.
Tokens may live at most 20 minutes, so a fresh one is made for every request.
"""

import time
from typing import Optional

import jwt

TOKEN_LIFETIME_SECONDS = 20 * 60
TOKEN_AUDIENCE = "appstoreconnect-v1"


def generate_token(key_id: str, issuer_id: str, private_key: str, now: Optional[float] = None) -> str:
    """
    Sign a short-lived bearer token.

    Args:
        key_id:      API key id, goes into the "kid" header.
        issuer_id:   Issuer id from the API keys page.
        private_key: PEM contents of the .p8 file.
        now:         Unix time to sign at (defaults to the current time).
    """
    issued_at = int(now if now is not None else time.time())
    claims = {
        "iss": issuer_id,
        "iat": issued_at,
        "exp": issued_at + TOKEN_LIFETIME_SECONDS,
        "aud": TOKEN_AUDIENCE,
    }
    return jwt.encode(
        claims,
        private_key,
        algorithm="ES256",
        headers={"kid": key_id, "typ": "JWT"},
    )
