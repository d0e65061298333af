# shellaudit — Shell Script Security Analysis Service
# Copyright (C) 2026 shellaudit Project Contributors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.

"""HMAC-signed bearer tokens (JWT compact form, HS256 only).

Token layout: ``base64url(header) . base64url(claims) . base64url(sig)``
where ``sig = HMAC-SHA256(secret, header_b64 + "." + claims_b64)``.

Verification rejects any other algorithm (including ``none``), bad
signatures, and tokens whose ``exp`` has passed or whose ``nbf`` is in the
future. Signature comparison is constant-time (``HMAC.verify``).
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
import time
from typing import Any, Optional

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, hmac

from shellaudit.errors import AuthError

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
DEFAULT_TTL_SECONDS = 3600
# Tolerated clock skew for exp/nbf checks.
LEEWAY_SECONDS = 30


def _b64url_encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _b64url_decode(segment: str) -> bytes:
    padded = segment + "=" * (-len(segment) % 4)
    try:
        return base64.urlsafe_b64decode(padded.encode("ascii"))
    except (binascii.Error, UnicodeEncodeError, ValueError) as e:
        raise AuthError("Malformed token encoding") from e


def _canonical(data: dict[str, Any]) -> bytes:
    return json.dumps(data, separators=(",", ":"), sort_keys=True).encode("utf-8")


def _signature(secret: str, signing_input: bytes) -> hmac.HMAC:
    mac = hmac.HMAC(secret.encode("utf-8"), hashes.SHA256())
    mac.update(signing_input)
    return mac


def issue_token(
    secret: str,
    subject: str = "shellaudit",
    ttl_seconds: Optional[int] = DEFAULT_TTL_SECONDS,
    now: Optional[float] = None,
    extra_claims: Optional[dict[str, Any]] = None,
) -> str:
    """Create an HS256 bearer token signed with ``secret``.

    Args:
        secret: Shared signing secret (the service's ``jwtsecret``).
        subject: ``sub`` claim.
        ttl_seconds: Lifetime; ``None`` issues a token without ``exp``.
        now: Issue time as a Unix timestamp (defaults to the current time).
        extra_claims: Additional claims merged into the payload.
    """
    issued_at = int(time.time() if now is None else now)
    claims: dict[str, Any] = {"sub": subject, "iat": issued_at}
    if ttl_seconds is not None:
        claims["exp"] = issued_at + int(ttl_seconds)
    if extra_claims:
        claims.update(extra_claims)

    header_b64 = _b64url_encode(_canonical({"alg": ALGORITHM, "typ": "JWT"}))
    claims_b64 = _b64url_encode(_canonical(claims))
    signing_input = f"{header_b64}.{claims_b64}".encode("ascii")
    sig = _signature(secret, signing_input).finalize()
    return f"{header_b64}.{claims_b64}.{_b64url_encode(sig)}"


def _decode_json_segment(segment: str, what: str) -> dict[str, Any]:
    try:
        data = json.loads(_b64url_decode(segment))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise AuthError(f"Malformed token {what}") from e
    if not isinstance(data, dict):
        raise AuthError(f"Malformed token {what}")
    return data


def _check_time_claims(claims: dict[str, Any], now: float) -> None:
    exp = claims.get("exp")
    if exp is not None:
        if not isinstance(exp, (int, float)) or isinstance(exp, bool):
            raise AuthError("Malformed exp claim")
        if now > exp + LEEWAY_SECONDS:
            raise AuthError("Token expired")
    nbf = claims.get("nbf")
    if nbf is not None:
        if not isinstance(nbf, (int, float)) or isinstance(nbf, bool):
            raise AuthError("Malformed nbf claim")
        if now < nbf - LEEWAY_SECONDS:
            raise AuthError("Token not yet valid")


def verify_token(token: str, secret: str, now: Optional[float] = None) -> dict[str, Any]:
    """Verify ``token`` against ``secret`` and return its claims.

    Raises:
        AuthError: the token is malformed, uses an algorithm other than
            HS256, has a bad signature, or is expired / not yet valid.
    """
    if not token:
        raise AuthError("Missing token")

    parts = token.split(".")
    if len(parts) != 3 or not all(parts):
        raise AuthError("Malformed token")
    header_b64, claims_b64, sig_b64 = parts

    header = _decode_json_segment(header_b64, "header")
    if header.get("alg") != ALGORITHM:
        raise AuthError(f"Unsupported token algorithm: {header.get('alg')!r}")

    try:
        signing_input = f"{header_b64}.{claims_b64}".encode("ascii")
    except UnicodeEncodeError as e:
        raise AuthError("Malformed token") from e
    try:
        _signature(secret, signing_input).verify(_b64url_decode(sig_b64))
    except InvalidSignature as e:
        raise AuthError("Invalid token signature") from e

    claims = _decode_json_segment(claims_b64, "claims")
    _check_time_claims(claims, time.time() if now is None else now)
    return claims


def extract_bearer(authorization: Optional[str]) -> str:
    """Pull the token out of an ``Authorization`` header value.

    Accepts ``Bearer <token>`` and, for older clients, a bare token.
    """
    if not authorization or not authorization.strip():
        raise AuthError("Missing Authorization header")
    value = authorization.strip()
    scheme, _, rest = value.partition(" ")
    if rest:
        if scheme.lower() != "bearer":
            raise AuthError("Use: Authorization: Bearer <token>")
        value = rest.strip()
    return value
