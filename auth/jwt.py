"""
Compact HS256 token codec built on the Python standard library.

Token layout: base64url(header).base64url(claims).base64url(signature), no padding.
The signature is HMAC-SHA256 over "header.claims" keyed with the shared secret.
'exp' is optional; when present it is enforced with an optional leeway.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import json
import time
from typing import Any, Dict

HEADER = {"alg": "HS256", "typ": "JWT"}


class TokenDecodeError(ValueError):
    """Token is malformed, carries an unsupported header, or its signature does not match."""


class TokenExpiredError(TokenDecodeError):
    """Token signature is valid but its 'exp' claim has passed."""


def _b64url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _b64url_decode(data: str) -> bytes:
    s = data.encode("ascii")
    padding = b"=" * (-len(s) % 4)
    return base64.urlsafe_b64decode(s + padding)


def _sign(signing_input: bytes, secret: str) -> bytes:
    return hmac.new(secret.encode("utf-8"), signing_input, hashlib.sha256).digest()


def _load_segment(segment: str, name: str) -> Any:
    try:
        return json.loads(_b64url_decode(segment).decode("utf-8"))
    except (binascii.Error, UnicodeError, ValueError, RecursionError) as e:
        raise TokenDecodeError(f"Undecodable token {name}: {e}") from e


def now_ts() -> int:
    """Return current UNIX timestamp (seconds)."""
    return int(time.time())


def encode(claims: Dict[str, Any], secret: str) -> str:
    """
    Serialize claims and sign them with HS256.
    'exp' and 'iat', when given, must be integer UNIX timestamps.
    """
    if not secret:
        raise ValueError("Signing secret must not be empty")
    for key in ("exp", "iat"):
        if key in claims and (not isinstance(claims[key], int) or isinstance(claims[key], bool)):
            raise ValueError(f"'{key}' must be an integer UNIX timestamp")

    header_b64 = _b64url_encode(json.dumps(HEADER, separators=(",", ":")).encode("utf-8"))
    try:
        payload_json = json.dumps(claims, separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Claims are not JSON serializable: {e}") from e
    payload_b64 = _b64url_encode(payload_json.encode("utf-8"))
    signing_input = f"{header_b64}.{payload_b64}".encode("ascii")
    return f"{header_b64}.{payload_b64}.{_b64url_encode(_sign(signing_input, secret))}"


def decode(token: str, secret: str, leeway: int = 0) -> Dict[str, Any]:
    """
    Verify a token and return its claims.

    - checks the structure
    - recomputes the signature and compares it in constant time, before any JSON is parsed
    - checks the HS256 header
    - rejects the token if 'exp' is present and older than now - leeway

    Raises TokenDecodeError (or TokenExpiredError) on any failure.
    """
    if not isinstance(token, str) or not token:
        raise TokenDecodeError("Empty token")

    parts = token.split(".")
    if len(parts) != 3 or not all(parts):
        raise TokenDecodeError("Invalid token format")
    header_b64, payload_b64, sig_b64 = parts

    # 签名在解析任何 JSON 之前校验
    try:
        signing_input = f"{header_b64}.{payload_b64}".encode("ascii")
        actual_sig = _b64url_decode(sig_b64)
    except (binascii.Error, UnicodeError, ValueError) as e:
        raise TokenDecodeError(f"Undecodable token segment: {e}") from e

    expected_sig = _sign(signing_input, secret)
    if not hmac.compare_digest(expected_sig, actual_sig):
        raise TokenDecodeError("Invalid token signature")

    header = _load_segment(header_b64, "header")
    if not isinstance(header, dict) or header.get("alg") != "HS256" or header.get("typ") != "JWT":
        raise TokenDecodeError("Unsupported token header")

    claims = _load_segment(payload_b64, "claims")
    if not isinstance(claims, dict):
        raise TokenDecodeError("Claims must be a JSON object")

    if "exp" in claims:
        exp = claims["exp"]
        if not isinstance(exp, int) or isinstance(exp, bool):
            raise TokenDecodeError("Invalid 'exp' in claims")
        if now_ts() >= exp + max(0, int(leeway)):
            raise TokenExpiredError("Token expired")

    return claims
