"""
令牌簽發與校驗
- TokenIssuer: 把已驗證的身份簽成令牌
- TokenVerifier: 校驗令牌並取回身份
- Authenticator: 與框架無關的請求攔截器，從請求頭中解析 Bearer 令牌
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, Union

from auth import jwt as jwt_lib
from auth.errors import InvalidCredential, MissingCredential

logger = logging.getLogger(__name__)

Identity = Union[int, str]

BEARER_PREFIX = "Bearer "
IDENTITY_CLAIM = "sub"


def _is_identity(value: Any) -> bool:
    # bool 是 int 的子類，需要單獨排除
    return isinstance(value, (int, str)) and not isinstance(value, bool)


class TokenIssuer:
    """簽發令牌，不做任何憑證檢查（由調用方負責）"""

    def __init__(self, secret: str, expires_seconds: Optional[int] = None):
        if not secret:
            raise ValueError("TokenIssuer requires a non-empty secret")
        self._secret = secret
        self._expires_seconds = expires_seconds if expires_seconds and expires_seconds > 0 else None

    @property
    def expires_seconds(self) -> Optional[int]:
        return self._expires_seconds

    def issue(self, identity: Identity) -> str:
        if not _is_identity(identity):
            raise ValueError(f"Identity must be int or str, got {type(identity).__name__}")

        iat = jwt_lib.now_ts()
        claims: Dict[str, Any] = {IDENTITY_CLAIM: identity, "iat": iat}
        if self._expires_seconds is not None:
            claims["exp"] = iat + self._expires_seconds
        return jwt_lib.encode(claims, self._secret)


class TokenVerifier:
    """校驗令牌，任何失敗都歸一為 InvalidCredential"""

    def __init__(self, secret: str, leeway_seconds: int = 0):
        if not secret:
            raise ValueError("TokenVerifier requires a non-empty secret")
        self._secret = secret
        self._leeway = max(0, int(leeway_seconds))

    def verify(self, token: str) -> Identity:
        try:
            claims = jwt_lib.decode(token, self._secret, leeway=self._leeway)
        except jwt_lib.TokenDecodeError as e:
            raise InvalidCredential(str(e)) from e

        identity = claims.get(IDENTITY_CLAIM)
        if not _is_identity(identity):
            raise InvalidCredential(f"Missing or invalid '{IDENTITY_CLAIM}' claim")
        return identity


def _get_header(headers: Mapping[str, str], name: str) -> Optional[str]:
    value = headers.get(name)
    if value is not None:
        return value
    # 普通 dict 大小寫敏感，退回逐個比較
    lowered = name.lower()
    for key, val in headers.items():
        if isinstance(key, str) and key.lower() == lowered:
            return val
    return None


def extract_bearer_token(authorization: Optional[str]) -> str:
    """
    從 Authorization 頭取出令牌
    - 沒有頭或不以字面量 "Bearer " 開頭: MissingCredential（不嘗試解析）
    - 前綴後為空: InvalidCredential
    """
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise MissingCredential("Missing or non-Bearer Authorization header")
    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        raise InvalidCredential("Empty Bearer token")
    return token


class Authenticator:
    """請求攔截器: authenticate(headers) -> Identity，失敗拋出 AuthError"""

    def __init__(self, verifier: TokenVerifier):
        self.verifier = verifier

    def authenticate(self, headers: Mapping[str, str]) -> Identity:
        token = extract_bearer_token(_get_header(headers, "Authorization"))
        identity = self.verifier.verify(token)
        logger.debug(f"Authenticator: 令牌校驗通過, identity={identity!r}")
        return identity
