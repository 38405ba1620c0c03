"""
登录路由
- 用户名 + 密码校验交给 CredentialStore
- 校验通过后由 TokenIssuer 签发 Bearer Token
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from auth.credentials import CredentialStore
from auth.dependencies import get_credential_store, get_token_issuer
from auth.errors import InvalidLoginCredentials
from auth.tokens import TokenIssuer

logger = logging.getLogger(__name__)


router = APIRouter(tags=["鉴权"])


class LoginRequest(BaseModel):
    # 缺字段、非字符串字段与密码错误一样交给 CredentialStore 拒绝，返回 401 而不是 422
    username: Optional[Any] = Field(None, description="用户名")
    password: Optional[Any] = Field(None, description="明文密码")


class TokenResponse(BaseModel):
    token: str


@router.post("/login", response_model=TokenResponse)
def login(
    body: Optional[LoginRequest] = None,
    store: CredentialStore = Depends(get_credential_store),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> TokenResponse:
    body = body or LoginRequest()
    identity = store.verify(body.username, body.password)
    if identity is None:
        logger.info(f"登录失败: username={body.username!r}")
        raise InvalidLoginCredentials(f"Credential mismatch for {body.username!r}")

    logger.info(f"登录成功: username={body.username!r}")
    return TokenResponse(token=issuer.issue(identity))
