"""
FastAPI 依賴
從 app.state 取出啟動時注入的組件，從 request.state 取出中間件寫入的身份
"""

from fastapi import Request

from auth.credentials import CredentialStore
from auth.errors import MissingCredential
from auth.tokens import Identity, TokenIssuer


def get_token_issuer(request: Request) -> TokenIssuer:
    return request.app.state.token_issuer


def get_credential_store(request: Request) -> CredentialStore:
    return request.app.state.credential_store


def get_current_identity(request: Request) -> Identity:
    """
    返回 AuthMiddleware 已驗證的身份。
    路由未被中間件保護時沒有身份，按缺少憑證處理。
    """
    identity = getattr(request.state, "identity", None)
    if identity is None:
        raise MissingCredential("Route reached without an authenticated identity")
    return identity
