"""
身份驗證中間件
把 Authenticator 接到 Starlette 請求管線上，只攔截受保護的路由
"""
import logging
import re
from typing import Any, Awaitable, Callable, Iterable, Optional, Pattern, Union

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.types import ASGIApp

from auth.errors import AuthError
from auth.tokens import Authenticator

logger = logging.getLogger(__name__)

DEFAULT_PROTECTED_ROUTES = (r"^/user/?$",)


class AuthMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app: ASGIApp,
        authenticator: Authenticator,
        protected_routes: Optional[Iterable[Union[str, Pattern[str]]]] = None,
    ):
        super().__init__(app)
        self.authenticator = authenticator
        self.protected_routes = [
            re.compile(p) if isinstance(p, str) else p
            for p in (protected_routes if protected_routes is not None else DEFAULT_PROTECTED_ROUTES)
        ]

    def is_protected(self, path: str) -> bool:
        return any(pattern.fullmatch(path) for pattern in self.protected_routes)

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Any]]):
        path = request.url.path
        method = request.method

        if not self.is_protected(path):
            return await call_next(request)

        try:
            identity = self.authenticator.authenticate(request.headers)
        except AuthError as e:
            logger.warning(f"AuthMiddleware: 拒絕 {method} {path}: {type(e).__name__} ({e.reason})")
            return e.to_response()

        request.state.identity = identity
        logger.debug(f"AuthMiddleware: {method} {path} 身份已驗證")
        return await call_next(request)
