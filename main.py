import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request

from auth.credentials import CredentialStore, load_credential_store
from auth.errors import AuthError
from auth.middleware import AuthMiddleware
from auth.tokens import Authenticator, TokenIssuer, TokenVerifier
from config import Settings, load_settings
from logging_config import configure_logging, get_logger
from routers import include_routers

logger = get_logger("bearer_gate")


async def handle_auth_error(request: Request, exc: AuthError):
    return exc.to_response()


def create_app(settings: Optional[Settings] = None, credential_store: Optional[CredentialStore] = None) -> FastAPI:
    """
    创建应用，密钥与凭证在此注入，之后不再变化
    未传入 credential_store 时从 settings.auth_config_path 加载
    """
    if settings is None:
        settings = load_settings()
    configure_logging(settings.log_level)

    secret = settings.jwt_secret.get_secret_value()
    issuer = TokenIssuer(secret, expires_seconds=settings.jwt_expires_seconds)
    verifier = TokenVerifier(secret, leeway_seconds=settings.jwt_leeway_seconds)
    store = credential_store if credential_store is not None else load_credential_store(settings.auth_config_path)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        lifetime = f"{settings.jwt_expires_seconds}s" if settings.jwt_expires_seconds else "不过期"
        logger.info(f"认证系统就绪: 凭证存储={type(store).__name__}, 令牌有效期={lifetime}")
        yield
        logger.info("应用关闭")

    app = include_routers(FastAPI(lifespan=lifespan))
    app.state.settings = settings
    app.state.token_issuer = issuer
    app.state.credential_store = store
    app.add_exception_handler(AuthError, handle_auth_error)

    app.add_middleware(AuthMiddleware, authenticator=Authenticator(verifier))

    # 最外层: 记录请求与响应
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        process_time = (time.time() - start_time) * 1000
        logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({process_time:.2f}ms)")
        return response

    return app


if __name__ == "__main__":
    import uvicorn

    settings = load_settings()
    logger.info(f"Server is running on port {settings.port}")
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, workers=1)
