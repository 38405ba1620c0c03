"""
認證錯誤類型
所有錯誤對請求而言都是終止性的，統一渲染為 401 JSON 響應
"""
from typing import Dict

from fastapi import status
from starlette.responses import JSONResponse


class AuthError(Exception):
    """認證錯誤基類"""

    status_code: int = status.HTTP_401_UNAUTHORIZED
    body_key: str = "error"
    message: str = "Unauthorized"

    def __init__(self, reason: str = ""):
        # reason 只用於日誌，不返回給客戶端
        super().__init__(reason or self.message)
        self.reason = reason or self.message

    def to_response(self) -> JSONResponse:
        headers: Dict[str, str] = {"WWW-Authenticate": "Bearer"}
        return JSONResponse(
            status_code=self.status_code,
            content={self.body_key: self.message},
            headers=headers,
        )


class MissingCredential(AuthError):
    """缺少 Authorization 頭或不是 Bearer 方案"""

    message = "Unauthorized: No token found"


class InvalidCredential(AuthError):
    """令牌格式錯誤、簽名不符或已過期"""

    message = "Token expired or couldn't be verified!"


class InvalidLoginCredentials(AuthError):
    """登錄時用戶名或密碼不匹配"""

    body_key = "msg"
    message = "incorrect credentials!"
