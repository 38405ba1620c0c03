"""
憑證存儲
提供用戶名/密碼到身份的映射，令牌邏輯不依賴具體存儲實現
"""

from __future__ import annotations

import hmac
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, Optional

from auth.tokens import Identity, _is_identity
from config import ConfigError, read_auth_config

logger = logging.getLogger(__name__)


class CredentialStore(ABC):
    """憑證存儲接口"""

    @abstractmethod
    def verify(self, username: Optional[str], password: Optional[str]) -> Optional[Identity]:
        """匹配成功返回身份，否則返回 None"""
        pass


class InMemoryCredentialStore(CredentialStore):
    """基於內存列表的憑證存儲（明文密碼，常量時間比較）"""

    def __init__(self, users: Iterable[Dict[str, Any]] = ()):
        self._users: Dict[str, Dict[str, Any]] = {}
        for user in users:
            if not isinstance(user, dict):
                logger.warning(f"InMemoryCredentialStore: 跳過非對象的用戶記錄: {user!r}")
                continue
            username = user.get("username")
            password = user.get("password")
            user_id = user.get("user_id")
            if not isinstance(username, str) or not username or not isinstance(password, str) or not _is_identity(user_id):
                logger.warning(f"InMemoryCredentialStore: 跳過字段不完整的用戶記錄: {username!r}")
                continue
            if username in self._users:
                logger.warning(f"InMemoryCredentialStore: 用戶名重複，後者覆蓋前者: {username}")
            self._users[username] = {"password": password, "user_id": user_id}

    def __len__(self) -> int:
        return len(self._users)

    def verify(self, username: Optional[str], password: Optional[str]) -> Optional[Identity]:
        if not isinstance(username, str) or not isinstance(password, str):
            return None
        record = self._users.get(username)
        if record is None:
            return None
        if not hmac.compare_digest(password.encode("utf-8"), record["password"].encode("utf-8")):
            return None
        return record["user_id"]


def load_credential_store(path: str) -> InMemoryCredentialStore:
    """
    從認證 JSON 配置的 users 列表構建憑證存儲
    - 文件不存在: 記錄 WARNING，返回空存儲
    - JSON 損壞或 users 不是列表: ConfigError
    """
    users: Any = read_auth_config(path).get("users", [])
    if not isinstance(users, list):
        raise ConfigError(f"認證配置中的 users 必須是列表: {path}")
    store = InMemoryCredentialStore(users)
    logger.info(f"已加載 {len(store)} 個用戶憑證 ({path})")
    return store
