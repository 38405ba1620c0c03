"""
配置管理
进程启动时从环境变量与认证 JSON 文件加载一次，之后只读
优先级: 环境变量 > 认证配置文件 > 默认值
"""

import json
import logging
import os
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, SecretStr

logger = logging.getLogger(__name__)

DEFAULT_AUTH_CONFIG_PATH = "auth.json"
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8080
MIN_SECRET_BYTES = 32


class ConfigError(Exception):
    """配置缺失或格式错误，启动时抛出"""


def check_config(example, current):
    """用示例配置补全缺失项"""
    for key, value in example.items():
        if key not in current:
            current[key] = value
        elif isinstance(value, dict):
            if not isinstance(current[key], dict):
                current[key] = value
            else:
                check_config(value, current[key])


def check_config_type(example, current) -> Optional[str]:
    """返回第一个类型不匹配的键，全部匹配时返回 None"""
    for key, value in example.items():
        if key not in current:
            return key
        elif isinstance(value, dict):
            if not isinstance(current[key], dict):
                return key
            bad = check_config_type(value, current[key])
            if bad:
                return f"{key}.{bad}"
        elif not isinstance(current[key], type(value)):
            return key
    return None


def read_auth_config(path: str) -> Dict[str, Any]:
    """
    读取认证 JSON 配置
    - 文件不存在: 记录 WARNING 并返回空配置
    - JSON 损坏或顶层不是对象: ConfigError
    """
    if not os.path.exists(path):
        logger.warning(f"认证配置文件不存在: {path}，使用空配置")
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise ConfigError(f"无法读取认证配置 {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"认证配置顶层必须是 JSON 对象: {path}")
    return data


class Settings(BaseModel):
    """进程级只读配置"""

    model_config = ConfigDict(frozen=True)

    jwt_secret: SecretStr
    jwt_expires_seconds: Optional[int] = None
    jwt_leeway_seconds: int = 0
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    log_level: str = "INFO"
    auth_config_path: str = DEFAULT_AUTH_CONFIG_PATH


auth_config_example = {
    "jwt_secret": "",
    "jwt_expires_seconds": 0,
    "jwt_leeway_seconds": 0,
    "users": [],
}


def _int_env(environ: Mapping[str, str], name: str, default: int, minimum: int = 0, maximum: Optional[int] = None) -> int:
    raw = environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        raise ConfigError(f"{name} 必须是整数，当前值: {raw!r}") from None
    if value < minimum or (maximum is not None and value > maximum):
        raise ConfigError(f"{name} 超出范围: {value}")
    return value


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """加载配置，密钥缺失时抛出 ConfigError"""
    env = os.environ if environ is None else environ

    path = (env.get("AUTH_CONFIG_PATH") or "").strip() or DEFAULT_AUTH_CONFIG_PATH
    file_cfg = read_auth_config(path)
    check_config(auth_config_example, file_cfg)
    bad_key = check_config_type(auth_config_example, file_cfg)
    if bad_key:
        raise ConfigError(f"认证配置项类型错误: {bad_key} ({path})")

    secret = (env.get("JWT_SECRET") or "").strip() or file_cfg["jwt_secret"].strip()
    if not secret:
        raise ConfigError("未配置签名密钥: 请设置 JWT_SECRET 或认证配置中的 jwt_secret")
    if len(secret.encode("utf-8")) < MIN_SECRET_BYTES:
        logger.warning(f"签名密钥长度不足 {MIN_SECRET_BYTES} 字节，建议使用更长的随机密钥")

    expires = _int_env(env, "JWT_EXPIRES_SECONDS", file_cfg["jwt_expires_seconds"])
    leeway = _int_env(env, "JWT_LEEWAY_SECONDS", file_cfg["jwt_leeway_seconds"])

    return Settings(
        jwt_secret=SecretStr(secret),
        jwt_expires_seconds=expires or None,
        jwt_leeway_seconds=leeway,
        host=(env.get("HOST") or "").strip() or DEFAULT_HOST,
        port=_int_env(env, "PORT", DEFAULT_PORT, minimum=1, maximum=65535),
        log_level=(env.get("LOG_LEVEL") or "").strip().upper() or "INFO",
        auth_config_path=path,
    )
