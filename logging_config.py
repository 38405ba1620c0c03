"""
日志配置
- 统一使用 rich 的 RichHandler 输出到 stderr
- 每个处理器都挂 RedactingFilter，Bearer 令牌、类 JWT 字符串和密码字段在写出前被替换
"""
import logging
import re
from typing import Iterable, Optional, Union

from rich.console import Console
from rich.logging import RichHandler

REDACTED = "***"
DEFAULT_LOGGERS = ("bearer_gate", "auth", "routers", "config")

_REDACTIONS = (
    # Authorization: Bearer <token>
    (re.compile(r"(Bearer\s+)[^\s'\",]+"), r"\1" + REDACTED),
    # 裸露的 header.claims.signature
    (re.compile(r"\b[A-Za-z0-9_-]{8,}\.[A-Za-z0-9_-]{2,}\.[A-Za-z0-9_-]{16,}"), REDACTED),
    # password=..., "password": "...", jwt_secret 同理
    (
        re.compile(r"""(["']?\b(?:password|passwd|jwt_secret|secret)["']?\s*[:=]\s*["']?)[^"',\s})]+""", re.IGNORECASE),
        r"\1" + REDACTED,
    ),
)


def redact(text: str) -> str:
    for pattern, replacement in _REDACTIONS:
        text = pattern.sub(replacement, text)
    return text


class RedactingFilter(logging.Filter):
    """在记录被任何处理器格式化之前抹掉凭证"""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        cleaned = redact(message)
        if cleaned != message:
            record.msg = cleaned
            record.args = ()
        return True


def resolve_log_level(level: Union[int, str, None], default: int = logging.INFO) -> int:
    """把 'debug' / 'INFO' / 20 之类的值转换为 logging 级别，无法识别时返回 default"""
    if isinstance(level, int):
        return level
    if not level:
        return default
    value = logging.getLevelName(str(level).strip().upper())
    return value if isinstance(value, int) else default


def _make_handler(level: int) -> logging.Handler:
    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    # RichHandler 自带时间与级别列
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    handler.addFilter(RedactingFilter())
    handler.setLevel(level)
    return handler


def get_logger(name: Optional[str] = None, level: Union[int, str, None] = logging.INFO) -> logging.Logger:
    """
    获取挂好脱敏处理器的日志器

    重复调用不会重复添加处理器，只会更新日志器与处理器的级别。
    """
    level = resolve_log_level(level)
    logger = logging.getLogger(name)
    logger.setLevel(level)

    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        logger.addHandler(_make_handler(level))
    for h in logger.handlers:
        h.setLevel(level)
    return logger


def configure_logging(level: Union[int, str, None], names: Iterable[str] = DEFAULT_LOGGERS) -> None:
    """进程启动时按 LOG_LEVEL 配置本项目的各个日志器"""
    for name in names:
        get_logger(name, level)
