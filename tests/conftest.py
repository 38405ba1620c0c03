import os
import sys

import pytest

# 确保项目根目录在 sys.path 中
ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from fastapi.testclient import TestClient  # noqa: E402

from auth.credentials import InMemoryCredentialStore  # noqa: E402
from config import Settings  # noqa: E402
from logging_config import get_logger  # noqa: E402

TEST_SECRET = "test-secret-with-at-least-32-bytes!!"
DEMO_USERS = ({"username": "kinjal", "password": "123456", "user_id": 4},)


@pytest.fixture(scope="session")
def logger():
    """提供一个挂好脱敏处理器的测试 logger"""
    return get_logger("tests")


@pytest.fixture
def secret():
    return TEST_SECRET


@pytest.fixture
def make_settings():
    """
    构建 Settings 的工厂方法
    使用方式: make_settings(jwt_expires_seconds=60)
    """
    def _mk(**overrides) -> Settings:
        values = {"jwt_secret": TEST_SECRET}
        values.update(overrides)
        return Settings(**values)
    return _mk


@pytest.fixture
def make_client(make_settings):
    """基于给定配置创建完整应用的 TestClient，默认带演示用户"""
    def _mk(users=DEMO_USERS, **overrides) -> TestClient:
        from main import create_app
        return TestClient(create_app(make_settings(**overrides), InMemoryCredentialStore(users)))
    return _mk


@pytest.fixture
def client(make_client):
    return make_client()
