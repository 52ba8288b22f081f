"""
测试配置文件
定义pytest的配置和共享fixtures
"""
import io
import os
import tempfile
from pathlib import Path
from typing import Generator, Optional
from unittest.mock import Mock

import pytest
from minio import Minio
from minio.datatypes import Object
from minio.error import S3Error

from config.loguru_config import setup_logging
from config.services.storage_config import ClientSettings, StorageConfig

# 设置测试环境
os.environ["ENVIRONMENT"] = "test"

setup_logging()


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """创建临时目录fixture"""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def storage_config() -> StorageConfig:
    """包含两个命名客户端的存储配置"""
    return StorageConfig(
        _env_file=None,
        clients={
            "default": ClientSettings(
                endpoint="store.example",
                access_key="A",
                secret_key="B",
                ssl=False,
            ),
            "archive": ClientSettings(
                endpoint="https://archive.example:9000",
                access_key="archive-key",
                secret_key="archive-secret",
                region="eu-west-1",
                timeout=1500,
            ),
        },
    )


@pytest.fixture
def mock_minio_client() -> Mock:
    """模拟MinIO客户端，所有方法为同步Mock，存储桶默认存在"""
    client = Mock(spec=Minio)
    client.bucket_exists.return_value = True
    return client


@pytest.fixture
def sample_object_stat() -> Object:
    """示例对象元数据"""
    return Object(bucket_name="documents", object_name="report.pdf", size=11, etag="etag-1")


class FakeObjectResponse:
    """模拟urllib3响应对象，支持read/close/release_conn"""

    def __init__(self, payload: bytes):
        self._body = io.BytesIO(payload)
        self.closed = False
        self.released = False

    def read(self, amt=None):
        if self.closed:
            raise ValueError("I/O operation on closed file.")
        return self._body.read() if amt is None else self._body.read(amt)

    def close(self):
        self.closed = True

    def release_conn(self):
        self.released = True


def make_s3_error(code: str, message: str = "error", headers: Optional[dict] = None) -> S3Error:
    """创建指定错误码的S3Error，可附带响应头"""
    return S3Error(
        code=code,
        message=message,
        resource="/bucket/object",
        request_id="request-1",
        host_id="host-1",
        response=Mock(headers=headers or {}),
    )


# 自定义标记
def pytest_configure(config):
    """配置pytest标记"""
    config.addinivalue_line("markers", "unit: 单元测试")
    config.addinivalue_line("markers", "integration: 集成测试")
    config.addinivalue_line("markers", "slow: 慢速测试")


@pytest.fixture
def object_response():
    """创建模拟响应的工厂fixture"""
    return FakeObjectResponse


@pytest.fixture
def s3_error():
    """创建S3Error的工厂fixture"""
    return make_s3_error
