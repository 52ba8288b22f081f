"""
真实MinIO客户端集成测试
使用本地HTTP桩服务器模拟S3响应，验证HEAD 404时桶不存在与对象不存在的区分
"""
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from urllib.parse import parse_qs, urlsplit

import pytest

from config.services.storage_config import ClientSettings, StorageConfig
from infrastructure.storage import MinioClientFactory, StorageErrorKind, download_object_to_memory, stat_object

ERROR_XML = (
    '<?xml version="1.0" encoding="UTF-8"?>'
    "<Error><Code>{code}</Code><Message>{message}</Message>"
    "<BucketName>{bucket}</BucketName><Resource>/{bucket}</Resource>"
    "<RequestId>stub-request</RequestId><HostId>stub-host</HostId></Error>"
)
LOCATION_XML = (
    '<?xml version="1.0" encoding="UTF-8"?>'
    '<LocationConstraint xmlns="http://s3.amazonaws.com/doc/2006-03-01/"></LocationConstraint>'
)


class StubS3Handler(BaseHTTPRequestHandler):
    """按路径风格应答HEAD和GET ?location请求，HEAD错误不带响应体"""

    def log_message(self, format, *args):
        pass

    def _split(self):
        parts = urlsplit(self.path)
        bucket, _, key = parts.path.lstrip("/").partition("/")
        return bucket, key, parse_qs(parts.query, keep_blank_values=True)

    def _send(self, status, body=b"", headers=None, content_type=None):
        self.send_response(status)
        if content_type:
            self.send_header("Content-Type", content_type)
        for name, value in (headers or {}).items():
            self.send_header(name, value)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        if body and self.command != "HEAD":
            self.wfile.write(body)

    def do_HEAD(self):
        bucket, key, _ = self._split()
        self.server.requests.append(("HEAD", bucket, key))
        bucket_exists = bucket in self.server.existing_buckets

        if bucket_exists and not key:
            self._send(200)
            return

        headers = {}
        if self.server.send_error_code:
            headers["X-Minio-Error-Code"] = "NoSuchKey" if bucket_exists else "NoSuchBucket"
        self._send(404, headers=headers)

    def do_GET(self):
        bucket, key, query = self._split()
        self.server.requests.append(("GET", bucket, key))

        if "location" in query and bucket in self.server.existing_buckets:
            self._send(200, LOCATION_XML.encode(), content_type="application/xml")
        elif "location" in query:
            body = ERROR_XML.format(code="NoSuchBucket", message="The specified bucket does not exist", bucket=bucket)
            self._send(404, body.encode(), content_type="application/xml")
        else:
            body = ERROR_XML.format(code="NoSuchKey", message="The specified key does not exist.", bucket=bucket)
            self._send(404, body.encode(), content_type="application/xml")


@pytest.fixture
def stub_server():
    """在随机端口启动S3桩服务器，只有documents桶存在"""
    server = ThreadingHTTPServer(("127.0.0.1", 0), StubS3Handler)
    server.existing_buckets = {"documents"}
    server.send_error_code = False
    server.requests = []
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield server
    server.shutdown()
    server.server_close()
    thread.join(5)


def _create_client(server, region="us-east-1"):
    settings = ClientSettings(
        endpoint=f"127.0.0.1:{server.server_port}",
        access_key="A",
        secret_key="B",
        ssl=False,
        region=region,
        timeout=2000,
    )
    factory = MinioClientFactory(StorageConfig(_env_file=None, clients={"stub": settings}))
    return factory.create_client("stub")


@pytest.mark.integration
class TestHeadNotFoundAgainstServer:
    """真实客户端对桩服务器的HEAD 404区分测试"""

    @pytest.mark.asyncio
    async def test_missing_bucket_with_region(self, stub_server):
        """测试配置区域时HEAD 404无响应体，仍识别为桶不存在"""
        client = _create_client(stub_server, region="us-east-1")

        result = await stat_object(client, "missing-bucket", "report.pdf")

        assert result.error_kind is StorageErrorKind.BUCKET_NOT_FOUND
        assert ("HEAD", "missing-bucket", "") in stub_server.requests

    @pytest.mark.asyncio
    async def test_missing_bucket_without_region(self, stub_server):
        """测试未配置区域时通过位置查询识别桶不存在"""
        client = _create_client(stub_server, region=None)

        result = await stat_object(client, "missing-bucket", "report.pdf")

        assert result.error_kind is StorageErrorKind.BUCKET_NOT_FOUND

    @pytest.mark.asyncio
    async def test_missing_object_in_existing_bucket(self, stub_server):
        """测试桶存在而对象不存在时为OBJECT_NOT_FOUND"""
        client = _create_client(stub_server)

        result = await stat_object(client, "documents", "missing.pdf")

        assert result.error_kind is StorageErrorKind.OBJECT_NOT_FOUND

    @pytest.mark.asyncio
    async def test_error_code_header_skips_bucket_lookup(self, stub_server):
        """测试服务器返回x-minio-error-code头时直接使用该错误码"""
        stub_server.send_error_code = True
        client = _create_client(stub_server)

        result = await stat_object(client, "missing-bucket", "report.pdf")

        assert result.error_kind is StorageErrorKind.BUCKET_NOT_FOUND
        assert ("HEAD", "missing-bucket", "") not in stub_server.requests

    @pytest.mark.asyncio
    async def test_download_from_missing_bucket(self, stub_server):
        """测试下载到内存时同样报告桶不存在"""
        client = _create_client(stub_server)

        result = await download_object_to_memory(client, "missing-bucket", "report.pdf")

        assert result.error_kind is StorageErrorKind.BUCKET_NOT_FOUND
        assert not any(method == "GET" for method, _, _ in stub_server.requests)
