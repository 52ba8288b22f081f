"""
MinIO Client Factory Implementation

This module creates ``minio.Minio`` clients from named settings. A fluent
``MinioClientBuilder`` collects the configuration and seals it on ``build()``.

Settings are applied in a fixed order, later steps never undo earlier ones:

1. transport encryption flag (always, defaults to HTTPS)
2. endpoint, if present
3. credentials, only when both access key and secret key are present
4. region, if present
5. session token, if present (whether or not credentials were applied)
6. timeout, if present
7. the caller's ``configure_client`` hook, so caller overrides always win
"""

import os
from typing import Any, Callable, Optional
from urllib.parse import urlsplit

import certifi
import urllib3
from minio import Minio
from minio.credentials import Provider

from config.loguru_config import get_logger

from ..interfaces.storage_interface import (
    ClientSettingsSource,
    ConfigurationException,
    InvalidOperationException,
    MinioClientFactoryInterface,
)

logger = get_logger(__name__)

DEFAULT_ENDPOINT = "s3.amazonaws.com"
DEFAULT_TIMEOUT_SECONDS = 300


class MinioClientBuilder:
    """
    Fluent configuration for a ``Minio`` client.

    Every ``with_*`` method returns the builder. Once ``build()`` has run the
    builder is sealed and further configuration raises InvalidOperationException.
    """

    def __init__(self):
        self._endpoint: Optional[str] = None
        self._secure: bool = True
        self._access_key: Optional[str] = None
        self._secret_key: Optional[str] = None
        self._region: Optional[str] = None
        self._session_token: Optional[str] = None
        self._timeout: Optional[int] = None
        self._proxy: Optional[str] = None
        self._http_client: Optional[urllib3.PoolManager] = None
        self._credentials_provider: Optional[Provider] = None
        self._cert_check: bool = True
        self._built = False

    @property
    def endpoint(self) -> Optional[str]:
        return self._endpoint

    @property
    def secure(self) -> bool:
        return self._secure

    @property
    def access_key(self) -> Optional[str]:
        return self._access_key

    @property
    def secret_key(self) -> Optional[str]:
        return self._secret_key

    @property
    def region(self) -> Optional[str]:
        return self._region

    @property
    def session_token(self) -> Optional[str]:
        return self._session_token

    @property
    def timeout(self) -> Optional[int]:
        """Request timeout in milliseconds."""
        return self._timeout

    @property
    def proxy(self) -> Optional[str]:
        return self._proxy

    @property
    def http_client(self) -> Optional[urllib3.PoolManager]:
        return self._http_client

    @property
    def credentials_provider(self) -> Optional[Provider]:
        return self._credentials_provider

    @property
    def cert_check(self) -> bool:
        return self._cert_check

    @property
    def is_built(self) -> bool:
        return self._built

    def _ensure_not_built(self) -> None:
        if self._built:
            raise InvalidOperationException("Client has already been built")

    def with_ssl(self, secure: bool = True) -> "MinioClientBuilder":
        self._ensure_not_built()
        self._secure = secure
        return self

    def with_endpoint(self, endpoint: str, port: Optional[int] = None) -> "MinioClientBuilder":
        """
        Set the service endpoint.

        Args:
            endpoint: ``host``, ``host:port`` or a URL; a URL scheme also sets the transport flag
            port: Optional port appended to the host
        """
        self._ensure_not_built()
        if "://" in endpoint:
            parts = urlsplit(endpoint)
            self._secure = parts.scheme.lower() == "https"
            endpoint = parts.netloc
        endpoint = endpoint.rstrip("/")
        if port is not None:
            endpoint = f"{endpoint}:{port}"
        self._endpoint = endpoint
        return self

    def with_credentials(self, access_key: str, secret_key: str) -> "MinioClientBuilder":
        self._ensure_not_built()
        self._access_key = access_key
        self._secret_key = secret_key
        return self

    def with_region(self, region: str) -> "MinioClientBuilder":
        self._ensure_not_built()
        self._region = region
        return self

    def with_session_token(self, session_token: str) -> "MinioClientBuilder":
        self._ensure_not_built()
        self._session_token = session_token
        return self

    def with_timeout(self, timeout: int) -> "MinioClientBuilder":
        """Set the connect and read timeout in milliseconds."""
        self._ensure_not_built()
        if timeout < 0:
            raise ValueError("timeout must not be negative")
        self._timeout = timeout
        return self

    def with_proxy(self, proxy_url: str) -> "MinioClientBuilder":
        self._ensure_not_built()
        self._proxy = proxy_url
        return self

    def with_http_client(self, http_client: urllib3.PoolManager) -> "MinioClientBuilder":
        """Use a caller owned connection pool. Timeout and proxy settings are then ignored."""
        self._ensure_not_built()
        self._http_client = http_client
        return self

    def with_credentials_provider(self, provider: Provider) -> "MinioClientBuilder":
        """Use a credentials provider instead of a static key pair."""
        self._ensure_not_built()
        self._credentials_provider = provider
        return self

    def with_cert_check(self, cert_check: bool = True) -> "MinioClientBuilder":
        self._ensure_not_built()
        self._cert_check = cert_check
        return self

    def _create_http_client(self) -> Optional[urllib3.PoolManager]:
        if self._http_client is not None:
            return self._http_client
        if self._timeout is None and self._proxy is None:
            # Let minio build its default pool
            return None

        seconds = self._timeout / 1000 if self._timeout is not None else DEFAULT_TIMEOUT_SECONDS
        pool_kwargs = {
            "timeout": urllib3.Timeout(connect=seconds, read=seconds),
            "maxsize": 10,
            "retries": urllib3.Retry(
                total=5,
                backoff_factor=0.2,
                status_forcelist=[500, 502, 503, 504],
            ),
        }
        if self._cert_check:
            pool_kwargs["cert_reqs"] = "CERT_REQUIRED"
            pool_kwargs["ca_certs"] = os.environ.get("SSL_CERT_FILE") or certifi.where()
        else:
            pool_kwargs["cert_reqs"] = "CERT_NONE"

        if self._proxy is not None:
            return urllib3.ProxyManager(self._proxy, **pool_kwargs)
        return urllib3.PoolManager(**pool_kwargs)

    def build(self) -> Minio:
        """
        Seal the builder and create the client.

        Returns:
            Minio: Configured client
        """
        self._ensure_not_built()
        self._built = True

        kwargs = {
            "endpoint": self._endpoint or DEFAULT_ENDPOINT,
            "secure": self._secure,
            "region": self._region,
            "http_client": self._create_http_client(),
            "cert_check": self._cert_check,
        }
        if self._credentials_provider is not None:
            kwargs["credentials"] = self._credentials_provider
        else:
            kwargs["access_key"] = self._access_key
            kwargs["secret_key"] = self._secret_key
            kwargs["session_token"] = self._session_token

        return Minio(**kwargs)


class MinioClientFactory(MinioClientFactoryInterface):
    """
    Factory for named ``Minio`` clients.

    Every call builds a new, independent client. Caching or sharing clients is
    left to the caller.
    """

    def __init__(self, settings_source: ClientSettingsSource):
        if settings_source is None:
            raise ConfigurationException("settings_source is required")
        self._settings_source = settings_source

    def create_client(
        self,
        name: str,
        configure_client: Optional[Callable[[MinioClientBuilder], Any]] = None,
    ) -> Minio:
        """
        Create a client from the settings registered under ``name``.

        Args:
            name: Configuration name
            configure_client: Hook receiving the builder after all settings are applied

        Returns:
            Minio: Configured client

        Raises:
            ConfigurationException: If name is empty or has no registered settings
        """
        if not name:
            raise ConfigurationException("Client name must be a non-empty string")

        settings = self._settings_source.get(name)
        if settings is None:
            raise ConfigurationException(f"No storage client settings registered under '{name}'")

        builder = MinioClientBuilder().with_ssl(settings.ssl)

        if settings.endpoint is not None:
            builder.with_endpoint(settings.endpoint)

        if settings.has_credentials:
            builder.with_credentials(settings.access_key, settings.secret_key)
        elif settings.access_key is not None or settings.secret_key is not None:
            logger.warning(f"Ignoring incomplete key pair for storage client '{name}'")

        if settings.region is not None:
            builder.with_region(settings.region)

        # Applied even without a key pair, credentials may come from configure_client
        if settings.session_token is not None:
            builder.with_session_token(settings.session_token)

        if settings.timeout is not None:
            builder.with_timeout(settings.timeout)

        if configure_client is not None:
            configure_client(builder)

        client = builder.build()
        logger.debug(f"Created storage client '{name}' for {builder.endpoint or DEFAULT_ENDPOINT}")
        return client
