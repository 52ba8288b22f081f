"""
Storage Configuration

This module contains the named client settings for object storage services.

Every named client is configured independently. With the default ``STORAGE_``
prefix and ``__`` as nested delimiter a client called ``primary`` is read from:

    STORAGE_CLIENTS__PRIMARY__ENDPOINT=play.min.io
    STORAGE_CLIENTS__PRIMARY__ACCESS_KEY=...
    STORAGE_CLIENTS__PRIMARY__SECRET_KEY=...
    STORAGE_CLIENTS__PRIMARY__SSL=true
"""

from functools import lru_cache
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import SettingsConfigDict

from infrastructure.storage.interfaces.storage_interface import ClientSettingsSource

from ..settings import BaseConfig


class ClientSettings(BaseModel):
    """Connection settings for one named storage client."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    endpoint: Optional[str] = Field(default=None, description="Host, host:port or URL of the service")
    access_key: Optional[str] = Field(default=None, description="Access key (user ID)")
    secret_key: Optional[str] = Field(default=None, description="Secret key (password)")
    region: Optional[str] = Field(default=None, description="Storage region")
    session_token: Optional[str] = Field(default=None, description="Session token for temporary credentials")
    timeout: Optional[int] = Field(default=None, ge=0, description="Request timeout in milliseconds")
    ssl: bool = Field(default=True, description="Use HTTPS")

    @property
    def has_credentials(self) -> bool:
        """Whether both halves of the key pair are present."""
        return self.access_key is not None and self.secret_key is not None


class StorageConfig(BaseConfig, ClientSettingsSource):
    """Storage configuration holding every named client."""

    model_config = SettingsConfigDict(
        env_prefix="STORAGE_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    clients: Dict[str, ClientSettings] = Field(default_factory=dict, description="Named client settings")

    def get(self, name: str) -> Optional[ClientSettings]:
        """Get the settings registered under ``name``."""
        settings = self.clients.get(name)
        if settings is None:
            # Environment keys are case-insensitive, names passed in code may not be
            settings = self.clients.get(name.lower())
        return settings

    def register(self, name: str, settings: ClientSettings) -> "StorageConfig":
        """Return a copy of this configuration with one more named client."""
        clients = dict(self.clients)
        clients[name] = settings
        return self.model_copy(update={"clients": clients})

    def names(self) -> list[str]:
        """Get all registered client names."""
        return list(self.clients.keys())


@lru_cache()
def get_storage_config() -> StorageConfig:
    """Get cached storage configuration instance."""
    return StorageConfig()
