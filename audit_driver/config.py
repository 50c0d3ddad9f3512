# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Audit driver configuration.

All settings can be overridden via environment variables with the
AUDIT_ prefix (for example AUDIT_DATE_FORMAT or AUDIT_THRESHOLD).
Values are resolved once, when the settings object is built.
"""

import re
from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigurationError

DEFAULT_DATE_FORMAT = "yyyy-MM-dd HH:mm:ss"

_INDEX_NAME_INVALID = re.compile(r"[^a-z0-9_-]+")


class AuditSettings(BaseSettings):
    """Configuration for the search engine audit driver."""

    model_config = SettingsConfigDict(
        env_prefix="AUDIT_",
        env_file=".env",
        extra="ignore",
    )

    # Connection (consumed only when building the opensearch-py client)
    hosts: str = Field(
        default="https://localhost:9200",
        description="Comma-separated list of search engine hosts",
    )
    use_basic_auth: bool = Field(
        default=True,
        description="Send basic auth credentials",
    )
    username: str = Field(default="admin")
    password: str = Field(default="")
    verify_certs: bool = Field(
        default=True,
        description="Verify the server TLS certificate",
    )
    use_ca_cert: bool = Field(
        default=False,
        description="Verify against a custom CA bundle",
    )
    ca_cert_path: Optional[str] = Field(
        default=None,
        description="Path to the CA bundle used when use_ca_cert is set",
    )
    timeout: int = Field(
        default=30,
        gt=0,
        description="Request timeout in seconds",
    )

    # Storage layout
    index: str = Field(
        default="audits",
        description="Index name, or index prefix when index_per_type is set",
    )
    index_per_type: bool = Field(
        default=False,
        description="Store each auditable type in its own index",
    )

    # Documents
    date_format: str = Field(
        default=DEFAULT_DATE_FORMAT,
        description="Date format shared by every date field of the mapping",
    )
    threshold: int = Field(
        default=0,
        description="Retention in days per auditable entity, 0 disables pruning",
    )

    # Logging
    log_level: str = "INFO"
    log_format: Literal["json", "text"] = "json"

    @field_validator("date_format")
    @classmethod
    def check_date_format(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("date_format must not be empty")
        return v

    @field_validator("threshold")
    @classmethod
    def check_threshold(cls, v: int) -> int:
        if v < 0:
            raise ValueError("threshold must be 0 (disabled) or a positive number of days")
        return v

    @field_validator("index")
    @classmethod
    def check_index(cls, v: str) -> str:
        v = v.strip()
        if not v or v != v.lower() or _INDEX_NAME_INVALID.search(v):
            raise ValueError("index must be a lowercase name made of a-z, 0-9, '_' and '-'")
        return v

    @model_validator(mode="after")
    def check_ca_cert(self) -> "AuditSettings":
        if self.use_ca_cert and not self.ca_cert_path:
            raise ValueError("ca_cert_path is required when use_ca_cert is enabled")
        return self

    @property
    def hosts_list(self) -> list[str]:
        """Return hosts as a list."""
        return [host.strip() for host in self.hosts.split(",") if host.strip()]

    @property
    def pruning_enabled(self) -> bool:
        return self.threshold > 0

    def index_for(self, auditable_type: Optional[str] = None) -> str:
        """Resolve the index holding documents of ``auditable_type``.

        With a shared index the type is ignored. With one index per type,
        a missing type resolves to a wildcard over every per-type index.
        """
        if not self.index_per_type:
            return self.index
        if auditable_type is None:
            return f"{self.index}-*"
        suffix = _INDEX_NAME_INVALID.sub("_", auditable_type.lower()).strip("_")
        return f"{self.index}-{suffix or 'default'}"


def load_settings(**overrides) -> AuditSettings:
    """Build settings, failing fast with ConfigurationError on invalid values."""
    try:
        return AuditSettings(**overrides)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid audit configuration: {e}") from e


@lru_cache
def get_settings() -> AuditSettings:
    """Get cached settings instance."""
    return load_settings()
