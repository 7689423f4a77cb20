from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from bootstrap_s3.ignition.templates import DEFAULT_KUBERNETES_VERSION, DEFAULT_TEMPLATES, TemplateTable


class Settings(BaseSettings):
    """Configuration for the bootstrap bucket and ignition user-data services.

    All values can be overridden via environment variables. Prefix: ``BOOTSTRAP_S3_``.
    """

    # AWS clients
    aws_region: str = Field(default="us-east-1")
    s3_endpoint_url: str | None = None
    sts_endpoint_url: str | None = None
    aws_access_key_id: str | None = None
    aws_secret_access_key: str | None = None

    # Logging
    log_level: str = Field(default="INFO")
    log_json_output: bool = Field(default=True)

    # Ignition user data
    user_data_bucket: str = Field(default="ignition-userdata-bucket")
    user_data_dir: str = Field(default="node-userdata")
    ignition_backend: Literal["static", "s3"] = Field(
        default="s3",
        description="Where rendered user data goes: kept in memory ('static') or written to S3 ('s3').",
    )
    ignition_templates: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_TEMPLATES))
    ignition_default_version: str = Field(default=DEFAULT_KUBERNETES_VERSION)

    model_config = SettingsConfigDict(env_prefix="BOOTSTRAP_S3_", env_file=".env", extra="ignore")

    def template_table(self) -> TemplateTable:
        return TemplateTable(versions=self.ignition_templates, default_version=self.ignition_default_version)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
