"""Configuration module for Swarm Deploy Agent."""

import os
from enum import Enum
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class LogFormat(str, Enum):
    """Log renderer."""
    CONSOLE = "console"
    JSON = "json"


class AgentConfig(BaseSettings):
    """Agent configuration from environment variables.

    Raw inputs only. Secrets and the image mapping are validated into a
    ``RuntimeConfig`` by ``load_runtime_config``.
    """

    # HTTP listener
    host: str = Field(
        default="0.0.0.0",
        description="Address to bind the webhook listener to"
    )
    port: int = Field(
        default=3000,
        description="Port to listen for webhooks on"
    )

    # Docker CLI
    docker: str = Field(
        default="/usr/bin/docker",
        description="Path to the docker CLI"
    )

    # Image mapping
    config: str = Field(
        default="production",
        description="Environment block of the mapping document to use"
    )
    config_dir: str = Field(
        default="/usr/src/app/config/",
        description="Directory holding the mapping document"
    )
    config_file: str = Field(
        default="config.json",
        description="Mapping document file name"
    )

    # Secrets (a *_file path wins over the plain variable)
    token: str = Field(
        default="",
        description="Webhook access token"
    )
    token_file: Optional[str] = Field(
        default=None,
        description="File containing the webhook access token"
    )
    username: str = Field(
        default="",
        description="Docker Hub username"
    )
    username_file: Optional[str] = Field(
        default=None,
        description="File containing the Docker Hub username"
    )
    password: str = Field(
        default="",
        description="Docker Hub password"
    )
    password_file: Optional[str] = Field(
        default=None,
        description="File containing the Docker Hub password"
    )

    # Remote mapping refresh
    github_token: Optional[str] = Field(
        default=None,
        description="GitHub token used to fetch the mapping document"
    )
    github_url: Optional[str] = Field(
        default=None,
        description="GitHub contents URL of the mapping document"
    )

    # Logging
    log_std_out: bool = Field(
        default=True,
        description="Log stdout captured from docker commands"
    )
    log_std_err: bool = Field(
        default=True,
        description="Log stderr captured from docker commands"
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )
    log_format: LogFormat = Field(
        default=LogFormat.CONSOLE,
        description="Log renderer (console or json)"
    )

    class Config:
        """Pydantic config."""
        env_prefix = ""
        case_sensitive = False

    @property
    def config_path(self) -> str:
        """Full path of the mapping document.

        Returns:
            Path built from ``config_dir`` and ``config_file``
        """
        return os.path.join(self.config_dir, self.config_file)

    @property
    def remote_config_enabled(self) -> bool:
        return bool(self.github_token and self.github_url)
