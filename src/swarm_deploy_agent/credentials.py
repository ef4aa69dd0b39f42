"""Secret resolution for the webhook token and Docker Hub credentials."""

from dataclasses import dataclass, field
from typing import Optional

import structlog

from .config import AgentConfig
from .errors import ConfigError
from .models import RegistryCredentials

logger = structlog.get_logger()


@dataclass(frozen=True)
class ResolvedSecrets:
    """Secrets after file and environment resolution."""

    token: str = field(repr=False)
    username: str = ""
    password: str = field(default="", repr=False)

    @property
    def credentials(self) -> RegistryCredentials:
        return RegistryCredentials(username=self.username, password=self.password)


class SecretResolver:
    """Resolves each secret from its ``*_FILE`` path, then its environment variable."""

    def __init__(self, config: AgentConfig):
        """Initialize resolver.

        Args:
            config: Agent configuration holding secret values and file paths
        """
        self.config = config

    def resolve(self) -> ResolvedSecrets:
        """Resolve token, username and password.

        Returns:
            ResolvedSecrets

        Raises:
            ConfigError: If no token could be resolved
        """
        token = self._resolve("token", self.config.token_file, self.config.token)
        username = self._resolve("username", self.config.username_file, self.config.username)
        password = self._resolve("password", self.config.password_file, self.config.password)

        if not token:
            logger.error("secrets.token_missing")
            raise ConfigError(
                "You must specify a TOKEN (or TOKEN_FILE) to restrict access to the webhook"
            )

        if not username or not password:
            missing = " or ".join(
                name for name, value in (("username", username), ("password", password)) if not value
            )
            logger.warning(
                "secrets.registry_credentials_missing",
                message=(
                    f"No Docker Hub {missing} was specified. "
                    "You will only be able to pull/deploy public images"
                ),
            )

        return ResolvedSecrets(token=token, username=username, password=password)

    def _resolve(self, name: str, path: Optional[str], env_value: str) -> str:
        value = ""
        if path:
            value = self._read_file(name, path)
        return value or (env_value or "").strip()

    @staticmethod
    def _read_file(name: str, path: str) -> str:
        logger.info("secrets.reading_file", secret=name, path=path)
        try:
            with open(path, encoding="utf-8") as f:
                return f.read().strip()
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("secrets.file_unreadable", secret=name, path=path, error=str(e))
            return ""


def resolve_secrets(config: AgentConfig) -> ResolvedSecrets:
    """Resolve secrets for ``config``."""
    return SecretResolver(config).resolve()
