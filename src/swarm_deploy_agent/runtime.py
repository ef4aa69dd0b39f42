"""Startup resolution of the immutable RuntimeConfig."""

from typing import Optional

import structlog

from .client.remote_config import RemoteConfigFetcher
from .config import AgentConfig
from .credentials import SecretResolver
from .errors import ConfigError
from .mapping import ConfigStore
from .models import RuntimeConfig

logger = structlog.get_logger()


async def load_runtime_config(
    config: AgentConfig,
    fetcher: Optional[RemoteConfigFetcher] = None,
) -> RuntimeConfig:
    """Resolve secrets and the image mapping into a RuntimeConfig.

    The mapping document is refreshed from GitHub first when
    ``GITHUB_TOKEN`` and ``GITHUB_URL`` are both set.

    Args:
        config: Raw agent configuration
        fetcher: Remote fetcher override (defaults to one built from config)

    Returns:
        RuntimeConfig

    Raises:
        ConfigError: On any startup-fatal condition
    """
    if config.remote_config_enabled or fetcher is not None:
        if fetcher is None:
            fetcher = RemoteConfigFetcher(url=config.github_url, token=config.github_token)
        result = await fetcher.fetch(config.config_path)
        if not result.ok:
            raise ConfigError(
                f"Failed to pull config from {fetcher.url}: {result.output or 'no output'}"
            )
        logger.info("runtime.remote_config_pulled", url=fetcher.url)
    elif config.github_token or config.github_url:
        logger.warning(
            "runtime.remote_config_incomplete",
            message="GITHUB_TOKEN and GITHUB_URL must both be set to pull config; using local file",
        )

    secrets = SecretResolver(config).resolve()
    store = ConfigStore.load(config.config_path, config.config)

    runtime = RuntimeConfig(
        shared_token=secrets.token,
        credentials=secrets.credentials,
        orchestrator_command=config.docker,
        environment_selector=config.config,
        image_to_service=store.image_to_service,
        default_notification_options=store.default_notification_options,
        log_std_out=config.log_std_out,
        log_std_err=config.log_std_err,
    )

    logger.info(
        "runtime.config_loaded",
        environment=runtime.environment_selector,
        docker=runtime.orchestrator_command,
        images=len(runtime.image_to_service),
        registry_auth=runtime.require_registry_auth,
    )
    return runtime
