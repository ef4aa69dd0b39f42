"""Main agent implementation."""

from typing import Optional

import structlog
import uvicorn

from .client.remote_config import RemoteConfigFetcher
from .config import AgentConfig
from .executor.swarm import SwarmExecutor
from .gateway import create_app
from .models import RuntimeConfig
from .runtime import load_runtime_config

logger = structlog.get_logger()


class Agent:
    """Webhook-driven Docker Swarm deployment agent."""

    def __init__(self, config: AgentConfig, fetcher: Optional[RemoteConfigFetcher] = None):
        """Initialize agent.

        Args:
            config: Agent configuration
            fetcher: Remote config fetcher override
        """
        self.config = config
        self.fetcher = fetcher
        self.runtime: Optional[RuntimeConfig] = None
        self.executor: Optional[SwarmExecutor] = None
        self.app = None

    async def setup(self):
        """Resolve the runtime configuration and build the app.

        Raises:
            ConfigError: If the agent must not start
        """
        self.runtime = await load_runtime_config(self.config, fetcher=self.fetcher)
        self.executor = SwarmExecutor(
            docker_command=self.runtime.orchestrator_command,
            log_std_out=self.runtime.log_std_out,
            log_std_err=self.runtime.log_std_err,
        )
        self.app = create_app(self.runtime, self.executor)

    async def start(self):
        """Resolve configuration, then serve webhooks until stopped."""
        logger.info("agent.starting")
        await self.setup()

        server = uvicorn.Server(
            uvicorn.Config(
                self.app,
                host=self.config.host,
                port=self.config.port,
                log_config=None,
            )
        )

        logger.info(
            "agent.listening",
            url=f"http://{self.config.host}:{self.config.port}/webhook/<token>",
            environment=self.runtime.environment_selector,
        )
        await server.serve()
        logger.info("agent.stopped")
