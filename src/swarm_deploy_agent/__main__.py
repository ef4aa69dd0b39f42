"""Main entry point for Swarm Deploy Agent."""

import asyncio
import sys

import structlog

from .agent import Agent
from .config import AgentConfig
from .errors import ConfigError
from .utils.logging import setup_logging

logger = structlog.get_logger()


def main():
    """Main entry point."""
    # Load configuration
    config = AgentConfig()

    # Setup logging
    setup_logging(config.log_level, config.log_format.value)

    # Create and start agent
    agent = Agent(config)

    try:
        asyncio.run(agent.start())
    except KeyboardInterrupt:
        print("\nAgent stopped by user")
        sys.exit(0)
    except ConfigError as e:
        logger.error("agent.config_error", error=str(e), message="Exiting...")
        sys.exit(1)
    except Exception as e:
        print(f"Agent failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
