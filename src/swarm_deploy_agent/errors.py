"""Agent exceptions."""


class AgentError(Exception):
    """Base error for the deploy agent."""

    pass


class ConfigError(AgentError):
    """Startup configuration could not be resolved.

    The agent must not serve webhooks when this is raised.
    """

    pass
