"""Swarm Deploy Agent: Docker Hub webhooks to Docker Swarm service updates."""

__version__ = "1.0.0"
