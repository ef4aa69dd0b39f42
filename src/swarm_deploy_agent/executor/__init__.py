"""Deployment executors."""

from .base import BaseExecutor, DeploymentResult
from .swarm import SwarmExecutor

__all__ = ["BaseExecutor", "DeploymentResult", "SwarmExecutor"]
