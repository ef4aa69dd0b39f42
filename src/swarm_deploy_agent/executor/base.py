"""Base executor interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from ..models import ImageRef, RegistryCredentials, ServiceTarget, Stage


@dataclass
class DeploymentResult:
    """Result of a deployment attempt."""

    status: str  # "success" or "failed"
    stage: Stage
    message: Optional[str] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status == "success"


class BaseExecutor(ABC):
    """Base class for deployment executors."""

    @abstractmethod
    async def deploy(
        self,
        image: ImageRef,
        target: ServiceTarget,
        require_auth: bool,
        credentials: RegistryCredentials,
    ) -> DeploymentResult:
        """Roll ``target`` to ``image``.

        Args:
            image: Image to deploy
            target: Service to update
            require_auth: Log in to the registry before updating
            credentials: Registry credentials used when require_auth is set

        Returns:
            DeploymentResult
        """
        pass
