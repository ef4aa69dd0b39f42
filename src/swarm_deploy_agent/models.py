"""Value types shared by the resolver, the mapping store, the executor and the gateway."""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional

from pydantic import AliasChoices, BaseModel, Field


@dataclass(frozen=True, eq=False)
class ImageRef:
    """A pushed image, identified by repository name and tag."""

    repo_name: str
    tag: str

    @property
    def canonical(self) -> str:
        return f"{self.repo_name}:{self.tag}"

    @classmethod
    def parse(cls, reference: str) -> "ImageRef":
        """Parse a ``repo:tag`` string.

        The tag separator is the last ``:`` after the last ``/``, so a
        registry host with a port (``registry:5000/app:v1``) keeps its port
        in the repository name.

        Raises:
            ValueError: If the reference has no tag or no repository.
        """
        repo_name, sep, tag = reference.rpartition(":")
        if not sep or not repo_name or not tag or "/" in tag:
            raise ValueError(f"Image reference must be of the form repo:tag, got {reference!r}")
        return cls(repo_name=repo_name, tag=tag)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ImageRef):
            return NotImplemented
        return self.canonical == other.canonical

    def __hash__(self) -> int:
        return hash(self.canonical)

    def __str__(self) -> str:
        return self.canonical


@dataclass(frozen=True)
class ServiceTarget:
    """Swarm service to roll to a new image."""

    name: str

    def __str__(self) -> str:
        return self.name


class Stage(str, Enum):
    """Deployment attempt stage."""

    AUTHENTICATING = "authenticating"
    UPDATING = "updating"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class DeploymentAttempt:
    """One deployment triggered by one webhook call. Never persisted."""

    image: ImageRef
    target: ServiceTarget
    stage: Stage = Stage.AUTHENTICATING


@dataclass(frozen=True)
class RegistryCredentials:
    """Docker Hub credentials used for ``docker login``."""

    username: str = ""
    password: str = field(default="", repr=False)

    @property
    def complete(self) -> bool:
        return bool(self.username) and bool(self.password)


@dataclass(frozen=True)
class RuntimeConfig:
    """Validated configuration, built once at startup and never mutated."""

    shared_token: str = field(repr=False)
    credentials: RegistryCredentials
    orchestrator_command: str
    environment_selector: str
    image_to_service: Mapping[str, ServiceTarget]
    default_notification_options: Mapping[str, Any] = field(
        default_factory=lambda: MappingProxyType({})
    )
    log_std_out: bool = True
    log_std_err: bool = True

    def __post_init__(self):
        # Freeze the mappings so nothing can rewrite routing after startup
        object.__setattr__(self, "image_to_service", MappingProxyType(dict(self.image_to_service)))
        object.__setattr__(
            self,
            "default_notification_options",
            MappingProxyType(dict(self.default_notification_options)),
        )

    @property
    def require_registry_auth(self) -> bool:
        return self.credentials.complete

    def lookup(self, image: ImageRef) -> Optional[ServiceTarget]:
        """Return the service configured for ``image``, exact match only."""
        return self.image_to_service.get(image.canonical)


class Repository(BaseModel):
    """``repository`` block of a Docker Hub push notification."""

    repo_name: str = Field(min_length=1, validation_alias=AliasChoices("repo_name", "repoName"))


class PushData(BaseModel):
    """``push_data`` block of a Docker Hub push notification."""

    tag: str = Field(min_length=1)


class WebhookPayload(BaseModel):
    """Docker Hub push notification.

    Only the repository name and the pushed tag are read; every other
    field is ignored.
    """

    repository: Repository
    push_data: PushData = Field(validation_alias=AliasChoices("push_data", "pushData"))

    def image_ref(self) -> ImageRef:
        return ImageRef(repo_name=self.repository.repo_name, tag=self.push_data.tag)
