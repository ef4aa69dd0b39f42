"""Image to service mapping loaded from the JSON mapping document."""

import json
from typing import Any, Dict, Mapping, Optional

import structlog

from .errors import ConfigError
from .models import ImageRef, ServiceTarget

logger = structlog.get_logger()

NOTIFICATION_OPTIONS_KEY = "defaultNotificationOptions"


class ConfigStore:
    """Routing table for one environment block of the mapping document.

    Document layout::

        {
          "production": {
            "defaultNotificationOptions": {...},
            "myorg/app:latest": {"service": "myorg_app_service"}
          }
        }
    """

    def __init__(
        self,
        environment: str,
        image_to_service: Mapping[str, ServiceTarget],
        default_notification_options: Optional[Mapping[str, Any]] = None,
    ):
        self.environment = environment
        self.image_to_service: Dict[str, ServiceTarget] = dict(image_to_service)
        self.default_notification_options: Dict[str, Any] = dict(
            default_notification_options or {}
        )

    @classmethod
    def load(cls, path: str, environment: str) -> "ConfigStore":
        """Read the document at ``path`` and select ``environment``.

        Raises:
            ConfigError: If the document is unreadable, invalid, or has no
                usable block for ``environment``
        """
        try:
            with open(path, encoding="utf-8") as f:
                document = json.load(f)
        except OSError as e:
            raise ConfigError(f"Error reading mapping document {path}: {e}") from e
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ConfigError(f"Error parsing mapping document {path}: {e}") from e

        store = cls.from_document(document, environment)
        logger.info(
            "mapping.loaded",
            path=path,
            environment=environment,
            images=sorted(store.image_to_service),
        )
        return store

    @classmethod
    def from_document(cls, document: Any, environment: str) -> "ConfigStore":
        """Build the store from an already parsed document."""
        if not isinstance(document, dict):
            raise ConfigError("Mapping document must be a JSON object keyed by environment name")

        block = document.get(environment)
        if block is None:
            available = ", ".join(sorted(document)) or "none"
            raise ConfigError(
                f"Environment {environment!r} is not configured in the mapping document "
                f"(available: {available})"
            )
        if not isinstance(block, dict):
            raise ConfigError(f"Environment {environment!r} must be a JSON object")

        options = block.get(NOTIFICATION_OPTIONS_KEY) or {}
        if not isinstance(options, dict):
            raise ConfigError(f"{NOTIFICATION_OPTIONS_KEY} in {environment!r} must be a JSON object")

        image_to_service = {}
        for key, entry in block.items():
            if key == NOTIFICATION_OPTIONS_KEY:
                continue
            try:
                image = ImageRef.parse(key)
            except ValueError as e:
                raise ConfigError(f"Invalid image key in {environment!r}: {e}") from e
            image_to_service[image.canonical] = ServiceTarget(_service_name(environment, key, entry))

        return cls(environment, image_to_service, options)

    def lookup(self, image: ImageRef) -> Optional[ServiceTarget]:
        """Return the service for ``image`` or None when it is not configured."""
        return self.image_to_service.get(image.canonical)


def _service_name(environment: str, key: str, entry: Any) -> str:
    if isinstance(entry, dict):
        entry = entry.get("service")
    if not isinstance(entry, str) or not entry.strip():
        raise ConfigError(
            f"Image {key!r} in {environment!r} must map to a non-empty \"service\" name"
        )
    return entry.strip()
