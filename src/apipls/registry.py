"""The set of compiled resource definitions served by one application."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from apipls.resource_definition import ResourceDefinition, generate_definitions
from apipls.resource_model import load_resource_models, normalize_resource_model

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResourceRegistry:
    """Immutable, versioned collection of resource definitions.

    Built once at startup and handed to the routers and handlers that need
    it; nothing mutates it afterwards.
    """

    api_version: int
    definitions: tuple[ResourceDefinition, ...]

    @classmethod
    def from_models(cls, models: list[dict[str, Any]], api_version: int) -> ResourceRegistry:
        """Normalize and compile hand-written resource models.

        Raises:
            ConfigurationError: If any model is invalid.
        """
        normalized = [normalize_resource_model(model) for model in models]
        return cls(api_version=api_version, definitions=tuple(generate_definitions(normalized)))

    @classmethod
    def from_directory(cls, directory: str | Path, api_version: int) -> ResourceRegistry:
        logger.info("Loading resources from the resources directory %s.", directory)
        registry = cls.from_models(load_resource_models(directory), api_version)
        logger.info(
            "Successfully loaded %d resource(s) from %s.", len(registry.definitions), directory
        )
        return registry

    @property
    def root(self) -> str:
        return f"/v{self.api_version}"

    def location(self, definition: ResourceDefinition) -> str:
        """Collection URL of a resource, e.g. ``/v1/people``."""
        return f"{self.root}/{definition.plural_form}"

    def index(self) -> dict[str, Any]:
        """The versioned root document listing every resource and its actions."""
        return {
            "jsonapi": {"version": "1.0", "meta": {"extensions": []}},
            "meta": {"api_version": str(self.api_version)},
            "links": {
                definition.plural_form: {
                    "href": self.location(definition),
                    "meta": {"supported_actions": definition.actions.enabled()},
                }
                for definition in self.definitions
            },
        }
