"""Testing helpers for projects using the assessment registry."""

from .harness import (
    RegistryGraphQLTestClient,
    build_request,
    override_registry_settings,
)
from .memory_store import InMemoryEntityStore

__all__ = [
    "InMemoryEntityStore",
    "RegistryGraphQLTestClient",
    "build_request",
    "override_registry_settings",
]
