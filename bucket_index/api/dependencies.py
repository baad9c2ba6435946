"""FastAPI dependency providers."""
from fastapi import Depends, Request

from bucket_index.services.path_resolver import PathResolver
from bucket_index.services.registry import ServiceRegistry


def get_service_registry(request: Request) -> ServiceRegistry:
    """Return the service registry stored on the FastAPI application state."""

    registry = getattr(request.app.state, "services", None)
    if not isinstance(registry, ServiceRegistry):
        raise RuntimeError("Service registry not initialised")
    return registry


def get_path_resolver(registry: ServiceRegistry = Depends(get_service_registry)) -> PathResolver:
    return registry.path_resolver
