"""
Dependency injection container using dependency-injector.
Wires the process-wide services and controllers; request-scoped ones are
built per request from the session returned by get_db.
"""

from dependency_injector import containers, providers

from okr_backend.services.health_service import HealthService
from okr_backend.controllers.health_controller import HealthController


class Container(containers.DeclarativeContainer):
    """Dependency injection container."""

    # Configuration
    config = providers.Configuration()

    # Services
    health_service = providers.Singleton(
        HealthService,
    )

    # Controllers
    health_controller = providers.Factory(
        HealthController,
        health_service=health_service,
    )


# Global container instance
_container: Container = None


def get_container() -> Container:
    """Get the global dependency injection container."""
    global _container
    if _container is None:
        _container = Container()
    return _container


def set_container(container: Container) -> None:
    global _container
    _container = container
