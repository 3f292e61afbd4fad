"""
Dependency Injection Container.

Provides service registration, lazy construction and dependency
resolution. There is no process-wide container: callers build one with
:func:`build_container` and pass it (or the services it hands out) to
whatever needs them.

Usage:
    container = build_container()
    habits = container.get("habit_service")

    # Tests can swap a service before first access
    container.register_instance("database", Database("sqlite://"))
"""

import logging
from typing import Any, Callable, Dict, Optional, Union

from .config import Settings, get_settings
from .database import Database, init_database
from .defaults_loader import get_cache_setting

logger = logging.getLogger(__name__)

# Factory type: either a class or a callable that takes the container
Factory = Union[type, Callable[["ServiceContainer"], Any]]


class ServiceContainer:
    """
    Dependency injection container for managing service lifecycles.

    Features:
    - Lazy initialization (services created on first access)
    - Singleton by default (or transient per-request)
    - Dependency injection via factory functions
    - Easy testing via service overrides
    """

    def __init__(self):
        self._factories: Dict[str, Factory] = {}
        self._instances: Dict[str, Any] = {}
        self._singleton_flags: Dict[str, bool] = {}

    def register(self, name: str, factory: Factory, singleton: bool = True) -> None:
        """
        Register a service factory.

        Args:
            name: Service name/key
            factory: Class or callable that creates the service.
                     If callable, receives the container as argument.
            singleton: If True (default), cache the instance.
        """
        self._factories[name] = factory
        self._singleton_flags[name] = singleton
        # Clear any cached instance if overriding
        self._instances.pop(name, None)
        logger.debug(f"Registered service: {name} (singleton={singleton})")

    def register_instance(self, name: str, instance: Any) -> None:
        """Register a pre-existing instance."""
        self._instances[name] = instance
        self._singleton_flags[name] = True
        logger.debug(f"Registered instance: {name}")

    def get(self, name: str) -> Any:
        """
        Get a service by name.

        Raises:
            KeyError: If service is not registered
        """
        if name in self._instances and self._singleton_flags.get(name, True):
            return self._instances[name]

        if name not in self._factories:
            raise KeyError(f"Service '{name}' is not registered")

        factory = self._factories[name]
        if callable(factory) and not isinstance(factory, type):
            instance = factory(self)
        else:
            instance = factory()

        if self._singleton_flags.get(name, True):
            self._instances[name] = instance
            logger.debug(f"Created singleton instance: {name}")
        else:
            logger.debug(f"Created transient instance: {name}")
        return instance


def build_container(
    settings: Optional[Settings] = None, database: Optional[Database] = None
) -> ServiceContainer:
    """Wire the event bus, cache and services for one store.

    The derived-state cache is subscribed to the bus as soon as either
    is first requested, so every mutation published through the bus
    keeps cached day views fresh.
    """
    from ..domain.events import EventBus
    from ..services.day_view import DayViewService
    from ..services.derived_cache import CacheInvalidator, DerivedStateCache
    from ..services.habit_service import HabitService
    from ..services.organization_service import CategoryService, HabitListService
    from ..services.preferences import PreferenceStore
    from ..services.statistics_service import StatisticsService
    from ..services.toggle_service import HabitToggleService

    settings = settings or get_settings()
    container = ServiceContainer()
    container.register_instance("settings", settings)

    if database is not None:
        container.register_instance("database", database)
    else:
        container.register(
            "database", lambda c: init_database(settings.database_url, echo=settings.database_echo)
        )

    container.register("event_bus", EventBus)

    def _cache(c: ServiceContainer) -> DerivedStateCache:
        cache = DerivedStateCache(max_entries=get_cache_setting("max_entries", 256))
        CacheInvalidator(cache).register(c.get("event_bus"))
        return cache

    container.register("derived_cache", _cache)

    tz = settings.timezone

    def _bus(c: ServiceContainer):
        # Resolve the cache first so it is listening before any publish
        c.get("derived_cache")
        return c.get("event_bus")

    container.register(
        "habit_service", lambda c: HabitService(c.get("database"), _bus(c), timezone=tz)
    )
    container.register(
        "toggle_service",
        lambda c: HabitToggleService(
            c.get("database"),
            _bus(c),
            timezone=tz,
            every_day_lookback=c.get("statistics_service").every_day_lookback,
            pattern_lookback=c.get("statistics_service").pattern_lookback,
        ),
    )
    container.register(
        "statistics_service",
        lambda c: StatisticsService(
            c.get("database"), timezone=tz, horizon_days=settings.next_occurrence_horizon_days
        ),
    )
    container.register(
        "day_view",
        lambda c: DayViewService(
            c.get("database"), c.get("derived_cache"), c.get("statistics_service")
        ),
    )
    container.register("list_service", lambda c: HabitListService(c.get("database"), _bus(c)))
    container.register("category_service", lambda c: CategoryService(c.get("database"), _bus(c)))
    container.register("preferences", lambda c: PreferenceStore(c.get("database"), _bus(c)))
    return container
