"""The service container: registration plus on-demand resolution.

Resolution of a requested type proceeds as follows:

1. The descriptor is looked up in the registry (the most recent registration
   wins).
2. A constructor is chosen greedily from the implementation's constructor table.
3. Each parameter is bound to a supplied argument, a recursively resolved
   service or its default, and the constructor is invoked.
4. Singleton instances are cached for the container's lifetime; transient
   instances are never cached.

The chain of descriptors being resolved is passed down through every recursive
call, so a service that depends on itself, directly or indirectly, fails with
:class:`~needle.errors.CyclicDependency` rather than recursing without bound.
"""

import logging
import threading
from typing import Any, Optional, TypeVar

from needle.activation import MISSING, InstanceBuilder
from needle.constructors import constructors_of
from needle.domain import ServiceDescriptor, ServiceLifetime, type_name
from needle.errors import AmbiguousConstructor, CyclicDependency, NotConstructible, NotRegistered
from needle.registry import ServiceRegistry
from needle.selection import ConstructorSelector

__all__ = ["ServiceContainer"]

logger = logging.getLogger(__name__)

T = TypeVar("T")

_ResolutionPath = tuple[ServiceDescriptor, ...]


class ServiceContainer(ServiceRegistry):
    """Container for managing service registrations and resolutions.

    Registration is expected to complete on a single thread before services
    are resolved. Resolution is then safe from any number of threads: each
    singleton is constructed at most once.

    Example:
        >>> container = (
        ...     ServiceContainer()
        ...     .add_singleton(Logger)
        ...     .add_transient(Worker)
        ... )
        >>> worker = container.get_service(Worker)
        >>> worker.logger is container.get_service(Logger)
        True
    """

    def __init__(self):
        super().__init__()
        self._singletons: dict[ServiceDescriptor, Any] = {}
        self._singleton_lock = threading.RLock()
        self._selector = ConstructorSelector(self)
        self._builder = InstanceBuilder(self)

    def get_service(self, service_type: type[T]) -> T:
        """Resolve and return an instance of the requested service type.

        Args:
            service_type: The registered service type, or the implementation type
                of a registration.

        Returns:
            The resolved instance.

        Raises:
            DependencyError: If the service, or any of its dependencies, is not
                registered or cannot be constructed.
        """
        return self._resolve(service_type, ())

    def get_services(self, service_type: type[T]) -> list[T]:
        """Resolve every registration for ``service_type``, in registration order."""
        return [
            self._resolve_descriptor(descriptor, ())
            for descriptor in self.descriptors_for(service_type)
        ]

    def instantiate(
        self, implementation_type: type[T], *args: Any, constructor: Optional[str] = None
    ) -> T:
        """Create an instance of a class that need not be registered.

        Parameters are satisfied from ``args`` (by exact type), the container's
        services and defaults. The result is never cached.

        Args:
            implementation_type: The class to instantiate.
            *args: Values to pass to the constructor, matched by exact type.
            constructor: The name of the constructor to use. Required when the
                class has more than one.

        Raises:
            NotConstructible: If the class has no constructor, or none with the
                given name.
            AmbiguousConstructor: If the class has several constructors and
                ``constructor`` is not given.
        """
        table = constructors_of(implementation_type)
        if not table:
            raise NotConstructible(implementation_type)

        if constructor is not None:
            chosen = next((c for c in table if c.name == constructor), None)
            if chosen is None:
                raise NotConstructible(
                    implementation_type, f"it has no constructor named {constructor!r}"
                )
        elif len(table) == 1:
            chosen = table[0]
        else:
            raise AmbiguousConstructor(implementation_type, [c.name for c in table])

        return self._builder.build(
            implementation_type, chosen, args, lambda dependency: self._resolve(dependency, ())
        )

    def _resolve(self, requested_type: Any, path: _ResolutionPath) -> Any:
        descriptor = self.find_descriptor(requested_type)
        if descriptor is None:
            raise NotRegistered(requested_type)
        return self._resolve_descriptor(descriptor, path)

    def _resolve_descriptor(self, descriptor: ServiceDescriptor, path: _ResolutionPath) -> Any:
        if descriptor in path:
            cycle = path[path.index(descriptor):] + (descriptor,)
            raise CyclicDependency([d.service_type for d in cycle])
        path = path + (descriptor,)

        if descriptor.lifetime is ServiceLifetime.TRANSIENT:
            return self._create(descriptor, path)

        instance = self._singletons.get(descriptor, MISSING)
        if instance is not MISSING:
            return instance

        with self._singleton_lock:
            instance = self._singletons.get(descriptor, MISSING)
            if instance is MISSING:
                instance = self._create(descriptor, path)
                self._singletons[descriptor] = instance
                logger.debug(
                    "Cached singleton %s for %s",
                    type_name(descriptor.implementation_type),
                    type_name(descriptor.service_type),
                )
            return instance

    def _create(self, descriptor: ServiceDescriptor, path: _ResolutionPath) -> Any:
        choice = self._selector.select(descriptor)
        return self._builder.build(
            descriptor.implementation_type,
            choice.constructor,
            descriptor.arguments,
            lambda dependency: self._resolve(dependency, path),
        )
