"""Registration and introspection of service descriptors."""

import inspect
import logging
from typing import Any, Iterable, Optional, Sequence, TypeVar

from needle.domain import ServiceDescriptor, ServiceLifetime, type_name

__all__ = [
    "ServiceDescriptor",
    "ServiceLifetime",
    "ServiceRegistry",
]

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R", bound="ServiceRegistry")


class ServiceRegistry:
    """Ordered registry of service descriptors, with a fluent registration API.

    Registrations are append-only. Several descriptors may share a service type;
    the most recent one is used when a single instance is requested.

    Example:
        >>> registry = (
        ...     ServiceRegistry()
        ...     .add_singleton(Logger)
        ...     .add_transient(Repository, SqlRepository, args=("sqlite://",))
        ... )
        >>> registry.get_service_types(Repository)
        [<class 'SqlRepository'>]
    """

    def __init__(self):
        self._descriptors: list[ServiceDescriptor] = []

    def register(self: R, descriptor: ServiceDescriptor) -> R:
        """Register a descriptor explicitly.

        Args:
            descriptor: The ServiceDescriptor to append.

        Returns:
            This registry, to allow chained registration.

        Raises:
            TypeError: If the implementation type is not a class.
        """
        if not inspect.isclass(descriptor.implementation_type):
            raise TypeError(f"{descriptor.implementation_type!r} is not a class")

        self._descriptors.append(descriptor)
        logger.debug(
            "Registered %s service %s -> %s",
            descriptor.lifetime.value,
            type_name(descriptor.service_type),
            type_name(descriptor.implementation_type),
        )
        return self

    def add_singleton(
        self: R,
        service_type: type[T],
        implementation_type: Optional[type[T]] = None,
        *,
        args: Iterable[Any] = (),
    ) -> R:
        """Register a service created once and shared for the container's lifetime.

        Args:
            service_type: The type consumers request.
            implementation_type: The class to construct. Defaults to
                ``service_type`` itself.
            args: Values passed to the constructor, matched to parameters by
                exact type, in order of appearance for parameters of the same type.

        Returns:
            This registry, to allow chained registration.
        """
        return self._add(ServiceLifetime.SINGLETON, service_type, implementation_type, args)

    def add_transient(
        self: R,
        service_type: type[T],
        implementation_type: Optional[type[T]] = None,
        *,
        args: Iterable[Any] = (),
    ) -> R:
        """Register a service created anew on every request.

        Takes the same arguments as :meth:`add_singleton`.
        """
        return self._add(ServiceLifetime.TRANSIENT, service_type, implementation_type, args)

    def _add(self, lifetime, service_type, implementation_type, args):
        return self.register(
            ServiceDescriptor(
                service_type,
                implementation_type if implementation_type is not None else service_type,
                lifetime,
                tuple(args),
            )
        )

    @property
    def descriptors(self) -> Sequence[ServiceDescriptor]:
        """All registered descriptors, in registration order."""
        return tuple(self._descriptors)

    def descriptors_for(self, service_type: type) -> list[ServiceDescriptor]:
        """Retrieve the descriptors registered under ``service_type``, in order."""
        return [d for d in self._descriptors if d.service_type is service_type]

    def get_service_types(self, service_type: type) -> list[type]:
        """Get all implementation types registered for a service type.

        No instances are created.
        """
        return [d.implementation_type for d in self.descriptors_for(service_type)]

    def find_descriptor(self, requested_type: Any) -> Optional[ServiceDescriptor]:
        """Find the descriptor used to resolve a single instance of ``requested_type``.

        The most recent registration under ``requested_type`` wins. If there is
        none, the most recent registration whose implementation type is
        ``requested_type`` is used, so a class registered against an interface
        can also be requested directly.

        Returns:
            The matching descriptor, or None if the type is not registered.
        """
        by_implementation = None
        for descriptor in reversed(self._descriptors):
            if descriptor.service_type is requested_type:
                return descriptor
            if by_implementation is None and descriptor.implementation_type is requested_type:
                by_implementation = descriptor
        return by_implementation

    def is_registered(self, requested_type: Any) -> bool:
        return self.find_descriptor(requested_type) is not None

    def __len__(self) -> int:
        return len(self._descriptors)
