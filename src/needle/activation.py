"""Binding constructor parameters and creating instances.

The :class:`InstanceBuilder` takes a chosen constructor and produces an
instance, drawing each parameter from (in order of preference) the arguments
supplied at registration, a registered service, or the parameter's default.
"""

import logging
from typing import Any, Callable, Iterable

from needle.domain import Constructor, ConstructorParameter, type_name
from needle.errors import InstantiationFailed, UnresolvableParameter
from needle.registry import ServiceRegistry

__all__ = ["ArgumentPool", "InstanceBuilder", "MISSING"]

logger = logging.getLogger(__name__)


class _Missing:
    def __repr__(self):
        return "MISSING"


MISSING: Any = _Missing()
"""Returned by :meth:`ArgumentPool.take` when no argument matches."""


class ArgumentPool:
    """The supplied arguments still available to an instantiation.

    Values are matched by exact type and removed once taken, so that two
    parameters of the same type receive distinct values in supplied order.
    """

    def __init__(self, arguments: Iterable[Any]):
        self._remaining = list(arguments)

    def take(self, declared_type: Any) -> Any:
        if declared_type is None:
            return MISSING
        for index, value in enumerate(self._remaining):
            if type(value) is declared_type:
                return self._remaining.pop(index)
        return MISSING

    def __len__(self) -> int:
        return len(self._remaining)


class InstanceBuilder:
    """Build instances of implementation types from a chosen constructor."""

    def __init__(self, registry: ServiceRegistry):
        self._registry = registry

    def build(
        self,
        implementation_type: type,
        constructor: Constructor,
        arguments: Iterable[Any],
        resolve: Callable[[type], Any],
    ) -> Any:
        """Bind every parameter of ``constructor`` and invoke it.

        Args:
            implementation_type: The class being instantiated, for error reporting.
            constructor: The constructor to invoke.
            arguments: Values supplied at registration time.
            resolve: Callback used to resolve a registered dependency. Errors it
                raises propagate unchanged.

        Returns:
            The new instance.

        Raises:
            UnresolvableParameter: If a parameter cannot be satisfied.
            InstantiationFailed: If the constructor raises or returns None.
        """
        pool = ArgumentPool(arguments)
        positional: list[Any] = []
        keywords: dict[str, Any] = {}

        for parameter in constructor.parameters:
            value = self._bind(implementation_type, parameter, pool, resolve)
            if parameter.is_positional_only:
                positional.append(value)
            else:
                keywords[parameter.name] = value

        try:
            instance = constructor.factory(*positional, **keywords)
        except Exception as exc:
            raise InstantiationFailed(implementation_type, constructor.name, str(exc)) from exc

        if instance is None:
            raise InstantiationFailed(implementation_type, constructor.name, "no instance returned")

        logger.debug("Created %s using %s", type_name(implementation_type), constructor.name)
        return instance

    def _bind(
        self,
        implementation_type: type,
        parameter: ConstructorParameter,
        pool: ArgumentPool,
        resolve: Callable[[type], Any],
    ) -> Any:
        value = pool.take(parameter.declared_type)
        if value is not MISSING:
            return value

        if parameter.declared_type is not None and self._registry.is_registered(
            parameter.declared_type
        ):
            return resolve(parameter.declared_type)

        if parameter.is_optional:
            return parameter.default

        raise UnresolvableParameter(implementation_type, parameter)
