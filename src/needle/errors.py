"""Exceptions raised while registering and resolving services.

Every error derives from :class:`DependencyError`, so callers that treat
resolution as all-or-nothing can catch a single type.
"""

from typing import Any, Optional

from needle.domain import type_name

__all__ = [
    "DependencyError",
    "NotRegistered",
    "NotConstructible",
    "NoSuitableConstructor",
    "UnresolvableParameter",
    "InstantiationFailed",
    "AmbiguousConstructor",
    "CyclicDependency",
]


class DependencyError(Exception):
    """Raised when a service's dependency cannot be resolved or constructed."""

    pass


class NotRegistered(DependencyError, LookupError):
    """Raised when no descriptor exists for the requested type."""

    def __init__(self, requested_type: Any):
        super().__init__(f"Service of type {type_name(requested_type)} is not registered")
        self.requested_type = requested_type


class NotConstructible(DependencyError):
    """Raised when an implementation type exposes no usable constructor."""

    def __init__(self, implementation_type: type, reason: str = "it has no usable constructor"):
        super().__init__(f"Cannot construct {type_name(implementation_type)}: {reason}")
        self.implementation_type = implementation_type


class UnresolvableParameter(DependencyError):
    """Raised when a constructor parameter has no argument, service or default."""

    def __init__(self, implementation_type: type, parameter: Any):
        declared = (
            type_name(parameter.declared_type)
            if parameter.declared_type is not None
            else "<unannotated>"
        )
        super().__init__(
            f"Cannot resolve parameter '{parameter.name}' of type {declared} "
            f"for service {type_name(implementation_type)}"
        )
        self.implementation_type = implementation_type
        self.parameter = parameter


class NoSuitableConstructor(DependencyError):
    """Raised when none of an implementation's constructors can be satisfied.

    Attributes:
        rejections: One :class:`UnresolvableParameter` per rejected candidate,
            in declaration order.
    """

    def __init__(
        self,
        implementation_type: type,
        rejections: Optional[list[UnresolvableParameter]] = None,
    ):
        self.implementation_type = implementation_type
        self.rejections = list(rejections or [])
        details = "; ".join(str(rejection) for rejection in self.rejections)
        message = (
            f"Cannot create service of type {type_name(implementation_type)}. "
            "No suitable constructor found."
        )
        super().__init__(f"{message} ({details})" if details else message)


class InstantiationFailed(DependencyError):
    """Raised when invoking a constructor fails or produces no instance."""

    def __init__(self, implementation_type: type, constructor_name: str, reason: str):
        super().__init__(
            f"Could not create instance of type {type_name(implementation_type)} "
            f"using {constructor_name}: {reason}"
        )
        self.implementation_type = implementation_type
        self.constructor_name = constructor_name


class AmbiguousConstructor(DependencyError):
    """Raised when several constructors exist and none was chosen."""

    def __init__(self, implementation_type: type, constructor_names: list[str]):
        super().__init__(
            f"Multiple constructors found for type {type_name(implementation_type)}: "
            f"{constructor_names}. Please provide a specific constructor."
        )
        self.implementation_type = implementation_type
        self.constructor_names = constructor_names


class CyclicDependency(DependencyError):
    """Raised when a service is requested again while it is being resolved.

    Attributes:
        path: The service types on the resolution path, ending with the type
            that closed the cycle.
    """

    def __init__(self, path: list[type]):
        super().__init__(
            "Cyclic dependency detected: " + " -> ".join(type_name(t) for t in path)
        )
        self.path = path
