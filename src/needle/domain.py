"""Domain models used throughout the container."""

import enum
import inspect
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

__all__ = [
    "ServiceLifetime",
    "ServiceDescriptor",
    "ConstructorParameter",
    "Constructor",
    "type_name",
]


class ServiceLifetime(enum.Enum):
    """How long a resolved service instance lives."""

    SINGLETON = "singleton"
    """Created once and shared for the lifetime of the container."""

    TRANSIENT = "transient"
    """Created anew each time it is requested."""


@dataclass(frozen=True, eq=False)
class ServiceDescriptor:
    """Represents one service registration.

    Descriptors compare by identity, so registering the same pair twice yields
    two distinct bindings.

    Attributes:
        service_type: The type a consumer requests.
        implementation_type: The concrete class constructed to satisfy it. May be
            the same as ``service_type`` for self-registrations.
        lifetime: Whether the instance is shared or created per request.
        arguments: Values supplied at registration time, matched to constructor
            parameters by exact type and consumed at most once each.
    """

    service_type: type
    implementation_type: type
    lifetime: ServiceLifetime
    arguments: tuple[Any, ...] = field(default=())

    @property
    def is_self_registration(self) -> bool:
        return self.service_type is self.implementation_type


@dataclass(frozen=True)
class ConstructorParameter:
    """A single parameter of a constructor.

    Attributes:
        name: The parameter name in the constructor's signature.
        declared_type: The annotated type, with ``Optional[...]`` unwrapped, or
            None if the parameter is not annotated.
        kind: The :class:`inspect.Parameter` kind.
        default: The default value, or :attr:`inspect.Parameter.empty`.
    """

    name: str
    declared_type: Optional[type]
    kind: Any = inspect.Parameter.POSITIONAL_OR_KEYWORD
    default: Any = inspect.Parameter.empty

    @property
    def is_optional(self) -> bool:
        return self.default is not inspect.Parameter.empty

    @property
    def is_positional_only(self) -> bool:
        return self.kind is inspect.Parameter.POSITIONAL_ONLY


@dataclass(frozen=True)
class Constructor:
    """One entry in an implementation type's constructor table.

    Attributes:
        name: ``"__init__"`` or the name of the alternative constructor.
        factory: The callable invoked to create an instance.
        parameters: The injectable parameters, in declaration order.
    """

    name: str
    factory: Callable[..., Any]
    parameters: tuple[ConstructorParameter, ...]


def type_name(target: Any) -> str:
    """Readable name for a type token, for use in messages."""
    return getattr(target, "__qualname__", None) or repr(target)
