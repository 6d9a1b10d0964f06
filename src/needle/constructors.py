"""Constructor tables for implementation types.

Each implementation type is introspected once to produce an ordered table of
:class:`~needle.domain.Constructor` entries: the class's ``__init__`` followed by
any classmethods marked with :func:`constructor`. Resolution then works purely
from this table, without further reflection.

Example:
    >>> class Worker:
    ...     def __init__(self, logger: Logger):
    ...         ...
    ...
    ...     @constructor
    ...     def with_cache(cls, logger: Logger, cache: Cache) -> "Worker":
    ...         ...
    >>> [c.name for c in constructors_of(Worker)]
    ['__init__', 'with_cache']
"""

import functools
import inspect
import sys
import types
from typing import Annotated, Any, Callable, Optional, Union, get_args, get_origin, get_type_hints

from needle.domain import Constructor, ConstructorParameter
from needle.errors import NotConstructible

__all__ = ["constructor", "constructors_of", "is_constructible"]

_MARKER = "__needle_constructor__"

_VARIADIC_KINDS = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)


def constructor(func: Union[Callable, classmethod]) -> classmethod:
    """Mark a method as an alternative constructor.

    The decorated function receives the class as its first argument, like any
    classmethod, and must return an instance. Applying ``@classmethod`` as
    well is allowed but not required.

    Example:
        @constructor
        def from_settings(cls, settings: Settings) -> "Database":
            return cls(settings.url)
    """
    func = func.__func__ if isinstance(func, classmethod) else func
    setattr(func, _MARKER, True)
    return classmethod(func)


def is_constructible(cls: type) -> bool:
    """Abstract classes and protocols cannot be instantiated directly."""
    return not (inspect.isabstract(cls) or getattr(cls, "_is_protocol", False))


@functools.lru_cache(maxsize=None)
def constructors_of(cls: type) -> tuple[Constructor, ...]:
    """Build the constructor table for ``cls``.

    Candidates are listed in declaration order: ``__init__`` first, then
    alternative constructors in class-body order, with those declared on
    subclasses ahead of inherited ones.

    Args:
        cls: The implementation type to inspect.

    Returns:
        A tuple of constructors, empty if the class cannot be instantiated.

    Raises:
        NotConstructible: If a constructor's signature or annotations cannot be
            resolved.
    """
    if not is_constructible(cls):
        return ()

    table = [_init_constructor(cls)]
    seen: set[str] = set()
    for klass in cls.__mro__:
        if klass is object:
            continue
        for name, value in vars(klass).items():
            if name in seen:
                continue
            seen.add(name)
            if isinstance(value, classmethod) and getattr(value.__func__, _MARKER, False):
                table.append(_alternative_constructor(cls, klass, name, value.__func__))

    return tuple(table)


def _init_constructor(cls: type) -> Constructor:
    try:
        signature = inspect.signature(cls)
    except (TypeError, ValueError) as exc:
        raise NotConstructible(cls, f"cannot read the signature of __init__: {exc}") from exc

    initialiser = cls.__init__ if cls.__init__ is not object.__init__ else cls.__new__
    hints = _type_hints(initialiser, cls) if signature.parameters else {}
    return Constructor("__init__", cls, _parameters(signature, hints))


def _alternative_constructor(cls: type, owner: type, name: str, func: Callable) -> Constructor:
    factory = getattr(cls, name)
    try:
        signature = inspect.signature(factory)
    except (TypeError, ValueError) as exc:
        raise NotConstructible(cls, f"cannot read the signature of {name}: {exc}") from exc
    return Constructor(name, factory, _parameters(signature, _type_hints(func, owner)))


def _type_hints(func: Callable, owner: type) -> dict[str, Any]:
    """Resolve annotations against the module that declared ``func``.

    Postponed (string) annotations are evaluated there, with the owning class
    itself in scope so that constructors may refer to it.
    """
    module = sys.modules.get(getattr(func, "__module__", None) or owner.__module__)
    globalns = vars(module) if module is not None else None
    try:
        return get_type_hints(
            func, globalns=globalns, localns={owner.__name__: owner}, include_extras=True
        )
    except (NameError, TypeError) as exc:
        raise NotConstructible(
            owner, f"cannot resolve annotations of {getattr(func, '__qualname__', func)}: {exc}"
        ) from exc


def _parameters(
    signature: inspect.Signature, hints: dict[str, Any]
) -> tuple[ConstructorParameter, ...]:
    return tuple(
        ConstructorParameter(
            name,
            _declared_type(hints.get(name)),
            parameter.kind,
            parameter.default,
        )
        for name, parameter in signature.parameters.items()
        if parameter.kind not in _VARIADIC_KINDS
    )


def _declared_type(annotation: Any) -> Optional[Any]:
    """Reduce an annotation to the type token used for lookup.

    ``Annotated[X, ...]`` becomes ``X`` and ``Optional[X]`` (or ``X | None``)
    becomes ``X``. Other unions are left as they are and will only match a
    registration made under that exact union.
    """
    if annotation is None:
        return None

    if get_origin(annotation) is Annotated:
        annotation = get_args(annotation)[0]

    if get_origin(annotation) in (Union, types.UnionType):
        members = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(members) == 1:
            return members[0]

    return annotation
