import abc
import inspect
from dataclasses import dataclass
from typing import Annotated, Optional, Protocol

import pytest

from needle.constructors import constructor, constructors_of
from needle.errors import NotConstructible


class Logger:
    pass


class Cache:
    pass


class Worker:
    def __init__(self, logger: Logger, cache: Optional[Cache] = None):
        self.logger = logger
        self.cache = cache

    @constructor
    def cached(cls, logger: Logger, cache: Cache) -> "Worker":
        return cls(logger, cache)

    @classmethod
    def plain_factory(cls) -> "Worker":
        return cls(Logger())


class NightShiftWorker(Worker):
    @constructor
    @classmethod
    def overnight(cls, logger: Logger) -> "NightShiftWorker":
        return cls(logger)


class Plain:
    pass


class Variadic:
    def __init__(self, logger: Logger, *args, **kwargs):
        self.logger = logger


class PositionalOnly:
    def __init__(self, logger: Logger, /, name="worker"):
        self.logger = logger
        self.name = name


class Untyped:
    def __init__(self, anything, count: int = 3):
        self.anything = anything


class Qualified:
    def __init__(self, logger: Annotated[Logger, "audit"], cache: Cache | None = None):
        self.logger = logger


class SelfReferencing:
    def __init__(self, parent: Optional["SelfReferencing"] = None):
        self.parent = parent


class Broken:
    def __init__(self, thing: "DoesNotExist"):  # noqa: F821
        self.thing = thing


class Shape(abc.ABC):
    @abc.abstractmethod
    def area(self) -> float:
        pass


class Greeter(Protocol):
    def greet(self) -> str:
        ...


@dataclass
class Settings:
    logger: Logger
    retries: int = 3


def test_init_comes_first_then_marked_classmethods():
    table = constructors_of(Worker)

    assert [c.name for c in table] == ["__init__", "cached"]
    assert table[0].factory is Worker


def test_parameters_are_described_in_declaration_order():
    logger, cache = constructors_of(Worker)[0].parameters

    assert (logger.name, logger.declared_type, logger.is_optional) == ("logger", Logger, False)
    assert (cache.name, cache.declared_type, cache.is_optional) == ("cache", Cache, True)
    assert cache.default is None


def test_alternative_constructor_excludes_cls_parameter():
    cached = constructors_of(Worker)[1]

    assert [p.name for p in cached.parameters] == ["logger", "cache"]
    assert cached.parameters[1].declared_type is Cache
    assert not cached.parameters[1].is_optional


def test_subclass_constructors_precede_inherited_ones():
    table = constructors_of(NightShiftWorker)

    assert [c.name for c in table] == ["__init__", "overnight", "cached"]
    assert table[2].factory.__self__ is NightShiftWorker


def test_class_without_init_has_parameterless_constructor():
    (only,) = constructors_of(Plain)

    assert only.name == "__init__"
    assert only.parameters == ()


def test_variadic_parameters_are_ignored():
    (only,) = constructors_of(Variadic)

    assert [p.name for p in only.parameters] == ["logger"]


def test_positional_only_parameters_are_flagged():
    logger, name = constructors_of(PositionalOnly)[0].parameters

    assert logger.is_positional_only
    assert not name.is_positional_only
    assert name.declared_type is None


def test_unannotated_parameters_have_no_declared_type():
    anything, count = constructors_of(Untyped)[0].parameters

    assert anything.declared_type is None
    assert anything.kind is inspect.Parameter.POSITIONAL_OR_KEYWORD
    assert count.declared_type is int


def test_annotated_and_union_with_none_are_unwrapped():
    logger, cache = constructors_of(Qualified)[0].parameters

    assert logger.declared_type is Logger
    assert cache.declared_type is Cache


def test_string_annotations_resolve_against_defining_module():
    (parent,) = constructors_of(SelfReferencing)[0].parameters

    assert parent.declared_type is SelfReferencing


def test_dataclass_fields_become_parameters():
    logger, retries = constructors_of(Settings)[0].parameters

    assert logger.declared_type is Logger
    assert retries.default == 3


def test_abstract_classes_and_protocols_have_no_constructors():
    assert constructors_of(Shape) == ()
    assert constructors_of(Greeter) == ()


def test_unresolvable_annotation_is_not_constructible():
    with pytest.raises(NotConstructible, match="cannot resolve annotations"):
        constructors_of(Broken)


def test_table_is_built_once_per_type():
    assert constructors_of(Worker) is constructors_of(Worker)


def test_constructor_marker_returns_working_classmethod():
    worker = Worker.cached(Logger(), Cache())

    assert isinstance(worker, Worker)
    assert isinstance(worker.cache, Cache)
