import pytest

from needle.activation import MISSING, ArgumentPool, InstanceBuilder
from needle.constructors import constructors_of
from needle.errors import InstantiationFailed, UnresolvableParameter
from needle.registry import ServiceRegistry


class Clock:
    pass


class Alarm:
    def __init__(self, clock: Clock, label: str, snooze: int = 5):
        self.clock = clock
        self.label = label
        self.snooze = snooze


class Faulty:
    def __init__(self, label: str):
        raise ValueError(f"bad label {label}")


@pytest.fixture
def registry():
    return ServiceRegistry()


@pytest.fixture
def builder(registry):
    return InstanceBuilder(registry)


def build(builder, cls, arguments=(), resolve=None):
    return builder.build(cls, constructors_of(cls)[0], arguments, resolve or _unexpected)


def _unexpected(requested_type):
    raise AssertionError(f"unexpected resolution of {requested_type}")


def test_pool_matches_exact_type_only():
    pool = ArgumentPool([True, 1, "one"])

    assert pool.take(int) == 1
    assert pool.take(int) is MISSING
    assert pool.take(bool) is True
    assert len(pool) == 1


def test_pool_hands_out_values_in_supplied_order():
    pool = ArgumentPool(["first", "second"])

    assert pool.take(str) == "first"
    assert pool.take(str) == "second"
    assert pool.take(str) is MISSING


def test_pool_ignores_unannotated_parameters():
    assert ArgumentPool([None]).take(None) is MISSING


def test_registered_dependencies_are_resolved_through_callback(registry, builder):
    clock = Clock()
    registry.add_singleton(Clock)
    requested = []

    def resolve(requested_type):
        requested.append(requested_type)
        return clock

    alarm = build(builder, Alarm, ("wake up",), resolve)

    assert requested == [Clock]
    assert (alarm.clock, alarm.label, alarm.snooze) == (clock, "wake up", 5)


def test_supplied_arguments_skip_resolution(builder):
    clock = Clock()

    alarm = build(builder, Alarm, (clock, "nap", 20))

    assert (alarm.clock, alarm.label, alarm.snooze) == (clock, "nap", 20)


def test_unsatisfiable_parameter_raises(builder):
    with pytest.raises(UnresolvableParameter) as error:
        build(builder, Alarm, ("wake up",))

    assert error.value.parameter.name == "clock"
    assert error.value.implementation_type is Alarm


def test_constructor_errors_are_wrapped(builder):
    with pytest.raises(InstantiationFailed, match="bad label x") as error:
        build(builder, Faulty, ("x",))

    assert error.value.constructor_name == "__init__"
    assert isinstance(error.value.__cause__, ValueError)
