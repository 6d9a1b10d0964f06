"""Greedy constructor selection.

Of an implementation type's constructors, the one whose parameters are most
fully satisfied by supplied arguments and registered services is chosen. A
service that offers both a minimal and a fully wired constructor therefore
receives the richer one as soon as its collaborators are registered.
"""

import logging
from dataclasses import dataclass

from needle.activation import MISSING, ArgumentPool
from needle.constructors import constructors_of
from needle.domain import Constructor, ServiceDescriptor, type_name
from needle.errors import NoSuitableConstructor, NotConstructible, UnresolvableParameter
from needle.registry import ServiceRegistry

__all__ = ["ConstructorChoice", "ConstructorSelector"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConstructorChoice:
    """The constructor chosen for a descriptor, with the score that won."""

    constructor: Constructor
    score: int


class ConstructorSelector:
    """Choose the constructor to use for a descriptor."""

    def __init__(self, registry: ServiceRegistry):
        self._registry = registry

    def select(self, descriptor: ServiceDescriptor) -> ConstructorChoice:
        """Select the eligible constructor with the highest score.

        A constructor is eligible when each of its parameters can be satisfied
        by a supplied argument of that exact type, a registered service or a
        default value. Its score counts the parameters satisfied by arguments
        or services. Ties keep the constructor declared first.

        Raises:
            NotConstructible: If the implementation type has no constructors.
            NoSuitableConstructor: If no constructor is eligible.
        """
        implementation_type = descriptor.implementation_type
        candidates = constructors_of(implementation_type)
        if not candidates:
            raise NotConstructible(implementation_type)

        best = None
        rejections = []
        for candidate in candidates:
            try:
                score = self.score(descriptor, candidate)
            except UnresolvableParameter as rejection:
                rejections.append(rejection)
                continue
            if best is None or score > best.score:
                best = ConstructorChoice(candidate, score)

        if best is None:
            raise NoSuitableConstructor(implementation_type, rejections)

        logger.debug(
            "Selected %s.%s (score %d of %d candidates)",
            type_name(implementation_type),
            best.constructor.name,
            best.score,
            len(candidates),
        )
        return best

    def score(self, descriptor: ServiceDescriptor, candidate: Constructor) -> int:
        """Count the parameters of ``candidate`` satisfied by arguments or services.

        Nothing is resolved while scoring; a registered service counts as
        satisfiable whether or not it can be built.

        Raises:
            UnresolvableParameter: For the first parameter that cannot be satisfied.
        """
        pool = ArgumentPool(descriptor.arguments)
        score = 0
        for parameter in candidate.parameters:
            if pool.take(parameter.declared_type) is not MISSING:
                score += 1
            elif parameter.declared_type is not None and self._registry.is_registered(
                parameter.declared_type
            ):
                score += 1
            elif not parameter.is_optional:
                raise UnresolvableParameter(descriptor.implementation_type, parameter)
        return score
