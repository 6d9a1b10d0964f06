"""Needle dependency injection container.

Needle maps service types to implementation classes and builds instances on
demand. Constructors are chosen greedily: of a class's constructors, the one
whose parameters are most fully satisfied by registered services and supplied
arguments is used, so a class gains optional collaborators as soon as they are
registered.

Key Features:
    - Fluent registration of singleton and transient services
    - Constructor injection driven by standard type hints
    - Alternative constructors declared with ``@constructor``
    - Multiple registrations per service type
    - Cycle detection and thread-safe singleton creation

Basic Usage:
    >>> from needle.container import ServiceContainer
    >>>
    >>> container = (
    ...     ServiceContainer()
    ...     .add_singleton(Logger, ConsoleLogger)
    ...     .add_transient(Worker)
    ... )
    >>> worker = container.get_service(Worker)

The package consists of several modules:
    - container: Service resolution and lifetime management
    - registry: Service registration and introspection
    - constructors: Constructor tables and the ``@constructor`` marker
    - selection: Greedy constructor selection
    - activation: Parameter binding and instantiation
    - domain: Core domain models (ServiceDescriptor, Constructor)
    - errors: Container-specific exceptions
"""
