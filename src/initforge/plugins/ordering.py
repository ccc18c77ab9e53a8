"""
Dependency ordering for plugins.

A self-contained topological sort (Kahn's algorithm) over
``(name, dependencies)`` pairs. Ties between nodes that become ready at
the same time are broken by discovery order, so identical input always
yields identical output.
"""

from __future__ import annotations

import collections as _collections
import typing as _typing

import initforge.plugins.types as types


class DependencyError(types.PluginError):
    """Base class for dependency resolution failures."""

    pass


class MissingDependencyError(DependencyError):
    """Raised when a dependency is not part of the set being ordered."""

    def __init__(self, plugin: str, dependency: str) -> None:
        self.plugin = plugin
        self.dependency = dependency
        super().__init__(
            f"Plugin '{plugin}' depends on '{dependency}', but '{dependency}' "
            f"is not registered or enabled"
        )


class CircularDependencyError(DependencyError):
    """
    Raised when the dependency graph contains a cycle.

    ``blocked`` holds every node the sort could not place, in input order:
    the members of each cycle plus any node that depends on one.
    """

    def __init__(self, blocked: _typing.Sequence[str]) -> None:
        self.blocked = tuple(blocked)
        super().__init__(
            "Circular dependency detected among plugins: " + ", ".join(self.blocked)
        )


def resolve_order(
    nodes: _typing.Iterable[tuple[str, _typing.Iterable[str]]],
) -> list[str]:
    """
    Compute an execution order consistent with the dependency relation.

    Every dependency precedes its dependents. All dependencies are checked
    before sorting starts.

    Args:
        nodes: ``(name, dependencies)`` pairs. Input order is the
            discovery order used to break ties.

    Returns:
        Node names in execution order.

    Raises:
        ValueError: If a name appears more than once.
        MissingDependencyError: If a dependency is not among the nodes.
        CircularDependencyError: If the graph has a cycle.
    """
    names: list[str] = []
    dependencies: dict[str, list[str]] = {}

    for name, deps in nodes:
        if name in dependencies:
            raise ValueError(f"Duplicate node in dependency graph: {name}")
        names.append(name)
        dependencies[name] = list(dict.fromkeys(deps))

    for name in names:
        for dep in dependencies[name]:
            if dep not in dependencies:
                raise MissingDependencyError(name, dep)

    in_degree: dict[str, int] = {name: 0 for name in names}
    dependents: dict[str, list[str]] = {name: [] for name in names}

    # Edge: dependency -> dependent
    for name in names:
        for dep in dependencies[name]:
            dependents[dep].append(name)
            in_degree[name] += 1

    queue = _collections.deque(name for name in names if in_degree[name] == 0)
    ordered: list[str] = []

    while queue:
        name = queue.popleft()
        ordered.append(name)
        for dependent in dependents[name]:
            in_degree[dependent] -= 1
            if in_degree[dependent] == 0:
                queue.append(dependent)

    if len(ordered) != len(names):
        placed = set(ordered)
        raise CircularDependencyError([name for name in names if name not in placed])

    return ordered


def sort_plugins(plugins: _typing.Sequence[types.Plugin]) -> list[types.Plugin]:
    """
    Sort plugin descriptors by dependencies.

    Args:
        plugins: Plugins in discovery order.

    Returns:
        The same plugins in execution order.
    """
    by_name = {plugin.meta.name: plugin for plugin in plugins}
    order = resolve_order((plugin.meta.name, plugin.meta.dependencies) for plugin in plugins)
    return [by_name[name] for name in order]
