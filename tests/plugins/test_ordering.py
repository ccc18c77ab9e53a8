"""Tests for dependency ordering."""

import random as _random

import pytest as _pytest

import initforge.plugins.ordering as ordering
import tests.conftest as conftest


class TestResolveOrder:
    """Tests for resolve_order (Kahn's algorithm)."""

    def test_independent_nodes_keep_input_order(self) -> None:
        """Nodes without dependencies come out in discovery order."""
        order = ordering.resolve_order([("c", []), ("a", []), ("b", [])])
        assert order == ["c", "a", "b"]

    def test_dependency_precedes_dependent(self) -> None:
        """A dependency always runs before the plugin that needs it."""
        order = ordering.resolve_order([("git", ["project"]), ("project", [])])
        assert order == ["project", "git"]

    def test_diamond(self) -> None:
        """Ties released together are broken by discovery order."""
        order = ordering.resolve_order(
            [("d", ["b", "c"]), ("c", ["a"]), ("b", ["a"]), ("a", [])]
        )
        assert order == ["a", "c", "b", "d"]

    def test_deterministic(self) -> None:
        """Identical input yields identical output."""
        nodes = [("x", ["y"]), ("y", []), ("z", ["y"]), ("w", [])]
        assert ordering.resolve_order(nodes) == ordering.resolve_order(nodes)

    @_pytest.mark.parametrize("seed", range(20))
    def test_random_dag(self, seed: int) -> None:
        """Any acyclic graph is ordered completely with dependencies first."""
        rng = _random.Random(seed)
        size = rng.randint(1, 30)
        names = [f"n{i}" for i in range(size)]
        deps = {
            name: rng.sample(names[:i], rng.randint(0, min(i, 4)))
            for i, name in enumerate(names)
        }
        nodes = [(name, deps[name]) for name in names]
        rng.shuffle(nodes)

        order = ordering.resolve_order(nodes)

        assert sorted(order) == sorted(names)
        position = {name: i for i, name in enumerate(order)}
        for name, needs in deps.items():
            assert all(position[dep] < position[name] for dep in needs)
        assert ordering.resolve_order(nodes) == order

    def test_missing_dependency(self) -> None:
        """A dependency outside the node set is reported by name."""
        with _pytest.raises(ordering.MissingDependencyError) as exc_info:
            ordering.resolve_order([("git", ["project"])])

        assert exc_info.value.plugin == "git"
        assert exc_info.value.dependency == "project"
        assert "depends on 'project'" in str(exc_info.value)

    def test_missing_checked_before_cycles(self) -> None:
        """A missing dependency wins over a cycle elsewhere in the graph."""
        with _pytest.raises(ordering.MissingDependencyError):
            ordering.resolve_order([("a", ["b"]), ("b", ["a"]), ("c", ["ghost"])])

    def test_cycle_reports_blocked_nodes(self) -> None:
        """Cycle members and their dependents are listed in input order."""
        with _pytest.raises(ordering.CircularDependencyError) as exc_info:
            ordering.resolve_order(
                [("root", []), ("b", ["a"]), ("a", ["b"]), ("tail", ["a"])]
            )

        assert exc_info.value.blocked == ("b", "a", "tail")
        assert "b, a, tail" in str(exc_info.value)

    def test_self_dependency_is_cycle(self) -> None:
        """A node depending on itself cannot be placed."""
        with _pytest.raises(ordering.CircularDependencyError):
            ordering.resolve_order([("a", ["a"])])

    def test_duplicate_node(self) -> None:
        """Each name may appear once."""
        with _pytest.raises(ValueError, match="Duplicate"):
            ordering.resolve_order([("a", []), ("a", [])])

    def test_empty(self) -> None:
        assert ordering.resolve_order([]) == []


class TestSortPlugins:
    """Tests for sort_plugins."""

    def test_returns_descriptors_in_order(self) -> None:
        """Descriptors are returned, not names."""
        project = conftest.make_plugin("project")
        git = conftest.make_plugin("git", dependencies=["project"])

        result = ordering.sort_plugins([git, project])

        assert result == [project, git]

    def test_errors_are_plugin_errors(self) -> None:
        """Dependency errors share the plugin error base class."""
        with _pytest.raises(ordering.DependencyError):
            ordering.sort_plugins([conftest.make_plugin("git", dependencies=["project"])])
