"""Tests for the plugin context and shared store."""

import pathlib as _pathlib

import pytest as _pytest

import initforge.config.types as config_types
import initforge.i18n as i18n
import initforge.plugins.context as context
import initforge.ui.prompts as prompts
import initforge.utils.file_ops as file_ops


class TestSharedStore:
    """Tests for SharedStore."""

    def test_mapping_behaviour(self) -> None:
        store = context.SharedStore({"a": 1})
        store["b"] = 2
        del store["a"]

        assert dict(store) == {"b": 2}
        assert len(store) == 1
        assert "b" in store

    def test_require_returns_typed_value(self) -> None:
        store = context.SharedStore({"project": {"name": "demo"}})
        assert store.require("project", dict) == {"name": "demo"}

    def test_require_missing(self) -> None:
        """A value nobody published is a KeyError naming the key."""
        with _pytest.raises(KeyError, match="has not been published"):
            context.SharedStore().require("project", dict)

    def test_require_wrong_type(self) -> None:
        store = context.SharedStore({"count": "3"})
        with _pytest.raises(TypeError, match="expected int"):
            store.require("count", int)


class TestCreatePluginContext:
    """Tests for create_plugin_context."""

    def test_defaults(self, tmp_path: _pathlib.Path) -> None:
        """Missing collaborators get defaults; the name comes from the root."""
        ctx = context.create_plugin_context(tmp_path / "my-app")

        assert ctx.project_root == tmp_path / "my-app"
        assert ctx.target_dir == ctx.project_root
        assert ctx.config.project_name == "my-app"
        assert ctx.config.plugins == {}
        assert ctx.config.language == config_types.LanguageConfig()
        assert isinstance(ctx.fs, file_ops.FileOperations)
        assert isinstance(ctx.ui, prompts.NonInteractiveUI)
        assert isinstance(ctx.i18n, i18n.IdentityTranslator)
        assert len(ctx.shared) == 0

    def test_explicit_values(self, tmp_path: _pathlib.Path) -> None:
        configs = {"git": config_types.PluginConfig(options={"auto_commit": True})}
        ctx = context.create_plugin_context(
            tmp_path,
            target_dir=tmp_path / "sub",
            project_name="named",
            plugin_configs=configs,
        )

        assert ctx.target_dir == tmp_path / "sub"
        assert ctx.config.project_name == "named"
        assert ctx.config.plugin_config("git") == configs["git"]
        assert ctx.config.plugin_config("missing") is None

    def test_each_context_has_its_own_store(self, tmp_path: _pathlib.Path) -> None:
        first = context.create_plugin_context(tmp_path)
        second = context.create_plugin_context(tmp_path)

        first.shared["key"] = "value"

        assert "key" not in second.shared

    def test_configs_are_copied(self, tmp_path: _pathlib.Path) -> None:
        """The context does not alias the caller's mapping."""
        configs: dict[str, config_types.PluginConfig] = {}
        ctx = context.create_plugin_context(tmp_path, plugin_configs=configs)

        configs["late"] = config_types.PluginConfig()

        assert "late" not in ctx.config.plugins
