"""
Tests for Plugboard Registry.

This test suite covers:
1. Plugin and trait registration
2. Lookup errors
3. Built-in loading
4. Host initialisation
"""

import pytest

import plugboard
from plugboard import config
from plugboard.config.settings import Settings
from plugboard.core.registry import Plugboard
from plugboard.plugin.base import PluginBase, Singleton
from plugboard.plugin.errors import (
    PluginError,
    PluginNotFoundError,
    RegistrationError,
    TraitNotFoundError,
)
from plugboard.plugin.mediator import RegistryMediator
from plugboard.plugin.trait import Trait
from plugboard.utilities.json_parser import JsonParser


def make_settings(**overrides):
    values = config.defaults().as_dict()
    values.update(overrides)
    return Settings(values, config.SETTINGS_SCHEMA)


class Modal(PluginBase):
    pass


class Theme(Singleton):
    pass


class Tooltip(Singleton):
    @classmethod
    def dependencies(cls):
        return ["popover"]


class Marker(Trait):
    pass


class TestRegistration:
    """Test plugin and trait registration."""

    def test_register_and_lookup_case_insensitive(self):
        board = Plugboard()
        board.register_plugin("Modal", Modal)

        assert board.has_plugin("modal")
        assert board.has_plugin("MODAL")
        assert board.get_plugin("mOdAl").factory is Modal
        assert board.get_plugin("modal").name == "modal"

    def test_plugin_names_in_registration_order(self):
        board = Plugboard(make_settings(inbuilt=[]))
        board.register_plugin("modal", Modal)
        board.register_plugin("theme", Theme)

        assert board.get_plugin_names() == ["modal", "theme"]

    def test_reregistration_replaces_loader(self):
        """Re-registering a singleton should yield a new singleton instance."""
        board = Plugboard()
        board.register_plugin("theme", Theme)
        first = board.get_plugin("theme").get_instance()

        board.register_plugin("theme", Theme)
        second = board.get_plugin("theme").get_instance()

        assert first is not second

    def test_remove_plugin_keeps_instances(self):
        board = Plugboard()
        board.register_plugin("modal", Modal)
        instance = board.get_plugin("modal").get_instance()

        board.remove_plugin("Modal")

        assert not board.has_plugin("modal")
        assert instance.destructed is False

    def test_remove_unknown_plugin(self):
        """Removing an unknown plugin should do nothing."""
        board = Plugboard()

        board.remove_plugin("missing")

    def test_register_trait(self):
        board = Plugboard()
        board.register_trait("Marker", Marker)

        assert board.has_trait("marker")
        assert board.get_trait("MARKER") is Marker

    def test_has_checks_never_raise(self):
        board = Plugboard()

        assert not board.has_plugin("missing")
        assert not board.has_trait("missing")
        assert not board.has_plugin(None)


class TestRegistrationErrors:
    """Test registration failures."""

    def test_name_conflicts_with_member(self):
        """A plugin name shadowing a registry member should be rejected."""
        board = Plugboard()

        with pytest.raises(RegistrationError, match="conflicts"):
            board.register_plugin("settings", Modal)
        with pytest.raises(RegistrationError, match="conflicts"):
            board.register_plugin("Get_Plugin", Modal)

    def test_non_callable_factory(self):
        board = Plugboard()

        with pytest.raises(RegistrationError, match="class or callable"):
            board.register_plugin("broken", "not a factory")

    def test_empty_name(self):
        board = Plugboard()

        with pytest.raises(RegistrationError):
            board.register_plugin("", Modal)

    @pytest.mark.parametrize("method_name", ["is_singleton", "dependencies", "listens"])
    def test_contract_instance_method_rejected(self, method_name):
        """Contract methods queried without an instance must not need one."""

        def contract(self):
            return None

        Broken = type("Broken", (PluginBase,), {method_name: contract})
        board = Plugboard()

        with pytest.raises(RegistrationError, match=f'"{method_name}" on plugin "broken"'):
            board.register_plugin("broken", Broken)

        assert not board.has_plugin("broken")

    def test_contract_staticmethod_accepted(self):
        class Toast(PluginBase):
            @staticmethod
            def dependencies():
                return ["modal"]

        board = Plugboard()
        board.register_plugin("modal", Modal)
        board.register_plugin("toast", Toast)

        assert board.get_plugin("toast").get_dependencies() == ["modal"]

    def test_trait_must_be_class(self):
        board = Plugboard()

        with pytest.raises(RegistrationError, match="must be a class"):
            board.register_trait("marker", lambda plugboard: None)


class TestLookupErrors:
    """Test lookups of unknown names."""

    def test_unknown_plugin(self):
        with pytest.raises(PluginNotFoundError, match='"missing"'):
            Plugboard().get_plugin("missing")

    def test_unknown_trait(self):
        with pytest.raises(TraitNotFoundError, match='"missing"'):
            Plugboard().get_trait("missing")

    def test_plugin_error_hierarchy(self):
        """Lookup errors should be catchable as PluginError."""
        with pytest.raises(PluginError):
            Plugboard().get_plugin("missing")


class TestInbuilt:
    """Test base abstractions and built-ins."""

    def test_abstracts_attached(self):
        board = Plugboard()

        assert board.get_abstract("PluginBase") is PluginBase
        assert board.get_abstract("Singleton") is Singleton
        assert board.get_abstract("Trait") is Trait
        assert not board.has_abstract("Missing")

    def test_default_inbuilt_loaded(self):
        board = Plugboard()

        assert board.get_plugin("jsonparser").factory is JsonParser
        assert board.has_trait("configurable")
        assert board.has_trait("firesevents")

    def test_inbuilt_subset(self):
        board = Plugboard(make_settings(inbuilt=["FiresEvents"]))

        assert board.get_plugin_names() == []
        assert board.has_trait("firesevents")
        assert not board.has_trait("configurable")

    def test_unknown_inbuilt_warns(self):
        with pytest.warns(RuntimeWarning, match='Unknown built-in "cookie"'):
            Plugboard(make_settings(inbuilt=["cookie"]))


class TestInitialise:
    """Test host initialisation."""

    def test_builds_singletons(self):
        board = Plugboard()
        board.register_plugin("theme", Theme)
        board.register_plugin("modal", Modal)

        board.initialise()

        assert board.get_plugin("theme").is_initialised()
        assert len(board.get_plugin("theme").get_instances()) == 1
        assert board.get_plugin("modal").get_instances() == []

    def test_skips_singletons_with_unmet_dependencies(self):
        board = Plugboard()
        board.register_plugin("tooltip", Tooltip)

        board.initialise()

        assert not board.get_plugin("tooltip").is_initialised()

    def test_auto_singletons_disabled(self):
        board = Plugboard(make_settings(auto_singletons=False))
        board.register_plugin("theme", Theme)

        board.initialise()

        assert not board.get_plugin("theme").is_initialised()

    def test_ready_fired_once(self):
        """initialise() should fire "ready" only on the first call."""
        calls = []

        class Watcher(Singleton):
            @classmethod
            def listens(cls):
                return {"ready": "on_ready"}

            def on_ready(self):
                calls.append(self)

        board = Plugboard()
        board.register_plugin("watcher", Watcher)

        board.initialise()
        board.initialise()

        assert calls == board.get_plugin("watcher").get_instances()
        assert len(calls) == 1

    def test_debug_output(self, capsys):
        board = Plugboard(make_settings(debug=True))
        board.register_plugin("modal", Modal)

        assert '[plugboard] Plugin "modal" registered' in capsys.readouterr().err

    def test_debug_off_by_default(self, capsys):
        board = Plugboard()
        board.register_plugin("modal", Modal)

        assert capsys.readouterr().err == ""


class TestCreate:
    """Test the package-level entry point."""

    def test_create_returns_mediator(self):
        board = plugboard.create()

        assert isinstance(board, RegistryMediator)
        assert "jsonparser" in board

    def test_create_with_missing_config_file(self, tmp_path):
        board = plugboard.create(tmp_path / "missing.toml")

        assert board.settings.auto_singletons is True
